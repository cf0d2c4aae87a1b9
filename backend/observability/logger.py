"""
Structured event log for the worker.

Every lifecycle fact is one JSON object on one stdout line, keyed by
event_type, for example:
- SUB_COMPONENT_TRANSITION / SERVICE_STATE_CHANGED (status.aggregator)
- WEB_RECORDING_* (service.web_recording)
- JIBRI_STATUS_CHANGED (status.health_manager)
- WEBHOOK_DELIVERY_FAILED (webhooks.client)
- JOB_* (worker)

Events carry ts_ms from now_ms(); session-scoped events also carry
session_id so one job's lines can be filtered out of a shared stream.
Writes are unbuffered and logging never raises into the caller.
"""

from __future__ import annotations

import json
import sys
import time
from typing import Any, Mapping, Callable


# ------------------------------------------------------------------
# Explicit output sink (patchable in tests)
# ------------------------------------------------------------------

def _stdout_print(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()

_print: Callable[[str], None] = _stdout_print


def now_ms() -> int:
    """Wall-clock milliseconds for event timestamps."""
    return time.time_ns() // 1_000_000


def log_event(event: Mapping[str, Any]) -> None:
    """
    Write a single JSONL event to stdout.

    The caller is responsible for:
    - Supplying a fully-formed event dict
    - Including ts_ms, event_type, component ids, etc.

    This function:
    - Serializes to JSON
    - Writes exactly one line
    - Flushes immediately (no buffering)
    - Never raises
    """
    try:
        line = json.dumps(event, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        # Last-resort fallback: logging must never crash the caller
        fallback: dict[str, Any] = {
            "ts_ms": event.get("ts_ms"),
            "event_type": "LOGGER_SERIALIZATION_ERROR",
            "error": str(e),
            "original_event_repr": repr(event),
        }
        line = json.dumps(fallback, ensure_ascii=False, separators=(",", ":"))

    _print(line)
