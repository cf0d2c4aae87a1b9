"""
Webhook event envelopes.

Rules:
- Every event carries the sending worker's id as "jibriId".
- Each event type owns the path suffix it is delivered to.
- to_json() is canonical: fixed key order, compact separators, so two
  equal events always serialize to identical bytes.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, ClassVar

from constants import WEBHOOK_STATUS_PATH
from status.jibri_status import JibriStatus


@dataclass(frozen=True)
class JibriEvent:
    """Base envelope for everything a worker pushes to subscribers."""

    path: ClassVar[str]

    jibri_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"jibriId": self.jibri_id}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))


@dataclass(frozen=True)
class HealthEvent(JibriEvent):
    """Worker status update."""

    path: ClassVar[str] = WEBHOOK_STATUS_PATH

    status: JibriStatus

    def to_dict(self) -> dict[str, Any]:
        return {
            "jibriId": self.jibri_id,
            "status": self.status.to_dict(),
        }
