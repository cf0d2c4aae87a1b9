"""
Worker status snapshot reported to webhook subscribers.

Rules:
- Snapshots are immutable and passed by value.
- to_dict() produces the wire shape (camelCase keys, enum values as
  strings); key order is fixed so serialization is canonical.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class ComponentBusyStatus(str, Enum):
    """Whether the worker is currently running a session."""

    IDLE = "IDLE"
    BUSY = "BUSY"


class ComponentHealthStatus(str, Enum):
    """Whether the worker can take work."""

    HEALTHY = "HEALTHY"
    UNHEALTHY = "UNHEALTHY"


@dataclass(frozen=True)
class OverallHealth:
    """
    Worker health.

    details maps component id -> human-readable detail string.
    """

    status: ComponentHealthStatus
    details: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze a private copy so callers cannot mutate a published snapshot
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class JibriStatus:
    """Busy status plus overall health of one worker."""

    busy_status: ComponentBusyStatus
    health: OverallHealth

    def to_dict(self) -> dict[str, Any]:
        return {
            "busyStatus": self.busy_status.value,
            "health": self.health.to_dict(),
        }
