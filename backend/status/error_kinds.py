"""
Error kinds carried by ComponentState.Error.

Rules:
- An error kind is data only: a scope and a human-readable detail.
- Scope decides whether the failure is confined to the current session
  or means the worker itself is unhealthy.
- Sub-component error kinds are opaque to the aggregator and are passed
  through unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorScope(str, Enum):
    """
    Blast radius of an error.

    SESSION:
        Only the current session failed. The worker can take new work.

    SYSTEM:
        The worker itself is in a bad state and should report unhealthy.
    """

    SESSION = "SESSION"
    SYSTEM = "SYSTEM"


@dataclass(frozen=True)
class ErrorKind:
    """Immutable description of why a component entered Error."""

    scope: ErrorScope
    detail: str

    def __str__(self) -> str:
        return self.detail


# =============================================================================
# Known error kinds
# =============================================================================

ERROR_SETTING_PRESENCE_FIELDS = ErrorKind(
    ErrorScope.SESSION, "Error setting presence fields"
)
FAILED_TO_JOIN_CALL = ErrorKind(ErrorScope.SESSION, "Failed to join the call")
NO_MEDIA_RECEIVED = ErrorKind(ErrorScope.SESSION, "No media received")
NO_SESSION_PARTICIPANTS = ErrorKind(
    ErrorScope.SESSION, "No participants remain in the session"
)
CHROME_HUNG = ErrorKind(ErrorScope.SYSTEM, "Chrome hung")
UNKNOWN_ERROR = ErrorKind(ErrorScope.SYSTEM, "Unknown error")
