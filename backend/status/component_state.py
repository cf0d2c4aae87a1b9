"""
Lifecycle states shared by every tracked component and by services.

Rules:
- States are immutable values; equal states compare equal.
- Finished and Error are terminal: once a component reaches one of them,
  no further transitions are accepted for it.
- Transitions are decided by publishers, never here.
"""

from __future__ import annotations

from dataclasses import dataclass

from status.error_kinds import ErrorKind


@dataclass(frozen=True)
class ComponentState:
    """Base type for all component lifecycle states."""

    @property
    def is_terminal(self) -> bool:
        return False

    def describe(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class Starting(ComponentState):
    """Component is coming up."""


@dataclass(frozen=True)
class Running(ComponentState):
    """Component is up and doing its work."""


@dataclass(frozen=True)
class Finished(ComponentState):
    """Component completed normally."""

    reason: str | None = None

    @property
    def is_terminal(self) -> bool:
        return True

    def describe(self) -> str:
        if self.reason:
            return f"Finished: {self.reason}"
        return "Finished"


@dataclass(frozen=True)
class Error(ComponentState):
    """Component failed."""

    reason: ErrorKind

    @property
    def is_terminal(self) -> bool:
        return True

    def describe(self) -> str:
        return f"Error: {self.reason.detail}"
