"""
Ordered sequences of fallible steps.

Purpose:
- Run named steps in order, stopping at the first failure
- Report which step failed instead of a bare exception
- Keep callers free of nested try/except blocks

This module contains NO state, NO threads, NO retries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from errors import StepFailed


Step = tuple[str, Callable[[], None]]


@dataclass(frozen=True)
class StepResult:
    """
    Outcome of run_steps().

    completed:
        Names of steps that ran successfully, in order.

    failure:
        StepFailed for the step that raised, or None if all succeeded.
        Steps after a failure never run.
    """

    completed: tuple[str, ...]
    failure: StepFailed | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def failed_step(self) -> str | None:
        return self.failure.step if self.failure is not None else None


def run_steps(steps: Sequence[Step]) -> StepResult:
    """Run steps in order; the first exception aborts the remainder."""
    completed: list[str] = []
    for name, action in steps:
        try:
            action()
        except Exception as exc:  # pylint: disable=broad-exception-caught
            failure = StepFailed(name, exc)
            failure.__cause__ = exc
            return StepResult(completed=tuple(completed), failure=failure)
        completed.append(name)
    return StepResult(completed=tuple(completed))
