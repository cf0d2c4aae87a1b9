"""Exceptions raised by the capture worker control plane."""

from __future__ import annotations


class ConfigError(Exception):
    """Raised when configuration is invalid or a required value is missing."""


class StepFailed(Exception):
    """
    Raised when one step of an ordered step sequence fails.

    Carries the name of the step so callers can report which one broke
    without parsing messages. The original exception is chained as
    __cause__.
    """

    def __init__(self, step: str, cause: BaseException) -> None:
        super().__init__(f"step '{step}' failed: {cause}")
        self.step = step
        self.cause = cause


class JibriBusyError(Exception):
    """Raised when a job is requested while another one is active."""
