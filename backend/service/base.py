"""
Base class for capture jobs.

A JibriService is a StatusAggregator with a start/stop lifecycle:
- Sub-components are registered in __init__
- start() kicks off the job and returns without waiting for Running
- stop() tears the job down

Overall state changes reach whoever called add_status_handler().
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from status.aggregator import StatusAggregator


class JibriService(StatusAggregator, ABC):
    """Abstract capture job built on sub-component status aggregation."""

    @abstractmethod
    def start(self) -> None:
        """Start the job."""
        raise NotImplementedError

    @abstractmethod
    def stop(self) -> None:
        """Stop the job and release its resources."""
        raise NotImplementedError
