"""
Status publish channel.

A StatusPublisher pushes its own state changes to every registered
handler, synchronously, on the caller's thread.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

StatusHandler = Callable[[T], None]


class StatusPublisher(Generic[T]):
    """
    Fan-out of status values to handlers.

    Handlers run in registration order on the publishing thread and must
    return quickly: a slow handler stalls the publisher.
    """

    def __init__(self) -> None:
        self._handlers: list[StatusHandler[T]] = []
        self._handlers_lock = threading.Lock()

    def add_status_handler(self, handler: StatusHandler[T]) -> None:
        with self._handlers_lock:
            self._handlers.append(handler)

    def publish_status(self, status: T) -> None:
        with self._handlers_lock:
            handlers = list(self._handlers)
        for handler in handlers:
            handler(status)
