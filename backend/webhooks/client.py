"""
Webhook client: best-effort status fan-out to subscribers.

Responsibilities:
- Own the mutable set of subscriber URLs
- Serialize one event per status update
- POST it to every subscriber, concurrently and independently

Non-responsibilities (by design):
- No retries, no backoff, no queueing
- No ordering between successive updates at the same subscriber
- No delivery acknowledgement

Concurrency:
- update_status() only schedules work on the injected executor and
  returns; it never waits on the network.
- Each send carries its own request timeout.
- A failing or slow subscriber never affects any other send.
"""

from __future__ import annotations

import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor

import httpx

from constants import (
    WEBHOOK_CONTENT_TYPE,
    WEBHOOK_IO_MAX_WORKERS,
    WEBHOOK_IO_THREAD_PREFIX,
    WEBHOOK_REQUEST_TIMEOUT_S,
)
from observability.logger import log_event, now_ms
from observability.metrics import timed
from status.jibri_status import JibriStatus
from webhooks.events import HealthEvent, JibriEvent


class WebhookClient:
    """
    Sends JibriEvents to every registered subscriber.

    Dependencies are injected:
    - client: the httpx.Client used for POSTs (tests pass one backed by
      httpx.MockTransport)
    - executor: where sends run (tests may pass a synchronous executor);
      when omitted, a thread pool of max_workers is created

    Anything not injected is created here and released by shutdown().
    """

    def __init__(
        self,
        jibri_id: str,
        *,
        client: httpx.Client | None = None,
        executor: Executor | None = None,
        timeout_s: float = WEBHOOK_REQUEST_TIMEOUT_S,
        max_workers: int = WEBHOOK_IO_MAX_WORKERS,
        subscribers: tuple[str, ...] = (),
    ) -> None:
        self._jibri_id = jibri_id
        self._timeout = httpx.Timeout(timeout_s)

        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=self._timeout)

        self._owns_executor = executor is None
        self._executor = executor if executor is not None else ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=WEBHOOK_IO_THREAD_PREFIX,
        )

        self._subscribers: set[str] = set(subscribers)
        self._subscribers_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Subscribers
    # ------------------------------------------------------------------

    def add_subscriber(self, url: str) -> None:
        with self._subscribers_lock:
            self._subscribers.add(url)

    def remove_subscriber(self, url: str) -> None:
        with self._subscribers_lock:
            self._subscribers.discard(url)

    def subscribers(self) -> frozenset[str]:
        with self._subscribers_lock:
            return frozenset(self._subscribers)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def update_status(self, status: JibriStatus) -> list[Future[None]]:
        """
        Send a HealthEvent for status to every current subscriber.

        Returns the scheduled sends. Callers never need to wait on them;
        they exist for shutdown paths and tests.
        """
        return self.send_event(HealthEvent(self._jibri_id, status))

    def send_event(self, event: JibriEvent) -> list[Future[None]]:
        body = event.to_json().encode("utf-8")
        futures: list[Future[None]] = []

        for subscriber in self.subscribers():
            url = subscriber.rstrip("/") + event.path
            try:
                futures.append(self._executor.submit(self._send, url, body))
            except RuntimeError as exc:
                # Executor already shut down
                log_event({
                    "ts_ms": now_ms(),
                    "event_type": "WEBHOOK_SEND_NOT_SCHEDULED",
                    "url": url,
                    "message": str(exc),
                })

        return futures

    def shutdown(self) -> None:
        """Let scheduled sends finish, then release owned resources."""
        if self._owns_executor:
            self._executor.shutdown(wait=True)
        if self._owns_client:
            self._client.close()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _send(self, url: str, body: bytes) -> None:
        """One best-effort POST. Never raises."""
        try:
            with timed("webhook_send", details={"url": url}):
                response = self._client.post(
                    url,
                    content=body,
                    headers={"Content-Type": WEBHOOK_CONTENT_TYPE},
                    timeout=self._timeout,
                )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            log_event({
                "ts_ms": now_ms(),
                "event_type": "WEBHOOK_DELIVERY_FAILED",
                "url": url,
                "status_code": exc.response.status_code,
            })
        except Exception as exc:  # pylint: disable=broad-exception-caught
            log_event({
                "ts_ms": now_ms(),
                "event_type": "WEBHOOK_DELIVERY_FAILED",
                "url": url,
                "exception": type(exc).__name__,
                "message": str(exc),
            })
