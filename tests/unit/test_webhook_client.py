# pylint: disable=missing-module-docstring,missing-function-docstring

import json
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from typing import Any, Callable

import httpx
import pytest

import webhooks.client as client_mod
from status.jibri_status import (
    ComponentBusyStatus,
    ComponentHealthStatus,
    JibriStatus,
    OverallHealth,
)
from webhooks.client import WebhookClient
from webhooks.events import HealthEvent


GOOD_STATUS = JibriStatus(
    ComponentBusyStatus.IDLE,
    OverallHealth(ComponentHealthStatus.HEALTHY, {}),
)
BAD_STATUS = JibriStatus(
    ComponentBusyStatus.IDLE,
    OverallHealth(ComponentHealthStatus.UNHEALTHY, {"Selenium": "Chrome hung"}),
)


class ImmediateExecutor(Executor):
    """Runs submitted work on the calling thread."""

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future[Any]:
        future: Future[Any] = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:  # pylint: disable=broad-exception-caught
            future.set_exception(exc)
        return future


def make_handler(requests: list[httpx.Request], delay_gate: threading.Event | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        host = request.url.host
        if "success" in host:
            return httpx.Response(200)
        if "delay" in host:
            if delay_gate is not None:
                delay_gate.wait(timeout=5)
            return httpx.Response(200)
        if "error" in host:
            return httpx.Response(400)
        raise httpx.ConnectError("Unsupported URL", request=request)

    return handler


def make_client(
    requests: list[httpx.Request],
    *,
    executor: Executor | None = None,
    delay_gate: threading.Event | None = None,
) -> WebhookClient:
    return WebhookClient(
        "test",
        client=httpx.Client(transport=httpx.MockTransport(make_handler(requests, delay_gate))),
        executor=executor or ImmediateExecutor(),
    )


# ---------------------------------------------------------------------
# Single subscriber
# ---------------------------------------------------------------------

def test_posts_to_subscriber_status_path():
    requests: list[httpx.Request] = []
    client = make_client(requests)
    client.add_subscriber("https://success")

    client.update_status(GOOD_STATUS)

    assert len(requests) == 1
    assert requests[0].method == "POST"
    assert str(requests[0].url) == "https://success/v1/status"


def test_sends_canonical_json_body():
    requests: list[httpx.Request] = []
    client = make_client(requests)
    client.add_subscriber("https://success")

    client.update_status(GOOD_STATUS)

    request = requests[0]
    assert request.headers["content-type"] == "application/json"
    body = request.content.decode("utf-8")
    assert body == HealthEvent("test", GOOD_STATUS).to_json()
    assert '"jibriId":"test"' in body
    assert json.loads(body) == {
        "jibriId": "test",
        "status": {
            "busyStatus": "IDLE",
            "health": {"status": "HEALTHY", "details": {}},
        },
    }


def test_successive_updates_are_not_conflated():
    requests: list[httpx.Request] = []
    client = make_client(requests)
    client.add_subscriber("https://success")

    client.update_status(GOOD_STATUS)
    client.update_status(BAD_STATUS)

    assert len(requests) == 2
    assert requests[0].content.decode() == HealthEvent("test", GOOD_STATUS).to_json()
    assert requests[1].content.decode() == HealthEvent("test", BAD_STATUS).to_json()


def test_trailing_slash_in_subscriber_url():
    requests: list[httpx.Request] = []
    client = make_client(requests)
    client.add_subscriber("https://success/hooks/")

    client.update_status(GOOD_STATUS)

    assert str(requests[0].url) == "https://success/hooks/v1/status"


# ---------------------------------------------------------------------
# Multiple subscribers
# ---------------------------------------------------------------------

def test_one_post_per_subscriber_with_identical_bodies():
    requests: list[httpx.Request] = []
    client = make_client(requests)
    for url in ("https://success", "https://delay", "https://error"):
        client.add_subscriber(url)

    client.update_status(GOOD_STATUS)

    assert sorted(r.url.host for r in requests) == ["delay", "error", "success"]
    assert len({r.content for r in requests}) == 1

    requests.clear()
    client.update_status(GOOD_STATUS)
    assert sorted(r.url.host for r in requests) == ["delay", "error", "success"]


def test_failures_are_contained_and_logged(monkeypatch: pytest.MonkeyPatch):
    emitted: list[dict[str, Any]] = []
    monkeypatch.setattr(client_mod, "log_event", emitted.append)

    requests: list[httpx.Request] = []
    client = make_client(requests)
    client.add_subscriber("https://error")
    client.add_subscriber("https://unreachable")
    client.add_subscriber("https://success")

    futures = client.update_status(GOOD_STATUS)

    assert len(requests) == 3
    assert all(f.exception() is None for f in futures)

    failures = {e["url"]: e for e in emitted if e["event_type"] == "WEBHOOK_DELIVERY_FAILED"}
    assert set(failures) == {
        "https://error/v1/status",
        "https://unreachable/v1/status",
    }
    assert failures["https://error/v1/status"]["status_code"] == 400
    assert failures["https://unreachable/v1/status"]["exception"] == "ConnectError"


def test_slow_subscriber_does_not_delay_others():
    requests: list[httpx.Request] = []
    gate = threading.Event()
    executor = ThreadPoolExecutor(max_workers=3)
    client = make_client(requests, executor=executor, delay_gate=gate)
    for url in ("https://success", "https://delay", "https://error"):
        client.add_subscriber(url)

    try:
        futures = client.update_status(GOOD_STATUS)
        assert len(futures) == 3

        # update_status returned while the delayed send is still blocked
        done, not_done = wait(futures, timeout=2)
        assert len(done) == 2
        assert len(not_done) == 1
        assert {r.url.host for r in requests} == {"success", "delay", "error"}
    finally:
        gate.set()
        executor.shutdown(wait=True)

    assert all(f.done() and f.exception() is None for f in futures)


# ---------------------------------------------------------------------
# Subscriber set
# ---------------------------------------------------------------------

def test_removed_subscriber_receives_nothing():
    requests: list[httpx.Request] = []
    client = make_client(requests)
    client.add_subscriber("https://success")
    client.add_subscriber("https://error")
    client.remove_subscriber("https://error")
    client.remove_subscriber("https://never-added")

    client.update_status(GOOD_STATUS)

    assert [r.url.host for r in requests] == ["success"]


def test_no_subscribers_sends_nothing():
    requests: list[httpx.Request] = []
    client = make_client(requests)

    assert client.update_status(GOOD_STATUS) == []
    assert not requests


def test_update_after_executor_shutdown_is_dropped(monkeypatch: pytest.MonkeyPatch):
    emitted: list[dict[str, Any]] = []
    monkeypatch.setattr(client_mod, "log_event", emitted.append)

    requests: list[httpx.Request] = []
    executor = ThreadPoolExecutor(max_workers=1)
    client = make_client(requests, executor=executor)
    client.add_subscriber("https://success")
    executor.shutdown(wait=True)

    assert client.update_status(GOOD_STATUS) == []
    assert any(e["event_type"] == "WEBHOOK_SEND_NOT_SCHEDULED" for e in emitted)
