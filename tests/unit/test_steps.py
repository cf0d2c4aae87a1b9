# pylint: disable=missing-module-docstring,missing-function-docstring

from errors import StepFailed
from service.steps import run_steps


def test_all_steps_run_in_order():
    calls: list[str] = []

    result = run_steps((
        ("a", lambda: calls.append("a")),
        ("b", lambda: calls.append("b")),
    ))

    assert result.ok
    assert result.failed_step is None
    assert result.completed == ("a", "b")
    assert calls == ["a", "b"]


def test_first_failure_aborts_remaining_steps():
    calls: list[str] = []
    boom = RuntimeError("boom")

    def fail() -> None:
        raise boom

    result = run_steps((
        ("a", lambda: calls.append("a")),
        ("b", fail),
        ("c", lambda: calls.append("c")),
    ))

    assert not result.ok
    assert result.failed_step == "b"
    assert result.completed == ("a",)
    assert calls == ["a"]

    assert isinstance(result.failure, StepFailed)
    assert result.failure.cause is boom
    assert result.failure.__cause__ is boom
