import pytest

from cyberrank_e2e.core.errors import ActionFailed, DriverError, ResultRejected, StaleElementError
from cyberrank_e2e.core.retry import Failed, Succeeded, attempt_action, retry_action
from cyberrank_e2e.core.waits import WaitSpec
from cyberrank_e2e.utils.timing import Stopwatch

SPEC = WaitSpec(timeout_ms=41, interval_ms=40, message="retry delay")


def test_grid_read_populated_on_third_attempt(arun):
    reads = iter([[], [], ["a@example.com", "b@example.com"]])
    calls = []

    async def read_grid():
        calls.append(1)
        return next(reads)

    with Stopwatch() as sw:
        outcome = arun(attempt_action(read_grid, 3, SPEC, accept=bool))
    assert isinstance(outcome, Succeeded)
    assert outcome.value == ["a@example.com", "b@example.com"]
    assert outcome.attempts == 3
    assert len(calls) == 3
    # two fixed delays between three attempts
    assert 80 <= sw.elapsed_ms() < 80 + 150


def test_retry_action_returns_value_after_failures(arun):
    calls = []

    def click():
        calls.append(1)
        if len(calls) < 3:
            raise StaleElementError("button re-rendered")
        return "clicked"

    assert arun(retry_action(click, 3, SPEC)) == "clicked"
    assert len(calls) == 3


def test_exhausted_attempts_raise_action_failed(arun):
    calls = []

    def click():
        calls.append(1)
        raise RuntimeError(f"click {len(calls)} intercepted")

    with pytest.raises(ActionFailed) as ei:
        arun(retry_action(click, 3, SPEC, description="click confirm"))
    err = ei.value
    assert err.attempts == 3
    assert len(calls) == 3
    assert str(err.last_error) == "click 3 intercepted"
    assert err.__cause__ is err.last_error
    assert "click confirm" in str(err)


def test_rejected_results_are_kept_on_failure(arun):
    outcome = arun(attempt_action(lambda: [], 2, SPEC, accept=bool, description="read grid"))
    assert isinstance(outcome, Failed)
    assert outcome.attempts == 2
    assert isinstance(outcome.last_error, ResultRejected)
    assert outcome.last_error.result == []
    assert outcome.to_error().description == "read grid"


def test_driver_error_is_never_retried(arun):
    calls = []

    def action():
        calls.append(1)
        raise DriverError("target closed")

    with pytest.raises(DriverError):
        arun(retry_action(action, 5, SPEC))
    assert calls == [1]


def test_single_attempt_does_not_sleep(arun):
    with Stopwatch() as sw:
        outcome = arun(attempt_action(lambda: None, 1, SPEC, accept=lambda r: r is not None))
    assert not outcome.ok
    assert sw.elapsed_ms() < 40


@pytest.mark.parametrize("n", [0, -1])
def test_max_attempts_must_be_positive(arun, n):
    with pytest.raises(ValueError):
        arun(retry_action(lambda: 1, n, SPEC))
