import pytest

from cyberrank_e2e.core.errors import DriverError, ElementNotFound, StaleElementError
from cyberrank_e2e.core.waits import WaitSpec
from cyberrank_e2e.selectors.candidate import candidates
from cyberrank_e2e.selectors.locator import Found, NotFound, locate_with_fallback, probe, try_locate
from cyberrank_e2e.utils.timing import Stopwatch, now_ms

from tests.unit.conftest import FakeElement

REGISTER = candidates("#submit-button", "vaadin-button*=Register")


def test_first_visible_candidate_wins_and_later_ones_are_not_queried(arun, driver):
    submit = driver.add("#submit-button", FakeElement(text="Log in"))[0]
    driver.add("vaadin-button*=Register", FakeElement(text="Register"))

    found = arun(locate_with_fallback(driver, REGISTER, WaitSpec(timeout_ms=200, interval_ms=10)))
    assert found.handle is submit
    assert found.index == 0
    assert driver.queries == [str(REGISTER[0])]


def test_falls_back_to_second_candidate(arun, driver):
    register = driver.add("vaadin-button*=Register", FakeElement(text="Register"))[0]

    found = arun(locate_with_fallback(driver, REGISTER, WaitSpec(timeout_ms=200, interval_ms=10)))
    assert found.handle is register
    assert found.index == 1
    assert found.candidate == REGISTER[1]
    assert found.passes == 1


def test_invisible_match_is_skipped(arun, driver):
    driver.add("#submit-button", FakeElement(visible=False))
    register = driver.add("vaadin-button*=Register", FakeElement(text="Register"))[0]

    result = arun(probe(driver, REGISTER))
    assert isinstance(result, Found)
    assert result.handle is register


def test_second_candidate_appearing_later(arun, driver):
    spec = WaitSpec(timeout_ms=1000, interval_ms=25)
    register = FakeElement(text="Register")

    async def scenario():
        start = now_ms()
        driver.add_dynamic(
            "vaadin-button*=Register",
            lambda: [register] if now_ms() - start >= 120 else [],
        )
        found = await locate_with_fallback(driver, REGISTER, spec)
        return found, now_ms() - start

    found, elapsed = arun(scenario())
    assert found.handle is register
    assert found.passes > 1
    assert 120 <= elapsed < 120 + 25 + 100


def test_not_found_lists_every_candidate_after_timeout(arun, driver):
    driver.add("#submit-button", FakeElement(visible=False))
    spec = WaitSpec(timeout_ms=60, interval_ms=10, message="Register button")

    with Stopwatch() as sw:
        with pytest.raises(ElementNotFound) as ei:
            arun(locate_with_fallback(driver, REGISTER, spec))
    assert sw.elapsed_ms() >= 60

    err = ei.value
    assert err.candidates == list(REGISTER)
    assert [a.reason for a in err.result.attempts] == ["not visible", "no match"]
    assert err.result.passes > 1
    text = str(err)
    assert text.startswith("Register button")
    assert str(REGISTER[0]) in text and str(REGISTER[1]) in text


def test_try_locate_returns_not_found_instead_of_raising(arun, driver):
    result = arun(try_locate(driver, REGISTER, WaitSpec(timeout_ms=30, interval_ms=10)))
    assert isinstance(result, NotFound)
    assert result.candidates == list(REGISTER)
    with pytest.raises(ElementNotFound):
        result.unwrap()


def test_driver_error_is_not_retried(arun, driver):
    driver.raise_on("#submit-button", DriverError("invalid selector"))

    with pytest.raises(DriverError):
        arun(locate_with_fallback(driver, REGISTER, WaitSpec(timeout_ms=500, interval_ms=10)))
    assert driver.queries == [str(REGISTER[0])]


def test_transient_error_moves_on_to_next_candidate(arun, driver):
    driver.raise_on("#submit-button", StaleElementError("detached"))
    register = driver.add("vaadin-button*=Register", FakeElement(text="Register"))[0]

    found = arun(locate_with_fallback(driver, REGISTER, WaitSpec(timeout_ms=200, interval_ms=10)))
    assert found.handle is register


def test_empty_candidate_list_is_rejected(arun, driver):
    with pytest.raises(ValueError):
        arun(locate_with_fallback(driver, (), WaitSpec(timeout_ms=100, interval_ms=10)))
