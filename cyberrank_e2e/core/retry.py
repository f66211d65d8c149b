# cyberrank_e2e/core/retry.py
"""Bounded retries for flaky UI actions
--------------------------------------
Wrap only actions whose expected failure mode is transient rendering lag
(a grid not yet re-rendered, a button swapped out mid-click). Never wrap
business-logic assertions.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from cyberrank_e2e.core.errors import ActionFailed, DriverError, ResultRejected
from cyberrank_e2e.core.waits import WaitSpec
from cyberrank_e2e.utils.logger import get_logger
from cyberrank_e2e.utils.timing import async_sleep_ms, resolve

T = TypeVar("T")

log = get_logger(__name__)


@dataclass(frozen=True)
class Succeeded(Generic[T]):
    value: T
    attempts: int
    ok: bool = True


@dataclass(frozen=True)
class Failed:
    attempts: int
    last_error: Optional[BaseException]
    description: str = "action"
    ok: bool = False

    def to_error(self) -> ActionFailed:
        return ActionFailed(self.description, attempts=self.attempts, last_error=self.last_error)


ActionOutcome = Union[Succeeded[T], Failed]


async def attempt_action(
    action: Callable[[], Any],
    max_attempts: int,
    spec: WaitSpec,
    *,
    accept: Optional[Callable[[Any], bool]] = None,
    description: str = "action",
) -> ActionOutcome:
    """
    Run `action` up to `max_attempts` times with a fixed `spec.interval_ms`
    delay between attempts. Returns Succeeded on the first accepted result,
    Failed once attempts are exhausted. DriverError is never retried.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    last_error: Optional[BaseException] = None
    for attempt in range(1, max_attempts + 1):
        try:
            result = await resolve(action())
            if accept is not None and not accept(result):
                raise ResultRejected(result)
            if attempt > 1:
                log.debug(f"{description} succeeded on attempt {attempt}/{max_attempts}")
            return Succeeded(value=result, attempts=attempt)
        except DriverError:
            raise
        except Exception as exc:
            last_error = exc
            if attempt < max_attempts:
                log.debug(
                    f"{description} attempt {attempt}/{max_attempts} failed: {exc!r} "
                    f"(retry in {spec.interval_ms} ms)"
                )
                await async_sleep_ms(spec.interval_ms)

    log.debug(f"{description} exhausted {max_attempts} attempt(s); last error: {last_error!r}")
    return Failed(attempts=max_attempts, last_error=last_error, description=description)


async def retry_action(
    action: Callable[[], Any],
    max_attempts: int,
    spec: WaitSpec,
    *,
    accept: Optional[Callable[[Any], bool]] = None,
    description: str = "action",
) -> Any:
    """
    Like `attempt_action` but returns the value directly.

    Raises:
        ActionFailed with the attempt count and the last underlying error.
    """
    outcome = await attempt_action(action, max_attempts, spec, accept=accept, description=description)
    if isinstance(outcome, Failed):
        raise outcome.to_error() from outcome.last_error
    return outcome.value
