# cyberrank_e2e/core/waits.py
"""Condition polling
-------------------
`poll_until` is the primitive the locator and page objects build on: evaluate
a side-effect-free predicate at a fixed cadence until it holds or the
deadline passes.
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional, Union

from playwright.async_api import TimeoutError as PWTimeoutError
from pydantic import BaseModel, ConfigDict, Field, model_validator

from cyberrank_e2e.core.errors import DriverError, StaleElementError, TimeoutExceeded
from cyberrank_e2e.utils.logger import get_logger
from cyberrank_e2e.utils.timing import async_sleep_ms, now_ms, resolve

log = get_logger(__name__)

Condition = Callable[[], Union[bool, Awaitable[bool], Any]]

# Errors that mean "the DOM is mid-render", not "the query is wrong".
TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (StaleElementError, PWTimeoutError)


class WaitSpec(BaseModel):
    """Timeout/interval/message configuration for one polling operation."""

    model_config = ConfigDict(frozen=True)

    timeout_ms: int = Field(..., gt=0)
    interval_ms: int = Field(default=500, ge=0)
    message: str = Field(default="Condition not met within timeout")

    @model_validator(mode="after")
    def _interval_below_timeout(self) -> "WaitSpec":
        if self.interval_ms >= self.timeout_ms:
            raise ValueError(
                f"interval_ms ({self.interval_ms}) must be smaller than timeout_ms ({self.timeout_ms})"
            )
        return self

    def with_message(self, message: str) -> "WaitSpec":
        return self.model_copy(update={"message": message})

    @classmethod
    def fixed_delay(cls, delay_ms: int, message: str = "fixed delay") -> "WaitSpec":
        """A spec whose only use is its interval, e.g. the pause between retry attempts."""
        return cls(timeout_ms=delay_ms + 1, interval_ms=delay_ms, message=message)


async def poll_until(condition: Condition, spec: WaitSpec) -> None:
    """
    Evaluate `condition` every `spec.interval_ms` until it returns truthy.

    `condition` may be sync or async. An already-true condition returns
    without sleeping. Only evaluations that start before the deadline count:
    the last sleep is clipped to the deadline and nothing is evaluated once
    it has passed.

    Errors raised by `condition`:
      - DriverError propagates immediately.
      - TRANSIENT_ERRORS count as "not yet true"; the last one is chained
        into TimeoutExceeded.
      - anything else is retried while time remains, but propagates as-is if
        it comes from the last evaluation before the deadline.

    Raises:
        TimeoutExceeded carrying `spec.message`.
    """
    deadline = now_ms() + spec.timeout_ms
    attempts = 0
    last_error: Optional[BaseException] = None

    while True:
        attempts += 1
        unexpected: Optional[BaseException] = None
        try:
            if await resolve(condition()):
                return
        except DriverError:
            raise
        except TRANSIENT_ERRORS as exc:
            last_error = exc
        except Exception as exc:
            unexpected = last_error = exc

        remaining = deadline - now_ms()
        if remaining > 0:
            if unexpected is not None:
                log.debug(f"poll_until: condition raised {unexpected!r}; retrying ({spec.message})")
            await async_sleep_ms(max(1, min(spec.interval_ms, remaining)))

        if now_ms() >= deadline:
            if unexpected is not None:
                raise unexpected
            raise TimeoutExceeded(
                spec.message,
                timeout_ms=spec.timeout_ms,
                attempts=attempts,
                last_error=last_error,
            ) from last_error
