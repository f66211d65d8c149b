# cyberrank_e2e/core/errors.py
"""Error taxonomy
----------------
Everything the locator/retry core raises derives from E2EError.

  TimeoutExceeded   a wait condition never became true
  ElementNotFound   no selector candidate matched a visible element
  ActionFailed      an action kept failing after its allotted attempts
  DriverError       the driver rejected a call for a non-timing reason (fatal)

StaleElementError and ResultRejected are transient: the core retries them.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from cyberrank_e2e.selectors.locator import NotFound


class E2EError(RuntimeError):
    pass


class TimeoutExceeded(E2EError):
    def __init__(
        self,
        message: str,
        *,
        timeout_ms: int,
        attempts: int,
        last_error: Optional[BaseException] = None,
    ) -> None:
        detail = f"{message} (timed out after {timeout_ms} ms, {attempts} evaluation(s))"
        if last_error is not None:
            detail += f"; last error: {last_error!r}"
        super().__init__(detail)
        self.message = message
        self.timeout_ms = timeout_ms
        self.attempts = attempts
        self.last_error = last_error


class ElementNotFound(E2EError):
    def __init__(self, result: "NotFound", message: str = "") -> None:
        lines = [f"[{a.index}] {a.candidate} -> {a.reason}" for a in result.attempts]
        head = message or "No selector candidate matched a visible element"
        super().__init__(
            f"{head} after {result.elapsed_ms} ms ({result.passes} pass(es)). Tried:\n  "
            + "\n  ".join(lines or ["<none>"])
        )
        self.result = result

    @property
    def candidates(self):
        return [a.candidate for a in self.result.attempts]


class ActionFailed(E2EError):
    def __init__(self, description: str, *, attempts: int, last_error: Optional[BaseException]) -> None:
        super().__init__(f"{description} failed after {attempts} attempt(s): {last_error!r}")
        self.description = description
        self.attempts = attempts
        self.last_error = last_error


class DriverError(E2EError):
    """Non-transient driver failure (e.g. invalid selector syntax). Never retried."""


class StaleElementError(E2EError):
    """The element handle is no longer attached to the DOM."""


class ResultRejected(E2EError):
    """An action returned, but its result did not pass the caller's acceptance check."""

    def __init__(self, result: Any) -> None:
        super().__init__(f"result rejected: {result!r}")
        self.result = result
