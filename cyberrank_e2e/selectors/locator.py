# cyberrank_e2e/selectors/locator.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple, Union

from cyberrank_e2e.core.errors import DriverError, ElementNotFound, TimeoutExceeded
from cyberrank_e2e.core.waits import TRANSIENT_ERRORS, WaitSpec, poll_until
from cyberrank_e2e.selectors.candidate import SelectorCandidate
from cyberrank_e2e.utils.logger import get_logger
from cyberrank_e2e.utils.timing import Stopwatch

log = get_logger(__name__)


@dataclass(frozen=True)
class CandidateAttempt:
    index: int
    candidate: SelectorCandidate
    reason: str  # "no match" | "not visible" | "error: ..."


@dataclass(frozen=True)
class Found:
    candidate: SelectorCandidate
    handle: Any
    index: int
    passes: int = 1
    elapsed_ms: int = 0
    found: bool = True

    def unwrap(self) -> "Found":
        return self


@dataclass(frozen=True)
class NotFound:
    attempts: Tuple[CandidateAttempt, ...]
    passes: int = 1
    elapsed_ms: int = 0
    found: bool = False

    @property
    def candidates(self) -> List[SelectorCandidate]:
        return [a.candidate for a in self.attempts]

    def unwrap(self) -> Found:
        raise ElementNotFound(self)


LocateResult = Union[Found, NotFound]


def _require_candidates(candidates: Sequence[SelectorCandidate]) -> None:
    if not candidates:
        raise ValueError("at least one selector candidate is required")


async def probe(driver, candidates: Sequence[SelectorCandidate]) -> LocateResult:
    """
    One pass over `candidates` in priority order. The first candidate that
    resolves to a visible element wins; later ones are not queried.
    """
    _require_candidates(candidates)
    attempts: List[CandidateAttempt] = []
    for idx, cand in enumerate(candidates):
        try:
            handle = await driver.find_one(cand)
            if handle is None:
                attempts.append(CandidateAttempt(idx, cand, "no match"))
                continue
            if not await driver.is_visible(handle):
                attempts.append(CandidateAttempt(idx, cand, "not visible"))
                continue
            return Found(candidate=cand, handle=handle, index=idx)
        except DriverError:
            raise
        except TRANSIENT_ERRORS as exc:
            attempts.append(CandidateAttempt(idx, cand, f"error: {exc!r}"))
    return NotFound(attempts=tuple(attempts))


async def try_locate(driver, candidates: Sequence[SelectorCandidate], spec: WaitSpec) -> LocateResult:
    """
    Repeat `probe` passes until one finds a visible element or `spec.timeout_ms`
    (shared by the whole list) elapses. Never raises for "not found".
    """
    _require_candidates(candidates)
    passes = 0
    last: Optional[LocateResult] = None

    async def _pass() -> bool:
        nonlocal passes, last
        passes += 1
        last = await probe(driver, candidates)
        return last.found

    with Stopwatch() as sw:
        try:
            await poll_until(_pass, spec)
        except TimeoutExceeded:
            attempts = last.attempts if isinstance(last, NotFound) else ()
            log.debug(f"locate: no visible match after {passes} pass(es) ({spec.message})")
            return NotFound(attempts=attempts, passes=passes, elapsed_ms=sw.elapsed_ms())

    if not isinstance(last, Found):
        raise RuntimeError(f"locate: condition held without a visible match ({spec.message})")
    if last.index > 0:
        log.debug(f"locate: fell back to candidate [{last.index}] {last.candidate}")
    return Found(
        candidate=last.candidate,
        handle=last.handle,
        index=last.index,
        passes=passes,
        elapsed_ms=sw.elapsed_ms(),
    )


async def locate_with_fallback(driver, candidates: Sequence[SelectorCandidate], spec: WaitSpec) -> Found:
    """
    Return the first candidate (in priority order) that resolves to a visible element.

    Raises:
        ElementNotFound listing every candidate tried, once `spec.timeout_ms` elapsed.
        DriverError immediately, for non-transient driver failures.
    """
    result = await try_locate(driver, candidates, spec)
    if isinstance(result, NotFound):
        raise ElementNotFound(result, spec.message)
    return result
