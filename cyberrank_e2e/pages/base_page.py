# cyberrank_e2e/pages/base_page.py
from __future__ import annotations

"""Base page
-----------
Shared behaviour for every page object. Element access always goes through
the multi-candidate locator, and interactions through bounded retries, so a
page object only has to declare its selector candidates.
"""

from typing import Any, Callable, List, Optional, Sequence, Tuple

from cyberrank_e2e.capture.screenshot import CaptureResult, ScreenshotManager
from cyberrank_e2e.core.errors import TimeoutExceeded
from cyberrank_e2e.core.retry import retry_action
from cyberrank_e2e.core.waits import WaitSpec, poll_until
from cyberrank_e2e.selectors.candidate import SelectorCandidate, candidates
from cyberrank_e2e.selectors.locator import Found, locate_with_fallback, probe
from cyberrank_e2e.utils.config import Settings, Timeouts, get_settings
from cyberrank_e2e.utils.logger import get_logger
from cyberrank_e2e.utils.timing import async_sleep_ms

Candidates = Sequence[SelectorCandidate]

_READY_STATE = "() => document.readyState"

ERROR_MESSAGE = (SelectorCandidate.css('.error-message, .error, [class*="error"]'),)

# Names scenarios use for landmarks that carry no readable label of their own.
VISIBLE_ALIASES = {
    "main navigation menu": candidates("nav"),
    "hero section": candidates("div*=Global Standard"),
    "login button": candidates("a*=Login"),
}


def named_field(name: str) -> Tuple[SelectorCandidate, ...]:
    return candidates(f'input[name="{name}"]')


class BasePage:
    PATH: str = "/"

    def __init__(self, driver, settings: Optional[Settings] = None) -> None:
        self.driver = driver
        self.settings = settings or get_settings()
        self.timeout = Timeouts.from_settings(self.settings)
        self.log = get_logger(f"pages.{type(self).__name__}")

    # ---------- Specs ----------

    def wait_spec(self, timeout_ms: Optional[int] = None, message: str = "Condition not met within timeout") -> WaitSpec:
        return WaitSpec(
            timeout_ms=timeout_ms or self.timeout.medium,
            interval_ms=self.settings.POLL_INTERVAL_MS,
            message=message,
        )

    def retry_spec(self) -> WaitSpec:
        return WaitSpec.fixed_delay(self.settings.RETRY_DELAY, message="retry delay")

    # ---------- Navigation ----------

    async def open(self) -> None:
        await self.navigate(self.PATH)

    async def navigate(self, path: str) -> None:
        self.log.debug(f"navigate -> {path}")
        await self.driver.navigate(path)

    async def wait_for_page_load(self, timeout_ms: Optional[int] = None) -> None:
        async def _complete() -> bool:
            return await self.driver.execute_script(_READY_STATE) == "complete"

        await poll_until(_complete, self.wait_spec(timeout_ms or self.timeout.long, "Page did not load completely"))

    async def current_url(self) -> str:
        return await self.driver.current_url()

    async def title(self) -> str:
        return await self.driver.title()

    async def refresh(self) -> None:
        await self.driver.reload()

    async def execute_script(self, src: str, arg: Any = None) -> Any:
        return await self.driver.execute_script(src, arg)

    # ---------- Elements ----------

    async def find(self, cands: Candidates, timeout_ms: Optional[int] = None, message: str = "") -> Found:
        spec = self.wait_spec(timeout_ms, message or f"{type(self).__name__}: element not visible")
        return await locate_with_fallback(self.driver, cands, spec)

    async def find_nth(self, cands: Candidates, index: int, timeout_ms: Optional[int] = None) -> Any:
        """Handle of the `index`-th match of the first candidate that yields that many."""

        async def _nth() -> Any:
            for cand in cands:
                handles = await self.driver.find_all(cand)
                if len(handles) > index:
                    return handles[index]
            return None

        found: List[Any] = []

        async def _present() -> bool:
            handle = await _nth()
            if handle is None:
                return False
            found.append(handle)
            return True

        await poll_until(_present, self.wait_spec(timeout_ms, f"no element #{index} for {list(map(str, cands))}"))
        return found[-1]

    async def click(self, cands: Candidates, timeout_ms: Optional[int] = None) -> Found:
        found = await self.find(cands, timeout_ms)
        await retry_action(
            lambda: self.driver.click(found.handle),
            self.settings.MAX_RETRIES,
            self.retry_spec(),
            description=f"click {found.candidate}",
        )
        return found

    async def set_value(self, cands: Candidates, value: str, timeout_ms: Optional[int] = None) -> Found:
        found = await self.find(cands, timeout_ms)
        await self.fill(found.handle, value, description=f"set value on {found.candidate}")
        return found

    async def fill(self, handle: Any, value: str, description: str = "set value") -> None:
        await retry_action(
            lambda: self.driver.set_text(handle, value),
            self.settings.MAX_RETRIES,
            self.retry_spec(),
            description=description,
        )

    async def get_text(self, cands: Candidates, timeout_ms: Optional[int] = None) -> str:
        found = await self.find(cands, timeout_ms)
        text = await retry_action(
            lambda: self.driver.get_text(found.handle),
            self.settings.MAX_RETRIES,
            self.retry_spec(),
            description=f"read text of {found.candidate}",
        )
        return (text or "").strip()

    async def is_displayed(self, cands: Candidates) -> bool:
        """Single non-waiting check."""
        return (await probe(self.driver, cands)).found

    async def wait_for_element(self, cands: Candidates, timeout_ms: Optional[int] = None) -> Found:
        return await self.find(cands, timeout_ms)

    async def wait_for_element_to_disappear(self, cands: Candidates, timeout_ms: Optional[int] = None) -> None:
        async def _gone() -> bool:
            return not (await probe(self.driver, cands)).found

        await poll_until(_gone, self.wait_spec(timeout_ms, f"element still visible: {cands[0]}"))

    async def wait_for_url_contains(self, fragment: str, timeout_ms: Optional[int] = None) -> None:
        async def _matches() -> bool:
            return fragment in await self.driver.current_url()

        await poll_until(_matches, self.wait_spec(timeout_ms, f"URL does not contain: {fragment}"))

    async def wait_for_condition(
        self,
        condition: Callable[[], Any],
        timeout_ms: Optional[int] = None,
        message: str = "Condition not met within timeout",
    ) -> None:
        await poll_until(condition, self.wait_spec(timeout_ms, message))

    async def wait_for_element_count(self, cand: SelectorCandidate, expected: int, timeout_ms: Optional[int] = None) -> int:
        count = 0

        async def _enough() -> bool:
            nonlocal count
            count = len(await self.driver.find_all(cand))
            return count >= expected

        await poll_until(_enough, self.wait_spec(timeout_ms, f"Expected {expected} elements with selector '{cand}'"))
        return count

    async def wait_delay(self, ms: Optional[int] = None) -> None:
        await async_sleep_ms(self.timeout.very_short if ms is None else ms)

    async def is_condition_met(self, condition: Callable[[], Any], timeout_ms: int) -> bool:
        """wait_for_condition that answers False instead of raising on timeout."""
        try:
            await poll_until(condition, self.wait_spec(timeout_ms))
        except TimeoutExceeded:
            return False
        return True

    # ---------- Generic UI ----------

    async def click_button_labeled(self, label: str) -> Found:
        return await self.click([SelectorCandidate.text(label, tag="button")], self.timeout.medium)

    async def click_link_labeled(self, label: str) -> Found:
        return await self.click([SelectorCandidate.text(label, tag="a")], self.timeout.medium)

    async def is_visible_within(self, cands: Candidates, timeout_ms: Optional[int] = None) -> bool:
        return await self.is_condition_met(lambda: self.is_displayed(cands), timeout_ms or self.timeout.medium)

    async def is_text_visible(self, text: str, timeout_ms: Optional[int] = None) -> bool:
        return await self.is_visible_within([SelectorCandidate.text(text)], timeout_ms)

    async def is_element_visible(self, description: str, timeout_ms: Optional[int] = None) -> bool:
        """Visibility by plain-language name; unknown names are looked up as visible text."""
        cands = VISIBLE_ALIASES.get(description.lower())
        if cands is None:
            cands = (SelectorCandidate.text(description),)
        return await self.is_visible_within(cands, timeout_ms)

    async def enter_in_named_field(self, name: str, value: str) -> Found:
        return await self.set_value(named_field(name), value)

    async def get_field_value(self, name: str) -> str:
        found = await self.find(named_field(name))
        return await retry_action(
            lambda: self.driver.get_value(found.handle),
            self.settings.MAX_RETRIES,
            self.retry_spec(),
            description=f"read value of {found.candidate}",
        )

    async def is_error_message_displayed(self, timeout_ms: Optional[int] = None) -> bool:
        return await self.is_visible_within(ERROR_MESSAGE, timeout_ms)

    async def is_error_message_absent(self, timeout_ms: Optional[int] = None) -> bool:
        async def _absent() -> bool:
            return not await self.is_displayed(ERROR_MESSAGE)

        return await self.is_condition_met(_absent, timeout_ms or self.timeout.short)

    # ---------- Artifacts ----------

    async def take_screenshot(self, name: str) -> CaptureResult:
        return await ScreenshotManager(settings=self.settings).capture(self.driver, name)


__all__ = ["BasePage", "Candidates", "ERROR_MESSAGE", "VISIBLE_ALIASES", "candidates", "named_field"]
