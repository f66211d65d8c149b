# cyberrank_e2e/driver/playwright_driver.py
from __future__ import annotations

"""Playwright driver
-------------------
BrowserDriver implementation over `playwright.async_api`. Translates
selector candidates into Locators and Playwright errors into the core's
taxonomy; it never waits on its own beyond the per-call action timeout,
so the polling/retry core stays in charge of timing.
"""

import re
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from playwright.async_api import Error as PWError, Locator, Page, TimeoutError as PWTimeoutError

from cyberrank_e2e.core.errors import DriverError, StaleElementError
from cyberrank_e2e.selectors.candidate import SelectorCandidate, SelectorKind, parse_role_value
from cyberrank_e2e.utils.config import Settings, get_settings
from cyberrank_e2e.utils.logger import get_logger

log = get_logger(__name__)

_STALE_MARKERS = (
    "not attached to the dom",
    "element is detached",
    "execution context was destroyed",
    "frame was detached",
)
_FATAL_MARKERS = (
    "unexpected token",
    "is not a valid selector",
    "syntaxerror",
    "unknown engine",
    "invalid selector",
    "has been closed",
    "target closed",
)


@contextmanager
def _translated(op: str) -> Iterator[None]:
    try:
        yield
    except PWTimeoutError:
        # Transient; the core treats it as "not yet".
        raise
    except PWError as exc:
        msg = str(exc)
        low = msg.lower()
        if any(m in low for m in _STALE_MARKERS):
            raise StaleElementError(f"{op}: {msg}") from exc
        if any(m in low for m in _FATAL_MARKERS):
            raise DriverError(f"{op}: {msg}") from exc
        raise


class PlaywrightDriver:
    """Adapter from the BrowserDriver contract to a single Playwright Page."""

    def __init__(self, page: Page, settings: Optional[Settings] = None) -> None:
        self.page = page
        self.settings = settings or get_settings()
        self.action_timeout = self.settings.ACTION_TIMEOUT_MS

    # ---------- Selector translation ----------

    def resolve(self, candidate: SelectorCandidate, *, within: Any = None) -> Locator:
        """Convert a SelectorCandidate into a Playwright Locator (page- or element-scoped)."""
        root = within if within is not None else self.page
        kind = candidate.kind
        value = candidate.expression

        if kind == SelectorKind.css:
            return root.locator(value)

        if kind == SelectorKind.text:
            if candidate.tag:
                if candidate.exact:
                    pattern = re.compile(rf"^\s*{re.escape(value)}\s*$")
                    return root.locator(candidate.tag).filter(has_text=pattern)
                return root.locator(candidate.tag, has_text=value)
            return root.get_by_text(value, exact=candidate.exact)

        if kind == SelectorKind.role:
            role, name = parse_role_value(value)
            kwargs = {"name": name} if name else {}
            return root.get_by_role(role, **kwargs)  # type: ignore[arg-type]

        if kind == SelectorKind.xpath:
            return root.locator(f"xpath={value}")

        raise DriverError(f"Unsupported selector kind: {kind!r}")

    # ---------- Queries ----------

    async def navigate(self, path: str) -> None:
        with _translated(f"navigate {path}"):
            await self.page.goto(path, wait_until="domcontentloaded", timeout=self.settings.PAGE_LOAD_TIMEOUT)

    async def find_one(self, candidate: SelectorCandidate, *, within: Any = None) -> Optional[Locator]:
        loc = self.resolve(candidate, within=within)
        with _translated(f"find_one {candidate}"):
            if await loc.count() == 0:
                return None
        return loc.first

    async def find_all(self, candidate: SelectorCandidate, *, within: Any = None) -> List[Locator]:
        loc = self.resolve(candidate, within=within)
        with _translated(f"find_all {candidate}"):
            n = await loc.count()
        return [loc.nth(i) for i in range(n)]

    async def is_visible(self, handle: Locator) -> bool:
        with _translated("is_visible"):
            return await handle.is_visible()

    async def is_attached(self, handle: Locator) -> bool:
        with _translated("is_attached"):
            return await handle.count() > 0

    async def wait_for_state(self, handle: Locator, state: str, timeout_ms: int) -> None:
        with _translated(f"wait_for_state {state}"):
            await handle.wait_for(state=state, timeout=timeout_ms)  # type: ignore[arg-type]

    # ---------- Interactions ----------

    async def click(self, handle: Locator) -> None:
        with _translated("click"):
            await handle.click(timeout=self.action_timeout)

    async def set_text(self, handle: Locator, value: str) -> None:
        with _translated("set_text"):
            await handle.fill(value, timeout=self.action_timeout)

    async def get_text(self, handle: Locator) -> str:
        with _translated("get_text"):
            return (await handle.inner_text(timeout=self.action_timeout)) or ""

    async def get_value(self, handle: Locator) -> str:
        with _translated("get_value"):
            return await handle.input_value(timeout=self.action_timeout)

    async def get_attribute(self, handle: Locator, name: str) -> Optional[str]:
        with _translated(f"get_attribute {name}"):
            return await handle.get_attribute(name, timeout=self.action_timeout)

    async def scroll_into_view(self, handle: Locator) -> None:
        with _translated("scroll_into_view"):
            await handle.scroll_into_view_if_needed(timeout=self.action_timeout)

    # ---------- Page-level ----------

    async def current_url(self) -> str:
        return self.page.url or ""

    async def title(self) -> str:
        with _translated("title"):
            return await self.page.title()

    async def reload(self) -> None:
        with _translated("reload"):
            await self.page.reload(wait_until="domcontentloaded", timeout=self.settings.PAGE_LOAD_TIMEOUT)

    async def execute_script(self, src: str, arg: Any = None) -> Any:
        with _translated("execute_script"):
            return await self.page.evaluate(src, arg)

    async def evaluate_on(self, handle: Locator, src: str, arg: Any = None) -> Any:
        with _translated("evaluate_on"):
            return await handle.evaluate(src, arg, timeout=self.action_timeout)

    async def screenshot(self) -> bytes:
        with _translated("screenshot"):
            return await self.page.screenshot(type="png", full_page=True)

    async def clear_cookies(self) -> None:
        with _translated("clear_cookies"):
            await self.page.context.clear_cookies()
