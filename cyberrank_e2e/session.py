# cyberrank_e2e/session.py
from __future__ import annotations

"""Browser session
-----------------
Owns the one browser/page the suite drives and the event loop it lives on.
Synchronous callers (pytest-bdd steps, the CLI) submit coroutines through
`run`, so every Playwright object stays on a single loop.
"""

import asyncio
from typing import Any, Coroutine, Optional, TypeVar

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from cyberrank_e2e.capture.console import ConsoleCollector
from cyberrank_e2e.driver.playwright_driver import PlaywrightDriver
from cyberrank_e2e.utils.config import Settings, get_settings
from cyberrank_e2e.utils.logger import get_logger

T = TypeVar("T")

_CLEAR_STORAGE = """
() => {
  if (window.location.protocol === "about:") return;
  try { window.localStorage.clear(); } catch (e) {}
  try { window.sessionStorage.clear(); } catch (e) {}
}
"""


class BrowserSession:
    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.log = get_logger(__name__)
        self.console = ConsoleCollector()
        self._runner: Optional[asyncio.Runner] = None
        self._pw: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self.driver: Optional[PlaywrightDriver] = None

    # ---------- Loop bridge ----------

    def run(self, coro: Coroutine[Any, Any, T]) -> T:
        if self._runner is None:
            coro.close()
            raise RuntimeError("BrowserSession is not started")
        return self._runner.run(coro)

    # ---------- Lifecycle ----------

    def start(self) -> "BrowserSession":
        self._runner = asyncio.Runner()
        self.run(self._start())
        return self

    async def _start(self) -> None:
        s = self.settings
        self._pw = await async_playwright().start()
        browser_type = getattr(self._pw, s.BROWSER_TYPE.value)
        self._browser = await browser_type.launch(**s.playwright_launch_kwargs())
        self._context = await self._browser.new_context(**s.playwright_context_kwargs())
        self.page = await self._context.new_page()
        self.console.attach(self.page)
        self.driver = PlaywrightDriver(self.page, s)
        self.log.info(f"Browser started: {s.BROWSER_TYPE.value} (headless={s.HEADLESS}) -> {s.BASE_URL}")

    async def reset(self) -> None:
        """Per-scenario isolation: no cookies, no web storage, fresh console buffer, start at '/'."""
        if self.driver is None or self.page is None:
            raise RuntimeError("BrowserSession is not started")
        await self.driver.clear_cookies()
        await self.page.evaluate(_CLEAR_STORAGE)
        self.console.clear()
        await self.driver.navigate("/")

    async def _close(self) -> None:
        if self._context is not None:
            await self._context.close()
        if self._browser is not None:
            await self._browser.close()
        if self._pw is not None:
            await self._pw.stop()

    def close(self) -> None:
        if self._runner is None:
            return
        try:
            self.run(self._close())
        finally:
            self._runner.close()
            self._runner = None
            self.log.info("Browser session closed")

    def __enter__(self) -> "BrowserSession":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
