import asyncio
import base64
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import pytest

from cyberrank_e2e.selectors.candidate import SelectorCandidate
from cyberrank_e2e.utils.config import Settings

# 1x1 PNG
PNG_1X1 = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


@dataclass(eq=False)
class FakeElement:
    text: str = ""
    attrs: Dict[str, str] = field(default_factory=dict)
    visible: bool = True
    children: Dict[str, List["FakeElement"]] = field(default_factory=dict)
    clicks: int = 0
    value: str = ""
    # raise this on the next N interactions of the listed kinds
    fail_with: Optional[BaseException] = None
    fail_times: int = 0
    fail_on: Tuple[str, ...] = ("click", "set_text", "get_text")

    def _maybe_fail(self, op: str) -> None:
        if op in self.fail_on and self.fail_times > 0 and self.fail_with is not None:
            self.fail_times -= 1
            raise self.fail_with


Entry = Union[List[FakeElement], Callable[[], List[FakeElement]], BaseException]


class FakeDriver:
    """In-memory BrowserDriver: selectors map to canned elements."""

    def __init__(self, url: str = "https://example.test/vas/login") -> None:
        self.url = url
        self.registry: Dict[str, Entry] = {}
        self.queries: List[str] = []
        self.scripts: Dict[str, Any] = {"() => document.readyState": "complete"}
        self.navigations: List[str] = []
        self.cookies_cleared = 0

    @staticmethod
    def key(raw: Union[str, SelectorCandidate]) -> str:
        cand = raw if isinstance(raw, SelectorCandidate) else SelectorCandidate.parse(raw)
        return str(cand)

    def add(self, raw: str, *elements: FakeElement) -> List[FakeElement]:
        self.registry[self.key(raw)] = list(elements)
        return list(elements)

    def add_dynamic(self, raw: str, fn: Callable[[], List[FakeElement]]) -> None:
        self.registry[self.key(raw)] = fn

    def raise_on(self, raw: str, exc: BaseException) -> None:
        self.registry[self.key(raw)] = exc

    def _lookup(self, candidate: SelectorCandidate, within: Optional[FakeElement]) -> List[FakeElement]:
        k = str(candidate)
        self.queries.append(k)
        if within is not None:
            return list(within.children.get(k, []))
        entry = self.registry.get(k, [])
        if isinstance(entry, BaseException):
            raise entry
        if callable(entry):
            return list(entry())
        return list(entry)

    # ---------- BrowserDriver ----------

    async def navigate(self, path: str) -> None:
        self.navigations.append(path)
        self.url = path if path.startswith("http") else f"https://example.test{path}"

    async def find_one(self, candidate, *, within=None):
        found = self._lookup(candidate, within)
        return found[0] if found else None

    async def find_all(self, candidate, *, within=None):
        return self._lookup(candidate, within)

    async def is_visible(self, handle: FakeElement) -> bool:
        return handle.visible

    async def is_attached(self, handle: FakeElement) -> bool:
        return True

    async def wait_for_state(self, handle, state, timeout_ms) -> None:
        return None

    async def click(self, handle: FakeElement) -> None:
        handle._maybe_fail("click")
        handle.clicks += 1

    async def set_text(self, handle: FakeElement, value: str) -> None:
        handle._maybe_fail("set_text")
        handle.value = value

    async def get_text(self, handle: FakeElement) -> str:
        handle._maybe_fail("get_text")
        return handle.text

    async def get_value(self, handle: FakeElement) -> str:
        return handle.value

    async def get_attribute(self, handle: FakeElement, name: str) -> Optional[str]:
        return handle.attrs.get(name)

    async def scroll_into_view(self, handle) -> None:
        return None

    async def current_url(self) -> str:
        return self.url

    async def title(self) -> str:
        return "CyberRank"

    async def reload(self) -> None:
        return None

    async def execute_script(self, src: str, arg: Any = None) -> Any:
        return self.scripts.get(src)

    async def evaluate_on(self, handle: FakeElement, src: str, arg: Any = None) -> Any:
        handle.clicks += 1
        return None

    async def screenshot(self) -> bytes:
        return PNG_1X1

    async def clear_cookies(self) -> None:
        self.cookies_cleared += 1


@pytest.fixture
def driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def fast_settings(tmp_path) -> Settings:
    """Settings with every tier shrunk so waits finish in well under a second."""
    return Settings(
        _env_file=None,
        TIMEOUT_VERY_SHORT=60,
        TIMEOUT_SHORT=120,
        TIMEOUT_MEDIUM=200,
        TIMEOUT_MEDIUM_LONG=200,
        TIMEOUT_LONG=300,
        TIMEOUT_VERY_LONG=300,
        TIMEOUT_EXTRA_LONG=300,
        POLL_INTERVAL_MS=10,
        RETRY_DELAY=10,
        MAX_RETRIES=3,
        SCREENSHOT_DIR=tmp_path / "screenshots",
        TEST_DATA_FILE=tmp_path / "test_data.yaml",
        LOG_FILE=tmp_path / "logs" / "e2e.log",
    )


@pytest.fixture
def arun():
    """Run a coroutine to completion on a fresh loop."""
    return asyncio.run
