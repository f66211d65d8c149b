# cyberrank_e2e/driver/base.py
from __future__ import annotations

from typing import Any, List, Optional, Protocol, runtime_checkable

from cyberrank_e2e.selectors.candidate import SelectorCandidate


@runtime_checkable
class BrowserDriver(Protocol):
    """
    What the locator/retry core and the page objects need from a browser.

    Element handles are opaque to callers and valid for the duration of one
    action. Implementations raise DriverError for non-transient failures and
    StaleElementError when a handle has been detached from the DOM.
    """

    async def navigate(self, path: str) -> None: ...

    async def find_one(self, candidate: SelectorCandidate, *, within: Any = None) -> Optional[Any]: ...

    async def find_all(self, candidate: SelectorCandidate, *, within: Any = None) -> List[Any]: ...

    async def is_visible(self, handle: Any) -> bool: ...

    async def is_attached(self, handle: Any) -> bool: ...

    async def wait_for_state(self, handle: Any, state: str, timeout_ms: int) -> None: ...

    async def click(self, handle: Any) -> None: ...

    async def set_text(self, handle: Any, value: str) -> None: ...

    async def get_text(self, handle: Any) -> str: ...

    async def get_value(self, handle: Any) -> str: ...

    async def get_attribute(self, handle: Any, name: str) -> Optional[str]: ...

    async def scroll_into_view(self, handle: Any) -> None: ...

    async def current_url(self) -> str: ...

    async def title(self) -> str: ...

    async def reload(self) -> None: ...

    async def execute_script(self, src: str, arg: Any = None) -> Any: ...

    async def evaluate_on(self, handle: Any, src: str, arg: Any = None) -> Any: ...

    async def screenshot(self) -> bytes: ...

    async def clear_cookies(self) -> None: ...
