# cyberrank_e2e/capture/console.py
from __future__ import annotations

"""Browser console collection
----------------------------
Buffers console messages from the page so a failing scenario can attach the
severe ones. Network-noise errors are filtered out.
"""

from dataclasses import dataclass
from typing import Iterable, List

from playwright.async_api import ConsoleMessage, Page

# Playwright console types mapped onto the WebDriver log levels the report uses.
_LEVELS = {
    "error": "SEVERE",
    "assert": "SEVERE",
    "warning": "WARNING",
}

NOISE_PATTERNS = (
    "Failed to load resource",
    "ERR_NAME_NOT_RESOLVED",
    "404 (Not Found)",
    "403 (Forbidden)",
)


@dataclass(frozen=True)
class ConsoleEntry:
    level: str
    message: str

    def __str__(self) -> str:
        return f"{self.level}: {self.message}"


def critical_entries(entries: Iterable[ConsoleEntry]) -> List[ConsoleEntry]:
    """SEVERE entries that are not network noise."""
    return [
        e for e in entries
        if e.level == "SEVERE" and not any(p in e.message for p in NOISE_PATTERNS)
    ]


def format_critical(entries: Iterable[ConsoleEntry]) -> str:
    """Attachment body, or "" when there is nothing critical to report."""
    crit = critical_entries(entries)
    if not crit:
        return ""
    return "Critical Browser Errors:\n" + "\n".join(str(e) for e in crit)


class ConsoleCollector:
    def __init__(self, max_entries: int = 500) -> None:
        self.max_entries = max_entries
        self.entries: List[ConsoleEntry] = []

    def attach(self, page: Page) -> None:
        page.on("console", self._on_console)
        page.on("pageerror", self._on_page_error)

    def _append(self, entry: ConsoleEntry) -> None:
        self.entries.append(entry)
        if len(self.entries) > self.max_entries:
            del self.entries[: len(self.entries) - self.max_entries]

    def _on_console(self, msg: ConsoleMessage) -> None:
        self._append(ConsoleEntry(level=_LEVELS.get(msg.type, "INFO"), message=msg.text))

    def _on_page_error(self, error) -> None:
        self._append(ConsoleEntry(level="SEVERE", message=str(error)))

    def clear(self) -> None:
        self.entries.clear()
