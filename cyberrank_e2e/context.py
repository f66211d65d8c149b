# cyberrank_e2e/context.py
from __future__ import annotations

"""Scenario context
------------------
Per-scenario state shared between steps (generated emails, the page object
in focus, report attachments). Created before each scenario and cleared
after it, so nothing leaks between scenarios.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from cyberrank_e2e.utils.timing import now_ms


@dataclass(frozen=True)
class Attachment:
    name: str
    media_type: str
    body: Union[bytes, str]


@dataclass
class ScenarioContext:
    name: str = ""
    data: Dict[str, Any] = field(default_factory=dict)
    current_page: Optional[Any] = None
    attachments: List[Attachment] = field(default_factory=list)
    started_ms: int = field(default_factory=now_ms)
    failure_captured: bool = False

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def require(self, key: str) -> Any:
        """Like get(), but a missing key is a test-authoring error."""
        if key not in self.data:
            raise KeyError(f"scenario context has no {key!r}; an earlier step must set it")
        return self.data[key]

    def attach(self, body: Union[bytes, str], media_type: str = "text/plain", name: str = "") -> Attachment:
        att = Attachment(name=name or media_type, media_type=media_type, body=body)
        self.attachments.append(att)
        return att

    def elapsed_ms(self) -> int:
        return max(0, now_ms() - self.started_ms)

    def clear(self) -> None:
        self.data.clear()
        self.current_page = None
        self.attachments.clear()
        self.failure_captured = False
