# cyberrank_e2e/selectors/filters.py
"""Element snapshot filters
--------------------------
"Find all buttons, keep the one whose text says Confirm" split into two
halves: `snapshot_all` reads what the driver sees once, and the predicates
below decide, without touching a browser.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence

from cyberrank_e2e.selectors.candidate import SelectorCandidate

Predicate = Callable[["ElementSnapshot"], bool]


@dataclass(frozen=True)
class ElementSnapshot:
    handle: Any
    text: str = ""
    attributes: Mapping[str, Optional[str]] = field(default_factory=dict)
    visible: bool = True

    def attr(self, name: str) -> Optional[str]:
        return self.attributes.get(name)


# ---------- Predicates ----------

def text_contains_any(*keywords: str, case_sensitive: bool = False) -> Predicate:
    words = keywords if case_sensitive else tuple(k.lower() for k in keywords)

    def _pred(s: ElementSnapshot) -> bool:
        text = s.text if case_sensitive else s.text.lower()
        return bool(text) and any(w in text for w in words)

    return _pred


def text_contains_all(*keywords: str) -> Predicate:
    return lambda s: all(k in s.text for k in keywords)


def text_excludes(*keywords: str) -> Predicate:
    return lambda s: not any(k in s.text for k in keywords)


def text_equals(value: str, *, strip: bool = True) -> Predicate:
    return lambda s: (s.text.strip() if strip else s.text) == value


def attribute_contains(name: str, fragment: str) -> Predicate:
    def _pred(s: ElementSnapshot) -> bool:
        value = s.attr(name)
        return value is not None and fragment in value

    return _pred


def is_visible(s: ElementSnapshot) -> bool:
    return s.visible


def all_of(*predicates: Predicate) -> Predicate:
    return lambda s: all(p(s) for p in predicates)


def any_of(*predicates: Predicate) -> Predicate:
    return lambda s: any(p(s) for p in predicates)


# ---------- Pure filtering ----------

def select(snapshots: Iterable[ElementSnapshot], predicate: Predicate) -> List[ElementSnapshot]:
    return [s for s in snapshots if predicate(s)]


def first(snapshots: Iterable[ElementSnapshot], predicate: Predicate) -> Optional[ElementSnapshot]:
    for s in snapshots:
        if predicate(s):
            return s
    return None


# ---------- Driver bridge ----------

async def snapshot_all(
    driver,
    candidate: SelectorCandidate,
    *,
    attributes: Sequence[str] = (),
    within: Any = None,
    with_text: bool = True,
) -> List[ElementSnapshot]:
    """Read text, visibility and the requested attributes of every match once."""
    out: List[ElementSnapshot] = []
    for handle in await driver.find_all(candidate, within=within):
        text = await driver.get_text(handle) if with_text else ""
        attrs = {name: await driver.get_attribute(handle, name) for name in attributes}
        out.append(
            ElementSnapshot(
                handle=handle,
                text=text or "",
                attributes=attrs,
                visible=await driver.is_visible(handle),
            )
        )
    return out
