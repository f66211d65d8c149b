# cyberrank_e2e/selectors/candidate.py
from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SelectorKind(str, Enum):
    css = "css"
    text = "text"
    xpath = "xpath"
    role = "role"


_PAIRS = {"(": ")", "[": "]", "{": "}"}


def _css_is_balanced(value: str) -> bool:
    stack: list[str] = []
    quote: Optional[str] = None
    escaped = False
    for ch in value:
        if escaped:
            escaped = False
            continue
        if ch == "\\":
            escaped = True
            continue
        if quote:
            if ch == quote:
                quote = None
            continue
        if ch in ("'", '"'):
            quote = ch
        elif ch in _PAIRS:
            stack.append(_PAIRS[ch])
        elif ch in _PAIRS.values():
            if not stack or stack.pop() != ch:
                return False
    return not stack and quote is None


def parse_role_value(value: str) -> Tuple[str, Optional[str]]:
    """
    Accept a few simple role notations:

    - "button"                      → role="button"
    - "button|Create Project"       → role="button", name="Create Project"
    - "button name=Create Project"  → same as above (space syntax)
    """
    v = value.strip()
    if "|" in v:
        role, name = v.split("|", 1)
        return role.strip(), name.strip() or None
    if " name=" in v:
        role, name = v.split(" name=", 1)
        return role.strip(), name.strip() or None
    return v, None


class SelectorCandidate(BaseModel):
    """
    One way of locating a DOM element. Tried in priority order with its siblings.

    `text` candidates match elements containing `expression` (or equal to it
    when `exact`), optionally restricted to elements of type `tag`.
    """

    model_config = ConfigDict(frozen=True)

    kind: SelectorKind = Field(default=SelectorKind.css)
    expression: str = Field(..., description="css / text / xpath / role expression")
    tag: Optional[str] = Field(default=None, description="Element type filter for text candidates")
    exact: bool = Field(default=False)

    @field_validator("expression")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("selector expression cannot be empty")
        return v

    @model_validator(mode="after")
    def _validate_by_kind(self) -> "SelectorCandidate":
        if self.kind == SelectorKind.css and not _css_is_balanced(self.expression):
            raise ValueError(f"unbalanced brackets or quotes in css selector: {self.expression!r}")
        if self.kind == SelectorKind.xpath and not self.expression.startswith(("/", "(")):
            raise ValueError(f"xpath must start with '/' or '(': {self.expression!r}")
        if self.kind == SelectorKind.role and not parse_role_value(self.expression)[0]:
            raise ValueError(f"role selector needs a role name: {self.expression!r}")
        if self.tag is not None and self.kind != SelectorKind.text:
            raise ValueError("tag applies to text candidates only")
        if self.tag is not None and not _css_is_balanced(self.tag):
            raise ValueError(f"unbalanced brackets or quotes in tag: {self.tag!r}")
        return self

    # ---------- Construction ----------

    @classmethod
    def css(cls, expression: str) -> "SelectorCandidate":
        return cls(kind=SelectorKind.css, expression=expression)

    @classmethod
    def text(cls, expression: str, *, tag: Optional[str] = None, exact: bool = False) -> "SelectorCandidate":
        return cls(kind=SelectorKind.text, expression=expression, tag=tag or None, exact=exact)

    @classmethod
    def xpath(cls, expression: str) -> "SelectorCandidate":
        return cls(kind=SelectorKind.xpath, expression=expression)

    @classmethod
    def role(cls, role: str, name: Optional[str] = None) -> "SelectorCandidate":
        return cls(kind=SelectorKind.role, expression=f"{role}|{name}" if name else role)

    @classmethod
    def parse(cls, raw: str) -> "SelectorCandidate":
        """
        Parse the compact notation used in the page-object inventories:

        - "//div[@id='x']" or "(//a)[2]"   → xpath
        - "vaadin-button*=Register"        → text contains "Register" inside <vaadin-button>
        - "vaadin-button=Save"             → text equals "Save" inside <vaadin-button>
        - "*=Beranda"                      → any element containing "Beranda"
        - "role=button|Create"             → ARIA role with accessible name
        - anything else                    → css
        """
        value = raw.strip()
        if value.startswith(("/", "(")):
            return cls.xpath(value)
        if value.startswith("role="):
            return cls(kind=SelectorKind.role, expression=value[len("role="):])
        if value.startswith("*="):
            return cls.text(value[2:])
        if "*=" in value:
            tag, text = value.split("*=", 1)
            if _css_is_balanced(tag):
                return cls.text(text, tag=tag.strip())
        if "=" in value and not any(ch in value for ch in "[]()'\""):
            tag, text = value.split("=", 1)
            if tag.strip() and " " not in tag.strip():
                return cls.text(text, tag=tag.strip(), exact=True)
        return cls.css(value)

    def __str__(self) -> str:
        if self.kind == SelectorKind.text:
            op = "=" if self.exact else "*="
            return f"text:{self.tag or ''}{op}{self.expression}"
        return f"{self.kind.value}:{self.expression}"


def candidates(*raw: str) -> Tuple[SelectorCandidate, ...]:
    """Parse an ordered candidate list, highest priority first."""
    return tuple(SelectorCandidate.parse(r) for r in raw)
