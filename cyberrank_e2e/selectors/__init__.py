# cyberrank_e2e/selectors/__init__.py
"""
Selectors package
-----------------
Selector candidates, pure element filters, and the multi-candidate fallback
locator built on the polling core.
"""

from .candidate import SelectorCandidate, SelectorKind, candidates
from .locator import Found, NotFound, LocateResult, locate_with_fallback, probe, try_locate

__all__ = [
    "SelectorCandidate",
    "SelectorKind",
    "candidates",
    "Found",
    "NotFound",
    "LocateResult",
    "locate_with_fallback",
    "probe",
    "try_locate",
]
