# cyberrank_e2e/capture/__init__.py
"""
Failure capture package: screenshots, console error collection and metadata.
"""

from .console import ConsoleCollector, ConsoleEntry, critical_entries, format_critical
from .failure import FailureArtifacts, capture_failure
from .screenshot import CaptureResult, ScreenshotManager

__all__ = [
    "ConsoleCollector",
    "ConsoleEntry",
    "critical_entries",
    "format_critical",
    "FailureArtifacts",
    "capture_failure",
    "CaptureResult",
    "ScreenshotManager",
]
