# cyberrank_e2e/capture/failure.py
from __future__ import annotations

"""Failure capture
-----------------
Runs when a step fails: screenshot + critical console errors, written to disk
and attached to the scenario before the failure surfaces.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from cyberrank_e2e.capture.console import ConsoleEntry, critical_entries, format_critical
from cyberrank_e2e.capture.metadata import MetadataBuilder
from cyberrank_e2e.capture.screenshot import ScreenshotManager
from cyberrank_e2e.context import ScenarioContext
from cyberrank_e2e.utils.config import Settings, get_settings
from cyberrank_e2e.utils.logger import get_logger

log = get_logger(__name__)


@dataclass
class FailureArtifacts:
    screenshot: Optional[Path]
    sidecar: Optional[Path]
    console_report: str


async def capture_failure(
    driver,
    ctx: ScenarioContext,
    *,
    error: BaseException,
    step: Optional[str] = None,
    console: Iterable[ConsoleEntry] = (),
    settings: Optional[Settings] = None,
) -> FailureArtifacts:
    """
    Screenshot the page and collect critical console errors, attaching both to `ctx`.

    A capture that itself fails is logged and skipped; it must not replace the
    original step error.
    """
    s = settings or get_settings()
    entries = list(console)
    report = format_critical(entries)
    screenshot_path: Optional[Path] = None
    sidecar: Optional[Path] = None

    try:
        cap = await ScreenshotManager(s.SCREENSHOT_DIR, settings=s).capture(driver, f"failed-{ctx.name or 'scenario'}")
        ctx.attach(cap.png, "image/png", name=cap.path.name)
        screenshot_path = cap.path
        builder = MetadataBuilder(s.SCREENSHOT_DIR)
        meta = builder.from_capture(
            cap,
            scenario=ctx.name,
            step=step,
            error=error,
            console=[str(e) for e in critical_entries(entries)],
            extra={"elapsed_ms": ctx.elapsed_ms()},
        )
        sidecar = builder.record(meta)
        log.info(f"Saved failure screenshot: {cap.path}")
    except Exception as cap_err:
        log.warning(f"Failure screenshot could not be captured: {cap_err!r}")

    if report:
        ctx.attach(report, "text/plain", name="console-errors")

    return FailureArtifacts(screenshot=screenshot_path, sidecar=sidecar, console_report=report)


async def capture_failure_once(driver, ctx: ScenarioContext, **kwargs) -> Optional[FailureArtifacts]:
    """capture_failure, unless this scenario already has its failure evidence."""
    if ctx.failure_captured:
        log.debug(f"Failure already captured for scenario: {ctx.name}")
        return None
    ctx.failure_captured = True
    return await capture_failure(driver, ctx, **kwargs)
