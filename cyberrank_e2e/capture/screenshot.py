# cyberrank_e2e/capture/screenshot.py
from __future__ import annotations

"""Screenshot utilities
----------------------
Writes driver screenshots to disk with consistent, timestamped file names and
returns a structured capture result.
"""

import io
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image

from cyberrank_e2e.utils.config import Settings, get_settings
from cyberrank_e2e.utils.logger import get_logger
from cyberrank_e2e.utils.timing import measure


@dataclass
class CaptureResult:
    path: Path
    png: bytes
    width: int
    height: int
    name: str            # logical name (scenario or step label)
    url: str
    title: str
    ts: str              # ISO timestamp


class ScreenshotManager:
    """Saves PNG screenshots from a BrowserDriver under SCREENSHOT_DIR."""

    def __init__(self, out_dir: Optional[Path] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.out_dir = out_dir or self.settings.SCREENSHOT_DIR
        self.log = get_logger(__name__)

    @measure("screenshot")
    async def capture(self, driver, name: str, *, timestamped: bool = True) -> CaptureResult:
        png = await driver.screenshot()
        stamp = self._stamp() if timestamped else ""
        out_path = self._build_path(f"{name}-{stamp}" if stamp else name)
        out_path.write_bytes(png)
        w, h = self._image_size(png)
        return CaptureResult(
            path=out_path,
            png=png,
            width=w,
            height=h,
            name=name,
            url=await driver.current_url(),
            title=await driver.title(),
            ts=self._ts(),
        )

    def _build_path(self, base: str) -> Path:
        safe = "".join(ch if ch.isalnum() or ch in ("-", "_") else "_" for ch in base)
        out_path = self.out_dir / f"{safe}.png"
        out_path.parent.mkdir(parents=True, exist_ok=True)
        return out_path

    def _image_size(self, png: bytes) -> Tuple[int, int]:
        try:
            with Image.open(io.BytesIO(png)) as im:
                return im.width, im.height
        except OSError as e:
            self.log.debug(f"Could not read screenshot size: {e!r}")
            return (0, 0)

    @staticmethod
    def _stamp() -> str:
        return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%f")[:-3]

    @staticmethod
    def _ts() -> str:
        return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")
