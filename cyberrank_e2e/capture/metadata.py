# cyberrank_e2e/capture/metadata.py
from __future__ import annotations

"""Failure metadata
------------------
Sidecar JSON next to each failure screenshot, plus a failures.jsonl stream
for quick scanning across a run.
"""

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from cyberrank_e2e.capture.screenshot import CaptureResult


@dataclass
class FailureMeta:
    scenario: str
    step: Optional[str]
    error_type: str
    error: str
    screenshot: str
    width: int
    height: int
    page_url: str
    page_title: str
    ts: str
    console: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)


class MetadataBuilder:
    def __init__(self, out_dir: Path):
        self.out_dir = out_dir
        self.jsonl_path = out_dir / "failures.jsonl"

    def from_capture(
        self,
        cap: CaptureResult,
        *,
        scenario: str,
        step: Optional[str],
        error: BaseException,
        console: Optional[List[str]] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> FailureMeta:
        path = cap.path.relative_to(self.out_dir) if cap.path.is_relative_to(self.out_dir) else cap.path
        return FailureMeta(
            scenario=scenario,
            step=step,
            error_type=type(error).__name__,
            error=str(error),
            screenshot=str(path),
            width=cap.width,
            height=cap.height,
            page_url=cap.url,
            page_title=cap.title,
            ts=cap.ts,
            console=list(console or []),
            extra=extra or {},
        )

    def write_sidecar(self, meta: FailureMeta) -> Path:
        img_path = Path(meta.screenshot)
        if not img_path.is_absolute():
            img_path = self.out_dir / img_path
        sidecar = img_path.with_suffix(img_path.suffix + ".json")
        sidecar.write_text(json.dumps(asdict(meta), indent=2), encoding="utf-8")
        return sidecar

    def append_jsonl(self, meta: FailureMeta) -> None:
        self.jsonl_path.parent.mkdir(parents=True, exist_ok=True)
        with self.jsonl_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(asdict(meta), ensure_ascii=False) + "\n")

    def record(self, meta: FailureMeta) -> Path:
        sidecar = self.write_sidecar(meta)
        self.append_jsonl(meta)
        return sidecar
