"""Helpers for writing the deployment heartbeat file."""

from __future__ import annotations

import datetime as _dt
import json
import pathlib
from typing import Sequence

from .utils import unique

__all__ = ["RunReport"]


def _utc_now_iso() -> str:
    """Return a second-precision UTC timestamp with a ``Z`` suffix."""

    return _dt.datetime.now(_dt.timezone.utc).replace(microsecond=0, tzinfo=None).isoformat() + "Z"


def _coerce_errors(messages: Sequence[str], *, limit: int = 20) -> list[str]:
    """Clean and deduplicate error strings while preserving order."""

    cleaned = (str(raw or "").strip() for raw in messages)
    return list(unique(text for text in cleaned if text))[:limit]


class RunReport:
    """Accumulate completed stages and errors, persisted to ``<dir>/<name>.json``."""

    def __init__(self, name: str, health_dir: pathlib.Path, *, task: str = "", today: _dt.date | None = None) -> None:
        self.name = name
        self.health_dir = health_dir
        self.task = task
        self.today = today
        self.stages: list[str] = []
        self.errors: list[str] = []

    def record_stage(self, stage: str) -> None:
        self.stages.append(stage)

    def record_error(self, message: str) -> None:
        text = str(message or "").strip()
        if text:
            self.errors.append(text)

    @property
    def has_errors(self) -> bool:
        return bool(_coerce_errors(self.errors))

    def write(self, *, last_run: str | None = None) -> pathlib.Path:
        path = self.health_dir / f"{self.name}.json"
        payload = {
            "last_run": last_run or _utc_now_iso(),
            "task": self.task,
            "today": self.today.isoformat() if self.today else None,
            "ok": not self.has_errors,
            "stages": list(self.stages),
            "errors": _coerce_errors(self.errors),
        }
        self.health_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
        return path
