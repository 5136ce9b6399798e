# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Fire-and-forget command history on disk.

Every external command hellodeploy runs is appended as one JSON line to
``history.jsonl``. Secrets never reach the history because they are only
ever passed to child processes through the environment.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from hellodeploy.types import CommandResult

HISTORY_FILENAME = "history.jsonl"


class HistoryLogger:
    """Appends executed commands to a JSONL history file."""

    def __init__(self, history_path: Path, *, enabled: bool = True) -> None:
        self._history_path = history_path
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        """Whether logging is active."""
        return self._enabled

    @property
    def path(self) -> Path:
        return self._history_path

    def log_command(
        self,
        kind: str,
        result: CommandResult,
        started_at: datetime,
        *,
        step: str = "",
    ) -> None:
        """Record a completed command."""
        entry: dict[str, object] = {
            "type": kind,
            "command": result.command,
            "exit_code": result.exit_code,
            "duration_ms": round(result.duration_ms, 1),
            "timestamp": started_at.isoformat(),
        }
        if step:
            entry["step"] = step
        self.append_history(entry)

    def append_history(self, entry: dict[str, object]) -> None:
        """Append one JSONL line to the history file."""
        if not self._enabled:
            return
        self._history_path.parent.mkdir(parents=True, exist_ok=True)
        with self._history_path.open("a") as f:
            f.write(json.dumps(entry, default=str) + "\n")


def read_history(history_path: Path) -> list[dict[str, object]]:
    """Read all entries from a JSONL history file, skipping malformed lines."""
    if not history_path.is_file():
        return []
    entries: list[dict[str, object]] = []
    for raw in history_path.read_text().splitlines():
        stripped = raw.strip()
        if not stripped:
            continue
        try:
            entry = json.loads(stripped)
        except json.JSONDecodeError:
            continue
        if isinstance(entry, dict):
            entries.append(entry)
    return entries


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)
