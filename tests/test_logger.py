"""Unit tests for _logger.py: command history."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from hellodeploy._logger import HistoryLogger, read_history, utcnow
from hellodeploy.types import CommandResult

if TYPE_CHECKING:
    from pathlib import Path

_STARTED = datetime(2026, 2, 10, 14, 30, 0, tzinfo=timezone.utc)


def test_logger_enabled_by_default(tmp_path: Path) -> None:
    logger = HistoryLogger(tmp_path / "history.jsonl")
    assert logger.enabled is True
    assert logger.path == tmp_path / "history.jsonl"


def test_log_command_appends_jsonl(tmp_path: Path) -> None:
    path = tmp_path / "sub" / "history.jsonl"
    logger = HistoryLogger(path)
    result = CommandResult(command="docker pull a/b:c", exit_code=0, duration_ms=47.54)

    logger.log_command("deploy", result, _STARTED)
    logger.log_command("deploy", result, _STARTED)

    lines = path.read_text().splitlines()
    assert len(lines) == 2
    entry = json.loads(lines[0])
    assert entry == {
        "type": "deploy",
        "command": "docker pull a/b:c",
        "exit_code": 0,
        "duration_ms": 47.5,
        "timestamp": "2026-02-10T14:30:00+00:00",
    }


def test_log_command_with_step(tmp_path: Path) -> None:
    path = tmp_path / "history.jsonl"
    logger = HistoryLogger(path)
    result = CommandResult(command="pwsh -Command <user>", exit_code=1)
    logger.log_command("provision", result, _STARTED, step="user")
    assert json.loads(path.read_text())["step"] == "user"


def test_disabled_logger_writes_nothing(tmp_path: Path) -> None:
    path = tmp_path / "history.jsonl"
    logger = HistoryLogger(path, enabled=False)
    logger.log_command("deploy", CommandResult(command="x", exit_code=0), _STARTED)
    assert not path.exists()


def test_read_history_missing_file(tmp_path: Path) -> None:
    assert read_history(tmp_path / "nope.jsonl") == []


def test_read_history_skips_bad_lines(tmp_path: Path) -> None:
    path = tmp_path / "history.jsonl"
    path.write_text('{"type": "deploy"}\n\nnot json\n[1, 2]\n{"type": "build"}\n')
    entries = read_history(path)
    assert [e["type"] for e in entries] == ["deploy", "build"]


def test_utcnow_is_aware() -> None:
    assert utcnow().tzinfo is not None
