"""Shared fixtures for hellodeploy tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest
from hellodeploy.types import CommandResult


class FakeRunner:
    """Records commands instead of running them.

    Results are keyed by step name, or by the engine sub-command
    (``pull``, ``run``, ...) for container commands.
    """

    def __init__(self, results: dict[str, tuple[int, str, str]] | None = None) -> None:
        self.calls: list[dict[str, Any]] = []
        self._results = dict(results or {})

    def run(
        self,
        argv: list[str],
        *,
        env: dict[str, str] | None = None,
        display: str | None = None,
        step: str = "",
    ) -> CommandResult:
        self.calls.append({"argv": list(argv), "env": env, "display": display, "step": step})
        key = step or argv[1]
        code, stdout, stderr = self._results.get(key, (0, "", ""))
        return CommandResult(
            command=display or " ".join(argv),
            exit_code=code,
            stdout=stdout,
            stderr=stderr,
        )

    @property
    def argvs(self) -> list[list[str]]:
        return [c["argv"] for c in self.calls]


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``~`` at a temp dir and clear hellodeploy environment overrides."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    for var in ("HELLODEPLOY_ENGINE", "HELLODEPLOY_CONFIG_DIR", "HELLODEPLOY_ACCOUNT_PASSWORD"):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def fake_runner() -> Callable[..., FakeRunner]:
    """Factory for :class:`FakeRunner` instances."""
    return FakeRunner


@pytest.fixture
def tools_on_path(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    """Make only the given executables visible to ``shutil.which``."""

    def _set(*names: str) -> None:
        available = set(names)
        monkeypatch.setattr(
            "hellodeploy._runner.shutil.which",
            lambda name: f"/usr/bin/{name}" if name in available else None,
        )

    return _set
