# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Subprocess execution and tool detection.

All external tools (container engine, PowerShell) are invoked through
:class:`CommandRunner`, synchronously and one at a time.
"""

from __future__ import annotations

import os
import shlex
import shutil
import subprocess  # nosec B404
import time
from typing import TYPE_CHECKING, Callable

from hellodeploy._logger import utcnow
from hellodeploy.errors import EngineNotFound, PowerShellNotFound
from hellodeploy.types import CommandResult

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from hellodeploy._logger import HistoryLogger

_ENGINES = ("docker", "podman")
_POWERSHELLS = ("powershell", "pwsh")


def detect_engine(preferred: str | None = None) -> str:
    """Return the container engine CLI to use.

    An explicit *preferred* engine must be on PATH. Otherwise ``docker`` is
    tried first, then ``podman``.

    Raises:
        EngineNotFound: If no usable engine is on PATH.

    """
    candidates = (preferred,) if preferred else _ENGINES
    for name in candidates:
        if shutil.which(name):
            return name
    raise EngineNotFound


def detect_powershell() -> str:
    """Return ``powershell`` (Windows PowerShell) or ``pwsh``, whichever exists first."""
    for name in _POWERSHELLS:
        if shutil.which(name):
            return name
    raise PowerShellNotFound


def format_command(argv: Sequence[str]) -> str:
    """Render an argument vector as a single shell-quoted string."""
    return shlex.join(argv)


class CommandRunner:
    """Runs external commands and records them in the history."""

    def __init__(
        self,
        *,
        kind: str = "command",
        logger: HistoryLogger | None = None,
        echo: Callable[[str], None] | None = None,
    ) -> None:
        self._kind = kind
        self._logger = logger
        self._echo = echo

    def run(
        self,
        argv: Sequence[str],
        *,
        env: Mapping[str, str] | None = None,
        display: str | None = None,
        step: str = "",
    ) -> CommandResult:
        """Run *argv* to completion and return its :class:`CommandResult`.

        *env* is layered over the current environment. *display* replaces the
        rendered command in echo output and history (used for long scripts).
        A missing executable is reported as exit code 127, like a shell would.
        """
        command = display or format_command(argv)
        if self._echo is not None:
            self._echo(command)

        child_env = {**os.environ, **env} if env else None
        started_at = utcnow()
        t0 = time.monotonic()
        try:
            proc = subprocess.run(  # noqa: S603  # nosec B603
                list(argv),
                capture_output=True,
                text=True,
                check=False,
                env=child_env,
            )
            exit_code, stdout, stderr = proc.returncode, proc.stdout or "", proc.stderr or ""
        except FileNotFoundError as exc:
            exit_code, stdout, stderr = 127, "", str(exc)
        duration_ms = (time.monotonic() - t0) * 1000.0

        result = CommandResult(
            command=command,
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            duration_ms=duration_ms,
        )
        if self._logger is not None:
            self._logger.log_command(self._kind, result, started_at, step=step)
        return result
