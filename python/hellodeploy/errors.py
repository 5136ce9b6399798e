# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

from __future__ import annotations

import sys


class HelloDeployError(Exception):
    """Base exception for all hellodeploy errors."""


class EngineNotFound(HelloDeployError):
    """No container engine CLI found on PATH."""

    def __init__(self) -> None:
        if sys.platform == "win32":
            hint = "Install Docker Desktop and make sure docker.exe is on PATH."
        else:
            hint = "Install Docker or Podman and make sure it is on PATH."
        super().__init__(f"No container engine found. {hint}")


class PowerShellNotFound(HelloDeployError):
    """Neither ``powershell`` nor ``pwsh`` is available."""

    def __init__(self) -> None:
        super().__init__("PowerShell not found. Host provisioning requires powershell.exe or pwsh.")


class UnsupportedPlatform(HelloDeployError):
    """Host provisioning attempted on a non-Windows machine."""

    def __init__(self, platform: str) -> None:
        self.platform = platform
        super().__init__(f"IIS provisioning requires Windows (running on {platform})")


class BuildContextNotFound(HelloDeployError):
    """Build context directory does not exist."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Build context not found: {path}")


class CommandFailed(HelloDeployError):
    """An external command exited with a non-zero status."""

    def __init__(self, command: str, exit_code: int, stderr: str = "") -> None:
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        msg = f"Command failed with exit code {exit_code}: {command}"
        detail = stderr.strip()
        if detail:
            msg = f"{msg}\n{detail}"
        super().__init__(msg)


class ProvisionStepFailed(CommandFailed):
    """A provisioning step failed. Earlier steps are left in place."""

    def __init__(self, step: str, exit_code: int, stderr: str = "") -> None:
        self.step = step
        super().__init__(f"provisioning step '{step}'", exit_code, stderr)
