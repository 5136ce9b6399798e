# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

from __future__ import annotations

import dataclasses

CONTAINER_PORT = 8080


@dataclasses.dataclass(frozen=True)
class CommandResult:
    """Result of running one external command."""

    command: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        """Return True if the command exited successfully (exit code 0)."""
        return self.exit_code == 0


@dataclasses.dataclass(frozen=True)
class DeployTarget:
    """Image coordinates and port mapping for a deployment."""

    registry_user: str = "hellouser"
    image: str = "helloworld"
    tag: str = "latest"
    host_port: int = 8080
    container_port: int = CONTAINER_PORT
    container_name: str = ""

    @property
    def image_ref(self) -> str:
        """Fully qualified image reference, e.g. ``hellouser/helloworld:latest``."""
        return f"{self.registry_user}/{self.image}:{self.tag}"

    @property
    def name(self) -> str:
        """Container name, defaulting to the image name."""
        return self.container_name or self.image

    @property
    def port_mapping(self) -> str:
        return f"{self.host_port}:{self.container_port}"


@dataclasses.dataclass(frozen=True)
class DeployReport:
    """Outcome of a successful :func:`~hellodeploy.deployment.deploy` call."""

    image_ref: str
    container_name: str
    container_id: str
    port_mapping: str
    commands: tuple[CommandResult, ...] = ()


@dataclasses.dataclass(frozen=True)
class SiteSettings:
    """Fully resolved IIS site layout. Build with :func:`~hellodeploy.provisioning.derive_site`."""

    password: str = dataclasses.field(repr=False)
    site_name: str
    app_name: str
    account_name: str
    hostname: str
    app_pool: str
    group_name: str
    physical_path: str
    log_path: str
    http_port: int = 80
    https_port: int = 443

    @property
    def app_path(self) -> str:
        return f"{self.physical_path}\\{self.app_name}"

    def public_dict(self) -> dict[str, object]:
        """Return the settings without the password."""
        data = dataclasses.asdict(self)
        data.pop("password")
        data["app_path"] = self.app_path
        return data


@dataclasses.dataclass(frozen=True)
class ProvisionStep:
    """One named PowerShell script in the provisioning plan."""

    name: str
    description: str
    script: str


@dataclasses.dataclass(frozen=True)
class ProvisionReport:
    """Outcome of :func:`~hellodeploy.provisioning.provision`."""

    site: SiteSettings
    steps: tuple[ProvisionStep, ...]
    results: tuple[CommandResult, ...] = ()
    dry_run: bool = False
