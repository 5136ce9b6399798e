# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

from __future__ import annotations

from importlib.metadata import version

from hellodeploy._config import HelloDeployConfig, load_config
from hellodeploy.deployment import build_image, deploy, run_args
from hellodeploy.errors import (
    BuildContextNotFound,
    CommandFailed,
    EngineNotFound,
    HelloDeployError,
    PowerShellNotFound,
    ProvisionStepFailed,
    UnsupportedPlatform,
)
from hellodeploy.provisioning import build_plan, check_platform, derive_site, provision
from hellodeploy.recipes import RecipeInfo, list_recipes, resolve_recipe
from hellodeploy.types import (
    CommandResult,
    DeployReport,
    DeployTarget,
    ProvisionReport,
    ProvisionStep,
    SiteSettings,
)

__version__ = version("hellodeploy")


def get_version() -> str:
    """Return the hellodeploy package version string."""
    return __version__


__all__ = [
    "BuildContextNotFound",
    "CommandFailed",
    "CommandResult",
    "DeployReport",
    "DeployTarget",
    "EngineNotFound",
    "HelloDeployConfig",
    "HelloDeployError",
    "PowerShellNotFound",
    "ProvisionReport",
    "ProvisionStep",
    "ProvisionStepFailed",
    "RecipeInfo",
    "SiteSettings",
    "UnsupportedPlatform",
    "__version__",
    "build_image",
    "build_plan",
    "check_platform",
    "deploy",
    "derive_site",
    "get_version",
    "list_recipes",
    "load_config",
    "provision",
    "resolve_recipe",
    "run_args",
]
