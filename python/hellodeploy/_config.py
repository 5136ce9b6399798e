# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Configuration loading with install-level -> project-level precedence."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

import yaml

from hellodeploy.recipes import DEFAULT_PROJECT

_CONFIG_FILENAME = "hellodeploy.yaml"
_SECTIONS = ("deploy", "site", "logging")
_INT_FIELDS = frozenset({"host_port", "http_port", "https_port"})
_BOOL_FIELDS = frozenset({"auto_log"})
_BOOL_WORDS = {"true": True, "yes": True, "on": True, "false": False, "no": False, "off": False}


@dataclasses.dataclass(frozen=True)
class HelloDeployConfig:
    """Resolved hellodeploy configuration."""

    engine: str | None = None
    registry_user: str = "hellouser"
    image: str = "helloworld"
    tag: str = "latest"
    host_port: int = 8080
    recipe: str = "aspnet"
    project: str = DEFAULT_PROJECT
    site_name: str = "HelloWorld"
    app_name: str = "api"
    account_name: str = "helloworld_svc"
    http_port: int = 80
    https_port: int = 443
    auto_log: bool = True
    history_path: str = ""


def install_dir() -> Path:
    """Return the install-level ``~/.hellodeploy`` directory."""
    return Path.home() / ".hellodeploy"


def load_config(project_root: Path | None = None) -> HelloDeployConfig:
    """Load configuration with precedence: env > project > install > defaults.

    1. Start with defaults
    2. Overlay install-level ``~/.hellodeploy/hellodeploy.yaml`` (if exists)
    3. Overlay project-level ``hellodeploy.yaml`` in *project_root* or cwd
    4. ``HELLODEPLOY_ENGINE`` overrides the container engine
    """
    overrides: dict[str, Any] = {}

    install_config = install_dir() / _CONFIG_FILENAME
    if install_config.is_file():
        _merge_yaml(overrides, install_config)

    project_config = (project_root or Path.cwd()) / _CONFIG_FILENAME
    if project_config.is_file():
        _merge_yaml(overrides, project_config)

    engine = os.environ.get("HELLODEPLOY_ENGINE")
    if engine:
        overrides["engine"] = engine

    return _build_config(overrides)


def _merge_yaml(target: dict[str, Any], path: Path) -> None:
    """Parse a YAML file and merge its values into *target*."""
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError:
        return
    if not isinstance(data, dict):
        return

    for key, value in data.items():
        if key in _SECTIONS and isinstance(value, dict):
            # Flatten section sub-keys into top-level config keys
            target.update(value)
        else:
            target[key] = value


def _coerce(name: str, value: Any) -> Any:
    """Return *value* as the field's type, or ``None`` if it cannot be used.

    YAML hands back whatever the user typed: ``host_port: "9090"`` is a
    string and ``tag: 1.0`` is a float.
    """
    if name in _INT_FIELDS:
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.strip().isdigit():
            return int(value)
        return None
    if name in _BOOL_FIELDS:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return _BOOL_WORDS.get(value.strip().lower())
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value if isinstance(value, str) else None


def _build_config(overrides: dict[str, Any]) -> HelloDeployConfig:
    """Build a ``HelloDeployConfig`` from a dict of overrides.

    Values of the wrong type are dropped so the field keeps its default.
    """
    field_names = {f.name for f in dataclasses.fields(HelloDeployConfig)}
    filtered = {}
    for key, value in overrides.items():
        if key not in field_names:
            continue
        coerced = _coerce(key, value)
        if coerced is not None:
            filtered[key] = coerced
    return HelloDeployConfig(**filtered)
