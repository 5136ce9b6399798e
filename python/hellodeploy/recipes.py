# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Bundled Dockerfile recipes for the HelloWorld application.

Maps recipe names (``"aspnet"``, ``"aspnet-alpine"``) to the two-stage
Dockerfiles shipped inside the package.  Used by
:func:`~hellodeploy.deployment.build_image` to resolve the ``recipe`` parameter.
"""

from __future__ import annotations

import dataclasses
import pathlib

DEFAULT_PROJECT = "HelloWord"
"""Name of the .NET project (``<name>.csproj``) the recipes build by default."""


@dataclasses.dataclass(frozen=True)
class RecipeInfo:
    """Metadata for a bundled build recipe."""

    name: str
    dockerfile_dir: str
    base_image: str
    runtime_image: str
    description: str


RECIPES: dict[str, RecipeInfo] = {
    "aspnet": RecipeInfo(
        name="aspnet",
        dockerfile_dir="_images/aspnet",
        base_image="mcr.microsoft.com/dotnet/sdk:8.0",
        runtime_image="mcr.microsoft.com/dotnet/aspnet:8.0",
        description="Debian-based ASP.NET 8 runtime (~220 MB)",
    ),
    "aspnet-alpine": RecipeInfo(
        name="aspnet-alpine",
        dockerfile_dir="_images/aspnet-alpine",
        base_image="mcr.microsoft.com/dotnet/sdk:8.0-alpine",
        runtime_image="mcr.microsoft.com/dotnet/aspnet:8.0-alpine",
        description="Alpine-based ASP.NET 8 runtime (~110 MB)",
    ),
}


def resolve_recipe(name: str) -> RecipeInfo:
    """Look up a recipe by name.

    Raises:
        ValueError: If *name* is not a known recipe.

    """
    try:
        return RECIPES[name]
    except KeyError:
        known = ", ".join(sorted(RECIPES))
        msg = f"Unknown recipe {name!r}. Known recipes: {known}"
        raise ValueError(msg) from None


def list_recipes() -> list[RecipeInfo]:
    """Return all bundled recipes."""
    return list(RECIPES.values())


def get_dockerfile_path(name: str) -> pathlib.Path:
    """Return the absolute path to a recipe's ``Dockerfile``.

    The Dockerfiles live inside the package at ``hellodeploy/_images/<recipe>/``.

    Raises:
        ValueError: If *name* is not a known recipe.

    """
    info = resolve_recipe(name)
    package_dir = pathlib.Path(__file__).resolve().parent
    return package_dir / info.dockerfile_dir / "Dockerfile"
