# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""CLI entry point for hellodeploy."""

from __future__ import annotations

import dataclasses

import click

from hellodeploy import __version__


@dataclasses.dataclass
class CliContext:
    """Shared state passed through Click's context object."""

    config_dir: str | None = None
    verbose: bool = False


@click.group()
@click.option(
    "--config",
    "config_dir",
    envvar="HELLODEPLOY_CONFIG_DIR",
    default=None,
    type=click.Path(file_okay=False),
    help="Directory holding hellodeploy.yaml (default: current directory).",
)
@click.option("--verbose", "-v", is_flag=True, help="Echo each external command before it runs.")
@click.version_option(version=__version__, prog_name="hellodeploy")
@click.pass_context
def cli(ctx: click.Context, config_dir: str | None, *, verbose: bool) -> None:
    """Build, ship and host the HelloWorld web application."""
    ctx.ensure_object(dict)
    ctx.obj = CliContext(config_dir=config_dir, verbose=verbose)


# --- Register commands ---

from hellodeploy.cli._commands import (  # noqa: E402
    build_cmd,
    deploy_cmd,
    logs_cmd,
    provision_cmd,
    recipes_cmd,
)

cli.add_command(build_cmd)
cli.add_command(deploy_cmd)
cli.add_command(provision_cmd)
cli.add_command(recipes_cmd)
cli.add_command(logs_cmd)
