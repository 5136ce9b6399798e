# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""CLI command implementations."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

import click

if TYPE_CHECKING:
    from hellodeploy._config import HelloDeployConfig
    from hellodeploy._runner import CommandRunner
    from hellodeploy.cli.main import CliContext
    from hellodeploy.types import DeployTarget

from hellodeploy.cli._output import (
    echo_command,
    format_deploy_report,
    format_error,
    format_provision_report,
    print_success,
)

_DRY_RUN_PASSWORD = "dry-run"  # nosec B105


def _get_ctx(ctx: click.Context) -> CliContext:
    """Extract the CliContext from Click's context object."""
    return ctx.obj  # type: ignore[no-any-return]


def _load_config(cli_ctx: CliContext) -> HelloDeployConfig:
    from hellodeploy._config import load_config  # noqa: PLC0415

    root = Path(cli_ctx.config_dir) if cli_ctx.config_dir else None
    return load_config(root)


def _make_runner(cli_ctx: CliContext, config: HelloDeployConfig, kind: str) -> CommandRunner:
    """Build a runner that records history and echoes commands when verbose."""
    from hellodeploy._config import install_dir  # noqa: PLC0415
    from hellodeploy._logger import HISTORY_FILENAME, HistoryLogger  # noqa: PLC0415
    from hellodeploy._runner import CommandRunner  # noqa: PLC0415

    history = Path(config.history_path) if config.history_path else install_dir() / HISTORY_FILENAME
    logger = HistoryLogger(history, enabled=config.auto_log)
    return CommandRunner(
        kind=kind,
        logger=logger,
        echo=echo_command if cli_ctx.verbose else None,
    )


def _image_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options that identify the image to build or run."""
    options = [
        click.option("--user", "registry_user", default=None, help="Registry username."),
        click.option("--image", default=None, help="Image name."),
        click.option("--tag", default=None, help="Image tag."),
        click.option("--engine", default=None, help="Container engine CLI (docker or podman)."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _target(
    config: HelloDeployConfig,
    *,
    registry_user: str | None,
    image: str | None,
    tag: str | None,
    host_port: int | None = None,
) -> DeployTarget:
    """Merge CLI options over configuration into a :class:`DeployTarget`."""
    from hellodeploy.types import DeployTarget  # noqa: PLC0415

    return DeployTarget(
        registry_user=registry_user if registry_user is not None else config.registry_user,
        image=image if image is not None else config.image,
        tag=tag if tag is not None else config.tag,
        host_port=host_port if host_port is not None else config.host_port,
    )


# ---------------------------------------------------------------------------
# Container commands
# ---------------------------------------------------------------------------


@click.command("deploy")
@_image_options
@click.option("--host-port", type=int, default=None, help="Host port for container port 8080.")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
def deploy_cmd(  # noqa: PLR0913
    ctx: click.Context,
    *,
    registry_user: str | None,
    image: str | None,
    tag: str | None,
    engine: str | None,
    host_port: int | None,
    json_output: bool,
) -> None:
    """Pull the image and (re)start its container."""
    import hellodeploy  # noqa: PLC0415

    cli_ctx = _get_ctx(ctx)
    config = _load_config(cli_ctx)
    try:
        target = _target(
            config, registry_user=registry_user, image=image, tag=tag, host_port=host_port
        )
        report = hellodeploy.deploy(
            target,
            engine=engine or config.engine,
            runner=_make_runner(cli_ctx, config, "deploy"),
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    except hellodeploy.HelloDeployError as exc:
        format_error(exc)
        raise SystemExit(1) from exc
    format_deploy_report(report, json_output=json_output)


@click.command("build")
@click.argument("context", required=False, default=".", type=click.Path(file_okay=False))
@_image_options
@click.option("--recipe", default=None, help="Build recipe (see 'hellodeploy recipes').")
@click.option("--project", default=None, help="Project name (<name>.csproj in CONTEXT).")
@click.option("--push", is_flag=True, help="Push the image after building.")
@click.pass_context
def build_cmd(  # noqa: PLR0913
    ctx: click.Context,
    context: str,
    *,
    registry_user: str | None,
    image: str | None,
    tag: str | None,
    engine: str | None,
    recipe: str | None,
    project: str | None,
    push: bool,
) -> None:
    """Build the application image from CONTEXT (default: current directory)."""
    import hellodeploy  # noqa: PLC0415

    cli_ctx = _get_ctx(ctx)
    config = _load_config(cli_ctx)
    target = _target(config, registry_user=registry_user, image=image, tag=tag)
    recipe_name = recipe if recipe is not None else config.recipe

    click.echo(f"Building {target.image_ref} ({recipe_name}) ...")
    try:
        hellodeploy.build_image(
            target,
            Path(context),
            recipe=recipe_name,
            push=push,
            project=project if project is not None else config.project,
            engine=engine or config.engine,
            runner=_make_runner(cli_ctx, config, "build"),
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    except hellodeploy.HelloDeployError as exc:
        format_error(exc)
        raise SystemExit(1) from exc

    print_success(f"Built {target.image_ref}")
    if push:
        print_success(f"Pushed {target.image_ref}")


@click.command("recipes")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
def recipes_cmd(*, json_output: bool) -> None:
    """List bundled build recipes."""
    from hellodeploy.cli._output import format_recipes  # noqa: PLC0415
    from hellodeploy.recipes import list_recipes  # noqa: PLC0415

    format_recipes(list_recipes(), json_output=json_output)


# ---------------------------------------------------------------------------
# Host provisioning
# ---------------------------------------------------------------------------


@click.command("provision")
@click.option(
    "--password",
    envvar="HELLODEPLOY_ACCOUNT_PASSWORD",
    default=None,
    help="Service-account password (prompted if omitted).",
)
@click.option("--site-name", default=None, help="IIS website name.")
@click.option("--app-name", default=None, help="Sub-application name.")
@click.option("--account-name", default=None, help="Local service account.")
@click.option("--hostname", default=None, help="Host header (default: <site>.local).")
@click.option("--app-pool", default=None, help="Application pool (default: <site>AppPool).")
@click.option("--group-name", default=None, help="Local group (default: <account>_group).")
@click.option("--physical-path", default=None, help="Site folder (default: C:\\inetpub\\<site>).")
@click.option("--log-path", default=None, help="Log folder (default: C:\\inetpub\\logs\\<site>).")
@click.option("--http-port", type=int, default=None, help="HTTP binding port.")
@click.option("--https-port", type=int, default=None, help="HTTPS binding port.")
@click.option("--dry-run", is_flag=True, help="Show the plan without changing the host.")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
def provision_cmd(  # noqa: PLR0913
    ctx: click.Context,
    *,
    password: str | None,
    site_name: str | None,
    app_name: str | None,
    account_name: str | None,
    hostname: str | None,
    app_pool: str | None,
    group_name: str | None,
    physical_path: str | None,
    log_path: str | None,
    http_port: int | None,
    https_port: int | None,
    dry_run: bool,
    json_output: bool,
) -> None:
    """Provision this Windows host to serve the site through IIS."""
    import hellodeploy  # noqa: PLC0415

    cli_ctx = _get_ctx(ctx)
    config = _load_config(cli_ctx)

    if not dry_run:
        try:
            hellodeploy.check_platform()
        except hellodeploy.HelloDeployError as exc:
            format_error(exc)
            raise SystemExit(1) from exc

    if not password:
        password = (
            _DRY_RUN_PASSWORD
            if dry_run
            else click.prompt("Service-account password", hide_input=True)
        )

    try:
        site = hellodeploy.derive_site(
            password,
            site_name=site_name if site_name is not None else config.site_name,
            app_name=app_name if app_name is not None else config.app_name,
            account_name=account_name if account_name is not None else config.account_name,
            hostname=hostname,
            app_pool=app_pool,
            group_name=group_name,
            physical_path=physical_path,
            log_path=log_path,
            http_port=http_port if http_port is not None else config.http_port,
            https_port=https_port if https_port is not None else config.https_port,
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    try:
        report = hellodeploy.provision(
            site,
            dry_run=dry_run,
            runner=_make_runner(cli_ctx, config, "provision"),
        )
    except hellodeploy.HelloDeployError as exc:
        format_error(exc)
        raise SystemExit(1) from exc

    format_provision_report(report, json_output=json_output)
    if not dry_run and not json_output:
        url = f"https://{site.hostname}:{site.https_port}/"
        print_success(f"Site {site.site_name} provisioned at {url}")


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


@click.command("logs")
@click.option("--last", "last_n", type=int, default=10, help="Number of entries to show.")
@click.option(
    "--type",
    "entry_type",
    type=click.Choice(["deploy", "build", "provision"]),
    default=None,
    help="Filter by entry type.",
)
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
def logs_cmd(ctx: click.Context, *, last_n: int, entry_type: str | None, json_output: bool) -> None:
    """View the history of executed commands."""
    from hellodeploy._config import install_dir  # noqa: PLC0415
    from hellodeploy._logger import HISTORY_FILENAME, read_history  # noqa: PLC0415
    from hellodeploy.cli._output import click_echo_json, format_history  # noqa: PLC0415

    config = _load_config(_get_ctx(ctx))
    history = Path(config.history_path) if config.history_path else install_dir() / HISTORY_FILENAME
    entries = read_history(history)

    if entry_type:
        entries = [e for e in entries if e.get("type") == entry_type]

    entries = entries[-last_n:] if last_n > 0 else []

    if json_output:
        click_echo_json(entries)
        return

    if not entries:
        click.echo("No history entries found.")
        return

    format_history(entries)
