# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Rich output formatters for the CLI."""

from __future__ import annotations

import dataclasses
import json
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hellodeploy.errors import HelloDeployError
    from hellodeploy.recipes import RecipeInfo
    from hellodeploy.types import DeployReport, ProvisionReport

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

_console = Console()
_err_console = Console(stderr=True)


def format_deploy_report(report: DeployReport, *, json_output: bool = False) -> None:
    """Print a deployment summary as a rich panel or JSON."""
    if json_output:
        click_echo_json(dataclasses.asdict(report))
        return

    lines = [
        f"[bold]Image:[/bold]      {report.image_ref}",
        f"[bold]Container:[/bold]  {report.container_name}",
        f"[bold]ID:[/bold]         {report.container_id[:12]}",
        f"[bold]Ports:[/bold]      {report.port_mapping}",
    ]
    _console.print(Panel("\n".join(lines), title="[cyan]Deployed[/cyan]", expand=False))


def format_provision_report(report: ProvisionReport, *, json_output: bool = False) -> None:
    """Print the provisioning plan (and results, if executed) as a table or JSON."""
    if json_output:
        data: dict[str, object] = {
            "site": report.site.public_dict(),
            "dry_run": report.dry_run,
            "steps": [dataclasses.asdict(s) for s in report.steps],
            "results": [dataclasses.asdict(r) for r in report.results],
        }
        click_echo_json(data)
        return

    title = "Provisioning Plan (dry run)" if report.dry_run else "Provisioning"
    table = Table(title=title)
    table.add_column("#", style="dim")
    table.add_column("Step", style="cyan")
    table.add_column("Action")
    table.add_column("Status")

    for i, step in enumerate(report.steps, start=1):
        code = report.results[i - 1].exit_code if i <= len(report.results) else None
        if code is None:
            status = "[dim]planned[/dim]"
        elif code == 0:
            status = "[green]done[/green]"
        else:
            status = f"[red]exit {code}[/red]"
        table.add_row(str(i), step.name, step.description, status)

    _console.print(table)


def format_recipes(recipes: list[RecipeInfo], *, json_output: bool = False) -> None:
    """Print the bundled build recipes."""
    if json_output:
        click_echo_json([dataclasses.asdict(r) for r in recipes])
        return

    table = Table(title="Build Recipes")
    table.add_column("Name", style="cyan")
    table.add_column("Runtime Image")
    table.add_column("Description")
    for r in recipes:
        table.add_row(r.name, r.runtime_image, r.description)
    _console.print(table)


def format_history(entries: list[dict[str, object]]) -> None:
    """Print history entries as a Rich table."""
    table = Table(title="Command History")
    table.add_column("Type", style="cyan")
    table.add_column("Step")
    table.add_column("Command")
    table.add_column("Exit")
    table.add_column("Duration")
    table.add_column("Timestamp", style="dim")

    for entry in entries:
        exit_code = str(entry.get("exit_code", ""))
        exit_style = "green" if exit_code == "0" else "red" if exit_code else ""
        dur = entry.get("duration_ms")
        dur_str = f"{dur:.0f}ms" if isinstance(dur, (int, float)) else ""
        table.add_row(
            str(entry.get("type", "")),
            str(entry.get("step", "")),
            escape(str(entry.get("command", ""))[:60]),
            f"[{exit_style}]{exit_code}[/{exit_style}]" if exit_style else exit_code,
            dur_str,
            str(entry.get("timestamp", "")),
        )

    _console.print(table)


def format_error(err: HelloDeployError) -> None:
    """Print an error as a rich panel with suggestions."""
    title, suggestion = _error_info(err)
    lines = [str(err)]
    if suggestion:
        lines.append(f"\n[dim]{suggestion}[/dim]")

    panel = Panel(
        "\n".join(lines),
        title=f"[red]{title}[/red]",
        expand=False,
    )
    _err_console.print(panel)


def _error_info(err: HelloDeployError) -> tuple[str, str]:
    """Map an error to a title and suggestion string."""
    from hellodeploy.errors import (  # noqa: PLC0415
        BuildContextNotFound,
        CommandFailed,
        EngineNotFound,
        PowerShellNotFound,
        ProvisionStepFailed,
        UnsupportedPlatform,
    )

    if isinstance(err, EngineNotFound):
        return "Engine Not Found", "Install Docker or Podman, or set HELLODEPLOY_ENGINE."
    if isinstance(err, PowerShellNotFound):
        return "PowerShell Not Found", "Install PowerShell 7 (pwsh)."
    if isinstance(err, UnsupportedPlatform):
        return "Unsupported Platform", "Run on the IIS host, or use --dry-run."
    if isinstance(err, BuildContextNotFound):
        return "Build Context Not Found", "CONTEXT must hold the project .csproj (see --project)."
    if isinstance(err, ProvisionStepFailed):
        return "Provisioning Failed", "Fix the cause and re-run the provisioning."
    if isinstance(err, CommandFailed):
        return "Command Failed", "Re-run with --verbose to see each command."
    return "Error", ""


def print_success(msg: str) -> None:
    """Print a success message with a checkmark."""
    _console.print(f"[green]\u2713[/green] {msg}")


def echo_command(command: str) -> None:
    """Print a command about to run (verbose mode)."""
    _err_console.print(f"[dim]$ {escape(command)}[/dim]", highlight=False)


def click_echo_json(data: object) -> None:
    """Serialize data to JSON and echo to stdout."""
    sys.stdout.write(json.dumps(data, indent=2, default=str) + "\n")
