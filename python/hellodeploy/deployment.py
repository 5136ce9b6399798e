# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Container image build and (re)deployment through the engine CLI."""

from __future__ import annotations

from pathlib import Path

from hellodeploy._runner import CommandRunner, detect_engine
from hellodeploy.errors import BuildContextNotFound, CommandFailed
from hellodeploy.recipes import DEFAULT_PROJECT, get_dockerfile_path
from hellodeploy.types import CommandResult, DeployReport, DeployTarget

_MAX_PORT = 65535


def _check_port(port: int, label: str) -> None:
    if not 1 <= port <= _MAX_PORT:
        msg = f"{label} must be between 1 and {_MAX_PORT}, got {port}"
        raise ValueError(msg)


def _check_target(target: DeployTarget) -> None:
    names = (("registry user", target.registry_user), ("image", target.image), ("tag", target.tag))
    for label, value in names:
        if not value.strip():
            msg = f"{label} must not be empty"
            raise ValueError(msg)
    _check_port(target.host_port, "host port")
    _check_port(target.container_port, "container port")


def _require(result: CommandResult) -> CommandResult:
    if not result.ok:
        raise CommandFailed(result.command, result.exit_code, result.stderr)
    return result


def run_args(target: DeployTarget) -> list[str]:
    """Return the engine arguments that start the application container."""
    _check_target(target)
    return ["run", "-d", "--name", target.name, "-p", target.port_mapping, target.image_ref]


def deploy(
    target: DeployTarget,
    *,
    engine: str | None = None,
    runner: CommandRunner | None = None,
) -> DeployReport:
    """Pull ``target.image_ref`` and replace any running container with a fresh one.

    Args:
        target: Image coordinates and host port.
        engine: Container engine CLI. Auto-detected if ``None``.
        runner: Command runner. A plain :class:`CommandRunner` if ``None``.

    Returns:
        A :class:`DeployReport` with the new container id and executed commands.

    Raises:
        EngineNotFound: If no container engine is on PATH.
        CommandFailed: If the pull or run command fails.
        ValueError: If a port is out of range.

    """
    args = run_args(target)
    exe = detect_engine(engine)
    runner = runner or CommandRunner(kind="deploy")

    results = [_require(runner.run([exe, "pull", target.image_ref]))]

    # The container may not exist yet; stop/rm failures are expected and ignored.
    results.append(runner.run([exe, "stop", target.name]))
    results.append(runner.run([exe, "rm", target.name]))

    started = _require(runner.run([exe, *args]))
    results.append(started)

    return DeployReport(
        image_ref=target.image_ref,
        container_name=target.name,
        container_id=started.stdout.strip(),
        port_mapping=target.port_mapping,
        commands=tuple(results),
    )


def build_image(
    target: DeployTarget,
    context_dir: Path,
    *,
    recipe: str = "aspnet",
    push: bool = False,
    project: str = DEFAULT_PROJECT,
    engine: str | None = None,
    runner: CommandRunner | None = None,
) -> list[CommandResult]:
    """Build ``target.image_ref`` from a bundled recipe, optionally pushing it.

    *context_dir* is the application source directory holding ``<project>.csproj``.
    *project* is passed to the Dockerfile as the ``PROJECT`` build argument.

    Raises:
        BuildContextNotFound: If *context_dir* is not a directory.
        ValueError: If *recipe* is unknown or a target or project name is blank.
        EngineNotFound: If no container engine is on PATH.
        CommandFailed: If the build or push fails.

    """
    _check_target(target)
    if not project.strip():
        msg = "project must not be empty"
        raise ValueError(msg)
    if not context_dir.is_dir():
        raise BuildContextNotFound(str(context_dir))
    dockerfile = get_dockerfile_path(recipe)
    exe = detect_engine(engine)
    runner = runner or CommandRunner(kind="build")

    build_argv = [
        exe,
        "build",
        "-t",
        target.image_ref,
        "--build-arg",
        f"PROJECT={project}",
        "-f",
        str(dockerfile),
        str(context_dir),
    ]
    results = [_require(runner.run(build_argv))]
    if push:
        results.append(_require(runner.run([exe, "push", target.image_ref])))
    return results
