"""Unit tests for deployment.py: image build and container (re)start."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

import pytest
from hellodeploy.deployment import build_image, deploy, run_args
from hellodeploy.errors import BuildContextNotFound, CommandFailed, EngineNotFound
from hellodeploy.recipes import get_dockerfile_path
from hellodeploy.types import DeployTarget

if TYPE_CHECKING:
    from pathlib import Path

# --- run_args ---


def test_run_args_default() -> None:
    assert run_args(DeployTarget()) == [
        "run",
        "-d",
        "--name",
        "helloworld",
        "-p",
        "8080:8080",
        "hellouser/helloworld:latest",
    ]


def test_run_args_host_port_9090() -> None:
    args = run_args(DeployTarget(host_port=9090))
    assert args[args.index("-p") + 1] == "9090:8080"


@pytest.mark.parametrize("port", [0, -1, 65536])
def test_run_args_rejects_bad_port(port: int) -> None:
    with pytest.raises(ValueError, match="host port"):
        run_args(DeployTarget(host_port=port))


@pytest.mark.parametrize(
    ("field", "label"), [("registry_user", "registry user"), ("image", "image"), ("tag", "tag")]
)
def test_run_args_rejects_blank_names(field: str, label: str) -> None:
    with pytest.raises(ValueError, match=f"{label} must not be empty"):
        run_args(DeployTarget(**{field: " "}))


# --- deploy ---


def test_deploy_command_sequence(
    tools_on_path: Callable[..., None], fake_runner: Callable[..., Any]
) -> None:
    tools_on_path("docker")
    runner = fake_runner({"run": (0, "f00dfeedbeef1234\n", "")})
    target = DeployTarget(registry_user="acme", image="hello", tag="v2", host_port=9090)

    report = deploy(target, runner=runner)

    assert runner.argvs == [
        ["docker", "pull", "acme/hello:v2"],
        ["docker", "stop", "hello"],
        ["docker", "rm", "hello"],
        ["docker", "run", "-d", "--name", "hello", "-p", "9090:8080", "acme/hello:v2"],
    ]
    assert report.container_id == "f00dfeedbeef1234"
    assert report.image_ref == "acme/hello:v2"
    assert report.container_name == "hello"
    assert report.port_mapping == "9090:8080"
    assert len(report.commands) == 4


def test_deploy_ignores_stop_and_rm_failures(
    tools_on_path: Callable[..., None], fake_runner: Callable[..., Any]
) -> None:
    tools_on_path("docker")
    runner = fake_runner(
        {
            "stop": (1, "", "No such container: helloworld"),
            "rm": (1, "", "No such container: helloworld"),
            "run": (0, "abc\n", ""),
        }
    )
    report = deploy(DeployTarget(), runner=runner)
    assert report.container_id == "abc"
    assert runner.argvs[-1][1] == "run"


def test_deploy_pull_failure_stops(
    tools_on_path: Callable[..., None], fake_runner: Callable[..., Any]
) -> None:
    tools_on_path("docker")
    runner = fake_runner({"pull": (1, "", "manifest unknown")})
    with pytest.raises(CommandFailed, match="manifest unknown") as excinfo:
        deploy(DeployTarget(), runner=runner)
    assert excinfo.value.exit_code == 1
    assert len(runner.calls) == 1


def test_deploy_run_failure(
    tools_on_path: Callable[..., None], fake_runner: Callable[..., Any]
) -> None:
    tools_on_path("docker")
    runner = fake_runner({"run": (125, "", "port is already allocated")})
    with pytest.raises(CommandFailed, match="already allocated"):
        deploy(DeployTarget(), runner=runner)


def test_deploy_without_engine_runs_nothing(
    tools_on_path: Callable[..., None], fake_runner: Callable[..., Any]
) -> None:
    tools_on_path()
    runner = fake_runner()
    with pytest.raises(EngineNotFound):
        deploy(DeployTarget(), runner=runner)
    assert runner.calls == []


def test_deploy_with_podman(
    tools_on_path: Callable[..., None], fake_runner: Callable[..., Any]
) -> None:
    tools_on_path("docker", "podman")
    runner = fake_runner()
    deploy(DeployTarget(), engine="podman", runner=runner)
    assert {argv[0] for argv in runner.argvs} == {"podman"}


def test_deploy_bad_port_runs_nothing(
    tools_on_path: Callable[..., None], fake_runner: Callable[..., Any]
) -> None:
    tools_on_path("docker")
    runner = fake_runner()
    with pytest.raises(ValueError, match="host port"):
        deploy(DeployTarget(host_port=70000), runner=runner)
    assert runner.calls == []


def test_deploy_blank_image_runs_nothing(
    tools_on_path: Callable[..., None], fake_runner: Callable[..., Any]
) -> None:
    tools_on_path("docker")
    runner = fake_runner()
    with pytest.raises(ValueError, match="image must not be empty"):
        deploy(DeployTarget(image=""), runner=runner)
    assert runner.calls == []


# --- build_image ---


def test_build_image(
    tmp_path: Path, tools_on_path: Callable[..., None], fake_runner: Callable[..., Any]
) -> None:
    tools_on_path("docker")
    runner = fake_runner()
    results = build_image(DeployTarget(tag="v1"), tmp_path, runner=runner)
    assert len(results) == 1
    assert runner.argvs == [
        [
            "docker",
            "build",
            "-t",
            "hellouser/helloworld:v1",
            "--build-arg",
            "PROJECT=HelloWord",
            "-f",
            str(get_dockerfile_path("aspnet")),
            str(tmp_path),
        ]
    ]


def test_build_image_alpine_and_push(
    tmp_path: Path, tools_on_path: Callable[..., None], fake_runner: Callable[..., Any]
) -> None:
    tools_on_path("docker")
    runner = fake_runner()
    build_image(DeployTarget(), tmp_path, recipe="aspnet-alpine", push=True, runner=runner)
    assert str(get_dockerfile_path("aspnet-alpine")) in runner.argvs[0]
    assert runner.argvs[1] == ["docker", "push", "hellouser/helloworld:latest"]


def test_build_failure_skips_push(
    tmp_path: Path, tools_on_path: Callable[..., None], fake_runner: Callable[..., Any]
) -> None:
    tools_on_path("docker")
    runner = fake_runner({"build": (1, "", "csproj not found")})
    with pytest.raises(CommandFailed):
        build_image(DeployTarget(), tmp_path, push=True, runner=runner)
    assert len(runner.calls) == 1


def test_build_missing_context(tmp_path: Path, fake_runner: Callable[..., Any]) -> None:
    with pytest.raises(BuildContextNotFound):
        build_image(DeployTarget(), tmp_path / "missing", runner=fake_runner())


def test_build_unknown_recipe(tmp_path: Path, fake_runner: Callable[..., Any]) -> None:
    with pytest.raises(ValueError, match="Unknown recipe"):
        build_image(DeployTarget(), tmp_path, recipe="nope", runner=fake_runner())


def test_build_image_project_build_arg(
    tmp_path: Path, tools_on_path: Callable[..., None], fake_runner: Callable[..., Any]
) -> None:
    tools_on_path("docker")
    runner = fake_runner()
    build_image(DeployTarget(), tmp_path, project="Shop.Api", runner=runner)
    argv = runner.argvs[0]
    assert argv[argv.index("--build-arg") + 1] == "PROJECT=Shop.Api"


@pytest.mark.parametrize(
    ("target", "project", "match"),
    [
        (DeployTarget(tag=""), "HelloWord", "tag must not be empty"),
        (DeployTarget(), "  ", "project must not be empty"),
    ],
)
def test_build_image_rejects_blank_names(
    tmp_path: Path,
    fake_runner: Callable[..., Any],
    target: DeployTarget,
    project: str,
    match: str,
) -> None:
    runner = fake_runner()
    with pytest.raises(ValueError, match=match):
        build_image(target, tmp_path, project=project, runner=runner)
    assert runner.calls == []
