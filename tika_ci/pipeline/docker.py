"""Container engine abstraction.

This module provides:
- ContainerEngine: Protocol for the docker operations a branch needs
- DockerCli: Real implementation driving the docker / buildx CLI
- MockContainerEngine: Scripted implementation for testing
- running_container: scoped test container with guaranteed removal

Each matrix branch gets its own DockerCli bound to a private DOCKER_CONFIG
directory, so registry logins and buildx builders never leak between
variants.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, TypeVar, runtime_checkable

from tika_ci.core.result import Err, Ok, Result
from tika_ci.output.console import ConsoleProtocol, Style
from tika_ci.pipeline.timeouts import (
    BUILD_TIMEOUT_SECONDS,
    DOCKER_TIMEOUT_SECONDS,
    SETUP_TIMEOUT_SECONDS,
)
from tika_ci.platform.process import ProcessError, run, run_silent

T = TypeVar("T")

__all__ = [
    "BuildRequest",
    "ContainerEngine",
    "DockerCli",
    "MockContainerEngine",
    "running_container",
]

BINFMT_IMAGE = "tonistiigi/binfmt"


@dataclass(frozen=True, slots=True)
class BuildRequest:
    """Inputs for one multi-platform `docker buildx build`."""

    dockerfile: str
    context: str
    platforms: tuple[str, ...]
    tags: tuple[str, ...]
    build_args: tuple[tuple[str, str], ...] = ()
    labels: tuple[tuple[str, str], ...] = ()
    push: bool = False
    builder: str | None = None

    def to_args(self) -> list[str]:
        args = ["docker", "buildx", "build"]
        if self.builder:
            args.extend(["--builder", self.builder])
        args.extend(["--file", self.dockerfile, "--platform", ",".join(self.platforms)])
        for tag in self.tags:
            args.extend(["--tag", tag])
        for key, value in self.labels:
            args.extend(["--label", f"{key}={value}"])
        for key, value in self.build_args:
            args.extend(["--build-arg", f"{key}={value}"])
        if self.push:
            args.append("--push")
        args.append(self.context)
        return args


@runtime_checkable
class ContainerEngine(Protocol):
    """Docker operations used by a matrix branch."""

    def setup_emulation(self) -> Result[None, ProcessError]:
        """Register QEMU handlers so foreign platforms can be built."""
        ...

    def ensure_builder(self, name: str) -> Result[None, ProcessError]:
        """Create the buildx builder (host networking) unless it exists."""
        ...

    def build(self, request: BuildRequest) -> Result[None, ProcessError]: ...

    def run_container(
        self, *, name: str, image: str, host_port: int, container_port: int
    ) -> Result[str, ProcessError]:
        """Start a detached container publishing one port; returns its id."""
        ...

    def inspect_user(self, name: str) -> Result[str, ProcessError]:
        """Return the container's configured `Config.User`."""
        ...

    def remove_container(self, name: str) -> Result[None, ProcessError]: ...

    def login(self, *, registry: str, username: str, password: str) -> Result[None, ProcessError]:
        ...


class DockerCli:
    """ContainerEngine backed by the docker CLI.

    With dry_run set, commands are printed and reported as successful
    without being executed.
    """

    def __init__(
        self,
        *,
        cwd: Path,
        console: ConsoleProtocol,
        config_dir: Path | None = None,
        dry_run: bool = False,
    ) -> None:
        self._cwd = cwd
        self._console = console
        self._config_dir = config_dir
        self._dry_run = dry_run

    @property
    def config_dir(self) -> Path | None:
        return self._config_dir

    def with_config_dir(self, config_dir: Path, console: ConsoleProtocol) -> DockerCli:
        """Return an engine whose docker state (logins, builders) lives in config_dir."""
        return DockerCli(
            cwd=self._cwd,
            console=console,
            config_dir=config_dir,
            dry_run=self._dry_run,
        )

    def _env(self) -> dict[str, str] | None:
        if self._config_dir is None:
            return None
        if not self._dry_run:
            self._config_dir.mkdir(parents=True, exist_ok=True)
        env = os.environ.copy()
        env["DOCKER_CONFIG"] = str(self._config_dir)
        return env

    def _echo(self, cmd: list[str]) -> None:
        self._console.print("$ " + " ".join(cmd), Style.DIM)

    def _run(
        self,
        cmd: list[str],
        *,
        timeout: float = DOCKER_TIMEOUT_SECONDS,
        input: str | None = None,
        dry_output: str = "",
    ) -> Result[str, ProcessError]:
        self._echo(cmd)
        if self._dry_run:
            return Ok(dry_output)
        return run(cmd, cwd=self._cwd, env=self._env(), timeout=timeout, input=input)

    def _stream(self, cmd: list[str], *, timeout: float) -> Result[None, ProcessError]:
        self._echo(cmd)
        if self._dry_run:
            return Ok(None)
        return run_silent(cmd, cwd=self._cwd, env=self._env(), timeout=timeout)

    def setup_emulation(self) -> Result[None, ProcessError]:
        return self._stream(
            ["docker", "run", "--privileged", "--rm", BINFMT_IMAGE, "--install", "all"],
            timeout=SETUP_TIMEOUT_SECONDS,
        )

    def ensure_builder(self, name: str) -> Result[None, ProcessError]:
        if not self._dry_run:
            existing = run(
                ["docker", "buildx", "inspect", name],
                cwd=self._cwd,
                env=self._env(),
                timeout=DOCKER_TIMEOUT_SECONDS,
            )
            if isinstance(existing, Ok):
                return Ok(None)

        # Host networking lets the builder push to the local registry
        created = self._run(
            [
                "docker",
                "buildx",
                "create",
                "--name",
                name,
                "--driver",
                "docker-container",
                "--driver-opt",
                "network=host",
                "--bootstrap",
            ],
            timeout=SETUP_TIMEOUT_SECONDS,
        )
        if isinstance(created, Err):
            return created
        return Ok(None)

    def build(self, request: BuildRequest) -> Result[None, ProcessError]:
        return self._stream(request.to_args(), timeout=BUILD_TIMEOUT_SECONDS)

    def run_container(
        self, *, name: str, image: str, host_port: int, container_port: int
    ) -> Result[str, ProcessError]:
        result = self._run(
            ["docker", "run", "-d", "--name", name, "-p", f"{host_port}:{container_port}", image],
            dry_output=f"dry-run-{name}",
        )
        return result.map(str.strip)

    def inspect_user(self, name: str) -> Result[str, ProcessError]:
        result = self._run(["docker", "inspect", name, "--format", "{{.Config.User}}"])
        return result.map(str.strip)

    def remove_container(self, name: str) -> Result[None, ProcessError]:
        result = self._run(["docker", "rm", "-f", name])
        if isinstance(result, Err):
            return result
        return Ok(None)

    def login(self, *, registry: str, username: str, password: str) -> Result[None, ProcessError]:
        # The secret goes through stdin; it never appears on argv or in output
        result = self._run(
            ["docker", "login", registry, "--username", username, "--password-stdin"],
            input=password,
        )
        if isinstance(result, Err):
            return result
        return Ok(None)


@contextmanager
def running_container(
    engine: ContainerEngine,
    *,
    name: str,
    image: str,
    host_port: int,
    container_port: int,
    console: ConsoleProtocol,
) -> Iterator[Result[str, ProcessError]]:
    """Start a test container and remove it on every exit path.

    The start result is yielded so the caller decides what a failed start
    means. Removal runs even when the start failed, since `docker run` can
    leave a created-but-not-running container behind.
    """
    started = engine.run_container(
        name=name, image=image, host_port=host_port, container_port=container_port
    )
    try:
        yield started
    finally:
        removed = engine.remove_container(name)
        if isinstance(removed, Err) and isinstance(started, Ok):
            console.warning(f"failed to remove test container {name}: {removed.error}")


def _empty_calls() -> list[tuple[str, ...]]:
    return []


def _empty_failures() -> dict[str, ProcessError]:
    return {}


def _empty_builds() -> list[BuildRequest]:
    return []


@dataclass
class MockContainerEngine:
    """ContainerEngine for tests.

    Records every call in `calls` and fails the operations named in
    `failures` (keys: setup_emulation, ensure_builder, build, run_container,
    inspect_user, remove_container, login).

    Usage:
        engine = MockContainerEngine(user="35002:35002")
        engine.fail("login")
        ...
        assert "build" in engine.operations()
    """

    user: str = ""
    calls: list[tuple[str, ...]] = field(default_factory=_empty_calls)
    failures: dict[str, ProcessError] = field(default_factory=_empty_failures)
    builds: list[BuildRequest] = field(default_factory=_empty_builds)

    def fail(self, operation: str, *, stderr: str = "boom", returncode: int = 1) -> None:
        self.failures[operation] = ProcessError(
            command=("docker", operation),
            returncode=returncode,
            stdout="",
            stderr=stderr,
        )

    def _record(self, operation: str, value: T, *args: str) -> Result[T, ProcessError]:
        self.calls.append((operation, *args))
        failure = self.failures.get(operation)
        if failure is not None:
            return Err(failure)
        return Ok(value)

    def operations(self) -> list[str]:
        return [call[0] for call in self.calls]

    def setup_emulation(self) -> Result[None, ProcessError]:
        return self._record("setup_emulation", None)

    def ensure_builder(self, name: str) -> Result[None, ProcessError]:
        return self._record("ensure_builder", None, name)

    def build(self, request: BuildRequest) -> Result[None, ProcessError]:
        self.builds.append(request)
        return self._record("build", None, *request.tags)

    def run_container(
        self, *, name: str, image: str, host_port: int, container_port: int
    ) -> Result[str, ProcessError]:
        return self._record(
            "run_container", f"id-{name}", name, image, f"{host_port}:{container_port}"
        )

    def inspect_user(self, name: str) -> Result[str, ProcessError]:
        return self._record("inspect_user", self.user, name)

    def remove_container(self, name: str) -> Result[None, ProcessError]:
        return self._record("remove_container", None, name)

    def login(self, *, registry: str, username: str, password: str) -> Result[None, ProcessError]:
        del password
        return self._record("login", None, registry, username)
