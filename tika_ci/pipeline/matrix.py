"""Matrix driver: one independent branch per image variant, run in parallel."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from tika_ci.core.config import Config
from tika_ci.core.result import Err, Ok, Result
from tika_ci.output.console import ConsoleProtocol, PrefixedConsole
from tika_ci.pipeline.branch import BranchOutcome, BranchRunner
from tika_ci.pipeline.docker import ContainerEngine, running_container
from tika_ci.pipeline.errors import BuildError
from tika_ci.pipeline.http import HttpClient
from tika_ci.pipeline.metadata import PublishContext
from tika_ci.pipeline.model import BranchNames, BuildConfig, ImageVariant
from tika_ci.platform.process import ProcessError

__all__ = [
    "MatrixReport",
    "build_runners",
    "install_emulation",
    "local_registry",
    "run_matrix",
]

REGISTRY_CONTAINER_PORT = 5000

EngineFactory = Callable[[BranchNames, ConsoleProtocol], ContainerEngine]


@dataclass(frozen=True, slots=True)
class MatrixReport:
    outcomes: tuple[BranchOutcome, ...]

    @property
    def succeeded(self) -> bool:
        """The run is green only when every branch succeeded."""
        return bool(self.outcomes) and all(o.succeeded for o in self.outcomes)

    @property
    def failed(self) -> tuple[BranchOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.succeeded)


def build_runners(
    config: BuildConfig,
    variants: Sequence[ImageVariant],
    *,
    settings: Config,
    engine_for: EngineFactory,
    http: HttpClient,
    publish: PublishContext,
    console: ConsoleProtocol,
    state_root: Path,
    dry_run: bool = False,
    sleep: Callable[[float], None] = time.sleep,
) -> list[BranchRunner]:
    """Create one runner per variant, each with its own names and engine."""
    runners: list[BranchRunner] = []
    for index, variant in enumerate(variants):
        names = BranchNames.for_variant(
            variant,
            image_name=settings.build.image_name,
            local_registry=settings.smoke.local_registry,
            state_root=str(state_root),
            host_port=settings.smoke.host_port_for(index),
        )
        branch_console = PrefixedConsole(console, str(variant))
        runners.append(
            BranchRunner(
                config=config,
                variant=variant,
                names=names,
                settings=settings,
                engine=engine_for(names, branch_console),
                http=http,
                publish=publish,
                console=branch_console,
                sleep=sleep,
                dry_run=dry_run,
            )
        )
    return runners


def run_matrix(runners: Sequence[BranchRunner]) -> MatrixReport:
    """Run every branch concurrently and collect their outcomes.

    Branches share nothing mutable; a failing branch never stops a sibling.
    """
    if not runners:
        return MatrixReport(outcomes=())

    with ThreadPoolExecutor(max_workers=len(runners), thread_name_prefix="branch") as pool:
        futures = [pool.submit(runner.run) for runner in runners]
        outcomes = tuple(future.result() for future in futures)
    return MatrixReport(outcomes=outcomes)


@contextmanager
def local_registry(
    engine: ContainerEngine,
    *,
    settings: Config,
    console: ConsoleProtocol,
    name: str = "tika-ci-registry",
) -> Iterator[Result[str, ProcessError]]:
    """Run the ephemeral registry test images are pushed to, for one run."""
    with running_container(
        engine,
        name=name,
        image=settings.smoke.registry_image,
        host_port=settings.smoke.registry_port,
        container_port=REGISTRY_CONTAINER_PORT,
        console=console,
    ) as started:
        yield started


def install_emulation(
    engine: ContainerEngine, *, console: ConsoleProtocol
) -> Result[None, BuildError]:
    """Register QEMU handlers for foreign platforms, once per run.

    The binfmt table belongs to the host kernel, so this runs before any
    branch starts rather than inside each branch.
    """
    console.header("Set up QEMU emulation")
    installed = engine.setup_emulation()
    if isinstance(installed, Err):
        return Err(
            BuildError(
                kind="setup_failed",
                variant=None,
                message="failed to install QEMU emulators",
                hint=installed.error.stderr.strip() or str(installed.error),
            )
        )
    return Ok(None)
