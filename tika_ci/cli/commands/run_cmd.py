"""Run command - build, test and publish every image variant."""

from __future__ import annotations

import os
from contextlib import nullcontext
from pathlib import Path
from tempfile import TemporaryDirectory

import typer

from tika_ci.cli.commands._helpers import (
    EVENT_HELP,
    PUSH_HELP,
    REF_HELP,
    VERSION_HELP,
    exit_with_code,
    load_event,
    resolve_or_exit,
)
from tika_ci.cli.context import CLIContext, build_context
from tika_ci.core.errors import ErrorCode
from tika_ci.core.result import Err, Ok
from tika_ci.output.console import ConsoleProtocol, Style
from tika_ci.output.errors import (
    matrix_exit_code,
    pipeline_error_exit_code,
    print_pipeline_error,
)
from tika_ci.pipeline.docker import DockerCli
from tika_ci.pipeline.http import UrllibClient
from tika_ci.pipeline.matrix import (
    MatrixReport,
    build_runners,
    install_emulation,
    local_registry,
    run_matrix,
)
from tika_ci.pipeline.metadata import PublishContext
from tika_ci.pipeline.model import ALL_VARIANTS, BranchNames, ImageVariant


def run(
    variant: list[ImageVariant] | None = typer.Option(
        None,
        "--variant",
        help="Variant to build (repeatable, default: all)",
        show_default=False,
    ),
    event: str | None = typer.Option(None, "--event", help=EVENT_HELP, show_default=False),
    ref: str | None = typer.Option(None, "--ref", help=REF_HELP, show_default=False),
    tika_version: str | None = typer.Option(
        None, "--tika-version", help=VERSION_HELP, show_default=False
    ),
    push: bool | None = typer.Option(None, "--push/--no-push", help=PUSH_HELP, show_default=False),
    start_registry: bool = typer.Option(
        True,
        "--start-registry/--no-start-registry",
        help="Start the local registry test images are pushed to",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print commands without running them"),
) -> None:
    """Build, smoke-test and (when enabled) publish the images."""
    ctx = build_context()
    trigger = load_event(ctx, event=event, ref=ref, tika_version=tika_version, push=push)
    config = resolve_or_exit(ctx, trigger)

    variants = tuple(dict.fromkeys(variant)) if variant else ALL_VARIANTS
    base = DockerCli(cwd=ctx.repo_root, console=ctx.console, dry_run=dry_run)

    registry = (
        local_registry(base, settings=ctx.config, console=ctx.console)
        if start_registry
        else nullcontext(Ok(""))
    )
    with TemporaryDirectory(prefix="tika-ci-") as state_root, registry as started:
        if isinstance(started, Err):
            ctx.console.error(f"failed to start local registry: {started.error}")
            exit_with_code(int(ErrorCode.BUILD_ERROR))

        emulation = install_emulation(base, console=ctx.console)
        if isinstance(emulation, Err):
            print_pipeline_error(emulation.error, ctx.console)
            exit_with_code(pipeline_error_exit_code(emulation.error))

        def engine_for(names: BranchNames, console: ConsoleProtocol) -> DockerCli:
            return base.with_config_dir(Path(names.docker_config_dir), console)

        runners = build_runners(
            config,
            variants,
            settings=ctx.config,
            engine_for=engine_for,
            http=UrllibClient(),
            publish=PublishContext.from_env(os.environ),
            console=ctx.console,
            state_root=Path(state_root),
            dry_run=dry_run,
        )
        report = run_matrix(runners)

    _print_summary(ctx, report)
    errors = [o.error for o in report.failed if o.error is not None]
    if not report.succeeded:
        exit_with_code(matrix_exit_code(errors) or int(ErrorCode.BUILD_ERROR))


def _print_summary(ctx: CLIContext, report: MatrixReport) -> None:
    console = ctx.console
    console.header("Summary")
    for outcome in report.outcomes:
        steps = " -> ".join(str(state) for state in outcome.path)
        if outcome.succeeded:
            console.success(f"{outcome.variant}: {steps}")
        else:
            console.error(f"{outcome.variant}: {steps}")
            if outcome.error is not None:
                console.print(f"  {outcome.error.message}", Style.DIM)
