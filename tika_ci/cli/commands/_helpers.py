"""Shared helpers for CLI commands."""

from __future__ import annotations

import os
from dataclasses import replace
from typing import TYPE_CHECKING, NoReturn

import typer

from tika_ci.core.errors import ErrorCode
from tika_ci.core.result import Err
from tika_ci.output.console import Style, log_group
from tika_ci.output.errors import pipeline_error_exit_code, print_pipeline_error
from tika_ci.pipeline.events import classify_event, event_from_environment
from tika_ci.pipeline.model import (
    BuildConfig,
    ManualDispatch,
    Release,
    TagCreate,
    TagPush,
    TriggerEvent,
)
from tika_ci.pipeline.resolve import describe_latest_tag, resolve_build_config

if TYPE_CHECKING:
    from tika_ci.cli.context import CLIContext


EVENT_HELP = "Event name (default: $GITHUB_EVENT_NAME)"
REF_HELP = "Triggering ref, e.g. refs/tags/2.9.1.1 (default: $GITHUB_REF)"
VERSION_HELP = "Tika version for manual runs"
PUSH_HELP = "Push images for manual runs"


def exit_with_code(code: int) -> NoReturn:
    """Exit the current command with `code`."""
    raise typer.Exit(code=code)


def load_event(
    ctx: CLIContext,
    *,
    event: str | None,
    ref: str | None,
    tika_version: str | None,
    push: bool | None,
) -> TriggerEvent:
    """Explicit options win; otherwise the event comes from the CI environment."""
    default_version = ctx.config.build.default_tika_version
    if event is not None:
        trigger = classify_event(event, ref or "", default_version=default_version)
    else:
        env = dict(os.environ)
        if ref is not None:
            env["GITHUB_REF"] = ref
        detected = event_from_environment(env, default_version=default_version)
        if isinstance(detected, Err):
            print_pipeline_error(detected.error, ctx.console)
            exit_with_code(pipeline_error_exit_code(detected.error))
        trigger = detected.value

    if isinstance(trigger, ManualDispatch):
        if tika_version is not None:
            trigger = replace(trigger, version=tika_version)
        if push is not None:
            trigger = replace(trigger, push=push)
    elif tika_version is not None or push is not None:
        ctx.console.error("--tika-version/--push only apply to workflow_dispatch runs")
        exit_with_code(int(ErrorCode.USER_ERROR))
    return trigger


def resolve_or_exit(ctx: CLIContext, trigger: TriggerEvent) -> BuildConfig:
    """Resolve the BuildConfig for a trigger, exiting on a malformed version."""
    console = ctx.console
    latest: str | None = None
    if isinstance(trigger, TagPush | TagCreate | Release):
        described = describe_latest_tag(repo_root=ctx.repo_root)
        if isinstance(described, Err):
            console.warning(f"{described.error.message}; using the event ref")
        else:
            latest = described.value

    with log_group(console, "Determine build configuration"):
        result = resolve_build_config(
            trigger,
            latest_tag=latest,
            platforms=ctx.config.build.platforms,
            default_version=ctx.config.build.default_tika_version,
        )
        if isinstance(result, Err):
            print_pipeline_error(result.error, console)
            exit_with_code(pipeline_error_exit_code(result.error))

        config = result.value
        console.print(f"event: {type(trigger).__name__}", Style.DIM)
        console.print(f"Push image? {str(config.push_image).lower()}")
        console.print(f"Building Tika version {config.tika_version}")
        console.print(f"platforms: {','.join(config.platforms)}", Style.DIM)
    return config
