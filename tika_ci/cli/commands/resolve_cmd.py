"""Resolve command - turn the trigger event into a BuildConfig."""

from __future__ import annotations

from pathlib import Path

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
from tika_ci.cli.context import build_context
from tika_ci.core.errors import ErrorCode
from tika_ci.pipeline.model import BuildConfig


def resolve(
    event: str | None = typer.Option(None, "--event", help=EVENT_HELP, show_default=False),
    ref: str | None = typer.Option(None, "--ref", help=REF_HELP, show_default=False),
    tika_version: str | None = typer.Option(
        None, "--tika-version", help=VERSION_HELP, show_default=False
    ),
    push: bool | None = typer.Option(None, "--push/--no-push", help=PUSH_HELP, show_default=False),
    github_env: Path | None = typer.Option(
        None,
        "--github-env",
        help="Append TIKA_VERSION/PUSH_IMAGE to this file (usually $GITHUB_ENV)",
        show_default=False,
    ),
) -> None:
    """Print the build configuration for the triggering event."""
    ctx = build_context()
    trigger = load_event(ctx, event=event, ref=ref, tika_version=tika_version, push=push)
    config = resolve_or_exit(ctx, trigger)

    if github_env is not None:
        try:
            write_github_env(github_env, config)
        except OSError as e:
            ctx.console.error(f"cannot write {github_env}: {e}")
            exit_with_code(int(ErrorCode.USER_ERROR))
        ctx.console.success(f"exported build configuration to {github_env}")


def github_env_lines(config: BuildConfig) -> list[str]:
    return [
        f"TIKA_VERSION={config.tika_version}",
        f"PUSH_IMAGE={str(config.push_image).lower()}",
    ]


def write_github_env(path: Path, config: BuildConfig) -> None:
    with path.open("a", encoding="utf-8") as f:
        for line in github_env_lines(config):
            f.write(line + "\n")
