"""Tags command - preview what a deploy would publish."""

from __future__ import annotations

import os

import typer

from tika_ci.cli.commands._helpers import (
    EVENT_HELP,
    PUSH_HELP,
    REF_HELP,
    VERSION_HELP,
    load_event,
    resolve_or_exit,
)
from tika_ci.cli.context import build_context
from tika_ci.output.console import Style
from tika_ci.pipeline.metadata import PublishContext, generate_metadata
from tika_ci.pipeline.model import ImageVariant


def tags(
    variant: ImageVariant = typer.Option(..., "--variant", help="Image variant"),
    event: str | None = typer.Option(None, "--event", help=EVENT_HELP, show_default=False),
    ref: str | None = typer.Option(None, "--ref", help=REF_HELP, show_default=False),
    tika_version: str | None = typer.Option(
        None, "--tika-version", help=VERSION_HELP, show_default=False
    ),
    push: bool | None = typer.Option(None, "--push/--no-push", help=PUSH_HELP, show_default=False),
) -> None:
    """Print the image tags and OCI labels a deploy would use."""
    ctx = build_context()
    trigger = load_event(ctx, event=event, ref=ref, tika_version=tika_version, push=push)
    config = resolve_or_exit(ctx, trigger)

    publish = PublishContext.from_env(os.environ)
    missing = publish.missing_credentials()
    if missing:
        ctx.console.warning("image names are incomplete; unset: " + ", ".join(missing))

    meta = generate_metadata(
        config,
        variant=variant,
        image_name=ctx.config.build.image_name,
        publish=publish,
        registries=ctx.config.registries,
        labels=ctx.config.labels,
    )

    ctx.console.header("Tags")
    for ref_name in meta.refs:
        ctx.console.print(ref_name)
    ctx.console.header("Labels")
    for key, value in meta.labels:
        ctx.console.print(f"{key}={value}", Style.DIM)

    if not config.push_image:
        ctx.console.info("push disabled for this event; nothing would be published")
