from __future__ import annotations

import os
from pathlib import Path

import typer

from tika_ci import __version__
from tika_ci.cli.commands.resolve_cmd import resolve
from tika_ci.cli.commands.run_cmd import run
from tika_ci.cli.commands.tags_cmd import tags
from tika_ci.cli.context import CONFIG_ENV_VAR
from tika_ci.core.errors import ErrorCode


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(resolve)
app.command()(tags)
app.command()(run)


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Path to tika-ci.toml (default: ./tika-ci.toml when present)",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if config is not None:
        path = config.expanduser()
        if not path.is_file():
            typer.echo(f"error: --config '{path}' does not exist", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        os.environ[CONFIG_ENV_VAR] = str(path.resolve())


def main() -> None:
    app()
