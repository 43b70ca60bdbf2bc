from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from tika_ci.core.config import CONFIG_FILE_NAME, Config, load_config_or_default
from tika_ci.core.errors import ErrorCode
from tika_ci.core.result import Err
from tika_ci.output.console import ConsoleProtocol, RichConsole

CONFIG_ENV_VAR = "TIKA_CI_CONFIG"


@dataclass(frozen=True, slots=True)
class CLIContext:
    repo_root: Path
    config: Config
    console: ConsoleProtocol


def build_context() -> CLIContext:
    repo_root = Path.cwd()
    config_path = Path(os.environ.get(CONFIG_ENV_VAR) or repo_root / CONFIG_FILE_NAME)

    config_result = load_config_or_default(config_path)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))

    return CLIContext(
        repo_root=repo_root,
        config=config_result.value,
        console=RichConsole(),
    )
