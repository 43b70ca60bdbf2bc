"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tika_ci.core.errors import ErrorCode
from tika_ci.output.console import Style
from tika_ci.pipeline.errors import (
    BuildError,
    ConfigurationError,
    DeployError,
    PipelineError,
    TestFailure,
)

if TYPE_CHECKING:
    from tika_ci.output.console import ConsoleProtocol

__all__ = ["print_pipeline_error", "pipeline_error_exit_code", "matrix_exit_code"]


def print_pipeline_error(error: PipelineError, console: ConsoleProtocol) -> None:
    """Print a pipeline error to console with appropriate formatting."""
    match error:
        case ConfigurationError(message=message):
            console.error(f"configuration: {message}")
        case BuildError(variant=variant, message=message):
            console.error(f"build ({variant or 'all'}): {message}")
        case TestFailure(check=check, variant=variant, message=message):
            console.error(f"{check} check ({variant}): {message}")
        case DeployError(variant=variant, message=message):
            console.error(f"deploy ({variant}): {message}")
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def pipeline_error_exit_code(error: PipelineError) -> int:
    """Get exit code for a pipeline error."""
    match error:
        case ConfigurationError():
            return int(ErrorCode.CONFIG_ERROR)
        case BuildError():
            return int(ErrorCode.BUILD_ERROR)
        case TestFailure():
            return int(ErrorCode.TEST_FAILURE)
        case DeployError():
            return int(ErrorCode.DEPLOY_ERROR)


def matrix_exit_code(errors: list[PipelineError]) -> int:
    """Exit code for a run with several failed branches (earliest stage wins)."""
    if not errors:
        return int(ErrorCode.OK)
    return min(pipeline_error_exit_code(e) for e in errors)
