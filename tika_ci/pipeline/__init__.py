"""Release decision and pipeline driver."""

from .branch import BranchOutcome, BranchRunner, BranchState
from .errors import BuildError, ConfigurationError, DeployError, PipelineError, TestFailure
from .matrix import MatrixReport, build_runners, run_matrix
from .model import (
    ALL_VARIANTS,
    BuildConfig,
    ImageVariant,
    ManualDispatch,
    OtherEvent,
    Release,
    TagCreate,
    TagPush,
    TriggerEvent,
)
from .resolve import describe_latest_tag, resolve_build_config

__all__ = [
    # branch
    "BranchOutcome",
    "BranchRunner",
    "BranchState",
    # errors
    "BuildError",
    "ConfigurationError",
    "DeployError",
    "PipelineError",
    "TestFailure",
    # matrix
    "MatrixReport",
    "build_runners",
    "run_matrix",
    # model
    "ALL_VARIANTS",
    "BuildConfig",
    "ImageVariant",
    "ManualDispatch",
    "OtherEvent",
    "Release",
    "TagCreate",
    "TagPush",
    "TriggerEvent",
    # resolve
    "describe_latest_tag",
    "resolve_build_config",
]
