"""Error values for the pipeline.

Each type ends exactly one matrix branch; none of them is recovered from
locally. They carry a `message` and an optional `hint` so the CLI can render
any of them the same way.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from tika_ci.pipeline.model import ImageVariant


@dataclass(frozen=True, slots=True)
class ConfigurationError:
    kind: Literal["invalid_version", "invalid_event", "invalid_config", "tag_lookup_failed"]
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class BuildError:
    kind: Literal["setup_failed", "build_failed", "container_start_failed"]
    variant: ImageVariant | None
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class TestFailure:
    __test__ = False  # not a pytest class

    check: Literal["reachability", "identity"]
    variant: ImageVariant
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class DeployError:
    kind: Literal["credentials_missing", "login_failed", "push_failed"]
    variant: ImageVariant
    message: str
    hint: str | None = None


PipelineError = ConfigurationError | BuildError | TestFailure | DeployError
