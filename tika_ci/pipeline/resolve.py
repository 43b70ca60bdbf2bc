"""Release decision: turn a trigger event into a BuildConfig.

`resolve_build_config` is pure. Looking up the most recent tag (the only
piece of repository state the decision needs) is done separately by
`describe_latest_tag` so callers can supply it from git or from a test.
"""

from __future__ import annotations

from pathlib import Path

from tika_ci.core.config import DEFAULT_PLATFORMS, DEFAULT_TIKA_VERSION
from tika_ci.core.result import Err, Ok, Result
from tika_ci.pipeline.errors import ConfigurationError
from tika_ci.pipeline.model import (
    BuildConfig,
    ManualDispatch,
    OtherEvent,
    Release,
    TagCreate,
    TagPush,
    TriggerEvent,
    ref_tag_name,
)
from tika_ci.pipeline.timeouts import GIT_TIMEOUT_SECONDS
from tika_ci.pipeline.version import derive_tika_version, validate_tika_version
from tika_ci.platform.process import run as run_process

__all__ = ["describe_latest_tag", "resolve_build_config"]


def resolve_build_config(
    event: TriggerEvent,
    *,
    latest_tag: str | None = None,
    platforms: tuple[str, ...] = DEFAULT_PLATFORMS,
    default_version: str = DEFAULT_TIKA_VERSION,
) -> Result[BuildConfig, ConfigurationError]:
    """Compute the Tika version and push flag for a run.

    Args:
        event: What triggered the run.
        latest_tag: Most recent tag in the checkout (`git describe`); tag
            events fall back to their own ref name when it is unknown.
        platforms: Target platforms for the multi-arch build.
        default_version: Version built when the event does not determine one.

    Returns:
        Ok(BuildConfig), or Err(ConfigurationError) for a malformed version.
    """
    match event:
        case ManualDispatch(version=version, push=push):
            checked = validate_tika_version(version)
            if isinstance(checked, Err):
                return checked
            return Ok(
                BuildConfig(tika_version=checked.value, push_image=push, platforms=platforms)
            )

        case TagPush(ref=ref) | TagCreate(ref=ref) | Release(ref=ref):
            tag = latest_tag or ref_tag_name(ref)
            if tag is None:
                return Err(
                    ConfigurationError(
                        kind="invalid_event",
                        message=f"cannot determine the release tag for ref {ref!r}",
                        hint="fetch tags in the checkout (fetch-depth: 0)",
                    )
                )
            derived = derive_tika_version(tag)
            if isinstance(derived, Err):
                return derived
            return Ok(
                BuildConfig(
                    tika_version=derived.value,
                    push_image=True,
                    platforms=platforms,
                    ref=ref,
                )
            )

        case OtherEvent(ref=ref):
            checked = validate_tika_version(default_version)
            if isinstance(checked, Err):
                return checked
            return Ok(
                BuildConfig(
                    tika_version=checked.value,
                    push_image=False,
                    platforms=platforms,
                    ref=ref,
                )
            )


def describe_latest_tag(*, repo_root: Path) -> Result[str, ConfigurationError]:
    """Return the most recent tag reachable from HEAD."""
    result = run_process(
        ["git", "describe", "--tags", "--abbrev=0"],
        cwd=repo_root,
        timeout=GIT_TIMEOUT_SECONDS,
    )
    if isinstance(result, Err):
        return Err(
            ConfigurationError(
                kind="tag_lookup_failed",
                message="git describe found no tag",
                hint=result.error.stderr.strip() or None,
            )
        )

    tag = result.value.strip()
    if not tag:
        return Err(
            ConfigurationError(kind="tag_lookup_failed", message="git describe returned nothing")
        )
    return Ok(tag)
