from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path, PurePosixPath


class ImageVariant(StrEnum):
    """Image flavours built from the same source, one Dockerfile each."""

    full = "full"
    minimal = "minimal"

    @property
    def dockerfile(self) -> str:
        return str(PurePosixPath(self.value) / "Dockerfile")


ALL_VARIANTS: tuple[ImageVariant, ...] = (ImageVariant.full, ImageVariant.minimal)


# -----------------------------------------------------------------------------
# Trigger events
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ManualDispatch:
    """Manual run with explicit inputs."""

    version: str
    push: bool


@dataclass(frozen=True, slots=True)
class TagPush:
    """Push of a tag ref (e.g. refs/tags/2.9.1.1)."""

    ref: str


@dataclass(frozen=True, slots=True)
class TagCreate:
    """Creation of a tag ref through the `create` event."""

    ref: str


@dataclass(frozen=True, slots=True)
class Release:
    """Publication of a GitHub release."""

    ref: str


@dataclass(frozen=True, slots=True)
class OtherEvent:
    """Any other trigger (branch push, pull request, ...). Never publishes."""

    name: str
    ref: str


TriggerEvent = ManualDispatch | TagPush | TagCreate | Release | OtherEvent

TAG_REF_PREFIX = "refs/tags/"


def ref_tag_name(ref: str) -> str | None:
    """Return the tag name for a refs/tags/ ref, else None."""
    if ref.startswith(TAG_REF_PREFIX):
        name = ref[len(TAG_REF_PREFIX) :]
        return name or None
    return None


# -----------------------------------------------------------------------------
# Run-scoped values
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Resolved once per run and passed explicitly to every step."""

    tika_version: str
    push_image: bool
    platforms: tuple[str, ...]
    # Triggering ref; feeds the ref-mirroring image tag on tag events.
    ref: str = ""

    @property
    def tag_name(self) -> str | None:
        return ref_tag_name(self.ref)


@dataclass(frozen=True, slots=True)
class BranchNames:
    """Names owned by one matrix branch; never shared with a sibling."""

    variant: ImageVariant
    container: str
    test_image: str
    docker_config_dir: str
    host_port: int

    @classmethod
    def for_variant(
        cls,
        variant: ImageVariant,
        *,
        image_name: str,
        local_registry: str,
        state_root: str,
        host_port: int,
    ) -> BranchNames:
        return cls(
            variant=variant,
            container=f"{image_name}-{variant}-test",
            test_image=f"{local_registry}/{image_name}/{image_name}-{variant}:test",
            docker_config_dir=str(Path(state_root) / f"docker-{variant}"),
            host_port=host_port,
        )


@dataclass(frozen=True, slots=True)
class TestResult:
    """Outcome of the smoke checks for one variant."""

    __test__ = False  # not a pytest class

    variant: ImageVariant
    reachable: bool
    observed_user: str | None
    expected_user: str

    @property
    def identity_ok(self) -> bool:
        return self.observed_user == self.expected_user

    @property
    def passed(self) -> bool:
        return self.reachable and self.identity_ok
