"""Image names, tags and OCI labels for publishing.

Tag rules, in order:
- `v<tika version>`
- `latest`
- the triggering tag name, on tag events only

Everything here is a pure function of the BuildConfig and the publish
context, so pushing twice with the same inputs targets the same tag set.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime

from tika_ci.core.config import LabelSettings, RegistrySettings
from tika_ci.core.result import Err, Ok, Result
from tika_ci.pipeline.model import BuildConfig, ImageVariant

__all__ = [
    "ImageMetadata",
    "PublishContext",
    "RegistryLogin",
    "generate_metadata",
    "image_names",
    "image_tags",
    "oci_labels",
    "sanitize_tag",
]

_INVALID_TAG_CHARS = re.compile(r"[^a-zA-Z0-9._-]+")
_MAX_TAG_LENGTH = 128

_DOCKERHUB_DEFAULT = "docker.io"


@dataclass(frozen=True, slots=True)
class RegistryLogin:
    registry: str
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class PublishContext:
    """Out-of-band inputs for the deploy step.

    Secrets are kept out of repr so the value can be printed safely.
    """

    dockerhub_username: str | None = None
    dockerhub_token: str | None = field(default=None, repr=False)
    ghcr_owner: str | None = None
    ghcr_token: str | None = field(default=None, repr=False)
    repository: str | None = None
    server_url: str = "https://github.com"
    revision: str | None = None

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> PublishContext:
        def get(key: str) -> str | None:
            value = env.get(key, "").strip()
            return value or None

        return cls(
            dockerhub_username=get("DOCKERHUB_USERNAME"),
            dockerhub_token=get("DOCKERHUB_TOKEN"),
            ghcr_owner=get("GITHUB_REPOSITORY_OWNER"),
            ghcr_token=get("GHCR_TOKEN"),
            repository=get("GITHUB_REPOSITORY"),
            server_url=get("GITHUB_SERVER_URL") or "https://github.com",
            revision=get("GITHUB_SHA"),
        )

    def missing_credentials(self) -> tuple[str, ...]:
        """Names of the variables still needed before logging in."""
        required = (
            ("DOCKERHUB_USERNAME", self.dockerhub_username),
            ("DOCKERHUB_TOKEN", self.dockerhub_token),
            ("GITHUB_REPOSITORY_OWNER", self.ghcr_owner),
            ("GHCR_TOKEN", self.ghcr_token),
        )
        return tuple(name for name, value in required if not value)

    def logins(
        self, registries: RegistrySettings
    ) -> Result[tuple[RegistryLogin, ...], tuple[str, ...]]:
        """Registry sessions to open, Docker Hub first.

        Returns Err with the names of the missing variables when incomplete.
        """
        if (
            self.dockerhub_username is None
            or self.dockerhub_token is None
            or self.ghcr_owner is None
            or self.ghcr_token is None
        ):
            return Err(self.missing_credentials())
        return Ok(
            (
                RegistryLogin(registries.dockerhub, self.dockerhub_username, self.dockerhub_token),
                RegistryLogin(registries.ghcr, self.ghcr_owner, self.ghcr_token),
            )
        )

    @property
    def source_url(self) -> str | None:
        if self.repository is None:
            return None
        return f"{self.server_url.rstrip('/')}/{self.repository}"


@dataclass(frozen=True, slots=True)
class ImageMetadata:
    images: tuple[str, ...]
    tags: tuple[str, ...]
    labels: tuple[tuple[str, str], ...]

    @property
    def refs(self) -> tuple[str, ...]:
        """Every image:tag pair to push."""
        return tuple(f"{image}:{tag}" for image in self.images for tag in self.tags)

    @property
    def version(self) -> str:
        return dict(self.labels).get("org.opencontainers.image.version", "")


def sanitize_tag(value: str) -> str:
    """Make a ref name usable as an image tag."""
    tag = _INVALID_TAG_CHARS.sub("-", value.strip())
    tag = tag.lstrip(".-")
    return tag[:_MAX_TAG_LENGTH]


def image_names(
    variant: ImageVariant,
    *,
    image_name: str,
    dockerhub_namespace: str,
    ghcr_owner: str,
    registries: RegistrySettings,
) -> tuple[str, ...]:
    repo = f"{image_name}-{variant}"
    dockerhub = f"{dockerhub_namespace}/{repo}"
    if registries.dockerhub != _DOCKERHUB_DEFAULT:
        dockerhub = f"{registries.dockerhub}/{dockerhub}"
    ghcr = f"{registries.ghcr}/{ghcr_owner}/{repo}"
    # Registries reject upper-case repository names
    return (dockerhub.lower(), ghcr.lower())


def image_tags(config: BuildConfig) -> tuple[str, ...]:
    tags = [f"v{config.tika_version}", "latest"]
    ref_tag = config.tag_name
    if ref_tag is not None:
        tags.append(sanitize_tag(ref_tag))
    # dict keeps insertion order; drops a ref tag equal to a raw one
    return tuple(dict.fromkeys(t for t in tags if t))


def oci_labels(
    config: BuildConfig,
    *,
    variant: ImageVariant,
    image_name: str,
    publish: PublishContext,
    labels: LabelSettings,
    created: datetime,
) -> tuple[tuple[str, str], ...]:
    ref_tag = config.tag_name
    version = sanitize_tag(ref_tag) if ref_tag else f"v{config.tika_version}"

    out: dict[str, str] = {
        "org.opencontainers.image.title": f"{image_name}-{variant}",
        "org.opencontainers.image.description": labels.description,
        "org.opencontainers.image.version": version,
        "org.opencontainers.image.created": created.astimezone(UTC).strftime(
            "%Y-%m-%dT%H:%M:%SZ"
        ),
        "org.opencontainers.image.licenses": labels.licenses,
    }
    source = publish.source_url
    if source is not None:
        out["org.opencontainers.image.url"] = source
        out["org.opencontainers.image.source"] = source
    if publish.revision is not None:
        out["org.opencontainers.image.revision"] = publish.revision
    return tuple(sorted(out.items()))


def generate_metadata(
    config: BuildConfig,
    *,
    variant: ImageVariant,
    image_name: str,
    publish: PublishContext,
    registries: RegistrySettings,
    labels: LabelSettings,
    created: datetime | None = None,
) -> ImageMetadata:
    """Resolve names, tags and labels for one variant's push."""
    return ImageMetadata(
        images=image_names(
            variant,
            image_name=image_name,
            dockerhub_namespace=publish.dockerhub_username or "",
            ghcr_owner=publish.ghcr_owner or "",
            registries=registries,
        ),
        tags=image_tags(config),
        labels=oci_labels(
            config,
            variant=variant,
            image_name=image_name,
            publish=publish,
            labels=labels,
            created=created or datetime.now(UTC),
        ),
    )
