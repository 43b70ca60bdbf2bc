from __future__ import annotations

import re

from tika_ci.core.result import Err, Ok, Result
from tika_ci.pipeline.errors import ConfigurationError

# Image tags are the Tika version plus an image build number, with an
# optional beta marker: 2.9.1.1, 2.9.1.2-beta, 2.9.1.2-beta3
_IMAGE_TAG_RE = re.compile(
    r"^(?P<tika>(?:0|[1-9]\d*)\.(?:0|[1-9]\d*)\.(?:0|[1-9]\d*))"
    r"\.(?P<build>0|[1-9]\d*)"
    r"(?:-beta\d*)?$"
)

# Upstream Tika releases: 2.9.1, 3.0.0-BETA, 3.0.0-BETA2
_TIKA_VERSION_RE = re.compile(r"^\d+(?:\.\d+)+(?:-[0-9A-Za-z]+)?$")


def derive_tika_version(tag: str) -> Result[str, ConfigurationError]:
    """Strip the image build number (and beta marker) from an image tag.

    2.9.1.1 -> 2.9.1 and 2.9.1.1-beta2 -> 2.9.1.
    """
    m = _IMAGE_TAG_RE.match(tag.strip())
    if m is None:
        return Err(
            ConfigurationError(
                kind="invalid_version",
                message=f"tag does not look like an image release tag: {tag!r}",
                hint="expected <major>.<minor>.<patch>.<build>[-beta<n>], e.g. 2.9.1.1",
            )
        )
    return Ok(m.group("tika"))


def validate_tika_version(version: str) -> Result[str, ConfigurationError]:
    """Check a version supplied directly (manual dispatch, config default)."""
    v = version.strip()
    if not _TIKA_VERSION_RE.match(v):
        return Err(
            ConfigurationError(
                kind="invalid_version",
                message=f"invalid Tika version: {version!r}",
                hint="expected a dotted version, e.g. 2.9.1",
            )
        )
    return Ok(v)
