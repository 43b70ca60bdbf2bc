"""Typed configuration loading and access.

This module provides dataclasses for the optional `tika-ci.toml` file. Every
field has a default taken from the workflow the driver runs in, so an absent
file yields a fully usable Config.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_float,
    get_int,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "Config",
    "BuildSettings",
    "SmokeTestSettings",
    "RegistrySettings",
    "LabelSettings",
    "ConfigError",
    "load_config",
    "load_config_or_default",
    "CONFIG_FILE_NAME",
    "DEFAULT_PLATFORMS",
    "DEFAULT_TIKA_VERSION",
    "EXPECTED_USER",
    "TIKA_PORT",
]

CONFIG_FILE_NAME = "tika-ci.toml"

# -----------------------------------------------------------------------------
# Defaults
# -----------------------------------------------------------------------------

# Further platforms can be added as long as the base image supports them
DEFAULT_PLATFORMS: tuple[str, ...] = ("linux/arm/v7", "linux/arm64/v8", "linux/amd64")
DEFAULT_IMAGE_NAME = "tika"
DEFAULT_TIKA_VERSION = "2.9.1"

EXPECTED_USER = "35002:35002"
TIKA_PORT = 9998
LOCAL_REGISTRY_PORT = 5000
REGISTRY_IMAGE = "registry:2"
STARTUP_GRACE_SECONDS = 10.0
CONNECT_TIMEOUT_SECONDS = 5.0

DOCKERHUB_HOST = "docker.io"
GHCR_HOST = "ghcr.io"

IMAGE_DESCRIPTION = "Apache Tika Server: content detection and analysis over REST"
IMAGE_LICENSES = "Apache-2.0"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class BuildSettings:
    """Image build settings shared by both variants."""

    platforms: tuple[str, ...] = DEFAULT_PLATFORMS
    image_name: str = DEFAULT_IMAGE_NAME
    default_tika_version: str = DEFAULT_TIKA_VERSION
    context: str = "."


@dataclass(frozen=True, slots=True)
class SmokeTestSettings:
    """Settings for the post-build checks run against the local image."""

    expected_user: str = EXPECTED_USER
    port: int = TIKA_PORT
    registry_port: int = LOCAL_REGISTRY_PORT
    registry_image: str = REGISTRY_IMAGE
    startup_grace_seconds: float = STARTUP_GRACE_SECONDS
    connect_timeout_seconds: float = CONNECT_TIMEOUT_SECONDS

    @property
    def local_registry(self) -> str:
        return f"localhost:{self.registry_port}"

    def host_port_for(self, index: int) -> int:
        """Host port for the n-th matrix branch; branches never share one."""
        return self.port + index

    @staticmethod
    def url_for(host_port: int) -> str:
        return f"http://localhost:{host_port}/"


@dataclass(frozen=True, slots=True)
class RegistrySettings:
    """Remote registry hosts images are published to."""

    dockerhub: str = DOCKERHUB_HOST
    ghcr: str = GHCR_HOST


@dataclass(frozen=True, slots=True)
class LabelSettings:
    """Static OCI label values; the rest are derived from the run."""

    description: str = IMAGE_DESCRIPTION
    licenses: str = IMAGE_LICENSES


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    build: BuildSettings = field(default_factory=BuildSettings)
    smoke: SmokeTestSettings = field(default_factory=SmokeTestSettings)
    registries: RegistrySettings = field(default_factory=RegistrySettings)
    labels: LabelSettings = field(default_factory=LabelSettings)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        build: StrDict = get_table(data, "build") or {}
        smoke: StrDict = get_table(data, "smoke") or {}
        registries: StrDict = get_table(data, "registries") or {}
        labels: StrDict = get_table(data, "labels") or {}

        platforms = get_str_list(build, "platforms")
        if "platforms" in build and not platforms:
            raise ValueError("build.platforms must be a non-empty list of strings")

        return cls(
            build=BuildSettings(
                platforms=tuple(platforms) if platforms else DEFAULT_PLATFORMS,
                image_name=get_str(build, "image_name") or DEFAULT_IMAGE_NAME,
                default_tika_version=get_str(build, "default_tika_version")
                or DEFAULT_TIKA_VERSION,
                context=get_str(build, "context") or ".",
            ),
            smoke=SmokeTestSettings(
                expected_user=get_str(smoke, "expected_user") or EXPECTED_USER,
                port=get_int(smoke, "port") or TIKA_PORT,
                registry_port=get_int(smoke, "registry_port") or LOCAL_REGISTRY_PORT,
                registry_image=get_str(smoke, "registry_image") or REGISTRY_IMAGE,
                startup_grace_seconds=_non_negative(
                    get_float(smoke, "startup_grace_seconds"), STARTUP_GRACE_SECONDS
                ),
                connect_timeout_seconds=_positive(
                    get_float(smoke, "connect_timeout_seconds"), CONNECT_TIMEOUT_SECONDS
                ),
            ),
            registries=RegistrySettings(
                dockerhub=get_str(registries, "dockerhub") or DOCKERHUB_HOST,
                ghcr=get_str(registries, "ghcr") or GHCR_HOST,
            ),
            labels=LabelSettings(
                description=get_str(labels, "description") or IMAGE_DESCRIPTION,
                licenses=get_str(labels, "licenses") or IMAGE_LICENSES,
            ),
        )


def _non_negative(value: float | None, default: float) -> float:
    # 0 is a valid grace period (tests, dry runs)
    if value is None:
        return default
    if value < 0:
        raise ValueError(f"expected a non-negative number, got {value}")
    return value


def _positive(value: float | None, default: float) -> float:
    if value is None:
        return default
    if value <= 0:
        raise ValueError(f"expected a positive number, got {value}")
    return value


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to tika-ci.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config from file, or return the default config if it doesn't exist.

    A file that exists but cannot be parsed is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
