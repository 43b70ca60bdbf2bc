"""Tests for tika_ci.pipeline.version module."""

from __future__ import annotations

import pytest

from tika_ci.core.result import Err, Ok
from tika_ci.pipeline.version import derive_tika_version, validate_tika_version


class TestDeriveTikaVersion:
    @pytest.mark.parametrize(
        ("tag", "expected"),
        [
            ("2.9.1.1", "2.9.1"),
            ("2.9.1.1-beta2", "2.9.1"),
            ("2.9.1.12-beta", "2.9.1"),
            ("3.0.0.0", "3.0.0"),
            (" 2.9.1.1\n", "2.9.1"),
        ],
    )
    def test_valid_tags(self, tag: str, expected: str) -> None:
        assert derive_tika_version(tag) == Ok(expected)

    @pytest.mark.parametrize(
        "tag",
        ["2.9.1", "v2.9.1.1", "2.9.1.1-rc1", "latest", "", "2.9.1.01", "2.9.1.1-beta-2"],
    )
    def test_malformed_tags(self, tag: str) -> None:
        result = derive_tika_version(tag)

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_version"
        assert result.error.hint is not None


class TestValidateTikaVersion:
    @pytest.mark.parametrize("version", ["2.9.1", "3.0.0-BETA", "3.0.0-BETA2", "1.28"])
    def test_valid(self, version: str) -> None:
        assert validate_tika_version(version) == Ok(version)

    def test_strips_whitespace(self) -> None:
        assert validate_tika_version(" 2.9.1 ") == Ok("2.9.1")

    @pytest.mark.parametrize("version", ["", "2", "latest", "2.9.1; rm -rf /", "v2.9.1"])
    def test_invalid(self, version: str) -> None:
        result = validate_tika_version(version)

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_version"
