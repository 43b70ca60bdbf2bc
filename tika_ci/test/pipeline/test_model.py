"""Tests for tika_ci.pipeline.model module."""

from __future__ import annotations

from pathlib import Path

from tika_ci.pipeline.model import (
    ALL_VARIANTS,
    BranchNames,
    BuildConfig,
    ImageVariant,
    TestResult,
    ref_tag_name,
)


class TestImageVariant:
    def test_dockerfile(self) -> None:
        assert ImageVariant.full.dockerfile == "full/Dockerfile"
        assert ImageVariant.minimal.dockerfile == "minimal/Dockerfile"

    def test_all_variants(self) -> None:
        assert ALL_VARIANTS == (ImageVariant.full, ImageVariant.minimal)


class TestRefs:
    def test_ref_tag_name(self) -> None:
        assert ref_tag_name("refs/tags/2.9.1.1") == "2.9.1.1"
        assert ref_tag_name("refs/heads/main") is None
        assert ref_tag_name("refs/tags/") is None

    def test_build_config_tag_name(self) -> None:
        config = BuildConfig("2.9.1", True, ("linux/amd64",), ref="refs/tags/2.9.1.1")
        assert config.tag_name == "2.9.1.1"
        assert BuildConfig("2.9.1", False, ("linux/amd64",)).tag_name is None


class TestBranchNames:
    def test_names_for_variant(self, tmp_path: Path) -> None:
        names = BranchNames.for_variant(
            ImageVariant.full,
            image_name="tika",
            local_registry="localhost:5000",
            state_root=str(tmp_path),
            host_port=9998,
        )

        assert names.container == "tika-full-test"
        assert names.test_image == "localhost:5000/tika/tika-full:test"
        assert names.docker_config_dir == str(tmp_path / "docker-full")

    def test_variants_share_nothing(self, tmp_path: Path) -> None:
        full, minimal = (
            BranchNames.for_variant(
                v,
                image_name="tika",
                local_registry="localhost:5000",
                state_root=str(tmp_path),
                host_port=9998 + i,
            )
            for i, v in enumerate(ALL_VARIANTS)
        )

        assert full.container != minimal.container
        assert full.test_image != minimal.test_image
        assert full.docker_config_dir != minimal.docker_config_dir
        assert full.host_port != minimal.host_port


class TestTestResult:
    def test_passed(self) -> None:
        ok = TestResult(ImageVariant.full, True, "35002:35002", "35002:35002")
        assert ok.identity_ok
        assert ok.passed

    def test_wrong_user(self) -> None:
        bad = TestResult(ImageVariant.full, True, "root", "35002:35002")
        assert not bad.identity_ok
        assert not bad.passed
