"""Tests for tika_ci.output.errors module."""

from __future__ import annotations

from tika_ci.core.errors import ErrorCode
from tika_ci.output.console import MockConsole
from tika_ci.output.errors import (
    matrix_exit_code,
    pipeline_error_exit_code,
    print_pipeline_error,
)
from tika_ci.pipeline.errors import BuildError, ConfigurationError, DeployError, TestFailure
from tika_ci.pipeline.model import ImageVariant


def test_exit_code_per_error_type() -> None:
    assert pipeline_error_exit_code(
        ConfigurationError(kind="invalid_version", message="bad")
    ) == int(ErrorCode.CONFIG_ERROR)
    assert pipeline_error_exit_code(
        BuildError(kind="build_failed", variant=ImageVariant.full, message="x")
    ) == int(ErrorCode.BUILD_ERROR)
    assert pipeline_error_exit_code(
        TestFailure(check="identity", variant=ImageVariant.full, message="x")
    ) == int(ErrorCode.TEST_FAILURE)
    assert pipeline_error_exit_code(
        DeployError(kind="push_failed", variant=ImageVariant.full, message="x")
    ) == int(ErrorCode.DEPLOY_ERROR)


def test_matrix_exit_code_prefers_earliest_stage() -> None:
    errors = [
        DeployError(kind="login_failed", variant=ImageVariant.full, message="x"),
        TestFailure(check="reachability", variant=ImageVariant.minimal, message="y"),
    ]
    assert matrix_exit_code(errors) == int(ErrorCode.TEST_FAILURE)


def test_matrix_exit_code_without_errors() -> None:
    assert matrix_exit_code([]) == int(ErrorCode.OK)


def test_print_includes_variant_and_hint() -> None:
    console = MockConsole()
    print_pipeline_error(
        TestFailure(
            check="identity",
            variant=ImageVariant.minimal,
            message="service runs as user root; expected 35002:35002",
            hint="check the USER instruction",
        ),
        console,
    )

    assert console.messages == [
        "error: identity check (minimal): service runs as user root; expected 35002:35002",
        "hint: check the USER instruction",
    ]


def test_print_build_error_without_variant() -> None:
    console = MockConsole()
    print_pipeline_error(BuildError(kind="setup_failed", variant=None, message="no qemu"), console)

    assert console.messages == ["error: build (all): no qemu"]
