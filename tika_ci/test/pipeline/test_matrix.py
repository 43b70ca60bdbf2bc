"""Tests for tika_ci.pipeline.matrix module."""

from __future__ import annotations

from pathlib import Path

from tika_ci.core.config import Config
from tika_ci.core.result import Err, Ok
from tika_ci.output.console import ConsoleProtocol, MockConsole
from tika_ci.pipeline.branch import BranchRunner, BranchState
from tika_ci.pipeline.docker import MockContainerEngine
from tika_ci.pipeline.http import MockHttpClient
from tika_ci.pipeline.errors import BuildError
from tika_ci.pipeline.matrix import (
    MatrixReport,
    build_runners,
    install_emulation,
    local_registry,
    run_matrix,
)
from tika_ci.pipeline.metadata import PublishContext
from tika_ci.pipeline.model import ALL_VARIANTS, BranchNames, BuildConfig, ImageVariant

CONFIG = BuildConfig("2.9.1", False, ("linux/amd64",))


class EngineFactory:
    """Hands each branch its own MockContainerEngine."""

    def __init__(self, users: dict[ImageVariant, str]) -> None:
        self.users = users
        self.engines: dict[ImageVariant, MockContainerEngine] = {}
        self.names: dict[ImageVariant, BranchNames] = {}

    def __call__(self, names: BranchNames, console: ConsoleProtocol) -> MockContainerEngine:
        del console
        engine = MockContainerEngine(user=self.users[names.variant])
        self.engines[names.variant] = engine
        self.names[names.variant] = names
        return engine


def _http() -> MockHttpClient:
    http = MockHttpClient()
    http.set("http://localhost:9998/", 200)
    http.set("http://localhost:9999/", 200)
    return http


def _runners(tmp_path: Path, factory: EngineFactory, console: MockConsole) -> list[BranchRunner]:
    return build_runners(
        CONFIG,
        ALL_VARIANTS,
        settings=Config(),
        engine_for=factory,
        http=_http(),
        publish=PublishContext(),
        console=console,
        state_root=tmp_path,
        sleep=lambda _: None,
    )


class TestBuildRunners:
    def test_branches_share_no_names(self, tmp_path: Path) -> None:
        factory = EngineFactory({v: "35002:35002" for v in ALL_VARIANTS})

        runners = _runners(tmp_path, factory, MockConsole())

        full, minimal = (r.names for r in runners)
        assert full.container == "tika-full-test"
        assert minimal.container == "tika-minimal-test"
        assert full.test_image != minimal.test_image
        assert full.docker_config_dir != minimal.docker_config_dir
        assert (full.host_port, minimal.host_port) == (9998, 9999)
        assert runners[0].builder_name != runners[1].builder_name

    def test_output_is_prefixed(self, tmp_path: Path) -> None:
        factory = EngineFactory({v: "35002:35002" for v in ALL_VARIANTS})
        console = MockConsole()

        run_matrix(_runners(tmp_path, factory, console))

        assert console.find("[full] Set up full builder")
        assert console.find("[minimal] Set up minimal builder")


class TestRunMatrix:
    def test_all_green(self, tmp_path: Path) -> None:
        factory = EngineFactory({v: "35002:35002" for v in ALL_VARIANTS})

        report = run_matrix(_runners(tmp_path, factory, MockConsole()))

        assert report.succeeded
        assert [o.variant for o in report.outcomes] == list(ALL_VARIANTS)
        assert all(o.terminal == BranchState.success for o in report.outcomes)

    def test_failing_branch_does_not_stop_sibling(self, tmp_path: Path) -> None:
        factory = EngineFactory({ImageVariant.full: "35002:35002", ImageVariant.minimal: "root"})

        report = run_matrix(_runners(tmp_path, factory, MockConsole()))

        assert not report.succeeded
        assert [o.variant for o in report.failed] == [ImageVariant.minimal]
        full = report.outcomes[0]
        assert full.succeeded
        # Each engine saw only its own container
        assert ("remove_container", "tika-full-test") in factory.engines[ImageVariant.full].calls
        assert all(
            "tika-full-test" not in call
            for call in factory.engines[ImageVariant.minimal].calls
        )

    def test_empty_matrix_is_not_green(self) -> None:
        report = run_matrix([])

        assert report == MatrixReport(outcomes=())
        assert not report.succeeded


class TestLocalRegistry:
    def test_started_and_removed(self) -> None:
        engine = MockContainerEngine()

        with local_registry(engine, settings=Config(), console=MockConsole()) as started:
            assert isinstance(started, Ok)

        assert engine.calls == [
            ("run_container", "tika-ci-registry", "registry:2", "5000:5000"),
            ("remove_container", "tika-ci-registry"),
        ]

    def test_start_failure_is_reported(self) -> None:
        engine = MockContainerEngine()
        engine.fail("run_container")

        with local_registry(engine, settings=Config(), console=MockConsole()) as started:
            assert isinstance(started, Err)


class TestInstallEmulation:
    def test_once_per_run(self, tmp_path: Path) -> None:
        host = MockContainerEngine()
        factory = EngineFactory({v: "35002:35002" for v in ALL_VARIANTS})

        assert install_emulation(host, console=MockConsole()) == Ok(None)
        report = run_matrix(_runners(tmp_path, factory, MockConsole()))

        assert report.succeeded
        assert host.calls == [("setup_emulation",)]
        assert all(
            "setup_emulation" not in engine.operations() for engine in factory.engines.values()
        )

    def test_failure_names_no_variant(self) -> None:
        host = MockContainerEngine()
        host.fail("setup_emulation", stderr="operation not permitted")

        result = install_emulation(host, console=MockConsole())

        assert result == Err(
            BuildError(
                kind="setup_failed",
                variant=None,
                message="failed to install QEMU emulators",
                hint="operation not permitted",
            )
        )
