"""One matrix branch: Setup -> Build -> Test -> (Deploy | Skip) -> terminal.

A branch owns its container name, test image tag, host port and docker
config directory (see BranchNames), so two branches can run side by side
on one host without coordinating. Any step failure ends the branch; there
is no retry.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from tika_ci.core.config import Config
from tika_ci.core.result import Err, Ok, Result
from tika_ci.output.console import ConsoleProtocol, Style
from tika_ci.pipeline.docker import BuildRequest, ContainerEngine, running_container
from tika_ci.pipeline.errors import BuildError, DeployError, PipelineError
from tika_ci.pipeline.http import HttpClient
from tika_ci.pipeline.metadata import ImageMetadata, PublishContext, generate_metadata
from tika_ci.pipeline.model import BranchNames, BuildConfig, ImageVariant, TestResult
from tika_ci.pipeline.smoke import check_identity, check_reachability

__all__ = ["BranchOutcome", "BranchRunner", "BranchState"]


class BranchState(StrEnum):
    setup = "setup"
    build = "build"
    test = "test"
    deploy = "deploy"
    skip = "skip"
    success = "success"
    failure = "failure"


@dataclass(frozen=True, slots=True)
class BranchOutcome:
    """Where a branch ended and how it got there."""

    variant: ImageVariant
    path: tuple[BranchState, ...]
    error: PipelineError | None = None
    test: TestResult | None = None
    metadata: ImageMetadata | None = None

    @property
    def terminal(self) -> BranchState:
        return self.path[-1]

    @property
    def succeeded(self) -> bool:
        return self.terminal == BranchState.success

    @property
    def deployed(self) -> bool:
        return BranchState.deploy in self.path and self.succeeded


class BranchRunner:
    """Drive a single image variant through the pipeline."""

    def __init__(
        self,
        *,
        config: BuildConfig,
        variant: ImageVariant,
        names: BranchNames,
        settings: Config,
        engine: ContainerEngine,
        http: HttpClient,
        publish: PublishContext,
        console: ConsoleProtocol,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] | None = None,
        dry_run: bool = False,
    ) -> None:
        self._config = config
        self._variant = variant
        self._names = names
        self._settings = settings
        self._engine = engine
        self._http = http
        self._publish = publish
        self._console = console
        self._sleep = sleep
        self._clock = clock
        self._dry_run = dry_run

    @property
    def names(self) -> BranchNames:
        return self._names

    @property
    def builder_name(self) -> str:
        return f"{self._settings.build.image_name}-{self._variant}"

    def run(self) -> BranchOutcome:
        path: list[BranchState] = [BranchState.setup]

        def fail(error: PipelineError, test: TestResult | None = None) -> BranchOutcome:
            path.append(BranchState.failure)
            self._console.error(error.message)
            if error.hint:
                self._console.print(f"hint: {error.hint}", Style.DIM)
            return BranchOutcome(
                variant=self._variant,
                path=tuple(path),
                error=error,
                test=test,
            )

        setup = self.setup()
        if isinstance(setup, Err):
            return fail(setup.error)

        path.append(BranchState.build)
        tested = self.build_and_test(on_test=lambda: path.append(BranchState.test))
        if isinstance(tested, Err):
            return fail(tested.error)
        test = tested.value

        if not self._config.push_image:
            path.extend((BranchState.skip, BranchState.success))
            self._console.info("push disabled; skipping deploy")
            return BranchOutcome(variant=self._variant, path=tuple(path), test=test)

        path.append(BranchState.deploy)
        deployed = self.deploy()
        if isinstance(deployed, Err):
            return fail(deployed.error, test=test)

        path.append(BranchState.success)
        return BranchOutcome(
            variant=self._variant,
            path=tuple(path),
            test=test,
            metadata=deployed.value,
        )

    def setup(self) -> Result[None, BuildError]:
        """Create this branch's buildx builder.

        QEMU emulation is host-wide and installed once per run beforehand
        (see matrix.install_emulation).
        """
        self._console.header(f"Set up {self._variant} builder")
        builder = self._engine.ensure_builder(self.builder_name)
        if isinstance(builder, Err):
            return Err(
                BuildError(
                    kind="setup_failed",
                    variant=self._variant,
                    message=f"failed to create buildx builder {self.builder_name}",
                    hint=builder.error.stderr.strip() or str(builder.error),
                )
            )
        return Ok(None)

    def _build_request(
        self, *, tags: tuple[str, ...], labels: tuple[tuple[str, str], ...]
    ) -> BuildRequest:
        return BuildRequest(
            dockerfile=self._variant.dockerfile,
            context=self._settings.build.context,
            platforms=self._config.platforms,
            tags=tags,
            labels=labels,
            build_args=(("TIKA_VERSION", self._config.tika_version),),
            push=True,
            builder=self.builder_name,
        )

    def build_and_test(
        self, *, on_test: Callable[[], None] | None = None
    ) -> Result[TestResult, PipelineError]:
        """Build into the local registry, start one container and smoke-test it.

        The test container is removed on every exit path.
        """
        names = self._names
        smoke = self._settings.smoke

        self._console.header(f"Build Tika v{self._config.tika_version} {self._variant} image")
        built = self._engine.build(self._build_request(tags=(names.test_image,), labels=()))
        if isinstance(built, Err):
            return Err(
                BuildError(
                    kind="build_failed",
                    variant=self._variant,
                    message=f"image build failed for {self._variant}",
                    hint=str(built.error),
                )
            )

        if on_test is not None:
            on_test()
        self._console.header(f"Test {self._variant} image")
        with running_container(
            self._engine,
            name=names.container,
            image=names.test_image,
            host_port=names.host_port,
            container_port=smoke.port,
            console=self._console,
        ) as started:
            if isinstance(started, Err):
                return Err(
                    BuildError(
                        kind="container_start_failed",
                        variant=self._variant,
                        message=f"failed to start test container {names.container}",
                        hint=started.error.stderr.strip() or str(started.error),
                    )
                )

            if self._dry_run:
                self._console.print(
                    f"would wait {smoke.startup_grace_seconds:g}s, then check "
                    f"{smoke.url_for(names.host_port)} and user {smoke.expected_user}",
                    Style.DIM,
                )
                return Ok(
                    TestResult(
                        variant=self._variant,
                        reachable=True,
                        observed_user=smoke.expected_user,
                        expected_user=smoke.expected_user,
                    )
                )

            self._sleep(smoke.startup_grace_seconds)

            url = smoke.url_for(names.host_port)
            reached = check_reachability(
                self._http,
                url=url,
                timeout=smoke.connect_timeout_seconds,
                variant=self._variant,
            )
            if isinstance(reached, Err):
                return reached
            self._console.success(f"service responded on {url} (HTTP {reached.value})")

            identity = check_identity(
                self._engine,
                container=names.container,
                expected_user=smoke.expected_user,
                variant=self._variant,
            )
            if isinstance(identity, Err):
                return identity
            self._console.success(f"service runs as user {identity.value}")

            return Ok(
                TestResult(
                    variant=self._variant,
                    reachable=True,
                    observed_user=identity.value,
                    expected_user=smoke.expected_user,
                )
            )

    def metadata(self) -> ImageMetadata:
        return generate_metadata(
            self._config,
            variant=self._variant,
            image_name=self._settings.build.image_name,
            publish=self._publish,
            registries=self._settings.registries,
            labels=self._settings.labels,
            created=self._clock() if self._clock is not None else None,
        )

    def deploy(self) -> Result[ImageMetadata, DeployError]:
        """Log in to both registries, then rebuild and push under every tag."""
        self._console.header(f"Publish {self._settings.build.image_name}-{self._variant}")

        logins = self._publish.logins(self._settings.registries)
        if isinstance(logins, Err):
            return Err(
                DeployError(
                    kind="credentials_missing",
                    variant=self._variant,
                    message="registry credentials are not configured",
                    hint="set " + ", ".join(logins.error),
                )
            )

        for login in logins.value:
            logged_in = self._engine.login(
                registry=login.registry,
                username=login.username,
                password=login.password,
            )
            if isinstance(logged_in, Err):
                return Err(
                    DeployError(
                        kind="login_failed",
                        variant=self._variant,
                        message=f"login to {login.registry} failed",
                        hint=logged_in.error.stderr.strip() or None,
                    )
                )
            self._console.success(f"logged in to {login.registry}")

        meta = self.metadata()
        for ref in meta.refs:
            self._console.print(f"tag: {ref}", Style.DIM)

        pushed = self._engine.build(self._build_request(tags=meta.refs, labels=meta.labels))
        if isinstance(pushed, Err):
            return Err(
                DeployError(
                    kind="push_failed",
                    variant=self._variant,
                    message=f"push of {self._settings.build.image_name}-{self._variant} failed",
                    hint=str(pushed.error),
                )
            )

        self._console.success(f"published {len(meta.refs)} tags")
        return Ok(meta)
