"""Smoke checks run against a freshly started test container."""

from __future__ import annotations

from tika_ci.core.result import Err, Ok, Result
from tika_ci.pipeline.docker import ContainerEngine
from tika_ci.pipeline.errors import TestFailure
from tika_ci.pipeline.http import HttpClient
from tika_ci.pipeline.model import ImageVariant


def check_reachability(
    http: HttpClient,
    *,
    url: str,
    timeout: float,
    variant: ImageVariant,
) -> Result[int, TestFailure]:
    """The service must answer HEAD on its default endpoint."""
    result = http.head(url, timeout=timeout)
    if isinstance(result, Err):
        return Err(
            TestFailure(
                check="reachability",
                variant=variant,
                message=f"service did not respond on {url}",
                hint=str(result.error),
            )
        )
    return Ok(result.value)


def check_identity(
    engine: ContainerEngine,
    *,
    container: str,
    expected_user: str,
    variant: ImageVariant,
) -> Result[str, TestFailure]:
    """The container must be configured to run as exactly `expected_user`."""
    result = engine.inspect_user(container)
    if isinstance(result, Err):
        return Err(
            TestFailure(
                check="identity",
                variant=variant,
                message=f"could not inspect container {container}",
                hint=result.error.stderr.strip() or str(result.error),
            )
        )

    user = result.value
    if user != expected_user:
        return Err(
            TestFailure(
                check="identity",
                variant=variant,
                message=f"service runs as user {user or '(unset)'}; expected {expected_user}",
            )
        )
    return Ok(user)
