"""Tests for tika_ci.pipeline.http module."""

from __future__ import annotations

import urllib.request

import pytest

from tika_ci.core.result import Err, Ok
from tika_ci.pipeline.http import HttpError, UrllibClient

URL = "http://localhost:9998/"


class FakeResponse:
    def __init__(self, status: int) -> None:
        self.status = status

    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *exc: object) -> None:
        return None


class TestUrllibClient:
    def test_timeout_reaches_urlopen(self, monkeypatch: pytest.MonkeyPatch) -> None:
        seen: list[tuple[str, str | None, float]] = []

        def fake_urlopen(req: urllib.request.Request, *, timeout: float) -> FakeResponse:
            seen.append((req.full_url, req.get_method(), timeout))
            return FakeResponse(200)

        monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)

        assert UrllibClient().head(URL, timeout=5) == Ok(200)
        assert seen == [(URL, "HEAD", 5)]

    def test_slow_response_times_out(self, monkeypatch: pytest.MonkeyPatch) -> None:
        # urllib raises the bare TimeoutError once a read exceeds the timeout
        def fake_urlopen(req: urllib.request.Request, *, timeout: float) -> FakeResponse:
            del req, timeout
            raise TimeoutError("The read operation timed out")

        monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)

        assert UrllibClient().head(URL, timeout=5) == Err(
            HttpError(url=URL, status=0, message="Request timed out")
        )
