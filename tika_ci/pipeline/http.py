"""HTTP client used by the reachability smoke check.

This module provides:
- HttpClient: Protocol for a HEAD request (injectable for tests)
- UrllibClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from tika_ci.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "UrllibClient",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    def head(self, url: str, *, timeout: float) -> Result[int, HttpError]:
        """Send HEAD (following redirects); Ok(status) for any non-error status."""
        ...


class UrllibClient:
    """HEAD requests through urllib.

    Status codes >= 400 are failures, matching `curl --fail`. The timeout
    applies to every blocking socket operation of the request, so unlike
    `curl --connect-timeout` it also bounds waiting for the response.
    """

    def __init__(self, user_agent: str = "tika-ci") -> None:
        self.user_agent = user_agent

    def head(self, url: str, *, timeout: float) -> Result[int, HttpError]:
        req = urllib.request.Request(
            url,
            method="HEAD",
            headers={"User-Agent": self.user_agent},
        )
        try:
            with urllib.request.urlopen(req, timeout=timeout) as response:
                return Ok(int(response.status))
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))


def _empty_calls() -> list[str]:
    return []


def _empty_responses() -> dict[str, int | HttpError]:
    return {}


@dataclass
class MockHttpClient:
    """Mock client for testing.

    Usage:
        http = MockHttpClient()
        http.set("http://localhost:9998/", 200)
        assert http.head("http://localhost:9998/", timeout=5) == Ok(200)

    Unknown URLs fail as connection refused.
    """

    responses: dict[str, int | HttpError] = field(default_factory=_empty_responses)
    calls: list[str] = field(default_factory=_empty_calls)

    def set(self, url: str, response: int | HttpError) -> None:
        self.responses[url] = response

    def head(self, url: str, *, timeout: float) -> Result[int, HttpError]:
        del timeout
        self.calls.append(url)
        response = self.responses.get(url)
        if response is None:
            return Err(HttpError(url=url, status=0, message="Connection refused"))
        if isinstance(response, HttpError):
            return Err(response)
        if response >= 400:
            return Err(HttpError(url=url, status=response, message="error status"))
        return Ok(response)
