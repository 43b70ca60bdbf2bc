"""Console output abstraction.

This module provides a protocol for console output that can be implemented
by different backends (Rich, mock for testing). Pipeline steps report
progress only through it.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "PrefixedConsole",
    "log_group",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()  # Green, positive message
    ERROR = auto()  # Red, error message
    WARNING = auto()  # Yellow, warning message
    INFO = auto()  # Cyan, informational
    DIM = auto()  # Dimmed/muted text (commands, hints)
    BOLD = auto()  # Bold text
    HEADER = auto()  # Section header

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Protocol for console output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print a message with optional styling."""
        ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None:
        """Print a section header."""
        ...

    def group_start(self, title: str) -> None:
        """Open a collapsible log group (GitHub Actions) or print a header."""
        ...

    def group_end(self) -> None: ...

    def newline(self) -> None: ...


def _in_github_actions() -> bool:
    return os.environ.get("GITHUB_ACTIONS") == "true"


class RichConsole:
    """Console implementation using Rich library.

    This is the production implementation. Rich serialises writes from the
    branch threads, so lines from parallel variants never tear.
    """

    def __init__(self, *, github_groups: bool | None = None) -> None:
        # Import Rich lazily to avoid import-time dependency
        from rich.console import Console

        self._console = Console()
        self._github_groups = _in_github_actions() if github_groups is None else github_groups
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DIM: "dim",
            Style.BOLD: "bold",
            Style.HEADER: "blue bold",
        }

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        if rich_style:
            self._console.print(message, style=rich_style, markup=False)
        else:
            self._console.print(message, markup=False)

    def success(self, message: str) -> None:
        self._console.print(f"[green]OK[/green] {_escape(message)}")

    def error(self, message: str) -> None:
        self._console.print(f"[red bold]error:[/red bold] {_escape(message)}")

    def warning(self, message: str) -> None:
        self._console.print(f"[yellow]warning:[/yellow] {_escape(message)}")

    def info(self, message: str) -> None:
        self._console.print(f"[cyan]info:[/cyan] {_escape(message)}")

    def header(self, message: str) -> None:
        self._console.print(f"\n[blue bold]{_escape(message)}[/blue bold]")

    def group_start(self, title: str) -> None:
        if self._github_groups:
            # Workflow commands must reach the log verbatim
            self._console.print(f"::group::{title}", markup=False, highlight=False)
        else:
            self.header(title)

    def group_end(self) -> None:
        if self._github_groups:
            self._console.print("::endgroup::", markup=False, highlight=False)

    def newline(self) -> None:
        self._console.print()


def _escape(message: str) -> str:
    from rich.markup import escape

    return escape(message)


@dataclass(frozen=True, slots=True)
class PrefixedConsole:
    """Console wrapper that tags every line with a matrix branch label."""

    inner: ConsoleProtocol
    prefix: str

    def _tag(self, message: str) -> str:
        return f"[{self.prefix}] {message}" if message else message

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.inner.print(self._tag(message), style)

    def success(self, message: str) -> None:
        self.inner.success(self._tag(message))

    def error(self, message: str) -> None:
        self.inner.error(self._tag(message))

    def warning(self, message: str) -> None:
        self.inner.warning(self._tag(message))

    def info(self, message: str) -> None:
        self.inner.info(self._tag(message))

    def header(self, message: str) -> None:
        self.inner.header(self._tag(message))

    def group_start(self, title: str) -> None:
        self.inner.group_start(self._tag(title))

    def group_end(self) -> None:
        self.inner.group_end()

    def newline(self) -> None:
        self.inner.newline()


@contextmanager
def log_group(console: ConsoleProtocol, title: str) -> Iterator[None]:
    """Wrap a block of output in a log group, closing it on every exit path."""
    console.group_start(title)
    try:
        yield
    finally:
        console.group_end()


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    """Factory for empty outputs list (helps type inference)."""
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"OK {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"warning: {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"info: {message}", Style.INFO))

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    def group_start(self, title: str) -> None:
        self.outputs.append(OutputRecord(f"::group::{title}", Style.HEADER))

    def group_end(self) -> None:
        self.outputs.append(OutputRecord("::endgroup::", Style.DIM))

    def newline(self) -> None:
        self.outputs.append(OutputRecord("", Style.DEFAULT))

    # Test helper methods

    def clear(self) -> None:
        self.outputs.clear()

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        """All output as a single newline-separated string."""
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_success(self) -> bool:
        return any(o.style == Style.SUCCESS for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """Find all outputs containing a substring."""
        return [o for o in self.outputs if substring in o.message]
