"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    PrefixedConsole,
    RichConsole,
    Style,
    log_group,
)

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "PrefixedConsole",
    "RichConsole",
    "Style",
    "log_group",
]
