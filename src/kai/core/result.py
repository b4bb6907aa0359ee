"""
Result type and error hierarchy for kai.

This module provides:
1. Result[T, E] type for explicit error handling
2. Domain-specific exception hierarchy

Usage:
    from kai.core.result import Ok, Err, Result, ScanError

    def scan() -> Result[list[str], ScanError]:
        if unreadable:
            return Err(ScanError("Root is unreadable"))
        return Ok(["a", "b"])

    match scan():
        case Ok(entries):
            ...
        case Err(err):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E", bound=Exception)


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Represents a successful result containing a value."""

    value: T


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Represents a failed result containing an error."""

    error: E


Result = Ok[T] | Err[E]


# ---------------------------------------------------------------------------
# Domain-specific error hierarchy
# ---------------------------------------------------------------------------


class KaiError(Exception):
    """Base exception for all kai errors."""

    def __init__(self, message: str, *, context: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{ctx_str}]"
        return self.message


class ScanError(KaiError):
    """Raised when the projects root cannot be listed.

    Examples:
    - Permission denied on the root
    - Root replaced by a file between the existence check and the listing
    """


class ConfigurationError(KaiError):
    """Raised for configuration issues.

    Examples:
    - Config file is not valid JSON
    - Config root is not an object
    """


class RecencyError(KaiError):
    """Raised when the recent-directory list cannot be persisted."""


class TerminalError(KaiError):
    """Raised when the picker cannot take over the terminal.

    Examples:
    - stdin is a pipe or a file instead of a TTY
    - Terminal attributes cannot be read or restored
    """


__all__ = [
    "Ok",
    "Err",
    "Result",
    "KaiError",
    "ScanError",
    "ConfigurationError",
    "RecencyError",
    "TerminalError",
]
