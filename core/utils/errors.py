"""Custom exceptions for core logic."""

from __future__ import annotations

from typing import Literal

FormatErrorKind = Literal[
    "missing prefix",
    "mismatched brackets",
    "invalid JSON",
    "unexpected shape",
    "component data",
]


class FormatError(Exception):
    """Raised when one embedded call cannot be decoded.

    Always scoped to a single call; the aggregator turns it into a failure
    outcome and keeps going with the remaining calls.
    """

    def __init__(
        self,
        kind: FormatErrorKind,
        message: str | None = None,
        *,
        diagnostic: str | None = None,
    ) -> None:
        super().__init__(f"{kind}: {message}" if message else kind)
        self.kind = kind
        self.diagnostic = diagnostic


class EngineInvariantError(RuntimeError):
    """Raised when an internal contract of the engine is violated."""


class ConfigError(ValueError):
    """Raised when engine configuration cannot be loaded or validated."""
