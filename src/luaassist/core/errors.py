"""
Error types for luaassist configuration and type deduction.

Deduction itself never raises past the engine boundary; the exceptions
below are either surfaced by configuration loading or caught by the
engine and coerced to the ``any`` type.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Optional


class LuaAssistError(Exception):
    """Base exception for all luaassist errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ConfigError(LuaAssistError):
    """
    Raised when engine configuration cannot be loaded.

    Examples:
    - Malformed TOML
    - Negative or non-integer depth ceiling
    - Empty require path separator
    """

    pass


class DeductionError(LuaAssistError):
    """
    Raised inside the interpreter for unexpected internal failures.

    Never escapes the engine: the public entry points catch it and
    degrade to the ``any`` type.
    """

    pass


class DeductionDepthError(DeductionError):
    """Raised when interpretation nests deeper than the configured ceiling."""

    pass


class NoResultReason(StrEnum):
    """Why an interpreter step produced no type."""

    UNRESOLVABLE_REFERENCE = "unresolvable_reference"
    CYCLE_DETECTED = "cycle_detected"
    UNSUPPORTED_CONSTRUCT = "unsupported_construct"


@dataclass
class ErrorContext:
    """
    Source location attached to an error.

    Attributes:
        file: Path or URI of the file where the error occurred
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """

    file: str
    line: int
    column: int = 1

    def format(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"
