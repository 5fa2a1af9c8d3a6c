#!/usr/bin/env python3
# jsrepl/errors.py
from __future__ import annotations

"""
Exception hierarchy shared by the shell, the dump pipeline and the engine.

Every failure the shell knows how to report derives from ShellError. The
`kind` attribute is the label printed in front of the message, so
`str(SourceSyntaxError("unterminated string"))` reads
"SyntaxError: unterminated string".
"""

from typing import Any


class ShellError(Exception):
    """Base class for all reportable shell failures."""

    kind = "Error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class SourceSyntaxError(ShellError):
    """Tokenization failure (malformed characters, unterminated literals)."""

    kind = "SyntaxError"

    def __init__(self, message: str, line: int = 0, column: int = 0) -> None:
        super().__init__(message)
        self.line = line
        self.column = column


class ParsingError(ShellError):
    """Tree-construction failure on a well-formed token stream."""

    kind = "ParsingError"

    def __init__(self, message: str, line: int = 0, column: int = 0) -> None:
        super().__init__(message)
        self.line = line
        self.column = column


class EngineError(ShellError):
    """
    Evaluation-time failure raised by the engine adapter.

    `value` holds the thrown engine value (an error object or any value used
    with `throw`); `message` is its display text.
    """

    kind = "Uncaught"

    def __init__(self, message: str, value: Any = None) -> None:
        super().__init__(message)
        self.value = value


class PersistenceError(ShellError):
    """History load or flush failure."""

    kind = "PersistenceError"


class ConfigError(ShellError, ValueError):
    """Invalid configuration value."""

    kind = "ConfigError"
