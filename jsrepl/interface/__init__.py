#!/usr/bin/env python3
# jsrepl/interface/__init__.py
from __future__ import annotations

"""
Package for the interactive console interface.

Provides:
- Bracket validator and prompt_toolkit Validator adapter.
- Line highlighter, keyword table and prompt_toolkit Lexer adapter.
- Persistent history store.
- Output sinks (console / capture).
- CLI frontends (prompt_toolkit / plain input).
- Argument parsing into an Invocation.
- The REPL controller.
"""


# Leaves first (controller and cli depend on them)
from .validation import (
    BracketValidator,
    ValidationResult,
    ValidationStatus,
    validate,
)
from .highlight import (
    HighlightLexer,
    KeywordTable,
    LineHighlighter,
    Span,
    SpanStyle,
    TokenCategory,
    strip,
)
from .history import HistoryStore, escape_entry, unescape_entry
from .sink import CaptureSink, ConsoleSink, OutputSink

# CLI frontends and argument parsing
from .cli import BaseCLI, PlainCLI, PromptToolkitCLI, make_cli
from .args import Invocation, build_parser, parse_args

# Controller
from .controller import EXIT_COMMAND, Controller, ReplState

__all__ = [
    # validation
    "BracketValidator",
    "ValidationResult",
    "ValidationStatus",
    "validate",
    # highlight
    "HighlightLexer",
    "KeywordTable",
    "LineHighlighter",
    "Span",
    "SpanStyle",
    "TokenCategory",
    "strip",
    # history
    "HistoryStore",
    "escape_entry",
    "unescape_entry",
    # sinks
    "CaptureSink",
    "ConsoleSink",
    "OutputSink",
    # cli
    "BaseCLI",
    "PlainCLI",
    "PromptToolkitCLI",
    "make_cli",
    # args
    "Invocation",
    "build_parser",
    "parse_args",
    # controller
    "EXIT_COMMAND",
    "Controller",
    "ReplState",
]
