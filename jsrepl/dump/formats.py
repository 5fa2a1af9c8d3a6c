#!/usr/bin/env python3
# jsrepl/dump/formats.py
from __future__ import annotations

"""
Dump selection types.

A dump flag on the command line has three meaningful states: absent,
present without a value, present with a format. `DumpRequest` keeps those
apart explicitly instead of nesting optionals.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class DumpFormat(str, Enum):
    DEBUG = "debug"
    JSON = "json"
    JSON_PRETTY = "jsonpretty"

    @classmethod
    def parse(cls, text: str) -> "DumpFormat":
        """Case-insensitive lookup; raises ValueError for unknown names."""
        key = text.strip().lower()
        for fmt in cls:
            if fmt.value == key:
                return fmt
        choices = ", ".join(f.value for f in cls)
        raise ValueError(f"invalid dump format {text!r} (choose from {choices})")


class DumpTarget(str, Enum):
    TOKENS = "tokens"
    SYNTAX_TREE = "ast"


@dataclass(frozen=True)
class NotRequested:
    def resolve(self) -> Optional[DumpFormat]:
        return None


@dataclass(frozen=True)
class RequestedDefault:
    def resolve(self) -> Optional[DumpFormat]:
        return DumpFormat.DEBUG


@dataclass(frozen=True)
class RequestedWithFormat:
    format: DumpFormat

    def resolve(self) -> Optional[DumpFormat]:
        return self.format


DumpRequest = Union[NotRequested, RequestedDefault, RequestedWithFormat]

NOT_REQUESTED = NotRequested()
REQUESTED_DEFAULT = RequestedDefault()


def is_requested(request: DumpRequest) -> bool:
    return not isinstance(request, NotRequested)


@dataclass(frozen=True)
class DumpMode:
    """A resolved dump selection for one invocation: what to dump and how."""

    target: DumpTarget
    request: DumpRequest

    @property
    def format(self) -> DumpFormat:
        return self.request.resolve() or DumpFormat.DEBUG


def select_mode(tokens: DumpRequest, tree: DumpRequest) -> Optional[DumpMode]:
    """
    Combine the token and tree requests into the invocation's dump mode.

    Returns None when neither is requested (input is evaluated instead).
    Raises ValueError when both are requested.
    """
    if is_requested(tokens) and is_requested(tree):
        raise ValueError("token and syntax tree dumps are mutually exclusive")
    if is_requested(tokens):
        return DumpMode(DumpTarget.TOKENS, tokens)
    if is_requested(tree):
        return DumpMode(DumpTarget.SYNTAX_TREE, tree)
    return None
