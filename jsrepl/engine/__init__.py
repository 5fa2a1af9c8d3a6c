#!/usr/bin/env python3
# jsrepl/engine/__init__.py
from __future__ import annotations
"""
Scripting engine used by the shell.

The shell only relies on `tokenize`, `parse`, `Realm`, `forward` and
`render`; everything else is internal to the engine.
"""

from jsrepl.engine.adapter import describe_thrown, forward, render
from jsrepl.engine.lexer import tokenize
from jsrepl.engine.nodes import Node, Program, node_from_data, to_data
from jsrepl.engine.parser import parse
from jsrepl.engine.realm import Realm
from jsrepl.engine.tokens import Token, TokenKind, tokens_from_data, tokens_to_data
from jsrepl.engine.values import UNDEFINED, display

__all__ = [
    "Node",
    "Program",
    "Realm",
    "Token",
    "TokenKind",
    "UNDEFINED",
    "describe_thrown",
    "display",
    "forward",
    "node_from_data",
    "parse",
    "render",
    "to_data",
    "tokenize",
    "tokens_from_data",
    "tokens_to_data",
]
