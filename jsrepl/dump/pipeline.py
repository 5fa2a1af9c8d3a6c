#!/usr/bin/env python3
# jsrepl/dump/pipeline.py
from __future__ import annotations

"""
Source to tokens to (optionally) syntax tree to text.

Tokenizing failures surface as SourceSyntaxError and parsing failures as
ParsingError; both leave nothing behind, the caller just prints them.
"""

import json
import logging
from pprint import pformat
from typing import Any

from jsrepl.dump.formats import DumpFormat, DumpMode, DumpRequest, DumpTarget
from jsrepl.engine.lexer import tokenize
from jsrepl.engine.nodes import Node, node_from_data, to_data
from jsrepl.engine.parser import parse
from jsrepl.engine.tokens import Token, tokens_from_data, tokens_to_data

log = logging.getLogger("jsrepl.dump")


def serialize(data: Any, structured: Any, fmt: DumpFormat) -> str:
    """
    Render one artifact.

    `data` is the in-memory object (shown by the debug format), `structured`
    its JSON-compatible form (used by both JSON formats).
    """
    if fmt is DumpFormat.JSON:
        return json.dumps(structured, separators=(",", ":"), ensure_ascii=False)
    if fmt is DumpFormat.JSON_PRETTY:
        return json.dumps(structured, indent=2, ensure_ascii=False)
    return pformat(data, width=100, sort_dicts=False)


def dump(source: str, request: DumpRequest, target: DumpTarget) -> str:
    """
    Tokenize `source` and serialize tokens or the parsed tree.

    Raises:
        SourceSyntaxError: the source could not be tokenized.
        ParsingError: a tree dump was requested and parsing failed.
        ValueError: `request` is NotRequested.
    """
    fmt = request.resolve()
    if fmt is None:
        raise ValueError("dump() called without a dump request")

    tokens = tokenize(source)
    log.debug("dump: %d tokens", len(tokens))
    if target is DumpTarget.TOKENS:
        return serialize(tokens, tokens_to_data(tokens), fmt)

    program = parse(tokens)
    return serialize(program, to_data(program), fmt)


def dump_mode(source: str, mode: DumpMode) -> str:
    return dump(source, mode.request, mode.target)


def tokens_from_json(text: str) -> list[Token]:
    """Rebuild a token list from either JSON dump format."""
    return tokens_from_data(json.loads(text))


def node_from_json(text: str) -> Node:
    """Rebuild a syntax tree from either JSON dump format."""
    return node_from_data(json.loads(text))
