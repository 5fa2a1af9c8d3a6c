#!/usr/bin/env python3
# jsrepl/engine/adapter.py
from __future__ import annotations

"""
Boundary between the shell and the engine.

`forward` runs one source string in a persistent realm and turns every
engine failure into a single EngineError carrying a printable message;
callers never see lexer, parser or runtime exception types.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator

from jsrepl.errors import EngineError, ParsingError, SourceSyntaxError
from jsrepl.engine.realm import Realm
from jsrepl.engine.values import JSObject, JSThrow, display, error_summary

log = logging.getLogger("jsrepl.engine")

# Python frames needed per nested call in the evaluator, with room to spare
_RECURSION_HEADROOM = 8000


@contextmanager
def _stack_headroom(limit: int = _RECURSION_HEADROOM) -> Iterator[None]:
    old = sys.getrecursionlimit()
    if old < limit:
        sys.setrecursionlimit(limit)
    try:
        yield
    finally:
        sys.setrecursionlimit(old)


def describe_thrown(value: Any) -> str:
    """Printable form of an uncaught thrown value."""
    if isinstance(value, JSObject) and value.is_error():
        return error_summary(value)
    return display(value)


def forward(realm: Realm, source: str) -> Any:
    """
    Evaluate `source` in `realm` and return the completion value.

    Raises:
        EngineError: for syntax errors and uncaught exceptions. The message
        is what the user should see, e.g. "SyntaxError: ..." or
        "ReferenceError: x is not defined".
    """
    try:
        with _stack_headroom():
            return realm.evaluate(source)
    except SourceSyntaxError as exc:
        raise EngineError(str(exc)) from exc
    except ParsingError as exc:
        raise EngineError(str(exc)) from exc
    except JSThrow as exc:
        raise EngineError(describe_thrown(exc.value), exc.value) from None
    except RecursionError:
        log.debug("python recursion limit hit during evaluation")
        realm.interpreter.depth = 0
        raise EngineError("RangeError: Maximum call stack size exceeded") from None


def render(value: Any) -> str:
    """Printable form of a completion value."""
    return display(value)
