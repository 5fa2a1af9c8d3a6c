#!/usr/bin/env python3
# jsrepl/engine/realm.py
from __future__ import annotations

"""
A realm is one persistent evaluation context: the global scope, the
built-in prototypes and the interpreter that runs code against them.
Bindings created by one evaluation stay visible to the next.
"""

import sys
from typing import Any, Callable, Optional

from jsrepl.engine import builtins
from jsrepl.engine.interpreter import Binding, Interpreter, Scope
from jsrepl.engine.lexer import tokenize
from jsrepl.engine.parser import parse
from jsrepl.engine.values import JSObject

Writer = Callable[[str], None]


def _stdout_writer(text: str) -> None:
    sys.stdout.write(text + "\n")
    sys.stdout.flush()


def _stderr_writer(text: str) -> None:
    sys.stderr.write(text + "\n")
    sys.stderr.flush()


class Realm:
    def __init__(self, *, stdout: Optional[Writer] = None, stderr: Optional[Writer] = None) -> None:
        self.stdout: Writer = stdout or _stdout_writer
        self.stderr: Writer = stderr or _stderr_writer

        self.object_prototype = JSObject(None)
        self.function_prototype = JSObject(self.object_prototype)
        self.array_prototype = JSObject(self.object_prototype)
        self.string_prototype = JSObject(self.object_prototype)
        self.number_prototype = JSObject(self.object_prototype)
        self.boolean_prototype = JSObject(self.object_prototype)
        self.error_prototypes: dict[str, JSObject] = {}

        self.global_scope = Scope(None, is_function=True)
        self.interpreter = Interpreter(self)
        builtins.install(self)

    def define_global(self, name: str, value: Any, *, mutable: bool = True) -> None:
        self.global_scope.bindings[name] = Binding(value, mutable)

    def lookup_global(self, name: str) -> Any:
        binding = self.global_scope.bindings.get(name)
        if binding is None:
            raise KeyError(name)
        return binding.value

    def evaluate(self, source: str) -> Any:
        """Lex, parse and run `source`; returns the completion value.

        Raises SourceSyntaxError/ParsingError for malformed source and
        JSThrow for uncaught runtime exceptions.
        """
        return self.interpreter.run(parse(tokenize(source)))
