#!/usr/bin/env python3
# jsrepl/engine/tokens.py
from __future__ import annotations

"""
Token data structures produced by the lexer.

Tokens are plain frozen dataclasses so they compare by value; `to_dict` /
`from_dict` give the lossless structured form used by the JSON dumps.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable


class TokenKind(str, Enum):
    KEYWORD = "Keyword"
    IDENTIFIER = "Identifier"
    PUNCTUATOR = "Punctuator"
    NUMERIC_LITERAL = "NumericLiteral"
    STRING_LITERAL = "StringLiteral"
    BOOLEAN_LITERAL = "BooleanLiteral"
    NULL_LITERAL = "NullLiteral"
    LINE_TERMINATOR = "LineTerminator"


# Reserved words recognised by the grammar.
KEYWORDS: frozenset[str] = frozenset({
    "break", "case", "catch", "class", "const", "continue", "debugger",
    "default", "delete", "do", "else", "export", "extends", "finally", "for",
    "function", "if", "import", "in", "instanceof", "let", "new", "return",
    "super", "switch", "this", "throw", "try", "typeof", "var", "void",
    "while", "with", "yield", "await", "enum",
})

# Longest first so the lexer can match greedily.
PUNCTUATORS: tuple[str, ...] = tuple(sorted({
    ">>>=", "...", "===", "!==", "**=", "<<=", ">>=", ">>>",
    "=>", "==", "!=", "<=", ">=", "&&", "||", "??", "++", "--",
    "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "**", "<<", ">>",
    "{", "}", "(", ")", "[", "]", ";", ",", "<", ">", "+", "-", "*",
    "/", "%", "&", "|", "^", "!", "~", "?", ":", "=", ".",
}, key=len, reverse=True))


@dataclass(frozen=True, slots=True)
class Position:
    line: int
    column: int


@dataclass(frozen=True, slots=True)
class Span:
    start: Position
    end: Position


@dataclass(frozen=True, slots=True)
class Token:
    """
    A lexical token.

    Attributes:
        kind: Token class.
        value: Keyword/identifier/punctuator text, the decoded string, the
               numeric value (float), True/False, or None for `null` and
               line terminators.
        span: Source range, 1-based line and column, end exclusive.
    """

    kind: TokenKind
    value: Any
    span: Span

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "value": self.value,
            "span": {
                "start": {"line": self.span.start.line, "column": self.span.start.column},
                "end": {"line": self.span.end.line, "column": self.span.end.column},
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Token":
        span = data["span"]
        return cls(
            kind=TokenKind(data["kind"]),
            value=data["value"],
            span=Span(
                Position(span["start"]["line"], span["start"]["column"]),
                Position(span["end"]["line"], span["end"]["column"]),
            ),
        )

    def is_punct(self, *texts: str) -> bool:
        return self.kind is TokenKind.PUNCTUATOR and self.value in texts

    def is_keyword(self, *words: str) -> bool:
        return self.kind is TokenKind.KEYWORD and self.value in words

    def describe(self) -> str:
        """Short human-readable form for error messages."""
        if self.kind is TokenKind.STRING_LITERAL:
            return f"string {self.value!r}"
        if self.kind is TokenKind.NUMERIC_LITERAL:
            return f"number {self.value:g}"
        if self.kind is TokenKind.LINE_TERMINATOR:
            return "line terminator"
        if self.kind is TokenKind.NULL_LITERAL:
            return "'null'"
        if self.kind is TokenKind.BOOLEAN_LITERAL:
            return "'true'" if self.value else "'false'"
        return f"'{self.value}'"


def tokens_to_data(tokens: Iterable[Token]) -> list[dict[str, Any]]:
    return [t.to_dict() for t in tokens]


def tokens_from_data(data: Iterable[dict[str, Any]]) -> list[Token]:
    return [Token.from_dict(item) for item in data]
