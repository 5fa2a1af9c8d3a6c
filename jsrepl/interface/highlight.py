#!/usr/bin/env python3
# jsrepl/interface/highlight.py
from __future__ import annotations

"""
Line highlighter.

`LineHighlighter.spans(line)` carves a raw line into (text, category)
spans: identifier-like runs, one- or two-character operators, and the
gaps between them. Categories map to abstract `SpanStyle`s; rendering to
ANSI escapes or prompt_toolkit fragments happens in the adapters at the
bottom of this module. Classification is cosmetic only and never feeds
back into evaluation.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional

from prompt_toolkit.document import Document
from prompt_toolkit.lexers import Lexer
from prompt_toolkit.styles import Style

from jsrepl.ui.utils.ansi import ANSI, colorize, rgb, strip_ansi


class TokenCategory(str, Enum):
    RESERVED_WORD = "reserved"
    LITERAL_CONSTANT = "literal"
    SPECIAL_IDENTIFIER = "undefined"
    PLAIN_IDENTIFIER = "identifier"
    OPERATOR = "operator"
    OTHER = "other"


DEFAULT_RESERVED_WORDS: tuple[str, ...] = (
    "break", "case", "catch", "class", "const", "continue", "default",
    "delete", "do", "else", "export", "extends", "finally", "for",
    "function", "if", "import", "instanceof", "new", "return", "super",
    "switch", "this", "throw", "try", "typeof", "var", "void", "while",
    "with", "yield", "await", "enum", "let",
)

LITERAL_CONSTANTS: frozenset[str] = frozenset({"true", "false", "null", "Infinity"})
SPECIAL_IDENTIFIERS: frozenset[str] = frozenset({"undefined"})


class KeywordTable:
    """Immutable set of reserved words, built once and shared by reference."""

    __slots__ = ("_words",)

    def __init__(self, words: Iterable[str] = DEFAULT_RESERVED_WORDS) -> None:
        self._words = frozenset(words)

    def __contains__(self, word: object) -> bool:
        return word in self._words

    def __len__(self) -> int:
        return len(self._words)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._words))

    def __repr__(self) -> str:
        return f"KeywordTable({len(self._words)} words)"


@dataclass(frozen=True)
class SpanStyle:
    """Renderer-neutral style: a colour name plus attributes."""

    color: Optional[str] = None
    bold: bool = False

    def to_ansi(self) -> str:
        seq = ANSI["bold"] if self.bold else ""
        if self.color == "gray":
            seq += rgb(100, 100, 100)
        elif self.color:
            seq += ANSI[self.color]
        return seq

    def to_prompt_toolkit(self) -> str:
        parts = []
        if self.color == "gray":
            parts.append("ansibrightblack")
        elif self.color:
            parts.append(f"ansi{self.color}")
        if self.bold:
            parts.append("bold")
        return " ".join(parts)


DEFAULT_STYLES: dict[TokenCategory, SpanStyle] = {
    TokenCategory.RESERVED_WORD: SpanStyle("yellow", bold=True),
    TokenCategory.LITERAL_CONSTANT: SpanStyle("magenta"),
    TokenCategory.SPECIAL_IDENTIFIER: SpanStyle("gray"),
    TokenCategory.PLAIN_IDENTIFIER: SpanStyle(),
    TokenCategory.OPERATOR: SpanStyle("green"),
    TokenCategory.OTHER: SpanStyle(),
}

# identifiers first, then two-character operators before single ones
_TOKEN_RE = re.compile(
    r"(?P<ident>[$A-Za-z_][$A-Za-z0-9_]*)"
    r"|(?P<op>==|!=|<=|>=|&&|\|\||\+\+|--|\*\*|=>|\?\?|[-+*/%=<>!&|^~?:,.;])"
)


@dataclass(frozen=True)
class Span:
    text: str
    category: TokenCategory


class LineHighlighter:
    def __init__(self, keywords: KeywordTable,
                 styles: Optional[dict[TokenCategory, SpanStyle]] = None) -> None:
        self.keywords = keywords
        self.styles = dict(DEFAULT_STYLES if styles is None else styles)

    def classify(self, word: str) -> TokenCategory:
        """Category of one identifier-like run."""
        if word in self.keywords:
            return TokenCategory.RESERVED_WORD
        if word in LITERAL_CONSTANTS:
            return TokenCategory.LITERAL_CONSTANT
        if word in SPECIAL_IDENTIFIERS:
            return TokenCategory.SPECIAL_IDENTIFIER
        return TokenCategory.PLAIN_IDENTIFIER

    def spans(self, line: str) -> list[Span]:
        out: list[Span] = []
        last = 0
        for match in _TOKEN_RE.finditer(line):
            if match.start() > last:
                out.append(Span(line[last:match.start()], TokenCategory.OTHER))
            if match.lastgroup == "ident":
                out.append(Span(match.group(), self.classify(match.group())))
            else:
                out.append(Span(match.group(), TokenCategory.OPERATOR))
            last = match.end()
        if last < len(line):
            out.append(Span(line[last:], TokenCategory.OTHER))
        return out

    def style_of(self, category: TokenCategory) -> SpanStyle:
        return self.styles.get(category, SpanStyle())

    def highlight(self, line: str, cursor: int = 0) -> list[tuple[Span, SpanStyle]]:
        """
        Styled spans for `line`.

        `cursor` is accepted so callers can pass the editor position; the
        output does not depend on it.
        """
        return [(span, self.style_of(span.category)) for span in self.spans(line)]

    def render_ansi(self, line: str, cursor: int = 0) -> str:
        parts = []
        for span, style in self.highlight(line, cursor):
            seq = style.to_ansi()
            parts.append(colorize(span.text, seq) if seq else span.text)
        return "".join(parts)

    def prompt_toolkit_style(self) -> Style:
        return Style.from_dict({
            category.value: style.to_prompt_toolkit()
            for category, style in self.styles.items()
            if style.to_prompt_toolkit()
        })


def strip(rendered: str) -> str:
    """Plain text of a rendered line."""
    return strip_ansi(rendered)


class HighlightLexer(Lexer):
    """prompt_toolkit lexer emitting `class:<category>` fragments."""

    def __init__(self, highlighter: LineHighlighter) -> None:
        self.highlighter = highlighter

    def lex_document(self, document: Document):
        lines = document.lines

        def get_line(lineno: int):
            if lineno >= len(lines):
                return []
            return [(f"class:{span.category.value}", span.text)
                    for span in self.highlighter.spans(lines[lineno])]

        return get_line
