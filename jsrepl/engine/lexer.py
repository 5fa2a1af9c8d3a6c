#!/usr/bin/env python3
# jsrepl/engine/lexer.py
from __future__ import annotations

"""
Source text to token list.

Whitespace and comments are skipped; line breaks are kept as
LINE_TERMINATOR tokens because the parser needs them for automatic
semicolon insertion. Malformed input raises SourceSyntaxError.
"""

from jsrepl.errors import SourceSyntaxError
from jsrepl.engine.tokens import KEYWORDS, PUNCTUATORS, Position, Span, Token, TokenKind

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}

_WHITESPACE = " \t\v\f\u00a0\ufeff"
_DIGITS = "0123456789"


def _is_id_start(ch: str) -> bool:
    return ch == "$" or ch == "_" or ch.isalpha()


def _is_id_part(ch: str) -> bool:
    return _is_id_start(ch) or ch in _DIGITS


class Lexer:
    def __init__(self, source: str) -> None:
        self.source = source
        self.tokens: list[Token] = []
        self.current = 0
        self.line = 1
        self.column = 1
        self._start = Position(1, 1)

    # ---- cursor helpers ----------------------------------------------------

    def _at_end(self) -> bool:
        return self.current >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        index = self.current + offset
        return self.source[index] if index < len(self.source) else "\0"

    def _advance(self) -> str:
        ch = self.source[self.current]
        self.current += 1
        if ch == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def _position(self) -> Position:
        return Position(self.line, self.column)

    def _error(self, message: str) -> SourceSyntaxError:
        return SourceSyntaxError(
            f"{message} at line {self.line}, col {self.column}", self.line, self.column)

    def _add(self, kind: TokenKind, value) -> None:
        self.tokens.append(Token(kind, value, Span(self._start, self._position())))

    # ---- main loop ---------------------------------------------------------

    def lex(self) -> list[Token]:
        """Scan the whole source and return the token list."""
        while not self._at_end():
            self._start = self._position()
            self._scan_token()
        return self.tokens

    def _scan_token(self) -> None:
        ch = self._peek()

        if ch in _WHITESPACE:
            self._advance()
            return
        if ch == "\r":
            self._advance()
            if self._peek() == "\n":
                self._advance()
            else:
                # a lone "\r" does not move the line counter in _advance
                self.line += 1
                self.column = 1
            self._add(TokenKind.LINE_TERMINATOR, None)
            return
        if ch in "\n\u2028\u2029":
            self._advance()
            if ch != "\n":
                self.line += 1
                self.column = 1
            self._add(TokenKind.LINE_TERMINATOR, None)
            return
        if ch == "/" and self._peek(1) == "/":
            while not self._at_end() and self._peek() not in "\r\n\u2028\u2029":
                self._advance()
            return
        if ch == "/" and self._peek(1) == "*":
            self._block_comment()
            return
        if ch in "\"'":
            self._string(ch)
            return
        if ch in _DIGITS or (ch == "." and self._peek(1) in _DIGITS):
            self._number()
            return
        if _is_id_start(ch):
            self._identifier()
            return
        for punct in PUNCTUATORS:
            if self.source.startswith(punct, self.current):
                for _ in punct:
                    self._advance()
                self._add(TokenKind.PUNCTUATOR, punct)
                return
        raise self._error(f"unexpected character {ch!r}")

    # ---- token scanners ----------------------------------------------------

    def _block_comment(self) -> None:
        self._advance()
        self._advance()
        spans_lines = False
        while not (self._peek() == "*" and self._peek(1) == "/"):
            if self._at_end():
                raise self._error("unterminated comment")
            if self._advance() == "\n":
                spans_lines = True
        self._advance()
        self._advance()
        # A multi-line comment acts as a line break for semicolon insertion
        if spans_lines:
            self._add(TokenKind.LINE_TERMINATOR, None)

    def _string(self, quote: str) -> None:
        self._advance()
        chars: list[str] = []
        while True:
            if self._at_end() or self._peek() in "\r\n":
                raise self._error("unterminated string literal")
            ch = self._advance()
            if ch == quote:
                break
            if ch == "\\":
                chars.append(self._escape())
            else:
                chars.append(ch)
        self._add(TokenKind.STRING_LITERAL, "".join(chars))

    def _escape(self) -> str:
        if self._at_end():
            raise self._error("unterminated string literal")
        ch = self._advance()
        if ch in _SIMPLE_ESCAPES and not (ch == "0" and self._peek() in _DIGITS):
            return _SIMPLE_ESCAPES[ch]
        if ch == "\r":
            if self._peek() == "\n":
                self._advance()
            return ""
        if ch == "\n":
            # line continuation
            return ""
        if ch == "x":
            return chr(self._hex_digits(2))
        if ch == "u":
            if self._peek() == "{":
                self._advance()
                digits = ""
                while self._peek() != "}":
                    if self._at_end() or self._peek() not in "0123456789abcdefABCDEF":
                        raise self._error("invalid Unicode escape sequence")
                    digits += self._advance()
                self._advance()
                if not digits or int(digits, 16) > 0x10FFFF:
                    raise self._error("invalid Unicode escape sequence")
                return chr(int(digits, 16))
            return chr(self._hex_digits(4))
        return ch

    def _hex_digits(self, count: int) -> int:
        digits = ""
        for _ in range(count):
            if self._peek() not in "0123456789abcdefABCDEF" or self._at_end():
                raise self._error("invalid hexadecimal escape sequence")
            digits += self._advance()
        return int(digits, 16)

    def _number(self) -> None:
        start = self.current
        if self._peek() == "0" and self._peek(1) in "xXoObB":
            self._advance()
            marker = self._advance().lower()
            base, allowed = {
                "x": (16, "0123456789abcdefABCDEF"),
                "o": (8, "01234567"),
                "b": (2, "01"),
            }[marker]
            digits_start = self.current
            while self._peek() in allowed and not self._at_end():
                self._advance()
            digits = self.source[digits_start:self.current]
            if not digits:
                raise self._error("missing digits after numeric prefix")
            value = float(int(digits, base))
        else:
            while self._peek() in _DIGITS:
                self._advance()
            if self._peek() == ".":
                self._advance()
                while self._peek() in _DIGITS:
                    self._advance()
            if self._peek() in "eE":
                self._advance()
                if self._peek() in "+-":
                    self._advance()
                if self._peek() not in _DIGITS:
                    raise self._error("missing exponent digits")
                while self._peek() in _DIGITS:
                    self._advance()
            value = float(self.source[start:self.current])
        if _is_id_start(self._peek()) or self._peek() in _DIGITS:
            raise self._error("identifier starts immediately after numeric literal")
        self._add(TokenKind.NUMERIC_LITERAL, value)

    def _identifier(self) -> None:
        start = self.current
        while not self._at_end() and _is_id_part(self._peek()):
            self._advance()
        text = self.source[start:self.current]
        if text in ("true", "false"):
            self._add(TokenKind.BOOLEAN_LITERAL, text == "true")
        elif text == "null":
            self._add(TokenKind.NULL_LITERAL, None)
        elif text in KEYWORDS:
            self._add(TokenKind.KEYWORD, text)
        else:
            self._add(TokenKind.IDENTIFIER, text)


def tokenize(source: str) -> list[Token]:
    """Lex `source`; raises SourceSyntaxError on malformed input."""
    return Lexer(source).lex()
