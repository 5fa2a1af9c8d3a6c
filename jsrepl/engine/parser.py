#!/usr/bin/env python3
# jsrepl/engine/parser.py
from __future__ import annotations

"""
Token list to syntax tree.

Recursive descent with one method per precedence level. Line terminator
tokens are folded into a `newline_before` flag on the following token, which
drives automatic semicolon insertion and the restricted productions
(`return`, `break`, `continue`, `throw`, postfix `++`/`--`).
"""

from dataclasses import dataclass
from typing import Optional

from jsrepl.errors import ParsingError
from jsrepl.engine import nodes as n
from jsrepl.engine.tokens import Position, Span, Token, TokenKind
from jsrepl.engine.values import number_to_string

_ASSIGNMENT_OPERATORS = {
    "=", "+=", "-=", "*=", "/=", "%=", "**=",
    "<<=", ">>=", ">>>=", "&=", "|=", "^=",
}

# Binary operator levels, loosest first. Each entry is (operators, keywords).
_BINARY_LEVELS: tuple[tuple[frozenset[str], frozenset[str]], ...] = (
    (frozenset({"|"}), frozenset()),
    (frozenset({"^"}), frozenset()),
    (frozenset({"&"}), frozenset()),
    (frozenset({"==", "!=", "===", "!=="}), frozenset()),
    (frozenset({"<", ">", "<=", ">="}), frozenset({"instanceof", "in"})),
    (frozenset({"<<", ">>", ">>>"}), frozenset()),
    (frozenset({"+", "-"}), frozenset()),
    (frozenset({"*", "/", "%"}), frozenset()),
)

_UNARY_OPERATORS = {"!", "-", "+", "~"}
_UNARY_KEYWORDS = {"typeof", "void", "delete"}


@dataclass(slots=True)
class _Cursor:
    token: Token
    newline_before: bool


def _eof_token(tokens: list[Token]) -> Token:
    end = tokens[-1].span.end if tokens else Position(1, 1)
    # zero-width sentinel; real line terminators carry None as their value
    return Token(TokenKind.LINE_TERMINATOR, "<eof>", Span(end, end))


class Parser:
    def __init__(self, tokens: list[Token]) -> None:
        self.items: list[_Cursor] = []
        newline = False
        for token in tokens:
            if token.kind is TokenKind.LINE_TERMINATOR:
                newline = True
                continue
            self.items.append(_Cursor(token, newline))
            newline = False
        self._eof = _Cursor(_eof_token(tokens), newline)
        self.current = 0

    # ---- cursor helpers ----------------------------------------------------

    def _cursor(self, offset: int = 0) -> _Cursor:
        index = self.current + offset
        return self.items[index] if index < len(self.items) else self._eof

    def _peek(self, offset: int = 0) -> Token:
        return self._cursor(offset).token

    def _at_end(self) -> bool:
        return self.current >= len(self.items)

    def _advance(self) -> Token:
        token = self._peek()
        if not self._at_end():
            self.current += 1
        return token

    def _check_punct(self, *texts: str) -> bool:
        return not self._at_end() and self._peek().is_punct(*texts)

    def _check_keyword(self, *words: str) -> bool:
        return not self._at_end() and self._peek().is_keyword(*words)

    def _match_punct(self, *texts: str) -> bool:
        if self._check_punct(*texts):
            self._advance()
            return True
        return False

    def _match_keyword(self, *words: str) -> bool:
        if self._check_keyword(*words):
            self._advance()
            return True
        return False

    def _error(self, message: str, token: Optional[Token] = None) -> ParsingError:
        token = token or self._peek()
        pos = token.span.start
        found = "end of input" if token is self._eof.token else token.describe()
        return ParsingError(
            f"{message}, found {found} at line {pos.line}, col {pos.column}",
            pos.line, pos.column)

    def _expect_punct(self, text: str) -> Token:
        if self._check_punct(text):
            return self._advance()
        raise self._error(f"expected '{text}'")

    def _expect_identifier(self, what: str = "identifier") -> str:
        if not self._at_end() and self._peek().kind is TokenKind.IDENTIFIER:
            return self._advance().value
        raise self._error(f"expected {what}")

    def _consume_semicolon(self) -> None:
        """Consume ';' or accept an inserted one before '}', EOF or a line break."""
        if self._match_punct(";"):
            return
        if self._at_end() or self._check_punct("}") or self._cursor().newline_before:
            return
        raise self._error("expected ';'")

    # ---- entry point -------------------------------------------------------

    def parse_all(self) -> n.Program:
        body: list[n.Node] = []
        while not self._at_end():
            body.append(self._statement())
        return n.Program(body)

    # ---- statements --------------------------------------------------------

    def _statement(self) -> n.Node:
        token = self._peek()
        if token.is_punct("{"):
            return self._block()
        if token.is_punct(";"):
            self._advance()
            return n.EmptyStatement()
        if token.kind is TokenKind.KEYWORD:
            handler = {
                "var": self._variable_statement,
                "let": self._variable_statement,
                "const": self._variable_statement,
                "function": self._function_declaration,
                "return": self._return_statement,
                "if": self._if_statement,
                "while": self._while_statement,
                "do": self._do_while_statement,
                "for": self._for_statement,
                "break": self._break_statement,
                "continue": self._continue_statement,
                "throw": self._throw_statement,
                "try": self._try_statement,
            }.get(token.value)
            if handler is not None:
                return handler()
        expression = self._expression()
        self._consume_semicolon()
        return n.ExpressionStatement(expression)

    def _block(self) -> n.BlockStatement:
        self._expect_punct("{")
        body: list[n.Node] = []
        while not self._check_punct("}"):
            if self._at_end():
                raise self._error("expected '}'")
            body.append(self._statement())
        self._advance()
        return n.BlockStatement(body)

    def _variable_declaration(self) -> n.VarDeclaration:
        kind = self._advance().value
        declarations: list[n.VarDeclarator] = []
        while True:
            name = self._expect_identifier("variable name")
            init = None
            if self._match_punct("="):
                init = self._assignment()
            elif kind == "const":
                raise self._error("missing initializer in const declaration")
            declarations.append(n.VarDeclarator(name, init))
            if not self._match_punct(","):
                break
        return n.VarDeclaration(kind, declarations)

    def _variable_statement(self) -> n.VarDeclaration:
        declaration = self._variable_declaration()
        self._consume_semicolon()
        return declaration

    def _function_parts(self) -> tuple[list[str], list[n.Node]]:
        self._expect_punct("(")
        params: list[str] = []
        if not self._check_punct(")"):
            while True:
                params.append(self._expect_identifier("parameter name"))
                if not self._match_punct(","):
                    break
        self._expect_punct(")")
        body = self._block().body
        return params, body

    def _function_declaration(self) -> n.FunctionDeclaration:
        self._advance()
        name = self._expect_identifier("function name")
        params, body = self._function_parts()
        return n.FunctionDeclaration(name, params, body)

    def _return_statement(self) -> n.ReturnStatement:
        self._advance()
        argument = None
        if not (self._at_end() or self._check_punct(";", "}") or self._cursor().newline_before):
            argument = self._expression()
        self._consume_semicolon()
        return n.ReturnStatement(argument)

    def _if_statement(self) -> n.IfStatement:
        self._advance()
        self._expect_punct("(")
        test = self._expression()
        self._expect_punct(")")
        consequent = self._statement()
        alternate = self._statement() if self._match_keyword("else") else None
        return n.IfStatement(test, consequent, alternate)

    def _while_statement(self) -> n.WhileStatement:
        self._advance()
        self._expect_punct("(")
        test = self._expression()
        self._expect_punct(")")
        return n.WhileStatement(test, self._statement())

    def _do_while_statement(self) -> n.DoWhileStatement:
        self._advance()
        body = self._statement()
        if not self._match_keyword("while"):
            raise self._error("expected 'while'")
        self._expect_punct("(")
        test = self._expression()
        self._expect_punct(")")
        self._match_punct(";")
        return n.DoWhileStatement(body, test)

    def _for_statement(self) -> n.ForStatement:
        self._advance()
        self._expect_punct("(")
        init: Optional[n.Node] = None
        if self._check_keyword("var", "let", "const"):
            init = self._variable_declaration()
        elif not self._check_punct(";"):
            init = self._expression()
        self._expect_punct(";")
        test = None if self._check_punct(";") else self._expression()
        self._expect_punct(";")
        update = None if self._check_punct(")") else self._expression()
        self._expect_punct(")")
        return n.ForStatement(init, test, update, self._statement())

    def _break_statement(self) -> n.BreakStatement:
        self._advance()
        self._consume_semicolon()
        return n.BreakStatement()

    def _continue_statement(self) -> n.ContinueStatement:
        self._advance()
        self._consume_semicolon()
        return n.ContinueStatement()

    def _throw_statement(self) -> n.ThrowStatement:
        keyword = self._advance()
        if self._at_end() or self._cursor().newline_before:
            raise self._error("illegal newline after throw", keyword)
        argument = self._expression()
        self._consume_semicolon()
        return n.ThrowStatement(argument)

    def _try_statement(self) -> n.TryStatement:
        self._advance()
        block = self._block()
        param = handler = finalizer = None
        if self._match_keyword("catch"):
            if self._match_punct("("):
                param = self._expect_identifier("catch parameter")
                self._expect_punct(")")
            handler = self._block()
        if self._match_keyword("finally"):
            finalizer = self._block()
        if handler is None and finalizer is None:
            raise self._error("missing catch or finally after try")
        return n.TryStatement(block, param, handler, finalizer)

    # ---- expressions -------------------------------------------------------

    def _expression(self) -> n.Node:
        expression = self._assignment()
        if not self._check_punct(","):
            return expression
        expressions = [expression]
        while self._match_punct(","):
            expressions.append(self._assignment())
        return n.SequenceExpression(expressions)

    def _assignment(self) -> n.Node:
        start = self._peek()
        target = self._conditional()
        if not self._at_end() and self._peek().kind is TokenKind.PUNCTUATOR \
                and self._peek().value in _ASSIGNMENT_OPERATORS:
            if not isinstance(target, (n.Identifier, n.MemberExpression)):
                raise self._error("invalid assignment target", start)
            operator = self._advance().value
            return n.AssignmentExpression(operator, target, self._assignment())
        return target

    def _conditional(self) -> n.Node:
        test = self._logical_or()
        if self._match_punct("?"):
            consequent = self._assignment()
            self._expect_punct(":")
            alternate = self._assignment()
            return n.ConditionalExpression(test, consequent, alternate)
        return test

    def _logical_or(self) -> n.Node:
        left = self._logical_and()
        while self._check_punct("||", "??"):
            operator = self._advance().value
            left = n.LogicalExpression(operator, left, self._logical_and())
        return left

    def _logical_and(self) -> n.Node:
        left = self._binary(0)
        while self._match_punct("&&"):
            left = n.LogicalExpression("&&", left, self._binary(0))
        return left

    def _binary(self, level: int) -> n.Node:
        if level >= len(_BINARY_LEVELS):
            return self._exponent()
        operators, keywords = _BINARY_LEVELS[level]
        left = self._binary(level + 1)
        while self._check_punct(*operators) or (keywords and self._check_keyword(*keywords)):
            operator = self._advance().value
            left = n.BinaryExpression(operator, left, self._binary(level + 1))
        return left

    def _exponent(self) -> n.Node:
        base = self._unary()
        if self._match_punct("**"):
            # right-associative
            return n.BinaryExpression("**", base, self._exponent())
        return base

    def _unary(self) -> n.Node:
        token = self._peek()
        if self._at_end():
            raise self._error("expected expression")
        if token.kind is TokenKind.PUNCTUATOR and token.value in _UNARY_OPERATORS:
            self._advance()
            return n.UnaryExpression(token.value, self._unary())
        if token.kind is TokenKind.KEYWORD and token.value in _UNARY_KEYWORDS:
            self._advance()
            return n.UnaryExpression(token.value, self._unary())
        if token.is_punct("++", "--"):
            self._advance()
            argument = self._unary()
            self._check_update_target(argument, token)
            return n.UpdateExpression(token.value, True, argument)
        return self._postfix()

    def _postfix(self) -> n.Node:
        expression = self._call()
        if self._check_punct("++", "--") and not self._cursor().newline_before:
            token = self._advance()
            self._check_update_target(expression, token)
            return n.UpdateExpression(token.value, False, expression)
        return expression

    def _check_update_target(self, target: n.Node, token: Token) -> None:
        if not isinstance(target, (n.Identifier, n.MemberExpression)):
            raise self._error(f"invalid operand for '{token.value}'", token)

    def _call(self) -> n.Node:
        expression = self._new() if self._check_keyword("new") else self._primary()
        while True:
            if self._match_punct("("):
                expression = n.CallExpression(expression, self._arguments())
            elif self._check_punct(".", "["):
                expression = self._member_suffix(expression)
            else:
                return expression

    def _new(self) -> n.Node:
        self._advance()
        if self._check_keyword("new"):
            callee = self._new()
        else:
            callee = self._primary()
            while self._check_punct(".", "["):
                callee = self._member_suffix(callee)
        arguments = self._arguments() if self._match_punct("(") else []
        return n.NewExpression(callee, arguments)

    def _member_suffix(self, obj: n.Node) -> n.Node:
        if self._match_punct("."):
            token = self._advance()
            # reserved words are valid property names after '.'
            if token.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD):
                return n.MemberExpression(obj, n.Identifier(token.value), False)
            if token.kind is TokenKind.BOOLEAN_LITERAL:
                return n.MemberExpression(obj, n.Identifier("true" if token.value else "false"), False)
            if token.kind is TokenKind.NULL_LITERAL:
                return n.MemberExpression(obj, n.Identifier("null"), False)
            raise self._error("expected property name", token)
        self._expect_punct("[")
        prop = self._expression()
        self._expect_punct("]")
        return n.MemberExpression(obj, prop, True)

    def _arguments(self) -> list[n.Node]:
        arguments: list[n.Node] = []
        if not self._check_punct(")"):
            while True:
                arguments.append(self._assignment())
                if not self._match_punct(","):
                    break
                if self._check_punct(")"):
                    break
        self._expect_punct(")")
        return arguments

    def _primary(self) -> n.Node:
        if self._at_end():
            raise self._error("expected expression")
        token = self._peek()
        kind = token.kind

        if kind in (TokenKind.NUMERIC_LITERAL, TokenKind.STRING_LITERAL,
                    TokenKind.BOOLEAN_LITERAL, TokenKind.NULL_LITERAL):
            self._advance()
            return n.Literal(token.value)
        if kind is TokenKind.IDENTIFIER:
            self._advance()
            return n.Identifier(token.value)
        if token.is_keyword("this"):
            self._advance()
            return n.ThisExpression()
        if token.is_keyword("function"):
            return self._function_expression()
        if token.is_punct("("):
            self._advance()
            expression = self._expression()
            self._expect_punct(")")
            return expression
        if token.is_punct("["):
            return self._array_literal()
        if token.is_punct("{"):
            return self._object_literal()
        raise self._error("expected expression")

    def _function_expression(self) -> n.FunctionExpression:
        self._advance()
        name = None
        if not self._at_end() and self._peek().kind is TokenKind.IDENTIFIER:
            name = self._advance().value
        params, body = self._function_parts()
        return n.FunctionExpression(name, params, body)

    def _array_literal(self) -> n.ArrayExpression:
        self._advance()
        elements: list[n.Node] = []
        while not self._check_punct("]"):
            elements.append(self._assignment())
            if not self._match_punct(","):
                break
        self._expect_punct("]")
        return n.ArrayExpression(elements)

    def _object_literal(self) -> n.ObjectExpression:
        self._advance()
        properties: list[n.Property] = []
        while not self._check_punct("}"):
            if self._at_end():
                raise self._error("expected '}'")
            key_token = self._advance()
            if key_token.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD, TokenKind.STRING_LITERAL):
                key = key_token.value
            elif key_token.kind is TokenKind.NUMERIC_LITERAL:
                key = number_to_string(key_token.value)
            elif key_token.kind in (TokenKind.BOOLEAN_LITERAL, TokenKind.NULL_LITERAL):
                key = "null" if key_token.value is None else ("true" if key_token.value else "false")
            else:
                raise self._error("expected property name", key_token)

            if self._match_punct(":"):
                value = self._assignment()
            elif key_token.kind is TokenKind.IDENTIFIER:
                # shorthand {a}
                value = n.Identifier(key)
            else:
                raise self._error("expected ':'")
            properties.append(n.Property(key, value))
            if not self._match_punct(","):
                break
        self._expect_punct("}")
        return n.ObjectExpression(properties)


def parse(tokens: list[Token]) -> n.Program:
    """Parse a token list; raises ParsingError on malformed grammar."""
    return Parser(tokens).parse_all()
