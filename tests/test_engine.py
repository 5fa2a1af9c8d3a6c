"""Engine collaborator: lexer, parser, evaluator and the adapter boundary."""

import math
import unittest

from jsrepl.engine import Realm, TokenKind, display, forward, parse, tokenize
from jsrepl.engine import nodes as n
from jsrepl.engine.tokens import Position
from jsrepl.engine.values import number_to_string
from jsrepl.errors import EngineError, ParsingError, SourceSyntaxError


class LexerTests(unittest.TestCase):
    def test_token_kinds(self):
        tokens = tokenize("let x = 1;")
        self.assertEqual(
            [(t.kind, t.value) for t in tokens],
            [
                (TokenKind.KEYWORD, "let"),
                (TokenKind.IDENTIFIER, "x"),
                (TokenKind.PUNCTUATOR, "="),
                (TokenKind.NUMERIC_LITERAL, 1.0),
                (TokenKind.PUNCTUATOR, ";"),
            ],
        )

    def test_line_terminators_and_spans(self):
        tokens = tokenize("a\r\nb")
        self.assertEqual([t.kind for t in tokens],
                         [TokenKind.IDENTIFIER, TokenKind.LINE_TERMINATOR, TokenKind.IDENTIFIER])
        self.assertEqual(tokens[2].span.start, Position(2, 1))

    def test_literals(self):
        tokens = tokenize("0x1F 1e3 .5 'a\\nb' true null >>>=")
        self.assertEqual([t.value for t in tokens], [31.0, 1000.0, 0.5, "a\nb", True, None, ">>>="])

    def test_comments_are_skipped(self):
        self.assertEqual([t.value for t in tokenize("a // b\n/* c */ d")][::2], ["a", "d"])

    def test_errors(self):
        for source in ("'open", "3in", "#"):
            with self.subTest(source=source):
                with self.assertRaises(SourceSyntaxError):
                    tokenize(source)


class ParserTests(unittest.TestCase):
    def test_semicolon_insertion_at_line_breaks(self):
        program = parse(tokenize("a = 1\nb = 2"))
        self.assertEqual(len(program.body), 2)

    def test_precedence(self):
        stmt = parse(tokenize("1 + 2 * 3")).body[0]
        self.assertIsInstance(stmt, n.ExpressionStatement)
        expr = stmt.expression
        self.assertEqual(expr.operator, "+")
        self.assertEqual(expr.right.operator, "*")

    def test_restricted_return(self):
        fn = parse(tokenize("function f() { return\n1 }")).body[0]
        self.assertIsNone(fn.body[0].argument)

    def test_errors(self):
        for source in ("let = 1", "1 +", "(1", "a b", "1 = 2"):
            with self.subTest(source=source):
                with self.assertRaises(ParsingError):
                    parse(tokenize(source))


class EvaluationTests(unittest.TestCase):
    def setUp(self):
        self.out = []
        self.err = []
        self.realm = Realm(stdout=self.out.append, stderr=self.err.append)

    def run_js(self, source):
        return display(forward(self.realm, source))

    def test_results(self):
        cases = {
            "1 + 2": "3",
            "'a' + 1": '"a1"',
            "0.1 + 0.2": "0.30000000000000004",
            "1 / 0": "Infinity",
            "-1 / 0": "-Infinity",
            "0 / 0": "NaN",
            "7 % 3": "1",
            "2 ** 10": "1024",
            "typeof undeclared": '"undefined"',
            "typeof function () {}": '"function"',
            "1 == '1'": "true",
            "null == undefined": "true",
            "null === undefined": "false",
            "NaN === NaN": "false",
            "[1, 2, 3].map(function (x) { return x * 2; })": "[ 2, 4, 6 ]",
            "[1, [2]].length": "2",
            "'abc'.toUpperCase().charAt(1)": '"B"',
            "var o = { a: 1, b: 'x' }; o": '{ a: 1, b: "x" }',
            "[1, 2].join('-')": '"1-2"',
            "parseInt('42px')": "42",
            "Math.max(1, 5, 3)": "5",
            "if (false) { 1 }": "undefined",
        }
        for source, expected in cases.items():
            with self.subTest(source=source):
                self.assertEqual(self.run_js(source), expected)

    def test_functions_and_closures(self):
        self.assertEqual(
            self.run_js("function fact(n) { return n <= 1 ? 1 : n * fact(n - 1); } fact(10)"),
            "3628800",
        )
        self.assertEqual(
            self.run_js(
                "function counter() { var c = 0; return function () { c += 1; return c; }; }\n"
                "var next = counter(); next(); next()"
            ),
            "2",
        )

    def test_loop_bindings_are_per_iteration(self):
        source = (
            "var fs = [];\n"
            "for (let i = 0; i < 3; i++) { fs.push(function () { return i; }); }\n"
            "fs[0]() + fs[2]()"
        )
        self.assertEqual(self.run_js(source), "2")

    def test_constructors_and_this(self):
        source = (
            "function Point(x, y) { this.x = x; this.y = y; }\n"
            "Point.prototype.sum = function () { return this.x + this.y; };\n"
            "var p = new Point(2, 3);\n"
            "p.sum() + (p instanceof Point ? 10 : 0)"
        )
        self.assertEqual(self.run_js(source), "15")

    def test_try_catch_finally(self):
        self.assertEqual(self.run_js("try { null.x } catch (e) { e.name }"), '"TypeError"')
        self.assertEqual(
            self.run_js("var log = []; try { throw 1 } catch (e) { log.push(e) } finally { log.push(2) } log"),
            "[ 1, 2 ]",
        )
        self.assertEqual(self.run_js("new Error('boom').message"), '"boom"')

    def test_console_log_goes_to_writer(self):
        self.assertEqual(self.run_js("console.log('hi', 1, [2])"), "undefined")
        self.assertEqual(self.out, ["hi 1 [ 2 ]"])

    def test_bindings_persist_between_calls(self):
        self.run_js("let x = 1;")
        self.assertEqual(self.run_js("x + 1;"), "2")
        # top-level redeclaration is allowed between inputs
        self.run_js("let x = 5;")
        self.assertEqual(self.run_js("x"), "5")

    def test_failed_input_keeps_earlier_bindings(self):
        self.run_js("var kept = 3;")
        with self.assertRaises(EngineError):
            self.run_js("kept = 4; missing();")
        self.assertEqual(self.run_js("kept"), "4")

    def test_engine_errors(self):
        cases = {
            "missing + 1": "Uncaught: ReferenceError: missing is not defined",
            "let a = 1; a()": "Uncaught: TypeError: a is not a function",
            "const k = 1; k = 2": "Uncaught: TypeError: Assignment to constant variable.",
            "throw 42": "Uncaught: 42",
            "throw new RangeError('nope')": "Uncaught: RangeError: nope",
            "{ let z = 1; let z = 2; }":
                "Uncaught: SyntaxError: Identifier 'z' has already been declared",
            "function f() { return f(); } f()":
                "Uncaught: RangeError: Maximum call stack size exceeded",
        }
        for source, expected in cases.items():
            with self.subTest(source=source):
                with self.assertRaises(EngineError) as ctx:
                    forward(self.realm, source)
                self.assertEqual(str(ctx.exception), expected)

    def test_syntax_errors_are_engine_errors(self):
        with self.assertRaises(EngineError) as ctx:
            forward(self.realm, "let = 5")
        self.assertTrue(ctx.exception.message.startswith("ParsingError: "))
        with self.assertRaises(EngineError) as ctx:
            forward(self.realm, "'open")
        self.assertTrue(ctx.exception.message.startswith("SyntaxError: "))

    def test_thrown_value_is_kept(self):
        with self.assertRaises(EngineError) as ctx:
            forward(self.realm, "throw 'x'")
        self.assertEqual(ctx.exception.value, "x")


class NumberFormattingTests(unittest.TestCase):
    def test_number_to_string(self):
        cases = [
            (1.0, "1"),
            (-0.0, "0"),
            (2.5, "2.5"),
            (1e21, "1e+21"),
            (1e-7, "1e-7"),
            (0.000001, "0.000001"),
            (123456789012345680000.0, "123456789012345680000"),
            (math.inf, "Infinity"),
            (math.nan, "NaN"),
        ]
        for value, expected in cases:
            with self.subTest(value=value):
                self.assertEqual(number_to_string(value), expected)


if __name__ == "__main__":
    unittest.main()
