"""Dump pipeline: formats, targets, lossless JSON and error reporting."""

import json
import unittest

from jsrepl.dump import (
    NOT_REQUESTED,
    REQUESTED_DEFAULT,
    DumpFormat,
    DumpTarget,
    RequestedWithFormat,
    dump,
    node_from_json,
    select_mode,
    tokens_from_json,
)
from jsrepl.engine import parse, tokenize
from jsrepl.errors import ParsingError, SourceSyntaxError

SNIPPET = "let total = 0;\nfor (let i = 1; i <= 3; i++) {\n  total += i * 2.5;\n}\ntotal"

JSON = RequestedWithFormat(DumpFormat.JSON)
PRETTY = RequestedWithFormat(DumpFormat.JSON_PRETTY)


class DumpFormatTests(unittest.TestCase):
    def test_parse_is_case_insensitive(self):
        self.assertIs(DumpFormat.parse("JSONPretty"), DumpFormat.JSON_PRETTY)
        self.assertIs(DumpFormat.parse("Debug"), DumpFormat.DEBUG)

    def test_unknown_format(self):
        with self.assertRaises(ValueError):
            DumpFormat.parse("yaml")

    def test_request_resolution(self):
        self.assertIsNone(NOT_REQUESTED.resolve())
        self.assertIs(REQUESTED_DEFAULT.resolve(), DumpFormat.DEBUG)
        self.assertIs(JSON.resolve(), DumpFormat.JSON)

    def test_select_mode(self):
        self.assertIsNone(select_mode(NOT_REQUESTED, NOT_REQUESTED))
        mode = select_mode(NOT_REQUESTED, REQUESTED_DEFAULT)
        self.assertIs(mode.target, DumpTarget.SYNTAX_TREE)
        self.assertIs(mode.format, DumpFormat.DEBUG)
        with self.assertRaises(ValueError):
            select_mode(JSON, REQUESTED_DEFAULT)


class DumpTests(unittest.TestCase):
    def test_compact_and_pretty_token_dumps_agree(self):
        compact = dump(SNIPPET, JSON, DumpTarget.TOKENS)
        pretty = dump(SNIPPET, PRETTY, DumpTarget.TOKENS)
        self.assertNotIn("\n", compact)
        self.assertNotIn(", ", compact)
        self.assertIn('\n  {\n    "kind"', pretty)
        self.assertEqual(tokens_from_json(compact), tokens_from_json(pretty))
        self.assertEqual(tokens_from_json(compact), tokenize(SNIPPET))

    def test_tree_dump_rebuilds_equal_tree(self):
        compact = dump(SNIPPET, JSON, DumpTarget.SYNTAX_TREE)
        pretty = dump(SNIPPET, PRETTY, DumpTarget.SYNTAX_TREE)
        expected = parse(tokenize(SNIPPET))
        self.assertEqual(node_from_json(compact), expected)
        self.assertEqual(node_from_json(pretty), expected)
        self.assertEqual(json.loads(compact)["type"], "Program")

    def test_default_format_is_debug(self):
        out = dump("x", REQUESTED_DEFAULT, DumpTarget.TOKENS)
        self.assertTrue(out.startswith("[Token("))
        tree = dump("x", REQUESTED_DEFAULT, DumpTarget.SYNTAX_TREE)
        self.assertTrue(tree.startswith("Program("))

    def test_tokenize_failure(self):
        with self.assertRaises(SourceSyntaxError) as ctx:
            dump("'unterminated", JSON, DumpTarget.TOKENS)
        self.assertTrue(str(ctx.exception).startswith("SyntaxError: "))

    def test_parse_failure_only_for_tree_target(self):
        dump("let = 1", JSON, DumpTarget.TOKENS)
        with self.assertRaises(ParsingError) as ctx:
            dump("let = 1", JSON, DumpTarget.SYNTAX_TREE)
        self.assertTrue(str(ctx.exception).startswith("ParsingError: "))

    def test_not_requested_is_rejected(self):
        with self.assertRaises(ValueError):
            dump("1", NOT_REQUESTED, DumpTarget.TOKENS)


if __name__ == "__main__":
    unittest.main()
