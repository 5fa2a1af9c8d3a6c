"""Command-line parsing into an Invocation."""

import contextlib
import io
import unittest
from pathlib import Path

from jsrepl.config import EditMode
from jsrepl.dump import (
    NOT_REQUESTED,
    REQUESTED_DEFAULT,
    DumpFormat,
    DumpTarget,
    RequestedWithFormat,
)
from jsrepl.interface.args import parse_args


class ParseArgsTests(unittest.TestCase):
    def _exit_code(self, argv):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                parse_args(argv)
        return ctx.exception.code

    def test_no_arguments(self):
        inv = parse_args([])
        self.assertEqual(inv.files, [])
        self.assertEqual(inv.dump_tokens, NOT_REQUESTED)
        self.assertEqual(inv.dump_ast, NOT_REQUESTED)
        self.assertIsNone(inv.dump_mode)
        self.assertIsNone(inv.edit_mode)

    def test_bare_flag_requests_default_format(self):
        inv = parse_args(["-t"])
        self.assertEqual(inv.dump_tokens, REQUESTED_DEFAULT)
        self.assertIs(inv.dump_mode.target, DumpTarget.TOKENS)
        self.assertIs(inv.dump_mode.format, DumpFormat.DEBUG)

    def test_flag_with_explicit_format(self):
        inv = parse_args(["-a", "JSON"])
        self.assertEqual(inv.dump_ast, RequestedWithFormat(DumpFormat.JSON))
        self.assertIs(inv.dump_mode.target, DumpTarget.SYNTAX_TREE)
        inv = parse_args(["--dump-tokens=jsonpretty"])
        self.assertEqual(inv.dump_tokens, RequestedWithFormat(DumpFormat.JSON_PRETTY))

    def test_dump_flags_are_mutually_exclusive(self):
        self.assertEqual(self._exit_code(["-t", "-a"]), 2)

    def test_unknown_format_is_rejected(self):
        self.assertEqual(self._exit_code(["-t", "yaml"]), 2)

    def test_files_and_edit_mode(self):
        inv = parse_args(["a.js", "b.js", "--vi"])
        self.assertEqual(inv.files, [Path("a.js"), Path("b.js")])
        self.assertIs(inv.edit_mode, EditMode.VI)
        self.assertEqual(inv.config_overrides()["EDIT_MODE"], "vi")

    def test_files_after_format(self):
        inv = parse_args(["-t", "json", "--", "script.js"])
        self.assertEqual(inv.files, [Path("script.js")])
        self.assertEqual(inv.dump_tokens, RequestedWithFormat(DumpFormat.JSON))

    def test_ambient_overrides(self):
        inv = parse_args(["--no-color", "--log-level", "debug", "--history", "h.txt"])
        self.assertEqual(
            inv.config_overrides(),
            {"EDIT_MODE": None, "HISTORY_FILE": "h.txt", "LOG_LEVEL": "DEBUG", "COLOR": False},
        )


if __name__ == "__main__":
    unittest.main()
