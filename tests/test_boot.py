"""Session bootstrap, teardown and the command-line entry point."""

import io
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest import mock

from jsrepl.__main__ import main
from jsrepl.boot import boot_session, close_session
from jsrepl.dump import DumpTarget
from jsrepl.errors import ConfigError
from jsrepl.interface import BaseCLI, CaptureSink, Controller, Invocation, parse_args


class BootTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.sink = CaptureSink()

    def tearDown(self):
        self._tmp.cleanup()

    def boot(self, invocation=None, **kwargs):
        kwargs.setdefault("environ", {})
        return boot_session(invocation or Invocation(), sink=self.sink, cwd=self.dir, **kwargs)

    def test_interactive_session_round_trip(self):
        session = self.boot()
        self.assertEqual(session.history.path, self.dir.resolve() / ".jsrepl_history")
        self.assertIsNone(session.dump)
        session.controller.feed("console.log('hi')")
        self.assertEqual(self.sink.out, ["hi", "undefined"])
        self.assertTrue(close_session(session))
        self.assertEqual(
            (self.dir / ".jsrepl_history").read_text(encoding="utf-8"),
            "console.log('hi')\n",
        )

    def test_file_mode_never_opens_history(self):
        session = self.boot(interactive=False)
        self.assertIsNone(session.history)
        self.assertTrue(close_session(session))
        self.assertFalse((self.dir / ".jsrepl_history").exists())

    def test_dump_flag_selects_dump_mode(self):
        session = self.boot(parse_args(["-a", "json"]))
        self.assertEqual(session.dump.target, DumpTarget.SYNTAX_TREE)

    def test_invalid_configuration_raises(self):
        with self.assertRaises(ConfigError):
            self.boot(environ={"JSREPL_HISTORY_SIZE": "0"})

    def test_flush_failure_is_a_warning(self):
        blocker = self.dir / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        session = self.boot(parse_args(["--history", str(blocker / "history")]))
        session.controller.feed("1")
        with self.assertLogs("jsrepl.boot", level="WARNING"):
            self.assertFalse(close_session(session))


class MainTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_runs_files_in_order(self):
        first = self.dir / "one.js"
        second = self.dir / "two.js"
        first.write_text("var n = 20;", encoding="utf-8")
        second.write_text("n + 1", encoding="utf-8")
        out = io.StringIO()
        with redirect_stdout(out):
            status = main([str(first), str(second), "--no-color"])
        self.assertEqual(status, 0)
        self.assertEqual(out.getvalue().splitlines(), ["undefined", "21"])

    def test_missing_file_exits_with_one(self):
        err = io.StringIO()
        with redirect_stdout(io.StringIO()), redirect_stderr(err):
            status = main([str(self.dir / "nope.js"), "--no-color"])
        self.assertEqual(status, 1)
        self.assertIn("Could not read", err.getvalue())

    def test_token_dump_of_a_file(self):
        script = self.dir / "s.js"
        script.write_text("x", encoding="utf-8")
        out = io.StringIO()
        with redirect_stdout(out):
            status = main([str(script), "--no-color", "-t", "json"])
        self.assertEqual(status, 0)
        self.assertIn('"kind":"Identifier"', out.getvalue())

    def test_history_is_flushed_when_the_loop_fails(self):
        history = self.dir / "history"

        class OneLine(BaseCLI):
            def get_line(self, prompt):
                return "1"

        with mock.patch("jsrepl.__main__.make_cli", return_value=OneLine()), \
                mock.patch.object(Controller, "feed", side_effect=BrokenPipeError), \
                redirect_stdout(io.StringIO()):
            with self.assertRaises(BrokenPipeError):
                main(["--history", str(history), "--no-color"])
        self.assertTrue(history.exists())


if __name__ == "__main__":
    unittest.main()
