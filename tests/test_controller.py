"""REPL controller: buffering, validation, history, dispatch and file mode."""

import json
import tempfile
import unittest
from pathlib import Path

from jsrepl.dump import DumpFormat, DumpMode, DumpTarget, RequestedWithFormat
from jsrepl.engine import Realm
from jsrepl.interface import BaseCLI, CaptureSink, Controller, HistoryStore, ReplState


class ScriptedCLI(BaseCLI):
    """Feeds canned lines; exception classes in the script are raised."""

    def __init__(self, lines):
        self.lines = list(lines)
        self.prompts = []

    def get_line(self, prompt):
        self.prompts.append(prompt)
        if not self.lines:
            raise EOFError
        item = self.lines.pop(0)
        if isinstance(item, type) and issubclass(item, BaseException):
            raise item
        return item


class ControllerTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.sink = CaptureSink()
        self.realm = Realm(stdout=self.sink.write, stderr=self.sink.write_error)
        self.history = HistoryStore(self.dir / "history")

    def tearDown(self):
        self._tmp.cleanup()

    def make(self, **kwargs):
        return Controller(self.realm, self.sink, history=self.history, **kwargs)

    def test_bindings_persist_across_inputs(self):
        cli = ScriptedCLI(["let x = 1;", "x + 1;"])
        self.make().run(cli)
        self.assertEqual(self.sink.out, ["undefined", "2"])
        self.assertEqual(self.sink.err, [])

    def test_exit_command_stops_the_loop(self):
        controller = self.make()
        cli = ScriptedCLI(["1", "  .exit  ", "2"])
        controller.run(cli)
        self.assertEqual(self.sink.out, ["1"])
        self.assertEqual(cli.lines, ["2"])
        self.assertIs(controller.state, ReplState.EXITING)
        self.assertEqual(self.history.entries, ["1"])

    def test_multiline_input_uses_continuation_prompt(self):
        cli = ScriptedCLI(["function f() {", "  return 1;", "}", "f()"])
        self.make(prompt="> ", continuation_prompt="... ").run(cli)
        self.assertEqual(cli.prompts[:4], ["> ", "... ", "... ", "> "])
        self.assertEqual(self.history.entries, ["function f() {\n  return 1;\n}", "f()"])
        self.assertEqual(self.sink.out, ["undefined", "1"])

    def test_unclosed_parenthesis_waits_for_more(self):
        controller = self.make()
        result = controller.feed("(1 + (2 * 3)")
        self.assertTrue(result.is_incomplete)
        self.assertIs(controller.state, ReplState.AWAITING_MORE)
        self.assertEqual(controller.pending(), "(1 + (2 * 3)")
        self.assertTrue(controller.feed(")").is_valid)
        self.assertEqual(self.sink.out, ["7"])
        self.assertEqual(controller.pending(), "")

    def test_invalid_input_is_reported_and_dropped(self):
        controller = self.make()
        result = controller.feed("foo(]")
        self.assertTrue(result.is_invalid)
        self.assertEqual(self.sink.out, [])
        self.assertEqual(len(self.sink.err), 1)
        self.assertTrue(self.sink.err[0].startswith("ValidationInvalid: Mismatched brackets"))
        self.assertEqual(self.history.entries, [])
        self.assertIs(controller.state, ReplState.AWAITING_LINE)
        self.assertEqual(controller.pending(), "")

    def test_whitespace_only_input_is_ignored(self):
        controller = self.make()
        controller.feed("   ")
        controller.feed("")
        self.assertEqual(self.sink.out, [])
        self.assertEqual(self.history.entries, [])

    def test_failed_input_is_still_recorded(self):
        controller = self.make()
        controller.feed("missing")
        self.assertEqual(self.sink.err, ["Uncaught: ReferenceError: missing is not defined"])
        self.assertEqual(self.history.entries, ["missing"])
        controller.feed("1 + 1")
        self.assertEqual(self.sink.out, ["2"])

    def test_dump_mode_prints_instead_of_evaluating(self):
        mode = DumpMode(DumpTarget.TOKENS, RequestedWithFormat(DumpFormat.JSON))
        controller = self.make(dump=mode)
        controller.feed("console.log(1)")
        self.assertEqual(len(self.sink.out), 1)
        kinds = [item["kind"] for item in json.loads(self.sink.out[0])]
        self.assertEqual(kinds, ["Identifier", "Punctuator", "Identifier",
                                 "Punctuator", "NumericLiteral", "Punctuator"])

    def test_dump_errors_go_to_the_error_stream(self):
        mode = DumpMode(DumpTarget.SYNTAX_TREE, RequestedWithFormat(DumpFormat.JSON))
        controller = self.make(dump=mode)
        controller.feed("let = 5")
        self.assertEqual(self.sink.out, [])
        self.assertEqual(len(self.sink.err), 1)
        self.assertTrue(self.sink.err[0].startswith("ParsingError: "))

    def test_interrupt_discards_the_buffer_and_exits(self):
        controller = self.make()
        cli = ScriptedCLI(["{", KeyboardInterrupt, "1"])
        controller.run(cli)
        self.assertIs(controller.state, ReplState.EXITING)
        self.assertEqual(controller.pending(), "")
        self.assertEqual(self.sink.out, [])
        self.assertEqual(self.history.entries, [])

    def test_unexpected_read_failure_exits(self):
        controller = self.make()
        with self.assertLogs("jsrepl.controller", level="ERROR"):
            controller.run(ScriptedCLI([RuntimeError]))
        self.assertIs(controller.state, ReplState.EXITING)


class FileModeTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.sink = CaptureSink()
        self.realm = Realm(stdout=self.sink.write, stderr=self.sink.write_error)
        self.controller = Controller(self.realm, self.sink)

    def tearDown(self):
        self._tmp.cleanup()

    def test_files_share_one_realm_in_order(self):
        first = self.dir / "a.js"
        second = self.dir / "b.js"
        first.write_text("var total = 2;\nconsole.log('a');\n", encoding="utf-8")
        second.write_text("total * 21", encoding="utf-8")
        self.assertEqual(self.controller.run_files([first, second]), 0)
        self.assertEqual(self.sink.out, ["a", "undefined", "42"])

    def test_errors_do_not_stop_later_files(self):
        bad = self.dir / "bad.js"
        good = self.dir / "good.js"
        bad.write_text("throw new Error('x')", encoding="utf-8")
        good.write_text("'ok'", encoding="utf-8")
        self.assertEqual(self.controller.run_files([bad, good]), 0)
        self.assertEqual(self.sink.err, ["Uncaught: Error: x"])
        self.assertEqual(self.sink.out, ['"ok"'])

    def test_unreadable_file_stops_with_status_one(self):
        missing = self.dir / "missing.js"
        later = self.dir / "later.js"
        later.write_text("1", encoding="utf-8")
        self.assertEqual(self.controller.run_files([missing, later]), 1)
        self.assertEqual(len(self.sink.err), 1)
        self.assertTrue(self.sink.err[0].startswith(f"Could not read {missing}"))
        self.assertEqual(self.sink.out, [])


if __name__ == "__main__":
    unittest.main()
