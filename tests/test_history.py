"""History store: persistence, escaping, trimming and failure reporting."""

import asyncio
import tempfile
import unittest
from pathlib import Path

from jsrepl.errors import PersistenceError
from jsrepl.interface.history import HistoryStore, escape_entry, unescape_entry


class EscapingTests(unittest.TestCase):
    def test_entries_survive_escaping(self):
        for entry in ("plain", "a\nb", "back\\slash", "\\n literal", "trail\\", "cr\r\nlf"):
            with self.subTest(entry=entry):
                escaped = escape_entry(entry)
                self.assertNotIn("\n", escaped)
                self.assertEqual(unescape_entry(escaped), entry)

    def test_unknown_escape_is_kept(self):
        self.assertEqual(unescape_entry("a\\xb"), "a\\xb")


class HistoryStoreTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.path = self.dir / ".jsrepl_history"

    def tearDown(self):
        self._tmp.cleanup()

    def test_missing_file_loads_empty(self):
        store = HistoryStore(self.path)
        self.assertEqual(store.read(), [])
        self.assertFalse(self.path.exists())

    def test_entries_persist_in_order_across_sessions(self):
        first = HistoryStore(self.path)
        first.read()
        first.extend(["let x = 1;", "function f() {\n  return x;\n}", "f()"])
        first.flush()

        second = HistoryStore(self.path)
        self.assertEqual(
            second.read(),
            ["let x = 1;", "function f() {\n  return x;\n}", "f()"],
        )
        # one physical line per entry
        self.assertEqual(len(self.path.read_text(encoding="utf-8").splitlines()), 3)

    def test_new_entries_follow_loaded_ones(self):
        self.path.write_text("old\n", encoding="utf-8")
        store = HistoryStore(self.path)
        store.read()
        store.append("new")
        store.flush()
        self.assertEqual(HistoryStore(self.path).read(), ["old", "new"])

    def test_flush_keeps_newest_entries(self):
        store = HistoryStore(self.path, max_entries=3)
        store.extend(str(i) for i in range(5))
        store.flush()
        self.assertEqual(HistoryStore(self.path).read(), ["2", "3", "4"])

    def test_unreadable_file_loads_empty(self):
        self.path.write_bytes(b"\xff\xfe\xfa not utf-8")
        self.assertEqual(HistoryStore(self.path).read(), [])

    def test_flush_failure_is_reported(self):
        blocker = self.dir / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        store = HistoryStore(blocker / "history")
        store.append("1 + 1")
        with self.assertRaises(PersistenceError) as ctx:
            store.flush()
        self.assertTrue(str(ctx.exception).startswith("PersistenceError: "))
        # nothing else was created next to the blocker
        self.assertEqual(sorted(p.name for p in self.dir.iterdir()), ["blocker"])

    def test_context_manager_loads_and_flushes(self):
        with HistoryStore.open(self.path) as store:
            store.append("a")
        with HistoryStore.open(self.path) as store:
            self.assertEqual(store.entries, ["a"])
            store.append("b")
        self.assertEqual(HistoryStore(self.path).read(), ["a", "b"])

    def test_recall_is_newest_first(self):
        store = HistoryStore(self.path)
        store.extend(["one", "two"])
        self.assertEqual(list(store.load_history_strings()), ["two", "one"])

    def test_prompt_toolkit_load_yields_newest_first(self):
        self.path.write_text("older\nnewest\n", encoding="utf-8")
        store = HistoryStore(self.path)
        store.read()

        async def collect():
            return [item async for item in store.load()]

        self.assertEqual(asyncio.run(collect()), ["newest", "older"])

    def test_rejects_non_positive_size(self):
        with self.assertRaises(ValueError):
            HistoryStore(self.path, max_entries=0)


if __name__ == "__main__":
    unittest.main()
