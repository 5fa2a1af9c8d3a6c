"""Layered configuration: defaults < files < environment < command line."""

import tempfile
import unittest
from pathlib import Path

from jsrepl.config import DEFAULT_HISTORY_FILE, EditMode, load_config
from jsrepl.errors import ConfigError


class LoadConfigTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name).resolve()

    def tearDown(self):
        self._tmp.cleanup()

    def test_defaults(self):
        cfg = load_config(cwd=self.dir, environ={})
        self.assertIs(cfg.edit_mode, EditMode.EMACS)
        self.assertEqual(cfg.history_file, self.dir / DEFAULT_HISTORY_FILE)
        self.assertEqual(cfg.history_size, 1000)
        self.assertEqual(cfg.prompt, ">> ")
        self.assertEqual(cfg.continuation_prompt, ".. ")
        self.assertTrue(cfg.color)
        self.assertEqual(cfg.log_level, "WARNING")
        self.assertIsNone(cfg.log_file_path)

    def test_precedence(self):
        (self.dir / "jsrepl.toml").write_text(
            'prompt = "js> "\n[history]\nsize = 50\n', encoding="utf-8")
        cfg = load_config(cwd=self.dir, environ={})
        self.assertEqual(cfg.history_size, 50)
        self.assertEqual(cfg.prompt, "js> ")

        cfg = load_config(cwd=self.dir, environ={"JSREPL_HISTORY_SIZE": "75"})
        self.assertEqual(cfg.history_size, 75)

        cfg = load_config({"HISTORY_SIZE": 100, "PROMPT": None},
                          cwd=self.dir, environ={"JSREPL_HISTORY_SIZE": "75"})
        self.assertEqual(cfg.history_size, 100)
        self.assertEqual(cfg.prompt, "js> ")

    def test_dotenv_only_reads_prefixed_keys(self):
        (self.dir / ".env").write_text(
            "JSREPL_EDIT_MODE=vi\nOTHER_TOOL=1\n# comment\n", encoding="utf-8")
        cfg = load_config(cwd=self.dir, environ={})
        self.assertIs(cfg.edit_mode, EditMode.VI)
        self.assertNotIn("OTHER_TOOL", cfg.extra)

    def test_history_path_relative_to_cwd(self):
        cfg = load_config({"HISTORY_FILE": "state/hist"}, cwd=self.dir, environ={})
        self.assertEqual(cfg.history_file, self.dir / "state" / "hist")

    def test_invalid_values(self):
        for environ in (
            {"JSREPL_EDIT_MODE": "nano"},
            {"JSREPL_HISTORY_SIZE": "0"},
            {"JSREPL_HISTORY_SIZE": "many"},
            {"JSREPL_COLOR": "perhaps"},
            {"JSREPL_LOG_LEVEL": "LOUD"},
        ):
            with self.subTest(environ=environ):
                with self.assertRaises(ConfigError):
                    load_config(cwd=self.dir, environ=environ)

    def test_malformed_file(self):
        (self.dir / "jsrepl.json").write_text("{not json", encoding="utf-8")
        with self.assertRaises(ConfigError):
            load_config(cwd=self.dir, environ={})


if __name__ == "__main__":
    unittest.main()
