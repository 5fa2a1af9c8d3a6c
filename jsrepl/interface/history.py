#!/usr/bin/env python3
# jsrepl/interface/history.py
from __future__ import annotations

"""
Persistent history of submitted lines.

The file is UTF-8 text, one entry per line, oldest first. Backslashes and
line breaks inside an entry are escaped so a multi-line submission still
takes exactly one line on disk.

Appending only touches memory; the file is rewritten once by `flush()`
(normally at session end). A missing or unreadable file loads as an empty
history. A failed flush raises PersistenceError for the caller to report.
"""

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, Union

from prompt_toolkit.history import History

from jsrepl.errors import PersistenceError

log = logging.getLogger("jsrepl.history")

DEFAULT_MAX_ENTRIES = 1000

_ESCAPES = {"\\": "\\\\", "\n": "\\n", "\r": "\\r"}
_UNESCAPES = {"\\": "\\", "n": "\n", "r": "\r"}


def escape_entry(entry: str) -> str:
    return "".join(_ESCAPES.get(ch, ch) for ch in entry)


def unescape_entry(text: str) -> str:
    out: list[str] = []
    chars = iter(text)
    for ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        nxt = next(chars, "")
        if nxt in _UNESCAPES:
            out.append(_UNESCAPES[nxt])
        else:
            # unknown escape: keep it verbatim
            out.append(ch + nxt)
    return "".join(out)


class HistoryStore(History):
    """
    Append-only session history backed by one file.

    Also a prompt_toolkit History, so Up/Down recall sees the loaded
    entries newest first. Lines typed at the prompt are recalled through
    prompt_toolkit's own in-memory list; only `append()` decides what is
    persisted.
    """

    def __init__(self, path: Union[str, Path], max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        super().__init__()
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.path = Path(path)
        self.max_entries = max_entries
        self._entries: list[str] = []

    @classmethod
    @contextmanager
    def open(cls, path: Union[str, Path], max_entries: int = DEFAULT_MAX_ENTRIES) -> Iterator["HistoryStore"]:
        """Load on entry, flush on normal exit. Flush errors propagate."""
        store = cls(path, max_entries)
        store.read()
        yield store
        store.flush()

    # ---- lifecycle ---------------------------------------------------------

    def read(self) -> list[str]:
        """Read the file into memory (replacing current entries) and return them."""
        try:
            with self.path.open("r", encoding="utf-8", newline="\n") as fh:
                lines = fh.read().split("\n")
        except FileNotFoundError:
            log.debug("no history file at %s", self.path)
            lines = []
        except (OSError, UnicodeDecodeError) as exc:
            log.debug("ignoring unreadable history file %s: %s", self.path, exc)
            lines = []
        self._entries = [unescape_entry(line) for line in lines if line]
        log.debug("loaded %d history entries", len(self._entries))
        return list(self._entries)

    def append(self, line: str) -> None:
        self._entries.append(line)

    def extend(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.append(line)

    @property
    def entries(self) -> list[str]:
        """All entries, oldest first."""
        return list(self._entries)

    def flush(self) -> None:
        """Atomically write the newest `max_entries` entries to disk."""
        kept = self._entries[-self.max_entries:]
        payload = "".join(escape_entry(entry) + "\n" for entry in kept)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", newline="\n", delete=False,
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp",
            ) as fh:
                tmp_name = fh.name
                fh.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
            raise PersistenceError(f"could not write history file {self.path}: {exc}") from exc
        log.debug("flushed %d history entries to %s", len(kept), self.path)

    # ---- prompt_toolkit History -------------------------------------------

    def load_history_strings(self) -> Iterable[str]:
        return list(reversed(self._entries))

    def store_string(self, string: str) -> None:
        # persistence happens in flush()
        return None
