#!/usr/bin/env python3
# jsrepl/interface/controller.py
from __future__ import annotations

"""
REPL controller.

Reads raw lines, accumulates them until the bracket validator accepts the
whole buffer, records the submission in history and dispatches it either
to the dump pipeline or to the engine. All output goes through an
OutputSink.

States:

    AWAITING_LINE -> VALIDATING -> AWAITING_MORE   (Incomplete)
                                -> DISPATCHING     (Valid) -> AWAITING_LINE
                                -> AWAITING_LINE   (Invalid, buffer dropped)

EXITING is reached from any state on `.exit`, Ctrl-C or Ctrl-D.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Union

from jsrepl.dump import DumpMode, dump_mode
from jsrepl.engine import Realm, forward, render
from jsrepl.errors import EngineError, ParsingError, SourceSyntaxError
from jsrepl.interface.cli import BaseCLI
from jsrepl.interface.history import HistoryStore
from jsrepl.interface.sink import OutputSink
from jsrepl.interface.validation import ValidationResult, validate

log = logging.getLogger("jsrepl.controller")

EXIT_COMMAND = ".exit"


class ReplState(str, Enum):
    AWAITING_LINE = "AwaitingLine"
    AWAITING_MORE = "AwaitingMore"
    VALIDATING = "Validating"
    DISPATCHING = "Dispatching"
    EXITING = "Exiting"


class Controller:
    def __init__(
        self,
        realm: Realm,
        sink: OutputSink,
        *,
        history: Optional[HistoryStore] = None,
        dump: Optional[DumpMode] = None,
        prompt: str = ">> ",
        continuation_prompt: str = ".. ",
    ) -> None:
        self.realm = realm
        self.sink = sink
        self.history = history
        self.dump = dump
        self.prompt = prompt
        self.continuation_prompt = continuation_prompt
        self.state = ReplState.AWAITING_LINE
        self._buffer: list[str] = []

    # ---- buffer ------------------------------------------------------------

    def pending(self) -> str:
        """Lines buffered so far for an unfinished statement."""
        return "\n".join(self._buffer)

    def current_prompt(self) -> str:
        return self.continuation_prompt if self._buffer else self.prompt

    def _set_state(self, state: ReplState) -> None:
        if state is not self.state:
            log.debug("state %s -> %s", self.state.value, state.value)
        self.state = state

    # ---- interactive loop --------------------------------------------------

    def run(self, source: BaseCLI) -> None:
        """Drive the loop until `.exit`, interrupt or end of input."""
        self._set_state(ReplState.AWAITING_LINE)
        while self.state is not ReplState.EXITING:
            try:
                line = source.get_line(self.current_prompt())
            except (KeyboardInterrupt, EOFError) as exc:
                log.debug("%s at prompt; leaving", type(exc).__name__)
                self._exit()
                break
            except Exception:
                log.exception("Unknown error while reading input")
                self._exit()
                break
            self.feed(line)

    def feed(self, line: str) -> Optional[ValidationResult]:
        """
        Process one raw line.

        Returns the validation result for the buffer, or None when the
        line was the exit command.
        """
        if line.strip() == EXIT_COMMAND:
            self._exit()
            return None

        self._buffer.append(line)
        self._set_state(ReplState.VALIDATING)
        text = self.pending()
        result = validate(text)

        if result.is_incomplete:
            self._set_state(ReplState.AWAITING_MORE)
            return result

        self._buffer = []
        if result.is_invalid:
            self.sink.write_error(str(result))
        elif text.strip():
            if self.history is not None:
                self.history.append(text)
            self._set_state(ReplState.DISPATCHING)
            self.dispatch(text)
        self._set_state(ReplState.AWAITING_LINE)
        return result

    def _exit(self) -> None:
        if self._buffer:
            log.debug("discarding %d unsubmitted line(s)", len(self._buffer))
        self._buffer = []
        self._set_state(ReplState.EXITING)

    # ---- dispatch ----------------------------------------------------------

    def dispatch(self, source: str) -> bool:
        """Dump or evaluate one submission; returns False if it failed."""
        if self.dump is not None:
            try:
                output = dump_mode(source, self.dump)
            except (SourceSyntaxError, ParsingError) as exc:
                self.sink.write_error(str(exc))
                return False
            self.sink.write(output)
            return True

        try:
            value = forward(self.realm, source)
        except EngineError as exc:
            self.sink.write_error(str(exc))
            return False
        self.sink.write(render(value))
        return True

    # ---- file mode ---------------------------------------------------------

    def run_files(self, paths: Iterable[Union[str, Path]]) -> int:
        """
        Dispatch each file's full text in order.

        Returns 1 as soon as a file cannot be read, else 0. Evaluation
        errors are reported but do not stop later files.
        """
        for path in paths:
            path = Path(path)
            try:
                source = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                self.sink.write_error(f"Could not read {path}: {exc}")
                return 1
            log.debug("running %s", path)
            self.dispatch(source)
        return 0
