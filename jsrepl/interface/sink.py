#!/usr/bin/env python3
# jsrepl/interface/sink.py
from __future__ import annotations

"""
Output sinks used by the controller.

The controller never prints directly: results and dumps go through
`write`, failures through `write_error`.
"""

import sys
from typing import Optional, TextIO

from jsrepl.ui.utils.ansi import colorize
from jsrepl.ui.utils.console import print_line


class OutputSink:
    """Interface: two output channels."""

    def write(self, text: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def write_error(self, text: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class ConsoleSink(OutputSink):
    """Writes to real stdout/stderr; errors are tinted red when colour is on."""

    def __init__(self, *, color: bool = True, stdout: Optional[TextIO] = None,
                 stderr: Optional[TextIO] = None) -> None:
        self.color = color
        self._stdout = stdout
        self._stderr = stderr

    def write(self, text: str) -> None:
        print_line(text, file=self._stdout or sys.stdout, flush=True)

    def write_error(self, text: str) -> None:
        if self.color:
            text = colorize(text, "red")
        print_line(text, file=self._stderr or sys.stderr, flush=True)


class CaptureSink(OutputSink):
    """Collects output in memory, one list per channel."""

    def __init__(self) -> None:
        self.out: list[str] = []
        self.err: list[str] = []

    def write(self, text: str) -> None:
        self.out.append(text)

    def write_error(self, text: str) -> None:
        self.err.append(text)
