#!/usr/bin/env python3
# jsrepl/ui/utils/console.py
from __future__ import annotations

import sys
from typing import TextIO

from .ansi import colorize


def print_line(text: str = "", *, file: TextIO | None = None, flush: bool = False) -> None:
    """Write a single line to `file` (stdout by default)."""
    stream = file if file is not None else sys.stdout
    stream.write(f"{text}\n")
    if flush:
        stream.flush()


def print_banner(version: str, *, color: bool = True, file: TextIO | None = None) -> None:
    """Print the interactive greeting."""
    title = f"jsrepl {version}"
    hint = "Type .exit or press Ctrl-D to leave."
    if color:
        title = colorize(title, "cyan", "bold")
        hint = colorize(hint, "bright_black")
    print_line(title, file=file)
    print_line(hint, file=file, flush=True)
