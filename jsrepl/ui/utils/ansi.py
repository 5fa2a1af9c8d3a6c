#!/usr/bin/env python3
# jsrepl/ui/utils/ansi.py
from __future__ import annotations

import ctypes
import os
import re
from typing import Optional

# ---- Core SGR maps ----------------------------------------------------------

# Styles used by the highlighter, sinks, banner and log handler
ANSI = {
    "reset": "\x1b[0m",

    "bold": "\x1b[1m",

    "red": "\x1b[31m",
    "green": "\x1b[32m",
    "yellow": "\x1b[33m",
    "magenta": "\x1b[35m",
    "cyan": "\x1b[36m",

    "bright_black": "\x1b[90m",
}

# CSI sequences (colours, cursor moves) emitted by this package or a terminal
ANSI_REGEX = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")

_vt_enabled_cache: Optional[bool] = None  # cached across calls


# ---- Utilities --------------------------------------------------------------

def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from text."""
    return ANSI_REGEX.sub("", text)


def enable_windows_vt() -> bool:
    """
    Enable ANSI (VT) processing on Windows consoles when possible.
    Returns True if ANSI escapes should work on the current process.
    On non-Windows systems, always returns True.
    """
    global _vt_enabled_cache
    if _vt_enabled_cache is not None:
        return _vt_enabled_cache

    if os.name != "nt":
        _vt_enabled_cache = True
        return True

    if (
        os.environ.get("WT_SESSION")                  # Windows Terminal
        or os.environ.get("ANSICON")
        or os.environ.get("TERM", "").startswith(("xterm", "vt100"))
    ):
        _vt_enabled_cache = True
        return True

    try:
        kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]
        ENABLE_VIRTUAL_TERMINAL_PROCESSING = 0x0004
        STD_OUTPUT_HANDLE = -11
        STD_ERROR_HANDLE = -12

        def try_enable(handle_id: int) -> bool:
            handle = kernel32.GetStdHandle(handle_id)
            if handle in (0, -1):
                return False
            mode = ctypes.c_uint()
            if not kernel32.GetConsoleMode(handle, ctypes.byref(mode)):
                return False
            return bool(kernel32.SetConsoleMode(
                handle, mode.value | ENABLE_VIRTUAL_TERMINAL_PROCESSING))

        ok_out = try_enable(STD_OUTPUT_HANDLE)
        ok_err = try_enable(STD_ERROR_HANDLE)
        _vt_enabled_cache = bool(ok_out or ok_err)
    except Exception:
        _vt_enabled_cache = False

    return _vt_enabled_cache


# ---- Colour builders --------------------------------------------------------

def rgb(r: int, g: int, b: int) -> str:
    """Return a true-color foreground SGR sequence for (r,g,b)."""
    r = max(0, min(255, r))
    g = max(0, min(255, g))
    b = max(0, min(255, b))
    return f"\x1b[38;2;{r};{g};{b}m"


def colorize(text: str, *styles: str) -> str:
    """
    Wrap text with one or more SGR styles/keys from ANSI (e.g., 'red', 'bold').
    Raw SGR sequences (as returned by rgb()) are accepted too.
    Always auto-resets at the end; unknown keys are ignored.
    """
    seq = "".join(
        ANSI[s] if s in ANSI else s
        for s in styles
        if s in ANSI or s.startswith("\x1b[")
    )
    return f"{seq}{text}{ANSI['reset']}" if seq else text
