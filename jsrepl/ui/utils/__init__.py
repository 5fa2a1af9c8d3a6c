#!/usr/bin/env python3
# jsrepl/ui/utils/__init__.py
from __future__ import annotations
from .ansi import (
    ANSI,
    strip_ansi,
    enable_windows_vt,
    colorize,
    rgb,
)
from .console import print_line, print_banner

__all__ = [
    "ANSI",
    "strip_ansi",
    "enable_windows_vt",
    "colorize",
    "rgb",
    "print_line",
    "print_banner",
]
