#!/usr/bin/env python3
# jsrepl/ui/__init__.py
from __future__ import annotations
# Re-export convenient top-level API
from .utils import (
    ANSI,
    strip_ansi,
    enable_windows_vt,
    colorize,
    rgb,
    print_line,
    print_banner,
)
from .static import (
    init_logger,
    ColorizingStreamHandler,
    PlainFormatter,
)

__all__ = [
    "ANSI",
    "strip_ansi",
    "enable_windows_vt",
    "colorize",
    "rgb",
    "print_line",
    "print_banner",
    "init_logger",
    "ColorizingStreamHandler",
    "PlainFormatter",
]
