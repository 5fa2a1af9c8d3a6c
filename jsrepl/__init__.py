#!/usr/bin/env python3
# jsrepl/__init__.py
from __future__ import annotations
"""
jsrepl: interactive shell for a JavaScript-flavoured scripting engine.

Avoid eager imports here; subpackages expose their APIs through their own
__init__.py files.
"""

__version__ = "0.4.0"

__all__ = ["__version__"]
