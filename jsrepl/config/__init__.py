#!/usr/bin/env python3
# jsrepl/config/__init__.py
from __future__ import annotations

"""
Layered configuration for the shell (defaults, files, environment, flags).
"""


from .config import (
    AppConfig,
    EditMode,
    load_config,
    DEFAULTS,
    DEFAULT_HISTORY_FILE,
    ENV_PREFIX,
)

__all__ = [
    "AppConfig",
    "EditMode",
    "load_config",
    "DEFAULTS",
    "DEFAULT_HISTORY_FILE",
    "ENV_PREFIX",
]
