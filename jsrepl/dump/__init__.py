#!/usr/bin/env python3
# jsrepl/dump/__init__.py
from __future__ import annotations

from .formats import (
    DumpFormat,
    DumpMode,
    DumpRequest,
    DumpTarget,
    NOT_REQUESTED,
    NotRequested,
    REQUESTED_DEFAULT,
    RequestedDefault,
    RequestedWithFormat,
    is_requested,
    select_mode,
)
from .pipeline import dump, dump_mode, node_from_json, serialize, tokens_from_json

__all__ = [
    "DumpFormat",
    "DumpMode",
    "DumpRequest",
    "DumpTarget",
    "NOT_REQUESTED",
    "NotRequested",
    "REQUESTED_DEFAULT",
    "RequestedDefault",
    "RequestedWithFormat",
    "is_requested",
    "select_mode",
    "dump",
    "dump_mode",
    "node_from_json",
    "serialize",
    "tokens_from_json",
]
