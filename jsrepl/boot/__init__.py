#!/usr/bin/env python3
# jsrepl/boot/__init__.py
from __future__ import annotations
"""
Session bootstrap package.

Exports:
- boot_session: step-by-step startup producing a Session.
- close_session: session teardown (history flush, warning on failure).
- Session: dataclass holding config, logger, sink, realm, history and controller.
"""


from .boot import Session, boot_session, close_session

__all__ = ["boot_session", "close_session", "Session"]
