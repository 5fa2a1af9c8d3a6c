#!/usr/bin/env python3
# jsrepl/boot/boot.py
from __future__ import annotations
"""
Session bootstrap.

Builds everything one shell session needs, one logged step at a time:
console setup, configuration, logging, keyword table and highlighter,
engine realm, history store and controller. `close_session` performs the
matching teardown (history flush).
"""

import logging
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from jsrepl.config import AppConfig, load_config
from jsrepl.dump import DumpMode
from jsrepl.engine import Realm
from jsrepl.errors import PersistenceError
from jsrepl.interface import (
    ConsoleSink,
    Controller,
    HistoryStore,
    Invocation,
    KeywordTable,
    LineHighlighter,
    OutputSink,
)
from jsrepl.ui import enable_windows_vt, init_logger

log = logging.getLogger("jsrepl.boot")


@dataclass(slots=True)
class Session:
    config: AppConfig
    logger: logging.Logger
    sink: OutputSink
    realm: Realm
    keywords: KeywordTable
    highlighter: LineHighlighter
    history: Optional[HistoryStore]
    dump: Optional[DumpMode]
    controller: Controller


def _step(label: str, fn: Callable[[], Any]) -> Any:
    """Run a boot step with status logging."""
    try:
        out = fn()
    except Exception as exc:
        log.error("[FAILED] %s (%s: %s)", label, type(exc).__name__, exc)
        raise
    log.debug("[  OK  ] %s", label)
    return out


def boot_session(
    invocation: Invocation,
    *,
    sink: Optional[OutputSink] = None,
    interactive: bool = True,
    cwd: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Session:
    """
    Assemble a Session for `invocation`.

    History is only opened for interactive sessions; file mode never
    touches it. Raises ConfigError for invalid configuration.
    """
    # ---------- console + config ----------
    _step("Enable ANSI sequences", enable_windows_vt)
    config = _step(
        "Load configuration",
        lambda: load_config(invocation.config_overrides(), cwd=cwd, environ=environ),
    )

    # ---------- logging ----------
    logger = _step(
        "Initialize logger",
        lambda: init_logger(
            "jsrepl",
            level=getattr(logging, config.log_level),
            logfile=config.log_file_path,
            color=config.color,
        ),
    )
    _step(
        f"Detect environment: {platform.system()} {platform.release()} / Python {platform.python_version()}",
        lambda: None,
    )

    # ---------- presentation ----------
    out = sink if sink is not None else ConsoleSink(color=config.color)
    keywords = _step("Build keyword table", KeywordTable)
    highlighter = LineHighlighter(keywords)

    # ---------- engine ----------
    realm = _step("Create engine realm", lambda: Realm(stdout=out.write, stderr=out.write_error))
    dump = _step("Resolve dump mode", lambda: invocation.dump_mode)

    # ---------- history ----------
    history: Optional[HistoryStore] = None
    if interactive:
        history = HistoryStore(config.history_file, config.history_size)
        _step(f"Load history from {config.history_file}", history.read)

    controller = Controller(
        realm,
        out,
        history=history,
        dump=dump,
        prompt=config.prompt,
        continuation_prompt=config.continuation_prompt,
    )
    _step("Boot complete", lambda: None)

    return Session(
        config=config,
        logger=logger,
        sink=out,
        realm=realm,
        keywords=keywords,
        highlighter=highlighter,
        history=history,
        dump=dump,
        controller=controller,
    )


def close_session(session: Session) -> bool:
    """
    Flush history. Returns False (after logging a warning) if the flush
    failed; the session is still considered closed.
    """
    if session.history is None:
        return True
    try:
        session.history.flush()
    except PersistenceError as exc:
        log.warning("%s", exc)
        return False
    return True
