#!/usr/bin/env python3
# jsrepl/interface/cli.py
from __future__ import annotations

"""
Interactive input frontends.

Selection order:
    1) prompt_toolkit (highlighting, bracket validation, history recall)
    2) plain input() (pipes, dumb terminals, last resort)

Every frontend exposes `get_line(prompt)`, which returns one raw line and
raises EOFError / KeyboardInterrupt on end-of-input / interrupt.
"""

import logging
import sys
from typing import Callable, Optional

from jsrepl.config import EditMode
from jsrepl.interface.highlight import HighlightLexer, LineHighlighter
from jsrepl.interface.history import HistoryStore
from jsrepl.interface.validation import BracketValidator

log = logging.getLogger("jsrepl.cli")


class BaseCLI:
    """
    Base interface for CLI frontends.

    Subclasses should implement:
        - setup()
        - get_line(prompt)
        - teardown()

    This base also provides context manager support to guarantee teardown.
    """

    def setup(self) -> None:  # pragma: no cover - interface
        ...

    def get_line(self, prompt: str) -> str:  # pragma: no cover - interface
        raise NotImplementedError

    def teardown(self) -> None:  # pragma: no cover - interface
        ...

    # Context manager helpers
    def __enter__(self) -> "BaseCLI":
        self.setup()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.teardown()
        except Exception:
            log.debug("frontend teardown failed", exc_info=True)


# ===== Preferred: prompt_toolkit =====
class PromptToolkitCLI(BaseCLI):
    """Line editor with live highlighting, bracket validation and history recall."""

    def __init__(
        self,
        *,
        history: Optional[HistoryStore] = None,
        highlighter: Optional[LineHighlighter] = None,
        pending: Optional[Callable[[], str]] = None,
        edit_mode: EditMode = EditMode.EMACS,
        color: bool = True,
    ) -> None:
        from prompt_toolkit import PromptSession
        from prompt_toolkit.enums import EditingMode
        from prompt_toolkit.key_binding import KeyBindings
        from prompt_toolkit.styles import Style, merge_styles

        kb = KeyBindings()

        @kb.add("c-l")
        def _(event):
            event.app.renderer.clear()

        styles = [Style.from_dict({"prompt": "ansicyan bold" if color else ""})]
        lexer = None
        if highlighter is not None and color:
            lexer = HighlightLexer(highlighter)
            styles.append(highlighter.prompt_toolkit_style())

        self._session = PromptSession(
            history=history,
            lexer=lexer,
            validator=BracketValidator(pending),
            validate_while_typing=False,
            style=merge_styles(styles),
            editing_mode=EditingMode.VI if edit_mode is EditMode.VI else EditingMode.EMACS,
            key_bindings=kb,
            include_default_pygments_style=False,
        )

    def get_line(self, prompt: str) -> str:
        from prompt_toolkit.formatted_text import FormattedText

        return self._session.prompt(FormattedText([("class:prompt", prompt)]))


# ===== Fallback: plain input =====
class PlainCLI(BaseCLI):
    """input()-based frontend; no editing features."""

    def get_line(self, prompt: str) -> str:
        return input(prompt)


def make_cli(
    *,
    history: Optional[HistoryStore] = None,
    highlighter: Optional[LineHighlighter] = None,
    pending: Optional[Callable[[], str]] = None,
    edit_mode: EditMode = EditMode.EMACS,
    color: bool = True,
) -> BaseCLI:
    """
    Factory to select the best available CLI frontend at runtime.
    """
    if not (sys.stdin.isatty() and sys.stdout.isatty()):
        log.debug("stdin/stdout not a terminal; using plain input")
        return PlainCLI()
    try:
        return PromptToolkitCLI(
            history=history,
            highlighter=highlighter,
            pending=pending,
            edit_mode=edit_mode,
            color=color,
        )
    except Exception:
        # e.g. no usable console on this platform
        log.debug("prompt_toolkit frontend unavailable; using plain input", exc_info=True)
        return PlainCLI()
