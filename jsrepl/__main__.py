#!/usr/bin/env python3
# jsrepl/__main__.py
from __future__ import annotations
"""
Command-line entry point.

With FILE arguments each file is dispatched once, in order, and the
process exits. Without them the interactive prompt starts.

Exit status: 0 on success, 1 if a file cannot be read, 2 for invalid
arguments or configuration.
"""

import sys
from typing import Optional, Sequence

from jsrepl import __version__
from jsrepl.boot import boot_session, close_session
from jsrepl.errors import ConfigError
from jsrepl.interface import make_cli, parse_args
from jsrepl.ui import print_banner, print_line


def main(argv: Optional[Sequence[str]] = None) -> int:
    invocation = parse_args(argv, version=__version__)
    interactive = not invocation.files

    try:
        session = boot_session(invocation, interactive=interactive)
    except ConfigError as exc:
        print_line(str(exc), file=sys.stderr, flush=True)
        return 2

    if not interactive:
        return session.controller.run_files(invocation.files)

    config = session.config
    if config.show_banner and sys.stdout.isatty():
        print_banner(__version__, color=config.color)

    cli = make_cli(
        history=session.history,
        highlighter=session.highlighter,
        pending=session.controller.pending,
        edit_mode=config.edit_mode,
        color=config.color,
    )
    try:
        with cli:
            session.controller.run(cli)
    finally:
        close_session(session)
    return 0


if __name__ == "__main__":
    sys.exit(main())
