#!/usr/bin/env python3
# jsrepl/interface/args.py
from __future__ import annotations

"""
Command-line parsing into an Invocation.

    jsrepl [FILE ...] [-t [FORMAT] | -a [FORMAT]] [--vi]

A dump flag can be absent, given bare (default format) or given a format;
the three cases map onto NotRequested / RequestedDefault /
RequestedWithFormat.
"""

import argparse
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Sequence

from jsrepl.config import EditMode
from jsrepl.dump import (
    NOT_REQUESTED,
    REQUESTED_DEFAULT,
    DumpFormat,
    DumpMode,
    DumpRequest,
    RequestedWithFormat,
    select_mode,
)


@dataclass(frozen=True)
class Invocation:
    files: list[Path] = field(default_factory=list)
    dump_tokens: DumpRequest = NOT_REQUESTED
    dump_ast: DumpRequest = NOT_REQUESTED
    edit_mode: Optional[EditMode] = None
    history_file: Optional[str] = None
    log_level: Optional[str] = None
    color: Optional[bool] = None

    @property
    def dump_mode(self) -> Optional[DumpMode]:
        return select_mode(self.dump_tokens, self.dump_ast)

    def config_overrides(self) -> dict[str, Any]:
        """Values for load_config(); None means 'not given on the command line'."""
        return {
            "EDIT_MODE": None if self.edit_mode is None else self.edit_mode.value,
            "HISTORY_FILE": self.history_file,
            "LOG_LEVEL": self.log_level,
            "COLOR": self.color,
        }


def _format_request(text: str) -> DumpRequest:
    try:
        return RequestedWithFormat(DumpFormat.parse(text))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def build_parser(version: str = "") -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jsrepl",
        description="Interactive shell for a JavaScript-flavoured scripting engine.",
        epilog="Put FILE arguments before a bare -t/-a, or separate them with --.",
    )
    parser.add_argument("files", nargs="*", type=Path, metavar="FILE",
                        help="scripts to run in order instead of starting the prompt")

    dump = parser.add_mutually_exclusive_group()
    formats = ", ".join(f.value for f in DumpFormat)
    dump.add_argument("-t", "--dump-tokens", nargs="?", metavar="FORMAT",
                      type=_format_request, const=REQUESTED_DEFAULT, default=NOT_REQUESTED,
                      help=f"dump the token stream instead of evaluating ({formats})")
    dump.add_argument("-a", "--dump-ast", nargs="?", metavar="FORMAT",
                      type=_format_request, const=REQUESTED_DEFAULT, default=NOT_REQUESTED,
                      help=f"dump the syntax tree instead of evaluating ({formats})")

    parser.add_argument("--vi", action="store_true", help="use vi key bindings (default: emacs)")
    parser.add_argument("--history", metavar="PATH", help="history file location")
    parser.add_argument("--log-level", metavar="LEVEL",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        type=str.upper, help="logging threshold")
    parser.add_argument("--no-color", action="store_true", help="disable coloured output")
    if version:
        parser.add_argument("--version", action="version", version=f"%(prog)s {version}")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None, *, version: str = "") -> Invocation:
    """Parse `argv` (sys.argv[1:] by default). Exits with status 2 on bad arguments."""
    args = build_parser(version).parse_args(argv)
    return Invocation(
        files=list(args.files),
        dump_tokens=args.dump_tokens,
        dump_ast=args.dump_ast,
        edit_mode=EditMode.VI if args.vi else None,
        history_file=args.history,
        log_level=args.log_level,
        color=False if args.no_color else None,
    )
