from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler

import json_io
from line_reader import DEFAULT_HISTORY_SIZE
from session import Session, run_repl

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_history_size() -> int:
    raw = os.getenv("DTREE_HISTORY_SIZE", "")
    try:
        size = int(raw)
    except ValueError:
        return DEFAULT_HISTORY_SIZE
    return size if size > 0 else DEFAULT_HISTORY_SIZE


def get_log_file() -> Optional[str]:
    return os.getenv("DTREE_LOG_FILE") or None


def get_log_level() -> Optional[str]:
    return os.getenv("DTREE_LOG_LEVEL") or None


def configure_logging() -> logging.Handler:
    """Attach one handler to the root logger based on the environment.

    The interactive screen is never written to unless a level is requested
    explicitly; a log file takes precedence over the console handler.
    """
    level_name = (get_log_level() or "DEBUG").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.DEBUG
    log_file = get_log_file()
    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    elif get_log_level():
        handler = RichHandler(console=Console(stderr=True), show_path=False)
    else:
        handler = logging.NullHandler()
        level = logging.WARNING
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level)
    return handler


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    configure_logging()
    session = Session(sys.stdout, sys.stdin)
    if args:
        try:
            session.replace_tree(json_io.load(args[0]))
        except (OSError, ValueError) as exc:
            session.error(f"cannot load {args[0]}: {exc}")
            return 1
        logger.info("started with %s", args[0])
    run_repl(sys.stdin, sys.stdout, session=session, history_size=get_history_size())
    return 0


if __name__ == "__main__":
    sys.exit(main())
