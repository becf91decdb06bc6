"""Logging setup shared by the TUI and scripts."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(name)s: %(message)s"

_handler: RichHandler | None = None


def setup_logging(level: int | str = logging.INFO, log_file: Path | None = None) -> logging.Logger:
    """Install one RichHandler on the ``tapper`` logger.

    With *log_file*, records go to that file instead of the terminal, which
    keeps them off a running Textual screen.  Calling again only updates
    the level.
    """
    global _handler
    logger = logging.getLogger("tapper")
    logger.setLevel(level)

    if _handler is not None:
        _handler.setLevel(level)
        return logger

    stream: TextIO | None = None
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        stream = log_file.open("a", encoding="utf-8")
    console = Console(file=stream, stderr=stream is None, width=120 if stream else None)

    _handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    _handler.setLevel(level)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_handler)
    logger.propagate = False
    return logger
