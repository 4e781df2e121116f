"""Logging setup shared by the filler, its engines and the CLI."""

from __future__ import annotations

import logging
from typing import Optional, TextIO, Union

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"


def resolve_level(level: Union[int, str]) -> int:
    """Map a level name such as ``"debug"`` to its number; unknown names give INFO."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: Union[int, str] = logging.INFO, stream: Optional[TextIO] = None) -> None:
    """Install a single stream handler on the root logger.

    ``level`` may be a number or a level name as typed on the command line.
    The native search logs every dead end at DEBUG, so DEBUG output on a hard
    grid is verbose.
    """

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(fmt=DEFAULT_FORMAT, datefmt="%H:%M:%S"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(resolve_level(level))


def get_logger(name: Optional[str] = None) -> logging.Logger:
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name or "crossfill")
