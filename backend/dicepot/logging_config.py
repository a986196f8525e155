"""Logging setup for the dicepot server (console only, package logger)."""

from __future__ import annotations
import logging
import sys

logger = logging.getLogger("dicepot")

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def setup_logging(level: str | int = logging.INFO) -> None:
    """Attach a single stderr handler to the package logger.

    Safe to call more than once (create_app runs per test).
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger.setLevel(level)
    if not any(getattr(h, "_dicepot", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._dicepot = True
        logger.addHandler(handler)
    logger.propagate = True
