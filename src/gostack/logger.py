from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import TextIO

LOGGER_NAME = "gostack"


class TraceFormatter(logging.Formatter):
    """[ 2026-10-19 09:12:03 ] : DEBUG : gostack : message"""

    def __init__(self) -> None:
        super().__init__(fmt="[ %(asctime)s ] : %(levelname)s : %(name)s : %(message)s", datefmt="%Y-%m-%d %H:%M:%S")


def setup_logger(name: str = LOGGER_NAME, *, verbose: bool = False, stream: TextIO | None = None) -> logging.Logger:
    """Return the named logger with a single stderr handler attached."""
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Repeated calls (tests, embedding) must not stack handlers.
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stderr if stream is None else stream)
    handler.setFormatter(TraceFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def trace_sink(logger: logging.Logger) -> Callable[[str], None]:
    """Adapt a logger into the reader's `trace` callback (messages go out at DEBUG)."""

    def sink(message: str) -> None:
        logger.debug("%s", message)

    return sink
