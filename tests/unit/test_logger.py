from __future__ import annotations

import io
import logging

from gostack.logger import setup_logger, trace_sink
from gostack.reader import read_profile_bytes


def test_setup_logger_is_idempotent() -> None:
    name = "gostack.test.idempotent"
    a = setup_logger(name, verbose=True, stream=io.StringIO())
    b = setup_logger(name, verbose=False, stream=io.StringIO())
    assert a is b
    assert len(b.handlers) == 1
    assert b.level == logging.INFO


def test_trace_sink_writes_debug_lines() -> None:
    buf = io.StringIO()
    logger = setup_logger("gostack.test.trace", verbose=True, stream=buf)
    read_profile_bytes(b"goroutine 42 [select]:\n", trace=trace_sink(logger))
    out = buf.getvalue()
    assert ": DEBUG : gostack.test.trace : - Goroutine ID: 42" in out


def test_quiet_logger_drops_trace() -> None:
    buf = io.StringIO()
    logger = setup_logger("gostack.test.quiet", verbose=False, stream=buf)
    read_profile_bytes(b"goroutine 42 [select]:\n", trace=trace_sink(logger))
    assert buf.getvalue() == ""
