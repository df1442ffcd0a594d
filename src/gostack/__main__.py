from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import DEFAULT_CHUNK_SIZE, DEFAULT_TOP_N, ReaderSettings
from .errors import GostackError
from .export import build_payload, write_summary
from .logger import setup_logger, trace_sink
from .reader import read_profile
from .report import render_text, write_markdown_report
from .sources import open_profile
from .summary import summarize


def _abs_path(p: str) -> Path:
    return Path(p).expanduser().resolve()


def _int_at_least(minimum: int):
    def parse(v: str) -> int:
        try:
            n = int(v)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid integer: {v!r}") from None
        if n < minimum:
            raise argparse.ArgumentTypeError(f"must be >= {minimum}, got {n}")
        return n

    return parse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gostack",
        description="Summarize a Go goroutine stack dump (pprof goroutine profile, debug=2).",
    )
    parser.add_argument("input", nargs="?", default="-", help="Dump file, plain or gzip ('-' or omitted: stdin).")
    parser.add_argument("--debug", action="store_true", help="Turn on verbose parser trace output (stderr).")
    parser.add_argument("--top", type=_int_at_least(0), default=DEFAULT_TOP_N, help="Number of bottom frames to list.")
    parser.add_argument("--json", dest="json_out", type=_abs_path, default=None, help="Also write the summary as JSON.")
    parser.add_argument("--markdown", type=_abs_path, default=None, help="Also write a Markdown report.")
    parser.add_argument("--chunk-size", type=_int_at_least(1), default=DEFAULT_CHUNK_SIZE, help="Bytes per read.")
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint. Returns process exit code."""
    parser = build_parser()
    ns = parser.parse_args(argv)

    trace = trace_sink(setup_logger(verbose=True)) if ns.debug else None
    settings = ReaderSettings(chunk_size=ns.chunk_size)

    exit_code = 0
    try:
        with open_profile(ns.input) as stream:
            profile = read_profile(stream, trace=trace, settings=settings)
    except GostackError as e:
        print(f"Error reading goroutine stack profile (was it created with debug=2?): {e}", file=sys.stderr)
        if e.profile is None or not e.profile.goroutines:
            return 2
        print(f"Partial results for the {len(e.profile.goroutines)} goroutine(s) read before the error:", file=sys.stderr)
        profile = e.profile
        exit_code = 2
    except (OSError, EOFError) as e:
        print(f"Failed to read {ns.input}: {e}", file=sys.stderr)
        return 1

    summary = summarize(profile, top_n=ns.top)
    print(render_text(summary))

    if ns.json_out is not None:
        write_summary(ns.json_out, build_payload(summary))
    if ns.markdown is not None:
        write_markdown_report(summary, ns.markdown)

    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
