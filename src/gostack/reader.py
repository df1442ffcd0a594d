"""Build a `Profile` from a goroutine dump.

Only dumps written at verbosity 2 are supported, i.e. what
`pprof.Lookup("goroutine").WriteTo(w, 2)` or `/debug/pprof/goroutine?debug=2`
produce. Each goroutine block looks like::

    goroutine 7 [chan receive, 3 minutes]:
    main.worker(0xc000010000)
    \t/src/app/main.go:42 +0x5d
    created by main.main in goroutine 1
    \t/src/app/main.go:20 +0x66

Blocks are separated by a blank line; the last one may end at end of input.
"""

from __future__ import annotations

import io
from collections.abc import Callable
from datetime import datetime, timezone
from typing import BinaryIO

from .config import ReaderSettings
from .errors import ExpectedKeyword, GostackError, InvalidDuration, InvalidId, TruncatedFrame, UnexpectedEndOfInput
from .model import Goroutine, GoroutineState, Profile, StackFrame
from .tokenizer import Tokenizer

TraceSink = Callable[[str], None]

KEYWORD = b"goroutine"


def _noop(_message: str) -> None:
    pass


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


def _read_goroutine(tokens: Tokenizer, number: int, trace: TraceSink, preview: int) -> tuple[Goroutine, bool] | None:
    """Read one goroutine block.

    Returns None at a clean end of input before the header, otherwise the
    goroutine and whether more input may follow.
    """
    try:
        keyword = tokens.word()
    except UnexpectedEndOfInput:
        return None
    if keyword != KEYWORD:
        text = _decode(keyword)
        raise ExpectedKeyword(f'expected "goroutine" but found {text!r}', position=tokens.token_start, token=text)
    trace(f"New goroutine (total: {number})")

    raw_id = tokens.word()
    if not raw_id.isdigit():
        text = _decode(raw_id)
        raise InvalidId(f"goroutine ID {text!r} could not be parsed", position=tokens.token_start, token=text)
    goroutine_id = int(raw_id)
    trace(f"- Goroutine ID: {goroutine_id}")

    state_text = tokens.state().decode("ascii")
    state = GoroutineState.parse(state_text)
    trace(f"- Goroutine state: {state_text}")

    blocked = 0
    raw_blocked = tokens.blocked()
    if raw_blocked:
        if not raw_blocked.isdigit():
            text = _decode(raw_blocked)
            raise InvalidDuration(f"blocked duration {text!r} could not be parsed", position=tokens.token_start, token=text)
        blocked = int(raw_blocked)
        trace(f"- Goroutine blocked: {blocked}")

    frames: list[StackFrame] = []
    while True:
        try:
            line1 = tokens.line()
        except UnexpectedEndOfInput:
            # The last block in a dump is usually not followed by a blank line.
            return Goroutine(id=goroutine_id, state=state, blocked=blocked, stack=frames), False
        if not line1:
            trace(f"End of goroutine {goroutine_id}")
            return Goroutine(id=goroutine_id, state=state, blocked=blocked, stack=frames), True

        text1 = _decode(line1)
        trace(f"- Stack line 1/{len(frames) + 1}: {text1[:preview]}")
        try:
            line2 = tokens.line()
        except UnexpectedEndOfInput as e:
            raise TruncatedFrame(
                f"goroutine {goroutine_id}: stack frame {text1!r} is missing its location line",
                position=e.position,
                token=text1,
            ) from e
        text2 = _decode(line2).strip()
        trace(f"- Stack line 2/{len(frames) + 1}: {text2[:preview]}")
        frames.append(StackFrame.from_lines(text1, text2))


def read_profile(
    stream: BinaryIO,
    *,
    trace: TraceSink | None = None,
    settings: ReaderSettings | None = None,
) -> Profile:
    """Parse a goroutine dump from a binary stream.

    Raises a `GostackError` subclass on malformed input; the exception's
    `profile` attribute holds every goroutine completed before the failure.
    `trace`, when given, receives one message per parsed field.
    """
    settings = ReaderSettings() if settings is None else settings
    emit = _noop if trace is None else trace
    created = datetime.now(timezone.utc)
    goroutines: list[Goroutine] = []
    stack_counts: dict[str, int] = {}
    tokens = Tokenizer(stream, chunk_size=settings.chunk_size)

    try:
        more = True
        while more:
            read = _read_goroutine(tokens, len(goroutines) + 1, emit, settings.trace_preview_chars)
            if read is None:
                break
            goroutine, more = read
            goroutines.append(goroutine)
            bottom = goroutine.bottom_frame
            if bottom is not None:
                stack_counts[bottom.line2] = stack_counts.get(bottom.line2, 0) + 1
    except GostackError as e:
        e.profile = Profile(created=created, goroutines=goroutines, stack_counts=stack_counts)
        raise

    return Profile(created=created, goroutines=goroutines, stack_counts=stack_counts)


def read_profile_bytes(data: bytes, **kwargs) -> Profile:
    """Convenience wrapper around `read_profile` for an in-memory dump."""
    return read_profile(io.BytesIO(data), **kwargs)
