"""Incremental tokenizer for goroutine dumps.

Each `scan_*` function looks at `data[pos:]` and either

- returns a `Token` (the value plus the index just past what it consumed),
- returns None when the buffered bytes are not enough to decide, or
- raises a `FormatError` subclass for a grammar violation.

When `at_eof` is true no more bytes will ever arrive, so a scan that would
have asked for more raises `UnexpectedEndOfInput` instead. `base` is the
stream offset of `data[0]` and is only used for error positions.

`Tokenizer` drives the scan functions over a binary stream, growing its
buffer until a scan can decide.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import BinaryIO, Optional

import attrs

from .config import DEFAULT_CHUNK_SIZE
from .errors import (
    InvalidDurationCharacter,
    InvalidStateCharacter,
    MalformedTerminator,
    UnexpectedCharacter,
    UnexpectedEndOfInput,
)

Buffer = bytes | bytearray

WHITESPACE = b" \t\n\r\v\f"
STATE_END = b"]:\n"
DURATION_START = b", "
DURATION_END = b" minutes]:\n"


@attrs.define(frozen=True, slots=True)
class Token:
    start: int
    end: int
    value: bytes


ScanFunc = Callable[..., Optional[Token]]


def _is_state_byte(b: int) -> bool:
    return 0x41 <= b <= 0x5A or 0x61 <= b <= 0x7A or b == 0x20


def _is_digit(b: int) -> bool:
    return 0x30 <= b <= 0x39


def _expect_literal(data: Buffer, pos: int, literal: bytes, at_eof: bool, base: int) -> bool:
    """Check `data[pos:]` against `literal`; False means the literal is a prefix match so far."""
    window = data[pos : pos + len(literal)]
    for k, b in enumerate(window):
        if b != literal[k]:
            raise MalformedTerminator.at(base + pos + k, found=bytes(window), expected=repr(literal))
    if len(window) < len(literal):
        if at_eof:
            raise UnexpectedEndOfInput(position=base + len(data), expected=repr(literal))
        return False
    return True


def scan_word(data: Buffer, pos: int, at_eof: bool, *, base: int = 0) -> Token | None:
    """A run of non-whitespace bytes. Leading whitespace is skipped, one trailing delimiter is consumed."""
    n = len(data)
    i = pos
    while i < n and data[i] in WHITESPACE:
        i += 1
    start = i
    while i < n and data[i] not in WHITESPACE:
        i += 1
    if i < n:
        return Token(start, i + 1, bytes(data[start:i]))
    if at_eof:
        if i > start:
            return Token(start, i, bytes(data[start:i]))
        raise UnexpectedEndOfInput(position=base + i, expected="a word")
    return None


def scan_state(data: Buffer, pos: int, at_eof: bool, *, base: int = 0) -> Token | None:
    """`[` followed by letters and spaces, up to (not including) the first `,` or `]`."""
    n = len(data)
    if pos >= n:
        if at_eof:
            raise UnexpectedEndOfInput(position=base + pos, expected='"["')
        return None
    if data[pos] != ord("["):
        raise UnexpectedCharacter.at(base + pos, found=bytes(data[pos : pos + 1]), expected='"["')
    for i in range(pos + 1, n):
        b = data[i]
        if b == ord(",") or b == ord("]"):
            return Token(pos + 1, i, bytes(data[pos + 1 : i]).strip())
        if not _is_state_byte(b):
            raise InvalidStateCharacter.at(
                base + i, found=bytes(data[i : i + 1]), expected="a letter or space in goroutine state"
            )
    if at_eof:
        raise UnexpectedEndOfInput(position=base + n, expected='"," or "]" after goroutine state')
    return None


def scan_blocked(data: Buffer, pos: int, at_eof: bool, *, base: int = 0) -> Token | None:
    """Either `]:\\n` (empty value) or `, N minutes]:\\n` (value is the digits)."""
    n = len(data)
    if pos >= n:
        if at_eof:
            raise UnexpectedEndOfInput(position=base + pos, expected=f"{STATE_END!r} or {DURATION_START!r}")
        return None

    if data[pos] == ord("]"):
        if not _expect_literal(data, pos, STATE_END, at_eof, base):
            return None
        return Token(pos, pos + len(STATE_END), b"")

    if not _expect_literal(data, pos, DURATION_START, at_eof, base):
        return None
    start = pos + len(DURATION_START)
    i = start
    while i < n and _is_digit(data[i]):
        i += 1
    if i == n:
        if at_eof:
            raise UnexpectedEndOfInput(position=base + n, expected="blocked duration digits")
        return None
    if i == start or data[i] != ord(" "):
        raise InvalidDurationCharacter.at(base + i, found=bytes(data[i : i + 1]), expected="0-9")
    if not _expect_literal(data, i, DURATION_END, at_eof, base):
        return None
    return Token(start, i + len(DURATION_END), bytes(data[start:i]))


def scan_line(data: Buffer, pos: int, at_eof: bool, *, base: int = 0) -> Token | None:
    """Everything up to the next newline; the terminator (and a trailing CR) is dropped."""
    nl = data.find(b"\n", pos)
    if nl >= 0:
        end = nl + 1
        content = data[pos:nl]
    elif at_eof:
        if pos >= len(data):
            raise UnexpectedEndOfInput(position=base + pos, expected="a line")
        end = len(data)
        content = data[pos:]
    else:
        return None
    if content.endswith(b"\r"):
        content = content[:-1]
    return Token(pos, end, bytes(content))


class Tokenizer:
    """Pulls tokens from a binary stream without reading it all up front.

    Consumed bytes are dropped from the buffer each time it is refilled.
    """

    def __init__(self, source: BinaryIO, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self._source = source
        self._chunk_size = chunk_size
        self._buf = bytearray()
        self._pos = 0
        self._base = 0
        self._eof = False
        self.token_start = 0

    @property
    def offset(self) -> int:
        """Stream offset of the next unconsumed byte."""
        return self._base + self._pos

    def _fill(self) -> None:
        if self._pos:
            del self._buf[: self._pos]
            self._base += self._pos
            self._pos = 0
        chunk = self._source.read(self._chunk_size)
        if not chunk:
            self._eof = True
        else:
            self._buf += chunk

    def next(self, scan: ScanFunc) -> bytes:
        while True:
            tok = scan(self._buf, self._pos, self._eof, base=self._base)
            if tok is not None:
                self.token_start = self._base + tok.start
                self._pos = tok.end
                return tok.value
            if self._eof:
                raise AssertionError(f"{scan.__name__} asked for more data after end of input")
            self._fill()

    def word(self) -> bytes:
        return self.next(scan_word)

    def state(self) -> bytes:
        return self.next(scan_state)

    def blocked(self) -> bytes:
        return self.next(scan_blocked)

    def line(self) -> bytes:
        return self.next(scan_line)
