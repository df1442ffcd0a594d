from __future__ import annotations

import pytest

from gostack.errors import (
    InvalidDurationCharacter,
    InvalidStateCharacter,
    MalformedTerminator,
    UnexpectedCharacter,
    UnexpectedEndOfInput,
)
from gostack.tokenizer import Tokenizer, scan_blocked, scan_line, scan_state, scan_word


class OneByteReader:
    """Binary source that hands out a single byte per read()."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    def read(self, n: int = -1) -> bytes:
        chunk = self._data[self._pos : self._pos + 1]
        self._pos += len(chunk)
        return chunk


def test_scan_word_consumes_one_delimiter() -> None:
    tok = scan_word(b"goroutine 1 [", 0, False)
    assert tok is not None
    assert tok.value == b"goroutine"
    assert tok.end == 10


def test_scan_word_skips_leading_whitespace() -> None:
    tok = scan_word(b"\n\n goroutine ", 0, False)
    assert tok is not None
    assert tok.value == b"goroutine"
    assert tok.start == 3


def test_scan_word_needs_delimiter_before_eof() -> None:
    assert scan_word(b"gorout", 0, False) is None
    tok = scan_word(b"gorout", 0, True)
    assert tok is not None and tok.value == b"gorout"


def test_scan_word_eof_with_only_whitespace() -> None:
    with pytest.raises(UnexpectedEndOfInput):
        scan_word(b" \n\t", 0, True)
    assert scan_word(b" \n\t", 0, False) is None


def test_scan_state_stops_before_terminator() -> None:
    tok = scan_state(b"[running]:\n", 0, False)
    assert tok is not None
    assert tok.value == b"running"
    assert tok.end == 8

    tok = scan_state(b"[chan receive, 3 minutes]:\n", 0, False)
    assert tok is not None
    assert tok.value == b"chan receive"
    assert tok.end == len(b"[chan receive")


def test_scan_state_trims_spaces() -> None:
    tok = scan_state(b"[ IO wait ]:\n", 0, False)
    assert tok is not None and tok.value == b"IO wait"


def test_scan_state_requires_open_bracket() -> None:
    with pytest.raises(UnexpectedCharacter) as exc:
        scan_state(b"(running]:\n", 0, False, base=12)
    assert exc.value.position == 12
    assert exc.value.found == b"("


def test_scan_state_rejects_digit() -> None:
    with pytest.raises(InvalidStateCharacter) as exc:
        scan_state(b"[run1ing]:\n", 0, False, base=12)
    assert exc.value.position == 16
    assert exc.value.found == b"1"


def test_scan_state_streaming() -> None:
    assert scan_state(b"", 0, False) is None
    assert scan_state(b"[chan rec", 0, False) is None
    with pytest.raises(UnexpectedEndOfInput):
        scan_state(b"[chan rec", 0, True)
    with pytest.raises(UnexpectedEndOfInput):
        scan_state(b"", 0, True)


def test_scan_blocked_without_duration() -> None:
    tok = scan_blocked(b"]:\ngoroutine", 0, False)
    assert tok is not None
    assert tok.value == b""
    assert tok.end == 3


def test_scan_blocked_with_duration() -> None:
    data = b", 5 minutes]:\nmain.f()"
    tok = scan_blocked(data, 0, False)
    assert tok is not None
    assert tok.value == b"5"
    assert tok.end == len(b", 5 minutes]:\n")


def test_scan_blocked_needs_more_data() -> None:
    assert scan_blocked(b"]:", 0, False) is None
    assert scan_blocked(b",", 0, False) is None
    assert scan_blocked(b", 12", 0, False) is None
    assert scan_blocked(b", 12 min", 0, False) is None


@pytest.mark.parametrize("data", [b"]:", b", 12", b", 12 min", b""])
def test_scan_blocked_truncated_at_eof(data: bytes) -> None:
    with pytest.raises(UnexpectedEndOfInput):
        scan_blocked(data, 0, True)


def test_scan_blocked_malformed_state_end() -> None:
    with pytest.raises(MalformedTerminator) as exc:
        scan_blocked(b"]x\n", 0, False)
    assert exc.value.position == 1


def test_scan_blocked_malformed_minutes_suffix() -> None:
    with pytest.raises(MalformedTerminator) as exc:
        scan_blocked(b", 5 hours]:\n", 0, False)
    assert exc.value.position == 4


def test_scan_blocked_rejects_non_digit() -> None:
    with pytest.raises(InvalidDurationCharacter) as exc:
        scan_blocked(b", 5x minutes]:\n", 0, False, base=100)
    assert exc.value.position == 103
    assert exc.value.found == b"x"


def test_scan_blocked_rejects_missing_digits() -> None:
    with pytest.raises(InvalidDurationCharacter):
        scan_blocked(b",  minutes]:\n", 0, False)
    with pytest.raises(InvalidDurationCharacter):
        scan_blocked(b", locked to thread]:\n", 0, False)


def test_scan_line() -> None:
    tok = scan_line(b"main.f()\r\n\t/a.go:1\n", 0, False)
    assert tok is not None
    assert tok.value == b"main.f()"
    assert tok.end == 10

    assert scan_line(b"main.f()", 0, False) is None
    tok = scan_line(b"main.f()", 0, True)
    assert tok is not None and tok.value == b"main.f()"

    tok = scan_line(b"\n", 0, False)
    assert tok is not None and tok.value == b""

    with pytest.raises(UnexpectedEndOfInput):
        scan_line(b"abc\n", 4, True)


def test_tokenizer_streams_one_byte_at_a_time() -> None:
    tokens = Tokenizer(OneByteReader(b"goroutine 12 [chan receive, 3 minutes]:\nmain.f()\n"), chunk_size=1)
    assert tokens.word() == b"goroutine"
    assert tokens.word() == b"12"
    assert tokens.token_start == 10
    assert tokens.state() == b"chan receive"
    assert tokens.blocked() == b"3"
    assert tokens.line() == b"main.f()"
    with pytest.raises(UnexpectedEndOfInput) as exc:
        tokens.line()
    assert exc.value.position == len(b"goroutine 12 [chan receive, 3 minutes]:\nmain.f()\n")


def test_tokenizer_reports_absolute_positions_after_refill() -> None:
    data = b"goroutine 1 [running]:\n\ngoroutine 2 [bad!]:\n"
    tokens = Tokenizer(OneByteReader(data), chunk_size=1)
    tokens.word()
    tokens.word()
    tokens.state()
    tokens.blocked()
    assert tokens.line() == b""
    tokens.word()
    tokens.word()
    with pytest.raises(InvalidStateCharacter) as exc:
        tokens.state()
    assert exc.value.position == data.index(b"!")
