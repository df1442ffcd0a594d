"""Exceptions raised while reading a goroutine dump.

`FormatError` means the bytes broke one of the micro-grammars (a header
field, the bracketed state, the blocked-duration suffix). `ParseError` means
a token was well formed but wrong for its place in the dump.

Every error raised by `gostack.reader.read_profile` has `profile` set to the
partial `Profile` built before the failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .model import Profile


def _show(found: bytes | None) -> str:
    if found is None:
        return "end of input"
    return repr(found)


class GostackError(Exception):
    """Root of all errors raised by the reader."""

    def __init__(self, message: str, *, position: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.position = position
        self.profile: Profile | None = None

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (at byte {self.position})"


class FormatError(GostackError):
    """The byte stream violates a micro-grammar."""

    def __init__(self, message: str, *, position: int, found: bytes | None = None, expected: str | None = None) -> None:
        super().__init__(message, position=position)
        self.found = found
        self.expected = expected

    @classmethod
    def at(cls, position: int, *, found: bytes | None, expected: str) -> "FormatError":
        return cls(f"expected {expected} but found {_show(found)}", position=position, found=found, expected=expected)


class UnexpectedCharacter(FormatError):
    pass


class InvalidStateCharacter(FormatError):
    pass


class MalformedTerminator(FormatError):
    pass


class InvalidDurationCharacter(FormatError):
    pass


class UnexpectedEndOfInput(FormatError):
    def __init__(self, *, position: int, expected: str) -> None:
        super().__init__(f"unexpected end of input, expected {expected}", position=position, expected=expected)


class ParseError(GostackError):
    """A token was valid for its micro-grammar but not in its context."""

    def __init__(self, message: str, *, position: int | None = None, token: str | None = None) -> None:
        super().__init__(message, position=position)
        self.token = token


class ExpectedKeyword(ParseError):
    pass


class InvalidId(ParseError):
    pass


class InvalidDuration(ParseError):
    pass


class TruncatedFrame(ParseError):
    pass
