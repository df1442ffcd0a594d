"""Goroutine stack dump parsing.

`read_profile` turns the text a Go process writes for its goroutine profile at
verbosity 2 into a `Profile`: every goroutine with its state, blocked time and
stack, plus a count of how often each bottom stack frame occurs.
`summarize` derives per-state counts and the most common bottom frames.
"""

from __future__ import annotations

from .errors import FormatError, GostackError, ParseError
from .model import Goroutine, GoroutineState, Profile, StackFrame, UnrecognizedState
from .reader import read_profile, read_profile_bytes
from .summary import summarize

__all__ = [
    "FormatError",
    "GostackError",
    "Goroutine",
    "GoroutineState",
    "ParseError",
    "Profile",
    "StackFrame",
    "UnrecognizedState",
    "read_profile",
    "read_profile_bytes",
    "summarize",
]
