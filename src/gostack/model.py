from __future__ import annotations

import enum
import re
from collections.abc import Mapping
from datetime import datetime
from types import MappingProxyType
from typing import Any, Union

import attrs


class GoroutineState(enum.Enum):
    """Scheduler states the Go runtime prints in a goroutine header.

    Member order is the order states are reported in summaries.
    """

    RUNNING = "running"
    RUNNABLE = "runnable"
    CHAN_RECEIVE = "chan receive"
    CHAN_SEND = "chan send"
    SELECT = "select"
    SLEEP = "sleep"
    SYSCALL = "syscall"
    IO_WAIT = "IO wait"
    FINALIZER_WAIT = "finalizer wait"
    SEMACQUIRE = "semacquire"

    @property
    def text(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: str) -> "State":
        """Return the matching member, or an `UnrecognizedState` keeping the text verbatim."""
        try:
            return cls(text)
        except ValueError:
            return UnrecognizedState(text)


@attrs.define(frozen=True, slots=True)
class UnrecognizedState:
    text: str

    def __str__(self) -> str:
        return self.text


State = Union[GoroutineState, UnrecognizedState]


_LOCATION_RE = re.compile(r"^(?P<file>.+):(?P<line>\d+)(?: \+0x[0-9a-fA-F]+)?$")
_CREATED_BY_RE = re.compile(r"^created by (?P<func>\S+?)(?: in goroutine \d+)?$")


def _split_args(args: str) -> list[str]:
    """Split a frame's argument list on top-level commas (Go prints `{...}` groups for register args)."""
    out: list[str] = []
    depth = 0
    start = 0
    for i, ch in enumerate(args):
        if ch in "({":
            depth += 1
        elif ch in ")}":
            depth -= 1
        elif ch == "," and depth == 0:
            out.append(args[start:i].strip())
            start = i + 1
    tail = args[start:].strip()
    if tail:
        out.append(tail)
    return out


def _split_call(line1: str) -> tuple[str, list[str]] | None:
    """Return (qualified function name, arguments) for `pkg.Func(args)`."""
    m = _CREATED_BY_RE.match(line1)
    if m:
        return m.group("func"), []
    if not line1.endswith(")"):
        return None
    depth = 0
    for i in range(len(line1) - 1, -1, -1):
        ch = line1[i]
        if ch == ")":
            depth += 1
        elif ch == "(":
            depth -= 1
            if depth == 0:
                name = line1[:i]
                if not name:
                    return None
                return name, _split_args(line1[i + 1 : -1])
    return None


def _split_qualified(name: str) -> tuple[str | None, str]:
    slash = name.rfind("/")
    dot = name.find(".", slash + 1)
    if dot <= 0:
        return None, name
    return name[:dot], name[dot + 1 :]


@attrs.define(frozen=True, slots=True)
class StackFrame:
    """One call site: the raw function line and the trimmed location line.

    The detail fields are derived best-effort; frames that do not look like
    `pkg.Func(args)` / `/path/file.go:NN +0xOFF` keep them unset.
    """

    line1: str
    line2: str
    package: str | None = None
    method: str | None = None
    parameters: tuple[str, ...] = ()
    source_file: str | None = None
    line_number: int | None = None

    @classmethod
    def from_lines(cls, line1: str, line2: str) -> "StackFrame":
        package: str | None = None
        method: str | None = None
        parameters: tuple[str, ...] = ()
        call = _split_call(line1)
        if call is not None:
            name, args = call
            package, method = _split_qualified(name)
            parameters = tuple(args)

        source_file: str | None = None
        line_number: int | None = None
        m = _LOCATION_RE.match(line2)
        if m:
            source_file = m.group("file")
            line_number = int(m.group("line"))

        return cls(
            line1=line1,
            line2=line2,
            package=package,
            method=method,
            parameters=parameters,
            source_file=source_file,
            line_number=line_number,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "line1": self.line1,
            "line2": self.line2,
            "package": self.package,
            "method": self.method,
            "parameters": list(self.parameters),
            "source_file": self.source_file,
            "line_number": self.line_number,
        }


@attrs.define(frozen=True, slots=True)
class Goroutine:
    id: int
    state: State
    blocked: int = 0
    stack: tuple[StackFrame, ...] = attrs.field(default=(), converter=tuple)

    @property
    def bottom_frame(self) -> StackFrame | None:
        """Deepest reported frame (the last one listed), or None for an empty stack."""
        if not self.stack:
            return None
        return self.stack[-1]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "state": self.state.text,
            "blocked_minutes": self.blocked,
            "stack": [f.to_dict() for f in self.stack],
        }


def _readonly(counts: Mapping[str, int]) -> Mapping[str, int]:
    return MappingProxyType(dict(counts))


@attrs.define(frozen=True, slots=True)
class Profile:
    """A parsed goroutine dump.

    `stack_counts` maps a bottom frame's location line to the number of
    goroutines whose stack ends there. Goroutines with no frames are not
    counted.
    """

    created: datetime
    goroutines: tuple[Goroutine, ...] = attrs.field(default=(), converter=tuple)
    stack_counts: Mapping[str, int] = attrs.field(factory=dict, converter=_readonly)

    def to_dict(self) -> dict[str, Any]:
        return {
            "created": self.created.isoformat(),
            "goroutines": [g.to_dict() for g in self.goroutines],
            "stack_counts": dict(self.stack_counts),
        }
