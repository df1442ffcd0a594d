from __future__ import annotations

import collections
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

import attrs

from .config import DEFAULT_TOP_N
from .model import Goroutine, GoroutineState, Profile


@attrs.define(frozen=True, slots=True)
class StateTally:
    """Goroutines per state.

    `known` has every `GoroutineState` (zero counts included) in report
    order; `unknown` holds unrecognized state texts in first-seen order.
    """

    known: dict[GoroutineState, int]
    unknown: dict[str, int] = attrs.field(factory=dict)

    @property
    def total(self) -> int:
        return sum(self.known.values()) + sum(self.unknown.values())


@attrs.define(frozen=True, slots=True)
class ProfileSummary:
    created: datetime
    total_goroutines: int
    goroutines_with_stack: int
    states: StateTally
    top_stacks: list[tuple[str, int]]
    stack_counts: dict[str, int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "created": self.created.isoformat(),
            "total_goroutines": self.total_goroutines,
            "goroutines_with_stack": self.goroutines_with_stack,
            "states": {s.text: n for s, n in self.states.known.items()},
            "unknown_states": dict(self.states.unknown),
            "top_stacks": [{"frame": frame, "count": count} for frame, count in self.top_stacks],
            "stack_counts": dict(self.stack_counts),
        }


def count_states(goroutines: Iterable[Goroutine]) -> StateTally:
    known = {s: 0 for s in GoroutineState}
    unknown: collections.Counter[str] = collections.Counter()
    for g in goroutines:
        if isinstance(g.state, GoroutineState):
            known[g.state] += 1
        else:
            unknown[g.state.text] += 1
    return StateTally(known=known, unknown=dict(unknown))


def top_stacks(stack_counts: Mapping[str, int], n: int) -> list[tuple[str, int]]:
    """The `n` most common bottom frames, highest count first.

    Ties keep the mapping's order, which for a `Profile` is first appearance
    in the dump.
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    return sorted(stack_counts.items(), key=lambda kv: kv[1], reverse=True)[:n]


def summarize(profile: Profile, *, top_n: int = DEFAULT_TOP_N) -> ProfileSummary:
    return ProfileSummary(
        created=profile.created,
        total_goroutines=len(profile.goroutines),
        goroutines_with_stack=sum(profile.stack_counts.values()),
        states=count_states(profile.goroutines),
        top_stacks=top_stacks(profile.stack_counts, top_n),
        stack_counts=dict(profile.stack_counts),
    )
