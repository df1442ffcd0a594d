from __future__ import annotations

import attrs

DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_TOP_N = 10
TRACE_PREVIEW_CHARS = 20
SCHEMA_VERSION = "0.1.0"


def _positive(_inst: object, attribute: attrs.Attribute, value: int) -> None:
    if value <= 0:
        raise ValueError(f"{attribute.name} must be positive, got {value}")


@attrs.define(frozen=True, slots=True)
class ReaderSettings:
    chunk_size: int = attrs.field(default=DEFAULT_CHUNK_SIZE, validator=_positive)
    trace_preview_chars: int = attrs.field(default=TRACE_PREVIEW_CHARS, validator=_positive)
