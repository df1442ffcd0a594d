from __future__ import annotations

import gzip
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, cast

GZIP_MAGIC = b"\x1f\x8b"


def _peek_magic(stream: BinaryIO) -> bytes:
    if hasattr(stream, "peek"):
        return stream.peek(2)[:2]
    if stream.seekable():
        pos = stream.tell()
        magic = stream.read(2)
        stream.seek(pos)
        return magic
    return b""


def maybe_gunzip(stream: BinaryIO) -> BinaryIO:
    """Return a stream of the decompressed bytes if `stream` starts with the gzip magic, else `stream`."""
    if _peek_magic(stream) == GZIP_MAGIC:
        return cast(BinaryIO, gzip.GzipFile(fileobj=stream, mode="rb"))
    return stream


@contextmanager
def open_profile(path: str | Path) -> Iterator[BinaryIO]:
    """Open a dump file for reading; `-` means stdin. Gzip input is decompressed transparently."""
    if str(path) == "-":
        raw = sys.stdin.buffer
        owned = False
    else:
        raw = Path(path).open("rb")
        owned = True
    stream = maybe_gunzip(raw)
    try:
        yield stream
    finally:
        if stream is not raw:
            stream.close()
        if owned:
            raw.close()
