from __future__ import annotations
from contextlib import contextmanager
from typing import Iterator


def wipe(buf: bytearray) -> None:
    # Overwrite in place; bytes objects are immutable and cannot be wiped.
    buf[:] = bytes(len(buf))


@contextmanager
def scrubbed(buf: bytearray) -> Iterator[bytearray]:
    """Yield ``buf`` and zero it on every exit path."""
    try:
        yield buf
    finally:
        wipe(buf)
