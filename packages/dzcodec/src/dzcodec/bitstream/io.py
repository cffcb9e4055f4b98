from __future__ import annotations
from typing import BinaryIO

from ..errors import ShortReadError


def read_exact(fp: BinaryIO, n: int) -> bytes:
    """Read exactly `n` bytes, retrying partial reads.

    Raises ShortReadError if the stream ends first (including when it ends
    before a single byte is delivered).
    """
    if n <= 0:
        return b""
    chunks = []
    got = 0
    while got < n:
        b = fp.read(n - got)
        if b is None:
            raise BlockingIOError("stream has no data available (non-blocking read)")
        if not b:
            raise ShortReadError(f"unexpected end of stream: wanted {n} bytes, got {got}")
        chunks.append(b)
        got += len(b)
    return b"".join(chunks)


def read_cstring(fp: BinaryIO) -> bytes:
    """Consume a zero-terminated byte string; returns it without the terminator."""
    out = bytearray()
    while True:
        c = read_exact(fp, 1)
        if c == b"\x00":
            return bytes(out)
        out += c
