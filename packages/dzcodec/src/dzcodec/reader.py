# packages/dzcodec/src/dzcodec/reader.py
# -----------------------------------------------------------------------------
# Random access over a dictzip file: only the blocks covering the requested
# window are decompressed.

from __future__ import annotations
from pathlib import Path
from typing import BinaryIO, List, Tuple, Union
import logging
import os
import threading
import zlib

import numpy as np

from . import b64
from .bitstream.header import TRAILER_SIZE, DictzipHeader, parse_header, unpack_trailer
from .bitstream.io import read_exact
from .errors import FormatError, ShortReadError
from .index import BlockIndex

__all__ = ["Reader"]

log = logging.getLogger(__name__)


class Reader:
    """
    Random-access reader for one dictzip stream.

    Parameters
    ----------
    fp : BinaryIO
        Seekable binary stream. Parsing starts at offset 0.
    close_fd : bool, default=False
        If True the reader owns `fp` and closes it in `close()`.

    Notes
    -----
    - A single lock serialises seek + decompress + read, so one instance may be
      shared by several threads; parallel throughput needs one reader per thread.
    - Construction either succeeds or raises (FormatError / OSError); no
      half-initialised reader is returned.
    - `get(start, size)` windows may span several blocks: each block is
      inflated on its own with a fresh decompressor, then the pieces are
      concatenated.
    """

    def __init__(self, fp: BinaryIO, *, close_fd: bool = False) -> None:
        fp.seek(0)
        self.header: DictzipHeader = parse_header(fp)
        self.index = BlockIndex.from_header(self.header)
        self._fp: BinaryIO | None = fp
        self._close_fd = close_fd
        self._lock = threading.Lock()

    @classmethod
    def open(cls, path: Union[str, os.PathLike]) -> "Reader":
        """Open `path` and return a reader owning the file handle."""
        fp = open(Path(path), "rb")
        try:
            return cls(fp, close_fd=True)
        except BaseException:
            fp.close()
            raise

    # --- lifecycle ------------------------------------------------------------
    def close(self) -> None:
        with self._lock:
            fp, self._fp = self._fp, None
        if fp is not None and self._close_fd:
            fp.close()

    @property
    def closed(self) -> bool:
        return self._fp is None

    def __enter__(self) -> "Reader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _stream(self) -> BinaryIO:
        if self._fp is None:
            raise ValueError("I/O operation on closed reader")
        return self._fp

    # --- metadata -------------------------------------------------------------
    @property
    def blocksize(self) -> int:
        return self.header.blocksize

    @property
    def offsets(self) -> np.ndarray:
        return self.index.offsets

    def trailer(self) -> Tuple[int, int]:
        """(crc32, raw size mod 2^32) from the last 8 bytes of the stream."""
        with self._lock:
            fp = self._stream()
            fp.seek(-TRAILER_SIZE, os.SEEK_END)
            return unpack_trailer(read_exact(fp, TRAILER_SIZE))

    @property
    def size(self) -> int:
        """Raw (uncompressed) length as recorded by the trailer, mod 2^32."""
        return self.trailer()[1]

    # --- data -----------------------------------------------------------------
    def _inflate_block(self, fp: BinaryIO, i: int) -> bytes:
        if i >= len(self.index):
            raise ShortReadError(f"block {i} is past the last block ({len(self.index)} blocks)")
        off, clen = self.index.span(i)
        fp.seek(off)
        comp = read_exact(fp, clen)
        d = zlib.decompressobj(-zlib.MAX_WBITS)
        try:
            return d.decompress(comp) + d.flush()
        except zlib.error as e:
            raise FormatError(f"corrupt block {i} at offset {off}: {e}") from e

    def get(self, start: int, size: int) -> bytes:
        """Return raw bytes [start, start+size)."""
        start, size = int(start), int(size)
        if start < 0 or size < 0:
            raise ValueError(f"start and size must be >= 0, got start={start} size={size}")
        if size == 0:
            self._stream()
            return b""
        bs = self.blocksize
        first = start // bs
        last = (start + size - 1) // bs
        skip = start - first * bs
        with self._lock:
            fp = self._stream()
            if last >= len(self.index):
                raise ShortReadError(
                    f"read past end of data: window [{start}, {start + size}) needs block {last}, "
                    f"file has {len(self.index)}"
                )
            parts: List[bytes] = []
            for i in range(first, last + 1):
                data = self._inflate_block(fp, i)
                parts.append(data)
                if i < last and len(data) != bs:
                    raise FormatError(f"block {i} inflates to {len(data)} bytes, expected {bs}")
        log.debug("get start=%d size=%d -> blocks %d..%d", start, size, first, last)
        buf = b"".join(parts)
        if len(buf) < skip + size:
            raise ShortReadError(f"read past end of data: wanted {size} bytes at {start}")
        return buf[skip:skip + size]

    def get_b64(self, start: str, size: str) -> bytes:
        """`get` with start/size in the compact base-64 form used by dict indexes."""
        return self.get(b64.decode(start), b64.decode(size))

    def verify(self) -> None:
        """Inflate every block and check CRC-32 and size against the trailer."""
        crc_stored, isize = self.trailer()
        crc, total = 0, 0
        with self._lock:
            fp = self._stream()
            for i in range(len(self.index)):
                data = self._inflate_block(fp, i)
                crc = zlib.crc32(data, crc)
                total += len(data)
        if (crc & 0xFFFFFFFF) != crc_stored:
            raise FormatError(f"CRC mismatch: stored {crc_stored:08x}, computed {crc & 0xFFFFFFFF:08x}")
        if (total & 0xFFFFFFFF) != isize:
            raise FormatError(f"size mismatch: stored {isize}, computed {total}")
