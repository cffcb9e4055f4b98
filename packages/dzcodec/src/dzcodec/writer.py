# packages/dzcodec/src/dzcodec/writer.py
# -----------------------------------------------------------------------------
# Writer: split the input into fixed-size blocks, deflate each one with a fresh
# compressor (no back-references across blocks), then emit
#   header (RA table) | blocks | final empty deflate block | CRC32 | ISIZE

from __future__ import annotations
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional, Tuple, Union
import io
import logging
import os
import time
import zlib

from .bitstream.header import (
    XFL_BEST, XFL_FAST, DictzipHeader, pack_header, pack_trailer,
)
from .config import MAX_BLOCKS, WriterConfig
from .errors import FormatError

__all__ = ["write", "compress_blocks", "xfl_for_level"]

log = logging.getLogger(__name__)

Dest = Union[str, os.PathLike, BinaryIO]


def xfl_for_level(level: int) -> int:
    """gzip XFL byte: 2 for best compression, 4 for best speed, else 0."""
    if level == zlib.Z_BEST_COMPRESSION:
        return XFL_BEST
    if level == zlib.Z_BEST_SPEED:
        return XFL_FAST
    return 0


def _chunks(source: BinaryIO, blocksize: int) -> Iterator[bytes]:
    """Yield full `blocksize` chunks, then a final short one (never empty)."""
    while True:
        buf = bytearray()
        while len(buf) < blocksize:
            b = source.read(blocksize - len(buf))
            if b is None:
                raise BlockingIOError("source has no data available (non-blocking read)")
            if not b:
                break
            buf += b
        if buf:
            yield bytes(buf)
        if len(buf) < blocksize:
            return


def _new_compressor(level: int):
    return zlib.compressobj(level, zlib.DEFLATED, -zlib.MAX_WBITS)


def compress_blocks(source: BinaryIO, cfg: WriterConfig) -> Tuple[bytes, List[int], int, int]:
    """
    Compress `source` block by block.

    Returns
    -------
    (body, block_lengths, crc32, isize)
        `body` holds every block followed by the stream terminator, which is
        not counted in `block_lengths`.
    """
    out = io.BytesIO()
    lengths: List[int] = []
    crc = 0
    isize = 0
    for chunk in _chunks(source, cfg.blocksize):
        crc = zlib.crc32(chunk, crc)
        isize += len(chunk)
        before = out.tell()
        comp = _new_compressor(cfg.level)
        out.write(comp.compress(chunk))
        out.write(comp.flush(zlib.Z_SYNC_FLUSH))
        clen = out.tell() - before
        if clen > 0xFFFF:
            raise FormatError(f"block {len(lengths)} compresses to {clen} bytes (> 65535); lower blocksize")
        lengths.append(clen)
        if len(lengths) > MAX_BLOCKS:
            raise FormatError(f"input needs more than {MAX_BLOCKS} blocks of {cfg.blocksize} bytes")
        log.debug("block %d: %d -> %d bytes", len(lengths) - 1, len(chunk), clen)
    # final (BFINAL) empty block so plain gunzip stops cleanly
    out.write(_new_compressor(cfg.level).flush(zlib.Z_FINISH))
    return out.getvalue(), lengths, crc & 0xFFFFFFFF, isize


def write(
    source: BinaryIO,
    dest: Dest,
    level: Optional[int] = None,
    cfg: Optional[WriterConfig] = None,
) -> DictzipHeader:
    """
    Write `source` as a dictzip file.

    Parameters
    ----------
    source : BinaryIO
        Readable binary stream, consumed to EOF.
    dest : path or BinaryIO
        A path is created/truncated and closed; a file object is written at
        its current position and left open.
    level : int | None
        zlib level; overrides `cfg.level` when given.
    cfg : WriterConfig | None
        Blocksize, level, mtime, OS byte. Defaults to `WriterConfig()`.

    Returns
    -------
    DictzipHeader describing what was written.

    On error nothing is cleaned up: a path destination may be left partial.
    """
    cfg = cfg or WriterConfig()
    if level is not None and level != cfg.level:
        cfg = WriterConfig(blocksize=cfg.blocksize, level=level, mtime=cfg.mtime, os_byte=cfg.os_byte)

    body, lengths, crc, isize = compress_blocks(source, cfg)
    mtime = int(time.time()) if cfg.mtime is None else int(cfg.mtime)
    xfl = xfl_for_level(cfg.level)
    head = pack_header(cfg.blocksize, lengths, mtime=mtime, xfl=xfl, os_byte=cfg.os_byte)
    tail = pack_trailer(crc, isize)

    if isinstance(dest, (str, os.PathLike)):
        with open(Path(dest), "wb") as f:
            f.write(head)
            f.write(body)
            f.write(tail)
    else:
        dest.write(head)
        dest.write(body)
        dest.write(tail)
    log.debug("dictzip written: %d raw bytes, %d blocks, %d compressed bytes",
              isize, len(lengths), len(head) + len(body) + len(tail))

    return DictzipHeader(
        blocksize=cfg.blocksize,
        block_lengths=tuple(lengths),
        payload_start=len(head),
        mtime=mtime & 0xFFFFFFFF,
        xfl=xfl,
        os=cfg.os_byte,
    )
