# packages/dzcodec/src/dzcodec/bitstream/header.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import BinaryIO, Optional, Sequence, Tuple
import logging
import struct

import numpy as np

from ..config import DICTZIP_VERSION, MAX_BLOCKS
from ..errors import FormatError
from .io import read_cstring, read_exact

__all__ = [
    "GZIP_MAGIC", "DEFLATE_METHOD",
    "FTEXT", "FHCRC", "FEXTRA", "FNAME", "FCOMMENT",
    "XFL_BEST", "XFL_FAST", "OS_UNKNOWN",
    "DictzipHeader", "parse_header", "pack_header",
    "pack_trailer", "unpack_trailer", "TRAILER_SIZE",
]

log = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"
DEFLATE_METHOD = 8

FTEXT, FHCRC, FEXTRA, FNAME, FCOMMENT = 1, 2, 4, 8, 16

XFL_BEST = 2
XFL_FAST = 4
OS_UNKNOWN = 255

RA_ID = b"RA"
TRAILER_SIZE = 8

# Layout (little-endian, RFC 1952 + dictzip RA subfield)
# -------------------------------------------------------
# [0:2]   1F 8B            magic
# [2]     08               method (deflate)
# [3]     FLG              FEXTRA | FNAME | FCOMMENT | FHCRC
# [4:8]   u32 MTIME
# [8]     XFL, [9] OS
# FEXTRA: u16 XLEN, then records SI1 SI2 u16 LEN payload[LEN]
#         RA payload = u16 ver=1 | u16 blocksize | u16 count | count*u16 clen
# FNAME, FCOMMENT: zero-terminated ; FHCRC: 2 bytes (skipped, not checked)
_FIXED = struct.Struct("<2sBBIBB")
_SUB = struct.Struct("<2sH")
_RA_HEAD = struct.Struct("<HHH")


@dataclass(frozen=True)
class DictzipHeader:
    """Decoded gzip header + dictzip block table.

    `payload_start` is the byte position right after the whole header, i.e.
    where the first compressed block begins.
    """
    blocksize: int
    block_lengths: Tuple[int, ...]
    payload_start: int
    flags: int = FEXTRA
    mtime: int = 0
    xfl: int = 0
    os: int = OS_UNKNOWN
    filename: Optional[bytes] = None
    comment: Optional[bytes] = None
    extra: Tuple[Tuple[bytes, bytes], ...] = field(default=(), repr=False)

    @property
    def block_count(self) -> int:
        return len(self.block_lengths)


def _split_extra(xbuf: bytes) -> Tuple[Tuple[bytes, bytes], ...]:
    """Split the FEXTRA area into (SI1SI2, payload) records."""
    out = []
    q = 0
    while q < len(xbuf):
        if q + _SUB.size > len(xbuf):
            raise FormatError("extra field: truncated subfield header")
        sid, ln = _SUB.unpack_from(xbuf, q)
        q += _SUB.size
        if q + ln > len(xbuf):
            raise FormatError(f"extra field: subfield {sid!r} overruns XLEN")
        out.append((sid, xbuf[q:q + ln]))
        q += ln
    return tuple(out)


def _decode_ra(meta: Optional[bytes]) -> Tuple[int, Tuple[int, ...]]:
    if meta is None or len(meta) < _RA_HEAD.size:
        raise FormatError("missing dictzip metadata")
    version, blocksize, count = _RA_HEAD.unpack_from(meta, 0)
    if version != DICTZIP_VERSION:
        raise FormatError(f"unknown dictzip version: {version}")
    if blocksize == 0:
        raise FormatError("dictzip blocksize must be > 0")
    need = _RA_HEAD.size + 2 * count
    if len(meta) < need:
        raise FormatError(f"dictzip metadata truncated: {count} blocks need {need} bytes, have {len(meta)}")
    if count == 0:
        return int(blocksize), ()
    lengths = np.frombuffer(meta, dtype="<u2", count=count, offset=_RA_HEAD.size)
    return int(blocksize), tuple(int(x) for x in lengths)


def parse_header(fp: BinaryIO) -> DictzipHeader:
    """
    Parse the gzip header of `fp` (positioned at offset 0) and extract the
    dictzip block table.

    Raises FormatError for a non-dictzip header, ShortReadError if the
    stream ends inside the header.
    """
    h = read_exact(fp, _FIXED.size)
    p = len(h)
    magic, method, flg, mtime, xfl, os_ = _FIXED.unpack(h)
    if magic != GZIP_MAGIC:
        raise FormatError(f"invalid header: {h[0]:02X} {h[1]:02X}")
    if method != DEFLATE_METHOD:
        raise FormatError(f"unknown compression method: {method}")

    extra: Tuple[Tuple[bytes, bytes], ...] = ()
    meta: Optional[bytes] = None
    if flg & FEXTRA:
        (xlen,) = struct.unpack("<H", read_exact(fp, 2))
        xbuf = read_exact(fp, xlen)
        p += 2 + xlen
        extra = _split_extra(xbuf)
        for sid, payload in extra:
            if sid == RA_ID:
                meta = payload

    filename = comment = None
    if flg & FNAME:
        filename = read_cstring(fp)
        p += len(filename) + 1
    if flg & FCOMMENT:
        comment = read_cstring(fp)
        p += len(comment) + 1
    if flg & FHCRC:
        read_exact(fp, 2)
        p += 2

    blocksize, lengths = _decode_ra(meta)
    log.debug("dictzip header: blocksize=%d blocks=%d payload_start=%d", blocksize, len(lengths), p)
    return DictzipHeader(
        blocksize=blocksize,
        block_lengths=lengths,
        payload_start=p,
        flags=flg,
        mtime=mtime,
        xfl=xfl,
        os=os_,
        filename=filename,
        comment=comment,
        extra=extra,
    )


def pack_header(
    blocksize: int,
    block_lengths: Sequence[int],
    *,
    mtime: int = 0,
    xfl: int = 0,
    os_byte: int = OS_UNKNOWN,
) -> bytes:
    """Pack the 10-byte gzip header + FEXTRA with a single RA subfield."""
    count = len(block_lengths)
    if count > MAX_BLOCKS:
        raise FormatError(f"too many blocks for one dictzip member: {count} > {MAX_BLOCKS}")
    if not (0 < blocksize <= 0xFFFF):
        raise FormatError(f"blocksize does not fit u16: {blocksize}")
    lengths = np.asarray(block_lengths, dtype=np.int64)
    if lengths.size and (lengths.min() < 0 or lengths.max() > 0xFFFF):
        raise FormatError("compressed block length does not fit u16")
    ra = _RA_HEAD.pack(DICTZIP_VERSION, blocksize, count) + lengths.astype("<u2").tobytes()
    fixed = _FIXED.pack(GZIP_MAGIC, DEFLATE_METHOD, FEXTRA, mtime & 0xFFFFFFFF, xfl, os_byte)
    return fixed + struct.pack("<H", _SUB.size + len(ra)) + _SUB.pack(RA_ID, len(ra)) + ra


def pack_trailer(crc: int, isize: int) -> bytes:
    """CRC-32 then raw size mod 2^32, both LE32."""
    return struct.pack("<II", crc & 0xFFFFFFFF, isize & 0xFFFFFFFF)


def unpack_trailer(b: bytes) -> Tuple[int, int]:
    if len(b) != TRAILER_SIZE:
        raise FormatError(f"trailer must be {TRAILER_SIZE} bytes, got {len(b)}")
    crc, isize = struct.unpack("<II", b)
    return crc, isize
