# packages/dzcodec/src/dzcodec/bitstream/__init__.py
from __future__ import annotations

# Exact reads over any binary file-like object
from .io import read_exact, read_cstring

# gzip envelope + RA subfield
from .header import (
    DictzipHeader, parse_header, pack_header,
    pack_trailer, unpack_trailer, TRAILER_SIZE,
    FTEXT, FHCRC, FEXTRA, FNAME, FCOMMENT,
)

__all__ = [
    "read_exact", "read_cstring",
    "DictzipHeader", "parse_header", "pack_header",
    "pack_trailer", "unpack_trailer", "TRAILER_SIZE",
    "FTEXT", "FHCRC", "FEXTRA", "FNAME", "FCOMMENT",
]
