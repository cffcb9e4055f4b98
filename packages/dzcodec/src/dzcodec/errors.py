# packages/dzcodec/src/dzcodec/errors.py
from __future__ import annotations

__all__ = ["FormatError", "EncodingError", "ShortReadError"]


class FormatError(ValueError):
    """Bad gzip envelope or dictzip metadata (magic, method, RA subfield, blocks)."""


class EncodingError(ValueError):
    """Illegal character or 64-bit overflow in the compact base-64 integer form."""


class ShortReadError(OSError):
    """The stream ended before an exact byte count could be delivered."""
