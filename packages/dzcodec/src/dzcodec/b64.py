# packages/dzcodec/src/dzcodec/b64.py
# -----------------------------------------------------------------------------
# Compact integer form used by dict index files: an unsigned number written in
# base 64, most significant digit first. This is NOT RFC 4648 byte base64.

from __future__ import annotations
from typing import Tuple, Union

from .errors import EncodingError

__all__ = ["ALPHABET", "decode", "encode"]

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"

_BAD = 99
_MASK64 = (1 << 64) - 1
_INT64_MAX = (1 << 63) - 1


def _build_index() -> Tuple[int, ...]:
    table = [_BAD] * 256
    for value, ch in enumerate(ALPHABET):
        table[ord(ch)] = value
    return tuple(table)


# byte value -> digit value, 99 for anything outside the alphabet
_INDEX: Tuple[int, ...] = _build_index()


def decode(text: Union[str, bytes]) -> int:
    """
    Decode `text` into an integer.

    Digits are accumulated from the rightmost character into an unsigned
    64-bit value, which is finally reinterpreted as signed int64.

    Raises
    ------
    EncodingError
        On a character outside the alphabet, or when a digit would lose
        significant bits beyond 64.
    """
    raw = text.encode("utf-8") if isinstance(text, str) else bytes(text)
    result = 0
    offset = 0
    for i in range(len(raw) - 1, -1, -1):
        digit = _INDEX[raw[i]]
        if digit == _BAD:
            bad = raw[i:i + 1].decode("latin-1")
            raise EncodingError(f"illegal character in base64 value: {bad!r}")
        if ((digit << offset) & _MASK64) >> offset != digit:
            raise EncodingError(f"base64 value does not fit in 64 bits: {text!r}")
        result |= (digit << offset) & _MASK64
        offset += 6
    if result > _INT64_MAX:
        result -= 1 << 64
    return result


def encode(value: int) -> str:
    """Minimal base-64 form of a non-negative int64 (0 -> "A")."""
    n = int(value)
    if n < 0 or n > _INT64_MAX:
        raise EncodingError(f"value out of range [0..2^63-1]: {value}")
    if n == 0:
        return ALPHABET[0]
    out = []
    while n:
        out.append(ALPHABET[n & 63])
        n >>= 6
    return "".join(reversed(out))
