# packages/dzcodec/src/dzcodec/config.py
from __future__ import annotations
from dataclasses import dataclass
import os

__all__ = ["WriterConfig", "BLOCKSIZE", "DICTZIP_VERSION", "MAX_BLOCKS"]

#: Raw bytes per block. Leaves headroom so a stored (incompressible) block
#: plus its sync marker still fits a 16-bit length entry.
BLOCKSIZE: int = 58315

#: Only version understood in the RA subfield.
DICTZIP_VERSION: int = 1

#: XLEN = 10 + 2*count must fit in 16 bits.
MAX_BLOCKS: int = (0xFFFF - 10) // 2


@dataclass(frozen=True, slots=True)
class WriterConfig:
    """
    Configuration of the dictzip writer.

    Fields
    ------
    blocksize : int, default=58315
        Raw bytes per independently decodable block. Must be in [1..65535]
        since it is stored as LE16 in the RA subfield.
    level : int, default=-1
        zlib level: -1 default, 0 store, 1 best speed ... 9 best compression.
        Levels 1 and 9 are reflected in the gzip XFL byte (4 and 2).
    mtime : int | None, default=None
        Header modification time. None means "now" at write time.
    os_byte : int, default=255
        gzip OS byte (255 = unknown).

    Notes
    -----
    Frozen so the same config always yields the same bytes (mtime aside).
    Invalid values raise `ValueError`.
    """

    blocksize: int = BLOCKSIZE
    level: int = -1
    mtime: int | None = None
    os_byte: int = 255

    def __post_init__(self) -> None:
        if not (1 <= int(self.blocksize) <= 0xFFFF):
            raise ValueError("WriterConfig.blocksize must be in [1..65535]")
        if not (-1 <= int(self.level) <= 9):
            raise ValueError("WriterConfig.level must be in [-1..9]")
        if self.mtime is not None and not (0 <= int(self.mtime) <= 0xFFFFFFFF):
            raise ValueError("WriterConfig.mtime must fit in u32")
        if not (0 <= int(self.os_byte) <= 0xFF):
            raise ValueError("WriterConfig.os_byte must fit in u8")

    @staticmethod
    def from_env() -> "WriterConfig":
        """Build a config from DZ_BLOCKSIZE / DZ_LEVEL (unset -> defaults)."""
        return WriterConfig(
            blocksize=_int_env("DZ_BLOCKSIZE", BLOCKSIZE),
            level=_int_env("DZ_LEVEL", -1),
        )


def _int_env(name: str, default: int) -> int:
    v = os.getenv(name)
    if not v:
        return default
    try:
        return int(v)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {v!r}") from None
