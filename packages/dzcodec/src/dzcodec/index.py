# packages/dzcodec/src/dzcodec/index.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from .bitstream.header import DictzipHeader

__all__ = ["BlockIndex", "build_offsets"]


def build_offsets(block_lengths: Sequence[int], payload_start: int) -> np.ndarray:
    """offsets[0] = payload_start ; offsets[i+1] = offsets[i] + block_lengths[i]."""
    out = np.empty(len(block_lengths) + 1, dtype=np.int64)
    out[0] = int(payload_start)
    if len(block_lengths):
        np.cumsum(np.asarray(block_lengths, dtype=np.int64), out=out[1:])
        out[1:] += int(payload_start)
    return out


@dataclass(frozen=True, eq=False)
class BlockIndex:
    """Byte offsets of every compressed block in the underlying stream."""
    blocksize: int
    offsets: np.ndarray

    @staticmethod
    def from_header(h: DictzipHeader) -> "BlockIndex":
        return BlockIndex(h.blocksize, build_offsets(h.block_lengths, h.payload_start))

    def __len__(self) -> int:
        return len(self.offsets) - 1

    def block_of(self, pos: int) -> int:
        """Block number holding raw byte `pos`."""
        return int(pos) // self.blocksize

    def span(self, i: int) -> Tuple[int, int]:
        """(offset, compressed length) of block `i`."""
        lo = int(self.offsets[i])
        return lo, int(self.offsets[i + 1]) - lo

    @property
    def end(self) -> int:
        """First byte after the last block."""
        return int(self.offsets[-1])
