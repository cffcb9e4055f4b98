import numpy as np
from dzcodec.bitstream import DictzipHeader
from dzcodec.index import BlockIndex, build_offsets


def test_offsets_cumulative_from_payload_start():
    off = build_offsets([100, 0, 250, 7], 40)
    assert off.tolist() == [40, 140, 140, 390, 397]
    assert np.all(np.diff(off) >= 0)


def test_offsets_empty_table():
    assert build_offsets([], 28).tolist() == [28]


def test_block_index_from_header():
    h = DictzipHeader(blocksize=1000, block_lengths=(300, 310, 120), payload_start=34)
    idx = BlockIndex.from_header(h)
    assert len(idx) == 3
    assert idx.offsets[0] == h.payload_start
    assert idx.span(1) == (334, 310)
    assert idx.end == 34 + 300 + 310 + 120
    assert idx.block_of(0) == 0
    assert idx.block_of(999) == 0
    assert idx.block_of(1000) == 1
    assert idx.block_of(2500) == 2


def test_offsets_no_u16_overflow():
    off = build_offsets([0xFFFF] * 40_000, 0)
    assert off[-1] == 0xFFFF * 40_000
