from __future__ import annotations
import gzip
import io
import struct
import zlib

import numpy as np
import pytest
from dzcodec import BLOCKSIZE, FormatError, WriterConfig, parse_header, write
from dzcodec.writer import compress_blocks, xfl_for_level


def _payload(n: int, seed: int = 0) -> bytes:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=n, dtype=np.uint8).tobytes()


def test_write_150k_scenario(tmp_path):
    raw = _payload(150_000, seed=1)
    out = tmp_path / "data.dz"
    h = write(io.BytesIO(raw), out, level=6)
    assert BLOCKSIZE == 58315
    assert h.block_count == 3  # ceil(150000 / 58315)

    buf = out.read_bytes()
    parsed = parse_header(io.BytesIO(buf))
    assert parsed.blocksize == 58315
    assert parsed.block_lengths == h.block_lengths
    assert parsed.payload_start == h.payload_start
    assert all(0 < n <= 0xFFFF for n in parsed.block_lengths)

    crc, isize = struct.unpack("<II", buf[-8:])
    assert isize == 150_000 % 2**32
    assert crc == zlib.crc32(raw) & 0xFFFFFFFF


def test_output_is_plain_gzip_compatible(tmp_path):
    raw = b"the quick brown fox\n" * 20_000
    out = tmp_path / "fox.dz"
    write(io.BytesIO(raw), out, cfg=WriterConfig(blocksize=4096))
    assert gzip.decompress(out.read_bytes()) == raw


def test_blocks_are_independent_deflate_streams():
    raw = b"abcdefgh" * 5000
    cfg = WriterConfig(blocksize=1000)
    body, lengths, crc, isize = compress_blocks(io.BytesIO(raw), cfg)
    assert isize == len(raw) and len(lengths) == 40
    pos = 0
    for i, n in enumerate(lengths):
        d = zlib.decompressobj(-zlib.MAX_WBITS)
        assert d.decompress(body[pos:pos + n]) == raw[i * 1000:(i + 1) * 1000]
        pos += n
    # terminator: one empty final block after the counted blocks
    assert body[pos:] == b"\x03\x00"


def test_short_final_chunk_and_trickling_source():
    class Trickle(io.RawIOBase):
        def __init__(self, data):
            self._b = io.BytesIO(data)

        def readable(self):
            return True

        def read(self, n=-1):
            return self._b.read(min(n, 333) if n > 0 else n)

    raw = _payload(2500, seed=3)
    _, lengths, _, isize = compress_blocks(Trickle(raw), WriterConfig(blocksize=1000))
    assert len(lengths) == 3
    assert isize == 2500


def test_empty_input(tmp_path):
    out = tmp_path / "empty.dz"
    h = write(io.BytesIO(b""), out)
    assert h.block_count == 0
    buf = out.read_bytes()
    assert parse_header(io.BytesIO(buf)).block_lengths == ()
    assert buf[-8:] == b"\x00" * 8
    assert gzip.decompress(buf) == b""


@pytest.mark.parametrize("level,xfl", [(9, 2), (1, 4), (6, 0), (-1, 0), (0, 0)])
def test_xfl_from_level(tmp_path, level, xfl):
    assert xfl_for_level(level) == xfl
    out = tmp_path / f"l{level}.dz"
    write(io.BytesIO(b"xyz" * 100), out, level=level)
    assert out.read_bytes()[8] == xfl


def test_header_fields_and_file_object_destination():
    dest = io.BytesIO()
    h = write(io.BytesIO(b"hello"), dest, cfg=WriterConfig(mtime=1_600_000_000))
    buf = dest.getvalue()
    assert not dest.closed
    assert buf[:4] == b"\x1f\x8b\x08\x04"
    assert struct.unpack("<I", buf[4:8])[0] == 1_600_000_000 == h.mtime
    assert buf[9] == 0xFF


def test_incompressible_block_too_large_for_u16():
    with pytest.raises(FormatError):
        compress_blocks(io.BytesIO(_payload(0xFFFF, seed=7)), WriterConfig(blocksize=0xFFFF, level=0))


def test_source_error_propagates(tmp_path):
    class Broken(io.RawIOBase):
        def readable(self):
            return True

        def read(self, n=-1):
            raise OSError("disk gone")

    with pytest.raises(OSError, match="disk gone"):
        write(Broken(), tmp_path / "x.dz")


def test_writer_config_validation(monkeypatch):
    with pytest.raises(ValueError):
        WriterConfig(blocksize=0)
    with pytest.raises(ValueError):
        WriterConfig(blocksize=70_000)
    with pytest.raises(ValueError):
        WriterConfig(level=10)
    monkeypatch.setenv("DZ_BLOCKSIZE", "1024")
    monkeypatch.setenv("DZ_LEVEL", "9")
    cfg = WriterConfig.from_env()
    assert (cfg.blocksize, cfg.level) == (1024, 9)
    monkeypatch.setenv("DZ_LEVEL", "fast")
    with pytest.raises(ValueError):
        WriterConfig.from_env()


def test_non_blocking_source_is_not_treated_as_eof(tmp_path):
    class Stalled(io.RawIOBase):
        def __init__(self):
            self._calls = 0

        def readable(self):
            return True

        def read(self, n=-1):
            self._calls += 1
            return b"x" * 10 if self._calls == 1 else None

    with pytest.raises(BlockingIOError):
        compress_blocks(Stalled(), WriterConfig(blocksize=100))
