# packages/dzcodec/src/dzcodec/__init__.py
from __future__ import annotations

"""dzcodec - dictzip (random-access gzip) reader/writer.

    import dzcodec as dz

    with open("words.txt", "rb") as src:
        dz.write(src, "words.txt.dz", level=9)

    with dz.Reader.open("words.txt.dz") as r:
        r.get(1000, 64)
        r.get_b64("Po", "BA")
"""

__version__ = "1.0.0"

from .b64 import decode as b64_decode, encode as b64_encode
from .bitstream import DictzipHeader, parse_header, pack_header
from .config import BLOCKSIZE, DICTZIP_VERSION, MAX_BLOCKS, WriterConfig
from .errors import EncodingError, FormatError, ShortReadError
from .index import BlockIndex, build_offsets
from .reader import Reader
from .writer import write

__all__ = [
    "__version__",
    "Reader", "write",
    "WriterConfig", "BLOCKSIZE", "DICTZIP_VERSION", "MAX_BLOCKS",
    "DictzipHeader", "parse_header", "pack_header",
    "BlockIndex", "build_offsets",
    "b64_decode", "b64_encode",
    "FormatError", "EncodingError", "ShortReadError",
]
