from __future__ import annotations
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator
import os


@contextmanager
def atomic_write_stream(path: Path | str) -> Iterator[BinaryIO]:
    """Yield a binary file at `<path>.tmp`; fsync + rename onto `path` on success.

    The temporary file is removed if the body raises.
    """
    path = Path(path)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(tmp, "wb") as f:
            yield f
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def dz_name(src: Path | str) -> str:
    return Path(src).name + ".dz"
