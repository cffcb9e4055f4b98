from __future__ import annotations

"""dzwf - file workflows around dzcodec (atomic outputs, command-line tools)."""

from .api import atomic_write_stream, dz_name

__all__ = ["atomic_write_stream", "dz_name"]
