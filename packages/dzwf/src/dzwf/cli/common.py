from __future__ import annotations
import logging, sys
from pathlib import Path
from typing import Optional, TextIO

def setup_logging(log_file: Optional[Path], verbose: bool = True, stream: Optional[TextIO] = None) -> None:
    log_fmt = "[%(asctime)s] %(levelname)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.StreamHandler(stream or sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=level, format=log_fmt, datefmt=datefmt, handlers=handlers, force=True)

def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def add_logging_args(p) -> None:
    p.add_argument("--log-file", default=None)
    p.add_argument("--verbose", action="store_true")
