from __future__ import annotations
import argparse, logging, sys
from pathlib import Path

from .common import setup_logging, ensure_dir, add_logging_args
from ..api import atomic_write_stream, dz_name
from dzcodec import WriterConfig, write

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="dictzip - compress files into random-access .dz")
    p.add_argument("inputs", nargs="+", help="Files to compress")
    p.add_argument("--out", default=None, help="Output directory (default: next to input)")
    p.add_argument("--level", type=int, default=None, help="zlib level -1..9 (default: DZ_LEVEL or -1)")
    p.add_argument("--blocksize", type=int, default=None, help="Raw bytes per block (default: DZ_BLOCKSIZE or 58315)")
    add_logging_args(p)
    return p.parse_args(argv)

def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(Path(args.log_file) if args.log_file else None, verbose=args.verbose)

    env = WriterConfig.from_env()
    cfg = WriterConfig(
        blocksize=args.blocksize if args.blocksize is not None else env.blocksize,
        level=args.level if args.level is not None else env.level,
    )
    out_dir = Path(args.out) if args.out else None
    if out_dir:
        ensure_dir(out_dir)

    ok = 0
    for i, src in enumerate(args.inputs, 1):
        src = Path(src)
        dst = (out_dir or src.parent) / dz_name(src)
        try:
            logging.info("[%d/%d] compress: %s", i, len(args.inputs), src)
            with open(src, "rb") as f, atomic_write_stream(dst) as out:
                h = write(f, out, cfg=cfg)
            logging.info("→ %s (%d blocks of %d)", dst, h.block_count, h.blocksize)
            ok += 1
        except Exception as e:
            logging.exception("Compress failed %s: %s", src, e)
    return 0 if ok == len(args.inputs) else 1

if __name__ == "__main__":
    sys.exit(main())
