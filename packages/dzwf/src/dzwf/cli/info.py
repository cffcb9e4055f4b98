from __future__ import annotations
import argparse, logging, sys
from pathlib import Path

from .common import setup_logging, add_logging_args
from dzcodec import Reader

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="dictzip - show block table of .dz files")
    p.add_argument("files", nargs="+", help=".dz files")
    p.add_argument("--verify", action="store_true", help="Inflate all blocks and check CRC/size")
    add_logging_args(p)
    return p.parse_args(argv)

def describe(r: Reader) -> str:
    crc, isize = r.trailer()
    h = r.header
    return (f"blocksize={h.blocksize} blocks={h.block_count} "
            f"data=[{int(r.offsets[0])}, {r.index.end}) size={isize} crc32={crc:08x}")

def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(Path(args.log_file) if args.log_file else None, verbose=args.verbose)
    ok = 0
    for p in args.files:
        try:
            with Reader.open(p) as r:
                print(f"{p}: {describe(r)}")
                if args.verify:
                    r.verify()
                    logging.info("→ OK %s", p)
            ok += 1
        except Exception as e:
            logging.exception("Info failed %s: %s", p, e)
    return 0 if ok == len(args.files) else 1

if __name__ == "__main__":
    sys.exit(main())
