from __future__ import annotations
import argparse, logging, sys
from pathlib import Path

from .common import setup_logging, add_logging_args
from ..api import atomic_write_stream
from dzcodec import Reader

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="dictzip - read a byte range from a .dz file")
    p.add_argument("file", help=".dz file")
    g = p.add_mutually_exclusive_group(required=True)
    g.add_argument("--start", type=int, help="Raw offset (with --size)")
    g.add_argument("--b64", nargs=2, metavar=("START", "SIZE"), help="Offset and size in dict index base64")
    p.add_argument("--size", type=int, default=None)
    p.add_argument("--out", default=None, help="Output file (default: stdout)")
    add_logging_args(p)
    args = p.parse_args(argv)
    if args.start is not None and args.size is None:
        p.error("--start requires --size")
    return args

def main(argv=None) -> int:
    args = parse_args(argv)
    # data may go to stdout: keep the log on stderr
    setup_logging(Path(args.log_file) if args.log_file else None, verbose=args.verbose, stream=sys.stderr)
    try:
        with Reader.open(args.file) as r:
            if args.b64:
                data = r.get_b64(*args.b64)
            else:
                data = r.get(args.start, args.size)
    except Exception as e:
        logging.exception("Extract failed %s: %s", args.file, e)
        return 1
    if args.out:
        with atomic_write_stream(args.out) as f:
            f.write(data)
        logging.info("→ %d bytes to %s", len(data), args.out)
    else:
        sys.stdout.buffer.write(data)
        sys.stdout.flush()
    return 0

if __name__ == "__main__":
    sys.exit(main())
