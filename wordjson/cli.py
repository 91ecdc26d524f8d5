"""
Command line driver: parse files and echo them back as JSON.

    wordjson FILE [FILE ...]

Each file is read one character at a time, encoded, then rendered from
the encoded buffer.
"""

import argparse
import logging
import sys
from typing import IO, List, Optional

from .errors import ParseError, format_char
from .handler import StreamSource
from .parser import DEPTH_LIMIT_DEFAULT, StreamParser
from .reader import dump_words, render

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="wordjson",
        description="Parse JSON files into the word encoding and print them back",
    )
    ap.add_argument("files", nargs="+", metavar="FILE", help="JSON file to process")
    ap.add_argument("--binary", action="store_true", help="dump the encoded words before the text")
    ap.add_argument("--echo", action="store_true", help="echo characters read to stderr")
    ap.add_argument("--max-depth", type=int, default=DEPTH_LIMIT_DEFAULT)
    ap.add_argument("--lenient-keys", action="store_true", help="accept non-string object keys")
    ap.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return ap


def process(path: str, parser: StreamParser, out: IO[str], binary: bool = False,
            echo: Optional[IO[str]] = None) -> bool:
    """Parse one file and print it; return True on success."""
    out.write(f"\nProcessing file {path}:\n")
    with open(path, "rb") as f:
        try:
            result = parser.parse(StreamSource(f, echo=echo))
        except ParseError as exc:
            out.write(f"Error #{int(exc.code)} (last char = {format_char(exc.last)}).\n")
            logger.debug("%s: %s", path, exc)
            return False

    if binary:
        out.write("Binary dump:\n")
        dump_words(result.buffer, out)
        out.write("\n")
    render(result.buffer, out)
    out.write("\n")
    return True


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    parser = StreamParser(max_depth=args.max_depth, string_keys=not args.lenient_keys)
    echo = sys.stderr if args.echo else None
    ok = True
    for path in args.files:
        try:
            ok = process(path, parser, sys.stdout, binary=args.binary, echo=echo) and ok
        except OSError as exc:
            print(f"{path}: {exc.strerror or exc}", file=sys.stderr)
            ok = False
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
