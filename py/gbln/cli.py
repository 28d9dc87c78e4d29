"""GBLN command-line interface.

Usage:
    gbln check data.io.gbln.xz config.gbln
    gbln fmt config.gbln [--mini] [--indent 4]
    gbln pack config.gbln -o config.io.gbln.xz [--level 9] [--no-compress]
    gbln unpack config.io.gbln.xz [-o config.gbln]
    gbln to-json config.gbln
    echo '{"a": 1}' | gbln from-json -
    gbln version
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import GblnConfig
from .container import decode_container, pack_text, read_container, write_container
from .convert import dumps, to_python
from .emit import serialize
from .errors import ErrorKind, GblnError, error_for
from .parse import parse


logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gbln",
        description="GBLN: bounded-type, diff-friendly data notation",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug detail to stderr")
    sub = parser.add_subparsers(dest="command")

    # ── check ──
    check_p = sub.add_parser("check", help="Parse files and report diagnostics")
    check_p.add_argument("files", nargs="+", metavar="FILE")

    # ── fmt ──
    fmt_p = sub.add_parser("fmt", help="Re-emit a document")
    fmt_p.add_argument("file", metavar="FILE")
    fmt_p.add_argument("--mini", action="store_true", help="MINI output instead of pretty")
    fmt_p.add_argument("--indent", type=int, default=2, help="Spaces per level (pretty only)")

    # ── pack ──
    pack_p = sub.add_parser("pack", help="Write a container from a source file")
    pack_p.add_argument("file", metavar="FILE")
    pack_p.add_argument("--output", "-o", required=True, metavar="OUT")
    pack_p.add_argument("--level", type=int, default=6, help="XZ level 0-9")
    pack_p.add_argument("--no-compress", action="store_true", help="Store plain text")
    pack_p.add_argument("--pretty", action="store_true", help="Pretty text instead of MINI")
    pack_p.add_argument("--keep-layout", action="store_true",
                        help="Store the source text as written instead of re-serialising")
    pack_p.add_argument("--keep-comments", action="store_true",
                        help="Keep :| comments (with --keep-layout)")

    # ── unpack ──
    unpack_p = sub.add_parser("unpack", help="Read a container and print pretty text")
    unpack_p.add_argument("file", metavar="FILE")
    unpack_p.add_argument("--output", "-o", metavar="OUT")
    unpack_p.add_argument("--indent", type=int, default=2)

    # ── to-json / from-json ──
    tojson_p = sub.add_parser("to-json", help="Convert a GBLN file to JSON")
    tojson_p.add_argument("file", metavar="FILE")
    fromjson_p = sub.add_parser("from-json", help="Convert a JSON file to GBLN")
    fromjson_p.add_argument("file", metavar="FILE")
    fromjson_p.add_argument("--pretty", action="store_true")

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _read_bytes(filepath: str) -> bytes:
    """Read bytes from a file, or stdin for '-'."""
    if filepath == "-":
        return sys.stdin.buffer.read()
    try:
        with open(filepath, "rb") as f:
            return f.read()
    except OSError as e:
        raise error_for(ErrorKind.IO, f"failed to read file '{filepath}': {e.strerror or e}")


def _write_output(data: bytes, filepath: Optional[str]) -> None:
    if filepath is None or filepath == "-":
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
        return
    try:
        with open(filepath, "wb") as f:
            f.write(data)
    except OSError as e:
        raise error_for(ErrorKind.IO, f"failed to write file '{filepath}': {e.strerror or e}")
    logger.debug("wrote %d bytes to %s", len(data), filepath)


def _cmd_check(args: argparse.Namespace) -> int:
    failed = 0
    for path in args.files:
        try:
            read_container(_read_bytes(path))
        except GblnError as e:
            failed += 1
            print(f"{path}: {e}")
        else:
            print(f"{path}: ok")
    return 1 if failed else 0


def _cmd_fmt(args: argparse.Namespace) -> int:
    v = read_container(_read_bytes(args.file))
    print(serialize(v, mini=args.mini, indent=args.indent))
    return 0


def _cmd_pack(args: argparse.Namespace) -> int:
    config = GblnConfig(
        mini_mode=not args.pretty,
        compress=not args.no_compress,
        compression_level=args.level,
        strip_comments=not args.keep_comments,
    )
    text = decode_container(_read_bytes(args.file))
    if args.keep_layout:
        data = pack_text(text, config)
    else:
        data = write_container(parse(text), config)
    _write_output(data, args.output)
    return 0


def _cmd_unpack(args: argparse.Namespace) -> int:
    v = read_container(_read_bytes(args.file))
    text = serialize(v, mini=False, indent=args.indent) + "\n"
    _write_output(text.encode("utf-8"), args.output)
    return 0


def _cmd_to_json(args: argparse.Namespace) -> int:
    v = read_container(_read_bytes(args.file))
    print(json.dumps(to_python(v), indent=2, ensure_ascii=False))
    return 0


def _cmd_from_json(args: argparse.Namespace) -> int:
    raw = _read_bytes(args.file)
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise error_for(ErrorKind.IO, f"invalid JSON: {e}")
    print(dumps(data, mini=not args.pretty))
    return 0


_COMMANDS = {
    "check": _cmd_check,
    "fmt": _cmd_fmt,
    "pack": _cmd_pack,
    "unpack": _cmd_unpack,
    "to-json": _cmd_to_json,
    "from-json": _cmd_from_json,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if args.command == "version":
        print(f"gbln {__version__}")
        return 0

    handler = _COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 2

    try:
        return handler(args)
    except GblnError as e:
        print(f"gbln: error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
