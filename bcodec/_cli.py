"""bcodec command-line interface.

Usage:
    python3 -m bcodec decode [--input FILE] [--max-depth N | --unlimited] [--strict]
    echo '{"a": [1, 2]}' | python3 -m bcodec encode [--sort-keys] [--output FILE]
    python3 -m bcodec version

`decode` prints the value as JSON; byte strings that aren't valid UTF-8
appear with \\udcXX escapes and survive a trip back through `encode`.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from . import (
    BencodeError,
    DecodeOptions,
    __version__,
    decode,
    encode,
    get_max_depth,
)
from ._json_adapter import json_to_value, value_to_json

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bcodec",
        description="bcodec: bencode encoder/decoder",
    )
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log debug messages to stderr")
    sub = parser.add_subparsers(dest="command")

    # ── decode ──
    dec_p = sub.add_parser("decode", help="Decode bencode to JSON")
    dec_p.add_argument("--input", "-i", metavar="FILE",
                       help="Read bencode from FILE instead of stdin")
    depth_g = dec_p.add_mutually_exclusive_group()
    depth_g.add_argument("--max-depth", type=int, metavar="N",
                         help="Maximum container nesting (default: {})".format(get_max_depth()))
    depth_g.add_argument("--unlimited", action="store_true",
                         help="Disable the nesting limit")
    dec_p.add_argument("--strict", action="store_true",
                       help="Reject non-canonical input (leading zeros, unsorted keys)")
    dec_p.add_argument("--indent", type=int, default=None, metavar="N",
                       help="Pretty-print JSON with N spaces")

    # ── encode ──
    enc_p = sub.add_parser("encode", help="Encode JSON to bencode")
    enc_p.add_argument("--input", "-i", metavar="FILE",
                       help="Read JSON from FILE instead of stdin")
    enc_p.add_argument("--output", "-o", metavar="FILE",
                       help="Write bencode to FILE instead of stdout")
    enc_p.add_argument("--sort-keys", action="store_true",
                       help="Emit dict keys in canonical byte order")

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _read_input(filepath: Optional[str]) -> bytes:
    """Read bytes from a file or stdin."""
    if filepath:
        with open(filepath, "rb") as f:
            return f.read()
    if sys.stdin.isatty():
        print("bcodec: reading from stdin (Ctrl-D to end)...", file=sys.stderr)
    return sys.stdin.buffer.read()


def _cmd_decode(args: argparse.Namespace) -> None:
    raw = _read_input(args.input)

    if args.unlimited:
        max_depth = None
    elif args.max_depth is not None:
        max_depth = args.max_depth
    else:
        max_depth = get_max_depth()
    options = DecodeOptions(max_depth=max_depth, strict=args.strict)
    logger.debug("decoding %d bytes with %s", len(raw), options)

    value = decode(raw, options)
    print(json.dumps(value_to_json(value), indent=args.indent))


def _cmd_encode(args: argparse.Namespace) -> None:
    raw = _read_input(args.input)
    value = json_to_value(json.loads(raw))
    out = encode(value, sort_keys=args.sort_keys)
    logger.debug("encoded %d bytes", len(out))

    if args.output:
        with open(args.output, "wb") as f:
            f.write(out)
    else:
        sys.stdout.buffer.write(out)
        sys.stdout.buffer.flush()


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "version":
        print(f"bcodec {__version__}")
        return

    try:
        if args.command == "decode":
            _cmd_decode(args)
        elif args.command == "encode":
            _cmd_encode(args)
    except BencodeError as e:
        print(f"bcodec: error [{e.code}]: {e}", file=sys.stderr)
        sys.exit(2)
    except json.JSONDecodeError as e:
        print(f"bcodec: JSON parse error: {e}", file=sys.stderr)
        sys.exit(2)
    except (OSError, ValueError) as e:
        print(f"bcodec: error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
