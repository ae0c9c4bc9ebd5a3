"""stens command-line interface.

Usage:
    python3 -m stens verify --schema schema.json --type Name --input data.bin
    python3 -m stens verify --schema schema.json --type Name --hex 02000102
    cat data.bin | python3 -m stens verify --schema schema.json --type Name
    python3 -m stens version

Exit status: 0 when the data is valid, 1 when it is not, 2 on a schema,
settings or I/O error.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from . import __version__
from ._config import Settings
from ._errors import StrictError
from ._logging import get_logger
from ._schema_json import type_system_from_json
from ._verify import verify_bytes

logger = get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stens",
        description="stens: verify strict-encoded data against a type schema",
    )
    sub = parser.add_subparsers(dest="command")

    # ── verify ──
    verify_p = sub.add_parser("verify", help="Verify data against a schema type")
    verify_p.add_argument("--schema", "-s", metavar="FILE", required=True,
                          help="JSON schema document")
    verify_p.add_argument("--type", "-t", metavar="NAME", required=True, dest="type_name",
                          help="Root type name in the schema")
    src = verify_p.add_mutually_exclusive_group()
    src.add_argument("--input", "-i", metavar="FILE",
                     help="Read data from FILE instead of stdin")
    src.add_argument("--hex", metavar="HEX",
                     help="Data given inline as hex (whitespace ignored)")
    verify_p.add_argument("--allow-trailing", action="store_true",
                          help="Accept bytes after the root value")

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _read_input(filepath: Optional[str]) -> bytes:
    """Read data bytes from a file or stdin."""
    if filepath:
        with open(filepath, "rb") as f:
            return f.read()
    if sys.stdin.isatty():
        print("stens: reading from stdin (Ctrl-D to end)...", file=sys.stderr)
    return sys.stdin.buffer.read()


def _read_data(args: argparse.Namespace) -> bytes:
    if args.hex is not None:
        try:
            return bytes.fromhex("".join(args.hex.split()))
        except ValueError:
            raise ValueError("--hex is not valid hexadecimal") from None
    return _read_input(args.input)


def _cmd_verify(args: argparse.Namespace, settings: Settings) -> int:
    with open(args.schema, "rb") as f:
        ts = type_system_from_json(f.read())
    if args.type_name not in ts:
        logger.warning("type %r is not defined in %s", args.type_name, args.schema)
    data = _read_data(args)

    ok = verify_bytes(args.type_name, ts, data,
                      allow_trailing=args.allow_trailing, settings=settings)
    logger.debug("verified %d bytes as %s: %s", len(data), args.type_name, ok)
    print("valid" if ok else "invalid")
    return 0 if ok else 1


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "version":
        print(f"stens {__version__}")
        return

    try:
        settings = Settings.from_env()
        get_logger("stens._verify").setLevel(settings.log_level.upper())
        if args.command == "verify":
            sys.exit(_cmd_verify(args, settings))
    except StrictError as e:
        print(f"stens: error [{e.code}]: {e}", file=sys.stderr)
        sys.exit(2)
    except (OSError, ValueError) as e:
        print(f"stens: error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
