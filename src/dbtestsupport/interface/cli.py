"""
dbtestsupport CLI entry point.

Decodes one captured data-layer log message into literal SQL:

    dbtestsupport decode captured.log
    pbpaste | dbtestsupport decode --dialect sqlserver
"""

import argparse
import logging
import sys
from pathlib import Path

from dbtestsupport.domain.errors import DecodeError
from dbtestsupport.infrastructure.logging_config import setup_logging
from dbtestsupport.infrastructure.sql.decoder import SqlDecoder
from dbtestsupport.infrastructure.sql.dialects import DialectName

logger = logging.getLogger(__name__)

AUTO_DIALECT = "auto"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dbtestsupport",
        description="dbtestsupport - decode captured data-layer logs into literal SQL",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )
    parser.add_argument("--log-file", type=str, help="Write logs to file")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    parser_decode = subparsers.add_parser(
        "decode", help="Inline parameters into a captured command message"
    )
    parser_decode.add_argument(
        "file",
        nargs="?",
        type=Path,
        help="File holding one raw captured message (default: stdin)",
    )
    parser_decode.add_argument(
        "--dialect",
        choices=[AUTO_DIALECT] + [d.value for d in DialectName],
        default=AUTO_DIALECT,
        help="Literal conventions to use (default: detect from identifier quoting)",
    )
    return parser


def _read_message(path: Path | None) -> str:
    if path is None:
        return sys.stdin.read()
    return path.read_text(encoding="utf-8")


def run_decode(args: argparse.Namespace) -> int:
    try:
        message = _read_message(args.file)
    except OSError as e:
        print(f"Error: cannot read {args.file}: {e}", file=sys.stderr)
        return 1

    dialect = None if args.dialect == AUTO_DIALECT else args.dialect
    try:
        decoded = SqlDecoder(dialect).decode(message)
    except DecodeError as e:
        logger.debug("Decode failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for line in decoded:
        print(line)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the dbtestsupport CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        log_file=args.log_file,
    )

    if args.command == "decode":
        return run_decode(args)

    parser.print_help()
    return 2
