"""
csvstream — streaming CSV reader CLI

Reads a CSV document from a file or standard input through the bounded
streaming reader, reads its header row, and either prints every record or
only checks the document's consistency.

Environment variables read (optionally from a ``.env`` file):
    CSV_COLUMN_SEPARATOR  Optional: override the default separator (",")
    CSV_QUEUE_CAPACITY    Optional: override the default backpressure threshold
    CSV_CHUNK_SIZE        Optional: override the default producer chunk size
    CSV_ENCODING          Optional: override the default file encoding

Commands:
    parse     Print one JSON object per record.
    validate  Read the whole document; report the row count or the first error.

Usage examples:
    csvstream parse reminders.csv --require-columns email,text,schedule
    cat reminders.csv | csvstream validate --column-separator ";"

Exit codes:
    0  Success
    1  Invalid document (or unreadable input)
    2  Configuration / argument error
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import IO

from dotenv import load_dotenv

from csvstream.configs.config import ReaderConfig
from csvstream.configs.exceptions import CsvStreamError, TokenizeError
from csvstream.parsing.tokenizer import CSVTokenizer
from csvstream.pipeline import iter_records, open_parser, validate

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        level=level,
        stream=sys.stderr,
    )


# ---------------------------------------------------------------------------
# Config: env vars (.env) + optional CLI overrides
# ---------------------------------------------------------------------------

def _build_config(args: argparse.Namespace) -> ReaderConfig:
    """
    Priority order for each setting:
      1. CLI flag (--column-separator, --queue-capacity, etc.)
      2. Environment variable (possibly loaded from .env)
      3. ReaderConfig default
    """
    kwargs: dict = {}

    def _int(flag_val, env_key: str) -> int | None:
        if flag_val is not None:
            return flag_val
        raw = os.environ.get(env_key)
        return int(raw) if raw else None

    def _str(flag_val, env_key: str) -> str | None:
        if flag_val is not None:
            return flag_val
        return os.environ.get(env_key) or None

    separator = _str(getattr(args, "column_separator", None), "CSV_COLUMN_SEPARATOR")
    capacity  = _int(getattr(args, "queue_capacity",   None), "CSV_QUEUE_CAPACITY")
    chunk     = _int(getattr(args, "chunk_size",       None), "CSV_CHUNK_SIZE")
    encoding  = _str(getattr(args, "encoding",         None), "CSV_ENCODING")

    if separator is not None: kwargs["column_separator"] = separator
    if capacity is not None:  kwargs["queue_capacity"]   = capacity
    if chunk is not None:     kwargs["chunk_size"]       = chunk
    if encoding:              kwargs["encoding"]         = encoding

    return ReaderConfig(**kwargs)


def _required_columns(args: argparse.Namespace) -> list[str]:
    raw = getattr(args, "require_columns", None) or ""
    return [name.strip() for name in raw.split(",") if name.strip()]


def _open_input(args: argparse.Namespace, config: ReaderConfig) -> tuple[IO[str], bool, str]:
    """Return ``(stream, close_stream, source_name)`` for the command's input."""
    if args.csv_file is None:
        return sys.stdin, False, "<stdin>"
    stream = open(args.csv_file, encoding=config.encoding, newline="")
    return stream, True, args.csv_file


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------

def _cmd_parse(args: argparse.Namespace, config: ReaderConfig) -> int:
    stream, close_stream, name = _open_input(args, config)
    with open_parser(stream, config, close_stream=close_stream) as parser:
        try:
            for record in iter_records(parser, _required_columns(args)):
                print(json.dumps(record, ensure_ascii=False))
        except CsvStreamError as e:
            print(f"✗ {name} — {e}", file=sys.stderr)
            return 1
    return 0


def _cmd_validate(args: argparse.Namespace, config: ReaderConfig) -> int:
    stream, close_stream, name = _open_input(args, config)
    result = validate(
        stream,
        config,
        required_columns=_required_columns(args),
        source_name=name,
        close_stream=close_stream,
    )
    if result.success:
        print(f"✓ {name} — valid ({result.rows_read} rows)")
        return 0
    print(f"✗ {name} — {result.error}", file=sys.stderr)
    return 1


# ---------------------------------------------------------------------------
# Argument parser (importable for tests)
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="csvstream",
        description="Streaming CSV reader",
        epilog=(
            "Settings may also come from CSV_* environment variables\n"
            "or a .env file in the working directory."
        ),
    )
    parser.add_argument("--verbose", "-v", action="store_true")

    sub = parser.add_subparsers(dest="command", required=True)

    def _source_args(p):
        p.add_argument("csv_file", nargs="?", default=None, metavar="csv-file")
        p.add_argument("--require-columns", default=None, dest="require_columns",
                       help="Comma-separated column names the header must contain")

    def _config_args(p):
        p.add_argument("--column-separator", default=None, dest="column_separator")
        p.add_argument("--queue-capacity",   type=int, default=None, dest="queue_capacity")
        p.add_argument("--chunk-size",       type=int, default=None, dest="chunk_size")
        p.add_argument("--encoding",         default=None)

    p_parse = sub.add_parser("parse", help="Print every record as a JSON line")
    _source_args(p_parse); _config_args(p_parse)

    p_val = sub.add_parser("validate", help="Check the document's consistency")
    _source_args(p_val); _config_args(p_val)

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        config = _build_config(args)
        CSVTokenizer(column_separator=config.column_separator)
        if config.queue_capacity < 1 or config.chunk_size < 1:
            raise ValueError("--queue-capacity and --chunk-size must be positive integers")
    except (TokenizeError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    handlers = {"parse": _cmd_parse, "validate": _cmd_validate}
    try:
        return handlers[args.command](args, config)
    except FileNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Reading %s failed: %s", args.csv_file or "<stdin>", e)
        print(f"✗ {args.csv_file or '<stdin>'} — {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
