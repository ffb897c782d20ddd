"""
Document pipeline for csvstream.

Wires the layers for a file or stream and provides the two entry points the
CLI invokes.

Layer order:
  1. ``StreamReader`` fed by a ``StreamPump`` thread (bounded queue)
  2. ``BufferedReader`` (one-character pushback)
  3. ``CSVTokenizer`` (configured separator)
  4. ``CSVParser`` (header lifecycle, column-count checks)

Record stream (``iter_records``):
  - Reads the header row unless one was already set.
  - Checks required columns before the first data row.
  - **Lazy** — only one row is in memory at a time.

Validate-only mode (``validate``):
  - Runs the whole document and records the first ``CsvStreamError``
    in a ``ParseResult`` instead of raising.
  - Always closes the parser, which stops the producer thread.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Iterable, Iterator

from csvstream.configs.config import ReaderConfig
from csvstream.configs.exceptions import CsvStreamError
from csvstream.parsing.parser import CSVParser, RowObject
from csvstream.parsing.tokenizer import CSVTokenizer
from csvstream.readers.buffered import BufferedReader
from csvstream.readers.stream_reader import StreamReader
from csvstream.utils.validation import validate_required_columns

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result object
# ---------------------------------------------------------------------------

@dataclass
class ParseResult:
    """
    Summary of a validate-only pass over one document.

    Attributes:
        source_name: File path or ``<stdin>``.
        header:      Header cells, empty if none was read.
        rows_read:   Number of valid data rows before the end or the error.
        error:       First error encountered, if any.
    """
    source_name: str
    header: list[str] = field(default_factory=list)
    rows_read: int = 0
    error: CsvStreamError | None = None

    @property
    def success(self) -> bool:
        return self.error is None


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------

def open_parser(
    stream: IO[str],
    config: ReaderConfig,
    close_stream: bool = True,
) -> CSVParser:
    """
    Build a parser reading ``stream`` through the streaming reader.

    Args:
        stream:       Text-mode file-like object.
        config:       Reader configuration.
        close_stream: Close ``stream`` once the producer stops. Pass
                      ``False`` for ``sys.stdin``.

    Raises:
        TokenizeError: If ``config.column_separator`` is not one character.
    """
    tokenizer = CSVTokenizer(column_separator=config.column_separator)
    reader = StreamReader.from_stream(
        stream,
        capacity=config.queue_capacity,
        chunk_size=config.chunk_size,
        close_stream=close_stream,
    )
    return CSVParser(tokenizer, BufferedReader(reader))


def open_file(path: Path | str, config: ReaderConfig) -> CSVParser:
    """
    Open ``path`` as text and build a parser over it.

    Raises:
        OSError: If the file cannot be opened.
        TokenizeError: If ``config.column_separator`` is not one character.
    """
    # Validate the separator before a file handle and producer thread exist.
    CSVTokenizer(column_separator=config.column_separator)
    stream = open(Path(path), encoding=config.encoding, newline="")
    return open_parser(stream, config)


# ---------------------------------------------------------------------------
# Record stream
# ---------------------------------------------------------------------------

def iter_records(
    parser: CSVParser,
    required_columns: Iterable[str] = (),
) -> Iterator[RowObject]:
    """
    Stream keyed records from ``parser``.

    Args:
        parser:           Parser positioned at the header row, or with a
                          header already set.
        required_columns: Column names that must appear in the header.

    Yields:
        One ``{column name: cell}`` dict per data row.

    Raises:
        ParserError: No header row, or ``MissingColumnsError``.
        InvalidColumnsError: A row's cell count differs from the header's.
        TokenizeError: Malformed CSV.
    """
    if not parser.has_header():
        parser.read_header()
    validate_required_columns(parser.get_header(), required_columns)
    yield from parser.records()


# ---------------------------------------------------------------------------
# Validate-only mode
# ---------------------------------------------------------------------------

def validate(
    stream: IO[str],
    config: ReaderConfig,
    required_columns: Iterable[str] = (),
    source_name: str = "<stdin>",
    close_stream: bool = True,
) -> ParseResult:
    """
    Parse a whole document, collecting errors instead of raising them.

    Args:
        stream:           Text-mode file-like object.
        config:           Reader configuration.
        required_columns: Column names that must appear in the header.
        source_name:      Name used in the result and log records.
        close_stream:     Close ``stream`` once the producer stops.

    Returns:
        ``ParseResult`` describing the outcome.
    """
    result = ParseResult(source_name=source_name)
    with open_parser(stream, config, close_stream=close_stream) as parser:
        try:
            for _ in iter_records(parser, required_columns):
                result.rows_read += 1
        except CsvStreamError as e:
            logger.warning("Invalid document %s: %s", source_name, e)
            result.error = e
        if parser.has_header():
            result.header = parser.get_header()

    if result.success:
        logger.info(
            "Validated %s: %d columns, %d rows",
            source_name, len(result.header), result.rows_read,
        )
    return result
