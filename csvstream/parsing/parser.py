"""
Row/header parser.

Assembles tokenizer rows into header-checked rows and keyed records.

Header lifecycle:
  - unset → ``set_header`` / ``read_header`` → set, immutable afterwards.
  - Reading data rows requires a header; every row must match its cell count.

Usage::

    parser = CSVParser(CSVTokenizer(), BufferedReader(StringReader(text)))
    parser.read_header()
    if not parser.has_header_columns("email", "text"):
        ...
    for record in parser.records():
        record["email"]
"""

from __future__ import annotations

import logging
from typing import Iterator, Sequence

from csvstream.configs.exceptions import ParserError
from csvstream.parsing.tokenizer import CSVTokenizer, CsvEnd, Row
from csvstream.readers.buffered import BufferedReader
from csvstream.utils.validation import validate_row_alignment

logger = logging.getLogger(__name__)

RowObject = dict[str, str]


class CSVParser:
    """
    Header-aware CSV parser over an owned tokenizer and pushback buffer.

    Args:
        tokenizer: Lexer configured with the column separator.
        source:    Buffered reader over the document. The parser owns it and
                   closes it.
    """

    def __init__(self, tokenizer: CSVTokenizer, source: BufferedReader) -> None:
        self._tokenizer = tokenizer
        self._source = source
        self._header: tuple[str, ...] | None = None
        self.row_number = 0

    # ── header ───────────────────────────────────────────────────────────

    def get_header(self) -> Row:
        """
        Return a copy of the header cells.

        Raises:
            ParserError: If no header was set or read yet.
        """
        if self._header is None:
            raise ParserError("No header was defined/read yet")
        return list(self._header)

    def has_header(self) -> bool:
        return self._header is not None

    def has_header_columns(self, *columns: str) -> bool:
        """
        Return True if every name in ``columns`` is one of the header cells.

        Raises:
            ParserError: If no header was set or read yet.
        """
        header = self.get_header()
        return all(column in header for column in columns)

    def set_header(self, header: Sequence[str]) -> "CSVParser":
        """
        Install ``header`` as the column names. Use this when the document
        carries no header row.

        Returns:
            This parser, for chaining.

        Raises:
            ParserError: If a header already exists, ``header`` is a bare
                string, or ``header`` is empty.
        """
        if self._header is not None:
            raise ParserError("A header was already defined/read")
        if isinstance(header, str):
            raise ParserError("Header must be a sequence of column names, not a string")
        if not header:
            raise ParserError("Header must contain at least one column")
        self._header = tuple(header)
        logger.debug("Header set: %s", self._header)
        return self

    def read_header(self) -> None:
        """
        Read the next row of the document and install it as the header.

        Raises:
            ParserError: If a header already exists, or the document ends
                before a header row.
            TokenizeError: On malformed CSV.
        """
        if self._header is not None:
            raise ParserError("A header was already defined/read")
        row = self._tokenizer.read_row(self._source)
        if row is CsvEnd.CSV_END:
            raise ParserError("No header found before end of the CSV document")
        self.row_number += 1
        self._header = tuple(row)
        logger.debug("Header read: %s", self._header)

    # ── rows ─────────────────────────────────────────────────────────────

    def read_row(self) -> Row | None:
        """
        Read the next data row.

        Returns:
            The row's cells, or ``None`` at the end of the document.

        Raises:
            ParserError: If no header was set or read yet.
            InvalidColumnsError: If the row's cell count differs from the header's.
            TokenizeError: On malformed CSV.
        """
        header = self.get_header()
        row = self._tokenizer.read_row(self._source)
        if row is CsvEnd.CSV_END:
            return None
        self.row_number += 1
        validate_row_alignment(row, len(header), row_number=self.row_number)
        return row

    def read_row_object(self) -> RowObject | None:
        """
        Like ``read_row``, but pairs header names with the cells.

        Returns:
            ``{column name: cell}`` in header order, or ``None`` at the end
            of the document.
        """
        row = self.read_row()
        if row is None:
            return None
        return dict(zip(self._header, row))

    def rows(self) -> Iterator[Row]:
        """Yield ``read_row`` results until the end of the document."""
        while (row := self.read_row()) is not None:
            yield row

    def records(self) -> Iterator[RowObject]:
        """Yield ``read_row_object`` results until the end of the document."""
        while (record := self.read_row_object()) is not None:
            yield record

    # ── resources ────────────────────────────────────────────────────────

    def close(self) -> None:
        """Close the underlying reader."""
        self._source.close()

    def __enter__(self) -> "CSVParser":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
        return None
