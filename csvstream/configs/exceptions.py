"""
Custom exceptions for the csvstream reader/parser stack.

Hierarchy:
    CsvStreamError
    ├── ReaderError                 Character source failures.
    │   ├── StreamReaderError       Failures of the chunk-fed stream reader.
    │   │   ├── ChunkTypeError      Producer delivered a non-text chunk; reader is poisoned.
    │   │   └── ConcurrentReadError A second read was issued while one is in flight.
    │   └── BufferedReaderError     Pushback buffer misuse.
    │       └── UnableToPushEndError  End pushed back before the source really ended.
    ├── TokenizeError               Bad separator config, stray quote, unterminated quoted field.
    └── ParserError                 Header lifecycle misuse.
        ├── InvalidColumnsError     Row cell count differs from header cell count.
        └── MissingColumnsError     Header lacks columns a caller requires.
"""

from __future__ import annotations


class CsvStreamError(Exception):
    """Base class for all csvstream errors."""


# ── readers ──────────────────────────────────────────────────────────────────

class ReaderError(CsvStreamError):
    """Base class for character source errors."""


class StreamReaderError(ReaderError):
    """Base class for ``StreamReader`` errors."""


class ChunkTypeError(StreamReaderError):
    """
    Raised when the producer feeds a chunk that is not a ``str``.

    Fatal: the reader that received the chunk re-raises this error on every
    subsequent read.

    Args:
        chunk_type: Name of the offending chunk's type (e.g. ``"bytes"``).
    """

    def __init__(self, chunk_type: str) -> None:
        super().__init__(f"Expected str as the chunk type, received {chunk_type}")
        self.chunk_type = chunk_type


class ConcurrentReadError(StreamReaderError):
    """Raised when ``read`` is called while another read is still pending."""

    def __init__(self) -> None:
        super().__init__("Another read operation is not yet completed")


class BufferedReaderError(ReaderError):
    """Base class for ``BufferedReader`` errors."""


class UnableToPushEndError(BufferedReaderError):
    """Raised when ``End`` is pushed back before the source has actually ended."""

    def __init__(self) -> None:
        super().__init__("Can not push End at this state")


# ── lexer ────────────────────────────────────────────────────────────────────

class TokenizeError(CsvStreamError):
    """Raised for lexical errors in the CSV document or the tokenizer config."""


# ── parser ───────────────────────────────────────────────────────────────────

class ParserError(CsvStreamError):
    """Raised when the header lifecycle is misused (missing, duplicated, absent)."""


class InvalidColumnsError(ParserError):
    """
    Raised when a row has a different number of cells than the header.

    Args:
        message: Human-readable description.
        row_number: 1-based row number (header included) where the mismatch was found.
        expected: Number of cells expected (from header).
        got: Number of cells actually found in the row.
    """

    def __init__(
        self,
        message: str = "Number of columns in the header and the row just read are not equal",
        row_number: int | None = None,
        expected: int | None = None,
        got: int | None = None,
    ) -> None:
        super().__init__(message)
        self.row_number = row_number
        self.expected = expected
        self.got = got

    def __str__(self) -> str:
        base = super().__str__()
        parts = []
        if self.row_number is not None:
            parts.append(f"row={self.row_number}")
        if self.expected is not None:
            parts.append(f"expected={self.expected}")
        if self.got is not None:
            parts.append(f"got={self.got}")
        if parts:
            return f"{base} | {' '.join(parts)}"
        return base


class MissingColumnsError(ParserError):
    """
    Raised when the header does not contain every required column.

    Args:
        missing: Required column names absent from the header, in request order.
    """

    def __init__(self, missing: list[str]) -> None:
        super().__init__("Header is missing required columns")
        self.missing = list(missing)

    def __str__(self) -> str:
        return f"{super().__str__()} | missing={','.join(self.missing)}"
