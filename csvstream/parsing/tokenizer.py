"""
CSV lexer.

Turns a ``BufferedReader`` into a sequence of tokens and folds tokens into
rows.

Token kinds:
  - ``RAW_CONTENT``       cell text, quoted or not (the only kind with a value)
  - ``COLUMN_SEPARATOR``  the configured single-character separator
  - ``ROW_SEPARATOR``     ``\\n``, ``\\r`` or ``\\r\\n``
  - ``END``               the underlying reader is exhausted

Quoting rules:
  - A field starting with ``"`` is quoted; ``""`` inside it is one literal
    quote, and separators / line breaks inside it are literal content.
  - A quote anywhere inside an unquoted field is an error.
  - ``""`` on its own is a valid, empty field.

Row folding (``read_row``):
  - ``,``        → ``["", ""]``
  - ``a,``       → ``["a", ""]``
  - empty line   → ``CsvEnd.CSV_END`` (the document ends there)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from csvstream.configs.config import DEFAULT_COLUMN_SEPARATOR
from csvstream.configs.exceptions import TokenizeError
from csvstream.readers.base import End
from csvstream.readers.buffered import BufferedReader

Row = list[str]

QUOTE = '"'


class TokenKind(Enum):
    RAW_CONTENT = auto()
    COLUMN_SEPARATOR = auto()
    ROW_SEPARATOR = auto()
    END = auto()


@dataclass(frozen=True)
class Token:
    """A single CSV token. ``value`` is only meaningful for ``RAW_CONTENT``."""

    kind: TokenKind
    value: str = ""

    @classmethod
    def raw(cls, value: str) -> "Token":
        return cls(TokenKind.RAW_CONTENT, value)


COLUMN_SEPARATOR = Token(TokenKind.COLUMN_SEPARATOR)
ROW_SEPARATOR = Token(TokenKind.ROW_SEPARATOR)
END_OF_INPUT = Token(TokenKind.END)


class CsvEnd(Enum):
    """End of a CSV document, as opposed to a row with cells."""

    CSV_END = "CSV_END"

    def __repr__(self) -> str:
        return "<CsvEnd>"


class CSVTokenizer:
    """
    Stateless CSV lexer; all state lives in the reader passed to each call.

    Args:
        column_separator: Single character separating cells.

    Raises:
        TokenizeError: If ``column_separator`` is not exactly one character.
    """

    def __init__(self, column_separator: str = DEFAULT_COLUMN_SEPARATOR) -> None:
        if len(column_separator) != 1:
            raise TokenizeError(
                f"Column separator's length must be 1, got {column_separator!r}"
            )
        self.column_separator = column_separator

    def read_row(self, reader: BufferedReader) -> Row | CsvEnd:
        """
        Read tokens up to the next row separator and return the row's cells.

        Returns:
            The cells of the row (at least one, possibly empty), or
            ``CsvEnd.CSV_END`` if the row separator or end of input came
            before any cell.

        Raises:
            TokenizeError: On a stray or unterminated quote.
        """
        cells: Row = []
        # Previous token was a separator: a terminator right after it closes an empty cell.
        was_separator = False

        while True:
            token = self.read_token(reader)
            if token.kind in (TokenKind.ROW_SEPARATOR, TokenKind.END):
                if was_separator:
                    cells.append("")
                elif not cells:
                    return CsvEnd.CSV_END
                break
            if token.kind is TokenKind.COLUMN_SEPARATOR:
                if not cells or was_separator:
                    cells.append("")
                was_separator = True
            else:
                cells.append(token.value)
                was_separator = False

        return cells

    def read_token(self, reader: BufferedReader) -> Token:
        """
        Read one token. Neighbouring tokens do not affect the result; only
        the lookahead character that terminated it is pushed back.

        Raises:
            TokenizeError: On a quote inside unquoted content, or an
                unterminated quoted field.
        """
        char = reader.read()
        if char == QUOTE:
            return Token.raw(self.read_quoted(reader, skip_opening_quote=True))
        if char == self.column_separator:
            return COLUMN_SEPARATOR
        if char == "\r":
            char = reader.read()
            if char != "\n":
                reader.push(char)
            return ROW_SEPARATOR
        if char == "\n":
            return ROW_SEPARATOR
        if char is End.END:
            return END_OF_INPUT

        content = [char]
        while True:
            char = reader.read()
            if char is End.END or char in (self.column_separator, "\r", "\n"):
                reader.push(char)
                break
            if char == QUOTE:
                raise TokenizeError(
                    "Quotation marks must be wrapped and escaped by double quotation marks"
                )
            content.append(char)
        return Token.raw("".join(content))

    @staticmethod
    def read_quoted(reader: BufferedReader, skip_opening_quote: bool = False) -> str:
        """
        Read a quoted field and return its unescaped content.

        Args:
            reader: Reader positioned at (or just after) the opening quote.
            skip_opening_quote: The opening quote was already consumed.

        Raises:
            TokenizeError: If the opening quote is missing, or input ends
                before the closing quote.
        """
        if not skip_opening_quote:
            char = reader.read()
            if char != QUOTE:
                raise TokenizeError('Expected quotation character (")')

        content: list[str] = []
        while True:
            char = reader.read()
            if char == QUOTE:
                char = reader.read()
                if char == QUOTE:
                    content.append(QUOTE)
                    continue
                reader.push(char)
                break
            if char is End.END:
                raise TokenizeError("No ending found for quoted string before the end")
            content.append(char)
        return "".join(content)
