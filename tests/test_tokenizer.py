"""
CSV lexer: test_tokenizer.py

Construction:
  - Separator of any length other than 1 raises TokenizeError

read_token:
  - "a""b" lexes to raw content a"b
  - Hello" World raises TokenizeError (unescaped quote in raw content)
  - Unterminated quoted field raises TokenizeError
  - "" is a valid empty field
  - \\n, \\r and \\r\\n are each one row separator; \\r pushes its lookahead back
  - Separators and line breaks inside quotes are literal
  - Custom separators; the default separator is then plain content

read_row:
  - Empty input → CSV_END
  - "," → ["", ""] then CSV_END
  - "a,b,c\\n" → ["a", "b", "c"] then CSV_END
  - Multi-row document with CRLF and quoted cells
  - Trailing / leading / consecutive separators give empty cells
  - An empty line ends the document
"""

from __future__ import annotations

import pytest

from csvstream.configs.exceptions import TokenizeError
from csvstream.parsing.tokenizer import (
    COLUMN_SEPARATOR,
    END_OF_INPUT,
    ROW_SEPARATOR,
    CSVTokenizer,
    CsvEnd,
    Token,
    TokenKind,
)
from csvstream.readers.buffered import BufferedReader
from csvstream.readers.string_reader import StringReader


# ============================================================================
# Helpers
# ============================================================================

def buffered(text: str) -> BufferedReader:
    return BufferedReader(StringReader(text))


def tokens(text: str, separator: str = ",") -> list[Token]:
    tokenizer = CSVTokenizer(column_separator=separator)
    reader = buffered(text)
    result = []
    while True:
        token = tokenizer.read_token(reader)
        result.append(token)
        if token.kind is TokenKind.END:
            return result


def rows(text: str, separator: str = ",") -> list:
    """Every read_row result up to and including the first CSV_END."""
    tokenizer = CSVTokenizer(column_separator=separator)
    reader = buffered(text)
    result = []
    while True:
        row = tokenizer.read_row(reader)
        result.append(row)
        if row is CsvEnd.CSV_END:
            return result


# ============================================================================
# Construction
# ============================================================================

class TestConstruction:
    def test_default_separator_is_comma(self):
        assert CSVTokenizer().column_separator == ","

    @pytest.mark.parametrize("separator", ["", ";;", "\t\t"])
    def test_separator_must_be_single_character(self, separator):
        with pytest.raises(TokenizeError):
            CSVTokenizer(column_separator=separator)


# ============================================================================
# read_token
# ============================================================================

class TestReadToken:
    def test_escaped_quote_in_quoted_field(self):
        assert CSVTokenizer().read_token(buffered('"a""b"')) == Token.raw('a"b')

    def test_quote_inside_raw_content_raises(self):
        with pytest.raises(TokenizeError):
            CSVTokenizer().read_token(buffered('Hello" World'))

    def test_unterminated_quoted_field_raises(self):
        with pytest.raises(TokenizeError):
            CSVTokenizer().read_token(buffered('"abc'))

    def test_lone_escaped_quote_is_unterminated(self):
        with pytest.raises(TokenizeError):
            CSVTokenizer().read_token(buffered('"""'))

    def test_empty_quoted_field(self):
        assert tokens('""') == [Token.raw(""), END_OF_INPUT]

    def test_row_separators(self):
        assert tokens("a,b\r\nc\rd\n") == [
            Token.raw("a"), COLUMN_SEPARATOR, Token.raw("b"), ROW_SEPARATOR,
            Token.raw("c"), ROW_SEPARATOR,
            Token.raw("d"), ROW_SEPARATOR,
            END_OF_INPUT,
        ]

    def test_carriage_return_at_end(self):
        assert tokens("a\r") == [Token.raw("a"), ROW_SEPARATOR, END_OF_INPUT]

    def test_separators_inside_quotes_are_literal(self):
        assert tokens('"a,b\r\nc"') == [Token.raw("a,b\r\nc"), END_OF_INPUT]

    def test_quoted_field_followed_by_separator(self):
        assert tokens('"x",y') == [Token.raw("x"), COLUMN_SEPARATOR, Token.raw("y"), END_OF_INPUT]

    def test_custom_separator(self):
        assert tokens("a,b;c", separator=";") == [
            Token.raw("a,b"), COLUMN_SEPARATOR, Token.raw("c"), END_OF_INPUT,
        ]

    def test_end_repeats(self):
        tokenizer = CSVTokenizer()
        reader = buffered("")
        assert tokenizer.read_token(reader) == END_OF_INPUT
        assert tokenizer.read_token(reader) == END_OF_INPUT

    def test_read_quoted_requires_opening_quote(self):
        with pytest.raises(TokenizeError):
            CSVTokenizer.read_quoted(buffered("abc"))

    def test_read_quoted_consumes_opening_quote(self):
        assert CSVTokenizer.read_quoted(buffered('"abc"')) == "abc"


# ============================================================================
# read_row
# ============================================================================

class TestReadRow:
    def test_empty_input(self):
        assert rows("") == [CsvEnd.CSV_END]

    def test_lone_separator(self):
        assert rows(",") == [["", ""], CsvEnd.CSV_END]

    def test_single_row_with_newline(self):
        assert rows("a,b,c\n") == [["a", "b", "c"], CsvEnd.CSV_END]

    def test_multi_row_document(self):
        text = 'zzz,yyy,xxx\na,bb,ccc\r\n0,"1",""""'
        assert rows(text) == [
            ["zzz", "yyy", "xxx"],
            ["a", "bb", "ccc"],
            ["0", "1", '"'],
            CsvEnd.CSV_END,
        ]

    def test_trailing_separator(self):
        assert rows("a,\n") == [["a", ""], CsvEnd.CSV_END]

    def test_leading_separator(self):
        assert rows(",a") == [["", "a"], CsvEnd.CSV_END]

    def test_consecutive_separators(self):
        assert rows(",,") == [["", "", ""], CsvEnd.CSV_END]

    def test_empty_quoted_cells(self):
        assert rows('"",""') == [["", ""], CsvEnd.CSV_END]

    def test_empty_line_ends_document(self):
        tokenizer = CSVTokenizer()
        reader = buffered("a\n\nb\n")
        assert tokenizer.read_row(reader) == ["a"]
        assert tokenizer.read_row(reader) is CsvEnd.CSV_END
        assert tokenizer.read_row(reader) == ["b"]
        assert tokenizer.read_row(reader) is CsvEnd.CSV_END

    def test_tab_separated(self):
        assert rows("a\tb\n", separator="\t") == [["a", "b"], CsvEnd.CSV_END]

    def test_stray_quote_in_row_raises(self):
        with pytest.raises(TokenizeError):
            rows('a,b"c\n')
