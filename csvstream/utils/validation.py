"""
Validation helpers for CSV structure integrity.

These functions are called by ``CSVParser`` and the pipeline to catch
structural problems as rows stream past.

All functions raise the appropriate exception on failure rather than returning
a boolean — callers are expected to let exceptions propagate to whoever
decides what to do with an invalid document.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from csvstream.configs.exceptions import InvalidColumnsError, MissingColumnsError


def validate_row_alignment(
    row: Sequence[str],
    expected_field_count: int,
    row_number: int | None = None,
) -> None:
    """
    Assert that a CSV row has exactly the expected number of cells.

    Args:
        row:                  The parsed row as a list of strings.
        expected_field_count: Number of cells in the header row.
        row_number:           1-based row number (header included) for error reporting.

    Raises:
        InvalidColumnsError: If ``len(row) != expected_field_count``.
    """
    actual = len(row)
    if actual != expected_field_count:
        raise InvalidColumnsError(
            row_number=row_number,
            expected=expected_field_count,
            got=actual,
        )


def validate_required_columns(
    header: Sequence[str],
    required: Iterable[str],
) -> None:
    """
    Assert that every required column name is present in the header.

    Args:
        header:   Header cells.
        required: Column names the caller needs; order does not matter.

    Raises:
        MissingColumnsError: Listing the absent names in request order.
    """
    present = set(header)
    missing = [name for name in required if name not in present]
    if missing:
        raise MissingColumnsError(missing)
