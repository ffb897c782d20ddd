"""
In-memory reader implementing ``AbstractReader``.
"""

from __future__ import annotations

from csvstream.readers.base import AbstractReader, End


class StringReader(AbstractReader):
    """
    Deterministic cursor over a fixed string.

    Args:
        source: The text to read character by character.
    """

    def __init__(self, source: str) -> None:
        self._source = source
        self._offset = 0

    def read(self) -> str | End:
        if self._offset >= len(self._source):
            return End.END
        char = self._source[self._offset]
        self._offset += 1
        return char

    def close(self) -> None:
        """Nothing to release."""
