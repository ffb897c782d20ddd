"""
Pushback buffer implementing ``AbstractReader``.

Wraps exactly one reader and lets the caller return the character it read
most recently — or replace it with another one — so that it is read again
by the next ``read``. The tokenizer relies on this for its one-character
lookahead.
"""

from __future__ import annotations

from csvstream.configs.exceptions import UnableToPushEndError
from csvstream.readers.base import AbstractReader, End


class BufferedReader(AbstractReader):
    """
    One-unit pushback buffer over an owned reader.

    At most one pushed-back character is held. Once the wrapped reader has
    returned ``End.END`` it is never consulted again.

    Args:
        source: Reader to wrap. The buffer owns it and closes it.
    """

    def __init__(self, source: AbstractReader) -> None:
        self._source = source
        self._pending: str | None = None
        self._ended = False

    def read(self) -> str | End:
        """
        Return the pushed-back character if there is one, otherwise the
        next character of the wrapped reader, or ``End.END``.
        """
        if self._pending is not None:
            char = self._pending
            self._pending = None
            return char
        if self._ended:
            return End.END
        result = self._source.read()
        if result is End.END:
            self._ended = True
        return result

    def push(self, unit: str | End) -> None:
        """
        Make ``unit`` the next thing ``read`` returns.

        A character always succeeds and replaces any pending character.
        ``End.END`` is accepted only when nothing is pending and the wrapped
        reader has already ended; pushing it then changes nothing.

        Raises:
            UnableToPushEndError: If ``End.END`` is pushed before it occurred.
        """
        if unit is End.END:
            if self._pending is not None or not self._ended:
                raise UnableToPushEndError()
            return
        self._pending = unit

    def close(self) -> None:
        """Close the wrapped reader."""
        self._source.close()
