"""
Abstract base class for all character sources.

Every concrete reader (in-memory string, chunk-fed stream, pushback buffer)
implements this interface. The tokenizer and parser work exclusively
against ``AbstractReader`` so the CSV stack is source-agnostic.

Usage:
    with StringReader("a,b\\n") as reader:
        while (char := reader.read()) is not End.END:
            process(char)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum


class End(Enum):
    """
    End-of-source marker.

    ``End.END`` is returned by ``AbstractReader.read`` once the source is
    exhausted. It is never equal to any character, and once a reader has
    returned it every later ``read`` returns it again.
    """

    END = "END"

    def __repr__(self) -> str:
        return "<End>"


class AbstractReader(ABC):
    """
    Interface for all character sources.

    Subclasses must implement ``read`` and ``close``. Context manager support
    (``__enter__`` / ``__exit__``) is provided by this base class and
    delegates to ``close``.
    """

    @abstractmethod
    def read(self) -> str | End:
        """
        Return the next character, or ``End.END`` if none is left.

        May block until a character is available, the source ends, or the
        source fails (in which case the failure is raised).
        """

    @abstractmethod
    def close(self) -> None:
        """Release any resources held by the underlying source."""

    # ── context manager ──────────────────────────────────────────────────

    def __enter__(self) -> "AbstractReader":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
        return None
