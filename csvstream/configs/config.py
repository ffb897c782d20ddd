"""
Reader configuration.

All tuneable constants live here. Import from this module everywhere —
never hardcode queue capacities, chunk sizes, or separators inline.

Usage:
    from csvstream.configs.config import ReaderConfig
    cfg = ReaderConfig()                        # defaults / environment
    cfg = ReaderConfig(column_separator=";")

Environment overrides (optional) are read when the config object is built;
this module does not load ``.env`` itself — ``csvstream.cli`` does that.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


DEFAULT_COLUMN_SEPARATOR: str = ","
"""Column separator used when none is configured."""

DEFAULT_QUEUE_CAPACITY: int = 4096
"""Buffered-but-unread characters at which the producer is paused."""

DEFAULT_CHUNK_SIZE: int = 1024
"""Characters requested from the underlying stream per producer read."""

DEFAULT_ENCODING: str = "utf-8"
"""Text encoding used when opening CSV files."""


@dataclass(slots=True)
class ReaderConfig:
    """
    Runtime configuration for the streaming CSV reader.

    Attributes:
        column_separator: Single character separating cells. Validated by
            ``CSVTokenizer``; any other length fails construction there.
        queue_capacity: Backpressure threshold of ``StreamReader``. The
            producer is paused while this many characters are buffered.
        chunk_size: Number of characters the producer reads per chunk.
            Buffered memory is bounded by ``queue_capacity + chunk_size``.
        encoding: Encoding for files opened by ``pipeline.open_file``.
    """

    column_separator: str = field(
        default_factory=lambda: os.environ.get("CSV_COLUMN_SEPARATOR", DEFAULT_COLUMN_SEPARATOR)
    )
    queue_capacity: int = field(
        default_factory=lambda: int(os.environ.get("CSV_QUEUE_CAPACITY", str(DEFAULT_QUEUE_CAPACITY)))
    )
    chunk_size: int = field(
        default_factory=lambda: int(os.environ.get("CSV_CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE)))
    )
    encoding: str = field(
        default_factory=lambda: os.environ.get("CSV_ENCODING", DEFAULT_ENCODING)
    )
