"""
Chunk-fed streaming reader implementing ``AbstractReader``.

A producer pushes text chunks into ``StreamReader`` (``feed`` / ``finish`` /
``fail``) while a single consumer pulls characters out with ``read``. The
producer usually is a ``StreamPump`` thread reading a file-like object, but
any object implementing ``FlowControl`` can be attached.

Key properties:
  - **Single consumer** — a second ``read`` issued while one is blocked
    raises ``ConcurrentReadError``.
  - **Bounded** — once ``capacity`` characters are buffered the producer is
    paused; it is resumed when the consumer drains below the threshold.
    Memory is bounded by ``capacity`` plus one chunk.
  - **Ordered completion** — characters fed before ``finish()`` are always
    delivered before ``End``; chunks arriving after completion are dropped.
  - **Poisoning** — a non-``str`` chunk or a producer failure discards the
    queue, cancels the producer, and is re-raised by every later ``read``.

Usage::

    with open(path, encoding="utf-8", newline="") as f:
        reader = StreamReader.from_stream(f, close_stream=False)
        while (char := reader.read()) is not End.END:
            ...
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import IO, Protocol

from csvstream.configs.config import DEFAULT_CHUNK_SIZE, DEFAULT_QUEUE_CAPACITY
from csvstream.configs.exceptions import ChunkTypeError, ConcurrentReadError
from csvstream.readers.base import AbstractReader, End

logger = logging.getLogger(__name__)

# Seconds close() waits for an owned pump thread to stop.
PUMP_JOIN_TIMEOUT: float = 1.0


class FlowControl(Protocol):
    """Hooks a ``StreamReader`` invokes on its producer."""

    def pause(self) -> None: ...

    def resume(self) -> None: ...

    def cancel(self) -> None: ...


class _QueuedChunk:
    __slots__ = ("chunk", "offset")

    def __init__(self, chunk: str) -> None:
        self.chunk = chunk
        self.offset = 0


class StreamReader(AbstractReader):
    """
    Single-consumer character reader fed by a concurrent producer.

    Args:
        capacity: Buffered-character threshold at which the producer is paused.
        flow_control: Producer hooks; may also be attached later with ``attach``.

    Raises:
        ValueError: If ``capacity`` is not a positive integer.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_QUEUE_CAPACITY,
        flow_control: FlowControl | None = None,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be a positive integer, got {capacity}")
        self.capacity = capacity
        self._flow = flow_control
        self._cond = threading.Condition()
        self._queue: deque[_QueuedChunk] = deque()
        self._buffered = 0
        self._paused = False
        self._completed = False
        self._closed = False
        self._error: BaseException | None = None
        self._reading = False
        self._pump: StreamPump | None = None

    @classmethod
    def from_stream(
        cls,
        stream: IO,
        capacity: int = DEFAULT_QUEUE_CAPACITY,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        close_stream: bool = True,
    ) -> "StreamReader":
        """
        Build a reader fed by a ``StreamPump`` thread reading ``stream``.

        Args:
            stream: Text-mode file-like object. Binary streams poison the
                reader with ``ChunkTypeError`` on the first chunk.
            capacity: Backpressure threshold.
            chunk_size: Characters requested per ``stream.read`` call.
            close_stream: Close ``stream`` when the pump stops.

        Returns:
            A reader whose producer thread is already running.
        """
        reader = cls(capacity=capacity)
        pump = StreamPump(stream, reader, chunk_size=chunk_size, close_stream=close_stream)
        reader.attach(pump)
        reader._pump = pump
        pump.start()
        return reader

    def attach(self, flow_control: FlowControl) -> None:
        """Attach the producer's flow-control hooks."""
        with self._cond:
            self._flow = flow_control
            self._control_flow()

    # ── state ────────────────────────────────────────────────────────────

    @property
    def buffered(self) -> int:
        """Number of characters fed but not yet read."""
        with self._cond:
            return self._buffered

    @property
    def pump(self) -> StreamPump | None:
        """The producer thread started by ``from_stream``, if any."""
        return self._pump

    @property
    def paused(self) -> bool:
        """True while the producer is asked to hold further chunks."""
        with self._cond:
            return self._paused

    # ── producer side ────────────────────────────────────────────────────

    def feed(self, chunk: str) -> None:
        """
        Queue a chunk delivered by the producer.

        A non-``str`` chunk poisons the reader with ``ChunkTypeError``.
        Empty chunks, and chunks arriving after completion, close or
        failure, are ignored.
        """
        with self._cond:
            if self._completed or self._closed or self._error is not None:
                return
            if not isinstance(chunk, str):
                self._poison(ChunkTypeError(type(chunk).__name__))
                return
            if not chunk:
                return
            self._queue.append(_QueuedChunk(chunk))
            self._buffered += len(chunk)
            self._cond.notify_all()
            self._control_flow()

    def finish(self) -> None:
        """Signal that the producer has no more chunks."""
        with self._cond:
            if self._completed:
                return
            self._completed = True
            self._cond.notify_all()

    def fail(self, error: BaseException) -> None:
        """Poison the reader with an upstream error."""
        with self._cond:
            self._poison(error)

    # ── consumer side ────────────────────────────────────────────────────

    def read(self) -> str | End:
        """
        Return the next buffered character, blocking until one is available.

        Returns:
            The next character, or ``End.END`` once the producer finished and
            the queue is drained, or after ``close()``.

        Raises:
            ConcurrentReadError: If another read is pending.
            ChunkTypeError: If the producer delivered a non-text chunk.
            Exception: The producer's failure, re-raised on every call.
        """
        with self._cond:
            if self._reading:
                raise ConcurrentReadError()
            self._reading = True
            try:
                while True:
                    if self._error is not None:
                        raise self._error
                    if self._queue:
                        return self._take()
                    if self._completed or self._closed:
                        return End.END
                    self._cond.wait()
            finally:
                self._reading = False

    def close(self, error: BaseException | None = None) -> None:
        """
        Discard buffered characters and stop the producer.

        When the reader owns its pump (``from_stream``), waits up to
        ``PUMP_JOIN_TIMEOUT`` seconds for the thread to stop and release
        the stream.

        Args:
            error: Optional reason. When given, the reader is poisoned with it
                instead of ending cleanly.
        """
        with self._cond:
            if error is not None:
                self._poison(error)
            elif not self._closed:
                self._closed = True
                self._queue.clear()
                self._buffered = 0
                self._cond.notify_all()
                self._cancel_producer()
            pump = self._pump

        # Join outside the lock: the pump feeds under self._cond.
        if pump is not None:
            pump.join(PUMP_JOIN_TIMEOUT)
            if pump.is_alive():
                logger.warning("Producer thread still running after %.1fs", PUMP_JOIN_TIMEOUT)

    # ── internals (caller holds self._cond) ──────────────────────────────

    def _take(self) -> str:
        entry = self._queue[0]
        char = entry.chunk[entry.offset]
        entry.offset += 1
        self._buffered -= 1
        if entry.offset == len(entry.chunk):
            self._queue.popleft()
        self._control_flow()
        return char

    def _control_flow(self) -> None:
        if self._flow is None:
            return
        if self._buffered >= self.capacity:
            if not self._paused:
                self._paused = True
                logger.debug("Pausing producer: %d characters buffered", self._buffered)
                self._flow.pause()
        elif self._paused:
            self._paused = False
            logger.debug("Resuming producer: %d characters buffered", self._buffered)
            self._flow.resume()

    def _poison(self, error: BaseException) -> None:
        if self._error is not None or self._closed:
            return
        logger.warning("Stream reader poisoned: %s", error)
        self._error = error
        self._queue.clear()
        self._buffered = 0
        self._cond.notify_all()
        self._cancel_producer()

    def _cancel_producer(self) -> None:
        if self._flow is not None:
            self._flow.cancel()


class StreamPump:
    """
    Background producer feeding a ``StreamReader`` from a file-like object.

    Implements ``FlowControl``: while paused the thread waits before reading
    the next chunk; ``cancel`` stops it at the next chunk boundary.

    Args:
        stream: File-like object with a ``read(size)`` method.
        reader: Reader receiving the chunks.
        chunk_size: Characters requested per ``stream.read`` call.
        close_stream: Close ``stream`` when the pump stops.
    """

    def __init__(
        self,
        stream: IO,
        reader: StreamReader,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        close_stream: bool = True,
    ) -> None:
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be a positive integer, got {chunk_size}")
        self._stream = stream
        self._reader = reader
        self._chunk_size = chunk_size
        self._close_stream = close_stream
        self._flowing = threading.Event()
        self._flowing.set()
        self._cancelled = threading.Event()
        self._thread = threading.Thread(target=self._run, name="csvstream-pump", daemon=True)

    def start(self) -> "StreamPump":
        self._thread.start()
        return self

    def join(self, timeout: float | None = None) -> None:
        if threading.current_thread() is self._thread:
            return
        self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def pause(self) -> None:
        self._flowing.clear()

    def resume(self) -> None:
        self._flowing.set()

    def cancel(self) -> None:
        self._cancelled.set()
        self._flowing.set()

    def _run(self) -> None:
        try:
            while True:
                self._flowing.wait()
                if self._cancelled.is_set():
                    break
                chunk = self._stream.read(self._chunk_size)
                if not chunk:
                    self._reader.finish()
                    break
                self._reader.feed(chunk)
        except Exception as e:
            logger.error("Reading from upstream stream failed: %s", e)
            self._reader.fail(e)
        finally:
            if self._close_stream:
                self._stream.close()
