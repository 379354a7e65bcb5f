"""Backpressure-aware streaming of large objects into a sink."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from pathlib import Path
from typing import Optional, Protocol, BinaryIO, runtime_checkable

from common.exceptions import StorageIOError
from common.models.transfer import StreamTransferTask
from harness.io.files import run_blocking

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024
DEFAULT_HIGH_WATER_MARK = 16 * 1024 * 1024


@runtime_checkable
class ChunkSink(Protocol):
    """Destination accepted by :func:`write_stream`.

    ``write`` never blocks; it returns ``False`` once the sink's internal
    buffer is saturated, after which the producer must wait for ``drain``.
    """

    def write(self, data: bytes) -> bool: ...

    async def drain(self) -> None: ...

    async def close(self) -> None: ...

    async def abort(self) -> None: ...


class FileSink:
    """Buffered file sink flushed in order by a background task.

    Blocking writes run on the default executor. The sink reports
    saturation when buffered bytes reach ``high_water_mark`` and signals
    drain when the buffer is empty again. A write failure is kept and
    raised from the next ``write``, ``drain`` or ``close``.
    """

    def __init__(self, path: str | Path, high_water_mark: int = DEFAULT_HIGH_WATER_MARK):
        if high_water_mark <= 0:
            raise ValueError("high_water_mark must be positive")
        self.path = Path(path)
        self.high_water_mark = high_water_mark
        self.bytes_written = 0

        self._file: Optional[BinaryIO] = None
        self._pending: deque[bytes] = deque()
        self._buffered = 0
        self._drained = asyncio.Event()
        self._drained.set()
        self._flusher: Optional[asyncio.Task] = None
        self._error: Optional[BaseException] = None
        self._closed = False

    @property
    def buffered_bytes(self) -> int:
        return self._buffered

    @property
    def saturated(self) -> bool:
        return self._buffered >= self.high_water_mark

    async def open(self) -> "FileSink":
        """Create or truncate the destination file."""
        try:
            self._file = await run_blocking(open, self.path, "wb")
        except OSError as e:
            raise StorageIOError(f"Cannot open {self.path}: {e}", path=str(self.path)) from e
        logger.debug(f"Opened sink {self.path}")
        return self

    async def __aenter__(self) -> "FileSink":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            await self.close()
        else:
            await self.abort()

    def write(self, data: bytes) -> bool:
        """Queue ``data``; returns False when the caller must wait for drain."""
        if self._file is None or self._closed:
            raise StorageIOError(f"Sink {self.path} is not open", path=str(self.path))
        self._raise_if_failed()

        if data:
            chunk = data if isinstance(data, bytes) else bytes(data)
            self._pending.append(chunk)
            self._buffered += len(chunk)
            self._drained.clear()
            if self._flusher is None or self._flusher.done():
                self._flusher = asyncio.get_running_loop().create_task(self._flush())

        return not self.saturated

    async def drain(self) -> None:
        """Wait until every queued chunk has reached the file."""
        await self._drained.wait()
        self._raise_if_failed()

    async def close(self) -> None:
        """Flush remaining chunks and close the file."""
        if self._closed:
            return
        if self._flusher is not None:
            await self._flusher
        self._closed = True
        if self._file is not None:
            try:
                await run_blocking(self._file.close)
            except OSError as e:
                raise StorageIOError(f"Close of {self.path} failed: {e}", path=str(self.path)) from e
        self._raise_if_failed()
        logger.debug(f"Closed sink {self.path} ({self.bytes_written} bytes)")

    async def abort(self) -> None:
        """Drop queued chunks and release the file handle. Never raises."""
        if self._closed:
            return
        self._closed = True
        dropped = sum(len(chunk) for chunk in self._pending)
        self._pending.clear()
        self._buffered -= dropped
        if self._flusher is not None:
            await self._flusher
        if self._file is not None:
            try:
                await run_blocking(self._file.close)
            except OSError as e:
                logger.warning(f"Error closing aborted sink {self.path}: {e}")
        self._drained.set()
        logger.debug(f"Aborted sink {self.path}, dropped {dropped} buffered bytes")

    async def _flush(self) -> None:
        try:
            while self._pending:
                chunk = self._pending.popleft()
                await run_blocking(self._file.write, chunk)
                self._buffered -= len(chunk)
                self.bytes_written += len(chunk)
        except Exception as e:
            self._error = e
            logger.error(f"Write to {self.path} failed: {e}")
        finally:
            # no await between the loop exit and here, so the buffer is empty or failed
            self._drained.set()

    def _raise_if_failed(self) -> None:
        if self._error is not None:
            raise StorageIOError(
                f"Write to {self.path} failed: {self._error}", path=str(self.path)
            ) from self._error


async def write_stream(
    sink: ChunkSink,
    total_size: int,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    fill: bytes = b"X",
    destination: Optional[str] = None,
) -> StreamTransferTask:
    """Write exactly ``total_size`` filler bytes into ``sink`` in bounded chunks.

    After any ``write`` that reports saturation, nothing further is
    submitted until ``sink.drain()`` resolves. The sink is closed on
    success and aborted on error; a partial destination is left in place.
    """
    if total_size < 0:
        raise ValueError("total_size must be >= 0")
    if chunk_size <= 0:
        raise ValueError("chunk_size must be > 0")
    if len(fill) != 1:
        raise ValueError("fill must be a single byte")

    task = StreamTransferTask(
        destination=destination or str(getattr(sink, "path", sink)),
        total_size=total_size,
        chunk_size=chunk_size,
    )
    block = bytes(fill) * min(chunk_size, total_size)

    try:
        while not task.is_complete:
            nbytes = task.next_chunk_length()
            ready = sink.write(block if nbytes == len(block) else block[:nbytes])
            task.advance(nbytes)
            if not ready:
                task.stalls += 1
                await sink.drain()
        await sink.close()
    except OSError as e:
        await sink.abort()
        raise StorageIOError(f"Stream to {task.destination} failed: {e}", path=task.destination) from e
    except Exception:
        await sink.abort()
        raise

    logger.debug(
        f"Streamed {task.progress} bytes to {task.destination} "
        f"in {task.submissions} chunks ({task.stalls} drain waits)"
    )
    return task


async def stream_to_file(
    path: str | Path,
    total_size: int,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    high_water_mark: int = DEFAULT_HIGH_WATER_MARK,
) -> StreamTransferTask:
    """Create ``path`` and stream ``total_size`` bytes into it."""
    sink = FileSink(path, high_water_mark=high_water_mark)
    await sink.open()
    return await write_stream(sink, total_size, chunk_size, destination=str(path))
