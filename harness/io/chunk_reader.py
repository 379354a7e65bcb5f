"""Streaming chunked file source with explicit pause/resume."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional, BinaryIO

from common.exceptions import StorageIOError
from harness.io.files import run_blocking
from harness.io.stream_writer import DEFAULT_CHUNK_SIZE

logger = logging.getLogger(__name__)

_EOF = object()


class ChunkReader:
    """Read a file as a stream of chunks of at most ``chunk_size`` bytes.

    A background task reads ahead by one chunk. ``pause()`` stops it from
    issuing further reads until ``resume()``; a consumer that pauses while
    it handles a chunk therefore never has more than one unconsumed chunk
    in memory.
    """

    def __init__(self, path: str | Path, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        self.path = Path(path)
        self.chunk_size = chunk_size
        self.chunks_read = 0
        self.bytes_read = 0

        self._file: Optional[BinaryIO] = None
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._flowing = asyncio.Event()
        self._flowing.set()
        self._pump: Optional[asyncio.Task] = None
        self._finished = False
        self._stopping = False

    @property
    def paused(self) -> bool:
        return not self._flowing.is_set()

    def pause(self) -> None:
        self._flowing.clear()

    def resume(self) -> None:
        self._flowing.set()

    async def open(self) -> "ChunkReader":
        try:
            self._file = await run_blocking(open, self.path, "rb")
        except OSError as e:
            raise StorageIOError(f"Cannot open {self.path}: {e}", path=str(self.path)) from e
        self._pump = asyncio.get_running_loop().create_task(self._read_loop())
        return self

    async def __aenter__(self) -> "ChunkReader":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def __aiter__(self) -> "ChunkReader":
        return self

    async def __anext__(self) -> bytes:
        chunk = await self.read_chunk()
        if chunk is None:
            raise StopAsyncIteration
        return chunk

    async def read_chunk(self) -> Optional[bytes]:
        """Next chunk in file order, or None at end of stream."""
        if self._finished:
            return None
        if self._pump is None:
            raise StorageIOError(f"Reader for {self.path} is not open", path=str(self.path))

        item = await self._queue.get()
        if item is _EOF:
            self._finished = True
            return None
        if isinstance(item, BaseException):
            self._finished = True
            raise StorageIOError(f"Read of {self.path} failed: {item}", path=str(self.path)) from item

        self.chunks_read += 1
        self.bytes_read += len(item)
        return item

    async def close(self) -> None:
        """Stop reading and release the file handle."""
        self._stopping = True
        self._flowing.set()
        if self._pump is not None:
            # the pump may sit in an executor read; wait it out instead of
            # closing the file under it, unblocking any pending put
            while not self._pump.done():
                while not self._queue.empty():
                    self._queue.get_nowait()
                await asyncio.wait({self._pump}, timeout=0.05)
            self._pump = None
        self._finished = True
        if self._file is not None:
            await run_blocking(self._file.close)
            self._file = None

    async def _read_loop(self) -> None:
        try:
            while True:
                await self._flowing.wait()
                if self._stopping:
                    return
                chunk = await run_blocking(self._file.read, self.chunk_size)
                if not chunk:
                    break
                await self._queue.put(chunk)
        except Exception as e:
            logger.error(f"Read of {self.path} failed: {e}")
            if not self._stopping:
                await self._queue.put(e)
            return
        if not self._stopping:
            await self._queue.put(_EOF)


async def consume_file(path: str | Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Stream a whole file and discard its contents. Returns bytes read."""
    async with ChunkReader(path, chunk_size) as reader:
        async for _ in reader:
            pass
        return reader.bytes_read
