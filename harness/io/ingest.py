"""Chunked ingestion of a streaming source into a record store."""

from __future__ import annotations

import logging
from pathlib import Path

from harness.io.chunk_reader import ChunkReader
from harness.io.files import remove_file
from harness.io.stream_writer import DEFAULT_CHUNK_SIZE
from harness.storage.record_store import RecordStore, DEFAULT_TABLE

logger = logging.getLogger(__name__)


async def ingest(source: ChunkReader, store: RecordStore) -> int:
    """Insert every chunk of ``source`` into ``store`` as one row, in order.

    The source is paused while each insert is in flight and resumed only
    after the insert is acknowledged, so row ids follow source byte order
    and at most one insert is outstanding. Returns the number of rows
    inserted.

    Not transactional: a read or insert failure propagates immediately and
    leaves the rows inserted so far in place.
    """
    rows = 0
    async for chunk in source:
        source.pause()
        await store.insert(chunk)
        rows += 1
        source.resume()
    logger.debug(f"Ingested {rows} chunks ({source.bytes_read} bytes) from {source.path} into {store.path}")
    return rows


async def ingest_file(
    source_path: str | Path,
    store_path: str | Path,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    table: str = DEFAULT_TABLE,
    fresh: bool = True,
) -> int:
    """Convert one file into a fresh store file; both handles are released on return."""
    if fresh:
        await remove_file(store_path)

    store = await RecordStore.open_or_create(store_path, table=table)
    try:
        async with ChunkReader(source_path, chunk_size) as reader:
            return await ingest(reader, store)
    finally:
        await store.close()
