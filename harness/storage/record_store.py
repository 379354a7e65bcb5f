"""Append-only blob table on SQLite, one store file per ingested source."""

from __future__ import annotations

import logging
import re
import sqlite3
from pathlib import Path
from typing import AsyncIterator, Optional

import aiosqlite

from common.exceptions import StorageIOError, RecordNotFoundError, StoreClosedError

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "file_chunks"

_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS {table} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    chunk BLOB
)
"""


class RecordStore:
    """Handle on one store file.

    Lifecycle: created by :meth:`open_or_create`, open until :meth:`close`,
    after which every operation raises :class:`StoreClosedError`. Reopening
    the same path gives a new handle over the existing rows.
    """

    def __init__(self, path: Path, conn: aiosqlite.Connection, table: str = DEFAULT_TABLE):
        self.path = path
        self.table = table
        self._conn: Optional[aiosqlite.Connection] = conn

    @classmethod
    async def open_or_create(cls, path: str | Path, table: str = DEFAULT_TABLE) -> "RecordStore":
        """Open ``path``, creating the file and the chunk table if absent."""
        if not _TABLE_NAME.match(table):
            raise ValueError(f"Invalid table name: {table}")
        path = Path(path)
        try:
            conn = await aiosqlite.connect(path)
        except sqlite3.Error as e:
            raise StorageIOError(f"Cannot open record store {path}: {e}", path=str(path)) from e

        try:
            await conn.execute(SCHEMA_SQL.format(table=table))
            await conn.commit()
        except sqlite3.Error as e:
            await conn.close()
            raise StorageIOError(f"Cannot initialize record store {path}: {e}", path=str(path)) from e

        logger.debug(f"Opened record store {path} (table {table})")
        return cls(path, conn, table)

    @property
    def is_closed(self) -> bool:
        return self._conn is None

    async def __aenter__(self) -> "RecordStore":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise StoreClosedError(f"Record store {self.path} is closed")
        return self._conn

    async def insert(self, payload: bytes) -> int:
        """Append one row and commit. Returns the new row id."""
        conn = self._connection()
        try:
            cursor = await conn.execute(
                f"INSERT INTO {self.table} (chunk) VALUES (?)", (payload,)
            )
            await conn.commit()
        except sqlite3.Error as e:
            raise StorageIOError(f"Insert into {self.path} failed: {e}", path=str(self.path)) from e
        return cursor.lastrowid

    async def count(self) -> int:
        conn = self._connection()
        try:
            cursor = await conn.execute(f"SELECT COUNT(*) FROM {self.table}")
            row = await cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageIOError(f"Count on {self.path} failed: {e}", path=str(self.path)) from e
        return row[0]

    async def get_by_id(self, record_id: int) -> bytes:
        """Payload of row ``record_id``; raises RecordNotFoundError if absent."""
        conn = self._connection()
        try:
            cursor = await conn.execute(
                f"SELECT chunk FROM {self.table} WHERE id = ?", (record_id,)
            )
            row = await cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageIOError(f"Lookup in {self.path} failed: {e}", path=str(self.path)) from e
        if row is None:
            raise RecordNotFoundError(record_id, str(self.path))
        return row[0]

    async def iter_payloads(self) -> AsyncIterator[bytes]:
        """Payloads in id order, i.e. the original source byte order."""
        conn = self._connection()
        try:
            async with conn.execute(f"SELECT chunk FROM {self.table} ORDER BY id") as cursor:
                async for row in cursor:
                    yield row[0]
        except sqlite3.Error as e:
            raise StorageIOError(f"Scan of {self.path} failed: {e}", path=str(self.path)) from e

    async def close(self) -> None:
        """Release the connection. Idempotent."""
        if self._conn is None:
            return
        conn, self._conn = self._conn, None
        try:
            await conn.close()
        except sqlite3.Error as e:
            raise StorageIOError(f"Close of {self.path} failed: {e}", path=str(self.path)) from e
        logger.debug(f"Closed record store {self.path}")
