"""Embedded file-backed backend on the stdlib ``sqlite3`` module.

Calls run in a worker thread so the event loop never blocks on disk I/O.
A single connection is shared and guarded by a lock.
"""

import asyncio
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from keyvify.backends.base import BackendAdapter

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EmbeddedSQLiteBackend(BackendAdapter):
    """SQLite file backend with WAL journaling.

    Args:
        name: Table name
        storage: Database file path; relative paths resolve against the
            working directory. Ignored when ``connection`` is given.
        connection: Existing connection to use; the caller keeps ownership
    """

    kind = "embedded"

    def __init__(
        self,
        name: str,
        storage: str | Path | None = None,
        connection: Optional[sqlite3.Connection] = None,
    ) -> None:
        super().__init__(name)
        if connection is None and storage is None:
            raise ValueError("EmbeddedSQLiteBackend requires either storage or connection")
        self.storage = None if storage is None else Path(storage)
        self._owns_connection = connection is None
        self.conn: Optional[sqlite3.Connection] = connection
        self._lock = threading.RLock()

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the connection, ensuring it exists."""
        if self.conn is None:
            raise RuntimeError("Database connection not initialized; call connect() first")
        return self.conn

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        def locked() -> T:
            with self._lock:
                return fn(*args)

        return await asyncio.to_thread(locked)

    async def connect(self) -> None:
        await self._run(self._open)
        logger.info(f"Opened embedded table {self.name!r} at {self.storage or '<external connection>'}")

    def _open(self) -> None:
        if self.conn is None:
            path = self.storage
            if str(path) != ":memory:":
                path = path if path.is_absolute() else Path.cwd() / path
                path.parent.mkdir(parents=True, exist_ok=True)
            self.conn = sqlite3.connect(str(path), check_same_thread=False)

        conn = self.connection
        # Per-connection settings; reapplied on every open
        conn.execute("PRAGMA synchronous = 1")
        conn.execute("PRAGMA journal_mode = WAL")
        exists = conn.execute(
            "SELECT count(*) FROM sqlite_master WHERE type = 'table' AND name = ?", (self.name,)
        ).fetchone()[0]
        if not exists:
            conn.execute(f'CREATE TABLE "{self.name}" (key TEXT NOT NULL PRIMARY KEY, value TEXT)')
            conn.commit()

    async def point_get(self, key: str) -> Optional[str]:
        def query() -> Optional[str]:
            row = self.connection.execute(
                f'SELECT value FROM "{self.name}" WHERE key = ?', (key,)
            ).fetchone()
            return row[0] if row else None

        return await self._run(query)

    async def upsert(self, key: str, value: str) -> None:
        def write() -> None:
            with self.connection:
                self.connection.execute(
                    f'INSERT INTO "{self.name}" (key, value) VALUES (?, ?) '
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (key, value),
                )

        await self._run(write)

    async def point_delete(self, key: str) -> int:
        def remove() -> int:
            with self.connection:
                return self.connection.execute(f'DELETE FROM "{self.name}" WHERE key = ?', (key,)).rowcount

        return await self._run(remove)

    async def scan_all(self) -> list[tuple[str, str]]:
        def scan() -> list[tuple[str, str]]:
            rows = self.connection.execute(f'SELECT key, value FROM "{self.name}"').fetchall()
            return [(k, v) for k, v in rows if v is not None]

        return await self._run(scan)

    async def truncate_all(self) -> int:
        def clear() -> int:
            with self.connection:
                return self.connection.execute(f'DELETE FROM "{self.name}"').rowcount

        return await self._run(clear)

    async def close(self) -> None:
        if self._owns_connection and self.conn is not None:
            await self._run(self.conn.close)
            self.conn = None
            logger.info(f"Closed embedded table {self.name!r}")
