"""Async database connection abstraction over libsql.

Wraps the synchronous ``libsql`` driver with ``asyncio.to_thread()`` and
turns driver failures into :class:`~keepsake.errors.StorageUnavailable`.
Connection target is determined by settings:

- **Production**: ``TURSO_DATABASE_URL`` + ``TURSO_AUTH_TOKEN`` → remote Turso
- **Dev/test**: no Turso env vars → local SQLite file via ``database_path``
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import libsql

from keepsake.config import settings
from keepsake.errors import StorageUnavailable

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class AsyncCursor:
    """Async view of a synchronous libsql cursor."""

    def __init__(self, cursor: Any) -> None:
        self._cursor = cursor

    async def fetchone(self) -> tuple | None:
        return await _run(self._cursor.fetchone)

    async def fetchall(self) -> list[tuple]:
        return await _run(self._cursor.fetchall)

    @property
    def rowcount(self) -> int:
        return self._cursor.rowcount


class AsyncConnection:
    """Async view of a synchronous libsql connection."""

    def __init__(self, conn: Any) -> None:
        self._conn = conn

    async def execute(self, sql: str, params: tuple = ()) -> AsyncCursor:
        cursor = await _run(self._conn.execute, sql, params)
        return AsyncCursor(cursor)

    async def commit(self) -> None:
        await _run(self._conn.commit)

    async def close(self) -> None:
        await asyncio.to_thread(self._conn.close)


async def _run(fn: Any, *args: Any) -> Any:
    """Run a blocking driver call in a worker thread, translating failures."""
    try:
        return await asyncio.to_thread(fn, *args)
    except Exception as exc:
        logger.warning("Database call failed: %s", exc)
        msg = "database unavailable"
        raise StorageUnavailable(msg) from exc


def _open_local(path: str) -> Any:
    """Open a local libsql connection with WAL mode and busy timeout."""
    conn = libsql.connect(path)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA busy_timeout=5000")
    return conn


async def get_connection(local_path_override: Path | None = None) -> AsyncConnection:
    """Return an async-wrapped libsql connection.

    If *local_path_override* is given (test isolation), it takes priority.
    Otherwise, ``TURSO_DATABASE_URL`` triggers a remote connection, and
    ``database_path`` falls back to a local file.
    """
    if local_path_override:
        local_path_override.parent.mkdir(parents=True, exist_ok=True)
        return AsyncConnection(await _run(_open_local, str(local_path_override)))

    if settings.turso_database_url:
        conn = await _run(
            lambda: libsql.connect(
                database=settings.turso_database_url,
                auth_token=settings.turso_auth_token,
            )
        )
        return AsyncConnection(conn)

    settings.database_path.parent.mkdir(parents=True, exist_ok=True)
    return AsyncConnection(await _run(_open_local, str(settings.database_path)))
