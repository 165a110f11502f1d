"""SQLite backend over a single shared aiosqlite connection.

Every coroutine talks to the same connection, so a transaction has to keep
the others out for its whole duration: statements and commits outside a
transaction wait on the same lock the transaction holds.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from content_vcs.db.backend import BufferedCursor

if TYPE_CHECKING:
    import aiosqlite

logger = logging.getLogger(__name__)


class SQLiteBackend:
    """Database implementation for aiosqlite."""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        """Wrap an open connection whose row_factory is aiosqlite.Row."""
        self._conn = conn
        self._lock = asyncio.Lock()
        self._in_transaction: ContextVar[bool] = ContextVar("sqlite_in_transaction", default=False)

    async def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> BufferedCursor:
        """Run one statement and read its result in full."""
        if self._in_transaction.get():
            return await self._run(sql, params)
        async with self._lock:
            return await self._run(sql, params)

    async def _run(self, sql: str, params: tuple[Any, ...] | list[Any]) -> BufferedCursor:
        cursor = await self._conn.execute(sql, params)
        try:
            rows = list(await cursor.fetchall())
            affected = cursor.rowcount
        finally:
            await cursor.close()
        return BufferedCursor(rows, len(rows) if rows else affected)

    async def executescript(self, sql: str) -> None:
        """Run a DDL script."""
        async with self._lock:
            await self._conn.executescript(sql)

    async def commit(self) -> None:
        """Commit pending writes, unless a transaction block will do it."""
        if self._in_transaction.get():
            return
        async with self._lock:
            await self._conn.commit()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Run the block as one unit of work; a nested block joins the outer one."""
        if self._in_transaction.get():
            yield
            return

        async with self._lock:
            # Settle writes other coroutines left uncommitted so a rollback only undoes ours
            await self._conn.commit()
            token = self._in_transaction.set(True)
            try:
                yield
            except BaseException:
                await self._conn.rollback()
                logger.debug("SQLite transaction rolled back")
                raise
            else:
                await self._conn.commit()
            finally:
                self._in_transaction.reset(token)

    async def close(self) -> None:
        """Close the connection."""
        await self._conn.close()

    async def apply_schema(self) -> None:
        """Create tables and indexes."""
        from content_vcs.db.schema import apply_schema

        await apply_schema(self)
        logger.debug("SQLite schema applied")
