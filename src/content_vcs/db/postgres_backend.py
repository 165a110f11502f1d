"""PostgreSQL backend over an asyncpg pool.

Standalone statements borrow a pooled connection and autocommit. Inside
``transaction()`` the block keeps one connection with an open asyncpg
transaction, and every statement the block runs is routed to it.
"""

from __future__ import annotations

import itertools
import logging
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from content_vcs.db.backend import BufferedCursor

if TYPE_CHECKING:
    import asyncpg

logger = logging.getLogger(__name__)

_QMARK_RE = re.compile(r"\?")


def to_numbered_params(sql: str) -> str:
    """Rewrite qmark placeholders as asyncpg's ``$1, $2, ...``."""
    numbers = itertools.count(1)
    return _QMARK_RE.sub(lambda _match: f"${next(numbers)}", sql)


def affected_rows(status: str | None) -> int:
    """Row count from a command tag such as ``UPDATE 3`` or ``INSERT 0 1``."""
    if not status:
        return -1
    tail = status.rsplit(" ", 1)[-1]
    return int(tail) if tail.isdigit() else -1


class PostgresBackend:
    """Database implementation for asyncpg.

    asyncpg records already index by name and position, so they are handed
    back as rows unchanged.
    """

    def __init__(self, pool: asyncpg.Pool) -> None:
        """Wrap a connection pool."""
        self._pool = pool
        self._tx_conn: ContextVar[asyncpg.Connection | None] = ContextVar(
            "postgres_tx_conn", default=None
        )

    @classmethod
    async def create(cls, url: str) -> PostgresBackend:
        """Open a pool for ``url``."""
        import asyncpg as _asyncpg

        return cls(await _asyncpg.create_pool(url, min_size=1, max_size=10))

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[asyncpg.Connection]:
        conn = self._tx_conn.get()
        if conn is not None:
            yield conn
            return
        async with self._pool.acquire() as pooled:
            yield pooled

    async def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> BufferedCursor:
        """Run one statement and read its result in full."""
        async with self._connection() as conn:
            stmt = await conn.prepare(to_numbered_params(sql))
            rows = await stmt.fetch(*params)
            return BufferedCursor(rows, affected_rows(stmt.get_statusmsg()))

    async def executescript(self, sql: str) -> None:
        """Run a DDL script (simple query protocol, no parameters)."""
        async with self._connection() as conn:
            await conn.execute(sql)

    async def commit(self) -> None:
        """Nothing to do: standalone statements autocommit, blocks commit on exit."""

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Run the block on one connection inside an asyncpg transaction."""
        if self._tx_conn.get() is not None:
            yield
            return

        async with self._pool.acquire() as conn, conn.transaction():
            token = self._tx_conn.set(conn)
            try:
                yield
            finally:
                self._tx_conn.reset(token)

    async def close(self) -> None:
        """Close the pool."""
        await self._pool.close()

    async def apply_schema(self) -> None:
        """Create tables and indexes."""
        from content_vcs.db.schema import apply_schema

        await apply_schema(self)
        logger.debug("PostgreSQL schema applied")
