"""Storage port shared by every store.

Stores are handed a ``Database`` when they are built. They write ``?``
placeholders and the SQL both dialects accept (``ON CONFLICT ... DO NOTHING``,
``RETURNING``), and group multi-statement writes with ``transaction()``.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Row(Protocol):
    """A result row indexed by column name or position."""

    def __getitem__(self, key: str | int) -> Any:
        """Column value."""
        ...

    def keys(self) -> Any:
        """Column names, in select order."""
        ...


@runtime_checkable
class Cursor(Protocol):
    """Result of one executed statement."""

    @property
    def rowcount(self) -> int:
        """Rows returned or affected, -1 when the driver cannot tell."""
        ...

    async def fetchone(self) -> Row | None:
        """Next row, or None once exhausted."""
        ...

    async def fetchall(self) -> list[Row]:
        """Every row not yet fetched."""
        ...


@runtime_checkable
class Database(Protocol):
    """Async database used by the document, version, branch and comparison stores.

    ``commit()`` ends the implicit unit of work of a standalone write. Inside
    ``transaction()`` it is deferred: the block commits as a whole on exit,
    or rolls back if it raises. Transactions nest flat.
    """

    async def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> Cursor:
        """Run one statement."""
        ...

    async def executescript(self, sql: str) -> None:
        """Run a multi-statement DDL script."""
        ...

    async def commit(self) -> None:
        """Make standalone writes durable."""
        ...

    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Async context manager grouping writes into one atomic unit."""
        ...

    async def close(self) -> None:
        """Release the connection or pool."""
        ...


class BufferedCursor:
    """Cursor over rows the backend has already read in full.

    Both backends drain every statement before returning, so no statement is
    left open on a connection another coroutine is about to commit or roll
    back.
    """

    def __init__(self, rows: list[Any], rowcount: int | None = None) -> None:
        """Hold ``rows``; ``rowcount`` defaults to their number."""
        self._rows = list(rows)
        self._rowcount = len(self._rows) if rowcount is None else rowcount

    @property
    def rowcount(self) -> int:
        """Rows returned or affected."""
        return self._rowcount

    async def fetchone(self) -> Row | None:
        """Pop the next row."""
        return self._rows.pop(0) if self._rows else None

    async def fetchall(self) -> list[Row]:
        """Drain the remaining rows."""
        rows, self._rows = self._rows, []
        return rows
