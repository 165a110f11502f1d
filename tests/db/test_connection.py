"""Tests for database connection and schema initialization."""

import asyncio

import pytest

from content_vcs.db.backend import Database
from content_vcs.db.connection import create_connection
from content_vcs.db.schema import SCHEMA_VERSION, apply_schema


@pytest.mark.asyncio
async def test_create_in_memory_connection():
    db = await create_connection(":memory:")
    try:
        cursor = await db.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name")
        tables = {row[0] for row in await cursor.fetchall()}
        assert {
            "documents",
            "document_versions",
            "version_branches",
            "version_comparisons",
            "schema_version",
        } <= tables
    finally:
        await db.close()


@pytest.mark.asyncio
async def test_backend_satisfies_protocol(db):
    assert isinstance(db, Database)


@pytest.mark.asyncio
async def test_schema_version(db):
    cursor = await db.execute("SELECT version FROM schema_version")
    row = await cursor.fetchone()
    assert row[0] == SCHEMA_VERSION


@pytest.mark.asyncio
async def test_apply_schema_is_idempotent(db):
    await apply_schema(db)
    cursor = await db.execute("SELECT COUNT(*) FROM schema_version")
    row = await cursor.fetchone()
    assert row[0] == 1


@pytest.mark.asyncio
async def test_file_database_creates_parent_dir(tmp_path):
    path = tmp_path / "nested" / "versions.db"
    db = await create_connection(path)
    try:
        assert path.exists()
    finally:
        await db.close()


@pytest.mark.asyncio
async def test_memory_ignores_database_url(monkeypatch):
    monkeypatch.setenv("CV_DATABASE_URL", "postgresql://nowhere/db")
    db = await create_connection(":memory:")
    try:
        cursor = await db.execute("SELECT 1")
        row = await cursor.fetchone()
        assert row[0] == 1
    finally:
        await db.close()


@pytest.mark.asyncio
async def test_returning_rows_are_buffered(db):
    """RETURNING results are read up front so no statement stays open."""
    cursor = await db.execute(
        """INSERT INTO documents (id, slug, title, content, created_at, updated_at)
        VALUES ('d1', 's', 't', 'c', 'now', 'now') RETURNING id""",
    )
    await db.commit()
    assert cursor.rowcount == 1
    row = await cursor.fetchone()
    assert row["id"] == "d1"
    assert await cursor.fetchone() is None
    assert await cursor.fetchall() == []


async def _document_ids(db) -> list[str]:
    cursor = await db.execute("SELECT id FROM documents ORDER BY id")
    return [row["id"] for row in await cursor.fetchall()]


_INSERT_DOC = """INSERT INTO documents (id, slug, title, content, created_at, updated_at)
    VALUES (?, 's', 't', 'c', 'now', 'now')"""


@pytest.mark.asyncio
async def test_transaction_commits_on_exit(db):
    async with db.transaction():
        await db.execute(_INSERT_DOC, ("d1",))
        await db.commit()
        await db.execute(_INSERT_DOC, ("d2",))
    assert await _document_ids(db) == ["d1", "d2"]


@pytest.mark.asyncio
async def test_transaction_rolls_back_on_error(db):
    """A commit() inside the block must not make partial work durable."""
    with pytest.raises(RuntimeError):
        async with db.transaction():
            await db.execute(_INSERT_DOC, ("d1",))
            await db.commit()
            async with db.transaction():
                await db.execute(_INSERT_DOC, ("d2",))
            raise RuntimeError("boom")
    assert await _document_ids(db) == []


@pytest.mark.asyncio
async def test_transaction_keeps_other_writers_out(db):
    entered = asyncio.Event()
    release = asyncio.Event()

    async def failing_block():
        with pytest.raises(RuntimeError):
            async with db.transaction():
                await db.execute(_INSERT_DOC, ("inside",))
                entered.set()
                await release.wait()
                raise RuntimeError("boom")

    async def outside_writer():
        await entered.wait()
        await db.execute(_INSERT_DOC, ("outside",))
        await db.commit()

    block = asyncio.create_task(failing_block())
    writer = asyncio.create_task(outside_writer())
    await entered.wait()
    await asyncio.sleep(0)
    release.set()
    await asyncio.gather(block, writer)

    assert await _document_ids(db) == ["outside"]
