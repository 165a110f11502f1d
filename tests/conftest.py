"""Shared test fixtures."""

import pytest_asyncio

from content_vcs.db.connection import create_connection
from content_vcs.models.document import ContentSnapshot
from content_vcs.service import ContentVersioning


@pytest_asyncio.fixture
async def db():
    """In-memory database with full schema."""
    conn = await create_connection(":memory:")
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def service(db):
    """Versioning facade backed by the in-memory DB."""
    return ContentVersioning(db)


@pytest_asyncio.fixture
async def documents(service):
    """Document store sharing the service's connection."""
    return service.documents


@pytest_asyncio.fixture
async def versions(service):
    """Version store sharing the service's connection."""
    return service.versions


@pytest_asyncio.fixture
async def branches(service):
    """Branch manager sharing the service's connection."""
    return service.branches


@pytest_asyncio.fixture
async def comparisons(service):
    """Comparison engine sharing the service's connection."""
    return service.comparisons


@pytest_asyncio.fixture
async def history(service):
    """Rollback/merge operator sharing the service's connection."""
    return service.history


def snapshot(content: str = "Some body text.", title: str = "A title", **fields) -> ContentSnapshot:
    """Build a content snapshot with sensible defaults."""
    return ContentSnapshot(title=title, content=content, **fields)


@pytest_asyncio.fixture
async def document(documents):
    """A bare document with no versions yet."""
    return await documents.create_document(snapshot("Head content", title="Head title"))
