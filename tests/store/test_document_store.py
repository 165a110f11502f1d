"""Tests for the document repository."""

import pytest

from content_vcs.exceptions import NotFoundError
from content_vcs.models.document import DocumentStatus
from content_vcs.store.document_store import generate_slug
from tests.conftest import snapshot


def test_generate_slug():
    assert generate_slug("Getting Started with TypeScript: A Guide!") == (
        "getting-started-with-typescript-a-guide"
    )
    assert generate_slug("  --Hello   World--  ") == "hello-world"


@pytest.mark.asyncio
async def test_create_and_get_document(documents):
    created = await documents.create_document(
        snapshot("Body", title="My Post", keywords=["a", "b"]), author_id="author-1"
    )
    fetched = await documents.get_document(created.id)
    assert fetched.title == "My Post"
    assert fetched.slug == "my-post"
    assert fetched.keywords == ["a", "b"]
    assert fetched.author_id == "author-1"
    assert fetched.status == DocumentStatus.DRAFT
    assert fetched.version_count == 0


@pytest.mark.asyncio
async def test_get_missing_document_raises(documents):
    with pytest.raises(NotFoundError, match="not found"):
        await documents.get_document("missing")
    assert await documents.find_document("missing") is None


@pytest.mark.asyncio
async def test_overwrite_head_keeps_status(documents):
    doc = await documents.create_document(
        snapshot("Old", title="Old title", status=DocumentStatus.PUBLISHED)
    )
    updated = await documents.overwrite_head(
        doc.id, snapshot("New", title="New title", status=DocumentStatus.DRAFT)
    )
    assert updated.title == "New title"
    assert updated.content == "New"
    assert updated.status == DocumentStatus.PUBLISHED


@pytest.mark.asyncio
async def test_update_document_replaces_status(documents):
    doc = await documents.create_document(snapshot("Old"))
    updated = await documents.update_document(
        doc.id, snapshot("Old", status=DocumentStatus.IN_REVIEW)
    )
    assert updated.status == DocumentStatus.IN_REVIEW


@pytest.mark.asyncio
async def test_overwrite_missing_document_raises(documents):
    with pytest.raises(NotFoundError):
        await documents.overwrite_head("missing", snapshot("x"))


@pytest.mark.asyncio
async def test_list_documents(documents):
    await documents.create_document(snapshot("one", title="One"))
    await documents.create_document(snapshot("two", title="Two"))
    listed = await documents.list_documents()
    assert {d.title for d in listed} == {"One", "Two"}
