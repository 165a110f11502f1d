"""Tests for branch lifecycle."""

import asyncio

import pytest

from content_vcs.exceptions import InvalidStateError, NotFoundError
from tests.conftest import snapshot


@pytest.mark.asyncio
async def test_get_or_create_is_idempotent(branches, document):
    first = await branches.get_or_create_branch(document.id, "draft", description="Drafts")
    second = await branches.get_or_create_branch(document.id, "draft", description="Other")
    assert first.id == second.id
    assert second.description == "Drafts"
    assert first.is_active is True
    assert first.is_merged is False


@pytest.mark.asyncio
async def test_concurrent_get_or_create_returns_one_branch(branches, document):
    results = await asyncio.gather(
        *(branches.get_or_create_branch(document.id, "draft") for _ in range(5))
    )
    assert len({b.id for b in results}) == 1
    assert len(await branches.list_branches(document.id)) == 1


@pytest.mark.asyncio
async def test_main_branch_flag(branches, document):
    main = await branches.get_or_create_branch(document.id, "main")
    other = await branches.get_or_create_branch(document.id, "feature")
    assert main.is_main is True
    assert other.is_main is False


@pytest.mark.asyncio
async def test_same_name_on_different_documents(branches, documents, document):
    other_doc = await documents.create_document(snapshot("Other"))
    a = await branches.get_or_create_branch(document.id, "draft")
    b = await branches.get_or_create_branch(other_doc.id, "draft")
    assert a.id != b.id


@pytest.mark.asyncio
async def test_find_and_get_branch(branches, document):
    created = await branches.get_or_create_branch(document.id, "draft")
    assert (await branches.find_branch(document.id, "draft")).id == created.id
    assert await branches.find_branch(document.id, "missing") is None
    assert (await branches.get_branch(created.id)).name == "draft"
    with pytest.raises(NotFoundError):
        await branches.get_branch("missing")


@pytest.mark.asyncio
async def test_mark_merged_sets_markers(branches, document):
    main = await branches.get_or_create_branch(document.id, "main")
    draft = await branches.get_or_create_branch(document.id, "draft")
    merged = await branches.mark_merged(draft.id, main.id, merged_by="editor")
    assert merged.is_active is False
    assert merged.merged_into == main.id
    assert merged.merged_by == "editor"
    assert merged.merged_at is not None
    assert merged.is_merged


@pytest.mark.asyncio
async def test_mark_merged_twice_raises(branches, document):
    main = await branches.get_or_create_branch(document.id, "main")
    draft = await branches.get_or_create_branch(document.id, "draft")
    await branches.mark_merged(draft.id, main.id)
    with pytest.raises(InvalidStateError, match="already merged"):
        await branches.mark_merged(draft.id, main.id)


@pytest.mark.asyncio
async def test_mark_merged_missing_branch(branches):
    with pytest.raises(NotFoundError):
        await branches.mark_merged("missing", "other")
