"""Tests for branch merge."""

import asyncio

import pytest

from content_vcs.exceptions import InvalidArgumentError, InvalidStateError
from content_vcs.models.version import CreateVersionOptions
from tests.conftest import snapshot


async def _main_and_draft(versions, branches, document):
    main = await branches.get_or_create_branch(document.id, "main")
    base = await versions.create_version(
        document.id, snapshot("main body"), CreateVersionOptions(branch_name="main")
    )
    await versions.create_version(
        document.id,
        snapshot("draft body", title="Draft title"),
        CreateVersionOptions(branch_name="draft", from_version=base.id),
    )
    draft = await branches.find_branch(document.id, "draft")
    return main, draft, base


@pytest.mark.asyncio
async def test_merge_copies_source_head_onto_target(history, versions, branches, document):
    main, draft, _ = await _main_and_draft(versions, branches, document)
    merged = await history.merge_branches(draft.id, main.id, merged_by="editor")

    assert merged.branch_id == main.id
    assert merged.content == "draft body"
    assert merged.title == "Draft title"
    assert merged.change_summary == "Merge draft into main"
    assert merged.created_by == "editor"
    assert merged.version_number == "v3.0"

    retired = await branches.get_branch(draft.id)
    assert retired.is_active is False
    assert retired.merged_into == main.id
    assert retired.merged_by == "editor"

    main_line = await versions.get_versions(document.id, "main")
    assert main_line[0].id == merged.id


@pytest.mark.asyncio
async def test_merge_custom_message(history, versions, branches, document):
    main, draft, _ = await _main_and_draft(versions, branches, document)
    merged = await history.merge_branches(draft.id, main.id, "Ship the draft")
    assert merged.change_summary == "Ship the draft"


@pytest.mark.asyncio
async def test_merge_records_audit_comparison(history, comparisons, versions, branches, document):
    main, draft, base = await _main_and_draft(versions, branches, document)
    merged = await history.merge_branches(draft.id, main.id)
    audit = await comparisons.get_comparison(base.id, merged.id)
    assert audit is not None
    assert "content" in audit.changed_fields


@pytest.mark.asyncio
async def test_merge_twice_raises(history, versions, branches, document):
    main, draft, _ = await _main_and_draft(versions, branches, document)
    await history.merge_branches(draft.id, main.id)
    with pytest.raises(InvalidStateError, match="already merged"):
        await history.merge_branches(draft.id, main.id)
    assert len(await versions.get_versions(document.id, "main")) == 2


@pytest.mark.asyncio
async def test_merge_empty_source_raises(history, versions, branches, document):
    main = await branches.get_or_create_branch(document.id, "main")
    empty = await branches.get_or_create_branch(document.id, "empty")
    with pytest.raises(InvalidStateError, match="no versions"):
        await history.merge_branches(empty.id, main.id)
    assert await versions.count_versions(document.id) == 0
    assert (await branches.get_branch(empty.id)).is_merged is False


@pytest.mark.asyncio
async def test_merge_into_empty_target(history, versions, branches, document):
    target = await branches.get_or_create_branch(document.id, "release")
    await versions.create_version(
        document.id, snapshot("feature body"), CreateVersionOptions(branch_name="feature")
    )
    feature = await branches.find_branch(document.id, "feature")
    merged = await history.merge_branches(feature.id, target.id)
    assert merged.branch_id == target.id
    assert merged.content == "feature body"


@pytest.mark.asyncio
async def test_merge_into_itself_raises(history, versions, branches, document):
    main, _, _ = await _main_and_draft(versions, branches, document)
    with pytest.raises(InvalidArgumentError):
        await history.merge_branches(main.id, main.id)


@pytest.mark.asyncio
async def test_merge_across_documents_raises(history, versions, branches, documents, document):
    main, _, _ = await _main_and_draft(versions, branches, document)
    other = await documents.create_document(snapshot("other"))
    await versions.create_version(
        other.id, snapshot("other draft"), CreateVersionOptions(branch_name="draft")
    )
    foreign = await branches.find_branch(other.id, "draft")
    with pytest.raises(InvalidArgumentError, match="different documents"):
        await history.merge_branches(foreign.id, main.id)


@pytest.mark.asyncio
async def test_concurrent_merges_write_one_version(history, versions, branches, document):
    """Of two racing merges of one branch, the loser fails without writing."""
    main, draft, _ = await _main_and_draft(versions, branches, document)
    results = await asyncio.gather(
        history.merge_branches(draft.id, main.id),
        history.merge_branches(draft.id, main.id),
        return_exceptions=True,
    )

    assert sorted(type(r).__name__ for r in results) == ["DocumentVersion", "InvalidStateError"]
    main_line = await versions.get_versions(document.id, "main")
    merges = [v for v in main_line if v.change_summary == "Merge draft into main"]
    assert len(merges) == 1
    assert await versions.count_versions(document.id) == 3


@pytest.mark.asyncio
async def test_failed_merge_leaves_source_unmerged(
    history, versions, branches, document, monkeypatch
):
    main, draft, _ = await _main_and_draft(versions, branches, document)

    async def broken_create_version(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(versions, "create_version", broken_create_version)
    with pytest.raises(RuntimeError):
        await history.merge_branches(draft.id, main.id)

    assert (await branches.get_branch(draft.id)).is_merged is False
    monkeypatch.undo()
    merged = await history.merge_branches(draft.id, main.id)
    assert merged.content == "draft body"
