"""Tests for the memoized comparison engine."""

import asyncio

import pytest

from content_vcs.exceptions import NotFoundError
from tests.conftest import snapshot


@pytest.mark.asyncio
async def test_compare_scenario(versions, comparisons, document):
    v1 = await versions.create_version(document.id, snapshot("hello world"))
    v2 = await versions.create_version(document.id, snapshot("hello world again"))
    comparison = await comparisons.compare_versions(v1.id, v2.id, compared_by="editor")

    assert comparison.added_words == 1
    assert comparison.removed_words == 0
    assert comparison.modified_words == 2
    assert comparison.similarity_score == pytest.approx(2 / 3)
    assert comparison.changed_fields == ["content"]
    assert comparison.diff_summary.fields() == ["content"]
    assert comparison.diff_summary.content.length == 1
    assert comparison.compared_by == "editor"


@pytest.mark.asyncio
async def test_comparison_is_memoized(db, versions, comparisons, document):
    v1 = await versions.create_version(document.id, snapshot("hello world"))
    v2 = await versions.create_version(document.id, snapshot("hello world again"))
    first = await comparisons.compare_versions(v1.id, v2.id)

    # Rewrite the source row behind the engine's back; the cached result must win
    await db.execute(
        "UPDATE document_versions SET content = ? WHERE id = ?", ("totally different", v2.id)
    )
    await db.commit()

    second = await comparisons.compare_versions(v1.id, v2.id)
    assert second.id == first.id
    assert second.similarity_score == first.similarity_score
    assert second.added_words == first.added_words


@pytest.mark.asyncio
async def test_comparison_is_directional(versions, comparisons, document):
    v1 = await versions.create_version(document.id, snapshot("hello world"))
    v2 = await versions.create_version(document.id, snapshot("hello world again"))
    forward = await comparisons.compare_versions(v1.id, v2.id)
    backward = await comparisons.compare_versions(v2.id, v1.id)

    assert forward.id != backward.id
    assert backward.added_words == 0
    assert backward.removed_words == 1
    assert backward.similarity_score == pytest.approx(forward.similarity_score)


@pytest.mark.asyncio
async def test_concurrent_comparisons_share_one_row(db, versions, comparisons, document):
    v1 = await versions.create_version(document.id, snapshot("hello world"))
    v2 = await versions.create_version(document.id, snapshot("hello there"))
    results = await asyncio.gather(
        *(comparisons.compare_versions(v1.id, v2.id) for _ in range(4))
    )
    assert len({c.id for c in results}) == 1

    cursor = await db.execute("SELECT COUNT(*) FROM version_comparisons")
    row = await cursor.fetchone()
    assert row[0] == 1


@pytest.mark.asyncio
async def test_compare_missing_version(versions, comparisons, document):
    v1 = await versions.create_version(document.id, snapshot("hello"))
    with pytest.raises(NotFoundError, match="missing"):
        await comparisons.compare_versions(v1.id, "missing")
    with pytest.raises(NotFoundError, match="missing"):
        await comparisons.compare_versions("missing", v1.id)
    assert await comparisons.get_comparison(v1.id, "missing") is None


@pytest.mark.asyncio
async def test_identical_versions(versions, comparisons, document):
    v1 = await versions.create_version(document.id, snapshot("same words here"))
    v2 = await versions.create_version(document.id, snapshot("same words here"))
    comparison = await comparisons.compare_versions(v1.id, v2.id)
    assert comparison.changed_fields == []
    assert comparison.similarity_score == 1.0
    assert comparison.added_words == comparison.removed_words == 0


@pytest.mark.asyncio
async def test_identical_empty_contents_score_one(versions, comparisons, document):
    v1 = await versions.create_version(document.id, snapshot(""))
    v2 = await versions.create_version(document.id, snapshot(""))
    comparison = await comparisons.compare_versions(v1.id, v2.id)
    assert comparison.similarity_score == 1.0
    assert comparison.changed_fields == []
