"""Pure diff and similarity functions between two versions.

Word-level counts are a length-delta approximation, not an alignment:
``added``/``removed`` are the growth or shrinkage in word count and
``modified`` is the shorter text's length. ``unified_content_diff`` gives a
real line diff for display; it is never stored.
"""

import difflib
import json
from typing import NamedTuple

from content_vcs.metrics.calculator import word_count
from content_vcs.models.comparison import COMPARED_FIELDS, ChangeType, FieldChange, VersionDiff
from content_vcs.models.version import DocumentVersion

_MAX_DIFF_LINES = 2000


class WordChanges(NamedTuple):
    """Word-count deltas between two contents."""

    added: int
    removed: int
    modified: int


def content_change(old_content: str, new_content: str) -> FieldChange:
    """Describe a content change by its absolute word-count delta."""
    return FieldChange(
        type=ChangeType.UNCHANGED if old_content == new_content else ChangeType.MODIFIED,
        old_value=old_content,
        new_value=new_content,
        length=abs(word_count(new_content) - word_count(old_content)),
    )


def _field_change(old_value: str | None, new_value: str | None) -> FieldChange:
    return FieldChange(type=ChangeType.MODIFIED, old_value=old_value, new_value=new_value)


def generate_diff(old: DocumentVersion, new: DocumentVersion) -> VersionDiff:
    """Per-field old-to-new diff; fields that are equal are left out."""
    diff = VersionDiff()
    if old.title != new.title:
        diff.title = _field_change(old.title, new.title)
    if old.content != new.content:
        diff.content = content_change(old.content, new.content)
    if old.meta_description != new.meta_description:
        diff.meta_description = _field_change(old.meta_description, new.meta_description)
    if old.excerpt != new.excerpt:
        diff.excerpt = _field_change(old.excerpt, new.excerpt)
    return diff


def changed_fields(old: DocumentVersion, new: DocumentVersion) -> list[str]:
    """Names of compared fields whose values differ.

    Keyword lists compare by serialized form, so order matters.
    """
    changed = []
    for field in COMPARED_FIELDS:
        old_value = getattr(old, field)
        new_value = getattr(new, field)
        if isinstance(old_value, tuple | list) and isinstance(new_value, tuple | list):
            if json.dumps(list(old_value)) != json.dumps(list(new_value)):
                changed.append(field)
        elif old_value != new_value:
            changed.append(field)
    return changed


def word_changes(old_content: str, new_content: str) -> WordChanges:
    """Approximate added, removed and modified word counts from lengths alone."""
    old_words = word_count(old_content)
    new_words = word_count(new_content)
    return WordChanges(
        added=max(0, new_words - old_words),
        removed=max(0, old_words - new_words),
        modified=min(old_words, new_words),
    )


def similarity(old_content: str, new_content: str) -> float:
    """Jaccard index of the two contents' lowercase token sets.

    Identical contents score 1, empty ones included.
    """
    if old_content == new_content:
        return 1.0
    old_tokens = set(old_content.lower().split())
    new_tokens = set(new_content.lower().split())
    union = old_tokens | new_tokens
    if not union:
        return 0.0
    return len(old_tokens & new_tokens) / len(union)


def unified_content_diff(old: DocumentVersion, new: DocumentVersion) -> str:
    """Line-level unified diff of two versions' content, for display."""
    lines = difflib.unified_diff(
        old.content.splitlines(keepends=True),
        new.content.splitlines(keepends=True),
        fromfile=old.version_number,
        tofile=new.version_number,
    )
    return "".join(list(lines)[:_MAX_DIFF_LINES])
