"""Version comparison models."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

# Fields reported by changed_fields, in reporting order
COMPARED_FIELDS: tuple[str, ...] = (
    "title",
    "content",
    "meta_description",
    "excerpt",
    "focus_keyword",
    "keywords",
)


class ChangeType(StrEnum):
    """Kind of change a field underwent between two versions."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"


class FieldChange(BaseModel):
    """Old and new value of one field.

    For content, ``length`` carries the absolute word-count delta.
    """

    type: ChangeType
    old_value: str | None = None
    new_value: str | None = None
    length: int | None = None


class VersionDiff(BaseModel):
    """Per-field diff between two versions. Equal fields are omitted."""

    title: FieldChange | None = None
    content: FieldChange | None = None
    meta_description: FieldChange | None = None
    excerpt: FieldChange | None = None

    def fields(self) -> list[str]:
        """Names of the fields present in this diff."""
        return [name for name, change in self if change is not None]


class Comparison(BaseModel):
    """A memoized, directional diff and similarity result for two versions."""

    id: str
    from_version_id: str
    to_version_id: str
    diff_summary: VersionDiff = Field(default_factory=VersionDiff)
    changed_fields: list[str] = Field(default_factory=list)
    added_words: int = 0
    removed_words: int = 0
    modified_words: int = 0
    similarity_score: float = Field(default=0.0, ge=0.0, le=1.0)
    compared_at: datetime | None = None
    compared_by: str | None = None
