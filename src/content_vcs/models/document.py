"""Document and content snapshot models."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class DocumentStatus(StrEnum):
    """Publishing state of a document or version snapshot."""

    DRAFT = "DRAFT"
    PENDING_REVIEW = "PENDING_REVIEW"
    IN_REVIEW = "IN_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"
    SCHEDULED = "SCHEDULED"
    UNPUBLISHED = "UNPUBLISHED"


class ContentSnapshot(BaseModel):
    """The versioned payload of a document: text fields plus SEO targeting."""

    title: str
    content: str
    meta_description: str | None = None
    excerpt: str | None = None
    status: DocumentStatus = DocumentStatus.DRAFT
    focus_keyword: str | None = None
    keywords: list[str] = Field(default_factory=list)


class Document(ContentSnapshot):
    """The live head of a piece of content, owned by the document store."""

    id: str
    slug: str
    author_id: str | None = None
    version_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def snapshot(self) -> ContentSnapshot:
        """Return the document's current content as a snapshot."""
        return ContentSnapshot.model_validate(
            self.model_dump(include=set(ContentSnapshot.model_fields))
        )
