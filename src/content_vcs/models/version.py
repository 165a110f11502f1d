"""Document version models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from content_vcs.models.document import ContentSnapshot, DocumentStatus


class VersionMetrics(BaseModel):
    """Scores derived once from a snapshot when its version is created."""

    keyword_density: float | None = None
    word_count: int = 0
    seo_score: float | None = Field(default=None, ge=0.0, le=100.0)
    readability_score: float = Field(default=0.0, ge=0.0)


class DocumentVersion(BaseModel):
    """An immutable, scored snapshot of a document at one point in history."""

    model_config = ConfigDict(frozen=True)

    id: str
    document_id: str
    version_number: str
    branch_id: str | None = None

    title: str
    content: str
    meta_description: str | None = None
    excerpt: str | None = None
    status: DocumentStatus = DocumentStatus.DRAFT
    focus_keyword: str | None = None
    keywords: tuple[str, ...] = ()

    keyword_density: float | None = None
    word_count: int = 0
    seo_score: float | None = Field(default=None, ge=0.0, le=100.0)
    readability_score: float = Field(default=0.0, ge=0.0)

    change_summary: str | None = None
    created_at: datetime | None = None
    created_by: str | None = None

    def snapshot(self) -> ContentSnapshot:
        """Copy the payload so it can be replayed as a new version."""
        return ContentSnapshot(
            title=self.title,
            content=self.content,
            meta_description=self.meta_description,
            excerpt=self.excerpt,
            status=self.status,
            focus_keyword=self.focus_keyword,
            keywords=list(self.keywords),
        )


class CreateVersionOptions(BaseModel):
    """Branch targeting and annotation for a new version."""

    branch_name: str | None = None
    create_branch: bool = False
    from_version: str | None = None
    change_summary: str | None = None
    created_by: str | None = None


class RollbackOptions(BaseModel):
    """How a rollback should be recorded."""

    create_branch: bool = False
    branch_name: str | None = None
    preserve_current: bool = False
    created_by: str | None = None
