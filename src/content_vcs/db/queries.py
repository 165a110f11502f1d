"""Row conversion and shared query helpers.

Every record read from the store passes through one of the ``row_to_*``
converters, which validate column values into the typed models.
"""

import json
import uuid
from datetime import UTC, datetime

from content_vcs.db.backend import Row
from content_vcs.models.branch import Branch
from content_vcs.models.comparison import Comparison, VersionDiff
from content_vcs.models.document import Document, DocumentStatus
from content_vcs.models.version import DocumentVersion

VERSION_COLUMNS = (
    "id, document_id, version_number, branch_id, title, content, meta_description,"
    " excerpt, status, focus_keyword, keywords, keyword_density, word_count, seo_score,"
    " readability_score, change_summary, created_at, created_by"
)


def new_id() -> str:
    """Generate an opaque, never-reused record identifier."""
    return uuid.uuid4().hex


def now_iso() -> str:
    """Current UTC time in the stored timestamp format."""
    return datetime.now(UTC).isoformat()


def format_version_number(seq: int) -> str:
    """Display label for the ``seq``-th version of a document."""
    return f"v{seq}.0"


def _parse_dt(raw: str | None) -> datetime | None:
    return datetime.fromisoformat(raw) if raw else None


def _parse_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [str(item) for item in json.loads(raw)]


def row_to_document(row: Row) -> Document:
    """Convert a database row to a Document."""
    return Document(
        id=row["id"],
        slug=row["slug"],
        title=row["title"],
        content=row["content"],
        meta_description=row["meta_description"],
        excerpt=row["excerpt"],
        status=DocumentStatus(row["status"]),
        focus_keyword=row["focus_keyword"],
        keywords=_parse_list(row["keywords"]),
        author_id=row["author_id"],
        version_count=row["version_count"],
        created_at=_parse_dt(row["created_at"]),
        updated_at=_parse_dt(row["updated_at"]),
    )


def row_to_version(row: Row) -> DocumentVersion:
    """Convert a database row to a DocumentVersion."""
    return DocumentVersion(
        id=row["id"],
        document_id=row["document_id"],
        version_number=row["version_number"],
        branch_id=row["branch_id"],
        title=row["title"],
        content=row["content"],
        meta_description=row["meta_description"],
        excerpt=row["excerpt"],
        status=DocumentStatus(row["status"]),
        focus_keyword=row["focus_keyword"],
        keywords=tuple(_parse_list(row["keywords"])),
        keyword_density=row["keyword_density"],
        word_count=row["word_count"],
        seo_score=row["seo_score"],
        readability_score=row["readability_score"],
        change_summary=row["change_summary"],
        created_at=_parse_dt(row["created_at"]),
        created_by=row["created_by"],
    )


def row_to_branch(row: Row) -> Branch:
    """Convert a database row to a Branch."""
    return Branch(
        id=row["id"],
        document_id=row["document_id"],
        name=row["name"],
        description=row["description"],
        created_from=row["created_from"],
        is_main=bool(row["is_main"]),
        is_active=bool(row["is_active"]),
        created_at=_parse_dt(row["created_at"]),
        created_by=row["created_by"],
        merged_at=_parse_dt(row["merged_at"]),
        merged_by=row["merged_by"],
        merged_into=row["merged_into"],
    )


def row_to_comparison(row: Row) -> Comparison:
    """Convert a database row to a Comparison."""
    return Comparison(
        id=row["id"],
        from_version_id=row["from_version_id"],
        to_version_id=row["to_version_id"],
        diff_summary=VersionDiff.model_validate_json(row["diff_summary"]),
        changed_fields=_parse_list(row["changed_fields"]),
        added_words=row["added_words"],
        removed_words=row["removed_words"],
        modified_words=row["modified_words"],
        similarity_score=row["similarity_score"],
        compared_at=_parse_dt(row["compared_at"]),
        compared_by=row["compared_by"],
    )
