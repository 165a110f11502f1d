"""Document repository: the live head each version history hangs off."""

import json
import logging
import re

from content_vcs.db.backend import Database
from content_vcs.db.queries import new_id, now_iso, row_to_document
from content_vcs.exceptions import NotFoundError
from content_vcs.models.document import ContentSnapshot, Document

logger = logging.getLogger(__name__)

_SLUG_STRIP_RE = re.compile(r"[^a-z0-9\s-]")
_SLUG_SEP_RE = re.compile(r"[\s-]+")

# Head fields a non-preserving rollback restores; status stays as it is
_HEAD_FIELDS = ("title", "content", "meta_description", "excerpt", "focus_keyword", "keywords")


def generate_slug(title: str) -> str:
    """URL slug from a title: lowercase, alphanumerics joined by hyphens."""
    slug = _SLUG_STRIP_RE.sub("", title.lower())
    return _SLUG_SEP_RE.sub("-", slug).strip("-")


class DocumentStore:
    """Create, read and update base documents."""

    def __init__(self, db: Database) -> None:
        """Initialize with a database connection."""
        self.db = db

    async def create_document(
        self,
        snapshot: ContentSnapshot,
        author_id: str | None = None,
    ) -> Document:
        """Insert a new document with no versions yet."""
        now = now_iso()
        doc_id = new_id()
        await self.db.execute(
            """INSERT INTO documents
            (id, slug, title, content, meta_description, excerpt, status, focus_keyword,
             keywords, author_id, version_count, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 0, ?, ?)""",
            (
                doc_id,
                generate_slug(snapshot.title),
                snapshot.title,
                snapshot.content,
                snapshot.meta_description,
                snapshot.excerpt,
                snapshot.status.value,
                snapshot.focus_keyword,
                json.dumps(snapshot.keywords),
                author_id,
                now,
                now,
            ),
        )
        await self.db.commit()
        logger.info("Created document %s: %s", doc_id, snapshot.title)
        return await self.get_document(doc_id)

    async def find_document(self, document_id: str) -> Document | None:
        """Get a document by ID, or None."""
        cursor = await self.db.execute("SELECT * FROM documents WHERE id = ?", (document_id,))
        row = await cursor.fetchone()
        return row_to_document(row) if row else None

    async def get_document(self, document_id: str) -> Document:
        """Get a document by ID, raising NotFoundError if absent."""
        document = await self.find_document(document_id)
        if document is None:
            raise NotFoundError(f"Document {document_id} not found")
        return document

    async def list_documents(self, limit: int = 50) -> list[Document]:
        """Most recently updated documents first."""
        cursor = await self.db.execute(
            "SELECT * FROM documents ORDER BY updated_at DESC LIMIT ?", (limit,)
        )
        return [row_to_document(row) for row in await cursor.fetchall()]

    async def update_document(self, document_id: str, snapshot: ContentSnapshot) -> Document:
        """Replace every head field, status included."""
        await self._write_head(document_id, snapshot, include_status=True)
        logger.info("Updated document %s", document_id)
        return await self.get_document(document_id)

    async def overwrite_head(self, document_id: str, snapshot: ContentSnapshot) -> Document:
        """Restore head content fields from a snapshot, leaving status untouched."""
        await self._write_head(document_id, snapshot, include_status=False)
        logger.info("Overwrote head of document %s", document_id)
        return await self.get_document(document_id)

    async def _write_head(
        self, document_id: str, snapshot: ContentSnapshot, *, include_status: bool
    ) -> None:
        values = snapshot.model_dump(include=set(_HEAD_FIELDS))
        values["keywords"] = json.dumps(values["keywords"])
        columns = list(_HEAD_FIELDS)
        if include_status:
            columns.append("status")
            values["status"] = snapshot.status.value

        assignments = ", ".join(f"{col} = ?" for col in columns)
        cursor = await self.db.execute(
            f"UPDATE documents SET {assignments}, updated_at = ? WHERE id = ?",  # noqa: S608
            [*(values[col] for col in columns), now_iso(), document_id],
        )
        if cursor.rowcount == 0:
            raise NotFoundError(f"Document {document_id} not found")
        await self.db.commit()

