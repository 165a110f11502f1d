"""Version history: append-only, scored snapshots of a document."""

import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from content_vcs.db.backend import Database
from content_vcs.db.queries import (
    VERSION_COLUMNS,
    format_version_number,
    new_id,
    now_iso,
    row_to_version,
)
from content_vcs.exceptions import InvalidArgumentError, NotFoundError
from content_vcs.metrics.calculator import score_snapshot
from content_vcs.models.document import ContentSnapshot
from content_vcs.models.version import CreateVersionOptions, DocumentVersion
from content_vcs.store.branch_manager import BranchManager
from content_vcs.store.document_store import DocumentStore

logger = logging.getLogger(__name__)

# version_seq followed by VERSION_COLUMNS
_VERSION_PLACEHOLDERS = ", ".join("?" * (len(VERSION_COLUMNS.split(",")) + 1))


def coerce_snapshot(snapshot: ContentSnapshot | Mapping[str, Any]) -> ContentSnapshot:
    """Validate caller-supplied snapshot data at the storage boundary."""
    if isinstance(snapshot, ContentSnapshot):
        return snapshot
    try:
        return ContentSnapshot.model_validate(dict(snapshot))
    except ValidationError as exc:
        raise InvalidArgumentError(f"Malformed content snapshot: {exc}") from exc


class VersionStore:
    """Create and read immutable version records.

    Nothing here updates or deletes a version row. Edits, rollbacks and
    merges all append new versions.
    """

    def __init__(self, db: Database, documents: DocumentStore, branches: BranchManager) -> None:
        """Initialize with a database connection and the stores it consults."""
        self.db = db
        self.documents = documents
        self.branches = branches

    async def create_version(
        self,
        document_id: str,
        snapshot: ContentSnapshot | Mapping[str, Any],
        options: CreateVersionOptions | None = None,
    ) -> DocumentVersion:
        """Score a snapshot and append it to the document's history.

        The version number comes from an atomic per-document counter, so
        labels stay strictly monotonic even when creations race. With
        ``branch_name`` or ``create_branch`` set, the version is tagged onto
        that branch (get-or-create, branched from ``from_version``).
        """
        snapshot = coerce_snapshot(snapshot)
        options = options or CreateVersionOptions()
        await self.documents.get_document(document_id)
        metrics = score_snapshot(snapshot)
        version_id = new_id()

        # Counter bump, branch and row land together or not at all
        async with self.db.transaction():
            seq = await self._next_version_seq(document_id)
            version_number = format_version_number(seq)

            branch_id: str | None = None
            if options.branch_name or options.create_branch:
                branch_name = options.branch_name or f"version-{version_number}"
                branch = await self.branches.get_or_create_branch(
                    document_id,
                    branch_name,
                    options.from_version,
                    created_by=options.created_by,
                )
                branch_id = branch.id

            await self.db.execute(
                f"""INSERT INTO document_versions (version_seq, {VERSION_COLUMNS})
                VALUES ({_VERSION_PLACEHOLDERS})""",  # noqa: S608
                (
                    seq,
                    version_id,
                    document_id,
                    version_number,
                    branch_id,
                    snapshot.title,
                    snapshot.content,
                    snapshot.meta_description,
                    snapshot.excerpt,
                    snapshot.status.value,
                    snapshot.focus_keyword,
                    json.dumps(snapshot.keywords),
                    metrics.keyword_density,
                    metrics.word_count,
                    metrics.seo_score,
                    metrics.readability_score,
                    options.change_summary,
                    now_iso(),
                    options.created_by,
                ),
            )

        logger.info(
            "Created %s of document %s (branch=%s, words=%d)",
            version_number,
            document_id,
            branch_id,
            metrics.word_count,
        )
        return await self.get_version(version_id)

    async def _next_version_seq(self, document_id: str) -> int:
        """Reserve the next 1-based version sequence number for a document."""
        cursor = await self.db.execute(
            """UPDATE documents SET version_count = version_count + 1
            WHERE id = ? RETURNING version_count""",
            (document_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            raise NotFoundError(f"Document {document_id} not found")
        return int(row[0])

    async def get_versions(
        self, document_id: str, branch_name: str | None = None
    ) -> list[DocumentVersion]:
        """All versions of a document, newest first, optionally for one branch.

        An unknown branch yields an empty list rather than an error.
        """
        if branch_name is None:
            cursor = await self.db.execute(
                f"""SELECT {VERSION_COLUMNS} FROM document_versions
                WHERE document_id = ?
                ORDER BY created_at DESC, version_seq DESC""",  # noqa: S608
                (document_id,),
            )
            return [row_to_version(row) for row in await cursor.fetchall()]

        branch = await self.branches.find_branch(document_id, branch_name)
        if branch is None:
            return []
        return await self.get_branch_versions(branch.id)

    async def get_branch_versions(self, branch_id: str) -> list[DocumentVersion]:
        """Versions tagged with a branch, newest first."""
        cursor = await self.db.execute(
            f"""SELECT {VERSION_COLUMNS} FROM document_versions
            WHERE branch_id = ?
            ORDER BY created_at DESC, version_seq DESC""",  # noqa: S608
            (branch_id,),
        )
        return [row_to_version(row) for row in await cursor.fetchall()]

    async def find_version(self, version_id: str) -> DocumentVersion | None:
        """Get a version by ID, or None."""
        cursor = await self.db.execute(
            f"SELECT {VERSION_COLUMNS} FROM document_versions WHERE id = ?",  # noqa: S608
            (version_id,),
        )
        row = await cursor.fetchone()
        return row_to_version(row) if row else None

    async def get_version(self, version_id: str) -> DocumentVersion:
        """Get a version by ID, raising NotFoundError if absent."""
        version = await self.find_version(version_id)
        if version is None:
            raise NotFoundError(f"Version {version_id} not found")
        return version

    async def get_latest_version(
        self, document_id: str, branch_id: str | None = None
    ) -> DocumentVersion | None:
        """Most recently created version of a document or of one of its branches."""
        if branch_id is None:
            sql = f"""SELECT {VERSION_COLUMNS} FROM document_versions
                WHERE document_id = ?
                ORDER BY created_at DESC, version_seq DESC LIMIT 1"""  # noqa: S608
            params: tuple[str, ...] = (document_id,)
        else:
            sql = f"""SELECT {VERSION_COLUMNS} FROM document_versions
                WHERE document_id = ? AND branch_id = ?
                ORDER BY created_at DESC, version_seq DESC LIMIT 1"""  # noqa: S608
            params = (document_id, branch_id)
        cursor = await self.db.execute(sql, params)
        row = await cursor.fetchone()
        return row_to_version(row) if row else None

    async def count_versions(self, document_id: str) -> int:
        """Number of versions recorded for a document."""
        cursor = await self.db.execute(
            "SELECT COUNT(*) FROM document_versions WHERE document_id = ?", (document_id,)
        )
        row = await cursor.fetchone()
        return int(row[0]) if row else 0
