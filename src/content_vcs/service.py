"""ContentVersioning: one entry point wiring the versioning components."""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from content_vcs.compare.engine import ComparisonEngine
from content_vcs.db.backend import Database
from content_vcs.history.operator import HistoryOperator
from content_vcs.models.branch import Branch
from content_vcs.models.comparison import Comparison
from content_vcs.models.document import ContentSnapshot, Document
from content_vcs.models.version import CreateVersionOptions, DocumentVersion, RollbackOptions
from content_vcs.store.branch_manager import BranchManager
from content_vcs.store.document_store import DocumentStore
from content_vcs.store.version_store import VersionStore, coerce_snapshot

logger = logging.getLogger(__name__)


class BranchHistory(BaseModel):
    """A branch together with its versions, oldest first."""

    branch: Branch
    versions: list[DocumentVersion]


class ContentVersioning:
    """Application-facing facade over documents, versions, branches and comparisons."""

    def __init__(self, db: Database) -> None:
        """Build every component over one database connection."""
        self.db = db
        self.documents = DocumentStore(db)
        self.branches = BranchManager(db)
        self.versions = VersionStore(db, self.documents, self.branches)
        self.comparisons = ComparisonEngine(db, self.versions)
        self.history = HistoryOperator(
            self.documents, self.versions, self.branches, self.comparisons
        )

    async def create_document(
        self,
        snapshot: ContentSnapshot | Mapping[str, Any],
        author_id: str | None = None,
    ) -> tuple[Document, DocumentVersion]:
        """Create a document and record its initial version."""
        snapshot = coerce_snapshot(snapshot)
        async with self.db.transaction():
            document = await self.documents.create_document(snapshot, author_id=author_id)
            version = await self.versions.create_version(
                document.id,
                snapshot,
                CreateVersionOptions(change_summary="Initial version", created_by=author_id),
            )
        return await self.documents.get_document(document.id), version

    async def update_document(
        self,
        document_id: str,
        changes: Mapping[str, Any],
        change_summary: str | None = None,
        updated_by: str | None = None,
    ) -> tuple[Document, DocumentVersion]:
        """Apply field changes to the document head and record them as a version."""
        current = await self.documents.get_document(document_id)
        merged = current.snapshot().model_dump()
        merged.update({key: value for key, value in changes.items() if value is not None})
        snapshot = coerce_snapshot(merged)

        async with self.db.transaction():
            await self.documents.update_document(document_id, snapshot)
            version = await self.versions.create_version(
                document_id,
                snapshot,
                CreateVersionOptions(
                    change_summary=change_summary or "Content updated", created_by=updated_by
                ),
            )
        return await self.documents.get_document(document_id), version

    async def get_document(self, document_id: str) -> Document:
        """Get a document head by ID."""
        return await self.documents.get_document(document_id)

    async def create_version(
        self,
        document_id: str,
        snapshot: ContentSnapshot | Mapping[str, Any],
        options: CreateVersionOptions | None = None,
    ) -> DocumentVersion:
        """Append a version to a document's history."""
        return await self.versions.create_version(document_id, snapshot, options)

    async def get_versions(
        self, document_id: str, branch_name: str | None = None
    ) -> list[DocumentVersion]:
        """Versions of a document, newest first."""
        return await self.versions.get_versions(document_id, branch_name)

    async def get_version(self, version_id: str) -> DocumentVersion:
        """Get one version by ID."""
        return await self.versions.get_version(version_id)

    async def compare_versions(
        self, from_version_id: str, to_version_id: str, compared_by: str | None = None
    ) -> Comparison:
        """Directional, cached comparison of two versions."""
        return await self.comparisons.compare_versions(
            from_version_id, to_version_id, compared_by=compared_by
        )

    async def rollback_to_version(
        self,
        document_id: str,
        target_version_id: str,
        options: RollbackOptions | None = None,
    ) -> DocumentVersion:
        """Replay a past version as a new one."""
        return await self.history.rollback_to_version(document_id, target_version_id, options)

    async def create_branch(
        self,
        document_id: str,
        name: str,
        from_version: str | None = None,
        description: str | None = None,
        created_by: str | None = None,
    ) -> Branch:
        """Get or create a named branch on a document."""
        await self.documents.get_document(document_id)
        return await self.branches.get_or_create_branch(
            document_id, name, from_version, description=description, created_by=created_by
        )

    async def list_branches(self, document_id: str) -> list[Branch]:
        """Branches of a document, oldest first."""
        return await self.branches.list_branches(document_id)

    async def merge_branches(
        self,
        source_branch_id: str,
        target_branch_id: str,
        message: str | None = None,
        merged_by: str | None = None,
    ) -> DocumentVersion:
        """Fold one branch into another as a new version."""
        return await self.history.merge_branches(
            source_branch_id, target_branch_id, message, merged_by=merged_by
        )

    async def branch_structure(self, document_id: str) -> list[BranchHistory]:
        """Each branch of a document with its versions in creation order."""
        structure = []
        for branch in await self.branches.list_branches(document_id):
            versions = await self.versions.get_branch_versions(branch.id)
            structure.append(BranchHistory(branch=branch, versions=list(reversed(versions))))
        return structure
