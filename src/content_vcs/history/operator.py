"""Rollback and merge, expressed as new versions rather than mutation."""

import logging
import time

from content_vcs.compare.engine import ComparisonEngine
from content_vcs.exceptions import InvalidArgumentError, InvalidStateError, NotFoundError
from content_vcs.models.version import CreateVersionOptions, DocumentVersion, RollbackOptions
from content_vcs.store.branch_manager import BranchManager
from content_vcs.store.document_store import DocumentStore
from content_vcs.store.version_store import VersionStore

logger = logging.getLogger(__name__)


def rollback_summary(target: DocumentVersion) -> str:
    """Change summary recorded on a rollback version."""
    return f"Rollback to version {target.version_number}"


class HistoryOperator:
    """Replays past or branched content onto a line as a fresh version."""

    def __init__(
        self,
        documents: DocumentStore,
        versions: VersionStore,
        branches: BranchManager,
        comparisons: ComparisonEngine,
    ) -> None:
        """Initialize with the stores and engine it orchestrates."""
        self.documents = documents
        self.versions = versions
        self.branches = branches
        self.comparisons = comparisons
        self.db = versions.db

    async def rollback_to_version(
        self,
        document_id: str,
        target_version_id: str,
        options: RollbackOptions | None = None,
    ) -> DocumentVersion:
        """Create a new version whose snapshot is copied from ``target_version_id``.

        With ``create_branch`` the copy lands on a new (or named) branch
        rooted at the target. Otherwise it lands on the default line and,
        unless ``preserve_current`` is set, the document head is overwritten
        with the target's content. No existing version is touched.
        """
        options = options or RollbackOptions()
        await self.documents.get_document(document_id)

        target = await self.versions.find_version(target_version_id)
        if target is None:
            raise NotFoundError(f"Version {target_version_id} not found")
        if target.document_id != document_id:
            raise InvalidArgumentError(
                f"Version {target_version_id} does not belong to document {document_id}"
            )

        summary = rollback_summary(target)
        async with self.db.transaction():
            new_version = await self._record_rollback(document_id, target, summary, options)

        logger.info(
            "Rolled back document %s to %s as %s",
            document_id,
            target.version_number,
            new_version.version_number,
        )
        return new_version

    async def _record_rollback(
        self,
        document_id: str,
        target: DocumentVersion,
        summary: str,
        options: RollbackOptions,
    ) -> DocumentVersion:
        if options.create_branch:
            branch_name = options.branch_name or f"rollback-{int(time.time() * 1000)}"
            new_version = await self.versions.create_version(
                document_id,
                target.snapshot(),
                CreateVersionOptions(
                    branch_name=branch_name,
                    create_branch=True,
                    from_version=target.id,
                    change_summary=summary,
                    created_by=options.created_by,
                ),
            )
        else:
            new_version = await self.versions.create_version(
                document_id,
                target.snapshot(),
                CreateVersionOptions(change_summary=summary, created_by=options.created_by),
            )
            if not options.preserve_current:
                await self.documents.overwrite_head(document_id, target.snapshot())
        return new_version

    async def merge_branches(
        self,
        source_branch_id: str,
        target_branch_id: str,
        message: str | None = None,
        *,
        merged_by: str | None = None,
    ) -> DocumentVersion:
        """Fold the source branch's latest version into the target branch.

        Last writer wins: the source snapshot fully replaces the target
        line's content, with no field-by-field reconciliation. The source
        branch is claimed (marked merged) before the merge version is written,
        in the same transaction, so of two racing merges the loser fails with
        InvalidStateError without leaving a version behind.
        """
        source = await self.branches.get_branch(source_branch_id)
        target = await self.branches.get_branch(target_branch_id)
        if source.id == target.id:
            raise InvalidArgumentError(f"Cannot merge branch {source.name!r} into itself")
        if source.document_id != target.document_id:
            raise InvalidArgumentError(
                f"Branches {source.name!r} and {target.name!r} belong to different documents"
            )

        async with self.db.transaction():
            latest = await self.versions.get_latest_version(source.document_id, source.id)
            if latest is None:
                raise InvalidStateError(f"Branch {source.name!r} has no versions to merge")
            previous_head = await self.versions.get_latest_version(target.document_id, target.id)

            await self.branches.mark_merged(source.id, target.id, merged_by=merged_by)
            merge_version = await self.versions.create_version(
                source.document_id,
                latest.snapshot(),
                CreateVersionOptions(
                    branch_name=target.name,
                    change_summary=message or f"Merge {source.name} into {target.name}",
                    created_by=merged_by,
                ),
            )

        if previous_head is not None:
            audit = await self.comparisons.compare_versions(
                previous_head.id, merge_version.id, compared_by=merged_by
            )
            logger.info(
                "Merged %r into %r as %s (similarity to previous head %.2f)",
                source.name,
                target.name,
                merge_version.version_number,
                audit.similarity_score,
            )
        else:
            logger.info(
                "Merged %r into %r as %s", source.name, target.name, merge_version.version_number
            )
        return merge_version
