"""Branch lifecycle: get-or-create, lookup, and merge markers."""

import logging

from content_vcs.db.backend import Database
from content_vcs.db.queries import new_id, now_iso, row_to_branch
from content_vcs.exceptions import InvalidStateError, NotFoundError
from content_vcs.models.branch import MAIN_BRANCH, Branch

logger = logging.getLogger(__name__)


class BranchManager:
    """Stateless facade over the version_branches table."""

    def __init__(self, db: Database) -> None:
        """Initialize with a database connection."""
        self.db = db

    async def get_or_create_branch(
        self,
        document_id: str,
        name: str,
        from_version: str | None = None,
        *,
        description: str | None = None,
        created_by: str | None = None,
    ) -> Branch:
        """Return the branch named ``name`` on a document, creating it if needed.

        Idempotent: an existing branch is returned unchanged. A concurrent
        creator winning the (document_id, name) uniqueness race is not an
        error; the insert is skipped and the winner's row is returned.
        """
        existing = await self.find_branch(document_id, name)
        if existing is not None:
            return existing

        cursor = await self.db.execute(
            """INSERT INTO version_branches
            (id, document_id, name, description, created_from, is_main, is_active,
             created_at, created_by)
            VALUES (?, ?, ?, ?, ?, ?, 1, ?, ?)
            ON CONFLICT (document_id, name) DO NOTHING
            RETURNING id""",
            (
                new_id(),
                document_id,
                name,
                description,
                from_version,
                int(name == MAIN_BRANCH),
                now_iso(),
                created_by,
            ),
        )
        inserted = await cursor.fetchone()
        await self.db.commit()

        if inserted is None:
            logger.debug("Branch %r on %s created concurrently, re-reading", name, document_id)
        else:
            logger.info("Created branch %r on document %s", name, document_id)

        branch = await self.find_branch(document_id, name)
        if branch is None:
            raise RuntimeError(f"Branch {name!r} vanished after insert on {document_id}")
        return branch

    async def find_branch(self, document_id: str, name: str) -> Branch | None:
        """Look up a branch by its per-document name."""
        cursor = await self.db.execute(
            "SELECT * FROM version_branches WHERE document_id = ? AND name = ?",
            (document_id, name),
        )
        row = await cursor.fetchone()
        return row_to_branch(row) if row else None

    async def get_branch(self, branch_id: str) -> Branch:
        """Get a branch by ID, raising NotFoundError if absent."""
        cursor = await self.db.execute("SELECT * FROM version_branches WHERE id = ?", (branch_id,))
        row = await cursor.fetchone()
        if row is None:
            raise NotFoundError(f"Branch {branch_id} not found")
        return row_to_branch(row)

    async def list_branches(self, document_id: str) -> list[Branch]:
        """All branches of a document, oldest first."""
        cursor = await self.db.execute(
            "SELECT * FROM version_branches WHERE document_id = ? ORDER BY created_at, name",
            (document_id,),
        )
        return [row_to_branch(row) for row in await cursor.fetchall()]

    async def mark_merged(
        self,
        branch_id: str,
        target_branch_id: str,
        *,
        merged_by: str | None = None,
    ) -> Branch:
        """Retire a branch after it was folded into ``target_branch_id``.

        Merge is terminal: a branch that already carries merge markers is
        never overwritten and raises InvalidStateError instead.
        """
        branch = await self.get_branch(branch_id)
        if branch.is_merged:
            raise InvalidStateError(
                f"Branch {branch.name!r} was already merged into {branch.merged_into}"
            )

        # The merged_at guard keeps a concurrent second merge from overwriting
        cursor = await self.db.execute(
            """UPDATE version_branches
            SET is_active = 0, merged_at = ?, merged_by = ?, merged_into = ?
            WHERE id = ? AND merged_at IS NULL""",
            (now_iso(), merged_by, target_branch_id, branch_id),
        )
        await self.db.commit()
        if cursor.rowcount == 0:
            raise InvalidStateError(f"Branch {branch.name!r} was already merged")

        logger.info("Marked branch %s merged into %s", branch_id, target_branch_id)
        return await self.get_branch(branch_id)
