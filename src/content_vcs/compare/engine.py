"""Comparison engine: directional, memoized diffs between versions."""

import json
import logging

from content_vcs.compare.diff import changed_fields, generate_diff, similarity, word_changes
from content_vcs.db.backend import Database
from content_vcs.db.queries import new_id, now_iso, row_to_comparison
from content_vcs.exceptions import NotFoundError
from content_vcs.models.comparison import Comparison
from content_vcs.store.version_store import VersionStore

logger = logging.getLogger(__name__)


class ComparisonEngine:
    """Compute and cache comparisons keyed by (from_version_id, to_version_id).

    A pair is computed at most once; later requests return the stored row
    unchanged. The key is ordered, so A->B and B->A are separate entries.
    """

    def __init__(self, db: Database, versions: VersionStore) -> None:
        """Initialize with a database connection and the version store."""
        self.db = db
        self.versions = versions

    async def get_comparison(self, from_version_id: str, to_version_id: str) -> Comparison | None:
        """Return the cached comparison for an ordered pair, if any."""
        cursor = await self.db.execute(
            """SELECT * FROM version_comparisons
            WHERE from_version_id = ? AND to_version_id = ?""",
            (from_version_id, to_version_id),
        )
        row = await cursor.fetchone()
        return row_to_comparison(row) if row else None

    async def compare_versions(
        self,
        from_version_id: str,
        to_version_id: str,
        *,
        compared_by: str | None = None,
    ) -> Comparison:
        """Diff two versions, old to new, reusing a cached result when present."""
        cached = await self.get_comparison(from_version_id, to_version_id)
        if cached is not None:
            logger.debug("Comparison cache hit %s -> %s", from_version_id, to_version_id)
            return cached

        old = await self.versions.find_version(from_version_id)
        new = await self.versions.find_version(to_version_id)
        if old is None or new is None:
            missing = from_version_id if old is None else to_version_id
            raise NotFoundError(f"Version {missing} not found")

        diff = generate_diff(old, new)
        words = word_changes(old.content, new.content)
        cursor = await self.db.execute(
            """INSERT INTO version_comparisons
            (id, from_version_id, to_version_id, diff_summary, changed_fields,
             added_words, removed_words, modified_words, similarity_score,
             compared_at, compared_by)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (from_version_id, to_version_id) DO NOTHING
            RETURNING id""",
            (
                new_id(),
                from_version_id,
                to_version_id,
                diff.model_dump_json(exclude_none=True),
                json.dumps(changed_fields(old, new)),
                words.added,
                words.removed,
                words.modified,
                similarity(old.content, new.content),
                now_iso(),
                compared_by,
            ),
        )
        inserted = await cursor.fetchone()
        await self.db.commit()

        if inserted is None:
            logger.debug(
                "Comparison %s -> %s cached concurrently, re-reading",
                from_version_id,
                to_version_id,
            )
        else:
            logger.info(
                "Compared %s -> %s (+%d/-%d words)",
                old.version_number,
                new.version_number,
                words.added,
                words.removed,
            )

        comparison = await self.get_comparison(from_version_id, to_version_id)
        if comparison is None:
            raise RuntimeError(f"Comparison {from_version_id} -> {to_version_id} vanished")
        return comparison
