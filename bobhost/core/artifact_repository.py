"""Artifact repository — one row per unique archive digest.

The repository is the unit of deduplication. Inserting a digest that is
already present is not an error: the existing row is returned with
``created=False``. This is what keeps concurrent ingestions of the same
bytes down to exactly one artifact.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from bobhost.core.database import Database
from bobhost.models.artifacts import Artifact, InsertOutcome

logger = logging.getLogger(__name__)


class ArtifactRepository:
    """Maps a content hash to artifact metadata.

    Parameters
    ----------
    database:
        The shared SQLite database.
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    def get(self, artifact_hash: str) -> Artifact | None:
        """Return the artifact for *artifact_hash*, or None."""
        with self._db.connect() as conn:
            row = conn.execute(
                "SELECT hash, size, file_count, created_at FROM artifacts WHERE hash = ?",
                (artifact_hash,),
            ).fetchone()
        return self._row_to_artifact(row) if row else None

    def exists(self, artifact_hash: str) -> bool:
        with self._db.connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM artifacts WHERE hash = ?", (artifact_hash,)
            ).fetchone()
        return row is not None

    def insert(self, artifact_hash: str, size: int, file_count: int) -> InsertOutcome:
        """Insert a new artifact, or return the one already stored.

        Never raises on a duplicate key.
        """
        created_at = datetime.now(timezone.utc)
        with self._db.connect() as conn:
            cursor = conn.execute(
                """
                INSERT OR IGNORE INTO artifacts (hash, size, file_count, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (artifact_hash, size, file_count, created_at.isoformat()),
            )
            inserted = cursor.rowcount == 1

        if inserted:
            logger.info("Artifact created: %s (%d files)", artifact_hash, file_count)
            return InsertOutcome(
                artifact=Artifact(
                    hash=artifact_hash,
                    size=size,
                    file_count=file_count,
                    created_at=created_at,
                ),
                created=True,
            )

        existing = self.get(artifact_hash)
        if existing is None:
            # Deleted between our insert and read; try once more.
            return self.insert(artifact_hash, size, file_count)
        logger.info("Artifact already exists: %s", artifact_hash)
        return InsertOutcome(artifact=existing, created=False)

    def delete(self, artifact_hash: str) -> bool:
        """Delete the artifact row. Returns True if a row was removed."""
        with self._db.connect() as conn:
            cursor = conn.execute(
                "DELETE FROM artifacts WHERE hash = ?", (artifact_hash,)
            )
        return cursor.rowcount > 0

    def count_references(
        self, artifact_hash: str, *, exclude_deployment_id: str | None = None
    ) -> int:
        """Count live (not soft-deleted) deployments pointing at the artifact.

        Computed by query at call time; there is no stored counter.
        """
        with self._db.connect() as conn:
            row = conn.execute(
                """
                SELECT COUNT(*) FROM deployments
                WHERE artifact_hash = ?
                  AND id != ?
                  AND deleted_at IS NULL
                """,
                (artifact_hash, exclude_deployment_id or ""),
            ).fetchone()
        return int(row[0])

    def count_binned(
        self, artifact_hash: str, *, exclude_deployment_id: str | None = None
    ) -> int:
        """Count soft-deleted deployments pointing at the artifact, any owner."""
        with self._db.connect() as conn:
            row = conn.execute(
                """
                SELECT COUNT(*) FROM deployments
                WHERE artifact_hash = ?
                  AND id != ?
                  AND deleted_at IS NOT NULL
                """,
                (artifact_hash, exclude_deployment_id or ""),
            ).fetchone()
        return int(row[0])

    def list_all(self) -> list[Artifact]:
        with self._db.connect() as conn:
            rows = conn.execute(
                "SELECT hash, size, file_count, created_at FROM artifacts "
                "ORDER BY created_at DESC"
            ).fetchall()
        return [self._row_to_artifact(row) for row in rows]

    @staticmethod
    def _row_to_artifact(row: tuple) -> Artifact:
        artifact_hash, size, file_count, created_at = row
        return Artifact(
            hash=artifact_hash,
            size=size,
            file_count=file_count,
            created_at=created_at,
        )
