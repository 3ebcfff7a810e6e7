"""Deployment registry — binds human-chosen names to immutable artifacts.

Names are globally unique and reserved for as long as the record exists,
including while it sits in the bin (soft-deleted). A restored deployment
therefore can never collide with a newer deployment of the same name.

Every mutating operation is scoped to the owner: a deployment owned by
someone else is reported as not found.
"""

from __future__ import annotations

import logging
import re
import sqlite3
import uuid
from datetime import datetime, timezone

from bobhost.core.artifact_repository import ArtifactRepository
from bobhost.core.database import Database
from bobhost.core.errors import (
    InvalidInputError,
    InvalidStateError,
    NameConflictError,
    NotFoundError,
    QuotaExceededError,
)
from bobhost.core.hasher import normalize_digest
from bobhost.core.naming import display_name, to_site_name
from bobhost.models.deployments import Deployment, DeploymentStatus, DeploymentView

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPLOYMENTS = 50

_ID_RE = re.compile(r"^dep-[0-9a-f]{12}$")

_SELECT_DEPLOYMENT = (
    "SELECT id, name, owner_id, artifact_hash, status, created_at, deleted_at "
    "FROM deployments"
)

_SELECT_VIEW = """
SELECT d.id, d.name, d.owner_id, d.artifact_hash, d.status, d.created_at,
       d.deleted_at, a.size, a.file_count
FROM deployments d
JOIN artifacts a ON d.artifact_hash = a.hash
"""


def new_deployment_id() -> str:
    return f"dep-{uuid.uuid4().hex[:12]}"


def validate_deployment_id(deployment_id: str) -> str:
    if not isinstance(deployment_id, str) or not _ID_RE.match(deployment_id):
        raise InvalidInputError(f"Invalid deployment ID format: {deployment_id!r}")
    return deployment_id


class DeploymentRegistry:
    """Name -> artifact bindings with soft delete and per-owner quotas.

    Parameters
    ----------
    database:
        The shared SQLite database.
    artifacts:
        Used to check that a bound artifact exists.
    max_deployments:
        Per-owner limit on deployment records, bin included.
    mount_prefix:
        First path segment of the serving mount, used for access paths.
    """

    def __init__(
        self,
        database: Database,
        artifacts: ArtifactRepository,
        *,
        max_deployments: int = DEFAULT_MAX_DEPLOYMENTS,
        mount_prefix: str = "deploy",
    ) -> None:
        self._db = database
        self._artifacts = artifacts
        self._max_deployments = max_deployments
        self._mount_prefix = mount_prefix.strip("/")

    def access_path(self, site_name: str) -> str:
        """Path under which a site is served, e.g. ``/deploy/foo.bob``."""
        return f"/{self._mount_prefix}/{site_name}"

    # ------------------------------------------------------------------
    # Bind
    # ------------------------------------------------------------------

    def bind(
        self,
        name: str,
        artifact_hash: str,
        owner_id: str,
        *,
        status: DeploymentStatus = DeploymentStatus.READY,
    ) -> Deployment:
        """Bind a normalized *name* to an existing artifact for *owner_id*.

        Raises
        ------
        InvalidInputError
            If the name or hash is malformed.
        NameConflictError
            If the name is already bound, bin included.
        NotFoundError
            If the artifact does not exist.
        QuotaExceededError
            If the owner already has the maximum number of deployments.
        """
        if status is DeploymentStatus.DELETED:
            raise InvalidInputError("A deployment cannot be created as DELETED")
        site_name = to_site_name(name)
        artifact_hash = normalize_digest(artifact_hash)

        if self._name_taken(site_name):
            raise NameConflictError(f"Deployment already exists: {site_name}")
        if not self._artifacts.exists(artifact_hash):
            raise NotFoundError(f"Artifact not found: {artifact_hash}")
        if self.count_for_owner(owner_id) >= self._max_deployments:
            raise QuotaExceededError(
                f"Max {self._max_deployments} deployments reached"
            )

        deployment = Deployment(
            id=new_deployment_id(),
            name=site_name,
            owner_id=owner_id,
            artifact_hash=artifact_hash,
            status=status,
        )
        try:
            with self._db.connect() as conn:
                conn.execute(
                    """
                    INSERT INTO deployments
                        (id, name, owner_id, artifact_hash, status, created_at, deleted_at)
                    VALUES (?, ?, ?, ?, ?, ?, NULL)
                    """,
                    (
                        deployment.id,
                        deployment.name,
                        deployment.owner_id,
                        deployment.artifact_hash,
                        deployment.status.value,
                        deployment.created_at.isoformat(),
                    ),
                )
        except sqlite3.IntegrityError as exc:
            # Lost a race against another bind or a purge.
            if "FOREIGN KEY" in str(exc).upper():
                raise NotFoundError(f"Artifact not found: {artifact_hash}") from exc
            raise NameConflictError(f"Deployment already exists: {site_name}") from exc

        logger.info(
            "Deployment created: %s -> %s (%s)",
            deployment.name,
            deployment.artifact_hash,
            deployment.id,
        )
        return deployment

    def _name_taken(self, site_name: str) -> bool:
        with self._db.connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM deployments WHERE name = ?", (site_name,)
            ).fetchone()
        return row is not None

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get(self, deployment_id: str, owner_id: str) -> Deployment:
        """Return the caller's deployment or raise ``NotFoundError``."""
        validate_deployment_id(deployment_id)
        with self._db.connect() as conn:
            row = conn.execute(
                f"{_SELECT_DEPLOYMENT} WHERE id = ? AND owner_id = ?",
                (deployment_id, owner_id),
            ).fetchone()
        if row is None:
            raise NotFoundError(f"Deployment not found: {deployment_id}")
        return self._row_to_deployment(row)

    def get_ready_by_name(self, site_name: str) -> Deployment | None:
        """Exact-name lookup restricted to READY deployments."""
        with self._db.connect() as conn:
            row = conn.execute(
                f"{_SELECT_DEPLOYMENT} WHERE name = ? AND status = ? LIMIT 1",
                (site_name, DeploymentStatus.READY.value),
            ).fetchone()
        return self._row_to_deployment(row) if row else None

    def count_for_owner(self, owner_id: str) -> int:
        with self._db.connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM deployments WHERE owner_id = ?", (owner_id,)
            ).fetchone()
        return int(row[0])

    def list_active(self, owner_id: str) -> list[DeploymentView]:
        """Deployments not in the bin, newest first."""
        with self._db.connect() as conn:
            rows = conn.execute(
                f"{_SELECT_VIEW} WHERE d.owner_id = ? AND d.deleted_at IS NULL "
                "ORDER BY d.created_at DESC",
                (owner_id,),
            ).fetchall()
        return [self._row_to_view(row) for row in rows]

    def list_bin(self, owner_id: str) -> list[DeploymentView]:
        """Soft-deleted deployments, most recently deleted first."""
        with self._db.connect() as conn:
            rows = conn.execute(
                f"{_SELECT_VIEW} WHERE d.owner_id = ? AND d.deleted_at IS NOT NULL "
                "ORDER BY d.deleted_at DESC",
                (owner_id,),
            ).fetchall()
        return [self._row_to_view(row) for row in rows]

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    def soft_delete(self, deployment_id: str, owner_id: str) -> Deployment:
        """Move a deployment to the bin. Its name stays reserved."""
        validate_deployment_id(deployment_id)
        now = datetime.now(timezone.utc).isoformat()
        with self._db.connect() as conn:
            cursor = conn.execute(
                """
                UPDATE deployments SET deleted_at = ?, status = ?
                WHERE id = ? AND owner_id = ? AND deleted_at IS NULL
                """,
                (now, DeploymentStatus.DELETED.value, deployment_id, owner_id),
            )
        if cursor.rowcount == 0:
            self.get(deployment_id, owner_id)  # raises NotFoundError
            raise InvalidStateError(f"Deployment is already in bin: {deployment_id}")
        logger.info("Deployment soft-deleted: %s", deployment_id)
        return self.get(deployment_id, owner_id)

    def restore(self, deployment_id: str, owner_id: str) -> Deployment:
        """Bring a deployment back from the bin as READY."""
        validate_deployment_id(deployment_id)
        with self._db.connect() as conn:
            cursor = conn.execute(
                """
                UPDATE deployments SET deleted_at = NULL, status = ?
                WHERE id = ? AND owner_id = ? AND deleted_at IS NOT NULL
                """,
                (DeploymentStatus.READY.value, deployment_id, owner_id),
            )
        if cursor.rowcount == 0:
            self.get(deployment_id, owner_id)
            raise InvalidStateError(f"Deployment is not in bin: {deployment_id}")
        logger.info("Deployment restored: %s", deployment_id)
        return self.get(deployment_id, owner_id)

    def mark_ready(self, deployment_id: str, owner_id: str) -> Deployment:
        """Promote a QUEUED deployment to READY."""
        validate_deployment_id(deployment_id)
        with self._db.connect() as conn:
            cursor = conn.execute(
                "UPDATE deployments SET status = ? "
                "WHERE id = ? AND owner_id = ? AND status = ?",
                (
                    DeploymentStatus.READY.value,
                    deployment_id,
                    owner_id,
                    DeploymentStatus.QUEUED.value,
                ),
            )
        if cursor.rowcount == 0:
            current = self.get(deployment_id, owner_id)
            raise InvalidStateError(
                f"Deployment {deployment_id} is {current.status.value}, not QUEUED"
            )
        return self.get(deployment_id, owner_id)

    def delete(self, deployment_id: str) -> bool:
        """Remove the record outright. Returns True if a row was removed."""
        with self._db.connect() as conn:
            cursor = conn.execute(
                "DELETE FROM deployments WHERE id = ?", (deployment_id,)
            )
        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_deployment(row: tuple) -> Deployment:
        (
            deployment_id,
            name,
            owner_id,
            artifact_hash,
            status,
            created_at,
            deleted_at,
        ) = row
        return Deployment(
            id=deployment_id,
            name=name,
            owner_id=owner_id,
            artifact_hash=artifact_hash,
            status=DeploymentStatus(status),
            created_at=created_at,
            deleted_at=deleted_at,
        )

    def _row_to_view(self, row: tuple) -> DeploymentView:
        deployment = self._row_to_deployment(row[:7])
        size, file_count = row[7], row[8]
        return DeploymentView(
            deployment=deployment,
            size=size,
            file_count=file_count,
            access_path=self.access_path(deployment.name),
            display_name=display_name(deployment.name),
        )
