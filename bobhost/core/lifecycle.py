"""Lifecycle and garbage collection for deployments.

Soft delete and restore are reversible status flips. Purge is permanent and
reference-counted: an artifact's stored objects are reclaimed only when no
other live deployment points at it. The count is a query at purge time, not
a maintained counter, so concurrent soft deletes cannot skew it.

Storage removal during purge is best-effort. A failure is logged and the
records are deleted anyway; an orphaned blob is preferable to a deletion
the user cannot complete.
"""

from __future__ import annotations

import logging

from bobhost.core.artifact_repository import ArtifactRepository
from bobhost.core.deployment_registry import DeploymentRegistry
from bobhost.core.errors import HostError
from bobhost.core.object_store import ObjectStore
from bobhost.models.deployments import Deployment, PurgeResult

logger = logging.getLogger(__name__)


class LifecycleManager:
    """Soft delete, restore and reference-counted purge.

    Parameters
    ----------
    registry:
        Deployment registry holding the records.
    repository:
        Artifact repository; its rows are deleted when unreferenced.
    object_store:
        Blob storage reclaimed on the last purge.
    """

    def __init__(
        self,
        registry: DeploymentRegistry,
        repository: ArtifactRepository,
        object_store: ObjectStore,
    ) -> None:
        self._registry = registry
        self._repository = repository
        self._store = object_store

    def soft_delete(self, deployment_id: str, owner_id: str) -> Deployment:
        """Move a deployment to the bin; the artifact is untouched."""
        return self._registry.soft_delete(deployment_id, owner_id)

    def restore(self, deployment_id: str, owner_id: str) -> Deployment:
        """Bring a binned deployment back as READY."""
        return self._registry.restore(deployment_id, owner_id)

    def purge(self, deployment_id: str, owner_id: str) -> PurgeResult:
        """Permanently destroy a deployment, reclaiming its artifact if unused.

        Raises
        ------
        InvalidInputError
            If *deployment_id* is malformed.
        NotFoundError
            If the caller owns no such deployment.
        """
        deployment = self._registry.get(deployment_id, owner_id)
        artifact_hash = deployment.artifact_hash

        references = self._repository.count_references(
            artifact_hash, exclude_deployment_id=deployment.id
        )
        logger.info(
            "Other deployments using artifact %s: %d", artifact_hash, references
        )

        if references > 0:
            self._registry.delete(deployment.id)
            logger.info("Deleted deployment %s (artifact kept)", deployment.id)
            return PurgeResult(
                deployment_id=deployment.id,
                artifact_hash=artifact_hash,
                artifact_removed=False,
                storage_removed=False,
            )

        storage_removed = True
        objects_removed = 0
        try:
            objects_removed = self._store.remove(artifact_hash)
            logger.info(
                "Deleted artifact %s from storage (%d objects)",
                artifact_hash,
                objects_removed,
            )
        except HostError as exc:
            storage_removed = False
            logger.error(
                "Failed to delete artifact %s from storage: %s", artifact_hash, exc
            )

        # The deployment row goes first; the artifact row cascades to any
        # binned deployments that still reference it.
        binned_removed = self._repository.count_binned(
            artifact_hash, exclude_deployment_id=deployment.id
        )
        if binned_removed:
            logger.warning(
                "Removing %d binned deployment(s) that reference artifact %s",
                binned_removed,
                artifact_hash,
            )
        self._registry.delete(deployment.id)
        self._repository.delete(artifact_hash)
        logger.info(
            "Deleted deployment %s and artifact %s", deployment.id, artifact_hash
        )

        return PurgeResult(
            deployment_id=deployment.id,
            artifact_hash=artifact_hash,
            artifact_removed=True,
            storage_removed=storage_removed,
            objects_removed=objects_removed,
            binned_removed=binned_removed,
        )
