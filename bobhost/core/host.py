"""StaticHost — the central coordinator for a bobhost instance.

Wires the Database, ArtifactRepository, DeploymentRegistry, ObjectStore,
ArchiveValidator, IngestionPipeline, ServingResolver and LifecycleManager
together from a single ``HostConfig``, and exposes the entrypoints callers
use: ingest, deploy, serve, and the lifecycle operations.

Authentication happens before these methods are called; ``owner_id`` is
the already-authenticated caller.
"""

from __future__ import annotations

import logging

from bobhost.config import HostConfig
from bobhost.core.archive_validator import ArchiveValidator
from bobhost.core.artifact_repository import ArtifactRepository
from bobhost.core.database import Database
from bobhost.core.deployment_registry import DeploymentRegistry
from bobhost.core.errors import NotFoundError
from bobhost.core.hasher import normalize_digest, sha256_hex
from bobhost.core.ingestion import IngestionPipeline
from bobhost.core.lifecycle import LifecycleManager
from bobhost.core.object_store import LocalObjectStore, ObjectStore
from bobhost.core.resolver import ServingResolver
from bobhost.models.artifacts import Artifact, IngestResult
from bobhost.models.deployments import (
    Deployment,
    DeploymentView,
    DeployResult,
    PurgeResult,
)
from bobhost.models.serving import ServedContent

logger = logging.getLogger(__name__)


class StaticHost:
    """Content-addressed static site host.

    Parameters
    ----------
    config:
        Host configuration. Uses environment-driven defaults if not provided.
    object_store:
        Storage backend. A ``LocalObjectStore`` at
        ``config.object_store_path`` if not provided.
    """

    def __init__(
        self,
        config: HostConfig | None = None,
        *,
        object_store: ObjectStore | None = None,
    ) -> None:
        self.config = config or HostConfig()

        self.database = Database(self.config.database_path)
        self.object_store: ObjectStore = object_store or LocalObjectStore(
            self.config.object_store_path
        )
        self.artifacts = ArtifactRepository(self.database)
        self.registry = DeploymentRegistry(
            self.database,
            self.artifacts,
            max_deployments=self.config.max_deployments_per_owner,
            mount_prefix=self.config.mount_prefix,
        )
        self.validator = ArchiveValidator(self.config.archive_limits())
        self.pipeline = IngestionPipeline(
            self.artifacts,
            self.object_store,
            self.validator,
            upload_concurrency=self.config.upload_concurrency,
        )
        self.resolver = ServingResolver(
            self.registry,
            self.object_store,
            mount_prefix=self.config.mount_prefix,
        )
        self.lifecycle = LifecycleManager(
            self.registry, self.artifacts, self.object_store
        )
        logger.debug(
            "StaticHost ready: database=%s store=%s",
            self.database.path,
            type(self.object_store).__name__,
        )

    # ------------------------------------------------------------------
    # Ingest and deploy
    # ------------------------------------------------------------------

    def ingest(self, raw: bytes, claimed_digest: str) -> IngestResult:
        """Store an archive once per digest and return its artifact."""
        return self.pipeline.ingest(raw, claimed_digest)

    def deploy(self, name: str, artifact_hash: str, owner_id: str) -> DeployResult:
        """Bind *name* to an artifact and return the servable path."""
        deployment = self.registry.bind(name, artifact_hash, owner_id)
        return DeployResult(
            deployment=deployment,
            access_path=self.registry.access_path(deployment.name),
        )

    def publish(
        self, raw: bytes, name: str, owner_id: str, *, claimed_digest: str | None = None
    ) -> tuple[IngestResult, DeployResult]:
        """Ingest an archive and bind *name* to it in one call.

        Without *claimed_digest* the digest is computed here, as a client
        uploading the archive would.
        """
        digest = claimed_digest or sha256_hex(raw)
        ingested = self.ingest(raw, digest)
        return ingested, self.deploy(name, ingested.hash, owner_id)

    # ------------------------------------------------------------------
    # Serve
    # ------------------------------------------------------------------

    def resolve(self, site_name: str, path: str = "") -> ServedContent:
        return self.resolver.resolve(site_name, path)

    # ------------------------------------------------------------------
    # Listings and lifecycle
    # ------------------------------------------------------------------

    def list_deployments(self, owner_id: str) -> list[DeploymentView]:
        return self.registry.list_active(owner_id)

    def list_bin(self, owner_id: str) -> list[DeploymentView]:
        return self.registry.list_bin(owner_id)

    def get_deployment(self, deployment_id: str, owner_id: str) -> Deployment:
        return self.registry.get(deployment_id, owner_id)

    def soft_delete(self, deployment_id: str, owner_id: str) -> Deployment:
        return self.lifecycle.soft_delete(deployment_id, owner_id)

    def restore(self, deployment_id: str, owner_id: str) -> Deployment:
        return self.lifecycle.restore(deployment_id, owner_id)

    def purge(self, deployment_id: str, owner_id: str) -> PurgeResult:
        return self.lifecycle.purge(deployment_id, owner_id)

    # ------------------------------------------------------------------
    # Artifacts
    # ------------------------------------------------------------------

    def get_artifact(self, artifact_hash: str) -> Artifact:
        artifact = self.artifacts.get(normalize_digest(artifact_hash))
        if artifact is None:
            raise NotFoundError(f"Artifact not found: {artifact_hash}")
        return artifact

    def artifact_files(self, artifact_hash: str) -> list[str]:
        """Relative paths stored for an artifact."""
        artifact = self.get_artifact(artifact_hash)
        prefix = f"{artifact.hash}/"
        return [
            key[len(prefix):]
            for key in self.object_store.list_keys(artifact.hash)
            if key.startswith(prefix)
        ]
