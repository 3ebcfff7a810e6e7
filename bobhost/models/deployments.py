"""Deployment models — a mutable name bound to an immutable artifact."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DeploymentStatus(str, Enum):
    """Lifecycle states of a deployment."""

    QUEUED = "QUEUED"
    READY = "READY"
    DELETED = "DELETED"


class Deployment(BaseModel):
    """A row of the deployment registry.

    ``name`` is the full site name including the ``.bob`` suffix, e.g.
    ``my-cool-site.bob``. It is unique and never changes once bound.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    owner_id: str
    artifact_hash: str
    status: DeploymentStatus = DeploymentStatus.READY
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class DeploymentView(BaseModel):
    """A deployment joined with its artifact, as shown in listings."""

    model_config = ConfigDict(frozen=True)

    deployment: Deployment
    size: int
    file_count: int
    access_path: str
    display_name: str


class DeployResult(BaseModel):
    """Returned by the deploy-bind entrypoint."""

    model_config = ConfigDict(frozen=True)

    deployment: Deployment
    access_path: str


class PurgeResult(BaseModel):
    """Outcome of permanently destroying a deployment."""

    model_config = ConfigDict(frozen=True)

    deployment_id: str
    artifact_hash: str
    artifact_removed: bool  # artifact record deleted (no live references left)
    storage_removed: bool  # object store removal succeeded
    objects_removed: int = 0
    binned_removed: int = 0  # binned siblings dropped along with the artifact
