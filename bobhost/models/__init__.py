"""bobhost data models — all Pydantic v2, all frozen (immutable)."""

from bobhost.models.artifacts import (
    ArchiveManifest,
    Artifact,
    IngestResult,
    InsertOutcome,
    StoredFile,
    UploadFailure,
)
from bobhost.models.config import ArchiveLimits
from bobhost.models.deployments import (
    Deployment,
    DeploymentStatus,
    DeploymentView,
    DeployResult,
    PurgeResult,
)
from bobhost.models.serving import ServedContent

__all__ = [
    # artifacts
    "StoredFile",
    "ArchiveManifest",
    "Artifact",
    "InsertOutcome",
    "UploadFailure",
    "IngestResult",
    # config
    "ArchiveLimits",
    # deployments
    "DeploymentStatus",
    "Deployment",
    "DeploymentView",
    "DeployResult",
    "PurgeResult",
    # serving
    "ServedContent",
]
