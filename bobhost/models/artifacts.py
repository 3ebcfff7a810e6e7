"""Content-addressed artifact models (immutable once stored)."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class StoredFile(BaseModel):
    """A single file extracted from an archive, ready to be stored.

    ``path`` is normalized: forward slashes, no traversal segments, and the
    wrapper directory (if any) already stripped.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    data: bytes
    content_type: str
    size: int  # bytes as read from the archive, before any re-encoding


class ArchiveManifest(BaseModel):
    """Result of validating and normalizing an uploaded archive."""

    model_config = ConfigDict(frozen=True)

    files: list[StoredFile]
    entry_point: str
    total_size: int  # aggregate extracted bytes
    root_folder: str | None = None
    skipped: list[str] = []
    warnings: list[str] = []

    @property
    def paths(self) -> list[str]:
        return [f.path for f in self.files]


class Artifact(BaseModel):
    """Metadata for a stored artifact — the bytes live in the object store.

    Artifacts are never mutated: only created or deleted. The hash is both
    the identity and the storage namespace.
    """

    model_config = ConfigDict(frozen=True)

    hash: str  # SHA-256 hex of the raw archive
    size: int  # raw archive bytes
    file_count: int  # files successfully stored
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class InsertOutcome(BaseModel):
    """Tagged result of inserting an artifact record.

    ``created`` is False when a record for the hash already existed,
    including when a concurrent insert won the race.
    """

    model_config = ConfigDict(frozen=True)

    artifact: Artifact
    created: bool


class UploadFailure(BaseModel):
    """A file that could not be written to the object store."""

    model_config = ConfigDict(frozen=True)

    path: str
    reason: str


class IngestResult(BaseModel):
    """What the ingestion pipeline hands back to the caller."""

    model_config = ConfigDict(frozen=True)

    artifact: Artifact
    created: bool
    uploaded: int = 0
    failed: list[UploadFailure] = []
    entry_point: str | None = None
    total_size: int = 0
    warnings: list[str] = []

    @property
    def hash(self) -> str:
        return self.artifact.hash
