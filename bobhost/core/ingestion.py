"""Ingestion pipeline — archive bytes in, artifact handle out.

Steps, each a hard gate unless noted:

1. Check the claimed digest's shape.
2. Idempotency: an artifact already stored under the claimed digest is
   returned as-is. Nothing is extracted or uploaded.
3. Recompute the digest from the raw bytes; a mismatch is rejected.
4. Validate and normalize the archive.
5. Upload every kept file under ``<digest>/<path>`` through a bounded
   worker pool. Per-file failures are collected, ``ObjectExistsError``
   counts as success, and zero successes aborts the ingestion.
6. Insert the artifact record, only once at least one file is stored.

Nothing durable is written before step 2 resolves negative, and steps 1-4
fail before any write at all. Cancelled or failed ingestions leave uploaded
objects in place; uploads are keyed by content and safe to repeat.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from bobhost.core.archive_validator import ArchiveValidator
from bobhost.core.artifact_repository import ArtifactRepository
from bobhost.core.errors import HostError, ObjectExistsError, StorageError
from bobhost.core.hasher import normalize_digest, verify_digest
from bobhost.core.object_store import ObjectStore
from bobhost.models.artifacts import (
    ArchiveManifest,
    Artifact,
    IngestResult,
    StoredFile,
    UploadFailure,
)

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_CONCURRENCY = 5


def object_key(artifact_hash: str, path: str) -> str:
    """Storage key of a file inside an artifact."""
    return f"{artifact_hash}/{path}"


class IngestionPipeline:
    """Orchestrates validation, hashing, deduplication and upload.

    Parameters
    ----------
    repository:
        Artifact metadata store; the dedup authority.
    object_store:
        Blob storage receiving the extracted files.
    validator:
        Archive validator. A default-limits validator if not provided.
    upload_concurrency:
        Maximum number of uploads in flight at once.
    """

    def __init__(
        self,
        repository: ArtifactRepository,
        object_store: ObjectStore,
        validator: ArchiveValidator | None = None,
        *,
        upload_concurrency: int = DEFAULT_UPLOAD_CONCURRENCY,
    ) -> None:
        if upload_concurrency < 1:
            raise ValueError("upload_concurrency must be at least 1")
        self._repository = repository
        self._store = object_store
        self._validator = validator or ArchiveValidator()
        self._upload_concurrency = upload_concurrency

    def ingest(self, raw: bytes, claimed_digest: str) -> IngestResult:
        """Ingest an archive and return its artifact handle.

        Raises
        ------
        InvalidInputError
            If *claimed_digest* is not a SHA-256 hex string.
        ArtifactIntegrityError
            If *claimed_digest* does not match the bytes.
        ArchiveValidationError
            If the archive fails validation.
        StorageError
            If not a single file could be stored.
        """
        digest = normalize_digest(claimed_digest)
        logger.info("Ingesting archive (%d bytes), hash received: %s", len(raw), digest)

        existing = self._repository.get(digest)
        if existing is not None:
            logger.info("Artifact already exists: %s", digest)
            return IngestResult(artifact=existing, created=False)

        verify_digest(raw, digest)
        manifest = self._validator.validate(raw)

        uploaded, failures = self.upload(digest, manifest.files)
        if failures:
            logger.warning(
                "Some files failed to upload: %d of %d", len(failures), len(manifest.files)
            )
        if uploaded == 0:
            raise StorageError(
                "Failed to upload any files to storage",
                files=[f.path for f in failures],
            )
        logger.info("Uploaded %d/%d files", uploaded, len(manifest.files))

        outcome = self._repository.insert(digest, len(raw), uploaded)
        return self._result(outcome.artifact, outcome.created, manifest, uploaded, failures)

    def upload(
        self, digest: str, files: list[StoredFile]
    ) -> tuple[int, list[UploadFailure]]:
        """Upload *files* under *digest* with bounded concurrency.

        Every upload settles (success or failure) before this returns.
        """
        uploaded = 0
        failures: list[UploadFailure] = []
        if not files:
            return uploaded, failures

        workers = min(self._upload_concurrency, len(files))
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="bobhost-upload"
        ) as pool:
            futures = {
                pool.submit(self._put_one, digest, stored): stored for stored in files
            }
            for future in as_completed(futures):
                stored = futures[future]
                try:
                    future.result()
                except HostError as exc:
                    failures.append(UploadFailure(path=stored.path, reason=exc.message))
                    logger.error("Failed: %s - %s", stored.path, exc.message)
                except Exception as exc:  # unexpected backend failure, counted per file
                    failures.append(UploadFailure(path=stored.path, reason=str(exc)))
                    logger.exception("Failed: %s", stored.path)
                else:
                    uploaded += 1

        failures.sort(key=lambda f: f.path)
        return uploaded, failures

    def _put_one(self, digest: str, stored: StoredFile) -> None:
        key = object_key(digest, stored.path)
        try:
            self._store.put(key, stored.data, stored.content_type)
        except ObjectExistsError:
            logger.debug("Already exists: %s", stored.path)
            return
        logger.debug("Uploaded: %s", stored.path)

    @staticmethod
    def _result(
        artifact: Artifact,
        created: bool,
        manifest: ArchiveManifest,
        uploaded: int,
        failures: list[UploadFailure],
    ) -> IngestResult:
        warnings = list(manifest.warnings)
        warnings.extend(f"Upload failed: {f.path}: {f.reason}" for f in failures)
        return IngestResult(
            artifact=artifact,
            created=created,
            uploaded=uploaded,
            failed=failures,
            entry_point=manifest.entry_point,
            total_size=manifest.total_size,
            warnings=warnings,
        )
