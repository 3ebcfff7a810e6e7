"""Error taxonomy shared by every bobhost component.

Each error carries a stable ``kind`` tag so callers can tell user-fixable
failures (bad names, bad archives, mismatched digests) apart from system
failures (storage backends) without string matching.
"""

from __future__ import annotations

from typing import Any


class HostError(RuntimeError):
    """Base class for all bobhost errors.

    Parameters
    ----------
    message:
        Human-readable description.
    files:
        Optional list of paths that help diagnose the failure, e.g. the
        files discovered in an archive that had no entry point.
    """

    kind: str = "error"
    user_fixable: bool = True

    def __init__(self, message: str, *, files: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.files: list[str] = list(files or [])

    def to_dict(self) -> dict[str, Any]:
        """Structured form for API responses and logs."""
        payload: dict[str, Any] = {
            "kind": self.kind,
            "message": self.message,
            "user_fixable": self.user_fixable,
        }
        if self.files:
            payload["files"] = list(self.files)
        return payload


class InvalidInputError(HostError):
    """Malformed name, digest, id or path."""

    kind = "invalid_input"


class ArtifactIntegrityError(HostError):
    """The claimed digest does not match the digest of the uploaded bytes."""

    kind = "integrity"


class ArchiveValidationError(HostError):
    """The archive failed a structural or security check."""

    kind = "validation"


class NotFoundError(HostError):
    """A deployment, artifact or stored object does not exist."""

    kind = "not_found"


class NameConflictError(HostError):
    """The deployment name is already bound."""

    kind = "name_conflict"


class QuotaExceededError(HostError):
    """The owner has reached the deployment limit."""

    kind = "quota_exceeded"


class InvalidStateError(HostError):
    """The operation is not valid for the record's current status."""

    kind = "invalid_state"


class StorageError(HostError):
    """The object store or database failed to read or write."""

    kind = "storage"
    user_fixable = False


class ObjectExistsError(StorageError):
    """``put`` targeted a key that is already stored."""


class ObjectNotFoundError(NotFoundError):
    """``get`` targeted a key that is not stored."""
