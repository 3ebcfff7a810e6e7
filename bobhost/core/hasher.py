"""Content hashing for artifact identity.

The digest is computed over the raw uploaded archive, never over the
extracted files: two uploads are the same artifact only when their archive
bytes are byte-identical.
"""

from __future__ import annotations

import hashlib
import hmac
import re

from bobhost.core.errors import ArtifactIntegrityError, InvalidInputError

_DIGEST_RE = re.compile(r"[a-f0-9]{64}", re.IGNORECASE)


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def is_valid_digest(value: str) -> bool:
    """Return True if *value* has the shape of a SHA-256 hex digest."""
    return isinstance(value, str) and _DIGEST_RE.fullmatch(value) is not None


def normalize_digest(value: str) -> str:
    """Lower-case a claimed digest after checking its shape.

    Raises
    ------
    InvalidInputError
        If *value* is not 64 hexadecimal characters.
    """
    if not is_valid_digest(value):
        raise InvalidInputError(
            "Invalid hash format. Must be a SHA-256 hex string"
        )
    return value.lower()


def verify_digest(data: bytes, claimed: str) -> str:
    """Recompute the digest of *data* and compare it to *claimed*.

    Returns the computed digest. A mismatch is never trusted.
    """
    computed = sha256_hex(data)
    if not hmac.compare_digest(computed, claimed.lower()):
        raise ArtifactIntegrityError(
            f"Hash mismatch. Computed: {computed}, Provided: {claimed}"
        )
    return computed
