"""Object store client — a narrow put/get/remove interface over blob storage.

Defines the ``ObjectStore`` Protocol that storage backends must satisfy,
along with two implementations:

1. **LocalObjectStore** — files under a base directory. Writes use
   exclusive create, so a second ``put`` of the same key raises
   ``ObjectExistsError`` instead of overwriting.
2. **MemoryObjectStore** — a locked dict. Volatile; suitable for tests and
   single-process hosting.

Keys are ``<digest>/<relative-path>``. No business logic lives here.
"""

from __future__ import annotations

import json
import logging
import shutil
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

from bobhost.core.errors import (
    InvalidInputError,
    ObjectExistsError,
    ObjectNotFoundError,
    StorageError,
)

logger = logging.getLogger(__name__)


def validate_key(key: str) -> str:
    """Reject keys that could escape the store namespace."""
    parts = key.split("/")
    if not key or key.startswith("/") or any(p in {"", ".", ".."} for p in parts):
        raise InvalidInputError(f"Invalid object key: {key!r}")
    return key


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class ObjectStore(Protocol):
    """Protocol for blob storage backends."""

    def put(self, key: str, data: bytes, content_type: str) -> None:
        """Store *data* under *key*.

        Raises ``ObjectExistsError`` if the key is already stored and
        ``StorageError`` on any other failure.
        """
        ...

    def get(self, key: str) -> bytes:
        """Return the bytes stored under *key* or raise ``ObjectNotFoundError``."""
        ...

    def remove(self, prefix: str) -> int:
        """Remove every object under *prefix*; return how many were removed."""
        ...

    def list_keys(self, prefix: str) -> list[str]:
        """Return sorted keys under *prefix*."""
        ...


# ---------------------------------------------------------------------------
# Filesystem backend
# ---------------------------------------------------------------------------


class LocalObjectStore:
    """Filesystem-backed object store.

    Layout::

        {base}/data/{key}         object bytes
        {base}/meta/{key}.json    {"content_type": ..., "size": ...}

    Parameters
    ----------
    base_path:
        Root directory. Created if it does not exist.
    """

    def __init__(self, base_path: Path) -> None:
        self._base = Path(base_path)
        self._data = self._base / "data"
        self._meta = self._base / "meta"
        self._data.mkdir(parents=True, exist_ok=True)
        self._meta.mkdir(parents=True, exist_ok=True)

    def _data_path(self, key: str) -> Path:
        return self._data / validate_key(key)

    def _meta_path(self, key: str) -> Path:
        return self._meta / f"{validate_key(key)}.json"

    def put(self, key: str, data: bytes, content_type: str) -> None:
        path = self._data_path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("xb") as handle:
                handle.write(data)
            meta = self._meta_path(key)
            meta.parent.mkdir(parents=True, exist_ok=True)
            meta.write_text(
                json.dumps({"content_type": content_type, "size": len(data)}),
                encoding="utf-8",
            )
        except FileExistsError as exc:
            raise ObjectExistsError(f"Object already exists: {key}") from exc
        except OSError as exc:
            raise StorageError(f"Failed to store {key}: {exc}") from exc

    def get(self, key: str) -> bytes:
        path = self._data_path(key)
        try:
            return path.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise ObjectNotFoundError(f"Object not found: {key}") from exc
        except OSError as exc:
            raise StorageError(f"Failed to read {key}: {exc}") from exc

    def content_type(self, key: str) -> str | None:
        """Content type recorded at ``put`` time, if any."""
        try:
            meta = json.loads(self._meta_path(key).read_text(encoding="utf-8"))
        except (FileNotFoundError, json.JSONDecodeError):
            return None
        return meta.get("content_type")

    def remove(self, prefix: str) -> int:
        prefix = validate_key(prefix.rstrip("/"))
        removed = len(self.list_keys(prefix))
        try:
            for root in (self._data, self._meta):
                target = root / prefix
                if target.is_dir():
                    shutil.rmtree(target)
                elif target.exists():
                    target.unlink()
            meta_file = self._meta / f"{prefix}.json"
            if meta_file.exists():
                meta_file.unlink()
        except OSError as exc:
            raise StorageError(f"Failed to remove {prefix}: {exc}") from exc
        logger.debug("LocalObjectStore: removed %d objects under %s", removed, prefix)
        return removed

    def list_keys(self, prefix: str) -> list[str]:
        target = self._data / validate_key(prefix.rstrip("/"))
        if target.is_file():
            return [prefix.rstrip("/")]
        if not target.is_dir():
            return []
        return sorted(
            p.relative_to(self._data).as_posix()
            for p in target.rglob("*")
            if p.is_file()
        )


# ---------------------------------------------------------------------------
# In-memory backend
# ---------------------------------------------------------------------------


class MemoryObjectStore:
    """Thread-safe in-memory object store.

    ``put_count`` counts every ``put`` attempt, successful or not, which
    lets callers assert that a code path performed no writes.
    """

    def __init__(self) -> None:
        self._objects: dict[str, tuple[bytes, str]] = {}
        self._lock = threading.Lock()
        self.put_count = 0

    def put(self, key: str, data: bytes, content_type: str) -> None:
        validate_key(key)
        with self._lock:
            self.put_count += 1
            if key in self._objects:
                raise ObjectExistsError(f"Object already exists: {key}")
            self._objects[key] = (bytes(data), content_type)

    def get(self, key: str) -> bytes:
        validate_key(key)
        with self._lock:
            entry = self._objects.get(key)
        if entry is None:
            raise ObjectNotFoundError(f"Object not found: {key}")
        return entry[0]

    def content_type(self, key: str) -> str | None:
        with self._lock:
            entry = self._objects.get(key)
        return entry[1] if entry else None

    def remove(self, prefix: str) -> int:
        stem = prefix.rstrip("/")
        with self._lock:
            doomed = [k for k in self._objects if k == stem or k.startswith(stem + "/")]
            for key in doomed:
                del self._objects[key]
        return len(doomed)

    def list_keys(self, prefix: str) -> list[str]:
        stem = prefix.rstrip("/")
        with self._lock:
            return sorted(
                k for k in self._objects if k == stem or k.startswith(stem + "/")
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._objects)
