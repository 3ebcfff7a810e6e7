"""SQLite persistence shared by the artifact repository and deployment registry.

Design:
- One connection per operation; WAL journal mode for concurrent readers.
- ``artifacts.hash`` is the primary key, which is what resolves concurrent
  ingestions of identical bytes to a single record.
- ``deployments.name`` is UNIQUE; soft-deleted rows keep their name.
- ``deployments.artifact_hash`` references ``artifacts`` with ON DELETE
  CASCADE, so reclaiming an artifact also clears bin entries that still
  point at it.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_ARTIFACTS = """
CREATE TABLE IF NOT EXISTS artifacts (
    hash        TEXT PRIMARY KEY,
    size        INTEGER NOT NULL,
    file_count  INTEGER NOT NULL,
    created_at  TEXT NOT NULL
);
"""

_CREATE_DEPLOYMENTS = """
CREATE TABLE IF NOT EXISTS deployments (
    id             TEXT PRIMARY KEY,
    name           TEXT NOT NULL UNIQUE,
    owner_id       TEXT NOT NULL,
    artifact_hash  TEXT NOT NULL REFERENCES artifacts(hash) ON DELETE CASCADE,
    status         TEXT NOT NULL,
    created_at     TEXT NOT NULL,
    deleted_at     TEXT
);
"""

_CREATE_IDX_OWNER = """
CREATE INDEX IF NOT EXISTS idx_deployments_owner ON deployments(owner_id, created_at);
"""

_CREATE_IDX_ARTIFACT = """
CREATE INDEX IF NOT EXISTS idx_deployments_artifact ON deployments(artifact_hash);
"""


class Database:
    """Thin wrapper around an SQLite file holding both tables.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    timeout:
        Seconds a writer waits on a locked database before failing.
    """

    def __init__(self, db_path: Path, *, timeout: float = 30.0) -> None:
        self._db_path = Path(db_path)
        self._timeout = timeout
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @property
    def path(self) -> Path:
        return self._db_path

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            str(self._db_path), timeout=self._timeout, check_same_thread=False
        )
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection that commits on success and always closes."""
        conn = self._open()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self.connect() as conn:
            conn.execute(_CREATE_ARTIFACTS)
            conn.execute(_CREATE_DEPLOYMENTS)
            conn.execute(_CREATE_IDX_OWNER)
            conn.execute(_CREATE_IDX_ARTIFACT)
