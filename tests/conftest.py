"""Shared test fixtures for bobhost."""

from __future__ import annotations

import io
import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

from bobhost.config import HostConfig
from bobhost.core.archive_validator import ArchiveValidator
from bobhost.core.artifact_repository import ArtifactRepository
from bobhost.core.database import Database
from bobhost.core.deployment_registry import DeploymentRegistry
from bobhost.core.host import StaticHost
from bobhost.core.ingestion import IngestionPipeline
from bobhost.core.lifecycle import LifecycleManager
from bobhost.core.object_store import MemoryObjectStore
from bobhost.core.resolver import ServingResolver
from bobhost.models.config import ArchiveLimits

INDEX_HTML = (
    "<!DOCTYPE html>\n<html><head><title>Site</title></head>"
    "<body><h1>Hello</h1></body></html>"
)

OWNER = "user-1"


def build_zip(files: dict[str, bytes | str]) -> bytes:
    """Build an in-memory ZIP from a {path: content} mapping."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for path, content in files.items():
            if path.endswith("/"):
                archive.writestr(zipfile.ZipInfo(path), b"")
                continue
            data = content.encode("utf-8") if isinstance(content, str) else content
            archive.writestr(path, data)
    return buffer.getvalue()


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for databases and objects."""
    return tmp_path


@pytest.fixture
def make_zip() -> Callable[[dict[str, bytes | str]], bytes]:
    """Factory fixture: build ZIP bytes from a {path: content} mapping."""
    return build_zip


@pytest.fixture
def index_html() -> str:
    return INDEX_HTML


@pytest.fixture
def site_zip() -> bytes:
    """A small valid site: index, stylesheet, script and an image."""
    return build_zip({
        "index.html": INDEX_HTML,
        "about.html": "<html><head></head><body>About</body></html>",
        "css/site.css": "body { color: red; }",
        "js/app.js": "console.log('hi');",
        "img/logo.png": b"\x89PNG\r\n\x1a\n" + b"\x00" * 32,
    })


@pytest.fixture
def database(tmp_dir: Path) -> Database:
    """Provide a fresh SQLite database in a temp directory."""
    return Database(tmp_dir / "bobhost.db")


@pytest.fixture
def object_store() -> MemoryObjectStore:
    return MemoryObjectStore()


@pytest.fixture
def repository(database: Database) -> ArtifactRepository:
    return ArtifactRepository(database)


@pytest.fixture
def registry(database: Database, repository: ArtifactRepository) -> DeploymentRegistry:
    return DeploymentRegistry(database, repository, max_deployments=5)


@pytest.fixture
def validator() -> ArchiveValidator:
    return ArchiveValidator(ArchiveLimits())


@pytest.fixture
def pipeline(
    repository: ArtifactRepository,
    object_store: MemoryObjectStore,
    validator: ArchiveValidator,
) -> IngestionPipeline:
    return IngestionPipeline(repository, object_store, validator, upload_concurrency=3)


@pytest.fixture
def resolver(registry: DeploymentRegistry, object_store: MemoryObjectStore) -> ServingResolver:
    return ServingResolver(registry, object_store, mount_prefix="deploy")


@pytest.fixture
def lifecycle(
    registry: DeploymentRegistry,
    repository: ArtifactRepository,
    object_store: MemoryObjectStore,
) -> LifecycleManager:
    return LifecycleManager(registry, repository, object_store)


@pytest.fixture
def host_config(tmp_dir: Path) -> HostConfig:
    return HostConfig(
        database_path=tmp_dir / "host.db",
        object_store_path=tmp_dir / "objects",
        max_deployments_per_owner=5,
    )


@pytest.fixture
def host(host_config: HostConfig) -> StaticHost:
    """A StaticHost backed by the filesystem object store."""
    return StaticHost(host_config)


@pytest.fixture
def owner() -> str:
    return OWNER
