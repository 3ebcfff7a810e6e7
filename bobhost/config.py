"""Host configuration — env-driven, file-overridable.

Centralized config using pydantic-settings. Reads from a .env file and
BOBHOST_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from bobhost.models.config import ArchiveLimits

MIB = 1024 * 1024


class HostConfig(BaseSettings):
    """Runtime configuration with environment variable overrides.

    All settings can be overridden via BOBHOST_* environment variables
    or a .env file in the working directory.

    Examples
    --------
    Override via environment::

        export BOBHOST_LOG_LEVEL=DEBUG
        export BOBHOST_DATABASE_PATH=/data/bobhost.db
        export BOBHOST_UPLOAD_CONCURRENCY=8
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BOBHOST_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Storage paths
    database_path: Path = Path(".bobhost/bobhost.db")
    object_store_path: Path = Path(".bobhost/objects")

    # Archive limits
    max_upload_bytes: int = Field(default=50 * MIB, gt=0)
    max_archive_entries: int = Field(default=1000, gt=0)
    max_extracted_bytes: int = Field(default=100 * MIB, gt=0)

    # Ingestion
    upload_concurrency: int = Field(default=5, gt=0)

    # Deployments
    max_deployments_per_owner: int = Field(default=50, gt=0)
    mount_prefix: str = "deploy"
    default_owner: str = "local"

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"

    def archive_limits(self) -> ArchiveLimits:
        """Return the archive limits the validator enforces."""
        return ArchiveLimits(
            max_upload_bytes=self.max_upload_bytes,
            max_entries=self.max_archive_entries,
            max_extracted_bytes=self.max_extracted_bytes,
        )


# Module-level singleton: import as `from bobhost.config import config`
config = HostConfig()
