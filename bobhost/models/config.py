"""Ingestion limit models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ArchiveLimits(BaseModel):
    """Ceilings enforced while validating and extracting an uploaded archive."""

    model_config = ConfigDict(frozen=True)

    max_upload_bytes: int = Field(default=50 * 1024 * 1024, gt=0)
    max_entries: int = Field(default=1000, gt=0)
    max_extracted_bytes: int = Field(default=100 * 1024 * 1024, gt=0)
