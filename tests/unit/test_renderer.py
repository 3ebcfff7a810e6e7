"""Unit tests for the HostRenderer — panels, tables and size formatting."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from rich.console import Console

from bobhost.cli.renderer import HostRenderer, format_size
from bobhost.core.errors import ArchiveValidationError
from bobhost.models.artifacts import Artifact, IngestResult
from bobhost.models.deployments import Deployment, DeploymentStatus, DeploymentView


def _renderer() -> tuple[HostRenderer, Console]:
    console = Console(record=True, width=200)
    return HostRenderer(console=console), console


def _view(status: DeploymentStatus = DeploymentStatus.READY) -> DeploymentView:
    deployment = Deployment(
        id="dep-0123456789ab",
        name="demo.bob",
        owner_id="user-1",
        artifact_hash="f" * 64,
        status=status,
        created_at=datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc),
    )
    return DeploymentView(
        deployment=deployment,
        size=2048,
        file_count=4,
        access_path="/deploy/demo.bob",
        display_name="demo",
    )


class TestFormatSize:
    @pytest.mark.parametrize(
        "size, expected",
        [(0, "0 B"), (512, "512 B"), (2048, "2.0 KB"), (5 * 1024 * 1024, "5.0 MB")],
    )
    def test_format_size(self, size: int, expected: str):
        assert format_size(size) == expected


class TestHostRenderer:
    def test_ingest_created(self):
        renderer, console = _renderer()
        artifact = Artifact(hash="a" * 64, size=100, file_count=2)
        renderer.print_ingest(
            IngestResult(artifact=artifact, created=True, uploaded=2, entry_point="index.html")
        )
        text = console.export_text()
        assert "Artifact created!" in text
        assert "index.html" in text

    def test_ingest_existing(self):
        renderer, console = _renderer()
        artifact = Artifact(hash="a" * 64, size=100, file_count=2)
        renderer.print_ingest(IngestResult(artifact=artifact, created=False))
        assert "Artifact already exists" in console.export_text()

    def test_deployments_table(self):
        renderer, console = _renderer()
        renderer.print_deployments([_view()], title="Deployments")
        text = console.export_text()
        assert "dep-0123456789ab" in text
        assert "demo" in text
        assert "READY" in text
        assert "2.0 KB" in text

    def test_empty_listings(self):
        renderer, console = _renderer()
        renderer.print_deployments([], title="Deployments")
        renderer.print_deployments([], title="Bin", in_bin=True)
        text = console.export_text()
        assert "No deployments." in text
        assert "Bin is empty." in text

    def test_error_panel_lists_files(self):
        renderer, console = _renderer()
        renderer.print_error(
            ArchiveValidationError("ZIP must contain an index.html", files=["a.css", "b.js"])
        )
        text = console.export_text()
        assert "validation" in text
        assert "a.css" in text
        assert "b.js" in text
