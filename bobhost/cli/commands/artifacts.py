"""``bobhost files HASH`` — list the files stored for an artifact."""

from __future__ import annotations

import typer
from rich.table import Table

from bobhost.cli.commands._shared import build_host, console, reporting_errors
from bobhost.cli.renderer import format_size


def files_cmd(
    artifact_hash: str = typer.Argument(..., help="SHA-256 hash of the artifact."),
) -> None:
    """Show an artifact's metadata and stored paths."""
    host = build_host()
    with reporting_errors():
        artifact = host.get_artifact(artifact_hash)
        paths = host.artifact_files(artifact.hash)

    table = Table(title=f"Artifact {artifact.hash[:12]}")
    table.add_column("Path", style="cyan")
    for path in paths:
        table.add_row(path)

    console.print(table)
    console.print(
        f"[bold]Size:[/bold] {format_size(artifact.size)}  |  "
        f"[bold]Files:[/bold] {artifact.file_count}  |  "
        f"[bold]Created:[/bold] {artifact.created_at:%Y-%m-%d %H:%M}"
    )
