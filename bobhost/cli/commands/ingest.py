"""``bobhost ingest`` and ``bobhost publish`` — upload an archive.

``ingest`` stores the archive as an artifact (once per digest) and prints
its hash. ``publish`` additionally binds a name to it.
"""

from __future__ import annotations

from pathlib import Path

import typer

from bobhost.cli.commands._shared import (
    build_host,
    console,
    owner_option,
    renderer,
    reporting_errors,
    resolve_owner,
)
from bobhost.core.hasher import sha256_hex


def _read_archive(archive: Path) -> bytes:
    if not archive.is_file():
        console.print(f"[bold red]Archive not found:[/bold red] {archive}")
        raise typer.Exit(code=1)
    return archive.read_bytes()


def ingest_cmd(
    archive: Path = typer.Argument(
        ...,
        help="Path to the ZIP archive of the site.",
    ),
    claimed_hash: str = typer.Option(
        None,
        "--hash",
        help="Expected SHA-256 of the archive. Computed locally if omitted.",
    ),
) -> None:
    """Store an archive as a content-addressed artifact.

    Re-ingesting identical bytes returns the existing artifact without
    uploading anything.
    """
    raw = _read_archive(archive)
    host = build_host()
    with reporting_errors():
        result = host.ingest(raw, claimed_hash or sha256_hex(raw))

    console.print()
    renderer.print_ingest(result)
    console.print()

    # Print the hash plainly for scripting
    console.print(f"[bold]{result.hash}[/bold]")


def publish_cmd(
    archive: Path = typer.Argument(
        ...,
        help="Path to the ZIP archive of the site.",
    ),
    name: str = typer.Argument(
        ...,
        help="Desired site name, e.g. 'my-site'.",
    ),
    owner: str = owner_option(),
) -> None:
    """Ingest an archive and bind a site name to it."""
    raw = _read_archive(archive)
    host = build_host()
    with reporting_errors():
        ingested, deployed = host.publish(raw, name, resolve_owner(host, owner))

    console.print()
    renderer.print_ingest(ingested)
    renderer.print_deploy(deployed)
    console.print()
    console.print(f"[bold]{deployed.access_path}[/bold]")
