"""``bobhost deploy NAME HASH`` — bind a site name to a stored artifact."""

from __future__ import annotations

import typer

from bobhost.cli.commands._shared import (
    build_host,
    console,
    owner_option,
    renderer,
    reporting_errors,
    resolve_owner,
)


def deploy_cmd(
    name: str = typer.Argument(
        ...,
        help="Desired site name. Normalized to lower-case letters, digits and hyphens.",
    ),
    artifact_hash: str = typer.Argument(
        ...,
        help="SHA-256 hash of an ingested artifact.",
    ),
    owner: str = owner_option(),
) -> None:
    """Bind a site name to an artifact.

    Names are unique and stay reserved while the deployment is in the bin.
    """
    host = build_host()
    with reporting_errors():
        result = host.deploy(name, artifact_hash, resolve_owner(host, owner))

    console.print()
    renderer.print_deploy(result)
    console.print()
    console.print(f"[bold]{result.access_path}[/bold]")
