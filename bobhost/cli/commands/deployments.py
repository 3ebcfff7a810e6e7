"""Deployment listing and lifecycle commands.

``ls`` and ``bin`` list the caller's deployments; ``rm`` moves one to the
bin, ``restore`` brings it back, and ``purge`` destroys it permanently,
reclaiming storage when no other live deployment uses the artifact.
"""

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


def ls_cmd(owner: str = owner_option()) -> None:
    """List active deployments, newest first."""
    host = build_host()
    views = host.list_deployments(resolve_owner(host, owner))
    renderer.print_deployments(views, title="Deployments")


def bin_cmd(owner: str = owner_option()) -> None:
    """List soft-deleted deployments, most recently deleted first."""
    host = build_host()
    views = host.list_bin(resolve_owner(host, owner))
    renderer.print_deployments(views, title="Bin", in_bin=True)


def rm_cmd(
    deployment_id: str = typer.Argument(..., help="Deployment ID (dep-...)."),
    owner: str = owner_option(),
) -> None:
    """Move a deployment to the bin. The name stays reserved."""
    host = build_host()
    with reporting_errors():
        deployment = host.soft_delete(deployment_id, resolve_owner(host, owner))
    console.print(f"[yellow]Moved to bin:[/yellow] {deployment.name} ({deployment.id})")


def restore_cmd(
    deployment_id: str = typer.Argument(..., help="Deployment ID (dep-...)."),
    owner: str = owner_option(),
) -> None:
    """Restore a deployment from the bin."""
    host = build_host()
    with reporting_errors():
        deployment = host.restore(deployment_id, resolve_owner(host, owner))
    console.print(f"[green]Restored:[/green] {deployment.name} ({deployment.id})")


def purge_cmd(
    deployment_id: str = typer.Argument(..., help="Deployment ID (dep-...)."),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Do not ask for confirmation.",
    ),
    owner: str = owner_option(),
) -> None:
    """Permanently delete a deployment.

    The artifact and its stored files are removed too when no other live
    deployment references them.
    """
    host = build_host()
    owner_id = resolve_owner(host, owner)
    with reporting_errors():
        deployment = host.get_deployment(deployment_id, owner_id)
        if not yes:
            typer.confirm(
                f"Permanently delete {deployment.name}? This cannot be undone.",
                abort=True,
            )
        result = host.purge(deployment_id, owner_id)

    console.print(f"[bold red]Permanently deleted:[/bold red] {deployment.name}")
    if result.artifact_removed:
        console.print(
            f"[dim]Artifact {result.artifact_hash[:12]} reclaimed "
            f"({result.objects_removed} objects).[/dim]"
        )
        if not result.storage_removed:
            console.print(
                "[yellow]Storage removal failed; orphaned objects may remain.[/yellow]"
            )
    else:
        console.print(
            f"[dim]Artifact {result.artifact_hash[:12]} kept; still in use.[/dim]"
        )
