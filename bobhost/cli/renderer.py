"""Rich terminal renderer for bobhost command output.

Turns ingestion results, deployment listings and errors into Rich
renderables.

Color scheme
------------
- green     : READY
- yellow    : QUEUED
- dim red   : DELETED
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from bobhost.core.errors import HostError
from bobhost.models.artifacts import IngestResult
from bobhost.models.deployments import DeploymentStatus, DeploymentView, DeployResult

_STATUS_LABELS: dict[DeploymentStatus, str] = {
    DeploymentStatus.READY: "[green]READY[/green]",
    DeploymentStatus.QUEUED: "[yellow]QUEUED[/yellow]",
    DeploymentStatus.DELETED: "[dim red]DELETED[/dim red]",
}


def format_size(size: int) -> str:
    """Human-readable byte count."""
    value = float(size)
    for unit in ("B", "KB", "MB"):
        if value < 1024:
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


class HostRenderer:
    """Renders bobhost results as Rich terminal output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def print_ingest(self, result: IngestResult) -> None:
        artifact = result.artifact
        if result.created:
            heading = "[bold green]Artifact created![/bold green]"
        else:
            heading = "[bold yellow]Artifact already exists[/bold yellow]"

        lines = [
            heading,
            "",
            f"[bold]Hash:[/bold]        {artifact.hash}",
            f"[bold]Size:[/bold]        {format_size(artifact.size)}",
            f"[bold]Files:[/bold]       {artifact.file_count}",
        ]
        if result.entry_point:
            lines.append(f"[bold]Entry point:[/bold] {result.entry_point}")
        if result.created:
            lines.append(f"[bold]Extracted:[/bold]   {format_size(result.total_size)}")
        for warning in result.warnings:
            lines.append(f"[yellow]warning:[/yellow] {warning}")

        self.console.print(
            Panel("\n".join(lines), title="[bold]Ingest[/bold]", border_style="green", padding=(1, 2))
        )

    def print_deploy(self, result: DeployResult) -> None:
        deployment = result.deployment
        self.console.print(
            Panel(
                "\n".join([
                    "[bold green]Deployment created![/bold green]",
                    "",
                    f"[bold]ID:[/bold]       {deployment.id}",
                    f"[bold]Name:[/bold]     {deployment.name}",
                    f"[bold]Artifact:[/bold] {deployment.artifact_hash}",
                    f"[bold]URL:[/bold]      {result.access_path}",
                ]),
                title="[bold]Deploy[/bold]",
                border_style="green",
                padding=(1, 2),
            )
        )

    def render_deployments(self, views: list[DeploymentView], *, title: str, in_bin: bool = False) -> Table:
        table = Table(title=title)
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Name", style="bold")
        table.add_column("Status", justify="center")
        table.add_column("Files", justify="right")
        table.add_column("Size", justify="right")
        table.add_column("Hash", style="dim")
        table.add_column("Deleted" if in_bin else "Created")

        for view in views:
            d = view.deployment
            stamp = d.deleted_at if in_bin and d.deleted_at else d.created_at
            table.add_row(
                d.id,
                view.display_name,
                _STATUS_LABELS.get(d.status, d.status.value),
                str(view.file_count),
                format_size(view.size),
                d.artifact_hash[:12],
                stamp.strftime("%Y-%m-%d %H:%M"),
            )
        return table

    def print_deployments(self, views: list[DeploymentView], *, title: str, in_bin: bool = False) -> None:
        if not views:
            self.console.print("[dim]Bin is empty.[/dim]" if in_bin else "[dim]No deployments.[/dim]")
            return
        self.console.print(self.render_deployments(views, title=title, in_bin=in_bin))

    def print_error(self, exc: HostError) -> None:
        lines = [f"[bold red]{exc.kind}:[/bold red] {exc.message}"]
        if exc.files:
            lines.append("")
            lines.append("[bold]Files:[/bold]")
            lines.extend(f"  [dim]-[/dim] {path}" for path in exc.files)
        self.console.print(Panel("\n".join(lines), title="[bold red]Error[/bold red]", border_style="red"))
