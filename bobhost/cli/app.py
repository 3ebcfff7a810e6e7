"""Main Typer application — imports and registers all CLI commands.

Entry point: ``bobhost`` (configured via pyproject.toml console_scripts).

Commands: ingest, publish, deploy, ls, bin, rm, restore, purge, cat, files.
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from bobhost.cli.commands.artifacts import files_cmd
from bobhost.cli.commands.deploy import deploy_cmd
from bobhost.cli.commands.deployments import (
    bin_cmd,
    ls_cmd,
    purge_cmd,
    restore_cmd,
    rm_cmd,
)
from bobhost.cli.commands.ingest import ingest_cmd, publish_cmd
from bobhost.cli.commands.serve import cat_cmd
from bobhost.config import config

app = typer.Typer(
    name="bobhost",
    help="bobhost: content-addressed static site hosting.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="ingest", help="Store a ZIP archive as an artifact.")(ingest_cmd)
app.command(name="publish", help="Ingest a ZIP archive and bind a name to it.")(publish_cmd)
app.command(name="deploy", help="Bind a site name to an artifact.")(deploy_cmd)
app.command(name="ls", help="List active deployments.")(ls_cmd)
app.command(name="bin", help="List deployments in the bin.")(bin_cmd)
app.command(name="rm", help="Move a deployment to the bin.")(rm_cmd)
app.command(name="restore", help="Restore a deployment from the bin.")(restore_cmd)
app.command(name="purge", help="Permanently delete a deployment.")(purge_cmd)
app.command(name="cat", help="Print the content served for a path.")(cat_cmd)
app.command(name="files", help="List the files stored for an artifact.")(files_cmd)


def configure_logging(level: str) -> None:
    """Route library logging through Rich on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=Console(stderr=True), rich_tracebacks=True, show_path=False
            )
        ],
        force=True,
    )


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to BOBHOST_LOG_LEVEL, or DEBUG with BOBHOST_DEBUG).",
    ),
) -> None:
    """bobhost: content-addressed static site hosting."""
    configure_logging(log_level or ("DEBUG" if config.debug else config.log_level))


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
