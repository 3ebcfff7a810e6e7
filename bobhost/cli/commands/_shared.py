"""Helpers shared by the CLI commands."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import typer
from rich.console import Console

from bobhost.cli.renderer import HostRenderer
from bobhost.config import HostConfig
from bobhost.core.errors import HostError
from bobhost.core.host import StaticHost

console = Console()
renderer = HostRenderer(console=console)


def owner_option() -> str:
    return typer.Option(
        None,
        "--owner",
        "-o",
        help="Owner id (defaults to BOBHOST_DEFAULT_OWNER).",
    )


def build_host() -> StaticHost:
    """Construct a host from the current environment."""
    return StaticHost(HostConfig())


def resolve_owner(host: StaticHost, owner: str | None) -> str:
    return owner or host.config.default_owner


@contextmanager
def reporting_errors() -> Iterator[None]:
    """Render ``HostError`` as a red panel and exit with code 1."""
    try:
        yield
    except HostError as exc:
        renderer.print_error(exc)
        raise typer.Exit(code=1) from exc
