"""``bobhost cat SITE [PATH]`` — resolve a request the way the server would.

Writes the served bytes to stdout (or a file) after index fallback and
``<base>`` rewriting, optionally printing the response headers.
"""

from __future__ import annotations

import sys
from pathlib import Path

import typer

from bobhost.cli.commands._shared import build_host, console, reporting_errors


def cat_cmd(
    site: str = typer.Argument(
        ...,
        help="Site name including the suffix, e.g. 'my-site.bob'.",
    ),
    path: str = typer.Argument(
        "",
        help="Path inside the site. Defaults to index.html.",
    ),
    headers: bool = typer.Option(
        False,
        "--headers",
        "-H",
        help="Print Content-Type and Cache-Control before the body.",
    ),
    output: Path = typer.Option(
        None,
        "--output",
        "-O",
        help="Write the body to a file instead of stdout.",
    ),
) -> None:
    """Print the content served for PATH on SITE."""
    host = build_host()
    with reporting_errors():
        served = host.resolve(site, path)

    if headers:
        console.print(f"[bold]Content-Type:[/bold] {served.content_type}")
        console.print(f"[bold]Cache-Control:[/bold] {served.cache_control}")
        if served.fallback:
            console.print(f"[dim]Served {served.path} as fallback.[/dim]")
        console.print()

    if output is not None:
        output.write_bytes(served.body)
        console.print(f"[green]Wrote {len(served.body)} bytes to {output}[/green]")
    elif served.is_html or served.content_type.startswith("text/"):
        typer.echo(served.body.decode("utf-8", errors="replace"))
    else:
        sys.stdout.buffer.write(served.body)
        sys.stdout.flush()
