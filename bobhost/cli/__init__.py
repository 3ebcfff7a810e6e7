"""bobhost CLI — Typer-based command-line interface.

Provides the ``bobhost`` command with subcommands for ingesting archives,
binding names, listing deployments and the bin, lifecycle operations, and
reading served content.

All output uses Rich for formatted terminal display.
"""
