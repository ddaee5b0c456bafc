"""CLI entry point for the ticket quality audit."""

from __future__ import annotations

import click

from ticket_audit.cli.commands import analyze, check_connections, list_models


@click.group()
def cli() -> None:
    """Support ticket quality audit."""


cli.add_command(analyze)
cli.add_command(check_connections)
cli.add_command(list_models)
