"""Sources table CLI commands."""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from vppchat.sources import format_sources_table, parse_sources_table, sorted_by_token, summarize_sources

from .helpers import parse_source_args, read_text_input

console = Console()

sources_app = typer.Typer(help="Format and parse sources tables")


@sources_app.command("format")
def sources_format(
    sources: List[str] = typer.Argument(..., help="Sources as KIND:REF[::NAME]"),
):
    """Print a sources table for the given references.

    Examples:
        vppchat sources format web:wikipedia.org/wiki/Spinoza
        vppchat sources format "file:/tmp/notes.md::Notes" repo:github.com/owner/repo
    """
    try:
        refs = parse_source_args(sources)
    except typer.BadParameter as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    typer.echo(format_sources_table(refs))


@sources_app.command("parse")
def sources_parse(
    message: Optional[Path] = typer.Argument(None, help="Message file ('-' or omitted reads stdin)"),
):
    """List the sources table embedded in a message."""
    refs = parse_sources_table(read_text_input(message, console))

    if not refs:
        console.print("[yellow]No sources table found[/yellow]")
        return

    table = Table(title=f"Sources ({len(refs)} found)")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Kind", style="green")
    table.add_column("Ref")
    table.add_column("Name", style="dim")

    for ref in sorted_by_token(refs):
        table.add_row(ref.id, ref.kind.value, escape(ref.ref), escape(ref.display_name or ""))

    console.print(table)
    console.print(f"[bold]Summary:[/bold] {summarize_sources(refs).value}")


@sources_app.command("summary")
def sources_summary(
    message: Optional[Path] = typer.Argument(None, help="Message file ('-' or omitted reads stdin)"),
):
    """Print the footer Sources token for the table embedded in a message."""
    refs = parse_sources_table(read_text_input(message, console))
    typer.echo(summarize_sources(refs).value)
