"""CLI helper functions."""

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from vppchat.config import load_config
from vppchat.runtime import VppRuntime, VppValidationResult
from vppchat.sources import VppSourceRef
from vppchat.state_store import get_state_path, load_state, save_state
from vppchat.types import VppSourceKind, VppState

# Separates a source ref from its display name in "kind:ref::name" arguments
NAME_SEPARATOR = "::"


def resolve_state_path(state_file: Optional[Path]) -> Path:
    return state_file if state_file is not None else get_state_path(load_config())


@contextmanager
def session_runtime(state_file: Optional[Path], console: Console, save: bool = True) -> Iterator[VppRuntime]:
    """Load the stored conversation state into a runtime for one command.

    Args:
        state_file: Explicit state file, or None for the configured default
        console: Console for error output
        save: Write the state back after the command body succeeds

    Yields:
        Runtime holding the stored state
    """
    path = resolve_state_path(state_file)
    try:
        runtime = VppRuntime(load_state(path))
    except RuntimeError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    yield runtime

    if save:
        try:
            save_state(runtime.state, path)
        except RuntimeError as e:
            console.print(f"[red]{escape(str(e))}[/red]")
            raise typer.Exit(1)


def read_text_input(source: Optional[Path], console: Console) -> str:
    """Read text from a file, or from stdin when source is None or '-'."""
    if source is None or str(source) == "-":
        return sys.stdin.read()

    try:
        return source.read_text(encoding="utf-8")
    except FileNotFoundError:
        console.print(f"[red]File not found: {source}[/red]")
        raise typer.Exit(1)
    except OSError as e:
        console.print(f"[red]Failed to read {source}: {e}[/red]")
        raise typer.Exit(1)


def parse_source_args(values: List[str]) -> List[VppSourceRef]:
    """Parse ``kind:ref`` or ``kind:ref::name`` arguments into source refs.

    Ids are assigned in order as s1, s2, ...

    Raises:
        typer.BadParameter: If an argument has no kind or an unknown kind
    """
    refs = []
    for index, value in enumerate(values, start=1):
        kind_value, sep, rest = value.partition(":")
        if not sep or not rest.strip():
            raise typer.BadParameter(f"Expected KIND:REF, got {value!r}")
        try:
            kind = VppSourceKind(kind_value.strip().lower())
        except ValueError:
            choices = ", ".join(k.value for k in VppSourceKind)
            raise typer.BadParameter(f"Unknown source kind {kind_value!r} (choose from {choices})")

        ref, _, name = rest.partition(NAME_SEPARATOR)
        refs.append(VppSourceRef(id=f"s{index}", kind=kind, ref=ref, display_name=name or None))
    return refs


def build_state_table(state: VppState, title: str = "Protocol State") -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Field", style="dim")
    table.add_column("Value")
    table.add_row("Tag", state.current_tag.value)
    table.add_row("Cycle", f"{state.cycle_index}/3")
    table.add_row("Assumptions", str(state.assumptions))
    table.add_row("Locus", escape(state.locus) if state.locus else "[dim](unset)[/dim]")
    return table


def format_validation(result: VppValidationResult) -> str:
    if result.is_valid:
        return "[green]✓ Valid[/green]"
    return "[red]✗ " + escape("; ".join(result.issues)) + "[/red]"
