"""Protocol state CLI commands."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from .helpers import build_state_table, resolve_state_path, session_runtime

console = Console()

state_app = typer.Typer(help="Inspect and edit the stored protocol state")

STATE_OPTION_HELP = "State file (defaults to the configured state file)"


@state_app.command("show")
def state_show(
    state_file: Optional[Path] = typer.Option(None, "--state", help=STATE_OPTION_HELP),
):
    """Show the current protocol state."""
    with session_runtime(state_file, console, save=False) as runtime:
        console.print(f"[cyan]State file:[/cyan] [dim]{resolve_state_path(state_file)}[/dim]\n")
        console.print(build_state_table(runtime.state))


@state_app.command("reset")
def state_reset(
    state_file: Optional[Path] = typer.Option(None, "--state", help=STATE_OPTION_HELP),
):
    """Reset the state to the configured defaults."""
    from vppchat.config import default_state

    with session_runtime(state_file, console) as runtime:
        runtime.state = default_state()
        console.print("[green]✓ State reset[/green]")
        console.print(build_state_table(runtime.state))


@state_app.command("set")
def state_set(
    assumptions: Optional[int] = typer.Option(None, "--assumptions", help="Assumptions count (negative becomes 0)"),
    locus: Optional[str] = typer.Option(None, "--locus", help="Locus label"),
    clear_locus: bool = typer.Option(False, "--clear-locus", help="Unset the locus"),
    state_file: Optional[Path] = typer.Option(None, "--state", help=STATE_OPTION_HELP),
):
    """Set assumptions and/or locus.

    Examples:
        vppchat state set --assumptions 2
        vppchat state set --locus "Parser rewrite"
        vppchat state set --clear-locus
    """
    if assumptions is None and locus is None and not clear_locus:
        console.print("[yellow]Nothing to set[/yellow]")
        raise typer.Exit(1)

    with session_runtime(state_file, console) as runtime:
        if assumptions is not None:
            runtime.set_assumptions(assumptions)
        if clear_locus:
            runtime.set_locus(None)
        elif locus is not None:
            runtime.set_locus(locus)
        console.print(build_state_table(runtime.state))
