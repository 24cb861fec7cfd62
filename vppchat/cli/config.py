"""Configuration management CLI commands."""

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

console = Console()

config_app = typer.Typer(help="Manage vppchat configuration")


@config_app.command("show")
def config_show():
    """Show current configuration."""
    from vppchat.config import get_config_path, load_config
    from vppchat.state_store import get_state_path

    config_path = get_config_path()
    config = load_config()

    console.print(f"[cyan]Configuration file:[/cyan] [dim]{config_path}[/dim]\n")

    if config.default_locus:
        console.print(f"[bold]Default Locus:[/bold] {escape(config.default_locus)}\n")
    else:
        console.print("[bold]Default Locus:[/bold] [dim](unset)[/dim]\n")

    console.print(f"[bold]Default Assumptions:[/bold] {config.default_assumptions}\n")
    console.print(f"[bold]State File:[/bold] {get_state_path(config)}")


@config_app.command("set-locus")
def config_set_locus(
    locus: Optional[str] = typer.Argument(None, help="Locus label (omit to unset)"),
):
    """Set the locus new conversations start with."""
    from vppchat.config import get_config_path, set_default_locus

    try:
        set_default_locus(locus)
        console.print(f"[green]✓ Default locus set to:[/green] {escape(locus) if locus else '(unset)'}")
        console.print(f"[dim]Saved to: {get_config_path()}[/dim]")
    except Exception as e:
        console.print(f"[red]Failed to set default locus: {e}[/red]")
        raise typer.Exit(1)


@config_app.command("set-assumptions")
def config_set_assumptions(
    assumptions: int = typer.Argument(..., help="Assumptions count (negative becomes 0)"),
):
    """Set the assumptions count new conversations start with."""
    from vppchat.config import get_config_path, set_default_assumptions

    try:
        set_default_assumptions(assumptions)
        console.print(f"[green]✓ Default assumptions set to:[/green] {max(0, assumptions)}")
        console.print(f"[dim]Saved to: {get_config_path()}[/dim]")
    except Exception as e:
        console.print(f"[red]Failed to set default assumptions: {e}[/red]")
        raise typer.Exit(1)
