"""vppchat CLI application - main entry point."""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.traceback import install

from vppchat.types import (
    AssumptionsConfig,
    VppCorrectness,
    VppModifiers,
    VppSeverity,
    VppSources,
    VppTag,
)

from .helpers import build_state_table, format_validation, parse_source_args, read_text_input, session_runtime

install(show_locals=False, width=None, word_wrap=True)

app = typer.Typer(
    name="vppchat",
    help="Viable-Prompt Protocol runtime: headers, footers and reply validation",
    no_args_is_help=True,
)

console = Console()

STATE_OPTION_HELP = "State file (defaults to the configured state file)"


def _modifiers(
    correctness: VppCorrectness,
    severity: VppSeverity,
    echo: Optional[VppTag],
) -> VppModifiers:
    return VppModifiers(correctness=correctness, severity=severity, echo_target=echo)


@app.command()
def header(
    tag: Optional[VppTag] = typer.Argument(None, help="Tag to request (defaults to the current tag)"),
    correctness: VppCorrectness = typer.Option(VppCorrectness.NEUTRAL, "--correctness", "-c", help="Mark prior reply"),
    severity: VppSeverity = typer.Option(VppSeverity.NONE, "--severity", "-s", help="Severity of the correction"),
    echo: Optional[VppTag] = typer.Option(None, "--echo", "-e", help="Echo target for escape headers"),
    state_file: Optional[Path] = typer.Option(None, "--state", help=STATE_OPTION_HELP),
):
    """Print the header line for an outbound user message.

    Examples:
        vppchat header q
        vppchat header e --echo o
        vppchat header o --correctness incorrect --severity major
    """
    with session_runtime(state_file, console, save=False) as runtime:
        chosen = tag if tag is not None else runtime.state.current_tag
        typer.echo(runtime.make_header(chosen, _modifiers(correctness, severity, echo)))


@app.command()
def compose(
    draft: Optional[str] = typer.Argument(None, help="Message text (reads stdin if omitted)"),
    tag: Optional[VppTag] = typer.Option(None, "--tag", "-t", help="Tag to request (defaults to the current tag)"),
    correctness: VppCorrectness = typer.Option(VppCorrectness.NEUTRAL, "--correctness", "-c", help="Mark prior reply"),
    severity: VppSeverity = typer.Option(VppSeverity.NONE, "--severity", "-s", help="Severity of the correction"),
    echo: Optional[VppTag] = typer.Option(None, "--echo", "-e", help="Echo target for escape headers"),
    assumption: Optional[List[str]] = typer.Option(None, "--assumption", "-a", help="Declared assumption (repeatable)"),
    zero_assumptions: bool = typer.Option(False, "--zero-assumptions", help="Declare that there are no assumptions"),
    state_file: Optional[Path] = typer.Option(None, "--state", help=STATE_OPTION_HELP),
):
    """Print a user message prefixed with its header line."""
    if draft is None:
        draft = read_text_input(None, console)

    assumptions = None
    if assumption:
        assumptions = AssumptionsConfig.custom(assumption)
    elif zero_assumptions:
        assumptions = AssumptionsConfig.zero()

    with session_runtime(state_file, console, save=False) as runtime:
        typer.echo(
            runtime.compose_user_message(
                draft,
                modifiers=_modifiers(correctness, severity, echo),
                assumptions=assumptions,
                tag=tag,
            )
        )


@app.command()
def footer(
    sources: VppSources = typer.Option(VppSources.NONE, "--sources", help="Sources summary token"),
    token: Optional[List[str]] = typer.Option(None, "--token", help="Explicit source token (repeatable)"),
    state_file: Optional[Path] = typer.Option(None, "--state", help=STATE_OPTION_HELP),
):
    """Print the footer line for the current protocol state."""
    with session_runtime(state_file, console, save=False) as runtime:
        typer.echo(runtime.make_footer(sources, source_tokens=token))


@app.command()
def ingest(
    reply: Optional[Path] = typer.Argument(None, help="Reply file ('-' or omitted reads stdin)"),
    state_file: Optional[Path] = typer.Option(None, "--state", help=STATE_OPTION_HELP),
):
    """Validate an assistant reply and update the state from its footer."""
    text = read_text_input(reply, console)

    with session_runtime(state_file, console) as runtime:
        result = runtime.ingest_assistant_reply(text)

        console.print(f"[bold]Validation:[/bold] {format_validation(result.validation)}")
        if result.footer_line is None:
            console.print("[yellow]No footer found; state unchanged[/yellow]")
        if result.sources_token is not None:
            console.print(f"[bold]Sources token:[/bold] {escape(result.sources_token)}")
        if result.sources:
            console.print(f"[bold]Sources table:[/bold] {len(result.sources)} row(s)")
        console.print(build_state_table(runtime.state))


@app.command()
def validate(
    replies: List[Path] = typer.Argument(..., help="Reply file(s) to validate"),
):
    """Check assistant replies for a leading tag line and a footer."""
    from rich.table import Table

    from vppchat.runtime import VppRuntime

    runtime = VppRuntime()
    table = Table(title="Reply Validation Results", show_header=True, header_style="bold cyan")
    table.add_column("File", style="dim")
    table.add_column("Status")

    invalid_count = 0
    for reply in replies:
        result = runtime.validate_assistant_reply(read_text_input(reply, console))
        if not result.is_valid:
            invalid_count += 1
        table.add_row(escape(str(reply)), format_validation(result))

    console.print(table)

    if invalid_count > 0:
        raise typer.Exit(1)


@app.command()
def tag(
    new_tag: VppTag = typer.Argument(..., help="Tag to switch to"),
    state_file: Optional[Path] = typer.Option(None, "--state", help=STATE_OPTION_HELP),
):
    """Switch the current tag. Every transition is allowed."""
    with session_runtime(state_file, console) as runtime:
        previous = runtime.state.current_tag
        if not runtime.is_advised_transition(new_tag):
            advised = ", ".join(sorted(t.value for t in runtime.allowed_next_tags()))
            console.print(f"[yellow]Note: {previous.value} usually moves to {advised}[/yellow]")
        runtime.set_tag(new_tag)
        console.print(f"[green]✓ Tag:[/green] {previous.value} → {new_tag.value}")


@app.command()
def step(
    state_file: Optional[Path] = typer.Option(None, "--state", help=STATE_OPTION_HELP),
):
    """Advance to the next step of the cycle."""
    with session_runtime(state_file, console) as runtime:
        runtime.next_in_cycle()
        console.print(f"[green]✓ Cycle:[/green] {runtime.state.cycle_index}/3")


@app.command("new-cycle")
def new_cycle(
    state_file: Optional[Path] = typer.Option(None, "--state", help=STATE_OPTION_HELP),
):
    """Start a new cycle at tag g."""
    with session_runtime(state_file, console) as runtime:
        runtime.new_cycle()
        console.print("[green]✓ New cycle started[/green]")


@app.command()
def prompt(
    source: Optional[List[str]] = typer.Option(None, "--source", help="Attached source as KIND:REF[::NAME]"),
):
    """Print the system prompt, including a sources table if given."""
    from vppchat.prompts import build_system_prompt

    typer.echo(build_system_prompt(parse_source_args(source or [])))


@app.command()
def strip(
    message: Optional[Path] = typer.Argument(None, help="Message file ('-' or omitted reads stdin)"),
    user: bool = typer.Option(False, "--user", help="Strip a user header instead of a reply tag/footer"),
):
    """Print a message without its protocol header and footer lines."""
    from vppchat.sanitize import strip_header_footer, strip_header_line

    text = read_text_input(message, console)
    typer.echo(strip_header_line(text) if user else strip_header_footer(text))


@app.command()
def version():
    """Show version information."""
    from vppchat import __version__

    console.print(f"vppchat version {__version__}")


# Register subcommands from separate modules
from .config import config_app  # noqa: E402
from .sources import sources_app  # noqa: E402
from .state import state_app  # noqa: E402

app.add_typer(state_app, name="state")
app.add_typer(sources_app, name="sources")
app.add_typer(config_app, name="config")
