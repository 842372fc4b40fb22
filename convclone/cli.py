"""convclone CLI with Rich output.

Provides commands for:
- Cloning a conversation into a new, independent session
- Listing the sessions available to clone

Usage:
    convclone clone <session-id> [project-path]   # Clone a conversation
    convclone list                                 # Show available sessions
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from convclone import __version__
from convclone.cloner import ConversationCloner, validate_session_id
from convclone.config import Config
from convclone.errors import CloneError, TranscriptNotFoundError
from convclone.locator import TranscriptLocator

app = typer.Typer(
    name="convclone",
    help="convclone - Clone Claude Code conversations",
    rich_markup_mode="rich",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def print_banner():
    """Print convclone banner."""
    banner = Text()
    banner.append("conv", style="bold cyan")
    banner.append("clone", style="cyan")
    console.print(Panel(banner, border_style="cyan", box=box.ROUNDED))


def _version_callback(value: bool):
    if value:
        console.print(f"convclone {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """Clone Claude Code conversations into new sessions."""


def _print_available(sessions: list[str]):
    err_console.print("[blue]Available conversations:[/blue]")
    if not sessions:
        err_console.print("  [dim](none)[/dim]")
    for session_id in sessions:
        err_console.print(f"  - {session_id}")


@app.command()
def clone(
    session_id: Optional[str] = typer.Argument(
        None,
        help="UUID of the conversation to clone",
        show_default=False,
    ),
    project_path: Optional[str] = typer.Argument(
        None,
        help="Project path (default: current directory)",
        show_default=False,
    ),
):
    """Clone a conversation into a new session.

    If the conversation ends with a /clone command, that command and
    everything after it are left out of the copy.

    Examples:
        convclone clone d96c899d-7501-4e81-a31b-e0095bb3b501
        convclone clone d96c899d-7501-4e81-a31b-e0095bb3b501 /home/user/myproject
    """
    if not session_id:
        err_console.print("Usage: convclone clone <session-id> [project-path]", markup=False)
        raise typer.Exit(1)

    try:
        validate_session_id(session_id)
        project_path = str(Path(project_path).resolve()) if project_path else os.getcwd()
        result = ConversationCloner(Config()).clone(session_id, project_path)
    except TranscriptNotFoundError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        err_console.print(f"[blue]Looking in:[/blue] {e.searched}")
        _print_available(e.available)
        raise typer.Exit(1)
    except CloneError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    op = result.operation
    table = Table(box=box.ROUNDED, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Original session", op.source_session_id)
    table.add_row("New session", op.new_session_id)
    table.add_row("Project", op.project_path)
    table.add_row("Transcript", str(op.target_path))
    table.add_row("Lines written", str(result.stats.records_emitted))
    if op.cutoff is not None:
        table.add_row("Truncated at", f"line {op.cutoff}")
    if result.todo_path:
        table.add_row("Todos", str(result.todo_path))
    console.print(table)

    console.print("\n[green]✓ Conversation cloned successfully![/green]")
    console.print("\nTo resume the cloned conversation, use:")
    console.print("  [bold]claude -r[/bold]")
    console.print(f"\nThen select the conversation marked with [bold]{escape(op.clone_tag)}[/bold]")


@app.command("list")
def list_sessions(
    limit: int = typer.Option(20, "--limit", "-n", help="Max sessions to show"),
):
    """List conversations available to clone, newest first."""
    config = Config()
    sessions = TranscriptLocator(config.projects_dir).list_sessions()
    if not sessions:
        console.print(f"[yellow]No conversations found in {config.projects_dir}[/yellow]")
        return

    print_banner()
    table = Table(title="Conversations", box=box.ROUNDED)
    table.add_column("Session", style="cyan", no_wrap=True, min_width=36)
    table.add_column("Project")
    table.add_column("Size", justify="right")
    table.add_column("Modified", style="dim")
    for session in sessions[:limit]:
        modified = datetime.fromtimestamp(session["modified"]).strftime("%Y-%m-%d %H:%M")
        table.add_row(session["session_id"], session["project"], f"{session['size_kb']} KB", modified)
    console.print(table)
    if len(sessions) > limit:
        console.print(f"[dim]... and {len(sessions) - limit} more[/dim]")


if __name__ == "__main__":
    app()
