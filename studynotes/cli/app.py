"""
Study Notes CLI.

Command-line client for the note store.
Built with Typer for type-safe commands and Rich for formatted output.

Usage:
    studynotes --help                          # Show help

    # Notes
    studynotes notes list                      # List notes
    studynotes notes search week1              # Search titles and content
    studynotes notes show <id>                 # Show one note
    studynotes notes new -t "Week 1" -c "..."  # Create a note
    studynotes notes edit <id> -c "..."        # Change a note
    studynotes notes delete <id>               # Delete a note (asks first)

    # Credential
    studynotes auth login                      # Store the notes API token
    studynotes auth logout                     # Forget it (local-only mode)
    studynotes auth status                     # Start mode and API health

    # Interactive mode
    studynotes shell                           # Start interactive editor

Options:
    --verbose, -v     Enable verbose output
    --debug, -d       Enable debug mode (detailed logging)
    --help            Show help message
"""

import asyncio

import typer
from rich.console import Console

from studynotes.cli.commands import auth_app, notes_app
from studynotes.core.config import find_project_root
from studynotes.core.logging import setup_logging

app = typer.Typer(
    name="studynotes",
    help="Study Notes CLI - notes with server sync and local fallback.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

app.add_typer(notes_app, name="notes")
app.add_typer(auth_app, name="auth")


def _validate_project_root() -> None:
    """Validate that we're running inside the project."""
    try:
        find_project_root()
    except RuntimeError:
        console.print("[red]Error: .project_root not found. Run from project root.[/red]")
        raise typer.Exit(1)


@app.command()
def shell() -> None:
    """
    Start interactive shell mode.

    Edit notes in a REPL; changes are autosaved shortly after each edit.
    """
    from studynotes.cli.shell import run_shell

    asyncio.run(run_shell())


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output (INFO level logging)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging)",
    ),
) -> None:
    """
    Study Notes CLI.

    Notes are kept on the notes server when a credential is stored and
    the server answers, and in local storage otherwise.
    """
    _validate_project_root()

    if debug:
        setup_logging(level="DEBUG", format_type="console", enable_console=True)
        console.print("[dim]Debug mode enabled[/dim]")
    elif verbose:
        setup_logging(level="INFO", format_type="console", enable_console=True)
    else:
        setup_logging()


if __name__ == "__main__":
    app()
