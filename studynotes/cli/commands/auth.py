"""
Auth Commands.

Manage the stored notes API credential. With a credential stored, note
commands start in remote mode; without one they use local storage only.
"""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from studynotes.clients.notes import RemoteNoteClient
from studynotes.core.dependencies import get_credential_store
from studynotes.core.exceptions import RemoteUnavailable, ValidationError

app = typer.Typer(help="Notes API credential commands")
console = Console()


@app.command()
def login(
    token: str = typer.Option(..., "--token", prompt=True, hide_input=True, help="Bearer token for the notes API"),
) -> None:
    """Store the bearer token used for the notes API."""
    try:
        get_credential_store().set_token(token)
    except ValidationError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)
    console.print("[green]Credential stored. Notes will sync with the server.[/green]")


@app.command()
def logout() -> None:
    """Remove the stored credential. Notes stay local afterwards."""
    get_credential_store().clear()
    console.print("[green]Logged out. Notes will be kept locally.[/green]")


@app.command()
def status() -> None:
    """Show the storage mode a session would start in and whether the API answers."""
    asyncio.run(_status())


async def _status() -> None:
    credentials = get_credential_store()
    token = credentials.get_token()

    table = Table(title="Notes Storage", show_header=False)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_row("Credential", "[green]stored[/green]" if token else "[dim]none[/dim]")
    table.add_row("Start mode", "remote" if token else "local")

    async with RemoteNoteClient(token=token) as client:
        table.add_row("API", client.base_url)
        try:
            await client.health()
            table.add_row("API health", "[green]reachable[/green]")
        except RemoteUnavailable as e:
            table.add_row("API health", f"[red]unreachable[/red] [dim]({e.message})[/dim]")

    console.print(table)
