"""
Note Commands.

One-shot commands against the note store. Each command loads the notes
from the active backend (remote when a credential is stored, local
otherwise), performs one action and exits.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from studynotes.core.dependencies import (
    get_credential_store,
    get_editor_session,
    get_note_repository,
    get_remote_client,
    get_search_indexer,
    get_slot_store,
)
from studynotes.repositories.note import NoteRepository
from studynotes.schemas.note import Note
from studynotes.services.events import MODE_CHANGED
from studynotes.services.search import NO_CONTENT, SearchIndexer

app = typer.Typer(help="Create, browse, search and delete notes")
console = Console()


@asynccontextmanager
async def open_repository() -> AsyncIterator[NoteRepository]:
    """Build a repository for one command and load its notes."""
    slots = get_slot_store()
    async with get_remote_client(get_credential_store(slots)) as client:
        repository = get_note_repository(slots=slots, remote_client=client)
        repository.events.subscribe(MODE_CHANGED, _warn_degraded)
        await repository.load()
        yield repository


def _warn_degraded(mode: str) -> None:
    console.print("[yellow]Notes service unreachable, working with local notes.[/yellow]")


def notes_table(notes: list[Note], title: str = "Notes", active_id: str | None = None) -> Table:
    table = Table(title=title, show_header=True)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title")
    for note in notes:
        marker = "[green]●[/green] " if note.id == active_id else ""
        table.add_row(note.id, f"{marker}{note.display_title}")
    return table


def results_table(results: list[Note], indexer: SearchIndexer) -> Table:
    table = Table(title="Search Results", show_header=True)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Snippet", style="dim")
    for note in results:
        table.add_row(note.id, note.display_title, indexer.preview(note))
    return table


def note_panel(note: Note) -> Panel:
    return Panel(note.content or f"[dim]{NO_CONTENT}[/dim]", title=note.display_title, subtitle=note.id)


@app.command("list")
def list_notes() -> None:
    """List all notes, most recent first."""
    asyncio.run(_list())


async def _list() -> None:
    async with open_repository() as repository:
        if not repository.notes:
            console.print("[dim]No topics yet[/dim]")
            return
        console.print(notes_table(repository.notes, title=f"Notes ({repository.mode})"))


@app.command()
def search(
    term: str = typer.Argument(..., help="Text to look for in titles and content"),
) -> None:
    """
    Search notes by title and content (case-insensitive).

    Examples:
        studynotes notes search week1
    """
    asyncio.run(_search(term))


async def _search(term: str) -> None:
    async with open_repository() as repository:
        indexer = get_search_indexer(repository)
        results = indexer.search_panel(term)
        if not results:
            console.print("[dim]No matches[/dim]")
            return
        console.print(results_table(results, indexer))


@app.command()
def show(note_id: str = typer.Argument(..., help="Note ID")) -> None:
    """Show a single note."""
    asyncio.run(_show(note_id))


async def _show(note_id: str) -> None:
    async with open_repository() as repository:
        note = repository.get(note_id)
        if note is None:
            console.print(f"[red]Note not found: {note_id}[/red]")
            raise typer.Exit(1)
        console.print(note_panel(note))


@app.command()
def new(
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Note title"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="Note content"),
) -> None:
    """Create a note."""
    asyncio.run(_new(title, content))


async def _new(title: str | None, content: str | None) -> None:
    async with open_repository() as repository:
        session = get_editor_session(repository)
        await session.new_note()
        if title is not None:
            session.edit("title", title)
        if content is not None:
            session.edit("content", content)
        note = await session.save()
        console.print(f"[green]Note created:[/green] {note.id} ({note.display_title}, {repository.mode})")


@app.command()
def edit(
    note_id: str = typer.Argument(..., help="Note ID"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="New content"),
) -> None:
    """Change the title and/or content of a note."""
    if title is None and content is None:
        console.print("[yellow]Nothing to change. Pass --title and/or --content.[/yellow]")
        raise typer.Exit(1)
    asyncio.run(_edit(note_id, title, content))


async def _edit(note_id: str, title: str | None, content: str | None) -> None:
    async with open_repository() as repository:
        session = get_editor_session(repository)
        if session.select(note_id) is None:
            console.print(f"[red]Note not found: {note_id}[/red]")
            raise typer.Exit(1)
        if title is not None:
            session.edit("title", title)
        if content is not None:
            session.edit("content", content)
        note = await session.save()
        console.print(f"[green]Note saved:[/green] {note.id} ({repository.mode})")


@app.command()
def delete(
    note_id: str = typer.Argument(..., help="Note ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete a note."""
    asyncio.run(_delete(note_id, yes))


async def _delete(note_id: str, yes: bool) -> None:
    async with open_repository() as repository:
        session = get_editor_session(repository)
        if session.select(note_id) is None:
            console.print(f"[red]Note not found: {note_id}[/red]")
            raise typer.Exit(1)

        deleted = await session.delete(
            lambda note: yes or typer.confirm(f"Delete '{note.display_title}'?")
        )
        if deleted:
            console.print(f"[green]Note deleted:[/green] {note_id}")
        else:
            console.print("[dim]Cancelled[/dim]")
