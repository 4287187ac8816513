"""
Interactive Shell Mode.

REPL around a single EditorSession. Input is read in a worker thread so
the debounced autosave keeps running while the prompt waits.
"""

import asyncio
import shlex
from typing import Callable

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from studynotes.cli.commands.notes import note_panel, notes_table, results_table
from studynotes.core.dependencies import (
    get_credential_store,
    get_editor_session,
    get_note_repository,
    get_remote_client,
    get_search_indexer,
    get_slot_store,
)
from studynotes.core.exceptions import ApplicationError, NoActiveNoteError
from studynotes.core.logging import get_logger, log_with_source
from studynotes.schemas.note import Note
from studynotes.services.editor import EditorSession
from studynotes.services.events import MODE_CHANGED
from studynotes.services.search import SearchIndexer

console = Console()
logger = get_logger(__name__)


class InteractiveShell:
    """
    Interactive note editor.

    Usage:
        shell = InteractiveShell(session, indexer)
        await shell.run()
    """

    def __init__(self, session: EditorSession, indexer: SearchIndexer) -> None:
        self.session = session
        self.indexer = indexer
        self.running = False
        self.commands: dict[str, Callable] = {
            "help": self._cmd_help,
            "list": self._cmd_list,
            "search": self._cmd_search,
            "open": self._cmd_open,
            "show": self._cmd_show,
            "new": self._cmd_new,
            "title": self._cmd_title,
            "write": self._cmd_write,
            "append": self._cmd_append,
            "save": self._cmd_save,
            "delete": self._cmd_delete,
            "mode": self._cmd_mode,
            "clear": self._cmd_clear,
            "quit": self._cmd_quit,
            "exit": self._cmd_quit,
        }
        self.session.events.subscribe(MODE_CHANGED, self._on_mode_changed)

    @property
    def repository(self):
        return self.session.repository

    async def run(self) -> None:
        """Run the interactive shell."""
        self.running = True

        await self.session.open()
        console.print(Panel(
            "[bold]Study Notes[/bold]\n"
            f"Storage: [cyan]{self.repository.mode}[/cyan], {len(self.repository.notes)} note(s)\n"
            "Type [cyan]help[/cyan] for available commands, [cyan]quit[/cyan] to exit.",
            title="Welcome",
        ))
        self._print_active()

        while self.running:
            try:
                user_input = (await asyncio.to_thread(console.input, "[bold cyan]>[/bold cyan] ")).strip()

                if not user_input:
                    continue

                parts = shlex.split(user_input)
                command = parts[0].lower()
                args = parts[1:]

                if command in self.commands:
                    await self.commands[command](args)
                else:
                    console.print(f"[red]Unknown command: {command}[/red]")
                    console.print("Type [cyan]help[/cyan] for available commands.")

            except KeyboardInterrupt:
                console.print("\n[dim]Use 'quit' to exit[/dim]")
            except EOFError:
                break
            except NoActiveNoteError as e:
                console.print(f"[yellow]{e.message}[/yellow]")
            except ApplicationError as e:
                console.print(f"[red]Error: {e.message}[/red]")
            except ValueError as e:
                # unbalanced quotes from shlex
                console.print(f"[red]Error: {e}[/red]")

        await self.session.close()
        console.print("[dim]Goodbye![/dim]")

    def _on_mode_changed(self, mode: str) -> None:
        log_with_source(logger, "shell", "info", "Storage mode changed", mode=mode)
        console.print("[yellow]Notes service unreachable, working with local notes from now on.[/yellow]")

    def _print_active(self) -> None:
        note = self.session.active_note
        if note is None:
            console.print("[dim]Select or Create a Topic[/dim]")
        else:
            console.print(f"Editing [bold]{note.display_title}[/bold] [dim]({note.id})[/dim]")

    def _active(self) -> Note:
        if self.session.active_note is None:
            raise NoActiveNoteError()
        return self.session.active_note

    async def _cmd_help(self, args: list[str]) -> None:
        """Display help information."""
        table = Table(title="Available Commands", show_header=True)
        table.add_column("Command", style="cyan")
        table.add_column("Description")

        table.add_row("list", "List notes (most recent first)")
        table.add_row("search <term>", "Search titles and content")
        table.add_row("open <id>", "Make a note active")
        table.add_row("show", "Show the active note")
        table.add_row("new", "Create a note and make it active")
        table.add_row("title <text>", "Rename the active note (autosaved)")
        table.add_row("write <text>", "Replace the active note's content (autosaved)")
        table.add_row("append <text>", "Add a line to the active note's content (autosaved)")
        table.add_row("save", "Save the active note now")
        table.add_row("delete", "Delete the active note")
        table.add_row("mode", "Show the storage mode")
        table.add_row("clear", "Clear the screen")
        table.add_row("quit / exit", "Exit the shell")

        console.print(table)

    async def _cmd_list(self, args: list[str]) -> None:
        term = " ".join(args)
        notes = self.indexer.filter_compact(term)
        if not notes:
            console.print("[dim]No topics[/dim]" if term else "[dim]No topics yet[/dim]")
            return
        active = self.session.active_note
        console.print(notes_table(notes, active_id=active.id if active else None))

    async def _cmd_search(self, args: list[str]) -> None:
        results = self.indexer.search_panel(" ".join(args))
        if not results:
            console.print("[dim]No matches[/dim]")
            return
        console.print(results_table(results, self.indexer))

    async def _cmd_open(self, args: list[str]) -> None:
        if not args:
            console.print("[yellow]Usage: open <id>[/yellow]")
            return
        if self.session.select(args[0]) is None:
            console.print(f"[red]Note not found: {args[0]}[/red]")
            return
        self._print_active()

    async def _cmd_show(self, args: list[str]) -> None:
        console.print(note_panel(self._active()))

    async def _cmd_new(self, args: list[str]) -> None:
        note = await self.session.new_note()
        console.print(f"[green]Created[/green] {note.display_title} [dim]({note.id})[/dim]")

    async def _cmd_title(self, args: list[str]) -> None:
        self._active()
        self.session.edit("title", " ".join(args))

    async def _cmd_write(self, args: list[str]) -> None:
        self._active()
        self.session.edit("content", " ".join(args))

    async def _cmd_append(self, args: list[str]) -> None:
        note = self._active()
        line = " ".join(args)
        self.session.edit("content", f"{note.content}\n{line}" if note.content else line)

    async def _cmd_save(self, args: list[str]) -> None:
        note = await self.session.save()
        console.print(f"[green]Note saved.[/green] [dim]({note.id}, {self.repository.mode})[/dim]")

    async def _cmd_delete(self, args: list[str]) -> None:
        self._active()

        async def confirm(note: Note) -> bool:
            return await asyncio.to_thread(Confirm.ask, f"Delete '{note.display_title}'?", console=console)

        if await self.session.delete(confirm):
            console.print("[green]Note deleted.[/green]")
            self._print_active()

    async def _cmd_mode(self, args: list[str]) -> None:
        console.print(f"Storage: [cyan]{self.repository.mode}[/cyan]")

    async def _cmd_clear(self, args: list[str]) -> None:
        """Clear the screen."""
        console.clear()

    async def _cmd_quit(self, args: list[str]) -> None:
        """Exit the shell."""
        self.running = False


async def run_shell() -> None:
    """Run the interactive shell."""
    slots = get_slot_store()
    async with get_remote_client(get_credential_store(slots)) as client:
        repository = get_note_repository(slots=slots, remote_client=client)
        shell = InteractiveShell(get_editor_session(repository), get_search_indexer(repository))
        await shell.run()
