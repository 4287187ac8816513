"""
Note Repository.

Owns the in-memory note list and the active backing store for one
session. Every operation runs against the active backend; the first
remote failure switches the session to the local backend for good.

Remote mutations are not trusted as final: each successful one is
followed by a full reload so the list mirrors the server.

Usage:
    repo = NoteRepository(DurableLocalStore(slots), remote_client=client)
    await repo.load()
    note = repo.create()
    await repo.persist(note)
"""

import asyncio
import time

from studynotes.clients.notes import RemoteNoteClient
from studynotes.core.exceptions import RemoteUnavailable, ValidationError
from studynotes.core.logging import get_logger, log_with_source
from studynotes.repositories.backends import Backend, LocalBackend, RemoteBackend
from studynotes.repositories.local import DurableLocalStore
from studynotes.schemas.note import Note
from studynotes.services.events import MODE_CHANGED, NOTES_CHANGED, NoteEvents

logger = get_logger(__name__)

DEFAULT_NEW_NOTE_TITLE = "Change Topic Here"


class NoteRepository:
    """
    Dual-mode note store.

    Remote mode starts enabled only when a client carrying a credential is
    given. Degradation is one-way: nothing re-enables remote mode within a
    session.
    """

    def __init__(
        self,
        local_store: DurableLocalStore,
        remote_client: RemoteNoteClient | None = None,
        events: NoteEvents | None = None,
        new_note_title: str = DEFAULT_NEW_NOTE_TITLE,
    ) -> None:
        self._local = LocalBackend(local_store)
        self._backend: Backend = self._local
        if remote_client is not None and remote_client.has_credential:
            self._backend = RemoteBackend(remote_client)

        self.events = events or NoteEvents()
        self.new_note_title = new_note_title
        self.notes: list[Note] = []
        self._write_lock = asyncio.Lock()

    @property
    def remote_enabled(self) -> bool:
        return isinstance(self._backend, RemoteBackend)

    @property
    def mode(self) -> str:
        return self._backend.kind

    def get(self, note_id: str) -> Note | None:
        """Find a note in the in-memory list by id."""
        wanted = str(note_id)
        return next((n for n in self.notes if n.id == wanted), None)

    def new_local_id(self) -> str:
        """Millisecond timestamp id, bumped past any id already in the list."""
        taken = {n.id for n in self.notes}
        candidate = int(time.time() * 1000)
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    async def load(self) -> list[Note]:
        """
        Replace the in-memory list from the active backend.

        Falls back to the local store (and degrades) when the remote read
        fails.

        Returns:
            The new in-memory list
        """
        backend = self._backend
        if isinstance(backend, RemoteBackend):
            try:
                notes = await backend.list_notes()
            except RemoteUnavailable as e:
                self._degrade("load", e)
            else:
                self._replace(notes)
                return self.notes

        self._replace(self._local.list_notes())
        return self.notes

    def create(self, note: Note | None = None) -> Note:
        """
        Insert a note at the head of the list, before any backend confirms it.

        In local mode the whole list is written to the local store at once.
        In remote mode the caller follows up with persist().

        Args:
            note: Note to insert; a fresh local note is built when None

        Returns:
            The inserted note

        Raises:
            ValidationError: If a note with the same id is already in the list
        """
        if note is None:
            note = Note(id=self.new_local_id(), title=self.new_note_title, content="", user_id=None)
        elif self.get(note.id) is not None:
            raise ValidationError(f"Note {note.id} already exists", details={"id": note.id})

        note.mark_persisted(False)
        self.notes.insert(0, note)

        if not self.remote_enabled:
            self._local.save_all(self.notes)

        log_with_source(logger, "notes", "info", "Note created", note_id=note.id, mode=self.mode)
        self.events.emit(NOTES_CHANGED, self.notes)
        return note

    async def persist(self, note: Note | None) -> None:
        """
        Save a note to the active backend.

        Remote mode: POST once for an unconfirmed note (adopting the server's
        fields and id), PUT afterwards, then reload. Any remote failure
        degrades the session and the note is written locally instead.
        Local mode: upsert into the local store and take its collection as
        the new list.
        """
        if note is None:
            return

        async with self._write_lock:
            backend = self._backend
            if isinstance(backend, RemoteBackend):
                try:
                    if not note.persisted:
                        created = await backend.create(note)
                        note.merge(created)
                        note.mark_persisted()
                        log_with_source(logger, "notes", "info", "Note created remotely", note_id=note.id)
                    else:
                        await backend.update(note)
                        log_with_source(logger, "notes", "debug", "Note updated remotely", note_id=note.id)
                except RemoteUnavailable as e:
                    self._degrade("persist", e)
                else:
                    await self.load()
                    return

            self._replace(self._local.save(note))
            log_with_source(logger, "notes", "debug", "Note saved locally", note_id=note.id)

    async def delete(self, note_id: str) -> None:
        """
        Delete a note from the active backend and the in-memory list.

        Remote mode reloads after a successful DELETE; a failed one degrades
        and removes the note locally.
        """
        if not note_id:
            return

        async with self._write_lock:
            backend = self._backend
            if isinstance(backend, RemoteBackend):
                try:
                    await backend.delete(note_id)
                except RemoteUnavailable as e:
                    self._degrade("delete", e)
                else:
                    log_with_source(logger, "notes", "info", "Note deleted remotely", note_id=note_id)
                    await self.load()
                    return

            self._local.delete(note_id)
            self._replace([n for n in self.notes if n.id != note_id])
            log_with_source(logger, "notes", "info", "Note deleted locally", note_id=note_id)

    def _replace(self, notes: list[Note]) -> None:
        self.notes = notes
        self.events.emit(NOTES_CHANGED, self.notes)

    def _degrade(self, operation: str, error: RemoteUnavailable) -> None:
        log_with_source(
            logger,
            "notes",
            "warning",
            "Remote notes unavailable, continuing with local storage",
            operation=operation,
            error=error.message,
            status=getattr(error, "status", None),
        )
        self._backend = self._local
        self.events.emit(MODE_CHANGED, self.mode)
