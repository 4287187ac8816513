"""
Note Backends.

The two backing stores a NoteRepository can run against. The repository
holds exactly one of them at a time and swaps RemoteBackend for
LocalBackend when the remote side fails; nothing else switches modes.
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from studynotes.clients.notes import RemoteNoteClient
from studynotes.core.exceptions import RemoteUnavailable
from studynotes.repositories.local import DurableLocalStore
from studynotes.schemas.note import Note


class RemoteBackend:
    """Notes API backend. Every method may raise RemoteUnavailable."""

    kind = "remote"

    def __init__(self, client: RemoteNoteClient) -> None:
        self.client = client

    async def list_notes(self) -> list[Note]:
        records = await self.client.list_notes()
        try:
            notes = [Note.model_validate(record) for record in records]
        except PydanticValidationError as e:
            raise RemoteUnavailable(f"Notes API returned malformed notes: {e}") from e
        for note in notes:
            note.mark_persisted()
        return notes

    async def create(self, note: Note) -> dict[str, Any]:
        """POST the note; the returned record is checked before anyone merges it."""
        created = await self.client.create_note(note.to_payload(include_id=False))
        try:
            Note.model_validate({**note.to_payload(), **created})
        except PydanticValidationError as e:
            raise RemoteUnavailable(f"Notes API returned a malformed note: {e}") from e
        return created

    async def update(self, note: Note) -> None:
        await self.client.update_note(note.id, note.to_payload())

    async def delete(self, note_id: str) -> None:
        await self.client.delete_note(note_id)


class LocalBackend:
    """Local slot backend. Synchronous and never fails for callers."""

    kind = "local"

    def __init__(self, store: DurableLocalStore) -> None:
        self.store = store

    def list_notes(self) -> list[Note]:
        return self.store.list_all()

    def save(self, note: Note) -> list[Note]:
        return self.store.upsert(note)

    def save_all(self, notes: list[Note]) -> None:
        self.store.replace_all(notes)

    def delete(self, note_id: str) -> list[Note]:
        return self.store.remove(note_id)


Backend = RemoteBackend | LocalBackend
