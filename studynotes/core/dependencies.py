"""
Session Wiring.

Builds the collaborators of one note-taking session from configuration.
Each call returns new objects; a session constructs them once and passes
them by reference.
"""

from pathlib import Path

from studynotes.clients.notes import RemoteNoteClient
from studynotes.core.config import get_app_config, get_data_dir, get_settings
from studynotes.repositories.credentials import CredentialStore
from studynotes.repositories.local import DurableLocalStore
from studynotes.repositories.note import NoteRepository
from studynotes.repositories.slots import SlotStore
from studynotes.services.editor import EditorSession
from studynotes.services.events import NoteEvents
from studynotes.services.search import SearchIndexer


def get_slot_store(data_dir: Path | None = None) -> SlotStore:
    return SlotStore(data_dir if data_dir is not None else get_data_dir())


def get_credential_store(slots: SlotStore | None = None) -> CredentialStore:
    storage = get_app_config().notes.storage
    return CredentialStore(
        slots or get_slot_store(),
        slot=storage.credential_slot,
        fallback=get_settings().auth_token,
    )


def get_remote_client(credentials: CredentialStore | None = None) -> RemoteNoteClient:
    """Notes API client carrying the stored credential, if any."""
    credentials = credentials or get_credential_store()
    return RemoteNoteClient(token=credentials.get_token())


def get_note_repository(
    slots: SlotStore | None = None,
    remote_client: RemoteNoteClient | None = None,
    events: NoteEvents | None = None,
) -> NoteRepository:
    """
    Build the repository for a session.

    Remote mode starts enabled only when a credential is stored.
    """
    notes_config = get_app_config().notes
    slots = slots or get_slot_store()
    if remote_client is None:
        remote_client = get_remote_client(get_credential_store(slots))

    return NoteRepository(
        DurableLocalStore(slots, slot=notes_config.storage.notes_slot),
        remote_client=remote_client,
        events=events,
        new_note_title=notes_config.editor.new_note_title,
    )


def get_editor_session(repository: NoteRepository) -> EditorSession:
    editor = get_app_config().notes.editor
    return EditorSession(
        repository,
        autosave_delay=editor.autosave_delay_ms / 1000,
        untitled_title=editor.untitled_title,
    )


def get_search_indexer(repository: NoteRepository) -> SearchIndexer:
    return SearchIndexer(
        lambda: repository.notes,
        events=repository.events,
        snippet_length=get_app_config().notes.search.snippet_length,
    )
