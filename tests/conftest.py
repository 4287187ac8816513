"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Remote API:
    Tests never open sockets. The notes API is replaced by FakeNotesApi,
    an in-memory implementation mounted on httpx.MockTransport, which
    records every request and can be switched into failure modes.

Local storage:
    Every test gets its own slot directory under tmp_path.
"""

import json
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest

from studynotes.clients.notes import RemoteNoteClient
from studynotes.repositories.credentials import CredentialStore
from studynotes.repositories.local import DurableLocalStore
from studynotes.repositories.note import NoteRepository
from studynotes.repositories.slots import SlotStore
from studynotes.services.events import NoteEvents

BASE_URL = "http://notes.test"


# =============================================================================
# Fake Notes API
# =============================================================================


class FakeNotesApi:
    """
    In-memory notes API.

    Attributes:
        notes: Server-side records, most recent first
        requests: Every request received, in order
        fail_status: When set, every request answers with this status
        fail_transport: When True, every request raises ConnectError
        post_response: When set, POST answers with this body and stores nothing
    """

    def __init__(self, notes: list[dict[str, Any]] | None = None) -> None:
        self.notes: list[dict[str, Any]] = list(notes or [])
        self.requests: list[httpx.Request] = []
        self.fail_status: int | None = None
        self.fail_transport = False
        self.post_response: dict[str, Any] | None = None
        self._next_id = 100

    @property
    def calls(self) -> list[tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.requests]

    def bodies(self, method: str) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests if r.method == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.fail_transport:
            raise httpx.ConnectError("Connection refused", request=request)
        if self.fail_status is not None:
            return httpx.Response(self.fail_status, text="server exploded")

        path = request.url.path
        if path == "/api/health":
            return httpx.Response(200, json={"status": "ok"})

        if path == "/api/notes":
            if request.method == "GET":
                return httpx.Response(200, json=self.notes)
            if request.method == "POST":
                if self.post_response is not None:
                    return httpx.Response(201, json=self.post_response)
                self._next_id += 1
                record = {**json.loads(request.content), "id": f"srv-{self._next_id}", "userId": "student-1"}
                self.notes.insert(0, record)
                return httpx.Response(201, json=record)

        if path.startswith("/api/notes/"):
            note_id = path.rsplit("/", 1)[1]
            index = next((i for i, n in enumerate(self.notes) if n["id"] == note_id), None)
            if index is None:
                return httpx.Response(404, text="Note not found")
            if request.method == "PUT":
                self.notes[index] = {**json.loads(request.content), "id": note_id}
                return httpx.Response(204)
            if request.method == "DELETE":
                self.notes.pop(index)
                return httpx.Response(204)

        return httpx.Response(405, text="Method not allowed")


@pytest.fixture
def fake_api() -> FakeNotesApi:
    """Empty in-memory notes API."""
    return FakeNotesApi()


def make_client(api: FakeNotesApi, token: str | None = "student-token") -> RemoteNoteClient:
    return RemoteNoteClient(
        base_url=BASE_URL,
        token=token,
        timeout=5.0,
        notes_path="/api/notes",
        health_path="/api/health",
        transport=httpx.MockTransport(api.handler),
    )


@pytest.fixture
def client_factory():
    """
    Build notes clients against a FakeNotesApi.

    Usage:
        client = client_factory(fake_api, token=None)
    """
    return make_client


@pytest.fixture
async def remote_client(fake_api: FakeNotesApi) -> AsyncGenerator[RemoteNoteClient, None]:
    """Notes client with a credential, wired to fake_api."""
    client = make_client(fake_api)
    yield client
    await client.close()


# =============================================================================
# Local Storage Fixtures
# =============================================================================


@pytest.fixture
def slots(tmp_path) -> SlotStore:
    """Slot store rooted in a per-test directory."""
    return SlotStore(tmp_path / "data")


@pytest.fixture
def local_store(slots: SlotStore) -> DurableLocalStore:
    return DurableLocalStore(slots, slot="notes")


@pytest.fixture
def credentials(slots: SlotStore) -> CredentialStore:
    return CredentialStore(slots, slot="authToken")


# =============================================================================
# Repository Fixtures
# =============================================================================


@pytest.fixture
def events() -> NoteEvents:
    return NoteEvents()


@pytest.fixture
def local_repository(local_store: DurableLocalStore, events: NoteEvents) -> NoteRepository:
    """Repository that starts in local mode (no credential)."""
    return NoteRepository(local_store, remote_client=None, events=events)


@pytest.fixture
def remote_repository(
    local_store: DurableLocalStore,
    remote_client: RemoteNoteClient,
    events: NoteEvents,
) -> NoteRepository:
    """Repository that starts in remote mode against fake_api."""
    return NoteRepository(local_store, remote_client=remote_client, events=events)
