"""
Unit Tests for RemoteNoteClient.

Requests go through httpx.MockTransport; no sockets are opened.
"""

import httpx
import pytest

from studynotes.clients.notes import RemoteNoteClient
from studynotes.core.exceptions import RemoteError, RemoteUnavailable


def _client(handler, token: str | None = "tok") -> RemoteNoteClient:
    return RemoteNoteClient(
        base_url="http://notes.test/",
        token=token,
        timeout=1.0,
        notes_path="api/notes",
        health_path="/api/health",
        transport=httpx.MockTransport(handler),
    )


class TestConfiguration:
    """Constructor defaults and normalization."""

    def test_paths_normalized(self):
        client = _client(lambda r: httpx.Response(200))
        assert client.base_url == "http://notes.test"
        assert client.notes_path == "/api/notes"

    def test_defaults_from_application_yaml(self):
        client = RemoteNoteClient()
        assert client.base_url == "http://localhost:5501"
        assert client.notes_path == "/api/notes"
        assert client.health_path == "/api/health"
        assert client.timeout == 10.0

    def test_has_credential(self):
        assert _client(lambda r: httpx.Response(200)).has_credential is True
        assert _client(lambda r: httpx.Response(200), token=None).has_credential is False
        assert _client(lambda r: httpx.Response(200), token="").has_credential is False


class TestRequest:
    """Tests for request()."""

    @pytest.mark.asyncio
    async def test_bearer_header_and_json(self):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[])

        async with _client(handler) as client:
            await client.request("GET", "/api/notes")

        assert seen[0].headers["Authorization"] == "Bearer tok"
        assert seen[0].headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_no_authorization_without_token(self):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[])

        async with _client(handler, token=None) as client:
            await client.request("GET", "/api/notes")

        assert "Authorization" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_error_status_raises_remote_error(self):
        async with _client(lambda r: httpx.Response(500, text="boom")) as client:
            with pytest.raises(RemoteError) as exc_info:
                await client.request("GET", "/api/notes")

        assert exc_info.value.status == 500
        assert exc_info.value.body == "boom"
        assert exc_info.value.message == "API error 500: boom"
        assert isinstance(exc_info.value, RemoteUnavailable)

    @pytest.mark.asyncio
    async def test_transport_error_raises_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(RemoteUnavailable):
                await client.request("GET", "/api/notes")

    @pytest.mark.asyncio
    async def test_timeout_raises_unavailable(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        async with _client(handler) as client:
            with pytest.raises(RemoteUnavailable):
                await client.request("GET", "/api/notes")

    @pytest.mark.asyncio
    async def test_empty_body_returns_none(self):
        async with _client(lambda r: httpx.Response(204)) as client:
            assert await client.request("PUT", "/api/notes/1", json={}) is None

    @pytest.mark.asyncio
    async def test_undecodable_body_raises_unavailable(self):
        async with _client(lambda r: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(RemoteUnavailable):
                await client.request("GET", "/api/notes")


class TestNoteOperations:
    """Typed wrappers for the note endpoints."""

    @pytest.mark.asyncio
    async def test_list_notes(self, remote_client, fake_api):
        fake_api.notes = [{"id": "1", "title": "A"}]
        assert await remote_client.list_notes() == [{"id": "1", "title": "A"}]

    @pytest.mark.asyncio
    async def test_list_notes_non_array_is_empty(self):
        async with _client(lambda r: httpx.Response(200, json={"notes": []})) as client:
            assert await client.list_notes() == []

    @pytest.mark.asyncio
    async def test_create_note_returns_record(self, remote_client, fake_api):
        created = await remote_client.create_note({"title": "Week 1", "content": ""})

        assert created["id"] == "srv-101"
        assert fake_api.bodies("POST") == [{"title": "Week 1", "content": ""}]

    @pytest.mark.asyncio
    async def test_update_and_delete_paths(self, remote_client, fake_api):
        fake_api.notes = [{"id": "a b", "title": "A"}]

        await remote_client.update_note("a b", {"id": "a b", "title": "B"})
        await remote_client.delete_note("a b")

        assert [r.method for r in fake_api.requests] == ["PUT", "DELETE"]
        assert all(r.url.raw_path == b"/api/notes/a%20b" for r in fake_api.requests)
        assert fake_api.notes == []

    @pytest.mark.asyncio
    async def test_health(self, remote_client):
        assert await remote_client.health() == {"status": "ok"}


@pytest.mark.asyncio
async def test_close_is_idempotent(remote_client):
    await remote_client.health()
    await remote_client.close()
    await remote_client.close()
