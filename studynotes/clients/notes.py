"""
Notes API Client.

Async HTTP client for the remote notes API. One network round trip per
call, no retries. Transport failures and non-success statuses surface as
RemoteUnavailable / RemoteError so callers have a single failure type to
recover from.

Usage:
    async with RemoteNoteClient(token="abc") as client:
        notes = await client.list_notes()
        created = await client.create_note({"title": "Week 1"})
"""

from typing import Any
from urllib.parse import quote

import httpx

from studynotes.core.config import get_api_base_url, get_app_config
from studynotes.core.exceptions import RemoteError, RemoteUnavailable
from studynotes.core.logging import get_logger, log_with_source

logger = get_logger(__name__)


class RemoteNoteClient:
    """
    HTTP client for the notes API.

    Features:
    - Base URL, paths and timeout from application.yaml
    - Authorization: Bearer header when a credential is present
    - Structured logging of requests/responses
    - Typed errors for every failure mode
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        notes_path: str | None = None,
        health_path: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the notes client.

        Args:
            base_url: API base URL. If None, read from application.yaml.
            token: Bearer credential. No Authorization header when None.
            timeout: Request timeout in seconds. If None, read from application.yaml.
            notes_path: Notes collection path. If None, read from application.yaml.
            health_path: Health check path. If None, read from application.yaml.
            transport: Optional httpx transport (used by tests).
        """
        if base_url is None or timeout is None or notes_path is None or health_path is None:
            config_base_url, config_timeout = get_api_base_url()
            api = get_app_config().application.api
            base_url = base_url or config_base_url
            timeout = timeout if timeout is not None else config_timeout
            notes_path = notes_path or api.notes_path
            health_path = health_path or api.health_path

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.notes_path = "/" + notes_path.strip("/")
        self.health_path = "/" + health_path.strip("/")
        self._token = token
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def has_credential(self) -> bool:
        return bool(self._token)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "RemoteNoteClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
    ) -> Any:
        """
        Send one request and decode the JSON answer.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: Path relative to the base URL
            json: Optional JSON body

        Returns:
            Decoded JSON body, or None when the body is empty

        Raises:
            RemoteError: On a non-2xx status (carries status and body text)
            RemoteUnavailable: On transport failure or an undecodable body
        """
        client = await self._get_client()

        headers = {}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        log_with_source(logger, "remote", "debug", "API request", method=method, path=path)

        try:
            response = await client.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as e:
            log_with_source(
                logger,
                "remote",
                "error",
                "API request failed",
                method=method,
                path=path,
                error=str(e),
            )
            raise RemoteUnavailable(f"{method} {path} failed: {e}") from e

        log_with_source(
            logger,
            "remote",
            "debug",
            "API response",
            method=method,
            path=path,
            status_code=response.status_code,
        )

        if not response.is_success:
            raise RemoteError(response.status_code, response.text)

        if not response.content.strip():
            return None

        try:
            return response.json()
        except ValueError as e:
            raise RemoteUnavailable(f"{method} {path} returned an undecodable body") from e

    def _note_path(self, note_id: str) -> str:
        return f"{self.notes_path}/{quote(str(note_id), safe='')}"

    async def list_notes(self) -> list[dict[str, Any]]:
        """GET the note collection. A non-array answer is read as empty."""
        data = await self.request("GET", self.notes_path)
        if not isinstance(data, list):
            log_with_source(
                logger,
                "remote",
                "warning",
                "Note list response is not an array",
                found=type(data).__name__,
            )
            return []
        return data

    async def create_note(self, payload: dict[str, Any]) -> dict[str, Any]:
        """POST a new note. Returns the created record (with its assigned id)."""
        data = await self.request("POST", self.notes_path, json=payload)
        return data if isinstance(data, dict) else {}

    async def update_note(self, note_id: str, payload: dict[str, Any]) -> Any:
        """PUT the full note by id."""
        return await self.request("PUT", self._note_path(note_id), json=payload)

    async def delete_note(self, note_id: str) -> Any:
        """DELETE a note by id."""
        return await self.request("DELETE", self._note_path(note_id))

    async def health(self) -> Any:
        """GET the service health endpoint."""
        return await self.request("GET", self.health_path)
