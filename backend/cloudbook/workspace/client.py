"""Async HTTP client for the CloudBook notes API.

Every method returns parsed models or raises NotesApiError, including when a
successful response carries a body of the wrong shape. The session cookie
set by signup/login is kept by the underlying httpx client.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import httpx

from cloudbook.api.v1.schemas.auth import UserPublic
from cloudbook.api.v1.schemas.note import NoteRead
from cloudbook.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_TIMEOUT = httpx.Timeout(connect=5.0, read=15.0, write=5.0, pool=5.0)


class NotesApiError(Exception):
    """A request to the notes API failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotesApiClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        api_prefix: str = "/api",
        client: httpx.AsyncClient | None = None,
    ):
        self._prefix = api_prefix.rstrip("/")
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=_TIMEOUT)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> NotesApiClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            resp = await self._client.request(method, f"{self._prefix}{path}", json=json)
        except httpx.HTTPError as e:
            logger.warning("Notes API unreachable", extra={"method": method, "path": path, "error": str(e)})
            raise NotesApiError(f"Cannot reach notes API: {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = None

        if resp.is_error:
            message = data.get("error") if isinstance(data, dict) else None
            raise NotesApiError(message or resp.reason_phrase, status_code=resp.status_code)
        if not isinstance(data, dict):
            logger.warning("Malformed notes API response", extra={"method": method, "path": path})
            raise NotesApiError("Unexpected response from notes API", status_code=resp.status_code)
        return data

    async def _fetch(
        self,
        method: str,
        path: str,
        parse: Callable[[dict[str, Any]], T],
        json: dict[str, Any] | None = None,
    ) -> T:
        data = await self._request(method, path, json)
        try:
            return parse(data)
        except (KeyError, TypeError, ValueError) as e:
            # pydantic's ValidationError is a ValueError
            logger.warning("Unexpected notes API payload", extra={"method": method, "path": path, "error": str(e)})
            raise NotesApiError("Unexpected response from notes API") from e

    # ---- auth ----

    async def signup(self, name: str, email: str, password: str) -> UserPublic:
        body = {"name": name, "email": email, "password": password}
        return await self._fetch("POST", "/auth/signup", _user, body)

    async def login(self, email: str, password: str) -> UserPublic:
        return await self._fetch("POST", "/auth/login", _user, {"email": email, "password": password})

    async def logout(self) -> None:
        await self._request("POST", "/auth/logout")

    async def me(self) -> UserPublic | None:
        return await self._fetch("GET", "/auth/me", _optional_user)

    # ---- notes ----

    async def list_notes(self) -> list[NoteRead]:
        return await self._fetch("GET", "/notes", _notes)

    async def create_note(self, **fields: Any) -> NoteRead:
        return await self._fetch("POST", "/notes", _note, _to_wire(fields))

    async def update_note(self, note_id: str, **fields: Any) -> NoteRead:
        return await self._fetch("PUT", f"/notes/{note_id}", _note, _to_wire(fields))

    async def delete_note(self, note_id: str) -> None:
        await self._request("DELETE", f"/notes/{note_id}")


def _user(data: dict[str, Any]) -> UserPublic:
    return UserPublic.model_validate(data["user"])


def _optional_user(data: dict[str, Any]) -> UserPublic | None:
    user = data["user"]
    return UserPublic.model_validate(user) if user else None


def _note(data: dict[str, Any]) -> NoteRead:
    return NoteRead.model_validate(data["note"])


def _notes(data: dict[str, Any]) -> list[NoteRead]:
    return [NoteRead.model_validate(n) for n in data["notes"]]


def _to_wire(fields: dict[str, Any]) -> dict[str, Any]:
    """snake_case keyword arguments to the API's camelCase body."""
    wire: dict[str, Any] = {}
    for key, value in fields.items():
        if key == "folder_id":
            key = "folderId"
        if hasattr(value, "value"):
            value = value.value
        wire[key] = value
    return wire
