"""Query shape of the Supabase stores, checked against a recording fake client."""

from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from postgrest.exceptions import APIError

from cloudbook.core.errors import ConflictError
from cloudbook.core.models.note import Folder
from cloudbook.core.repositories.implementations.supabase.note_repository import SupabaseNoteRepository
from cloudbook.core.repositories.implementations.supabase.user_repository import SupabaseUserRepository
from cloudbook.db.schema import ENSURE_SCHEMA_RPC


class FakeQuery:
    def __init__(self, table: str, data=None, error: Exception | None = None):
        self.table = table
        self.calls: list[tuple[str, tuple, dict]] = []
        self._data = data if data is not None else []
        self._error = error

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)

        def record(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return record

    def execute(self):
        if self._error is not None:
            raise self._error
        return SimpleNamespace(data=self._data)

    def called(self, name: str) -> list[tuple[tuple, dict]]:
        return [(args, kwargs) for n, args, kwargs in self.calls if n == name]


class FakeClient:
    """Hands out queued FakeQuery results in call order."""

    def __init__(self, *results):
        self._results = list(results)
        self.queries: list[FakeQuery] = []
        self.rpcs: list[tuple[str, dict]] = []

    def table(self, name: str) -> FakeQuery:
        data, error = self._results.pop(0) if self._results else (None, None)
        query = FakeQuery(name, data, error)
        self.queries.append(query)
        return query

    def rpc(self, name: str, params: dict) -> FakeQuery:
        self.rpcs.append((name, params))
        return FakeQuery("rpc")


NOTE_ROW = {
    "id": "n1",
    "user_id": 7,
    "title": None,
    "content": "body",
    "folder_id": "projects",
    "tags": None,
    "pinned": True,
    "created_at": "2024-01-01T00:00:00+00:00",
    "updated_at": "2024-01-02T00:00:00+00:00",
}

USER_ROW = {
    "id": 3,
    "name": "Ann",
    "email": "ann@x.com",
    "password_hash": "-",
    "created_at": "2024-01-01T00:00:00+00:00",
}


class TestSupabaseNoteRepository:
    @pytest.mark.asyncio
    async def test_list_is_scoped_and_ordered(self) -> None:
        client = FakeClient(([NOTE_ROW], None))
        notes = await SupabaseNoteRepository(client).list(user_id=7)

        query = client.queries[0]
        assert query.table == "notes"
        assert query.called("eq") == [(("user_id", 7), {})]
        assert query.called("order") == [(("pinned",), {"desc": True}), (("updated_at",), {"desc": True})]
        assert notes[0].title == ""
        assert notes[0].tags == []
        assert notes[0].folder_id is Folder.PROJECTS

    @pytest.mark.asyncio
    async def test_update_serializes_values_and_filters_owner(self) -> None:
        client = FakeClient(([NOTE_ROW], None))
        stamp = datetime(2024, 1, 3, tzinfo=timezone.utc)
        await SupabaseNoteRepository(client).update_fields(
            "n1",
            {"folder_id": Folder.TRASH, "updated_at": stamp, "user_id": 99},
            user_id=7,
        )

        query = client.queries[0]
        assert query.called("update") == [(({"folder_id": "trash", "updated_at": stamp.isoformat()},), {})]
        assert query.called("eq") == [(("id", "n1"), {}), (("user_id", 7), {})]

    @pytest.mark.asyncio
    async def test_missing_rows(self) -> None:
        client = FakeClient(([], None), ([], None), ([], None))
        repo = SupabaseNoteRepository(client)
        assert await repo.get("n1", user_id=7) is None
        assert await repo.update_fields("n1", {"title": "x"}, user_id=7) is None
        assert await repo.delete("n1", user_id=7) is False
        assert all(q.called("eq")[-1] == (("user_id", 7), {}) for q in client.queries)

    @pytest.mark.asyncio
    async def test_ensure_schema_uses_rpc(self) -> None:
        client = FakeClient()
        await SupabaseNoteRepository(client).ensure_schema()
        assert client.rpcs == [(ENSURE_SCHEMA_RPC, {})]


class TestSupabaseUserRepository:
    @pytest.mark.asyncio
    async def test_unique_violation_is_conflict(self) -> None:
        error = APIError({"message": "duplicate key value", "code": "23505", "hint": None, "details": None})
        client = FakeClient((None, error))
        with pytest.raises(ConflictError):
            await SupabaseUserRepository(client).create(name="Ann", email="ann@x.com", password_hash="h")

    @pytest.mark.asyncio
    async def test_other_api_errors_propagate(self) -> None:
        error = APIError({"message": "boom", "code": "XX000", "hint": None, "details": None})
        client = FakeClient((None, error))
        with pytest.raises(APIError):
            await SupabaseUserRepository(client).create(name="Ann", email="ann@x.com", password_hash="h")

    @pytest.mark.asyncio
    async def test_ensure_by_email_is_insert_or_ignore(self) -> None:
        client = FakeClient(([], None), ([USER_ROW], None))
        user = await SupabaseUserRepository(client).ensure_by_email(name="Ann", email="ann@x.com")

        upsert = client.queries[0].called("upsert")
        assert upsert == [
            (
                ({"name": "Ann", "email": "ann@x.com", "password_hash": "-"},),
                {"on_conflict": "email", "ignore_duplicates": True},
            )
        ]
        assert client.queries[1].called("eq") == [(("email", "ann@x.com"), {})]
        assert user.id == 3
