"""Tests for the user-scoped note service."""

import pytest

from cloudbook.api.v1.schemas.note import NoteCreate, NoteUpdate
from cloudbook.core.errors import NotFoundError
from cloudbook.core.models.note import Folder
from cloudbook.core.services.note_service import NoteService

ANN = 1
BOB = 2


@pytest.fixture()
def service(note_repo) -> NoteService:
    return NoteService(note_repo)


class TestCreate:
    @pytest.mark.asyncio
    async def test_defaults(self, service) -> None:
        note = await service.create_note(NoteCreate(), user_id=ANN)
        assert note.title == ""
        assert note.content == ""
        assert note.folder_id is Folder.NOTES
        assert note.tags == []
        assert note.pinned is False
        assert note.created_at == note.updated_at

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, service) -> None:
        ids = {(await service.create_note(NoteCreate(), user_id=ANN)).id for _ in range(20)}
        assert len(ids) == 20

    @pytest.mark.asyncio
    async def test_tags_are_deduplicated(self, service) -> None:
        note = await service.create_note(NoteCreate(tags=["work", " work", "", "ideas"]), user_id=ANN)
        assert note.tags == ["work", "ideas"]


class TestUpdate:
    @pytest.mark.asyncio
    async def test_scenario_pin_then_delete(self, service) -> None:
        note = await service.create_note(NoteCreate(title="Hi", content="", folder_id="notes"), user_id=ANN)
        assert note.pinned is False
        assert note.created_at == note.updated_at

        pinned = await service.update_note(note.id, NoteUpdate(pinned=True), user_id=ANN)
        assert pinned.pinned is True
        assert pinned.updated_at > pinned.created_at
        assert pinned.title == "Hi"

        await service.delete_note(note.id, user_id=ANN)
        with pytest.raises(NotFoundError):
            await service.get_note(note.id, user_id=ANN)

    @pytest.mark.asyncio
    async def test_unspecified_pinned_is_kept(self, service) -> None:
        note = await service.create_note(NoteCreate(pinned=True), user_id=ANN)
        updated = await service.update_note(note.id, NoteUpdate(title="Renamed"), user_id=ANN)
        assert updated.pinned is True
        explicit_null = await service.update_note(note.id, NoteUpdate(pinned=None), user_id=ANN)
        assert explicit_null.pinned is True
        unpinned = await service.update_note(note.id, NoteUpdate(pinned=False), user_id=ANN)
        assert unpinned.pinned is False

    @pytest.mark.asyncio
    async def test_only_supplied_fields_change(self, service) -> None:
        note = await service.create_note(
            NoteCreate(title="T", content="body", folder_id="projects", tags=["a"]), user_id=ANN
        )
        updated = await service.update_note(note.id, NoteUpdate(content="new body"), user_id=ANN)
        assert (updated.title, updated.content, updated.folder_id, updated.tags) == (
            "T", "new body", Folder.PROJECTS, ["a"]
        )

    @pytest.mark.asyncio
    async def test_no_op_update_still_moves_timestamp_forward(self, service) -> None:
        note = await service.create_note(NoteCreate(title="T"), user_id=ANN)
        first = await service.update_note(note.id, NoteUpdate(), user_id=ANN)
        second = await service.update_note(note.id, NoteUpdate(), user_id=ANN)
        assert note.updated_at < first.updated_at < second.updated_at


class TestOwnership:
    @pytest.mark.asyncio
    async def test_other_users_cannot_see_or_touch_a_note(self, service) -> None:
        note = await service.create_note(NoteCreate(title="private"), user_id=ANN)

        assert [n.id for n in await service.list_notes(BOB)] == []
        with pytest.raises(NotFoundError):
            await service.get_note(note.id, user_id=BOB)
        with pytest.raises(NotFoundError):
            await service.update_note(note.id, NoteUpdate(title="mine now"), user_id=BOB)
        with pytest.raises(NotFoundError):
            await service.delete_note(note.id, user_id=BOB)

        still_there = await service.get_note(note.id, user_id=ANN)
        assert still_there.title == "private"

    @pytest.mark.asyncio
    async def test_missing_and_foreign_notes_fail_the_same_way(self, service) -> None:
        note = await service.create_note(NoteCreate(), user_id=ANN)
        with pytest.raises(NotFoundError) as foreign:
            await service.delete_note(note.id, user_id=BOB)
        with pytest.raises(NotFoundError) as missing:
            await service.delete_note("does-not-exist", user_id=BOB)
        assert foreign.value.message == missing.value.message


class TestList:
    @pytest.mark.asyncio
    async def test_pinned_first_then_most_recently_updated(self, service) -> None:
        oldest = await service.create_note(NoteCreate(title="oldest"), user_id=ANN)
        middle = await service.create_note(NoteCreate(title="middle"), user_id=ANN)
        newest = await service.create_note(NoteCreate(title="newest"), user_id=ANN)
        await service.update_note(oldest.id, NoteUpdate(pinned=True), user_id=ANN)
        await service.update_note(middle.id, NoteUpdate(content="touched"), user_id=ANN)

        titles = [n.title for n in await service.list_notes(ANN)]
        assert titles == ["oldest", "middle", "newest"]
        assert newest.id in {n.id for n in await service.list_notes(ANN)}
