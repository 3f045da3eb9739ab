"""Tests for NoteService: store results translated into domain errors."""

import pytest

from domains.core import NoteNotFoundError, ValidationError
from domains.note_hub.services import NoteService


@pytest.fixture
def service(store):
    return NoteService(store)


class TestNoteService:

    def test_create_and_list(self, service):
        note = service.create_note("A", "hello")
        assert [n.id for n in service.list_notes()] == [note.id]

    def test_get_note_missing_returns_none(self, service):
        assert service.get_note("ghost") is None

    def test_require_note_missing_raises(self, service):
        with pytest.raises(NoteNotFoundError) as exc_info:
            service.require_note("ghost")
        assert exc_info.value.http_status_code == 404
        assert exc_info.value.message == "Note not found"
        assert exc_info.value.details["resource_id"] == "ghost"

    def test_create_blank_raises_validation(self, service):
        with pytest.raises(ValidationError):
            service.create_note("", "x")

    def test_update_missing_raises_not_found(self, service):
        with pytest.raises(NoteNotFoundError):
            service.update_note("ghost", "B", "world")

    def test_update_blank_on_missing_is_validation(self, service):
        # input is checked before the lookup
        with pytest.raises(ValidationError):
            service.update_note("ghost", "", "world")

    def test_delete_twice(self, service):
        note = service.create_note("A", "hello")
        service.delete_note(note.id)
        with pytest.raises(NoteNotFoundError):
            service.delete_note(note.id)

    def test_stats(self, service):
        service.create_note("A", "hello")
        assert service.get_stats() == {
            "total": 1,
            "medium": "memory",
            "persistence_healthy": True,
        }
