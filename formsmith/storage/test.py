"""Tests for form persistence.

Tests cover:
- SQLite backend lifecycle and row conversion
- Title uniqueness conflicts
- Owner scoping and admin override in FormService
- Submissions and analytics events
"""

import json

import pytest

from formsmith.core.errors import (
    FormNotFoundError,
    InvalidSchemaError,
    PersistenceConflictError,
)
from formsmith.schema import FieldKind, FormSchema, create_default_field

from .lib import Actor, FormService
from .models import EventType, FormStatus, StoredForm, Submission
from .sqlite import SQLiteStorage

# =============================================================================
# Backend
# =============================================================================


@pytest.mark.unit
class TestSQLiteStorage:
    """Tests for the SQLite backend."""

    def test_requires_initialize(self, db_path):
        storage = SQLiteStorage(db_path)
        with pytest.raises(RuntimeError):
            storage.get_form("missing")

    def test_creates_parent_directory(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "forms.db"
        storage = SQLiteStorage(db_path)
        storage.initialize()
        try:
            assert db_path.exists()
        finally:
            storage.close()

    def test_memory_database(self, contact_form):
        storage = SQLiteStorage(":memory:")
        storage.initialize()
        try:
            stored = storage.create_form(StoredForm.create(contact_form, "u1"))
            assert storage.get_form(stored.id).title == "Contact"
        finally:
            storage.close()

    def test_schema_round_trip(self, db_path, grid_form):
        storage = SQLiteStorage(db_path)
        storage.initialize()
        try:
            stored = storage.create_form(StoredForm.create(grid_form, "u1"))
            loaded = storage.get_form(stored.id)
            assert loaded.schema.model_dump() == grid_form.model_dump()
            assert loaded.status == FormStatus.DRAFT
            assert loaded.created_at == stored.created_at
        finally:
            storage.close()

    def test_loads_legacy_schema_column(self, db_path):
        storage = SQLiteStorage(db_path)
        storage.initialize()
        try:
            conn = storage._get_conn()
            conn.execute(
                "INSERT INTO forms (id, title, schema, owner_id, created_at, updated_at)"
                " VALUES (?, ?, ?, ?, ?, ?)",
                (
                    "legacy-1",
                    "Old",
                    json.dumps(
                        [{"id": "c", "type": "radio", "label": "Color", "options": ["Red"]}]
                    ),
                    "u1",
                    "2024-01-01T00:00:00+00:00",
                    "2024-01-01T00:00:00+00:00",
                ),
            )
            conn.commit()
            loaded = storage.get_form("legacy-1")
            assert loaded.schema.title == "Old"
            option = loaded.schema.fields[0].options[0]
            assert (option.label, option.value) == ("Red", "Red")
        finally:
            storage.close()

    def test_duplicate_title_conflict(self, db_path, contact_form):
        storage = SQLiteStorage(db_path)
        storage.initialize()
        try:
            storage.create_form(StoredForm.create(contact_form, "u1"))
            with pytest.raises(PersistenceConflictError) as excinfo:
                storage.create_form(StoredForm.create(contact_form, "u2"))
            assert str(excinfo.value) == "a form with this title already exists"
            assert excinfo.value.title == "Contact"
        finally:
            storage.close()

    def test_delete_cascades(self, db_path, contact_form):
        storage = SQLiteStorage(db_path)
        storage.initialize()
        try:
            stored = storage.create_form(StoredForm.create(contact_form, "u1"))
            storage.store_submission(Submission.create(stored.id, {"name": "Ann"}))
            assert storage.count_submissions(stored.id) == 1
            assert storage.delete_form(stored.id) is True
            assert storage.count_submissions(stored.id) == 0
            assert storage.delete_form(stored.id) is False
        finally:
            storage.close()


# =============================================================================
# Service
# =============================================================================


@pytest.mark.unit
class TestFormService:
    """Tests for FormService form management."""

    def test_create_and_get(self, form_service, owner, contact_form):
        stored = form_service.create_form(owner, contact_form)
        loaded = form_service.get_form(stored.id)
        assert loaded.owner_id == "owner-1"
        assert loaded.schema.field_ids == ["name", "email", "topic"]

    def test_create_copies_schema(self, form_service, owner, contact_form):
        stored = form_service.create_form(owner, contact_form)
        contact_form.title = "Changed"
        assert stored.schema.title == "Contact"

    def test_empty_title_rejected(self, form_service, owner):
        with pytest.raises(InvalidSchemaError):
            form_service.create_form(owner, FormSchema(title="  "))

    def test_duplicate_title(self, form_service, owner, contact_form):
        form_service.create_form(owner, contact_form)
        with pytest.raises(PersistenceConflictError):
            form_service.create_form(owner, contact_form)

    def test_get_missing(self, form_service):
        with pytest.raises(FormNotFoundError):
            form_service.get_form("nope")

    def test_get_schema_is_copy(self, form_service, owner, contact_form):
        stored = form_service.create_form(owner, contact_form)
        schema = form_service.get_schema(stored.id)
        schema.fields.clear()
        assert len(form_service.get_schema(stored.id).fields) == 3

    def test_save_by_owner(self, form_service, owner, contact_form):
        stored = form_service.create_form(owner, contact_form)
        edited = contact_form.model_copy(deep=True)
        edited.title = "Contact us"
        edited.fields.append(create_default_field(FieldKind.TEXTAREA, "message"))

        saved = form_service.save_form(owner, stored.id, edited)

        loaded = form_service.get_form(stored.id)
        assert saved.title == "Contact us"
        assert loaded.title == "Contact us"
        assert loaded.schema.field_ids == ["name", "email", "topic", "message"]
        assert loaded.updated_at >= loaded.created_at

    def test_save_by_other_user_hidden(self, form_service, owner, contact_form):
        stored = form_service.create_form(owner, contact_form)
        with pytest.raises(FormNotFoundError):
            form_service.save_form(Actor("intruder"), stored.id, contact_form)

    def test_save_by_admin(self, form_service, owner, admin, contact_form):
        stored = form_service.create_form(owner, contact_form)
        edited = contact_form.model_copy(update={"description": "Admin edit"})
        saved = form_service.save_form(admin, stored.id, edited)
        assert saved.description == "Admin edit"
        assert saved.owner_id == "owner-1"

    def test_save_title_conflict(self, form_service, owner, contact_form):
        form_service.create_form(owner, FormSchema(title="Taken"))
        stored = form_service.create_form(owner, contact_form)
        with pytest.raises(PersistenceConflictError):
            form_service.save_form(
                owner, stored.id, contact_form.model_copy(update={"title": "Taken"})
            )

    def test_list_forms_scoped(self, form_service, owner, admin, contact_form):
        form_service.create_form(owner, contact_form)
        form_service.create_form(Actor("other"), FormSchema(title="Other"))

        assert [f.title for f in form_service.list_forms(owner)] == ["Contact"]
        assert {f.title for f in form_service.list_forms(admin)} == {"Contact", "Other"}

    def test_publish(self, form_service, owner, contact_form):
        stored = form_service.create_form(owner, contact_form)
        form_service.publish(owner, stored.id)
        assert form_service.get_form(stored.id).status == FormStatus.PUBLISHED

    def test_delete(self, form_service, owner, contact_form):
        stored = form_service.create_form(owner, contact_form)
        with pytest.raises(FormNotFoundError):
            form_service.delete_form(Actor("other"), stored.id)
        form_service.delete_form(owner, stored.id)
        with pytest.raises(FormNotFoundError):
            form_service.get_form(stored.id)

    def test_default_storage_uses_db_path(self, db_path, contact_form):
        with FormService(db_path=db_path) as service:
            service.create_form(Actor("u1"), contact_form)
        assert db_path.exists()


@pytest.mark.unit
class TestSubmissionsAndEvents:
    """Tests for submission collection and analytics."""

    def test_record_submission(self, form_service, owner, contact_form):
        stored = form_service.create_form(owner, contact_form)
        form_service.record_submission(
            stored.id,
            {"name": "Ann", "email": "a@x.io"},
            {"userId": "42"},
        )

        submissions = form_service.list_submissions(owner, stored.id)
        assert len(submissions) == 1
        assert submissions[0].data == {"name": "Ann", "email": "a@x.io"}
        assert submissions[0].metadata == {"userId": "42"}
        assert form_service.count_submissions(stored.id) == 1

    def test_record_submission_missing_form(self, form_service):
        with pytest.raises(FormNotFoundError):
            form_service.record_submission("nope", {"name": "Ann"})

    def test_list_submissions_scoped(self, form_service, owner, contact_form):
        stored = form_service.create_form(owner, contact_form)
        with pytest.raises(FormNotFoundError):
            form_service.list_submissions(Actor("other"), stored.id)

    def test_events_and_stats(self, form_service, owner, contact_form):
        stored = form_service.create_form(owner, contact_form)
        form_service.track_event(stored.id, "view")
        form_service.track_event(stored.id, EventType.VIEW)
        form_service.track_event(stored.id, EventType.START, {"field": "name"})
        form_service.track_event(stored.id, EventType.SUBMIT)
        form_service.record_submission(stored.id, {"name": "Ann"})

        starts = form_service.list_events(owner, stored.id, EventType.START)
        assert len(starts) == 1
        assert starts[0].event_data == {"field": "name"}

        stats = form_service.form_stats(owner, stored.id)
        assert stats["view"] == 2
        assert stats["start"] == 1
        assert stats["submit"] == 1
        assert stats["submissions"] == 1
        assert stats["completion_rate"] == 1.0

    def test_unknown_event_type(self, form_service, owner, contact_form):
        stored = form_service.create_form(owner, contact_form)
        with pytest.raises(ValueError):
            form_service.track_event(stored.id, "click")
