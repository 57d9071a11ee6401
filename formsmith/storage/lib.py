"""Form service for formsmith.

High-level persistence API on top of a ``FormStorage`` backend: owner-scoped
form management, submission collection and analytics events.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from ..config import get_db_path
from ..core.errors import FormNotFoundError, InvalidSchemaError
from ..schema import FormSchema
from .models import EventType, FormEvent, FormStatus, StoredForm, Submission
from .protocol import FormStorage
from .sqlite import SQLiteStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    """The user on whose behalf a service call is made."""

    user_id: str
    is_admin: bool = False

    def can_edit(self, form: StoredForm) -> bool:
        return self.is_admin or form.owner_id == self.user_id


class FormService:
    """Service for storing and retrieving forms.

    Example:
        >>> with FormService(db_path="forms.db") as service:
        ...     stored = service.create_form(Actor("u1"), form)
        ...     service.record_submission(stored.id, {"name": "Ann"})

    Args:
        storage: Storage backend to use. If None, creates SQLiteStorage.
        db_path: Path to database file (only used if storage is None).
    """

    def __init__(
        self,
        storage: FormStorage | None = None,
        db_path: Path | str | None = None,
    ):
        if storage is not None:
            self._storage = storage
        else:
            self._storage = SQLiteStorage(get_db_path(db_path))
        self._initialized = False

    @property
    def storage(self) -> FormStorage:
        return self._storage

    def initialize(self) -> None:
        """Open the storage backend."""
        if not self._initialized:
            self._storage.initialize()
            self._initialized = True

    def close(self) -> None:
        """Close storage connections."""
        if self._initialized:
            self._storage.close()
            self._initialized = False

    def __enter__(self) -> "FormService":
        self.initialize()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # =========================================================================
    # Forms
    # =========================================================================

    def create_form(
        self,
        actor: Actor,
        form: FormSchema,
        status: FormStatus | str = FormStatus.DRAFT,
    ) -> StoredForm:
        """Persist a new form owned by ``actor``.

        Raises:
            InvalidSchemaError: If the title is empty.
            PersistenceConflictError: If a form with the same title exists.
        """
        if not form.title.strip():
            raise InvalidSchemaError("Form title must not be empty")
        stored = StoredForm.create(
            form.model_copy(deep=True), actor.user_id, FormStatus(status)
        )
        self._storage.create_form(stored)
        logger.info(f"Created form {stored.id} ({stored.title!r}) for {actor.user_id}")
        return stored

    def get_form(self, form_id: str) -> StoredForm:
        """Fetch a stored form.

        Raises:
            FormNotFoundError: If no such form exists.
        """
        stored = self._storage.get_form(form_id)
        if stored is None:
            raise FormNotFoundError(form_id)
        return stored

    def get_schema(self, form_id: str) -> FormSchema:
        return self.get_form(form_id).schema.model_copy(deep=True)

    def _editable(self, actor: Actor, form_id: str) -> StoredForm:
        stored = self.get_form(form_id)
        if not actor.can_edit(stored):
            # Forms of other owners are invisible, not forbidden
            raise FormNotFoundError(form_id)
        return stored

    def save_form(self, actor: Actor, form_id: str, form: FormSchema) -> StoredForm:
        """Overwrite the schema of a form the actor may edit.

        Raises:
            FormNotFoundError: If the form does not exist or belongs to
                another user and ``actor`` is not an admin.
            InvalidSchemaError: If the title is empty.
            PersistenceConflictError: If the new title is taken.
        """
        if not form.title.strip():
            raise InvalidSchemaError("Form title must not be empty")
        stored = self._editable(actor, form_id)
        stored.schema = form.model_copy(deep=True)
        stored.title = form.title
        stored.description = form.description
        self._storage.update_form(stored)
        logger.info(f"Saved form {form_id}")
        return stored

    def set_status(
        self, actor: Actor, form_id: str, status: FormStatus | str
    ) -> StoredForm:
        stored = self._editable(actor, form_id)
        stored.status = FormStatus(status)
        self._storage.update_form(stored)
        logger.info(f"Form {form_id} is now {stored.status.value}")
        return stored

    def publish(self, actor: Actor, form_id: str) -> StoredForm:
        return self.set_status(actor, form_id, FormStatus.PUBLISHED)

    def delete_form(self, actor: Actor, form_id: str) -> None:
        """Delete a form with its submissions and events.

        Raises:
            FormNotFoundError: If the form is missing or not editable by actor.
        """
        self._editable(actor, form_id)
        self._storage.delete_form(form_id)
        logger.info(f"Deleted form {form_id}")

    def list_forms(
        self, actor: Actor, limit: int = 50, offset: int = 0
    ) -> list[StoredForm]:
        """Forms visible to ``actor``: their own, or all of them for admins."""
        owner_id = None if actor.is_admin else actor.user_id
        return self._storage.list_forms(owner_id=owner_id, limit=limit, offset=offset)

    # =========================================================================
    # Submissions
    # =========================================================================

    def record_submission(
        self,
        form_id: str,
        answers: Mapping[str, Any],
        metadata: Mapping[str, Any] | None = None,
    ) -> Submission:
        """Store an answer map for an existing form.

        Raises:
            FormNotFoundError: If no such form exists.
        """
        self.get_form(form_id)
        submission = Submission.create(form_id, dict(answers), dict(metadata or {}))
        self._storage.store_submission(submission)
        logger.debug(f"Recorded submission {submission.id} for form {form_id}")
        return submission

    def list_submissions(
        self, actor: Actor, form_id: str, limit: int = 100, offset: int = 0
    ) -> list[Submission]:
        self._editable(actor, form_id)
        return self._storage.list_submissions(form_id, limit=limit, offset=offset)

    def count_submissions(self, form_id: str) -> int:
        return self._storage.count_submissions(form_id)

    # =========================================================================
    # Analytics
    # =========================================================================

    def track_event(
        self,
        form_id: str,
        event_type: EventType | str,
        event_data: Mapping[str, Any] | None = None,
    ) -> FormEvent:
        """Record a ``view``, ``start`` or ``submit`` event."""
        event = FormEvent.create(form_id, event_type, dict(event_data or {}))
        self._storage.track_event(event)
        logger.debug(f"Tracked {event.event_type.value} for form {form_id}")
        return event

    def list_events(
        self,
        actor: Actor,
        form_id: str,
        event_type: EventType | str | None = None,
    ) -> list[FormEvent]:
        self._editable(actor, form_id)
        kind = EventType(event_type) if event_type is not None else None
        return self._storage.list_events(form_id, kind)

    def form_stats(self, actor: Actor, form_id: str) -> dict[str, Any]:
        """Counts of views, starts and submissions plus the completion rate."""
        events = self.list_events(actor, form_id)
        counts = {kind.value: 0 for kind in EventType}
        for event in events:
            counts[event.event_type.value] += 1
        starts = counts[EventType.START.value]
        counts["submissions"] = self.count_submissions(form_id)
        counts["completion_rate"] = (
            counts[EventType.SUBMIT.value] / starts if starts else 0.0
        )
        return counts


__all__ = ["Actor", "FormService"]
