"""Storage protocol for form persistence.

Defines the interface that all storage backends must implement.
"""

from typing import Protocol

from .models import EventType, FormEvent, StoredForm, Submission


class FormStorage(Protocol):
    """Protocol defining the storage interface used by FormService.

    Backends raise ``PersistenceConflictError`` when a form title is already
    taken and return None / False for missing records.
    """

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def initialize(self) -> None:
        """Initialize storage (create tables, indexes, etc.)."""
        ...

    def close(self) -> None:
        """Close storage connections and clean up resources."""
        ...

    # =========================================================================
    # Form Operations
    # =========================================================================

    def create_form(self, form: StoredForm) -> StoredForm:
        """Persist a new form.

        Raises:
            PersistenceConflictError: If a form with the same title exists.
        """
        ...

    def get_form(self, form_id: str) -> StoredForm | None:
        """Get a form by ID."""
        ...

    def update_form(self, form: StoredForm) -> StoredForm:
        """Overwrite an existing form.

        Raises:
            PersistenceConflictError: If the new title is taken by another form.
        """
        ...

    def delete_form(self, form_id: str) -> bool:
        """Delete a form with its submissions and events.

        Returns:
            True if a form was deleted.
        """
        ...

    def list_forms(
        self,
        owner_id: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[StoredForm]:
        """List forms, most recently updated first."""
        ...

    # =========================================================================
    # Submission Operations
    # =========================================================================

    def store_submission(self, submission: Submission) -> Submission:
        ...

    def list_submissions(
        self, form_id: str, limit: int = 100, offset: int = 0
    ) -> list[Submission]:
        ...

    def count_submissions(self, form_id: str) -> int:
        ...

    # =========================================================================
    # Analytics Operations
    # =========================================================================

    def track_event(self, event: FormEvent) -> FormEvent:
        ...

    def list_events(
        self, form_id: str, event_type: EventType | None = None
    ) -> list[FormEvent]:
        ...


__all__ = ["FormStorage"]
