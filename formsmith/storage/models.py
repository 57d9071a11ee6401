"""Data models for form persistence.

Records stored by a ``FormStorage`` backend: forms with their schema and
publication status, submissions collected from filled forms, and analytics
events emitted by fill sessions.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from ..schema import FormSchema


class FormStatus(str, Enum):
    """Publication state of a stored form."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class EventType(str, Enum):
    """Analytics events recorded for a form."""

    VIEW = "view"
    START = "start"
    SUBMIT = "submit"


@dataclass
class StoredForm:
    """A persisted form.

    Attributes:
        id: Unique identifier (UUID).
        title: Form title, unique across the store.
        description: Optional description.
        schema: The form schema itself.
        status: Publication state.
        owner_id: Id of the user that created the form.
        created_at: Creation timestamp.
        updated_at: Last modification timestamp.
    """

    id: str
    title: str
    schema: FormSchema
    owner_id: str
    description: str | None = None
    status: FormStatus = FormStatus.DRAFT
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        schema: FormSchema,
        owner_id: str,
        status: FormStatus = FormStatus.DRAFT,
    ) -> "StoredForm":
        """Create a stored form record whose title mirrors the schema's."""
        return cls(
            id=str(uuid4()),
            title=schema.title,
            description=schema.description,
            schema=schema,
            owner_id=owner_id,
            status=status,
        )

    def touch(self) -> None:
        self.updated_at = datetime.now(UTC)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "owner_id": self.owner_id,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "schema": self.schema.to_json(),
        }


@dataclass
class Submission:
    """One collected answer map for a form."""

    id: str
    form_id: str
    data: dict[str, Any]
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        form_id: str,
        data: dict[str, Any],
        metadata: dict[str, Any] | None = None,
    ) -> "Submission":
        return cls(
            id=str(uuid4()),
            form_id=form_id,
            data=dict(data),
            metadata=dict(metadata or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "form_id": self.form_id,
            "data": self.data,
            "metadata": self.metadata,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class FormEvent:
    """An analytics event for a form."""

    id: str
    form_id: str
    event_type: EventType
    event_data: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        form_id: str,
        event_type: EventType | str,
        event_data: dict[str, Any] | None = None,
    ) -> "FormEvent":
        return cls(
            id=str(uuid4()),
            form_id=form_id,
            event_type=EventType(event_type),
            event_data=dict(event_data or {}),
        )


__all__ = [
    "FormStatus",
    "EventType",
    "StoredForm",
    "Submission",
    "FormEvent",
]
