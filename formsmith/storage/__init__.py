"""Form persistence: models, storage protocol, SQLite backend and service.

Example:
    >>> from formsmith.storage import Actor, FormService, SQLiteStorage
    >>> with FormService(SQLiteStorage(":memory:")) as service:
    ...     stored = service.create_form(Actor("u1"), form)
"""

from .lib import Actor, FormService
from .models import EventType, FormEvent, FormStatus, StoredForm, Submission
from .protocol import FormStorage
from .sqlite import SCHEMA_SQL, SQLiteStorage

__all__ = [
    # Service
    "Actor",
    "FormService",
    # Models
    "FormStatus",
    "EventType",
    "StoredForm",
    "Submission",
    "FormEvent",
    # Backends
    "FormStorage",
    "SQLiteStorage",
    "SCHEMA_SQL",
]
