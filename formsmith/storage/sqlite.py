"""SQLite storage backend for forms, submissions and analytics events."""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any

from ..core.errors import PersistenceConflictError, StorageError
from ..schema import load_form
from .models import EventType, FormEvent, FormStatus, StoredForm, Submission

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"

# SQL Schema
SCHEMA_SQL = """
-- Forms table
CREATE TABLE IF NOT EXISTS forms (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL UNIQUE,
    description TEXT,
    schema TEXT NOT NULL,  -- JSON
    status TEXT DEFAULT 'draft',
    owner_id TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

-- Submissions table
CREATE TABLE IF NOT EXISTS form_submissions (
    id TEXT PRIMARY KEY,
    form_id TEXT NOT NULL,
    data TEXT NOT NULL,  -- JSON
    metadata TEXT,  -- JSON
    created_at TEXT NOT NULL,
    FOREIGN KEY (form_id) REFERENCES forms(id) ON DELETE CASCADE
);

-- Analytics table
CREATE TABLE IF NOT EXISTS form_analytics (
    id TEXT PRIMARY KEY,
    form_id TEXT NOT NULL,
    event_type TEXT NOT NULL,
    event_data TEXT,  -- JSON
    created_at TEXT NOT NULL,
    FOREIGN KEY (form_id) REFERENCES forms(id) ON DELETE CASCADE
);

-- Indexes
CREATE INDEX IF NOT EXISTS idx_forms_owner ON forms(owner_id);
CREATE INDEX IF NOT EXISTS idx_forms_updated ON forms(updated_at);
CREATE INDEX IF NOT EXISTS idx_submissions_form ON form_submissions(form_id);
CREATE INDEX IF NOT EXISTS idx_analytics_form ON form_analytics(form_id);
CREATE INDEX IF NOT EXISTS idx_analytics_type ON form_analytics(event_type);
"""


class SQLiteStorage:
    """SQLite-based storage backend.

    Args:
        db_path: Path to the database file, or ``":memory:"``.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = db_path if str(db_path) == MEMORY_DB else Path(db_path)
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection, creating if needed."""
        if self._conn is None:
            raise RuntimeError("Storage not initialized. Call initialize() first.")
        return self._conn

    def initialize(self) -> None:
        """Initialize storage (create database and tables)."""
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")

        self._conn.executescript(SCHEMA_SQL)
        self._conn.commit()

        logger.info(f"Initialized SQLite storage at {self.db_path}")

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def _write(self, sql: str, params: tuple[Any, ...], title: str | None = None) -> int:
        """Execute a write and commit, mapping constraint failures."""
        conn = self._get_conn()
        try:
            cursor = conn.execute(sql, params)
        except sqlite3.IntegrityError as e:
            conn.rollback()
            if "forms.title" in str(e) and title is not None:
                raise PersistenceConflictError(title) from e
            raise StorageError(f"Integrity error: {e}") from e
        conn.commit()
        return cursor.rowcount

    # =========================================================================
    # Form Operations
    # =========================================================================

    def create_form(self, form: StoredForm) -> StoredForm:
        """Create a new form."""
        self._write(
            """
            INSERT INTO forms (
                id, title, description, schema, status, owner_id,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                form.id,
                form.title,
                form.description,
                json.dumps(form.schema.to_json()),
                form.status.value,
                form.owner_id,
                form.created_at.isoformat(),
                form.updated_at.isoformat(),
            ),
            title=form.title,
        )
        logger.debug(f"Stored form {form.id} ({form.title!r})")
        return form

    def get_form(self, form_id: str) -> StoredForm | None:
        """Get a form by ID."""
        conn = self._get_conn()
        row = conn.execute("SELECT * FROM forms WHERE id = ?", (form_id,)).fetchone()
        if row:
            return self._row_to_form(row)
        return None

    def update_form(self, form: StoredForm) -> StoredForm:
        """Update an existing form."""
        form.touch()
        self._write(
            """
            UPDATE forms SET title = ?, description = ?, schema = ?, status = ?,
                             owner_id = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                form.title,
                form.description,
                json.dumps(form.schema.to_json()),
                form.status.value,
                form.owner_id,
                form.updated_at.isoformat(),
                form.id,
            ),
            title=form.title,
        )
        return form

    def delete_form(self, form_id: str) -> bool:
        """Delete a form; submissions and events cascade."""
        deleted = self._write("DELETE FROM forms WHERE id = ?", (form_id,))
        return deleted > 0

    def list_forms(
        self,
        owner_id: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[StoredForm]:
        """List forms with optional owner filtering."""
        conn = self._get_conn()

        query = "SELECT * FROM forms"
        params: list[Any] = []

        if owner_id is not None:
            query += " WHERE owner_id = ?"
            params.append(owner_id)

        query += " ORDER BY updated_at DESC, rowid DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        rows = conn.execute(query, params).fetchall()
        return [self._row_to_form(row) for row in rows]

    # =========================================================================
    # Submission Operations
    # =========================================================================

    def store_submission(self, submission: Submission) -> Submission:
        """Store a submission for an existing form."""
        self._write(
            """
            INSERT INTO form_submissions (id, form_id, data, metadata, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                submission.id,
                submission.form_id,
                json.dumps(submission.data),
                json.dumps(submission.metadata),
                submission.created_at.isoformat(),
            ),
        )
        return submission

    def list_submissions(
        self, form_id: str, limit: int = 100, offset: int = 0
    ) -> list[Submission]:
        """List submissions of a form, oldest first."""
        conn = self._get_conn()
        rows = conn.execute(
            """
            SELECT * FROM form_submissions WHERE form_id = ?
            ORDER BY created_at ASC, rowid ASC LIMIT ? OFFSET ?
            """,
            (form_id, limit, offset),
        ).fetchall()
        return [self._row_to_submission(row) for row in rows]

    def count_submissions(self, form_id: str) -> int:
        conn = self._get_conn()
        row = conn.execute(
            "SELECT COUNT(*) AS total FROM form_submissions WHERE form_id = ?",
            (form_id,),
        ).fetchone()
        return row["total"]

    # =========================================================================
    # Analytics Operations
    # =========================================================================

    def track_event(self, event: FormEvent) -> FormEvent:
        """Record an analytics event."""
        self._write(
            """
            INSERT INTO form_analytics (id, form_id, event_type, event_data, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                event.id,
                event.form_id,
                event.event_type.value,
                json.dumps(event.event_data),
                event.created_at.isoformat(),
            ),
        )
        return event

    def list_events(
        self, form_id: str, event_type: EventType | None = None
    ) -> list[FormEvent]:
        """List events of a form, oldest first."""
        conn = self._get_conn()

        query = "SELECT * FROM form_analytics WHERE form_id = ?"
        params: list[Any] = [form_id]
        if event_type is not None:
            query += " AND event_type = ?"
            params.append(EventType(event_type).value)
        query += " ORDER BY created_at ASC, rowid ASC"

        rows = conn.execute(query, params).fetchall()
        return [self._row_to_event(row) for row in rows]

    # =========================================================================
    # Row Conversion
    # =========================================================================

    def _row_to_form(self, row: sqlite3.Row) -> StoredForm:
        """Convert database row to StoredForm object."""
        schema = load_form(
            json.loads(row["schema"]),
            title=row["title"],
            description=row["description"],
        )
        return StoredForm(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            schema=schema,
            status=FormStatus(row["status"]),
            owner_id=row["owner_id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _row_to_submission(self, row: sqlite3.Row) -> Submission:
        """Convert database row to Submission object."""
        return Submission(
            id=row["id"],
            form_id=row["form_id"],
            data=json.loads(row["data"]),
            metadata=json.loads(row["metadata"]) if row["metadata"] else {},
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _row_to_event(self, row: sqlite3.Row) -> FormEvent:
        return FormEvent(
            id=row["id"],
            form_id=row["form_id"],
            event_type=EventType(row["event_type"]),
            event_data=json.loads(row["event_data"]) if row["event_data"] else {},
            created_at=datetime.fromisoformat(row["created_at"]),
        )


__all__ = ["SQLiteStorage", "SCHEMA_SQL"]
