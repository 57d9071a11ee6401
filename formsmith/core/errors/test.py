"""Tests for the error hierarchy."""

import pytest

from .lib import (
    CellOccupiedError,
    FieldIndexError,
    FieldNotFoundError,
    FormNotFoundError,
    FormsmithError,
    InvalidSchemaError,
    NotFoundError,
    PersistenceConflictError,
    StorageError,
    SubmissionFailedError,
)


class TestHierarchy:
    """Catch-site relationships between error classes."""

    @pytest.mark.unit
    def test_not_found_family(self):
        """Field and form lookups share the NotFoundError base."""
        assert issubclass(FieldNotFoundError, NotFoundError)
        assert issubclass(FormNotFoundError, NotFoundError)
        assert issubclass(NotFoundError, FormsmithError)

    @pytest.mark.unit
    def test_cell_occupied_is_schema_error(self):
        """Cell collisions are schema invariant violations."""
        err = CellOccupiedError(1, 0, "f-1")
        assert isinstance(err, InvalidSchemaError)
        assert err.occupant_id == "f-1"
        assert "(1, 0)" in str(err)

    @pytest.mark.unit
    def test_field_index_error_is_index_error(self):
        """Positional errors can be caught as builtin IndexError."""
        with pytest.raises(IndexError):
            raise FieldIndexError("index 9 out of range")

    @pytest.mark.unit
    def test_conflict_message(self):
        """Duplicate titles surface a user-facing message."""
        err = PersistenceConflictError("Contact")
        assert isinstance(err, StorageError)
        assert str(err) == "a form with this title already exists"
        assert err.title == "Contact"

    @pytest.mark.unit
    def test_submission_failed_carries_http_details(self):
        """Submission errors keep status and body for diagnostics."""
        err = SubmissionFailedError("boom", status_code=502, response_body="bad")
        assert err.status_code == 502
        assert err.response_body == "bad"
