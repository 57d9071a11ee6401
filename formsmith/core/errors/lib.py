"""Exception hierarchy shared by every formsmith module.

Validation failures are not represented here: the validation engine
returns them as data (``ValidationResult``) because a rejected answer is a
normal outcome of filling a form, not an exceptional one.
"""

__all__ = [
    "FormsmithError",
    "InvalidSchemaError",
    "NotFoundError",
    "FieldNotFoundError",
    "RowNotFoundError",
    "FormNotFoundError",
    "FieldIndexError",
    "CellOccupiedError",
    "SubmissionFailedError",
    "SubmissionInProgressError",
    "StorageError",
    "PersistenceConflictError",
]


class FormsmithError(Exception):
    """Base class for all formsmith errors."""


class InvalidSchemaError(FormsmithError):
    """A mutation would violate a form schema invariant."""


class NotFoundError(FormsmithError):
    """A referenced entity does not exist."""


class FieldNotFoundError(NotFoundError):
    """No field with the given id exists in the form."""

    def __init__(self, field_id: str):
        super().__init__(f"Field '{field_id}' not found")
        self.field_id = field_id


class RowNotFoundError(NotFoundError):
    """The grid layout has no row at the given index."""

    def __init__(self, row_index: int):
        super().__init__(f"Row {row_index} not found")
        self.row_index = row_index


class FormNotFoundError(NotFoundError):
    """No stored form with the given id is visible to the caller."""

    def __init__(self, form_id: str):
        super().__init__(f"Form '{form_id}' not found")
        self.form_id = form_id


class FieldIndexError(FormsmithError, IndexError):
    """A positional index is outside the field or option sequence."""


class CellOccupiedError(InvalidSchemaError):
    """A grid cell already holds a field."""

    def __init__(self, row_index: int, col_index: int, occupant_id: str):
        super().__init__(
            f"Cell ({row_index}, {col_index}) is already occupied by '{occupant_id}'"
        )
        self.row_index = row_index
        self.col_index = col_index
        self.occupant_id = occupant_id


class SubmissionFailedError(FormsmithError):
    """The submission collaborator failed; the answers are kept for retry."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class SubmissionInProgressError(FormsmithError):
    """A submit was requested while a previous one is still pending."""


class StorageError(FormsmithError):
    """Generic persistence failure."""


class PersistenceConflictError(StorageError):
    """A uniqueness constraint rejected the write (duplicate form title)."""

    def __init__(self, title: str):
        super().__init__("a form with this title already exists")
        self.title = title
