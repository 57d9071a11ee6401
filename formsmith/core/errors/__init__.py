"""Error taxonomy for formsmith."""

from .lib import (
    CellOccupiedError,
    FieldIndexError,
    FieldNotFoundError,
    FormNotFoundError,
    FormsmithError,
    InvalidSchemaError,
    NotFoundError,
    PersistenceConflictError,
    RowNotFoundError,
    StorageError,
    SubmissionFailedError,
    SubmissionInProgressError,
)

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
