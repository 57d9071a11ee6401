"""Validation engine: answer checks and structural schema checks."""

from .lib import (
    SchemaIssue,
    ValidationResult,
    is_empty_value,
    is_valid_schema,
    missing_required,
    validate_answers,
    validate_field,
    validate_form_schema,
)

__all__ = [
    # Results
    "ValidationResult",
    "SchemaIssue",
    # Answers
    "is_empty_value",
    "validate_field",
    "validate_answers",
    "missing_required",
    # Schema
    "validate_form_schema",
    "is_valid_schema",
]
