"""Answer validation and structural schema checks.

``validate_answers`` judges a filled-in answer map against the form's field
rules and returns the outcome as data. ``validate_form_schema`` inspects the
form itself for invariant violations (duplicate ids, empty choice lists,
cell collisions and the like) and returns a list of issues.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..layout import Cell, cell_of
from ..schema import FieldKind, FieldSchema, FormSchema, get_kind_meta

logger = logging.getLogger(__name__)


# =============================================================================
# Result Types
# =============================================================================


@dataclass
class ValidationResult:
    """Outcome of validating an answer map.

    Attributes:
        valid: True when no field produced an error.
        errors: Error message per field id.
    """

    valid: bool
    errors: dict[str, str] = field(default_factory=dict)

    def error_for(self, field_id: str) -> str | None:
        return self.errors.get(field_id)

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "errors": dict(self.errors)}


@dataclass
class SchemaIssue:
    """Represents a structural problem in a form schema.

    Attributes:
        field_id: Offending field, or None for form-level issues.
        message: Human-readable description.
        issue_type: Category of the issue.
    """

    field_id: str | None
    message: str
    issue_type: str


# =============================================================================
# Answer Validation
# =============================================================================


def is_empty_value(value: Any) -> bool:
    """Missing, empty string and empty list all count as no answer."""
    return value is None or value == "" or (isinstance(value, (list, tuple)) and not value)


def _format_number(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _to_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def _check_numeric(item: FieldSchema, value: Any) -> str | None:
    number = _to_number(value)
    if number is None:
        return "Please enter a valid number"

    rules = item.validation
    if rules is None:
        return None
    if rules.min is not None and number < rules.min:
        return f"Value must be at least {_format_number(rules.min)}"
    if rules.max is not None and number > rules.max:
        return f"Value must be at most {_format_number(rules.max)}"
    return None


def _check_text(item: FieldSchema, value: Any) -> str | None:
    rules = item.validation
    if rules is None or not isinstance(value, str):
        return None

    if rules.min_length is not None and len(value) < rules.min_length:
        return f"Must be at least {rules.min_length} characters"
    if rules.max_length is not None and len(value) > rules.max_length:
        return f"Must be at most {rules.max_length} characters"

    if item.kind == FieldKind.TEXT and rules.pattern:
        try:
            matched = re.search(rules.pattern, value) is not None
        except re.error as exc:
            logger.warning(f"Skipping invalid pattern on field {item.id}: {exc}")
            return None
        if not matched:
            return "Please enter a valid value"
    return None


def validate_field(item: FieldSchema, value: Any) -> str | None:
    """Validate a single answer.

    Args:
        item: Field definition.
        value: Current answer (may be missing).

    Returns:
        Error message, or None when the answer is acceptable.
    """
    meta = get_kind_meta(item.kind)
    if not meta.accepts_input:
        return None

    custom = item.validation.custom_message if item.validation else None

    if is_empty_value(value):
        if item.required:
            return custom or f"{item.label} is required"
        return None

    if meta.numeric:
        message = _check_numeric(item, value)
    elif meta.text_like:
        message = _check_text(item, value)
    else:
        message = None

    if message is not None and custom:
        return custom
    return message


def validate_answers(form: FormSchema, answers: Mapping[str, Any]) -> ValidationResult:
    """Validate an answer map against every input field of ``form``.

    Example:
        >>> result = validate_answers(form, {"name": "Ann"})
        >>> result.valid, result.errors
        (False, {'email': 'Email is required'})
    """
    errors: dict[str, str] = {}
    for item in form.fields:
        message = validate_field(item, answers.get(item.id))
        if message is not None:
            errors[item.id] = message
    return ValidationResult(valid=not errors, errors=errors)


def missing_required(form: FormSchema, answers: Mapping[str, Any]) -> list[str]:
    """Ids of required input fields whose answer is still empty."""
    return [
        item.id
        for item in form.fields
        if item.required
        and get_kind_meta(item.kind).accepts_input
        and is_empty_value(answers.get(item.id))
    ]


# =============================================================================
# Schema Validation
# =============================================================================


def validate_form_schema(form: FormSchema) -> list[SchemaIssue]:
    """Check a form for structural issues.

    Performs the following checks:
        - Non-empty title
        - Unique field ids
        - Choice fields carry at least one option
        - Patterns compile and numeric/length bounds are ordered
        - Placement is consistent with the form's placement mode
        - Grid cells exist and hold at most one field

    Returns:
        list[SchemaIssue]: Issues found (empty if the form is sound).
    """
    issues: list[SchemaIssue] = []

    if not form.title.strip():
        issues.append(SchemaIssue(None, "Form title is empty", "empty_title"))

    seen: set[str] = set()
    for item in form.fields:
        if item.id in seen:
            issues.append(
                SchemaIssue(item.id, f"Duplicate field id '{item.id}'", "duplicate_id")
            )
        seen.add(item.id)
        issues.extend(_field_issues(item))

    issues.extend(_placement_issues(form))
    return issues


def is_valid_schema(form: FormSchema) -> bool:
    return not validate_form_schema(form)


def _field_issues(item: FieldSchema) -> list[SchemaIssue]:
    issues: list[SchemaIssue] = []
    meta = get_kind_meta(item.kind)

    if meta.requires_options and not item.options:
        issues.append(
            SchemaIssue(
                item.id,
                f"{meta.default_label} field '{item.label}' has no options",
                "missing_options",
            )
        )

    rules = item.validation
    if rules is None:
        return issues

    if rules.pattern:
        try:
            re.compile(rules.pattern)
        except re.error as exc:
            issues.append(
                SchemaIssue(item.id, f"Invalid pattern: {exc}", "invalid_pattern")
            )
    if rules.min is not None and rules.max is not None and rules.min > rules.max:
        issues.append(
            SchemaIssue(item.id, "min is greater than max", "invalid_range")
        )
    if (
        rules.min_length is not None
        and rules.max_length is not None
        and rules.min_length > rules.max_length
    ):
        issues.append(
            SchemaIssue(item.id, "minLength is greater than maxLength", "invalid_range")
        )
    return issues


def _placement_issues(form: FormSchema) -> list[SchemaIssue]:
    issues: list[SchemaIssue] = []

    if not form.is_grid:
        for item in form.fields:
            if item.row_index is not None or item.col_index is not None:
                issues.append(
                    SchemaIssue(
                        item.id,
                        "Flow form field carries grid coordinates",
                        "mixed_placement",
                    )
                )
        return issues

    layout = form.layout
    occupied: dict[Cell, str] = {}
    for item in form.fields:
        if item.column_width is not None:
            issues.append(
                SchemaIssue(
                    item.id, "Grid form field carries a column width", "mixed_placement"
                )
            )
        cell = cell_of(item)
        if cell is None:
            issues.append(SchemaIssue(item.id, "Field is not placed", "unplaced_field"))
            continue
        if layout is None or not layout.has_cell(cell.row_index, cell.col_index):
            issues.append(
                SchemaIssue(
                    item.id,
                    f"Cell ({cell.row_index}, {cell.col_index}) does not exist",
                    "dangling_cell",
                )
            )
        if cell in occupied:
            issues.append(
                SchemaIssue(
                    item.id,
                    f"Cell ({cell.row_index}, {cell.col_index}) already holds "
                    f"'{occupied[cell]}'",
                    "cell_collision",
                )
            )
        else:
            occupied[cell] = item.id
    return issues


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
