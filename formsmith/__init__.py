"""formsmith: form schema model with a dual-mode interpreter.

Forms are composed from typed field blocks (``formsmith.schema``), edited
through pure builder operations (``formsmith.builder``, ``formsmith.layout``),
rendered for editing or filling (``formsmith.render``), validated
(``formsmith.validation``) and submitted through fill sessions
(``formsmith.session``) to storage or a webhook.

Example:
    >>> from formsmith import append_field, new_form, render
    >>> form = append_field(new_form("Contact"), "email")
    >>> render(form, "fill").submit.label
    'Submit'
"""

__version__ = "0.1.0"

from .builder import append_field, new_form, update_field
from .core.errors import FormsmithError, InvalidSchemaError
from .render import RenderMode, format_presentation, render
from .schema import FieldKind, FieldSchema, FormSchema
from .session import FillSession
from .validation import ValidationResult, validate_answers

__all__ = [
    "__version__",
    # Schema
    "FieldKind",
    "FieldSchema",
    "FormSchema",
    # Builder
    "new_form",
    "append_field",
    "update_field",
    # Rendering
    "RenderMode",
    "render",
    "format_presentation",
    # Validation & filling
    "ValidationResult",
    "validate_answers",
    "FillSession",
    # Errors
    "FormsmithError",
    "InvalidSchemaError",
]
