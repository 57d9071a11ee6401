"""Tool implementations for the MCP server.

Each function takes the ``FormService`` explicitly and returns plain JSON
data. Errors propagate as ``FormsmithError`` subclasses; the server turns
them into tool errors.
"""

import logging
from typing import Any

from ..builder import append_field, move_field, new_form, remove_field, update_field
from ..render import RenderMode, format_presentation, render
from ..session import EmbedContext, FillSession
from ..storage import Actor, FormService, StoredForm
from ..submit import StorageSubmitter
from ..validation import validate_answers as _validate_answers
from ..validation import validate_form_schema

logger = logging.getLogger(__name__)


def _summary(stored: StoredForm) -> dict[str, Any]:
    return {
        "id": stored.id,
        "title": stored.title,
        "status": stored.status.value,
        "field_count": len(stored.schema.fields),
        "updated_at": stored.updated_at.isoformat(),
    }


# =============================================================================
# Forms
# =============================================================================


def create_form(
    service: FormService,
    actor: Actor,
    title: str,
    description: str | None = None,
    placement: str = "flow",
) -> dict[str, Any]:
    """Create and store an empty form."""
    stored = service.create_form(actor, new_form(title, description, placement))
    return stored.to_dict()


def get_form(service: FormService, form_id: str) -> dict[str, Any]:
    """Stored form with its schema and any structural issues."""
    stored = service.get_form(form_id)
    result = stored.to_dict()
    result["issues"] = [
        {"field_id": i.field_id, "message": i.message, "type": i.issue_type}
        for i in validate_form_schema(stored.schema)
    ]
    return result


def list_forms(service: FormService, actor: Actor, limit: int = 50) -> dict[str, Any]:
    forms = service.list_forms(actor, limit=limit)
    return {"forms": [_summary(stored) for stored in forms], "count": len(forms)}


# =============================================================================
# Fields
# =============================================================================


def add_field(
    service: FormService,
    actor: Actor,
    form_id: str,
    kind: str,
    row_index: int | None = None,
    col_index: int | None = None,
) -> dict[str, Any]:
    """Append a default field of ``kind`` and return it."""
    form = append_field(service.get_schema(form_id), kind, row_index, col_index)
    service.save_form(actor, form_id, form)
    item = form.fields[-1]
    logger.info(f"Added {item.kind.value} field {item.id} to form {form_id}")
    return item.model_dump(mode="json", by_alias=True, exclude_none=True)


def edit_field(
    service: FormService,
    actor: Actor,
    form_id: str,
    field_id: str,
    updates: dict[str, Any],
) -> dict[str, Any]:
    form = update_field(service.get_schema(form_id), field_id, updates)
    service.save_form(actor, form_id, form)
    return form.get_field(field_id).model_dump(
        mode="json", by_alias=True, exclude_none=True
    )


def delete_field(
    service: FormService, actor: Actor, form_id: str, field_id: str
) -> dict[str, Any]:
    form = remove_field(service.get_schema(form_id), field_id)
    service.save_form(actor, form_id, form)
    return {"field_ids": form.field_ids}


def reorder_field(
    service: FormService,
    actor: Actor,
    form_id: str,
    from_index: int,
    to_index: int,
) -> dict[str, Any]:
    form = move_field(service.get_schema(form_id), from_index, to_index)
    service.save_form(actor, form_id, form)
    return {"field_ids": form.field_ids}


# =============================================================================
# Rendering & Answers
# =============================================================================


def render_form(
    service: FormService,
    form_id: str,
    mode: str = "edit",
    answers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Render a stored form as widget data plus a text tree."""
    form = service.get_schema(form_id)
    errors = None
    if RenderMode(mode) == RenderMode.FILL and answers:
        errors = _validate_answers(form, answers).errors
    presentation = render(form, mode, answers=answers, errors=errors)
    return {
        "presentation": presentation.to_dict(),
        "text": format_presentation(presentation),
    }


def validate_answers(
    service: FormService, form_id: str, answers: dict[str, Any]
) -> dict[str, Any]:
    return _validate_answers(service.get_schema(form_id), answers).to_dict()


async def submit_response(
    service: FormService,
    form_id: str,
    answers: dict[str, Any],
    metadata: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Validate and store a response through a fill session.

    The ``userId``/``userName``/``userEmail``/``userCompany`` keys of
    ``metadata`` identify the respondent; every key is stored unchanged.
    """
    extra = dict(metadata or {})
    embed = EmbedContext(
        user_id=extra.pop("userId", None),
        user_name=extra.pop("userName", None),
        user_email=extra.pop("userEmail", None),
        user_company=extra.pop("userCompany", None),
    )
    session = FillSession(
        service.get_schema(form_id),
        StorageSubmitter(service),
        form_id=form_id,
        embed=embed,
        tracker=service,
    )
    for field_id, value in answers.items():
        session.set_answer(field_id, value)

    result = await session.submit(extra_metadata=extra)
    return {"submitted": result.valid, **result.to_dict()}


def list_submissions(
    service: FormService, actor: Actor, form_id: str, limit: int = 100
) -> dict[str, Any]:
    submissions = service.list_submissions(actor, form_id, limit=limit)
    return {
        "submissions": [submission.to_dict() for submission in submissions],
        "total": service.count_submissions(form_id),
    }


__all__ = [
    "create_form",
    "get_form",
    "list_forms",
    "add_field",
    "edit_field",
    "delete_field",
    "reorder_field",
    "render_form",
    "validate_answers",
    "submit_response",
    "list_submissions",
]
