"""Adapter for the older persisted block shapes.

Two shapes predate the rich ``FieldSchema`` record and still turn up in
stored forms:

- simplified blocks: options as bare strings, ``imageSrc`` instead of
  ``imageUrl``, ``description`` instead of ``helpText`` and numeric or length
  limits at the top level rather than under ``validation``;
- builder element maps: ``{id: element}`` dictionaries ordered by their
  ``y`` coordinate, with ``grid``/``row``/``column`` containers that hold
  child ids.

``load_form`` accepts either shape (or the rich one) and always returns a
``FormSchema``; ``downgrade_form`` goes the other way for consumers that
still expect bare-string options.
"""

import logging
from collections.abc import Mapping
from typing import Any

from ..core.errors import InvalidSchemaError
from .models import FieldSchema, FormSchema, default_options

logger = logging.getLogger(__name__)

CONTAINER_KINDS = frozenset({"grid", "row", "column"})

_VALIDATION_KEYS = ("min", "max", "step", "minLength", "maxLength", "pattern")

_RENAMED_KEYS = {
    "imageSrc": "imageUrl",
    "description": "helpText",
}


def normalize_options(raw: Any) -> list[dict[str, str]] | None:
    """Turn bare strings into ``{label, value}`` pairs.

    ``"Sales"`` becomes ``{"label": "Sales", "value": "Sales"}``; rich
    entries pass through, with a missing half copied from the other.
    """
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise InvalidSchemaError(f"options must be a list, got {type(raw).__name__}")

    normalized: list[dict[str, str]] = []
    for entry in raw:
        if isinstance(entry, Mapping):
            label = entry.get("label", entry.get("value"))
            value = entry.get("value", label)
            if label is None:
                raise InvalidSchemaError("option needs a label or a value")
            normalized.append({"label": str(label), "value": str(value)})
        else:
            text = str(entry)
            normalized.append({"label": text, "value": text})
    return normalized


def upgrade_block(block: Mapping[str, Any]) -> dict[str, Any]:
    """Rewrite one legacy block dict into the rich field record shape."""
    upgraded = dict(block)

    for old, new in _RENAMED_KEYS.items():
        if old in upgraded:
            value = upgraded.pop(old)
            upgraded.setdefault(new, value)

    limits = {key: upgraded.pop(key) for key in _VALIDATION_KEYS if key in upgraded}
    if limits:
        validation = dict(upgraded.get("validation") or {})
        for key, value in limits.items():
            validation.setdefault(key, value)
        upgraded["validation"] = validation

    if "options" in upgraded:
        upgraded["options"] = normalize_options(upgraded["options"])

    return upgraded


def upgrade_elements(elements: Mapping[str, Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Flatten a builder element map into an ordered list of blocks.

    Top-level elements are ordered by ``(y, x)``. Container elements are
    replaced by their children in the order the container lists them; a
    ``column`` container passes its ``columnWidth`` down to children that
    have none.
    """
    def position(element: Mapping[str, Any]) -> tuple[float, float]:
        return (element.get("y") or 0, element.get("x") or 0)

    def expand(element: Mapping[str, Any], inherited_width: Any) -> list[dict[str, Any]]:
        if element.get("type") in CONTAINER_KINDS:
            width = element.get("columnWidth", inherited_width)
            expanded: list[dict[str, Any]] = []
            for child_id in element.get("children") or []:
                child = elements.get(child_id)
                if child is None:
                    logger.warning(f"Dropping dangling child reference {child_id!r}")
                    continue
                expanded.extend(expand(child, width))
            return expanded

        block = upgrade_block(element)
        if inherited_width is not None:
            block.setdefault("columnWidth", inherited_width)
        return [block]

    roots = [element for element in elements.values() if not element.get("parentId")]
    ordered: list[dict[str, Any]] = []
    for element in sorted(roots, key=position):
        ordered.extend(expand(element, None))
    return ordered


def load_form(
    payload: Any,
    title: str | None = None,
    description: str | None = None,
) -> FormSchema:
    """Parse any known persisted shape into a FormSchema.

    Choice fields stored without options are given the default options.

    Args:
        payload: A rich form record, a list of (legacy) blocks, or a builder
            state with an ``elements`` map.
        title: Title to use when the payload itself carries none.
        description: Description to use when the payload carries none.

    Raises:
        InvalidSchemaError: If the payload cannot be interpreted.
    """
    if isinstance(payload, list):
        record: dict[str, Any] = {"fields": payload}
    elif isinstance(payload, Mapping) and "elements" in payload:
        record = {
            "title": payload.get("formTitle", payload.get("title")),
            "description": payload.get("formDescription", payload.get("description")),
            "fields": upgrade_elements(payload["elements"]),
        }
    elif isinstance(payload, Mapping):
        record = dict(payload)
    else:
        raise InvalidSchemaError(
            f"Cannot load a form from {type(payload).__name__}"
        )

    blocks = record.get("fields") or []
    if not isinstance(blocks, list):
        raise InvalidSchemaError("fields must be a list")
    record["fields"] = [
        upgrade_block(block) if isinstance(block, Mapping) else block
        for block in blocks
    ]

    if not record.get("title") and title:
        record["title"] = title
    if record.get("title") is None:
        record.pop("title", None)
    if record.get("description") is None and description is not None:
        record["description"] = description

    form = FormSchema.from_json(record)
    for field in form.fields:
        if field.is_choice and not field.options:
            logger.warning(f"Seeding default options into empty choice field {field.id!r}")
            field.options = default_options()
    return form


def downgrade_block(field: FieldSchema) -> dict[str, Any]:
    """Serialize a field with bare-string options (option labels)."""
    block = field.model_dump(mode="json", by_alias=True, exclude_none=True)
    if field.options is not None:
        block["options"] = [option.label for option in field.options]
    return block


def downgrade_form(form: FormSchema) -> list[dict[str, Any]]:
    return [downgrade_block(field) for field in form.fields]


__all__ = [
    "CONTAINER_KINDS",
    "normalize_options",
    "upgrade_block",
    "upgrade_elements",
    "load_form",
    "downgrade_block",
    "downgrade_form",
]
