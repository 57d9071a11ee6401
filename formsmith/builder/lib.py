"""Schema builder: the mutation API for authoring forms.

Every operation takes a ``FormSchema`` and returns a new one; the input is
never modified. Grid operations delegate placement to ``formsmith.layout``
so the one-field-per-cell rule holds after every call.

Example:
    >>> form = new_form("Contact")
    >>> form = append_field(form, FieldKind.TEXT)
    >>> form = update_field(form, form.fields[0].id, {"label": "Name", "required": True})
"""

import logging
from typing import Any, Literal, Mapping

from ..config import get_default_template
from ..core.errors import (
    CellOccupiedError,
    FieldIndexError,
    InvalidSchemaError,
)
from ..layout import (
    Cell,
    add_row as layout_add_row,
    change_row_template as layout_change_row_template,
    delete_row as layout_delete_row,
    ensure_row_count,
    field_at,
    grid_order,
    resolve_drop,
)
from ..schema import (
    FieldKind,
    FieldOption,
    FieldSchema,
    FormSchema,
    GridLayout,
    GridTemplate,
    HeadingLevel,
    PlacementMode,
    Row,
    create_default_field,
    default_options,
    get_kind_meta,
    load_form,
    normalize_options,
    resolve_kind_alias,
)

logger = logging.getLogger(__name__)

Direction = Literal["up", "down"]


# =============================================================================
# Form Lifecycle
# =============================================================================


def new_form(
    title: str = "Untitled Form",
    description: str | None = None,
    placement: PlacementMode | str = PlacementMode.FLOW,
    settings: Mapping[str, Any] | None = None,
) -> FormSchema:
    """Create an empty form; grid forms start with one default row."""
    placement = PlacementMode(placement)
    layout = None
    if placement == PlacementMode.GRID:
        layout = GridLayout(rows=[Row(template=get_default_template())])
    return FormSchema(
        title=title,
        description=description,
        placement=placement,
        layout=layout,
        settings=dict(settings or {}),
    )


def hydrate_form(payload: Any, title: str | None = None) -> FormSchema:
    """Load a persisted form of any known shape and pad its grid rows."""
    form = load_form(payload, title=title)
    if form.is_grid and form.layout is not None:
        form.layout = ensure_row_count(form.layout, form.fields)
    return form


def _copy(form: FormSchema) -> FormSchema:
    return form.model_copy(deep=True)


# =============================================================================
# Field Operations
# =============================================================================


def append_field(
    form: FormSchema,
    kind: FieldKind | str,
    row_index: int | None = None,
    col_index: int | None = None,
    field_id: str | None = None,
) -> FormSchema:
    """Append a default field of ``kind``.

    In grid mode the target cell is required; missing rows are padded.

    Raises:
        InvalidSchemaError: If a grid cell is missing or out of the row.
        CellOccupiedError: If the target cell already holds a field.
    """
    new = _copy(form)
    item = create_default_field(_resolve_kind(kind), field_id=field_id)
    if new.find_field(item.id) is not None:
        raise InvalidSchemaError(f"Field id '{item.id}' already exists")

    if new.is_grid:
        if row_index is None or col_index is None:
            raise InvalidSchemaError("Grid forms need a row and column for new fields")
        item.row_index = row_index
        item.col_index = col_index
        new.layout = ensure_row_count(new.layout, [item])
        _check_cell_free(new, Cell(row_index, col_index), ignore_id=item.id)
    elif row_index is not None or col_index is not None:
        raise InvalidSchemaError("Flow forms do not take grid coordinates")

    new.fields.append(item)
    logger.debug(f"Appended {item.kind.value} field {item.id}")
    return new


def _normalize_updates(updates: Mapping[str, Any]) -> dict[str, Any]:
    """Map camelCase or snake_case keys onto FieldSchema attribute names."""
    by_alias = {
        info.alias: name
        for name, info in FieldSchema.model_fields.items()
        if info.alias is not None
    }
    normalized: dict[str, Any] = {}
    for key, value in updates.items():
        if key in FieldSchema.model_fields:
            normalized[key] = value
        elif key in by_alias:
            normalized[by_alias[key]] = value
        else:
            raise InvalidSchemaError(f"Unknown field attribute: {key}")

    if normalized.get("options") is not None:
        normalized["options"] = normalize_options(
            [
                option.model_dump() if isinstance(option, FieldOption) else option
                for option in normalized["options"]
            ]
        )
    return normalized


def _resolve_kind(kind: FieldKind | str) -> FieldKind:
    if isinstance(kind, FieldKind):
        return kind
    resolved = resolve_kind_alias(str(kind))
    if resolved is None:
        raise InvalidSchemaError(f"Unknown field kind: {kind}")
    return resolved


def _reconcile_kind(previous: FieldSchema, merged: dict[str, Any]) -> None:
    """Apply the option and heading rules after a merge."""
    kind = _resolve_kind(merged["kind"])
    merged["kind"] = kind
    meta = get_kind_meta(kind)

    if meta.requires_options:
        if not merged.get("options"):
            if previous.is_choice and previous.options:
                logger.warning(
                    f"Keeping existing options on {previous.id}: a choice field "
                    f"cannot be left without options"
                )
                merged["options"] = [o.model_dump() for o in previous.options]
            else:
                merged["options"] = [o.model_dump() for o in default_options()]
    else:
        merged["options"] = None

    if kind == FieldKind.HEADING:
        merged["heading_level"] = merged.get("heading_level") or HeadingLevel.H2
    else:
        merged["heading_level"] = None


def update_field(
    form: FormSchema, field_id: str, updates: Mapping[str, Any]
) -> FormSchema:
    """Merge ``updates`` into the identified field.

    Keys may use attribute names or their persisted camelCase spelling. A
    choice field never loses its last option through an update: the prior
    options are kept, or defaults seeded when the kind just changed.

    Raises:
        FieldNotFoundError: If ``field_id`` is absent.
        InvalidSchemaError: On unknown keys, an id change or invalid values,
            or placement attributes that do not match the form's mode.
        CellOccupiedError: If new grid coordinates collide with another field.
    """
    new = _copy(form)
    index = new.index_of(field_id)
    previous = new.fields[index]

    changes = _normalize_updates(updates)
    if changes.get("id", field_id) != field_id:
        raise InvalidSchemaError(f"Field id '{field_id}' cannot be changed")
    changes.pop("id", None)

    merged = previous.model_dump()
    merged.update(changes)
    _reconcile_kind(previous, merged)

    try:
        updated = FieldSchema.model_validate(merged)
    except ValueError as exc:
        raise InvalidSchemaError(f"Invalid update for field '{field_id}': {exc}") from exc

    moved = "row_index" in changes or "col_index" in changes
    if new.is_grid:
        if changes.get("column_width") is not None:
            raise InvalidSchemaError("Grid fields take their width from the row template")
        if moved:
            if updated.row_index is None or updated.col_index is None:
                raise InvalidSchemaError(f"Grid field '{field_id}' needs a row and column")
            new.layout = ensure_row_count(new.layout, [updated])
            _check_cell_free(
                new, Cell(updated.row_index, updated.col_index), ignore_id=field_id
            )
    elif changes.get("row_index") is not None or changes.get("col_index") is not None:
        raise InvalidSchemaError("Flow forms do not take grid coordinates")

    new.fields[index] = updated
    return new


def remove_field(form: FormSchema, field_id: str) -> FormSchema:
    """Remove a field; an unknown id leaves the form unchanged."""
    new = _copy(form)
    if new.find_field(field_id) is None:
        logger.debug(f"remove_field: {field_id} not present, nothing to do")
        return new
    new.fields = [item for item in new.fields if item.id != field_id]
    return new


def move_field(form: FormSchema, from_index: int, to_index: int) -> FormSchema:
    """Move the field at ``from_index`` to ``to_index``.

    Raises:
        FieldIndexError: If either index is out of range.
    """
    count = len(form.fields)
    for name, index in (("from_index", from_index), ("to_index", to_index)):
        if not 0 <= index < count:
            raise FieldIndexError(f"{name} {index} out of range for {count} fields")

    new = _copy(form)
    if from_index != to_index:
        item = new.fields.pop(from_index)
        new.fields.insert(to_index, item)
    return new


def move_field_up(form: FormSchema, index: int) -> FormSchema:
    """Swap with the previous field; the first field stays put."""
    if index == 0 and form.fields:
        return _copy(form)
    return move_field(form, index, index - 1)


def move_field_down(form: FormSchema, index: int) -> FormSchema:
    """Swap with the next field; the last field stays put."""
    if form.fields and index == len(form.fields) - 1:
        return _copy(form)
    return move_field(form, index, index + 1)


def reorder_fields(form: FormSchema, field_ids: list[str]) -> FormSchema:
    """Reorder fields to match ``field_ids``.

    Raises:
        InvalidSchemaError: If ``field_ids`` is not a permutation of the ids.
    """
    if sorted(field_ids) != sorted(form.field_ids):
        raise InvalidSchemaError("Reorder must list every field id exactly once")
    new = _copy(form)
    by_id = {item.id: item for item in new.fields}
    new.fields = [by_id[field_id] for field_id in field_ids]
    return new


# =============================================================================
# Form Metadata
# =============================================================================


def set_title(form: FormSchema, title: str) -> FormSchema:
    new = _copy(form)
    new.title = title
    return new


def set_description(form: FormSchema, description: str | None) -> FormSchema:
    new = _copy(form)
    new.description = description
    return new


def update_settings(form: FormSchema, settings: Mapping[str, Any]) -> FormSchema:
    """Shallow-merge ``settings`` into the form's settings bag."""
    new = _copy(form)
    new.settings = {**new.settings, **settings}
    return new


def set_placement(form: FormSchema, placement: PlacementMode | str) -> FormSchema:
    """Switch between flow and grid placement.

    Flow to grid gives every field its own single-column row, in list
    order. Grid to flow orders fields by cell and clears their coordinates.
    """
    placement = PlacementMode(placement)
    new = _copy(form)
    if placement == new.placement:
        return new

    if placement == PlacementMode.GRID:
        for row_index, item in enumerate(new.fields):
            item.row_index = row_index
            item.col_index = 0
            item.column_width = None
        rows = [Row() for _ in new.fields] or [Row()]
        new.layout = GridLayout(rows=rows)
    else:
        new.fields = grid_order(new.fields)
        for item in new.fields:
            item.row_index = None
            item.col_index = None
        new.layout = None

    new.placement = placement
    return new


# =============================================================================
# Option Operations
# =============================================================================


def _choice_field(form: FormSchema, field_id: str) -> tuple[FormSchema, FieldSchema]:
    new = _copy(form)
    item = new.get_field(field_id)
    if not item.is_choice:
        raise InvalidSchemaError(
            f"Field '{field_id}' ({item.kind.value}) does not take options"
        )
    if item.options is None:
        item.options = []
    return new, item


def add_option(
    form: FormSchema,
    field_id: str,
    label: str | None = None,
    value: str | None = None,
) -> FormSchema:
    """Append an option; defaults to ``Option N`` / ``option-N``."""
    new, item = _choice_field(form, field_id)
    number = len(item.options) + 1
    item.options.append(
        FieldOption(
            label=label if label is not None else f"Option {number}",
            value=value if value is not None else f"option-{number}",
        )
    )
    return new


def remove_option(form: FormSchema, field_id: str, index: int) -> FormSchema:
    """Remove the option at ``index``.

    The last remaining option is never removed, and an out-of-range index
    changes nothing.
    """
    new, item = _choice_field(form, field_id)
    if not 0 <= index < len(item.options):
        logger.debug(f"remove_option: no option {index} on {field_id}")
        return new
    if len(item.options) == 1:
        logger.warning(f"Refusing to remove the last option of {field_id}")
        return new
    del item.options[index]
    return new


def move_option(
    form: FormSchema, field_id: str, index: int, direction: Direction
) -> FormSchema:
    """Move an option one step; moves past either end change nothing.

    Raises:
        FieldIndexError: If ``index`` is out of range.
        InvalidSchemaError: If ``direction`` is not ``"up"`` or ``"down"``.
    """
    new, item = _choice_field(form, field_id)
    if not 0 <= index < len(item.options):
        raise FieldIndexError(f"Option index {index} out of range")
    if direction not in ("up", "down"):
        raise InvalidSchemaError(f"Unknown direction: {direction}")

    target = index - 1 if direction == "up" else index + 1
    if 0 <= target < len(item.options):
        options = item.options
        options[index], options[target] = options[target], options[index]
    return new


def update_option(
    form: FormSchema,
    field_id: str,
    index: int,
    label: str | None = None,
    value: str | None = None,
) -> FormSchema:
    """Change the label and/or value of one option.

    Raises:
        FieldIndexError: If ``index`` is out of range.
    """
    new, item = _choice_field(form, field_id)
    if not 0 <= index < len(item.options):
        raise FieldIndexError(f"Option index {index} out of range")
    option = item.options[index]
    if label is not None:
        option.label = label
    if value is not None:
        option.value = value
    return new


# =============================================================================
# Grid Operations
# =============================================================================


def _require_grid(form: FormSchema) -> FormSchema:
    if not form.is_grid:
        raise InvalidSchemaError("Grid operation on a flow form")
    return _copy(form)


def _check_cell_free(form: FormSchema, cell: Cell, ignore_id: str) -> None:
    if not form.layout.has_cell(cell.row_index, cell.col_index):
        raise InvalidSchemaError(
            f"Cell ({cell.row_index}, {cell.col_index}) does not exist"
        )
    occupant = field_at(
        [item for item in form.fields if item.id != ignore_id], cell
    )
    if occupant is not None:
        raise CellOccupiedError(cell.row_index, cell.col_index, occupant.id)


def add_row(form: FormSchema, template: GridTemplate | str | None = None) -> FormSchema:
    new = _require_grid(form)
    new.layout = layout_add_row(new.layout, template or get_default_template())
    return new


def delete_row(form: FormSchema, row_index: int) -> FormSchema:
    """Delete a grid row together with the fields placed in it."""
    new = _require_grid(form)
    result = layout_delete_row(new.layout, new.fields, row_index)
    doomed = set(result.unplaced_ids)
    new.layout = result.layout
    new.fields = [item for item in result.fields if item.id not in doomed]
    if doomed:
        logger.info(f"Deleted row {row_index} and fields {sorted(doomed)}")
    return new


def change_row_template(
    form: FormSchema, row_index: int, template: GridTemplate | str
) -> FormSchema:
    new = _require_grid(form)
    result = layout_change_row_template(new.layout, new.fields, row_index, template)
    new.layout = result.layout
    new.fields = result.fields
    return new


def drop_field(
    form: FormSchema, field_id: str, row_index: int, col_index: int
) -> FormSchema:
    """Drop a field into a grid cell, displacing any occupant."""
    new = _require_grid(form)
    result = resolve_drop(new.layout, new.fields, field_id, Cell(row_index, col_index))
    new.layout = result.layout
    new.fields = result.fields
    return new


__all__ = [
    # Form lifecycle
    "new_form",
    "hydrate_form",
    # Fields
    "append_field",
    "update_field",
    "remove_field",
    "move_field",
    "move_field_up",
    "move_field_down",
    "reorder_fields",
    # Metadata
    "set_title",
    "set_description",
    "update_settings",
    "set_placement",
    # Options
    "add_option",
    "remove_option",
    "move_option",
    "update_option",
    # Grid
    "add_row",
    "delete_row",
    "change_row_template",
    "drop_field",
]
