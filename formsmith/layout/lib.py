"""Grid layout resolver.

Pure functions over a ``GridLayout`` and the form's field list. Every
function returns fresh copies; inputs are never mutated. The one-field-per-
cell invariant is preserved by every operation here: collisions are
resolved by displacing the occupant to the first empty cell of its row, or
to cell 0 of a newly appended row when the row is full.
"""

import logging
from dataclasses import dataclass, field
from typing import NamedTuple

from ..core.errors import FieldNotFoundError, InvalidSchemaError, RowNotFoundError
from ..schema import (
    DEFAULT_TEMPLATE,
    FieldSchema,
    GridLayout,
    GridTemplate,
    Row,
    template_cells,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Types
# =============================================================================


class Cell(NamedTuple):
    """Grid coordinates of one cell."""

    row_index: int
    col_index: int


@dataclass
class RowDeletion:
    """Outcome of deleting a row.

    Attributes:
        layout: Layout without the row.
        fields: Fields with later rows shifted up; unplaced fields have no
            coordinates.
        unplaced_ids: Ids of the fields that sat in the deleted row.
    """

    layout: GridLayout
    fields: list[FieldSchema]
    unplaced_ids: list[str] = field(default_factory=list)


@dataclass
class LayoutChange:
    """A layout and field list that changed together."""

    layout: GridLayout
    fields: list[FieldSchema]


# =============================================================================
# Templates
# =============================================================================


def parse_template(template: GridTemplate | str | None) -> GridTemplate:
    """Resolve a template name, falling back to ``1-column`` when unknown."""
    if template is None:
        return DEFAULT_TEMPLATE
    try:
        return GridTemplate(template)
    except ValueError:
        logger.warning(
            f"Unknown row template {template!r}, falling back to "
            f"{DEFAULT_TEMPLATE.value}"
        )
        return DEFAULT_TEMPLATE


def cell_fraction(layout: GridLayout, cell: Cell) -> float:
    """Width of ``cell`` as a fraction of its row.

    Raises:
        RowNotFoundError: If the row does not exist.
        InvalidSchemaError: If the row has no such column.
    """
    row = _get_row(layout, cell.row_index)
    cells = row.cells
    if not 0 <= cell.col_index < len(cells):
        raise InvalidSchemaError(
            f"Row {cell.row_index} ({row.template.value}) has no column {cell.col_index}"
        )
    return cells[cell.col_index] / sum(cells)


# =============================================================================
# Queries
# =============================================================================


def cell_of(item: FieldSchema) -> Cell | None:
    """Cell a field is placed in, or None when unplaced."""
    if item.row_index is None:
        return None
    return Cell(item.row_index, item.col_index or 0)


def occupancy(fields: list[FieldSchema]) -> dict[Cell, str]:
    """Map of occupied cells to the id of the first field found there."""
    occupied: dict[Cell, str] = {}
    for item in fields:
        cell = cell_of(item)
        if cell is not None and cell not in occupied:
            occupied[cell] = item.id
    return occupied


def field_at(fields: list[FieldSchema], cell: Cell) -> FieldSchema | None:
    for item in fields:
        if cell_of(item) == cell:
            return item
    return None


def find_empty_cell(
    layout: GridLayout,
    fields: list[FieldSchema],
    row_index: int,
    exclude_id: str | None = None,
) -> Cell | None:
    """First unoccupied cell of a row, ignoring the field ``exclude_id``."""
    if not 0 <= row_index < len(layout.rows):
        return None
    occupied = occupancy([item for item in fields if item.id != exclude_id])
    for col_index in range(layout.rows[row_index].cell_count):
        cell = Cell(row_index, col_index)
        if cell not in occupied:
            return cell
    return None


def grid_order(fields: list[FieldSchema]) -> list[FieldSchema]:
    """Fields sorted by ``(rowIndex, colIndex)``; list order breaks ties.

    Unplaced fields go last, in list order.
    """
    def key(indexed: tuple[int, FieldSchema]) -> tuple[int, int, int, int]:
        position, item = indexed
        cell = cell_of(item)
        if cell is None:
            return (1, 0, 0, position)
        return (0, cell.row_index, cell.col_index, position)

    return [item for _, item in sorted(enumerate(fields), key=key)]


# =============================================================================
# Row Operations
# =============================================================================


def add_row(
    layout: GridLayout, template: GridTemplate | str | None = None
) -> GridLayout:
    """Append a row built from ``template`` (default ``1-column``)."""
    rows = [row.model_copy() for row in layout.rows]
    rows.append(Row(template=parse_template(template)))
    return GridLayout(rows=rows)


def delete_row(
    layout: GridLayout, fields: list[FieldSchema], row_index: int
) -> RowDeletion:
    """Remove a row and shift every later row up by one.

    Fields of the deleted row lose their coordinates and are reported in
    ``unplaced_ids``; the caller decides what happens to them. Deleting a
    row that does not exist changes nothing.
    """
    copies = [item.model_copy(deep=True) for item in fields]
    if not 0 <= row_index < len(layout.rows):
        logger.debug(f"delete_row: no row {row_index}, nothing to do")
        return RowDeletion(layout=layout.model_copy(deep=True), fields=copies)

    rows = [row.model_copy() for i, row in enumerate(layout.rows) if i != row_index]
    unplaced: list[str] = []
    for item in copies:
        if item.row_index is None:
            continue
        if item.row_index == row_index:
            item.row_index = None
            item.col_index = None
            unplaced.append(item.id)
        elif item.row_index > row_index:
            item.row_index -= 1

    return RowDeletion(layout=GridLayout(rows=rows), fields=copies, unplaced_ids=unplaced)


def ensure_row_count(layout: GridLayout, fields: list[FieldSchema]) -> GridLayout:
    """Pad with ``1-column`` rows until every referenced row exists."""
    referenced = [item.row_index for item in fields if item.row_index is not None]
    needed = max(referenced, default=-1) + 1
    rows = [row.model_copy() for row in layout.rows]
    while len(rows) < needed:
        rows.append(Row(template=DEFAULT_TEMPLATE))
    return GridLayout(rows=rows)


def change_row_template(
    layout: GridLayout,
    fields: list[FieldSchema],
    row_index: int,
    template: GridTemplate | str,
) -> LayoutChange:
    """Switch a row's template, relocating fields from vanished cells.

    Raises:
        RowNotFoundError: If the row does not exist.
    """
    _get_row(layout, row_index)
    rows = [row.model_copy() for row in layout.rows]
    rows[row_index] = Row(template=parse_template(template))
    new_layout = GridLayout(rows=rows)
    copies = [item.model_copy(deep=True) for item in fields]

    cell_count = rows[row_index].cell_count
    stranded = [
        item
        for item in copies
        if item.row_index == row_index and (item.col_index or 0) >= cell_count
    ]
    for item in stranded:
        new_layout = _relocate(new_layout, copies, item, row_index)

    return LayoutChange(layout=new_layout, fields=copies)


# =============================================================================
# Drops
# =============================================================================


def resolve_drop(
    layout: GridLayout,
    fields: list[FieldSchema],
    source_id: str,
    destination: Cell,
) -> LayoutChange:
    """Move ``source_id`` into ``destination``, keeping one field per cell.

    An empty destination simply receives the field. An occupied one keeps
    the dropped field and its former occupant moves to the first empty cell
    of the same row, or to cell 0 of a newly appended row.

    Raises:
        FieldNotFoundError: If ``source_id`` is not among ``fields``.
        RowNotFoundError: If the destination row does not exist.
        InvalidSchemaError: If the destination row has no such column.
    """
    destination = Cell(*destination)
    row = _get_row(layout, destination.row_index)
    if not 0 <= destination.col_index < row.cell_count:
        raise InvalidSchemaError(
            f"Row {destination.row_index} ({row.template.value}) has no column "
            f"{destination.col_index}"
        )

    copies = [item.model_copy(deep=True) for item in fields]
    source = next((item for item in copies if item.id == source_id), None)
    if source is None:
        raise FieldNotFoundError(source_id)

    new_layout = layout.model_copy(deep=True)
    if cell_of(source) == destination:
        return LayoutChange(layout=new_layout, fields=copies)

    occupant = next(
        (
            item
            for item in copies
            if item.id != source_id and cell_of(item) == destination
        ),
        None,
    )

    source.row_index = destination.row_index
    source.col_index = destination.col_index

    if occupant is not None:
        new_layout = _relocate(new_layout, copies, occupant, destination.row_index)
        logger.debug(
            f"Drop of {source_id} displaced {occupant.id} to "
            f"({occupant.row_index}, {occupant.col_index})"
        )

    return LayoutChange(layout=new_layout, fields=copies)


def _relocate(
    layout: GridLayout,
    fields: list[FieldSchema],
    item: FieldSchema,
    row_index: int,
) -> GridLayout:
    """Move ``item`` (in place) to a free cell of ``row_index`` or a new row."""
    empty = find_empty_cell(layout, fields, row_index, exclude_id=item.id)
    if empty is None:
        layout = add_row(layout)
        empty = Cell(len(layout.rows) - 1, 0)
    item.row_index = empty.row_index
    item.col_index = empty.col_index
    return layout


def _get_row(layout: GridLayout, row_index: int) -> Row:
    if not 0 <= row_index < len(layout.rows):
        raise RowNotFoundError(row_index)
    return layout.rows[row_index]


__all__ = [
    # Types
    "Cell",
    "RowDeletion",
    "LayoutChange",
    # Templates
    "parse_template",
    "cell_fraction",
    # Queries
    "cell_of",
    "occupancy",
    "field_at",
    "find_empty_cell",
    "grid_order",
    # Row operations
    "add_row",
    "delete_row",
    "ensure_row_count",
    "change_row_template",
    # Drops
    "resolve_drop",
]
