"""Layout resolver for grid-placed forms."""

from .lib import (
    Cell,
    LayoutChange,
    RowDeletion,
    add_row,
    cell_fraction,
    cell_of,
    change_row_template,
    delete_row,
    ensure_row_count,
    field_at,
    find_empty_cell,
    grid_order,
    occupancy,
    parse_template,
    resolve_drop,
)

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
