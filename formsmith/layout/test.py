"""Tests for the grid layout resolver."""

import logging

import pytest

from formsmith.core.errors import FieldNotFoundError, InvalidSchemaError, RowNotFoundError
from formsmith.schema import FieldKind, FieldSchema, GridLayout, GridTemplate, Row

from .lib import (
    Cell,
    add_row,
    cell_fraction,
    change_row_template,
    delete_row,
    ensure_row_count,
    field_at,
    find_empty_cell,
    grid_order,
    parse_template,
    resolve_drop,
)


def _cells(fields):
    return {item.id: (item.row_index, item.col_index) for item in fields}


class TestTemplates:
    """Template parsing and cell widths."""

    @pytest.mark.unit
    def test_unknown_template_falls_back(self, caplog):
        """A malformed name becomes 1-column with a warning."""
        with caplog.at_level(logging.WARNING):
            assert parse_template("7-up") == GridTemplate.ONE_COLUMN
        assert "7-up" in caplog.text

    @pytest.mark.unit
    def test_add_row_default_and_named(self):
        """Rows default to a single column."""
        layout = add_row(GridLayout())
        layout = add_row(layout, "2-1")
        assert [row.template for row in layout.rows] == [
            GridTemplate.ONE_COLUMN,
            GridTemplate.TWO_ONE,
        ]

    @pytest.mark.unit
    def test_add_row_does_not_mutate(self):
        """The input layout is left untouched."""
        layout = GridLayout(rows=[Row()])
        add_row(layout)
        assert len(layout.rows) == 1

    @pytest.mark.unit
    def test_cell_fraction(self):
        """Fractions follow the relative widths of the template."""
        layout = GridLayout(rows=[Row(template=GridTemplate.ONE_TWO_ONE)])
        assert cell_fraction(layout, Cell(0, 1)) == pytest.approx(0.5)
        assert cell_fraction(layout, Cell(0, 2)) == pytest.approx(0.25)
        with pytest.raises(InvalidSchemaError):
            cell_fraction(layout, Cell(0, 3))
        with pytest.raises(RowNotFoundError):
            cell_fraction(layout, Cell(4, 0))


class TestDeleteRow:
    """Row deletion and reindexing."""

    @pytest.mark.unit
    def test_reindexes_later_rows(self):
        """Deleting row 1 of four shifts rows 2 and 3 up."""
        layout = GridLayout(rows=[Row() for _ in range(4)])
        fields = [
            FieldSchema(id=f"r{i}", kind=FieldKind.TEXT, label=str(i), row_index=i, col_index=0)
            for i in range(4)
        ]
        result = delete_row(layout, fields, 1)

        assert len(result.layout.rows) == 3
        assert result.unplaced_ids == ["r1"]
        placed = {item.id: item.row_index for item in result.fields if item.row_index is not None}
        assert placed == {"r0": 0, "r2": 1, "r3": 2}
        assert all(item.row_index in (None, 0, 1, 2) for item in result.fields)

    @pytest.mark.unit
    def test_missing_row_is_noop(self, grid_form):
        """Out-of-range deletion changes nothing."""
        result = delete_row(grid_form.layout, grid_form.fields, 9)
        assert len(result.layout.rows) == 2
        assert _cells(result.fields) == _cells(grid_form.fields)
        assert result.unplaced_ids == []

    @pytest.mark.unit
    def test_inputs_not_mutated(self, grid_form):
        """Original fields keep their coordinates."""
        delete_row(grid_form.layout, grid_form.fields, 0)
        assert grid_form.get_field("C").row_index == 1


class TestEnsureRowCount:
    """Padding rows for referenced indices."""

    @pytest.mark.unit
    def test_pads_to_max_row(self):
        """Hydrated fields referencing row 3 produce four rows."""
        fields = [FieldSchema(kind=FieldKind.TEXT, label="x", row_index=3, col_index=0)]
        layout = ensure_row_count(GridLayout(rows=[Row(template=GridTemplate.TWO_COLUMN)]), fields)
        assert len(layout.rows) == 4
        assert layout.rows[0].template == GridTemplate.TWO_COLUMN
        assert layout.rows[3].template == GridTemplate.ONE_COLUMN

    @pytest.mark.unit
    def test_never_shrinks(self, grid_form):
        """Unreferenced rows are kept."""
        layout = ensure_row_count(grid_form.layout, [])
        assert len(layout.rows) == 2


class TestQueries:
    """Cell lookups and ordering."""

    @pytest.mark.unit
    def test_find_empty_cell(self, grid_form):
        """Full rows have no empty cell; excluding a field frees its cell."""
        assert find_empty_cell(grid_form.layout, grid_form.fields, 0) is None
        assert find_empty_cell(grid_form.layout, grid_form.fields, 0, exclude_id="B") == Cell(0, 1)
        assert find_empty_cell(grid_form.layout, grid_form.fields, 5) is None

    @pytest.mark.unit
    def test_field_at(self, grid_form):
        """Cell lookup finds the occupant."""
        assert field_at(grid_form.fields, Cell(0, 1)).id == "B"
        assert field_at(grid_form.fields, Cell(1, 1)) is None

    @pytest.mark.unit
    def test_grid_order(self):
        """Row, then column, then list position; unplaced last."""
        fields = [
            FieldSchema(id="late", kind=FieldKind.TEXT, label="", row_index=2, col_index=0),
            FieldSchema(id="loose", kind=FieldKind.TEXT, label=""),
            FieldSchema(id="right", kind=FieldKind.TEXT, label="", row_index=0, col_index=1),
            FieldSchema(id="left", kind=FieldKind.TEXT, label="", row_index=0, col_index=0),
        ]
        assert [item.id for item in grid_order(fields)] == ["left", "right", "late", "loose"]


class TestResolveDrop:
    """Drag-and-drop placement."""

    @pytest.mark.unit
    def test_displaces_occupant_to_new_row(self, grid_form):
        """C dropped on A's cell in a full row pushes A to a new row."""
        result = resolve_drop(grid_form.layout, grid_form.fields, "C", Cell(0, 0))
        cells = _cells(result.fields)
        assert cells["C"] == (0, 0)
        assert cells["B"] == (0, 1)
        assert cells["A"] == (2, 0)
        assert len(result.layout.rows) == 3

    @pytest.mark.unit
    def test_displaces_occupant_within_row(self):
        """With a free cell in the row, the occupant moves there."""
        layout = GridLayout(rows=[Row(template=GridTemplate.THREE_COLUMN), Row()])
        fields = [
            FieldSchema(id="A", kind=FieldKind.TEXT, label="A", row_index=0, col_index=0),
            FieldSchema(id="C", kind=FieldKind.TEXT, label="C", row_index=1, col_index=0),
        ]
        result = resolve_drop(layout, fields, "C", Cell(0, 0))
        assert _cells(result.fields) == {"C": (0, 0), "A": (0, 1)}
        assert len(result.layout.rows) == 2

    @pytest.mark.unit
    def test_swap_within_row(self, grid_form):
        """Dropping B onto A inside the same row swaps them."""
        result = resolve_drop(grid_form.layout, grid_form.fields, "B", Cell(0, 0))
        cells = _cells(result.fields)
        assert cells["B"] == (0, 0)
        assert cells["A"] == (0, 1)

    @pytest.mark.unit
    def test_empty_destination(self, grid_form):
        """An empty cell simply receives the field."""
        layout = add_row(grid_form.layout, "2-column")
        result = resolve_drop(layout, grid_form.fields, "A", Cell(2, 1))
        assert _cells(result.fields)["A"] == (2, 1)

    @pytest.mark.unit
    def test_unplaced_source(self, grid_form):
        """A field without coordinates can be dropped into the grid."""
        fields = grid_form.fields + [FieldSchema(id="D", kind=FieldKind.EMAIL, label="D")]
        result = resolve_drop(grid_form.layout, fields, "D", Cell(1, 0))
        cells = _cells(result.fields)
        assert cells["D"] == (1, 0)
        assert cells["C"] == (2, 0)

    @pytest.mark.unit
    def test_same_cell_is_noop(self, grid_form):
        """Dropping a field on its own cell changes nothing."""
        result = resolve_drop(grid_form.layout, grid_form.fields, "A", Cell(0, 0))
        assert _cells(result.fields) == _cells(grid_form.fields)

    @pytest.mark.unit
    def test_errors(self, grid_form):
        """Unknown source or destination is reported."""
        with pytest.raises(FieldNotFoundError):
            resolve_drop(grid_form.layout, grid_form.fields, "Z", Cell(0, 0))
        with pytest.raises(RowNotFoundError):
            resolve_drop(grid_form.layout, grid_form.fields, "A", Cell(7, 0))
        with pytest.raises(InvalidSchemaError):
            resolve_drop(grid_form.layout, grid_form.fields, "A", Cell(1, 1))


class TestChangeRowTemplate:
    """Template changes keep every field in an existing cell."""

    @pytest.mark.unit
    def test_shrinking_row_relocates(self, grid_form):
        """B loses its column and moves to a new row."""
        result = change_row_template(grid_form.layout, grid_form.fields, 0, "1-column")
        cells = _cells(result.fields)
        assert cells["A"] == (0, 0)
        assert cells["B"] == (2, 0)
        assert result.layout.rows[0].template == GridTemplate.ONE_COLUMN

    @pytest.mark.unit
    def test_growing_row_keeps_fields(self, grid_form):
        """Widening a row leaves placements alone."""
        result = change_row_template(grid_form.layout, grid_form.fields, 1, "1-1-2")
        assert _cells(result.fields) == _cells(grid_form.fields)
        assert result.layout.rows[1].cell_count == 3

    @pytest.mark.unit
    def test_missing_row(self, grid_form):
        """Unknown rows raise."""
        with pytest.raises(RowNotFoundError):
            change_row_template(grid_form.layout, grid_form.fields, 5, "2-1")
