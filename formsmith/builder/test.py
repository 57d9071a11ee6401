"""Tests for the schema builder."""

import pytest

from formsmith.core.errors import (
    CellOccupiedError,
    FieldIndexError,
    FieldNotFoundError,
    InvalidSchemaError,
)
from formsmith.schema import (
    FieldKind,
    FormSchema,
    GridTemplate,
    HeadingLevel,
    PlacementMode,
)

from .lib import (
    add_option,
    add_row,
    append_field,
    change_row_template,
    delete_row,
    drop_field,
    hydrate_form,
    move_field,
    move_field_down,
    move_field_up,
    move_option,
    new_form,
    remove_field,
    remove_option,
    reorder_fields,
    set_placement,
    set_title,
    update_field,
    update_option,
    update_settings,
)


def _labels(form):
    return [item.label for item in form.fields]


def _options(form, field_id):
    return [(o.label, o.value) for o in form.get_field(field_id).options]


# =============================================================================
# Field operations
# =============================================================================


class TestAppendField:
    """Adding fields."""

    @pytest.mark.unit
    def test_append_flow(self):
        """Fields are appended with kind defaults and unique ids."""
        form = append_field(new_form("F"), FieldKind.SELECT)
        form = append_field(form, "tel")
        assert [item.kind for item in form.fields] == [FieldKind.SELECT, FieldKind.PHONE]
        assert len(set(form.field_ids)) == 2
        assert len(form.fields[0].options) == 3

    @pytest.mark.unit
    def test_append_is_pure(self):
        """The input form is untouched."""
        form = new_form("F")
        append_field(form, FieldKind.TEXT)
        assert form.fields == []

    @pytest.mark.unit
    def test_flow_rejects_coordinates(self):
        with pytest.raises(InvalidSchemaError):
            append_field(new_form("F"), FieldKind.TEXT, row_index=0, col_index=0)

    @pytest.mark.unit
    def test_grid_requires_cell(self):
        with pytest.raises(InvalidSchemaError):
            append_field(new_form("G", placement="grid"), FieldKind.TEXT)

    @pytest.mark.unit
    def test_grid_pads_rows(self):
        """Appending into row 2 creates the missing rows."""
        form = append_field(new_form("G", placement="grid"), FieldKind.TEXT, 2, 0)
        assert len(form.layout.rows) == 3
        assert (form.fields[0].row_index, form.fields[0].col_index) == (2, 0)

    @pytest.mark.unit
    def test_grid_rejects_occupied_cell(self, grid_form):
        """One field per cell is enforced when appending."""
        with pytest.raises(CellOccupiedError) as info:
            append_field(grid_form, FieldKind.EMAIL, 0, 1)
        assert info.value.occupant_id == "B"

    @pytest.mark.unit
    def test_grid_rejects_missing_column(self, grid_form):
        with pytest.raises(InvalidSchemaError):
            append_field(grid_form, FieldKind.EMAIL, 1, 1)

    @pytest.mark.unit
    def test_duplicate_explicit_id(self, contact_form):
        with pytest.raises(InvalidSchemaError):
            append_field(contact_form, FieldKind.TEXT, field_id="name")


class TestUpdateField:
    """Merging partial updates."""

    @pytest.mark.unit
    def test_merges_camel_and_snake_keys(self, contact_form):
        form = update_field(
            contact_form, "name", {"helpText": "Full name", "placeholder": "Ann"}
        )
        item = form.get_field("name")
        assert item.help_text == "Full name"
        assert item.placeholder == "Ann"
        assert item.required is True

    @pytest.mark.unit
    def test_unknown_field(self, contact_form):
        with pytest.raises(FieldNotFoundError):
            update_field(contact_form, "nope", {"label": "x"})

    @pytest.mark.unit
    def test_unknown_attribute(self, contact_form):
        with pytest.raises(InvalidSchemaError):
            update_field(contact_form, "name", {"colour": "red"})

    @pytest.mark.unit
    def test_id_is_immutable(self, contact_form):
        with pytest.raises(InvalidSchemaError):
            update_field(contact_form, "name", {"id": "other"})
        form = update_field(contact_form, "name", {"id": "name", "label": "N"})
        assert form.get_field("name").label == "N"

    @pytest.mark.unit
    def test_invalid_value(self, contact_form):
        with pytest.raises(InvalidSchemaError):
            update_field(contact_form, "name", {"imageWidth": -5})

    @pytest.mark.unit
    def test_clearing_options_keeps_previous(self, contact_form):
        """A choice field never ends up with zero options."""
        form = update_field(contact_form, "topic", {"options": []})
        assert _options(form, "topic") == [("Sales", "sales"), ("Support", "support")]
        form = update_field(contact_form, "topic", {"options": None})
        assert len(form.get_field("topic").options) == 2

    @pytest.mark.unit
    def test_kind_change_into_choice_seeds_defaults(self, contact_form):
        form = update_field(contact_form, "name", {"type": "radio"})
        assert form.get_field("name").kind == FieldKind.RADIO
        assert _options(form, "name")[0] == ("Option 1", "option1")

    @pytest.mark.unit
    def test_kind_change_between_choices_keeps_options(self, contact_form):
        form = update_field(contact_form, "topic", {"kind": FieldKind.CHECKBOX})
        assert _options(form, "topic")[1] == ("Support", "support")

    @pytest.mark.unit
    def test_kind_change_out_of_choice_drops_options(self, contact_form):
        form = update_field(contact_form, "topic", {"kind": "text"})
        assert form.get_field("topic").options is None

    @pytest.mark.unit
    def test_bare_string_options(self, contact_form):
        form = update_field(contact_form, "topic", {"options": ["A", "B"]})
        assert _options(form, "topic") == [("A", "A"), ("B", "B")]

    @pytest.mark.unit
    def test_heading_level_follows_kind(self, contact_form):
        form = update_field(contact_form, "name", {"kind": "heading"})
        assert form.get_field("name").heading_level == HeadingLevel.H2
        form = update_field(form, "name", {"kind": "paragraph"})
        assert form.get_field("name").heading_level is None

    @pytest.mark.unit
    def test_grid_move_into_occupied_cell(self, grid_form):
        with pytest.raises(CellOccupiedError):
            update_field(grid_form, "C", {"rowIndex": 0, "colIndex": 0})

    @pytest.mark.unit
    def test_grid_move_to_free_cell(self, grid_form):
        form = update_field(grid_form, "C", {"rowIndex": 3, "colIndex": 0})
        assert form.get_field("C").row_index == 3
        assert len(form.layout.rows) == 4

    @pytest.mark.unit
    def test_flow_rejects_coordinates(self, contact_form):
        with pytest.raises(InvalidSchemaError):
            update_field(contact_form, "name", {"rowIndex": 4, "colIndex": 2})
        with pytest.raises(InvalidSchemaError):
            update_field(contact_form, "name", {"col_index": 1})

    @pytest.mark.unit
    def test_flow_accepts_column_width(self, contact_form):
        form = update_field(contact_form, "name", {"columnWidth": "1/2"})
        assert form.get_field("name").column_width is not None

    @pytest.mark.unit
    def test_grid_rejects_column_width(self, grid_form):
        with pytest.raises(InvalidSchemaError):
            update_field(grid_form, "A", {"columnWidth": "1/2"})

    @pytest.mark.unit
    def test_grid_rejects_clearing_cell(self, grid_form):
        with pytest.raises(InvalidSchemaError):
            update_field(grid_form, "A", {"rowIndex": None})
        assert grid_form.get_field("A").row_index == 0


class TestRemoveAndMove:
    """Removal and ordering."""

    @pytest.mark.unit
    def test_remove(self, contact_form):
        form = remove_field(contact_form, "email")
        assert form.field_ids == ["name", "topic"]

    @pytest.mark.unit
    def test_remove_missing_is_noop(self, contact_form):
        form = remove_field(contact_form, "ghost")
        assert form.to_json() == contact_form.to_json()

    @pytest.mark.unit
    def test_move(self, contact_form):
        form = move_field(contact_form, 0, 2)
        assert form.field_ids == ["email", "topic", "name"]

    @pytest.mark.unit
    @pytest.mark.parametrize("index", [0, 1, 2])
    def test_idempotent_move(self, contact_form, index):
        """Moving a field onto its own index returns an equal schema."""
        form = move_field(contact_form, index, index)
        assert form.model_dump() == contact_form.model_dump()
        assert form is not contact_form

    @pytest.mark.unit
    @pytest.mark.parametrize("src,dst", [(3, 0), (0, 3), (-1, 0)])
    def test_move_out_of_range(self, contact_form, src, dst):
        with pytest.raises(FieldIndexError):
            move_field(contact_form, src, dst)

    @pytest.mark.unit
    def test_up_down_boundaries(self, contact_form):
        assert move_field_up(contact_form, 0).field_ids == contact_form.field_ids
        assert move_field_down(contact_form, 2).field_ids == contact_form.field_ids
        assert move_field_up(contact_form, 1).field_ids == ["email", "name", "topic"]
        assert move_field_down(contact_form, 1).field_ids == ["name", "topic", "email"]

    @pytest.mark.unit
    def test_reorder(self, contact_form):
        form = reorder_fields(contact_form, ["topic", "name", "email"])
        assert form.field_ids == ["topic", "name", "email"]
        with pytest.raises(InvalidSchemaError):
            reorder_fields(contact_form, ["topic", "name"])


class TestMetadata:
    """Title, settings and placement."""

    @pytest.mark.unit
    def test_title_and_settings(self, contact_form):
        form = set_title(contact_form, "Reach us")
        form = update_settings(form, {"submitButtonText": "Send"})
        form = update_settings(form, {"theme": "dark"})
        assert form.title == "Reach us"
        assert form.settings == {"submitButtonText": "Send", "theme": "dark"}
        assert contact_form.title == "Contact"

    @pytest.mark.unit
    def test_flow_to_grid(self, contact_form):
        form = set_placement(contact_form, PlacementMode.GRID)
        assert form.is_grid
        assert len(form.layout.rows) == 3
        assert [(i.row_index, i.col_index) for i in form.fields] == [(0, 0), (1, 0), (2, 0)]

    @pytest.mark.unit
    def test_grid_to_flow(self, grid_form):
        form = drop_field(grid_form, "C", 0, 0)
        form = set_placement(form, "flow")
        assert form.field_ids == ["C", "B", "A"]
        assert form.layout is None
        assert all(item.row_index is None for item in form.fields)


# =============================================================================
# Option operations
# =============================================================================


class TestOptions:
    """Index-based option editing."""

    @pytest.mark.unit
    def test_add_option_default_naming(self, contact_form):
        form = add_option(contact_form, "topic")
        assert _options(form, "topic")[-1] == ("Option 3", "option-3")
        form = add_option(form, "topic", label="Billing", value="billing")
        assert _options(form, "topic")[-1] == ("Billing", "billing")

    @pytest.mark.unit
    def test_options_on_non_choice(self, contact_form):
        with pytest.raises(InvalidSchemaError):
            add_option(contact_form, "name")

    @pytest.mark.unit
    def test_remove_option(self, contact_form):
        form = remove_option(contact_form, "topic", 0)
        assert _options(form, "topic") == [("Support", "support")]
        assert _options(remove_option(form, "topic", 0), "topic") == [("Support", "support")]
        assert _options(remove_option(form, "topic", 9), "topic") == [("Support", "support")]

    @pytest.mark.unit
    def test_move_option_boundaries(self, contact_form):
        assert _options(move_option(contact_form, "topic", 0, "up"), "topic")[0][0] == "Sales"
        assert _options(move_option(contact_form, "topic", 1, "down"), "topic")[1][0] == "Support"
        moved = move_option(contact_form, "topic", 0, "down")
        assert [label for label, _ in _options(moved, "topic")] == ["Support", "Sales"]
        with pytest.raises(FieldIndexError):
            move_option(contact_form, "topic", 5, "up")

    @pytest.mark.unit
    def test_update_option(self, contact_form):
        form = update_option(contact_form, "topic", 1, label="Help")
        assert _options(form, "topic")[1] == ("Help", "support")
        with pytest.raises(FieldIndexError):
            update_option(contact_form, "topic", 2, label="x")


# =============================================================================
# Grid operations
# =============================================================================


class TestGridOperations:
    """Row and drop helpers keep the form consistent."""

    @pytest.mark.unit
    def test_grid_ops_need_grid(self, contact_form):
        with pytest.raises(InvalidSchemaError):
            add_row(contact_form)

    @pytest.mark.unit
    def test_add_row(self, grid_form, monkeypatch):
        monkeypatch.delenv("FORMSMITH_DEFAULT_TEMPLATE", raising=False)
        form = add_row(grid_form)
        form = add_row(form, "1-2")
        assert [row.template for row in form.layout.rows][2:] == [
            GridTemplate.ONE_COLUMN,
            GridTemplate.ONE_TWO,
        ]

    @pytest.mark.unit
    def test_delete_row_deletes_its_fields(self, grid_form):
        form = delete_row(grid_form, 0)
        assert form.field_ids == ["C"]
        assert form.get_field("C").row_index == 0
        assert len(form.layout.rows) == 1

    @pytest.mark.unit
    def test_change_row_template(self, grid_form):
        form = change_row_template(grid_form, 0, "1-column")
        assert (form.get_field("B").row_index, form.get_field("B").col_index) == (2, 0)

    @pytest.mark.unit
    def test_drop_field(self, grid_form):
        form = drop_field(grid_form, "C", 0, 0)
        cells = {i.id: (i.row_index, i.col_index) for i in form.fields}
        assert cells == {"A": (2, 0), "B": (0, 1), "C": (0, 0)}


class TestRoundTrip:
    """Forms built by the builder survive persistence."""

    @pytest.mark.unit
    def test_builder_sequence_round_trips(self):
        form = new_form("Survey", description="Tell us", placement="grid")
        form = change_row_template(form, 0, "2-1")
        form = append_field(form, FieldKind.TEXT, 0, 0)
        form = append_field(form, FieldKind.SELECT, 0, 1)
        form = append_field(form, FieldKind.IMAGE, 1, 0)
        form = update_field(form, form.fields[0].id, {"required": True, "validation": {"pattern": "^a"}})
        form = add_option(form, form.fields[1].id, "Other", "other")

        restored = FormSchema.from_json(form.to_json())
        assert restored.field_ids == form.field_ids
        for before, after in zip(form.fields, restored.fields):
            assert after.model_dump() == before.model_dump()
        assert restored.layout.model_dump() == form.layout.model_dump()

    @pytest.mark.unit
    def test_hydrate_pads_rows(self):
        payload = {
            "title": "Old",
            "placement": "grid",
            "layout": {"rows": [{"template": "2-column"}]},
            "fields": [{"id": "x", "type": "text", "label": "X", "rowIndex": 2, "colIndex": 0}],
        }
        form = hydrate_form(payload)
        assert len(form.layout.rows) == 3
