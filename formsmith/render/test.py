"""Tests for the dual-mode renderer."""

import json

import pytest

from formsmith.schema import (
    ColumnWidth,
    FieldKind,
    FieldOption,
    FieldSchema,
    FormSchema,
    create_default_field,
)

from .lib import (
    WIDGET_BUILDERS,
    RenderMode,
    WidgetType,
    format_presentation,
    render,
    render_field,
    render_kind_preview,
)


class TestDispatchTable:
    """One builder per kind."""

    @pytest.mark.unit
    def test_every_kind_has_a_builder(self):
        assert set(WIDGET_BUILDERS) == set(FieldKind)

    @pytest.mark.unit
    @pytest.mark.parametrize("kind", list(FieldKind))
    def test_every_kind_renders_in_both_modes(self, kind):
        item = create_default_field(kind)
        for mode in RenderMode:
            node = render_field(item, mode)
            assert node.field_id == item.id
            assert node.kind == kind


class TestEditMode:
    """Authoring preview."""

    @pytest.mark.unit
    def test_uses_real_data_and_disables(self, contact_form):
        presentation = render(contact_form, RenderMode.EDIT, answers={"name": "ignored"})
        assert presentation.submit is None
        assert all(node.disabled and not node.interactive for node in presentation.widgets)
        topic = presentation.widget_for("topic")
        assert [o.label for o in topic.options] == ["Sales", "Support"]
        assert presentation.widget_for("name").value is None

    @pytest.mark.unit
    def test_edit_shows_default_value(self):
        item = FieldSchema(kind=FieldKind.TEXT, label="City", default_value="Oslo")
        assert render_field(item, RenderMode.EDIT).value == "Oslo"

    @pytest.mark.unit
    def test_kind_preview_uses_literal_options(self):
        node = render_kind_preview(FieldKind.CHECKBOX)
        assert node.disabled
        assert [(o.label, o.value) for o in node.options] == [
            ("Option 1", "option1"),
            ("Option 2", "option2"),
            ("Option 3", "option3"),
        ]
        assert node.field_id == "preview-checkbox"


class TestFillMode:
    """Public form rendering."""

    @pytest.mark.unit
    def test_binds_answers_and_errors(self, contact_form):
        presentation = render(
            contact_form,
            "fill",
            answers={"name": "Ann"},
            errors={"email": "Email is required"},
        )
        name = presentation.widget_for("name")
        assert name.interactive and not name.disabled
        assert name.value == "Ann"
        assert presentation.widget_for("email").error == "Email is required"
        assert presentation.widget_for("email").input_type == "email"

    @pytest.mark.unit
    def test_submit_disabled_until_required_filled(self, contact_form):
        assert render(contact_form, "fill", answers={"name": "Ann"}).submit.disabled
        ready = render(contact_form, "fill", answers={"name": "Ann", "email": "a@x"})
        assert not ready.submit.disabled
        assert ready.submit.label == "Submit"

    @pytest.mark.unit
    def test_submit_disabled_while_submitting(self, contact_form):
        presentation = render(
            contact_form, "fill", answers={"name": "Ann", "email": "a@x"}, submitting=True
        )
        assert presentation.submit.disabled
        assert presentation.submit.pending
        assert presentation.submit.label == "Submitting..."

    @pytest.mark.unit
    def test_custom_submit_label(self, contact_form):
        contact_form.settings["submitButtonText"] = "Send"
        assert render(contact_form, "fill").submit.label == "Send"

    @pytest.mark.unit
    def test_static_kinds_are_content(self):
        form = FormSchema(
            fields=[
                create_default_field(FieldKind.HEADING, "h"),
                create_default_field(FieldKind.DIVIDER, "d"),
            ]
        )
        presentation = render(form, "fill", answers={"h": "x"})
        heading = presentation.widget_for("h")
        assert heading.widget == WidgetType.HEADING
        assert heading.heading_level == "h2"
        assert heading.value is None
        assert not heading.interactive
        assert presentation.widget_for("d").label is None

    @pytest.mark.unit
    def test_full_field_image_is_image_only(self):
        item = create_default_field(FieldKind.IMAGE, "img")
        item.image_full_field = True
        item.help_text = "hidden"
        node = render_field(item, "fill")
        assert node.label is None and node.help_text is None
        assert node.image.full_field
        assert node.image.width is None

    @pytest.mark.unit
    def test_inline_image_keeps_geometry(self):
        item = FieldSchema(
            kind=FieldKind.TEXT,
            label="Name",
            image_url="http://x/y.png",
            image_width=120,
        )
        node = render_field(item, "fill")
        assert node.label == "Name"
        assert node.image.width == 120
        assert node.image.alt == "Name"
        assert node.image.alignment == "center"

    @pytest.mark.unit
    def test_number_bounds_exposed(self):
        node = render_field(create_default_field(FieldKind.NUMBER), "fill")
        assert node.attributes == {"min": 0, "max": 100}


class TestOrderingAndWidth:
    """Display order and column widths."""

    @pytest.mark.unit
    def test_flow_order_and_width(self):
        form = FormSchema(
            fields=[
                FieldSchema(id="b", kind=FieldKind.TEXT, label="B", column_width=ColumnWidth.HALF),
                FieldSchema(id="a", kind=FieldKind.TEXT, label="A"),
            ]
        )
        presentation = render(form, "edit")
        assert [n.field_id for n in presentation.widgets] == ["b", "a"]
        assert presentation.widgets[0].width == pytest.approx(0.5)
        assert presentation.widgets[1].width == 1.0

    @pytest.mark.unit
    def test_grid_order_and_width(self, grid_form):
        grid_form.fields.reverse()
        presentation = render(grid_form, "fill")
        assert [n.field_id for n in presentation.widgets] == ["A", "B", "C"]
        assert presentation.widgets[0].width == pytest.approx(0.5)
        assert presentation.widgets[2].width == 1.0
        assert tuple(presentation.widgets[1].cell) == (0, 1)


class TestTextOutput:
    """Human-readable tree."""

    @pytest.mark.unit
    def test_format_presentation(self, contact_form):
        presentation = render(
            contact_form, "fill", answers={"name": "Ann"}, errors={"email": "Email is required"}
        )
        text = format_presentation(presentation)
        lines = text.splitlines()
        assert lines[0] == "Contact [fill]"
        assert lines[1] == "├── Name [text_input, required] = 'Ann'"
        assert lines[2] == "├── Email [text_input:email, required]  ! Email is required"
        assert lines[3] == "├── Topic [select] {Sales | Support}"
        assert lines[4] == "└── [Submit] (disabled)"

    @pytest.mark.unit
    def test_to_dict_is_json_ready(self, grid_form):
        grid_form.fields.append(
            FieldSchema(
                id="s",
                kind=FieldKind.SELECT,
                label="S",
                options=[FieldOption(label="x", value="x")],
                row_index=1,
                col_index=0,
            )
        )
        data = render(grid_form, "edit").to_dict()
        encoded = json.loads(json.dumps(data))
        assert encoded["mode"] == "edit"
        assert encoded["widgets"][0]["cell"] == [0, 0]
