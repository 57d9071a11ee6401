"""Unit tests for the schema module."""

import pytest

from formsmith.core.errors import FieldNotFoundError, InvalidSchemaError
from formsmith.schema import (
    KIND_REGISTRY,
    PARAGRAPH_DEFAULT_TEXT,
    PLACEHOLDER_IMAGE_URL,
    ColumnWidth,
    FieldKind,
    FieldSchema,
    FormSchema,
    GridTemplate,
    HeadingLevel,
    KindCategory,
    PlacementMode,
    Row,
    create_default_field,
    downgrade_form,
    export_json_schema,
    export_kind_enum_schema,
    get_kinds_by_category,
    is_choice_kind,
    load_form,
    normalize_options,
    resolve_kind_alias,
    upgrade_block,
)


class TestKindRegistry:
    """Registry completeness and lookups."""

    @pytest.mark.unit
    def test_every_kind_registered(self):
        """Every FieldKind has metadata."""
        for kind in FieldKind:
            assert kind in KIND_REGISTRY, f"Missing metadata for {kind}"
            assert KIND_REGISTRY[kind].kind == kind

    @pytest.mark.unit
    def test_choice_kinds(self):
        """Exactly select, checkbox and radio require options."""
        choices = set(get_kinds_by_category(KindCategory.CHOICE))
        assert choices == {FieldKind.SELECT, FieldKind.CHECKBOX, FieldKind.RADIO}
        assert all(is_choice_kind(kind) for kind in choices)

    @pytest.mark.unit
    def test_static_kinds_take_no_input(self):
        """Headings, paragraphs, dividers and images contribute no answer."""
        for kind in (
            FieldKind.HEADING,
            FieldKind.PARAGRAPH,
            FieldKind.DIVIDER,
            FieldKind.IMAGE,
        ):
            assert not KIND_REGISTRY[kind].accepts_input

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "alias,expected",
        [
            ("tel", FieldKind.PHONE),
            ("TEXT", FieldKind.TEXT),
            ("dropdown", FieldKind.SELECT),
            (" radio-group ", FieldKind.RADIO),
            ("spreadsheet", None),
        ],
    )
    def test_resolve_alias(self, alias, expected):
        """Aliases resolve case-insensitively."""
        assert resolve_kind_alias(alias) == expected

    @pytest.mark.unit
    def test_enum_schema_export(self):
        """Export maps every kind value to its description."""
        exported = export_kind_enum_schema()
        assert set(exported) == {kind.value for kind in FieldKind}


class TestDefaultFields:
    """Kind-specific defaults seeded by create_default_field."""

    @pytest.mark.unit
    def test_choice_defaults(self):
        """Choice kinds start with three options."""
        field = create_default_field(FieldKind.RADIO)
        assert field.label == "Radio Group"
        assert [(o.label, o.value) for o in field.options] == [
            ("Option 1", "option1"),
            ("Option 2", "option2"),
            ("Option 3", "option3"),
        ]

    @pytest.mark.unit
    def test_image_defaults(self):
        """Images get a placeholder picture and geometry."""
        field = create_default_field(FieldKind.IMAGE)
        assert field.image_url == PLACEHOLDER_IMAGE_URL
        assert (field.image_width, field.image_height) == (400, 200)
        assert field.image_full_field is False

    @pytest.mark.unit
    def test_heading_number_file_defaults(self):
        """Heading level, numeric bounds and upload hint."""
        assert create_default_field(FieldKind.HEADING).heading_level == HeadingLevel.H2
        number = create_default_field(FieldKind.NUMBER)
        assert (number.validation.min, number.validation.max) == (0, 100)
        upload = create_default_field(FieldKind.FILE)
        assert upload.help_text == "Upload files up to 10MB"

    @pytest.mark.unit
    def test_paragraph_label_is_body_text(self):
        """Paragraph blocks carry their text in the label."""
        assert create_default_field(FieldKind.PARAGRAPH).label == PARAGRAPH_DEFAULT_TEXT

    @pytest.mark.unit
    def test_every_kind_has_a_default(self):
        """Creating a default field never fails."""
        ids = {create_default_field(kind).id for kind in FieldKind}
        assert len(ids) == len(FieldKind)

    @pytest.mark.unit
    def test_explicit_id(self):
        """Callers may pin the id."""
        assert create_default_field(FieldKind.TEXT, field_id="name").id == "name"


class TestFieldSchema:
    """Parsing and serialization of a single field."""

    @pytest.mark.unit
    def test_camel_case_keys_and_type_alias(self):
        """Persisted keys are camelCase; kind is stored under 'type'."""
        field = FieldSchema(kind=FieldKind.TEXT, label="Name", help_text="Your name")
        dumped = field.model_dump(mode="json", by_alias=True, exclude_none=True)
        assert dumped["type"] == "text"
        assert dumped["helpText"] == "Your name"
        assert "kind" not in dumped

    @pytest.mark.unit
    def test_tel_alias_parses_as_phone(self):
        """Legacy 'tel' is accepted."""
        field = FieldSchema.model_validate({"type": "tel", "label": "Phone"})
        assert field.kind == FieldKind.PHONE

    @pytest.mark.unit
    def test_unknown_kind_rejected(self):
        """Unknown kinds fail validation."""
        with pytest.raises(ValueError):
            FieldSchema.model_validate({"type": "hologram", "label": "?"})

    @pytest.mark.unit
    def test_column_width(self):
        """Column widths expose their fraction; numeric 1 means full."""
        field = FieldSchema.model_validate(
            {"type": "text", "label": "a", "columnWidth": 1}
        )
        assert field.column_width == ColumnWidth.FULL
        assert ColumnWidth.TWO_THIRDS.fraction == pytest.approx(2 / 3)

    @pytest.mark.unit
    def test_negative_row_index_rejected(self):
        """Cell coordinates are non-negative."""
        with pytest.raises(ValueError):
            FieldSchema(kind=FieldKind.TEXT, label="a", row_index=-1)


class TestFormSchema:
    """Form-level model behavior."""

    @pytest.mark.unit
    def test_round_trip(self, contact_form):
        """Serializing then parsing preserves order, ids and attributes."""
        restored = FormSchema.from_json(contact_form.to_json())
        assert restored.field_ids == contact_form.field_ids
        for before, after in zip(contact_form.fields, restored.fields):
            assert after.model_dump() == before.model_dump()

    @pytest.mark.unit
    def test_round_trip_from_string(self, grid_form):
        """JSON text parses too."""
        restored = FormSchema.from_json(grid_form.to_json_string())
        assert restored.model_dump() == grid_form.model_dump()

    @pytest.mark.unit
    def test_duplicate_ids_rejected(self):
        """Field ids are unique within a form."""
        payload = {
            "title": "Dupes",
            "fields": [
                {"id": "a", "type": "text", "label": "A"},
                {"id": "a", "type": "email", "label": "B"},
            ],
        }
        with pytest.raises(InvalidSchemaError):
            FormSchema.from_json(payload)

    @pytest.mark.unit
    def test_grid_placement_gets_a_row(self):
        """A grid form always has a layout."""
        form = FormSchema(placement=PlacementMode.GRID)
        assert form.layout is not None
        assert len(form.layout.rows) == 1

    @pytest.mark.unit
    def test_get_field(self, contact_form):
        """Lookup by id raises for unknown ids."""
        assert contact_form.get_field("name").label == "Name"
        assert contact_form.index_of("topic") == 2
        with pytest.raises(FieldNotFoundError):
            contact_form.get_field("missing")

    @pytest.mark.unit
    def test_unknown_row_template_recovers(self):
        """Malformed template names fall back to a single column."""
        row = Row.model_validate({"template": "5-column"})
        assert row.template == GridTemplate.ONE_COLUMN
        assert Row(template=GridTemplate.TWO_ONE).cells == (2, 1)

    @pytest.mark.unit
    def test_json_schema_export(self):
        """The exported JSON Schema uses persisted key names."""
        schema = export_json_schema()
        assert "fields" in schema["properties"]
        assert "FieldSchema" in schema["$defs"]
        assert "helpText" in schema["$defs"]["FieldSchema"]["properties"]


class TestLegacyAdapter:
    """Older persisted shapes upgrade to the rich model."""

    @pytest.mark.unit
    def test_bare_string_options(self):
        """Strings become label/value pairs."""
        assert normalize_options(["Sales", {"label": "Help", "value": "support"}]) == [
            {"label": "Sales", "value": "Sales"},
            {"label": "Help", "value": "support"},
        ]

    @pytest.mark.unit
    def test_options_must_be_a_list(self):
        """A scalar options value cannot be interpreted."""
        with pytest.raises(InvalidSchemaError):
            normalize_options("Sales")

    @pytest.mark.unit
    def test_upgrade_block_moves_keys(self):
        """Renamed keys and top-level limits move to their new homes."""
        block = upgrade_block(
            {
                "id": "img",
                "type": "image",
                "imageSrc": "http://x/y.png",
                "description": "caption",
                "min": 1,
                "maxLength": 20,
            }
        )
        assert block["imageUrl"] == "http://x/y.png"
        assert block["helpText"] == "caption"
        assert block["validation"] == {"min": 1, "maxLength": 20}

    @pytest.mark.unit
    def test_load_block_list(self):
        """A bare list of blocks becomes the fields of a form."""
        form = load_form(
            [{"id": "t", "type": "select", "label": "Topic", "options": ["A", "B"]}],
            title="Legacy",
        )
        assert form.title == "Legacy"
        assert form.fields[0].option_values() == ["A", "B"]

    @pytest.mark.unit
    def test_load_element_map(self):
        """Builder element maps are ordered by y and containers flattened."""
        state = {
            "formTitle": "Survey",
            "elements": {
                "b": {"id": "b", "type": "email", "label": "Email", "y": 40},
                "col": {
                    "id": "col",
                    "type": "column",
                    "label": "Column",
                    "y": 80,
                    "columnWidth": "1/2",
                    "children": ["c", "ghost"],
                },
                "c": {"id": "c", "type": "text", "label": "City", "parentId": "col"},
                "a": {"id": "a", "type": "text", "label": "Name", "y": 0},
            },
        }
        form = load_form(state)
        assert form.title == "Survey"
        assert form.field_ids == ["a", "b", "c"]
        assert form.get_field("c").column_width == ColumnWidth.HALF

    @pytest.mark.unit
    def test_load_rejects_scalars(self):
        """Only mappings and lists are forms."""
        with pytest.raises(InvalidSchemaError):
            load_form(42)

    @pytest.mark.unit
    def test_load_seeds_empty_choice_options(self):
        """A stored choice field with no options gets the defaults."""
        form = load_form(
            {
                "title": "Poll",
                "fields": [{"id": "p", "type": "radio", "label": "Pick", "options": []}],
            }
        )
        assert form.get_field("p").option_values() == ["option1", "option2", "option3"]

    @pytest.mark.unit
    def test_downgrade_uses_labels(self, contact_form):
        """Downgrading writes options as bare labels."""
        blocks = downgrade_form(contact_form)
        assert blocks[2]["options"] == ["Sales", "Support"]
        assert load_form(blocks).fields[2].option_values() == ["Sales", "Support"]
