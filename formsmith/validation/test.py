"""Tests for answer and schema validation."""

import pytest

from formsmith.schema import (
    FieldKind,
    FieldSchema,
    FieldValidation,
    FormSchema,
    GridLayout,
    PlacementMode,
    Row,
    create_default_field,
)

from .lib import (
    is_empty_value,
    is_valid_schema,
    missing_required,
    validate_answers,
    validate_field,
    validate_form_schema,
)


def _text(pattern=None, **rules):
    return FieldSchema(
        id="t",
        kind=FieldKind.TEXT,
        label="Code",
        validation=FieldValidation(pattern=pattern, **rules),
    )


class TestEmptiness:
    """What counts as no answer."""

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [None, "", []])
    def test_empty(self, value):
        assert is_empty_value(value)

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [0, False, " ", ["a"]])
    def test_not_empty(self, value):
        assert not is_empty_value(value)


class TestRequired:
    """Rule 1 and 2: required and optional empties."""

    @pytest.mark.unit
    def test_required_empty_string(self):
        """One required text field answered '' yields exactly one error."""
        form = FormSchema(
            title="One",
            fields=[FieldSchema(id="q", kind=FieldKind.TEXT, label="Question", required=True)],
        )
        result = validate_answers(form, {"q": ""})
        assert result.valid is False
        assert result.errors == {"q": "Question is required"}

    @pytest.mark.unit
    def test_custom_message_wins(self):
        """customMessage replaces the built-in text."""
        item = FieldSchema(
            kind=FieldKind.CHECKBOX,
            label="Terms",
            required=True,
            validation=FieldValidation(custom_message="Please accept"),
        )
        assert validate_field(item, []) == "Please accept"

    @pytest.mark.unit
    def test_optional_empty_skips_rules(self):
        """Rules are not evaluated for empty optional answers."""
        assert validate_field(_text(pattern="^x$", min_length=3), "") is None


class TestNumbers:
    """Rule 3: numeric coercion and bounds."""

    def _number(self, **rules):
        return FieldSchema(
            kind=FieldKind.NUMBER, label="Age", validation=FieldValidation(**rules)
        )

    @pytest.mark.unit
    def test_bounds(self):
        item = self._number(min=18, max=99)
        assert validate_field(item, 17) == "Value must be at least 18"
        assert validate_field(item, "100") == "Value must be at most 99"
        assert validate_field(item, "42") is None

    @pytest.mark.unit
    def test_fractional_bound_formatting(self):
        """Integral floats print without a trailing .0."""
        assert validate_field(self._number(min=0.0), -1) == "Value must be at least 0"
        assert validate_field(self._number(max=2.5), 3) == "Value must be at most 2.5"

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["abc", "nan", True])
    def test_not_a_number(self, value):
        assert validate_field(self._number(), value) == "Please enter a valid number"

    @pytest.mark.unit
    def test_custom_message_on_bound(self):
        item = self._number(min=1, custom_message="Too small")
        assert validate_field(item, 0) == "Too small"


class TestText:
    """Rules 4 and 5: lengths and patterns."""

    @pytest.mark.unit
    def test_lengths(self):
        item = _text(min_length=2, max_length=4)
        assert validate_field(item, "a") == "Must be at least 2 characters"
        assert validate_field(item, "abcde") == "Must be at most 4 characters"
        assert validate_field(item, "abc") is None

    @pytest.mark.unit
    def test_pattern(self):
        """Digits-only pattern rejects letters and accepts digits."""
        item = _text(pattern="^[0-9]+$")
        assert validate_field(item, "abc") == "Please enter a valid value"
        assert validate_field(item, "123") is None

    @pytest.mark.unit
    def test_pattern_uses_search(self):
        """Unanchored patterns match anywhere, like RegExp.test."""
        assert validate_field(_text(pattern="[0-9]"), "abc1") is None

    @pytest.mark.unit
    def test_pattern_ignored_for_textarea(self):
        item = FieldSchema(
            kind=FieldKind.TEXTAREA, label="Bio", validation=FieldValidation(pattern="^x$")
        )
        assert validate_field(item, "anything") is None

    @pytest.mark.unit
    def test_invalid_pattern_does_not_crash(self):
        assert validate_field(_text(pattern="("), "abc") is None


class TestContactScenario:
    """End-to-end answers for the contact form."""

    @pytest.mark.unit
    def test_complete_answers(self, contact_form):
        result = validate_answers(contact_form, {"name": "Ann", "email": "ann@x.com"})
        assert result.valid is True
        assert result.errors == {}

    @pytest.mark.unit
    def test_missing_name(self, contact_form):
        result = validate_answers(contact_form, {"email": "ann@x.com"})
        assert result.valid is False
        assert result.errors == {"name": "Name is required"}
        assert result.to_dict()["errors"] == {"name": "Name is required"}

    @pytest.mark.unit
    def test_missing_required(self, contact_form):
        assert missing_required(contact_form, {"email": "a"}) == ["name"]

    @pytest.mark.unit
    def test_static_fields_skipped(self):
        heading = create_default_field(FieldKind.HEADING)
        heading.required = True
        form = FormSchema(fields=[heading])
        assert validate_answers(form, {}).valid
        assert missing_required(form, {}) == []


class TestSchemaValidation:
    """Structural issues."""

    @pytest.mark.unit
    def test_clean_form(self, contact_form, grid_form):
        assert is_valid_schema(contact_form)
        assert is_valid_schema(grid_form)

    @pytest.mark.unit
    def test_field_issues(self):
        bad_choice = FieldSchema(id="s", kind=FieldKind.SELECT, label="Pick", options=[])
        bad_rules = FieldSchema(
            id="n",
            kind=FieldKind.TEXT,
            label="N",
            validation=FieldValidation(pattern="(", min_length=5, max_length=1),
        )
        form = FormSchema(title="  ", fields=[bad_choice, bad_rules])
        kinds = {(issue.field_id, issue.issue_type) for issue in validate_form_schema(form)}
        assert kinds == {
            (None, "empty_title"),
            ("s", "missing_options"),
            ("n", "invalid_pattern"),
            ("n", "invalid_range"),
        }

    @pytest.mark.unit
    def test_duplicate_ids_after_mutation(self, contact_form):
        """Lists mutated in place bypass model validation but are still caught."""
        contact_form.fields.append(contact_form.fields[0].model_copy())
        types = [issue.issue_type for issue in validate_form_schema(contact_form)]
        assert "duplicate_id" in types

    @pytest.mark.unit
    def test_grid_issues(self):
        form = FormSchema(
            title="Grid",
            placement=PlacementMode.GRID,
            layout=GridLayout(rows=[Row()]),
            fields=[
                FieldSchema(id="a", kind=FieldKind.TEXT, label="a", row_index=0, col_index=0),
                FieldSchema(id="b", kind=FieldKind.TEXT, label="b", row_index=0, col_index=0),
                FieldSchema(id="c", kind=FieldKind.TEXT, label="c", row_index=3, col_index=0),
                FieldSchema(id="d", kind=FieldKind.TEXT, label="d"),
            ],
        )
        kinds = {(issue.field_id, issue.issue_type) for issue in validate_form_schema(form)}
        assert kinds == {
            ("b", "cell_collision"),
            ("c", "dangling_cell"),
            ("d", "unplaced_field"),
        }

    @pytest.mark.unit
    def test_flow_with_coordinates(self):
        form = FormSchema(
            fields=[FieldSchema(id="a", kind=FieldKind.TEXT, label="a", row_index=0)]
        )
        assert [i.issue_type for i in validate_form_schema(form)] == ["mixed_placement"]
