"""Pydantic models for field and form schemas.

Python attributes are snake_case; the persisted JSON uses camelCase keys and
serializes a field's ``kind`` under ``type``. Both spellings are accepted
when parsing.
"""

import json
import logging
import uuid
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from ..core.errors import FieldNotFoundError, InvalidSchemaError
from .lib import (
    DEFAULT_TEMPLATE,
    ColumnWidth,
    FieldKind,
    GridTemplate,
    HeadingLevel,
    ImageAlignment,
    ImagePosition,
    ImageSize,
    PlacementMode,
    get_kind_meta,
    resolve_kind_alias,
    template_cells,
)

logger = logging.getLogger(__name__)

_MODEL_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
)

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/400x200?text=Example+Image"


def new_field_id() -> str:
    """Generate an opaque field identifier."""
    return f"field-{uuid.uuid4().hex[:12]}"


# =============================================================================
# Field Building Blocks
# =============================================================================


class FieldOption(BaseModel):
    """One selectable choice of a select, checkbox or radio field."""

    model_config = _MODEL_CONFIG

    label: str
    value: str

    @field_validator("value", mode="before")
    @classmethod
    def _stringify_value(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class FieldValidation(BaseModel):
    """Declarative validation rules attached to a field."""

    model_config = _MODEL_CONFIG

    min: int | float | None = Field(default=None, description="Numeric minimum")
    max: int | float | None = Field(default=None, description="Numeric maximum")
    step: int | float | None = Field(default=None, gt=0)
    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=0)
    pattern: str | None = Field(
        default=None, description="Regular expression, matched with search semantics"
    )
    custom_message: str | None = Field(
        default=None, description="Replaces every built-in error message"
    )

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


class FieldSchema(BaseModel):
    """Configuration of a single form field block."""

    model_config = _MODEL_CONFIG

    id: str = Field(default_factory=new_field_id, min_length=1)
    kind: FieldKind = Field(..., alias="type")
    label: str = ""

    # Input presentation
    placeholder: str | None = None
    help_text: str | None = None
    default_value: Any = None
    required: bool = False

    options: list[FieldOption] | None = None
    validation: FieldValidation | None = None

    # Image attributes (image kind, or an inline illustration on any field)
    image_url: str | None = None
    image_width: int | None = Field(default=None, gt=0)
    image_height: int | None = Field(default=None, gt=0)
    image_alt: str | None = None
    image_caption: str | None = None
    image_alignment: ImageAlignment | None = None
    image_border: bool | None = None
    image_border_radius: int | None = Field(default=None, ge=0)
    image_full_field: bool | None = None
    image_position: ImagePosition | None = None
    image_size: ImageSize | None = None

    heading_level: HeadingLevel | None = None

    # Placement
    row_index: int | None = Field(default=None, ge=0)
    col_index: int | None = Field(default=None, ge=0)
    column_width: ColumnWidth | None = None

    @field_validator("kind", mode="before")
    @classmethod
    def _resolve_kind(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, FieldKind):
            resolved = resolve_kind_alias(value)
            if resolved is None:
                raise ValueError(f"Unknown field kind: {value}")
            return resolved
        return value

    @field_validator("column_width", mode="before")
    @classmethod
    def _coerce_column_width(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if value == 1:
                return ColumnWidth.FULL
            raise ValueError(f"Unsupported column width: {value}")
        return value

    @property
    def is_choice(self) -> bool:
        return get_kind_meta(self.kind).requires_options

    @property
    def accepts_input(self) -> bool:
        return get_kind_meta(self.kind).accepts_input

    @property
    def is_full_field_image(self) -> bool:
        return self.kind == FieldKind.IMAGE and bool(self.image_full_field)

    def option_values(self) -> list[str]:
        return [option.value for option in self.options or []]


# =============================================================================
# Grid Layout
# =============================================================================


class Row(BaseModel):
    """One grid row; its template fixes the number and width of cells."""

    model_config = _MODEL_CONFIG

    template: GridTemplate = DEFAULT_TEMPLATE

    @field_validator("template", mode="before")
    @classmethod
    def _recover_template(cls, value: Any) -> Any:
        if value is None:
            return DEFAULT_TEMPLATE
        try:
            return GridTemplate(value)
        except ValueError:
            logger.warning(
                f"Unknown row template {value!r}, falling back to "
                f"{DEFAULT_TEMPLATE.value}"
            )
            return DEFAULT_TEMPLATE

    @property
    def cells(self) -> tuple[int, ...]:
        return template_cells(self.template)

    @property
    def cell_count(self) -> int:
        return len(self.cells)


class GridLayout(BaseModel):
    """Ordered rows of a grid-mode form."""

    model_config = _MODEL_CONFIG

    rows: list[Row] = Field(default_factory=list)

    def has_cell(self, row_index: int, col_index: int) -> bool:
        if not 0 <= row_index < len(self.rows):
            return False
        return 0 <= col_index < self.rows[row_index].cell_count


# =============================================================================
# Form Schema
# =============================================================================


class FormSchema(BaseModel):
    """A complete form: metadata, ordered fields and layout."""

    model_config = _MODEL_CONFIG

    title: str = "Untitled Form"
    description: str | None = None
    fields: list[FieldSchema] = Field(default_factory=list)
    settings: dict[str, Any] = Field(default_factory=dict)
    placement: PlacementMode = PlacementMode.FLOW
    layout: GridLayout | None = None

    @model_validator(mode="after")
    def _check_identity_and_layout(self) -> "FormSchema":
        seen: set[str] = set()
        for item in self.fields:
            if item.id in seen:
                raise ValueError(f"Duplicate field id: {item.id}")
            seen.add(item.id)
        if self.placement == PlacementMode.GRID and self.layout is None:
            self.layout = GridLayout(rows=[Row()])
        return self

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    @property
    def is_grid(self) -> bool:
        return self.placement == PlacementMode.GRID

    @property
    def field_ids(self) -> list[str]:
        return [item.id for item in self.fields]

    def find_field(self, field_id: str) -> FieldSchema | None:
        for item in self.fields:
            if item.id == field_id:
                return item
        return None

    def get_field(self, field_id: str) -> FieldSchema:
        """Return the field with ``field_id``.

        Raises:
            FieldNotFoundError: If no such field exists.
        """
        found = self.find_field(field_id)
        if found is None:
            raise FieldNotFoundError(field_id)
        return found

    def index_of(self, field_id: str) -> int:
        for index, item in enumerate(self.fields):
            if item.id == field_id:
                return index
        raise FieldNotFoundError(field_id)

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_json(self) -> dict[str, Any]:
        """Serialize to the persisted camelCase record."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json_string(self, indent: int | None = None) -> str:
        return json.dumps(self.to_json(), indent=indent)

    @classmethod
    def from_json(cls, payload: dict[str, Any] | str) -> "FormSchema":
        """Parse a persisted record.

        Raises:
            InvalidSchemaError: If the payload does not describe a valid form.
        """
        try:
            if isinstance(payload, str):
                return cls.model_validate_json(payload)
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise InvalidSchemaError(f"Invalid form schema: {exc}") from exc


# =============================================================================
# Factories
# =============================================================================


def default_options() -> list[FieldOption]:
    """The three options seeded into new choice fields."""
    return [
        FieldOption(label=f"Option {n}", value=f"option{n}") for n in range(1, 4)
    ]


def create_default_field(kind: FieldKind, field_id: str | None = None) -> FieldSchema:
    """Create a field of ``kind`` populated with its kind-specific defaults.

    Example:
        >>> create_default_field(FieldKind.SELECT).options[0].label
        'Option 1'
    """
    meta = get_kind_meta(kind)
    values: dict[str, Any] = {
        "id": field_id or new_field_id(),
        "kind": kind,
        "label": meta.default_label,
    }

    if meta.requires_options:
        values["options"] = default_options()
    elif kind == FieldKind.IMAGE:
        values.update(
            image_url=PLACEHOLDER_IMAGE_URL,
            image_width=400,
            image_height=200,
            image_full_field=False,
        )
    elif kind == FieldKind.HEADING:
        values["heading_level"] = HeadingLevel.H2
    elif kind == FieldKind.NUMBER:
        values["validation"] = FieldValidation(min=0, max=100)
    elif kind == FieldKind.FILE:
        values["help_text"] = "Upload files up to 10MB"

    return FieldSchema(**values)


def export_json_schema() -> dict[str, Any]:
    """Export the FormSchema JSON Schema (camelCase keys)."""
    return FormSchema.model_json_schema(by_alias=True)


__all__ = [
    "FieldOption",
    "FieldValidation",
    "FieldSchema",
    "Row",
    "GridLayout",
    "FormSchema",
    "PLACEHOLDER_IMAGE_URL",
    "new_field_id",
    "default_options",
    "create_default_field",
    "export_json_schema",
]
