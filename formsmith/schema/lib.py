"""Field kind registry: the single source of truth for per-kind behavior.

Every decision that depends on a field's kind (does it take input, does it
need options, which default label does it get, is it numeric) is answered by
``KIND_REGISTRY``. The builder, renderer and validation engine never switch
on raw kind strings.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# =============================================================================
# Enumerations
# =============================================================================


class FieldKind(str, Enum):
    """Closed set of field block kinds."""

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    EMAIL = "email"
    PHONE = "phone"
    URL = "url"
    PASSWORD = "password"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    DATE = "date"
    TIME = "time"
    FILE = "file"
    RANGE = "range"
    COLOR = "color"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    DIVIDER = "divider"
    IMAGE = "image"


class KindCategory(str, Enum):
    """High-level kind groupings."""

    INPUT = "input"
    CHOICE = "choice"
    STATIC = "static"
    MEDIA = "media"


class PlacementMode(str, Enum):
    """Layout strategy of a form.

    - FLOW: fields render in list order with fractional ``columnWidth``
    - GRID: fields sit in explicit ``(rowIndex, colIndex)`` cells
    """

    FLOW = "flow"
    GRID = "grid"


class ColumnWidth(str, Enum):
    """Flow-mode column widths."""

    FULL = "1"
    HALF = "1/2"
    THIRD = "1/3"
    TWO_THIRDS = "2/3"
    QUARTER = "1/4"
    THREE_QUARTERS = "3/4"

    @property
    def fraction(self) -> float:
        numerator, _, denominator = self.value.partition("/")
        return int(numerator) / int(denominator or 1)


class HeadingLevel(str, Enum):
    H1 = "h1"
    H2 = "h2"
    H3 = "h3"
    H4 = "h4"


class ImageAlignment(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class ImagePosition(str, Enum):
    LEFT = "left"
    RIGHT = "right"


class ImageSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class GridTemplate(str, Enum):
    """Named row templates; the name encodes relative cell widths."""

    ONE_COLUMN = "1-column"
    TWO_COLUMN = "2-column"
    THREE_COLUMN = "3-column"
    TWO_ONE = "2-1"
    ONE_TWO = "1-2"
    ONE_ONE_ONE = "1-1-1"
    TWO_ONE_ONE = "2-1-1"
    ONE_TWO_ONE = "1-2-1"
    ONE_ONE_TWO = "1-1-2"


# Relative cell widths per template
TEMPLATE_CELLS: dict[GridTemplate, tuple[int, ...]] = {
    GridTemplate.ONE_COLUMN: (1,),
    GridTemplate.TWO_COLUMN: (1, 1),
    GridTemplate.THREE_COLUMN: (1, 1, 1),
    GridTemplate.TWO_ONE: (2, 1),
    GridTemplate.ONE_TWO: (1, 2),
    GridTemplate.ONE_ONE_ONE: (1, 1, 1),
    GridTemplate.TWO_ONE_ONE: (2, 1, 1),
    GridTemplate.ONE_TWO_ONE: (1, 2, 1),
    GridTemplate.ONE_ONE_TWO: (1, 1, 2),
}

DEFAULT_TEMPLATE = GridTemplate.ONE_COLUMN


# =============================================================================
# Kind Metadata
# =============================================================================


@dataclass(frozen=True)
class KindMeta:
    """Metadata for one field kind.

    Attributes:
        kind: The kind described.
        category: Grouping used by the type picker and schema export.
        default_label: Label given to freshly created fields.
        description: Short human description.
        html_equivalent: Closest native HTML control.
        aliases: Alternative names accepted when parsing.
        accepts_input: Whether the kind contributes an answer.
        requires_options: Whether ``options`` must be non-empty.
        numeric: Whether min/max/step validation applies.
        text_like: Whether minLength/maxLength validation applies.
        multi_value: Whether the answer is a list.
    """

    kind: FieldKind
    category: KindCategory
    default_label: str
    description: str
    html_equivalent: str = "input"
    aliases: tuple[str, ...] = field(default_factory=tuple)
    accepts_input: bool = True
    requires_options: bool = False
    numeric: bool = False
    text_like: bool = False
    multi_value: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert metadata to dictionary for schema export."""
        return {
            "kind": self.kind.value,
            "category": self.category.value,
            "default_label": self.default_label,
            "description": self.description,
            "html_equivalent": self.html_equivalent,
            "aliases": list(self.aliases),
            "accepts_input": self.accepts_input,
            "requires_options": self.requires_options,
        }


def _input(kind: FieldKind, label: str, description: str, **extra: Any) -> KindMeta:
    return KindMeta(
        kind=kind,
        category=KindCategory.INPUT,
        default_label=label,
        description=description,
        **extra,
    )


def _choice(kind: FieldKind, label: str, description: str, **extra: Any) -> KindMeta:
    return KindMeta(
        kind=kind,
        category=KindCategory.CHOICE,
        default_label=label,
        description=description,
        requires_options=True,
        **extra,
    )


def _static(kind: FieldKind, label: str, description: str, html: str) -> KindMeta:
    return KindMeta(
        kind=kind,
        category=KindCategory.STATIC,
        default_label=label,
        description=description,
        html_equivalent=html,
        accepts_input=False,
    )


PARAGRAPH_DEFAULT_TEXT = (
    "This is a paragraph of text. You can use this to provide instructions "
    "or additional information."
)

KIND_REGISTRY: dict[FieldKind, KindMeta] = {
    # === INPUTS ===
    FieldKind.TEXT: _input(
        FieldKind.TEXT, "Text Field", "Single-line free text", text_like=True
    ),
    FieldKind.TEXTAREA: _input(
        FieldKind.TEXTAREA,
        "Text Area",
        "Multi-line free text",
        html_equivalent="textarea",
        text_like=True,
    ),
    FieldKind.NUMBER: _input(
        FieldKind.NUMBER, "Number", "Numeric entry with bounds", numeric=True
    ),
    FieldKind.EMAIL: _input(FieldKind.EMAIL, "Email", "Email address"),
    FieldKind.PHONE: _input(
        FieldKind.PHONE, "Phone", "Telephone number", aliases=("tel", "telephone")
    ),
    FieldKind.URL: _input(FieldKind.URL, "URL", "Web address", aliases=("link",)),
    FieldKind.PASSWORD: _input(FieldKind.PASSWORD, "Password", "Masked text"),
    FieldKind.DATE: _input(FieldKind.DATE, "Date", "Calendar date picker"),
    FieldKind.TIME: _input(FieldKind.TIME, "Time", "Time of day picker"),
    FieldKind.FILE: _input(
        FieldKind.FILE, "File Upload", "File attachment", multi_value=True
    ),
    FieldKind.RANGE: _input(
        FieldKind.RANGE, "Range", "Slider over a numeric range", numeric=True
    ),
    FieldKind.COLOR: _input(FieldKind.COLOR, "Color", "Color swatch picker"),
    # === CHOICES ===
    FieldKind.SELECT: _choice(
        FieldKind.SELECT,
        "Dropdown",
        "Single choice from a dropdown",
        html_equivalent="select",
        aliases=("dropdown",),
    ),
    FieldKind.CHECKBOX: _choice(
        FieldKind.CHECKBOX,
        "Checkbox Group",
        "Multiple choices as checkboxes",
        aliases=("checkbox-group", "checkboxes"),
        multi_value=True,
    ),
    FieldKind.RADIO: _choice(
        FieldKind.RADIO,
        "Radio Group",
        "Single choice as radio buttons",
        aliases=("radio-group",),
    ),
    # === STATIC CONTENT ===
    FieldKind.HEADING: _static(
        FieldKind.HEADING, "Section Heading", "Section title", "h2"
    ),
    FieldKind.PARAGRAPH: _static(
        FieldKind.PARAGRAPH, PARAGRAPH_DEFAULT_TEXT, "Explanatory text", "p"
    ),
    FieldKind.DIVIDER: _static(FieldKind.DIVIDER, "Divider", "Horizontal rule", "hr"),
    # === MEDIA ===
    FieldKind.IMAGE: KindMeta(
        kind=FieldKind.IMAGE,
        category=KindCategory.MEDIA,
        default_label="Image",
        description="Illustration, optionally full-bleed",
        html_equivalent="img",
        accepts_input=False,
    ),
}


# =============================================================================
# Registry Queries
# =============================================================================


def get_kind_meta(kind: FieldKind) -> KindMeta:
    """Get metadata for a kind.

    Raises:
        KeyError: If the kind is not registered.
    """
    return KIND_REGISTRY[kind]


def get_kind_category(kind: FieldKind) -> KindCategory:
    return KIND_REGISTRY[kind].category


def get_kinds_by_category(category: KindCategory) -> list[FieldKind]:
    """All kinds in a category, in registry order."""
    return [meta.kind for meta in KIND_REGISTRY.values() if meta.category == category]


def resolve_kind_alias(alias: str) -> FieldKind | None:
    """Resolve a kind name or alias (case-insensitive) to its canonical kind.

    Returns:
        The canonical FieldKind, or None if not found.
    """
    alias_lower = alias.lower().strip()

    for kind in FieldKind:
        if kind.value == alias_lower:
            return kind

    for meta in KIND_REGISTRY.values():
        if alias_lower in meta.aliases:
            return meta.kind

    return None


def is_choice_kind(kind: FieldKind) -> bool:
    return KIND_REGISTRY[kind].requires_options


def accepts_input(kind: FieldKind) -> bool:
    return KIND_REGISTRY[kind].accepts_input


def template_cells(template: GridTemplate) -> tuple[int, ...]:
    """Relative widths of the cells a template defines."""
    return TEMPLATE_CELLS[template]


def export_kind_enum_schema() -> dict[str, Any]:
    """Export kind values mapped to their descriptions."""
    return {kind.value: KIND_REGISTRY[kind].description for kind in FieldKind}


__all__ = [
    # Enumerations
    "FieldKind",
    "KindCategory",
    "PlacementMode",
    "ColumnWidth",
    "HeadingLevel",
    "ImageAlignment",
    "ImagePosition",
    "ImageSize",
    "GridTemplate",
    "TEMPLATE_CELLS",
    "DEFAULT_TEMPLATE",
    # Registry
    "KindMeta",
    "KIND_REGISTRY",
    "PARAGRAPH_DEFAULT_TEXT",
    "get_kind_meta",
    "get_kind_category",
    "get_kinds_by_category",
    "resolve_kind_alias",
    "is_choice_kind",
    "accepts_input",
    "template_cells",
    "export_kind_enum_schema",
]
