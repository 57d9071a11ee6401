"""Dual-mode form renderer.

``render()`` interprets a FormSchema into a ``FormPresentation``: a flat,
ordered list of ``WidgetNode`` values plus the submit control. The same
per-kind builders serve both modes; the mode only decides interactivity and
value binding:

- ``edit``: real labels, placeholders and options, every widget disabled,
  values show the field's default.
- ``fill``: widgets are bound to the answer map and carry their validation
  error; static kinds render as content only.

Example:
    >>> presentation = render(form, RenderMode.FILL, answers={"name": "Ann"})
    >>> print(format_presentation(presentation))
    Contact [fill]
    ├── Name [text_input, required] = 'Ann'
    ...
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping

from ..layout import Cell, cell_fraction, cell_of, grid_order
from ..schema import (
    FieldKind,
    FieldOption,
    FieldSchema,
    FormSchema,
    create_default_field,
    get_kind_meta,
)
from ..validation import missing_required

logger = logging.getLogger(__name__)


# =============================================================================
# Presentation Types
# =============================================================================


class RenderMode(str, Enum):
    """Renderer mode."""

    EDIT = "edit"
    FILL = "fill"


class WidgetType(str, Enum):
    """Concrete widget produced for a field."""

    TEXT_INPUT = "text_input"
    TEXTAREA = "textarea"
    NUMBER_INPUT = "number_input"
    RANGE_SLIDER = "range_slider"
    COLOR_PICKER = "color_picker"
    SELECT = "select"
    CHECKBOX_GROUP = "checkbox_group"
    RADIO_GROUP = "radio_group"
    DATE_PICKER = "date_picker"
    TIME_PICKER = "time_picker"
    FILE_UPLOAD = "file_upload"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    DIVIDER = "divider"
    IMAGE = "image"


@dataclass
class ImagePresentation:
    """Resolved image attributes.

    Full-field images carry no geometry or styling: they fill the field.
    """

    url: str
    alt: str
    caption: str | None = None
    full_field: bool = False
    width: int | None = None
    height: int | None = None
    alignment: str | None = None
    border: bool = False
    border_radius: int | None = None
    position: str | None = None
    size: str | None = None


@dataclass
class WidgetNode:
    """One rendered field.

    Attributes:
        field_id: Id of the source field.
        kind: Source field kind.
        widget: Widget chosen for the kind.
        label: Visible label, or None for image-only rendering.
        interactive: Whether the widget accepts input in this mode.
        disabled: Whether the widget is inert.
        value: Bound answer (fill) or default value (edit).
        error: Validation message shown next to the widget.
        width: Fraction of the available row width.
    """

    field_id: str
    kind: FieldKind
    widget: WidgetType
    label: str | None = None
    input_type: str | None = None
    placeholder: str | None = None
    help_text: str | None = None
    required: bool = False
    interactive: bool = False
    disabled: bool = True
    value: Any = None
    error: str | None = None
    options: list[FieldOption] = field(default_factory=list)
    attributes: dict[str, Any] = field(default_factory=dict)
    image: ImagePresentation | None = None
    heading_level: str | None = None
    width: float = 1.0
    cell: Cell | None = None


@dataclass
class SubmitControl:
    label: str
    disabled: bool
    pending: bool = False


@dataclass
class FormPresentation:
    """Rendered form."""

    title: str
    description: str | None
    mode: RenderMode
    widgets: list[WidgetNode] = field(default_factory=list)
    submit: SubmitControl | None = None

    def widget_for(self, field_id: str) -> WidgetNode | None:
        for widget in self.widgets:
            if widget.field_id == field_id:
                return widget
        return None

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible form of the presentation."""
        data = asdict(self)
        for widget, node in zip(data["widgets"], self.widgets):
            widget["options"] = [option.model_dump() for option in node.options]
            widget["cell"] = list(node.cell) if node.cell is not None else None
        return data


# =============================================================================
# Per-kind Builders
# =============================================================================


@dataclass
class _RenderContext:
    mode: RenderMode
    answers: Mapping[str, Any]
    errors: Mapping[str, str]

    @property
    def filling(self) -> bool:
        return self.mode == RenderMode.FILL


def _image_of(item: FieldSchema) -> ImagePresentation | None:
    if not item.image_url:
        return None
    alt = item.image_alt or item.label or "Field image"
    if item.image_full_field:
        return ImagePresentation(
            url=item.image_url, alt=alt, caption=item.image_caption, full_field=True
        )
    return ImagePresentation(
        url=item.image_url,
        alt=alt,
        caption=item.image_caption,
        width=item.image_width,
        height=item.image_height,
        alignment=(item.image_alignment.value if item.image_alignment else "center"),
        border=bool(item.image_border),
        border_radius=item.image_border_radius,
        position=item.image_position.value if item.image_position else None,
        size=item.image_size.value if item.image_size else None,
    )


def _input_node(
    item: FieldSchema,
    ctx: _RenderContext,
    widget: WidgetType,
    input_type: str | None = None,
    placeholder: str | None = None,
    **extra: Any,
) -> WidgetNode:
    value = ctx.answers.get(item.id) if ctx.filling else item.default_value
    return WidgetNode(
        field_id=item.id,
        kind=item.kind,
        widget=widget,
        label=item.label,
        input_type=input_type,
        placeholder=item.placeholder or placeholder,
        help_text=item.help_text,
        required=item.required,
        interactive=ctx.filling,
        disabled=not ctx.filling,
        value=value,
        error=ctx.errors.get(item.id) if ctx.filling else None,
        image=_image_of(item),
        **extra,
    )


def _text_like(input_type: str, placeholder: str | None = None):
    def build(item: FieldSchema, ctx: _RenderContext) -> WidgetNode:
        return _input_node(item, ctx, WidgetType.TEXT_INPUT, input_type, placeholder)

    return build


def _textarea(item: FieldSchema, ctx: _RenderContext) -> WidgetNode:
    return _input_node(item, ctx, WidgetType.TEXTAREA, attributes={"rows": 4})


def _bounds(item: FieldSchema) -> dict[str, Any]:
    rules = item.validation
    if rules is None:
        return {}
    return {
        key: value
        for key, value in (("min", rules.min), ("max", rules.max), ("step", rules.step))
        if value is not None
    }


def _number(item: FieldSchema, ctx: _RenderContext) -> WidgetNode:
    return _input_node(
        item, ctx, WidgetType.NUMBER_INPUT, "number", attributes=_bounds(item)
    )


def _range(item: FieldSchema, ctx: _RenderContext) -> WidgetNode:
    attributes = {"min": 0, "max": 100, **_bounds(item)}
    return _input_node(item, ctx, WidgetType.RANGE_SLIDER, "range", attributes=attributes)


def _color(item: FieldSchema, ctx: _RenderContext) -> WidgetNode:
    return _input_node(item, ctx, WidgetType.COLOR_PICKER, "color")


def _choice(widget: WidgetType, placeholder: str | None = None):
    def build(item: FieldSchema, ctx: _RenderContext) -> WidgetNode:
        options = [option.model_copy() for option in item.options or []]
        return _input_node(item, ctx, widget, None, placeholder, options=options)

    return build


def _date(item: FieldSchema, ctx: _RenderContext) -> WidgetNode:
    return _input_node(item, ctx, WidgetType.DATE_PICKER, "date")


def _time(item: FieldSchema, ctx: _RenderContext) -> WidgetNode:
    return _input_node(item, ctx, WidgetType.TIME_PICKER, "time")


def _file(item: FieldSchema, ctx: _RenderContext) -> WidgetNode:
    return _input_node(
        item, ctx, WidgetType.FILE_UPLOAD, "file", attributes={"button": "Click to Upload"}
    )


def _static_node(item: FieldSchema, widget: WidgetType, **extra: Any) -> WidgetNode:
    return WidgetNode(
        field_id=item.id,
        kind=item.kind,
        widget=widget,
        interactive=False,
        disabled=True,
        **extra,
    )


def _heading(item: FieldSchema, ctx: _RenderContext) -> WidgetNode:
    level = item.heading_level.value if item.heading_level else "h2"
    return _static_node(item, WidgetType.HEADING, label=item.label, heading_level=level)


def _paragraph(item: FieldSchema, ctx: _RenderContext) -> WidgetNode:
    return _static_node(item, WidgetType.PARAGRAPH, label=item.label)


def _divider(item: FieldSchema, ctx: _RenderContext) -> WidgetNode:
    return _static_node(item, WidgetType.DIVIDER)


def _image(item: FieldSchema, ctx: _RenderContext) -> WidgetNode:
    if item.is_full_field_image:
        return _static_node(item, WidgetType.IMAGE, image=_image_of(item))
    return _static_node(
        item,
        WidgetType.IMAGE,
        label=item.label,
        help_text=item.help_text,
        image=_image_of(item),
    )


Builder = Callable[[FieldSchema, _RenderContext], WidgetNode]

WIDGET_BUILDERS: dict[FieldKind, Builder] = {
    FieldKind.TEXT: _text_like("text"),
    FieldKind.EMAIL: _text_like("email", "Enter email"),
    FieldKind.PHONE: _text_like("tel", "Enter phone number"),
    FieldKind.URL: _text_like("url", "Enter URL"),
    FieldKind.PASSWORD: _text_like("password"),
    FieldKind.TEXTAREA: _textarea,
    FieldKind.NUMBER: _number,
    FieldKind.RANGE: _range,
    FieldKind.COLOR: _color,
    FieldKind.SELECT: _choice(WidgetType.SELECT, "Select an option"),
    FieldKind.CHECKBOX: _choice(WidgetType.CHECKBOX_GROUP),
    FieldKind.RADIO: _choice(WidgetType.RADIO_GROUP),
    FieldKind.DATE: _date,
    FieldKind.TIME: _time,
    FieldKind.FILE: _file,
    FieldKind.HEADING: _heading,
    FieldKind.PARAGRAPH: _paragraph,
    FieldKind.DIVIDER: _divider,
    FieldKind.IMAGE: _image,
}


# =============================================================================
# Rendering
# =============================================================================


def render_field(
    item: FieldSchema,
    mode: RenderMode | str = RenderMode.EDIT,
    answers: Mapping[str, Any] | None = None,
    errors: Mapping[str, str] | None = None,
) -> WidgetNode:
    """Render a single field without layout information."""
    ctx = _RenderContext(RenderMode(mode), answers or {}, errors or {})
    return WIDGET_BUILDERS[item.kind](item, ctx)


def render(
    form: FormSchema,
    mode: RenderMode | str,
    answers: Mapping[str, Any] | None = None,
    errors: Mapping[str, str] | None = None,
    submitting: bool = False,
) -> FormPresentation:
    """Render a form in ``edit`` or ``fill`` mode.

    Args:
        form: Schema to interpret.
        mode: Render mode.
        answers: Answer map bound in fill mode (ignored in edit mode).
        errors: Validation messages per field id (fill mode).
        submitting: Whether a submission is in flight.

    Returns:
        FormPresentation with widgets in display order.
    """
    ctx = _RenderContext(RenderMode(mode), answers or {}, errors or {})

    widgets: list[WidgetNode] = []
    if form.is_grid:
        for item in grid_order(form.fields):
            node = WIDGET_BUILDERS[item.kind](item, ctx)
            cell = cell_of(item)
            if cell is not None and form.layout.has_cell(*cell):
                node.cell = cell
                node.width = cell_fraction(form.layout, cell)
            else:
                logger.warning(f"Field {item.id} has no valid cell; rendering full width")
            widgets.append(node)
    else:
        for item in form.fields:
            node = WIDGET_BUILDERS[item.kind](item, ctx)
            if item.column_width is not None:
                node.width = item.column_width.fraction
            widgets.append(node)

    submit = None
    if ctx.filling:
        label = form.settings.get("submitButtonText") or "Submit"
        blocked = bool(missing_required(form, ctx.answers))
        submit = SubmitControl(
            label="Submitting..." if submitting else label,
            disabled=submitting or blocked,
            pending=submitting,
        )

    return FormPresentation(
        title=form.title,
        description=form.description,
        mode=ctx.mode,
        widgets=widgets,
        submit=submit,
    )


def render_kind_preview(kind: FieldKind | str) -> WidgetNode:
    """Illustrative edit-mode widget for the field type picker.

    Choice kinds always show the literal ``Option 1/2/3`` placeholders.
    """
    kind = FieldKind(kind)
    item = create_default_field(kind, field_id=f"preview-{kind.value}")
    node = render_field(item, RenderMode.EDIT)
    if get_kind_meta(kind).requires_options:
        node.options = [
            FieldOption(label=f"Option {n}", value=f"option{n}") for n in range(1, 4)
        ]
    return node


# =============================================================================
# Text Output
# =============================================================================


def _describe(node: WidgetNode) -> str:
    label = node.label if node.label is not None else node.field_id
    widget = node.widget.value
    if node.widget == WidgetType.TEXT_INPUT and node.input_type != "text":
        widget = f"{widget}:{node.input_type}"
    attrs = [widget]
    if node.heading_level:
        attrs.append(node.heading_level)
    if node.required:
        attrs.append("required")
    if node.width != 1.0:
        attrs.append(f"{round(node.width * 100)}%")
    if node.cell is not None:
        attrs.append(f"r{node.cell.row_index}c{node.cell.col_index}")
    if node.image is not None:
        attrs.append("full image" if node.image.full_field else "image")

    text = f"{label} [{', '.join(attrs)}]"
    if node.options:
        text += " {" + " | ".join(option.label for option in node.options) + "}"
    if node.value is not None:
        text += f" = {node.value!r}"
    if node.error:
        text += f"  ! {node.error}"
    return text


def format_presentation(presentation: FormPresentation) -> str:
    """Format a presentation as a human-readable tree.

    Example output:
        Contact [fill]
        ├── Name [text_input, required] = 'Ann'
        ├── Email [text_input:email, required]  ! Email is required
        ├── Topic [select] {Sales | Support}
        └── [Submit] (disabled)
    """
    lines = [f"{presentation.title} [{presentation.mode.value}]"]
    entries = [_describe(node) for node in presentation.widgets]
    if presentation.submit is not None:
        state = " (disabled)" if presentation.submit.disabled else ""
        entries.append(f"[{presentation.submit.label}]{state}")

    for i, entry in enumerate(entries):
        connector = "└── " if i == len(entries) - 1 else "├── "
        lines.append(f"{connector}{entry}")
    return "\n".join(lines)


__all__ = [
    # Types
    "RenderMode",
    "WidgetType",
    "ImagePresentation",
    "WidgetNode",
    "SubmitControl",
    "FormPresentation",
    # Dispatch
    "WIDGET_BUILDERS",
    # Rendering
    "render",
    "render_field",
    "render_kind_preview",
    # Output
    "format_presentation",
]
