"""Dual-mode renderer: edit-time previews and fill-time widgets."""

from .lib import (
    WIDGET_BUILDERS,
    FormPresentation,
    ImagePresentation,
    RenderMode,
    SubmitControl,
    WidgetNode,
    WidgetType,
    format_presentation,
    render,
    render_field,
    render_kind_preview,
)

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
