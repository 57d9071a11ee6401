"""Form schema module: field kinds, field and form models, legacy adapter.

Example:
    >>> from formsmith.schema import FieldKind, FormSchema, create_default_field
    >>> form = FormSchema(title="Contact", fields=[create_default_field(FieldKind.TEXT)])
    >>> FormSchema.from_json(form.to_json()) == form
    True
"""

from .legacy import (
    downgrade_block,
    downgrade_form,
    load_form,
    normalize_options,
    upgrade_block,
    upgrade_elements,
)
from .lib import (
    DEFAULT_TEMPLATE,
    KIND_REGISTRY,
    PARAGRAPH_DEFAULT_TEXT,
    TEMPLATE_CELLS,
    ColumnWidth,
    FieldKind,
    GridTemplate,
    HeadingLevel,
    ImageAlignment,
    ImagePosition,
    ImageSize,
    KindCategory,
    KindMeta,
    PlacementMode,
    accepts_input,
    export_kind_enum_schema,
    get_kind_category,
    get_kind_meta,
    get_kinds_by_category,
    is_choice_kind,
    resolve_kind_alias,
    template_cells,
)
from .models import (
    PLACEHOLDER_IMAGE_URL,
    FieldOption,
    FieldSchema,
    FieldValidation,
    FormSchema,
    GridLayout,
    Row,
    create_default_field,
    default_options,
    export_json_schema,
    new_field_id,
)

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
    # Models
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
    # Legacy shapes
    "normalize_options",
    "upgrade_block",
    "upgrade_elements",
    "load_form",
    "downgrade_block",
    "downgrade_form",
]
