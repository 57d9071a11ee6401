"""Schema builder: pure mutation operations over FormSchema."""

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
    set_description,
    set_placement,
    set_title,
    update_field,
    update_option,
    update_settings,
)

__all__ = [
    # Form lifecycle
    "new_form",
    "hydrate_form",
    # Fields
    "append_field",
    "update_field",
    "remove_field",
    "move_field",
    "move_field_up",
    "move_field_down",
    "reorder_fields",
    # Metadata
    "set_title",
    "set_description",
    "update_settings",
    "set_placement",
    # Options
    "add_option",
    "remove_option",
    "move_option",
    "update_option",
    # Grid
    "add_row",
    "delete_row",
    "change_row_template",
    "drop_field",
]
