"""Root pytest configuration and fixtures.

This module provides:
- Environment setup (loads .env)
- Shared form fixtures (flow and grid placement)
- Storage fixtures backed by a temporary SQLite database
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Generator

import pytest
from dotenv import load_dotenv

if TYPE_CHECKING:
    from formsmith.schema import FormSchema
    from formsmith.storage import Actor, FormService

# Load environment variables from .env file
load_dotenv()


# =============================================================================
# Form Fixtures
# =============================================================================


@pytest.fixture
def contact_form() -> FormSchema:
    """The canonical three-field contact form.

    Returns:
        Flow-mode form titled "Contact" with a required name and email and an
        optional topic dropdown.
    """
    from formsmith.schema import FieldKind, FieldOption, FieldSchema, FormSchema

    return FormSchema(
        title="Contact",
        description="Get in touch",
        fields=[
            FieldSchema(id="name", kind=FieldKind.TEXT, label="Name", required=True),
            FieldSchema(id="email", kind=FieldKind.EMAIL, label="Email", required=True),
            FieldSchema(
                id="topic",
                kind=FieldKind.SELECT,
                label="Topic",
                options=[
                    FieldOption(label="Sales", value="sales"),
                    FieldOption(label="Support", value="support"),
                ],
            ),
        ],
    )


@pytest.fixture
def grid_form() -> FormSchema:
    """A grid-mode form with one full two-column row and one single row.

    Layout::

        row 0 (2-column): A | B
        row 1 (1-column): C
    """
    from formsmith.schema import (
        FieldKind,
        FieldSchema,
        FormSchema,
        GridLayout,
        GridTemplate,
        PlacementMode,
        Row,
    )

    return FormSchema(
        title="Grid",
        placement=PlacementMode.GRID,
        layout=GridLayout(
            rows=[Row(template=GridTemplate.TWO_COLUMN), Row(template=GridTemplate.ONE_COLUMN)]
        ),
        fields=[
            FieldSchema(id="A", kind=FieldKind.TEXT, label="A", row_index=0, col_index=0),
            FieldSchema(id="B", kind=FieldKind.TEXT, label="B", row_index=0, col_index=1),
            FieldSchema(id="C", kind=FieldKind.TEXT, label="C", row_index=1, col_index=0),
        ],
    )


# =============================================================================
# Storage Fixtures
# =============================================================================


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Temporary database location."""
    return tmp_path / "forms.db"


@pytest.fixture
def form_service(db_path: Path) -> Generator[FormService, None, None]:
    """Initialized FormService over a temporary SQLite database.

    Yields:
        FormService that is closed after the test.
    """
    from formsmith.storage import FormService, SQLiteStorage

    with FormService(SQLiteStorage(db_path)) as service:
        yield service


@pytest.fixture
def owner() -> Actor:
    from formsmith.storage import Actor

    return Actor(user_id="owner-1")


@pytest.fixture
def admin() -> Actor:
    from formsmith.storage import Actor

    return Actor(user_id="admin-1", is_admin=True)
