"""FastMCP server for formsmith.

Exposes the form builder, renderer, validation engine and submission flow
to MCP clients:

    1. create_form / add_field / update_field: author a form
    2. render_form: preview it (edit mode) or show it filled (fill mode)
    3. validate_answers / submit_response: collect responses

Usage:
    # STDIO mode
    python . mcp run

    # HTTP mode
    python . mcp serve --port 18090
"""

import json
import logging
from functools import lru_cache
from typing import Any, Callable, TypeVar

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from ..core.errors import FormsmithError
from ..schema import export_json_schema
from ..storage import Actor, FormService
from . import tools
from .lib import (
    SCHEMA_RESOURCE_URI,
    SERVER_NAME,
    ServerConfig,
    TransportType,
    get_server_version,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_USER = "mcp"

SERVER_INSTRUCTIONS = """\
## formsmith MCP Server

Builds forms from typed field blocks, renders them and collects responses.

### Workflow
1. `create_form(title)` -> form id
2. `add_field(form_id, kind)` for each block (`text`, `email`, `select`, ...)
3. `update_field(form_id, field_id, {"label": ..., "required": true})`
4. `render_form(form_id)` -> review the edit preview
5. `submit_response(form_id, answers)` -> validated and stored

Grid forms (`placement="grid"`) need `row_index` and `col_index` when adding
fields. The field schema is available as resource `schema://form`.
"""


def _call(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    try:
        return func(*args, **kwargs)
    except FormsmithError as e:
        raise ToolError(str(e)) from e


@lru_cache(maxsize=1)
def _cached_form_schema() -> str:
    return json.dumps(export_json_schema(), indent=2)


# =============================================================================
# Server Factory
# =============================================================================


def create_server(service: FormService | None = None) -> FastMCP:
    """Create an MCP server bound to ``service``.

    Args:
        service: Initialized FormService. If None, one is created from
            FORMSMITH_DB_PATH and initialized.

    Returns:
        Configured FastMCP server instance.
    """
    if service is None:
        service = FormService()
        service.initialize()

    mcp = FastMCP(name=SERVER_NAME, instructions=SERVER_INSTRUCTIONS)

    def actor(user_id: str | None) -> Actor:
        return Actor(user_id or DEFAULT_USER)

    # -------------------------------------------------------------------------
    # Forms
    # -------------------------------------------------------------------------

    @mcp.tool
    def create_form(
        title: str,
        description: str | None = None,
        placement: str = "flow",
        user_id: str | None = None,
    ) -> dict[str, Any]:
        """Create an empty form.

        Args:
            title: Unique form title.
            description: Optional description shown under the title.
            placement: "flow" (vertical list) or "grid" (rows of cells).
            user_id: Owner of the form.
        """
        return _call(
            tools.create_form, service, actor(user_id), title, description, placement
        )

    @mcp.tool
    def get_form(form_id: str) -> dict[str, Any]:
        """Get a stored form with its schema and structural issues."""
        return _call(tools.get_form, service, form_id)

    @mcp.tool
    def list_forms(user_id: str | None = None, limit: int = 50) -> dict[str, Any]:
        """List the forms owned by ``user_id``."""
        return _call(tools.list_forms, service, actor(user_id), limit)

    # -------------------------------------------------------------------------
    # Fields
    # -------------------------------------------------------------------------

    @mcp.tool
    def add_field(
        form_id: str,
        kind: str,
        row_index: int | None = None,
        col_index: int | None = None,
        user_id: str | None = None,
    ) -> dict[str, Any]:
        """Append a field with the defaults of its kind.

        Args:
            form_id: Target form.
            kind: Field kind (text, textarea, number, email, phone, url,
                password, select, checkbox, radio, date, time, file, range,
                color, heading, paragraph, divider, image).
            row_index: Grid row (grid forms only).
            col_index: Grid column (grid forms only).
            user_id: Acting user.
        """
        return _call(
            tools.add_field, service, actor(user_id), form_id, kind, row_index, col_index
        )

    @mcp.tool
    def update_field(
        form_id: str,
        field_id: str,
        updates: dict[str, Any],
        user_id: str | None = None,
    ) -> dict[str, Any]:
        """Merge attribute updates (camelCase keys) into a field."""
        return _call(
            tools.edit_field, service, actor(user_id), form_id, field_id, updates
        )

    @mcp.tool
    def remove_field(
        form_id: str, field_id: str, user_id: str | None = None
    ) -> dict[str, Any]:
        """Remove a field from a form."""
        return _call(tools.delete_field, service, actor(user_id), form_id, field_id)

    @mcp.tool
    def move_field(
        form_id: str,
        from_index: int,
        to_index: int,
        user_id: str | None = None,
    ) -> dict[str, Any]:
        """Move a field to another position in the field list."""
        return _call(
            tools.reorder_field, service, actor(user_id), form_id, from_index, to_index
        )

    # -------------------------------------------------------------------------
    # Rendering & Responses
    # -------------------------------------------------------------------------

    @mcp.tool
    def render_form(
        form_id: str,
        mode: str = "edit",
        answers: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Render a form in "edit" or "fill" mode.

        Returns the widget tree and a readable text rendering.
        """
        return _call(tools.render_form, service, form_id, mode, answers)

    @mcp.tool
    def validate_answers(form_id: str, answers: dict[str, Any]) -> dict[str, Any]:
        """Validate an answer map without storing it."""
        return _call(tools.validate_answers, service, form_id, answers)

    @mcp.tool
    async def submit_response(
        form_id: str,
        answers: dict[str, Any],
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Validate and store a response.

        Returns ``submitted: false`` with per-field errors when invalid.
        """
        try:
            return await tools.submit_response(service, form_id, answers, metadata)
        except FormsmithError as e:
            raise ToolError(str(e)) from e

    @mcp.tool
    def list_submissions(
        form_id: str, user_id: str | None = None, limit: int = 100
    ) -> dict[str, Any]:
        """List stored responses of a form."""
        return _call(tools.list_submissions, service, actor(user_id), form_id, limit)

    # -------------------------------------------------------------------------
    # Resources
    # -------------------------------------------------------------------------

    @mcp.resource(SCHEMA_RESOURCE_URI)
    def get_form_schema() -> str:
        """JSON schema of the persisted form record."""
        return _cached_form_schema()

    return mcp


# =============================================================================
# Runner
# =============================================================================


def run_server(
    config: ServerConfig | None = None,
    service: FormService | None = None,
) -> None:
    """Run the MCP server until the transport closes.

    Args:
        config: Listening settings; defaults to STDIO.
        service: FormService to serve; defaults to one on FORMSMITH_DB_PATH,
            closed again on exit.
    """
    config = config or ServerConfig()
    logger.info(f"Starting formsmith server v{get_server_version()}")
    logger.info(f"Transport: {config.transport.value}")

    owned = service is None
    if service is None:
        service = FormService()
        service.initialize()
    mcp = create_server(service)

    try:
        if config.transport == TransportType.STDIO:
            mcp.run()
        elif config.transport == TransportType.HTTP:
            logger.info(f"Running in HTTP mode at {config.url}")
            mcp.run(transport="http", host=config.host, port=config.port, path=config.path)
        elif config.transport == TransportType.SSE:
            logger.info(f"Running in SSE mode at {config.url}")
            mcp.run(transport="sse", host=config.host, port=config.port)
        else:
            raise ValueError(f"Unknown transport: {config.transport}")
    finally:
        if owned:
            service.close()


__all__ = ["create_server", "run_server", "SERVER_INSTRUCTIONS"]
