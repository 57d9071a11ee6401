"""MCP server module for formsmith.

Exposes form authoring, rendering, validation and submission as MCP tools.

Usage:
    # Run via CLI
    python . mcp run                # STDIO transport
    python . mcp serve --port 18090 # HTTP transport

    # Programmatic
    >>> from formsmith.mcp import create_server
    >>> server = create_server(service)

Available Tools:
    - create_form / get_form / list_forms
    - add_field / update_field / remove_field / move_field
    - render_form: Edit preview or filled form as widgets + text tree
    - validate_answers / submit_response / list_submissions
"""

from .lib import (
    RESOURCE_URIS,
    SERVER_NAME,
    TOOL_NAMES,
    ServerConfig,
    TransportType,
    get_server_capabilities,
    get_server_version,
)

# Conditionally import server module (requires fastmcp)
try:
    from .server import create_server, run_server

    _FASTMCP_AVAILABLE = True
except ImportError:
    create_server = None  # type: ignore[assignment,misc]
    run_server = None  # type: ignore[assignment]
    _FASTMCP_AVAILABLE = False

__all__ = [
    # Server (requires fastmcp)
    "create_server",
    "run_server",
    # Configuration
    "SERVER_NAME",
    "TOOL_NAMES",
    "RESOURCE_URIS",
    "ServerConfig",
    "TransportType",
    # Utilities
    "get_server_version",
    "get_server_capabilities",
]
