"""Pytest fixtures for MCP server tests.

This module provides:
- FASTMCP_AVAILABLE check for graceful degradation
- Automatic skipping of MCP tests when fastmcp not installed
- Server and client fixtures bound to a temporary form store
"""

from __future__ import annotations

from typing import TYPE_CHECKING, AsyncGenerator

import pytest

try:
    from fastmcp import Client

    FASTMCP_AVAILABLE = True
except ImportError:
    FASTMCP_AVAILABLE = False

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from formsmith.storage import FormService


# =============================================================================
# Pytest Hooks
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]):
    """Skip tests marked ``mcp`` when fastmcp is not installed."""
    if not FASTMCP_AVAILABLE:
        skip_mcp = pytest.mark.skip(reason="fastmcp not installed")
        for item in items:
            # The package name 'mcp' is also a keyword, so check the marker
            if item.get_closest_marker("mcp") is not None:
                item.add_marker(skip_mcp)


# =============================================================================
# Server Fixtures
# =============================================================================


@pytest.fixture
def mcp_server(form_service: FormService) -> FastMCP:
    """MCP server bound to the temporary form service."""
    if not FASTMCP_AVAILABLE:
        pytest.skip("fastmcp not installed")

    from .server import create_server

    return create_server(form_service)


@pytest.fixture
async def mcp_client(mcp_server: FastMCP) -> AsyncGenerator[Client, None]:
    """Connected in-memory MCP client."""
    if not FASTMCP_AVAILABLE:
        pytest.skip("fastmcp not installed")

    async with Client(mcp_server) as client:
        yield client
