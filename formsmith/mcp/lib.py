"""Listening settings and the advertised surface of the formsmith MCP server.

Importable without fastmcp, so the CLI can describe the server before
deciding to start it.
"""

from dataclasses import dataclass
from enum import Enum

from ..config import EnvVar, get_environment

SERVER_NAME = "formsmith"

SCHEMA_RESOURCE_URI = "schema://form"

# Must match what create_server registers.
TOOL_NAMES = (
    "create_form",
    "get_form",
    "list_forms",
    "add_field",
    "update_field",
    "remove_field",
    "move_field",
    "render_form",
    "validate_answers",
    "submit_response",
    "list_submissions",
)
RESOURCE_URIS = (SCHEMA_RESOURCE_URI,)


class TransportType(str, Enum):
    STDIO = "stdio"
    HTTP = "http"
    SSE = "sse"


@dataclass(frozen=True)
class ServerConfig:
    """Where the server listens.

    ``host`` and ``port`` apply to the HTTP and SSE transports, ``path`` to
    HTTP only.
    """

    transport: TransportType = TransportType.STDIO
    host: str = "0.0.0.0"
    port: int = 18090
    path: str = "/mcp"

    @classmethod
    def from_env(
        cls,
        transport: TransportType | str = TransportType.STDIO,
        host: str | None = None,
        port: int | None = None,
    ) -> "ServerConfig":
        """Explicit arguments first, then MCP_HOST / MCP_PORT."""
        return cls(
            transport=TransportType(transport),
            host=get_environment(EnvVar.MCP_HOST, override=host),
            port=get_environment(EnvVar.MCP_PORT, override=port),
        )

    @property
    def url(self) -> str | None:
        if self.transport == TransportType.STDIO:
            return None
        path = self.path if self.transport == TransportType.HTTP else ""
        return f"http://{self.host}:{self.port}{path}"


def get_server_version() -> str:
    from .. import __version__

    return __version__


def get_server_capabilities() -> dict[str, list[str]]:
    """Tools, resources and prompts the server registers, by name."""
    return {
        "tools": list(TOOL_NAMES),
        "resources": list(RESOURCE_URIS),
        "prompts": [],
    }


__all__ = [
    "SERVER_NAME",
    "SCHEMA_RESOURCE_URI",
    "TOOL_NAMES",
    "RESOURCE_URIS",
    "TransportType",
    "ServerConfig",
    "get_server_version",
    "get_server_capabilities",
]
