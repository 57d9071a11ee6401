"""Centralized environment configuration for formsmith.

Every tunable is an ``EnvVar`` member carrying its own metadata, and every
lookup goes through ``get_environment()`` with the same resolution order:
override > environment > default.

Example:
    >>> from formsmith.config import EnvVar, get_environment
    >>> timeout = get_environment(EnvVar.FORMSMITH_SUBMIT_TIMEOUT)  # float
    >>> port = get_environment(EnvVar.MCP_PORT, override=9000)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, overload

# =============================================================================
# Environment Variable Configuration
# =============================================================================


@dataclass(frozen=True)
class EnvConfig:
    """Metadata for an environment variable.

    Attributes:
        name: Environment variable name (e.g., "FORMSMITH_DB_PATH").
        default: Default value if not set in environment.
        var_type: Python type for value conversion (str, int, float, bool, Path).
        description: Human-readable description.
        category: Grouping category for documentation.
    """

    name: str
    default: Any
    var_type: type
    description: str = ""
    category: str = "general"


class EnvVar(Enum):
    """All environment variables used by formsmith.

    Categories:
        - storage: Form and submission persistence
        - submit: Outbound submission delivery
        - builder: Authoring defaults
        - logging: Log output
        - service: MCP server bind settings
    """

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------
    FORMSMITH_DB_PATH = EnvConfig(
        name="FORMSMITH_DB_PATH",
        default=None,  # Computed from the working directory
        var_type=Path,
        description="SQLite database holding forms, submissions and events",
        category="storage",
    )

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------
    FORMSMITH_SUBMIT_URL = EnvConfig(
        name="FORMSMITH_SUBMIT_URL",
        default=None,
        var_type=str,
        description="Webhook receiving form responses (unset = store locally)",
        category="submit",
    )
    FORMSMITH_SUBMIT_TIMEOUT = EnvConfig(
        name="FORMSMITH_SUBMIT_TIMEOUT",
        default=10.0,
        var_type=float,
        description="Webhook request timeout in seconds",
        category="submit",
    )

    # -------------------------------------------------------------------------
    # Builder defaults
    # -------------------------------------------------------------------------
    FORMSMITH_DEFAULT_TEMPLATE = EnvConfig(
        name="FORMSMITH_DEFAULT_TEMPLATE",
        default="1-column",
        var_type=str,
        description="Row template used when a grid row is added without one",
        category="builder",
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    FORMSMITH_LOG_LEVEL = EnvConfig(
        name="FORMSMITH_LOG_LEVEL",
        default="INFO",
        var_type=str,
        description="Root log level (DEBUG, INFO, WARNING, ERROR)",
        category="logging",
    )

    # -------------------------------------------------------------------------
    # MCP service
    # -------------------------------------------------------------------------
    MCP_HOST = EnvConfig(
        name="MCP_HOST",
        default="0.0.0.0",
        var_type=str,
        description="MCP server bind address",
        category="service",
    )
    MCP_PORT = EnvConfig(
        name="MCP_PORT",
        default=18090,
        var_type=int,
        description="MCP server port for HTTP/SSE transports",
        category="service",
    )


# =============================================================================
# Type Conversion Helpers
# =============================================================================


def _parse_bool(value: str) -> bool | None:
    """Parse string to boolean.

    Recognizes: true/false, 1/0, yes/no (case-insensitive).
    Returns None for unrecognized values.
    """
    normalized = value.lower().strip()
    if normalized in ("true", "1", "yes"):
        return True
    if normalized in ("false", "0", "no"):
        return False
    return None


def _convert_value(value: str | None, var_type: type, default: Any) -> Any:
    """Convert string value to target type, falling back to ``default``."""
    if value is None:
        return default

    if var_type is str:
        return value

    if var_type in (int, float):
        try:
            return var_type(value)
        except ValueError:
            return default

    if var_type is bool:
        result = _parse_bool(value)
        return result if result is not None else default

    if var_type is Path:
        return Path(value).expanduser()

    return value


# =============================================================================
# Main Interface
# =============================================================================


@overload
def get_environment(env_var: EnvVar, override: int) -> int: ...
@overload
def get_environment(env_var: EnvVar, override: float) -> float: ...
@overload
def get_environment(env_var: EnvVar, override: str) -> str: ...
@overload
def get_environment(env_var: EnvVar, override: Path) -> Path: ...
@overload
def get_environment(env_var: EnvVar, override: None = None) -> Any: ...


def get_environment(env_var: EnvVar, override: Any = None) -> Any:
    """Get environment variable value with type conversion.

    Resolution priority:
        1. Explicit override parameter (highest)
        2. Environment variable value
        3. Default from EnvConfig (lowest)

    Args:
        env_var: Environment variable enum member.
        override: Optional override value (bypasses env lookup).

    Returns:
        Value converted to the variable's declared type.
    """
    config: EnvConfig = env_var.value

    if override is not None:
        return override

    raw_value = os.environ.get(config.name)
    return _convert_value(raw_value, config.var_type, config.default)


def get_environment_info(env_var: EnvVar) -> EnvConfig:
    """Get metadata for an environment variable."""
    return env_var.value


def list_environment_variables(category: str | None = None) -> list[EnvVar]:
    """List all environment variables, optionally filtered by category."""
    if category is None:
        return list(EnvVar)

    return [var for var in EnvVar if var.value.category == category]


# =============================================================================
# Convenience Functions
# =============================================================================


def get_db_path(override: Path | str | None = None) -> Path:
    """Resolve the SQLite database path.

    Resolution: override > FORMSMITH_DB_PATH > ./.formsmith/forms.db
    """
    if override is not None:
        return Path(override)

    env_path = get_environment(EnvVar.FORMSMITH_DB_PATH)
    if env_path:
        return env_path

    return Path.cwd() / ".formsmith" / "forms.db"


def get_submit_url(override: str | None = None) -> str | None:
    """Webhook URL for responses, or None to persist them locally."""
    return get_environment(EnvVar.FORMSMITH_SUBMIT_URL, override=override)


def get_submit_timeout(override: float | None = None) -> float:
    """Webhook timeout in seconds."""
    return get_environment(EnvVar.FORMSMITH_SUBMIT_TIMEOUT, override=override)


def get_default_template(override: str | None = None) -> str:
    """Row template name applied to rows added without an explicit template."""
    return get_environment(EnvVar.FORMSMITH_DEFAULT_TEMPLATE, override=override)


def get_log_level(override: str | None = None) -> str:
    """Configured log level name."""
    return get_environment(EnvVar.FORMSMITH_LOG_LEVEL, override=override)


__all__ = [
    # Core types
    "EnvConfig",
    "EnvVar",
    # Main interface
    "get_environment",
    "get_environment_info",
    # Convenience functions
    "get_db_path",
    "get_submit_url",
    "get_submit_timeout",
    "get_default_template",
    "get_log_level",
    # Introspection
    "list_environment_variables",
]
