"""Centralized configuration management for formsmith.

Example:
    >>> from formsmith.config import EnvVar, get_environment
    >>> db_path = get_environment(EnvVar.FORMSMITH_DB_PATH)
    >>> for var in list_environment_variables("submit"):
    ...     info = get_environment_info(var)
    ...     print(f"{info.name}: {info.description}")

Environment Variable Categories:
    storage: SQLite database location
    submit: Webhook delivery of responses
    builder: Authoring defaults (row template)
    logging: Log level
    service: MCP server host and port
"""

from .lib import (
    # Core types
    EnvConfig,
    EnvVar,
    # Convenience functions
    get_db_path,
    get_default_template,
    # Main interface
    get_environment,
    get_environment_info,
    get_log_level,
    get_submit_timeout,
    get_submit_url,
    # Introspection
    list_environment_variables,
)

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
