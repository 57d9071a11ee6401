"""Cross-cutting primitives: logging and the error taxonomy."""

from .errors import FormsmithError
from .log import get_logger, setup_logging

__all__ = ["FormsmithError", "get_logger", "setup_logging"]
