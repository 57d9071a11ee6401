"""Tests for core logging module."""

import logging

import pytest

from .lib import get_logger, parse_level


class TestLogging:
    """Test core logging API."""

    def test_get_logger(self) -> None:
        """Verify logger instance creation."""
        logger = get_logger("formsmith.test")
        assert logger.name == "formsmith.test"
        assert isinstance(logger, logging.Logger)

    def test_get_logger_default_name(self) -> None:
        """Verify default logger name."""
        assert get_logger().name == "formsmith"


class TestParseLevel:
    """Level names coming from FORMSMITH_LOG_LEVEL."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("debug", logging.DEBUG),
            (" WARNING ", logging.WARNING),
            (logging.ERROR, logging.ERROR),
            (None, logging.INFO),
            ("chatty", logging.INFO),
        ],
    )
    def test_parse_level(self, raw, expected) -> None:
        """Names, ints and junk resolve to a numeric level."""
        assert parse_level(raw) == expected
