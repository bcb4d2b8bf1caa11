"""Tests for settings and logging setup."""

import pytest
import structlog
from pydantic import ValidationError

from py_mapcolor.config import Settings
from py_mapcolor.logging_config import configure_logging


class TestSettings:
    """Environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("MAPCOLOR_BOARD_WIDTH", raising=False)
        config = Settings(_env_file=None)
        assert config.board_width == 800
        assert config.board_height == 600
        assert config.adjacency_tolerance == 15.0
        assert config.max_backtrack_steps == 20_000

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("MAPCOLOR_BOARD_WIDTH", "1024")
        monkeypatch.setenv("MAPCOLOR_SPLIT_ATTEMPTS", "3")
        config = Settings(_env_file=None)
        assert config.board_width == 1024
        assert config.split_attempts == 3

    def test_invalid_value(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, board_width=0)


class TestLogging:
    """structlog configuration."""

    @pytest.mark.parametrize("fmt", ["json", "console"])
    def test_configure(self, fmt):
        try:
            configure_logging("DEBUG", fmt)
            assert structlog.is_configured()
            structlog.get_logger("test").info("configured", fmt=fmt)
        finally:
            structlog.reset_defaults()
