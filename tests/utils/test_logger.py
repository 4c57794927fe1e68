"""
Tests for the logger module.

Tests cover logger setup, handler management, log levels
and the module logger hierarchy used by the scoper.
"""

import logging
import logging.handlers

import pytest

from phpscoper.utils.logger import (
    ROOT_LOGGER_NAME,
    VALID_LOG_LEVELS,
    add_console_handler,
    add_file_handler,
    get_logger,
    set_log_level,
    setup_logger,
)


@pytest.fixture
def log_file_path(tmp_path):
    """Path to a log file inside a directory that does not exist yet."""
    return tmp_path / "logs" / "scoper.log"


@pytest.fixture
def test_logger():
    """Create fresh logger instance for each test."""
    logger = logging.getLogger("phpscoper_test_logger")
    logger.handlers.clear()
    logger.setLevel(logging.DEBUG)
    yield logger
    logger.handlers.clear()


class TestLoggerSetup:
    """Test logger creation and configuration."""

    def test_setup_logger_defaults(self):
        logger = setup_logger("phpscoper_setup_defaults")

        assert isinstance(logger, logging.Logger)
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1

    def test_setup_logger_custom_level(self):
        logger = setup_logger("phpscoper_setup_debug", level="debug")
        assert logger.level == logging.DEBUG

    def test_setup_logger_invalid_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            setup_logger("phpscoper_setup_invalid", level="LOUD")

    def test_setup_logger_with_file(self, log_file_path):
        logger = setup_logger("phpscoper_setup_file", log_file=log_file_path)

        assert len(logger.handlers) == 2
        logger.info("Scoped 3 files")
        assert log_file_path.exists()

    def test_setup_logger_prevents_duplicate_handlers(self):
        logger1 = setup_logger("phpscoper_setup_twice")
        logger2 = setup_logger("phpscoper_setup_twice")

        assert logger1 is logger2
        assert len(logger2.handlers) == 1

    def test_root_logger_name(self):
        assert ROOT_LOGGER_NAME == "phpscoper"


class TestGetLogger:
    """Module loggers and their hierarchy."""

    def test_get_logger_creates_default_logger(self, monkeypatch):
        # Nothing configured anywhere, not even on the root logger
        monkeypatch.setattr(logging.getLogger(), "handlers", [])

        logger = get_logger("standalone_module_logger")

        assert isinstance(logger, logging.Logger)
        assert len(logger.handlers) == 1

    def test_get_logger_defers_to_configured_root(self, monkeypatch):
        monkeypatch.setattr(logging.getLogger(), "handlers", [logging.NullHandler()])

        logger = get_logger("phpscoper_root_configured.module")

        assert logger.handlers == []
        assert logger.propagate

    def test_child_of_configured_parent_propagates(self):
        parent = setup_logger("phpscoper_parent")
        child = get_logger("phpscoper_parent.scoper.php_scoper")

        assert child.handlers == []
        assert child.parent is parent


class TestLogLevels:
    """Test log level configuration."""

    def test_set_log_level_changes_level(self, test_logger):
        set_log_level(test_logger, "WARNING")
        assert test_logger.level == logging.WARNING

    def test_set_log_level_invalid_raises_error(self, test_logger):
        with pytest.raises(ValueError, match="Invalid log level"):
            set_log_level(test_logger, "INVALID")

    def test_all_valid_log_levels(self, test_logger):
        for level in VALID_LOG_LEVELS:
            set_log_level(test_logger, level)
            assert test_logger.level == getattr(logging, level)


class TestLogHandlers:
    """Test console and file handler management."""

    def test_add_console_handler(self, test_logger):
        add_console_handler(test_logger, "INFO")

        assert len(test_logger.handlers) == 1
        assert isinstance(test_logger.handlers[0], logging.StreamHandler)
        assert test_logger.handlers[0].level == logging.INFO

    def test_add_file_handler_writes_detailed_format(self, test_logger, log_file_path):
        add_file_handler(test_logger, log_file_path)

        test_logger.warning("src/Foo.php:3: dynamic name left unprefixed")

        content = log_file_path.read_text(encoding="utf-8")
        assert "WARNING" in content
        assert "phpscoper_test_logger" in content
        assert "dynamic name left unprefixed" in content

    def test_add_file_handler_is_rotating(self, test_logger, log_file_path):
        add_file_handler(test_logger, log_file_path)

        handler = test_logger.handlers[0]
        assert isinstance(handler, logging.handlers.RotatingFileHandler)
        assert handler.backupCount == 5

    def test_add_file_handler_invalid_level(self, test_logger, log_file_path):
        with pytest.raises(ValueError, match="Invalid log level"):
            add_file_handler(test_logger, log_file_path, level="INVALID")

    def test_add_console_handler_invalid_level(self, test_logger):
        with pytest.raises(ValueError, match="Invalid log level"):
            add_console_handler(test_logger, level="INVALID")
