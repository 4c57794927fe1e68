"""
Logging setup for the scoper.

Every module asks for its own logger through :func:`get_logger` using a
dotted name under ``phpscoper``. Handlers are only attached once, on the
first logger that has no configured ancestor, so child loggers propagate to
whatever the host application (or :func:`setup_logger`) configured.

Examples:
    >>> from phpscoper.utils.logger import setup_logger
    >>> logger = setup_logger("phpscoper", level="DEBUG", log_file=Path("logs/scoper.log"))
    >>> logger.debug("src/Kernel.php: PARSING -> PARSED")
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from .path_utils import ensure_directory

ROOT_LOGGER_NAME = "phpscoper"

# Valid log levels
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Default log format strings
DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
SIMPLE_FORMAT = "%(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _level_value(level: str) -> int:
    if level.upper() not in VALID_LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of {VALID_LOG_LEVELS}")
    return getattr(logging, level.upper())


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: str = "INFO",
    log_file: Path | None = None
) -> logging.Logger:
    """
    Configure and return a logger instance.

    Adds a console handler and, when ``log_file`` is given, a rotating file
    handler. Calling it twice for the same name does not duplicate handlers.

    Args:
        name: Logger name (usually ``"phpscoper"``).
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.

    Returns:
        Configured logger instance.

    Raises:
        ValueError: If level is not a valid log level.

    Note:
        File logs use the detailed format and always record DEBUG, console
        logs use the simple format at the requested level.
    """
    logger = logging.getLogger(name)
    logger.setLevel(_level_value(level))

    has_console_handler = any(
        isinstance(h, logging.StreamHandler)
        and not isinstance(h, logging.handlers.RotatingFileHandler)
        for h in logger.handlers
    )
    has_file_handler = any(
        isinstance(h, logging.handlers.RotatingFileHandler) for h in logger.handlers
    )

    if not has_console_handler:
        add_console_handler(logger, level)

    if log_file is not None and not has_file_handler:
        add_file_handler(logger, log_file, level="DEBUG")

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Retrieve a module logger, configuring a default one if nothing is set up.

    Args:
        name: Dotted logger name, e.g. ``"phpscoper.scoper.php_scoper"``.

    Returns:
        Logger instance.

    Note:
        When an ancestor (or the root logger) already has handlers the
        logger is returned as is and records propagate upwards.
    """
    logger = logging.getLogger(name)

    if logger.hasHandlers():
        return logger

    parent_name = name.rsplit(".", 1)[0] if "." in name else ""
    while parent_name:
        if logging.getLogger(parent_name).handlers:
            return logger
        parent_name = parent_name.rsplit(".", 1)[0] if "." in parent_name else ""

    if logging.getLogger().handlers:
        return logger

    return setup_logger(name)


def set_log_level(logger: logging.Logger, level: str) -> None:
    """
    Change logging level dynamically.

    Raises:
        ValueError: If level is not valid.
    """
    logger.setLevel(_level_value(level))


def add_file_handler(
    logger: logging.Logger,
    log_file: Path,
    level: str = "DEBUG"
) -> None:
    """
    Add a rotating file handler (10MB, 5 backups) to ``logger``.

    Raises:
        ValueError: If level is not valid.
        OSError: If the log directory cannot be created.
    """
    level_value = _level_value(level)
    ensure_directory(log_file.parent)

    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8"
    )
    file_handler.setLevel(level_value)
    file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt=DATE_FORMAT))

    logger.addHandler(file_handler)


def add_console_handler(logger: logging.Logger, level: str = "INFO") -> None:
    """
    Add console output handler to logger.

    Raises:
        ValueError: If level is not valid.
    """
    console_handler = logging.StreamHandler()
    console_handler.setLevel(_level_value(level))
    console_handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))

    logger.addHandler(console_handler)
