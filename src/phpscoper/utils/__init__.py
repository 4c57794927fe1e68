"""
Logging and path helpers shared by the scoper packages.

Examples:
    >>> from phpscoper.utils import setup_logger, matches_extension
    >>> logger = setup_logger("phpscoper")
    >>> matches_extension("src/Kernel.php", [".php"])
    True
"""

from .path_utils import (
    PathLike,
    ensure_directory,
    get_file_extension,
    has_extension,
    matches_extension,
)

from .logger import (
    setup_logger,
    get_logger,
    set_log_level,
    add_file_handler,
    add_console_handler,
    ROOT_LOGGER_NAME,
    VALID_LOG_LEVELS,
)

__all__ = [
    "PathLike",
    "ensure_directory",
    "get_file_extension",
    "has_extension",
    "matches_extension",
    "setup_logger",
    "get_logger",
    "set_log_level",
    "add_file_handler",
    "add_console_handler",
    "ROOT_LOGGER_NAME",
    "VALID_LOG_LEVELS",
]
