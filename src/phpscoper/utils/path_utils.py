"""
Path helpers used when sniffing whether a file holds PHP source.

The scoper never touches the file system; these helpers only look at the
path string a caller hands in alongside the file contents.

Examples:
    >>> from phpscoper.utils.path_utils import get_file_extension, has_extension
    >>> get_file_extension("src/Kernel.php")
    '.php'
    >>> has_extension("bin/console")
    False
"""

from __future__ import annotations

from pathlib import Path, PurePath
from typing import Iterable, Union

# Type alias for path-like objects
PathLike = Union[str, PurePath]


def ensure_directory(path: Path) -> Path:
    """
    Create directory if it doesn't exist, return Path.

    Args:
        path: Directory path to create.

    Returns:
        The directory Path object.

    Raises:
        OSError: If directory cannot be created.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_file_extension(path: PathLike) -> str:
    """
    Extract the file extension including the dot, lower-cased.

    Args:
        path: File path.

    Returns:
        File extension (e.g., ".php"). Empty string if no extension.

    Examples:
        >>> get_file_extension("Foo.PHP")
        '.php'
        >>> get_file_extension("README")
        ''
    """
    return PurePath(path).suffix.lower()


def has_extension(path: PathLike) -> bool:
    """Return True if the basename carries any extension at all."""
    return get_file_extension(path) != ""


def matches_extension(path: PathLike, extensions: Iterable[str]) -> bool:
    """
    Check whether a path ends with one of the given extensions.

    Extensions are compared case-insensitively and may be given with or
    without the leading dot.

    Examples:
        >>> matches_extension("lib/Foo.php", [".php"])
        True
        >>> matches_extension("lib/Foo.phtml", ["php"])
        False
    """
    suffix = get_file_extension(path)
    if not suffix:
        return False
    normalized = {
        ext.lower() if ext.startswith(".") else f".{ext.lower()}"
        for ext in extensions
    }
    return suffix in normalized
