"""Configuration data model for a scoping run.

This module defines the :class:`ScoperConfig` dataclass holding everything
a run needs besides the files themselves: the prefix, which files count as
PHP, the policies for constructs the scoper cannot handle, the exclusion
policy and logging options. It handles validation and conversion to and
from plain dictionaries (as loaded from a JSON or YAML file by the caller).

Example:
    >>> config = ScoperConfig.from_dict({
    ...     "version": "1.0",
    ...     "prefix": "Humbug",
    ...     "whitelist": {"excluded_namespaces": ["PHPUnit"]},
    ... })
    >>> config.validate()
    >>> config.create_whitelist().is_namespace_excluded("PHPUnit\\Framework")
    True
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from phpscoper.core.whitelist import Whitelist
from phpscoper.utils.logger import VALID_LOG_LEVELS, get_logger

logger = get_logger("phpscoper.core.config")

# Letters, digits, underscores and namespace separators
PREFIX_PATTERN = re.compile(r"^[^\W][\w\\]*$")

DEFAULT_FILE_EXTENSIONS = [".php"]


class UnsupportedConstructPolicy(Enum):
    """What to do with a syntax form the traversal cannot classify.

    Policies:
        SKIP: Leave the construct unprefixed, log a warning and continue.
        FAIL: Abort the file with ``UnsupportedConstructError``.
    """
    SKIP = "skip"
    FAIL = "fail"


def validate_prefix(prefix: str) -> str:
    """Validate a prefix and return it without surrounding separators.

    Raises:
        ValueError: If the prefix is empty or not a valid namespace name.

    Example:
        >>> validate_prefix("Humbug\\")
        'Humbug'
    """
    if not isinstance(prefix, str):
        raise ValueError("Prefix must be a string")

    normalized = prefix.strip().strip("\\")
    if not normalized:
        raise ValueError("Prefix cannot be empty")

    if not PREFIX_PATTERN.match(normalized) or "\\\\" in normalized:
        raise ValueError(
            f"Invalid prefix: {prefix!r}. Expected letters, digits, underscores "
            "and single namespace separators"
        )

    return normalized


@dataclass
class ScoperConfig:
    """Configuration of one scoping run.

    Attributes:
        prefix: Namespace every declared symbol is moved under.
        version: Schema version (currently "1.0").
        file_extensions: Extensions treated as PHP without sniffing contents.
        unsupported_construct: Policy name, see :class:`UnsupportedConstructPolicy`.
        warn_on_dynamic_names: Log a warning when a reflection call receives a
            name that is not a literal string and therefore stays unprefixed.
        max_workers: Thread count used by the batch runner.
        log_level: Level for the ``phpscoper`` logger.
        whitelist: Exclusion policy options, see :meth:`Whitelist.from_dict`.
    """

    prefix: str
    version: str = "1.0"
    file_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_FILE_EXTENSIONS))
    unsupported_construct: str = UnsupportedConstructPolicy.SKIP.value
    warn_on_dynamic_names: bool = True
    max_workers: int = 4
    log_level: str = "INFO"
    whitelist: Dict[str, Any] = field(default_factory=dict)

    def validate(self) -> None:
        """Validate the configuration.

        Raises:
            ValueError: If any validation check fails
        """
        if self.version != "1.0":
            raise ValueError(f"Invalid version: {self.version}. Expected '1.0'")

        validate_prefix(self.prefix)

        if not isinstance(self.file_extensions, list) or not self.file_extensions:
            raise ValueError("Option 'file_extensions' must be a non-empty list")
        for extension in self.file_extensions:
            if not isinstance(extension, str) or not extension.strip("."):
                raise ValueError(f"Invalid file extension: {extension!r}")

        valid_policies = {policy.value for policy in UnsupportedConstructPolicy}
        if self.unsupported_construct not in valid_policies:
            raise ValueError(
                f"Invalid unsupported_construct policy: {self.unsupported_construct}. "
                f"Expected one of {sorted(valid_policies)}"
            )

        if not isinstance(self.warn_on_dynamic_names, bool):
            raise ValueError("Option 'warn_on_dynamic_names' must be a boolean")

        if not isinstance(self.max_workers, int) or isinstance(self.max_workers, bool):
            raise ValueError("Option 'max_workers' must be an integer")
        if self.max_workers < 1:
            raise ValueError("Option 'max_workers' must be a positive integer")

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level: {self.log_level}. Expected one of {VALID_LOG_LEVELS}"
            )

        # Surfaces unknown keys and bad patterns early
        self.create_whitelist()

        logger.debug(f"Configuration for prefix '{self.prefix}' validated successfully")

    @property
    def normalized_prefix(self) -> str:
        return validate_prefix(self.prefix)

    @property
    def unsupported_construct_policy(self) -> UnsupportedConstructPolicy:
        return UnsupportedConstructPolicy(self.unsupported_construct)

    def create_whitelist(self) -> Whitelist:
        """Build the immutable exclusion policy from the ``whitelist`` options."""
        return Whitelist.from_dict(self.whitelist)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "prefix": self.prefix,
            "file_extensions": list(self.file_extensions),
            "unsupported_construct": self.unsupported_construct,
            "warn_on_dynamic_names": self.warn_on_dynamic_names,
            "max_workers": self.max_workers,
            "log_level": self.log_level,
            "whitelist": dict(self.whitelist),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ScoperConfig:
        """Create configuration from dictionary.

        Raises:
            KeyError: If required fields are missing
        """
        try:
            config = cls(
                prefix=data["prefix"],
                version=data.get("version", "1.0"),
                file_extensions=list(data.get("file_extensions", DEFAULT_FILE_EXTENSIONS)),
                unsupported_construct=data.get(
                    "unsupported_construct", UnsupportedConstructPolicy.SKIP.value
                ),
                warn_on_dynamic_names=data.get("warn_on_dynamic_names", True),
                max_workers=data.get("max_workers", 4),
                log_level=data.get("log_level", "INFO"),
                whitelist=dict(data.get("whitelist", {})),
            )
        except KeyError as e:
            raise KeyError(f"Missing required field in configuration: {e}")

        logger.debug(f"Created configuration from dictionary for prefix '{config.prefix}'")
        return config
