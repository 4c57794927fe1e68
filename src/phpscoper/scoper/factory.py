"""Assembles the default scoper chain."""

from __future__ import annotations

from typing import Optional

from phpscoper.core.config import DEFAULT_FILE_EXTENSIONS, ScoperConfig, UnsupportedConstructPolicy
from phpscoper.core.reflector import Reflector
from phpscoper.core.symbol_registry import SymbolsRegistry
from phpscoper.processors.php_parser import PhpParser
from phpscoper.processors.traverser_factory import TraverserFactory
from phpscoper.scoper.base import NullScoper, Scoper
from phpscoper.scoper.patch_scoper import PatchScoper
from phpscoper.scoper.php_scoper import PhpScoper
from phpscoper.utils.logger import ROOT_LOGGER_NAME, get_logger, setup_logger

logger = get_logger("phpscoper.scoper.factory")


def create_scoper(
    config: Optional[ScoperConfig] = None,
    registry: Optional[SymbolsRegistry] = None,
    reflector: Optional[Reflector] = None,
) -> Scoper:
    """Build ``PatchScoper(PhpScoper(NullScoper()))``.

    Args:
        config: Run configuration; only the file, policy and log level
            options are used here, the prefix and whitelist are passed to
            ``scope``.
        registry: Registry shared by every file of the run. Pass the same
            one to every scoper of a run, or read it back from the
            returned scoper's chain when omitted.
        reflector: Native symbol table, defaults to the embedded PHP one.

    Example:
        >>> registry = SymbolsRegistry()
        >>> scoper = create_scoper(ScoperConfig(prefix="Humbug"), registry)
        >>> scoper.scope("a.php", "<?php\\n\\nnew Foo();", "Humbug", [], Whitelist.create_empty())
        '<?php\\n\\nnamespace Humbug;\\n\\nnew Foo();\\n'
    """
    if config is not None:
        config.validate()
        setup_logger(ROOT_LOGGER_NAME, level=config.log_level)
        file_extensions = config.file_extensions
        unsupported = config.unsupported_construct_policy
        warn_on_dynamic_names = config.warn_on_dynamic_names
    else:
        file_extensions = DEFAULT_FILE_EXTENSIONS
        unsupported = UnsupportedConstructPolicy.SKIP
        warn_on_dynamic_names = True

    php_scoper = PhpScoper(
        parser=PhpParser(),
        decorated_scoper=NullScoper(),
        traverser_factory=TraverserFactory(),
        registry=registry if registry is not None else SymbolsRegistry(),
        reflector=reflector,
        file_extensions=file_extensions,
        unsupported_construct=unsupported,
        warn_on_dynamic_names=warn_on_dynamic_names,
    )
    logger.debug(
        f"Created scoper for extensions {list(file_extensions)} "
        f"(unsupported constructs: {unsupported.value})"
    )
    return PatchScoper(php_scoper)
