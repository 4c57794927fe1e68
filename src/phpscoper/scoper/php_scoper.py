"""Scoper for PHP source files.

:class:`PhpScoper` takes a file through these states::

    NOT_SOURCE                      (delegated to the decorated scoper)
    PARSING -> PARSED -> TRAVERSING -> SERIALIZED
       |
       v
    PARSE_FAILED                    (ParseError raised to the caller)

A file is PHP when its extension is one of the configured ones. A file
with another extension is not. A file without extension is PHP when it
starts with ``<?php`` (after whitespace) or with a ``#!`` line naming a PHP
interpreter followed by ``<?php``. The shebang line is not PHP syntax: it
is taken off before parsing and put back verbatim on the output.
"""

from __future__ import annotations

import re
from enum import Enum
from pathlib import PurePosixPath
from typing import Optional, Sequence

from phpscoper.core.classifier import SymbolClassifier
from phpscoper.core.config import DEFAULT_FILE_EXTENSIONS, UnsupportedConstructPolicy, validate_prefix
from phpscoper.core.reflector import Reflector
from phpscoper.core.symbol_registry import SymbolsRegistry
from phpscoper.core.whitelist import Whitelist
from phpscoper.processors.node_traverser import TraversalContext
from phpscoper.processors.php_parser import ParseError, PhpParser, SourcePrinter
from phpscoper.processors.traverser_factory import TraverserFactory
from phpscoper.scoper.base import Patcher, Scoper
from phpscoper.utils.logger import get_logger
from phpscoper.utils.path_utils import has_extension, matches_extension

logger = get_logger("phpscoper.scoper.php_scoper")

SHEBANG_PATTERN = re.compile(r"^#![^\r\n]*(?:\r\n|\n|\r)")
PHP_INTERPRETER_PATTERN = re.compile(r"^php(?:\d+(?:\.\d+)*)?$")
OPEN_TAG = "<?php"


class ScopingState(Enum):
    """States a file goes through in :meth:`PhpScoper.scope`."""

    NOT_SOURCE = "not_source"
    PARSING = "parsing"
    PARSED = "parsed"
    TRAVERSING = "traversing"
    SERIALIZED = "serialized"
    PARSE_FAILED = "parse_failed"


def split_shebang(contents: str) -> tuple[str, str]:
    """Split ``contents`` into its ``#!`` line (with line break) and the rest."""
    match = SHEBANG_PATTERN.match(contents)
    if match is None:
        return "", contents
    return match.group(0), contents[match.end():]


def has_php_shebang(contents: str) -> bool:
    """True for a ``#!`` line naming a PHP interpreter, followed by ``<?php``."""
    shebang, rest = split_shebang(contents)
    if not shebang or not rest.startswith(OPEN_TAG):
        return False
    tokens = shebang[2:].split()
    return any(PHP_INTERPRETER_PATTERN.match(PurePosixPath(token).name) for token in tokens)


class PhpScoper(Scoper):
    """Prefixes the symbols of PHP files, delegating other files.

    Attributes:
        file_extensions: Extensions always treated as PHP.
    """

    def __init__(
        self,
        parser: PhpParser,
        decorated_scoper: Scoper,
        traverser_factory: TraverserFactory,
        registry: SymbolsRegistry,
        reflector: Optional[Reflector] = None,
        printer: Optional[SourcePrinter] = None,
        file_extensions: Sequence[str] = tuple(DEFAULT_FILE_EXTENSIONS),
        unsupported_construct: UnsupportedConstructPolicy = UnsupportedConstructPolicy.SKIP,
        warn_on_dynamic_names: bool = True,
    ) -> None:
        self._parser = parser
        self._decorated = decorated_scoper
        self._traverser_factory = traverser_factory
        self._registry = registry
        self._reflector = reflector or Reflector.create_with_php_symbols()
        self._printer = printer or SourcePrinter()
        self.file_extensions = tuple(file_extensions)
        self._unsupported_construct = unsupported_construct
        self._warn_on_dynamic_names = warn_on_dynamic_names

    @property
    def registry(self) -> SymbolsRegistry:
        return self._registry

    def is_php_file(self, file_path: str, contents: str) -> bool:
        if matches_extension(file_path, self.file_extensions):
            return True
        if has_extension(file_path):
            return False
        return contents.lstrip().startswith(OPEN_TAG) or has_php_shebang(contents)

    def scope(
        self,
        file_path: str,
        contents: str,
        prefix: str,
        patchers: Sequence[Patcher],
        whitelist: Whitelist,
    ) -> str:
        """Scope ``contents`` if it is PHP, otherwise delegate.

        Raises:
            ParseError: If the file is PHP but not syntactically valid.
            RegistryConflictError: If a symbol was renamed differently before.
            UnsupportedConstructError: On unclassifiable syntax with the
                ``fail`` policy.
        """
        if not self.is_php_file(file_path, contents):
            logger.debug(f"{file_path}: {ScopingState.NOT_SOURCE.name}, delegating")
            return self._decorated.scope(file_path, contents, prefix, patchers, whitelist)

        prefix = validate_prefix(prefix)
        shebang, code = split_shebang(contents)

        state = self._transition(file_path, None, ScopingState.PARSING)
        try:
            tree = self._parser.parse(code)
        except ParseError as e:
            self._transition(file_path, state, ScopingState.PARSE_FAILED)
            logger.error(f"{file_path}: {e.message}")
            raise
        state = self._transition(file_path, state, ScopingState.PARSED)

        classifier = SymbolClassifier(self._reflector, whitelist)
        traverser = self._traverser_factory.create(self, prefix, classifier, tree)
        context = TraversalContext(
            file_path=file_path,
            tree=tree,
            registry=self._registry,
            unsupported_policy=self._unsupported_construct,
            warn_on_dynamic_names=self._warn_on_dynamic_names,
        )

        state = self._transition(file_path, state, ScopingState.TRAVERSING)
        traverser.traverse(tree, context)

        scoped = shebang + self._printer.print(tree)
        self._transition(file_path, state, ScopingState.SERIALIZED)
        logger.debug(f"{file_path}: {len(context.renames)} symbols prefixed")
        return scoped

    @staticmethod
    def _transition(
        file_path: str, old_state: Optional[ScopingState], new_state: ScopingState
    ) -> ScopingState:
        old_name = old_state.name if old_state is not None else "START"
        logger.debug(f"{file_path}: {old_name} -> {new_state.name}")
        return new_state
