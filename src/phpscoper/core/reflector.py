"""Native symbol lookup.

The reflector answers one question: is this name part of PHP itself? It is
built once from the embedded tables in
:mod:`phpscoper.core.native_symbols` and never changes afterwards, so a
single instance can be shared by every worker of a run.

Example:
    >>> reflector = Reflector.create_with_php_symbols()
    >>> reflector.is_native("datetime", SymbolKind.CLASS)
    True
    >>> reflector.is_native("php_eol", SymbolKind.CONSTANT)
    False
"""

from __future__ import annotations

from typing import Iterable

from phpscoper.core.native_symbols import (
    CASE_INSENSITIVE_CONSTANTS,
    PHP_CLASSES,
    PHP_CONSTANTS,
    PHP_FUNCTIONS,
)
from phpscoper.core.symbols import SymbolKind, normalize_name, strip_leading_separator


class Reflector:
    """Read-only table of built-in classes, functions and constants.

    Lookups are keyed by the normalised name (see
    :func:`~phpscoper.core.symbols.normalize_name`), so class and function
    checks are case-insensitive while constant checks are case-sensitive,
    apart from ``true``, ``false`` and ``null``.
    """

    def __init__(
        self,
        classes: Iterable[str] = (),
        functions: Iterable[str] = (),
        constants: Iterable[str] = (),
    ) -> None:
        self._tables: dict[SymbolKind, frozenset[str]] = {
            SymbolKind.CLASS: self._normalize(classes, SymbolKind.CLASS),
            SymbolKind.FUNCTION: self._normalize(functions, SymbolKind.FUNCTION),
            SymbolKind.CONSTANT: self._normalize(constants, SymbolKind.CONSTANT),
        }
        self._raw = {
            SymbolKind.CLASS: tuple(classes),
            SymbolKind.FUNCTION: tuple(functions),
            SymbolKind.CONSTANT: tuple(constants),
        }

    @staticmethod
    def _normalize(names: Iterable[str], kind: SymbolKind) -> frozenset[str]:
        return frozenset(normalize_name(name, kind) for name in names)

    @classmethod
    def create_empty(cls) -> "Reflector":
        """A reflector that knows no symbols; every user name gets prefixed."""
        return cls()

    @classmethod
    def create_with_php_symbols(cls) -> "Reflector":
        """A reflector loaded with the embedded PHP built-in tables."""
        return cls(PHP_CLASSES, PHP_FUNCTIONS, PHP_CONSTANTS)

    def with_additional_symbols(
        self,
        classes: Iterable[str] = (),
        functions: Iterable[str] = (),
        constants: Iterable[str] = (),
    ) -> "Reflector":
        """Return a new reflector extended with extension or polyfill symbols."""
        return Reflector(
            (*self._raw[SymbolKind.CLASS], *classes),
            (*self._raw[SymbolKind.FUNCTION], *functions),
            (*self._raw[SymbolKind.CONSTANT], *constants),
        )

    def is_native(self, name: str, kind: SymbolKind) -> bool:
        """Check whether ``name`` is a built-in symbol of the given kind.

        Namespaces are never native.
        """
        if kind is SymbolKind.NAMESPACE:
            return False

        if kind is SymbolKind.CONSTANT:
            bare = strip_leading_separator(name)
            if bare.lower() in CASE_INSENSITIVE_CONSTANTS:
                return True

        return normalize_name(name, kind) in self._tables[kind]

    def is_native_class(self, name: str) -> bool:
        return self.is_native(name, SymbolKind.CLASS)

    def is_native_function(self, name: str) -> bool:
        return self.is_native(name, SymbolKind.FUNCTION)

    def is_native_constant(self, name: str) -> bool:
        return self.is_native(name, SymbolKind.CONSTANT)

    def __len__(self) -> int:
        return sum(len(table) for table in self._tables.values())
