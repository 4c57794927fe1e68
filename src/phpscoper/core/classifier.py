"""Symbol classification: should this name be prefixed?

:class:`SymbolClassifier` joins the native symbol table with the user's
exclusion policy. It is a pure function of those two inputs and the query,
so one instance can be shared across threads.

Example:
    >>> classifier = SymbolClassifier(
    ...     Reflector.create_with_php_symbols(),
    ...     Whitelist.create(excluded_namespaces=["PHPUnit"]),
    ... )
    >>> classifier.classify("Exception", SymbolKind.CLASS)
    <Classification.KEEP_NATIVE: 'keep_native'>
    >>> classifier.classify("PHPUnit\\Framework\\Assert", SymbolKind.CLASS)
    <Classification.KEEP_WHITELISTED: 'keep_whitelisted'>
    >>> classifier.classify("Acme\\Kernel", SymbolKind.CLASS)
    <Classification.RENAME: 'rename'>
"""

from __future__ import annotations

from enum import Enum

from phpscoper.core.reflector import Reflector
from phpscoper.core.symbols import SymbolKind, is_global, strip_leading_separator
from phpscoper.core.whitelist import Whitelist


class Classification(Enum):
    """Outcome of classifying one symbol."""

    RENAME = "rename"
    KEEP_NATIVE = "keep_native"
    KEEP_WHITELISTED = "keep_whitelisted"

    @property
    def keeps(self) -> bool:
        return self is not Classification.RENAME


class SymbolClassifier:
    """Decides per symbol between prefixing and leaving it alone.

    Attributes:
        reflector: Native symbol table.
        whitelist: User exclusion policy.
    """

    def __init__(self, reflector: Reflector, whitelist: Whitelist) -> None:
        self.reflector = reflector
        self.whitelist = whitelist

    def classify(self, name: str, kind: SymbolKind) -> Classification:
        """Classify ``name`` (with or without leading ``\\``) of the given kind.

        Native symbols only live in the global namespace, so a namespaced
        ``Acme\\Exception`` is never native.
        """
        name = strip_leading_separator(name)

        if kind is not SymbolKind.NAMESPACE and is_global(name):
            if self.reflector.is_native(name, kind):
                return Classification.KEEP_NATIVE

        if self.whitelist.is_excluded(name, kind):
            return Classification.KEEP_WHITELISTED

        if self.whitelist.is_exposed_global(name, kind):
            return Classification.KEEP_WHITELISTED

        return Classification.RENAME

    def is_exposed(self, name: str, kind: SymbolKind) -> bool:
        """True for user symbols declared under the prefix but aliased back.

        Exposed symbols are global user symbols covered by one of the
        ``expose_global_*`` flags: their references keep the original
        spelling, their declarations are still recorded so an alias can be
        generated for them.
        """
        name = strip_leading_separator(name)
        if self.reflector.is_native(name, kind):
            return False
        if self.whitelist.is_excluded(name, kind):
            return False
        return self.whitelist.is_exposed_global(name, kind)

    def should_rename(self, name: str, kind: SymbolKind) -> bool:
        return self.classify(name, kind) is Classification.RENAME
