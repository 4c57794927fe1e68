"""Exclusion policy: which user symbols stay unprefixed.

A :class:`Whitelist` is built once per run and consulted for every symbol.
It combines exact names, regular expressions and namespace exclusions per
symbol kind, plus three flags that expose symbols of the global namespace
(typically polyfills that must stay callable under their real name).

Regular expressions are applied with :func:`re.search` against the name
without its leading ``\\``. Both plain Python patterns and PHP-style
delimited patterns (``/^Acme\\\\Polyfill/i``) are accepted, so
configuration copied from a PHP project keeps working.

Example:
    >>> whitelist = Whitelist.create(
    ...     excluded_namespaces=["PHPUnit"],
    ...     classes=["Acme\\Kernel"],
    ...     expose_global_functions=True,
    ... )
    >>> whitelist.is_excluded("PHPUnit\\Framework\\TestCase", SymbolKind.CLASS)
    True
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from phpscoper.core.symbols import (
    NAMESPACE_SEPARATOR,
    SymbolKind,
    is_global,
    namespace_of,
    normalize_name,
    strip_leading_separator,
)
from phpscoper.utils.logger import get_logger

logger = get_logger("phpscoper.core.whitelist")

# Regex delimiters accepted for PHP-style patterns
PATTERN_DELIMITERS = "/#~!@%"

_PHP_FLAG_MAP = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
    "u": 0,
}

_LIST_KEYS = (
    "excluded_namespaces",
    "namespace_patterns",
    "classes",
    "class_patterns",
    "functions",
    "function_patterns",
    "constants",
    "constant_patterns",
)

_FLAG_KEYS = (
    "expose_global_classes",
    "expose_global_functions",
    "expose_global_constants",
)


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a plain or PHP-delimited regular expression.

    Raises:
        ValueError: If the pattern does not compile.
    """
    source = pattern
    flags = 0
    if len(pattern) > 2 and pattern[0] in PATTERN_DELIMITERS:
        delimiter = pattern[0]
        end = pattern.rfind(delimiter)
        trailing = pattern[end + 1:]
        if end > 0 and all(flag in _PHP_FLAG_MAP for flag in trailing):
            source = pattern[1:end]
            for flag in trailing:
                flags |= _PHP_FLAG_MAP[flag]

    try:
        return re.compile(source, flags)
    except re.error as e:
        raise ValueError(f"Invalid whitelist pattern {pattern!r}: {e}") from e


def _normalize_namespace(namespace: str) -> str:
    return namespace.strip(NAMESPACE_SEPARATOR).lower()


@dataclass(frozen=True)
class Whitelist:
    """Immutable exclusion policy.

    Attributes:
        excluded_namespaces: Namespaces (and their sub-namespaces) left untouched,
            stored lower-cased without surrounding separators.
        namespace_patterns: Regexes matched against namespace names.
        classes: Exact class-like names kept unprefixed (normalised).
        class_patterns: Regexes matched against class names.
        functions: Exact function names kept unprefixed (normalised).
        function_patterns: Regexes matched against function names.
        constants: Exact constant names kept unprefixed (normalised).
        constant_patterns: Regexes matched against constant names.
        expose_global_classes: Keep references to global user classes as is.
        expose_global_functions: Keep references to global user functions as is.
        expose_global_constants: Keep references to global user constants as is.
    """

    excluded_namespaces: frozenset[str] = frozenset()
    namespace_patterns: tuple[str, ...] = ()
    classes: frozenset[str] = frozenset()
    class_patterns: tuple[str, ...] = ()
    functions: frozenset[str] = frozenset()
    function_patterns: tuple[str, ...] = ()
    constants: frozenset[str] = frozenset()
    constant_patterns: tuple[str, ...] = ()
    expose_global_classes: bool = False
    expose_global_functions: bool = False
    expose_global_constants: bool = False
    _compiled: dict[str, tuple[re.Pattern[str], ...]] = field(
        default_factory=dict, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        compiled = {
            "namespace": tuple(compile_pattern(p) for p in self.namespace_patterns),
            SymbolKind.CLASS.value: tuple(compile_pattern(p) for p in self.class_patterns),
            SymbolKind.FUNCTION.value: tuple(compile_pattern(p) for p in self.function_patterns),
            SymbolKind.CONSTANT.value: tuple(compile_pattern(p) for p in self.constant_patterns),
        }
        object.__setattr__(self, "_compiled", compiled)

    @classmethod
    def create(
        cls,
        excluded_namespaces: Iterable[str] = (),
        namespace_patterns: Iterable[str] = (),
        classes: Iterable[str] = (),
        class_patterns: Iterable[str] = (),
        functions: Iterable[str] = (),
        function_patterns: Iterable[str] = (),
        constants: Iterable[str] = (),
        constant_patterns: Iterable[str] = (),
        expose_global_classes: bool = False,
        expose_global_functions: bool = False,
        expose_global_constants: bool = False,
    ) -> "Whitelist":
        """Build a whitelist from raw, user-spelled names.

        Class entries of the form ``Acme\\*`` are treated as a namespace
        exclusion for ``Acme``.
        """
        namespaces = {_normalize_namespace(ns) for ns in excluded_namespaces}
        exact_classes = set()
        for name in classes:
            if name.endswith(NAMESPACE_SEPARATOR + "*"):
                namespaces.add(_normalize_namespace(name[:-2]))
            else:
                exact_classes.add(normalize_name(name, SymbolKind.CLASS))

        return cls(
            excluded_namespaces=frozenset(namespaces),
            namespace_patterns=tuple(namespace_patterns),
            classes=frozenset(exact_classes),
            class_patterns=tuple(class_patterns),
            functions=frozenset(normalize_name(n, SymbolKind.FUNCTION) for n in functions),
            function_patterns=tuple(function_patterns),
            constants=frozenset(normalize_name(n, SymbolKind.CONSTANT) for n in constants),
            constant_patterns=tuple(constant_patterns),
            expose_global_classes=expose_global_classes,
            expose_global_functions=expose_global_functions,
            expose_global_constants=expose_global_constants,
        )

    @classmethod
    def create_empty(cls) -> "Whitelist":
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Whitelist":
        """Create a whitelist from configuration data.

        Keys may use ``snake_case`` or the ``kebab-case`` spelling found in
        PHP configuration files.

        Raises:
            ValueError: If a key is unknown or a value has the wrong type.
        """
        values: dict[str, Any] = {}
        for raw_key, value in data.items():
            key = raw_key.replace("-", "_")
            if key in _LIST_KEYS:
                if isinstance(value, str) or not isinstance(value, (list, tuple, set, frozenset)):
                    raise ValueError(f"Whitelist option '{raw_key}' must be a list of strings")
                if not all(isinstance(item, str) for item in value):
                    raise ValueError(f"Whitelist option '{raw_key}' must be a list of strings")
                values[key] = list(value)
            elif key in _FLAG_KEYS:
                if not isinstance(value, bool):
                    raise ValueError(f"Whitelist option '{raw_key}' must be a boolean")
                values[key] = value
            else:
                raise ValueError(
                    f"Unknown whitelist option '{raw_key}'. "
                    f"Valid options: {sorted(_LIST_KEYS + _FLAG_KEYS)}"
                )

        whitelist = cls.create(**values)
        logger.debug(
            f"Whitelist loaded: {len(whitelist.excluded_namespaces)} namespaces, "
            f"{len(whitelist.classes)} classes, {len(whitelist.functions)} functions, "
            f"{len(whitelist.constants)} constants"
        )
        return whitelist

    def to_dict(self) -> dict[str, Any]:
        """Serialise the policy (normalised names, sorted for stable output)."""
        return {
            "excluded_namespaces": sorted(self.excluded_namespaces),
            "namespace_patterns": list(self.namespace_patterns),
            "classes": sorted(self.classes),
            "class_patterns": list(self.class_patterns),
            "functions": sorted(self.functions),
            "function_patterns": list(self.function_patterns),
            "constants": sorted(self.constants),
            "constant_patterns": list(self.constant_patterns),
            "expose_global_classes": self.expose_global_classes,
            "expose_global_functions": self.expose_global_functions,
            "expose_global_constants": self.expose_global_constants,
        }

    def is_namespace_excluded(self, namespace: str) -> bool:
        """True if ``namespace`` or one of its parents is excluded."""
        normalized = _normalize_namespace(namespace)
        for excluded in self.excluded_namespaces:
            if normalized == excluded:
                return True
            if excluded and normalized.startswith(excluded + NAMESPACE_SEPARATOR):
                return True

        bare = strip_leading_separator(namespace)
        return any(p.search(bare) for p in self._compiled["namespace"])

    def is_excluded(self, name: str, kind: SymbolKind) -> bool:
        """True if the symbol is whitelisted by name, pattern or namespace."""
        if kind is SymbolKind.NAMESPACE:
            return self.is_namespace_excluded(name)

        exact = {
            SymbolKind.CLASS: self.classes,
            SymbolKind.FUNCTION: self.functions,
            SymbolKind.CONSTANT: self.constants,
        }[kind]
        if normalize_name(name, kind) in exact:
            return True

        bare = strip_leading_separator(name)
        if any(p.search(bare) for p in self._compiled[kind.value]):
            return True

        namespace = namespace_of(name)
        if namespace or "" in self.excluded_namespaces:
            return self.is_namespace_excluded(namespace)
        return False

    def is_exposed_global(self, name: str, kind: SymbolKind) -> bool:
        """True if ``name`` is a global symbol whose kind is exposed by a flag."""
        if not is_global(name):
            return False
        if kind is SymbolKind.CLASS:
            return self.expose_global_classes
        if kind is SymbolKind.FUNCTION:
            return self.expose_global_functions
        if kind is SymbolKind.CONSTANT:
            return self.expose_global_constants
        return False
