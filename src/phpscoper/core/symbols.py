"""Symbol kinds and PHP name helpers.

PHP resolves namespaces, classes and functions case-insensitively while
constant names are case-sensitive (only their namespace part is not).
Everything that compares names goes through :func:`normalize_name` so the
registry, the whitelist and the native symbol table agree on identity.

Example:
    >>> normalize_name("Acme\\Foo", SymbolKind.CLASS)
    'acme\\foo'
    >>> normalize_name("Acme\\FOO_BAR", SymbolKind.CONSTANT)
    'acme\\FOO_BAR'
    >>> prefix_name("Humbug", "\\Acme\\Foo")
    'Humbug\\Acme\\Foo'
"""

from __future__ import annotations

import re
from enum import Enum

NAMESPACE_SEPARATOR = "\\"

# Names that look like class references but never denote a declared symbol
SPECIAL_CLASS_NAMES = frozenset({"self", "static", "parent"})

# Type keywords that may show up where a class name is expected
RESERVED_TYPE_NAMES = frozenset({
    "array", "bool", "callable", "false", "float", "int", "iterable",
    "mixed", "never", "null", "object", "string", "true", "void",
})

# Parsed like function calls but cannot be written fully qualified
LANGUAGE_CONSTRUCTS = frozenset({
    "__halt_compiler", "array", "die", "echo", "empty", "eval", "exit", "include",
    "include_once", "isset", "list", "print", "require", "require_once", "unset",
})

MAGIC_CONSTANT_PATTERN = re.compile(r"^__[A-Za-z]+__$")

_IDENTIFIER = r"[A-Za-z_\x80-\uffff][A-Za-z0-9_\x80-\uffff]*"
SYMBOL_NAME_PATTERN = re.compile(rf"^\\?{_IDENTIFIER}(?:\\{_IDENTIFIER})*$")


class SymbolKind(Enum):
    """The four kinds of symbol a PHP file can declare."""

    NAMESPACE = "namespace"
    CLASS = "class"
    FUNCTION = "function"
    CONSTANT = "constant"

    @property
    def case_sensitive(self) -> bool:
        """Whether the short name of this kind is compared case-sensitively."""
        return self is SymbolKind.CONSTANT


def strip_leading_separator(name: str) -> str:
    """Drop the leading ``\\`` of a fully-qualified name."""
    return name[1:] if name.startswith(NAMESPACE_SEPARATOR) else name


def split_name(name: str) -> tuple[str, str]:
    """Split ``A\\B\\C`` into its namespace ``A\\B`` and short name ``C``."""
    name = strip_leading_separator(name)
    if NAMESPACE_SEPARATOR not in name:
        return "", name
    namespace, _, short_name = name.rpartition(NAMESPACE_SEPARATOR)
    return namespace, short_name


def namespace_of(name: str) -> str:
    """Return the namespace part of a name, ``""`` for the global namespace."""
    return split_name(name)[0]


def is_global(name: str) -> bool:
    return NAMESPACE_SEPARATOR not in strip_leading_separator(name)


def normalize_name(name: str, kind: SymbolKind) -> str:
    """Return the lookup key PHP itself would use for ``name``."""
    name = strip_leading_separator(name)
    if not kind.case_sensitive:
        return name.lower()
    namespace, short_name = split_name(name)
    if not namespace:
        return short_name
    return f"{namespace.lower()}{NAMESPACE_SEPARATOR}{short_name}"


def join_name(*parts: str) -> str:
    """Join name fragments with ``\\``, skipping empty ones."""
    return NAMESPACE_SEPARATOR.join(
        part.strip(NAMESPACE_SEPARATOR) for part in parts if part.strip(NAMESPACE_SEPARATOR)
    )


def prefix_name(prefix: str, name: str) -> str:
    """Return ``name`` moved under ``prefix`` (without leading separator)."""
    return join_name(prefix, strip_leading_separator(name))


def is_prefixed(prefix: str, name: str) -> bool:
    """True when ``name`` already lives under ``prefix``."""
    name = strip_leading_separator(name).lower()
    prefix = prefix.lower()
    return name == prefix or name.startswith(prefix + NAMESPACE_SEPARATOR)


def is_symbol_name(value: str) -> bool:
    """True when ``value`` is a syntactically valid (possibly qualified) PHP name."""
    return bool(SYMBOL_NAME_PATTERN.match(value))


def is_special_class_name(name: str) -> bool:
    lowered = name.lower()
    return lowered in SPECIAL_CLASS_NAMES or lowered in RESERVED_TYPE_NAMES


def is_language_construct(name: str, kind: SymbolKind) -> bool:
    """True for names that look like symbols but are syntax (``isset``, ``__DIR__``)."""
    if kind is SymbolKind.FUNCTION:
        return name.lower() in LANGUAGE_CONSTRUCTS
    if kind is SymbolKind.CONSTANT:
        return bool(MAGIC_CONSTANT_PATTERN.match(name))
    return False
