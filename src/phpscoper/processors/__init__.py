"""Public API for PHP parsing and traversal with lazy imports.

Importing this package does not load the tree-sitter grammar; it is loaded
the first time one of the exported names is used.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORT_MAP: dict[str, tuple[str, str]] = {
    "PhpParser": (
        "phpscoper.processors.php_parser",
        "PhpParser",
    ),
    "ParseError": (
        "phpscoper.processors.php_parser",
        "ParseError",
    ),
    "SourceTree": (
        "phpscoper.processors.php_parser",
        "SourceTree",
    ),
    "SourcePrinter": (
        "phpscoper.processors.php_parser",
        "SourcePrinter",
    ),
    "NodeTraverser": (
        "phpscoper.processors.node_traverser",
        "NodeTraverser",
    ),
    "NodeVisitor": (
        "phpscoper.processors.node_traverser",
        "NodeVisitor",
    ),
    "TraversalContext": (
        "phpscoper.processors.node_traverser",
        "TraversalContext",
    ),
    "UnsupportedConstructError": (
        "phpscoper.processors.node_traverser",
        "UnsupportedConstructError",
    ),
    "VisitAction": (
        "phpscoper.processors.node_traverser",
        "VisitAction",
    ),
    "NamespaceStmtPrefixer": (
        "phpscoper.processors.namespace_visitors",
        "NamespaceStmtPrefixer",
    ),
    "UseStmtPrefixer": (
        "phpscoper.processors.namespace_visitors",
        "UseStmtPrefixer",
    ),
    "NameStmtPrefixer": (
        "phpscoper.processors.name_visitors",
        "NameStmtPrefixer",
    ),
    "StringScalarPrefixer": (
        "phpscoper.processors.string_visitors",
        "StringScalarPrefixer",
    ),
    "EvalPrefixer": (
        "phpscoper.processors.string_visitors",
        "EvalPrefixer",
    ),
    "TraverserFactory": (
        "phpscoper.processors.traverser_factory",
        "TraverserFactory",
    ),
}

__all__ = list(_EXPORT_MAP.keys())


def __getattr__(name: str) -> Any:
    """Resolve package exports lazily."""
    target = _EXPORT_MAP.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_name, attr_name = target
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value