"""Visitors for symbol names hidden in string literals.

PHP code often names classes and functions at runtime: ``class_exists('Acme\\Foo')``,
``new ReflectionClass('Acme\\Foo')``, ``call_user_func('Acme\\Foo::create')``
or ``eval('...')``. Only literal strings can be rewritten; anything built at
runtime is reported and left as is.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from phpscoper.core.classifier import SymbolClassifier
from phpscoper.core.symbols import NAMESPACE_SEPARATOR, SymbolKind
from phpscoper.processors.node_traverser import TraversalContext, VisitAction
from phpscoper.processors.prefixing_visitor import NAME_NODE_TYPES, PrefixingVisitor, resolve_name
from phpscoper.utils.logger import get_logger

if TYPE_CHECKING:
    from phpscoper.scoper.base import Scoper

logger = get_logger("phpscoper.processors.string_visitors")

_CLASS = SymbolKind.CLASS
_FUNCTION = SymbolKind.FUNCTION
_CONSTANT = SymbolKind.CONSTANT

# Functions taking symbol names: argument position -> kind
REFLECTION_FUNCTIONS: dict[str, dict[int, SymbolKind]] = {
    "class_exists": {0: _CLASS},
    "interface_exists": {0: _CLASS},
    "trait_exists": {0: _CLASS},
    "enum_exists": {0: _CLASS},
    "is_a": {1: _CLASS},
    "is_subclass_of": {1: _CLASS},
    "class_implements": {0: _CLASS},
    "class_parents": {0: _CLASS},
    "class_uses": {0: _CLASS},
    "get_class_methods": {0: _CLASS},
    "get_class_vars": {0: _CLASS},
    "get_parent_class": {0: _CLASS},
    "method_exists": {0: _CLASS},
    "property_exists": {0: _CLASS},
    "class_alias": {0: _CLASS, 1: _CLASS},
    "function_exists": {0: _FUNCTION},
    "is_callable": {0: _FUNCTION},
    "call_user_func": {0: _FUNCTION},
    "call_user_func_array": {0: _FUNCTION},
    "forward_static_call": {0: _FUNCTION},
    "forward_static_call_array": {0: _FUNCTION},
    "register_shutdown_function": {0: _FUNCTION},
    "spl_autoload_register": {0: _FUNCTION},
    "array_map": {0: _FUNCTION},
    "array_filter": {1: _FUNCTION},
    "array_walk": {1: _FUNCTION},
    "usort": {1: _FUNCTION},
    "uasort": {1: _FUNCTION},
    "uksort": {1: _FUNCTION},
    "define": {0: _CONSTANT},
    "defined": {0: _CONSTANT},
    "constant": {0: _CONSTANT},
}

# Reflection classes whose constructor takes a symbol name
REFLECTION_CLASSES: dict[str, dict[int, SymbolKind]] = {
    "reflectionclass": {0: _CLASS},
    "reflectionenum": {0: _CLASS},
    "reflectionobject": {0: _CLASS},
    "reflectionmethod": {0: _CLASS},
    "reflectionproperty": {0: _CLASS},
    "reflectionclassconstant": {0: _CLASS},
    "reflectionfunction": {0: _FUNCTION},
}

# Argument node types that may carry a name computed at runtime
DYNAMIC_VALUE_TYPES = frozenset({
    "variable_name",
    "binary_expression",
    "encapsed_string",
    "heredoc",
    "member_access_expression",
    "subscript_expression",
})

_STRING_CONTENT_TYPES = frozenset({"string_content", "string_value", "escape_sequence"})

# Escapes interpreted by double-quoted strings, beyond \\ \" and \$
_INTERPRETED_ESCAPES = "nrtvef01234567xu"


@dataclass(frozen=True)
class StringLiteral:
    """A decoded single- or double-quoted string literal.

    Attributes:
        value: The runtime value of the literal.
        quote: ``'`` or ``"``.
        binary_prefix: ``b``/``B`` prefix, if any.
        doubled_separators: Whether backslashes were written escaped (``\\\\``).
    """

    value: str
    quote: str
    binary_prefix: str = ""
    doubled_separators: bool = False

    def encode(self, value: str) -> str:
        """Spell ``value`` as a literal in the same style."""
        if self.quote == "'":
            if self.doubled_separators:
                value = value.replace("\\", "\\\\")
            body = value.replace("'", "\\'")
        else:
            body = value.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")
        return f"{self.binary_prefix}{self.quote}{body}{self.quote}"


def _unescape(body: str, quote: str) -> Optional[str]:
    escapable = "\\'" if quote == "'" else '\\"$'
    result = []
    index = 0
    while index < len(body):
        char = body[index]
        if char == "\\" and index + 1 < len(body):
            following = body[index + 1]
            if following in escapable:
                result.append(following)
                index += 2
                continue
            if quote == '"' and following in _INTERPRETED_ESCAPES:
                return None
        result.append(char)
        index += 1
    return "".join(result)


def read_string_literal(node: Any, text: str) -> Optional[StringLiteral]:
    """Decode ``node`` if it is a plain string literal without interpolation."""
    if node.type not in ("string", "encapsed_string"):
        return None
    if any(child.type not in _STRING_CONTENT_TYPES for child in node.named_children):
        return None

    binary_prefix = ""
    if text[:1] in ("b", "B"):
        binary_prefix, text = text[0], text[1:]
    if len(text) < 2 or text[0] not in ("'", '"') or text[-1] != text[0]:
        return None

    quote = text[0]
    body = text[1:-1]
    value = _unescape(body, quote)
    if value is None:
        return None

    return StringLiteral(
        value=value,
        quote=quote,
        binary_prefix=binary_prefix,
        doubled_separators="\\\\" in body,
    )


def argument_values(call: Any) -> list[Any]:
    """Positional argument expressions of a call, up to the first named one."""
    arguments = call.child_by_field_name("arguments")
    if arguments is None:
        arguments = next((c for c in call.named_children if c.type == "arguments"), None)
    if arguments is None:
        return []

    values = []
    for argument in arguments.named_children:
        if argument.type == "comment":
            continue
        if argument.type == "argument":
            if argument.child_by_field_name("name") is not None:
                break
            if any(child.type == "..." for child in argument.children):
                break
            named = argument.named_children
            values.append(named[-1] if named else None)
        else:
            values.append(argument)
    return values


def _callee_name(node: Any, text: str) -> Optional[str]:
    """Lower-cased global function name called by ``node``, if statically known."""
    if node is None or node.type not in NAME_NODE_TYPES:
        return None
    name = text[1:] if text.startswith(NAMESPACE_SEPARATOR) else text
    if NAMESPACE_SEPARATOR in name:
        return None
    return name.lower()


class StringScalarPrefixer(PrefixingVisitor):
    """Prefixes symbol names passed as literal strings to reflection APIs."""

    def enter_node(self, node: Any, context: TraversalContext) -> Optional[VisitAction]:
        tree = context.tree
        if node.type == "function_call_expression":
            function = node.child_by_field_name("function")
            callee = _callee_name(function, tree.text(function)) if function is not None else None
            if callee in REFLECTION_FUNCTIONS:
                self._prefix_arguments(node, callee, REFLECTION_FUNCTIONS[callee], context)

        elif node.type == "object_creation_expression":
            class_node = next(iter(node.named_children), None)
            if class_node is not None and class_node.type in NAME_NODE_TYPES:
                resolved = resolve_name(tree.text(class_node), SymbolKind.CLASS, context)
                class_name = resolved.fq_name.lower()
                if class_name in REFLECTION_CLASSES:
                    self._prefix_arguments(node, class_name, REFLECTION_CLASSES[class_name], context)
        return None

    def _prefix_arguments(
        self,
        call: Any,
        callee: str,
        positions: dict[int, SymbolKind],
        context: TraversalContext,
    ) -> None:
        values = argument_values(call)
        for position, kind in positions.items():
            if position >= len(values) or values[position] is None:
                continue
            value_node = values[position]
            text = context.tree.text(value_node)
            literal = read_string_literal(value_node, text)
            if literal is None:
                if value_node.type in DYNAMIC_VALUE_TYPES:
                    context.report_dynamic_name(value_node, callee)
                continue

            prefixed = self.prefix_symbol_string(literal.value, kind, context)
            if prefixed is not None:
                context.tree.replace(value_node, literal.encode(prefixed))


class EvalPrefixer(PrefixingVisitor):
    """Scopes PHP code passed to ``eval()`` as a literal string.

    The code is run through the same scoper, without patchers, and written
    back as a single-quoted literal.
    """

    def __init__(self, prefix: str, classifier: SymbolClassifier, scoper: "Scoper") -> None:
        super().__init__(prefix, classifier)
        self.scoper = scoper

    def enter_node(self, node: Any, context: TraversalContext) -> Optional[VisitAction]:
        if node.type != "function_call_expression":
            return None

        tree = context.tree
        function = node.child_by_field_name("function")
        if function is None or _callee_name(function, tree.text(function)) != "eval":
            return None

        values = argument_values(node)
        if not values or values[0] is None:
            return None

        value_node = values[0]
        literal = read_string_literal(value_node, tree.text(value_node))
        if literal is None:
            context.report_dynamic_name(value_node, "eval")
            return None

        scoped = self.scoper.scope(
            context.file_path,
            "<?php " + literal.value,
            self.prefix,
            (),
            self.classifier.whitelist,
        )
        code = scoped.lstrip()
        if code.startswith("<?php"):
            code = code[len("<?php"):]
        code = code.strip()

        escaped = code.replace("\\", "\\\\").replace("'", "\\'")
        tree.replace(value_node, f"'{escaped}'")
        return VisitAction.SKIP_CHILDREN
