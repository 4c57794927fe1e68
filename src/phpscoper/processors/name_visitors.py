"""Visitor for class, function and constant names.

:class:`NameStmtPrefixer` handles every place PHP syntax names a symbol:
references (``new Foo``, ``Foo::bar()``, ``foo()``, ``FOO``, type
declarations, ``extends``/``implements``, ``catch``, attributes) and
declarations (classes, interfaces, traits, enums, functions and top-level
constants). References are rewritten through
:meth:`PrefixingVisitor.rewrite_reference`; declarations move along with
their namespace and are only recorded.
"""

from __future__ import annotations

from typing import Any, Optional

from phpscoper.core.symbols import SymbolKind
from phpscoper.processors.node_traverser import TraversalContext, VisitAction
from phpscoper.processors.prefixing_visitor import NAME_NODE_TYPES, PrefixingVisitor
from phpscoper.utils.logger import get_logger

logger = get_logger("phpscoper.processors.name_visitors")

CLASS_DECLARATION_TYPES = frozenset({
    "class_declaration",
    "interface_declaration",
    "trait_declaration",
    "enum_declaration",
})

# Class bodies, where ``const`` declares class constants
CLASS_BODY_TYPES = frozenset({"declaration_list", "enum_declaration_list"})

# Expression parents a bare name can be a constant in. The value is the
# field the name must occupy, None for any position but ``name``.
CONSTANT_PARENTS: dict[str, Optional[str]] = {
    "argument": None,
    "arguments": None,
    "array_element_initializer": None,
    "binary_expression": None,
    "clone_expression": None,
    "conditional_expression": None,
    "echo_statement": None,
    "exit_statement": None,
    "expression_statement": None,
    "include_expression": None,
    "include_once_expression": None,
    "match_condition_list": None,
    "parenthesized_expression": None,
    "print_intrinsic": None,
    "property_initializer": None,
    "require_expression": None,
    "require_once_expression": None,
    "return_statement": None,
    "sequence_expression": None,
    "subscript_expression": None,
    "throw_expression": None,
    "unary_op_expression": None,
    "yield_expression": None,
    "arrow_function": "body",
    "assignment_expression": "right",
    "augmented_assignment_expression": "right",
    "case_statement": "value",
    "cast_expression": "value",
    "enum_case": "value",
    "match_conditional_expression": "return_expression",
    "match_default_expression": "return_expression",
    "property_element": "default_value",
    "property_promotion_parameter": "default_value",
    "simple_parameter": "default_value",
    "static_variable_declaration": "value",
}


def _is_instanceof(node: Any) -> bool:
    operator = node.child_by_field_name("operator")
    return operator is not None and operator.type == "instanceof"


def _first_named(node: Any) -> Any:
    children = node.named_children
    return children[0] if children else None


def is_constant_position(node: Any) -> bool:
    """True when the bare name ``node`` is used as a constant."""
    parent = node.parent
    if parent is None:
        return False

    if parent.type == "const_element":
        # The first name is the declared constant
        return _first_named(parent) != node

    if parent.type not in CONSTANT_PARENTS:
        return False

    required_field = CONSTANT_PARENTS[parent.type]
    if required_field is not None:
        return parent.child_by_field_name(required_field) == node

    if parent.child_by_field_name("name") == node:
        return False
    if parent.type == "binary_expression" and _is_instanceof(parent):
        return parent.child_by_field_name("right") != node
    return True


class NameStmtPrefixer(PrefixingVisitor):
    """Prefixes class, function and constant names."""

    def enter_node(self, node: Any, context: TraversalContext) -> Optional[VisitAction]:
        node_type = node.type

        if node_type in NAME_NODE_TYPES:
            if is_constant_position(node):
                self.rewrite_reference(node, SymbolKind.CONSTANT, context)
            return None

        if node_type in CLASS_DECLARATION_TYPES:
            self.record_declaration(node.child_by_field_name("name"), SymbolKind.CLASS, context)
        elif node_type == "function_definition":
            self.record_declaration(node.child_by_field_name("name"), SymbolKind.FUNCTION, context)
        elif node_type == "const_declaration":
            self._record_constants(node, context)
        elif node_type == "function_call_expression":
            function = node.child_by_field_name("function")
            if function is not None and function.type in NAME_NODE_TYPES:
                self.rewrite_reference(function, SymbolKind.FUNCTION, context)
        else:
            for name_node in self._class_references(node):
                self.rewrite_reference(name_node, SymbolKind.CLASS, context)
        return None

    def _record_constants(self, node: Any, context: TraversalContext) -> None:
        if node.parent is not None and node.parent.type in CLASS_BODY_TYPES:
            return
        for element in node.named_children:
            if element.type == "const_element":
                self.record_declaration(_first_named(element), SymbolKind.CONSTANT, context)

    def _class_references(self, node: Any) -> list[Any]:
        """Name children of ``node`` that denote a class."""
        node_type = node.type

        if node_type in ("object_creation_expression", "class_constant_access_expression",
                         "named_type", "attribute"):
            first = _first_named(node)
            return [first] if first is not None and first.type in NAME_NODE_TYPES else []

        if node_type in ("base_clause", "class_interface_clause", "type_list", "use_declaration"):
            return [child for child in node.named_children if child.type in NAME_NODE_TYPES]

        if node_type == "use_instead_of_clause":
            return [child for child in node.named_children[1:] if child.type in NAME_NODE_TYPES]

        if node_type in ("scoped_call_expression", "scoped_property_access_expression"):
            scope = node.child_by_field_name("scope")
            return [scope] if scope is not None and scope.type in NAME_NODE_TYPES else []

        if node_type == "binary_expression" and _is_instanceof(node):
            right = node.child_by_field_name("right")
            return [right] if right is not None and right.type in NAME_NODE_TYPES else []

        if node_type == "catch_clause":
            catch_type = node.child_by_field_name("type")
            if catch_type is not None and catch_type.type in NAME_NODE_TYPES:
                return [catch_type]

        return []
