"""Visitors for namespace declarations and ``use`` imports.

:class:`NamespaceStmtPrefixer` moves every namespace under the prefix and
wraps code of the global namespace in a ``namespace <prefix>;`` declaration.
:class:`UseStmtPrefixer` prefixes the targets of ``use`` imports and feeds
the import tables the other visitors resolve names with.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

from phpscoper.core.symbols import (
    NAMESPACE_SEPARATOR,
    SymbolKind,
    is_prefixed,
    join_name,
    prefix_name,
    split_name,
    strip_leading_separator,
)
from phpscoper.processors.node_traverser import TraversalContext, VisitAction
from phpscoper.processors.php_parser import SourceTree
from phpscoper.processors.prefixing_visitor import NAME_NODE_TYPES, PrefixingVisitor
from phpscoper.utils.logger import get_logger

logger = get_logger("phpscoper.processors.namespace_visitors")


class NamespaceStmtPrefixer(PrefixingVisitor):
    """Prefixes namespace declarations.

    - ``namespace Acme;`` becomes ``namespace Humbug\\Acme;``
    - ``namespace { ... }`` becomes ``namespace Humbug { ... }``
    - a file without namespace declaration gets ``namespace Humbug;`` after
      its opening tag and ``declare`` statements

    Excluded namespaces are left where they are.
    """

    def before_traverse(self, tree: SourceTree, context: TraversalContext) -> None:
        children = tree.root.named_children
        if any(child.type == "namespace_definition" for child in children):
            return

        tag_index = next(
            (index for index, child in enumerate(children) if child.type == "php_tag"), None
        )
        if tag_index is None:
            # Inline HTML only, nothing can be declared
            context.enter_namespace("", moved=False)
            return

        if tag_index > 0:
            context.enter_namespace("", moved=False)
            context.report_unsupported(
                children[0], "global code preceded by inline HTML cannot be namespaced"
            )
            return

        context.enter_namespace("", moved=True)

        declaration = f"namespace {self.prefix};"
        last_declare = None
        for child in children[tag_index + 1:]:
            if child.type == "declare_statement":
                last_declare = child
            elif child.type != "comment":
                break

        if last_declare is not None:
            # declare() must stay the very first statement
            tree.insert_after(last_declare, "\n\n" + declaration)
        elif tag_index + 1 < len(children):
            tree.insert(children[tag_index + 1].start_byte, declaration + "\n\n")
        else:
            tree.insert_after(children[-1], "\n\n" + declaration)

        logger.debug(f"{context.file_path}: global code wrapped in namespace {self.prefix}")

    def enter_node(self, node: Any, context: TraversalContext) -> Optional[VisitAction]:
        if node.type != "namespace_definition":
            return None

        tree = context.tree
        name_node = node.child_by_field_name("name")
        if name_node is None:
            tree.insert_after(node.children[0], " " + self.prefix)
            context.enter_namespace("", moved=True)
            return None

        name = strip_leading_separator(tree.text(name_node))
        if is_prefixed(self.prefix, name):
            context.enter_namespace(name, moved=False)
            return None

        if self.classifier.classify(name, SymbolKind.NAMESPACE).keeps:
            logger.debug(f"{context.file_path}: namespace {name} is excluded")
            context.enter_namespace(name, moved=False)
            return None

        renamed = prefix_name(self.prefix, name)
        tree.replace(name_node, renamed)
        context.record(name, renamed, SymbolKind.NAMESPACE)
        context.enter_namespace(name, moved=True)
        return None

    def leave_node(self, node: Any, context: TraversalContext) -> None:
        if node.type == "namespace_definition" and node.child_by_field_name("body") is not None:
            context.enter_namespace("", moved=True)


@dataclass
class UseClause:
    """One imported symbol of a ``use`` statement.

    Attributes:
        node: Name node to rewrite (``None`` inside groups).
        fq_name: Imported fully-qualified name, without leading separator.
        kind: Symbol kind the import applies to.
        alias: Explicit ``as`` alias, if any.
        leading_separator: Whether the name was written with a leading ``\\``.
    """

    node: Any
    fq_name: str
    kind: SymbolKind
    alias: Optional[str] = None
    leading_separator: bool = False

    @property
    def local_name(self) -> str:
        return self.alias or split_name(self.fq_name)[1]

    def to_statement(self, name: str) -> str:
        keyword = {SymbolKind.FUNCTION: "function ", SymbolKind.CONSTANT: "const "}.get(
            self.kind, ""
        )
        alias = f" as {self.alias}" if self.alias else ""
        return f"use {keyword}{name}{alias};"


def _kind_keyword(node: Any) -> Optional[SymbolKind]:
    for child in node.children:
        if child.type == "function":
            return SymbolKind.FUNCTION
        if child.type == "const":
            return SymbolKind.CONSTANT
    return None


def _parse_clause(clause: Any, tree: SourceTree, kind: SymbolKind, base: str = "") -> Optional[UseClause]:
    kind = _kind_keyword(clause) or kind
    target = None
    alias = None
    after_as = False
    for child in clause.children:
        if child.type == "as":
            after_as = True
        elif child.type == "namespace_aliasing_clause":
            alias_node = next((c for c in child.named_children if c.type == "name"), None)
            alias = tree.text(alias_node) if alias_node is not None else None
        elif child.type in NAME_NODE_TYPES:
            if after_as:
                alias = tree.text(child)
            elif target is None:
                target = child

    if target is None:
        return None

    text = tree.text(target)
    return UseClause(
        node=target,
        fq_name=join_name(base, strip_leading_separator(text)),
        kind=kind,
        alias=alias,
        leading_separator=text.startswith(NAMESPACE_SEPARATOR),
    )


class UseStmtPrefixer(PrefixingVisitor):
    """Prefixes the targets of ``use`` statements.

    Imports keep their local names, so code using the alias needs no change.
    Group imports mixing renamed and kept symbols are split into one
    statement per symbol.
    """

    def enter_node(self, node: Any, context: TraversalContext) -> Optional[VisitAction]:
        if node.type != "namespace_use_declaration":
            return None

        kind = _kind_keyword(node) or SymbolKind.CLASS
        group = next((c for c in node.named_children if c.type == "namespace_use_group"), None)
        if group is not None:
            self._prefix_group(node, group, kind, context)
        else:
            self._prefix_clauses(node, kind, context)
        return VisitAction.SKIP_CHILDREN

    def _should_rename(self, clause: UseClause) -> bool:
        if is_prefixed(self.prefix, clause.fq_name):
            return False
        return self.classifier.should_rename(clause.fq_name, clause.kind)

    def _prefix_clauses(self, node: Any, kind: SymbolKind, context: TraversalContext) -> None:
        tree = context.tree
        clauses = [
            _parse_clause(child, tree, kind)
            for child in node.named_children
            if child.type == "namespace_use_clause"
        ]
        if not clauses or any(clause is None for clause in clauses):
            context.report_unsupported(node, "unrecognised use statement")
            return

        for clause in clauses:
            if self._should_rename(clause):
                renamed = prefix_name(self.prefix, clause.fq_name)
                leading = NAMESPACE_SEPARATOR if clause.leading_separator else ""
                tree.replace(clause.node, leading + renamed)
                context.record(clause.fq_name, renamed, clause.kind)
            context.add_alias(clause.local_name, clause.fq_name, clause.kind)

    def _prefix_group(self, node: Any, group: Any, kind: SymbolKind, context: TraversalContext) -> None:
        tree = context.tree
        base_node = None
        for child in node.named_children:
            if child.type in NAME_NODE_TYPES:
                base_node = child
            elif child == group:
                break
        if base_node is None:
            context.report_unsupported(node, "group use statement without a base namespace")
            return

        base = strip_leading_separator(tree.text(base_node))
        clauses: List[UseClause] = []
        for child in group.named_children:
            if child.type not in ("namespace_use_clause", "namespace_use_group_clause"):
                continue
            clause = _parse_clause(child, tree, kind, base)
            if clause is None:
                context.report_unsupported(child, "unrecognised group use clause")
                return
            clauses.append(clause)

        renames = [self._should_rename(clause) for clause in clauses]
        if all(renames):
            tree.replace(base_node, prefix_name(self.prefix, base))
        elif any(renames):
            statements = [
                clause.to_statement(
                    prefix_name(self.prefix, clause.fq_name) if rename else clause.fq_name
                )
                for clause, rename in zip(clauses, renames)
            ]
            tree.replace(node, "\n".join(statements))
            logger.debug(
                f"{context.file_path}: split group use of {base} into {len(statements)} statements"
            )

        for clause, rename in zip(clauses, renames):
            if rename:
                context.record(clause.fq_name, prefix_name(self.prefix, clause.fq_name), clause.kind)
            context.add_alias(clause.local_name, clause.fq_name, clause.kind)
