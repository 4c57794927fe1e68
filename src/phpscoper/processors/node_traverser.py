"""Tree traversal with an ordered chain of visitors.

A :class:`NodeTraverser` walks a :class:`~phpscoper.processors.php_parser.SourceTree`
depth-first and calls every registered :class:`NodeVisitor` on each node, in
registration order. Visitors share one :class:`TraversalContext` per file,
which carries the lexical state (current namespace, imported aliases) and
the run-wide registry.

Traversers and contexts are created per file and must not be reused: the
context accumulates state while a file is walked.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from phpscoper.core.config import UnsupportedConstructPolicy
from phpscoper.core.symbol_registry import RenameRecord, SymbolsRegistry
from phpscoper.core.symbols import SymbolKind, normalize_name
from phpscoper.processors.php_parser import SourceTree, line_of
from phpscoper.utils.logger import get_logger

logger = get_logger("phpscoper.processors.node_traverser")


class UnsupportedConstructError(Exception):
    """Raised when a construct cannot be classified and the policy is ``fail``.

    Attributes:
        file_path: File containing the construct.
        line: 1-based line of the construct.
        reason: What could not be handled.
        message: Detailed error message.
    """

    def __init__(self, file_path: str, line: int, reason: str) -> None:
        self.file_path = file_path
        self.line = line
        self.reason = reason
        self.message = f"Unsupported construct in {file_path} on line {line}: {reason}"
        super().__init__(self.message)


class VisitAction(Enum):
    """Return values a visitor may give from :meth:`NodeVisitor.enter_node`."""

    CONTINUE = "continue"
    SKIP_CHILDREN = "skip_children"


@dataclass
class TraversalContext:
    """Per-file state shared by the visitors of one traversal.

    Attributes:
        file_path: File being scoped, used in logs, errors and records.
        tree: The file's source tree; visitors read text and queue edits on it.
        registry: Run-wide rename ledger.
        unsupported_policy: What to do with unclassifiable constructs.
        warn_on_dynamic_names: Warn when reflection calls receive non-literal names.
        namespace: Current namespace (``""`` for the global namespace), as
            written in the source, before prefixing.
        namespace_moved: Whether the current namespace is moved under the prefix.
        aliases: ``use`` imports of the current namespace per symbol kind,
            mapping the normalised alias to the original fully-qualified name.
        renames: Renames applied to this file, in order of first occurrence.
    """

    file_path: str
    tree: SourceTree
    registry: SymbolsRegistry
    unsupported_policy: UnsupportedConstructPolicy = UnsupportedConstructPolicy.SKIP
    warn_on_dynamic_names: bool = True
    namespace: str = ""
    namespace_moved: bool = True
    aliases: dict[SymbolKind, dict[str, str]] = field(default_factory=dict)
    renames: List[RenameRecord] = field(default_factory=list)

    def __post_init__(self) -> None:
        for kind in (SymbolKind.CLASS, SymbolKind.FUNCTION, SymbolKind.CONSTANT):
            self.aliases.setdefault(kind, {})

    def enter_namespace(self, namespace: str, moved: bool) -> None:
        """Switch to a new namespace; imports do not carry over."""
        self.namespace = namespace
        self.namespace_moved = moved
        for table in self.aliases.values():
            table.clear()

    @staticmethod
    def _alias_key(alias: str, kind: SymbolKind) -> str:
        # Aliases are short names, so only constants keep their case
        return alias if kind is SymbolKind.CONSTANT else alias.lower()

    def add_alias(self, alias: str, target: str, kind: SymbolKind) -> None:
        self.aliases[kind][self._alias_key(alias, kind)] = target

    def get_alias(self, alias: str, kind: SymbolKind) -> Optional[str]:
        return self.aliases[kind].get(self._alias_key(alias, kind))

    def record(self, original: str, renamed: str, kind: SymbolKind) -> None:
        """Record a rename in the registry and in this file's list.

        Raises:
            RegistryConflictError: If the registry holds another target.
        """
        self.registry.record(original, renamed, kind, self.file_path)
        key = normalize_name(original, kind)
        if not any(
            r.kind is kind and normalize_name(r.original, kind) == key for r in self.renames
        ):
            self.renames.append(RenameRecord(original, renamed, kind, self.file_path))

    def report_unsupported(self, node: Any, reason: str) -> None:
        """Apply the unsupported-construct policy to ``node``.

        Raises:
            UnsupportedConstructError: If the policy is ``fail``.
        """
        line = line_of(node)
        if self.unsupported_policy is UnsupportedConstructPolicy.FAIL:
            raise UnsupportedConstructError(self.file_path, line, reason)
        logger.warning(f"{self.file_path}:{line}: {reason}, left unprefixed")

    def report_dynamic_name(self, node: Any, callee: str) -> None:
        if self.warn_on_dynamic_names:
            logger.warning(
                f"{self.file_path}:{line_of(node)}: non-literal name passed to "
                f"{callee}() cannot be prefixed"
            )


class NodeVisitor:
    """Base class for traversal visitors.

    Subclasses override the hooks they need. ``enter_node`` may return
    :attr:`VisitAction.SKIP_CHILDREN` to keep the traverser out of the
    node's subtree; the remaining visitors are still called for the node.
    """

    def before_traverse(self, tree: SourceTree, context: TraversalContext) -> None:
        pass

    def enter_node(self, node: Any, context: TraversalContext) -> Optional[VisitAction]:
        return None

    def leave_node(self, node: Any, context: TraversalContext) -> None:
        pass

    def after_traverse(self, tree: SourceTree, context: TraversalContext) -> None:
        pass


class NodeTraverser:
    """Depth-first walk over a source tree calling visitors in order.

    Example:
        >>> traverser = NodeTraverser([NamespaceStmtPrefixer("Humbug", classifier)])
        >>> traverser.traverse(tree, context)
    """

    def __init__(self, visitors: Optional[List[NodeVisitor]] = None) -> None:
        self._visitors: List[NodeVisitor] = list(visitors or [])

    @property
    def visitors(self) -> tuple[NodeVisitor, ...]:
        return tuple(self._visitors)

    def add_visitor(self, visitor: NodeVisitor) -> None:
        self._visitors.append(visitor)

    def traverse(self, tree: SourceTree, context: TraversalContext) -> SourceTree:
        """Walk ``tree``, letting the visitors queue their edits on it."""
        for visitor in self._visitors:
            visitor.before_traverse(tree, context)

        stack: list[tuple[Any, bool]] = [(tree.root, False)]
        visited = 0
        while stack:
            node, leaving = stack.pop()
            if leaving:
                for visitor in self._visitors:
                    visitor.leave_node(node, context)
                continue

            visited += 1
            skip_children = False
            for visitor in self._visitors:
                if visitor.enter_node(node, context) is VisitAction.SKIP_CHILDREN:
                    skip_children = True

            stack.append((node, True))
            if not skip_children:
                stack.extend((child, False) for child in reversed(node.named_children))

        for visitor in self._visitors:
            visitor.after_traverse(tree, context)

        logger.debug(
            f"{context.file_path}: visited {visited} nodes, "
            f"{len(tree.edits)} edits, {len(context.renames)} renames"
        )
        return tree
