"""Builds the traverser used to scope one file."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from phpscoper.core.classifier import SymbolClassifier
from phpscoper.processors.name_visitors import NameStmtPrefixer
from phpscoper.processors.namespace_visitors import NamespaceStmtPrefixer, UseStmtPrefixer
from phpscoper.processors.node_traverser import NodeTraverser
from phpscoper.processors.php_parser import SourceTree
from phpscoper.processors.string_visitors import EvalPrefixer, StringScalarPrefixer
from phpscoper.utils.logger import get_logger

if TYPE_CHECKING:
    from phpscoper.scoper.base import Scoper

logger = get_logger("phpscoper.processors.traverser_factory")


class TraverserFactory:
    """Creates a fresh, fully configured :class:`NodeTraverser` per file.

    Visitor order matters: namespaces are entered before ``use`` imports are
    read, and imports are known before names are resolved.
    """

    def create(
        self,
        scoper: "Scoper",
        prefix: str,
        classifier: SymbolClassifier,
        tree: Optional[SourceTree] = None,
    ) -> NodeTraverser:
        """Create a traverser for one file.

        Args:
            scoper: Scoper used to scope code embedded in ``eval()`` strings.
            prefix: Namespace prefix.
            classifier: Decides which symbols are renamed.
            tree: The file about to be traversed.
        """
        traverser = NodeTraverser([
            NamespaceStmtPrefixer(prefix, classifier),
            UseStmtPrefixer(prefix, classifier),
            NameStmtPrefixer(prefix, classifier),
            StringScalarPrefixer(prefix, classifier),
            EvalPrefixer(prefix, classifier, scoper),
        ])
        if tree is not None:
            logger.debug(
                f"Created traverser with {len(traverser.visitors)} visitors for "
                f"{tree.root.child_count} top-level nodes"
            )
        return traverser
