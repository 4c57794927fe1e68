"""Name resolution and rewriting shared by the prefixing visitors.

PHP resolves a name written in the source against the current namespace and
the ``use`` imports in scope:

- ``\\Foo\\Bar`` is fully qualified and taken as written.
- ``namespace\\Bar`` is relative to the current namespace.
- ``Foo\\Bar`` is qualified; when ``Foo`` is an imported alias the alias
  target replaces it, otherwise the current namespace is prepended.
- ``Bar`` is unqualified; it resolves through the imports of its kind, then
  the current namespace. Unqualified functions and constants that are not
  imported fall back to the global namespace at runtime, so their real
  target is unknown when the file is scoped.

Once a file's namespace is moved under the prefix, a name that resolves
through the namespace already points at the prefixed symbol. Names written
fully qualified, and names in namespaces that stay where they are, have to
be rewritten explicitly. Symbols that are kept but resolve through a moved
namespace are pinned with a leading ``\\`` so they keep pointing at the
original symbol.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from phpscoper.core.classifier import Classification, SymbolClassifier
from phpscoper.core.symbols import (
    NAMESPACE_SEPARATOR,
    SymbolKind,
    is_language_construct,
    is_prefixed,
    is_special_class_name,
    is_symbol_name,
    join_name,
    prefix_name,
    strip_leading_separator,
)
from phpscoper.processors.node_traverser import NodeVisitor, TraversalContext
from phpscoper.processors.php_parser import line_of
from phpscoper.utils.logger import get_logger

logger = get_logger("phpscoper.processors.prefixing_visitor")

# Node types that spell a (possibly qualified) name
NAME_NODE_TYPES = frozenset({"name", "qualified_name", "namespace_name", "relative_name"})

_RELATIVE_PREFIX = "namespace" + NAMESPACE_SEPARATOR


class Qualification(Enum):
    """How a name is spelled in the source."""

    FULLY_QUALIFIED = "fully_qualified"
    RELATIVE = "relative"
    QUALIFIED = "qualified"
    UNQUALIFIED = "unqualified"


@dataclass(frozen=True)
class ResolvedName:
    """A source name resolved to its fully-qualified target.

    Attributes:
        text: The name as written.
        fq_name: Fully-qualified target, without leading separator.
        qualification: Spelling of the name.
        via_alias: Whether a ``use`` import was involved.
        ambiguous: Unqualified function or constant with a runtime fallback
            to the global namespace.
    """

    text: str
    fq_name: str
    qualification: Qualification
    via_alias: bool = False
    ambiguous: bool = False


def resolve_name(text: str, kind: SymbolKind, context: TraversalContext) -> ResolvedName:
    """Resolve ``text`` as PHP would in the current lexical scope."""
    if text.startswith(NAMESPACE_SEPARATOR):
        return ResolvedName(text, text[1:], Qualification.FULLY_QUALIFIED)

    if text.lower().startswith(_RELATIVE_PREFIX):
        relative = text[len(_RELATIVE_PREFIX):]
        return ResolvedName(
            text, join_name(context.namespace, relative), Qualification.RELATIVE
        )

    if NAMESPACE_SEPARATOR in text:
        first, _, rest = text.partition(NAMESPACE_SEPARATOR)
        # Namespace imports live with the class imports
        target = context.get_alias(first, SymbolKind.CLASS)
        if target is not None:
            return ResolvedName(
                text, join_name(target, rest), Qualification.QUALIFIED, via_alias=True
            )
        return ResolvedName(text, join_name(context.namespace, text), Qualification.QUALIFIED)

    target = context.get_alias(text, kind)
    if target is not None:
        return ResolvedName(text, target, Qualification.UNQUALIFIED, via_alias=True)

    ambiguous = kind is not SymbolKind.CLASS and bool(context.namespace)
    return ResolvedName(
        text, join_name(context.namespace, text), Qualification.UNQUALIFIED, ambiguous=ambiguous
    )


class PrefixingVisitor(NodeVisitor):
    """Base for visitors that rewrite names under a prefix.

    Attributes:
        prefix: Namespace prefix, without surrounding separators.
        classifier: Decides which symbols are renamed.
    """

    def __init__(self, prefix: str, classifier: SymbolClassifier) -> None:
        self.prefix = prefix
        self.classifier = classifier

    def rewrite_reference(self, node: Any, kind: SymbolKind, context: TraversalContext) -> None:
        """Rewrite a name node that references a class, function or constant."""
        text = context.tree.text(node)
        if not text:
            return

        if kind is SymbolKind.CLASS and is_special_class_name(text):
            return
        if is_language_construct(text, kind):
            return

        resolved = resolve_name(text, kind, context)
        if resolved.ambiguous:
            # Resolved at runtime; the global fallback survives the move
            return

        if not resolved.fq_name or is_prefixed(self.prefix, resolved.fq_name):
            return

        decision = self.classifier.classify(resolved.fq_name, kind)
        if decision is Classification.RENAME:
            renamed = prefix_name(self.prefix, resolved.fq_name)
            explicit = resolved.qualification is Qualification.FULLY_QUALIFIED
            if explicit or (not resolved.via_alias and not context.namespace_moved):
                context.tree.replace(node, NAMESPACE_SEPARATOR + renamed)
            context.record(resolved.fq_name, renamed, kind)
            return

        pinned = (
            resolved.qualification is not Qualification.FULLY_QUALIFIED
            and not resolved.via_alias
            and context.namespace_moved
        )
        if pinned:
            context.tree.replace(node, NAMESPACE_SEPARATOR + resolved.fq_name)

    def record_declaration(self, name_node: Any, kind: SymbolKind, context: TraversalContext) -> None:
        """Record a symbol declared in the current namespace.

        The declaration itself is moved together with its namespace, so only
        the registry has to learn about it.
        """
        if name_node is None:
            return

        short_name = context.tree.text(name_node)
        fq_name = join_name(context.namespace, short_name)
        if not context.namespace_moved or is_prefixed(self.prefix, fq_name):
            return

        decision = self.classifier.classify(fq_name, kind)
        if decision is Classification.RENAME or self.classifier.is_exposed(fq_name, kind):
            context.record(fq_name, prefix_name(self.prefix, fq_name), kind)
        elif decision is Classification.KEEP_WHITELISTED:
            logger.warning(
                f"{context.file_path}:{line_of(name_node)}: whitelisted {kind.value} "
                f"'{fq_name}' is declared in a prefixed namespace, references to it "
                "will not find it"
            )
        else:
            logger.debug(
                f"{context.file_path}:{line_of(name_node)}: {kind.value} '{fq_name}' "
                "shadows a native symbol"
            )

    def prefix_symbol_string(
        self, value: str, kind: SymbolKind, context: TraversalContext
    ) -> Optional[str]:
        """Return the prefixed spelling of a symbol held in a string, or None.

        Names in strings are always fully qualified. ``Class::member`` forms
        are handled by prefixing the class part.
        """
        if "::" in value:
            class_part, _, member = value.partition("::")
            prefixed = self.prefix_symbol_string(class_part, SymbolKind.CLASS, context)
            return f"{prefixed}::{member}" if prefixed is not None else None

        if not is_symbol_name(value) or is_special_class_name(strip_leading_separator(value)):
            return None

        fq_name = strip_leading_separator(value)
        if is_prefixed(self.prefix, fq_name):
            return None
        if not self.classifier.should_rename(fq_name, kind):
            return None

        renamed = prefix_name(self.prefix, fq_name)
        context.record(fq_name, renamed, kind)
        leading = NAMESPACE_SEPARATOR if value.startswith(NAMESPACE_SEPARATOR) else ""
        return leading + renamed

