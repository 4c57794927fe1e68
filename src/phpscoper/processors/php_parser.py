"""PHP parsing and printing on top of tree-sitter.

This module wraps the ``tree-sitter-php`` grammar behind the small contract
the scoper needs:

- :meth:`PhpParser.parse` turns source text into a :class:`SourceTree`, or
  raises :class:`ParseError` carrying a message and a line number.
- A :class:`SourceTree` keeps the (immutable) tree-sitter tree together with
  the original bytes and a buffer of pending edits. Visitors never mutate
  nodes; they queue replacements and insertions keyed by byte offsets.
- :meth:`SourcePrinter.print` replays the edits over the original text, so
  everything the scoper does not touch (formatting, comments, inline HTML)
  comes out byte-for-byte identical.

Parsers are not thread-safe, so each thread gets its own parser instance
while the compiled language object is shared.

Example:
    >>> parser = PhpParser()
    >>> tree = parser.parse("<?php\\n\\nnew Foo();\\n")
    >>> node = tree.root.named_children[1]
    >>> tree.text(node)
    'new Foo();'
    >>> SourcePrinter().print(tree)
    '<?php\\n\\nnew Foo();\\n'
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Iterator

import tree_sitter
import tree_sitter_php

from phpscoper.utils.logger import get_logger

logger = get_logger("phpscoper.processors.php_parser")

# Length of the unexpected token quoted in parse error messages
MAX_TOKEN_PREVIEW: int = 30


class ParseError(Exception):
    """Raised when PHP source text is not syntactically valid.

    Attributes:
        raw_message: Message without location, e.g. ``Syntax error, unexpected ';'``.
        line: 1-based line of the offending token.
        message: Full message including the line.

    Example:
        >>> raise ParseError("Syntax error, unexpected ';'", 3)
    """

    def __init__(self, raw_message: str, line: int) -> None:
        self.raw_message = raw_message
        self.line = line
        self.message = f"{raw_message} on line {line}"
        super().__init__(self.message)


@dataclass(frozen=True)
class Edit:
    """A pending text change expressed in byte offsets of the original source."""

    start: int
    end: int
    text: bytes

    @property
    def is_insertion(self) -> bool:
        return self.start == self.end


class SourceTree:
    """A parsed file: tree-sitter tree, original bytes and pending edits.

    Attributes:
        tree: The tree-sitter tree.
        source: Original source, UTF-8 encoded.
    """

    def __init__(self, tree: Any, source: bytes) -> None:
        self.tree = tree
        self.source = source
        self._edits: list[Edit] = []

    @property
    def root(self) -> Any:
        return self.tree.root_node

    @property
    def edits(self) -> tuple[Edit, ...]:
        return tuple(self._edits)

    @property
    def has_edits(self) -> bool:
        return bool(self._edits)

    def text(self, node: Any) -> str:
        """Return the original source text covered by ``node``."""
        return self.source[node.start_byte:node.end_byte].decode("utf-8")

    def replace(self, node: Any, text: str) -> None:
        """Queue replacing the text of ``node`` with ``text``."""
        self._edits.append(Edit(node.start_byte, node.end_byte, text.encode("utf-8")))

    def insert(self, offset: int, text: str) -> None:
        """Queue inserting ``text`` at byte ``offset`` of the original source."""
        self._edits.append(Edit(offset, offset, text.encode("utf-8")))

    def insert_after(self, node: Any, text: str) -> None:
        self.insert(node.end_byte, text)

    def render(self) -> str:
        """Apply all pending edits and return the resulting text.

        Insertions at an offset are applied before a replacement starting
        at the same offset, in the order they were queued.

        Raises:
            ValueError: If two replacements overlap.
        """
        ordered = sorted(
            enumerate(self._edits),
            key=lambda item: (item[1].start, not item[1].is_insertion, item[0]),
        )
        chunks: list[bytes] = []
        cursor = 0
        for _, edit in ordered:
            if edit.start < cursor:
                raise ValueError(
                    f"Overlapping edits at bytes {edit.start}-{edit.end} "
                    f"(previous edit ends at {cursor})"
                )
            chunks.append(self.source[cursor:edit.start])
            chunks.append(edit.text)
            cursor = edit.end
        chunks.append(self.source[cursor:])
        return b"".join(chunks).decode("utf-8")


def iter_nodes(node: Any) -> Iterator[Any]:
    """Yield ``node`` and all of its descendants in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def line_of(node: Any) -> int:
    """1-based line number where ``node`` starts."""
    return node.start_point[0] + 1


class PhpParser:
    """Thread-safe PHP parser producing :class:`SourceTree` objects.

    Example:
        >>> parser = PhpParser()
        >>> parser.parse("<?php $class = ;")
        Traceback (most recent call last):
        ...
        phpscoper.processors.php_parser.ParseError: Syntax error, unexpected ...
    """

    def __init__(self) -> None:
        self._language = tree_sitter.Language(tree_sitter_php.language_php())
        self._local = threading.local()

    def _get_parser(self) -> Any:
        parser = getattr(self._local, "parser", None)
        if parser is None:
            parser = tree_sitter.Parser(self._language)
            self._local.parser = parser
            logger.debug(f"Created PHP parser for thread {threading.current_thread().name}")
        return parser

    def parse(self, text: str) -> SourceTree:
        """Parse PHP source text.

        Args:
            text: Complete file contents (starting with inline HTML or ``<?php``).

        Returns:
            The parsed :class:`SourceTree`, with no pending edits.

        Raises:
            ParseError: If the text contains a syntax error.
        """
        source = text.encode("utf-8")
        tree = self._get_parser().parse(source)

        if tree.root_node.has_error:
            # The error is reported as is, without chaining anything
            raise self._build_error(tree.root_node) from None

        return SourceTree(tree, source)

    def _build_error(self, root: Any) -> ParseError:
        error_node = None
        for node in iter_nodes(root):
            if node.type == "ERROR" or node.is_missing:
                error_node = node
                break

        if error_node is None:
            return ParseError("Syntax error", line_of(root))

        # An ERROR node holding only punctuation or keywords (``=`` in
        # ``$a = ;``) is a dangling prefix: parsing failed on the next token
        last = _last_token(error_node)
        if error_node.is_missing or last is None or not last.is_named:
            token = _first_token_after(error_node)
        else:
            token = _first_token(error_node)

        if token is None:
            return ParseError("Syntax error, unexpected end of file", line_of(error_node))

        text = token.text.decode("utf-8", errors="replace")
        return ParseError(
            f"Syntax error, unexpected '{text[:MAX_TOKEN_PREVIEW]}'", line_of(token)
        )


def _is_token(node: Any) -> bool:
    return node.child_count == 0 and node.end_byte > node.start_byte


def _first_token(node: Any) -> Any:
    for child in iter_nodes(node):
        if _is_token(child):
            return child
    return None


def _last_token(node: Any) -> Any:
    last = None
    for child in iter_nodes(node):
        if _is_token(child):
            last = child
    return last


def _first_token_after(node: Any) -> Any:
    current = node
    while current is not None:
        sibling = current.next_sibling
        while sibling is not None:
            token = _first_token(sibling)
            if token is not None:
                return token
            sibling = sibling.next_sibling
        current = current.parent
    return None


class SourcePrinter:
    """Turns a :class:`SourceTree` back into text.

    The printed file always ends with a newline.
    """

    def print(self, tree: SourceTree) -> str:
        text = tree.render()
        if text and not text.endswith("\n"):
            text += "\n"
        return text
