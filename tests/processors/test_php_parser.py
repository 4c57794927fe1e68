"""Tests for the tree-sitter backed PHP parser and the source edit buffer."""

import threading
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from phpscoper.processors.php_parser import (
    ParseError,
    PhpParser,
    SourcePrinter,
    SourceTree,
    iter_nodes,
    line_of,
)


@pytest.fixture(scope="module")
def parser():
    return PhpParser()


def fake_node(start: int, end: int):
    return SimpleNamespace(start_byte=start, end_byte=end)


def make_tree(source: str) -> SourceTree:
    return SourceTree(MagicMock(), source.encode("utf-8"))


# =============================================================================
# Parsing
# =============================================================================


class TestPhpParser:
    """Parsing valid and invalid source."""

    def test_parse_returns_tree_without_edits(self, parser):
        tree = parser.parse("<?php\n\necho 'Hello';\n")

        assert tree.root.type == "program"
        assert tree.root.named_children[0].type == "php_tag"
        assert not tree.has_edits

    def test_text_of_node(self, parser):
        tree = parser.parse("<?php\n\necho 'Hello';\n")

        statement = tree.root.named_children[1]
        assert tree.text(statement) == "echo 'Hello';"
        assert line_of(statement) == 3

    def test_print_without_edits_is_identity(self, parser):
        source = "<?php\n\n// comment kept\nfunction  foo( $a ) { return $a; }\n"

        assert SourcePrinter().print(parser.parse(source)) == source

    def test_print_adds_final_newline(self, parser):
        assert SourcePrinter().print(parser.parse("<?php echo 1;")) == "<?php echo 1;\n"

    def test_multibyte_text(self, parser):
        source = "<?php\n\necho 'Grüße';\nnew Foo();\n"
        tree = parser.parse(source)

        creation = tree.root.named_children[2]
        assert tree.text(creation) == "new Foo();"
        assert SourcePrinter().print(tree) == source

    def test_syntax_error_reports_line(self, parser):
        with pytest.raises(ParseError) as excinfo:
            parser.parse("<?php\n\n$class = ;\n")

        error = excinfo.value
        assert error.line == 3
        assert error.raw_message == "Syntax error, unexpected ';'"
        assert str(error) == "Syntax error, unexpected ';' on line 3"

    def test_syntax_error_has_no_cause(self, parser):
        with pytest.raises(ParseError) as excinfo:
            parser.parse("<?php\n\n$class = ;\n")

        assert excinfo.value.__cause__ is None
        assert excinfo.value.__suppress_context__ is True

    def test_parsers_are_thread_local(self, parser):
        main_parser = parser._get_parser()
        other = []

        thread = threading.Thread(target=lambda: other.append(parser._get_parser()))
        thread.start()
        thread.join()

        assert parser._get_parser() is main_parser
        assert other[0] is not main_parser

    def test_iter_nodes_document_order(self, parser):
        tree = parser.parse("<?php\n\necho 1;\necho 2;\n")

        types = [node.type for node in iter_nodes(tree.root) if node.type == "echo_statement"]
        assert len(types) == 2


class FakeSyntaxNode:
    """Minimal stand-in for a tree-sitter node."""

    def __init__(self, node_type, text=b"", start=0, children=(), named=True, line=0):
        self.type = node_type
        self.text = text
        self.start_byte = start
        self.end_byte = start + len(text) if not children else children[-1].end_byte
        self.children = list(children)
        self.child_count = len(self.children)
        self.is_named = named
        self.is_missing = False
        self.start_point = (line, 0)
        self.parent = None
        self.next_sibling = None
        for index, child in enumerate(self.children):
            child.parent = self
            if index + 1 < len(self.children):
                child.next_sibling = self.children[index + 1]


class TestBuildError:
    """Choosing the token a syntax error is reported on."""

    def test_error_wrapping_operator_reports_next_token(self, parser):
        assignment = FakeSyntaxNode("=", b"=", start=7, named=False, line=2)
        error = FakeSyntaxNode("ERROR", children=[assignment], line=2)
        semicolon = FakeSyntaxNode(";", b";", start=9, named=False, line=2)
        root = FakeSyntaxNode("program", children=[FakeSyntaxNode(
            "expression_statement", children=[error, semicolon], line=2,
        )])

        result = parser._build_error(root)

        assert result.message == "Syntax error, unexpected ';' on line 3"

    def test_error_wrapping_value_reports_value(self, parser):
        integer = FakeSyntaxNode("integer", b"2", start=10, line=4)
        error = FakeSyntaxNode("ERROR", children=[integer], line=4)
        root = FakeSyntaxNode("program", children=[error])

        result = parser._build_error(root)

        assert result.message == "Syntax error, unexpected '2' on line 5"

    def test_dangling_error_at_end_of_file(self, parser):
        arrow = FakeSyntaxNode("->", b"->", start=8, named=False, line=1)
        error = FakeSyntaxNode("ERROR", children=[arrow], line=1)
        root = FakeSyntaxNode("program", children=[error])

        result = parser._build_error(root)

        assert result.message == "Syntax error, unexpected end of file on line 2"


class TestParseError:
    """Error value object."""

    def test_message(self):
        error = ParseError("Syntax error, unexpected ';'", 3)

        assert error.message == "Syntax error, unexpected ';' on line 3"
        assert str(error) == error.message


# =============================================================================
# Edit buffer
# =============================================================================


class TestSourceTreeEdits:
    """Replacements and insertions over the original bytes."""

    def test_replace(self):
        tree = make_tree("new Foo();")
        tree.replace(fake_node(4, 7), "\\Humbug\\Foo")

        assert tree.render() == "new \\Humbug\\Foo();"

    def test_edits_applied_by_offset_not_queue_order(self):
        tree = make_tree("A B C")
        tree.replace(fake_node(4, 5), "c")
        tree.replace(fake_node(0, 1), "a")

        assert tree.render() == "a B c"

    def test_insertion_before_replacement_at_same_offset(self):
        tree = make_tree("use Foo;")
        tree.replace(fake_node(0, 8), "use Bar;")
        tree.insert(0, "namespace Humbug;\n\n")

        assert tree.render() == "namespace Humbug;\n\nuse Bar;"

    def test_insertions_keep_queue_order(self):
        tree = make_tree("x")
        tree.insert(1, "1")
        tree.insert(1, "2")

        assert tree.render() == "x12"

    def test_insert_after(self):
        tree = make_tree("namespace {}")
        tree.insert_after(fake_node(0, 9), " Humbug")

        assert tree.render() == "namespace Humbug {}"

    def test_overlapping_replacements_raise(self):
        tree = make_tree("new Foo\\Bar();")
        tree.replace(fake_node(4, 11), "X")
        tree.replace(fake_node(8, 11), "Y")

        with pytest.raises(ValueError, match="Overlapping edits"):
            tree.render()

    def test_byte_offsets_with_multibyte_text(self):
        source = "'é' Foo"
        tree = make_tree(source)
        start = len("'é' ".encode("utf-8"))
        tree.replace(fake_node(start, start + 3), "Bar")

        assert tree.render() == "'é' Bar"

    def test_edits_property(self):
        tree = make_tree("abc")
        tree.insert(0, "x")

        assert len(tree.edits) == 1
        assert tree.edits[0].is_insertion
        assert tree.has_edits
