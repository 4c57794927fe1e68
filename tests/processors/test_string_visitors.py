"""Tests for string literal decoding and re-encoding."""

from types import SimpleNamespace

import pytest

from phpscoper.processors.string_visitors import StringLiteral, read_string_literal


def literal_node(node_type="string", children=()):
    return SimpleNamespace(type=node_type, named_children=list(children))


class TestReadStringLiteral:
    """Decoding literal source text."""

    @pytest.mark.parametrize("text, value, doubled", [
        ("'Acme\\Foo'", "Acme\\Foo", False),
        ("'Acme\\\\Foo'", "Acme\\Foo", True),
        ("'It\\'s'", "It's", False),
    ])
    def test_single_quoted(self, text, value, doubled):
        literal = read_string_literal(literal_node(), text)

        assert literal.value == value
        assert literal.quote == "'"
        assert literal.doubled_separators is doubled

    def test_double_quoted(self):
        literal = read_string_literal(literal_node("encapsed_string"), '"Acme\\\\Foo"')

        assert literal.value == "Acme\\Foo"
        assert literal.quote == '"'

    def test_double_quoted_with_interpreted_escape(self):
        assert read_string_literal(literal_node("encapsed_string"), '"Acme\\nFoo"') is None

    def test_interpolation_is_not_a_literal(self):
        node = literal_node("encapsed_string", [SimpleNamespace(type="variable_name")])

        assert read_string_literal(node, '"Acme\\\\$name"') is None

    def test_binary_prefix(self):
        literal = read_string_literal(literal_node(), "b'Foo'")

        assert literal.binary_prefix == "b"
        assert literal.value == "Foo"

    def test_other_nodes(self):
        assert read_string_literal(literal_node("heredoc"), "<<<EOT\nFoo\nEOT") is None


class TestStringLiteralEncode:
    """Spelling a new value in the style of the original literal."""

    def test_single_quoted_keeps_separator_style(self):
        single = StringLiteral("Acme\\Foo", "'")
        doubled = StringLiteral("Acme\\Foo", "'", doubled_separators=True)

        assert single.encode("Humbug\\Acme\\Foo") == "'Humbug\\Acme\\Foo'"
        assert doubled.encode("Humbug\\Acme\\Foo") == "'Humbug\\\\Acme\\\\Foo'"

    def test_double_quoted_always_escapes(self):
        literal = StringLiteral("Acme\\Foo", '"')

        assert literal.encode("Humbug\\Acme\\Foo") == '"Humbug\\\\Acme\\\\Foo"'

    def test_binary_prefix_is_kept(self):
        assert StringLiteral("Foo", "'", binary_prefix="B").encode("Humbug\\Foo") == "B'Humbug\\Foo'"
