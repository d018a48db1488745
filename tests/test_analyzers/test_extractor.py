"""Tests for literal extraction from message expressions."""

import pytest

from logmsglint.analyzers.extractor import (
    decode_literal,
    extract_literals,
    is_concatenation,
    is_string_literal,
)


@pytest.fixture
def expr(parser):
    """Parse ``value = <code>`` and return the right-hand side node."""

    def _expr(code: str):
        unit = parser.parse(f"value = {code}\n")
        statement = unit.root.named_children[0]
        assignment = statement.named_children[0]
        return assignment.child_by_field_name("right")

    return _expr


class TestExtractLiterals:
    """Test fragment extraction."""

    def test_single_literal(self, expr):
        """A plain literal yields its decoded text."""
        assert extract_literals(expr('"hello"')) == ["hello"]

    def test_escapes_decoded(self, expr):
        """Escape sequences are decoded."""
        assert extract_literals(expr(r'"\nHello\t"')) == ["\nHello\t"]

    def test_raw_and_unicode_prefixes(self, expr):
        """Raw and ``u`` prefixed literals are plain strings."""
        assert extract_literals(expr(r'r"C:\temp"')) == ["C:\\temp"]
        assert extract_literals(expr('u"hello"')) == ["hello"]

    def test_triple_quoted(self, expr):
        """Triple-quoted literals decode across lines."""
        assert extract_literals(expr('"""line one\nline two"""')) == ["line one\nline two"]

    def test_concatenation_left_to_right(self, expr):
        """Fragments of a ``+`` tree come out left to right."""
        assert extract_literals(expr('"a" + ("b" + dynamic())')) == ["a", "b"]

    def test_dynamic_operands_only(self, expr):
        """Names and calls contribute nothing."""
        assert extract_literals(expr("left + right")) == []

    def test_parentheses_transparent(self, expr):
        """Enclosing parentheses are ignored."""
        assert extract_literals(expr('(("wrapped"))')) == ["wrapped"]

    def test_implicit_concatenation(self, expr):
        """Adjacent literals are one fragment."""
        assert extract_literals(expr('"hello " "world"')) == ["hello world"]

    @pytest.mark.parametrize(
        "code",
        ['f"hello {name}"', 'b"bytes"', '"hello %s" % name', '"{}".format(x)', "42", "name"],
    )
    def test_inert_expressions(self, expr, code):
        """f-strings, bytes, formatting and non-strings are inert."""
        assert extract_literals(expr(code)) == []

    def test_undecodable_literal_skipped(self, expr):
        """A literal that fails to decode drops out, its siblings are kept."""
        assert extract_literals(expr(r'"\N{BOGUS}" + "ok!"')) == ["ok!"]

    def test_fstring_in_concatenation_skipped(self, expr):
        """An f-string operand is skipped, its siblings still collected."""
        assert extract_literals(expr('"user " + f"{name}" + " done"')) == ["user ", " done"]


class TestLiteralHelpers:
    """Test literal classification helpers."""

    def test_is_string_literal(self, expr):
        """Single literals, parenthesised or implicit, are rewrite candidates."""
        assert is_string_literal(expr('"a"'))
        assert is_string_literal(expr('("a")'))
        assert is_string_literal(expr('"a" "b"'))

    def test_not_string_literal(self, expr):
        """Concatenations and f-strings are not."""
        assert not is_string_literal(expr('"a" + "b"'))
        assert not is_string_literal(expr('f"a"'))
        assert not is_string_literal(expr("name"))

    def test_is_concatenation(self, expr):
        """Only ``+`` counts as concatenation."""
        assert is_concatenation(expr('"a" + b'))
        assert not is_concatenation(expr('"a" * 2'))

    def test_decode_bytes_returns_none(self, expr):
        """Byte literals do not decode to text."""
        assert decode_literal(expr('b"x"')) is None
