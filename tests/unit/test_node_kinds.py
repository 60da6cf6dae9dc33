"""Tests for node-kind classification of tree-sitter JavaScript nodes."""

from __future__ import annotations

import pytest

from transpiler.node_kinds import (
    NodeKind,
    callee_name,
    classify,
    classify_number,
    constructor_kind,
)
from transpiler.parser import Parser, TreeSitterParserFactory, expression_root


def _root(source: str):
    tree, parsed = Parser(TreeSitterParserFactory()).parse_expression(source)

    def text_of(node):
        return parsed[node.start_byte : node.end_byte].decode("utf-8")

    return expression_root(tree), text_of


def _kind(source: str) -> NodeKind:
    node, text_of = _root(source)
    return classify(node, text_of)


class TestClassifyNumber:
    @pytest.mark.parametrize(
        "text, kind",
        [
            ("42", NodeKind.INTEGER),
            ("08", NodeKind.INTEGER),
            ("1.5", NodeKind.DECIMAL),
            ("1e3", NodeKind.DECIMAL),
            ("0x1E", NodeKind.RADIX_INTEGER),
            ("0b10", NodeKind.RADIX_INTEGER),
            ("010", NodeKind.OCTAL_INTEGER),
            ("0o10", NodeKind.OCTAL_INTEGER),
            ("0O10", NodeKind.OCTAL_INTEGER),
        ],
    )
    def test_kinds(self, text, kind):
        assert classify_number(text) == kind


class TestConstructorKind:
    def test_aliases(self):
        assert constructor_kind("NumberLong") == NodeKind.LONG
        assert constructor_kind("ISODate") == NodeKind.DATE

    def test_member_calls(self):
        assert constructor_kind("Object.create") == NodeKind.OBJECT_CREATE
        assert constructor_kind("Date.now") == NodeKind.DATE_NOW

    def test_unknown(self):
        assert constructor_kind("Foo") == NodeKind.OTHER
        assert constructor_kind("") == NodeKind.OTHER


class TestClassify:
    def test_bare_braces_are_an_object(self):
        assert _kind("{a: 1}") == NodeKind.OBJECT

    def test_trailing_semicolon(self):
        assert _kind("[1];") == NodeKind.ARRAY

    def test_constructor_call(self):
        assert _kind("ObjectId()") == NodeKind.OBJECT_ID

    def test_new_expression(self):
        assert _kind("new Timestamp(1, 2)") == NodeKind.NEW

    def test_regex_literal(self):
        assert _kind("/a/i") == NodeKind.REGEX_LITERAL

    def test_unknown_call(self):
        assert _kind("foo(1)") == NodeKind.OTHER

    def test_identifier(self):
        assert _kind("foo") == NodeKind.OTHER


class TestCalleeName:
    def test_call(self):
        node, text_of = _root("Date.now()")
        assert callee_name(node, text_of) == "Date.now"

    def test_new(self):
        node, text_of = _root("new BSONRegExp('a')")
        assert callee_name(node, text_of) == "BSONRegExp"

    def test_computed_callee(self):
        node, text_of = _root("f()()")
        assert callee_name(node, text_of) == ""
