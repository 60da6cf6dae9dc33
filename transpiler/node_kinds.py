"""Node kinds — maps tree-sitter JavaScript nodes onto the closed set of
constructs the generators have rules for."""

from __future__ import annotations

import re
from enum import Enum


class NodeKind(str, Enum):
    # Structure
    PROGRAM = "PROGRAM"
    EXPRESSION_STATEMENT = "EXPRESSION_STATEMENT"
    PARENTHESIZED = "PARENTHESIZED"
    ERROR = "ERROR"
    # Literals
    STRING = "STRING"
    TEMPLATE_STRING = "TEMPLATE_STRING"
    INTEGER = "INTEGER"
    DECIMAL = "DECIMAL"
    RADIX_INTEGER = "RADIX_INTEGER"
    OCTAL_INTEGER = "OCTAL_INTEGER"
    BOOLEAN = "BOOLEAN"
    NULL = "NULL"
    UNDEFINED = "UNDEFINED"
    OBJECT = "OBJECT"
    ARRAY = "ARRAY"
    REGEX_LITERAL = "REGEX_LITERAL"
    UNARY = "UNARY"
    NEW = "NEW"
    # Constructors
    CODE = "CODE"
    OBJECT_ID = "OBJECT_ID"
    BINARY = "BINARY"
    DOUBLE = "DOUBLE"
    LONG = "LONG"
    DATE = "DATE"
    DATE_NOW = "DATE_NOW"
    NUMBER = "NUMBER"
    MAX_KEY = "MAX_KEY"
    MIN_KEY = "MIN_KEY"
    SYMBOL = "SYMBOL"
    TIMESTAMP = "TIMESTAMP"
    DB_REF = "DB_REF"
    BSON_REGEX = "BSON_REGEX"
    REGEX_CONSTRUCTOR = "REGEX_CONSTRUCTOR"
    OBJECT_CREATE = "OBJECT_CREATE"
    # Everything else: handled by the walker's default handler
    OTHER = "OTHER"


CONSTRUCTOR_KINDS: dict[str, NodeKind] = {
    "Code": NodeKind.CODE,
    "ObjectId": NodeKind.OBJECT_ID,
    "Binary": NodeKind.BINARY,
    "Double": NodeKind.DOUBLE,
    "Long": NodeKind.LONG,
    "NumberLong": NodeKind.LONG,
    "Date": NodeKind.DATE,
    "ISODate": NodeKind.DATE,
    "Number": NodeKind.NUMBER,
    "MaxKey": NodeKind.MAX_KEY,
    "MinKey": NodeKind.MIN_KEY,
    "Symbol": NodeKind.SYMBOL,
    "Timestamp": NodeKind.TIMESTAMP,
    "DBRef": NodeKind.DB_REF,
    "BSONRegExp": NodeKind.BSON_REGEX,
    "RegExp": NodeKind.REGEX_CONSTRUCTOR,
}

MEMBER_CALL_KINDS: dict[str, NodeKind] = {
    "Object.create": NodeKind.OBJECT_CREATE,
    "Date.now": NodeKind.DATE_NOW,
}

_NODE_TYPE_KINDS: dict[str, NodeKind] = {
    "program": NodeKind.PROGRAM,
    "expression_statement": NodeKind.EXPRESSION_STATEMENT,
    "parenthesized_expression": NodeKind.PARENTHESIZED,
    "ERROR": NodeKind.ERROR,
    "string": NodeKind.STRING,
    "template_string": NodeKind.TEMPLATE_STRING,
    "true": NodeKind.BOOLEAN,
    "false": NodeKind.BOOLEAN,
    "null": NodeKind.NULL,
    "undefined": NodeKind.UNDEFINED,
    "object": NodeKind.OBJECT,
    "array": NodeKind.ARRAY,
    "regex": NodeKind.REGEX_LITERAL,
    "unary_expression": NodeKind.UNARY,
    "new_expression": NodeKind.NEW,
}

_HEX_RE = re.compile(r"^0[xX][0-9a-fA-F_]+n?$")
_BINARY_RE = re.compile(r"^0[bB][01_]+n?$")
_OCTAL_RE = re.compile(r"^0(?:[oO][0-7_]+|[0-7]+)$")
_DECIMAL_RE = re.compile(r"[.eE]")


def classify_number(text: str) -> NodeKind:
    if _HEX_RE.match(text) or _BINARY_RE.match(text):
        return NodeKind.RADIX_INTEGER
    if _OCTAL_RE.match(text):
        return NodeKind.OCTAL_INTEGER
    if _DECIMAL_RE.search(text):
        return NodeKind.DECIMAL
    return NodeKind.INTEGER


def callee_name(node, text_of) -> str:
    """Dotted name of a call's callee or a ``new`` expression's constructor,
    or ``""`` when it is not a plain identifier / member chain."""
    target = node.child_by_field_name("function")
    if target is None:
        target = node.child_by_field_name("constructor")
    if target is None:
        return ""
    if target.type == "identifier":
        return text_of(target)
    if target.type == "member_expression":
        obj = target.child_by_field_name("object")
        prop = target.child_by_field_name("property")
        if obj is not None and prop is not None and obj.type == "identifier":
            return f"{text_of(obj)}.{text_of(prop)}"
    return ""


def constructor_kind(name: str) -> NodeKind:
    if name in CONSTRUCTOR_KINDS:
        return CONSTRUCTOR_KINDS[name]
    return MEMBER_CALL_KINDS.get(name, NodeKind.OTHER)


def classify(node, text_of) -> NodeKind:
    """Return the NodeKind of *node*; *text_of* maps a node to its source text."""
    ntype = node.type
    if ntype == "number":
        return classify_number(text_of(node))
    if ntype == "call_expression":
        return constructor_kind(callee_name(node, text_of))
    return _NODE_TYPE_KINDS.get(ntype, NodeKind.OTHER)
