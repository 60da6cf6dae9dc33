"""PythonGenerator — extended JavaScript query syntax → Python 3 source."""

from __future__ import annotations

import logging
import re

from ._base import BaseGenerator
from .. import constants
from ..evaluator import EvaluationError
from ..node_kinds import NodeKind, callee_name, constructor_kind
from ..quoting import double_quote, quote_value, remove_quotes, single_quote
from ..translation_types import ErrorKind, Translation
from ..types import NUMBER_LIKE_TYPES, NUMERIC_TYPES, OBJECT_LIKE_TYPES, SemanticType

logger = logging.getLogger(__name__)

# Shape accepted by parseInt(text, 10): optional sign, then a digit.
_INT_PREFIX_RE = re.compile(r"^\s*[+-]?\d")

# First backslash that does not escape a slash.
_REGEX_ESCAPE_RE = re.compile(r"\\(?!/)")


def _arity_error(message: str) -> Translation:
    return Translation.error(ErrorKind.ARITY, message)


def _type_error(message: str) -> Translation:
    return Translation.error(ErrorKind.TYPE, message)


def _value_error(message: str) -> Translation:
    return Translation.error(ErrorKind.VALUE, message)


class PythonGenerator(BaseGenerator):
    """Translates a JavaScript tree-sitter AST into Python source text."""

    def __init__(self, config=None, evaluator=None):
        super().__init__(config, evaluator)
        self._RULES = {
            NodeKind.PROGRAM: self._translate_program,
            NodeKind.EXPRESSION_STATEMENT: self._translate_expression_statement,
            NodeKind.PARENTHESIZED: self._translate_parenthesized,
            NodeKind.ERROR: self._translate_error_node,
            NodeKind.STRING: self._translate_string,
            NodeKind.TEMPLATE_STRING: self._translate_template_string,
            NodeKind.INTEGER: self._translate_integer,
            NodeKind.DECIMAL: self._translate_decimal,
            NodeKind.RADIX_INTEGER: self._translate_radix_integer,
            NodeKind.OCTAL_INTEGER: self._translate_octal,
            NodeKind.BOOLEAN: self._translate_boolean,
            NodeKind.NULL: self._translate_null,
            NodeKind.UNDEFINED: self._translate_undefined,
            NodeKind.OBJECT: self._translate_object,
            NodeKind.ARRAY: self._translate_array,
            NodeKind.REGEX_LITERAL: self._translate_regex,
            NodeKind.UNARY: self._translate_unary,
            NodeKind.NEW: self._translate_new,
            NodeKind.CODE: self._translate_code,
            NodeKind.OBJECT_ID: self._translate_object_id,
            NodeKind.BINARY: self._translate_binary,
            NodeKind.DOUBLE: self._translate_double,
            NodeKind.LONG: self._translate_long,
            NodeKind.DATE: self._translate_date,
            NodeKind.DATE_NOW: self._translate_date_now,
            NodeKind.NUMBER: self._translate_number,
            NodeKind.MAX_KEY: self._translate_max_key,
            NodeKind.MIN_KEY: self._translate_min_key,
            NodeKind.SYMBOL: self._translate_symbol,
            NodeKind.TIMESTAMP: self._translate_timestamp,
            NodeKind.DB_REF: self._translate_db_ref,
            NodeKind.BSON_REGEX: self._translate_bson_regex,
            NodeKind.REGEX_CONSTRUCTOR: self._translate_regex,
            NodeKind.OBJECT_CREATE: self._translate_object_create,
        }
        self._check_exhaustive()

    # ── structure ────────────────────────────────────────────────

    def _translate_program(self, node) -> Translation:
        statements = [c for c in node.named_children if c.type != "comment"]
        if len(statements) == 1:
            return self.translate_node(statements[0])
        return self.visit_children(node, children=statements, separator="\n")

    def _translate_expression_statement(self, node) -> Translation:
        inner = next((c for c in node.named_children if c.type != "comment"), None)
        if inner is None:
            return self._default(node)
        return self.translate_node(inner)

    def _translate_parenthesized(self, node) -> Translation:
        inner = self.translate_node(node.named_children[0])
        if not inner.ok:
            return inner
        return Translation(text=f"({inner.text})", type=inner.type)

    def _translate_error_node(self, node) -> Translation:
        logger.warning(
            "Syntax error at %d:%d, copying %r unchanged",
            node.start_point[0] + 1,
            node.start_point[1],
            self._node_text(node),
        )
        return Translation(text=self._node_text(node))

    # ── literals ─────────────────────────────────────────────────

    def _translate_string(self, node) -> Translation:
        return Translation(
            text=single_quote(self._node_text(node)), type=SemanticType.STRING
        )

    def _translate_template_string(self, node) -> Translation:
        if any(c.type == "template_substitution" for c in node.children):
            return self._default(node)
        return self._translate_string(node)

    def _translate_integer(self, node) -> Translation:
        text = self._node_text(node).rstrip("n")
        # Legacy decimal with leading zeros, e.g. 08
        if len(text) > 1 and text.startswith("0"):
            text = text.lstrip("0") or "0"
        return Translation(text=text, type=SemanticType.INTEGER)

    def _translate_decimal(self, node) -> Translation:
        return Translation(text=self._node_text(node), type=SemanticType.DECIMAL)

    def _translate_radix_integer(self, node) -> Translation:
        return Translation(
            text=self._node_text(node).rstrip("n"), type=SemanticType.INTEGER
        )

    def _translate_octal(self, node) -> Translation:
        text = self._node_text(node)
        digits = text[2:] if text[1] in "oO" else text[1:]
        return Translation(
            text=f"{constants.PY_OCTAL_PREFIX}{digits}", type=SemanticType.OCTAL
        )

    def _translate_boolean(self, node) -> Translation:
        text = self._node_text(node)
        return Translation(
            text=f"{text[0].upper()}{text[1:]}", type=SemanticType.BOOLEAN
        )

    def _translate_null(self, node) -> Translation:
        return Translation(text=constants.PY_NONE, type=SemanticType.NULL)

    def _translate_undefined(self, node) -> Translation:
        return Translation(text=constants.PY_NONE, type=SemanticType.UNDEFINED)

    def _translate_object(self, node) -> Translation:
        entries: list[str] = []
        for child in node.named_children:
            if child.type == "comment":
                continue
            if child.type == "pair":
                key = self._property_key(child.child_by_field_name("key"))
                if not key.ok:
                    return key
                value = self.translate_node(child.child_by_field_name("value"))
                if not value.ok:
                    return value
                entries.append(f"{key.text}: {value.text}")
            elif child.type == "shorthand_property_identifier":
                name = self._node_text(child)
                entries.append(f"{single_quote(name)}: {name}")
            elif child.type == "spread_element":
                spread = self.translate_node(child.named_children[0])
                if not spread.ok:
                    return spread
                entries.append(f"**{spread.text}")
            else:
                member = self._default(child)
                if not member.ok:
                    return member
                entries.append(member.text)
        return Translation(
            text="{" + ", ".join(entries) + "}", type=SemanticType.OBJECT
        )

    def _property_key(self, node) -> Translation:
        if node.type == "computed_property_name":
            return self.translate_node(node.named_children[0])
        return Translation(
            text=single_quote(self._node_text(node)), type=SemanticType.STRING
        )

    def _translate_array(self, node) -> Translation:
        elements: list[str] = []
        slot_filled = False
        for child in node.children:
            if child.type == ",":
                # An empty slot between commas is an elision.
                if not slot_filled:
                    elements.append(constants.PY_NONE)
                slot_filled = False
            elif child.is_named and child.type != "comment":
                if child.type == "spread_element":
                    element = self.translate_node(child.named_children[0])
                    prefix = "*"
                else:
                    element = self.translate_node(child)
                    prefix = ""
                if not element.ok:
                    return element
                elements.append(f"{prefix}{element.text}")
                slot_filled = True
        return Translation(
            text="[" + ", ".join(elements) + "]", type=SemanticType.ARRAY
        )

    def _translate_unary(self, node) -> Translation:
        op = self._node_text(node.child_by_field_name("operator"))
        if op not in ("-", "+", "!"):
            return self._default(node)
        operand = self.translate_node(node.child_by_field_name("argument"))
        if not operand.ok:
            return operand
        if op == "!":
            return Translation(text=f"not {operand.text}", type=SemanticType.BOOLEAN)
        result_type = (
            operand.type if operand.type in NUMERIC_TYPES else SemanticType.UNKNOWN
        )
        return Translation(text=f"{op}{operand.text}", type=result_type)

    def _translate_new(self, node) -> Translation:
        """Python has no ``new``: known constructors go to their own rule,
        anything else is emitted without the keyword."""
        kind = constructor_kind(callee_name(node, self._node_text))
        if kind is not NodeKind.OTHER:
            return self._RULES[kind](node)
        return self.visit_children(node, children=node.children[1:])

    # ── document-literal constructors ────────────────────────────

    def _translate_code(self, node) -> Translation:
        args = self._arguments(node)
        if len(args) not in (1, 2):
            return _arity_error("Code requires one or two arguments")
        code = single_quote(self._node_text(args[0]))
        if len(args) == 1:
            return Translation(text=f"Code({code})", type=SemanticType.CODE)
        scope = self.translate_node(args[1])
        if not scope.ok:
            return scope
        if scope.type != SemanticType.OBJECT:
            return _type_error("Code requires scope to be an object")
        return Translation(text=f"Code({code}, {scope.text})", type=SemanticType.CODE)

    def _translate_object_id(self, node) -> Translation:
        """The hex string comes from evaluating the constructor, so any
        accepted argument form yields its canonical 24-character id."""
        args = self._arguments(node)
        if not args:
            return Translation(text="ObjectId()", type=SemanticType.OBJECT_ID)
        if len(args) != 1:
            return _arity_error("ObjectId requires zero or one argument")
        try:
            hexstr = self._fold(node).to_hex_string()
        except EvaluationError as error:
            return self._evaluation_failure(node, error)
        return Translation(
            text=f"ObjectId({quote_value(hexstr)})", type=SemanticType.OBJECT_ID
        )

    def _translate_binary(self, node) -> Translation:
        args = self._arguments(node)
        if len(args) not in (1, 2):
            return _arity_error("Binary requires one or two argument")
        try:
            binary = self._fold(node)
        except EvaluationError as error:
            return self._evaluation_failure(node, error)
        data = f"bytes({quote_value(str(binary))}, 'utf-8')"
        if len(args) == 1:
            return Translation(text=f"Binary({data})", type=SemanticType.BINARY)
        subtype = constants.BINARY_SUBTYPES.get(binary.sub_type)
        if subtype is None:
            return _value_error(f"Binary subtype {binary.sub_type} is not supported")
        return Translation(text=f"Binary({data}, {subtype})", type=SemanticType.BINARY)

    def _translate_numeric_cast(
        self, node, name: str, cast: str, result_type: SemanticType
    ) -> Translation:
        args = self._arguments(node)
        if len(args) != 1:
            return _arity_error(f"{name} requires one argument")
        arg = self.translate_node(args[0])
        if not arg.ok:
            return arg
        value = remove_quotes(arg.text)
        message = f"{name} requires a number or a string argument"
        if arg.type not in NUMBER_LIKE_TYPES:
            return _type_error(message)
        if not _INT_PREFIX_RE.match(value):
            return _value_error(message)
        return Translation(text=f"{cast}({value})", type=result_type)

    def _translate_double(self, node) -> Translation:
        return self._translate_numeric_cast(
            node, "Double", "float", SemanticType.DECIMAL
        )

    def _translate_number(self, node) -> Translation:
        return self._translate_numeric_cast(
            node, "Number", "int", SemanticType.INTEGER
        )

    def _translate_long(self, node) -> Translation:
        args = self._arguments(node)
        if len(args) not in (1, 2):
            return _arity_error("Long requires one or two argument")
        try:
            long_value = self._fold(node)
        except EvaluationError as error:
            return self._evaluation_failure(node, error)
        return Translation(text=f"Int64({long_value})", type=SemanticType.LONG)

    def _translate_date(self, node) -> Translation:
        if not self._arguments(node):
            return self._translate_date_now(node)
        try:
            date = self._fold(node)
        except EvaluationError as error:
            return self._evaluation_failure(node, error)
        fields = ", ".join(
            str(f)
            for f in (
                date.year,
                date.month,
                date.day,
                date.hour,
                date.minute,
                date.second,
            )
        )
        return Translation(
            text=f"datetime.datetime({fields}, tzinfo={constants.PY_UTC})",
            type=SemanticType.DATE,
        )

    def _translate_date_now(self, node) -> Translation:
        return Translation(text=constants.PY_NOW, type=SemanticType.DATE)

    def _translate_sentinel_key(
        self, node, name: str, result_type: SemanticType
    ) -> Translation:
        if self._arguments(node):
            return _arity_error(f"{name} requires no arguments")
        return Translation(text=f"{name}()", type=result_type)

    def _translate_max_key(self, node) -> Translation:
        return self._translate_sentinel_key(node, "MaxKey", SemanticType.MAX_KEY)

    def _translate_min_key(self, node) -> Translation:
        return self._translate_sentinel_key(node, "MinKey", SemanticType.MIN_KEY)

    def _translate_symbol(self, node) -> Translation:
        args = self._arguments(node)
        if len(args) != 1:
            return _arity_error("Symbol requires one argument")
        symbol = self.translate_node(args[0])
        if not symbol.ok:
            return symbol
        if symbol.type != SemanticType.STRING:
            return _type_error("Symbol requires a string argument")
        return Translation(
            text=f"bytes({symbol.text}, 'utf-8').decode('utf-8')",
            type=SemanticType.SYMBOL,
        )

    def _translate_timestamp(self, node) -> Translation:
        args = self._arguments(node)
        if len(args) != 2:
            return _arity_error("Timestamp requires two arguments")
        low = self.translate_node(args[0])
        if not low.ok:
            return low
        if low.type != SemanticType.INTEGER:
            return _type_error("Timestamp first argument requires integer arguments")
        high = self.translate_node(args[1])
        if not high.ok:
            return high
        if high.type != SemanticType.INTEGER:
            return _type_error("Timestamp second argument requires integer arguments")
        return Translation(
            text=f"Timestamp({low.text}, {high.text})", type=SemanticType.TIMESTAMP
        )

    def _translate_db_ref(self, node) -> Translation:
        args = self._arguments(node)
        if len(args) not in (2, 3):
            return _arity_error("DBRef requires two or three arguments")
        ns = self.translate_node(args[0])
        if not ns.ok:
            return ns
        if ns.type != SemanticType.STRING:
            return _type_error("DBRef first argumnet requires string namespace")
        oid = self.translate_node(args[1])
        if not oid.ok:
            return oid
        if oid.type not in OBJECT_LIKE_TYPES:
            return _type_error("DBRef requires object OID")
        if len(args) == 2:
            return Translation(
                text=f"DBRef({ns.text}, {oid.text})", type=SemanticType.DB_REF
            )
        db = self.translate_node(args[2])
        if not db.ok:
            return db
        if db.type != SemanticType.STRING:
            return _type_error("DbRef requires string collection")
        return Translation(
            text=f"DBRef({ns.text}, {oid.text}, {db.text})", type=SemanticType.DB_REF
        )

    def _translate_object_create(self, node) -> Translation:
        args = self._arguments(node)
        if len(args) != 1:
            return _arity_error("Object.create() requires one argument")
        obj = self.translate_node(args[0])
        if not obj.ok:
            return obj
        if obj.type != SemanticType.OBJECT:
            return _type_error("Object.create() requires an object argument")
        return Translation(text=obj.text, type=SemanticType.OBJECT)

    # ── regular expressions ──────────────────────────────────────

    def _translate_regex(self, node) -> Translation:
        """Regex literals and ``RegExp(...)`` share one rule: the evaluated
        pattern is emitted as a raw string and JavaScript flags become an
        inline flag group."""
        try:
            regex = self._fold(node)
        except EvaluationError as error:
            return self._evaluation_failure(node, error)
        # TODO: only the first backslash is doubled; confirm whether every
        # occurrence should be before changing the emitted pattern.
        escaped = _REGEX_ESCAPE_RE.sub(r"\\\\", regex.source, count=1)
        flags = "".join(
            sorted(constants.PYTHON_REGEX_FLAGS.get(f, "") for f in regex.flags)
        )
        if flags:
            escaped = f"{escaped}(?{flags})"
        return Translation(
            text=f"re.compile(r{double_quote(escaped)})", type=SemanticType.REGEX
        )

    def _translate_bson_regex(self, node) -> Translation:
        args = self._arguments(node)
        if len(args) not in (1, 2):
            return _arity_error("BSONRegExp requires one or two arguments")
        pattern = self.translate_node(args[0])
        if not pattern.ok:
            return pattern
        if pattern.type != SemanticType.STRING:
            return _type_error("BSONRegExp requires pattern to be a string")
        if len(args) == 1:
            return Translation(text=f"RegExp({pattern.text})", type=SemanticType.REGEX)
        flags = self.translate_node(args[1])
        if not flags.ok:
            return flags
        if flags.type != SemanticType.STRING:
            return _type_error("BSONRegExp requires flags to be a string")
        flag_chars = remove_quotes(flags.text)
        unsupported = "".join(
            c for c in flag_chars if c not in constants.BSON_REGEX_FLAGS
        )
        if unsupported:
            return _value_error(
                f"the regular expression contains unsuppoted '{unsupported}' flag"
            )
        return Translation(
            text=f"RegExp({pattern.text}, {single_quote(flag_chars)})",
            type=SemanticType.REGEX,
        )
