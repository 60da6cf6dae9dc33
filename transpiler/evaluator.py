"""Constant evaluator — folds document-literal expressions to runtime values.

Only the small, side-effect-free subset of the expression language needed to
derive canonical values is understood: literals, arithmetic on literals, and
the ObjectId / Binary / Long / Date / RegExp constructors.  Nothing here
performs I/O or reads host state (a zero-argument ``Date`` reads the clock),
and every evaluation is bounded by the limits given to ``ConstantEvaluator``.
"""

from __future__ import annotations

import logging
import math
import re
import time
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Callable

from . import constants
from .evaluator_types import (
    UNDEFINED,
    BinaryValue,
    LongValue,
    ObjectIdValue,
    RegexValue,
)
from .node_kinds import callee_name
from .parser import Parser, ParserFactory, TreeSitterParserFactory, expression_root

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_SIMPLE_ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}

_LINE_CONTINUATIONS = frozenset({"\n", "\r\n", "\r", "\u2028", "\u2029"})

_HEX24_RE = re.compile(r"^[0-9a-fA-F]{24}$")


class EvaluationError(Exception):
    """Raised when an expression cannot be folded to a constant."""


def decode_escape(sequence: str) -> str:
    """Decode one JavaScript string escape sequence such as ``\\x41``."""
    body = sequence[1:]
    try:
        if body.startswith("u{") and body.endswith("}"):
            return chr(int(body[2:-1], 16))
        if body.startswith("u") and len(body) == 5:
            return chr(int(body[1:], 16))
        if body.startswith("x") and len(body) == 3:
            return chr(int(body[1:], 16))
    except (ValueError, OverflowError):
        raise EvaluationError(f"Invalid Unicode escape sequence {sequence}") from None
    if body in _LINE_CONTINUATIONS:
        return ""
    return _SIMPLE_ESCAPES.get(body, body)


def parse_number(text: str) -> int | float:
    """Parse a JavaScript numeric literal."""
    cleaned = text.replace("_", "")
    if cleaned.endswith("n"):
        cleaned = cleaned[:-1]
    lowered = cleaned.lower()
    if lowered.startswith("0x"):
        return int(lowered[2:], 16)
    if lowered.startswith("0b"):
        return int(lowered[2:], 2)
    if lowered.startswith("0o"):
        return int(lowered[2:], 8)
    if len(lowered) > 1 and lowered[0] == "0" and lowered.isdigit():
        if all(c in "01234567" for c in lowered):
            return int(lowered, 8)
        return int(lowered, 10)
    if any(c in lowered for c in ".e"):
        return float(lowered)
    return int(lowered)


def to_number(value: Any) -> int | float:
    """JavaScript ``Number(value)`` for the value types the evaluator knows."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, LongValue):
        return value.value
    if value is None:
        return 0
    if isinstance(value, str):
        text = value.strip()
        if text == "":
            return 0
        try:
            if text[0] in "+-":
                return _signed(text)
            return parse_number(text)
        except ValueError:
            return math.nan
    if isinstance(value, datetime):
        return int((value - EPOCH) / timedelta(milliseconds=1))
    return math.nan


def _signed(text: str) -> int | float:
    sign = -1 if text[0] == "-" else 1
    return sign * parse_number(text[1:])


def to_js_string(value: Any) -> str:
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, list):
        return ",".join("" if v is None or v is UNDEFINED else to_js_string(v) for v in value)
    if isinstance(value, dict):
        return "[object Object]"
    if isinstance(value, RegexValue):
        return f"/{value.source}/{value.flags}"
    if isinstance(value, ObjectIdValue):
        return value.hex
    return str(value)


def _truthy(value: Any) -> bool:
    if value is UNDEFINED or value is None:
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    if isinstance(value, (bool, int, float, str)):
        return bool(value)
    return True


def canonical_regex_flags(flags: str) -> str:
    """Validate JavaScript regex flags and return them in canonical order."""
    if len(set(flags)) != len(flags) or any(
        c not in constants.JS_REGEX_FLAG_ORDER for c in flags
    ):
        raise EvaluationError(
            f"Invalid flags supplied to RegExp constructor '{flags}'"
        )
    return "".join(c for c in constants.JS_REGEX_FLAG_ORDER if c in flags)


def _regex_source(pattern: str) -> str:
    if pattern == "":
        return "(?:)"
    escaped = re.sub(r"(?<!\\)((?:\\\\)*)/", r"\1\\/", pattern)
    return escaped.replace("\n", "\\n")


def parse_date_string(text: str) -> datetime:
    candidate = text.strip()
    if candidate[-1:] in ("Z", "z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        try:
            parsed = parsedate_to_datetime(candidate)
        except (TypeError, ValueError, IndexError):
            raise EvaluationError(constants.INVALID_DATE_MESSAGE) from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class ConstantEvaluator:
    """Evaluates one expression snippet to a Python-side runtime value."""

    def __init__(
        self,
        parser_factory: ParserFactory | None = None,
        max_steps: int = constants.DEFAULT_MAX_EVAL_STEPS,
        timeout: float = constants.DEFAULT_EVAL_TIMEOUT,
        max_depth: int = constants.DEFAULT_MAX_DEPTH,
    ):
        self._parser = Parser(parser_factory or TreeSitterParserFactory())
        self._max_steps = max_steps
        self._timeout = timeout
        self._max_depth = max_depth
        self._depth = 0
        self._steps = 0
        self._deadline = 0.0
        self._source: bytes = b""
        self._EVAL_DISPATCH: dict[str, Callable] = {
            "number": self._eval_number,
            "string": self._eval_quoted,
            "template_string": self._eval_quoted,
            "true": lambda _: True,
            "false": lambda _: False,
            "null": lambda _: None,
            "undefined": lambda _: UNDEFINED,
            "identifier": self._eval_identifier,
            "parenthesized_expression": self._eval_paren,
            "unary_expression": self._eval_unary,
            "binary_expression": self._eval_binary,
            "array": self._eval_array,
            "object": self._eval_object,
            "regex": self._eval_regex,
            "call_expression": self._eval_call,
            "new_expression": self._eval_call,
        }
        self._BUILTINS: dict[str, Callable[[list[Any]], Any]] = {
            "ObjectId": self._make_object_id,
            "Binary": self._make_binary,
            "Long": self._make_long,
            "NumberLong": self._make_long,
            "Date": self._make_date,
            "ISODate": self._make_date,
            "RegExp": self._make_regex,
            "Number": lambda args: to_number(args[0]) if args else 0,
            "String": lambda args: to_js_string(args[0]) if args else "",
        }

    # ── entry point ──────────────────────────────────────────────

    def evaluate(self, source: str) -> Any:
        """Evaluate *source* and return its value.

        Raises ``EvaluationError`` for anything outside the supported subset,
        malformed constructor arguments, or when a limit is exceeded.
        """
        logger.debug("Evaluating %r", source)
        tree, self._source = self._parser.parse_expression(source)
        if tree.root_node.has_error:
            raise EvaluationError(f"SyntaxError: unable to parse '{source.strip()}'")
        self._steps = 0
        self._deadline = time.monotonic() + self._timeout
        self._depth = 0
        return self._eval(expression_root(tree))

    # ── helpers ──────────────────────────────────────────────────

    def _node_text(self, node) -> str:
        return self._source[node.start_byte : node.end_byte].decode("utf-8")

    def _tick(self):
        self._steps += 1
        if self._steps > self._max_steps:
            raise EvaluationError(f"Evaluation exceeded {self._max_steps} steps")
        if time.monotonic() > self._deadline:
            raise EvaluationError(f"Evaluation timed out after {self._timeout}s")

    def _eval(self, node) -> Any:
        self._tick()
        handler = self._EVAL_DISPATCH.get(node.type)
        if handler is None:
            raise EvaluationError(
                f"Unsupported expression in constant evaluation: {node.type}"
            )
        if self._depth >= self._max_depth:
            raise EvaluationError(
                f"Evaluation exceeded {self._max_depth} nesting levels"
            )
        self._depth += 1
        try:
            return handler(node)
        finally:
            self._depth -= 1

    # ── literals ─────────────────────────────────────────────────

    def _eval_number(self, node) -> int | float:
        return parse_number(self._node_text(node))

    def _eval_quoted(self, node) -> str:
        """Decode a string or template literal.

        Raw text is read from the gaps between escape sequences and
        substitutions, so fragment nodes need not be present in the tree.
        """
        parts = []
        pos = node.start_byte + 1
        end = node.end_byte - 1
        for child in node.children:
            if child.type not in ("escape_sequence", "template_substitution"):
                continue
            parts.append(self._source[pos : child.start_byte].decode("utf-8"))
            if child.type == "escape_sequence":
                parts.append(decode_escape(self._node_text(child)))
            else:
                inner = child.named_children[0]
                parts.append(to_js_string(self._eval(inner)))
            pos = child.end_byte
        parts.append(self._source[pos:end].decode("utf-8"))
        return "".join(parts)

    def _eval_identifier(self, node) -> Any:
        name = self._node_text(node)
        if name == "undefined":
            return UNDEFINED
        if name == "NaN":
            return math.nan
        if name == "Infinity":
            return math.inf
        raise EvaluationError(f"{name} is not defined")

    def _eval_paren(self, node) -> Any:
        return self._eval(node.named_children[0])

    def _eval_unary(self, node) -> Any:
        op = self._node_text(node.child_by_field_name("operator"))
        value = self._eval(node.child_by_field_name("argument"))
        if op == "-":
            return -to_number(value)
        if op == "+":
            return to_number(value)
        if op == "!":
            return not _truthy(value)
        raise EvaluationError(f"Unsupported operator in constant evaluation: {op}")

    def _eval_binary(self, node) -> Any:
        op = self._node_text(node.child_by_field_name("operator"))
        lhs = self._eval(node.child_by_field_name("left"))
        rhs = self._eval(node.child_by_field_name("right"))
        if op == "+" and (isinstance(lhs, str) or isinstance(rhs, str)):
            return to_js_string(lhs) + to_js_string(rhs)
        a, b = to_number(lhs), to_number(rhs)
        if op == "+":
            return a + b
        if op == "-":
            return a - b
        if op == "*":
            return a * b
        if op == "**":
            try:
                result = float(a) ** float(b)
            except (OverflowError, ZeroDivisionError):
                return math.inf
            return math.nan if isinstance(result, complex) else result
        if op in ("/", "%"):
            if b == 0:
                if op == "%" or a == 0 or math.isnan(a):
                    return math.nan
                return math.copysign(math.inf, a)
            try:
                return a / b if op == "/" else math.fmod(a, b)
            except OverflowError:
                raise EvaluationError("Numeric result out of range") from None
        raise EvaluationError(f"Unsupported operator in constant evaluation: {op}")

    def _eval_array(self, node) -> list[Any]:
        items: list[Any] = []
        pending_slot = False
        for child in node.children:
            if child.type == ",":
                if not pending_slot:
                    items.append(UNDEFINED)
                pending_slot = False
            elif child.is_named:
                items.append(self._eval(child))
                pending_slot = True
        return items

    def _eval_object(self, node) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for child in node.named_children:
            if child.type == "pair":
                key_node = child.child_by_field_name("key")
                if key_node.type == "string":
                    key = self._eval_quoted(key_node)
                elif key_node.type == "number":
                    key = to_js_string(self._eval_number(key_node))
                else:
                    key = self._node_text(key_node)
                result[key] = self._eval(child.child_by_field_name("value"))
            else:
                raise EvaluationError(
                    f"Unsupported object member in constant evaluation: {child.type}"
                )
        return result

    def _eval_regex(self, node) -> RegexValue:
        pattern = node.child_by_field_name("pattern")
        flags = node.child_by_field_name("flags")
        return RegexValue(
            source=self._node_text(pattern) if pattern is not None else "(?:)",
            flags=canonical_regex_flags(self._node_text(flags) if flags else ""),
        )

    # ── constructors ─────────────────────────────────────────────

    def _eval_call(self, node) -> Any:
        name = callee_name(node, self._node_text)
        builtin = self._BUILTINS.get(name)
        if builtin is None:
            raise EvaluationError(f"{name or self._node_text(node)} is not defined")
        args_node = node.child_by_field_name("arguments")
        args = (
            [self._eval(c) for c in args_node.named_children if c.type != "comment"]
            if args_node is not None
            else []
        )
        return builtin(args)

    def _make_object_id(self, args: list[Any]) -> ObjectIdValue:
        if not args or args[0] is None or args[0] is UNDEFINED:
            raise EvaluationError("ObjectId() without an argument has no constant value")
        value = args[0]
        if isinstance(value, ObjectIdValue):
            return value
        if isinstance(value, str):
            if _HEX24_RE.match(value):
                return ObjectIdValue(hex=value.lower())
            if len(value) == 12:
                try:
                    return ObjectIdValue(hex=value.encode("latin-1").hex())
                except UnicodeEncodeError:
                    pass
        raise EvaluationError(constants.OBJECT_ID_ARGUMENT_MESSAGE)

    def _make_binary(self, args: list[Any]) -> BinaryValue:
        if not args or not isinstance(args[0], str):
            raise EvaluationError("Binary data must be a string")
        sub_type = args[1] if len(args) > 1 else 0
        if (
            isinstance(sub_type, bool)
            or not isinstance(sub_type, (int, float))
            or not float(sub_type).is_integer()
            or not 0 <= sub_type <= 255
        ):
            raise EvaluationError("Binary subtype must be an integer between 0 and 255")
        return BinaryValue(data=args[0], sub_type=int(sub_type))

    def _make_long(self, args: list[Any]) -> LongValue:
        if len(args) == 1 and isinstance(args[0], LongValue):
            return args[0]
        if len(args) == 1:
            number = to_number(args[0])
            if isinstance(number, float):
                if not math.isfinite(number):
                    raise EvaluationError(f"Long value {to_js_string(args[0])} is not finite")
                number = int(number)
            value = number
        elif len(args) == 2:
            words = [to_number(a) for a in args]
            if not all(math.isfinite(w) for w in words):
                raise EvaluationError("Long low and high bits must be finite numbers")
            low, high = (int(w) for w in words)
            value = ((high & 0xFFFFFFFF) << 32) | (low & 0xFFFFFFFF)
            if value > INT64_MAX:
                value -= 2**64
        else:
            raise EvaluationError("Long requires one or two arguments")
        if not INT64_MIN <= value <= INT64_MAX:
            raise EvaluationError(f"Long value {value} is out of range")
        return LongValue(value=value)

    def _make_date(self, args: list[Any]) -> datetime:
        if not args:
            return datetime.now(timezone.utc)
        if len(args) == 1:
            value = args[0]
            if isinstance(value, datetime):
                return value
            if isinstance(value, str):
                return parse_date_string(value)
            millis = to_number(value)
            if not math.isfinite(millis):
                raise EvaluationError(constants.INVALID_DATE_MESSAGE)
            try:
                return EPOCH + timedelta(milliseconds=int(millis))
            except OverflowError:
                raise EvaluationError(constants.INVALID_DATE_MESSAGE) from None
        fields = [to_number(a) for a in args[:7]]
        if not all(math.isfinite(f) for f in fields):
            raise EvaluationError(constants.INVALID_DATE_MESSAGE)
        defaults = [1, 0, 0, 0, 0]
        year, month, day, hour, minute, second, millis = [
            int(f) for f in fields
        ] + defaults[len(fields) - 2 :]
        if 0 <= year <= 99:
            year += 1900
        year += month // 12
        month %= 12
        try:
            return datetime(year, month + 1, 1, tzinfo=timezone.utc) + timedelta(
                days=day - 1,
                hours=hour,
                minutes=minute,
                seconds=second,
                milliseconds=millis,
            )
        except (ValueError, OverflowError):
            raise EvaluationError(constants.INVALID_DATE_MESSAGE) from None

    def _make_regex(self, args: list[Any]) -> RegexValue:
        pattern = args[0] if args else UNDEFINED
        flags = args[1] if len(args) > 1 else UNDEFINED
        if isinstance(pattern, RegexValue):
            source = pattern.source
            default_flags = pattern.flags
        else:
            source = _regex_source("" if pattern is UNDEFINED else to_js_string(pattern))
            default_flags = ""
        flag_text = default_flags if flags is UNDEFINED else to_js_string(flags)
        return RegexValue(source=source, flags=canonical_regex_flags(flag_text))
