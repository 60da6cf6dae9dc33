"""Tests for ConstantEvaluator — folding document-literal expressions."""

from __future__ import annotations

import itertools
import math
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from transpiler import evaluator as evaluator_module
from transpiler.evaluator import (
    ConstantEvaluator,
    EvaluationError,
    canonical_regex_flags,
    decode_escape,
    parse_number,
    to_js_string,
    to_number,
)
from transpiler.evaluator_types import (
    UNDEFINED,
    BinaryValue,
    LongValue,
    ObjectIdValue,
    RegexValue,
)

UTC = timezone.utc


def _eval(source: str, **kwargs):
    return ConstantEvaluator(**kwargs).evaluate(source)


class TestLiterals:
    def test_integer(self):
        assert _eval("42") == 42

    def test_legacy_octal(self):
        assert _eval("010") == 8

    def test_hex(self):
        assert _eval("0x1F") == 31

    def test_decimal(self):
        assert _eval("1.5e1") == 15.0

    def test_string_escapes(self):
        assert _eval('"a\\nb\\x41\\u0042"') == "a\nbAB"

    def test_template_with_substitution(self):
        assert _eval("`a${1 + 1}b`") == "a2b"

    def test_keywords(self):
        assert _eval("true") is True
        assert _eval("null") is None
        assert _eval("undefined") is UNDEFINED

    def test_array_with_hole(self):
        assert _eval("[1, , 2]") == [1, UNDEFINED, 2]

    def test_object(self):
        assert _eval("{a: 1, 'b': [2], 3: true}") == {"a": 1, "b": [2], "3": True}

    def test_unknown_identifier(self):
        with pytest.raises(EvaluationError, match="foo is not defined"):
            _eval("foo")

    def test_unknown_function(self):
        with pytest.raises(EvaluationError, match="alert is not defined"):
            _eval("alert(1)")

    def test_syntax_error(self):
        with pytest.raises(EvaluationError, match="SyntaxError"):
            _eval("1 +")


class TestOperators:
    def test_arithmetic(self):
        assert _eval("1 + 2 * 3") == 7
        assert _eval("2 ** 10") == 1024.0
        assert _eval("7 % 4") == 3

    def test_string_concatenation(self):
        assert _eval("'a' + 1") == "a1"

    def test_unary(self):
        assert _eval("-'3'") == -3
        assert _eval("!0") is True

    def test_division_by_zero(self):
        assert _eval("1 / 0") == math.inf
        assert _eval("-1 / 0") == -math.inf
        assert math.isnan(_eval("0 / 0"))

    def test_unsupported_operator(self):
        with pytest.raises(EvaluationError, match="Unsupported"):
            _eval("1 << 2")


class TestObjectId:
    def test_hex_is_lowercased(self):
        assert _eval('ObjectId("5E9A4BB0C1F2E3D4A5B6C7D8")') == ObjectIdValue(
            hex="5e9a4bb0c1f2e3d4a5b6c7d8"
        )

    def test_twelve_byte_string(self):
        value = _eval('ObjectId("aaaaaaaaaaaa")')
        assert value.to_hex_string() == "61" * 12

    def test_invalid(self):
        with pytest.raises(EvaluationError, match="24 hex characters"):
            _eval('ObjectId("xyz")')

    def test_without_argument_is_not_constant(self):
        with pytest.raises(EvaluationError):
            _eval("ObjectId()")


class TestBinary:
    def test_default_subtype(self):
        assert _eval('Binary("abc")') == BinaryValue(data="abc", sub_type=0)

    def test_subtype(self):
        assert _eval('new Binary("abc", 4)').sub_type == 4

    def test_data_must_be_string(self):
        with pytest.raises(EvaluationError, match="Binary data must be a string"):
            _eval("Binary(1)")

    def test_subtype_range(self):
        with pytest.raises(EvaluationError, match="between 0 and 255"):
            _eval('Binary("abc", 256)')


class TestLong:
    def test_exact_string(self):
        assert _eval('Long("9223372036854775807")') == LongValue(value=2**63 - 1)

    def test_float_is_truncated(self):
        assert _eval("NumberLong(2.9)") == LongValue(value=2)

    def test_low_high_words(self):
        assert _eval("Long(0, -1)") == LongValue(value=-(2**32))
        assert _eval("Long(-1, -1)") == LongValue(value=-1)

    def test_out_of_range(self):
        with pytest.raises(EvaluationError, match="out of range"):
            _eval('Long("9223372036854775808")')

    def test_not_finite(self):
        with pytest.raises(EvaluationError, match="not finite"):
            _eval("Long(1 / 0)")


class TestDate:
    def test_epoch_millis(self):
        assert _eval("Date(1000)") == datetime(1970, 1, 1, 0, 0, 1, tzinfo=UTC)

    def test_iso_string(self):
        assert _eval('ISODate("2020-05-06T07:08:09Z")') == datetime(
            2020, 5, 6, 7, 8, 9, tzinfo=UTC
        )

    def test_naive_string_is_utc(self):
        assert _eval('Date("2020-05-06T07:08:09")') == datetime(
            2020, 5, 6, 7, 8, 9, tzinfo=UTC
        )

    def test_rfc_2822_string(self):
        assert _eval('Date("Wed, 06 May 2020 07:08:09 GMT")') == datetime(
            2020, 5, 6, 7, 8, 9, tzinfo=UTC
        )

    def test_fields(self):
        assert _eval("Date(2020, 0, 15)") == datetime(2020, 1, 15, tzinfo=UTC)

    def test_month_overflow(self):
        assert _eval("Date(2020, 12, 1)") == datetime(2021, 1, 1, tzinfo=UTC)

    def test_two_digit_year(self):
        assert _eval("Date(99, 0)") == datetime(1999, 1, 1, tzinfo=UTC)

    def test_invalid_string(self):
        with pytest.raises(EvaluationError, match="Invalid Date"):
            _eval('Date("nonsense")')

    def test_now_is_aware(self):
        assert _eval("Date()").tzinfo is not None


class TestRegExp:
    def test_literal(self):
        assert _eval("/a+b/ig") == RegexValue(source="a+b", flags="gi")

    def test_constructor_escapes_slash(self):
        assert _eval('RegExp("a/b")') == RegexValue(source="a\\/b", flags="")

    def test_empty_pattern(self):
        assert _eval('RegExp("")').source == "(?:)"

    def test_copies_regex_flags(self):
        assert _eval("new RegExp(/x/m)") == RegexValue(source="x", flags="m")

    def test_duplicate_flags(self):
        with pytest.raises(EvaluationError, match="Invalid flags"):
            _eval('RegExp("a", "gg")')

    def test_canonical_flag_order(self):
        assert canonical_regex_flags("ymi") == "imy"


class TestLimits:
    def test_step_budget(self):
        with pytest.raises(EvaluationError, match="Evaluation exceeded 1 steps"):
            _eval("1 + 2", max_steps=1)

    def test_budget_is_reset_per_evaluation(self):
        evaluator = ConstantEvaluator(max_steps=3)
        assert evaluator.evaluate("1 + 2") == 3
        assert evaluator.evaluate("3 + 4") == 7

    def test_nesting_budget(self):
        assert _eval("(1)", max_depth=2) == 1
        with pytest.raises(EvaluationError, match="Evaluation exceeded 2 nesting levels"):
            _eval("((1))", max_depth=2)

    def test_deep_nesting_is_an_evaluation_error(self):
        with pytest.raises(EvaluationError, match="nesting levels"):
            _eval("Long(" + "(" * 600 + "1" + ")" * 600 + ")")

    def test_depth_is_reset_after_failure(self):
        evaluator = ConstantEvaluator(max_depth=3)
        with pytest.raises(EvaluationError):
            evaluator.evaluate("[[[[1]]]]")
        assert evaluator.evaluate("[[1]]") == [[1]]

    def test_integer_division_overflow(self):
        with pytest.raises(EvaluationError, match="out of range"):
            _eval("1" + "0" * 400 + " / 3")

    def test_timeout(self, monkeypatch):
        clock = itertools.count(start=0, step=5)
        monkeypatch.setattr(
            evaluator_module, "time", SimpleNamespace(monotonic=lambda: next(clock))
        )
        with pytest.raises(EvaluationError, match="timed out after 1.0s"):
            _eval("1", timeout=1.0)


class TestConversions:
    def test_parse_number(self):
        assert parse_number("0b11") == 3
        assert parse_number("1_000") == 1000
        assert parse_number("10n") == 10

    def test_to_number(self):
        assert to_number(" 12 ") == 12
        assert to_number("") == 0
        assert math.isnan(to_number("abc"))

    def test_decode_escape(self):
        assert decode_escape("\\u{1F600}") == "\U0001F600"
        assert decode_escape("\\t") == "\t"

    def test_decode_escape_out_of_range(self):
        with pytest.raises(EvaluationError, match="Invalid Unicode escape sequence"):
            decode_escape("\\u{110000}")

    def test_string_with_out_of_range_escape(self):
        with pytest.raises(EvaluationError, match="Invalid Unicode escape sequence"):
            _eval('"\\u{FFFFFF}"')

    def test_to_js_string(self):
        assert to_js_string(1.0) == "1"
        assert to_js_string(math.nan) == "NaN"
        assert to_js_string([1, None, 2]) == "1,,2"
        assert to_js_string(UNDEFINED) == "undefined"
