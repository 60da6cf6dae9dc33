"""Tests for the composable API functions in transpiler.api."""

import pytest

from transpiler import Translation, TranslatorConfig, dump_translation, translate_source
from transpiler.types import SemanticType

DOCUMENT_SOURCE = '{_id: ObjectId("5e9a4bb0c1f2e3d4a5b6c7d8"), n: NumberLong(3)}'


class TestTranslateSource:
    def test_returns_translation(self):
        result = translate_source(DOCUMENT_SOURCE)
        assert isinstance(result, Translation)
        assert result.ok
        assert result.type == SemanticType.OBJECT

    def test_text(self):
        result = translate_source(DOCUMENT_SOURCE)
        assert result.text == (
            "{'_id': ObjectId('5e9a4bb0c1f2e3d4a5b6c7d8'), 'n': Int64(3)}"
        )

    def test_explicit_target(self):
        assert translate_source("true", target="python").text == "True"

    def test_unknown_target_raises(self):
        with pytest.raises(ValueError):
            translate_source("true", target="cobol")

    def test_config_limits_evaluation(self):
        config = TranslatorConfig(max_eval_steps=1)
        result = translate_source("Long(1 + 2)", config=config)
        assert not result.ok
        assert result.render() == "Evaluation exceeded 1 steps"

    def test_surrounding_whitespace_and_semicolon(self):
        assert translate_source("  MaxKey();\n").text == "MaxKey()"

    def test_comment_is_ignored(self):
        assert translate_source("[1] // trailing").text == "[1]"


class TestDumpTranslation:
    def test_returns_string(self):
        assert isinstance(dump_translation(DOCUMENT_SOURCE), str)

    def test_local_failure_has_prefix(self):
        assert dump_translation("Symbol()").startswith("Error: ")

    def test_str_matches_render(self):
        result = translate_source("Symbol()")
        assert str(result) == dump_translation("Symbol()")


class TestNonExpressionInput:
    def test_empty_source(self):
        result = translate_source("")
        assert result.ok
        assert result.text == ""

    def test_whitespace_only(self):
        assert dump_translation("  \n ") == ""

    def test_several_statements(self):
        assert dump_translation("1; true") == "1\nTrue"
