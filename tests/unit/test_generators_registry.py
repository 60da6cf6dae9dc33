"""Tests for the generator registry and dispatch-table exhaustiveness."""

from __future__ import annotations

import pytest

from transpiler.generators import SUPPORTED_TARGETS, BaseGenerator, get_generator
from transpiler.generators.python import PythonGenerator
from transpiler.node_kinds import NodeKind
from transpiler.translation_types import TranslatorConfig


class _IncompleteGenerator(BaseGenerator):
    def __init__(self):
        super().__init__()
        self._RULES = {NodeKind.STRING: self._default}
        self._check_exhaustive()


class _TrimmedPythonGenerator(PythonGenerator):
    def _check_exhaustive(self):
        del self._RULES[NodeKind.SYMBOL]
        super()._check_exhaustive()


class TestGetGenerator:
    def test_python(self):
        assert isinstance(get_generator("python"), PythonGenerator)

    def test_supported_targets(self):
        assert SUPPORTED_TARGETS == ("python",)

    def test_unknown_target_raises(self):
        with pytest.raises(ValueError, match="Unsupported target language: ruby"):
            get_generator("ruby")

    def test_config_is_passed_through(self):
        config = TranslatorConfig(max_eval_steps=7)
        generator = get_generator("python", config)
        assert generator._config is config


class TestExhaustiveness:
    def test_python_generator_covers_every_kind(self):
        rules = PythonGenerator()._RULES
        assert set(rules) == {k for k in NodeKind if k is not NodeKind.OTHER}

    def test_incomplete_table_raises(self):
        with pytest.raises(TypeError, match="no rule for node kinds"):
            _IncompleteGenerator()

    def test_missing_rule_is_named(self):
        with pytest.raises(TypeError, match="SYMBOL"):
            _TrimmedPythonGenerator()
