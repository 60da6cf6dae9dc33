"""Composable API functions for the transpiler.

Each function corresponds to a CLI workflow but is callable programmatically
without argparse.
"""

from __future__ import annotations

import logging

from .generators import get_generator
from .parser import Parser, TreeSitterParserFactory
from .translation_types import Translation, TranslatorConfig

logger = logging.getLogger(__name__)


def translate_source(
    source: str,
    target: str | None = None,
    config: TranslatorConfig | None = None,
) -> Translation:
    """Parse an expression snippet and translate it to *target*.

    Args:
        source: The expression text, e.g. ``ObjectId("...")``.
        target: Target language name; defaults to ``config.target``.
        config: Translation settings (evaluation limits, default target).

    Returns:
        The root Translation; ``render()`` gives the output text or the
        diagnostic.
    """
    config = config or TranslatorConfig()
    target = target or config.target
    logger.info("Translating snippet to %s (%d bytes)", target, len(source))
    generator = get_generator(target, config)
    tree, parsed = Parser(TreeSitterParserFactory()).parse_expression(source)
    return generator.translate_tree(tree, parsed)


def dump_translation(
    source: str,
    target: str | None = None,
    config: TranslatorConfig | None = None,
) -> str:
    """Translate *source* and return the displayable result.

    Returns:
        Target source text, or a diagnostic (``Error: ...`` or the
        evaluator's message).
    """
    return translate_source(source, target, config).render()
