"""BaseGenerator — language-agnostic tree-sitter AST → target source walking."""

from __future__ import annotations

import logging
from typing import Callable

from tree_sitter import Node, Tree

from ..evaluator import ConstantEvaluator, EvaluationError
from ..generator import Generator
from ..node_kinds import NodeKind, classify
from ..parser import expression_root
from ..translation_types import ErrorKind, Translation, TranslatorConfig

logger = logging.getLogger(__name__)


class BaseGenerator(Generator):
    """Base class for code generators.

    Subclasses populate ``_RULES`` with a handler for every ``NodeKind``
    except ``OTHER`` and call ``_check_exhaustive`` once the table is built.
    Nodes whose kind has no rule go to ``_default``, which concatenates the
    translations of the node's children.
    """

    def __init__(
        self,
        config: TranslatorConfig | None = None,
        evaluator: ConstantEvaluator | None = None,
    ):
        self._config = config or TranslatorConfig()
        self._evaluator = evaluator or ConstantEvaluator(
            max_steps=self._config.max_eval_steps,
            timeout=self._config.eval_timeout,
            max_depth=self._config.max_depth,
        )
        self._source: bytes = b""
        self._depth = 0
        self._RULES: dict[NodeKind, Callable[..., Translation]] = {}

    def _check_exhaustive(self):
        missing = [
            kind.value
            for kind in NodeKind
            if kind is not NodeKind.OTHER and kind not in self._RULES
        ]
        if missing:
            raise TypeError(
                f"{type(self).__name__} has no rule for node kinds: {', '.join(missing)}"
            )

    # ── helpers ──────────────────────────────────────────────────

    def _node_text(self, node: Node) -> str:
        return self._source[node.start_byte : node.end_byte].decode("utf-8")

    def _arguments(self, node: Node) -> list[Node]:
        """Argument expressions of a call / ``new`` node; ``[]`` when there
        are no parentheses or they are empty."""
        args_node = node.child_by_field_name("arguments")
        if args_node is None:
            return []
        return [c for c in args_node.named_children if c.type != "comment"]

    def _fold(self, node):
        """Evaluate the source text of *node* to its runtime value.

        Raises ``EvaluationError``; rules catch it and return
        ``_evaluation_failure`` instead.
        """
        return self._evaluator.evaluate(self._node_text(node))

    def _evaluation_failure(self, node, error: EvaluationError) -> Translation:
        logger.info("Could not fold %r: %s", self._node_text(node), error)
        return Translation.error(ErrorKind.EVALUATION, str(error))

    # ── entry points ─────────────────────────────────────────────

    def translate(self, tree: Tree, source: bytes) -> str:
        return self.translate_tree(tree, source).render()

    def translate_tree(self, tree: Tree, source: bytes) -> Translation:
        self._source = source
        self._depth = 0
        return self.translate_node(expression_root(tree))

    # ── dispatch ─────────────────────────────────────────────────

    def translate_node(self, node: Node) -> Translation:
        if self._depth >= self._config.max_depth:
            return Translation.error(
                ErrorKind.VALUE,
                f"Expression is nested deeper than {self._config.max_depth} levels",
            )
        kind = classify(node, self._node_text) if node.is_named else NodeKind.OTHER
        handler = self._RULES.get(kind)
        if handler is None:
            handler = self._default
        else:
            logger.debug("Translating %s as %s", node.type, kind.value)
        self._depth += 1
        try:
            return handler(node)
        finally:
            self._depth -= 1

    def _default(self, node: Node) -> Translation:
        if node.child_count == 0:
            return Translation(text=self._node_text(node))
        return self.visit_children(node)

    def visit_children(
        self, node, children: list | None = None, separator: str | None = None
    ) -> Translation:
        """Translate *children* (default: all of *node*'s children) and join them.

        With no *separator* the source text between consecutive children is
        kept.  The first failing child's translation is returned as is.
        """
        if children is None:
            children = node.children
        parts: list[str] = []
        previous = None
        for child in children:
            result = self.translate_node(child)
            if not result.ok:
                return result
            if previous is not None:
                if separator is None:
                    parts.append(self._source[previous.end_byte : child.start_byte].decode("utf-8"))
                else:
                    parts.append(separator)
            parts.append(result.text)
            previous = child
        return Translation(text="".join(parts))
