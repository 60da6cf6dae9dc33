"""Tree-Sitter Parsing Layer."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from tree_sitter import Node, Tree

from . import constants

logger = logging.getLogger(__name__)


class ParserFactory(ABC):
    """Abstract factory for obtaining a language parser."""

    @abstractmethod
    def get_parser(self, language: str): ...


class TreeSitterParserFactory(ParserFactory):
    """Concrete factory that delegates to tree-sitter-language-pack."""

    def get_parser(self, language: str):
        import tree_sitter_language_pack as tslp

        return tslp.get_parser(language)


def wrap_expression(source: str) -> bytes:
    """Wrap a snippet so the grammar reads it as one parenthesized expression.

    A bare ``{x: 1}`` is otherwise a statement block.  The newline before the
    closing paren keeps a trailing line comment from swallowing it.
    """
    body = source.strip().rstrip(";").rstrip()
    return f"({body}\n)".encode("utf-8")


def expression_root(tree: Tree) -> Node:
    """Return the expression inside a tree built from ``wrap_expression``.

    Falls back to the program node when the tree does not have the expected
    ``program > expression_statement > parenthesized_expression`` shape.
    """
    root = tree.root_node
    statements = [c for c in root.named_children if c.type != "comment"]
    if len(statements) != 1 or statements[0].type != "expression_statement":
        return root
    inner = [c for c in statements[0].named_children if c.type != "comment"]
    if len(inner) != 1 or inner[0].type != "parenthesized_expression":
        return root
    expr = [c for c in inner[0].named_children if c.type != "comment"]
    if len(expr) != 1:
        return root
    return expr[0]


class Parser:
    """Thin wrapper around a parser factory."""

    def __init__(self, parser_factory: ParserFactory):
        self._factory = parser_factory

    def parse(self, source: str, language: str = constants.SOURCE_LANGUAGE) -> Tree:
        parser = self._factory.get_parser(language)
        tree = parser.parse(source.encode("utf-8"))
        return tree

    def parse_expression(
        self, source: str, language: str = constants.SOURCE_LANGUAGE
    ) -> tuple[Tree, bytes]:
        """Parse *source* as a single expression; returns (tree, parsed bytes).

        When the wrapped text does not read as one expression, as with empty
        input or several statements, the bare source is parsed instead so
        nothing added by ``wrap_expression`` reaches the output.
        """
        parser = self._factory.get_parser(language)
        wrapped = wrap_expression(source)
        tree = parser.parse(wrapped)
        if expression_root(tree).type != "program":
            return tree, wrapped
        logger.debug("Snippet is not a single expression, parsing it unwrapped")
        body = source.strip()
        return self.parse(body, language), body.encode("utf-8")
