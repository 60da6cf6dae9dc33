"""Command-line entry point."""

from __future__ import annotations

import argparse
import logging
import sys

from . import constants
from .api import translate_source
from .generators import SUPPORTED_TARGETS
from .translation_types import TranslatorConfig


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Translate a query/document expression into target source code"
    )
    parser.add_argument("file", nargs="?",
                        help="File holding the expression (default: stdin)")
    parser.add_argument("--expression", "-e", default=None,
                        help="Expression text to translate instead of a file")
    parser.add_argument("--target", "-t", default=constants.TARGET_PYTHON,
                        choices=list(SUPPORTED_TARGETS),
                        help="Target language (default: python)")
    parser.add_argument("--max-eval-steps", type=int,
                        default=constants.DEFAULT_MAX_EVAL_STEPS,
                        help="Step budget for constant folding")
    parser.add_argument("--eval-timeout", type=float,
                        default=constants.DEFAULT_EVAL_TIMEOUT,
                        help="Wall-clock budget for constant folding, in seconds")
    parser.add_argument("--max-depth", type=int,
                        default=constants.DEFAULT_MAX_DEPTH,
                        help="Deepest expression nesting accepted")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log rule dispatch and evaluation")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.expression is not None:
        source = args.expression
    elif args.file:
        with open(args.file) as f:
            source = f.read()
    else:
        source = sys.stdin.read()

    config = TranslatorConfig(
        target=args.target,
        max_eval_steps=args.max_eval_steps,
        eval_timeout=args.eval_timeout,
        max_depth=args.max_depth,
    )
    result = translate_source(source, config=config)
    print(result.render())
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
