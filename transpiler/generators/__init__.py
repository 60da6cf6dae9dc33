"""Code generators, one per target language."""

from __future__ import annotations

import importlib

from ._base import BaseGenerator
from ..translation_types import TranslatorConfig

# Lazy imports to avoid loading every generator at startup
_GENERATOR_CLASSES: dict[str, str] = {
    "python": "python.PythonGenerator",
}


def get_generator(target: str, config: TranslatorConfig | None = None) -> BaseGenerator:
    """Instantiate the generator for *target*.

    Raises ``ValueError`` if *target* has no registered generator.
    """
    spec = _GENERATOR_CLASSES.get(target)
    if spec is None:
        raise ValueError(f"Unsupported target language: {target}")
    module_name, class_name = spec.split(".")
    mod = importlib.import_module(f".{module_name}", package=__package__)
    cls = getattr(mod, class_name)
    return cls(config=config)


SUPPORTED_TARGETS: tuple[str, ...] = tuple(_GENERATOR_CLASSES.keys())

__all__ = [
    "BaseGenerator",
    "get_generator",
    "SUPPORTED_TARGETS",
]
