"""Extended-JavaScript query expression transpiler package."""

from .api import (  # noqa: F401
    translate_source,
    dump_translation,
)
from .translation_types import Translation, TranslatorConfig  # noqa: F401
