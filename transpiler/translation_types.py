"""Translation data types (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel

from . import constants
from .types import SemanticType


class ErrorKind(str, Enum):
    """Why a rule refused to produce target text."""

    ARITY = "ARITY"
    TYPE = "TYPE"
    VALUE = "VALUE"
    EVALUATION = "EVALUATION"


class Failure(BaseModel):
    kind: ErrorKind
    message: str

    def render(self) -> str:
        # Evaluator messages are surfaced exactly as reported.
        if self.kind == ErrorKind.EVALUATION:
            return self.message
        return f"{constants.ERROR_PREFIX}{self.message}"


class Translation(BaseModel):
    """Result of translating one node: target text and its semantic type,
    or a failure describing why no text could be produced."""

    text: str = ""
    type: SemanticType = SemanticType.UNKNOWN
    failure: Failure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def render(self) -> str:
        if self.failure is not None:
            return self.failure.render()
        return self.text

    @classmethod
    def error(cls, kind: ErrorKind, message: str) -> Translation:
        return cls(failure=Failure(kind=kind, message=message))

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class TranslatorConfig:
    """Groups translation configuration."""

    target: str = constants.TARGET_PYTHON
    max_eval_steps: int = constants.DEFAULT_MAX_EVAL_STEPS
    eval_timeout: float = constants.DEFAULT_EVAL_TIMEOUT
    max_depth: int = constants.DEFAULT_MAX_DEPTH
