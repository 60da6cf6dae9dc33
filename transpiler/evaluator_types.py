"""Constant evaluator — runtime value types (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass


class _Undefined:
    """The JavaScript ``undefined`` value."""

    _instance: _Undefined | None = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"


UNDEFINED = _Undefined()


@dataclass(frozen=True)
class ObjectIdValue:
    hex: str

    def to_hex_string(self) -> str:
        return self.hex


@dataclass(frozen=True)
class BinaryValue:
    data: str
    sub_type: int = 0

    def __str__(self) -> str:
        return self.data


@dataclass(frozen=True)
class LongValue:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class RegexValue:
    source: str
    flags: str = ""
