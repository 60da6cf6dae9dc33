"""Semantic types carried alongside translated text."""

from __future__ import annotations

from enum import Enum


class SemanticType(str, Enum):
    # Primitives
    STRING = "STRING"
    INTEGER = "INTEGER"
    DECIMAL = "DECIMAL"
    OCTAL = "OCTAL"
    BOOLEAN = "BOOLEAN"
    NULL = "NULL"
    UNDEFINED = "UNDEFINED"
    # Structural
    OBJECT = "OBJECT"
    ARRAY = "ARRAY"
    REGEX = "REGEX"
    # Document literals
    OBJECT_ID = "OBJECT_ID"
    BINARY = "BINARY"
    CODE = "CODE"
    TIMESTAMP = "TIMESTAMP"
    LONG = "LONG"
    SYMBOL = "SYMBOL"
    MIN_KEY = "MIN_KEY"
    MAX_KEY = "MAX_KEY"
    DB_REF = "DB_REF"
    DATE = "DATE"
    # Anything no rule annotates
    UNKNOWN = "UNKNOWN"


NUMERIC_TYPES: frozenset[SemanticType] = frozenset(
    {SemanticType.INTEGER, SemanticType.DECIMAL, SemanticType.OCTAL}
)

NUMBER_LIKE_TYPES: frozenset[SemanticType] = frozenset(
    {SemanticType.STRING, SemanticType.DECIMAL, SemanticType.INTEGER}
)
"""Argument types accepted by the Double and Number constructors."""

OBJECT_LIKE_TYPES: frozenset[SemanticType] = frozenset(
    {SemanticType.OBJECT, SemanticType.OBJECT_ID}
)
"""Argument types accepted as a DBRef id."""
