"""Quoting helpers shared by the generators."""

from __future__ import annotations

import re

_QUOTE_CHARS = ("'", '"', "`")


def remove_quotes(text: str) -> str:
    """Strip one pair of matching surrounding quotes, if present."""
    if len(text) >= 2 and text[0] in _QUOTE_CHARS and text[-1] == text[0]:
        return text[1:-1]
    return text


def _escape_unescaped(text: str, quote: str) -> str:
    return re.sub(r"(?<!\\)((?:\\\\)*)" + re.escape(quote), r"\1\\" + quote, text)


def single_quote(text: str) -> str:
    """Re-quote *text* with single quotes, whatever quoting it arrived with."""
    inner = remove_quotes(text).replace("\n", "\\n")
    return "'" + _escape_unescaped(inner, "'") + "'"


def double_quote(text: str) -> str:
    """Wrap *text* in double quotes, escaping any bare double quote inside."""
    return '"' + _escape_unescaped(text, '"') + '"'


_VALUE_ESCAPES = {"\\": "\\\\", "'": "\\'", "\n": "\\n", "\r": "\\r", "\t": "\\t"}


def quote_value(value: str) -> str:
    """Single-quoted Python literal for an already-decoded runtime string."""
    parts = []
    for ch in value:
        if ch in _VALUE_ESCAPES:
            parts.append(_VALUE_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            parts.append(f"\\x{ord(ch):02x}")
        else:
            parts.append(ch)
    return "'" + "".join(parts) + "'"
