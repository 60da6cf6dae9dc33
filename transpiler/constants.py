"""Named constants — eliminates magic strings across the codebase."""

from __future__ import annotations

SOURCE_LANGUAGE = "javascript"

TARGET_PYTHON = "python"

ERROR_PREFIX = "Error: "

DEFAULT_MAX_EVAL_STEPS = 10_000
DEFAULT_EVAL_TIMEOUT = 1.0
DEFAULT_MAX_DEPTH = 100

# ── target tokens ────────────────────────────────────────────────

PY_NONE = "None"
PY_OCTAL_PREFIX = "0o"
PY_UTC = "datetime.timezone.utc"
PY_NOW = f"datetime.datetime.now({PY_UTC})"

# ── binary subtypes ──────────────────────────────────────────────

BINARY_SUBTYPES: dict[int, str] = {
    0: "bson.binary.BINARY_SUBTYPE",
    1: "bson.binary.FUNCTION_SUBTYPE",
    2: "bson.binary.OLD_BINARY_SUBTYPE",
    3: "bson.binary.OLD_UUID_SUBTYPE",
    4: "bson.binary.UUID_SUBTYPE",
    5: "bson.binary.MD5_SUBTYPE",
    6: "bson.binary.CSHARP_LEGACY",
    128: "bson.binary.USER_DEFINED_SUBTYPE",
}

# ── regular expression flags ─────────────────────────────────────

PYTHON_REGEX_FLAGS: dict[str, str] = {
    "i": "i",  # re.IGNORECASE
    "m": "m",  # re.MULTILINE
    "u": "a",  # re.ASCII
    "y": "",  # sticky, no counterpart
    "g": "s",  # re.DOTALL
}

BSON_REGEX_FLAGS: frozenset[str] = frozenset("imxslu")

JS_REGEX_FLAG_ORDER = "dgimsuvy"

# ── evaluator messages ───────────────────────────────────────────

OBJECT_ID_ARGUMENT_MESSAGE = (
    "Argument passed in must be a single String of 12 bytes "
    "or a string of 24 hex characters"
)
INVALID_DATE_MESSAGE = "Invalid Date"
