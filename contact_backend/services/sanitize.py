"""
Query-injection sanitization.

Keys starting with ``$`` or containing ``.`` are dropped from mappings, and
operator tokens such as ``$where`` or ``$ne`` are stripped from strings, so
nothing the client sends can be read as a MongoDB operator. Other text,
including prices like ``$100`` and spacing, is left as it is.
"""

import re
from typing import Any

# An operator token takes one following space with it so "Jane $ne Doe" reads "Jane Doe"
OPERATOR_TOKEN = re.compile(r"\$+[A-Za-z_]\w*[ \t]?")
NUL = "\x00"


def is_unsafe_key(key: Any) -> bool:
    return isinstance(key, str) and (key.startswith("$") or "." in key)


def sanitize_string(value: str) -> str:
    value = OPERATOR_TOKEN.sub("", value)
    return value.replace(NUL, "").strip()


def sanitize_value(value: Any) -> Any:
    if isinstance(value, str):
        return sanitize_string(value)
    if isinstance(value, dict):
        return {
            key: sanitize_value(item)
            for key, item in value.items()
            if not is_unsafe_key(key)
        }
    if isinstance(value, list):
        return [sanitize_value(item) for item in value]
    return value


def sanitize_submission(data: dict) -> dict:
    """Return a sanitized copy of ``data``; the input is not modified."""
    return sanitize_value(data)
