"""Heuristic classification of flight payload strings."""

from __future__ import annotations

import re
from typing import Literal

PayloadKind = Literal["component-data", "module-loading", "unknown"]

_MODULE_IMPORT_RE = re.compile(r"^[0-9a-f]+:I\[")
_COMPONENT_ROW_RE = re.compile(r"^[0-9a-z]+:\[", re.IGNORECASE)
_CHUNK_PATH_MARKER = "static/chunks/"


def classify(payload: str) -> PayloadKind:
    """Classify one payload string.

    Rules, first match wins:
    - `<hex>:I[` prefix or a `static/chunks/` path -> module loading
    - `<alnum>:[` prefix (case-insensitive) -> component data
    - anything else -> unknown
    """

    if _MODULE_IMPORT_RE.match(payload) or _CHUNK_PATH_MARKER in payload:
        return "module-loading"
    if _COMPONENT_ROW_RE.match(payload):
        return "component-data"
    return "unknown"
