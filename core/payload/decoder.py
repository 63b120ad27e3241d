"""Decode the array argument of one extracted push call."""

from __future__ import annotations

import json
import re
from typing import Any

from core.extract.calls import DEFAULT_INVOCATION_TOKEN
from core.utils.errors import FormatError

_CLOSER_RE = re.compile(r"\]\s*\)")
_ESCAPED_NEWLINE_BEFORE_CLOSE_RE = re.compile(r'\\n(?="\]$)')
_ESCAPED_NEWLINE_AT_END_RE = re.compile(r"\\n$")


def decode_payload(
    snippet: str,
    token: str = DEFAULT_INVOCATION_TOKEN,
    *,
    diagnostic_length: int = 100,
) -> list[Any]:
    """Decode `token[id, payload, ...])` into its argument list.

    Raises:
        FormatError: prefix missing, closer missing, JSON invalid, or the
            decoded value is not a list of at least two elements.
    """

    prefix_match = re.search(re.escape(token) + r"\s*\[", snippet)
    if prefix_match is None:
        raise FormatError("missing prefix", diagnostic=snippet[:diagnostic_length])

    content_start = prefix_match.end()
    content_end = _last_closer_index(snippet, content_start)
    if content_end is None:
        raise FormatError("mismatched brackets", diagnostic=snippet[-diagnostic_length:])

    content = f"[{snippet[content_start:content_end]}]"
    content = _ESCAPED_NEWLINE_BEFORE_CLOSE_RE.sub("", content, count=1)
    content = _ESCAPED_NEWLINE_AT_END_RE.sub("", content, count=1)

    try:
        decoded = strict_json_loads(content)
    except json.JSONDecodeError as exc:
        raise FormatError(
            "invalid JSON",
            exc.msg,
            diagnostic=_preview_edges(content, diagnostic_length),
        ) from exc

    if not isinstance(decoded, list) or len(decoded) < 2:
        raise FormatError(
            "unexpected shape",
            "expected an array with at least 2 elements",
            diagnostic=f"Got: {json.dumps(decoded, ensure_ascii=False)[:diagnostic_length]}",
        )

    return decoded


def strict_json_loads(text: str) -> Any:
    """`json.loads` that rejects NaN and Infinity the way browser JSON parsers do."""

    return json.loads(text, parse_constant=_reject_constant)


def _reject_constant(name: str) -> Any:
    raise json.JSONDecodeError(f"Unexpected token {name}", name, 0)


def _last_closer_index(snippet: str, content_start: int) -> int | None:
    last: int | None = None
    for match in _CLOSER_RE.finditer(snippet, content_start):
        last = match.start()
    return last


def _preview_edges(content: str, length: int) -> str:
    tail = max(1, length // 2)
    return f"start={content[:length]!r} end={content[-tail:]!r}"
