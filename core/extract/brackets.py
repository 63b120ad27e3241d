"""Bracket matching that is aware of quoted string literals."""

from __future__ import annotations

from core.utils.errors import EngineInvariantError

_QUOTE_CHARS = frozenset({'"', "'", "`"})


def match_bracket(text: str, open_index: int) -> int | None:
    """Return the index of the `]` closing the `[` at open_index.

    Bracket characters inside single, double or backtick quoted literals are
    ignored; inside a literal a backslash skips the next character. Returns
    None when the bracket is never closed.
    """

    if open_index < 0 or open_index >= len(text) or text[open_index] != "[":
        raise EngineInvariantError(f"No opening bracket at index {open_index}")

    depth = 0
    quote: str | None = None
    index = open_index
    length = len(text)

    while index < length:
        char = text[index]

        if quote is not None:
            if char == "\\":
                index += 2
                continue
            if char == quote:
                quote = None
            index += 1
            continue

        if char in _QUOTE_CHARS:
            quote = char
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return index
        index += 1

    return None
