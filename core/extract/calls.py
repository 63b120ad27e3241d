"""Locate embedded flight push calls in arbitrary text."""

from __future__ import annotations

from core.extract.brackets import match_bracket

DEFAULT_INVOCATION_TOKEN = "self.__next_f.push("


def extract_calls(text: str, token: str = DEFAULT_INVOCATION_TOKEN) -> list[str]:
    """Return every `token[...])` call found in text, in document order.

    Hits that are not followed by an array argument and a closing paren are
    treated as false positives and skipped. A trailing `;` is kept with the
    snippet.
    """

    calls: list[str] = []
    length = len(text)
    search_index = 0

    while search_index < length:
        start = text.find(token, search_index)
        if start == -1:
            break

        cursor = _skip_whitespace(text, start + len(token))
        if cursor >= length or text[cursor] != "[":
            search_index = cursor + 1
            continue

        array_end = match_bracket(text, cursor)
        if array_end is None:
            search_index = cursor + 1
            continue

        after_array = _skip_whitespace(text, array_end + 1)
        if after_array >= length or text[after_array] != ")":
            search_index = after_array
            continue

        after_array += 1
        if after_array < length and text[after_array] == ";":
            after_array += 1

        calls.append(text[start:after_array].strip())
        search_index = after_array

    return calls


def _skip_whitespace(text: str, index: int) -> int:
    while index < len(text) and text[index].isspace():
        index += 1
    return index
