from __future__ import annotations

from core.extract.calls import extract_calls


def test_extract_no_token_returns_empty_list() -> None:
    assert extract_calls("<html><body>nothing here</body></html>") == []


def test_extract_single_call_with_semicolon() -> None:
    text = '<script>self.__next_f.push([1,"abc"]);</script>'

    assert extract_calls(text) == ['self.__next_f.push([1,"abc"]);']


def test_extract_multiple_calls_in_order() -> None:
    text = (
        '<script>self.__next_f.push([0])</script>\n'
        '<script>self.__next_f.push([1,"a"])</script>\n'
        '<script>self.__next_f.push([1,"b"]);</script>'
    )

    assert extract_calls(text) == [
        "self.__next_f.push([0])",
        'self.__next_f.push([1,"a"])',
        'self.__next_f.push([1,"b"]);',
    ]


def test_extract_brackets_and_parens_inside_strings_do_not_move_boundaries() -> None:
    call = 'self.__next_f.push([1,"x:[ ] ) ] ( ["])'
    text = f"before {call}; after"

    assert extract_calls(text) == [f"{call};"]


def test_extract_allows_whitespace_around_array() -> None:
    text = 'self.__next_f.push(\n  [1,"a"]\n) ;'

    assert extract_calls(text) == ['self.__next_f.push(\n  [1,"a"]\n)']


def test_extract_skips_hit_without_array_argument() -> None:
    text = 'self.__next_f.push(entry); self.__next_f.push([1,"ok"])'

    assert extract_calls(text) == ['self.__next_f.push([1,"ok"])']


def test_extract_skips_hit_without_closing_paren() -> None:
    text = 'self.__next_f.push([1,"a"] + x; self.__next_f.push([2,"b"])'

    assert extract_calls(text) == ['self.__next_f.push([2,"b"])']


def test_extract_skips_unbalanced_array() -> None:
    text = 'self.__next_f.push([1,"never closed"'

    assert extract_calls(text) == []


def test_extract_token_at_end_of_text() -> None:
    assert extract_calls("trailing self.__next_f.push(") == []


def test_extract_custom_token() -> None:
    text = 'window.__rsc.push([1,"a"]) self.__next_f.push([2,"b"])'

    assert extract_calls(text, token="window.__rsc.push(") == ['window.__rsc.push([1,"a"])']
