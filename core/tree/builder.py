"""Rebuild component trees from decoded flight rows.

A tagged element array looks like `["$", tag, key, props]`; `props.children`
holds nested content in the same encoding (strings, element arrays, or
plain arrays mixing both).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from core.tree.models import ElementNode, Node, TextNode

ELEMENT_MARKER = "$"

_Expander = Callable[[Any], list[Node]]


def build_nodes(value: Any) -> list[Node]:
    """Expand any decoded JSON value into an ordered list of nodes."""

    if isinstance(value, str):
        return [TextNode(content=value)]

    if not isinstance(value, list):
        return []

    if value and value[0] == ELEMENT_MARKER:
        element = parse_element(value)
        return [element] if element is not None else []

    return _expand_items(value, nested=build_nodes)


def parse_element(descriptor: list[Any]) -> ElementNode | None:
    """Parse one `["$", tag, key, props]` descriptor, or None if malformed."""

    if len(descriptor) < 3 or descriptor[0] != ELEMENT_MARKER:
        return None

    tag = descriptor[1]
    if not isinstance(tag, str) or not tag:
        return None

    raw_props = descriptor[3] if len(descriptor) > 3 else None
    props = dict(raw_props) if isinstance(raw_props, dict) else {}

    children: list[Node] = []
    if "children" in props:
        children = build_children(props.pop("children"))

    return ElementNode(tag=tag, props=props, children=children)


def build_children(children: Any) -> list[Node]:
    """Expand the value of a `children` property."""

    if isinstance(children, str):
        return [TextNode(content=children)]

    if not isinstance(children, list):
        return []

    if children and children[0] == ELEMENT_MARKER:
        element = parse_element(children)
        return [element] if element is not None else []

    return _expand_items(children, nested=build_children)


def _expand_items(items: list[Any], *, nested: _Expander) -> list[Node]:
    results: list[Node] = []

    for item in items:
        if isinstance(item, str):
            results.append(TextNode(content=item))
        elif isinstance(item, list):
            element = parse_element(item)
            if element is not None:
                results.append(element)
            else:
                results.extend(nested(item))
        # Numbers, booleans, null and mappings carry no nodes and are skipped.

    return results
