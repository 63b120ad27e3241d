"""Text exports for reconstructed node trees.

Dumps are built by walking the tree directly. pydantic's serializer stops at
a fixed nesting depth, well below what the builder accepts.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import TypeAdapter

from core.orchestrator.models import AggregateResult, IndexedOutcome, ParseSuccess
from core.tree.models import ElementNode, Node, TextNode

_NODE_LIST_ADAPTER: TypeAdapter[list[Node]] = TypeAdapter(list[Node])
_INDENT = "  "


def to_json_text(nodes: list[Node]) -> str:
    """Serialize nodes as 2-space indented JSON."""

    payload = [node_payload(node) for node in nodes]
    return json.dumps(payload, ensure_ascii=False, indent=2)


def load_json_nodes(text: str) -> list[Node]:
    """Load nodes back from `to_json_text` output."""

    return _NODE_LIST_ADAPTER.validate_json(text)


def node_payload(node: Node) -> dict[str, Any]:
    """Plain-dict dump of one node, same shape as `model_dump(mode="json")`."""

    if isinstance(node, TextNode):
        return {"type": node.type, "content": node.content}
    return {
        "type": node.type,
        "tag": node.tag,
        "props": dict(node.props),
        "children": [node_payload(child) for child in node.children],
    }


def report_payload(result: AggregateResult) -> dict[str, Any]:
    """Full per-call report with derived counts and combined nodes."""

    return {
        "results": [indexed_outcome_payload(item) for item in result.results],
        "total_scripts": result.total_scripts,
        "success_count": result.success_count,
        "module_loading_count": result.module_loading_count,
        "failure_count": result.failure_count,
        "combined_nodes": [node_payload(node) for node in result.combined_nodes],
    }


def indexed_outcome_payload(item: IndexedOutcome) -> dict[str, Any]:
    """Dump one indexed outcome, nodes included."""

    outcome = item.outcome
    if isinstance(outcome, ParseSuccess):
        outcome_payload: dict[str, Any] = {
            "status": outcome.status,
            "nodes": [node_payload(node) for node in outcome.nodes],
            "data_type": outcome.data_type,
            "debug_info": outcome.debug_info,
        }
    else:
        outcome_payload = {
            "status": outcome.status,
            "error": outcome.error,
            "debug_info": outcome.debug_info,
        }
    return {
        "index": item.index,
        "snippet_preview": item.snippet_preview,
        "outcome": outcome_payload,
    }


def to_markup_text(nodes: list[Node]) -> str:
    """Render nodes as indented JSX-like markup, one block per top-level node."""

    return "\n".join(_render_node(node, 0) for node in nodes)


def _render_node(node: Node, indent: int) -> str:
    spaces = _INDENT * indent

    if isinstance(node, TextNode):
        return f"{spaces}{_quote(node.content)}"

    attributes = _render_props(node)
    if not node.children:
        return f"{spaces}<{node.tag}{attributes} />"

    lines = [f"{spaces}<{node.tag}{attributes}>"]
    lines.extend(_render_node(child, indent + 1) for child in node.children)
    lines.append(f"{spaces}</{node.tag}>")
    return "\n".join(lines)


def _render_props(node: ElementNode) -> str:
    parts: list[str] = []
    for key, value in node.props.items():
        if value is None:
            continue
        if isinstance(value, str):
            parts.append(f'{key}="{value}"')
        else:
            # Mappings, sequences, numbers and booleans all render as JSON.
            parts.append(f"{key}={{{_compact_json(value)}}}")
    return " " + " ".join(parts) if parts else ""


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _compact_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
