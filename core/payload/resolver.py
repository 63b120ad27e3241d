"""Turn a decoded call payload into the value handed to the tree builder."""

from __future__ import annotations

from dataclasses import dataclass
from json import JSONDecodeError
from typing import Any

from core.payload.classifier import classify
from core.payload.decoder import strict_json_loads
from core.utils.errors import FormatError


@dataclass(frozen=True)
class DecodedPayload:
    """Structured value ready for tree building."""

    value: Any


@dataclass(frozen=True)
class RawPayload:
    """Payload string kept as-is; the tree builder sees it as text."""

    text: str


@dataclass(frozen=True)
class ModulePayload:
    """Chunk/module metadata that contributes no nodes."""

    preview: str


ResolvedPayload = DecodedPayload | RawPayload | ModulePayload


def resolve_payload(payload: Any, *, preview_length: int = 50) -> ResolvedPayload:
    """Resolve the second element of a decoded call argument list.

    Component rows have the form `<key>:<json>`; the text after the first
    colon is decoded. Unknown strings stay raw and become a text node.

    Raises:
        FormatError: the JSON after the row key cannot be decoded.
    """

    if not isinstance(payload, str):
        return DecodedPayload(payload)

    kind = classify(payload)
    if kind == "module-loading":
        return ModulePayload(preview=payload[:preview_length])
    if kind == "unknown":
        return RawPayload(payload)

    # Component rows always carry a key; the classifier requires `<key>:[`.
    _, _, row = payload.partition(":")
    try:
        return DecodedPayload(strict_json_loads(row))
    except JSONDecodeError as exc:
        raise FormatError(
            "component data",
            "failed to parse component data structure",
            diagnostic=f"Parse error: {exc.msg} (line {exc.lineno}, column {exc.colno})",
        ) from exc
