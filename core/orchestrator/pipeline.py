"""Orchestration pipeline: extract -> decode -> classify -> resolve -> build."""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor

from core.config.models import EngineConfig
from core.extract.calls import extract_calls
from core.orchestrator.models import (
    AggregateResult,
    IndexedOutcome,
    ParseFailure,
    ParseOutcome,
    ParseSuccess,
)
from core.payload.decoder import decode_payload
from core.payload.resolver import ModulePayload, RawPayload, resolve_payload
from core.tree.builder import build_nodes
from core.tree.models import Node
from core.utils.errors import FormatError

logger = logging.getLogger("flightscan.engine")

_WHITESPACE_RE = re.compile(r"\s+")


def parse_document(text: str, config: EngineConfig | None = None) -> AggregateResult:
    """Parse every embedded push call in text.

    Input-format problems never raise; each one becomes a failure outcome.
    Only engine invariant violations propagate.
    """

    effective = config or EngineConfig()
    snippets = extract_calls(text, effective.invocation_token)
    logger.debug("found %d push call(s)", len(snippets))

    if not snippets:
        return AggregateResult()

    if effective.max_workers > 1 and len(snippets) > 1:
        with ThreadPoolExecutor(max_workers=effective.max_workers) as executor:
            outcomes = list(executor.map(lambda snippet: parse_snippet(snippet, effective), snippets))
    else:
        outcomes = [parse_snippet(snippet, effective) for snippet in snippets]

    results = [
        IndexedOutcome(
            index=index,
            snippet_preview=_snippet_preview(snippet, effective.preview_length),
            outcome=outcome,
        )
        for index, (snippet, outcome) in enumerate(zip(snippets, outcomes, strict=True))
    ]
    return AggregateResult(results=results)


def parse_snippet(snippet: str, config: EngineConfig | None = None) -> ParseOutcome:
    """Decode one push call into a success or failure outcome."""

    effective = config or EngineConfig()

    try:
        decoded = decode_payload(
            snippet,
            effective.invocation_token,
            diagnostic_length=effective.diagnostic_length,
        )
        resolved = resolve_payload(decoded[1], preview_length=effective.module_preview_length)
        if isinstance(resolved, ModulePayload):
            logger.debug("module-loading payload skipped: %s", resolved.preview)
            return ParseSuccess(
                data_type="module-loading",
                debug_info=f"Data starts with: {resolved.preview}",
            )

        value = resolved.text if isinstance(resolved, RawPayload) else resolved.value
        nodes = build_nodes(value)
    except RecursionError:
        return _failure(FormatError("invalid JSON", "nesting too deep"), snippet)
    except FormatError as exc:
        return _failure(exc, snippet)

    logger.debug("built %d node(s)", len(nodes))
    return ParseSuccess(nodes=nodes, data_type="component-data")


def parse_snippet_nodes(snippet: str, config: EngineConfig | None = None) -> list[Node]:
    """Return only the nodes of one push call, logging any failure."""

    outcome = parse_snippet(snippet, config)
    if isinstance(outcome, ParseFailure):
        logger.error("parse failed: %s", outcome.error)
        if outcome.debug_info:
            logger.debug("debug info: %s", outcome.debug_info)
        return []
    return list(outcome.nodes)


def _snippet_preview(snippet: str, length: int) -> str:
    return _WHITESPACE_RE.sub(" ", snippet)[:length]


def _failure(exc: FormatError, snippet: str) -> ParseFailure:
    logger.warning("push call rejected: %s", exc)
    return ParseFailure(
        error=str(exc),
        debug_info=exc.diagnostic or f"Input length: {len(snippet)}",
    )
