"""Human-readable parse summary rendering for CLI output."""

from __future__ import annotations

from core.orchestrator.models import AggregateResult, ParseFailure


def render_parse_summary(result: AggregateResult, token: str) -> str:
    """Render a one-screen summary of a document parse."""

    lines: list[str] = []
    lines.append("parse_summary:")
    lines.append(
        f"calls={result.total_scripts} component_data={result.success_count} "
        f"module_loading={result.module_loading_count} failures={result.failure_count} "
        f"nodes={len(result.combined_nodes)}"
    )

    if result.total_scripts == 0:
        lines.append(f"result=EMPTY no {token}...) calls found in the provided input")
        return "\n".join(lines)

    if result.success_count > 0:
        lines.append(
            f"result=PARSED parsed {result.success_count} / {result.total_scripts} call(s), "
            f"extracted {len(result.combined_nodes)} node(s)"
        )
    elif result.module_loading_count > 0 and result.failure_count == 0:
        lines.append(
            f"result=MODULES_ONLY detected {result.module_loading_count} module/chunk "
            "payload(s); no component data found"
        )
    else:
        lines.append("result=FAILED unable to parse any call from the input")

    if result.module_loading_count > 0:
        lines.append(
            f"modules: {result.module_loading_count} call(s) contained module/chunk "
            "metadata and were skipped"
        )

    failure_lines: list[str] = []
    for item in result.results:
        if not isinstance(item.outcome, ParseFailure):
            continue
        failure_lines.append(f"  #{item.index + 1}: {item.outcome.error}")
        failure_lines.append(f"    snippet: {item.snippet_preview}")

    if failure_lines:
        lines.append("failures:")
        lines.extend(failure_lines)
    else:
        lines.append("failures: none")

    return "\n".join(lines)
