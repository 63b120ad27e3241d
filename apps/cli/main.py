"""Typer CLI entrypoint for flightscan."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Literal, cast

import typer

from apps.cli.io import (
    existing_output_files,
    read_input_text,
    write_report_json_atomic,
    write_text_atomic,
)
from apps.cli.report_human import render_parse_summary
from core.config.loader import load_config
from core.orchestrator.models import AggregateResult, ParseFailure
from core.orchestrator.pipeline import parse_document
from core.render.formatters import report_payload, to_json_text, to_markup_text
from core.utils.errors import ConfigError

app = typer.Typer(help="Next.js flight payload parser CLI", rich_markup_mode=None)
OutputFormat = Literal["json", "markup"]
ReportMode = Literal["human", "json", "none"]

EXIT_OK = 0
EXIT_INTERNAL = 1
EXIT_NO_CALLS = 2
EXIT_NOTHING_PARSED = 3

SAMPLE_INPUT = "\n".join(
    [
        'self.__next_f.push([1,"4c:[\\"$\\",\\"div\\",null,'
        '{\\"className\\":\\"a\\",\\"children\\":\\"hi\\"}]\\n"])',
        'self.__next_f.push([1,"1f:I[\\"static/chunks/123.js\\",[],\\"x\\"]\\n"])',
    ]
)


@app.callback()
def cli_callback() -> None:
    """CLI root callback to keep `flightscan parse` as explicit command form."""


@app.command("parse")
def parse_command(
    input_source: Annotated[
        str,
        typer.Option("--input", help="File containing page HTML or script text; - reads stdin."),
    ] = "-",
    output_format: Annotated[str, typer.Option("--format")] = "json",
    report: Annotated[str, typer.Option()] = "human",
    out: Annotated[Path | None, typer.Option(dir_okay=False)] = None,
    report_file: Annotated[
        Path | None,
        typer.Option(
            "--report-file",
            dir_okay=False,
            help="Write the full per-call parse report as JSON.",
        ),
    ] = None,
    config: Annotated[
        Path | None, typer.Option(exists=True, dir_okay=False, file_okay=True)
    ] = None,
    force: Annotated[
        bool, typer.Option("--force", help="Overwrite outputs when they already exist.")
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging.")] = False,
) -> None:
    """Extract every push call from the input and rebuild its component tree."""

    normalized_format = output_format.lower().strip()
    if normalized_format not in {"json", "markup"}:
        typer.echo("ERROR: --format must be one of: json, markup.")
        raise typer.Exit(code=EXIT_INTERNAL)
    format_typed = cast(OutputFormat, normalized_format)

    normalized_report = report.lower().strip()
    if normalized_report not in {"human", "json", "none"}:
        typer.echo("ERROR: --report must be one of: human, json, none.")
        raise typer.Exit(code=EXIT_INTERNAL)
    report_typed = cast(ReportMode, normalized_report)

    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    existing = existing_output_files([out, report_file])
    if existing and not force:
        names = ", ".join(path.name for path in existing)
        typer.echo(f"ERROR: outputs already exist: {names}. Use --force to overwrite.")
        raise typer.Exit(code=EXIT_INTERNAL)
    if existing:
        names = ", ".join(path.name for path in existing)
        typer.echo(f"INFO: overwriting existing outputs: {names}")

    try:
        engine_config = load_config(config)
        text = read_input_text(input_source)
        result = parse_document(text, engine_config)
    except ConfigError as exc:
        typer.echo(f"ERROR: {exc}")
        raise typer.Exit(code=EXIT_INTERNAL) from exc
    except OSError as exc:
        typer.echo(f"ERROR: cannot read input: {exc}")
        raise typer.Exit(code=EXIT_INTERNAL) from exc
    except Exception as exc:  # noqa: BLE001
        typer.echo(f"ERROR: {type(exc).__name__}: {exc}")
        raise typer.Exit(code=EXIT_INTERNAL) from exc

    exit_code = _exit_code_for(result)
    summary_to_stderr = out is None and exit_code == EXIT_OK

    if report_typed == "human":
        typer.echo(
            render_parse_summary(result, engine_config.invocation_token),
            err=summary_to_stderr,
        )
    elif report_typed == "json":
        typer.echo(_summary_json(result), err=summary_to_stderr)

    try:
        if report_file is not None:
            write_report_json_atomic(report_file, report_payload(result))
            typer.echo(f"INFO: wrote report to {report_file}", err=summary_to_stderr)

        if exit_code == EXIT_OK:
            rendered = _render_output(result, format_typed)
            if out is not None:
                write_text_atomic(out, rendered + "\n")
                typer.echo(f"INFO: wrote {format_typed} output to {out}")
            else:
                typer.echo(rendered)
    except OSError as exc:
        typer.echo(f"ERROR: write output failed: {exc}", err=True)
        raise typer.Exit(code=EXIT_INTERNAL) from exc

    raise typer.Exit(code=exit_code)


@app.command("sample")
def sample_command() -> None:
    """Print a small sample input to try `flightscan parse` with."""

    typer.echo(SAMPLE_INPUT)


def _exit_code_for(result: AggregateResult) -> int:
    if result.total_scripts == 0:
        return EXIT_NO_CALLS
    if result.success_count > 0:
        return EXIT_OK
    if result.module_loading_count > 0 and result.failure_count == 0:
        return EXIT_OK
    return EXIT_NOTHING_PARSED


def _render_output(result: AggregateResult, output_format: OutputFormat) -> str:
    if output_format == "markup":
        return to_markup_text(result.combined_nodes)
    return to_json_text(result.combined_nodes)


def _summary_json(result: AggregateResult) -> str:
    payload = {
        "total_scripts": result.total_scripts,
        "success_count": result.success_count,
        "module_loading_count": result.module_loading_count,
        "failure_count": result.failure_count,
        "node_count": len(result.combined_nodes),
        "results": [
            {
                "index": item.index,
                "snippet_preview": item.snippet_preview,
                "status": item.outcome.status,
                "data_type": item.data_type,
                "error": item.outcome.error if isinstance(item.outcome, ParseFailure) else None,
            }
            for item in result.results
        ],
    }
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def main() -> None:
    """Console script entrypoint."""

    app()


if __name__ == "__main__":
    main()
