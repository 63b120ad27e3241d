"""CLI I/O helpers for input reading and atomic output writing."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

import typer

STDIN_MARKER = "-"


def read_input_text(source: str) -> str:
    """Read the document to parse from a file path or `-` for stdin."""

    if source == STDIN_MARKER:
        return typer.get_text_stream("stdin").read()
    return Path(source).read_text(encoding="utf-8")


def existing_output_files(paths: list[Path | None]) -> list[Path]:
    """Return the given output paths that already exist."""

    return [path for path in paths if path is not None and path.exists()]


def write_text_atomic(path: Path, text: str) -> None:
    """Write formatted output using a temporary file + replace."""

    path.parent.mkdir(parents=True, exist_ok=True)

    fd, raw_tmp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f"{path.name}.",
        suffix=".tmp",
    )
    os.close(fd)
    tmp_path = Path(raw_tmp_path)

    try:
        tmp_path.write_text(text, encoding="utf-8")
        tmp_path.replace(path)
    except Exception:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)
        raise


def write_report_json_atomic(path: Path, payload: dict[str, Any]) -> None:
    """Write the aggregate parse report JSON atomically."""

    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        prefix=f"{path.name}.",
        suffix=".tmp",
    ) as tmp:
        tmp_path = Path(tmp.name)
        json.dump(payload, tmp, ensure_ascii=False, sort_keys=True, separators=(",", ":"))

    tmp_path.replace(path)
