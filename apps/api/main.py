"""FastAPI wrapper for the flight payload parsing engine."""

from __future__ import annotations

import importlib.metadata
import json
import logging
import os
import time
import uuid
from pathlib import Path
from typing import Any, Literal

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, ValidationError
from starlette.concurrency import run_in_threadpool

from core.config.loader import load_config
from core.config.models import EngineConfig
from core.orchestrator.models import AggregateResult
from core.orchestrator.pipeline import parse_document
from core.render.formatters import indexed_outcome_payload, to_json_text, to_markup_text
from core.utils.errors import ConfigError

app = FastAPI(title="flightscan API", version="0.1.0")
logger = logging.getLogger("flightscan.api")

OutputFormat = Literal["json", "markup"]

_DEFAULT_MAX_INPUT_BYTES = 10 * 1024 * 1024
_REQUEST_ID_HEADER = "X-Flightscan-Request-Id"
_SUPPORTED_FORMATS: list[OutputFormat] = ["json", "markup"]


class ParseRequest(BaseModel):
    """Body of POST /v1/parse."""

    model_config = ConfigDict(extra="forbid")

    text: str
    format: OutputFormat = "json"


class ApiRequestError(Exception):
    def __init__(
        self,
        *,
        status_code: int,
        error_code: str,
        message: str,
        detail: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.detail = detail or {}


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Ensure every response has a request id header."""

    request_id = uuid.uuid4().hex
    request.state.request_id = request_id
    try:
        response = await call_next(request)
    except Exception:  # noqa: BLE001
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code="INTERNAL_ERROR",
            status_code=500,
            failure_stage="middleware",
        )
        response = _error_response(
            status_code=500,
            error_code="INTERNAL_ERROR",
            message="internal server error",
            request_id=request_id,
            detail={"path": request.url.path},
        )
    response.headers.setdefault(_REQUEST_ID_HEADER, request_id)
    return response


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    """Liveness endpoint."""

    return {"status": "ok"}


@app.get("/v1/meta")
async def meta_v1(request: Request) -> JSONResponse:
    """Metadata endpoint for clients."""

    request_id = _request_id_from_request(request)
    try:
        config = _load_engine_config()
    except ApiRequestError as exc:
        return _error_response(
            status_code=exc.status_code,
            error_code=exc.error_code,
            message=exc.message,
            request_id=request_id,
            detail=exc.detail,
        )

    payload = {
        "supported_formats": list(_SUPPORTED_FORMATS),
        "invocation_token": config.invocation_token,
        "preview_length": config.preview_length,
        "max_input_bytes": _max_input_bytes(),
        "version": app.version,
        "package_version": _package_version(),
    }
    return JSONResponse(
        status_code=200,
        headers={_REQUEST_ID_HEADER: request_id},
        content=payload,
    )


@app.post("/v1/parse", response_model=None)
async def parse_v1(request: Request) -> JSONResponse:
    """Parse one document and return counts, per-call outcomes and formatted output."""

    request_started = time.perf_counter()
    request_id = _request_id_from_request(request)
    failure_stage = "init"

    try:
        failure_stage = "read_body"
        max_input_bytes = _max_input_bytes()
        body = await request.body()
        if len(body) > max_input_bytes:
            raise ApiRequestError(
                status_code=413,
                error_code="INPUT_TOO_LARGE",
                message="request body too large",
                detail={"max_input_bytes": max_input_bytes, "received_bytes": len(body)},
            )

        failure_stage = "validate_request"
        parse_request = _parse_request_body(body)

        failure_stage = "load_config"
        config = _load_engine_config()

        _log_event(
            logging.INFO,
            "start",
            request_id,
            format=parse_request.format,
            input_chars=len(parse_request.text),
            max_workers=config.max_workers,
        )

        failure_stage = "parse"
        parse_started = time.perf_counter()
        result = await run_in_threadpool(parse_document, parse_request.text, config)
        parse_ms = _elapsed_ms(parse_started)

        failure_stage = "render"
        output = _render_output(result, parse_request.format)
        timing = {"parse_ms": parse_ms, "total_ms": _elapsed_ms(request_started)}

        _log_event(
            logging.INFO,
            "done",
            request_id,
            total_scripts=result.total_scripts,
            success_count=result.success_count,
            module_loading_count=result.module_loading_count,
            failure_count=result.failure_count,
            timing=timing,
        )
        return JSONResponse(
            status_code=200,
            headers={_REQUEST_ID_HEADER: request_id},
            content=_build_api_result(
                result=result,
                output=output,
                output_format=parse_request.format,
                request_id=request_id,
                timing=timing,
            ),
        )
    except ApiRequestError as exc:
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code=exc.error_code,
            status_code=exc.status_code,
            failure_stage=failure_stage,
        )
        return _error_response(
            status_code=exc.status_code,
            error_code=exc.error_code,
            message=exc.message,
            request_id=request_id,
            detail=exc.detail,
        )
    except Exception as exc:  # noqa: BLE001
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code="INTERNAL_ERROR",
            status_code=500,
            failure_stage=failure_stage,
        )
        return _error_response(
            status_code=500,
            error_code="INTERNAL_ERROR",
            message="internal server error",
            request_id=request_id,
            detail={"error": str(exc), "total_ms": _elapsed_ms(request_started)},
        )


def _parse_request_body(body: bytes) -> ParseRequest:
    try:
        return ParseRequest.model_validate_json(body)
    except ValidationError as exc:
        raise ApiRequestError(
            status_code=422,
            error_code="INVALID_ARGUMENT",
            message="invalid parse request",
            detail={
                "errors": [
                    {"loc": [str(part) for part in error["loc"]], "msg": error["msg"]}
                    for error in exc.errors()
                ]
            },
        ) from exc


def _load_engine_config() -> EngineConfig:
    raw_path = os.getenv("FLIGHTSCAN_CONFIG")
    config_path = Path(raw_path) if raw_path else None
    try:
        return load_config(config_path)
    except ConfigError as exc:
        raise ApiRequestError(
            status_code=500,
            error_code="CONFIG_ERROR",
            message="engine configuration invalid",
            detail={"error": str(exc)},
        ) from exc


def _render_output(result: AggregateResult, output_format: OutputFormat) -> str:
    if output_format == "markup":
        return to_markup_text(result.combined_nodes)
    return to_json_text(result.combined_nodes)


def _build_api_result(
    *,
    result: AggregateResult,
    output: str,
    output_format: OutputFormat,
    request_id: str,
    timing: dict[str, int],
) -> dict[str, Any]:
    return {
        "request_id": request_id,
        "format": output_format,
        "summary": {
            "total_scripts": result.total_scripts,
            "success_count": result.success_count,
            "module_loading_count": result.module_loading_count,
            "failure_count": result.failure_count,
            "node_count": len(result.combined_nodes),
        },
        "results": [indexed_outcome_payload(item) for item in result.results],
        "output": output,
        "timing": timing,
    }


def _request_id_from_request(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if isinstance(request_id, str) and request_id:
        return request_id
    return uuid.uuid4().hex


def _max_input_bytes() -> int:
    raw = os.getenv("FLIGHTSCAN_MAX_INPUT_BYTES")
    if raw is None:
        return _DEFAULT_MAX_INPUT_BYTES
    try:
        parsed = int(raw)
    except ValueError:
        return _DEFAULT_MAX_INPUT_BYTES
    return parsed if parsed > 0 else _DEFAULT_MAX_INPUT_BYTES


def _package_version() -> str:
    try:
        return importlib.metadata.version("flightscan")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def _dump_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def _error_response(
    *,
    status_code: int,
    error_code: str,
    message: str,
    request_id: str,
    detail: dict[str, Any] | None = None,
) -> JSONResponse:
    payload_detail = dict(detail or {})
    payload_detail["request_id"] = request_id

    return JSONResponse(
        status_code=status_code,
        headers={_REQUEST_ID_HEADER: request_id},
        content={
            "error_code": error_code,
            "message": message,
            "detail": payload_detail,
        },
    )


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _log_event(level: int, event: str, request_id: str, **fields: Any) -> None:
    payload = {
        "event": event,
        "request_id": request_id,
        **fields,
    }
    logger.log(level, _dump_json(payload))
