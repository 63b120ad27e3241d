from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from apps.api.main import app

DIV_CALL = r'self.__next_f.push([1,"4c:[\"$\",\"div\",null,{\"className\":\"a\",\"children\":\"hi\"}]\n"])'
BROKEN_CALL = r'self.__next_f.push([1,"5:[\"$\",\"p\",null"])'


@pytest.mark.anyio
async def test_healthz_ok_and_request_id() -> None:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["X-Flightscan-Request-Id"]


@pytest.mark.anyio
async def test_meta_lists_formats_and_token() -> None:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.get("/v1/meta")

    assert response.status_code == 200
    payload = response.json()
    assert payload["supported_formats"] == ["json", "markup"]
    assert payload["invocation_token"] == "self.__next_f.push("
    assert payload["version"] == app.version


@pytest.mark.anyio
async def test_parse_returns_summary_results_and_json_output() -> None:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.post(
            "/v1/parse",
            json={"text": f"<script>{DIV_CALL}</script><script>{BROKEN_CALL}</script>"},
        )

    assert response.status_code == 200
    payload = response.json()
    assert payload["request_id"] == response.headers["X-Flightscan-Request-Id"]
    assert payload["summary"] == {
        "total_scripts": 2,
        "success_count": 1,
        "module_loading_count": 0,
        "failure_count": 1,
        "node_count": 1,
    }
    assert payload["results"][0]["outcome"]["status"] == "success"
    assert payload["results"][1]["outcome"]["status"] == "failure"
    assert payload["results"][1]["outcome"]["error"]
    assert '"tag": "div"' in payload["output"]
    for key in ("parse_ms", "total_ms"):
        assert isinstance(payload["timing"][key], int)


@pytest.mark.anyio
async def test_parse_markup_output() -> None:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.post("/v1/parse", json={"text": DIV_CALL, "format": "markup"})

    assert response.status_code == 200
    assert response.json()["output"] == '<div className="a">\n  "hi"\n</div>'


@pytest.mark.anyio
async def test_parse_empty_document_is_not_an_error() -> None:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.post("/v1/parse", json={"text": "<html></html>"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["summary"]["total_scripts"] == 0
    assert payload["results"] == []
    assert payload["output"] == "[]"


@pytest.mark.anyio
async def test_parse_invalid_format_returns_422() -> None:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.post("/v1/parse", json={"text": DIV_CALL, "format": "xml"})

    assert response.status_code == 422
    payload = response.json()
    assert payload["error_code"] == "INVALID_ARGUMENT"
    assert payload["detail"]["request_id"] == response.headers["X-Flightscan-Request-Id"]
    assert payload["detail"]["errors"][0]["loc"] == ["format"]


@pytest.mark.anyio
async def test_parse_non_json_body_returns_422() -> None:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.post(
            "/v1/parse",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )

    assert response.status_code == 422
    assert response.json()["error_code"] == "INVALID_ARGUMENT"


@pytest.mark.anyio
async def test_parse_input_too_large_returns_413(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLIGHTSCAN_MAX_INPUT_BYTES", "32")
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.post("/v1/parse", json={"text": DIV_CALL})

    assert response.status_code == 413
    payload = response.json()
    assert payload["error_code"] == "INPUT_TOO_LARGE"
    assert payload["detail"]["max_input_bytes"] == 32


@pytest.mark.anyio
async def test_parse_uses_config_from_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    config = tmp_path / "engine.yaml"
    config.write_text("preview_length: 10\n", encoding="utf-8")
    monkeypatch.setenv("FLIGHTSCAN_CONFIG", str(config))
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.post("/v1/parse", json={"text": DIV_CALL})

    assert response.status_code == 200
    assert response.json()["results"][0]["snippet_preview"] == DIV_CALL[:10]


@pytest.mark.anyio
async def test_parse_invalid_config_returns_500(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("FLIGHTSCAN_CONFIG", str(tmp_path / "missing.yaml"))
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.post("/v1/parse", json={"text": DIV_CALL})

    assert response.status_code == 500
    assert response.json()["error_code"] == "CONFIG_ERROR"


@pytest.mark.anyio
async def test_parse_exports_very_deep_tree() -> None:
    element: object = "leaf"
    for _ in range(300):
        element = ["$", "div", None, {"children": element}]
    text = "self.__next_f.push(" + json.dumps([1, element]) + ")"

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.post("/v1/parse", json={"text": text})

    assert response.status_code == 200
    payload = response.json()
    assert payload["summary"]["success_count"] == 1
    assert payload["results"][0]["outcome"]["nodes"][0]["tag"] == "div"
    assert json.loads(payload["output"])[0]["tag"] == "div"
