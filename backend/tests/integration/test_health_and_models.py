"""
Health, Models and Routing Integration Tests
"""

import pytest
from fastapi import FastAPI

from conftest import make_settings
from nim_proxy import main
from nim_proxy.services.model_resolver import MODEL_MAPPING


@pytest.mark.asyncio
async def test_health(api_client):
    async with api_client(SHOW_REASONING=True, FORCE_STREAMING=False) as (client, _):
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "service": "OpenAI to NVIDIA NIM Proxy",
        "reasoning_display": True,
        "thinking_mode": False,
        "forced_streaming": False,
        "cached_models": 0,
    }


@pytest.mark.asyncio
async def test_list_models(api_client):
    async with api_client() as (client, _):
        response = await client.get("/v1/models")

    assert response.status_code == 200
    data = response.json()
    assert data["object"] == "list"
    assert [model["id"] for model in data["data"]] == list(MODEL_MAPPING)
    for model in data["data"]:
        assert model["object"] == "model"
        assert model["owned_by"] == "nvidia-nim-proxy"
        assert isinstance(model["created"], int)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method,path",
    [
        ("GET", "/v1/unknown"),
        ("POST", "/v1/completions"),
        ("GET", "/v1/chat/completions"),
    ],
)
async def test_unknown_endpoint(api_client, method, path):
    async with api_client() as (client, _):
        response = await client.request(method, path)

    assert response.status_code == 404
    assert response.json() == {
        "error": {
            "message": f"Endpoint {path} not found",
            "type": "invalid_request_error",
            "code": 404,
        }
    }


@pytest.mark.asyncio
async def test_lifespan_requires_api_key(monkeypatch):
    monkeypatch.setattr(main, "get_settings", lambda: make_settings(NIM_API_KEY=None))

    with pytest.raises(RuntimeError, match="NIM_API_KEY"):
        async with main.lifespan(FastAPI()):
            pass


@pytest.mark.asyncio
async def test_lifespan_builds_shared_state(monkeypatch):
    monkeypatch.setattr(
        main, "get_settings", lambda: make_settings(MODEL_CACHE_SIZE=7, SHOW_REASONING=True)
    )
    app = FastAPI()

    async with main.lifespan(app):
        resolver = app.state.model_resolver
        service = app.state.proxy_service
        assert service.resolver is resolver
        assert resolver.cache.max_size == 7
        assert service.transcoder.merge_reasoning is True
        assert service.client.base_url == "https://nim.test/v1"


def test_run_exits_without_api_key(monkeypatch):
    monkeypatch.setattr(main, "get_settings", lambda: make_settings(NIM_API_KEY=None))

    with pytest.raises(SystemExit) as exc_info:
        main.run()
    assert exc_info.value.code == 1
