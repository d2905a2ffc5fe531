"""
Body Size Limit Middleware Unit Tests
"""

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from nim_proxy.middleware.body_limit import BodySizeLimitMiddleware


def create_app(max_body_size: int) -> FastAPI:
    app = FastAPI()
    app.add_middleware(BodySizeLimitMiddleware, max_body_size=max_body_size)

    @app.post("/echo")
    async def echo(request: Request):
        return {"size": len(await request.body())}

    return app


async def post(app: FastAPI, **kwargs):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.post("/echo", **kwargs)


@pytest.mark.asyncio
async def test_within_limit():
    response = await post(create_app(16), content=b"x" * 16)
    assert response.status_code == 200
    assert response.json() == {"size": 16}


@pytest.mark.asyncio
async def test_over_limit():
    response = await post(create_app(16), content=b"x" * 17)
    assert response.status_code == 413
    assert response.json()["error"]["type"] == "invalid_request_error"
    assert response.json()["error"]["code"] == 413


@pytest.mark.asyncio
async def test_invalid_content_length():
    response = await post(create_app(16), content=b"x", headers={"Content-Length": "abc"})
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Invalid Content-Length header"
