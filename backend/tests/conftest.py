"""
Test Configuration Module
"""

import os

# Settings are loaded at import time by nim_proxy.main
os.environ.setdefault("NIM_API_KEY", "test-nim-key")

import asyncio
import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from nim_proxy.api.deps import get_model_resolver, get_proxy_service
from nim_proxy.config import Settings, get_settings
from nim_proxy.main import app
from nim_proxy.providers.nim_client import NimClient
from nim_proxy.services import FallbackCache, ModelResolver, build_proxy_service

TEST_NIM_BASE = "https://nim.test/v1"


class TrackingStream(httpx.AsyncByteStream):
    """Backend body stream that records whether the proxy closed it"""

    def __init__(self, chunks: list[bytes], delay: float = 0.0, hang: bool = False):
        self.chunks = chunks
        self.delay = delay
        self.hang = hang
        self.closed = False
        self.sent = 0

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self.chunks:
            if self.delay:
                await asyncio.sleep(self.delay)
            self.sent += 1
            yield chunk
        if self.hang:
            await asyncio.sleep(3600)

    async def aclose(self) -> None:
        self.closed = True


class FakeNimBackend:
    """
    In-process NIM backend served through httpx.MockTransport

    Streamed requests get ``stream_chunks``; non-streamed requests get
    ``json_body``. ``status_code`` and ``error`` simulate failures.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.streams: list[TrackingStream] = []
        self.stream_chunks: list[bytes] = [b"data: [DONE]\n\n"]
        self.chunk_delay = 0.0
        self.hang = False
        self.status_code = 200
        self.json_body: Any = {"choices": []}
        self.error: Optional[Exception] = None

    @property
    def last_body(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.status_code != 200:
            return httpx.Response(self.status_code, json=self.json_body)
        if json.loads(request.content).get("stream"):
            stream = TrackingStream(self.stream_chunks, delay=self.chunk_delay, hang=self.hang)
            self.streams.append(stream)
            return httpx.Response(
                200,
                headers={"content-type": "text/event-stream"},
                stream=stream,
            )
        return httpx.Response(200, json=self.json_body)


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {"NIM_API_KEY": "test-nim-key", "NIM_API_BASE": TEST_NIM_BASE}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def fake_backend() -> FakeNimBackend:
    return FakeNimBackend()


@pytest_asyncio.fixture
async def nim_client(fake_backend):
    client = NimClient(
        base_url=TEST_NIM_BASE,
        api_key="test-nim-key",
        transport=httpx.MockTransport(fake_backend.handler),
    )
    yield client
    await client.close()


@pytest.fixture
def make_service(nim_client):
    """Build a ProxyService (and its resolver) from settings overrides"""

    def _make(**overrides: Any):
        settings = make_settings(**overrides)
        resolver = ModelResolver(FallbackCache(settings.MODEL_CACHE_SIZE))
        return build_proxy_service(settings, resolver, nim_client), settings

    return _make


@pytest.fixture
def api_client(make_service):
    """
    Factory for an HTTP client talking to the app with a fake backend.

    Usage: ``async with api_client(SHOW_REASONING=True) as (client, service): ...``
    """
    @asynccontextmanager
    async def _client(**overrides: Any):
        service, settings = make_service(**overrides)
        app.dependency_overrides[get_proxy_service] = lambda: service
        app.dependency_overrides[get_model_resolver] = lambda: service.resolver
        app.dependency_overrides[get_settings] = lambda: settings
        transport = ASGITransport(app=app)
        try:
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                yield ac, service
        finally:
            app.dependency_overrides = {}

    return _client
