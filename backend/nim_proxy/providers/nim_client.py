"""
NVIDIA NIM Client

Forwards OpenAI-compatible chat completion requests to the NIM API.
"""

import json
import logging
from typing import Any, AsyncIterator, Optional

import httpx

from nim_proxy.common.errors import upstream_status_error
from nim_proxy.common.timer import Timer
from nim_proxy.providers.base import ProviderClient, ProviderResponse, ProviderStream

logger = logging.getLogger(__name__)

MAX_REDIRECTS = 5


class NimStream(ProviderStream):
    """Streamed NIM response wrapping an open httpx response"""

    def __init__(self, response: httpx.Response):
        self._response = response
        self.status_code = response.status_code

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes():
                yield chunk
        finally:
            await self._response.aclose()

    async def aclose(self) -> None:
        await self._response.aclose()


class NimClient(ProviderClient):
    """
    NIM protocol client

    Holds one pooled ``httpx.AsyncClient`` for the lifetime of the application.

    Args:
        base_url: NIM API base URL (e.g. https://integrate.api.nvidia.com/v1)
        api_key: NIM API key
        timeout: Request timeout (seconds)
        transport: Optional httpx transport, used by tests
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 180,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                max_redirects=MAX_REDIRECTS,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def url(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def forward(self, body: dict[str, Any]) -> ProviderResponse:
        logger.debug("NIM Request: url=%s body=%s", self.url, json.dumps(body, ensure_ascii=False))

        timer = Timer().start()
        response = await self.client.post(self.url, headers=self._headers(), json=body)
        timer.stop()

        response_body: Any = response.text
        try:
            response_body = response.json()
        except json.JSONDecodeError:
            pass

        return ProviderResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response_body,
            total_time_ms=timer.total_time_ms,
        )

    async def open_stream(self, body: dict[str, Any]) -> NimStream:
        logger.debug(
            "NIM Stream Request: url=%s body=%s", self.url, json.dumps(body, ensure_ascii=False)
        )

        request = self.client.build_request("POST", self.url, headers=self._headers(), json=body)
        response = await self.client.send(request, stream=True)

        if not response.is_success:
            try:
                error_body = await response.aread()
            finally:
                await response.aclose()
            raise upstream_status_error(response.status_code, error_body)

        return NimStream(response)
