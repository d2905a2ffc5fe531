"""Proxy Core Service Module

Implements the request flow from an OpenAI chat request to a NIM call and back."""

import logging
from typing import Any, AsyncGenerator, Awaitable, Callable, Optional

import httpx

from nim_proxy.common.cancellation import CancellationToken
from nim_proxy.common.errors import UpstreamError, map_upstream_exception, upstream_status_error
from nim_proxy.config import Settings
from nim_proxy.domain.request import BackendRequest, ChatRequest
from nim_proxy.providers.base import ProviderClient
from nim_proxy.services.model_resolver import ModelResolver
from nim_proxy.services.request_translator import RequestTranslator
from nim_proxy.services.response_assembler import ResponseAssembler
from nim_proxy.services.stream_transcoder import StreamTranscoder

logger = logging.getLogger(__name__)


class ProxyService:
    """
    Proxy Core Service

    Handles the complete flow of a chat completion request:
    1. Resolve the caller model to a NIM model
    2. Build the NIM request body
    3. Call NIM
    4. Transcode the event stream, or assemble the complete response
    """

    def __init__(
        self,
        resolver: ModelResolver,
        client: ProviderClient,
        translator: Optional[RequestTranslator] = None,
        transcoder: Optional[StreamTranscoder] = None,
        assembler: Optional[ResponseAssembler] = None,
    ):
        self.resolver = resolver
        self.client = client
        self.translator = translator or RequestTranslator()
        self.transcoder = transcoder or StreamTranscoder()
        self.assembler = assembler or ResponseAssembler()

    def use_streaming(self, request: ChatRequest) -> bool:
        return self.translator.use_streaming(request)

    async def _build_backend_request(self, request: ChatRequest) -> BackendRequest:
        backend_model = await self.resolver.resolve(request.model)
        backend_request = self.translator.translate(request, backend_model)
        logger.info(
            "Request: %s -> %s (streaming: %s)",
            request.model,
            backend_model,
            backend_request.stream,
        )
        return backend_request

    async def process_request(self, request: ChatRequest) -> dict[str, Any]:
        """
        Process Non-streaming Request

        Returns:
            dict: OpenAI chat.completion object

        Raises:
            UpstreamError: Backend failed or returned an error status
        """
        backend_request = await self._build_backend_request(request)

        try:
            response = await self.client.forward(backend_request.to_dict())
        except httpx.HTTPError as e:
            raise map_upstream_exception(e) from e

        if not response.is_success:
            raise upstream_status_error(response.status_code, response.body)
        if not isinstance(response.body, dict):
            raise UpstreamError(message="Backend returned a non-JSON response")

        logger.info("Response time: %sms", response.total_time_ms)
        return self.assembler.assemble(response.body, request.model)

    async def process_request_stream(
        self,
        request: ChatRequest,
        disconnect_check: Optional[Callable[[], Awaitable[bool]]] = None,
    ) -> AsyncGenerator[bytes, None]:
        """
        Process Streaming Request

        The backend call is made before returning, so connection failures and
        error statuses are still reported as a regular error response.

        Args:
            request: Validated chat request
            disconnect_check: Async callable returning True once the caller is gone

        Returns:
            AsyncGenerator: Caller SSE bytes

        Raises:
            UpstreamError: Backend failed before the stream started
        """
        backend_request = await self._build_backend_request(request)

        try:
            stream = await self.client.open_stream(backend_request.to_dict())
        except httpx.HTTPError as e:
            raise map_upstream_exception(e) from e

        token = CancellationToken()

        async def wrapped_generator() -> AsyncGenerator[bytes, None]:
            transcoded = self.transcoder.transcode(stream.aiter_bytes(), token, disconnect_check)
            try:
                async for chunk in transcoded:
                    yield chunk
            finally:
                await transcoded.aclose()
                await stream.aclose()

        return wrapped_generator()


def build_proxy_service(
    settings: Settings,
    resolver: ModelResolver,
    client: ProviderClient,
) -> ProxyService:
    """Wire a ProxyService from configuration"""
    return ProxyService(
        resolver=resolver,
        client=client,
        translator=RequestTranslator(
            force_streaming=settings.FORCE_STREAMING,
            thinking_mode=settings.ENABLE_THINKING_MODE,
        ),
        transcoder=StreamTranscoder(
            merge_reasoning=settings.SHOW_REASONING,
            heartbeat_interval=settings.HEARTBEAT_INTERVAL_SECONDS,
        ),
        assembler=ResponseAssembler(merge_reasoning=settings.SHOW_REASONING),
    )
