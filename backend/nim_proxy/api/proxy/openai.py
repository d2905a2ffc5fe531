"""
OpenAI Proxy API

Provides OpenAI-compatible API endpoints backed by NVIDIA NIM.
"""

import json
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse

from nim_proxy.api.deps import ModelResolverDep, ProxyServiceDep, SettingsDep
from nim_proxy.common.errors import PayloadTooLargeError, ValidationError
from nim_proxy.services.request_translator import parse_chat_request

router = APIRouter(tags=["Proxy - OpenAI"])

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    # Disable reverse proxy buffering so tokens are delivered immediately
    "X-Accel-Buffering": "no",
}


@router.get("/v1/models")
async def list_models(resolver: ModelResolverDep):
    """
    OpenAI Models API (List)

    Returns the caller-facing names of the static model aliases.
    """
    created = int(time.time() * 1000)
    return {
        "object": "list",
        "data": [
            {
                "id": model,
                "object": "model",
                "created": created,
                "owned_by": "nvidia-nim-proxy",
            }
            for model in resolver.aliases
        ],
    }


@router.post("/v1/chat/completions")
async def chat_completions(
    request: Request,
    service: ProxyServiceDep,
    settings: SettingsDep,
):
    """
    OpenAI Chat Completions API Proxy

    Errors raised here are rendered by the AppError handler; once a stream
    has started, failures only end the stream.
    """
    raw_body = await request.body()
    if len(raw_body) > settings.MAX_BODY_SIZE:
        raise PayloadTooLargeError(settings.MAX_BODY_SIZE)

    try:
        body = json.loads(raw_body)
    except ValueError as e:
        raise ValidationError(f"Invalid JSON in request body: {e}") from e

    chat_request = parse_chat_request(body)

    if service.use_streaming(chat_request):
        stream_gen = await service.process_request_stream(
            chat_request,
            disconnect_check=request.is_disconnected,
        )
        return StreamingResponse(
            stream_gen,
            media_type="text/event-stream",
            headers=STREAM_HEADERS,
        )

    return JSONResponse(content=await service.process_request(chat_request))
