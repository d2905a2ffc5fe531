"""
Service Layer Module Initialization
"""

from nim_proxy.services.model_resolver import FallbackCache, ModelResolver
from nim_proxy.services.proxy_service import ProxyService, build_proxy_service
from nim_proxy.services.request_translator import RequestTranslator, parse_chat_request
from nim_proxy.services.response_assembler import ResponseAssembler
from nim_proxy.services.stream_transcoder import StreamTranscoder

__all__ = [
    "FallbackCache",
    "ModelResolver",
    "ProxyService",
    "build_proxy_service",
    "RequestTranslator",
    "parse_chat_request",
    "ResponseAssembler",
    "StreamTranscoder",
]
