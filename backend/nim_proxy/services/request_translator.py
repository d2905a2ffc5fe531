"""
Request Translation Module

Validates inbound OpenAI chat requests and builds the NIM request body.
"""

from typing import Any

from nim_proxy.common.errors import ValidationError
from nim_proxy.domain.request import DEFAULT_CALLER_MODEL, BackendRequest, ChatRequest

DEFAULT_TEMPERATURE = 0.6
DEFAULT_MAX_TOKENS = 2048

MESSAGES_REQUIRED = "messages field is required and must be a non-empty array"
MODEL_MUST_BE_STRING = "model field must be a string"


def parse_chat_request(body: Any) -> ChatRequest:
    """
    Validate a decoded request body.

    Args:
        body: Decoded JSON body

    Returns:
        ChatRequest: Validated request

    Raises:
        ValidationError: Body is not an object, messages is missing/empty/not a list,
            or model is not a string
    """
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")

    messages = body.get("messages")
    if not isinstance(messages, list) or not messages:
        raise ValidationError(MESSAGES_REQUIRED)

    model = body.get("model")
    if model is not None and not isinstance(model, str):
        raise ValidationError(MODEL_MUST_BE_STRING)

    return ChatRequest(
        messages=messages,
        model=model or DEFAULT_CALLER_MODEL,
        temperature=body.get("temperature"),
        max_tokens=body.get("max_tokens"),
        stream=body.get("stream"),
    )


class RequestTranslator:
    """
    Builds backend requests

    Args:
        force_streaming: Always request a streamed backend response
        thinking_mode: Attach the chat template "thinking" flag
    """

    def __init__(self, force_streaming: bool = True, thinking_mode: bool = False):
        self.force_streaming = force_streaming
        self.thinking_mode = thinking_mode

    def use_streaming(self, request: ChatRequest) -> bool:
        return self.force_streaming or bool(request.stream)

    def translate(self, request: ChatRequest, backend_model: str) -> BackendRequest:
        extra: dict[str, Any] = {}
        if self.thinking_mode:
            extra["chat_template_kwargs"] = {"thinking": True}

        return BackendRequest(
            model=backend_model,
            messages=request.messages,
            temperature=(
                request.temperature if request.temperature is not None else DEFAULT_TEMPERATURE
            ),
            max_tokens=request.max_tokens if request.max_tokens is not None else DEFAULT_MAX_TOKENS,
            stream=self.use_streaming(request),
            extra=extra,
        )
