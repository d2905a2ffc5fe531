"""
Non-streaming Response Assembly

Converts one complete NIM chat completion into the OpenAI response shape.
"""

import time
from typing import Any

from nim_proxy.common.sse import THINK_CLOSE, THINK_OPEN

EMPTY_USAGE = {
    "prompt_tokens": 0,
    "completion_tokens": 0,
    "total_tokens": 0,
}


class ResponseAssembler:
    def __init__(self, merge_reasoning: bool = False):
        self.merge_reasoning = merge_reasoning

    def _assemble_choice(self, choice: dict[str, Any]) -> dict[str, Any]:
        message = choice.get("message") or {}
        content = message.get("content") or ""
        reasoning = message.get("reasoning_content")

        if self.merge_reasoning and reasoning:
            content = f"{THINK_OPEN}{reasoning}\n{THINK_CLOSE}{content}"

        return {
            "index": choice.get("index"),
            "message": {
                "role": message.get("role"),
                "content": content,
            },
            "finish_reason": choice.get("finish_reason"),
        }

    def assemble(self, backend_response: dict[str, Any], caller_model: str) -> dict[str, Any]:
        """
        Build the caller response.

        Args:
            backend_response: Parsed NIM response body
            caller_model: Model name the caller asked for

        Returns:
            dict: OpenAI ``chat.completion`` object
        """
        now = time.time()
        return {
            "id": f"chatcmpl-{int(now * 1000)}",
            "object": "chat.completion",
            "created": int(now),
            "model": caller_model,
            "choices": [
                self._assemble_choice(choice)
                for choice in backend_response.get("choices") or []
            ],
            "usage": backend_response.get("usage") or dict(EMPTY_USAGE),
        }
