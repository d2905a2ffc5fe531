"""
Request Domain Model

Defines the caller request and the backend request data structures.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

DEFAULT_CALLER_MODEL = "gpt-4o"


@dataclass
class ChatRequest:
    """
    Chat Completion Request Data Class

    The subset of an OpenAI chat completion request the proxy forwards.
    """

    # Ordered, non-empty list of {role, content}
    messages: list[dict[str, Any]]
    # Caller-facing model name
    model: str = DEFAULT_CALLER_MODEL
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    stream: Optional[bool] = None


@dataclass
class BackendRequest:
    """
    NIM Chat Completion Request Data Class
    """

    model: str
    messages: list[dict[str, Any]]
    temperature: float
    max_tokens: int
    stream: bool
    # Backend-specific extension fields (e.g. chat_template_kwargs)
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        body = {
            "model": self.model,
            "messages": self.messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "stream": self.stream,
        }
        body.update(self.extra)
        return body
