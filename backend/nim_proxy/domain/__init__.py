"""
Domain Model Module Initialization
"""

from nim_proxy.domain.request import DEFAULT_CALLER_MODEL, BackendRequest, ChatRequest

__all__ = [
    "DEFAULT_CALLER_MODEL",
    "BackendRequest",
    "ChatRequest",
]
