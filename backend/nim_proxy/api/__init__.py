"""
API Router Module Initialization
"""

from nim_proxy.api.deps import get_model_resolver, get_proxy_service

__all__ = [
    "get_model_resolver",
    "get_proxy_service",
]
