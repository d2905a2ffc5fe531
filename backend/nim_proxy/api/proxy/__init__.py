"""
Proxy API Module Initialization
"""

from nim_proxy.api.proxy.openai import router as openai_router

__all__ = [
    "openai_router",
]
