"""
Upstream Provider Client Module Initialization
"""

from nim_proxy.providers.base import ProviderClient, ProviderResponse, ProviderStream
from nim_proxy.providers.nim_client import NimClient, NimStream

__all__ = [
    "ProviderClient",
    "ProviderResponse",
    "ProviderStream",
    "NimClient",
    "NimStream",
]
