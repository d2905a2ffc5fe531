"""
Upstream Provider Client Base Class

Defines the abstract interface for backend clients.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Optional


@dataclass
class ProviderResponse:
    """
    Provider Response Data Class

    Encapsulates a complete (non-streaming) response from the backend.
    """

    # HTTP status code
    status_code: int
    # Response headers
    headers: dict[str, str] = field(default_factory=dict)
    # Response body (parsed JSON when possible, text otherwise)
    body: Any = None
    # Total time (ms)
    total_time_ms: Optional[int] = None

    @property
    def is_success(self) -> bool:
        """Whether the response is successful"""
        return 200 <= self.status_code < 300


class ProviderStream(ABC):
    """
    An open streamed backend response

    The status is available before the body is consumed.
    """

    status_code: int

    @abstractmethod
    def aiter_bytes(self) -> AsyncIterator[bytes]:
        """Iterate over raw body chunks as they arrive"""

    @abstractmethod
    async def aclose(self) -> None:
        """Release the backend connection; safe to call more than once"""


class ProviderClient(ABC):
    """
    Upstream Provider Client Abstract Base Class
    """

    @abstractmethod
    async def forward(self, body: dict[str, Any]) -> ProviderResponse:
        """
        Send a chat completion request and read the whole response

        Args:
            body: Backend request body

        Returns:
            ProviderResponse: Backend response, whatever its status
        """

    @abstractmethod
    async def open_stream(self, body: dict[str, Any]) -> ProviderStream:
        """
        Send a chat completion request and return once headers are received

        Args:
            body: Backend request body

        Returns:
            ProviderStream: Open stream with a 2xx status

        Raises:
            UpstreamError: Backend answered with a non-2xx status
            httpx.RequestError: Transport failure before headers were received
        """

    async def close(self) -> None:
        """Release pooled connections"""
