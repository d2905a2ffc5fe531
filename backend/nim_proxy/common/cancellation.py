"""
Request Cancellation

A per-request cancellation token that is triggered when the caller goes away
and observed by the code reading the backend stream.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class CancellationToken:
    """
    One-shot cancellation signal

    Callbacks registered with ``add_callback`` run exactly once, when the
    token is first cancelled (or immediately if it already is).
    """

    def __init__(self) -> None:
        self._event: Optional[asyncio.Event] = None
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []
        self.reason: Optional[str] = None

    @property
    def event(self) -> asyncio.Event:
        """Get event (lazy loading, bound to the running loop)"""
        if self._event is None:
            self._event = asyncio.Event()
            if self._cancelled:
                self._event.set()
        return self._event

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: str = "cancelled") -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self.reason = reason
        if self._event is not None:
            self._event.set()
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]) -> None:
        if self._cancelled:
            callback()
            return
        self._callbacks.append(callback)

    async def wait(self) -> None:
        await self.event.wait()


async def monitor_client_disconnect(
    is_disconnected: Callable[[], Awaitable[bool]],
    token: CancellationToken,
    check_interval: float = 0.5,
) -> None:
    """
    Poll the caller connection and cancel ``token`` once it is gone.

    Args:
        is_disconnected: Typically ``request.is_disconnected``
        token: Token to cancel
        check_interval: Polling interval (seconds)
    """
    while not token.is_cancelled:
        if await is_disconnected():
            logger.info("Client disconnected")
            token.cancel("client_disconnected")
            return
        await asyncio.sleep(check_interval)
