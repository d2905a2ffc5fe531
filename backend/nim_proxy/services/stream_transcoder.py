"""
Stream Transcoding Service

Relays a NIM event stream to the caller while rewriting each event, keeping
the connection alive with heartbeat comments and stopping the backend read as
soon as the caller goes away.
"""

import asyncio
import logging
from typing import AsyncGenerator, AsyncIterator, Awaitable, Callable, Optional

from nim_proxy.common.cancellation import CancellationToken, monitor_client_disconnect
from nim_proxy.common.sse import HEARTBEAT, StreamState, flush, split_lines, transition
from nim_proxy.common.timer import Timer

logger = logging.getLogger(__name__)

# Queue marker: no more output will follow
_END = object()


class StreamTranscoder:
    """
    Stream Transcoder

    Three tasks cooperate per stream:
    1. pump: reads backend chunks, runs the line state machine, queues output
    2. heartbeat: queues a keep-alive comment every ``heartbeat_interval`` seconds
    3. disconnect monitor (optional): cancels the token when the caller is gone

    The generator returned by ``transcode`` drains the queue, so output is
    written as soon as each backend line is complete.
    """

    def __init__(self, merge_reasoning: bool = False, heartbeat_interval: float = 15.0):
        self.merge_reasoning = merge_reasoning
        self.heartbeat_interval = heartbeat_interval

    async def _pump(
        self,
        upstream: AsyncIterator[bytes],
        queue: asyncio.Queue,
        timer: Timer,
    ) -> None:
        state = StreamState()

        def emit(lines: list[str]) -> None:
            nonlocal state
            for line in lines:
                state, output = transition(state, line, self.merge_reasoning)
                if output is not None:
                    queue.put_nowait(output.encode("utf-8"))

        try:
            async for chunk in upstream:
                if timer.mark_first_byte():
                    logger.info("First chunk received: %sms", timer.first_byte_delay_ms)
                state, lines = split_lines(state, chunk)
                emit(lines)
            state, lines = flush(state)
            emit(lines)
            logger.info("Stream completed: %sms", timer.total_time_ms)
        except Exception as e:
            # Headers are already sent, the caller only sees the stream end
            logger.error("Stream error after %sms: %r", timer.total_time_ms, e)
        finally:
            queue.put_nowait(_END)

    async def _heartbeat(self, queue: asyncio.Queue) -> None:
        while True:
            await asyncio.sleep(self.heartbeat_interval)
            queue.put_nowait(HEARTBEAT)

    async def transcode(
        self,
        upstream: AsyncIterator[bytes],
        cancel_token: Optional[CancellationToken] = None,
        disconnect_check: Optional[Callable[[], Awaitable[bool]]] = None,
    ) -> AsyncGenerator[bytes, None]:
        """
        Transcode a backend byte stream into caller SSE bytes.

        Args:
            upstream: Backend body chunks
            cancel_token: Cancelled when the caller disconnects
            disconnect_check: Async callable returning True once the caller is gone

        Yields:
            bytes: Caller SSE lines and heartbeat comments
        """
        token = cancel_token or CancellationToken()
        queue: asyncio.Queue = asyncio.Queue()
        timer = Timer().start()

        pump_task = asyncio.create_task(self._pump(upstream, queue, timer))
        tasks = [pump_task, asyncio.create_task(self._heartbeat(queue))]
        if disconnect_check is not None:
            tasks.append(asyncio.create_task(monitor_client_disconnect(disconnect_check, token)))
        token.add_callback(lambda: queue.put_nowait(_END))

        try:
            while True:
                item = await queue.get()
                if item is _END or token.is_cancelled:
                    break
                yield item
        finally:
            # Closed before the backend finished: the caller went away
            if not pump_task.done():
                token.cancel("client_disconnected")
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            if token.is_cancelled:
                logger.info(
                    "Backend stream cancelled (%s) after %sms", token.reason, timer.total_time_ms
                )
