"""
Cancellation Token Unit Tests
"""

import asyncio

import pytest

from nim_proxy.common.cancellation import CancellationToken, monitor_client_disconnect


class TestCancellationToken:
    def test_callbacks_run_once(self):
        token = CancellationToken()
        calls = []
        token.add_callback(lambda: calls.append("a"))

        token.cancel("client_disconnected")
        token.cancel("again")

        assert calls == ["a"]
        assert token.is_cancelled
        assert token.reason == "client_disconnected"

    def test_callback_added_after_cancel_runs_immediately(self):
        token = CancellationToken()
        token.cancel()
        calls = []

        token.add_callback(lambda: calls.append("late"))

        assert calls == ["late"]
        assert token.reason == "cancelled"

    @pytest.mark.asyncio
    async def test_wait(self):
        token = CancellationToken()
        waiter = asyncio.create_task(token.wait())
        await asyncio.sleep(0)
        assert not waiter.done()

        token.cancel()
        await asyncio.wait_for(waiter, timeout=1)

    @pytest.mark.asyncio
    async def test_wait_after_cancel(self):
        token = CancellationToken()
        token.cancel()
        await asyncio.wait_for(token.wait(), timeout=1)


class TestMonitorClientDisconnect:
    @pytest.mark.asyncio
    async def test_cancels_on_disconnect(self):
        token = CancellationToken()
        checks = iter([False, False, True])

        async def is_disconnected():
            return next(checks)

        await asyncio.wait_for(
            monitor_client_disconnect(is_disconnected, token, check_interval=0.01), timeout=1
        )

        assert token.is_cancelled
        assert token.reason == "client_disconnected"

    @pytest.mark.asyncio
    async def test_stops_when_token_cancelled_elsewhere(self):
        token = CancellationToken()

        async def is_disconnected():
            return False

        monitor = asyncio.create_task(
            monitor_client_disconnect(is_disconnected, token, check_interval=0.01)
        )
        token.cancel("done")
        await asyncio.wait_for(monitor, timeout=1)

        assert token.reason == "done"
