"""Tests for call_every / call_later — firing, cancellation, idempotence."""

from __future__ import annotations

import asyncio

from herdwatch.core.scheduler import call_every, call_later


class TestCallEvery:
    async def test_fires_repeatedly(self) -> None:
        calls: list[int] = []
        handle = call_every(0.01, lambda: calls.append(1))
        await asyncio.sleep(0.08)
        handle.cancel()
        await handle.wait_closed()
        assert len(calls) >= 2
        assert handle.fired == len(calls)

    async def test_async_callback_awaited(self) -> None:
        calls: list[int] = []

        async def cb() -> None:
            calls.append(1)

        handle = call_every(0.01, cb)
        await asyncio.sleep(0.05)
        handle.cancel()
        await handle.wait_closed()
        assert calls

    async def test_no_fire_after_cancel(self) -> None:
        calls: list[int] = []
        handle = call_every(0.01, lambda: calls.append(1))
        await asyncio.sleep(0.035)
        handle.cancel()
        await handle.wait_closed()
        count = len(calls)
        await asyncio.sleep(0.05)
        assert len(calls) == count
        assert not handle.active

    async def test_cancel_is_idempotent(self) -> None:
        handle = call_every(0.01, lambda: None)
        assert handle.cancel() is True
        assert handle.cancel() is False
        assert handle.cancelled
        await handle.wait_closed()

    async def test_callback_error_does_not_stop_timer(self) -> None:
        calls: list[int] = []

        def cb() -> None:
            calls.append(1)
            raise RuntimeError("boom")

        handle = call_every(0.01, cb)
        await asyncio.sleep(0.06)
        handle.cancel()
        await handle.wait_closed()
        assert len(calls) >= 2


class TestCallLater:
    async def test_fires_once(self) -> None:
        calls: list[int] = []
        handle = call_later(0.01, lambda: calls.append(1))
        assert handle.active
        await asyncio.sleep(0.05)
        assert calls == [1]
        assert handle.fired == 1
        assert not handle.active

    async def test_cancel_before_fire(self) -> None:
        calls: list[int] = []
        handle = call_later(0.02, lambda: calls.append(1))
        handle.cancel()
        handle.cancel()
        await asyncio.sleep(0.05)
        assert calls == []
        assert handle.fired == 0
