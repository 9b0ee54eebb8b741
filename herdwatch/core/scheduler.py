"""Cancellable timers on the running asyncio loop.

``call_every`` drives periodic work (alert synthesis); ``call_later`` drives
one-shot deferred work (map layout correction). Both return a
:class:`TimerHandle` whose ``cancel()`` may be called any number of times.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import structlog

logger = structlog.get_logger(__name__)

PeriodicCallback = Callable[[], Awaitable[None] | None]


class TimerHandle:
    """Cancellation handle for a scheduled callback."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._cancelled = False
        self._task: asyncio.Task[None] | None = None
        self._timer: asyncio.TimerHandle | None = None
        self.fired = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def active(self) -> bool:
        if self._cancelled:
            return False
        if self._task is not None:
            return not self._task.done()
        if self._timer is not None:
            return not self._timer.cancelled() and self.fired == 0
        return False

    def cancel(self) -> bool:
        """Cancel the timer. Returns True only on the first call."""
        if self._cancelled:
            return False
        self._cancelled = True
        if self._task is not None:
            self._task.cancel()
        if self._timer is not None:
            self._timer.cancel()
        logger.debug("timer_cancelled", timer=self._name, fired=self.fired)
        return True

    async def wait_closed(self) -> None:
        """Wait for a cancelled periodic task to unwind."""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            pass


def call_every(
    interval_secs: float,
    callback: PeriodicCallback,
    name: str = "periodic",
) -> TimerHandle:
    """Run *callback* every *interval_secs* until the handle is cancelled.

    The first invocation happens one full interval after scheduling.
    Exceptions raised by the callback are logged and do not stop the timer.
    Must be called with a running event loop.
    """
    handle = TimerHandle(name)

    async def _loop() -> None:
        while not handle.cancelled:
            try:
                await asyncio.sleep(interval_secs)
            except asyncio.CancelledError:
                break
            handle.fired += 1
            try:
                result = callback()
                if asyncio.iscoroutine(result):
                    await result
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("timer_callback_error", timer=name)

    handle._task = asyncio.get_running_loop().create_task(_loop(), name=name)
    return handle


def call_later(
    delay_secs: float,
    callback: Callable[[], None],
    name: str = "deferred",
) -> TimerHandle:
    """Run *callback* once after *delay_secs* unless cancelled first."""
    handle = TimerHandle(name)

    def _fire() -> None:
        if handle.cancelled:
            return
        handle.fired += 1
        try:
            callback()
        except Exception:
            logger.exception("timer_callback_error", timer=name)

    handle._timer = asyncio.get_running_loop().call_later(delay_secs, _fire)
    return handle
