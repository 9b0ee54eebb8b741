"""Simulated collar events — a timer that occasionally manufactures alerts."""

from __future__ import annotations

import asyncio
import itertools
import random
from collections.abc import Awaitable, Callable, Sequence
from types import TracebackType

import structlog

from herdwatch.core.config import SynthesisConfig
from herdwatch.core.scheduler import TimerHandle, call_every
from herdwatch.core.types import Alert, AlertSeverity, Device, GeoPoint, utc_now_iso

logger = structlog.get_logger(__name__)

AlertCallback = Callable[[Alert], Awaitable[None] | None]
DevicesFn = Callable[[], Sequence[Device]]


def sequential_ids(prefix: str = "A", start: int = 1000) -> Callable[[], str]:
    """Identifier factory that never repeats within a process.

    Starts at four digits so it cannot collide with the three-digit seed ids.
    """
    counter = itertools.count(start)
    return lambda: f"{prefix}{next(counter)}"


class AlertSynthesizer:
    """Periodically rolls for a simulated High-severity alert.

    Each tick draws ``u`` uniform in [0, 1) and fires when
    ``u > 1 - fire_probability``. A firing tick picks one device uniformly at
    random and raises an alert near its location.

    Usage::

        synth = AlertSynthesizer(config, devices_fn=lambda: devices)
        synth.on_alert(session.record_alert)
        async with synth:
            await asyncio.sleep(60)
    """

    def __init__(
        self,
        config: SynthesisConfig,
        devices_fn: DevicesFn,
        rng: random.Random | None = None,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], str] = utc_now_iso,
    ) -> None:
        self._config = config
        self._devices_fn = devices_fn
        self._rng = rng or random.Random()
        self._next_id = id_factory or sequential_ids()
        self._clock = clock
        self._callbacks: list[AlertCallback] = []
        self._timer: TimerHandle | None = None
        self._ticks = 0
        self._fired = 0

    @property
    def running(self) -> bool:
        return self._timer is not None

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def fired(self) -> int:
        return self._fired

    def on_alert(self, callback: AlertCallback) -> None:
        """Register a callback for synthesized alerts."""
        self._callbacks.append(callback)

    # ── Synthesis ───────────────────────────────────────────────

    def tick(self) -> Alert | None:
        """Run one evaluation. Returns the new alert, or None."""
        self._ticks += 1
        devices = list(self._devices_fn())
        if not devices:
            logger.debug("synth_tick_no_devices", tick=self._ticks)
            return None

        if self._rng.random() <= 1.0 - self._config.fire_probability:
            return None

        device = devices[self._rng.randrange(len(devices))]
        alert = Alert(
            id=self._next_id(),
            timestamp=self._clock(),
            location=self._jitter(device.location),
            severity=AlertSeverity.HIGH,
            device_id=device.id,
        )
        self._fired += 1
        logger.info(
            "alert_synthesized",
            alert_id=alert.id,
            device_id=device.id,
            lat=alert.location.lat,
            lng=alert.location.lng,
        )
        return alert

    def _jitter(self, origin: GeoPoint) -> GeoPoint:
        radius = self._config.jitter_deg
        return GeoPoint(
            lat=origin.lat + self._rng.uniform(-radius, radius),
            lng=origin.lng + self._rng.uniform(-radius, radius),
        )

    async def _emit(self, alert: Alert) -> None:
        for cb in self._callbacks:
            try:
                result = cb(alert)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                logger.exception("synth_callback_error", alert_id=alert.id)

    async def _on_timer(self) -> None:
        alert = self.tick()
        if alert is not None:
            await self._emit(alert)

    # ── Lifecycle ───────────────────────────────────────────────

    async def start(self) -> None:
        if self._timer is not None:
            return
        self._timer = call_every(
            self._config.interval_secs, self._on_timer, name="alert_synthesizer",
        )
        logger.info(
            "synth_started",
            interval_secs=self._config.interval_secs,
            fire_probability=self._config.fire_probability,
        )

    async def stop(self) -> None:
        timer, self._timer = self._timer, None
        if timer is None:
            return
        timer.cancel()
        await timer.wait_closed()
        logger.info("synth_stopped", ticks=self._ticks, fired=self._fired)

    async def __aenter__(self) -> AlertSynthesizer:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.stop()
