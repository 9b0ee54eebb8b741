"""Convenience factory for wiring the live alert stack."""

from __future__ import annotations

import random

from herdwatch.core.config import Settings
from herdwatch.core.seed import seed_alerts, seed_devices, seed_users
from herdwatch.feeds.synthesizer import AlertSynthesizer
from herdwatch.mapview.controller import MapSurfaceController
from herdwatch.mapview.surface import SurfaceFactory
from herdwatch.monitor.session import DashboardSession


def create_live_stack(
    settings: Settings,
    session: DashboardSession | None = None,
    rng: random.Random | None = None,
    surface_factory: SurfaceFactory | None = None,
) -> tuple[DashboardSession, AlertSynthesizer | None, MapSurfaceController]:
    """Build a session, optional synthesizer, and map controller from config.

    The synthesizer feeds ``session.record_alert`` so every synthesized alert
    is appended to the ledger before the gate sees it.

    Returns:
        (session, synthesizer_or_None, map_controller)
    """
    if session is None:
        session = DashboardSession(
            devices=seed_devices(),
            users=seed_users(),
            alerts=seed_alerts(),
            max_alerts=settings.ledger.max_alerts,
        )

    synthesizer: AlertSynthesizer | None = None
    if settings.synthesis.enabled:
        bound = session
        synthesizer = AlertSynthesizer(
            config=settings.synthesis,
            devices_fn=lambda: bound.devices,
            rng=rng,
        )
        synthesizer.on_alert(session.record_alert)

    controller = MapSurfaceController(factory=surface_factory, config=settings.map)
    return session, synthesizer, controller
