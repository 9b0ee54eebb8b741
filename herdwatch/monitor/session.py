"""Dashboard session — the single owner of mutable view state."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import structlog

from herdwatch.core.types import Alert, Device, NavPage, User
from herdwatch.monitor.analytics import battery_level
from herdwatch.monitor.exceptions import UnknownDeviceError
from herdwatch.monitor.gate import NotificationGate
from herdwatch.monitor.ledger import AlertLedger

logger = structlog.get_logger(__name__)


class DashboardSession:
    """Central state record for one dashboard session.

    Views read through the properties; every change goes through a named
    transition method. New alerts enter only via :meth:`record_alert`, which
    appends to the ledger and then lets the gate decide whether to interrupt.
    """

    def __init__(
        self,
        devices: Iterable[Device],
        users: Iterable[User] = (),
        alerts: Iterable[Alert] = (),
        max_alerts: int | None = None,
    ) -> None:
        self._devices: tuple[Device, ...] = tuple(devices)
        self._users: tuple[User, ...] = tuple(users)
        self.ledger = AlertLedger(alerts, max_alerts=max_alerts)
        self.gate = NotificationGate()
        self._active_page = NavPage.DASHBOARD
        self._sidebar_open = False
        self._selected_device_id: str | None = None

    # ── Read views ──────────────────────────────────────────────

    @property
    def devices(self) -> tuple[Device, ...]:
        return self._devices

    @property
    def users(self) -> tuple[User, ...]:
        return self._users

    @property
    def active_page(self) -> NavPage:
        return self._active_page

    @property
    def sidebar_open(self) -> bool:
        return self._sidebar_open

    @property
    def selected_device(self) -> Device | None:
        if self._selected_device_id is None:
            return None
        return self.device(self._selected_device_id)

    def device(self, device_id: str) -> Device:
        for d in self._devices:
            if d.id == device_id:
                return d
        raise UnknownDeviceError(device_id)

    def device_detail(self, device_id: str) -> dict[str, Any]:
        device = self.device(device_id)
        return {
            "device": device.model_dump(mode="json", by_alias=True),
            "battery_level": battery_level(device.battery),
            "alerts": [
                a.model_dump(mode="json", by_alias=True)
                for a in self.ledger.by_device(device_id)
            ],
        }

    # ── Transitions ─────────────────────────────────────────────

    def record_alert(self, alert: Alert) -> bool:
        """Append *alert* and run it through the gate. True if it interrupted."""
        self.ledger.append(alert)
        return self.gate.observe(alert)

    def acknowledge_alert(self) -> Alert | None:
        return self.gate.acknowledge()

    def navigate(self, page: NavPage | str) -> None:
        self._active_page = NavPage(page)
        self._sidebar_open = False
        logger.debug("session_navigate", page=self._active_page.value)

    def set_sidebar_open(self, is_open: bool) -> None:
        self._sidebar_open = is_open

    def toggle_sidebar(self) -> bool:
        self._sidebar_open = not self._sidebar_open
        return self._sidebar_open

    def select_device(self, device_id: str) -> Device:
        device = self.device(device_id)
        self._selected_device_id = device.id
        return device

    def clear_selection(self) -> None:
        self._selected_device_id = None

    # ── Serialization ───────────────────────────────────────────

    def snapshot(self) -> dict[str, Any]:
        active = self.gate.active_alert
        return {
            "active_page": self._active_page.value,
            "sidebar_open": self._sidebar_open,
            "selected_device": self._selected_device_id,
            "gate_state": self.gate.state.value,
            "active_alert": (
                active.model_dump(mode="json", by_alias=True) if active else None
            ),
            "alert_count": len(self.ledger),
            "device_count": len(self._devices),
        }
