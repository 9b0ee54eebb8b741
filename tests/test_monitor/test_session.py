"""Tests for DashboardSession — alert recording, navigation, device selection."""

from __future__ import annotations

import pytest

from herdwatch.core.seed import seed_alerts, seed_devices, seed_users
from herdwatch.core.types import Alert, AlertSeverity, GeoPoint, NavPage
from herdwatch.monitor.exceptions import UnknownDeviceError
from herdwatch.monitor.session import DashboardSession


def _session(**kw: object) -> DashboardSession:
    return DashboardSession(
        devices=seed_devices(),
        users=seed_users(),
        alerts=seed_alerts(),
        **kw,  # type: ignore[arg-type]
    )


def _alert(alert_id: str, severity: AlertSeverity = AlertSeverity.HIGH,
           device_id: str = "D102") -> Alert:
    return Alert(
        id=alert_id,
        timestamp="2026-10-19T10:00:00+00:00",
        location=GeoPoint(lat=6.82, lng=80.81),
        severity=severity,
        device_id=device_id,
    )


class TestRecordAlert:
    def test_appends_then_interrupts(self) -> None:
        session = _session()
        alert = _alert("A1000")
        assert session.record_alert(alert) is True
        assert session.ledger.all()[0] == alert
        assert session.gate.active_alert == alert

    def test_medium_recorded_without_interrupt(self) -> None:
        session = _session()
        assert session.record_alert(_alert("A1000", AlertSeverity.MEDIUM)) is False
        assert len(session.ledger) == 6
        assert session.gate.active_alert is None

    def test_acknowledge_keeps_alert_in_ledger(self) -> None:
        session = _session()
        alert = _alert("A1000")
        session.record_alert(alert)
        assert session.acknowledge_alert() == alert
        assert session.gate.active_alert is None
        assert session.ledger.get("A1000") == alert

    def test_seed_alerts_do_not_interrupt(self) -> None:
        assert _session().gate.active_alert is None

    def test_cap_forwarded_to_ledger(self) -> None:
        session = _session(max_alerts=5)
        session.record_alert(_alert("A1000"))
        assert len(session.ledger) == 5
        assert session.ledger.get("A005") is None


class TestNavigation:
    def test_default_page(self) -> None:
        assert _session().active_page == NavPage.DASHBOARD

    def test_navigate_closes_sidebar(self) -> None:
        session = _session()
        session.set_sidebar_open(True)
        session.navigate(NavPage.MAP)
        assert session.active_page == NavPage.MAP
        assert not session.sidebar_open

    def test_navigate_accepts_string(self) -> None:
        session = _session()
        session.navigate("Alerts")
        assert session.active_page == NavPage.ALERTS

    def test_navigate_rejects_unknown_page(self) -> None:
        with pytest.raises(ValueError):
            _session().navigate("Nowhere")

    def test_toggle_sidebar(self) -> None:
        session = _session()
        assert session.toggle_sidebar() is True
        assert session.toggle_sidebar() is False


class TestDevices:
    def test_select_and_clear(self) -> None:
        session = _session()
        device = session.select_device("D103")
        assert session.selected_device == device
        session.clear_selection()
        assert session.selected_device is None

    def test_select_unknown_raises(self) -> None:
        session = _session()
        with pytest.raises(UnknownDeviceError) as exc_info:
            session.select_device("D999")
        assert exc_info.value.device_id == "D999"
        assert session.selected_device is None

    def test_device_detail(self) -> None:
        session = _session()
        session.record_alert(_alert("A1000", device_id="D101"))
        detail = session.device_detail("D101")
        assert detail["device"]["id"] == "D101"
        assert detail["battery_level"] == "good"
        assert [a["id"] for a in detail["alerts"]] == ["A1000", "A001", "A004"]

    def test_device_detail_low_battery(self) -> None:
        assert _session().device_detail("D103")["battery_level"] == "low"


class TestSnapshot:
    def test_snapshot_fields(self) -> None:
        session = _session()
        session.record_alert(_alert("A1000"))
        snap = session.snapshot()
        assert snap["gate_state"] == "interrupting"
        assert snap["active_alert"]["id"] == "A1000"
        assert snap["active_alert"]["deviceId"] == "D102"
        assert snap["alert_count"] == 6
        assert snap["device_count"] == 5
        assert snap["active_page"] == "Dashboard"
