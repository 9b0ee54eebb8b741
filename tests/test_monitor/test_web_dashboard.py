"""Tests for the aiohttp dashboard — routes, lifecycle hooks, error responses."""

from __future__ import annotations

import asyncio
import random

import pytest
from aiohttp.test_utils import TestClient, TestServer

from herdwatch.core.config import MapConfig, SynthesisConfig
from herdwatch.core.seed import seed_alerts, seed_devices, seed_users
from herdwatch.core.types import Alert, AlertSeverity, GeoPoint
from herdwatch.feeds.synthesizer import AlertSynthesizer
from herdwatch.mapview.controller import MapSurfaceController
from herdwatch.monitor.session import DashboardSession
from herdwatch.monitor.web_dashboard import create_web_app


# ── Helpers ─────────────────────────────────────────────────────


def _session() -> DashboardSession:
    return DashboardSession(
        devices=seed_devices(), users=seed_users(), alerts=seed_alerts(),
    )


def _high(alert_id: str = "A1000") -> Alert:
    return Alert(
        id=alert_id,
        timestamp="2026-10-19T10:00:00+00:00",
        location=GeoPoint(lat=6.8012, lng=80.8034),
        severity=AlertSeverity.HIGH,
        device_id="D101",
    )


@pytest.fixture
def session() -> DashboardSession:
    return _session()


@pytest.fixture
def controller() -> MapSurfaceController:
    return MapSurfaceController(config=MapConfig(settle_delay_secs=0.01))


@pytest.fixture
async def client(session: DashboardSession, controller: MapSurfaceController):  # type: ignore[no-untyped-def]
    app = create_web_app(session, controller=controller)
    async with TestClient(TestServer(app)) as c:
        yield c


# ── Pages ───────────────────────────────────────────────────────


class TestPages:
    async def test_index_html(self, client: TestClient) -> None:
        resp = await client.get("/")
        assert resp.status == 200
        text = await resp.text()
        assert "Elephant Alert" in text
        assert "const REFRESH_MS = 5000;" in text

    async def test_alert_rows_escaped(self, client: TestClient) -> None:
        text = await (await client.get("/")).text()
        assert "${esc(a.deviceId)}" in text
        assert "${a.deviceId}</td>" not in text

    async def test_map_renders(self, client: TestClient) -> None:
        resp = await client.get("/map")
        assert resp.status == 200
        text = await resp.text()
        assert "L.marker" in text
        assert "L.circle" in text

    async def test_map_reflects_new_alerts(
        self, client: TestClient, session: DashboardSession,
        controller: MapSurfaceController,
    ) -> None:
        await client.get("/map")
        circles_before = sum(o.kind == "circle" for o in controller.overlays)
        session.record_alert(_high())
        await client.get("/map")
        circles_after = sum(o.kind == "circle" for o in controller.overlays)
        assert circles_after == circles_before + 1
        assert controller.creations == 1


# ── JSON API ────────────────────────────────────────────────────


class TestApi:
    async def test_state(self, client: TestClient) -> None:
        data = await (await client.get("/api/state")).json()
        assert data["session"]["alert_count"] == 5
        assert data["summary"]["active_devices"] == 3
        assert len(data["summary"]["recent_alerts"]) == 3

    async def test_alerts_newest_first(
        self, client: TestClient, session: DashboardSession,
    ) -> None:
        session.record_alert(_high())
        data = await (await client.get("/api/alerts")).json()
        assert [a["id"] for a in data][:2] == ["A1000", "A001"]
        assert data[0]["deviceId"] == "D101"

    async def test_alerts_by_device_and_limit(self, client: TestClient) -> None:
        data = await (await client.get("/api/alerts", params={"device": "D101"})).json()
        assert [a["id"] for a in data] == ["A001", "A004"]
        data = await (await client.get("/api/alerts", params={"limit": "2"})).json()
        assert len(data) == 2

    async def test_alerts_bad_limit(self, client: TestClient) -> None:
        resp = await client.get("/api/alerts", params={"limit": "many"})
        assert resp.status == 400

    async def test_alerts_csv(self, client: TestClient) -> None:
        resp = await client.get("/api/alerts.csv")
        assert resp.status == 200
        assert resp.content_type == "text/csv"
        text = await resp.text()
        assert text.splitlines()[0] == "id,timestamp,lat,lng,severity,deviceId"

    async def test_devices_and_users(self, client: TestClient) -> None:
        devices = await (await client.get("/api/devices")).json()
        users = await (await client.get("/api/users")).json()
        assert [d["id"] for d in devices][0] == "D101"
        assert devices[2]["status"] == "Low Battery"
        assert len(users) == 4

    async def test_device_detail(self, client: TestClient) -> None:
        data = await (await client.get("/api/devices/D101")).json()
        assert data["device"]["id"] == "D101"
        assert [a["id"] for a in data["alerts"]] == ["A001", "A004"]

    async def test_device_detail_unknown(self, client: TestClient) -> None:
        resp = await client.get("/api/devices/D999")
        assert resp.status == 404

    async def test_analytics(self, client: TestClient) -> None:
        data = await (await client.get("/api/analytics")).json()
        assert data["severity_distribution"]["Resolved"] == 2
        assert len(data["movements_per_day"]) == 7


class TestNotification:
    async def test_idle_initially(self, client: TestClient) -> None:
        data = await (await client.get("/api/notification")).json()
        assert data == {"state": "idle", "alert": None}

    async def test_interrupt_then_ack(
        self, client: TestClient, session: DashboardSession,
    ) -> None:
        session.record_alert(_high())
        data = await (await client.get("/api/notification")).json()
        assert data["state"] == "interrupting"
        assert data["alert"]["id"] == "A1000"

        ack = await (await client.post("/api/notification/ack")).json()
        assert ack == {"acknowledged": "A1000", "state": "idle"}
        again = await (await client.post("/api/notification/ack")).json()
        assert again["acknowledged"] is None


class TestNavigate:
    async def test_navigate(self, client: TestClient, session: DashboardSession) -> None:
        resp = await client.post("/api/navigate", json={"page": "Map"})
        assert resp.status == 200
        assert session.active_page.value == "Map"

    async def test_navigate_bad_page(self, client: TestClient) -> None:
        resp = await client.post("/api/navigate", json={"page": "Nowhere"})
        assert resp.status == 400


class TestDeviceMap:
    async def test_select_mounts_device_map(
        self, client: TestClient, session: DashboardSession,
    ) -> None:
        resp = await client.post("/api/selection", json={"device": "D101"})
        assert resp.status == 200
        detail = await resp.json()
        assert detail["device"]["id"] == "D101"
        assert session.selected_device is not None
        assert session.selected_device.id == "D101"

        ctl: MapSurfaceController = client.server.app["device_map_controller"]
        assert ctl.mounted
        assert ctl.zoom == 14
        assert ctl.center == GeoPoint(lat=6.80, lng=80.80)
        assert [o.kind for o in ctl.overlays] == ["marker"]

        html = await (await client.get("/map/device")).text()
        assert "L.marker" in html
        assert "L.circle" not in html

    async def test_switching_devices_pairs_creations_and_disposals(
        self, client: TestClient,
    ) -> None:
        ctl: MapSurfaceController = client.server.app["device_map_controller"]
        for device_id in ("D101", "D102", "D103", "D101"):
            await client.post("/api/selection", json={"device": device_id})
        assert ctl.creations == 4
        assert ctl.disposals == 3
        assert ctl.container is not None
        assert ctl.container.element_id == "device-map-D101"

        await client.delete("/api/selection")
        assert ctl.creations == ctl.disposals == 4

    async def test_reselecting_same_device_keeps_surface(self, client: TestClient) -> None:
        ctl: MapSurfaceController = client.server.app["device_map_controller"]
        await client.post("/api/selection", json={"device": "D105"})
        await client.post("/api/selection", json={"device": "D105"})
        assert ctl.creations == 1
        assert ctl.disposals == 0

    async def test_clear_selection(
        self, client: TestClient, session: DashboardSession,
    ) -> None:
        await client.post("/api/selection", json={"device": "D101"})
        data = await (await client.delete("/api/selection")).json()
        assert data["selected_device"] is None
        assert session.selected_device is None
        assert (await client.get("/map/device")).status == 503

    async def test_unknown_device_leaves_selection(
        self, client: TestClient, session: DashboardSession,
    ) -> None:
        await client.post("/api/selection", json={"device": "D102"})
        resp = await client.post("/api/selection", json={"device": "D999"})
        assert resp.status == 404
        assert session.selected_device is not None
        assert session.selected_device.id == "D102"

    async def test_bad_selection_body(self, client: TestClient) -> None:
        resp = await client.post("/api/selection", json={"id": "D101"})
        assert resp.status == 400

    async def test_device_map_unavailable_before_selection(self, client: TestClient) -> None:
        assert (await client.get("/map/device")).status == 503


class TestMiniMap:
    async def test_devices_only(self, client: TestClient, session: DashboardSession) -> None:
        session.record_alert(_high())
        resp = await client.get("/map/mini")
        assert resp.status == 200
        html = await resp.text()
        assert "L.marker" in html
        assert "L.circle" not in html
        ctl: MapSurfaceController = client.server.app["mini_map_controller"]
        assert ctl.zoom == 11


class TestSidebar:
    async def test_toggle_without_body(
        self, client: TestClient, session: DashboardSession,
    ) -> None:
        data = await (await client.post("/api/sidebar")).json()
        assert data["sidebar_open"] is True
        data = await (await client.post("/api/sidebar")).json()
        assert data["sidebar_open"] is False

    async def test_set_explicitly(
        self, client: TestClient, session: DashboardSession,
    ) -> None:
        await client.post("/api/sidebar", json={"open": True})
        await client.post("/api/sidebar", json={"open": True})
        assert session.sidebar_open is True

    async def test_navigate_closes_sidebar(
        self, client: TestClient, session: DashboardSession,
    ) -> None:
        await client.post("/api/sidebar", json={"open": True})
        await client.post("/api/navigate", json={"page": "Devices"})
        assert session.sidebar_open is False

    async def test_invalid_json(self, client: TestClient) -> None:
        resp = await client.post(
            "/api/sidebar", data="{not json", headers={"Content-Type": "application/json"},
        )
        assert resp.status == 400


# ── Lifecycle ───────────────────────────────────────────────────


class TestLifecycle:
    async def test_map_mounted_and_disposed_with_app(self) -> None:
        controller = MapSurfaceController(config=MapConfig(settle_delay_secs=0.01))
        app = create_web_app(_session(), controller=controller)
        async with TestClient(TestServer(app)):
            assert controller.mounted
        assert not controller.mounted
        assert controller.creations == 1
        assert controller.disposals == 1

    async def test_every_map_disposed_on_cleanup(self) -> None:
        controller = MapSurfaceController(config=MapConfig(settle_delay_secs=0.01))
        app = create_web_app(_session(), controller=controller)
        async with TestClient(TestServer(app)) as c:
            await c.post("/api/selection", json={"device": "D101"})
        for key in ("map_controller", "mini_map_controller", "device_map_controller"):
            ctl: MapSurfaceController = app[key]
            assert not ctl.mounted
            assert ctl.creations == ctl.disposals == 1

    async def test_missing_map_container_returns_503(self) -> None:
        app = create_web_app(_session(), map_container=None)
        async with TestClient(TestServer(app)) as c:
            resp = await c.get("/map")
            assert resp.status == 503
            assert (await c.get("/api/state")).status == 200

    async def test_synthesizer_started_and_stopped(self) -> None:
        session = _session()
        synth = AlertSynthesizer(
            config=SynthesisConfig(interval_secs=0.01, fire_probability=1.0),
            devices_fn=lambda: session.devices,
            rng=random.Random(5),
        )
        synth.on_alert(session.record_alert)
        app = create_web_app(session, synthesizer=synth)
        async with TestClient(TestServer(app)):
            assert synth.running
            await asyncio.sleep(0.05)
        assert not synth.running
        assert len(session.ledger) > 5
        assert session.gate.active_alert is not None
