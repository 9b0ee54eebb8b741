"""Lightweight web dashboard — serves the live alert view over HTTP.

Runs as an ``aiohttp`` web server that owns the session lifecycle:
the alert synthesizer starts and the map surface mounts on app startup, and
both are torn down on cleanup.

Exposes:
- ``GET /``                          → HTML dashboard (polls the JSON API)
- ``GET /map``                       → Leaflet map document for the mounted surface
- ``GET /map/mini``                  → dashboard mini-map (devices only)
- ``GET /map/device``                → detail map for the selected device
- ``GET /api/state``                 → session snapshot + dashboard summary
- ``GET /api/alerts``                → alert log (``?device=`` / ``?limit=``)
- ``GET /api/alerts.csv``            → alert log as CSV
- ``GET /api/devices``               → device directory
- ``GET /api/devices/{device_id}``   → device detail with its alerts
- ``GET /api/users``                 → user directory
- ``GET /api/analytics``             → severity distribution and chart series
- ``GET /api/notification``          → active interrupting alert
- ``POST /api/notification/ack``     → acknowledge the active alert
- ``POST /api/navigate``             → switch the active page
- ``POST /api/selection``            → select a device and mount its detail map
- ``DELETE /api/selection``          → clear the selection and dispose its map
- ``POST /api/sidebar``              → set or toggle the sidebar
"""

from __future__ import annotations

from typing import Any

import structlog
from aiohttp import web

from herdwatch.core.seed import HISTORICAL_LOCATIONS, MOVEMENTS_PER_DAY
from herdwatch.core.types import NavPage
from herdwatch.feeds.synthesizer import AlertSynthesizer
from herdwatch.mapview.controller import MapSurfaceController
from herdwatch.mapview.surface import MapContainer
from herdwatch.monitor.analytics import (
    alerts_to_csv,
    dashboard_summary,
    severity_distribution,
)
from herdwatch.monitor.exceptions import UnknownDeviceError
from herdwatch.monitor.session import DashboardSession

logger = structlog.get_logger(__name__)

DEFAULT_MAP_CONTAINER = MapContainer(element_id="herdwatch-map")
MINI_MAP_CONTAINER = MapContainer(element_id="herdwatch-mini-map")


def _dump(models: Any) -> list[dict[str, Any]]:
    return [m.model_dump(mode="json", by_alias=True) for m in models]


def _build_state_json(session: DashboardSession, recent: int) -> dict[str, Any]:
    alerts = session.ledger.all()
    return {
        "session": session.snapshot(),
        "summary": dashboard_summary(session.devices, alerts, recent=recent),
    }


DASHBOARD_HTML = r"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Elephant Alert — Live Dashboard</title>
<style>
  :root {
    --bg: #0d1117;
    --card: #161b22;
    --border: #30363d;
    --text: #e2e8f0;
    --dim: #8b949e;
    --green: #39ff14;
    --red: #ef4444;
    --yellow: #eab308;
    --orange: #ff7a00;
    --blue: #60a5fa;
  }
  * { margin:0; padding:0; box-sizing:border-box; }
  body {
    font-family: system-ui, -apple-system, 'Segoe UI', sans-serif;
    background: var(--bg);
    color: var(--text);
    min-height: 100vh;
    padding: 20px;
  }
  .header { display:flex; justify-content:space-between; align-items:center; margin-bottom: 20px; }
  .header h1 { font-size: 1.3rem; }
  .header .time { color: var(--dim); font-size: 0.75rem; }
  .grid {
    display: grid;
    grid-template-columns: repeat(auto-fit, minmax(320px, 1fr));
    gap: 16px;
  }
  .card {
    background: var(--card);
    border: 1px solid var(--border);
    border-radius: 16px;
    padding: 16px 20px;
  }
  .card.full { grid-column: 1 / -1; }
  .card-title { font-size: 1rem; font-weight: 600; margin-bottom: 12px; }
  .big-number { font-size: 2rem; font-weight: 700; }
  .ok { color: var(--green); }
  .bad { color: var(--red); }
  table { width:100%; border-collapse: collapse; font-size: 0.85rem; }
  th, td { text-align:left; padding: 8px; border-bottom: 1px solid var(--border); }
  th { color: var(--dim); font-weight: 600; }
  .sev { padding: 2px 8px; border-radius: 9999px; font-size: 0.7rem; font-weight: 600; }
  .sev-High { background: rgba(239,68,68,0.2); color: #f87171; }
  .sev-Medium { background: rgba(234,179,8,0.2); color: #facc15; }
  .sev-Low { background: rgba(59,130,246,0.2); color: var(--blue); }
  .sev-Resolved { background: rgba(34,197,94,0.2); color: #4ade80; }
  .map-frame { width: 100%; height: 480px; border: 0; border-radius: 12px; }
  .modal-bg {
    position: fixed; inset: 0; background: rgba(0,0,0,0.6);
    display: none; align-items: center; justify-content: center; z-index: 50;
  }
  .modal-bg.open { display: flex; }
  .modal {
    background: var(--card); border: 2px solid var(--red); border-radius: 16px;
    padding: 24px; max-width: 420px; text-align: center;
  }
  .modal h2 { color: #f87171; margin-bottom: 12px; }
  .modal button {
    margin-top: 20px; background: var(--red); color: white; border: 0;
    padding: 8px 24px; border-radius: 8px; font-weight: 700; cursor: pointer;
  }
  a.export { color: var(--orange); font-size: 0.8rem; }
  .mini-frame { width: 100%; height: 220px; border: 0; border-radius: 12px; }
  .device-frame { width: 100%; height: 260px; border: 0; border-radius: 12px; margin-top: 12px; }
  .modal.device { border-color: var(--border); max-width: 560px; width: 90%; }
  .modal.device h2 { color: var(--text); }
  .modal.device button { background: var(--border); }
  .device-row { cursor: pointer; }
  .device-row:hover { background: rgba(255,255,255,0.04); }
  .menu { background: none; border: 0; color: var(--text); font-size: 1.2rem; cursor: pointer; }
  .sidebar { display: none; gap: 12px; margin-bottom: 16px; }
  .sidebar.open { display: flex; }
  .sidebar a { color: var(--dim); text-decoration: none; }
  .sidebar a.active { color: var(--orange); font-weight: 600; }
</style>
</head>
<body>

<div class="header">
  <h1><button class="menu" id="menu" title="Menu">&#9776;</button> &#x1F418; Elephant Alert</h1>
  <div class="time" id="last-update">Loading...</div>
</div>

<nav class="sidebar" id="sidebar"></nav>

<div class="grid">
  <div class="card">
    <div class="card-title">System Status</div>
    <div class="big-number" id="system-status">-</div>
  </div>
  <div class="card">
    <div class="card-title">Total Active Devices</div>
    <div class="big-number" id="active-devices">-</div>
  </div>
  <div class="card">
    <div class="card-title">Herd Overview</div>
    <iframe class="mini-frame" id="mini-frame" src="/map/mini"></iframe>
  </div>
  <div class="card full">
    <div class="card-title">Map</div>
    <iframe class="map-frame" id="map-frame" src="/map"></iframe>
  </div>
  <div class="card full">
    <div class="card-title">Devices</div>
    <div id="devices-container"></div>
  </div>
  <div class="card full">
    <div class="card-title">Alert Log <a class="export" href="/api/alerts.csv">Export as CSV</a></div>
    <div id="alerts-container"></div>
  </div>
</div>

<div class="modal-bg" id="modal">
  <div class="modal">
    <h2>High Severity Alert!</h2>
    <p id="modal-body"></p>
    <button id="ack">Acknowledge</button>
  </div>
</div>

<div class="modal-bg" id="device-modal">
  <div class="modal device">
    <h2 id="device-title"></h2>
    <p id="device-body"></p>
    <iframe class="device-frame" id="device-frame"></iframe>
    <button id="device-close">Close</button>
  </div>
</div>

<script>
const $ = id => document.getElementById(id);
const REFRESH_MS = __REFRESH_MS__;
const PAGES = ['Dashboard', 'Map', 'Analytics', 'Alerts', 'Devices', 'Users'];
let lastAlertCount = null;

function esc(value) {
  return String(value).replace(/[&<>"']/g, c => ({
    '&': '&amp;', '<': '&lt;', '>': '&gt;', '"': '&quot;', "'": '&#39;',
  })[c]);
}

function renderAlerts(alerts) {
  let html = '<table><thead><tr><th>Date</th><th>Location</th><th>Severity</th><th>Device ID</th></tr></thead><tbody>';
  alerts.forEach(a => {
    const when = new Date(a.timestamp).toLocaleString();
    const loc = a.location.lat.toFixed(3) + ', ' + a.location.lng.toFixed(3);
    const sev = esc(a.severity);
    html += `<tr><td>${esc(when)}</td><td>${loc}</td><td><span class="sev sev-${sev}">${sev}</span></td><td>${esc(a.deviceId)}</td></tr>`;
  });
  html += '</tbody></table>';
  $('alerts-container').innerHTML = html;
}

function renderDevices(devices) {
  let html = '<table><thead><tr><th>Device ID</th><th>Status</th><th>Battery</th></tr></thead><tbody>';
  devices.forEach(d => {
    html += `<tr class="device-row" data-id="${esc(d.id)}"><td>${esc(d.id)}</td><td>${esc(d.status)}</td><td>${d.battery}%</td></tr>`;
  });
  html += '</tbody></table>';
  $('devices-container').innerHTML = html;
  document.querySelectorAll('.device-row').forEach(row => {
    row.onclick = () => selectDevice(row.dataset.id);
  });
}

function renderSidebar(session) {
  const nav = $('sidebar');
  nav.classList.toggle('open', session.sidebar_open);
  nav.innerHTML = PAGES.map(p =>
    `<a href="#" data-page="${p}" class="${p === session.active_page ? 'active' : ''}">${p}</a>`
  ).join('');
  nav.querySelectorAll('a').forEach(a => {
    a.onclick = async e => {
      e.preventDefault();
      const resp = await fetch('/api/navigate', {
        method: 'POST', headers: {'Content-Type': 'application/json'},
        body: JSON.stringify({page: a.dataset.page}),
      });
      renderSidebar(await resp.json());
    };
  });
}

function renderModal(alert) {
  if (!alert) { $('modal').classList.remove('open'); return; }
  $('modal-body').textContent =
    `Device ${alert.deviceId} has triggered a high severity alert. ` +
    `Location: ${alert.location.lat.toFixed(4)}, ${alert.location.lng.toFixed(4)}`;
  $('modal').classList.add('open');
}

async function selectDevice(id) {
  const resp = await fetch('/api/selection', {
    method: 'POST', headers: {'Content-Type': 'application/json'},
    body: JSON.stringify({device: id}),
  });
  if (!resp.ok) return;
  const detail = await resp.json();
  $('device-title').textContent = 'Device ' + detail.device.id;
  $('device-body').textContent =
    `${detail.device.status} · battery ${detail.device.battery}% (${detail.battery_level}) · ` +
    `${detail.alerts.length} alerts`;
  $('device-frame').src = '/map/device?v=' + Date.now();
  $('device-modal').classList.add('open');
}

async function closeDevice() {
  $('device-modal').classList.remove('open');
  $('device-frame').src = 'about:blank';
  await fetch('/api/selection', {method: 'DELETE'});
}

async function refresh() {
  try {
    const state = await (await fetch('/api/state')).json();
    const s = state.summary;
    $('system-status').textContent = s.system_status;
    $('system-status').className = 'big-number ' + (s.system_status === 'operational' ? 'ok' : 'bad');
    $('active-devices').textContent = s.active_devices + ' / ' + s.total_devices;
    renderModal(state.session.active_alert);
    renderSidebar(state.session);
    if (state.session.alert_count !== lastAlertCount) {
      lastAlertCount = state.session.alert_count;
      renderAlerts(await (await fetch('/api/alerts')).json());
      $('map-frame').src = '/map';
    }
    $('last-update').textContent = new Date().toUTCString();
  } catch (e) {
    $('last-update').textContent = 'Connection error — retrying...';
  }
}

$('ack').onclick = async () => {
  await fetch('/api/notification/ack', {method: 'POST'});
  renderModal(null);
};
$('modal').onclick = e => { if (e.target === $('modal')) $('ack').click(); };
$('device-close').onclick = closeDevice;
$('device-modal').onclick = e => { if (e.target === $('device-modal')) closeDevice(); };
$('menu').onclick = async () => {
  const resp = await fetch('/api/sidebar', {method: 'POST'});
  renderSidebar(await resp.json());
};

fetch('/api/devices').then(r => r.json()).then(renderDevices);
refresh();
setInterval(refresh, REFRESH_MS);
</script>
</body>
</html>"""


# ── Handlers ────────────────────────────────────────────────────


async def _handle_index(request: web.Request) -> web.Response:
    html = DASHBOARD_HTML.replace("__REFRESH_MS__", str(request.app["refresh_ms"]))
    return web.Response(text=html, content_type="text/html")


async def _handle_state(request: web.Request) -> web.Response:
    session: DashboardSession = request.app["session"]
    return web.json_response(_build_state_json(session, request.app["recent_alerts"]))


async def _handle_alerts(request: web.Request) -> web.Response:
    session: DashboardSession = request.app["session"]
    device_id = request.query.get("device")
    alerts = session.ledger.by_device(device_id) if device_id else session.ledger.all()
    limit = request.query.get("limit")
    if limit is not None:
        try:
            n = int(limit)
        except ValueError:
            raise web.HTTPBadRequest(text="limit must be an integer") from None
        alerts = alerts[:max(n, 0)]
    return web.json_response(_dump(alerts))


async def _handle_alerts_csv(request: web.Request) -> web.Response:
    session: DashboardSession = request.app["session"]
    return web.Response(
        text=alerts_to_csv(session.ledger.all()),
        content_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="alerts.csv"'},
    )


async def _handle_devices(request: web.Request) -> web.Response:
    session: DashboardSession = request.app["session"]
    return web.json_response(_dump(session.devices))


async def _handle_device_detail(request: web.Request) -> web.Response:
    session: DashboardSession = request.app["session"]
    device_id = request.match_info["device_id"]
    try:
        detail = session.device_detail(device_id)
    except UnknownDeviceError as exc:
        return web.json_response({"error": str(exc)}, status=404)
    return web.json_response(detail)


async def _handle_users(request: web.Request) -> web.Response:
    session: DashboardSession = request.app["session"]
    return web.json_response(_dump(session.users))


async def _handle_analytics(request: web.Request) -> web.Response:
    session: DashboardSession = request.app["session"]
    return web.json_response({
        "severity_distribution": severity_distribution(session.ledger.all()),
        "movements_per_day": MOVEMENTS_PER_DAY,
        "historical_locations": HISTORICAL_LOCATIONS,
    })


async def _handle_notification(request: web.Request) -> web.Response:
    session: DashboardSession = request.app["session"]
    active = session.gate.active_alert
    return web.json_response({
        "state": session.gate.state.value,
        "alert": active.model_dump(mode="json", by_alias=True) if active else None,
    })


async def _handle_ack(request: web.Request) -> web.Response:
    session: DashboardSession = request.app["session"]
    cleared = session.acknowledge_alert()
    return web.json_response({
        "acknowledged": cleared.id if cleared is not None else None,
        "state": session.gate.state.value,
    })


async def _handle_navigate(request: web.Request) -> web.Response:
    session: DashboardSession = request.app["session"]
    try:
        body = await request.json()
        session.navigate(body["page"])
    except (ValueError, KeyError, TypeError):
        valid = [p.value for p in NavPage]
        return web.json_response({"error": f"page must be one of {valid}"}, status=400)
    return web.json_response(session.snapshot())


async def _handle_map(request: web.Request) -> web.Response:
    session: DashboardSession = request.app["session"]
    controller: MapSurfaceController = request.app["map_controller"]
    controller.update(devices=session.devices, alerts=session.ledger.all())
    return _map_response(controller)


async def _handle_mini_map(request: web.Request) -> web.Response:
    session: DashboardSession = request.app["session"]
    controller: MapSurfaceController = request.app["mini_map_controller"]
    controller.update(devices=session.devices)
    return _map_response(controller)


async def _handle_device_map(request: web.Request) -> web.Response:
    return _map_response(request.app["device_map_controller"])


def _map_response(controller: MapSurfaceController) -> web.Response:
    html = controller.render()
    if html is None:
        return web.Response(status=503, text="Map unavailable")
    return web.Response(text=html, content_type="text/html")


async def _handle_select(request: web.Request) -> web.Response:
    """Select a device and mount its detail map, replacing any previous one."""
    session: DashboardSession = request.app["session"]
    controller: MapSurfaceController = request.app["device_map_controller"]
    try:
        body = await request.json()
        device_id = body["device"]
    except (ValueError, KeyError, TypeError):
        return web.json_response({"error": "body must be {\"device\": <id>}"}, status=400)
    try:
        device = session.select_device(device_id)
    except UnknownDeviceError as exc:
        return web.json_response({"error": str(exc)}, status=404)
    controller.mount(
        MapContainer(element_id=f"device-map-{device.id}"),
        devices=[device],
        alerts=[],
        center=device.location,
        zoom=controller.config.device_zoom,
    )
    return web.json_response(session.device_detail(device.id))


async def _handle_clear_selection(request: web.Request) -> web.Response:
    session: DashboardSession = request.app["session"]
    controller: MapSurfaceController = request.app["device_map_controller"]
    session.clear_selection()
    controller.unmount()
    return web.json_response(session.snapshot())


async def _handle_sidebar(request: web.Request) -> web.Response:
    """Set the sidebar from ``{"open": bool}``; toggle when no body is sent."""
    session: DashboardSession = request.app["session"]
    body: Any = {}
    if request.can_read_body:
        try:
            body = await request.json()
        except ValueError:
            return web.json_response({"error": "body must be JSON"}, status=400)
    if isinstance(body, dict) and isinstance(body.get("open"), bool):
        session.set_sidebar_open(body["open"])
    else:
        session.toggle_sidebar()
    return web.json_response(session.snapshot())


# ── Lifecycle hooks ─────────────────────────────────────────────


async def _on_startup(app: web.Application) -> None:
    session: DashboardSession = app["session"]
    controller: MapSurfaceController = app["map_controller"]
    controller.mount(
        app["map_container"],
        devices=session.devices,
        alerts=session.ledger.all(),
    )
    mini: MapSurfaceController = app["mini_map_controller"]
    mini.mount(
        app["mini_map_container"],
        devices=session.devices,
        zoom=mini.config.mini_zoom,
    )
    synthesizer: AlertSynthesizer | None = app["synthesizer"]
    if synthesizer is not None:
        await synthesizer.start()
    logger.info(
        "dashboard_started",
        map_mounted=controller.mounted,
        mini_map_mounted=mini.mounted,
    )


async def _on_cleanup(app: web.Application) -> None:
    synthesizer: AlertSynthesizer | None = app["synthesizer"]
    if synthesizer is not None:
        await synthesizer.stop()
    for key in ("device_map_controller", "mini_map_controller", "map_controller"):
        app[key].unmount()
    logger.info("dashboard_stopped")


def create_web_app(
    session: DashboardSession,
    controller: MapSurfaceController | None = None,
    synthesizer: AlertSynthesizer | None = None,
    map_container: MapContainer | None = DEFAULT_MAP_CONTAINER,
    refresh_ms: int = 5000,
    recent_alerts: int = 3,
    mini_map_container: MapContainer | None = MINI_MAP_CONTAINER,
) -> web.Application:
    """Create the aiohttp web application.

    The device-detail and mini maps get their own controllers sharing the
    main controller's surface factory and map config.
    """
    main = controller or MapSurfaceController()
    app = web.Application()
    app["session"] = session
    app["map_controller"] = main
    app["device_map_controller"] = MapSurfaceController(
        factory=main.factory, config=main.config,
    )
    app["mini_map_controller"] = MapSurfaceController(
        factory=main.factory, config=main.config,
    )
    app["synthesizer"] = synthesizer
    app["map_container"] = map_container
    app["mini_map_container"] = mini_map_container
    app["refresh_ms"] = refresh_ms
    app["recent_alerts"] = recent_alerts
    app.on_startup.append(_on_startup)
    app.on_cleanup.append(_on_cleanup)
    app.router.add_get("/", _handle_index)
    app.router.add_get("/map", _handle_map)
    app.router.add_get("/map/mini", _handle_mini_map)
    app.router.add_get("/map/device", _handle_device_map)
    app.router.add_get("/api/state", _handle_state)
    app.router.add_get("/api/alerts", _handle_alerts)
    app.router.add_get("/api/alerts.csv", _handle_alerts_csv)
    app.router.add_get("/api/devices", _handle_devices)
    app.router.add_get("/api/devices/{device_id}", _handle_device_detail)
    app.router.add_get("/api/users", _handle_users)
    app.router.add_get("/api/analytics", _handle_analytics)
    app.router.add_get("/api/notification", _handle_notification)
    app.router.add_post("/api/notification/ack", _handle_ack)
    app.router.add_post("/api/navigate", _handle_navigate)
    app.router.add_post("/api/selection", _handle_select)
    app.router.add_delete("/api/selection", _handle_clear_selection)
    app.router.add_post("/api/sidebar", _handle_sidebar)
    return app


async def start_web_dashboard(
    session: DashboardSession,
    controller: MapSurfaceController | None = None,
    synthesizer: AlertSynthesizer | None = None,
    host: str = "0.0.0.0",
    port: int = 8080,
    refresh_ms: int = 5000,
    recent_alerts: int = 3,
) -> web.AppRunner:
    """Start the web dashboard server. Returns the runner for cleanup."""
    app = create_web_app(
        session,
        controller=controller,
        synthesizer=synthesizer,
        refresh_ms=refresh_ms,
        recent_alerts=recent_alerts,
    )
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    return runner
