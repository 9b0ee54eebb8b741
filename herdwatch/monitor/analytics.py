"""Aggregates for the dashboard, analytics, and export views."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Sequence
from typing import Any

from herdwatch.core.types import Alert, AlertSeverity, Device, DeviceStatus

CSV_COLUMNS = ["id", "timestamp", "lat", "lng", "severity", "deviceId"]


def severity_distribution(alerts: Iterable[Alert]) -> dict[str, int]:
    """Alert count per severity; every severity is present."""
    counts = {s.value: 0 for s in AlertSeverity}
    for alert in alerts:
        counts[alert.severity.value] += 1
    return counts


def battery_level(battery: int) -> str:
    """Bucket a battery percentage: ``good`` (>60), ``fair`` (>20), else ``low``."""
    if battery > 60:
        return "good"
    if battery > 20:
        return "fair"
    return "low"


def dashboard_summary(
    devices: Sequence[Device],
    alerts: Sequence[Alert],
    recent: int = 3,
) -> dict[str, Any]:
    offline = sum(1 for d in devices if d.status == DeviceStatus.OFFLINE)
    return {
        "system_status": "degraded" if offline else "operational",
        "active_devices": sum(1 for d in devices if d.status == DeviceStatus.ONLINE),
        "total_devices": len(devices),
        "offline_devices": offline,
        "open_alerts": sum(1 for a in alerts if a.severity != AlertSeverity.RESOLVED),
        "recent_alerts": [
            a.model_dump(mode="json", by_alias=True) for a in alerts[:max(recent, 0)]
        ],
    }


def alerts_to_csv(alerts: Iterable[Alert]) -> str:
    """Render alerts as CSV with a header row."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for a in alerts:
        writer.writerow([
            a.id,
            a.timestamp,
            f"{a.location.lat:.6f}",
            f"{a.location.lng:.6f}",
            a.severity.value,
            a.device_id,
        ])
    return buf.getvalue()
