"""Seed data generated at process start.

Stands in for the device and user directories until real collars report in.
Timestamps are relative to the moment the seed functions are called.
"""

from __future__ import annotations

import datetime

from herdwatch.core.types import (
    Alert,
    AlertSeverity,
    Device,
    DeviceStatus,
    GeoPoint,
    User,
    UserRole,
    UserStatus,
    iso_hours_ago,
)


def seed_alerts(now: datetime.datetime | None = None) -> list[Alert]:
    """Initial alert history, newest first."""
    rows = [
        ("A001", 1, 6.80, 80.80, AlertSeverity.HIGH, "D101"),
        ("A002", 2, 6.82, 80.81, AlertSeverity.MEDIUM, "D102"),
        ("A003", 5, 6.79, 80.78, AlertSeverity.LOW, "D103"),
        ("A004", 8, 6.81, 80.83, AlertSeverity.RESOLVED, "D101"),
        ("A005", 12, 6.83, 80.79, AlertSeverity.RESOLVED, "D104"),
    ]
    return [
        Alert(
            id=alert_id,
            timestamp=iso_hours_ago(hours, now),
            location=GeoPoint(lat=lat, lng=lng),
            severity=severity,
            device_id=device_id,
        )
        for alert_id, hours, lat, lng, severity, device_id in rows
    ]


def seed_devices(now: datetime.datetime | None = None) -> list[Device]:
    rows = [
        ("D101", DeviceStatus.ONLINE, 89, 0.1, 6.80, 80.80),
        ("D102", DeviceStatus.ONLINE, 72, 0.2, 6.82, 80.81),
        ("D103", DeviceStatus.LOW_BATTERY, 15, 1, 6.79, 80.78),
        ("D104", DeviceStatus.OFFLINE, 55, 6, 6.83, 80.79),
        ("D105", DeviceStatus.ONLINE, 95, 0.3, 6.85, 80.85),
    ]
    return [
        Device(
            id=device_id,
            status=status,
            battery=battery,
            last_ping=iso_hours_ago(hours, now),
            location=GeoPoint(lat=lat, lng=lng),
        )
        for device_id, status, battery, hours, lat, lng in rows
    ]


def seed_users() -> list[User]:
    return [
        User(id="U001", name="Dr. Aruni Fonseka", role=UserRole.ADMIN,
             contact="aruni@wildlife.gov"),
        User(id="U002", name="Ravi Kumar", role=UserRole.OPERATOR,
             contact="ravi.k@rangers.gov"),
        User(id="U003", name="Saman Perera", role=UserRole.OPERATOR,
             contact="saman.p@rangers.gov"),
        User(id="U004", name="Jani Silva", role=UserRole.VIEWER,
             contact="jani.s@research.org", status=UserStatus.INACTIVE),
    ]


# Static chart series for the analytics page (placeholders until movement
# tracking lands).
MOVEMENTS_PER_DAY: list[dict[str, object]] = [
    {"name": "Mon", "movements": 12},
    {"name": "Tue", "movements": 19},
    {"name": "Wed", "movements": 15},
    {"name": "Thu", "movements": 25},
    {"name": "Fri", "movements": 22},
    {"name": "Sat", "movements": 30},
    {"name": "Sun", "movements": 28},
]

HISTORICAL_LOCATIONS: list[dict[str, object]] = [
    {"time": "6h ago", "lat": 6.805, "lng": 80.805},
    {"time": "5h ago", "lat": 6.802, "lng": 80.808},
    {"time": "4h ago", "lat": 6.798, "lng": 80.810},
    {"time": "3h ago", "lat": 6.799, "lng": 80.815},
    {"time": "2h ago", "lat": 6.801, "lng": 80.812},
    {"time": "1h ago", "lat": 6.800, "lng": 80.800},
    {"time": "now", "lat": 6.8, "lng": 80.8},
]
