"""Domain types for the tracking dashboard — alerts, collared devices, users."""

from __future__ import annotations

import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class AlertSeverity(StrEnum):
    """Alert severity as shown to operators."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    RESOLVED = "Resolved"


class DeviceStatus(StrEnum):
    """Collar connectivity / power status."""

    ONLINE = "Online"
    OFFLINE = "Offline"
    LOW_BATTERY = "Low Battery"


class UserRole(StrEnum):
    ADMIN = "Admin"
    OPERATOR = "Operator"
    VIEWER = "Viewer"


class UserStatus(StrEnum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class NavPage(StrEnum):
    """Top-level dashboard pages."""

    DASHBOARD = "Dashboard"
    MAP = "Map"
    ANALYTICS = "Analytics"
    ALERTS = "Alerts"
    DEVICES = "Devices"
    USERS = "Users"


class GeoPoint(BaseModel):
    """WGS84 coordinate in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float

    def as_list(self) -> list[float]:
        return [self.lat, self.lng]


class Alert(BaseModel):
    """A geolocated, severity-tagged event raised by a device.

    Alerts are immutable once created. ``device_id`` references
    ``Device.id`` but the reference is not enforced.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    timestamp: str
    location: GeoPoint
    severity: AlertSeverity
    device_id: str = Field(alias="deviceId")

    @property
    def is_high(self) -> bool:
        return self.severity == AlertSeverity.HIGH


class Device(BaseModel):
    """A tracking collar and its last-known state."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    status: DeviceStatus
    battery: int = Field(ge=0, le=100)
    last_ping: str = Field(alias="lastPing")
    location: GeoPoint


class User(BaseModel):
    """Dashboard user — listed only, never authenticated."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    role: UserRole
    contact: str
    status: UserStatus = UserStatus.ACTIVE


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.datetime.now(datetime.UTC).isoformat()


def iso_hours_ago(hours: float, now: datetime.datetime | None = None) -> str:
    """ISO-8601 timestamp *hours* before *now* (UTC)."""
    ref = now or datetime.datetime.now(datetime.UTC)
    return (ref - datetime.timedelta(hours=hours)).isoformat()
