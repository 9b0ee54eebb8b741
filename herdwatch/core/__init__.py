"""Core module — config, types, logging, timers."""

from herdwatch.core.config import Settings, get_settings, load_settings, reset_settings
from herdwatch.core.logging import setup_logging
from herdwatch.core.scheduler import TimerHandle, call_every, call_later
from herdwatch.core.types import (
    Alert,
    AlertSeverity,
    Device,
    DeviceStatus,
    GeoPoint,
    NavPage,
    User,
    UserRole,
    UserStatus,
)

__all__ = [
    "Alert",
    "AlertSeverity",
    "Device",
    "DeviceStatus",
    "GeoPoint",
    "NavPage",
    "Settings",
    "TimerHandle",
    "User",
    "UserRole",
    "UserStatus",
    "call_every",
    "call_later",
    "get_settings",
    "load_settings",
    "reset_settings",
    "setup_logging",
]
