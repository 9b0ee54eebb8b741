"""Overlay derivation — device markers and alert circles.

``build_overlays`` is a pure function of its inputs, so rebuilding from an
unchanged snapshot always yields an equal overlay list.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict

from herdwatch.core.config import MapConfig
from herdwatch.core.types import Alert, AlertSeverity, Device, DeviceStatus, GeoPoint


class OverlayColor(StrEnum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    ORANGE = "orange"


_STATUS_COLORS: dict[DeviceStatus, OverlayColor] = {
    DeviceStatus.ONLINE: OverlayColor.GREEN,
    DeviceStatus.LOW_BATTERY: OverlayColor.YELLOW,
    DeviceStatus.OFFLINE: OverlayColor.RED,
}


class MarkerOverlay(BaseModel):
    """Device position marker."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["marker"] = "marker"
    location: GeoPoint
    color: OverlayColor
    label: str
    battery: int

    @property
    def popup(self) -> str:
        return f"<b>Device:</b> {self.label}<br><b>Battery:</b> {self.battery}%"


class CircleOverlay(BaseModel):
    """Fixed-radius alert area."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["circle"] = "circle"
    location: GeoPoint
    color: OverlayColor
    radius_m: float
    alert_id: str
    severity: AlertSeverity

    @property
    def popup(self) -> str:
        return f"<b>Alert:</b> {self.alert_id}<br><b>Severity:</b> {self.severity.value}"


Overlay = MarkerOverlay | CircleOverlay


def status_color(status: DeviceStatus) -> OverlayColor:
    return _STATUS_COLORS[status]


def severity_color(severity: AlertSeverity) -> OverlayColor | None:
    """Circle colour for *severity*; None means the alert is not drawn."""
    if severity == AlertSeverity.RESOLVED:
        return None
    if severity == AlertSeverity.HIGH:
        return OverlayColor.RED
    return OverlayColor.ORANGE


def build_overlays(
    devices: Iterable[Device],
    alerts: Iterable[Alert],
    radius_m: float | None = None,
) -> list[Overlay]:
    """Markers for every device, then circles for every unresolved alert.

    *radius_m* defaults to the configured ``MapConfig.alert_radius_m``.
    """
    if radius_m is None:
        radius_m = MapConfig().alert_radius_m
    overlays: list[Overlay] = [
        MarkerOverlay(
            location=d.location,
            color=status_color(d.status),
            label=d.id,
            battery=d.battery,
        )
        for d in devices
    ]
    for a in alerts:
        color = severity_color(a.severity)
        if color is None:
            continue
        overlays.append(CircleOverlay(
            location=a.location,
            color=color,
            radius_m=radius_m,
            alert_id=a.id,
            severity=a.severity,
        ))
    return overlays
