"""Map surface controller — binds view state to one surface per mount."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager

import structlog

from herdwatch.core.config import MapConfig
from herdwatch.core.scheduler import TimerHandle, call_later
from herdwatch.core.types import Alert, Device, GeoPoint
from herdwatch.mapview.exceptions import MissingRenderTargetError
from herdwatch.mapview.overlays import Overlay, build_overlays
from herdwatch.mapview.surface import (
    MapContainer,
    MapSurface,
    SurfaceFactory,
    folium_surface_factory,
)

logger = structlog.get_logger(__name__)

DeferFn = Callable[[float, Callable[[], None], str], TimerHandle]


class MapSurfaceController:
    """Owns at most one :class:`MapSurface` at a time.

    - ``mount`` creates the surface once; re-mounting into the same container
      only syncs inputs.
    - ``update`` moves the camera in place when center/zoom change, and
      rebuilds the overlay layer from scratch when devices/alerts are given.
    - ``unmount`` disposes the surface exactly once and cancels any pending
      layout correction.

    A missing container is logged and leaves the controller unmounted; it
    never raises to the caller and is not retried until the next ``mount``.
    ``mount`` must run on the event loop because it schedules the deferred
    layout correction.
    """

    def __init__(
        self,
        factory: SurfaceFactory | None = None,
        config: MapConfig | None = None,
        defer: DeferFn = call_later,
    ) -> None:
        self._config = config or MapConfig()
        self._factory = factory or folium_surface_factory(self._config)
        self._defer = defer
        self._surface: MapSurface | None = None
        self._container: MapContainer | None = None
        self._settle: TimerHandle | None = None
        self._devices: tuple[Device, ...] = ()
        self._alerts: tuple[Alert, ...] = ()
        self._center = GeoPoint(
            lat=self._config.default_center[0], lng=self._config.default_center[1],
        )
        self._zoom = self._config.default_zoom
        self.creations = 0
        self.disposals = 0
        self.failed_mounts = 0
        self.overlay_syncs = 0

    # ── Read views ──────────────────────────────────────────────

    @property
    def config(self) -> MapConfig:
        return self._config

    @property
    def factory(self) -> SurfaceFactory:
        return self._factory

    @property
    def mounted(self) -> bool:
        return self._surface is not None

    @property
    def surface(self) -> MapSurface | None:
        return self._surface

    @property
    def container(self) -> MapContainer | None:
        return self._container

    @property
    def center(self) -> GeoPoint:
        return self._center

    @property
    def zoom(self) -> int:
        return self._zoom

    @property
    def overlays(self) -> list[Overlay]:
        return self._surface.overlays if self._surface is not None else []

    def render(self) -> str | None:
        """Render the current surface, or None when nothing is mounted."""
        if self._surface is None:
            return None
        return self._surface.render()

    # ── Lifecycle ───────────────────────────────────────────────

    def mount(
        self,
        container: MapContainer | None,
        devices: Sequence[Device] = (),
        alerts: Sequence[Alert] = (),
        center: GeoPoint | None = None,
        zoom: int | None = None,
    ) -> bool:
        """Bind to *container*. Returns True if a surface is mounted afterwards."""
        if self._surface is not None:
            if container == self._container:
                self.update(devices=devices, alerts=alerts, center=center, zoom=zoom)
                return True
            self.unmount()

        if center is not None:
            self._center = center
        if zoom is not None:
            self._zoom = zoom
        self._devices = tuple(devices)
        self._alerts = tuple(alerts)

        try:
            surface = self._factory(container, self._center, self._zoom)
        except MissingRenderTargetError as exc:
            self.failed_mounts += 1
            logger.warning("map_mount_failed", reason=str(exc))
            return False

        self._surface = surface
        self._container = container
        self.creations += 1
        logger.info(
            "map_surface_created",
            element_id=surface.container.element_id,
            center=self._center.as_list(),
            zoom=self._zoom,
        )
        try:
            self._sync_overlays()
            self._settle = self._defer(
                self._config.settle_delay_secs, self._settle_layout, "map_settle",
            )
        except Exception:
            logger.exception(
                "map_mount_failed", element_id=surface.container.element_id,
            )
            self.failed_mounts += 1
            self.unmount()
            return False
        return True

    def unmount(self) -> bool:
        """Dispose the mounted surface. Returns False if nothing was mounted."""
        surface, self._surface = self._surface, None
        settle, self._settle = self._settle, None
        self._container = None
        if settle is not None:
            settle.cancel()
        if surface is None:
            return False
        try:
            surface.dispose()
        except Exception:
            logger.exception(
                "map_dispose_error", element_id=surface.container.element_id,
            )
        self.disposals += 1
        logger.info("map_surface_disposed", element_id=surface.container.element_id)
        return True

    @contextmanager
    def mounted_on(
        self,
        container: MapContainer | None,
        devices: Sequence[Device] = (),
        alerts: Sequence[Alert] = (),
        center: GeoPoint | None = None,
        zoom: int | None = None,
    ) -> Iterator[MapSurfaceController]:
        """Mount for the duration of a ``with`` block."""
        try:
            self.mount(container, devices, alerts, center=center, zoom=zoom)
            yield self
        finally:
            self.unmount()

    # ── Synchronization ─────────────────────────────────────────

    def update(
        self,
        devices: Sequence[Device] | None = None,
        alerts: Sequence[Alert] | None = None,
        center: GeoPoint | None = None,
        zoom: int | None = None,
    ) -> None:
        camera_changed = False
        if center is not None and center != self._center:
            self._center = center
            camera_changed = True
        if zoom is not None and zoom != self._zoom:
            self._zoom = zoom
            camera_changed = True

        overlays_changed = False
        if devices is not None:
            self._devices = tuple(devices)
            overlays_changed = True
        if alerts is not None:
            self._alerts = tuple(alerts)
            overlays_changed = True

        if self._surface is None:
            return
        if camera_changed:
            self._surface.set_view(self._center, self._zoom)
            logger.debug("map_camera_synced", center=self._center.as_list(), zoom=self._zoom)
        if overlays_changed:
            self._sync_overlays()

    def _sync_overlays(self) -> None:
        # Clear and rebuild without yielding so no partial layer is observable.
        assert self._surface is not None
        overlays = build_overlays(
            self._devices, self._alerts, radius_m=self._config.alert_radius_m,
        )
        self._surface.clear_overlays()
        for overlay in overlays:
            self._surface.add_overlay(overlay)
        self.overlay_syncs += 1

    def _settle_layout(self) -> None:
        self._settle = None
        if self._surface is None or self._surface.disposed:
            return
        self._surface.invalidate_size()
        logger.debug("map_layout_settled", element_id=self._surface.container.element_id)
