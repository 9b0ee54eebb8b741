"""Map rendering surfaces — the expensive resource the controller manages."""

from __future__ import annotations

import abc
from collections.abc import Callable

import folium
import structlog
from pydantic import BaseModel, ConfigDict

from herdwatch.core.config import MapConfig
from herdwatch.core.types import GeoPoint
from herdwatch.mapview.exceptions import MissingRenderTargetError, SurfaceDisposedError
from herdwatch.mapview.overlays import CircleOverlay, MarkerOverlay, Overlay

logger = structlog.get_logger(__name__)

# Marker fill per overlay colour (Tailwind 500 shades, matching the UI badges).
_MARKER_FILL: dict[str, str] = {
    "green": "#22c55e",
    "yellow": "#eab308",
    "red": "#ef4444",
    "orange": "#f97316",
}

_PIN_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="20" height="20" fill="none" '
    'viewBox="0 0 24 24" stroke="white">'
    '<path stroke-linecap="round" stroke-linejoin="round" stroke-width="2" '
    'd="M17.657 16.657L13.414 20.9a1.998 1.998 0 01-2.827 0l-4.244-4.243a8 8 0 1111.314 0z"/>'
    '<path stroke-linecap="round" stroke-linejoin="round" stroke-width="2" '
    'd="M15 11a3 3 0 11-6 0 3 3 0 016 0z"/></svg>'
)


def _drop_children(element: folium.Element) -> None:
    """Detach every child of a folium element.

    folium has no public removal API; branca keeps children in the private
    ``_children`` ordered dict. This is the only place that touches it.
    """
    element._children.clear()


class MapContainer(BaseModel):
    """Handle for the element a surface renders into."""

    model_config = ConfigDict(frozen=True)

    element_id: str
    width: str = "100%"
    height: str = "100%"


class MapSurface(abc.ABC):
    """Base class for map surfaces.

    A surface owns one camera (center + zoom) and one overlay layer. It is
    created once per mount and must be disposed exactly once.
    """

    def __init__(self, container: MapContainer, center: GeoPoint, zoom: int) -> None:
        self.container = container
        self._center = center
        self._zoom = zoom
        self._overlays: list[Overlay] = []
        self._disposed = False
        self.layout_fixes = 0

    @property
    def center(self) -> GeoPoint:
        return self._center

    @property
    def zoom(self) -> int:
        return self._zoom

    @property
    def overlays(self) -> list[Overlay]:
        return list(self._overlays)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _check_alive(self) -> None:
        if self._disposed:
            raise SurfaceDisposedError(self.container.element_id)

    def set_view(self, center: GeoPoint, zoom: int) -> None:
        self._check_alive()
        self._center = center
        self._zoom = zoom
        self._apply_view()

    def clear_overlays(self) -> None:
        self._check_alive()
        self._overlays.clear()
        self._clear_layer()

    def add_overlay(self, overlay: Overlay) -> None:
        self._check_alive()
        self._overlays.append(overlay)
        self._draw(overlay)

    def invalidate_size(self) -> None:
        """Recompute layout after the container has been shown or resized."""
        self._check_alive()
        self.layout_fixes += 1
        self._relayout()

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._overlays.clear()
        self._release()

    @abc.abstractmethod
    def _apply_view(self) -> None:
        """Push the current camera to the backend."""

    @abc.abstractmethod
    def _clear_layer(self) -> None:
        """Remove every overlay from the backend layer."""

    @abc.abstractmethod
    def _draw(self, overlay: Overlay) -> None:
        """Draw one overlay on the backend layer."""

    @abc.abstractmethod
    def _relayout(self) -> None:
        """Backend-specific size recalculation."""

    @abc.abstractmethod
    def _release(self) -> None:
        """Free backend resources."""

    @abc.abstractmethod
    def render(self) -> str:
        """Render the surface to a standalone document."""


class FoliumSurface(MapSurface):
    """Leaflet map rendered to HTML through folium."""

    def __init__(
        self,
        container: MapContainer,
        center: GeoPoint,
        zoom: int,
        config: MapConfig | None = None,
    ) -> None:
        super().__init__(container, center, zoom)
        cfg = config or MapConfig()
        self._map: folium.Map | None = folium.Map(
            location=center.as_list(),
            zoom_start=zoom,
            tiles=None,
            width=container.width,
            height=container.height,
            max_zoom=cfg.max_zoom,
        )
        folium.TileLayer(
            tiles=cfg.tiles,
            attr=cfg.attribution,
            name="Dark Matter",
            max_zoom=cfg.max_zoom,
            subdomains="abcd",
            control=False,
        ).add_to(self._map)
        self._layer: folium.FeatureGroup | None = folium.FeatureGroup(
            name="overlays", control=False,
        ).add_to(self._map)

    @property
    def folium_map(self) -> folium.Map:
        self._check_alive()
        assert self._map is not None
        return self._map

    def _apply_view(self) -> None:
        m = self.folium_map
        m.location = self._center.as_list()
        m.options["zoom"] = self._zoom

    def _clear_layer(self) -> None:
        assert self._layer is not None
        _drop_children(self._layer)

    def _draw(self, overlay: Overlay) -> None:
        assert self._layer is not None
        location = overlay.location.as_list()
        if isinstance(overlay, MarkerOverlay):
            fill = _MARKER_FILL[overlay.color.value]
            icon = folium.DivIcon(
                html=(
                    f'<div class="hw-marker hw-{overlay.color.value}" '
                    f'style="background:{fill};border-radius:9999px;padding:4px;'
                    f'display:inline-block">{_PIN_SVG}</div>'
                ),
                class_name="hw-marker-icon",
            )
            folium.Marker(
                location=location,
                icon=icon,
                popup=folium.Popup(overlay.popup),
                tooltip=overlay.label,
            ).add_to(self._layer)
        elif isinstance(overlay, CircleOverlay):
            color = overlay.color.value
            folium.Circle(
                location=location,
                radius=overlay.radius_m,
                color=color,
                fill=True,
                fill_color=color,
                fill_opacity=0.3,
                popup=folium.Popup(overlay.popup),
            ).add_to(self._layer)

    def _relayout(self) -> None:
        m = self.folium_map
        m.get_root().script.add_child(folium.Element(
            f"setTimeout(function() {{ {m.get_name()}.invalidateSize(); }}, 0);"
        ))

    def _release(self) -> None:
        self._layer = None
        self._map = None

    def render(self) -> str:
        return self.folium_map.get_root().render()


SurfaceFactory = Callable[[MapContainer | None, GeoPoint, int], MapSurface]


def folium_surface_factory(config: MapConfig | None = None) -> SurfaceFactory:
    """Build a factory that creates :class:`FoliumSurface` instances."""

    def _create(container: MapContainer | None, center: GeoPoint, zoom: int) -> MapSurface:
        if container is None or not container.element_id:
            raise MissingRenderTargetError("no container to render into")
        surface = FoliumSurface(container, center, zoom, config=config)
        logger.debug("folium_surface_built", element_id=container.element_id)
        return surface

    return _create
