"""Map surfaces, overlay derivation, and the surface controller."""

from herdwatch.mapview.controller import MapSurfaceController
from herdwatch.mapview.exceptions import (
    MapError,
    MissingRenderTargetError,
    SurfaceDisposedError,
)
from herdwatch.mapview.overlays import (
    CircleOverlay,
    MarkerOverlay,
    Overlay,
    OverlayColor,
    build_overlays,
)
from herdwatch.mapview.surface import (
    FoliumSurface,
    MapContainer,
    MapSurface,
    folium_surface_factory,
)

__all__ = [
    "CircleOverlay",
    "FoliumSurface",
    "MapContainer",
    "MapError",
    "MapSurface",
    "MapSurfaceController",
    "MarkerOverlay",
    "MissingRenderTargetError",
    "Overlay",
    "OverlayColor",
    "SurfaceDisposedError",
    "build_overlays",
    "folium_surface_factory",
]
