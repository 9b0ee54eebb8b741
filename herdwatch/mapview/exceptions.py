"""Exception hierarchy for map surfaces."""

from __future__ import annotations


class MapError(Exception):
    """Base exception for all map surface errors."""


class MissingRenderTargetError(MapError):
    """The container to render into is absent or invalid."""


class SurfaceDisposedError(MapError):
    """Operation attempted on a surface that has already been disposed."""
