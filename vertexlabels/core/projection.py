# vertexlabels/core/projection.py
"""
Host map boundary: pixel <-> degree conversion at a zoom level, and the viewport the
labels live in. The host map widget supplies a MapView; StaticMapView serves the CLI and tests.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Protocol

from vertexlabels.core.config import FIT_MARGIN_FRAC, METERS_PER_DEGREE, METERS_PER_PIXEL_AT_EQUATOR
from vertexlabels.core.types import MapPolygon, Vertex, ViewportBounds


def meters_per_pixel(zoom: int, latitude: float = 0.0) -> float:
    """Web Mercator ground resolution at the given latitude (degrees)."""
    return METERS_PER_PIXEL_AT_EQUATOR * math.cos(math.radians(latitude)) / (2 ** zoom)


def pixels_to_local(pixels: float, zoom: int, latitude: float = 0.0) -> float:
    """
    Convert a screen-pixel distance to degrees.
    latitude=0 is the zoom-only approximation used by the solver; selection and name
    placement pass the viewport centre latitude.
    """
    return meters_per_pixel(zoom, latitude) * pixels / METERS_PER_DEGREE


def local_to_pixels(distance: float, zoom: int, latitude: float = 0.0) -> float:
    """Inverse of pixels_to_local."""
    mpp = meters_per_pixel(zoom, latitude)
    if mpp <= 0:
        return 0.0
    return distance * METERS_PER_DEGREE / mpp


class MapView(Protocol):
    """What the core needs from the host map component."""

    def viewport_bounds(self) -> ViewportBounds: ...

    def viewport_contains(self, vertex: Vertex) -> bool: ...

    def current_zoom(self) -> int: ...


@dataclass
class StaticMapView:
    """Fixed viewport and zoom. Mutable so callers can pan/zoom between rebuilds."""
    bounds: ViewportBounds
    zoom: int

    def viewport_bounds(self) -> ViewportBounds:
        return self.bounds

    def viewport_contains(self, vertex: Vertex) -> bool:
        return self.bounds.contains(vertex)

    def current_zoom(self) -> int:
        return self.zoom


def fit_bounds(
    polygons: Iterable[MapPolygon],
    margin_frac: float = FIT_MARGIN_FRAC,
) -> ViewportBounds:
    """Bounds covering all polygon vertices plus a relative margin on each side."""
    lats: list[float] = []
    lons: list[float] = []
    for poly in polygons:
        for v in poly.vertices:
            lats.append(v.lat)
            lons.append(v.lon)
    if not lats:
        raise ValueError("Cannot fit bounds to zero vertices")
    south, north = min(lats), max(lats)
    west, east = min(lons), max(lons)
    d_lat = max((north - south) * margin_frac, 1e-4)
    d_lon = max((east - west) * margin_frac, 1e-4)
    return ViewportBounds(south - d_lat, north + d_lat, west - d_lon, east + d_lon)


def zoom_for_bounds(bounds: ViewportBounds, width_px: int, height_px: int, max_zoom: int = 19) -> int:
    """Largest integer zoom at which bounds fit into a width_px x height_px map."""
    lat = bounds.center.lat
    for zoom in range(max_zoom, -1, -1):
        w = local_to_pixels(bounds.east - bounds.west, zoom, lat)
        h = local_to_pixels(bounds.north - bounds.south, zoom, lat)
        if w <= width_px and h <= height_px:
            return zoom
    return 0
