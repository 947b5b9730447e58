# vertexlabels/core/names.py
"""
Polygon name placement: one centroid-anchored name per polygon, moved to whichever of
five candidates (centroid, 40 px N/S/E/W) keeps the most clearance from vertex labels.
"""

from __future__ import annotations

import math
from typing import Iterable

from vertexlabels.core.area import format_area, polygon_area_m2
from vertexlabels.core.config import DEFAULT_AREA_UNIT, NAME_CANDIDATE_OFFSET_PX, NAME_VIEWPORT_PADDING_PX
from vertexlabels.core.geometry import distance, ring_centroid
from vertexlabels.core.projection import pixels_to_local
from vertexlabels.core.types import Label, MapPolygon, NameMarker, Vertex, ViewportBounds


def name_candidates(center: Vertex, bounds: ViewportBounds, zoom: int) -> list[Vertex]:
    """Centroid and cardinal offsets inside the viewport; clamped centroid if none are."""
    off = pixels_to_local(NAME_CANDIDATE_OFFSET_PX, zoom, center.lat)
    candidates = [
        center,
        Vertex(center.lat + off, center.lon),
        Vertex(center.lat - off, center.lon),
        Vertex(center.lat, center.lon + off),
        Vertex(center.lat, center.lon - off),
    ]
    inside = [c for c in candidates if bounds.contains(c)]
    if inside:
        return inside
    pad = pixels_to_local(NAME_VIEWPORT_PADDING_PX, zoom, bounds.center.lat)
    lat = min(max(center.lat, bounds.south + pad), bounds.north - pad)
    lon = min(max(center.lon, bounds.west + pad), bounds.east - pad)
    return [Vertex(lat, lon)]


def clearance(candidate: Vertex, labels: Iterable[Label]) -> float:
    """Minimum distance from candidate to any label position; inf with no labels."""
    return min((distance(candidate, lab.position) for lab in labels), default=math.inf)


def find_name_position(
    polygon: MapPolygon,
    labels: list[Label],
    bounds: ViewportBounds,
    zoom: int,
) -> Vertex | None:
    center = ring_centroid(polygon.vertices)
    if center is None:
        return None
    candidates = name_candidates(center, bounds, zoom)
    # max() keeps the first candidate on ties, so the centroid wins when clearance is equal
    return max(candidates, key=lambda c: clearance(c, labels))


def name_text(polygon: MapPolygon, show_area: bool = False, area_unit: str = DEFAULT_AREA_UNIT) -> str:
    text = polygon.name or ""
    if show_area:
        text = f"{text}\n{format_area(polygon_area_m2(polygon.vertices), area_unit)}"
    return text


def place_polygon_names(
    polygons: Iterable[MapPolygon],
    labels: list[Label],
    bounds: ViewportBounds,
    zoom: int,
    show_area: bool = False,
    area_unit: str = DEFAULT_AREA_UNIT,
) -> list[NameMarker]:
    """One marker per polygon with a name; polygons without a name emit nothing."""
    markers: list[NameMarker] = []
    for polygon in polygons:
        if not polygon.name:
            continue
        position = find_name_position(polygon, labels, bounds, zoom)
        if position is None:
            continue
        markers.append(
            NameMarker(
                polygon_id=polygon.id,
                position=position,
                text=name_text(polygon, show_area, area_unit),
                color=polygon.color,
            )
        )
    return markers
