# vertexlabels/core/area.py
"""
Polygon area for name labels: spherical-excess shoelace approximation and unit formatting.
"""

from __future__ import annotations

import math
from typing import Sequence

from vertexlabels.core.config import DEFAULT_AREA_UNIT, EARTH_RADIUS_M
from vertexlabels.core.types import Vertex

# unit -> (factor from m^2, suffix)
AREA_UNITS: dict[str, tuple[float, str]] = {
    "sqm": (1.0, "m²"),
    "sqkm": (0.000001, "km²"),
    "sqmi": (3.861e-7, "mi²"),
    "sqft": (10.7639, "ft²"),
    "acres": (0.000247105, "acres"),
    "hectares": (0.0001, "ha"),
}


def polygon_area_m2(ring: Sequence[Vertex]) -> float:
    """Approximate geodesic area (m^2) of a closed ring; 0 for fewer than 3 vertices."""
    n = len(ring)
    if n < 3:
        return 0.0
    total = 0.0
    for i in range(n):
        a = ring[i]
        b = ring[(i + 1) % n]
        lat1 = math.radians(a.lat)
        lat2 = math.radians(b.lat)
        total += (math.radians(b.lon) - math.radians(a.lon)) * (2 + math.sin(lat1) + math.sin(lat2))
    return abs(total * EARTH_RADIUS_M * EARTH_RADIUS_M / 2)


def _trim(value: float, digits: int) -> str:
    s = f"{value:,.{digits}f}"
    if digits > 0:
        s = s.rstrip("0").rstrip(".")
    return s


def format_area(sq_meters: float, unit: str = DEFAULT_AREA_UNIT) -> str:
    """Format in unit (unknown units fall back to acres); fewer decimals for larger values."""
    factor, suffix = AREA_UNITS.get(unit, AREA_UNITS["acres"])
    value = sq_meters * factor
    if value >= 1000:
        return f"{_trim(value, 0)} {suffix}"
    if value >= 10:
        return f"{_trim(value, 1)} {suffix}"
    return f"{_trim(value, 2)} {suffix}"
