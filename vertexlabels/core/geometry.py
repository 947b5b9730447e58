# vertexlabels/core/geometry.py
"""
Geometry helpers: vertex interior angle, segment/box intersection (Liang-Barsky),
box overlap, ring centroid, label boxes. Pure functions on degree coordinates.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from vertexlabels.core.types import Box, Vertex


def vertex_angle(ring: Sequence[Vertex], index: int) -> float:
    """
    Interior angle (degrees, 0..180) at ring[index] between its ring neighbours.
    Zero-length adjacent edges return 180 (treated as a straight line).
    """
    n = len(ring)
    prev = ring[(index - 1) % n]
    curr = ring[index]
    nxt = ring[(index + 1) % n]

    v1x = prev.lon - curr.lon
    v1y = prev.lat - curr.lat
    v2x = nxt.lon - curr.lon
    v2y = nxt.lat - curr.lat

    if math.hypot(v1x, v1y) == 0 or math.hypot(v2x, v2y) == 0:
        return 180.0

    # atan2 of cross and dot; acos loses ~1e-6 deg near straight angles
    cross = v1x * v2y - v1y * v2x
    dot = v1x * v2x + v1y * v2y
    return math.degrees(math.atan2(abs(cross), dot))


def point_in_box(x: float, y: float, box: Box) -> bool:
    return box.left <= x <= box.right and box.bottom <= y <= box.top


def segment_intersects_box(p1: Vertex, p2: Vertex, box: Box) -> bool:
    """
    True if segment p1-p2 touches box. Liang-Barsky clipping with a quick reject
    and an endpoint-inside shortcut; vertical/horizontal segments use the slab test.
    """
    x1, y1 = p1.lon, p1.lat
    x2, y2 = p2.lon, p2.lat

    if (x1 < box.left and x2 < box.left) or (x1 > box.right and x2 > box.right):
        return False
    if (y1 < box.bottom and y2 < box.bottom) or (y1 > box.top and y2 > box.top):
        return False

    if point_in_box(x1, y1, box) or point_in_box(x2, y2, box):
        return True

    dx = x2 - x1
    dy = y2 - y1
    t0, t1 = 0.0, 1.0
    # (p, q) per edge: left, right, bottom, top
    for p, q in (
        (-dx, x1 - box.left),
        (dx, box.right - x1),
        (-dy, y1 - box.bottom),
        (dy, box.top - y1),
    ):
        if p == 0:
            if q < 0:
                return False
            continue
        t = q / p
        if p < 0:
            t0 = max(t0, t)
        else:
            t1 = min(t1, t)
    return t0 <= t1


def boxes_overlap(a: Box, b: Box) -> bool:
    """AABB separating-axis test; touching edges count as overlap."""
    return not (a.right < b.left or a.left > b.right or a.top < b.bottom or a.bottom > b.top)


def box_around(center: Vertex, half_width: float, half_height: float) -> Box:
    return Box(
        left=center.lon - half_width,
        right=center.lon + half_width,
        bottom=center.lat - half_height,
        top=center.lat + half_height,
    )


def distance(a: Vertex, b: Vertex) -> float:
    return math.hypot(a.lon - b.lon, a.lat - b.lat)


def same_vertex(a: Vertex, b: Vertex, eps: float) -> bool:
    return abs(a.lat - b.lat) < eps and abs(a.lon - b.lon) < eps


def ring_centroid(ring: Sequence[Vertex]) -> Vertex | None:
    """Mean of ring vertices (not the area centroid). None for an empty ring."""
    if not ring:
        return None
    xy = np.array([(v.lat, v.lon) for v in ring], dtype=float)
    lat, lon = np.mean(xy, axis=0)
    return Vertex(float(lat), float(lon))
