# vertexlabels/core/selection.py
"""
Vertex selection: decide which polygon vertices get labels and where new labels start.
One SelectionBatch is shared across all polygons of a rebuild so nearby vertices of
different polygons also compete; sharper angles win.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from vertexlabels.core.config import MIN_DIST_EPS, STRAIGHT_ANGLE_EPS_DEG, VERTICAL_JITTER_PX
from vertexlabels.core.geometry import distance, ring_centroid, vertex_angle
from vertexlabels.core.projection import pixels_to_local
from vertexlabels.core.types import (
    Label,
    LabelKey,
    LabelSettings,
    MapPolygon,
    Vertex,
    ViewportBounds,
)

logger = logging.getLogger(__name__)


@dataclass
class _Accepted:
    vertex: Vertex
    angle: float
    key: LabelKey


@dataclass
class SelectionBatch:
    """
    Accepted labels of one rebuild, in acceptance order.
    Evicting a vertex removes its label from the batch.
    """
    settings: LabelSettings
    bounds: ViewportBounds
    zoom: int
    labels: dict[LabelKey, Label] = field(default_factory=dict)
    _accepted: list[_Accepted] = field(default_factory=list, init=False, repr=False)

    def _px(self, pixels: float) -> float:
        return pixels_to_local(pixels, self.zoom, self.bounds.center.lat)

    def add_polygon(self, polygon: MapPolygon) -> list[LabelKey]:
        """Run selection for one polygon; returns keys accepted (some may be evicted later)."""
        ring = polygon.vertices
        visible = [v for v in ring if self.bounds.contains(v)]
        if not visible:
            return []
        center = ring_centroid(visible)
        min_dist = self._px(self.settings.min_vertex_distance)
        added: list[LabelKey] = []

        for index, vertex in enumerate(ring):
            if not self.bounds.contains(vertex):
                continue
            angle = vertex_angle(ring, index)
            if angle >= 180.0 - STRAIGHT_ANGLE_EPS_DEG or angle > 180.0 - self.settings.min_vertex_angle:
                continue

            close = next(
                (a for a in self._accepted if distance(a.vertex, vertex) < min_dist),
                None,
            )
            if close is not None:
                if angle < close.angle:
                    self._accepted.remove(close)
                    self.labels.pop(close.key, None)
                    logger.debug("Vertex %s (%.1f deg) evicts %s (%.1f deg)", (polygon.id, index), angle, close.key, close.angle)
                else:
                    continue

            key = LabelKey(polygon.id, index)
            self._accepted.append(_Accepted(vertex, angle, key))
            self.labels[key] = Label(
                key=key,
                anchor=vertex,
                position=self.initial_position(vertex, index, center),
                ring_snapshot=tuple(ring),
            )
            added.append(key)
        return added

    def initial_position(self, vertex: Vertex, index: int, center: Vertex) -> Vertex:
        """Offset outward from the visible-vertex centroid, jittered up/down by index parity."""
        offset = self._px(self.settings.initial_offset)
        jitter = self._px(-VERTICAL_JITTER_PX if index % 2 == 1 else VERTICAL_JITTER_PX)
        dx = vertex.lon - center.lon
        dy = vertex.lat - center.lat
        d = (dx * dx + dy * dy) ** 0.5
        if d > MIN_DIST_EPS:
            return Vertex(vertex.lat + dy / d * offset + jitter, vertex.lon + dx / d * offset)
        return Vertex(vertex.lat + jitter, vertex.lon + offset)


def select_labels(
    polygons: list[MapPolygon],
    bounds: ViewportBounds,
    zoom: int,
    settings: LabelSettings,
) -> list[Label]:
    """Labels for all polygons against one shared accepted list."""
    batch = SelectionBatch(settings, bounds, zoom)
    for polygon in polygons:
        batch.add_polygon(polygon)
    return list(batch.labels.values())
