# vertexlabels/core/solver.py
"""
Force-directed solver step for vertex labels.

Each step accumulates five forces per label (vertex padding, label overlap, anchor
spring, polygon centre, leader line avoidance), integrates with damped Verlet and
applies the anchor-distance and viewport constraints. Force magnitudes are evaluated
in pixels and converted to degrees, so behaviour does not change with zoom.
Manually positioned labels act as obstacles but are never moved.
"""

from __future__ import annotations

import math
from typing import Any

import numpy as np

from vertexlabels.core.config import (
    ALTERNATE_SPRING_FACTOR,
    COINCIDENT_NUDGE_PX,
    EQ_LABEL_REFERENCE,
    FORCE_SCALE,
    LABEL_BOX_BUFFER_PX,
    LEADER_BOX_BUFFER_PX,
    LEADER_PUSH_PX,
    MIN_DIST_EPS,
    OVERLAP_PUSH_FRACTION,
    PENETRATION_SOFTENING_PX,
    SAME_VERTEX_EPS,
    VERTEX_REPULSION_RADIUS_PX,
    VIEWPORT_PADDING_PX,
)
from vertexlabels.core.geometry import (
    box_around,
    boxes_overlap,
    ring_centroid,
    same_vertex,
    segment_intersects_box,
)
from vertexlabels.core.projection import pixels_to_local
from vertexlabels.core.types import Label, LabelSettings, SimulationState, Vertex, ViewportBounds


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


class ForceSolver:
    """One solver per catalog; holds the settings value, never global state."""

    def __init__(self, settings: LabelSettings) -> None:
        self.settings = settings

    # ----- forces -----

    def compute_forces(self, labels: list[Label], zoom: int) -> np.ndarray:
        """
        Return an (N, 2) array of (lon, lat) forces in degrees, one row per label.
        Computed for every label, manual ones included.
        """
        unit = pixels_to_local(1.0, zoom)
        forces = np.zeros((len(labels), 2), dtype=float)
        if not labels or unit <= 0:
            return forces

        self._vertex_padding(labels, forces, unit)
        self._label_overlap(labels, forces, unit)
        self._anchor_spring(labels, forces)
        self._center_repulsion(labels, forces, unit)
        self._leader_avoidance(labels, forces, unit)
        return forces

    def _vertex_padding(self, labels: list[Label], forces: np.ndarray, unit: float) -> None:
        """Short-range repulsion from every vertex of every polygon except the own anchor."""
        rings: dict[Any, tuple[Vertex, ...]] = {}
        for label in labels:
            rings.setdefault(label.polygon_id, label.ring_snapshot)
        vertices = [v for ring in rings.values() for v in ring]

        cutoff = VERTEX_REPULSION_RADIUS_PX * unit
        falloff = self.settings.eq_falloff
        for i, label in enumerate(labels):
            pos = label.position
            for v in vertices:
                if same_vertex(label.anchor, v, SAME_VERTEX_EPS):
                    continue
                dx = pos.lon - v.lon
                dy = pos.lat - v.lat
                d = math.hypot(dx, dy)
                if d >= cutoff or d <= MIN_DIST_EPS:
                    continue
                magnitude = self.settings.eq_vertex / (d / unit) ** falloff * unit
                forces[i, 0] += dx / d * magnitude
                forces[i, 1] += dy / d * magnitude

    def _label_overlap(self, labels: list[Label], forces: np.ndarray, unit: float) -> None:
        """Push overlapping label boxes apart on both axes, plus a radial penetration term."""
        buffer = LABEL_BOX_BUFFER_PX * unit
        multiplier = self.settings.eq_label / EQ_LABEL_REFERENCE
        half = [(lab.size.width / 2 * unit, lab.size.height / 2 * unit) for lab in labels]
        boxes = [box_around(lab.position, w + buffer, h + buffer) for lab, (w, h) in zip(labels, half)]

        for i in range(len(labels)):
            for j in range(i + 1, len(labels)):
                if not boxes_overlap(boxes[i], boxes[j]):
                    continue
                p1 = labels[i].position
                p2 = labels[j].position
                dx = p2.lon - p1.lon
                dy = p2.lat - p1.lat
                center_dist = math.hypot(dx, dy)
                overlap_x = (half[i][0] + half[j][0] + 2 * buffer) - abs(dx)
                overlap_y = (half[i][1] + half[j][1] + 2 * buffer) - abs(dy)

                sx = math.copysign(1.0, dx) if abs(dx) > MIN_DIST_EPS else 1.0
                sy = math.copysign(1.0, dy) if abs(dy) > MIN_DIST_EPS else 1.0
                fx = sx * overlap_x * OVERLAP_PUSH_FRACTION * multiplier
                fy = sy * overlap_y * OVERLAP_PUSH_FRACTION * multiplier

                if center_dist > MIN_DIST_EPS:
                    penetration = self.settings.eq_label / (center_dist / unit + PENETRATION_SOFTENING_PX) * unit
                    fx += dx / center_dist * penetration
                    fy += dy / center_dist * penetration
                else:
                    fx += COINCIDENT_NUDGE_PX * unit
                    fy += COINCIDENT_NUDGE_PX * unit

                forces[i, 0] -= fx
                forces[i, 1] -= fy
                forces[j, 0] += fx
                forces[j, 1] += fy

    def _anchor_spring(self, labels: list[Label], forces: np.ndarray) -> None:
        for i, label in enumerate(labels):
            dx = label.anchor.lon - label.position.lon
            dy = label.anchor.lat - label.position.lat
            if math.hypot(dx, dy) <= MIN_DIST_EPS:
                continue
            k = self.settings.spring_strength
            if self.settings.alternate_spring_boost and label.vertex_index % 2 == 1:
                k *= ALTERNATE_SPRING_FACTOR
            forces[i, 0] += dx * k
            forces[i, 1] += dy * k

    def _center_repulsion(self, labels: list[Label], forces: np.ndarray, unit: float) -> None:
        """Gentle long-range push away from the owning polygon's vertex mean."""
        falloff = self.settings.eq_falloff - 1.0
        centers: dict[Any, Vertex | None] = {}
        for i, label in enumerate(labels):
            if label.polygon_id not in centers:
                centers[label.polygon_id] = ring_centroid(label.ring_snapshot)
            center = centers[label.polygon_id]
            if center is None:
                continue
            dx = label.position.lon - center.lon
            dy = label.position.lat - center.lat
            d = math.hypot(dx, dy)
            if d <= MIN_DIST_EPS:
                continue
            magnitude = self.settings.eq_center / (d / unit) ** falloff * unit
            forces[i, 0] += dx / d * magnitude
            forces[i, 1] += dy / d * magnitude

    def _leader_avoidance(self, labels: list[Label], forces: np.ndarray, unit: float) -> None:
        """Push label i away from the midpoint of any other leader line crossing its box."""
        buffer = LEADER_BOX_BUFFER_PX * unit
        push = LEADER_PUSH_PX * unit
        for i, label in enumerate(labels):
            size = label.size
            box = box_around(label.position, size.width / 2 * unit + buffer, size.height / 2 * unit + buffer)
            for j, other in enumerate(labels):
                if i == j:
                    continue
                if not segment_intersects_box(other.anchor, other.position, box):
                    continue
                mid_lon = (other.anchor.lon + other.position.lon) / 2
                mid_lat = (other.anchor.lat + other.position.lat) / 2
                dx = label.position.lon - mid_lon
                dy = label.position.lat - mid_lat
                d = math.hypot(dx, dy)
                if d > MIN_DIST_EPS:
                    forces[i, 0] += dx / d * push
                    forces[i, 1] += dy / d * push

    # ----- integration -----

    def step(
        self,
        labels: list[Label],
        state: SimulationState,
        bounds: ViewportBounds,
        zoom: int,
    ) -> float:
        """
        Advance all non-manual labels by one step. Returns the step's kinetic energy:
        sum of squared implicit velocities ((current - previous) * damping) in pixels^2.
        """
        forces = self.compute_forces(labels, zoom)
        unit = pixels_to_local(1.0, zoom)
        if unit <= 0:
            return 0.0
        max_dist = self.settings.max_label_distance * unit
        damping = self.settings.damping
        energy = 0.0

        for i, label in enumerate(labels):
            if label.manually_positioned:
                continue
            cur = label.position
            prev = state.previous_position_by_label.get(label.key, cur)
            vx = (cur.lon - prev.lon) * damping
            vy = (cur.lat - prev.lat) * damping
            energy += (vx / unit) ** 2 + (vy / unit) ** 2
            new_lon = cur.lon + vx + forces[i, 0] * FORCE_SCALE
            new_lat = cur.lat + vy + forces[i, 1] * FORCE_SCALE
            clamped = False

            ax = new_lon - label.anchor.lon
            ay = new_lat - label.anchor.lat
            anchor_dist = math.hypot(ax, ay)
            if anchor_dist > max_dist:
                scale = max_dist / anchor_dist
                new_lon = label.anchor.lon + ax * scale
                new_lat = label.anchor.lat + ay * scale
                clamped = True

            size = label.size
            pad_w = (size.width / 2 + VIEWPORT_PADDING_PX) * unit
            pad_h = (size.height / 2 + VIEWPORT_PADDING_PX) * unit
            lon = _clamp(new_lon, bounds.west + pad_w, bounds.east - pad_w)
            lat = _clamp(new_lat, bounds.south + pad_h, bounds.north - pad_h)
            if lon != new_lon or lat != new_lat:
                clamped = True
            new_lon, new_lat = lon, lat

            if not (math.isfinite(new_lon) and math.isfinite(new_lat)):
                new_lon, new_lat = cur.lon, cur.lat

            moved = Vertex(float(new_lat), float(new_lon))

            # a clamped label restarts from rest so it does not bounce off the constraint
            state.previous_position_by_label[label.key] = moved if clamped else cur
            state.velocity_by_label[label.key] = (float(new_lon - cur.lon), float(new_lat - cur.lat))
            label.position = moved
        return float(energy)
