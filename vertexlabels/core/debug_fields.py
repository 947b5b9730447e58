# vertexlabels/core/debug_fields.py
"""
Diagnostic overlay of repulsion fields: vertex padding circles, label collision boxes
with close-range circles, polygon-centre influence circles. Visual only; the solver
never reads these.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from vertexlabels.core.config import (
    DEBUG_CENTER_RADIUS_PX,
    DEBUG_LABEL_CORE_RADIUS_PX,
    LABEL_BOX_BUFFER_PX,
    VERTEX_REPULSION_RADIUS_PX,
)
from vertexlabels.core.geometry import box_around, ring_centroid
from vertexlabels.core.projection import pixels_to_local
from vertexlabels.core.types import Box, Label, Vertex

FieldKind = Literal["vertex", "label_box", "label_core", "center", "center_dot"]


@dataclass(frozen=True)
class DebugField:
    kind: FieldKind
    center: Vertex
    radius_px: float = 0.0
    box: Box | None = None


def build_debug_fields(labels: list[Label], zoom: int) -> list[DebugField]:
    fields: list[DebugField] = []
    rings: dict[Any, tuple[Vertex, ...]] = {}
    for label in labels:
        rings.setdefault(label.polygon_id, label.ring_snapshot)

    for ring in rings.values():
        for v in ring:
            fields.append(DebugField("vertex", v, VERTEX_REPULSION_RADIUS_PX))

    unit = pixels_to_local(1.0, zoom)
    for label in labels:
        size = label.size
        half_w = (size.width / 2 + LABEL_BOX_BUFFER_PX) * unit
        half_h = (size.height / 2 + LABEL_BOX_BUFFER_PX) * unit
        fields.append(DebugField("label_box", label.position, box=box_around(label.position, half_w, half_h)))
        fields.append(DebugField("label_core", label.position, DEBUG_LABEL_CORE_RADIUS_PX))

    for ring in rings.values():
        center = ring_centroid(ring)
        if center is None:
            continue
        fields.append(DebugField("center", center, DEBUG_CENTER_RADIUS_PX))
        fields.append(DebugField("center_dot", center))
    return fields
