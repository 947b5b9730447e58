# vertexlabels/core/types.py
"""
Dataclasses for vertices, polygons, labels, solver settings and simulation state.
Coordinates are degrees; x = lon, y = lat. Sizes are screen pixels.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, NamedTuple

from vertexlabels.core import error_codes
from vertexlabels.core.config import (
    ALTERNATE_SPRING_BOOST,
    CHAR_WIDTH_PX,
    COORD_DECIMALS,
    DAMPING,
    EQ_CENTER,
    EQ_FALLOFF,
    EQ_LABEL,
    EQ_VERTEX,
    INITIAL_OFFSET_PX,
    ITERATIONS,
    LABEL_HEIGHT_PX,
    LABEL_TEXT_PADDING_PX,
    MAX_LABEL_DISTANCE_PX,
    MIN_LABEL_SPACING_PX,
    MIN_VERTEX_ANGLE_DEG,
    MIN_VERTEX_DISTANCE_PX,
    SPRING_STRENGTH,
)


@dataclass(frozen=True)
class Vertex:
    """A point in geographic coordinates (degrees)."""
    lat: float
    lon: float


class LabelKey(NamedTuple):
    """Stable label identity: owning polygon and vertex index in its ring."""
    polygon_id: Any
    vertex_index: int


@dataclass(frozen=True)
class MapPolygon:
    """Polygon owned by the host application. Ring is open (first != last)."""
    id: Any
    vertices: tuple[Vertex, ...]
    color: str = "#3388ff"
    name: str | None = None


@dataclass(frozen=True)
class Box:
    """Axis-aligned box in coordinate space (left/right = lon, bottom/top = lat)."""
    left: float
    right: float
    bottom: float
    top: float


@dataclass(frozen=True)
class ViewportBounds:
    """Visible map extent in degrees."""
    south: float
    north: float
    west: float
    east: float

    def contains(self, vertex: Vertex) -> bool:
        return self.south <= vertex.lat <= self.north and self.west <= vertex.lon <= self.east

    @property
    def center(self) -> Vertex:
        return Vertex((self.south + self.north) / 2.0, (self.west + self.east) / 2.0)


@dataclass(frozen=True)
class LabelSize:
    width: float
    height: float


def label_text(anchor: Vertex) -> str:
    """Decimal-degree text for a vertex: 'lat, lon' with fixed precision."""
    return f"{anchor.lat:.{COORD_DECIMALS}f}, {anchor.lon:.{COORD_DECIMALS}f}"


def estimate_label_width(text: str) -> float:
    """Approximate rendered width (px) for a small monospace font."""
    return len(text) * CHAR_WIDTH_PX + LABEL_TEXT_PADDING_PX


@dataclass
class Label:
    """
    One vertex label. text and size derive from anchor; position is the only
    value the solver mutates, and never once manually_positioned is set.
    """
    key: LabelKey
    anchor: Vertex
    position: Vertex
    ring_snapshot: tuple[Vertex, ...]
    manually_positioned: bool = False

    @property
    def polygon_id(self) -> Any:
        return self.key.polygon_id

    @property
    def vertex_index(self) -> int:
        return self.key.vertex_index

    @property
    def text(self) -> str:
        return label_text(self.anchor)

    @property
    def size(self) -> LabelSize:
        return LabelSize(estimate_label_width(self.text), LABEL_HEIGHT_PX)


@dataclass(frozen=True)
class NameMarker:
    """Polygon name marker emitted by name placement."""
    polygon_id: Any
    position: Vertex
    text: str
    color: str


@dataclass
class SimulationState:
    """Per-run tracking owned by the scheduler. Reset on every start."""
    running: bool = False
    iteration_count: int = 0
    tick_count: int = 0
    velocity_by_label: dict[LabelKey, tuple[float, float]] = field(default_factory=dict)
    previous_position_by_label: dict[LabelKey, Vertex] = field(default_factory=dict)
    previous_energy: float | None = None
    stable_step_count: int = 0
    last_energy: float = 0.0
    converged: bool = False
    energy_history: list[float] = field(default_factory=list)
    cycle_tick_count: int = 0
    cycle_detected: bool = False


_TRUE_WORDS = frozenset({"true", "1", "yes"})
_FALSE_WORDS = frozenset({"false", "0", "no"})


def _parse_bool(value: Any) -> bool:
    """Accept bools, 0/1 and true/false, 1/0, yes/no strings (any case)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ValueError(f"not a boolean: {value!r}")


def _parse_int(value: Any) -> int:
    """Integral numbers or numeric strings only; 2.7 is rejected, not truncated."""
    if isinstance(value, bool):
        raise ValueError(f"not an integer: {value!r}")
    number = float(value)
    if not number.is_integer():
        raise ValueError(f"not an integer: {value!r}")
    return int(number)


@dataclass(frozen=True)
class LabelSettings:
    """
    Tunable solver parameters. Distances are pixels, angles degrees.
    Defaults come from config; update with with_updates().
    """
    initial_offset: float = INITIAL_OFFSET_PX
    min_vertex_distance: float = MIN_VERTEX_DISTANCE_PX
    spring_strength: float = SPRING_STRENGTH
    min_label_spacing: float = MIN_LABEL_SPACING_PX
    iterations: int = ITERATIONS
    damping: float = DAMPING
    max_label_distance: float = MAX_LABEL_DISTANCE_PX
    min_vertex_angle: float = MIN_VERTEX_ANGLE_DEG
    eq_vertex: float = EQ_VERTEX
    eq_label: float = EQ_LABEL
    eq_center: float = EQ_CENTER
    eq_falloff: float = EQ_FALLOFF
    alternate_spring_boost: bool = ALTERNATE_SPRING_BOOST

    def with_updates(self, partial: dict[str, Any]) -> LabelSettings:
        """
        Merge a partial mapping into a new settings value.
        Raises ValueError for unknown keys or values that cannot be coerced.
        """
        known = {f.name: f for f in dataclasses.fields(self)}
        changes: dict[str, Any] = {}
        for name, value in partial.items():
            if name not in known:
                raise ValueError(f"{error_codes.UNKNOWN_SETTING}: {name!r}")
            current = getattr(self, name)
            try:
                if isinstance(current, bool):
                    changes[name] = _parse_bool(value)
                elif isinstance(current, int):
                    changes[name] = _parse_int(value)
                else:
                    changes[name] = float(value)
            except (TypeError, ValueError, OverflowError) as e:
                raise ValueError(f"{error_codes.INVALID_SETTING}: {name}={value!r}") from e
        return dataclasses.replace(self, **changes)
