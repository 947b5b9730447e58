# vertexlabels/core/config.py
"""
Central configuration for vertex label placement.
All tunable defaults and fixed solver constants live here; no magic numbers in other modules.
Pixel values are screen pixels at the current zoom; the solver converts them to degrees.
"""

from __future__ import annotations
import os

# ----- Paths (repo-relative) -----
DEFAULT_POLYGONS_PATH: str = "data/sample_polygons.json"
REPORTS_DIR: str = "reports"

# ----- Projection (Web Mercator approximation) -----
METERS_PER_PIXEL_AT_EQUATOR: float = 156543.03392
"""Meters per pixel at zoom 0 on the equator."""

METERS_PER_DEGREE: float = 111320.0
"""Meters per degree used for meters -> degrees conversion."""

EARTH_RADIUS_M: float = 6371000.0
"""Earth radius for polygon area approximation."""

# ----- Tunable defaults (LabelSettings) -----
INITIAL_OFFSET_PX: float = 15.0
"""Initial distance of a new label from its vertex, away from the polygon centre."""

MIN_VERTEX_DISTANCE_PX: float = 30.0
"""Minimum distance between labeled vertices; closer vertices compete by angle."""

SPRING_STRENGTH: float = 0.1
"""Anchor spring stiffness. Kept weak so labels can stretch away to resolve collisions."""

MIN_LABEL_SPACING_PX: float = 40.0
"""Label centres closer than this are counted in the layout report; not a solver constraint."""

ITERATIONS: int = 200
"""Iteration budget for one simulation run."""

DAMPING: float = 0.6
"""Fraction of implicit velocity kept per step."""

MAX_LABEL_DISTANCE_PX: float = 80.0
"""Maximum distance between a label and its anchor vertex."""

MIN_VERTEX_ANGLE_DEG: float = 10.0
"""Vertices with angle > 180 - this are near-straight and never labeled."""

EQ_VERTEX: float = 20.0
"""Vertex padding repulsion strength."""

EQ_LABEL: float = 30.0
"""Label-to-label repulsion strength. EQ_LABEL_REFERENCE gives multiplier 1."""

EQ_CENTER: float = 100.0
"""Polygon centre repulsion strength."""

EQ_FALLOFF: float = 3.0
"""Falloff exponent of vertex repulsion; centre repulsion uses EQ_FALLOFF - 1."""

ALTERNATE_SPRING_BOOST: bool = False
"""Double the anchor spring for odd vertex indices."""

# ----- Fixed solver constants -----
EQ_LABEL_REFERENCE: float = 30.0
"""EQ_LABEL value at which the overlap push multiplier is 1."""

VERTEX_REPULSION_RADIUS_PX: float = 15.0
"""Hard cutoff of vertex padding repulsion."""

SAME_VERTEX_EPS: float = 1e-6
"""Coordinates closer than this (degrees) on both axes are the same vertex."""

MIN_DIST_EPS: float = 1e-5
"""Minimum distance (degrees) before any directional normalization."""

LABEL_BOX_BUFFER_PX: float = 5.0
"""Buffer around label boxes for collision tests."""

OVERLAP_PUSH_FRACTION: float = 0.5
"""Share of overlap depth applied as push per axis."""

PENETRATION_SOFTENING_PX: float = 2.0
"""Added to centre distance in the penetration force denominator."""

COINCIDENT_NUDGE_PX: float = 10.0
"""Fixed nudge on both axes for labels with coincident centres."""

LEADER_BOX_BUFFER_PX: float = 2.0
"""Buffer around label boxes for leader line intersection tests."""

LEADER_PUSH_PX: float = 3.0
"""Fixed magnitude of the leader line avoidance push."""

FORCE_SCALE: float = 0.5
"""Attenuation applied to the accumulated force during integration."""

ALTERNATE_SPRING_FACTOR: float = 2.0
"""Spring multiplier for odd vertex indices when ALTERNATE_SPRING_BOOST is on."""

VIEWPORT_PADDING_PX: float = 10.0
"""Padding between a label box and the viewport edge."""

STRAIGHT_ANGLE_EPS_DEG: float = 1e-4
"""Angles within this of 180 are straight and never labeled, whatever min_vertex_angle is."""

# ----- Initial placement -----
VERTICAL_JITTER_PX: float = 45.0
"""Initial vertical offset; +up for even vertex index, -down for odd."""

# ----- Label size -----
CHAR_WIDTH_PX: float = 7.0
LABEL_TEXT_PADDING_PX: float = 16.0
LABEL_HEIGHT_PX: float = 30.0
COORD_DECIMALS: int = 6

# ----- Scheduler -----
STEPS_PER_TICK: int = 5
"""Solver steps per animation tick."""

ENERGY_FLOOR_PX2: float = 0.01
"""Average kinetic energy (px^2) below which the run has converged."""

ENERGY_DELTA_EPS_PX2: float = 1e-4
"""Energy change (px^2) between ticks treated as unchanged."""

STABLE_TICKS: int = 5
"""Consecutive unchanged ticks that end the run."""

CYCLE_MAX_PERIOD: int = 6
"""Longest energy period (ticks) checked when looking for a limit cycle."""

CYCLE_REL_TOL: float = 1e-6
"""Relative tolerance for a tick energy to repeat an earlier tick."""

CYCLE_TICKS: int = 8
"""Consecutive repeating ticks that end a run stuck in a limit cycle."""

# ----- Polygon names -----
NAME_CANDIDATE_OFFSET_PX: float = 40.0
"""Offset of the four cardinal name candidates from the centroid."""

NAME_VIEWPORT_PADDING_PX: float = 20.0
"""Padding used when clamping the centroid into the viewport."""

DEFAULT_AREA_UNIT: str = "acres"

# ----- Debug fields -----
DEBUG_LABEL_CORE_RADIUS_PX: float = 5.0
DEBUG_CENTER_RADIUS_PX: float = 100.0

# ----- Rendering -----
RENDER_WIDTH_PX: int = 800
RENDER_HEIGHT_PX: int = 600
LEADER_OUTLINE_COLOR: str = "#ffffff"
LEADER_OUTLINE_WIDTH: float = 3.0
LEADER_LINE_COLOR: str = "#000000"
LEADER_LINE_WIDTH: float = 1.5
FIT_MARGIN_FRAC: float = 0.15
"""Margin added around polygon bounds when the CLI fits the viewport."""

# ----- Debug flags -----
SHOW_DEBUG_FIELDS: bool = os.environ.get("VERTEXLABELS_DEBUG", "").lower() in ("1", "true", "yes")
"""Show the repulsion field overlay by default. Set env VERTEXLABELS_DEBUG=1 to enable."""
