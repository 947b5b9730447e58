# vertexlabels/core/render.py
"""
Matplotlib PNG rendering of a solved layout: layout.png (polygons, two-layer leader
lines, labels, names) and debug.png (same plus the repulsion field overlay).
"""

from __future__ import annotations

import math
import warnings
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
from shapely.geometry import Point, box

from vertexlabels.core.config import (
    LEADER_LINE_COLOR,
    LEADER_LINE_WIDTH,
    LEADER_OUTLINE_COLOR,
    LEADER_OUTLINE_WIDTH,
    RENDER_HEIGHT_PX,
    RENDER_WIDTH_PX,
)
from vertexlabels.core.debug_fields import DebugField
from vertexlabels.core.projection import pixels_to_local
from vertexlabels.core.types import Label, MapPolygon, NameMarker, ViewportBounds

_FIELD_STYLE: dict[str, dict] = {
    "vertex": {"color": "#ff0000", "alpha": 0.15},
    "label_box": {"color": "#0088ff", "alpha": 0.1},
    "label_core": {"color": "#ff00ff", "alpha": 0.2},
    "center": {"color": "#00ff00", "alpha": 0.05},
}


def _new_fig(width_px: int, height_px: int) -> tuple[plt.Figure, plt.Axes]:
    fig = plt.figure(
        figsize=(width_px / 100.0, height_px / 100.0),
        dpi=100,
        constrained_layout=False,
    )
    ax = fig.add_axes([0, 0, 1, 1])  # full-canvas axes
    ax.axis("off")
    return fig, ax


def set_axes_to_viewport(ax: plt.Axes, bounds: ViewportBounds) -> None:
    """Limits from the viewport; aspect corrected for longitude shrink at this latitude."""
    ax.set_xlim(bounds.west, bounds.east)
    ax.set_ylim(bounds.south, bounds.north)
    cos_lat = math.cos(math.radians(bounds.center.lat))
    ax.set_aspect(1.0 / max(cos_lat, 1e-6), adjustable="datalim")
    ax.axis("off")


def _draw_polygons(ax: plt.Axes, polygons: list[MapPolygon]) -> None:
    for poly in polygons:
        if len(poly.vertices) < 3:
            continue
        xy = np.array([(v.lon, v.lat) for v in poly.vertices])
        ax.fill(xy[:, 0], xy[:, 1], facecolor=poly.color, edgecolor=poly.color, linewidth=2, alpha=0.2)


def _draw_labels(ax: plt.Axes, labels: list[Label]) -> None:
    for label in labels:
        xs = [label.anchor.lon, label.position.lon]
        ys = [label.anchor.lat, label.position.lat]
        ax.plot(xs, ys, color=LEADER_OUTLINE_COLOR, linewidth=LEADER_OUTLINE_WIDTH, zorder=3)
        ax.plot(xs, ys, color=LEADER_LINE_COLOR, linewidth=LEADER_LINE_WIDTH, zorder=4)
        ax.text(
            label.position.lon, label.position.lat, label.text,
            fontsize=8, family="monospace",
            ha="center", va="center",
            bbox={"boxstyle": "round", "facecolor": "white", "edgecolor": "#333333", "alpha": 0.9},
            zorder=6 if label.manually_positioned else 5,
        )


def _draw_names(ax: plt.Axes, names: list[NameMarker]) -> None:
    for marker in names:
        ax.text(
            marker.position.lon, marker.position.lat, marker.text,
            fontsize=11, fontweight="bold", color=marker.color,
            ha="center", va="center", zorder=7,
        )


def _draw_debug_fields(ax: plt.Axes, fields: list[DebugField], zoom: int) -> None:
    for f in fields:
        if f.kind == "center_dot":
            ax.scatter([f.center.lon], [f.center.lat], s=16, color="#00ff00", zorder=8)
            continue
        style = _FIELD_STYLE[f.kind]
        if f.box is not None:
            geom = box(f.box.left, f.box.bottom, f.box.right, f.box.top)
        else:
            geom = Point(f.center.lon, f.center.lat).buffer(pixels_to_local(f.radius_px, zoom))
        xy = np.array(geom.exterior.coords)
        ax.fill(xy[:, 0], xy[:, 1], facecolor=style["color"], edgecolor=style["color"],
                linewidth=1, alpha=style["alpha"], zorder=2)


def render_layout(
    polygons: list[MapPolygon],
    labels: list[Label],
    names: list[NameMarker],
    bounds: ViewportBounds,
    output_path: str | Path,
    zoom: int = 0,
    debug_fields: list[DebugField] | None = None,
    width_px: int = RENDER_WIDTH_PX,
    height_px: int = RENDER_HEIGHT_PX,
) -> None:
    """Render the layout; with debug_fields, draw the field overlay under the labels."""
    fig, ax = _new_fig(width_px, height_px)
    _draw_polygons(ax, polygons)
    if debug_fields:
        _draw_debug_fields(ax, debug_fields, zoom)
    _draw_labels(ax, labels)
    _draw_names(ax, names)
    set_axes_to_viewport(ax, bounds)
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", message=".*constrained_layout.*", category=UserWarning)
        fig.savefig(output_path, dpi=100, facecolor="white")
    plt.close(fig)
