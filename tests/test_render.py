# tests/test_render.py
"""
Smoke test: render a solved layout (with and without the debug overlay) to PNG.
"""

from __future__ import annotations

import struct
from pathlib import Path

import pytest

from vertexlabels.core.catalog import LabelCatalog
from vertexlabels.core.debug_fields import build_debug_fields
from vertexlabels.core.projection import StaticMapView, pixels_to_local
from vertexlabels.core.render import render_layout
from vertexlabels.core.types import MapPolygon, Vertex, ViewportBounds

ZOOM = 16
U = pixels_to_local(1.0, ZOOM)
BOUNDS = ViewportBounds(-300 * U, 300 * U, -400 * U, 400 * U)


def _px(x: float, y: float) -> Vertex:
    return Vertex(lat=y * U, lon=x * U)


def test_render_layout_writes_png(tmp_path: Path) -> None:
    square = MapPolygon("sq", (_px(100, 100), _px(-100, 100), _px(-100, -100), _px(100, -100)), name="Square")
    catalog = LabelCatalog(StaticMapView(BOUNDS, ZOOM))
    catalog.update_all_labels([square])
    catalog.run_to_completion()

    plain = tmp_path / "layout.png"
    render_layout([square], catalog.labels, catalog.name_markers, BOUNDS, plain, zoom=ZOOM)
    debug = tmp_path / "debug.png"
    fields = build_debug_fields(catalog.labels, ZOOM)
    render_layout([square], catalog.labels, catalog.name_markers, BOUNDS, debug, zoom=ZOOM, debug_fields=fields)

    for path in (plain, debug):
        assert path.exists()
        assert path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_render_size_matches_requested_pixels(tmp_path: Path) -> None:
    square = MapPolygon("sq", (_px(100, 100), _px(-100, 100), _px(-100, -100), _px(100, -100)))
    out = tmp_path / "small.png"
    render_layout([square], [], [], BOUNDS, out, zoom=ZOOM, width_px=300, height_px=200)
    width, height = struct.unpack(">II", out.read_bytes()[16:24])
    assert (width, height) == (300, 200)


def test_render_has_no_scale_option(tmp_path: Path) -> None:
    with pytest.raises(TypeError):
        render_layout([], [], [], BOUNDS, tmp_path / "x.png", scale=2)
