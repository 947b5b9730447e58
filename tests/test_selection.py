# tests/test_selection.py
"""
Vertex selection: angle filter, minimum spacing with sharper-angle eviction (also across
polygons), viewport filter, initial offset and parity jitter.
Geometry is built in pixels around (0, 0) at zoom 16 so pixel and degree scales agree.
"""

from __future__ import annotations

import math
import random

import pytest

from vertexlabels.core.projection import pixels_to_local
from vertexlabels.core.selection import SelectionBatch, select_labels
from vertexlabels.core.types import LabelKey, LabelSettings, MapPolygon, Vertex, ViewportBounds

ZOOM = 16
U = pixels_to_local(1.0, ZOOM)
BOUNDS = ViewportBounds(-300 * U, 300 * U, -400 * U, 400 * U)


def _px(x: float, y: float) -> Vertex:
    return Vertex(lat=y * U, lon=x * U)


def _polar(origin: tuple[float, float], length: float, angle_deg: float) -> tuple[float, float]:
    a = math.radians(angle_deg)
    return origin[0] + length * math.cos(a), origin[1] + length * math.sin(a)


def _sharp_and_blunt_ring() -> list[Vertex]:
    """B at (0,0) has a 170 deg angle, A 5 px to its right has 40 deg."""
    b = (0.0, 0.0)
    a = (5.0, 0.0)
    p = _polar(b, 200, 170)
    n = _polar(a, 200, 140)
    return [_px(*p), _px(*b), _px(*a), _px(*n)]


def test_collinear_vertex_never_labeled() -> None:
    ring = (_px(-100, -100), _px(0, -100), _px(100, -100), _px(100, 100), _px(-100, 100))
    poly = MapPolygon("sq", ring)
    for min_angle in (0.0, 10.0, 90.0):
        labels = select_labels([poly], BOUNDS, ZOOM, LabelSettings(min_vertex_angle=min_angle))
        assert LabelKey("sq", 1) not in {lab.key for lab in labels}


def test_near_straight_vertex_filtered_by_min_angle() -> None:
    # angle at index 1 is ~174 deg
    ring = (_px(-100, -100), _px(0, -95), _px(100, -100), _px(100, 100), _px(-100, 100))
    poly = MapPolygon("sq", ring)
    keys_loose = {lab.key for lab in select_labels([poly], BOUNDS, ZOOM, LabelSettings(min_vertex_angle=2))}
    keys_strict = {lab.key for lab in select_labels([poly], BOUNDS, ZOOM, LabelSettings(min_vertex_angle=10))}
    assert LabelKey("sq", 1) in keys_loose
    assert LabelKey("sq", 1) not in keys_strict


def test_close_vertices_keep_sharper() -> None:
    poly = MapPolygon("p", tuple(_sharp_and_blunt_ring()))
    settings = LabelSettings(min_vertex_distance=30, min_vertex_angle=5)
    keys = {lab.key for lab in select_labels([poly], BOUNDS, ZOOM, settings)}
    assert LabelKey("p", 2) in keys  # 40 deg, accepted later, evicts the 170 deg vertex
    assert LabelKey("p", 1) not in keys


def test_close_vertices_sharper_first_blocks_blunter() -> None:
    ring = _sharp_and_blunt_ring()
    rotated = ring[2:] + ring[:2]  # A, N, P, B
    poly = MapPolygon("p", tuple(rotated))
    settings = LabelSettings(min_vertex_distance=30, min_vertex_angle=5)
    keys = {lab.key for lab in select_labels([poly], BOUNDS, ZOOM, settings)}
    assert LabelKey("p", 0) in keys
    assert LabelKey("p", 3) not in keys


def test_vertices_compete_across_polygons() -> None:
    blunt = MapPolygon("blunt", (_px(-200, 0), _px(0, 0), _px(-100, -150)))
    sharp = MapPolygon("sharp", (_px(5, 0), _px(200, 30), _px(200, -30)))
    labels = select_labels([blunt, sharp], BOUNDS, ZOOM, LabelSettings(min_vertex_distance=30))
    keys = {lab.key for lab in labels}
    # blunt's (0,0) corner is wider than sharp's (5,0) corner, which is ~17 deg
    assert LabelKey("sharp", 0) in keys
    assert LabelKey("blunt", 1) not in keys


def test_separate_batches_do_not_compete() -> None:
    blunt = MapPolygon("blunt", (_px(-200, 0), _px(0, 0), _px(-100, -150)))
    sharp = MapPolygon("sharp", (_px(5, 0), _px(200, 30), _px(200, -30)))
    settings = LabelSettings(min_vertex_distance=30)
    first = SelectionBatch(settings, BOUNDS, ZOOM)
    first.add_polygon(blunt)
    second = SelectionBatch(settings, BOUNDS, ZOOM)
    second.add_polygon(sharp)
    assert LabelKey("blunt", 1) in first.labels
    assert LabelKey("sharp", 0) in second.labels


def test_offscreen_vertices_skipped() -> None:
    poly = MapPolygon("big", (_px(0, 0), _px(1000, 0), _px(0, 100)))
    keys = {lab.key for lab in select_labels([poly], BOUNDS, ZOOM, LabelSettings())}
    assert LabelKey("big", 1) not in keys
    assert LabelKey("big", 0) in keys


def test_initial_position_outward_with_parity_jitter() -> None:
    ring = (_px(100, 100), _px(-100, 100), _px(-100, -100), _px(100, -100))
    labels = {lab.key: lab for lab in select_labels([MapPolygon("sq", ring)], BOUNDS, ZOOM, LabelSettings())}
    even = labels[LabelKey("sq", 0)]
    odd = labels[LabelKey("sq", 1)]
    diag = 15 / math.sqrt(2)
    assert (even.position.lon - even.anchor.lon) / U == pytest.approx(diag)
    assert (even.position.lat - even.anchor.lat) / U == pytest.approx(diag + 45)
    assert (odd.position.lon - odd.anchor.lon) / U == pytest.approx(-diag)
    assert (odd.position.lat - odd.anchor.lat) / U == pytest.approx(diag - 45)


def test_label_ring_snapshot_and_text() -> None:
    ring = (_px(100, 100), _px(-100, 100), _px(-100, -100))
    labels = select_labels([MapPolygon(7, ring)], BOUNDS, ZOOM, LabelSettings())
    assert labels
    for lab in labels:
        assert lab.ring_snapshot == ring
        assert not lab.manually_positioned
        assert lab.text == f"{lab.anchor.lat:.6f}, {lab.anchor.lon:.6f}"


def test_collinear_geographic_vertex_never_labeled() -> None:
    rng = random.Random(11)
    settings = LabelSettings(min_vertex_angle=0, min_vertex_distance=0)
    for _ in range(200):
        a = Vertex(rng.uniform(40, 50), rng.uniform(5, 15))
        d_lat, d_lon = rng.uniform(-0.01, 0.01), rng.uniform(-0.01, 0.01)
        t = rng.uniform(0.2, 0.8)
        b = Vertex(a.lat + t * d_lat, a.lon + t * d_lon)
        c = Vertex(a.lat + d_lat, a.lon + d_lon)
        off = Vertex(a.lat + d_lon, a.lon - d_lat)
        bounds = ViewportBounds(a.lat - 0.05, a.lat + 0.05, a.lon - 0.05, a.lon + 0.05)
        labels = select_labels([MapPolygon("p", (a, b, c, off))], bounds, 14, settings)
        assert LabelKey("p", 1) not in {lab.key for lab in labels}
