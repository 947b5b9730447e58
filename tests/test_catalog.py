# tests/test_catalog.py
"""
Label catalog: rebuilds, per-polygon set/remove, manual positions surviving rebuilds,
drag hooks, settings, display toggles and what reaches the render sink.
"""

from __future__ import annotations

import pytest

from vertexlabels.core.catalog import LabelCatalog
from vertexlabels.core.projection import StaticMapView, pixels_to_local
from vertexlabels.core.sink import MemorySink
from vertexlabels.core.types import LabelKey, LabelSettings, MapPolygon, Vertex, ViewportBounds

ZOOM = 16
U = pixels_to_local(1.0, ZOOM)
BOUNDS = ViewportBounds(-300 * U, 300 * U, -400 * U, 400 * U)


def _px(x: float, y: float) -> Vertex:
    return Vertex(lat=y * U, lon=x * U)


SQUARE = (_px(100, 100), _px(-100, 100), _px(-100, -100), _px(100, -100))
FIELD = MapPolygon("field", SQUARE, color="#e6194b", name="Field")


def _catalog() -> tuple[LabelCatalog, MemorySink]:
    sink = MemorySink()
    return LabelCatalog(StaticMapView(BOUNDS, ZOOM), sink=sink), sink


def test_rebuild_labels_every_corner_and_places_name() -> None:
    catalog, sink = _catalog()
    catalog.update_all_labels([FIELD])
    assert catalog.scheduler.running
    assert {lab.key for lab in catalog.labels} == {LabelKey("field", i) for i in range(4)}
    catalog.run_to_completion()
    assert not catalog.scheduler.running
    assert set(sink.labels) == {lab.key for lab in catalog.labels}
    assert set(sink.leader_lines) == set(sink.labels)
    assert sink.name_markers["field"].text == "Field"
    assert [m.polygon_id for m in catalog.name_markers] == ["field"]


def test_dragged_label_survives_rebuild() -> None:
    catalog, sink = _catalog()
    catalog.update_all_labels([FIELD])
    catalog.run_to_completion()
    key = LabelKey("field", 0)
    target = _px(160, 150)

    catalog.begin_drag(key)
    catalog.drag_to(key, target)
    catalog.end_drag(key)
    assert catalog.get(key).manually_positioned
    assert sink.leader_lines[key] == (SQUARE[0], target)

    catalog.rebuild_all([FIELD])
    label = catalog.get(key)
    assert label.manually_positioned
    assert label.position == target
    catalog.run_to_completion()
    assert catalog.get(key).position == target


def test_begin_drag_stops_simulation() -> None:
    catalog, _ = _catalog()
    catalog.update_all_labels([FIELD])
    assert catalog.scheduler.running
    catalog.begin_drag(LabelKey("field", 1))
    assert not catalog.scheduler.running


def test_set_labels_replaces_one_polygon() -> None:
    catalog, _ = _catalog()
    catalog.update_all_labels([FIELD])
    keys = catalog.set_labels("field", SQUARE[:3])
    assert sorted(keys) == [LabelKey("field", i) for i in range(3)]
    assert {lab.key for lab in catalog.labels} == set(keys)
    catalog.run_to_completion()
    # name and colour carry over when not given
    assert catalog.name_markers[0].text == "Field"
    assert catalog.name_markers[0].color == "#e6194b"


def test_set_labels_small_ring_gets_nothing() -> None:
    catalog, _ = _catalog()
    assert catalog.set_labels("line", [_px(0, 0), _px(50, 0)]) == []
    assert catalog.labels == []
    assert not catalog.scheduler.running


def test_remove_last_polygon_stops_simulation() -> None:
    catalog, sink = _catalog()
    catalog.set_labels("field", SQUARE)
    assert catalog.scheduler.running
    catalog.remove_labels("field")
    assert catalog.labels == []
    assert not catalog.scheduler.running
    assert sink.labels == {}
    assert sink.leader_lines == {}


def test_clear_drops_everything() -> None:
    catalog, sink = _catalog()
    catalog.update_all_labels([FIELD])
    catalog.run_to_completion()
    catalog.clear()
    assert catalog.labels == []
    assert catalog.name_markers == []
    assert sink.labels == {} and sink.name_markers == {}
    assert not catalog.scheduler.running


def test_unknown_label_raises_key_error() -> None:
    catalog, _ = _catalog()
    with pytest.raises(KeyError, match="unknown_label"):
        catalog.mark_manual(LabelKey("nope", 0))


def test_update_settings_merges_and_validates() -> None:
    catalog, _ = _catalog()
    updated = catalog.update_settings({"iterations": "50", "damping": 0.5})
    assert updated.iterations == 50
    assert updated.damping == 0.5
    assert updated.spring_strength == LabelSettings().spring_strength
    with pytest.raises(ValueError, match="unknown_setting"):
        catalog.update_settings({"bogus": 1})
    with pytest.raises(ValueError, match="invalid_setting"):
        catalog.update_settings({"damping": "fast"})
    assert catalog.settings.iterations == 50


def test_reset_settings_restores_defaults() -> None:
    catalog, _ = _catalog()
    catalog.update_all_labels([FIELD])
    catalog.update_settings({"iterations": 5, "min_vertex_angle": 95})
    settings = catalog.reset_settings()
    assert settings == LabelSettings()
    assert len(catalog.labels) == 4


def test_hidden_labels_still_place_names() -> None:
    catalog, sink = _catalog()
    catalog.update_all_labels([FIELD])
    catalog.set_show_labels(False)
    assert catalog.labels == []
    assert sink.labels == {}
    assert not catalog.scheduler.running
    assert "field" in sink.name_markers


def test_area_on_map_appends_to_name() -> None:
    catalog, sink = _catalog()
    catalog.update_all_labels([FIELD])
    catalog.set_show_area_on_map(True, "hectares")
    catalog.run_to_completion()
    text = sink.name_markers["field"].text
    assert text.startswith("Field\n")
    assert text.endswith(" ha")


def test_debug_fields_toggle() -> None:
    catalog, sink = _catalog()
    catalog.update_all_labels([FIELD])
    catalog.run_to_completion()
    catalog.toggle_debug_fields(True)
    kinds = {f.kind for f in sink.debug_fields}
    assert kinds == {"vertex", "label_box", "label_core", "center", "center_dot"}
    catalog.toggle_debug_fields(False)
    assert sink.debug_fields == []


def test_positions_expose_current_layout() -> None:
    catalog, _ = _catalog()
    catalog.update_all_labels([FIELD])
    catalog.run_to_completion()
    positions = catalog.positions()
    assert set(positions) == {lab.key for lab in catalog.labels}
    assert all(positions[lab.key] == lab.position for lab in catalog.labels)
