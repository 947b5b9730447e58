# tests/test_reporting.py
"""
Validate layout.json / run_metadata.json shape after a solved run. Deterministic.
"""

from __future__ import annotations

import json
from pathlib import Path

from vertexlabels.core.catalog import LabelCatalog
from vertexlabels.core.projection import StaticMapView, pixels_to_local
from vertexlabels.core.reporting import (
    SCHEMA_VERSION,
    count_close_pairs,
    ensure_report_dir,
    layout_to_dict,
    write_layout_json,
    write_run_metadata_json,
)
from vertexlabels.core.types import Label, LabelKey, MapPolygon, Vertex, ViewportBounds

ZOOM = 16
U = pixels_to_local(1.0, ZOOM)
BOUNDS = ViewportBounds(-300 * U, 300 * U, -400 * U, 400 * U)


def _px(x: float, y: float) -> Vertex:
    return Vertex(lat=y * U, lon=x * U)


def _solved_catalog() -> LabelCatalog:
    square = MapPolygon("sq", (_px(100, 100), _px(-100, 100), _px(-100, -100), _px(100, -100)), name="Square")
    catalog = LabelCatalog(StaticMapView(BOUNDS, ZOOM))
    catalog.update_all_labels([square])
    catalog.run_to_completion()
    return catalog


def test_layout_dict_shape() -> None:
    catalog = _solved_catalog()
    layout = layout_to_dict(
        catalog.labels, catalog.name_markers, BOUNDS, ZOOM,
        state=catalog.scheduler.state, settings=catalog.settings,
    )
    assert layout["schema_version"] == SCHEMA_VERSION
    assert set(layout) == {"schema_version", "viewport", "labels", "names", "summary"}
    assert layout["viewport"]["zoom"] == ZOOM
    assert len(layout["labels"]) == 4
    first = layout["labels"][0]
    for key in ("polygon_id", "vertex_index", "text", "anchor", "position", "size_px", "leader_length_px", "manually_positioned"):
        assert key in first
    assert first["leader_length_px"] <= catalog.settings.max_label_distance + 1e-6
    summary = layout["summary"]
    assert summary["n_labels"] == 4
    assert summary["n_names"] == 1
    assert summary["iterations"] > 0
    assert "n_close_pairs" in summary
    assert type(summary["converged"]) is bool
    assert type(summary["final_energy_px2"]) is float
    json.dumps(layout)


def test_count_close_pairs() -> None:
    anchor = _px(0, 0)
    labels = [
        Label(LabelKey(1, i), anchor, _px(x, 0), (anchor,))
        for i, x in enumerate((0, 10, 100))
    ]
    assert count_close_pairs(labels, 40, ZOOM) == 1
    assert count_close_pairs(labels, 200, ZOOM) == 3


def test_write_reports(tmp_path: Path) -> None:
    catalog = _solved_catalog()
    report_dir = ensure_report_dir(tmp_path, "unit", output_dir="reports")
    assert report_dir == (tmp_path / "reports" / "unit").resolve()
    layout_path = write_layout_json(report_dir, layout_to_dict(
        catalog.labels, catalog.name_markers, BOUNDS, ZOOM,
        state=catalog.scheduler.state, settings=catalog.settings,
    ))
    meta_path = write_run_metadata_json(report_dir, "unit", "data/x.json", catalog.settings)
    layout = json.loads(layout_path.read_text(encoding="utf-8"))
    meta = json.loads(meta_path.read_text(encoding="utf-8"))
    assert layout["summary"]["n_labels"] == 4
    assert isinstance(layout["summary"]["converged"], bool)
    assert isinstance(layout["summary"]["cycle_detected"], bool)
    assert meta["run_name"] == "unit"
    assert meta["settings"]["iterations"] == catalog.settings.iterations
    assert "timestamp_utc" in meta
