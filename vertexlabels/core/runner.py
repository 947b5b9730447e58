# vertexlabels/core/runner.py
"""
CLI entrypoint: load polygons, fit or set the viewport, solve vertex labels synchronously,
place polygon names, write layout.json / run_metadata.json and render layout.png / debug.png.
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

from vertexlabels.core.config import (
    DEFAULT_AREA_UNIT,
    DEFAULT_POLYGONS_PATH,
    RENDER_HEIGHT_PX,
    RENDER_WIDTH_PX,
    SHOW_DEBUG_FIELDS,
)
from vertexlabels.core.catalog import LabelCatalog
from vertexlabels.core.debug_fields import build_debug_fields
from vertexlabels.core.io import load_polygons
from vertexlabels.core.projection import StaticMapView, fit_bounds, zoom_for_bounds
from vertexlabels.core.render import render_layout
from vertexlabels.core.reporting import (
    ensure_report_dir,
    layout_to_dict,
    write_layout_json,
    write_run_metadata_json,
)
from vertexlabels.core.types import ViewportBounds

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Force-directed vertex label placement.")
    p.add_argument("--polygons", type=str, default=DEFAULT_POLYGONS_PATH, help="Polygons JSON path (repo-relative)")
    p.add_argument("--run-name", type=str, default="run", dest="run_name", help="Reports subdir name")
    p.add_argument("--output-dir", type=str, default="reports", dest="output_dir", help="Output directory (repo-relative)")
    p.add_argument("--repo-root", type=str, default=None, dest="repo_root", help="Repo root (default: cwd)")
    p.add_argument("--bounds", type=str, default=None, help="Viewport 'south,north,west,east' (default: fit polygons)")
    p.add_argument("--zoom", type=int, default=None, help="Zoom level (default: largest that fits the viewport)")
    p.add_argument("--iterations", type=int, default=None, help="Iteration budget")
    p.add_argument("--min-vertex-distance", type=float, default=None, dest="min_vertex_distance", help="px")
    p.add_argument("--max-label-distance", type=float, default=None, dest="max_label_distance", help="px")
    p.add_argument("--min-vertex-angle", type=float, default=None, dest="min_vertex_angle", help="degrees")
    p.add_argument("--hide-labels", action="store_true", dest="hide_labels", help="Only place polygon names")
    p.add_argument("--show-area", action="store_true", dest="show_area", help="Append polygon area to names")
    p.add_argument("--area-unit", type=str, default=DEFAULT_AREA_UNIT, dest="area_unit", help="sqm, sqkm, sqmi, sqft, acres, hectares")
    p.add_argument("--debug", action="store_true", default=SHOW_DEBUG_FIELDS, help="Also write debug.png with field overlay")
    return p.parse_args(argv)


def parse_bounds(s: str) -> ViewportBounds:
    """Parse 'south,north,west,east'."""
    parts = [float(x) for x in s.split(",")]
    if len(parts) != 4:
        raise ValueError(f"Bounds need 4 values 'south,north,west,east', got {s!r}")
    return ViewportBounds(*parts)


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO))
    args = _parse_args(argv)
    repo_root = Path(args.repo_root).resolve() if args.repo_root else Path.cwd().resolve()

    polygons = load_polygons(args.polygons, repo_root=repo_root)
    bounds = parse_bounds(args.bounds) if args.bounds else fit_bounds(polygons)
    zoom = args.zoom if args.zoom is not None else zoom_for_bounds(bounds, RENDER_WIDTH_PX, RENDER_HEIGHT_PX)
    view = StaticMapView(bounds, zoom)

    catalog = LabelCatalog(view)
    overrides = {
        k: v for k, v in {
            "iterations": args.iterations,
            "min_vertex_distance": args.min_vertex_distance,
            "max_label_distance": args.max_label_distance,
            "min_vertex_angle": args.min_vertex_angle,
        }.items() if v is not None
    }
    if overrides:
        catalog.update_settings(overrides)
    catalog.show_labels = not args.hide_labels
    catalog.show_area_on_map = args.show_area
    catalog.area_unit = args.area_unit

    catalog.update_all_labels(polygons)
    ticks = catalog.run_to_completion()
    logger.info("Solved %d labels in %d ticks at zoom %d", len(catalog.labels), ticks, zoom)

    report_dir = ensure_report_dir(repo_root, args.run_name, output_dir=args.output_dir)
    layout = layout_to_dict(
        catalog.labels, catalog.name_markers, bounds, zoom,
        state=catalog.scheduler.state, settings=catalog.settings,
    )
    layout_path = write_layout_json(report_dir, layout)
    meta_path = write_run_metadata_json(report_dir, args.run_name, args.polygons, catalog.settings)

    image_path = report_dir / "layout.png"
    render_layout(polygons, catalog.labels, catalog.name_markers, bounds, image_path, zoom=zoom)
    outputs = [layout_path, meta_path, image_path]
    if args.debug:
        debug_path = report_dir / "debug.png"
        fields = build_debug_fields(catalog.labels, zoom)
        render_layout(polygons, catalog.labels, catalog.name_markers, bounds, debug_path, zoom=zoom, debug_fields=fields)
        outputs.append(debug_path)

    for p in outputs:
        print(p)


if __name__ == "__main__":
    main()
