# vertexlabels/core/reporting.py
"""
Create reports/<run_name>/ and write layout.json (label positions, name markers,
run summary) and run_metadata.json (settings snapshot).
"""

from __future__ import annotations

import dataclasses
import json
from datetime import datetime, timezone
from pathlib import Path

from vertexlabels.core.config import REPORTS_DIR
from vertexlabels.core.geometry import distance
from vertexlabels.core.projection import local_to_pixels
from vertexlabels.core.types import Label, LabelSettings, NameMarker, SimulationState, ViewportBounds

SCHEMA_VERSION = "1.0"


def _point(v) -> dict:
    return {"lat": v.lat, "lon": v.lon}


def label_to_dict(label: Label, zoom: int) -> dict:
    size = label.size
    return {
        "polygon_id": label.polygon_id,
        "vertex_index": label.vertex_index,
        "text": label.text,
        "anchor": _point(label.anchor),
        "position": _point(label.position),
        "size_px": {"width": size.width, "height": size.height},
        "leader_length_px": local_to_pixels(distance(label.anchor, label.position), zoom),
        "manually_positioned": label.manually_positioned,
    }


def count_close_pairs(labels: list[Label], min_spacing_px: float, zoom: int) -> int:
    """Label pairs whose centres are closer than min_spacing_px."""
    n = 0
    for i, a in enumerate(labels):
        for b in labels[i + 1:]:
            if local_to_pixels(distance(a.position, b.position), zoom) < min_spacing_px:
                n += 1
    return n


def layout_to_dict(
    labels: list[Label],
    name_markers: list[NameMarker],
    bounds: ViewportBounds,
    zoom: int,
    state: SimulationState | None = None,
    settings: LabelSettings | None = None,
) -> dict:
    """Exact structure for layout.json."""
    summary = {
        "n_labels": len(labels),
        "n_manual": sum(1 for lab in labels if lab.manually_positioned),
        "n_names": len(name_markers),
    }
    if settings is not None:
        summary["n_close_pairs"] = count_close_pairs(labels, settings.min_label_spacing, zoom)
    if state is not None:
        summary.update({
            "iterations": state.iteration_count,
            "ticks": state.tick_count,
            "converged": state.converged,
            "cycle_detected": state.cycle_detected,
            "final_energy_px2": state.last_energy,
        })
    return {
        "schema_version": SCHEMA_VERSION,
        "viewport": {"bounds": dataclasses.asdict(bounds), "zoom": zoom},
        "labels": [label_to_dict(lab, zoom) for lab in labels],
        "names": [
            {"polygon_id": m.polygon_id, "text": m.text, "color": m.color, "position": _point(m.position)}
            for m in name_markers
        ],
        "summary": summary,
    }


def run_metadata_dict(
    run_name: str,
    polygons_path: str,
    settings: LabelSettings,
) -> dict:
    """Timestamp and settings snapshot for run_metadata.json."""
    return {
        "run_name": run_name,
        "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        "polygons_path": polygons_path,
        "settings": dataclasses.asdict(settings),
    }


def ensure_report_dir(
    repo_root: Path,
    run_name: str,
    output_dir: str | None = None,
) -> Path:
    """Create output_dir/<run_name>/ under repo_root; return path. Default output_dir from config."""
    base = output_dir if output_dir is not None else REPORTS_DIR
    out = (repo_root / base).resolve() / run_name
    out.mkdir(parents=True, exist_ok=True)
    return out


def write_layout_json(report_dir: Path, layout: dict) -> Path:
    """Write layout.json to report_dir. Returns path to file."""
    path = report_dir / "layout.json"
    path.write_text(json.dumps(layout, indent=2), encoding="utf-8")
    return path


def write_run_metadata_json(
    report_dir: Path,
    run_name: str,
    polygons_path: str,
    settings: LabelSettings,
) -> Path:
    """Write run_metadata.json to report_dir."""
    path = report_dir / "run_metadata.json"
    data = run_metadata_dict(run_name, polygons_path, settings)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path
