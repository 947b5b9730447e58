# vertexlabels/core/io.py
"""
Load polygons from a JSON document. Each polygon has id, optional name/color, and either
'vertices' ([lat, lon] pairs or {lat, lon} objects) or 'wkt' (POLYGON in lon/lat order).
A closing vertex equal to the first is dropped so rings are open.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from shapely import wkt
from shapely.geometry import MultiPolygon, Polygon

from vertexlabels.core import error_codes
from vertexlabels.core.types import MapPolygon, Vertex


def _resolve_path(path: str | Path, repo_root: Path | None) -> Path:
    """Resolve path; if relative, against repo_root (or cwd if repo_root is None)."""
    p = Path(path)
    if not p.is_absolute() and repo_root is not None:
        p = repo_root / p
    return p.resolve()


def _open_ring(vertices: list[Vertex]) -> tuple[Vertex, ...]:
    if len(vertices) > 1 and vertices[0] == vertices[-1]:
        vertices = vertices[:-1]
    return tuple(vertices)


def _parse_vertex(item: Any) -> Vertex:
    if isinstance(item, dict):
        lon = item.get("lon", item.get("lng"))
        return Vertex(float(item["lat"]), float(lon))
    lat, lon = item
    return Vertex(float(lat), float(lon))


def ring_from_wkt(wkt_string: str) -> tuple[Vertex, ...]:
    """Exterior ring of a WKT POLYGON (largest part of a MULTIPOLYGON)."""
    geom = wkt.loads(wkt_string)
    if isinstance(geom, MultiPolygon):
        geom = max(geom.geoms, key=lambda g: g.area)
    if not isinstance(geom, Polygon) or geom.is_empty:
        raise ValueError(f"Expected POLYGON WKT, got {geom.geom_type}")
    return _open_ring([Vertex(float(y), float(x)) for x, y in geom.exterior.coords])


def polygon_from_dict(data: dict[str, Any], index: int = 0) -> MapPolygon:
    if "wkt" in data:
        ring = ring_from_wkt(data["wkt"])
    elif "vertices" in data:
        ring = _open_ring([_parse_vertex(v) for v in data["vertices"]])
    else:
        raise ValueError(f"Polygon {index} has neither 'vertices' nor 'wkt'")
    return MapPolygon(
        id=data.get("id", index),
        vertices=ring,
        color=data.get("color", "#3388ff"),
        name=data.get("name"),
    )


def parse_polygons(document: Any) -> list[MapPolygon]:
    """Accepts {'polygons': [...]} or a bare list of polygon objects."""
    items = document.get("polygons", []) if isinstance(document, dict) else document
    if not items:
        raise ValueError(error_codes.user_message(error_codes.NO_POLYGONS))
    return [polygon_from_dict(item, i) for i, item in enumerate(items)]


def load_polygons(path: str | Path, repo_root: Path | None = None) -> list[MapPolygon]:
    """
    Load polygons from a JSON file.
    Raises FileNotFoundError if path is missing, ValueError if the content is invalid.
    """
    resolved = _resolve_path(path, repo_root)
    if not resolved.exists():
        raise FileNotFoundError(f"Polygon file not found: {resolved}")
    return parse_polygons(json.loads(resolved.read_text(encoding="utf-8")))
