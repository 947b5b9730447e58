# vertexlabels/core/catalog.py
"""
Label catalog: the authoritative set of vertex labels, the host-facing entry points
(set/remove/update labels, settings, debug overlay, drag hooks) and the wiring of
selection, solver, scheduler, name placement and the render sink.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from vertexlabels.core import error_codes
from vertexlabels.core.config import DEFAULT_AREA_UNIT, SHOW_DEBUG_FIELDS
from vertexlabels.core.debug_fields import build_debug_fields
from vertexlabels.core.names import place_polygon_names
from vertexlabels.core.projection import MapView
from vertexlabels.core.scheduler import SimulationScheduler
from vertexlabels.core.selection import SelectionBatch
from vertexlabels.core.sink import MemorySink, RenderSink
from vertexlabels.core.solver import ForceSolver
from vertexlabels.core.types import (
    Label,
    LabelKey,
    LabelSettings,
    MapPolygon,
    NameMarker,
    Vertex,
)

logger = logging.getLogger(__name__)


class LabelCatalog:
    """
    One catalog per map. Owns one settings value, one solver and one scheduler.
    All methods are meant to be called from the host's single UI thread.
    """

    def __init__(
        self,
        view: MapView,
        sink: RenderSink | None = None,
        settings: LabelSettings | None = None,
    ) -> None:
        self.view = view
        self.sink: RenderSink = sink if sink is not None else MemorySink()
        self.solver = ForceSolver(settings or LabelSettings())
        self.scheduler = SimulationScheduler(
            self.solver,
            labels_provider=lambda: self.labels,
            view_provider=lambda: (self.view.viewport_bounds(), self.view.current_zoom()),
            render=self.render_labels,
        )
        self.scheduler.on_complete.append(self.render_polygon_names)
        self.scheduler.on_complete.append(self._refresh_debug_fields)

        self._labels: dict[LabelKey, Label] = {}
        self._polygons: dict[Any, MapPolygon] = {}
        self.name_markers: list[NameMarker] = []
        self.show_debug_fields = SHOW_DEBUG_FIELDS
        self.show_labels = True
        self.show_area_on_map = False
        self.area_unit = DEFAULT_AREA_UNIT

    # ----- state -----

    @property
    def settings(self) -> LabelSettings:
        return self.solver.settings

    @property
    def labels(self) -> list[Label]:
        return list(self._labels.values())

    def get(self, key: LabelKey) -> Label:
        try:
            return self._labels[key]
        except KeyError:
            raise KeyError(f"{error_codes.UNKNOWN_LABEL}: {key!r}") from None

    def positions(self) -> dict[LabelKey, Vertex]:
        return {key: label.position for key, label in self._labels.items()}

    # ----- settings and display toggles -----

    def update_settings(self, partial: dict[str, Any]) -> LabelSettings:
        """Merge partial settings. Takes effect on the next step or rebuild."""
        self.solver.settings = self.solver.settings.with_updates(partial)
        return self.solver.settings

    def reset_settings(self) -> LabelSettings:
        """Restore default settings and re-solve the current polygons."""
        self.solver.settings = LabelSettings()
        self.update_all_labels(list(self._polygons.values()))
        return self.solver.settings

    def toggle_debug_fields(self, show: bool) -> None:
        self.show_debug_fields = show
        if show:
            self.render_debug_fields()
        else:
            self.sink.clear_debug_fields()

    def set_show_labels(self, show: bool) -> None:
        self.show_labels = show
        self.update_all_labels(list(self._polygons.values()))

    def set_show_area_on_map(self, show: bool, unit: str | None = None) -> None:
        self.show_area_on_map = show
        if unit is not None:
            self.area_unit = unit
        self.update_all_labels(list(self._polygons.values()))

    # ----- label set -----

    def set_labels(
        self,
        polygon_id: Any,
        vertices: Sequence[Vertex],
        color: str | None = None,
        name: str | None = None,
    ) -> list[LabelKey]:
        """
        Replace the labels of one polygon. Spacing is checked against this polygon only.
        Rings with fewer than 3 vertices get no labels.
        """
        previous = self._polygons.get(polygon_id)
        self.remove_labels(polygon_id)
        if len(vertices) < 3:
            logger.warning("%s: polygon %r has %d vertices", error_codes.RING_TOO_SMALL, polygon_id, len(vertices))
            return []
        polygon = MapPolygon(
            id=polygon_id,
            vertices=tuple(vertices),
            color=color if color is not None else (previous.color if previous else MapPolygon.color),
            name=name if name is not None else (previous.name if previous else None),
        )
        self._polygons[polygon_id] = polygon
        if not self.show_labels:
            return []

        batch = SelectionBatch(self.settings, self.view.viewport_bounds(), self.view.current_zoom())
        batch.add_polygon(polygon)
        self._labels.update(batch.labels)
        self.render_labels()
        if self._labels:
            self.scheduler.start()
        return list(batch.labels)

    def remove_labels(self, polygon_id: Any) -> None:
        """Drop all labels of a polygon; halts the simulation when none remain."""
        for key in [k for k in self._labels if k.polygon_id == polygon_id]:
            del self._labels[key]
            self.sink.remove_label(key)
        self._polygons.pop(polygon_id, None)
        if not self._labels:
            self.scheduler.stop()

    def update_all_labels(self, polygons: Iterable[MapPolygon]) -> None:
        """
        Rebuild every label for the current viewport. Labels the user dragged keep
        their saved position and stay manual when their vertex is still selected.
        """
        polygons = list(polygons)
        saved = {key: lab.position for key, lab in self._labels.items() if lab.manually_positioned}

        self.scheduler.stop()
        for key in list(self._labels):
            self.sink.remove_label(key)
        self._labels.clear()
        self._polygons = {p.id: p for p in polygons}

        if self.show_labels:
            batch = SelectionBatch(self.settings, self.view.viewport_bounds(), self.view.current_zoom())
            for polygon in polygons:
                if len(polygon.vertices) < 3:
                    logger.warning("%s: polygon %r skipped", error_codes.RING_TOO_SMALL, polygon.id)
                    continue
                batch.add_polygon(polygon)
            for key, label in batch.labels.items():
                if key in saved:
                    label.position = saved[key]
                    label.manually_positioned = True
                self._labels[key] = label

        if self._labels:
            logger.debug("Rebuilt %d labels for %d polygons (%d manual)", len(self._labels), len(polygons), len(saved))
            self.render_labels()
            self.scheduler.start()
        else:
            self.render_polygon_names()

    rebuild_all = update_all_labels
    remove_for_polygon = remove_labels

    def clear(self) -> None:
        """Drop labels, name markers and manual history; halt the simulation."""
        self.scheduler.stop()
        for key in list(self._labels):
            self.sink.remove_label(key)
        self._labels.clear()
        self._polygons.clear()
        self.name_markers = []
        self.sink.clear_name_markers()
        self.sink.clear_debug_fields()

    # ----- manual override -----

    def mark_manual(self, key: LabelKey) -> None:
        """Flag a label as user-positioned. Does not move it."""
        self.get(key).manually_positioned = True

    def begin_drag(self, key: LabelKey) -> None:
        """Physics must not fight the user: stop the run before the label moves."""
        self.get(key)
        self.scheduler.stop()

    def drag_to(self, key: LabelKey, position: Vertex) -> None:
        label = self.get(key)
        label.position = position
        self.sink.update_leader_line(key, label.anchor, position)
        self.sink.update_label(label)

    def end_drag(self, key: LabelKey) -> None:
        self.mark_manual(key)

    # ----- simulation -----

    def tick(self) -> bool:
        """Host frame callback entry point."""
        return self.scheduler.tick()

    def run_to_completion(self, max_ticks: int | None = None) -> int:
        return self.scheduler.run_to_completion(max_ticks)

    # ----- rendering -----

    def render_labels(self) -> None:
        for label in self._labels.values():
            self.sink.update_leader_line(label.key, label.anchor, label.position)
            self.sink.update_label(label)

    def render_polygon_names(self) -> None:
        self.sink.clear_name_markers()
        self.name_markers = place_polygon_names(
            self._polygons.values(),
            self.labels,
            self.view.viewport_bounds(),
            self.view.current_zoom(),
            show_area=self.show_area_on_map,
            area_unit=self.area_unit,
        )
        for marker in self.name_markers:
            self.sink.update_name_marker(marker)

    def render_debug_fields(self) -> None:
        self.sink.clear_debug_fields()
        if self.show_debug_fields:
            self.sink.draw_debug_fields(build_debug_fields(self.labels, self.view.current_zoom()))

    def _refresh_debug_fields(self) -> None:
        if self.show_debug_fields:
            self.render_debug_fields()
