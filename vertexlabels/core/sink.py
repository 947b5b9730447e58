# vertexlabels/core/sink.py
"""
Render sink interface implemented by the host map, plus an in-memory sink that keeps
the latest state of every marker (used by the CLI and tests).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from vertexlabels.core.debug_fields import DebugField
from vertexlabels.core.types import Label, LabelKey, NameMarker, Vertex


class RenderSink(Protocol):
    """
    Host callbacks. update_* create the object on first call and move it afterwards.
    Leader lines are drawn as two layers: a wide outline under a thin foreground line.
    """

    def update_label(self, label: Label) -> None: ...

    def update_leader_line(self, key: LabelKey, anchor: Vertex, position: Vertex) -> None: ...

    def remove_label(self, key: LabelKey) -> None: ...

    def update_name_marker(self, marker: NameMarker) -> None: ...

    def clear_name_markers(self) -> None: ...

    def draw_debug_fields(self, fields: list[DebugField]) -> None: ...

    def clear_debug_fields(self) -> None: ...


@dataclass
class MemorySink:
    """Latest marker state keyed like the host would key its layers."""
    labels: dict[LabelKey, Vertex] = field(default_factory=dict)
    texts: dict[LabelKey, str] = field(default_factory=dict)
    leader_lines: dict[LabelKey, tuple[Vertex, Vertex]] = field(default_factory=dict)
    name_markers: dict[Any, NameMarker] = field(default_factory=dict)
    debug_fields: list[DebugField] = field(default_factory=list)
    label_updates: int = 0

    def update_label(self, label: Label) -> None:
        self.labels[label.key] = label.position
        self.texts[label.key] = label.text
        self.label_updates += 1

    def update_leader_line(self, key: LabelKey, anchor: Vertex, position: Vertex) -> None:
        self.leader_lines[key] = (anchor, position)

    def remove_label(self, key: LabelKey) -> None:
        self.labels.pop(key, None)
        self.texts.pop(key, None)
        self.leader_lines.pop(key, None)

    def update_name_marker(self, marker: NameMarker) -> None:
        self.name_markers[marker.polygon_id] = marker

    def clear_name_markers(self) -> None:
        self.name_markers.clear()

    def draw_debug_fields(self, fields: list[DebugField]) -> None:
        self.debug_fields = list(fields)

    def clear_debug_fields(self) -> None:
        self.debug_fields = []
