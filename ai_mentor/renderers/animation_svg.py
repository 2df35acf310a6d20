"""Render the current playback frame: a grid of trace nodes, one highlighted.

Layout mirrors the visualizer's animation tab: three columns on a 150px pitch,
rows on a 100px pitch, 100x50 rounded boxes, the active node filled and its
value (if any) printed under the box.
"""
from __future__ import annotations

import json
import math
import xml.etree.ElementTree as ET
from typing import Any, Optional, Sequence

from ai_mentor.models.analysis import AnimationNode, HighlightEvent, PlaybackState

COLUMNS = 3
COLUMN_PITCH = 150
ROW_PITCH = 100
ORIGIN = 50
BOX_WIDTH = 100
BOX_HEIGHT = 50

ACTIVE_FILL = "#4f46e5"
ACTIVE_STROKE = "#ffffff"
IDLE_FILL = "#1e293b"
IDLE_STROKE = "#475569"
VALUE_FILL = "#10b981"


def node_position(index: int) -> tuple[int, int]:
    """Center of the ``index``-th node box."""
    return ORIGIN + (index % COLUMNS) * COLUMN_PITCH, ORIGIN + (index // COLUMNS) * ROW_PITCH


def format_value(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


def render_frame_svg(nodes: Sequence[AnimationNode], event: Optional[HighlightEvent]) -> str:
    rows = max(1, math.ceil(len(nodes) / COLUMNS))
    height = max(300, ORIGIN + rows * ROW_PITCH)
    svg = ET.Element("svg", {
        "xmlns": "http://www.w3.org/2000/svg",
        "width": "100%",
        "height": "100%",
        "viewBox": f"0 0 400 {height}",
    })
    active_id = event.node_id if event else None
    for i, node in enumerate(nodes):
        x, y = node_position(i)
        is_active = node.id == active_id
        group = ET.SubElement(svg, "g", {
            "id": f"node-{node.id}",
            "data-node-id": node.id,
            "data-node-type": node.type,
            "data-active": "true" if is_active else "false",
        })
        ET.SubElement(group, "rect", {
            "x": str(x - BOX_WIDTH // 2),
            "y": str(y - BOX_HEIGHT // 2),
            "width": str(BOX_WIDTH),
            "height": str(BOX_HEIGHT),
            "rx": "10",
            "fill": ACTIVE_FILL if is_active else IDLE_FILL,
            "stroke": ACTIVE_STROKE if is_active else IDLE_STROKE,
            "stroke-width": "2",
        })
        label = ET.SubElement(group, "text", {
            "x": str(x),
            "y": str(y),
            "text-anchor": "middle",
            "fill": "white",
        })
        label.text = node.label
        if is_active and event is not None and event.has_value:
            value = ET.SubElement(group, "text", {
                "class": "highlight-value",
                "x": str(x),
                "y": str(y + 40),
                "text-anchor": "middle",
                "fill": VALUE_FILL,
            })
            value.text = format_value(event.value)
    return ET.tostring(svg, encoding="unicode")


def render_frame_text(nodes: Sequence[AnimationNode], state: PlaybackState) -> str:
    """One-line terminal rendering of the current frame."""
    if state.total_steps == 0 or state.current_event is None:
        return "Step 0 / 0 (no animation data)"
    event = state.current_event
    labels = {node.id: node.label for node in nodes}
    line = f"Step {state.current_index + 1} / {state.total_steps}  > {labels.get(event.node_id, event.node_id)}"
    if event.has_value:
        line += f" = {format_value(event.value)}"
    return line
