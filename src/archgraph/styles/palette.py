"""Colours and stroke styles handed to the painter.

Each categorical scale is a ``Palette`` with an explicit fallback, so an
unknown criticality or pattern is drawn in a neutral grey instead of failing.
Designers can change a colour here without touching any layout code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from archgraph.model.types import Highlight

NEUTRAL = "#6b7280"
TEXT = "#374151"
WHITE = "#fff"


@dataclass(frozen=True)
class LegendEntry:
    label: str
    color: str

    def to_dict(self) -> dict[str, str]:
        return {"label": self.label, "color": self.color}


@dataclass(frozen=True)
class Palette:
    """Ordinal colour scale with a fallback for unknown values."""

    name: str
    colors: Mapping[str, str]
    unknown: str = NEUTRAL

    def __post_init__(self) -> None:
        object.__setattr__(self, "colors", MappingProxyType(dict(self.colors)))

    def color(self, value: str | None) -> str:
        if value is None:
            return self.unknown
        return self.colors.get(value, self.unknown)

    def legend(self) -> list[LegendEntry]:
        return [LegendEntry(label, color) for label, color in self.colors.items()]


# ============================================================
# SCALES
# ============================================================

# Unknown levels are drawn like the root, as in the capability legend.
LEVEL_COLORS = Palette(
    "level",
    {"root": "#1f2937", "L1": "#3b82f6", "L2": "#10b981", "L3": "#f59e0b", "System": "#ef4444"},
    unknown="#1f2937",
)

CRITICALITY_COLORS = Palette(
    "criticality",
    {"Major": "#ef4444", "Standard-1": "#f59e0b", "Standard-2": "#22c55e", "Standard-3": "#0ea5e9"},
)

PATTERN_COLORS = Palette(
    "pattern",
    {"Web Service": "#1f77b4", "API": "#9467bd", "Batch": "#2ca02c", "File": "#ff7f0e"},
)

SEARCH_LEGEND = (
    LegendEntry("Search match", "#fbbf24"),
    LegendEntry("Path to match", "#fb923c"),
)


# ============================================================
# STYLES
# ============================================================


@dataclass(frozen=True)
class NodeStyle:
    """Paint attributes of one node."""

    fill: str
    stroke: str = WHITE
    stroke_width: float = 2.0
    radius: float | None = None
    text_fill: str = TEXT
    font_weight: str = "normal"
    cursor: str = "default"

    def to_dict(self) -> dict[str, object]:
        return {
            "fill": self.fill,
            "stroke": self.stroke,
            "stroke_width": self.stroke_width,
            "radius": self.radius,
            "text_fill": self.text_fill,
            "font_weight": self.font_weight,
            "cursor": self.cursor,
        }


@dataclass(frozen=True)
class EdgeStyle:
    """Paint attributes of one edge. ``border`` is drawn underneath when set."""

    stroke: str
    stroke_width: float = 1.0
    stroke_opacity: float = 1.0
    fill_opacity: float | None = None
    border: EdgeStyle | None = field(default=None, repr=False)

    def to_dict(self) -> dict[str, object]:
        return {
            "stroke": self.stroke,
            "stroke_width": self.stroke_width,
            "stroke_opacity": self.stroke_opacity,
            "fill_opacity": self.fill_opacity,
            "border": self.border.to_dict() if self.border else None,
        }


# Capability tree
_MATCH_STROKE = "#f59e0b"
_HOVER_STROKE = "#1a202c"
_TREE_HIGHLIGHT = {
    Highlight.MATCHED: ("#fbbf24", "#d97706"),
    Highlight.ON_PATH: ("#fb923c", "#ea580c"),
}


def tree_node_style(
    level: str,
    highlight: Highlight = Highlight.NONE,
    *,
    expandable: bool = False,
    radius: float = 8.0,
    underlying: Highlight = Highlight.NONE,
) -> NodeStyle:
    """Style of a capability tree node.

    ``underlying`` is the search classification of a hovered node; hovering
    keeps its search colours and only darkens the outline.
    """
    cursor = "pointer" if expandable else "default"
    search = underlying if highlight is Highlight.HOVERED else highlight
    if search in _TREE_HIGHLIGHT:
        fill, text = _TREE_HIGHLIGHT[search]
        style = NodeStyle(fill, _MATCH_STROKE, 3.0, radius, text, "bold", cursor)
    else:
        style = NodeStyle(LEVEL_COLORS.color(level), WHITE, 2.0, radius, TEXT, "normal", cursor)
    if highlight is Highlight.HOVERED:
        return NodeStyle(style.fill, _HOVER_STROKE, 3.0, radius, style.text_fill, style.font_weight, cursor)
    return style


def tree_edge_style(highlight: Highlight) -> EdgeStyle:
    if highlight in (Highlight.MATCHED, Highlight.ON_PATH, Highlight.HOVERED):
        return EdgeStyle(_MATCH_STROKE, 3.0, 1.0)
    return EdgeStyle("#cbd5e1", 2.0, 0.6)


# Flow diagram
_FLOW_OPACITY = {
    # (is_middleware, hovered) -> (fill_opacity, stroke_opacity)
    (False, False): (0.6, 0.5),
    (True, False): (0.4, 0.3),
    (False, True): (0.8, 0.9),
    (True, True): (0.8, 0.9),
}


def flow_node_style(criticality: str) -> NodeStyle:
    return NodeStyle(CRITICALITY_COLORS.color(criticality), TEXT, 1.0, None, TEXT, "500", "pointer")


def flow_link_style(
    pattern: str,
    width: float,
    *,
    is_middleware: bool = False,
    hovered: bool = False,
    bordered: bool = False,
) -> EdgeStyle:
    """Style of a flow band; the border (bordered variant) follows the hover."""
    fill_opacity, stroke_opacity = _FLOW_OPACITY[(is_middleware, hovered)]
    border = None
    if bordered:
        border = EdgeStyle(
            _HOVER_STROKE if hovered else "#2d3748",
            width + 2,
            1.0 if hovered else 0.8,
        )
    return EdgeStyle(PATTERN_COLORS.color(pattern), width, stroke_opacity, fill_opacity, border)


# Network diagram
def network_node_style(criticality: str, *, hovered: bool = False, radius: float = 12.0, hover_radius: float = 15.0) -> NodeStyle:
    return NodeStyle(
        CRITICALITY_COLORS.color(criticality),
        WHITE,
        2.0,
        hover_radius if hovered else radius,
        TEXT,
        "500",
        "pointer",
    )


def network_link_style(*, hovered: bool = False) -> EdgeStyle:
    if hovered:
        return EdgeStyle("#ef4444", 3.0, 1.0)
    return EdgeStyle("#999", 1.0, 0.6)
