"""Colour scales and paint styles."""

from archgraph.styles.palette import (
    CRITICALITY_COLORS,
    LEVEL_COLORS,
    NEUTRAL,
    PATTERN_COLORS,
    SEARCH_LEGEND,
    EdgeStyle,
    LegendEntry,
    NodeStyle,
    Palette,
    flow_link_style,
    flow_node_style,
    network_link_style,
    network_node_style,
    tree_edge_style,
    tree_node_style,
)

__all__ = [
    "CRITICALITY_COLORS",
    "EdgeStyle",
    "LEVEL_COLORS",
    "LegendEntry",
    "NEUTRAL",
    "NodeStyle",
    "PATTERN_COLORS",
    "Palette",
    "SEARCH_LEGEND",
    "flow_link_style",
    "flow_node_style",
    "network_link_style",
    "network_node_style",
    "tree_edge_style",
    "tree_node_style",
]
