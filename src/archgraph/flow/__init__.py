"""Flow diagrams: priority ordering, column layout and filters."""

from archgraph.config import ColumnMode, TieBreak
from archgraph.flow.filters import (
    ALL,
    PathFilter,
    Role,
    SystemFilter,
    filter_options,
    filter_path,
    filter_systems,
    navigation_target,
    path_filter_options,
    strip_role_suffix,
    system_filter_options,
)
from archgraph.flow.ordering import FlowOrdering, middleware_base
from archgraph.flow.sankey import FlowLayout, FlowLayoutEngine, LinkBand, NodeBox

__all__ = [
    "ALL",
    "ColumnMode",
    "FlowLayout",
    "FlowLayoutEngine",
    "FlowOrdering",
    "LinkBand",
    "NodeBox",
    "PathFilter",
    "Role",
    "SystemFilter",
    "TieBreak",
    "filter_options",
    "filter_path",
    "filter_systems",
    "middleware_base",
    "navigation_target",
    "path_filter_options",
    "strip_role_suffix",
    "system_filter_options",
]
