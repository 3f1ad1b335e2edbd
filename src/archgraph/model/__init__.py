"""Typed input records and the flow graph model."""

from archgraph.model.graph_model import GraphModel
from archgraph.model.parse import parse_flow, parse_hierarchy
from archgraph.model.types import (
    ROOT_LEVEL,
    SYSTEM_LEVEL,
    FlowData,
    FlowLink,
    FlowMetadata,
    FlowNode,
    HierarchyRecord,
    Highlight,
    make_link_id,
)

__all__ = [
    "FlowData",
    "FlowLink",
    "FlowMetadata",
    "FlowNode",
    "GraphModel",
    "HierarchyRecord",
    "Highlight",
    "ROOT_LEVEL",
    "SYSTEM_LEVEL",
    "make_link_id",
    "parse_flow",
    "parse_hierarchy",
]
