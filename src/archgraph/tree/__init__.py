"""Collapsible capability tree: build, expand/collapse, search and layout."""

from archgraph.tree.builder import SYNTHETIC_ROOT_ID, SYNTHETIC_ROOT_LABEL, CapabilityTree, build_tree
from archgraph.tree.layout import PositionedNode, TreeEdge, TreeLayout, TreeLayoutEngine, diagonal
from archgraph.tree.search import SearchResult, apply_search, search
from archgraph.tree.visibility import (
    VisibilityController,
    VisibilityState,
    VisibleTree,
    derive_visible_tree,
)

__all__ = [
    "CapabilityTree",
    "PositionedNode",
    "SYNTHETIC_ROOT_ID",
    "SYNTHETIC_ROOT_LABEL",
    "SearchResult",
    "TreeEdge",
    "TreeLayout",
    "TreeLayoutEngine",
    "VisibilityController",
    "VisibilityState",
    "VisibleTree",
    "apply_search",
    "build_tree",
    "derive_visible_tree",
    "diagonal",
    "search",
]
