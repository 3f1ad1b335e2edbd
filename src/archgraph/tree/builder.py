"""Build a rooted capability tree from flat parent/child records.

Two shapes of input are supported:

* the enterprise-wide view: every top-level record hangs under a synthetic
  ``root`` node labelled "Business Capabilities";
* the system-specific view: one top-level record has level ``Root``. It is
  promoted to be the tree root itself and everything else top-level hangs
  under it, so the marker is never drawn as its own child.

Records whose parent id does not resolve (and therefore their whole
subtree) are left out of the tree. Those ids are kept in
``CapabilityTree.dropped_ids`` for inspection but are not reported as
errors.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

import networkx as nx

from archgraph.model.parse import parse_hierarchy
from archgraph.model.types import HierarchyRecord
from archgraph.tree._walk import (
    get_ancestor_chain,
    get_children,
    get_nesting_depth,
    get_parent,
    iter_preorder,
)

logger = logging.getLogger(__name__)

SYNTHETIC_ROOT_ID = "root"
SYNTHETIC_ROOT_LABEL = "Business Capabilities"
SYNTHETIC_ROOT_LEVEL = "root"


class CapabilityTree:
    """Rooted tree of capabilities backed by a NetworkX DiGraph.

    Node attributes: ``parent`` (id or None), ``depth``, ``name``, ``level``
    and ``record`` (the HierarchyRecord, None for the synthetic root).
    """

    def __init__(
        self,
        graph: nx.DiGraph,
        root_id: str,
        *,
        synthetic_root: bool,
        dropped_ids: list[str] | None = None,
    ) -> None:
        self.graph = graph
        self.root_id = root_id
        self.synthetic_root = synthetic_root
        self.dropped_ids = list(dropped_ids or [])

    def __len__(self) -> int:
        return self.graph.number_of_nodes()

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.graph

    def __iter__(self) -> Iterator[str]:
        return iter_preorder(self.root_id, self.graph)

    def node(self, node_id: str) -> dict[str, Any]:
        """Attribute dict of a node (KeyError if unknown)."""
        return self.graph.nodes[node_id]

    def name(self, node_id: str) -> str:
        return self.graph.nodes[node_id]["name"]

    def level(self, node_id: str) -> str:
        return self.graph.nodes[node_id]["level"]

    def record(self, node_id: str) -> HierarchyRecord | None:
        return self.graph.nodes[node_id]["record"]

    def parent(self, node_id: str) -> str | None:
        return get_parent(node_id, self.graph)

    def children(self, node_id: str) -> list[str]:
        return get_children(node_id, self.graph)

    def is_leaf(self, node_id: str) -> bool:
        return self.graph.out_degree(node_id) == 0

    def ancestors(self, node_id: str) -> list[str]:
        """Ancestors from immediate parent up to (and including) the root."""
        return get_ancestor_chain(node_id, self.graph)

    def depth(self, node_id: str) -> int:
        return get_nesting_depth(node_id, self.graph)

    def descendants(self, node_id: str) -> list[str]:
        """All descendants in pre-order, excluding the node itself."""
        walk = iter_preorder(node_id, self.graph)
        next(walk)
        return list(walk)

    @property
    def height(self) -> int:
        """Depth of the deepest node (0 for a lone root)."""
        return max((attrs["depth"] for _, attrs in self.graph.nodes(data=True)), default=0)

    def internal_nodes(self) -> list[str]:
        """Nodes with at least one structural child, in pre-order."""
        return [node_id for node_id in self if not self.is_leaf(node_id)]


def _add_tree_node(
    graph: nx.DiGraph,
    node_id: str,
    parent_id: str | None,
    depth: int,
    record: HierarchyRecord | None,
) -> None:
    graph.add_node(
        node_id,
        parent=parent_id,
        depth=depth,
        name=record.name if record else SYNTHETIC_ROOT_LABEL,
        level=record.level if record else SYNTHETIC_ROOT_LEVEL,
        record=record,
    )
    if parent_id is not None:
        graph.add_edge(parent_id, node_id)


def build_tree(records: Iterable[HierarchyRecord] | Any) -> CapabilityTree:
    """Convert flat hierarchy records into a single rooted tree.

    Accepts parsed HierarchyRecord objects or a raw payload (list of dicts).
    The result is connected and acyclic: a node is attached only when it is
    reached from the root through resolvable parent ids.
    """
    if records is None or isinstance(records, (str, bytes, Mapping)):
        records = parse_hierarchy(records)
    else:
        records = list(records)
        if not all(isinstance(r, HierarchyRecord) for r in records):
            records = parse_hierarchy(records)

    index: dict[str, HierarchyRecord] = {}
    for record in records:
        if record.id in index:
            logger.debug("Duplicate capability id %r ignored", record.id)
            continue
        index[record.id] = record

    marker = next((r for r in index.values() if r.is_root_marker), None)
    root_id = marker.id if marker else SYNTHETIC_ROOT_ID

    # Parent id -> children in input order. Top-level records hang off the root.
    children_of: dict[str, list[str]] = {}
    for record in index.values():
        if marker is not None and record.id == marker.id:
            continue
        parent_key = root_id if record.parent_id is None else record.parent_id
        children_of.setdefault(parent_key, []).append(record.id)

    graph = nx.DiGraph()
    _add_tree_node(graph, root_id, None, 0, marker)

    queue: deque[str] = deque([root_id])
    while queue:
        parent_id = queue.popleft()
        depth = graph.nodes[parent_id]["depth"] + 1
        for child_id in children_of.get(parent_id, ()):
            if child_id in graph:
                continue
            _add_tree_node(graph, child_id, parent_id, depth, index[child_id])
            queue.append(child_id)

    dropped = [node_id for node_id in index if node_id not in graph]
    if dropped:
        logger.debug("Omitted %d capability records with unresolvable parents: %s", len(dropped), dropped)

    return CapabilityTree(graph, root_id, synthetic_root=marker is None, dropped_ids=dropped)
