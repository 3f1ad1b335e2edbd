"""Parent-chain helpers shared by the tree modules.

All functions work on a NetworkX DiGraph whose nodes carry a ``parent``
attribute (None for the root) and whose edges point parent -> child in
input order.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import networkx as nx


def get_parent(node_id: str, tree_graph: nx.DiGraph) -> str | None:
    """Get the parent of a node."""
    if node_id not in tree_graph.nodes:
        return None
    return tree_graph.nodes[node_id].get("parent")


def get_children(node_id: str, tree_graph: nx.DiGraph) -> list[str]:
    """Structural children of a node, in input order."""
    if node_id not in tree_graph:
        return []
    return list(tree_graph.successors(node_id))


def get_ancestor_chain(node_id: str, tree_graph: nx.DiGraph) -> list[str]:
    """Get the chain of ancestors for a node, from immediate parent to root."""
    ancestors = []
    current = get_parent(node_id, tree_graph)
    while current is not None:
        ancestors.append(current)
        current = get_parent(current, tree_graph)
    return ancestors


def get_nesting_depth(node_id: str, tree_graph: nx.DiGraph) -> int:
    """Get the depth of a node (0 = root)."""
    return len(get_ancestor_chain(node_id, tree_graph))


def iter_preorder(
    node_id: str,
    tree_graph: nx.DiGraph,
    should_descend: Callable[[str], bool] | None = None,
) -> Iterator[str]:
    """Depth-first pre-order walk, children in input order.

    ``should_descend`` decides whether the walk enters a node's children;
    by default every node is entered.
    """
    stack = [node_id]
    while stack:
        current = stack.pop()
        yield current
        if should_descend is None or should_descend(current):
            stack.extend(reversed(get_children(current, tree_graph)))
