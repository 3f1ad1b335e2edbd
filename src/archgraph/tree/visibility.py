"""Expand/collapse state for the capability tree.

Each non-leaf node carries one ``VisibilityState``. The structural children
list in the CapabilityTree is the single source of truth; which children are
shown is always derived from it:

    visible children = children if EXPANDED else []
    hidden children  = children if COLLAPSED else []

``derive_visible_tree`` turns (tree, state map) into the painter-facing
VisibleTree without touching either input.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from archgraph.tree._walk import iter_preorder

if TYPE_CHECKING:
    from archgraph.tree.builder import CapabilityTree

logger = logging.getLogger(__name__)

DEFAULT_MAX_VISIBLE_DEPTH = 1


class VisibilityState(str, Enum):
    """Collapse state of a non-leaf tree node."""

    EXPANDED = "expanded"
    COLLAPSED = "collapsed"


@dataclass(frozen=True)
class VisibleTree:
    """The part of a CapabilityTree currently on screen.

    Attributes:
        tree: The structural tree this view was derived from
        order: Visible node ids in pre-order (root first)
        children: Visible children per visible node (empty when collapsed)
        collapsed: Visible non-leaf nodes whose children are hidden
    """

    tree: CapabilityTree
    order: tuple[str, ...]
    children: Mapping[str, tuple[str, ...]]
    collapsed: frozenset[str]

    @property
    def root_id(self) -> str:
        return self.tree.root_id

    @property
    def visible_ids(self) -> set[str]:
        return set(self.order)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.children

    def __len__(self) -> int:
        return len(self.order)

    def has_hidden_children(self, node_id: str) -> bool:
        return node_id in self.collapsed

    def edges(self) -> list[tuple[str, str]]:
        """Visible parent -> child pairs in pre-order."""
        return [(parent, child) for parent in self.order for child in self.children[parent]]


def derive_visible_tree(
    tree: CapabilityTree,
    state: Mapping[str, VisibilityState],
) -> VisibleTree:
    """Compute the visible structure for a state map.

    Non-leaf nodes missing from ``state`` count as expanded.
    """

    def expanded(node_id: str) -> bool:
        return state.get(node_id, VisibilityState.EXPANDED) is VisibilityState.EXPANDED

    order = tuple(iter_preorder(tree.root_id, tree.graph, should_descend=expanded))
    children: dict[str, tuple[str, ...]] = {}
    collapsed: set[str] = set()
    for node_id in order:
        structural = tree.children(node_id)
        if structural and not expanded(node_id):
            collapsed.add(node_id)
            children[node_id] = ()
        else:
            children[node_id] = tuple(structural)
    return VisibleTree(tree=tree, order=order, children=children, collapsed=frozenset(collapsed))


class VisibilityController:
    """Owns the expand/collapse state of one mounted capability tree.

    Leaves have no state. Every operation that changes state returns whether
    anything changed so callers can skip a re-layout.

    Args:
        tree: The tree to control
        max_visible_depth: Nodes deeper than this start collapsed
    """

    def __init__(
        self,
        tree: CapabilityTree,
        max_visible_depth: int = DEFAULT_MAX_VISIBLE_DEPTH,
    ) -> None:
        self.tree = tree
        self.max_visible_depth = max_visible_depth
        self._states: dict[str, VisibilityState] = {}
        self.apply_default()

    def __repr__(self) -> str:
        expanded = sum(1 for s in self._states.values() if s is VisibilityState.EXPANDED)
        return f"VisibilityController(expanded={expanded}, collapsed={len(self._states) - expanded})"

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def state(self, node_id: str) -> VisibilityState | None:
        """State of a non-leaf node, None for leaves and unknown ids."""
        return self._states.get(node_id)

    def is_expanded(self, node_id: str) -> bool:
        return self._states.get(node_id) is VisibilityState.EXPANDED

    def visible_children(self, node_id: str) -> list[str]:
        return self.tree.children(node_id) if self.is_expanded(node_id) else []

    def hidden_children(self, node_id: str) -> list[str]:
        if self._states.get(node_id) is VisibilityState.COLLAPSED:
            return self.tree.children(node_id)
        return []

    def visible_tree(self) -> VisibleTree:
        return derive_visible_tree(self.tree, self._states)

    def visible_ids(self) -> set[str]:
        return self.visible_tree().visible_ids

    def snapshot(self) -> dict[str, VisibilityState]:
        return dict(self._states)

    def restore(self, snapshot: Mapping[str, VisibilityState]) -> None:
        """Restore a snapshot; ids no longer in the tree are ignored."""
        for node_id, state in snapshot.items():
            if node_id in self._states:
                self._states[node_id] = VisibilityState(state)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def toggle(self, node_id: str) -> bool:
        """Flip a non-leaf node. Leaves and unknown ids are a no-op."""
        current = self._states.get(node_id)
        if current is None:
            logger.debug("Ignoring toggle of %r: not an expandable node", node_id)
            return False
        self._states[node_id] = (
            VisibilityState.COLLAPSED if current is VisibilityState.EXPANDED else VisibilityState.EXPANDED
        )
        return True

    def expand(self, node_id: str) -> bool:
        return self._set(node_id, VisibilityState.EXPANDED)

    def collapse(self, node_id: str) -> bool:
        return self._set(node_id, VisibilityState.COLLAPSED)

    def expand_all(self) -> None:
        for node_id in self._states:
            self._states[node_id] = VisibilityState.EXPANDED

    def collapse_all(self) -> None:
        """Collapse everything below the root; the root stays expanded."""
        for node_id in self._states:
            self._states[node_id] = (
                VisibilityState.EXPANDED if node_id == self.tree.root_id else VisibilityState.COLLAPSED
            )

    def apply_default(self, max_visible_depth: int | None = None) -> None:
        """Reset to the depth policy: nodes deeper than the limit are collapsed."""
        if max_visible_depth is not None:
            self.max_visible_depth = max_visible_depth
        self._states = {
            node_id: (
                VisibilityState.EXPANDED
                if self.tree.graph.nodes[node_id]["depth"] <= self.max_visible_depth
                else VisibilityState.COLLAPSED
            )
            for node_id in self.tree.internal_nodes()
        }

    def apply_expansion(self, expanded_ids: Iterable[str]) -> None:
        """Collapse every non-root node, then expand exactly ``expanded_ids``."""
        self.collapse_all()
        for node_id in expanded_ids:
            if node_id in self._states:
                self._states[node_id] = VisibilityState.EXPANDED

    def _set(self, node_id: str, state: VisibilityState) -> bool:
        current = self._states.get(node_id)
        if current is None or current is state:
            return False
        self._states[node_id] = state
        return True
