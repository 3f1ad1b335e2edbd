"""Name search over the capability tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from archgraph.model.types import Highlight

if TYPE_CHECKING:
    from archgraph.tree.builder import CapabilityTree
    from archgraph.tree.visibility import VisibilityController


@dataclass(frozen=True)
class SearchResult:
    """Outcome of one search.

    Attributes:
        query: The stripped query ("" when inactive)
        matched_ids: Nodes whose name contains the query, in pre-order
        path_ids: Ancestors of matches (root excluded), in pre-order
        expansion: Nodes to expand so that every match is visible
    """

    query: str = ""
    matched_ids: tuple[str, ...] = ()
    path_ids: tuple[str, ...] = ()
    expansion: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_active(self) -> bool:
        return bool(self.query)

    @property
    def has_matches(self) -> bool:
        return bool(self.matched_ids)

    def highlight(self, node_id: str) -> Highlight:
        """Classification of a node: a match outranks being on a path."""
        if node_id in self.matched_ids:
            return Highlight.MATCHED
        if node_id in self.path_ids:
            return Highlight.ON_PATH
        return Highlight.NONE

    def edge_highlight(self, source: str, target: str) -> Highlight:
        """A tree edge takes the classification of its child end."""
        return self.highlight(target)


def search(tree: CapabilityTree, query: str | None) -> SearchResult:
    """Find nodes whose name contains ``query`` (case-insensitive).

    The root is never matched and never part of a path. A matched node that
    has children is only expanded when one of its descendants matches too,
    which falls out of expanding exactly the path nodes.
    """
    needle = (query or "").strip()
    if not needle:
        return SearchResult()

    lowered = needle.lower()
    matched: list[str] = []
    on_path: set[str] = set()
    for node_id in tree:
        if node_id == tree.root_id:
            continue
        if lowered in tree.name(node_id).lower():
            matched.append(node_id)
            on_path.update(a for a in tree.ancestors(node_id) if a != tree.root_id)

    path = tuple(node_id for node_id in tree if node_id in on_path)
    return SearchResult(
        query=needle,
        matched_ids=tuple(matched),
        path_ids=path,
        expansion=frozenset(path),
    )


def apply_search(controller: VisibilityController, result: SearchResult) -> None:
    """Recompute visibility from scratch for a search result.

    An inactive search restores the default depth policy.
    """
    if result.is_active:
        controller.apply_expansion(result.expansion)
    else:
        controller.apply_default()
