"""Priority ordering of nodes inside a flow column.

Systems wired through integration middleware are pulled to the top and
grouped by middleware family (the id prefix before the first ``-``, so
``ESB-P`` and ``ESB-C`` share the family ``ESB``). Inside a family, systems
that also talk to the pinned system directly go last, closest to the direct
links drawn underneath.
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import cached_property

from archgraph.config import TieBreak
from archgraph.model.graph_model import GraphModel
from archgraph.model.types import FlowLink


def middleware_base(node_id: str) -> str:
    """Family token of a middleware id: everything before the first '-'."""
    return node_id.split("-", 1)[0]


class FlowOrdering:
    """Comparator over the nodes of one flow model.

    The ordering is a pure function of the model, the pinned id and the
    middleware list: the same inputs always give the same order.

    Args:
        model: Nodes and links to order
        pinned_id: The system under review, if any
        middleware_ids: Integration middleware ids, in priority order
        tie_break: How to order nodes that are otherwise equal
    """

    def __init__(
        self,
        model: GraphModel,
        pinned_id: str | None = None,
        middleware_ids: Iterable[str] = (),
        tie_break: TieBreak = TieBreak.TYPE,
    ) -> None:
        self.model = model
        self.pinned_id = pinned_id
        self.middleware_ids = tuple(middleware_ids)
        self.tie_break = TieBreak(tie_break)
        self._middleware = frozenset(self.middleware_ids)

    @cached_property
    def bases(self) -> list[str]:
        """Distinct middleware families, sorted."""
        return sorted({middleware_base(m) for m in self.middleware_ids})

    def is_middleware(self, node_id: str) -> bool:
        return node_id in self._middleware

    def is_middleware_link(self, link: FlowLink) -> bool:
        return link.touches(self._middleware)

    def touches_middleware(self, node_id: str) -> bool:
        """The node is middleware or has a link with a middleware endpoint."""
        if self.is_middleware(node_id):
            return True
        return any(self.is_middleware_link(link) for link in self.model.incident_links(node_id))

    def base_key(self, node_id: str) -> str:
        """Middleware family a node is grouped under ("" when none)."""
        if self.is_middleware(node_id):
            return middleware_base(node_id)
        link = next(
            (link for link in self.model.incident_links(node_id) if self.is_middleware_link(link)),
            None,
        )
        if link is None:
            return ""
        # Pick the endpoint by middleware list order, not by link direction.
        middleware = next(m for m in self.middleware_ids if m in (link.source, link.target))
        return middleware_base(middleware)

    def base_rank(self, node_id: str) -> int:
        """Position of the node's family among ``bases``; -1 when unknown."""
        base = self.base_key(node_id)
        return self.bases.index(base) if base in self.bases else -1

    def is_direct(self, node_id: str) -> bool:
        """The node (not the pinned node itself) has a link to or from the pinned node."""
        pinned = self.pinned_id
        if pinned is None or node_id == pinned:
            return False
        return any(
            (link.source == pinned) != (link.target == pinned) for link in self.model.incident_links(node_id)
        )

    def sort_key(self, node_id: str) -> tuple[int, int, int, str]:
        node = self.model.node(node_id)
        residual = node.type if node is not None and self.tie_break is TieBreak.TYPE else ""
        return (
            0 if self.touches_middleware(node_id) else 1,
            self.base_rank(node_id),
            1 if self.is_direct(node_id) else 0,
            residual,
        )

    def sort(self, node_ids: Iterable[str]) -> list[str]:
        """Order ``node_ids``; equal keys keep their input order."""
        return sorted(node_ids, key=self.sort_key)
