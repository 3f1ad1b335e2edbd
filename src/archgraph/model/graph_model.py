"""Node/link model for flow and network diagrams.

Wraps a NetworkX MultiDiGraph (two systems can integrate more than once,
e.g. over API and over Batch) and keeps input order for nodes and links so
that every layout built on top of it is deterministic.
"""

from __future__ import annotations

import logging
from typing import Any

import networkx as nx

from archgraph.model.parse import parse_flow
from archgraph.model.types import FlowData, FlowLink, FlowMetadata, FlowNode, make_link_id

logger = logging.getLogger(__name__)


class GraphModel:
    """Identity and adjacency lookups over one flow payload.

    Duplicate node ids keep the first record. Links whose endpoints are not
    known nodes are dropped. Both anomalies are logged, never raised.
    """

    def __init__(self, data: FlowData | None = None) -> None:
        data = data or FlowData()
        self.metadata: FlowMetadata = data.metadata
        self._graph = nx.MultiDiGraph()
        self._nodes: dict[str, FlowNode] = {}
        self._links: list[FlowLink] = []
        self._link_ids: list[str] = []
        self.dropped_links: list[FlowLink] = []

        for node in data.nodes:
            if node.id in self._nodes:
                logger.debug("Duplicate flow node id %r ignored", node.id)
                continue
            self._nodes[node.id] = node
            self._graph.add_node(node.id, node=node)

        for link in data.links:
            if link.source not in self._nodes or link.target not in self._nodes:
                logger.debug("Dropping link %s -> %s: unknown endpoint", link.source, link.target)
                self.dropped_links.append(link)
                continue
            link_id = make_link_id(link, len(self._links))
            self._links.append(link)
            self._link_ids.append(link_id)
            self._graph.add_edge(link.source, link.target, key=link_id, link=link)

    @classmethod
    def from_payload(cls, payload: Any) -> GraphModel:
        """Build from a raw ``{nodes, links, metadata}`` mapping."""
        return cls(parse_flow(payload))

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    @property
    def graph(self) -> nx.MultiDiGraph:
        return self._graph

    @property
    def nodes(self) -> list[FlowNode]:
        return list(self._nodes.values())

    @property
    def links(self) -> list[FlowLink]:
        return list(self._links)

    @property
    def link_ids(self) -> list[str]:
        """Unique per-link ids, parallel to ``links``."""
        return list(self._link_ids)

    def link_items(self) -> list[tuple[str, FlowLink]]:
        return list(zip(self._link_ids, self._links))

    @property
    def node_ids(self) -> list[str]:
        return list(self._nodes)

    @property
    def is_empty(self) -> bool:
        return not self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def node(self, node_id: str) -> FlowNode | None:
        return self._nodes.get(node_id)

    def node_types(self) -> list[str]:
        """Distinct node types in first-appearance order."""
        return list(dict.fromkeys(node.type for node in self._nodes.values()))

    # ------------------------------------------------------------------
    # Adjacency
    # ------------------------------------------------------------------

    def outgoing(self, node_id: str) -> list[FlowLink]:
        if node_id not in self._graph:
            return []
        return [attrs["link"] for _, _, attrs in self._graph.out_edges(node_id, data=True)]

    def incoming(self, node_id: str) -> list[FlowLink]:
        if node_id not in self._graph:
            return []
        return [attrs["link"] for _, _, attrs in self._graph.in_edges(node_id, data=True)]

    def incident_links(self, node_id: str) -> list[FlowLink]:
        """Outgoing links first, then incoming (self-loops appear twice)."""
        return self.outgoing(node_id) + self.incoming(node_id)

    def neighbors(self, node_id: str) -> set[str]:
        if node_id not in self._graph:
            return set()
        return set(self._graph.successors(node_id)) | set(self._graph.predecessors(node_id))

    def degree(self, node_id: str) -> int:
        """Number of incident links (d3 ``count`` semantics)."""
        if node_id not in self._graph:
            return 0
        return self._graph.in_degree(node_id) + self._graph.out_degree(node_id)

    def inflow(self, node_id: str) -> float:
        return sum(link.value for link in self.incoming(node_id))

    def outflow(self, node_id: str) -> float:
        return sum(link.value for link in self.outgoing(node_id))

    def is_acyclic(self) -> bool:
        return nx.is_directed_acyclic_graph(self._graph)

    def subset(self, node_ids: set[str], links: list[FlowLink]) -> GraphModel:
        """New model restricted to ``node_ids`` (input order kept) and ``links``."""
        nodes = tuple(node for node in self._nodes.values() if node.id in node_ids)
        return GraphModel(FlowData(nodes=nodes, links=tuple(links), metadata=self.metadata))
