"""Column layout for flow diagrams.

Geometry follows d3-sankey with a custom node sort:

1. assign columns (by node type, or justified by longest path);
2. order each column with ``FlowOrdering``;
3. stack nodes with a shared vertical scale ``ky`` (the tightest column
   decides it) and spread the leftover space evenly;
4. relax nodes toward the weighted centre of their linked neighbours for a
   number of passes, never reordering a column, then push apart overlaps;
5. stack link bands on each node by the position of the opposite node.

Self-loops take no part in the geometry.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

import networkx as nx

from archgraph.config import ColumnMode, FlowLayoutConfig
from archgraph.flow.ordering import FlowOrdering
from archgraph.model.graph_model import GraphModel
from archgraph.model.types import FlowLink, FlowNode

logger = logging.getLogger(__name__)

_EPSILON = 1e-6


@dataclass(eq=False)
class NodeBox:
    """A positioned node bar."""

    node: FlowNode
    column: int
    order: int = 0
    value: float = 0.0
    x0: float = 0.0
    x1: float = 0.0
    y0: float = 0.0
    y1: float = 0.0
    source_links: list[LinkBand] = field(default_factory=list, repr=False)
    target_links: list[LinkBand] = field(default_factory=list, repr=False)

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def height(self) -> float:
        return self.y1 - self.y0

    @property
    def center(self) -> tuple[float, float]:
        return (self.x0 + self.x1) / 2, (self.y0 + self.y1) / 2


@dataclass(eq=False)
class LinkBand:
    """A positioned link: a band of ``width`` from source to target."""

    link: FlowLink
    index: int
    id: str
    source: NodeBox = field(repr=False)
    target: NodeBox = field(repr=False)
    is_middleware: bool = False
    width: float = 0.0
    y0: float = 0.0
    y1: float = 0.0

    @property
    def value(self) -> float:
        return self.link.value

    @property
    def stroke_width(self) -> float:
        """Painted width; hairline links stay visible."""
        return max(1.0, self.width)

    @property
    def points(self) -> tuple[tuple[float, float], ...]:
        """Horizontal cubic from the source's right edge to the target's left edge."""
        x0, x1 = self.source.x1, self.target.x0
        mid = (x0 + x1) / 2
        return (x0, self.y0), (mid, self.y0), (mid, self.y1), (x1, self.y1)

    def path(self) -> str:
        (sx, sy), (c1x, c1y), (c2x, c2y), (tx, ty) = self.points
        return f"M{sx},{sy}C{c1x},{c1y},{c2x},{c2y},{tx},{ty}"


@dataclass
class FlowLayout:
    """Result of a flow layout pass.

    ``links`` is already in paint order: direct links first, middleware
    links after.
    """

    nodes: dict[str, NodeBox] = field(default_factory=dict)
    links: list[LinkBand] = field(default_factory=list)
    columns: list[list[str]] = field(default_factory=list)
    column_mode: ColumnMode = ColumnMode.TYPE
    ky: float = 0.0
    pinned_id: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def column_of(self, node_id: str) -> int:
        return self.nodes[node_id].column

    def links_of(self, node_id: str) -> list[LinkBand]:
        box = self.nodes[node_id]
        return box.source_links + box.target_links


# =============================================================================
# Columns
# =============================================================================


def type_columns(model: GraphModel) -> dict[str, int]:
    """Column = index of the node's type in first-appearance order."""
    types = model.node_types()
    return {node.id: types.index(node.type) for node in model.nodes}


def justified_columns(model: GraphModel, links: list[FlowLink]) -> dict[str, int] | None:
    """Longest-path depth from sources; sinks go to the last column.

    Returns None when the links contain a cycle.
    """
    graph = nx.DiGraph()
    graph.add_nodes_from(model.node_ids)
    graph.add_edges_from((link.source, link.target) for link in links)
    if not nx.is_directed_acyclic_graph(graph):
        return None

    depth = dict.fromkeys(model.node_ids, 0)
    for node_id in nx.topological_sort(graph):
        for successor in graph.successors(node_id):
            depth[successor] = max(depth[successor], depth[node_id] + 1)

    last = max(depth.values(), default=0)
    return {node_id: depth[node_id] if graph.out_degree(node_id) else last for node_id in model.node_ids}


# =============================================================================
# Engine
# =============================================================================


class FlowLayoutEngine:
    """Lays out a GraphModel as ordered columns of node bars.

    Args:
        config: Viewport, spacing and ordering settings
    """

    def __init__(self, config: FlowLayoutConfig | None = None) -> None:
        self.config = config or FlowLayoutConfig()
        self._padding = self.config.node_padding

    def ordering(
        self,
        model: GraphModel,
        pinned_id: str | None = None,
        middleware_ids: Iterable[str] | None = None,
    ) -> FlowOrdering:
        """Ordering for ``model``; defaults come from the payload metadata."""
        if middleware_ids is None:
            middleware_ids = model.metadata.integration_middleware
        if pinned_id is None:
            pinned_id = model.metadata.code or None
        return FlowOrdering(model, pinned_id, middleware_ids, self.config.tie_break)

    def layout(
        self,
        model: GraphModel,
        pinned_id: str | None = None,
        middleware_ids: Iterable[str] | None = None,
    ) -> FlowLayout:
        ordering = self.ordering(model, pinned_id, middleware_ids)
        if model.is_empty:
            return FlowLayout(column_mode=self.config.column_mode, pinned_id=ordering.pinned_id)

        items = [(link_id, link) for link_id, link in model.link_items() if link.source != link.target]
        if len(items) != len(model.links):
            logger.debug("Ignoring %d self-loop link(s) in flow layout", len(model.links) - len(items))
        links = [link for _, link in items]

        column_mode, column_of = self._assign_columns(model, links)
        boxes = {node.id: NodeBox(node=node, column=column_of[node.id]) for node in model.nodes}
        bands = []
        for index, (link_id, link) in enumerate(items):
            band = LinkBand(
                link=link,
                index=index,
                id=link_id,
                source=boxes[link.source],
                target=boxes[link.target],
                is_middleware=ordering.is_middleware_link(link),
            )
            band.source.source_links.append(band)
            band.target.target_links.append(band)
            bands.append(band)

        for box in boxes.values():
            inflow = sum(band.value for band in box.target_links)
            outflow = sum(band.value for band in box.source_links)
            box.value = max(inflow, outflow) or 1.0

        column_count = max(column_of.values()) + 1
        columns: list[list[NodeBox]] = [[] for _ in range(column_count)]
        for box in boxes.values():
            columns[box.column].append(box)
        columns = [[boxes[node_id] for node_id in ordering.sort(b.id for b in column)] for column in columns]

        self._position_columns(columns)
        ky = self._initialize_breadths(columns)
        self._relax(columns)
        self._compute_link_breadths(boxes.values())

        return FlowLayout(
            nodes={box.id: box for column in columns for box in column},
            links=sorted(bands, key=lambda band: band.is_middleware),
            columns=[[box.id for box in column] for column in columns],
            column_mode=column_mode,
            ky=ky,
            pinned_id=ordering.pinned_id,
        )

    def _assign_columns(self, model: GraphModel, links: list[FlowLink]) -> tuple[ColumnMode, dict[str, int]]:
        if self.config.column_mode is ColumnMode.JUSTIFY:
            justified = justified_columns(model, links)
            if justified is not None:
                return ColumnMode.JUSTIFY, justified
            logger.warning("Flow links form a cycle; falling back to type columns")
        return ColumnMode.TYPE, type_columns(model)

    def _position_columns(self, columns: list[list[NodeBox]]) -> None:
        config = self.config
        count = len(columns)
        kx = (config.inner_width - config.node_width) / (count - 1) if count > 1 else 0.0
        for column in columns:
            for order, box in enumerate(column):
                box.order = order
                box.x0 = box.column * kx
                box.x1 = box.x0 + config.node_width

    def _initialize_breadths(self, columns: list[list[NodeBox]]) -> float:
        height = self.config.inner_height
        longest = max(len(column) for column in columns)
        self._padding = min(self.config.node_padding, height / (longest - 1)) if longest > 1 else self.config.node_padding
        py = self._padding

        ky = min(
            (height - (len(column) - 1) * py) / sum(box.value for box in column) for column in columns if column
        )
        ky = max(ky, 0.0)

        for column in columns:
            y = 0.0
            for box in column:
                box.y0 = y
                box.y1 = y + box.value * ky
                y = box.y1 + py
                for band in box.source_links:
                    band.width = band.value * ky
            spread = (height - y + py) / (len(column) + 1)
            for i, box in enumerate(column, start=1):
                box.y0 += spread * i
                box.y1 += spread * i
            for box in column:
                _sort_node_links(box)
        return ky

    # ------------------------------------------------------------------
    # Relaxation
    # ------------------------------------------------------------------

    def _relax(self, columns: list[list[NodeBox]]) -> None:
        iterations = self.config.iterations
        for i in range(iterations):
            alpha = 0.99**i
            beta = max(1 - alpha, (i + 1) / iterations)
            self._relax_right_to_left(columns, alpha, beta)
            self._relax_left_to_right(columns, alpha, beta)

    def _relax_left_to_right(self, columns: list[list[NodeBox]], alpha: float, beta: float) -> None:
        for column in columns[1:]:
            for target in column:
                y = w = 0.0
                for band in target.target_links:
                    v = band.value * abs(target.column - band.source.column)
                    y += self._target_top(band.source, target) * v
                    w += v
                if w > 0:
                    self._shift(target, (y / w - target.y0) * alpha)
            self._resolve_collisions(column, beta)

    def _relax_right_to_left(self, columns: list[list[NodeBox]], alpha: float, beta: float) -> None:
        for column in reversed(columns[:-1]):
            for source in column:
                y = w = 0.0
                for band in source.source_links:
                    v = band.value * abs(band.target.column - source.column)
                    y += self._source_top(source, band.target) * v
                    w += v
                if w > 0:
                    self._shift(source, (y / w - source.y0) * alpha)
            self._resolve_collisions(column, beta)

    @staticmethod
    def _shift(box: NodeBox, dy: float) -> None:
        box.y0 += dy
        box.y1 += dy
        for band in box.source_links:
            _sort_target_links(band.target)
        for band in box.target_links:
            _sort_source_links(band.source)

    def _source_top(self, source: NodeBox, target: NodeBox) -> float:
        """Where ``source`` should start so its band meets ``target`` level."""
        py = self._padding
        y = target.y0 - (len(target.target_links) - 1) * py / 2
        for band in target.target_links:
            if band.source is source:
                break
            y += band.width + py
        for band in source.source_links:
            if band.target is target:
                break
            y -= band.width
        return y

    def _target_top(self, source: NodeBox, target: NodeBox) -> float:
        """Where ``target`` should start so its band meets ``source`` level."""
        py = self._padding
        y = source.y0 - (len(source.source_links) - 1) * py / 2
        for band in source.source_links:
            if band.target is target:
                break
            y += band.width + py
        for band in target.target_links:
            if band.source is source:
                break
            y -= band.width
        return y

    def _resolve_collisions(self, column: list[NodeBox], alpha: float) -> None:
        if not column:
            return
        py = self._padding
        middle = len(column) >> 1
        subject = column[middle]
        self._push_up(column, subject.y0 - py, middle - 1, alpha)
        self._push_down(column, subject.y1 + py, middle + 1, alpha)
        self._push_up(column, self.config.inner_height, len(column) - 1, alpha)
        self._push_down(column, 0.0, 0, alpha)

    def _push_down(self, column: list[NodeBox], y: float, start: int, alpha: float) -> None:
        for box in column[start:]:
            dy = (y - box.y0) * alpha
            if dy > _EPSILON:
                box.y0 += dy
                box.y1 += dy
            y = box.y1 + self._padding

    def _push_up(self, column: list[NodeBox], y: float, start: int, alpha: float) -> None:
        for index in range(start, -1, -1):
            box = column[index]
            dy = (box.y1 - y) * alpha
            if dy > _EPSILON:
                box.y0 -= dy
                box.y1 -= dy
            y = box.y0 - self._padding

    @staticmethod
    def _compute_link_breadths(boxes: Iterable[NodeBox]) -> None:
        for box in boxes:
            y0 = y1 = box.y0
            for band in box.source_links:
                band.y0 = y0 + band.width / 2
                y0 += band.width
            for band in box.target_links:
                band.y1 = y1 + band.width / 2
                y1 += band.width


def _sort_source_links(box: NodeBox) -> None:
    box.source_links.sort(key=lambda band: (band.target.y0, band.index))


def _sort_target_links(box: NodeBox) -> None:
    box.target_links.sort(key=lambda band: (band.source.y0, band.index))


def _sort_node_links(box: NodeBox) -> None:
    _sort_source_links(box)
    _sort_target_links(box)
