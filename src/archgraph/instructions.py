"""Paint instructions: the contract between the engines and a painter.

Every diagram produces a ``PaintInstructions`` value: positioned nodes and
edges with their resolved styles, labels, tooltips and highlight flags. The
painter only draws; it never decides colours or positions.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from archgraph.model.types import Highlight
from archgraph.styles.palette import (
    CRITICALITY_COLORS,
    LEVEL_COLORS,
    PATTERN_COLORS,
    SEARCH_LEGEND,
    EdgeStyle,
    LegendEntry,
    NodeStyle,
    flow_link_style,
    flow_node_style,
    network_link_style,
    network_node_style,
    tree_edge_style,
    tree_node_style,
)

if TYPE_CHECKING:
    from archgraph.config import FlowLayoutConfig, ForceConfig, TreeLayoutConfig
    from archgraph.flow.sankey import FlowLayout, LinkBand, NodeBox
    from archgraph.force.simulation import ForceSimulation
    from archgraph.model.types import FlowLink, FlowNode
    from archgraph.tree.builder import CapabilityTree
    from archgraph.tree.layout import TreeLayout
    from archgraph.tree.search import SearchResult


class DiagramKind(str, Enum):
    TREE = "tree"
    FLOW = "flow"
    NETWORK = "network"


class Anchor(str, Enum):
    """SVG ``text-anchor`` values."""

    START = "start"
    MIDDLE = "middle"
    END = "end"


@dataclass(frozen=True)
class Label:
    """Text drawn next to a node, offset from the node's anchor point."""

    text: str
    dx: float = 0.0
    dy: float = 0.0
    anchor: Anchor = Anchor.START
    baseline_em: float = 0.35

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "dx": self.dx,
            "dy": self.dy,
            "anchor": self.anchor.value,
            "baselineEm": self.baseline_em,
        }


@dataclass(frozen=True)
class Tooltip:
    """Hover content; the first line is the title."""

    lines: tuple[str, ...]

    @property
    def title(self) -> str:
        return self.lines[0] if self.lines else ""

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "lines": list(self.lines)}


@dataclass(frozen=True)
class Viewport:
    """Zoom state of a diagram; scales are clamped into ``zoom_extent``."""

    zoom_extent: tuple[float, float] = (0.5, 3.0)
    scale: float = 1.0
    translate: tuple[float, float] = (0.0, 0.0)

    def clamp(self, scale: float) -> float:
        low, high = self.zoom_extent
        return min(high, max(low, scale))

    def zoom(self, scale: float, translate: tuple[float, float] | None = None) -> Viewport:
        return Viewport(
            zoom_extent=self.zoom_extent,
            scale=self.clamp(scale),
            translate=self.translate if translate is None else translate,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"zoomExtent": list(self.zoom_extent), "scale": self.scale, "translate": list(self.translate)}


@dataclass(frozen=True)
class PaintNode:
    """One node to draw.

    ``x, y`` are screen coordinates of the node's anchor (centre for circles,
    top-left for flow bars). ``previous`` is where an animated node starts.
    """

    id: str
    x: float
    y: float
    style: NodeStyle
    label: Label
    tooltip: Tooltip
    highlight: Highlight = Highlight.NONE
    width: float | None = None
    height: float | None = None
    previous: tuple[float, float] | None = None
    expandable: bool = False

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "style": self.style.to_dict(),
            "label": self.label.to_dict(),
            "tooltip": self.tooltip.to_dict(),
            "highlight": self.highlight.value,
        }
        if self.width is not None:
            result["width"] = self.width
            result["height"] = self.height
        if self.previous is not None:
            result["previous"] = list(self.previous)
        if self.expandable:
            result["expandable"] = True
        return result


@dataclass(frozen=True)
class PaintEdge:
    """One edge to draw, in paint order."""

    id: str
    source: str
    target: str
    style: EdgeStyle
    path: str | None = None
    points: tuple[tuple[float, float], ...] = ()
    highlight: Highlight = Highlight.NONE
    tooltip: Tooltip | None = None
    label: Label | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "style": self.style.to_dict(),
            "highlight": self.highlight.value,
        }
        if self.path is not None:
            result["path"] = self.path
        if self.points:
            result["points"] = [list(p) for p in self.points]
        if self.tooltip is not None:
            result["tooltip"] = self.tooltip.to_dict()
        if self.label is not None:
            result["label"] = self.label.to_dict()
        return result


@dataclass
class PaintInstructions:
    """Everything a painter needs for one frame of a diagram."""

    diagram: DiagramKind
    nodes: list[PaintNode] = field(default_factory=list)
    edges: list[PaintEdge] = field(default_factory=list)
    legend: list[LegendEntry] = field(default_factory=list)
    viewport: Viewport = field(default_factory=Viewport)
    width: float = 0.0
    height: float = 0.0
    exiting: dict[str, tuple[float, float]] = field(default_factory=dict)
    transition_ms: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def node(self, node_id: str) -> PaintNode | None:
        return next((n for n in self.nodes if n.id == node_id), None)

    def edge(self, edge_id: str) -> PaintEdge | None:
        return next((e for e in self.edges if e.id == edge_id), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "diagram": self.diagram.value,
            "width": self.width,
            "height": self.height,
            "viewport": self.viewport.to_dict(),
            "transitionMs": self.transition_ms,
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "exiting": {k: list(v) for k, v in self.exiting.items()},
            "legend": [entry.to_dict() for entry in self.legend],
        }


# =============================================================================
# Tooltips
# =============================================================================


def tree_tooltip(tree: CapabilityTree, node_id: str) -> Tooltip:
    record = tree.record(node_id)
    lines = [tree.name(node_id), f"Level: {tree.level(node_id) or 'Root'}"]
    if record is not None and record.system_count is not None:
        lines.append(f"Systems: {record.system_count}")
    if record is not None and record.metadata:
        meta = record.metadata
        lines.append(f"Project: {meta.get('projectName', 'N/A')}")
        lines.append(f"Architect: {meta.get('architect', 'N/A')}")
        lines.append(f"Status: {meta.get('reviewStatus', 'N/A')}")
    return Tooltip(tuple(lines))


def flow_node_tooltip(node: FlowNode) -> Tooltip:
    return Tooltip((f"{node.name} ({node.id})", f"Type: {node.type}", f"Criticality: {node.criticality}"))


def flow_link_tooltip(link: FlowLink, source_name: str, target_name: str) -> Tooltip:
    return Tooltip(
        (
            f"{source_name} → {target_name}",
            f"Pattern: {link.pattern}",
            f"Frequency: {link.frequency}",
            f"Role: {link.role}",
        )
    )


def network_link_tooltip(link: FlowLink) -> Tooltip:
    return Tooltip(
        (
            "Connection",
            f"From: {link.source} To: {link.target}",
            f"Pattern: {link.pattern}",
            f"Frequency: {link.frequency}",
            f"Desc: {link.description or 'N/A'}",
        )
    )


# =============================================================================
# Labels
# =============================================================================


def tree_label(name: str, *, has_visible_children: bool, radius: float = 8.0) -> Label:
    """Expanded parents are labelled above the node, everything else to the right."""
    if has_visible_children:
        return Label(name, dx=0.0, dy=-(radius + 4), anchor=Anchor.MIDDLE, baseline_em=-0.5)
    return Label(name, dx=radius + 4, dy=0.0, anchor=Anchor.START)


def flow_label(box: NodeBox, inner_width: float) -> Label:
    """Nodes in the left half are labelled on their left, others on their right."""
    if box.x0 < inner_width / 2:
        return Label(box.node.name, dx=-6.0, dy=box.height / 2, anchor=Anchor.END)
    return Label(box.node.name, dx=box.x1 - box.x0 + 6, dy=box.height / 2, anchor=Anchor.START)


# =============================================================================
# Builders
# =============================================================================


def tree_instructions(
    tree: CapabilityTree,
    layout: TreeLayout,
    config: TreeLayoutConfig,
    *,
    search: SearchResult | None = None,
    hovered_id: str | None = None,
    viewport: Viewport | None = None,
) -> PaintInstructions:
    """Instructions for the capability tree.

    Screen coordinates are offset by the config margin; the tree's breadth
    axis runs down the screen.
    """
    margin = config.margin
    children_shown: dict[str, bool] = {}
    for edge in layout.edges:
        children_shown[edge.source] = True

    def highlight_of(node_id: str) -> Highlight:
        return search.highlight(node_id) if search is not None else Highlight.NONE

    nodes = []
    for positioned in layout:
        node_id = positioned.id
        underlying = highlight_of(node_id)
        highlight = Highlight.HOVERED if node_id == hovered_id else underlying
        expandable = not tree.is_leaf(node_id)
        sx, sy = positioned.screen
        px, py = positioned.previous_screen
        nodes.append(
            PaintNode(
                id=node_id,
                x=sx + margin.left,
                y=sy + margin.top,
                style=tree_node_style(
                    tree.level(node_id),
                    highlight,
                    expandable=expandable,
                    radius=config.node_radius,
                    underlying=underlying,
                ),
                label=tree_label(
                    tree.name(node_id),
                    has_visible_children=children_shown.get(node_id, False),
                    radius=config.node_radius,
                ),
                tooltip=tree_tooltip(tree, node_id),
                highlight=highlight,
                previous=(px + margin.left, py + margin.top),
                expandable=expandable,
            )
        )

    edges = []
    for edge in layout.edges:
        highlight = search.edge_highlight(edge.source, edge.target) if search is not None else Highlight.NONE
        points = tuple((x + margin.left, y + margin.top) for x, y in edge.points)
        edges.append(
            PaintEdge(
                id=f"{edge.source}->{edge.target}",
                source=edge.source,
                target=edge.target,
                style=tree_edge_style(highlight),
                points=points,
                path=_cubic_path(points),
                highlight=highlight,
            )
        )

    exiting = {node_id: (y + margin.left, x + margin.top) for node_id, (x, y) in layout.exiting.items()}
    legend = [LegendEntry(level, LEVEL_COLORS.color(level)) for level in LEVEL_COLORS.colors]
    if search is not None and search.is_active:
        legend.extend(SEARCH_LEGEND)
    return PaintInstructions(
        diagram=DiagramKind.TREE,
        nodes=nodes,
        edges=edges,
        legend=legend,
        viewport=viewport or Viewport(zoom_extent=config.zoom_extent),
        width=config.width,
        height=config.height,
        exiting=exiting,
        transition_ms=config.transition_ms,
    )


def flow_instructions(
    layout: FlowLayout,
    config: FlowLayoutConfig,
    *,
    hovered_link: str | None = None,
    bordered: bool = False,
    viewport: Viewport | None = None,
) -> PaintInstructions:
    """Instructions for a flow diagram; edges are already in paint order."""
    margin = config.margin
    nodes = [
        PaintNode(
            id=box.id,
            x=box.x0 + margin.left,
            y=box.y0 + margin.top,
            width=box.x1 - box.x0,
            height=box.height,
            style=flow_node_style(box.node.criticality),
            label=flow_label(box, config.inner_width),
            tooltip=flow_node_tooltip(box.node),
        )
        for column in layout.columns
        for box in (layout.nodes[node_id] for node_id in column)
    ]
    edges = [_flow_edge(band, margin.left, margin.top, hovered_link, bordered) for band in layout.links]
    return PaintInstructions(
        diagram=DiagramKind.FLOW,
        nodes=nodes,
        edges=edges,
        legend=CRITICALITY_COLORS.legend() + PATTERN_COLORS.legend(),
        viewport=viewport or Viewport(zoom_extent=config.zoom_extent),
        width=config.width,
        height=config.height,
    )


def _flow_edge(band: LinkBand, ox: float, oy: float, hovered_link: str | None, bordered: bool) -> PaintEdge:
    link = band.link
    hovered = band.id == hovered_link
    points = tuple((x + ox, y + oy) for x, y in band.points)
    return PaintEdge(
        id=band.id,
        source=link.source,
        target=link.target,
        style=flow_link_style(
            link.pattern,
            band.stroke_width,
            is_middleware=band.is_middleware,
            hovered=hovered,
            bordered=bordered,
        ),
        points=points,
        path=_cubic_path(points),
        highlight=Highlight.HOVERED if hovered else Highlight.NONE,
        tooltip=flow_link_tooltip(link, band.source.node.name, band.target.node.name),
    )


def network_instructions(
    simulation: ForceSimulation,
    config: ForceConfig,
    *,
    hovered_node: str | None = None,
    hovered_link: str | None = None,
    viewport: Viewport | None = None,
) -> PaintInstructions:
    """Instructions for the force-directed network at its current tick."""
    model = simulation.model
    nodes = []
    for sim_node in simulation.nodes.values():
        node = model.node(sim_node.id)
        hovered = sim_node.id == hovered_node
        nodes.append(
            PaintNode(
                id=sim_node.id,
                x=sim_node.x,
                y=sim_node.y,
                style=network_node_style(
                    node.criticality if node else "",
                    hovered=hovered,
                    radius=config.node_radius,
                    hover_radius=config.hover_radius,
                ),
                label=Label(node.name if node else sim_node.id, dx=15.0),
                tooltip=flow_node_tooltip(node) if node else Tooltip((sim_node.id,)),
                highlight=Highlight.HOVERED if hovered else Highlight.NONE,
            )
        )

    edges = []
    for sim_link in simulation.links:
        link = sim_link.link
        hovered = sim_link.id == hovered_link
        source, target = sim_link.source, sim_link.target
        edges.append(
            PaintEdge(
                id=sim_link.id,
                source=link.source,
                target=link.target,
                style=network_link_style(hovered=hovered),
                points=(source.position, target.position),
                highlight=Highlight.HOVERED if hovered else Highlight.NONE,
                tooltip=network_link_tooltip(link),
                label=Label(
                    link.pattern,
                    dx=(source.x + target.x) / 2,
                    dy=(source.y + target.y) / 2,
                    anchor=Anchor.MIDDLE,
                ),
            )
        )

    return PaintInstructions(
        diagram=DiagramKind.NETWORK,
        nodes=nodes,
        edges=edges,
        legend=CRITICALITY_COLORS.legend(),
        viewport=viewport or Viewport(zoom_extent=config.zoom_extent),
        width=config.width,
        height=config.height,
    )


def _cubic_path(points: Iterable[tuple[float, float]]) -> str:
    (sx, sy), (c1x, c1y), (c2x, c2y), (tx, ty) = points
    return f"M{sx},{sy}C{c1x},{c1y},{c2x},{c2y},{tx},{ty}"
