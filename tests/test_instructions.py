"""Tests for palettes, styles and paint instructions."""

from __future__ import annotations

import json

import pytest

from archgraph.config import FlowLayoutConfig, ForceConfig, TreeLayoutConfig
from archgraph.flow import FlowLayoutEngine
from archgraph.force import ForceSimulation
from archgraph.instructions import (
    Anchor,
    DiagramKind,
    Label,
    Tooltip,
    Viewport,
    flow_instructions,
    network_instructions,
    tree_instructions,
    tree_label,
    tree_tooltip,
)
from archgraph.model.types import Highlight
from archgraph.styles import (
    CRITICALITY_COLORS,
    LEVEL_COLORS,
    NEUTRAL,
    PATTERN_COLORS,
    flow_link_style,
    tree_edge_style,
    tree_node_style,
)
from archgraph.tree import TreeLayoutEngine, VisibilityController, apply_search, build_tree, search


# ============================================================
# Palettes and styles
# ============================================================


class TestPalette:
    def test_known_values(self):
        assert CRITICALITY_COLORS.color("Major") == "#ef4444"
        assert PATTERN_COLORS.color("Batch") == "#2ca02c"
        assert LEVEL_COLORS.color("L2") == "#10b981"

    def test_unknown_values_fall_back(self):
        assert CRITICALITY_COLORS.color("Catastrophic") == NEUTRAL
        assert PATTERN_COLORS.color(None) == NEUTRAL
        assert LEVEL_COLORS.color("L9") == "#1f2937"

    def test_colors_read_only(self):
        with pytest.raises(TypeError):
            CRITICALITY_COLORS.colors["Major"] = "#000"

    def test_legend_in_scale_order(self):
        assert [entry.label for entry in CRITICALITY_COLORS.legend()] == [
            "Major",
            "Standard-1",
            "Standard-2",
            "Standard-3",
        ]


class TestStyles:
    def test_plain_tree_node(self):
        style = tree_node_style("L1", expandable=True)
        assert style.fill == "#3b82f6"
        assert style.cursor == "pointer"
        assert style.font_weight == "normal"

    def test_matched_tree_node(self):
        style = tree_node_style("L3", Highlight.MATCHED)
        assert (style.fill, style.stroke, style.stroke_width) == ("#fbbf24", "#f59e0b", 3.0)
        assert style.font_weight == "bold"
        assert style.cursor == "default"

    def test_hover_keeps_search_fill(self):
        style = tree_node_style("L2", Highlight.HOVERED, underlying=Highlight.ON_PATH)
        assert style.fill == "#fb923c"
        assert (style.stroke, style.stroke_width) == ("#1a202c", 3.0)

    def test_hover_plain_node(self):
        style = tree_node_style("L2", Highlight.HOVERED)
        assert style.fill == "#10b981"
        assert style.stroke == "#1a202c"

    def test_tree_edges(self):
        assert tree_edge_style(Highlight.ON_PATH).stroke == "#f59e0b"
        plain = tree_edge_style(Highlight.NONE)
        assert (plain.stroke, plain.stroke_width, plain.stroke_opacity) == ("#cbd5e1", 2.0, 0.6)

    def test_flow_link_opacity(self):
        direct = flow_link_style("API", 10)
        middleware = flow_link_style("API", 10, is_middleware=True)
        hovered = flow_link_style("API", 10, is_middleware=True, hovered=True)

        assert (direct.fill_opacity, direct.stroke_opacity) == (0.6, 0.5)
        assert (middleware.fill_opacity, middleware.stroke_opacity) == (0.4, 0.3)
        assert (hovered.fill_opacity, hovered.stroke_opacity) == (0.8, 0.9)
        assert direct.border is None

    def test_flow_link_border_follows_hover(self):
        plain = flow_link_style("File", 4, bordered=True)
        hovered = flow_link_style("File", 4, bordered=True, hovered=True)

        assert (plain.border.stroke, plain.border.stroke_width, plain.border.stroke_opacity) == ("#2d3748", 6, 0.8)
        assert (hovered.border.stroke, hovered.border.stroke_opacity) == ("#1a202c", 1.0)
        assert plain.to_dict()["border"]["stroke"] == "#2d3748"


# ============================================================
# Small value types
# ============================================================


class TestValueTypes:
    def test_viewport_clamps(self):
        viewport = Viewport(zoom_extent=(0.5, 3.0))
        assert viewport.zoom(10).scale == 3.0
        assert viewport.zoom(0.1).scale == 0.5
        assert viewport.zoom(2, (5, 6)).translate == (5, 6)
        assert viewport.scale == 1.0

    def test_viewport_zoom_keeps_translate(self):
        viewport = Viewport(translate=(3.0, 4.0)).zoom(2)
        assert viewport.translate == (3.0, 4.0)
        assert viewport.to_dict() == {"zoomExtent": [0.5, 3.0], "scale": 2, "translate": [3.0, 4.0]}

    def test_tooltip(self):
        tooltip = Tooltip(("Title", "Line"))
        assert tooltip.title == "Title"
        assert tooltip.text == "Title\nLine"
        assert Tooltip(()).title == ""

    def test_label_dict(self):
        label = Label("Name", dx=12, anchor=Anchor.START)
        assert label.to_dict() == {"text": "Name", "dx": 12, "dy": 0.0, "anchor": "start", "baselineEm": 0.35}

    def test_tree_label_placement(self):
        above = tree_label("A", has_visible_children=True)
        right = tree_label("A", has_visible_children=False)

        assert (above.anchor, above.dy, above.baseline_em) == (Anchor.MIDDLE, -12, -0.5)
        assert (right.anchor, right.dx) == (Anchor.START, 12)


# ============================================================
# Tree instructions
# ============================================================


@pytest.fixture
def tree(capability_records):
    return build_tree(capability_records)


def _tree_paint(tree, *, query=None, hovered_id=None):
    config = TreeLayoutConfig()
    controller = VisibilityController(tree, config.max_visible_depth)
    result = search(tree, query)
    if query:
        apply_search(controller, result)
    layout = TreeLayoutEngine(config).layout(controller.visible_tree())
    return tree_instructions(tree, layout, config, search=result, hovered_id=hovered_id), layout


class TestTreeInstructions:
    def test_screen_coordinates(self, tree):
        paint, layout = _tree_paint(tree)
        positioned = layout.nodes["CUS"]
        node = paint.node("CUS")

        assert paint.diagram is DiagramKind.TREE
        assert node.x == positioned.y + 120
        assert node.y == positioned.x + 20
        root = paint.node("root")
        assert node.previous == (root.x, root.y)

    def test_visible_nodes_and_edges(self, tree):
        paint, _ = _tree_paint(tree)

        assert {n.id for n in paint.nodes} == {"root", "CUS", "ONB", "SUP", "FIN", "BIL"}
        assert paint.edge("root->CUS") is not None
        assert paint.edge("CUS->ONB").path.startswith("M")

    def test_labels_and_expandable(self, tree):
        paint, _ = _tree_paint(tree)

        assert paint.node("CUS").label.anchor is Anchor.MIDDLE
        assert paint.node("ONB").label.anchor is Anchor.START
        assert paint.node("ONB").expandable
        assert not paint.node("SUP").expandable

    def test_legend_without_search(self, tree):
        paint, _ = _tree_paint(tree)
        assert [entry.label for entry in paint.legend] == ["root", "L1", "L2", "L3", "System"]

    def test_search_highlights(self, tree):
        paint, _ = _tree_paint(tree, query="verification")

        assert paint.node("KYC").highlight is Highlight.MATCHED
        assert paint.node("KYC").style.fill == "#fbbf24"
        assert paint.node("ONB").highlight is Highlight.ON_PATH
        assert paint.edge("CUS->ONB").highlight is Highlight.ON_PATH
        assert paint.edge("ONB->KYC").highlight is Highlight.MATCHED
        assert paint.edge("root->FIN").style.stroke == "#cbd5e1"
        assert [entry.label for entry in paint.legend][-2:] == ["Search match", "Path to match"]

    def test_hovered_match(self, tree):
        paint, _ = _tree_paint(tree, query="verification", hovered_id="KYC")
        node = paint.node("KYC")

        assert node.highlight is Highlight.HOVERED
        assert node.style.fill == "#fbbf24"
        assert node.style.stroke == "#1a202c"

    def test_tooltip_with_metadata(self, tree):
        assert tree_tooltip(tree, "KYC").lines == (
            "Identity Verification",
            "Level: L3",
            "Systems: 1",
            "Project: Portal",
            "Architect: R. Tan",
            "Status: approved",
        )

    def test_tooltip_missing_metadata(self):
        tree = build_tree([{"id": "A", "name": "A", "level": "L1", "metadata": {"projectName": "X"}}])
        assert tree_tooltip(tree, "A").lines[-2:] == ("Architect: N/A", "Status: N/A")
        assert tree_tooltip(tree, "root").title == "Business Capabilities"

    def test_serializable(self, tree):
        paint, _ = _tree_paint(tree, query="verification")
        data = json.loads(json.dumps(paint.to_dict()))

        assert data["diagram"] == "tree"
        assert data["transitionMs"] == 300
        assert data["viewport"]["zoomExtent"] == [0.5, 3.0]


# ============================================================
# Flow and network instructions
# ============================================================


class TestFlowInstructions:
    def test_nodes_in_column_order(self, flow_model):
        paint = flow_instructions(FlowLayoutEngine().layout(flow_model), FlowLayoutConfig())

        assert [n.id for n in paint.nodes] == ["S1", "M-P", "S2", "A"]
        assert paint.node("S1").x == 200
        assert paint.node("S1").width == 20
        assert paint.node("S1").style.fill == "#ef4444"

    def test_labels_face_outward(self, flow_model):
        paint = flow_instructions(FlowLayoutEngine().layout(flow_model), FlowLayoutConfig())

        assert (paint.node("S1").label.anchor, paint.node("S1").label.dx) == (Anchor.END, -6.0)
        assert (paint.node("A").label.anchor, paint.node("A").label.dx) == (Anchor.START, 26)

    def test_edges_in_paint_order(self, flow_model):
        paint = flow_instructions(FlowLayoutEngine().layout(flow_model), FlowLayoutConfig())

        assert [e.id for e in paint.edges] == ["S2->A#2", "S1->M-P#0", "M-P->A#1"]
        assert paint.edge("S2->A#2").style.stroke == "#ff7f0e"
        assert paint.edge("S2->A#2").style.fill_opacity == 0.6
        assert paint.edge("S1->M-P#0").style.fill_opacity == 0.4
        assert paint.edge("S1->M-P#0").tooltip.title == "Orders → Message Bus"

    def test_hover_and_border(self, flow_model):
        config = FlowLayoutConfig.bordered()
        paint = flow_instructions(FlowLayoutEngine(config).layout(flow_model), config, hovered_link="S1->M-P#0", bordered=True)
        edge = paint.edge("S1->M-P#0")

        assert edge.highlight is Highlight.HOVERED
        assert edge.style.border.stroke == "#1a202c"
        assert edge.style.border.stroke_width == edge.style.stroke_width + 2
        assert paint.edge("S2->A#2").style.border.stroke == "#2d3748"

    def test_legend(self, flow_model):
        paint = flow_instructions(FlowLayoutEngine().layout(flow_model), FlowLayoutConfig())
        assert len(paint.legend) == 8


class TestNetworkInstructions:
    def test_hover(self, flow_model):
        sim = ForceSimulation(flow_model)
        paint = network_instructions(sim, ForceConfig(), hovered_node="A", hovered_link="M-P->A#1")

        assert paint.diagram is DiagramKind.NETWORK
        assert paint.node("A").style.radius == 15
        assert paint.node("S1").style.radius == 12
        assert paint.node("S1").label.dx == 15
        assert paint.edge("M-P->A#1").style.stroke == "#ef4444"
        assert paint.edge("S1->M-P#0").style.stroke == "#999"

    def test_edge_label_and_tooltip(self, flow_model):
        sim = ForceSimulation(flow_model)
        paint = network_instructions(sim, ForceConfig())
        edge = paint.edge("M-P->A#1")
        (sx, sy), (tx, ty) = edge.points

        assert edge.label.text == "Batch"
        assert edge.label.dx == pytest.approx((sx + tx) / 2)
        assert edge.tooltip.lines[1] == "From: M-P To: A"
        assert edge.tooltip.lines[-1] == "Desc: N/A"
