"""Tests for payload parsing and GraphModel."""

from __future__ import annotations

import pytest

from archgraph.exceptions import DiagramDataError
from archgraph.model import GraphModel, parse_flow, parse_hierarchy
from archgraph.model.types import FlowData, FlowLink, FlowNode


# ============================================================
# Parsing
# ============================================================


class TestParseHierarchy:
    def test_camel_and_snake_keys(self):
        records = parse_hierarchy(
            [
                {"id": "A", "name": "Alpha", "level": "L1", "parentId": None, "systemCount": "3"},
                {"id": "B", "name": "Beta", "level": "System", "parent_id": "A", "system_code": "SYS"},
            ]
        )

        assert records[0].system_count == 3
        assert records[1].parent_id == "A"
        assert records[1].system_code == "SYS"

    def test_record_without_id_is_skipped(self):
        records = parse_hierarchy([{"name": "no id"}, {"id": "A", "name": "A"}])
        assert [r.id for r in records] == ["A"]

    def test_mapping_with_capabilities_key(self):
        records = parse_hierarchy({"capabilities": [{"id": "A", "name": "A"}]})
        assert [r.id for r in records] == ["A"]

    def test_none_is_empty(self):
        assert parse_hierarchy(None) == []

    def test_wrong_shape_raises(self):
        with pytest.raises(DiagramDataError) as exc_info:
            parse_hierarchy("not a list")
        assert exc_info.value.received == "str"

    def test_root_marker(self):
        records = parse_hierarchy([{"id": "R", "name": "System X", "level": "Root", "parentId": None}])
        assert records[0].is_root_marker


class TestParseFlow:
    def test_value_defaults_to_one(self, flow_payload):
        data = parse_flow(flow_payload)
        assert all(link.value == 1.0 for link in data.links)

    @pytest.mark.parametrize("raw", [None, "abc", 0, -4])
    def test_unusable_value_becomes_one(self, raw):
        data = parse_flow({"nodes": [], "links": [{"source": "a", "target": "b", "value": raw}]})
        assert data.links[0].value == 1.0

    def test_numeric_value_kept(self):
        data = parse_flow({"links": [{"source": "a", "target": "b", "value": "2.5"}]})
        assert data.links[0].value == 2.5

    def test_metadata(self, flow_payload):
        metadata = parse_flow(flow_payload).metadata
        assert metadata.code == "A"
        assert metadata.integration_middleware == ("M-P", "M-C")
        assert metadata.generated_date == "2024-01-01"

    def test_link_endpoints_may_be_node_objects(self):
        data = parse_flow({"links": [{"source": {"id": "a"}, "target": {"id": "b"}}]})
        assert (data.links[0].source, data.links[0].target) == ("a", "b")

    def test_list_payload_raises(self):
        with pytest.raises(DiagramDataError):
            parse_flow([{"id": "a"}])


# ============================================================
# GraphModel
# ============================================================


class TestGraphModel:
    def test_lookups(self, flow_model):
        assert flow_model.node_ids == ["S1", "M-P", "S2", "A"]
        assert flow_model.node("A").name == "Core"
        assert flow_model.node("missing") is None
        assert "S1" in flow_model
        assert len(flow_model) == 4

    def test_adjacency(self, flow_model):
        assert [link.target for link in flow_model.outgoing("M-P")] == ["A"]
        assert [link.source for link in flow_model.incoming("A")] == ["M-P", "S2"]
        assert flow_model.neighbors("M-P") == {"S1", "A"}
        assert flow_model.degree("A") == 2
        assert flow_model.inflow("A") == 2.0

    def test_incident_links_outgoing_first(self, flow_model):
        links = flow_model.incident_links("M-P")
        assert [(link.source, link.target) for link in links] == [("M-P", "A"), ("S1", "M-P")]

    def test_node_types_in_first_appearance_order(self, flow_model):
        assert flow_model.node_types() == ["Producer", "Consumer"]

    def test_duplicate_node_keeps_first(self):
        model = GraphModel(FlowData(nodes=(FlowNode("a", "first"), FlowNode("a", "second"))))
        assert model.node("a").name == "first"
        assert len(model) == 1

    def test_dangling_link_dropped(self):
        model = GraphModel(FlowData(nodes=(FlowNode("a", "A"),), links=(FlowLink("a", "ghost"),)))
        assert model.links == []
        assert len(model.dropped_links) == 1

    def test_parallel_links_kept(self):
        nodes = (FlowNode("a", "A"), FlowNode("b", "B"))
        links = (FlowLink("a", "b", pattern="API"), FlowLink("a", "b", pattern="Batch"))
        model = GraphModel(FlowData(nodes=nodes, links=links))
        assert [link.pattern for link in model.outgoing("a")] == ["API", "Batch"]
        assert model.link_ids == ["a->b#0", "a->b#1"]

    def test_link_ids_unambiguous_with_hyphenated_node_ids(self):
        nodes = (FlowNode("S1", "S1"), FlowNode("S1-M", "S1-M"), FlowNode("M-P", "M-P"), FlowNode("P", "P"))
        links = (FlowLink("S1", "M-P"), FlowLink("S1-M", "P"))
        model = GraphModel(FlowData(nodes=nodes, links=links))

        assert {link.key for link in model.links} == {"S1-M-P"}
        assert model.link_ids == ["S1->M-P#0", "S1-M->P#1"]

    def test_empty(self):
        model = GraphModel.from_payload(None)
        assert model.is_empty
        assert model.links == []

    def test_subset_keeps_metadata(self, flow_model):
        subset = flow_model.subset({"S2", "A"}, [flow_model.links[2]])
        assert subset.node_ids == ["S2", "A"]
        assert subset.metadata is flow_model.metadata
