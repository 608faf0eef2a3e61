"""
Unit tests for graph and routes documents.

Tests serialization, validation and the file repository with real file
operations.
"""

import json

import pytest

from metroplan.core.models.link import LinkType
from metroplan.core.services.document_io import (
    DocumentRepository,
    ValidationError,
    graph_document,
    load_documents,
    parse_graph_document,
    routes_document,
)
from metroplan.core.services.network_model import NetworkModel


@pytest.fixture
def routed_network(line_network):
    route = line_network.get_route("red").with_path(["A", "B", "C"], ["AB", "BC"], "#ff0000")
    line_network.set_route(route)
    line_network.set_route_offset("red", 2)
    return line_network


class TestSerialization:
    """Test document shapes."""

    def test_graph_document_shape(self, line_network):
        document = graph_document(line_network)

        assert document["nodes"][0] == {"id": "A", "name": "Alpha", "position": {"x": 0.0, "y": 0.0}}
        assert {"id": "CD", "type": "walk", "source": "C", "target": "D", "weight": 2} in document["edges"]

    def test_routes_document_shape(self, routed_network):
        document = routes_document(routed_network)

        assert document == {
            "red": {
                "name": "Red Line",
                "id": "red",
                "nodes": ["A", "B", "C"],
                "edges": ["AB", "BC"],
                "color": "#ff0000",
                "offset": 2,
            },
        }

    def test_round_trip(self, routed_network, qapp):
        """Test export then import reproduces stations, links and routes."""
        graph = json.loads(json.dumps(graph_document(routed_network)))
        routes = json.loads(json.dumps(routes_document(routed_network)))

        restored = NetworkModel()
        load_documents(restored, graph, routes)

        assert restored.stations == routed_network.stations
        assert restored.links == routed_network.links
        assert restored.routes == routed_network.routes


class TestValidation:
    """Test rejection of malformed documents."""

    def test_unnamed_nodes_dropped(self):
        stations, links = parse_graph_document({
            "nodes": [
                {"id": "A", "name": "Alpha", "position": {"x": 0, "y": 0}},
                {"id": "B", "position": {"x": 1, "y": 1}},
                {"id": "C", "name": 42, "position": {"x": 2, "y": 2}},
            ],
            "edges": [],
        })

        assert [station.id for station in stations] == ["A"]
        assert links == []

    def test_edge_to_dropped_node_rejected(self):
        with pytest.raises(ValidationError):
            parse_graph_document({
                "nodes": [
                    {"id": "A", "name": "Alpha", "position": {"x": 0, "y": 0}},
                    {"id": "B", "position": {"x": 1, "y": 1}},
                ],
                "edges": [{"id": "AB", "type": "track", "source": "A", "target": "B", "weight": 3}],
            })

    @pytest.mark.parametrize("edge", [
        {"id": "AB", "type": "tram", "source": "A", "target": "B", "weight": 3},
        {"id": "AB", "type": "track", "source": "A", "target": "B", "weight": 0},
        {"id": "AB", "type": "track", "source": "A", "target": "B"},
        {"id": "AA", "type": "track", "source": "A", "target": "A", "weight": 3},
    ])
    def test_invalid_edges(self, edge):
        with pytest.raises(ValidationError):
            parse_graph_document({
                "nodes": [
                    {"id": "A", "name": "Alpha", "position": {"x": 0, "y": 0}},
                    {"id": "B", "name": "Bravo", "position": {"x": 1, "y": 0}},
                ],
                "edges": [edge],
            })

    def test_not_a_document(self):
        with pytest.raises(ValidationError):
            parse_graph_document(["nodes"])

    def test_parsed_link_type(self):
        _, links = parse_graph_document({
            "nodes": [
                {"id": "A", "name": "Alpha", "position": {"x": 0, "y": 0}},
                {"id": "B", "name": "Bravo", "position": {"x": 1, "y": 0}},
            ],
            "edges": [{"id": "AB", "type": "walk", "source": "A", "target": "B", "weight": 4}],
        })

        assert links[0].type is LinkType.WALK

    def test_route_with_unknown_member_keeps_prior_state(self, line_network):
        graph = graph_document(line_network)
        routes = {"blue": {"name": "Blue", "id": "blue", "nodes": ["A", "Z"], "edges": [], "color": "#00f"}}

        with pytest.raises(ValidationError):
            load_documents(line_network, graph, routes)

        assert set(line_network.routes) == {"red"}

    def test_route_key_mismatch(self, line_network):
        routes = {"blue": {"name": "Blue", "id": "green", "nodes": [], "edges": [], "color": "#00f"}}

        with pytest.raises(ValidationError):
            load_documents(line_network, graph_document(line_network), routes)


class TestDocumentRepository:
    """Test file persistence."""

    def test_save_and_load(self, routed_network, tmp_path, qapp):
        graph_path = tmp_path / "graph.json"
        routes_path = tmp_path / "routes.json"
        DocumentRepository(routed_network).save(graph_path, routes_path)

        restored = NetworkModel()
        DocumentRepository(restored).load(graph_path, routes_path)

        assert restored.stations == routed_network.stations
        assert restored.routes["red"].link_ids == ("AB", "BC")

    def test_invalid_json(self, tmp_path, line_network):
        graph_path = tmp_path / "graph.json"
        graph_path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ValidationError):
            DocumentRepository(line_network).load(graph_path)

        assert len(line_network.stations) == 4

    def test_missing_file(self, tmp_path, line_network):
        with pytest.raises(ValidationError):
            DocumentRepository(line_network).load(tmp_path / "missing.json")
