"""
Unit tests for NetworkModel.

Tests station, link and route mutations and the graph invariants the
model enforces.
"""

import pytest

from metroplan.core.models.link import LinkType
from metroplan.core.models.route import Route
from metroplan.core.models.station import Position
from metroplan.core.services.network_model import (
    NetworkModel,
    ReferentialError,
    SelfLoopError,
    parse_weight,
)


class TestParseWeight:
    """Test user weight parsing."""

    @pytest.mark.parametrize("raw,expected", [
        ("3", 3),
        (" 12 ", 12),
        (7, 7),
        ("0", None),
        ("-4", None),
        ("abc", None),
        ("", None),
        (None, None),
        ("2.5", None),
        (True, None),
    ])
    def test_parse_weight(self, raw, expected):
        assert parse_weight(raw) == expected


class TestStations:
    """Test station mutations."""

    def test_add_station_generates_ids_and_names(self, network_model):
        first = network_model.add_station(Position(1, 2))
        second = network_model.add_station()

        assert first == "s1"
        assert second == "s2"
        assert network_model.get_station(first).name == "Station 1"
        assert network_model.get_station(first).position == Position(1, 2)
        assert network_model.get_station(second).position == Position(0, 0)

    def test_generated_ids_skip_taken_ids(self, network_model):
        network_model.add_station(station_id="s1")

        assert network_model.add_station() == "s2"

    def test_duplicate_explicit_id_rejected(self, network_model):
        network_model.add_station(station_id="A")

        with pytest.raises(ValueError):
            network_model.add_station(station_id="A")

    def test_add_station_emits_network_changed(self, network_model, qtbot):
        with qtbot.waitSignal(network_model.network_changed, timeout=1000):
            network_model.add_station()

    def test_remove_station_cascades_links(self, line_network):
        """Test removing a station leaves no dangling link."""
        assert line_network.remove_station("B")

        assert not line_network.has_station("B")
        assert not line_network.has_link("AB")
        assert not line_network.has_link("BC")
        assert line_network.has_link("CD")
        for link in line_network.links.values():
            assert line_network.has_station(link.source)
            assert line_network.has_station(link.target)

    def test_remove_unknown_station(self, line_network):
        assert not line_network.remove_station("Z")

    def test_remove_station_clears_routes_using_it(self, line_network):
        route = line_network.get_route("red").with_path(["A", "B", "C"], ["AB", "BC"], "#ff0000")
        line_network.set_route(route)

        line_network.remove_station("C")

        assert line_network.get_route("red").is_empty

    def test_rename_station(self, line_network):
        assert line_network.set_station_name("A", "  Aldgate ")
        assert line_network.get_station("A").name == "Aldgate"

    def test_blank_name_rejected(self, line_network):
        assert not line_network.set_station_name("A", "   ")
        assert line_network.get_station("A").name == "Alpha"

    def test_move_station(self, line_network):
        assert line_network.move_station("A", Position(-5, 5))
        assert line_network.get_station("A").position == Position(-5, 5)
        assert not line_network.move_station("Z", Position())

    def test_stations_property_is_a_copy(self, line_network):
        line_network.stations.clear()

        assert len(line_network.stations) == 4


class TestLinks:
    """Test link mutations."""

    def test_add_link(self, line_network):
        link_id = line_network.add_link("A", "C")
        link = line_network.get_link(link_id)

        assert link.source == "A"
        assert link.target == "C"
        assert link.weight == 3
        assert link.type is LinkType.TRACK

    def test_add_link_missing_endpoint(self, line_network):
        with pytest.raises(ReferentialError):
            line_network.add_link("A", "Z")

    def test_self_loop_rejected(self, line_network):
        count = len(line_network.links)

        with pytest.raises(SelfLoopError):
            line_network.add_link("A", "A")

        assert len(line_network.links) == count

    def test_parallel_links_allowed(self, line_network):
        """Test a second link between the same stations is a distinct link."""
        link_id = line_network.add_link("A", "B", 4)

        assert link_id != "AB"
        assert len([l for l in line_network.links.values() if l.source == "A"]) == 2

    def test_invalid_weight_leaves_prior_value(self, line_network):
        assert not line_network.set_link_weight("AB", "zero")
        assert not line_network.set_link_weight("AB", "0")
        assert line_network.get_link("AB").weight == 10

    def test_set_link_weight(self, line_network):
        assert line_network.set_link_weight("AB", "12")
        assert line_network.get_link("AB").weight == 12

    def test_toggle_link_type(self, line_network):
        assert line_network.toggle_link_type("AB")
        assert line_network.get_link("AB").type is LinkType.WALK
        assert line_network.toggle_link_type("AB")
        assert line_network.get_link("AB").type is LinkType.TRACK

    def test_track_to_walk_clears_routes_using_it(self, line_network):
        route = line_network.get_route("red").with_path(["A", "B", "C"], ["AB", "BC"], "#ff0000")
        line_network.set_route(route)

        assert line_network.toggle_link_type("AB")

        assert line_network.get_route("red").is_empty
        assert line_network.engine_routes()["red"]["edges"] == []

    def test_walk_to_track_keeps_routes(self, line_network):
        route = line_network.get_route("red").with_path(["A", "B"], ["AB"], "#ff0000")
        line_network.set_route(route)

        assert line_network.set_link_type("CD", LinkType.TRACK)

        assert line_network.get_route("red").link_ids == ("AB",)

    def test_remove_link_clears_routes_using_it(self, line_network):
        route = line_network.get_route("red").with_path(["A", "B"], ["AB"], "#ff0000")
        line_network.set_route(route)

        assert line_network.remove_link("AB")

        assert line_network.get_route("red").is_empty
        assert line_network.has_station("A")

    def test_incident_links(self, line_network):
        ids = sorted(link.id for link in line_network.incident_links("C"))

        assert ids == ["BC", "CD"]


class TestRoutes:
    """Test route management."""

    def test_add_route_is_empty(self, network_model):
        route_id = network_model.add_route()

        assert route_id == "r1"
        assert network_model.get_route(route_id).is_empty
        assert network_model.get_route(route_id).name == "Route 1"

    def test_duplicate_route_id_rejected(self, line_network):
        with pytest.raises(ValueError):
            line_network.add_route("Other", route_id="red")

        assert line_network.get_route("red").name == "Red Line"

    def test_set_route_with_unknown_member(self, line_network):
        with pytest.raises(ReferentialError):
            line_network.set_route(Route(id="red", name="Red", station_ids=("A", "Z")))

    def test_set_route_emits_routes_changed(self, line_network, qtbot):
        route = line_network.get_route("red").with_path(["A", "B"], ["AB"], "#ff0000")

        with qtbot.waitSignal(line_network.routes_changed, timeout=1000):
            line_network.set_route(route)

    def test_set_route_offset(self, line_network):
        assert line_network.set_route_offset("red", 3)
        assert line_network.engine_routes()["red"]["offset"] == 3

    def test_remove_route(self, line_network):
        assert line_network.remove_route("red")
        assert not line_network.remove_route("red")


class TestExport:
    """Test snapshots and engine request shapes."""

    def test_export_snapshot(self, line_network):
        snapshot = line_network.export_snapshot()

        assert [station.id for station in snapshot.stations] == ["A", "B", "C", "D"]
        assert len(snapshot.links) == 3

    def test_engine_graph(self, line_network):
        graph = line_network.engine_graph()

        assert graph["nodes"] == [{"id": "A"}, {"id": "B"}, {"id": "C"}, {"id": "D"}]
        assert {"id": "CD", "source": "C", "target": "D", "weight": 2, "type": "walk"} in graph["edges"]

    def test_engine_routes_carry_offset(self, line_network):
        routes = line_network.engine_routes()

        assert routes["red"]["offset"] == 0
        assert routes["red"]["name"] == "Red Line"

    def test_summary(self, line_network):
        assert line_network.get_summary() == {
            "stations": 4, "links": 3, "track_links": 2, "routes": 1,
        }
