"""
Unit tests for the network data models.

Tests Station, Link and Route value objects and their document forms.
"""

import pytest

from metroplan.core.models.station import Station, Position
from metroplan.core.models.link import Link, LinkType, DEFAULT_LINK_WEIGHT
from metroplan.core.models.route import Route, DEFAULT_ROUTE_COLOR
from metroplan.core.models.simulation import TrainState


class TestPosition:
    """Test Position model."""

    def test_lerp_midpoint(self):
        """Test interpolating half way between two positions."""
        assert Position(0, 0).lerp(Position(10, 4), 0.5) == Position(5, 2)

    def test_from_dict_accepts_integers(self):
        """Test positions written with integer coordinates."""
        position = Position.from_dict({"x": 3, "y": -2})

        assert position == Position(3.0, -2.0)
        assert isinstance(position.x, float)


class TestStation:
    """Test Station model."""

    def test_station_defaults_to_origin(self):
        station = Station(id="s1", name="Alpha")

        assert station.position == Position(0, 0)
        assert str(station) == "Alpha"

    def test_station_empty_id_rejected(self):
        with pytest.raises(ValueError):
            Station(id="", name="Nowhere")

    def test_renamed_and_moved_return_copies(self):
        """Test stations are replaced rather than mutated."""
        station = Station(id="s1", name="Alpha")

        renamed = station.renamed("Beta")
        moved = station.moved(Position(1, 2))

        assert station.name == "Alpha"
        assert renamed.name == "Beta"
        assert moved.position == Position(1, 2)
        assert moved.id == "s1"

    def test_document_round_trip(self):
        station = Station(id="s1", name="Alpha", position=Position(1.5, -3))

        data = station.to_dict()

        assert data == {"id": "s1", "name": "Alpha", "position": {"x": 1.5, "y": -3}}
        assert Station.from_dict(data) == station


class TestLink:
    """Test Link model."""

    def test_link_defaults(self):
        link = Link(id="l1", source="a", target="b")

        assert link.weight == DEFAULT_LINK_WEIGHT == 3
        assert link.type is LinkType.TRACK
        assert link.is_track

    @pytest.mark.parametrize("weight", [0, -1, 2.5, True, "3"])
    def test_invalid_weights_rejected(self, weight):
        with pytest.raises(ValueError):
            Link(id="l1", source="a", target="b", weight=weight)

    def test_type_toggle(self):
        assert LinkType.TRACK.toggled() is LinkType.WALK
        assert LinkType.WALK.toggled() is LinkType.TRACK

    def test_touches(self):
        link = Link(id="l1", source="a", target="b")

        assert link.touches("a")
        assert link.touches("b")
        assert not link.touches("c")

    def test_document_form_uses_wire_type(self):
        link = Link(id="l1", source="a", target="b", weight=7, type=LinkType.WALK)

        data = link.to_dict()

        assert data == {"id": "l1", "type": "walk", "source": "a", "target": "b", "weight": 7}
        assert Link.from_dict(data) == link


class TestRoute:
    """Test Route model."""

    def test_new_route_is_empty(self):
        route = Route(id="r1", name="Red")

        assert route.is_empty
        assert route.color == DEFAULT_ROUTE_COLOR
        assert route.offset == 0

    def test_sequences_are_tuples(self):
        route = Route(id="r1", name="Red", station_ids=["a", "b"], link_ids=["ab"])

        assert route.station_ids == ("a", "b")
        assert route.link_ids == ("ab",)

    def test_with_path_keeps_name_and_offset(self):
        route = Route(id="r1", name="Red", offset=4)

        rebuilt = route.with_path(["a", "b"], ["ab"], "#00ff00")

        assert rebuilt.name == "Red"
        assert rebuilt.offset == 4
        assert rebuilt.color == "#00ff00"
        assert rebuilt.station_ids == ("a", "b")

    def test_cleared(self):
        route = Route(id="r1", name="Red", station_ids=("a", "b"), link_ids=("ab",))

        assert route.cleared().is_empty
        assert route.cleared().link_ids == ()

    def test_document_omits_zero_offset(self):
        route = Route(id="r1", name="Red", color="#ff0000", station_ids=("a",))

        assert route.to_dict() == {
            "name": "Red", "id": "r1", "nodes": ["a"], "edges": [], "color": "#ff0000",
        }
        assert route.to_engine_dict()["offset"] == 0

    def test_document_keeps_offset(self):
        route = Route(id="r1", name="Red", offset=2.5)

        assert route.to_dict()["offset"] == 2.5
        assert Route.from_dict(route.to_dict()) == route


class TestTrainState:
    """Test TrainState reverse handling."""

    def test_reverse_suffix(self):
        train = TrainState("0_1", "l4_rev", 1.0, 2.0)

        assert train.is_reversed
        assert train.base_element_id == "l4"
        assert train.total_distance == 3.0

    def test_forward(self):
        train = TrainState("0_1", "l4", 1.0, 0.0)

        assert not train.is_reversed
        assert train.base_element_id == "l4"
