"""
Global pytest configuration and fixtures.
"""

import os

# Widgets must be creatable without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from metroplan.core.models.station import Position
from metroplan.core.models.link import LinkType
from metroplan.core.services.network_model import NetworkModel
from metroplan.managers.config_manager import ConfigData, EngineConfig


@pytest.fixture
def network_model(qapp):
    """Provide an empty network model."""
    return NetworkModel()


@pytest.fixture
def line_network(qapp):
    """
    Provide a small network: A -> B -> C on track, plus a walk link C -> D.

    Ids are fixed so tests can refer to them directly.
    """
    model = NetworkModel()
    model.add_station(Position(0, 0), "Alpha", station_id="A")
    model.add_station(Position(10, 0), "Bravo", station_id="B")
    model.add_station(Position(20, 0), "Charlie", station_id="C")
    model.add_station(Position(20, 10), "Delta", station_id="D")
    model.add_link("A", "B", 10, link_id="AB")
    model.add_link("B", "C", 5, link_id="BC")
    model.add_link("C", "D", 2, LinkType.WALK, link_id="CD")
    model.add_route("Red Line", "#ff0000", route_id="red")
    return model


@pytest.fixture
def test_config():
    """Provide a configuration with a fast, local engine."""
    return ConfigData(
        engine=EngineConfig(base_url="http://engine.test:8750/", timeout_seconds=5, max_retries=3)
    )


@pytest.fixture
def simulation_payload():
    """Provide an engine simulation response."""
    return {
        "train_positions": [
            {
                "time": 1.0,
                "trains": [
                    {"id": [0, 1], "curr_section": "BC", "pos": 2.5, "distance_travelled": 10.0},
                ],
            },
            {
                "time": 0.0,
                "trains": [
                    {"id": [0, 1], "curr_section": "AB", "pos": 5.0, "distance_travelled": 0.0},
                ],
            },
        ],
        "train_to_route": {"0_1": "red"},
        "station_statistics": {
            "B": {
                "arrival_times": {"red": {"min_wait": 4.0, "max_wait": 6.0, "average_wait": 5.0}},
                "overall_arrival_times": None,
            },
            "C": {
                "arrival_times": {"red": {"min_wait": 0.0, "max_wait": 0.0, "average_wait": None}},
            },
        },
    }
