"""
Simulation data models.

This module defines the immutable structures returned by the external
engine: train position snapshots, station arrival statistics and
shortest path results, plus the derived stringline and marker values.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from .station import Position

REVERSE_SUFFIX = "_rev"


@dataclass(frozen=True)
class TrainState:
    """Position of one train at one simulated instant."""

    train_id: str
    element_id: str  # station id, link id, or link id + "_rev"
    progress: float
    distance_travelled: float

    @property
    def is_reversed(self) -> bool:
        """Check if the train runs a walk link against its drawn direction."""
        return self.element_id.endswith(REVERSE_SUFFIX)

    @property
    def base_element_id(self) -> str:
        """Element id with any reverse suffix removed."""
        if self.is_reversed:
            return self.element_id[: -len(REVERSE_SUFFIX)]
        return self.element_id

    @property
    def total_distance(self) -> float:
        """Distance along the current element plus distance already travelled."""
        return self.progress + self.distance_travelled


@dataclass(frozen=True)
class SimulationSnapshot:
    """All train positions at one simulated time."""

    time: float
    trains: Tuple[TrainState, ...] = ()


@dataclass(frozen=True)
class ArrivalStatistics:
    """Summary of waiting times between consecutive arrivals."""

    min_wait: float
    max_wait: float
    average_wait: Optional[float]


@dataclass(frozen=True)
class StationStatistic:
    """Per-route arrival summaries for one station plus an overall aggregate."""

    station_id: str
    by_route: Mapping[str, ArrivalStatistics]
    overall: Optional[ArrivalStatistics] = None


@dataclass(frozen=True)
class SimulationResult:
    """Everything one simulate/optimize call returns."""

    snapshots: Tuple[SimulationSnapshot, ...]
    train_to_route: Mapping[str, str]
    station_statistics: Mapping[str, StationStatistic] = field(default_factory=dict)

    @property
    def duration(self) -> float:
        """Simulated time covered by the snapshots."""
        if not self.snapshots:
            return 0.0
        return self.snapshots[-1].time - self.snapshots[0].time


@dataclass(frozen=True)
class ShortestPathResult:
    """Shortest path between two stations."""

    length: float
    path: Tuple[str, ...]


@dataclass(frozen=True)
class StringlinePoint:
    """One (time, distance) sample of a train trajectory."""

    time: float
    distance: float


@dataclass(frozen=True)
class TrainMarker:
    """Ephemeral playback marker; never stored in the network model."""

    train_id: str
    route_id: Optional[str]
    position: Position
    color: str


Stringlines = Dict[str, List[List[StringlinePoint]]]
