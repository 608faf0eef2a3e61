"""
Core Models Package

Data models for the network editor and simulation playback.
"""

from .station import Station, Position
from .link import Link, LinkType, DEFAULT_LINK_WEIGHT
from .route import Route, DEFAULT_ROUTE_COLOR
from .simulation import (
    TrainState,
    SimulationSnapshot,
    ArrivalStatistics,
    StationStatistic,
    SimulationResult,
    ShortestPathResult,
    StringlinePoint,
    TrainMarker,
    Stringlines,
)

__all__ = [
    'Station',
    'Position',
    'Link',
    'LinkType',
    'DEFAULT_LINK_WEIGHT',
    'Route',
    'DEFAULT_ROUTE_COLOR',
    'TrainState',
    'SimulationSnapshot',
    'ArrivalStatistics',
    'StationStatistic',
    'SimulationResult',
    'ShortestPathResult',
    'StringlinePoint',
    'TrainMarker',
    'Stringlines',
]
