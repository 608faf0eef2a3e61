"""
Core Services Package

Network model, route building, stringline projection and document
serialization for the network editor.
"""

from .network_model import (
    NetworkModel,
    NetworkModelError,
    ReferentialError,
    SelfLoopError,
    NetworkSnapshot,
)
from .route_builder import AmbiguousRouteError, build_route
from .stringline_projector import project_stringlines, route_station_axis
from .station_statistics import parse_station_statistics, format_station_statistic
from .document_io import DocumentRepository, ValidationError, load_documents

__all__ = [
    'NetworkModel',
    'NetworkModelError',
    'ReferentialError',
    'SelfLoopError',
    'NetworkSnapshot',
    'AmbiguousRouteError',
    'build_route',
    'project_stringlines',
    'route_station_axis',
    'parse_station_statistics',
    'format_station_statistic',
    'DocumentRepository',
    'ValidationError',
    'load_documents',
]
