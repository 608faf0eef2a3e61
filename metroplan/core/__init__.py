"""
Core Package

Models, interfaces and services of the network editor. Nothing in here
depends on widgets.
"""

# Import interfaces
from .interfaces import IEngineGateway

# Import models
from .models import Station, Position, Link, LinkType, Route

# Import services
from .services import NetworkModel, AmbiguousRouteError, build_route

__all__ = [
    # Interfaces
    'IEngineGateway',

    # Models
    'Station',
    'Position',
    'Link',
    'LinkType',
    'Route',

    # Services
    'NetworkModel',
    'AmbiguousRouteError',
    'build_route',
]
