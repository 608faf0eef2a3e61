"""
Core Interfaces Package

Interface definitions for the boundaries of the network editor.
"""

from .i_engine_gateway import IEngineGateway

__all__ = [
    'IEngineGateway',
]
