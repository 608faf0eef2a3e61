"""
External engine integration for the MetroPlan application.

This module handles communication with the simulation engine, including
retries, error handling, and response parsing.
"""

from .engine_gateway import (
    HttpEngineGateway,
    GatewayError,
    EngineNetworkError,
    EngineResponseError,
)

__all__ = [
    "HttpEngineGateway",
    "GatewayError",
    "EngineNetworkError",
    "EngineResponseError",
]
