"""
Engine Gateway Interface

Request/response boundary to the external engine that computes shortest
paths, runs train simulations and optimizes route schedules.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..models.simulation import ShortestPathResult, SimulationResult


class IEngineGateway(ABC):
    """Interface for external engine operations."""

    @abstractmethod
    async def shortest_path(self, graph: Dict[str, Any], routes: Dict[str, Any],
                            source: str, target: str) -> Optional[ShortestPathResult]:
        """
        Find the shortest path between two stations.

        Args:
            graph: Engine graph ({nodes: [{id}], edges: [{id, source, target, weight, type}]})
            routes: Routes keyed by id, each with an offset
            source: Start station id
            target: End station id

        Returns:
            ShortestPathResult, or None if the target is unreachable
        """
        pass

    @abstractmethod
    async def simulate(self, graph: Dict[str, Any], routes: Dict[str, Any],
                       frequency: int) -> SimulationResult:
        """
        Simulate trains running every route at the given frequency.

        Returns:
            SimulationResult with snapshots in ascending time order
        """
        pass

    @abstractmethod
    async def optimize(self, graph: Dict[str, Any], routes: Dict[str, Any]) -> SimulationResult:
        """
        Let the engine choose frequencies and offsets, then simulate.

        Returns:
            SimulationResult for the optimized schedule
        """
        pass
