"""
Engine Request Handler for the network editor.

This module issues shortest-path, simulation and optimization requests to
the external engine and routes the results back to the UI.

Overlapping requests are neither queued nor serialized. Every request gets
an issue sequence number per kind, and a result is only delivered if no
newer request of the same kind has already delivered one; results therefore
reach the UI in issue order, and a slow stale answer never overwrites a
fresher one.
"""

import logging
from typing import Any, Dict

from PySide6.QtCore import QObject, Signal

from ...api.engine_gateway import GatewayError, EngineNetworkError, EngineResponseError
from ...core.models.simulation import ShortestPathResult, SimulationResult

logger = logging.getLogger(__name__)

SHORTEST_PATH = "shortest_path"
SIMULATION = "simulation"


class EngineRequestHandler(QObject):
    """Issues engine requests and delivers their results in issue order."""

    # Signals
    shortest_path_found = Signal(object)  # Optional[ShortestPathResult]
    simulation_ready = Signal(object)  # SimulationResult
    request_failed = Signal(str, str)  # title, message
    pending_changed = Signal(int)  # number of requests in flight

    def __init__(self, worker, parent=None):
        """
        Initialize the handler.

        Args:
            worker: EngineWorker (or compatible) that runs gateway operations
        """
        super().__init__(parent)
        self.worker = worker
        self._issued: Dict[str, int] = {SHORTEST_PATH: 0, SIMULATION: 0}
        self._delivered: Dict[str, int] = {SHORTEST_PATH: 0, SIMULATION: 0}
        self._pending = set()

        self.worker.request_completed.connect(self._on_request_completed)
        self.worker.request_failed.connect(self._on_request_failed)

    @property
    def pending_count(self) -> int:
        """Number of requests issued but not yet answered."""
        return len(self._pending)

    def _issue(self, kind: str, operation) -> int:
        self._issued[kind] += 1
        sequence = self._issued[kind]
        self._pending.add((kind, sequence))
        logger.info(f"Issuing engine request {kind}#{sequence}")
        self.worker.submit(kind, sequence, operation)
        self.pending_changed.emit(len(self._pending))
        return sequence

    def request_shortest_path(self, graph: Dict[str, Any], routes: Dict[str, Any],
                              source: str, target: str) -> int:
        """Ask the engine for the shortest path between two stations."""
        return self._issue(
            SHORTEST_PATH,
            lambda gateway: gateway.shortest_path(graph, routes, source, target),
        )

    def request_simulation(self, graph: Dict[str, Any], routes: Dict[str, Any],
                           frequency: int) -> int:
        """Ask the engine to simulate all routes at a fixed frequency."""
        return self._issue(
            SIMULATION,
            lambda gateway: gateway.simulate(graph, routes, frequency),
        )

    def request_optimization(self, graph: Dict[str, Any], routes: Dict[str, Any]) -> int:
        """Ask the engine to optimize route schedules and simulate the result."""
        return self._issue(
            SIMULATION,
            lambda gateway: gateway.optimize(graph, routes),
        )

    def _accept(self, kind: str, sequence: int) -> bool:
        """Mark a request answered and decide whether its outcome is still current."""
        self._pending.discard((kind, sequence))
        self.pending_changed.emit(len(self._pending))
        if sequence < self._delivered.get(kind, 0):
            logger.info(f"Discarding stale {kind}#{sequence} "
                        f"(#{self._delivered[kind]} already delivered)")
            return False
        self._delivered[kind] = sequence
        return True

    def _on_request_completed(self, kind: str, sequence: int, result: Any) -> None:
        if not self._accept(kind, sequence):
            return

        if kind == SHORTEST_PATH:
            if result is not None and not isinstance(result, ShortestPathResult):
                self._report(kind, EngineResponseError(f"Unexpected result {type(result).__name__}"))
                return
            self.shortest_path_found.emit(result)
        elif kind == SIMULATION:
            if not isinstance(result, SimulationResult):
                self._report(kind, EngineResponseError(f"Unexpected result {type(result).__name__}"))
                return
            self.simulation_ready.emit(result)

    def _on_request_failed(self, kind: str, sequence: int, error: Any) -> None:
        if not self._accept(kind, sequence):
            return
        self._report(kind, error)

    def _report(self, kind: str, error: Any) -> None:
        title = "Shortest Path Failed" if kind == SHORTEST_PATH else "Simulation Failed"
        message = self._describe_error(error)
        logger.error(f"{title}: {error}")
        self.request_failed.emit(title, message)

    @staticmethod
    def _describe_error(error: Any) -> str:
        """Turn an engine failure into a user-facing message."""
        if isinstance(error, EngineNetworkError):
            return f"The simulation engine could not be reached. {error}"
        if isinstance(error, EngineResponseError):
            return f"The simulation engine returned an invalid response. {error}"
        if isinstance(error, GatewayError):
            return str(error)
        return f"An unexpected error occurred: {error}"
