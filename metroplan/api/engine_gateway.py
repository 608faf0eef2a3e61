"""
External engine gateway.

This module handles all communication with the external simulation engine,
including retries, error handling, and response parsing. The engine owns the
shortest-path, simulation and optimization algorithms; this gateway only
moves requests and results across the boundary.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Union

import aiohttp
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..core.interfaces.i_engine_gateway import IEngineGateway
from ..core.models.simulation import (
    ShortestPathResult,
    SimulationResult,
    SimulationSnapshot,
    TrainState,
)
from ..core.services.station_statistics import parse_station_statistics
from ..managers.config_manager import EngineConfig

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Base exception for engine gateway errors."""

    pass


class EngineNetworkError(GatewayError):
    """Exception for network-related errors."""

    pass


class EngineResponseError(GatewayError):
    """Exception for rejected requests and malformed engine responses."""

    pass


class ShortestPathPayload(BaseModel):
    length: float
    path: List[str]


class TrainPositionPayload(BaseModel):
    id: Union[str, List[int]]
    curr_section: str
    pos: float
    distance_travelled: float


class TrainPositionsPayload(BaseModel):
    time: float
    trains: List[TrainPositionPayload]


class SimulationPayload(BaseModel):
    train_positions: List[TrainPositionsPayload]
    train_to_route: Dict[str, str]
    station_statistics: Dict[str, Any] = {}


def normalize_train_id(raw_id: Union[str, List[int]]) -> str:
    """
    Normalize an engine train id.

    The engine identifies trains by a (route index, count) pair in position
    payloads but by "routeindex_count" strings in train_to_route.
    """
    if isinstance(raw_id, str):
        return raw_id
    return "_".join(str(part) for part in raw_id)


def parse_shortest_path(data: Any) -> Optional[ShortestPathResult]:
    """
    Parse a shortest path response.

    Raises:
        EngineResponseError: If the payload is malformed
    """
    if data is None:
        return None
    try:
        payload = ShortestPathPayload.model_validate(data)
    except PydanticValidationError as e:
        raise EngineResponseError(f"Malformed shortest path response: {e}") from e
    return ShortestPathResult(length=payload.length, path=tuple(payload.path))


def parse_simulation_result(data: Any) -> SimulationResult:
    """
    Parse a simulate/optimize response.

    Snapshots are sorted by time so playback always sees ascending order.

    Raises:
        EngineResponseError: If the payload is malformed
    """
    try:
        payload = SimulationPayload.model_validate(data)
        statistics = parse_station_statistics(payload.station_statistics)
    except PydanticValidationError as e:
        raise EngineResponseError(f"Malformed simulation response: {e}") from e
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise EngineResponseError(f"Malformed station statistics: {e}") from e

    snapshots = [
        SimulationSnapshot(
            time=positions.time,
            trains=tuple(
                TrainState(
                    train_id=normalize_train_id(train.id),
                    element_id=train.curr_section,
                    progress=train.pos,
                    distance_travelled=train.distance_travelled,
                )
                for train in positions.trains
            ),
        )
        for positions in payload.train_positions
    ]
    snapshots.sort(key=lambda snapshot: snapshot.time)

    return SimulationResult(
        snapshots=tuple(snapshots),
        train_to_route=dict(payload.train_to_route),
        station_statistics=statistics,
    )


class HttpEngineGateway(IEngineGateway):
    """
    Engine gateway speaking JSON over HTTP.

    Use as an async context manager so the client session is closed:

        async with HttpEngineGateway(config) as gateway:
            result = await gateway.simulate(graph, routes, 10)
    """

    def __init__(self, config: EngineConfig):
        """
        Initialize the gateway.

        Args:
            config: Engine configuration with base URL, timeout and retries
        """
        self.config = config
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry."""
        timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
        self.session = aiohttp.ClientSession(
            timeout=timeout, headers={"User-Agent": "MetroPlan/1.0"}
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.session:
            await self.session.close()
            self.session = None

    async def _post(self, endpoint: str, body: Dict[str, Any]) -> Any:
        """
        POST a request to the engine with retries on network errors.

        Raises:
            EngineNetworkError: If the engine cannot be reached
            EngineResponseError: If the engine rejects the request
        """
        if not self.session:
            raise EngineNetworkError("Session not initialized")

        url = f"{self.config.base_url}/{endpoint}"
        for attempt in range(self.config.max_retries):
            try:
                logger.info(f"Engine request {endpoint} (attempt {attempt + 1}/{self.config.max_retries})")
                async with self.session.post(url, json=body) as response:
                    if response.status == 200:
                        try:
                            return await response.json()
                        except (aiohttp.ContentTypeError, ValueError) as e:
                            raise EngineResponseError(f"Malformed engine response: {e}") from e
                    error_text = await response.text()
                    raise EngineResponseError(f"Engine error {response.status}: {error_text}")

            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                if attempt == self.config.max_retries - 1:
                    raise EngineNetworkError(f"Network error: {str(e) or type(e).__name__}") from e

                wait_time = 2**attempt
                logger.warning(
                    f"Network error on attempt {attempt + 1}, retrying in {wait_time}s: {e}"
                )
                await asyncio.sleep(wait_time)

        raise EngineNetworkError("No attempts made")

    async def shortest_path(self, graph, routes, source, target) -> Optional[ShortestPathResult]:
        data = await self._post("shortest_path", {
            "graph": graph, "routes": routes, "source": source, "target": target,
        })
        return parse_shortest_path(data)

    async def simulate(self, graph, routes, frequency) -> SimulationResult:
        data = await self._post("simulate", {
            "graph": graph, "routes": routes, "frequency": int(frequency),
        })
        result = parse_simulation_result(data)
        logger.info(f"Simulation returned {len(result.snapshots)} snapshots")
        return result

    async def optimize(self, graph, routes) -> SimulationResult:
        data = await self._post("optimize", {"graph": graph, "routes": routes})
        result = parse_simulation_result(data)
        logger.info(f"Optimization returned {len(result.snapshots)} snapshots")
        return result
