"""
Station statistics parsing and formatting.

The engine reports, per station, the waiting time between consecutive
train arrivals for each route and, when more than one route calls there,
for all routes combined.
"""

import logging
import math
from typing import Any, Dict, List, Mapping, Optional

from ..models.simulation import ArrivalStatistics, StationStatistic
from .network_model import NetworkModel

logger = logging.getLogger(__name__)


def _parse_wait(value: Any) -> Optional[float]:
    """Parse a wait value; the engine sends null for undefined averages."""
    if value is None:
        return None
    number = float(value)
    return None if math.isnan(number) else number


def parse_arrival_statistics(data: Mapping[str, Any]) -> ArrivalStatistics:
    """Create ArrivalStatistics from an engine payload entry."""
    return ArrivalStatistics(
        min_wait=float(data["min_wait"]),
        max_wait=float(data["max_wait"]),
        average_wait=_parse_wait(data.get("average_wait")),
    )


def parse_station_statistics(data: Mapping[str, Any]) -> Dict[str, StationStatistic]:
    """
    Parse the engine's station statistics mapping.

    Raises:
        KeyError, TypeError, ValueError: If the payload is malformed
    """
    statistics = {}
    for station_id, entry in data.items():
        overall = entry.get("overall_arrival_times")
        statistics[station_id] = StationStatistic(
            station_id=station_id,
            by_route={
                route_id: parse_arrival_statistics(stats)
                for route_id, stats in entry.get("arrival_times", {}).items()
            },
            overall=parse_arrival_statistics(overall) if overall else None,
        )
    return statistics


def _format_stats(stats: ArrivalStatistics) -> str:
    average = f"{stats.average_wait:.1f}" if stats.average_wait is not None else "n/a"
    return f"min {stats.min_wait:.1f}, max {stats.max_wait:.1f}, avg {average}"


def format_station_statistic(model: NetworkModel, statistic: StationStatistic) -> List[str]:
    """
    Format one station's statistics for display.

    Route and station ids are replaced by their display names where known.
    """
    station = model.get_station(statistic.station_id)
    lines = [station.name if station is not None else statistic.station_id]
    for route_id, stats in sorted(statistic.by_route.items()):
        route = model.get_route(route_id)
        route_name = route.name if route is not None else route_id
        lines.append(f"  {route_name}: {_format_stats(stats)}")
    if statistic.overall is not None:
        lines.append(f"  All routes: {_format_stats(statistic.overall)}")
    return lines
