"""
Stringline projection.

Turns a simulation snapshot sequence into time/distance polylines, one per
train, grouped by route. Used only to feed the read-only stringline chart.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..models.route import Route
from ..models.simulation import SimulationSnapshot, StringlinePoint, Stringlines
from .network_model import NetworkModel

logger = logging.getLogger(__name__)


def project_stringlines(
    snapshots: Iterable[SimulationSnapshot],
    train_to_route: Mapping[str, str],
    cutoff: Optional[float] = None,
    route_filter: Optional[Iterable[str]] = None,
) -> Stringlines:
    """
    Project train trajectories onto (time, distance) polylines.

    Args:
        snapshots: Snapshots in ascending time order
        train_to_route: Train id to route id mapping for the run
        cutoff: Latest time to include, or None for all snapshots
        route_filter: Route ids to include, or None for every route

    Returns:
        Route id to list of per-train polylines, trains in order of first appearance
    """
    allowed = set(route_filter) if route_filter is not None else None
    per_train: Dict[str, List[StringlinePoint]] = {}
    train_route: Dict[str, str] = {}

    for snapshot in snapshots:
        if cutoff is not None and snapshot.time > cutoff:
            continue
        for train in snapshot.trains:
            route_id = train_to_route.get(train.train_id)
            if route_id is None or (allowed is not None and route_id not in allowed):
                continue
            if train.train_id not in per_train:
                per_train[train.train_id] = []
                train_route[train.train_id] = route_id
            per_train[train.train_id].append(
                StringlinePoint(time=snapshot.time, distance=train.total_distance)
            )

    result: Stringlines = {}
    for train_id, points in per_train.items():
        result.setdefault(train_route[train_id], []).append(points)
    return result


def route_station_axis(model: NetworkModel, route: Route) -> List[Tuple[str, float]]:
    """
    Get the distance-axis ticks of a route.

    Each station on the route is placed at the summed weight of the links
    leading to it, matching the distance units of the simulation.

    Returns:
        (station name, cumulative distance) for every station on the route
    """
    ticks: List[Tuple[str, float]] = []
    distance = 0.0
    for index, station_id in enumerate(route.station_ids):
        if index > 0:
            link = model.get_link(route.link_ids[index - 1])
            distance += link.weight if link is not None else 0
        station = model.get_station(station_id)
        ticks.append((station.name if station is not None else station_id, distance))
    return ticks
