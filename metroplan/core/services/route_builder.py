"""
Route Builder

Reconstructs the ordered station and link sequence of a route from an
unordered multi-selection of graph elements.

The selection must describe exactly one simple directed path over track
links. The path start is the only selected station that no selected link
points at; from there the walk follows the single selected outgoing track
link of each station. Anything the walk does not consume (branches,
disconnected pieces, walk links, unknown ids) makes the selection ambiguous.
"""

import logging
from typing import Dict, Iterable, List, Set

from ..models.route import Route
from .network_model import NetworkModel

logger = logging.getLogger(__name__)


class AmbiguousRouteError(Exception):
    """Raised when a selection is not exactly one simple directed path."""

    pass


def build_route(model: NetworkModel, selection: Iterable[str], route_id: str, color: str) -> Route:
    """
    Build the new value of a route from a selection.

    Args:
        model: Network holding the selected elements
        selection: Unordered station and link ids
        route_id: Route to rebuild
        color: Color for the rebuilt route

    Returns:
        The route with its ordered path and color replaced

    Raises:
        AmbiguousRouteError: If the selection is not one simple path
        KeyError: If the route does not exist
    """
    route = model.get_route(route_id)
    if route is None:
        raise KeyError(f"Unknown route: {route_id}")

    station_ids: Set[str] = set()
    links = []
    for element_id in dict.fromkeys(selection):
        if model.has_station(element_id):
            station_ids.add(element_id)
        elif model.has_link(element_id):
            links.append(model.get_link(element_id))
        else:
            raise AmbiguousRouteError(f"Selection contains unknown element {element_id}")

    destinations = {link.target for link in links}
    starts = sorted(station_ids - destinations)
    if len(starts) != 1:
        raise AmbiguousRouteError(
            f"Route must have exactly one start station, found {len(starts)}: {starts}"
        )

    outgoing: Dict[str, str] = {}
    for link in links:
        if not link.is_track:
            continue
        if link.source in outgoing:
            raise AmbiguousRouteError(f"Station {link.source} branches in the selection")
        outgoing[link.source] = link.id

    ordered_stations: List[str] = []
    ordered_links: List[str] = []
    visited: Set[str] = set()
    current = starts[0]
    while True:
        if current in visited or current not in station_ids:
            raise AmbiguousRouteError(f"Route walk cannot continue at station {current}")
        visited.add(current)
        ordered_stations.append(current)

        link_id = outgoing.get(current)
        if link_id is None:
            break
        ordered_links.append(link_id)
        current = model.get_link(link_id).target

    if len(ordered_stations) != len(station_ids) or len(ordered_links) != len(links):
        raise AmbiguousRouteError(
            f"Route walk used {len(ordered_stations)}/{len(station_ids)} stations "
            f"and {len(ordered_links)}/{len(links)} links"
        )

    logger.debug(f"Built route {route_id}: {' -> '.join(ordered_stations)}")
    return route.with_path(ordered_stations, ordered_links, color)
