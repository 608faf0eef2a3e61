"""
Network Model

In-memory graph of stations, links and routes.

The model owns every Station, Link and Route keyed by id and enforces the
graph invariants: links always reference existing stations, links never
loop back onto their source, and routes only reference existing elements.
All mutation happens on the UI thread; listeners are notified through Qt
signals after each change.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from PySide6.QtCore import QObject, Signal

from ..models.station import Station, Position
from ..models.link import Link, LinkType, DEFAULT_LINK_WEIGHT
from ..models.route import Route, DEFAULT_ROUTE_COLOR

logger = logging.getLogger(__name__)


class NetworkModelError(Exception):
    """Base exception for rejected network mutations."""

    pass


class ReferentialError(NetworkModelError):
    """Raised when a mutation references a station or link that does not exist."""

    pass


class SelfLoopError(NetworkModelError):
    """Raised when a link would start and end at the same station."""

    pass


@dataclass(frozen=True)
class NetworkSnapshot:
    """Immutable copy of the drawn network, used for engine requests and save."""

    stations: Tuple[Station, ...]
    links: Tuple[Link, ...]


def parse_weight(raw) -> Optional[int]:
    """
    Parse a user supplied link weight.

    Args:
        raw: Text or number entered by the user

    Returns:
        Positive integer weight, or None if the input is unusable
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw > 0 else None
    try:
        weight = int(str(raw).strip())
    except (TypeError, ValueError):
        return None
    return weight if weight > 0 else None


class NetworkModel(QObject):
    """Owns stations, links and routes and keeps them consistent."""

    # Signals
    network_changed = Signal()  # Stations or links changed
    routes_changed = Signal()  # Route collection or a route path changed

    def __init__(self, parent=None):
        """Initialize an empty network."""
        super().__init__(parent)
        self._stations: Dict[str, Station] = {}
        self._links: Dict[str, Link] = {}
        self._routes: Dict[str, Route] = {}
        self._id_counters = {
            "s": itertools.count(1),
            "l": itertools.count(1),
            "r": itertools.count(1),
        }
        self._station_names = itertools.count(1)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def stations(self) -> Dict[str, Station]:
        """Get a copy of the station mapping."""
        return dict(self._stations)

    @property
    def links(self) -> Dict[str, Link]:
        """Get a copy of the link mapping."""
        return dict(self._links)

    @property
    def routes(self) -> Dict[str, Route]:
        """Get a copy of the route mapping."""
        return dict(self._routes)

    def get_station(self, station_id: str) -> Optional[Station]:
        return self._stations.get(station_id)

    def get_link(self, link_id: str) -> Optional[Link]:
        return self._links.get(link_id)

    def get_route(self, route_id: str) -> Optional[Route]:
        return self._routes.get(route_id)

    def has_station(self, station_id: str) -> bool:
        return station_id in self._stations

    def has_link(self, link_id: str) -> bool:
        return link_id in self._links

    def incident_links(self, station_id: str) -> List[Link]:
        """Get every link that starts or ends at the station."""
        return [link for link in self._links.values() if link.touches(station_id)]

    # ------------------------------------------------------------------
    # Stations
    # ------------------------------------------------------------------

    def _next_id(self, prefix: str, taken: Dict) -> str:
        """Generate an id that is not already in use."""
        while True:
            candidate = f"{prefix}{next(self._id_counters[prefix])}"
            if candidate not in taken:
                return candidate

    def add_station(self, position: Optional[Position] = None, name: Optional[str] = None,
                    station_id: Optional[str] = None) -> str:
        """
        Add a new station.

        Args:
            position: Scene position, defaults to the origin
            name: Display name, defaults to "Station <n>"
            station_id: Explicit id, generated when omitted

        Returns:
            Id of the new station
        """
        if station_id is None:
            station_id = self._next_id("s", self._stations)
        elif station_id in self._stations:
            raise ValueError(f"Station id already in use: {station_id}")

        if name is None:
            name = f"Station {next(self._station_names)}"

        station = Station(id=station_id, name=name, position=position or Position())
        self._stations[station_id] = station
        logger.debug(f"Station added: {station_id} '{name}' at {station.position}")
        self.network_changed.emit()
        return station_id

    def remove_station(self, station_id: str) -> bool:
        """
        Remove a station and every link incident to it.

        Returns:
            True if the station existed
        """
        if station_id not in self._stations:
            return False

        removed_links = [link.id for link in self.incident_links(station_id)]
        for link_id in removed_links:
            del self._links[link_id]
        del self._stations[station_id]

        logger.debug(f"Station removed: {station_id} (cascaded {len(removed_links)} links)")
        self._clear_routes_touching({station_id}, set(removed_links))
        self.network_changed.emit()
        return True

    def set_station_name(self, station_id: str, name: str) -> bool:
        """Rename a station. Returns False for unknown stations or blank names."""
        station = self._stations.get(station_id)
        if station is None or not name or not name.strip():
            return False
        self._stations[station_id] = station.renamed(name.strip())
        logger.debug(f"Station renamed: {station_id} -> '{name.strip()}'")
        self.network_changed.emit()
        return True

    def move_station(self, station_id: str, position: Position) -> bool:
        """Move a station. Returns False for unknown stations."""
        station = self._stations.get(station_id)
        if station is None:
            return False
        self._stations[station_id] = station.moved(position)
        self.network_changed.emit()
        return True

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    def add_link(self, source: str, target: str, weight: int = DEFAULT_LINK_WEIGHT,
                 link_type: LinkType = LinkType.TRACK, link_id: Optional[str] = None) -> str:
        """
        Add a directed link between two existing stations.

        Raises:
            ReferentialError: If either endpoint does not exist
            SelfLoopError: If source and target are the same station
            ValueError: If the weight is not a positive integer
        """
        missing = [sid for sid in (source, target) if sid not in self._stations]
        if missing:
            raise ReferentialError(f"Link endpoint(s) not found: {', '.join(missing)}")
        if source == target:
            raise SelfLoopError(f"Link cannot start and end at {source}")

        if link_id is None:
            link_id = self._next_id("l", self._links)
        elif link_id in self._links:
            raise ValueError(f"Link id already in use: {link_id}")

        link = Link(id=link_id, source=source, target=target, weight=weight, type=link_type)
        self._links[link_id] = link
        logger.debug(f"Link added: {link!r}")
        self.network_changed.emit()
        return link_id

    def remove_link(self, link_id: str) -> bool:
        """Remove a link. Returns True if it existed."""
        if link_id not in self._links:
            return False
        del self._links[link_id]
        logger.debug(f"Link removed: {link_id}")
        self._clear_routes_touching(set(), {link_id})
        self.network_changed.emit()
        return True

    def set_link_weight(self, link_id: str, raw_weight) -> bool:
        """
        Set a link weight from user input.

        An unparsable or non-positive weight leaves the prior value unchanged.

        Returns:
            True if the weight was updated
        """
        link = self._links.get(link_id)
        weight = parse_weight(raw_weight)
        if link is None or weight is None:
            logger.debug(f"Ignoring weight {raw_weight!r} for link {link_id}")
            return False
        self._links[link_id] = link.with_weight(weight)
        self.network_changed.emit()
        return True

    def set_link_type(self, link_id: str, link_type: LinkType) -> bool:
        """
        Set a link type. Returns False for unknown links.

        Routes only run over track links, so turning a track link into a walk
        link clears every route that uses it.
        """
        link = self._links.get(link_id)
        if link is None:
            return False
        self._links[link_id] = link.with_type(link_type)
        if link.is_track and link_type != LinkType.TRACK:
            self._clear_routes_touching(set(), {link_id})
        self.network_changed.emit()
        return True

    def toggle_link_type(self, link_id: str) -> bool:
        """Switch a link between track and walk."""
        link = self._links.get(link_id)
        if link is None:
            return False
        return self.set_link_type(link_id, link.type.toggled())

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    def add_route(self, name: Optional[str] = None, color: str = DEFAULT_ROUTE_COLOR,
                  route_id: Optional[str] = None) -> str:
        """Create an empty route and return its id."""
        if route_id is None:
            route_id = self._next_id("r", self._routes)
        elif route_id in self._routes:
            raise ValueError(f"Route id already in use: {route_id}")
        if name is None:
            name = f"Route {len(self._routes) + 1}"
        self._routes[route_id] = Route(id=route_id, name=name, color=color)
        logger.debug(f"Route added: {route_id} '{name}'")
        self.routes_changed.emit()
        return route_id

    def set_route(self, route: Route) -> None:
        """
        Replace a route entry.

        Raises:
            ReferentialError: If the route references unknown stations or links
        """
        unknown = [sid for sid in route.station_ids if sid not in self._stations]
        unknown += [lid for lid in route.link_ids if lid not in self._links]
        if unknown:
            raise ReferentialError(f"Route {route.id} references unknown elements: {unknown}")
        self._routes[route.id] = route
        logger.debug(f"Route updated: {route.id} with {len(route.station_ids)} stations")
        self.routes_changed.emit()

    def remove_route(self, route_id: str) -> bool:
        """Remove a route. Returns True if it existed."""
        if self._routes.pop(route_id, None) is None:
            return False
        self.routes_changed.emit()
        return True

    def set_route_offset(self, route_id: str, offset: float) -> bool:
        """Set the schedule offset sent to the engine for a route."""
        route = self._routes.get(route_id)
        if route is None:
            return False
        self._routes[route_id] = route.with_offset(offset)
        self.routes_changed.emit()
        return True

    def _clear_routes_touching(self, station_ids: set, link_ids: set) -> None:
        """Empty any route whose path uses a removed or retyped element."""
        cleared = []
        for route_id, route in self._routes.items():
            if station_ids.intersection(route.station_ids) or link_ids.intersection(route.link_ids):
                self._routes[route_id] = route.cleared()
                cleared.append(route_id)
        if cleared:
            logger.info(f"Cleared routes broken by edit: {cleared}")
            self.routes_changed.emit()

    # ------------------------------------------------------------------
    # Export / import
    # ------------------------------------------------------------------

    def export_snapshot(self) -> NetworkSnapshot:
        """Get an immutable copy of all stations and links."""
        return NetworkSnapshot(
            stations=tuple(self._stations.values()),
            links=tuple(self._links.values()),
        )

    def engine_graph(self) -> dict:
        """Get the graph in the shape the external engine expects."""
        snapshot = self.export_snapshot()
        return {
            "nodes": [{"id": station.id} for station in snapshot.stations],
            "edges": [
                {
                    "id": link.id,
                    "source": link.source,
                    "target": link.target,
                    "weight": link.weight,
                    "type": link.type.value,
                }
                for link in snapshot.links
            ],
        }

    def engine_routes(self) -> dict:
        """Get the routes, each with its offset, in the engine request shape."""
        return {route_id: route.to_engine_dict() for route_id, route in self._routes.items()}

    def replace_contents(self, stations: Iterable[Station], links: Iterable[Link],
                         routes: Iterable[Route] = ()) -> None:
        """Replace the whole network, typically after a document load."""
        self._stations = {station.id: station for station in stations}
        self._links = {link.id: link for link in links}
        self._routes = {route.id: route for route in routes}
        logger.info(f"Network replaced: {len(self._stations)} stations, "
                    f"{len(self._links)} links, {len(self._routes)} routes")
        self.network_changed.emit()
        self.routes_changed.emit()

    def get_summary(self) -> dict:
        """Get a summary of the network for status display."""
        return {
            "stations": len(self._stations),
            "links": len(self._links),
            "track_links": sum(1 for link in self._links.values() if link.is_track),
            "routes": len(self._routes),
        }
