"""
Route Model

Data model for a named service pattern through the network.
"""

from dataclasses import dataclass, replace
from typing import Tuple, Dict, Any

DEFAULT_ROUTE_COLOR = "#1976d2"


@dataclass(frozen=True)
class Route:
    """
    A named, colored, ordered path through stations and links.

    station_ids and link_ids describe one simple directed path:
    link_ids[i] runs from station_ids[i] to station_ids[i + 1].
    An empty route has no stations and no links.
    """

    id: str
    name: str
    color: str = DEFAULT_ROUTE_COLOR
    station_ids: Tuple[str, ...] = ()
    link_ids: Tuple[str, ...] = ()
    offset: float = 0

    def __post_init__(self):
        """Normalize sequences to tuples."""
        if not self.id:
            raise ValueError("Route id cannot be empty")
        object.__setattr__(self, "station_ids", tuple(self.station_ids))
        object.__setattr__(self, "link_ids", tuple(self.link_ids))

    @property
    def is_empty(self) -> bool:
        """Check if the route has no path yet."""
        return not self.station_ids

    def with_path(self, station_ids, link_ids, color: str) -> "Route":
        """Return a copy of the route with a new path and color."""
        return replace(self, station_ids=tuple(station_ids),
                       link_ids=tuple(link_ids), color=color)

    def cleared(self) -> "Route":
        """Return a copy of the route with its path removed."""
        return replace(self, station_ids=(), link_ids=())

    def with_offset(self, offset: float) -> "Route":
        """Return a copy of the route with a new schedule offset."""
        return replace(self, offset=offset)

    def to_dict(self) -> Dict[str, Any]:
        """Convert route to routes document entry."""
        data = {
            "name": self.name,
            "id": self.id,
            "nodes": list(self.station_ids),
            "edges": list(self.link_ids),
            "color": self.color,
        }
        if self.offset:
            data["offset"] = self.offset
        return data

    def to_engine_dict(self) -> Dict[str, Any]:
        """Convert route to the engine request shape (always carries an offset)."""
        data = self.to_dict()
        data["offset"] = self.offset
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Route":
        """Create Route from routes document entry."""
        return cls(
            id=data["id"],
            name=data["name"],
            color=data.get("color", DEFAULT_ROUTE_COLOR),
            station_ids=tuple(data.get("nodes", ())),
            link_ids=tuple(data.get("edges", ())),
            offset=data.get("offset", 0),
        )

    def __str__(self) -> str:
        """String representation of the route."""
        return f"{self.name} ({len(self.station_ids)} stations)"
