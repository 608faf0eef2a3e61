"""
Link Model

Directed, weighted connections between stations.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Any

DEFAULT_LINK_WEIGHT = 3


class LinkType(Enum):
    """Enumeration of link kinds."""

    TRACK = "track"
    WALK = "walk"

    def toggled(self) -> "LinkType":
        """Get the other link type."""
        return LinkType.WALK if self is LinkType.TRACK else LinkType.TRACK


@dataclass(frozen=True)
class Link:
    """
    Immutable data class representing a directed link between two stations.

    Walk links are stored one-way; the engine treats them as two-way.
    """

    id: str
    source: str
    target: str
    weight: int = DEFAULT_LINK_WEIGHT
    type: LinkType = LinkType.TRACK

    def __post_init__(self):
        """Validate link data."""
        if not self.id:
            raise ValueError("Link id cannot be empty")
        if isinstance(self.weight, bool) or not isinstance(self.weight, int):
            raise ValueError(f"Link weight must be an integer, got {self.weight!r}")
        if self.weight <= 0:
            raise ValueError(f"Link weight must be positive, got {self.weight}")

    @property
    def is_track(self) -> bool:
        """Check if trains can run on this link."""
        return self.type is LinkType.TRACK

    def touches(self, station_id: str) -> bool:
        """Check if the link starts or ends at the given station."""
        return self.source == station_id or self.target == station_id

    def with_weight(self, weight: int) -> "Link":
        """Return a copy of the link with a new weight."""
        return replace(self, weight=weight)

    def with_type(self, link_type: LinkType) -> "Link":
        """Return a copy of the link with a new type."""
        return replace(self, type=link_type)

    def to_dict(self) -> Dict[str, Any]:
        """Convert link to graph document edge."""
        return {
            "id": self.id,
            "type": self.type.value,
            "source": self.source,
            "target": self.target,
            "weight": self.weight,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Link":
        """Create Link from graph document edge."""
        return cls(
            id=data["id"],
            source=data["source"],
            target=data["target"],
            weight=int(data["weight"]),
            type=LinkType(data["type"]),
        )

    def __repr__(self) -> str:
        """Detailed string representation for debugging."""
        return (f"Link(id='{self.id}', {self.source}->{self.target}, "
                f"weight={self.weight}, type={self.type.value})")
