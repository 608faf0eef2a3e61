"""
Station Model

Pure data model for the stops drawn on the network canvas.
"""

from dataclasses import dataclass, replace
from typing import Dict, Any


@dataclass(frozen=True)
class Position:
    """Immutable 2-D position in scene coordinates."""

    x: float = 0.0
    y: float = 0.0

    def lerp(self, other: "Position", fraction: float) -> "Position":
        """Linearly interpolate towards another position."""
        return Position(
            self.x + (other.x - self.x) * fraction,
            self.y + (other.y - self.y) * fraction,
        )

    def to_dict(self) -> Dict[str, float]:
        """Convert position to document representation."""
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Position":
        """Create Position from document representation."""
        return cls(x=float(data["x"]), y=float(data["y"]))


@dataclass(frozen=True)
class Station:
    """
    Immutable data class representing a station on the network.

    The network model replaces stored stations instead of mutating them,
    so any Station handed out is a stable snapshot.
    """

    id: str
    name: str
    position: Position = Position()

    def __post_init__(self):
        """Validate station data after initialization."""
        if not self.id:
            raise ValueError("Station id cannot be empty")

    def renamed(self, name: str) -> "Station":
        """Return a copy of the station with a new display name."""
        return replace(self, name=name)

    def moved(self, position: Position) -> "Station":
        """Return a copy of the station at a new position."""
        return replace(self, position=position)

    def to_dict(self) -> Dict[str, Any]:
        """Convert station to graph document node."""
        return {
            "id": self.id,
            "name": self.name,
            "position": self.position.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Station":
        """Create Station from graph document node."""
        return cls(
            id=data["id"],
            name=data["name"],
            position=Position.from_dict(data["position"]),
        )

    def __str__(self) -> str:
        """String representation of the station."""
        return self.name
