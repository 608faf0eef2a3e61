"""
Edit gestures for the network editor.

An in-progress edit is exactly one of these variants, each carrying only
the fields it needs.
"""

from dataclasses import dataclass, replace
from typing import Union


@dataclass(frozen=True)
class NoGesture:
    """Nothing in progress."""

    pass


@dataclass(frozen=True)
class EdgeCreateGesture:
    """Waiting for the target station of a new link."""

    source_id: str


@dataclass(frozen=True)
class EdgeWeightGesture:
    """Editing the weight of a link; text is the uncommitted input."""

    link_id: str
    text: str

    def with_text(self, text: str) -> "EdgeWeightGesture":
        return replace(self, text=text)


@dataclass(frozen=True)
class StationNameGesture:
    """Editing the name of a station; text is the uncommitted input."""

    station_id: str
    text: str

    def with_text(self, text: str) -> "StationNameGesture":
        return replace(self, text=text)


EditGesture = Union[NoGesture, EdgeCreateGesture, EdgeWeightGesture, StationNameGesture]

NO_GESTURE = NoGesture()
