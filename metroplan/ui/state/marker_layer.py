"""
Marker layer for simulation playback.

Train markers are ephemeral overlay items: they live here rather than in
the NetworkModel, so saving or exporting the network never sees them.
"""

import logging
from typing import Iterable, List

from PySide6.QtCore import QObject, Signal

from ...core.models.simulation import TrainMarker

logger = logging.getLogger(__name__)


class MarkerLayer(QObject):
    """Holds the train markers currently drawn over the network."""

    # Signals
    markers_changed = Signal(list)  # List[TrainMarker]

    def __init__(self, parent=None):
        super().__init__(parent)
        self._markers: List[TrainMarker] = []

    @property
    def markers(self) -> List[TrainMarker]:
        return self._markers.copy()

    def set_markers(self, markers: Iterable[TrainMarker]) -> None:
        """Replace every marker with a new frame."""
        self._markers = list(markers)
        self.markers_changed.emit(self._markers.copy())

    def clear(self) -> None:
        if self._markers:
            self._markers = []
            self.markers_changed.emit([])
