"""
Simulation playback.

Animates a SimulationResult over the network by placing one marker per
train for each snapshot at a fixed tick interval. Starting a new playback
supersedes the running one: every run carries a generation number and
ticks scheduled by an older generation return without drawing.
"""

import logging
from functools import partial
from typing import List, Mapping, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from ...core.models.simulation import SimulationResult, SimulationSnapshot, TrainMarker, TrainState
from ...core.models.station import Position
from ...core.services.network_model import NetworkModel
from ..state.marker_layer import MarkerLayer

logger = logging.getLogger(__name__)

FALLBACK_MARKER_COLOR = "#9e9e9e"


def resolve_train_position(model: NetworkModel, train: TrainState) -> Optional[Position]:
    """
    Work out where a train is drawn.

    A train at a station sits on the station. A train on a link is placed
    progress/weight of the way from source to target, or from target to
    source when it runs the link in reverse.

    Returns:
        The position, or None if the train's element is not in the network
    """
    station = model.get_station(train.element_id)
    if station is not None:
        return station.position

    link = model.get_link(train.base_element_id)
    if link is None:
        return None
    source = model.get_station(link.source)
    target = model.get_station(link.target)
    if source is None or target is None:
        return None

    fraction = min(max(train.progress / link.weight, 0.0), 1.0)
    if train.is_reversed:
        return target.position.lerp(source.position, fraction)
    return source.position.lerp(target.position, fraction)


def frame_markers(model: NetworkModel, snapshot: SimulationSnapshot,
                  train_to_route: Mapping[str, str]) -> List[TrainMarker]:
    """Build the markers for one snapshot, skipping trains that cannot be placed."""
    markers = []
    for train in snapshot.trains:
        position = resolve_train_position(model, train)
        if position is None:
            logger.debug(f"Skipping train {train.train_id} on unknown element {train.element_id}")
            continue

        route_id = train_to_route.get(train.train_id)
        route = model.get_route(route_id) if route_id is not None else None
        color = route.color if route is not None else FALLBACK_MARKER_COLOR
        markers.append(TrainMarker(train.train_id, route_id, position, color))
    return markers


class SimulationPlayback(QObject):
    """Plays simulation snapshots into a MarkerLayer, one per tick."""

    # Signals
    playback_started = Signal(int)  # generation
    frame_rendered = Signal(float)  # simulated time of the drawn snapshot
    playback_finished = Signal(int)  # generation

    def __init__(self, model: NetworkModel, marker_layer: MarkerLayer,
                 tick_interval_ms: int = 200, parent=None):
        """
        Initialize playback.

        Args:
            model: Network used to place trains
            marker_layer: Layer receiving the markers
            tick_interval_ms: Delay between snapshots
        """
        super().__init__(parent)
        self.model = model
        self.marker_layer = marker_layer
        self.tick_interval_ms = tick_interval_ms

        self._generation = 0
        self._result: Optional[SimulationResult] = None
        self._index = 0
        self._running = False

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self, result: SimulationResult) -> int:
        """
        Start playing a simulation result, superseding any running playback.

        Returns:
            The generation of the new run
        """
        self._generation += 1
        self._result = result
        self._index = 0
        self._running = True
        self.marker_layer.clear()

        logger.info(f"Playback {self._generation} started with {len(result.snapshots)} snapshots")
        self.playback_started.emit(self._generation)
        QTimer.singleShot(0, partial(self._on_tick, self._generation))
        return self._generation

    def stop(self) -> None:
        """Supersede the running playback without starting another."""
        if not self._running:
            return
        self._generation += 1
        self._running = False
        self._result = None
        self.marker_layer.clear()
        logger.info("Playback stopped")

    def _on_tick(self, generation: int) -> None:
        if generation != self._generation or self._result is None:
            return

        if self._index >= len(self._result.snapshots):
            self._finish(generation)
            return

        snapshot = self._result.snapshots[self._index]
        self._index += 1
        self.marker_layer.set_markers(
            frame_markers(self.model, snapshot, self._result.train_to_route)
        )
        self.frame_rendered.emit(snapshot.time)
        QTimer.singleShot(self.tick_interval_ms, partial(self._on_tick, generation))

    def _finish(self, generation: int) -> None:
        self._running = False
        self._result = None
        self.marker_layer.clear()
        logger.info(f"Playback {generation} finished")
        self.playback_finished.emit(generation)
