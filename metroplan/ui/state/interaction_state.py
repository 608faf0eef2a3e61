"""
Interaction State Management for the network editor.

This module owns the editor's interaction mode, the current selection and
the in-progress edit gesture, and translates user input (selections, key
presses, double-clicks, drags) into NetworkModel mutations and engine
requests.
"""

import logging
from enum import Enum
from typing import Callable, List, Optional

from PySide6.QtCore import QObject, Qt, Signal

from ...core.models.link import DEFAULT_LINK_WEIGHT
from ...core.models.route import DEFAULT_ROUTE_COLOR
from ...core.models.station import Position
from ...core.services.network_model import NetworkModel, NetworkModelError, parse_weight
from ...core.services.route_builder import AmbiguousRouteError, build_route
from .edit_gesture import (
    NO_GESTURE,
    EdgeCreateGesture,
    EdgeWeightGesture,
    EditGesture,
    NoGesture,
    StationNameGesture,
)

logger = logging.getLogger(__name__)


class GraphMode(Enum):
    """Editor interaction modes."""

    DISPLAY = "display"
    EDIT = "edit"
    PATH_SELECT = "path_select"
    ROUTE_EDIT = "route_edit"

    @property
    def additive_selection(self) -> bool:
        """Whether selecting an element adds to the selection instead of replacing it."""
        return self in (GraphMode.PATH_SELECT, GraphMode.ROUTE_EDIT)


class InteractionStateMachine(QObject):
    """Mode, selection and gesture state of the editing surface."""

    # Signals
    mode_changed = Signal(object)  # GraphMode
    gesture_changed = Signal(object)  # EditGesture
    selection_changed = Signal(list)  # Ordered element ids
    view_reset_requested = Signal()
    error_reported = Signal(str, str)  # title, message
    status_changed = Signal(str)

    def __init__(self, model: NetworkModel, engine_requests=None,
                 default_link_weight: int = DEFAULT_LINK_WEIGHT, parent=None):
        """
        Initialize interaction state.

        Args:
            model: Network being edited
            engine_requests: EngineRequestHandler used for shortest path and simulation
            default_link_weight: Weight of new links when no weight is entered
        """
        super().__init__(parent)
        self.model = model
        self.engine_requests = engine_requests
        self.default_link_weight = default_link_weight

        # Hooks provided by the view
        self.viewport_center_provider: Callable[[], Position] = Position
        self.weight_prompt: Optional[Callable[[], Optional[str]]] = None

        self._mode = GraphMode.DISPLAY
        self._gesture: EditGesture = NO_GESTURE
        self._selection: List[str] = []
        self._route_id: Optional[str] = None
        self._route_color: str = DEFAULT_ROUTE_COLOR

        self._key_bindings = {
            Qt.Key.Key_Escape: self.cancel_gesture,
            Qt.Key.Key_N: self.new_station,
            Qt.Key.Key_Backspace: self.delete_selected,
            Qt.Key.Key_Delete: self.delete_selected,
            Qt.Key.Key_E: self.start_edge_create,
            Qt.Key.Key_T: self.toggle_link_type,
            Qt.Key.Key_Return: self._commit_for_mode,
            Qt.Key.Key_Enter: self._commit_for_mode,
            Qt.Key.Key_Home: self.reset_view,
        }

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def mode(self) -> GraphMode:
        return self._mode

    @property
    def gesture(self) -> EditGesture:
        return self._gesture

    @property
    def selection(self) -> List[str]:
        """Get the selected element ids in selection order."""
        return self._selection.copy()

    @property
    def route_id(self) -> Optional[str]:
        """Route targeted by route editing."""
        return self._route_id

    @property
    def route_color(self) -> str:
        return self._route_color

    def set_mode(self, mode: GraphMode) -> None:
        """Switch interaction mode, dropping any gesture and selection."""
        if mode == self._mode:
            return
        logger.debug(f"Mode {self._mode.value} -> {mode.value}")
        self._mode = mode
        self._set_gesture(NO_GESTURE)
        self.clear_selection()
        self.mode_changed.emit(mode)

    def _set_gesture(self, gesture: EditGesture) -> None:
        if gesture != self._gesture:
            self._gesture = gesture
            self.gesture_changed.emit(gesture)

    def _set_selection(self, selection: List[str]) -> None:
        if selection != self._selection:
            self._selection = selection
            self.selection_changed.emit(self._selection.copy())

    def _report(self, title: str, message: str) -> None:
        logger.warning(f"{title}: {message}")
        self.error_reported.emit(title, message)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, element_id: str) -> None:
        """
        Handle a user selecting a station or link.

        Depending on mode and gesture this finishes a link, extends a
        multi-selection, or triggers a shortest path request.
        """
        if self._mode == GraphMode.EDIT:
            self._select_while_editing(element_id)
            return

        if not self._mode.additive_selection:
            self._set_selection([element_id])
            return

        if element_id in self._selection:
            return
        self._set_selection(self._selection + [element_id])

        if self._mode == GraphMode.PATH_SELECT and len(self._selection) == 2:
            self._request_shortest_path()

    def _select_while_editing(self, element_id: str) -> None:
        gesture = self._gesture
        if isinstance(gesture, EdgeCreateGesture):
            self._set_gesture(NO_GESTURE)
            if self.model.has_station(element_id):
                self._create_link(gesture.source_id, element_id)
        elif isinstance(gesture, (EdgeWeightGesture, StationNameGesture)):
            # Selecting elsewhere finishes the text edit, like losing focus.
            self.commit_gesture()
        self._set_selection([element_id])

    def deselect(self, element_id: str) -> None:
        if element_id in self._selection:
            self._set_selection([eid for eid in self._selection if eid != element_id])

    def clear_selection(self) -> None:
        self._set_selection([])

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------

    def handle_key(self, key) -> bool:
        """
        Dispatch a key press.

        Args:
            key: Qt.Key (or its integer value)

        Returns:
            True if the key is bound
        """
        try:
            key = Qt.Key(key)
        except ValueError:
            return False
        command = self._key_bindings.get(key)
        if command is None:
            return False
        command()
        return True

    def _commit_for_mode(self) -> None:
        if self._mode == GraphMode.ROUTE_EDIT:
            self.commit_route()
        else:
            self.commit_gesture()

    def reset_view(self) -> None:
        self.view_reset_requested.emit()

    # ------------------------------------------------------------------
    # Edit mode commands
    # ------------------------------------------------------------------

    def _selected_single(self) -> Optional[str]:
        if self._mode != GraphMode.EDIT or len(self._selection) != 1:
            return None
        return self._selection[0]

    def new_station(self) -> Optional[str]:
        """Add a station at the viewport center and select it."""
        if self._mode != GraphMode.EDIT:
            return None
        station_id = self.model.add_station(self.viewport_center_provider())
        self._set_gesture(NO_GESTURE)
        self._set_selection([station_id])
        self.status_changed.emit(f"Added {self.model.get_station(station_id).name}")
        return station_id

    def delete_selected(self) -> None:
        """Delete the selected station (with its links) or link."""
        element_id = self._selected_single()
        if element_id is None:
            return
        if self.model.has_station(element_id):
            self.model.remove_station(element_id)
        elif self.model.has_link(element_id):
            self.model.remove_link(element_id)
        else:
            return
        self._set_gesture(NO_GESTURE)
        self.clear_selection()
        self.status_changed.emit(f"Deleted {element_id}")

    def start_edge_create(self) -> None:
        """Start a new link from the selected station."""
        element_id = self._selected_single()
        if element_id is None or not self.model.has_station(element_id):
            return
        self._set_gesture(EdgeCreateGesture(source_id=element_id))
        self.status_changed.emit("Select the target station")

    def _create_link(self, source_id: str, target_id: str) -> None:
        weight = self.default_link_weight
        if self.weight_prompt is not None:
            weight = parse_weight(self.weight_prompt()) or self.default_link_weight

        try:
            link_id = self.model.add_link(source_id, target_id, weight)
        except NetworkModelError as e:
            self._report("Cannot Create Link", str(e))
            return
        self.status_changed.emit(f"Linked {source_id} to {target_id} ({link_id})")

    def toggle_link_type(self) -> None:
        """Switch the selected link between track and walk."""
        element_id = self._selected_single()
        if element_id is not None and self.model.has_link(element_id):
            self.model.toggle_link_type(element_id)

    def move_selected_station(self, position: Position) -> None:
        """Drag the selected station to a new position."""
        element_id = self._selected_single()
        if element_id is not None:
            self.model.move_station(element_id, position)

    # ------------------------------------------------------------------
    # Text gestures
    # ------------------------------------------------------------------

    def activate(self, element_id: str) -> None:
        """Handle a double-click: start editing a link weight or station name."""
        if self._mode != GraphMode.EDIT:
            return
        link = self.model.get_link(element_id)
        if link is not None:
            self._set_gesture(EdgeWeightGesture(link_id=link.id, text=str(link.weight)))
            return
        station = self.model.get_station(element_id)
        if station is not None:
            self._set_gesture(StationNameGesture(station_id=station.id, text=station.name))

    def update_gesture_text(self, text: str) -> None:
        if isinstance(self._gesture, (EdgeWeightGesture, StationNameGesture)):
            self._set_gesture(self._gesture.with_text(text))

    def commit_gesture(self) -> None:
        """Apply the weight or name being edited and end the gesture."""
        gesture = self._gesture
        if isinstance(gesture, EdgeWeightGesture):
            if not self.model.set_link_weight(gesture.link_id, gesture.text):
                self.status_changed.emit(f"Ignored invalid weight '{gesture.text}'")
        elif isinstance(gesture, StationNameGesture):
            self.model.set_station_name(gesture.station_id, gesture.text)
        elif isinstance(gesture, NoGesture):
            return
        self._set_gesture(NO_GESTURE)

    def cancel_gesture(self) -> None:
        self._set_gesture(NO_GESTURE)

    # ------------------------------------------------------------------
    # Route editing
    # ------------------------------------------------------------------

    def choose_route(self, route_id: Optional[str]) -> None:
        """Pick the route that commit_route rebuilds."""
        if route_id is not None and self.model.get_route(route_id) is None:
            logger.warning(f"Ignoring unknown route {route_id}")
            return
        self._route_id = route_id
        route = self.model.get_route(route_id) if route_id else None
        if route is not None:
            self._route_color = route.color

    def choose_color(self, color: str) -> None:
        self._route_color = color

    def commit_route(self) -> bool:
        """
        Rebuild the chosen route from the selection.

        The selection is cleared whatever the outcome.

        Returns:
            True if the route was replaced
        """
        if self._mode != GraphMode.ROUTE_EDIT or not self._selection:
            return False

        selection = self.selection
        self.clear_selection()

        if self._route_id is None or self.model.get_route(self._route_id) is None:
            self._report("No Route Chosen", "Choose a route before committing a selection.")
            return False

        try:
            route = build_route(self.model, selection, self._route_id, self._route_color)
        except AmbiguousRouteError as e:
            self._report("Ambiguous Route", str(e))
            return False

        self.model.set_route(route)
        self.status_changed.emit(f"Updated {route.name} with {len(route.station_ids)} stations")
        return True

    # ------------------------------------------------------------------
    # Engine requests
    # ------------------------------------------------------------------

    def _request_shortest_path(self) -> None:
        source, target = self._selection
        self.clear_selection()
        if self.engine_requests is None:
            self._report("Shortest Path Failed", "No simulation engine is configured.")
            return
        self.engine_requests.request_shortest_path(
            self.model.engine_graph(), self.model.engine_routes(), source, target
        )
        self.status_changed.emit(f"Finding shortest path from {source} to {target}")

    def run_simulation(self, frequency: int) -> None:
        """Send the whole network to the engine for simulation."""
        self._set_gesture(NO_GESTURE)
        self.clear_selection()
        if self.engine_requests is None:
            self._report("Simulation Failed", "No simulation engine is configured.")
            return
        self.engine_requests.request_simulation(
            self.model.engine_graph(), self.model.engine_routes(), frequency
        )
        self.status_changed.emit(f"Simulating at frequency {frequency}")

    def run_optimization(self) -> None:
        """Send the whole network to the engine for schedule optimization."""
        self._set_gesture(NO_GESTURE)
        self.clear_selection()
        if self.engine_requests is None:
            self._report("Simulation Failed", "No simulation engine is configured.")
            return
        self.engine_requests.request_optimization(
            self.model.engine_graph(), self.model.engine_routes()
        )
        self.status_changed.emit("Optimizing route schedules")
