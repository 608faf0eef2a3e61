"""
Network canvas widget.

Draws stations, links, route colors and playback markers, and forwards
mouse gestures (select, drag, double-click) to the interaction state
machine. The canvas keeps no network state of its own: it redraws from
the NetworkModel and MarkerLayer whenever they change.
"""

import logging
import math
from typing import Dict, Iterable, List, Optional, Set

from PySide6.QtCore import QLineF, QPointF, QRectF, Qt
from PySide6.QtGui import QBrush, QColor, QPainter, QPen, QPolygonF
from PySide6.QtWidgets import QGraphicsItem, QGraphicsScene, QGraphicsView, QWidget

from ...core.models.link import Link
from ...core.models.simulation import TrainMarker
from ...core.models.station import Position
from ...core.services.network_model import NetworkModel
from ..state.interaction_state import GraphMode, InteractionStateMachine
from ..state.marker_layer import MarkerLayer

logger = logging.getLogger(__name__)

ELEMENT_ID_ROLE = 0
STATION_RADIUS = 10.0
ARROW_SIZE = 8.0
ROUTE_SPACING = 4.0

BACKGROUND_COLOR = "#1a1a1a"
STATION_COLOR = "#e0e0e0"
TRACK_COLOR = "#757575"
WALK_COLOR = "#9e9e9e"
SELECTED_COLOR = "#ffb300"
HIGHLIGHT_COLOR = "#43a047"
LABEL_COLOR = "#ffffff"


class NetworkCanvas(QGraphicsView):
    """Interactive view of the rail network."""

    def __init__(self, model: NetworkModel, state: InteractionStateMachine,
                 marker_layer: MarkerLayer, marker_radius: float = 6.0,
                 parent: Optional[QWidget] = None):
        """
        Initialize the canvas.

        Args:
            model: Network to draw
            state: Interaction state receiving gestures
            marker_layer: Playback markers drawn above the network
            marker_radius: Radius of train markers
        """
        super().__init__(parent)
        self.model = model
        self.state = state
        self.marker_layer = marker_layer
        self.marker_radius = marker_radius

        self._scene = QGraphicsScene(self)
        self.setScene(self._scene)
        self._marker_items: List[QGraphicsItem] = []
        self._highlighted: Set[str] = set()
        self._dragging_station: Optional[str] = None

        self._setup_view()
        self._connect_signals()
        self.redraw()

    def _setup_view(self) -> None:
        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setBackgroundBrush(QBrush(QColor(BACKGROUND_COLOR)))
        self.setDragMode(QGraphicsView.DragMode.NoDrag)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setSceneRect(QRectF(-2000, -2000, 4000, 4000))

    def _connect_signals(self) -> None:
        self.model.network_changed.connect(self.redraw)
        self.model.routes_changed.connect(self.redraw)
        self.state.selection_changed.connect(self.redraw)
        self.state.view_reset_requested.connect(self.reset_view)
        self.marker_layer.markers_changed.connect(self._draw_markers)

    # ------------------------------------------------------------------
    # Viewport
    # ------------------------------------------------------------------

    def highlight_path(self, station_ids: Iterable[str]) -> None:
        """Emphasize the stations of a path, such as a shortest path result."""
        self._highlighted = set(station_ids)
        self.redraw()

    def clear_highlight(self) -> None:
        if self._highlighted:
            self._highlighted = set()
            self.redraw()

    def viewport_center(self) -> Position:
        """Scene position at the middle of the visible area."""
        center = self.mapToScene(self.viewport().rect().center())
        return Position(center.x(), center.y())

    def reset_view(self) -> None:
        """Reset zoom and fit the whole network in view."""
        self.resetTransform()
        bounds = self._scene.itemsBoundingRect()
        if not bounds.isEmpty():
            self.fitInView(bounds.adjusted(-40, -40, 40, 40), Qt.AspectRatioMode.KeepAspectRatio)

    def wheelEvent(self, event):
        """Zoom around the cursor."""
        factor = 1.15 if event.angleDelta().y() > 0 else 1 / 1.15
        self.scale(factor, factor)

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def redraw(self) -> None:
        """Rebuild the network items from the model."""
        self._scene.clear()
        self._marker_items = []

        selection = set(self.state.selection)
        route_colors = self._route_colors_by_link()

        for link in self.model.links.values():
            self._draw_link(link, route_colors.get(link.id, []), link.id in selection)
        for station in self.model.stations.values():
            self._draw_station(station.id, station.name, station.position, station.id in selection,
                               station.id in self._highlighted)

        self._draw_markers(self.marker_layer.markers)

    def _route_colors_by_link(self) -> Dict[str, List[str]]:
        colors: Dict[str, List[str]] = {}
        for route in self.model.routes.values():
            for link_id in route.link_ids:
                colors.setdefault(link_id, []).append(route.color)
        return colors

    def _draw_station(self, station_id: str, name: str, position: Position, selected: bool,
                      highlighted: bool = False) -> None:
        pen = QPen(QColor(SELECTED_COLOR if selected else BACKGROUND_COLOR), 3 if selected else 2)
        fill = HIGHLIGHT_COLOR if highlighted else STATION_COLOR
        item = self._scene.addEllipse(
            position.x - STATION_RADIUS, position.y - STATION_RADIUS,
            STATION_RADIUS * 2, STATION_RADIUS * 2,
            pen, QBrush(QColor(fill)),
        )
        item.setData(ELEMENT_ID_ROLE, station_id)
        item.setZValue(2)

        label = self._scene.addSimpleText(name)
        label.setBrush(QBrush(QColor(LABEL_COLOR)))
        label.setPos(position.x + STATION_RADIUS + 2, position.y - STATION_RADIUS - 14)
        label.setData(ELEMENT_ID_ROLE, station_id)
        label.setZValue(2)

    def _draw_link(self, link: Link, route_colors: List[str], selected: bool) -> None:
        source = self.model.get_station(link.source)
        target = self.model.get_station(link.target)
        if source is None or target is None:
            return

        line = QLineF(source.position.x, source.position.y, target.position.x, target.position.y)
        if line.length() == 0:
            return

        base_color = TRACK_COLOR if link.is_track else WALK_COLOR
        pen = QPen(QColor(SELECTED_COLOR if selected else base_color), 4 if selected else 2)
        if not link.is_track:
            pen.setStyle(Qt.PenStyle.DashLine)
        item = self._scene.addLine(line, pen)
        item.setData(ELEMENT_ID_ROLE, link.id)
        item.setZValue(0)

        # Parallel strokes for each route using the link
        normal = line.normalVector().unitVector()
        dx = normal.dx()
        dy = normal.dy()
        for index, color in enumerate(route_colors):
            shift = ROUTE_SPACING * (index + 1)
            route_line = line.translated(QPointF(dx * shift, dy * shift))
            route_item = self._scene.addLine(route_line, QPen(QColor(color), 3))
            route_item.setData(ELEMENT_ID_ROLE, link.id)
            route_item.setZValue(1)

        self._draw_arrow(line, QColor(SELECTED_COLOR if selected else base_color), link.id)

        midpoint = line.pointAt(0.5)
        weight = self._scene.addSimpleText(str(link.weight))
        weight.setBrush(QBrush(QColor(LABEL_COLOR)))
        weight.setPos(midpoint.x() + dx * 10, midpoint.y() + dy * 10)
        weight.setData(ELEMENT_ID_ROLE, link.id)
        weight.setZValue(1)

    def _draw_arrow(self, line: QLineF, color: QColor, link_id: str) -> None:
        # Arrow head sits on the target station's rim
        tip = line.pointAt(max(0.0, 1 - STATION_RADIUS / line.length()))
        angle = math.atan2(line.dy(), line.dx())
        left = QPointF(tip.x() - ARROW_SIZE * math.cos(angle - math.pi / 6),
                       tip.y() - ARROW_SIZE * math.sin(angle - math.pi / 6))
        right = QPointF(tip.x() - ARROW_SIZE * math.cos(angle + math.pi / 6),
                        tip.y() - ARROW_SIZE * math.sin(angle + math.pi / 6))
        arrow = self._scene.addPolygon(QPolygonF([tip, left, right]), QPen(color), QBrush(color))
        arrow.setData(ELEMENT_ID_ROLE, link_id)
        arrow.setZValue(1)

    def _draw_markers(self, markers: List[TrainMarker]) -> None:
        for item in self._marker_items:
            self._scene.removeItem(item)
        self._marker_items = []

        radius = self.marker_radius
        for marker in markers:
            item = self._scene.addEllipse(
                marker.position.x - radius, marker.position.y - radius, radius * 2, radius * 2,
                QPen(QColor(BACKGROUND_COLOR)), QBrush(QColor(marker.color)),
            )
            item.setZValue(3)
            item.setToolTip(marker.train_id)
            self._marker_items.append(item)

    # ------------------------------------------------------------------
    # Mouse gestures
    # ------------------------------------------------------------------

    def element_at(self, pos) -> Optional[str]:
        """Id of the station or link under a viewport position."""
        for item in self.items(pos):
            element_id = item.data(ELEMENT_ID_ROLE)
            if element_id:
                return element_id
        return None

    def mousePressEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return

        element_id = self.element_at(event.position().toPoint())
        if element_id is None:
            if not self.state.mode.additive_selection:
                self.state.clear_selection()
            return

        self.state.select(element_id)
        if self.state.mode == GraphMode.EDIT and self.model.has_station(element_id):
            self._dragging_station = element_id

    def mouseMoveEvent(self, event):
        if self._dragging_station is not None and self.state.selection == [self._dragging_station]:
            scene_pos = self.mapToScene(event.position().toPoint())
            self.state.move_selected_station(Position(scene_pos.x(), scene_pos.y()))
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        self._dragging_station = None
        super().mouseReleaseEvent(event)

    def mouseDoubleClickEvent(self, event):
        element_id = self.element_at(event.position().toPoint())
        if element_id is not None:
            self.state.activate(element_id)
