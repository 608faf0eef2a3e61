"""
Stringline chart widget.

Read-only time/distance diagram of a simulation run: one polyline per
train, colored by its route, with station ticks along the distance axis
when a single route is shown.
"""

import logging
from typing import Dict, List, Optional, Tuple

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QColor, QPainter, QPen, QPolygonF
from PySide6.QtWidgets import QWidget

from ...core.models.simulation import Stringlines

logger = logging.getLogger(__name__)

MARGIN_LEFT = 90
MARGIN_OTHER = 20
AXIS_COLOR = "#9e9e9e"
BACKGROUND_COLOR = "#1a1a1a"
FALLBACK_LINE_COLOR = "#9e9e9e"


class StringlineChart(QWidget):
    """Paints stringlines produced by the stringline projector."""

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._stringlines: Stringlines = {}
        self._route_colors: Dict[str, str] = {}
        self._axis_ticks: List[Tuple[str, float]] = []
        self.setMinimumHeight(180)

    def set_stringlines(self, stringlines: Stringlines, route_colors: Dict[str, str],
                        axis_ticks: Optional[List[Tuple[str, float]]] = None) -> None:
        """
        Replace the chart contents.

        Args:
            stringlines: Route id to per-train polylines
            route_colors: Route id to line color
            axis_ticks: (station name, distance) labels for the distance axis
        """
        self._stringlines = stringlines
        self._route_colors = dict(route_colors)
        self._axis_ticks = list(axis_ticks or [])
        logger.debug(f"Stringline chart showing {self.line_count()} trains")
        self.update()

    def clear(self) -> None:
        self.set_stringlines({}, {})

    def line_count(self) -> int:
        return sum(len(lines) for lines in self._stringlines.values())

    def _bounds(self) -> Optional[Tuple[float, float, float, float]]:
        points = [point for lines in self._stringlines.values() for line in lines for point in line]
        if not points:
            return None
        distances = [p.distance for p in points] + [distance for _, distance in self._axis_ticks]
        times = [p.time for p in points]
        return min(times), max(times), min(distances), max(distances)

    def paintEvent(self, event):
        """Paint axes, station ticks and train polylines."""
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), QColor(BACKGROUND_COLOR))

        plot = QRectF(self.rect()).adjusted(MARGIN_LEFT, MARGIN_OTHER, -MARGIN_OTHER, -MARGIN_OTHER)
        painter.setPen(QPen(QColor(AXIS_COLOR), 1))
        painter.drawLine(plot.bottomLeft(), plot.bottomRight())
        painter.drawLine(plot.bottomLeft(), plot.topLeft())

        bounds = self._bounds()
        if bounds is None or plot.width() <= 0 or plot.height() <= 0:
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "No simulation data")
            painter.end()
            return

        min_time, max_time, min_distance, max_distance = bounds
        time_span = (max_time - min_time) or 1.0
        distance_span = (max_distance - min_distance) or 1.0

        def to_point(time: float, distance: float) -> QPointF:
            x = plot.left() + (time - min_time) / time_span * plot.width()
            y = plot.bottom() - (distance - min_distance) / distance_span * plot.height()
            return QPointF(x, y)

        for name, distance in self._axis_ticks:
            tick = to_point(min_time, distance)
            painter.setPen(QPen(QColor(AXIS_COLOR), 1, Qt.PenStyle.DotLine))
            painter.drawLine(QPointF(plot.left(), tick.y()), QPointF(plot.right(), tick.y()))
            painter.drawText(QRectF(0, tick.y() - 8, MARGIN_LEFT - 6, 16),
                             Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter, name)

        for route_id, lines in self._stringlines.items():
            painter.setPen(QPen(QColor(self._route_colors.get(route_id, FALLBACK_LINE_COLOR)), 2))
            for line in lines:
                polygon = QPolygonF([to_point(p.time, p.distance) for p in line])
                painter.drawPolyline(polygon)

        painter.end()
