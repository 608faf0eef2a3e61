"""
Station statistics panel.

Lists arrival-wait statistics from the last simulation, either for the
selected station or for every station.
"""

import logging
from typing import Mapping, Optional

from PySide6.QtWidgets import QLabel, QPlainTextEdit, QVBoxLayout, QWidget

from ...core.models.simulation import StationStatistic
from ...core.services.network_model import NetworkModel
from ...core.services.station_statistics import format_station_statistic

logger = logging.getLogger(__name__)


class StatisticsPanel(QWidget):
    """Read-only text view of station arrival statistics."""

    def __init__(self, model: NetworkModel, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.model = model
        self._statistics: Mapping[str, StationStatistic] = {}
        self._station_id: Optional[str] = None

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(QLabel("Station statistics"))
        self.text_view = QPlainTextEdit()
        self.text_view.setReadOnly(True)
        layout.addWidget(self.text_view)

        self._refresh()

    def set_statistics(self, statistics: Mapping[str, StationStatistic]) -> None:
        self._statistics = statistics
        self._refresh()

    def show_station(self, station_id: Optional[str]) -> None:
        """Limit the panel to one station, or show all stations with None."""
        self._station_id = station_id if station_id in self._statistics else None
        self._refresh()

    def text(self) -> str:
        return self.text_view.toPlainText()

    def _refresh(self) -> None:
        if not self._statistics:
            self.text_view.setPlainText("Run a simulation to see station statistics.")
            return

        if self._station_id is not None:
            selected = [self._statistics[self._station_id]]
        else:
            selected = [self._statistics[key] for key in sorted(self._statistics)]

        lines = []
        for statistic in selected:
            lines.extend(format_station_statistic(self.model, statistic))
        self.text_view.setPlainText("\n".join(lines))
