"""
Main window for the MetroPlan network editor.

This module builds the editor window and wires the network model, the
interaction state machine, the engine request handler, playback and the
stringline chart together.
"""

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QColor, QKeySequence
from PySide6.QtWidgets import (
    QButtonGroup,
    QColorDialog,
    QComboBox,
    QFileDialog,
    QGroupBox,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QRadioButton,
    QSpinBox,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from ..api.engine_gateway import HttpEngineGateway
from ..core.models.simulation import ShortestPathResult, SimulationResult
from ..core.services.document_io import DocumentRepository, ValidationError
from ..core.services.network_model import NetworkModel
from ..core.services.stringline_projector import project_stringlines, route_station_axis
from ..managers.config_manager import ConfigData, ConfigManager, ConfigurationError
from ..workers.engine_worker import EngineWorker
from .handlers.engine_request_handler import EngineRequestHandler
from .handlers.keyboard_controller import KeyboardController
from .playback.simulation_playback import SimulationPlayback
from .state.edit_gesture import EdgeWeightGesture, StationNameGesture
from .state.interaction_state import GraphMode, InteractionStateMachine
from .state.marker_layer import MarkerLayer
from .widgets.network_canvas import NetworkCanvas
from .widgets.statistics_panel import StatisticsPanel
from .widgets.stringline_chart import StringlineChart
from version import __app_display_name__, get_about_text

logger = logging.getLogger(__name__)

ALL_ROUTES = "__all__"

MODE_LABELS = [
    (GraphMode.DISPLAY, "Display"),
    (GraphMode.EDIT, "Edit"),
    (GraphMode.PATH_SELECT, "Shortest Path"),
    (GraphMode.ROUTE_EDIT, "Route Edit"),
]


class MainWindow(QMainWindow):
    """
    Main application window.

    Features:
    - Interactive network canvas with edit, path and route modes
    - Simulation and optimization through the external engine
    - Animated playback and stringline chart of the last run
    - Station arrival statistics
    """

    def __init__(self, config_manager: Optional[ConfigManager] = None,
                 model: Optional[NetworkModel] = None, engine_requests=None):
        """
        Initialize the main window.

        Args:
            config_manager: Shared configuration manager
            model: Network to edit, a new empty one when omitted
            engine_requests: Engine request handler, built from the config when omitted
        """
        super().__init__()
        self.config_manager = config_manager or ConfigManager()
        try:
            self.config = self.config_manager.load_config()
        except ConfigurationError as e:
            logger.error(f"Falling back to default configuration: {e}")
            self.config = ConfigData()

        self.model = model if model is not None else NetworkModel(self)
        self.documents = DocumentRepository(self.model)
        self._last_result: Optional[SimulationResult] = None

        if engine_requests is None:
            engine_config = self.config.engine
            self.engine_worker = EngineWorker(lambda: HttpEngineGateway(engine_config), self)
            engine_requests = EngineRequestHandler(self.engine_worker, self)
        self.engine_requests = engine_requests

        self.state = InteractionStateMachine(
            self.model, self.engine_requests, self.config.editor.default_link_weight, self
        )
        self.state.choose_color(self.config.editor.default_route_color)
        self.marker_layer = MarkerLayer(self)
        self.playback = SimulationPlayback(
            self.model, self.marker_layer, self.config.playback.tick_interval_ms, self
        )

        self.setWindowTitle(__app_display_name__)
        self.resize(1200, 800)
        self.setup_ui()
        self.setup_menu_bar()
        self.connect_signals()

        self.state.viewport_center_provider = self.canvas.viewport_center
        if self.config.editor.prompt_for_link_weight:
            self.state.weight_prompt = self.prompt_link_weight

        self.keyboard = KeyboardController(self.state, self)
        self.keyboard.activate(self.canvas)

        self._refresh_route_combos()
        self._update_status()

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------

    def setup_ui(self):
        """Setup the main window UI."""
        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        layout = QHBoxLayout(central_widget)

        splitter = QSplitter(Qt.Orientation.Vertical)
        self.canvas = NetworkCanvas(
            self.model, self.state, self.marker_layer, self.config.playback.marker_radius
        )
        self.chart = StringlineChart()
        splitter.addWidget(self.canvas)
        splitter.addWidget(self.chart)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 1)
        layout.addWidget(splitter, stretch=1)

        side_panel = QVBoxLayout()
        side_panel.addWidget(self._build_mode_group())
        side_panel.addWidget(self._build_gesture_group())
        side_panel.addWidget(self._build_route_group())
        side_panel.addWidget(self._build_simulation_group())
        self.statistics_panel = StatisticsPanel(self.model)
        side_panel.addWidget(self.statistics_panel, stretch=1)

        side_widget = QWidget()
        side_widget.setLayout(side_panel)
        side_widget.setFixedWidth(300)
        layout.addWidget(side_widget)

        self.status_label = QLabel()
        self.statusBar().addPermanentWidget(self.status_label)

    def _build_mode_group(self) -> QGroupBox:
        group = QGroupBox("Mode")
        layout = QVBoxLayout(group)
        self.mode_buttons = QButtonGroup(self)
        for index, (mode, label) in enumerate(MODE_LABELS):
            button = QRadioButton(label)
            button.setChecked(mode == self.state.mode)
            self.mode_buttons.addButton(button, index)
            layout.addWidget(button)
        return group

    def _build_gesture_group(self) -> QGroupBox:
        self.gesture_group = QGroupBox("Edit")
        layout = QVBoxLayout(self.gesture_group)
        self.gesture_label = QLabel()
        self.gesture_editor = QLineEdit()
        self.cancel_edit_action = QAction("Cancel Edit", self.gesture_editor)
        self.cancel_edit_action.setShortcut(QKeySequence(Qt.Key.Key_Escape))
        self.cancel_edit_action.setShortcutContext(Qt.ShortcutContext.WidgetShortcut)
        self.gesture_editor.addAction(self.cancel_edit_action)
        layout.addWidget(self.gesture_label)
        layout.addWidget(self.gesture_editor)
        self.gesture_group.setVisible(False)
        return self.gesture_group

    def _build_route_group(self) -> QGroupBox:
        group = QGroupBox("Routes")
        layout = QVBoxLayout(group)

        self.route_combo = QComboBox()
        layout.addWidget(self.route_combo)

        buttons = QHBoxLayout()
        self.new_route_button = QPushButton("New Route")
        self.color_button = QPushButton("Color...")
        self.commit_route_button = QPushButton("Commit")
        buttons.addWidget(self.new_route_button)
        buttons.addWidget(self.color_button)
        buttons.addWidget(self.commit_route_button)
        layout.addLayout(buttons)
        self._update_color_button()
        return group

    def _build_simulation_group(self) -> QGroupBox:
        group = QGroupBox("Simulation")
        layout = QVBoxLayout(group)

        frequency_row = QHBoxLayout()
        frequency_row.addWidget(QLabel("Frequency"))
        self.frequency_spin = QSpinBox()
        self.frequency_spin.setRange(1, 1000)
        self.frequency_spin.setValue(self.config.simulation.frequency)
        frequency_row.addWidget(self.frequency_spin)
        layout.addLayout(frequency_row)

        buttons = QHBoxLayout()
        self.simulate_button = QPushButton("Simulate")
        self.optimize_button = QPushButton("Optimize")
        self.stop_button = QPushButton("Stop")
        buttons.addWidget(self.simulate_button)
        buttons.addWidget(self.optimize_button)
        buttons.addWidget(self.stop_button)
        layout.addLayout(buttons)

        self.chart_route_combo = QComboBox()
        layout.addWidget(self.chart_route_combo)
        return group

    def setup_menu_bar(self):
        """Setup application menu bar."""
        menubar = self.menuBar()
        menubar.clear()
        menubar.setNativeMenuBar(False)

        # File menu
        file_menu = menubar.addMenu("&File")

        open_action = QAction("&Open Network...", self)
        open_action.setShortcut(QKeySequence("Ctrl+O"))
        open_action.setStatusTip("Load a graph document and its routes")
        open_action.triggered.connect(self.open_network_dialog)
        file_menu.addAction(open_action)

        save_action = QAction("&Save Network...", self)
        save_action.setShortcut(QKeySequence("Ctrl+S"))
        save_action.setStatusTip("Export the graph and routes documents")
        save_action.triggered.connect(self.save_network_dialog)
        file_menu.addAction(save_action)

        file_menu.addSeparator()

        exit_action = QAction("E&xit", self)
        exit_action.setShortcut(QKeySequence("Ctrl+Q"))
        exit_action.setStatusTip("Exit the application")
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        # View menu
        view_menu = menubar.addMenu("&View")
        reset_action = QAction("&Reset View", self)
        reset_action.setStatusTip("Fit the whole network in view")
        reset_action.triggered.connect(self.state.reset_view)
        view_menu.addAction(reset_action)

        # Help menu
        help_menu = menubar.addMenu("&Help")
        about_action = QAction("&About", self)
        about_action.setStatusTip("About this application")
        about_action.triggered.connect(self.show_about_dialog)
        help_menu.addAction(about_action)

    def connect_signals(self):
        """Connect model, state and engine signals to the window."""
        self.mode_buttons.idClicked.connect(self._on_mode_button)
        self.gesture_editor.textEdited.connect(self.state.update_gesture_text)
        self.gesture_editor.returnPressed.connect(self._on_gesture_return)
        self.cancel_edit_action.triggered.connect(self._on_gesture_cancel)

        self.new_route_button.clicked.connect(self.create_route)
        self.color_button.clicked.connect(self.choose_route_color)
        self.commit_route_button.clicked.connect(self.state.commit_route)
        self.route_combo.currentIndexChanged.connect(self._on_route_combo_changed)

        self.simulate_button.clicked.connect(self.run_simulation)
        self.optimize_button.clicked.connect(self.state.run_optimization)
        self.stop_button.clicked.connect(self.playback.stop)
        self.chart_route_combo.currentIndexChanged.connect(lambda _: self._refresh_chart())

        self.model.network_changed.connect(self._update_status)
        self.model.routes_changed.connect(self._refresh_route_combos)
        self.model.routes_changed.connect(self._update_status)

        self.state.mode_changed.connect(self._on_mode_changed)
        self.state.gesture_changed.connect(self._on_gesture_changed)
        self.state.selection_changed.connect(self._on_selection_changed)
        self.state.error_reported.connect(self.show_error_message)
        self.state.status_changed.connect(self.statusBar().showMessage)

        self.engine_requests.shortest_path_found.connect(self.on_shortest_path_found)
        self.engine_requests.simulation_ready.connect(self.on_simulation_ready)
        self.engine_requests.request_failed.connect(self.show_error_message)
        self.engine_requests.pending_changed.connect(lambda _: self._update_status())

        self.playback.frame_rendered.connect(self._on_frame_rendered)
        self.playback.playback_finished.connect(lambda _: self._refresh_chart())

    # ------------------------------------------------------------------
    # State reactions
    # ------------------------------------------------------------------

    def _on_mode_button(self, index: int):
        self.state.set_mode(MODE_LABELS[index][0])

    def _on_mode_changed(self, mode: GraphMode):
        button = self.mode_buttons.button([m for m, _ in MODE_LABELS].index(mode))
        if button is not None and not button.isChecked():
            button.setChecked(True)
        self.canvas.clear_highlight()
        self.canvas.setFocus()

    def _on_gesture_changed(self, gesture):
        if isinstance(gesture, EdgeWeightGesture):
            self.gesture_label.setText(f"Weight of {gesture.link_id}")
        elif isinstance(gesture, StationNameGesture):
            self.gesture_label.setText(f"Name of {gesture.station_id}")
        else:
            self.gesture_group.setVisible(False)
            return

        if self.gesture_editor.text() != gesture.text:
            self.gesture_editor.setText(gesture.text)
        self.gesture_group.setVisible(True)
        self.gesture_editor.setFocus()

    def _on_gesture_return(self):
        self.state.commit_gesture()
        self.canvas.setFocus()

    def _on_gesture_cancel(self):
        self.state.cancel_gesture()
        self.canvas.setFocus()

    def _on_selection_changed(self, selection):
        station_ids = [eid for eid in selection if self.model.has_station(eid)]
        self.statistics_panel.show_station(station_ids[0] if len(station_ids) == 1 else None)

    def _on_route_combo_changed(self, index: int):
        route_id = self.route_combo.itemData(index)
        self.state.choose_route(route_id)
        self._update_color_button()

    def _refresh_route_combos(self):
        """Rebuild the route pickers, keeping the current choices."""
        current = self.state.route_id
        chart_current = self.chart_route_combo.currentData()

        self.route_combo.blockSignals(True)
        self.chart_route_combo.blockSignals(True)
        self.route_combo.clear()
        self.chart_route_combo.clear()
        self.chart_route_combo.addItem("All routes", ALL_ROUTES)
        for route in self.model.routes.values():
            self.route_combo.addItem(route.name, route.id)
            self.chart_route_combo.addItem(route.name, route.id)

        index = self.route_combo.findData(current) if current else -1
        if index < 0 and self.route_combo.count():
            index = 0
        self.route_combo.setCurrentIndex(index)
        chart_index = self.chart_route_combo.findData(chart_current)
        self.chart_route_combo.setCurrentIndex(max(chart_index, 0))
        self.route_combo.blockSignals(False)
        self.chart_route_combo.blockSignals(False)

        self.state.choose_route(self.route_combo.currentData())
        self._update_color_button()

    def _update_color_button(self):
        color = self.state.route_color
        self.color_button.setStyleSheet(f"QPushButton {{ border-left: 8px solid {color}; }}")

    def _update_status(self):
        summary = self.model.get_summary()
        pending = self.engine_requests.pending_count
        text = (f"{summary['stations']} stations, {summary['links']} links, "
                f"{summary['routes']} routes")
        if pending:
            text += f" | {pending} engine request(s) running"
        self.status_label.setText(text)

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    def create_route(self):
        """Create an empty route and make it the route being edited."""
        route_id = self.model.add_route(color=self.state.route_color)
        index = self.route_combo.findData(route_id)
        if index >= 0:
            self.route_combo.setCurrentIndex(index)
        self.state.set_mode(GraphMode.ROUTE_EDIT)

    def choose_route_color(self):
        color = QColorDialog.getColor(QColor(self.state.route_color), self, "Route Color")
        if color.isValid():
            self.state.choose_color(color.name())
            self._update_color_button()

    # ------------------------------------------------------------------
    # Engine
    # ------------------------------------------------------------------

    def run_simulation(self):
        frequency = self.frequency_spin.value()
        self.config_manager.update_frequency(frequency)
        self.state.run_simulation(frequency)

    def on_shortest_path_found(self, result: Optional[ShortestPathResult]):
        if result is None:
            self.show_info_message("Shortest Path", "No path exists between these stations.")
            return
        names = [
            station.name if station is not None else station_id
            for station_id, station in ((sid, self.model.get_station(sid)) for sid in result.path)
        ]
        self.canvas.highlight_path(result.path)
        self.statusBar().showMessage(f"Shortest path ({result.length:g}): {' → '.join(names)}")

    def on_simulation_ready(self, result: SimulationResult):
        self._last_result = result
        self.statistics_panel.set_statistics(result.station_statistics)
        self.playback.start(result)
        self.statusBar().showMessage(
            f"Playing {len(result.snapshots)} snapshots covering {result.duration:g} time units"
        )

    def _on_frame_rendered(self, time: float):
        self._refresh_chart(cutoff=time)

    def _refresh_chart(self, cutoff: Optional[float] = None):
        if self._last_result is None:
            self.chart.clear()
            return

        route_id = self.chart_route_combo.currentData()
        route_filter = None if route_id in (None, ALL_ROUTES) else [route_id]
        stringlines = project_stringlines(
            self._last_result.snapshots, self._last_result.train_to_route, cutoff, route_filter
        )
        colors = {rid: route.color for rid, route in self.model.routes.items()}
        axis = None
        if route_filter is not None and self.model.get_route(route_id) is not None:
            axis = route_station_axis(self.model, self.model.get_route(route_id))
        self.chart.set_stringlines(stringlines, colors, axis)

    # ------------------------------------------------------------------
    # Dialogs
    # ------------------------------------------------------------------

    def prompt_link_weight(self) -> Optional[str]:
        """Ask for the weight of a new link; None if cancelled."""
        text, ok = QInputDialog.getText(
            self, "Link Weight", "Weight:", text=str(self.config.editor.default_link_weight)
        )
        return text if ok else None

    def open_network_dialog(self):
        graph_path, _ = QFileDialog.getOpenFileName(self, "Open Graph", "", "JSON (*.json)")
        if not graph_path:
            return
        routes_path, _ = QFileDialog.getOpenFileName(
            self, "Open Routes (optional)", str(Path(graph_path).parent), "JSON (*.json)"
        )
        self.load_network(Path(graph_path), Path(routes_path) if routes_path else None)

    def load_network(self, graph_path: Path, routes_path: Optional[Path] = None) -> bool:
        """Load documents into the model; the model is unchanged on failure."""
        try:
            self.documents.load(graph_path, routes_path)
        except ValidationError as e:
            self.show_error_message("Invalid Network Document", str(e))
            return False

        # Results of the previous network no longer apply
        self.playback.stop()
        self._last_result = None
        self.statistics_panel.set_statistics({})
        self._refresh_chart()
        self.state.clear_selection()
        self.canvas.clear_highlight()
        self.state.reset_view()
        self.statusBar().showMessage(f"Loaded {graph_path.name}")
        return True

    def save_network_dialog(self):
        graph_path, _ = QFileDialog.getSaveFileName(self, "Save Graph", "graph.json", "JSON (*.json)")
        if not graph_path:
            return
        graph_path = Path(graph_path)
        routes_path = graph_path.with_name(f"{graph_path.stem}_routes.json")
        try:
            self.documents.save(graph_path, routes_path)
        except OSError as e:
            self.show_error_message("Save Failed", str(e))
            return
        self.statusBar().showMessage(f"Saved {graph_path.name} and {routes_path.name}")

    def show_error_message(self, title: str, message: str):
        """
        Show error message dialog.

        Args:
            title: Dialog title
            message: Error message
        """
        msg_box = QMessageBox(self)
        msg_box.setIcon(QMessageBox.Icon.Critical)
        msg_box.setWindowTitle(title)
        msg_box.setText(message)
        msg_box.exec()

    def show_info_message(self, title: str, message: str):
        msg_box = QMessageBox(self)
        msg_box.setIcon(QMessageBox.Icon.Information)
        msg_box.setWindowTitle(title)
        msg_box.setText(message)
        msg_box.exec()

    def show_about_dialog(self):
        """Show about dialog with the config path."""
        about_text = get_about_text()
        about_text += f"<p><small>Config: {self.config_manager.config_path}</small></p>"
        self.show_info_message("About", about_text)

    def closeEvent(self, event):
        """Tear down shortcuts and playback before closing."""
        self.keyboard.deactivate()
        self.playback.stop()
        logger.info("Main window closed")
        super().closeEvent(event)
