"""
Unit tests for MainWindow.

The engine is replaced by a worker double, and message boxes are replaced
by recorders so no modal dialog ever opens.
"""

import json

import pytest
from PySide6.QtCore import QObject, Qt, Signal
from PySide6.QtGui import QKeySequence

from metroplan.core.models.simulation import (
    ArrivalStatistics,
    ShortestPathResult,
    SimulationResult,
    SimulationSnapshot,
    StationStatistic,
    TrainState,
)
from metroplan.managers.config_manager import (
    ConfigData,
    ConfigManager,
    EditorConfig,
    PlaybackConfig,
)
from metroplan.ui.handlers.engine_request_handler import EngineRequestHandler
from metroplan.ui.main_window import MainWindow
from metroplan.ui.state.edit_gesture import NO_GESTURE
from metroplan.ui.state.interaction_state import GraphMode


class IdleWorker(QObject):
    """Worker double that accepts requests and never completes them."""

    request_completed = Signal(str, int, object)
    request_failed = Signal(str, int, object)

    def __init__(self):
        super().__init__()
        self.submitted = []

    def submit(self, kind, sequence, operation):
        self.submitted.append((kind, sequence))


def long_result():
    """Build a result long enough to still be playing during a test."""
    stations = ["A", "B", "C", "D"] * 50
    return SimulationResult(
        snapshots=tuple(
            SimulationSnapshot(float(index), (TrainState("0_1", station_id, 0.0, float(index)),))
            for index, station_id in enumerate(stations)
        ),
        train_to_route={"0_1": "red"},
        station_statistics={
            "B": StationStatistic("B", {"red": ArrivalStatistics(4.0, 6.0, 5.0)}),
        },
    )


@pytest.fixture
def messages(monkeypatch):
    """Record dialogs instead of showing them."""
    shown = []
    monkeypatch.setattr(MainWindow, "show_error_message",
                        lambda self, title, text: shown.append(("error", title)))
    monkeypatch.setattr(MainWindow, "show_info_message",
                        lambda self, title, text: shown.append(("info", title)))
    return shown


@pytest.fixture
def config_manager(tmp_path):
    manager = ConfigManager(str(tmp_path / "config.json"))
    manager.save_config(ConfigData(
        editor=EditorConfig(prompt_for_link_weight=False),
        playback=PlaybackConfig(tick_interval_ms=10),
    ))
    return manager


@pytest.fixture
def worker(qapp):
    return IdleWorker()


@pytest.fixture
def window(qtbot, config_manager, line_network, worker, messages):
    main_window = MainWindow(config_manager, line_network, EngineRequestHandler(worker))
    qtbot.addWidget(main_window)
    return main_window


class TestMainWindowSetup:
    """Test window construction."""

    def test_status_summary(self, window):
        assert window.status_label.text() == "4 stations, 3 links, 1 routes"

    def test_route_combos(self, window):
        assert window.route_combo.count() == 1
        assert window.route_combo.currentData() == "red"
        assert window.chart_route_combo.count() == 2
        assert window.state.route_id == "red"

    def test_keyboard_active_on_canvas(self, window):
        assert window.keyboard.is_active

    def test_close_tears_down_shortcuts(self, window):
        window.show()
        window.close()

        assert not window.keyboard.is_active

    def test_invalid_config_falls_back_to_defaults(self, tmp_path, qtbot, line_network, worker, messages):
        path = tmp_path / "broken.json"
        path.write_text("{broken", encoding="utf-8")

        main_window = MainWindow(ConfigManager(str(path)), line_network, EngineRequestHandler(worker))
        qtbot.addWidget(main_window)

        assert main_window.config == ConfigData()


class TestMainWindowActions:
    """Test window reactions to state and engine events."""

    def test_mode_button_switches_mode(self, window):
        window.mode_buttons.button(1).click()

        assert window.state.mode is GraphMode.EDIT

    def test_new_route(self, window, line_network):
        window.create_route()

        assert len(line_network.routes) == 2
        assert window.state.mode is GraphMode.ROUTE_EDIT
        assert window.route_combo.count() == 2
        assert window.state.route_id == window.route_combo.currentData()

    def test_simulate_submits_request(self, window, worker):
        window.frequency_spin.setValue(12)

        window.simulate_button.click()

        assert worker.submitted == [("simulation", 1)]
        assert window.config_manager.config.simulation.frequency == 12
        assert "1 engine request(s) running" in window.status_label.text()

    def test_no_path_shows_message(self, window, messages):
        window.on_shortest_path_found(None)

        assert messages == [("info", "Shortest Path")]

    def test_path_found_updates_status(self, window):
        window.on_shortest_path_found(ShortestPathResult(length=15, path=("A", "B", "C")))

        assert "Alpha → Bravo → Charlie" in window.statusBar().currentMessage()

    def test_simulation_result_plays_back(self, window, qtbot):
        result = SimulationResult(
            snapshots=(
                SimulationSnapshot(0.0, (TrainState("0_1", "A", 0.0, 0.0),)),
                SimulationSnapshot(1.0, (TrainState("0_1", "AB", 5.0, 0.0),)),
            ),
            train_to_route={"0_1": "red"},
            station_statistics={
                "B": StationStatistic("B", {"red": ArrivalStatistics(4.0, 6.0, 5.0)}),
            },
        )

        with qtbot.waitSignal(window.playback.playback_finished, timeout=2000):
            window.on_simulation_ready(result)

        assert "Bravo" in window.statistics_panel.text()
        assert window.chart.line_count() == 1
        assert window.marker_layer.markers == []

    def test_simulation_status_reports_duration(self, window):
        window.on_simulation_ready(long_result())

        assert window.statusBar().currentMessage() == "Playing 200 snapshots covering 199 time units"


class TestMainWindowDocuments:
    """Test loading and saving networks."""

    def test_save_then_load(self, window, tmp_path, qtbot, config_manager, worker, messages):
        graph_path = tmp_path / "graph.json"
        routes_path = tmp_path / "routes.json"
        window.documents.save(graph_path, routes_path)

        other = MainWindow(config_manager, engine_requests=EngineRequestHandler(worker))
        qtbot.addWidget(other)

        assert other.load_network(graph_path, routes_path)
        assert set(other.model.stations) == {"A", "B", "C", "D"}
        assert other.route_combo.count() == 1

    def test_invalid_document_reported(self, window, tmp_path, line_network, messages):
        graph_path = tmp_path / "graph.json"
        graph_path.write_text(json.dumps({"nodes": "nope"}), encoding="utf-8")

        assert not window.load_network(graph_path)

        assert messages == [("error", "Invalid Network Document")]
        assert len(line_network.stations) == 4

    def test_rejected_document_keeps_playback(self, window, tmp_path, qtbot):
        window.on_simulation_ready(long_result())
        graph_path = tmp_path / "graph.json"
        graph_path.write_text("{broken", encoding="utf-8")

        assert not window.load_network(graph_path)

        assert window.playback.is_running
        assert "Bravo" in window.statistics_panel.text()

    def test_loaded_document_drops_previous_results(self, window, tmp_path, qtbot):
        graph_path = tmp_path / "graph.json"
        window.documents.save(graph_path)
        window.on_simulation_ready(long_result())
        qtbot.waitUntil(lambda: window.chart.line_count() == 1, timeout=2000)

        assert window.load_network(graph_path)

        assert not window.playback.is_running
        assert window.marker_layer.markers == []
        assert window.chart.line_count() == 0
        assert window.statistics_panel.text() == "Run a simulation to see station statistics."


class TestMainWindowGestureEditor:
    """Test the text editor shown for weight and name edits."""

    def test_escape_action_cancels_edit(self, window, line_network):
        window.state.set_mode(GraphMode.EDIT)
        window.state.activate("A")
        window.state.update_gesture_text("Aldgate")
        assert not window.gesture_group.isHidden()

        window.cancel_edit_action.trigger()

        assert window.state.gesture == NO_GESTURE
        assert window.gesture_group.isHidden()
        assert line_network.get_station("A").name == "Alpha"

    def test_escape_is_the_cancel_shortcut(self, window):
        assert window.cancel_edit_action.shortcut() == QKeySequence(Qt.Key.Key_Escape)
        assert window.cancel_edit_action in window.gesture_editor.actions()
