"""
Main entry point for the MetroPlan network editor.

This module sets up logging, loads the configuration, optionally loads a
network from graph and routes documents, and starts the main window.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication, QMessageBox

from metroplan.managers.config_manager import ConfigManager, ConfigurationError
from metroplan.ui.main_window import MainWindow
from version import __app_display_name__, __app_name__, __company__, __version__


def setup_logging(level: int = logging.WARNING) -> Path:
    """Setup application logging with file and console output."""
    if sys.platform == "darwin":  # macOS
        log_dir = Path.home() / "Library" / "Logs" / "MetroPlan"
    elif sys.platform == "win32":  # Windows
        log_dir = Path(os.environ.get("APPDATA", Path.home())) / "MetroPlan" / "logs"
    else:  # Linux and others
        log_dir = Path.home() / ".local" / "share" / "metroplan" / "logs"

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "metroplan.log"

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.FileHandler(str(log_file)), logging.StreamHandler()],
    )

    # Engine traffic is the noisiest part of the application
    logging.getLogger("metroplan.api").setLevel(max(level, logging.INFO))
    return log_file


def parse_arguments(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="metroplan", description=__app_display_name__)
    parser.add_argument("graph", nargs="?", type=Path, help="graph document to open")
    parser.add_argument("routes", nargs="?", type=Path, help="routes document to open")
    parser.add_argument("--config", type=Path, help="configuration file to use")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    parser.add_argument("--version", action="version", version=f"{__app_name__} {__version__}")
    return parser.parse_args(argv)


def main(argv=None):
    """Main application entry point."""
    args = parse_arguments(argv)
    setup_logging(logging.DEBUG if args.debug else logging.WARNING)
    logger = logging.getLogger(__name__)
    logger.warning(f"Starting {__app_name__} {__version__}")

    app = QApplication(sys.argv[:1])
    app.setApplicationName(__app_name__)
    app.setApplicationDisplayName(__app_display_name__)
    app.setApplicationVersion(__version__)
    app.setOrganizationName(__company__)

    try:
        config_manager = ConfigManager(str(args.config) if args.config else None)
        config_manager.load_config()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        msg_box = QMessageBox()
        msg_box.setIcon(QMessageBox.Icon.Critical)
        msg_box.setWindowTitle("Configuration Error")
        msg_box.setText(str(e))
        msg_box.exec()
        sys.exit(1)

    window = MainWindow(config_manager)
    if args.graph is not None:
        window.load_network(args.graph, args.routes)
    window.show()

    exit_code = app.exec()
    logger.info(f"Application exiting with code {exit_code}")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
