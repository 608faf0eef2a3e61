"""
User interface components for the MetroPlan application.

This module contains the main window, the network canvas, playback and
the interaction state behind them.
"""

from .main_window import MainWindow

__all__ = ["MainWindow"]
