"""
MetroPlan rail network editor

A PySide6 desktop application for drawing rail transit networks, defining
routes over them, and playing back simulations computed by an external
engine.

Features:
- Stations with directed track and walk links
- Routes built from a multi-selection of stations and links
- Shortest path, simulation and schedule optimization through the engine
- Animated train markers, stringline chart and station statistics
"""

__version__ = "1.0.0"
__description__ = "MetroPlan rail network editor"
