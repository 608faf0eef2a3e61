"""
UI Widgets package for the network editor.
"""

from .network_canvas import NetworkCanvas
from .stringline_chart import StringlineChart
from .statistics_panel import StatisticsPanel

__all__ = [
    'NetworkCanvas',
    'StringlineChart',
    'StatisticsPanel',
]
