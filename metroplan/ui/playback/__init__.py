"""
Simulation playback for the network editor.
"""

from .simulation_playback import SimulationPlayback, frame_markers, resolve_train_position

__all__ = [
    'SimulationPlayback',
    'frame_markers',
    'resolve_train_position',
]
