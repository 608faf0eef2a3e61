"""
UI State Management for the network editor.

This package holds the interaction mode, selection and gesture state, and
the ephemeral marker layer used during playback.
"""

from .edit_gesture import (
    NoGesture,
    EdgeCreateGesture,
    EdgeWeightGesture,
    StationNameGesture,
    EditGesture,
)
from .interaction_state import GraphMode, InteractionStateMachine
from .marker_layer import MarkerLayer

__all__ = [
    'NoGesture',
    'EdgeCreateGesture',
    'EdgeWeightGesture',
    'StationNameGesture',
    'EditGesture',
    'GraphMode',
    'InteractionStateMachine',
    'MarkerLayer',
]
