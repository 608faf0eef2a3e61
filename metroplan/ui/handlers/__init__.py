"""
UI Handlers for the network editor.

Handlers connecting the UI to the external engine and to the keyboard.
"""

from .engine_request_handler import EngineRequestHandler
from .keyboard_controller import KeyboardController

__all__ = [
    'EngineRequestHandler',
    'KeyboardController',
]
