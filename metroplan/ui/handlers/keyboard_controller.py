"""
Keyboard Controller for the network editor.

Forwards key presses on the editing surface to the interaction state
machine. The filter only exists while the surface is active, so shortcuts
never fire after the editor has been torn down.
"""

import logging
from typing import Optional

from PySide6.QtCore import QEvent, QObject
from PySide6.QtWidgets import QWidget

from ..state.interaction_state import InteractionStateMachine

logger = logging.getLogger(__name__)


class KeyboardController(QObject):
    """Event filter translating key presses into editor commands."""

    def __init__(self, state: InteractionStateMachine, parent=None):
        """
        Initialize the keyboard controller.

        Args:
            state: Interaction state machine receiving the keys
        """
        super().__init__(parent)
        self.state = state
        self._surface: Optional[QWidget] = None

    @property
    def is_active(self) -> bool:
        return self._surface is not None

    def activate(self, surface: QWidget) -> None:
        """Start listening to key presses on the editing surface."""
        if self._surface is surface:
            return
        self.deactivate()
        surface.installEventFilter(self)
        self._surface = surface
        logger.debug("Keyboard shortcuts activated")

    def deactivate(self) -> None:
        """Stop listening; safe to call more than once."""
        if self._surface is None:
            return
        self._surface.removeEventFilter(self)
        self._surface = None
        logger.debug("Keyboard shortcuts deactivated")

    def eventFilter(self, watched, event) -> bool:
        if event.type() == QEvent.Type.KeyPress and not event.isAutoRepeat():
            if self.state.handle_key(event.key()):
                return True
        return super().eventFilter(watched, event)
