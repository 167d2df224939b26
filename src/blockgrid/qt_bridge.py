"""
Qt adapter for a SessionController.

Re-emits session changes as Qt signals and drives the debounced history
commit with a single-shot QTimer, so widgets can connect to the session the
same way they connect to any other QObject.
"""

import logging
import math
from typing import Optional

from PyQt5.QtCore import QObject, QTimer, pyqtSignal

from .editor.data_model import PageLayout
from .editor.session import SessionController

logger = logging.getLogger(__name__)


class SessionBridge(QObject):
    """Signals and debounce timer around a SessionController."""

    # Signals
    layout_changed = pyqtSignal(object)  # Emitted with the new PageLayout
    # Emitted when undo/redo state changes: (can_undo, can_redo, undo_desc, redo_desc)
    undo_state_changed = pyqtSignal(bool, bool, str, str)

    def __init__(self, session: SessionController, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._session = session
        self._last_undo_state = None

        self._debounce_timer = QTimer(self)
        self._debounce_timer.setSingleShot(True)
        self._debounce_timer.timeout.connect(self._on_debounce_timeout)

        session.add_listener(self._on_session_changed)

    @property
    def session(self) -> SessionController:
        return self._session

    @property
    def debounce_active(self) -> bool:
        return self._debounce_timer.isActive()

    def detach(self):
        """Stop listening to the session."""
        self._debounce_timer.stop()
        self._session.remove_listener(self._on_session_changed)

    def _on_session_changed(self, layout: PageLayout):
        self.layout_changed.emit(layout)
        self._update_undo_redo_state()
        self._schedule_debounce()

    def _schedule_debounce(self):
        remaining = self._session.history.time_until_due()
        if remaining is None:
            self._debounce_timer.stop()
            return
        self._debounce_timer.start(int(math.ceil(remaining * 1000)))

    def _on_debounce_timeout(self):
        # A timer can fire a little early relative to the session clock
        if not self._session.poll():
            self._schedule_debounce()

    def _update_undo_redo_state(self):
        """Emit undo_state_changed when it differs from the last emission."""
        history = self._session.history
        state = (
            history.can_undo,
            history.can_redo,
            history.undo_description or "",
            history.redo_description or "",
        )
        if state != self._last_undo_state:
            self._last_undo_state = state
            self.undo_state_changed.emit(*state)
