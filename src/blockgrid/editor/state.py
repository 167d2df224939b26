"""
Session state values shared by the session controller and persistence.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Tuple

from .data_model import PageLayout
from .history import HistoryEntry


@dataclass(frozen=True)
class EditorModes:
    """UI mode flags of an editing session."""
    show_preview: bool = False
    is_editing: bool = True
    show_sidebar: bool = True

    def editing(self) -> 'EditorModes':
        return replace(self, is_editing=True, show_preview=False)

    def previewing(self) -> 'EditorModes':
        return replace(self, is_editing=False, show_preview=True)


@dataclass(frozen=True)
class SessionState:
    """Everything needed to restore a session."""
    layout: PageLayout = field(default_factory=PageLayout)
    history: Tuple[HistoryEntry, ...] = ()
    history_cursor: int = -1
    modes: EditorModes = field(default_factory=EditorModes)
