"""
Grid layout editor core.

Provides placement, drag-to-reorder and edge-drag resize of text and image
blocks on a 12-column grid, with snapshot-based undo/redo and persisted
sessions.
"""

from .data_model import (
    GridPosition,
    BlockKind,
    Block,
    TextBlock,
    ImageBlock,
    PageLayout,
)
from .placement import next_position, pixel_to_cell, reorder
from .resize import ResizeDirection, ResizeDrag, compute_resize
from .history import HistoryEntry, HistoryManager
from .state import EditorModes, SessionState
from .persistence import (
    KeyValueStore,
    MemoryStore,
    QSettingsStore,
    load_state,
    save_state,
    clear_state,
)
from .validation import ValidationResult, ValidationIssue, ValidationSeverity, validate_layout
from .shortcuts import ShortcutAction, resolve_shortcut
from .session import SessionController, sample_layout

__all__ = [
    'GridPosition',
    'BlockKind',
    'Block',
    'TextBlock',
    'ImageBlock',
    'PageLayout',
    'next_position',
    'pixel_to_cell',
    'reorder',
    'ResizeDirection',
    'ResizeDrag',
    'compute_resize',
    'HistoryEntry',
    'HistoryManager',
    'EditorModes',
    'SessionState',
    'KeyValueStore',
    'MemoryStore',
    'QSettingsStore',
    'load_state',
    'save_state',
    'clear_state',
    'ValidationResult',
    'ValidationIssue',
    'ValidationSeverity',
    'validate_layout',
    'ShortcutAction',
    'resolve_shortcut',
    'SessionController',
    'sample_layout',
]
