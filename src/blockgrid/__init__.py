"""
BlockGrid - page layout builder core.

Text and image blocks on a 12-column grid with drag-to-reorder, edge-drag
resize and full undo/redo.
"""

from .editor import (
    BlockKind,
    GridPosition,
    PageLayout,
    SessionController,
)

__version__ = "0.1.0"

__all__ = [
    'BlockKind',
    'GridPosition',
    'PageLayout',
    'SessionController',
]
