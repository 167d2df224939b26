"""
Session controller for the block grid editor.

Owns the current layout, its undo/redo history and the UI mode flags, and
maps user intents (add, move, resize, edit, delete) to layout operations
followed by history commits. It is the only component that talks to the
persistence store; listeners only ever receive immutable layouts.

Operations that reference unknown block ids or would leave the grid are
absorbed: they are logged and leave the session unchanged.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Callable, List, Optional, Union

from ..config import EditorConfig, GRID_COLUMNS
from ..errors import BlockNotFound, BoundaryRejected
from .data_model import (
    BLOCK_TYPES, Block, BlockKind, GridPosition, ImageBlock, PageLayout, TextBlock,
)
from .history import HistoryEntry, HistoryManager
from .persistence import KeyValueStore, load_state, save_state
from .placement import next_position, reorder
from .resize import ResizeDirection, ResizeDrag
from .shortcuts import ShortcutAction, resolve_shortcut
from .state import EditorModes, SessionState
from .validation import LayoutValidator

logger = logging.getLogger(__name__)

LayoutListener = Callable[[PageLayout], None]


def sample_layout() -> PageLayout:
    """Demo layout: a full-width intro above an image and a text block."""
    return PageLayout([
        TextBlock(
            id="sample-text-1",
            content=(
                "# Welcome\n\n"
                "Build page layouts from **text** and **image** blocks "
                "on a 12-column grid.\n\n"
                "## Features\n"
                "- Markdown text blocks\n"
                "- Image blocks from URLs\n"
                "- Drag to reorder, drag edges to resize\n"
                "- Undo/Redo"
            ),
            width=12,
            position=GridPosition(0, 0),
        ),
        ImageBlock(
            id="sample-image-1",
            content="https://placehold.co/800x400/4F46E5/FFFFFF?text=Sample+Image",
            width=6,
            position=GridPosition(0, 1),
        ),
        TextBlock(
            id="sample-text-2",
            content=(
                "## Getting Started\n\n"
                "1. Add blocks from the palette\n"
                "2. Edit their content\n"
                "3. Resize blocks with the edge handles\n"
                "4. Use **Ctrl+Z** to undo and **Ctrl+Y** to redo"
            ),
            width=6,
            position=GridPosition(6, 1),
        ),
    ])


class SessionController:
    """
    Editing session: layout + history + mode flags.

    Usage:
        session = SessionController(store=MemoryStore())
        block = session.add_block(BlockKind.TEXT)
        session.move_block(block.id, drop_x=700, drop_y=10, container_width=1200)
        session.undo()
    """

    def __init__(self, store: Optional[KeyValueStore] = None,
                 config: Optional[EditorConfig] = None,
                 clock: Callable[[], float] = time.monotonic,
                 autoload: bool = True):
        self._config = config or EditorConfig()
        self._store = store
        self._history = HistoryManager(
            max_depth=self._config.history_limit,
            debounce_ms=self._config.debounce_ms,
            clock=clock,
        )
        self._layout = PageLayout()
        self._modes = EditorModes()
        self._is_mobile = False
        self._listeners: List[LayoutListener] = []
        self._validator = LayoutValidator()

        if store is not None and autoload:
            self._restore(load_state(store))

    @classmethod
    def from_store(cls, store: KeyValueStore,
                   clock: Callable[[], float] = time.monotonic) -> 'SessionController':
        """Create a session using the store for both config and saved state."""
        return cls(store=store, config=EditorConfig.from_store(store), clock=clock)

    # ---------------------------------------------------------------
    # State access
    # ---------------------------------------------------------------

    @property
    def layout(self) -> PageLayout:
        return self._layout

    @property
    def history(self) -> HistoryManager:
        return self._history

    @property
    def modes(self) -> EditorModes:
        return self._modes

    @property
    def config(self) -> EditorConfig:
        return self._config

    @property
    def is_mobile(self) -> bool:
        return self._is_mobile

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    @property
    def has_pending_commit(self) -> bool:
        return self._history.has_pending

    def state(self) -> SessionState:
        """Snapshot of everything persisted for this session."""
        return SessionState(
            layout=self._layout,
            history=self._history.entries,
            history_cursor=self._history.cursor,
            modes=self._modes,
        )

    def _restore(self, state: SessionState) -> None:
        self._layout = state.layout
        self._modes = state.modes
        self._history.reset(state.history, state.history_cursor)

    # ---------------------------------------------------------------
    # Listeners and persistence
    # ---------------------------------------------------------------

    def add_listener(self, listener: LayoutListener) -> None:
        """Register a callback invoked with the layout after every change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: LayoutListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def save(self) -> None:
        """Write the session to the attached store, if any."""
        if self._store is not None:
            save_state(self._store, self.state())

    def _changed(self) -> None:
        self.save()
        for listener in list(self._listeners):
            listener(self._layout)

    def _apply(self, layout: PageLayout, description: str,
               debounced: bool = False) -> None:
        self._layout = layout
        if debounced:
            self._history.commit_debounced(layout, description)
        else:
            self._history.commit(layout, description)
        self._changed()

    # ---------------------------------------------------------------
    # Block operations
    # ---------------------------------------------------------------

    def add_block(self, kind: Union[BlockKind, str]) -> Block:
        """Append a new block after the last-inserted one and commit."""
        kind = BlockKind(kind)
        width = self._config.default_block_width
        block = BLOCK_TYPES[kind].create(
            position=next_position(self._layout, width),
            width=width,
        )
        self._apply(self._layout.with_block_added(block), f"Add {kind.value} block")
        logger.debug("Added %s at (%d, %d)", block.id, block.position.x, block.position.y)
        return block

    def update_block(self, block: Block, description: str = "Update block") -> bool:
        """Replace a block by id and commit immediately.

        A replacement identical to the current block is only committed when
        it settles a pending live update.

        Returns:
            True if the block was found.
        """
        try:
            layout = self._layout.with_block_replaced(block)
        except BlockNotFound as exc:
            logger.debug("Update ignored: %s", exc)
            return False

        if layout == self._layout and not self._history.has_pending:
            return True
        self._apply(layout, description)
        return True

    def update_block_live(self, block: Block, description: str = "Resize block") -> bool:
        """Replace a block by id, committing through the debounced path."""
        try:
            layout = self._layout.with_block_replaced(block)
        except BlockNotFound as exc:
            logger.debug("Live update ignored: %s", exc)
            return False

        self._apply(layout, description, debounced=True)
        return True

    def delete_block(self, block_id: str) -> bool:
        """Remove a block by id and commit."""
        try:
            layout = self._layout.without_block(block_id)
        except BlockNotFound as exc:
            logger.debug("Delete ignored: %s", exc)
            return False

        self._apply(layout, "Delete block")
        return True

    def move_block(self, block_id: str, drop_x: float, drop_y: float,
                   container_width: float) -> bool:
        """Drop a dragged block at a pixel point and commit the result.

        Returns:
            True if the layout changed.
        """
        try:
            layout = reorder(self._layout, block_id, drop_x, drop_y, container_width,
                             self._config.row_height_px)
        except (OverflowError, ValueError) as exc:
            logger.debug("Move of %s ignored: %s", block_id, exc)
            return False
        if layout is self._layout:
            return False

        result = self._validator.validate(layout)
        for issue in result.issues:
            if issue.is_warning:
                logger.info("After moving %s: %s", block_id, issue.message)

        self._apply(layout, "Move block")
        return True

    def set_block_content(self, block_id: str, content: str) -> bool:
        """Replace the markdown source or image URL of a block."""
        block = self._layout.get_block(block_id)
        if block is None:
            logger.debug("Content edit ignored, block %s not in layout", block_id)
            return False
        return self.update_block(block.with_content(content), "Edit content")

    def set_image_alt(self, block_id: str, alt: Optional[str]) -> bool:
        """Set the alt text of an image block."""
        block = self._layout.get_block(block_id)
        if not isinstance(block, ImageBlock):
            logger.debug("Alt edit ignored, %s is not an image block", block_id)
            return False
        return self.update_block(replace(block, alt=alt), "Edit alt text")

    def set_block_width(self, block_id: str, width: int) -> bool:
        """Set a block's width from a numeric input, clamped to 1..12.

        Rejected when the clamped width would cross the right grid edge.
        """
        block = self._layout.get_block(block_id)
        if block is None:
            logger.debug("Width edit ignored, block %s not in layout", block_id)
            return False

        try:
            width = max(1, min(GRID_COLUMNS, int(width)))
            resized = block.resized(width, block.position.x)
        except (OverflowError, TypeError, ValueError) as exc:
            logger.debug("Width edit rejected: %s", exc)
            return False
        return self.update_block(resized, "Resize block")

    # ---------------------------------------------------------------
    # Resize drag
    # ---------------------------------------------------------------

    def begin_resize(self, block_id: str,
                     direction: Union[ResizeDirection, str]) -> Optional[ResizeDrag]:
        """Capture a block's start state for an edge drag."""
        block = self._layout.get_block(block_id)
        if block is None:
            logger.debug("Resize ignored, block %s not in layout", block_id)
            return None
        return ResizeDrag(block, ResizeDirection(direction), self._config.column_width_px)

    def resize_to(self, drag: ResizeDrag, delta_px: float) -> Optional[Block]:
        """Apply a pointer move; changed values become a live update."""
        if drag.update(delta_px) is None:
            return None
        live = self._drag_result(drag)
        if live is None or not self.update_block_live(live):
            return None
        return live

    def end_resize(self, drag: ResizeDrag) -> Optional[Block]:
        """Finish a drag and commit the final values."""
        drag.finish()
        final = self._drag_result(drag)
        if final is None or not self.update_block(final, "Resize block"):
            return None
        return final

    def _drag_result(self, drag: ResizeDrag) -> Optional[Block]:
        # Only width and column come from the drag; the rest may have been
        # edited, moved or undone since the drag started
        block = self._layout.get_block(drag.block_id)
        if block is None:
            logger.debug("Resize ignored, block %s left the layout", drag.block_id)
            return None
        try:
            return block.resized(drag.width, drag.x)
        except BoundaryRejected as exc:
            logger.debug("Resize of %s rejected: %s", drag.block_id, exc)
            return None

    # ---------------------------------------------------------------
    # History
    # ---------------------------------------------------------------

    def undo(self) -> bool:
        """Restore the previous snapshot.

        Returns:
            True if the layout was restored.
        """
        had_pending = self._history.has_pending
        layout = self._history.undo()
        if layout is None:
            if had_pending:
                self._changed()
            return False
        self._layout = layout
        self._changed()
        return True

    def redo(self) -> bool:
        """Reapply the next snapshot."""
        had_pending = self._history.has_pending
        layout = self._history.redo()
        if layout is None:
            if had_pending:
                self._changed()
            return False
        self._layout = layout
        self._changed()
        return True

    def poll(self) -> bool:
        """Commit a debounced snapshot whose quiet period has elapsed."""
        if self._history.poll():
            self._changed()
            return True
        return False

    def flush(self) -> bool:
        """Commit a pending debounced snapshot immediately."""
        if self._history.flush():
            self._changed()
            return True
        return False

    def clear_all(self) -> None:
        """Empty the layout and the history. This cannot be undone."""
        self._layout = PageLayout()
        self._history.clear()
        logger.info("Session cleared")
        self._changed()

    def load_sample(self) -> None:
        """Replace the layout with the demo layout as the only snapshot."""
        layout = sample_layout()
        self._layout = layout
        self._history.reset([HistoryEntry(layout, "Load sample")], 0)
        self._changed()

    def handle_shortcut(self, key: str, ctrl: bool = False, shift: bool = False,
                        meta: bool = False) -> Optional[ShortcutAction]:
        """Run the undo/redo action bound to a key press, if any."""
        action = resolve_shortcut(key, ctrl=ctrl, shift=shift, meta=meta)
        if action is ShortcutAction.UNDO:
            self.undo()
        elif action is ShortcutAction.REDO:
            self.redo()
        return action

    # ---------------------------------------------------------------
    # UI modes
    # ---------------------------------------------------------------

    def _set_modes(self, modes: EditorModes) -> None:
        if modes == self._modes:
            return
        self._modes = modes
        self._changed()

    def set_edit_mode(self) -> bool:
        """Switch to editing. Not available on mobile viewports."""
        if self._is_mobile:
            logger.debug("Edit mode unavailable on mobile viewport")
            return False
        self._set_modes(self._modes.editing())
        return True

    def set_preview_mode(self) -> None:
        self._set_modes(self._modes.previewing())

    def set_sidebar_visible(self, visible: bool) -> None:
        self._set_modes(replace(self._modes, show_sidebar=visible))

    def set_viewport_width(self, width_px: int) -> bool:
        """Record the viewport width; mobile widths force preview mode.

        Returns:
            True if the viewport counts as mobile.
        """
        self._is_mobile = width_px <= self._config.mobile_breakpoint_px
        if self._is_mobile:
            self.set_preview_mode()
        return self._is_mobile
