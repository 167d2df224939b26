"""
Snapshot-based undo/redo history for the block grid editor.

Provides:
- HistoryEntry: an immutable layout snapshot plus a short description
- HistoryManager: linear undo/redo stack with a cursor, a size cap and
  debounced commits for high-frequency updates (live resize)

History is linear: committing after an undo discards the undone future.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from ..config import DEBOUNCE_MS, HISTORY_LIMIT
from .data_model import PageLayout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    """A layout at one point in time."""
    layout: PageLayout
    description: str = ""


@dataclass(frozen=True)
class _PendingCommit:
    entry: HistoryEntry
    deadline: float


class HistoryManager:
    """
    Manages layout snapshots with undo/redo.

    Usage:
        history = HistoryManager()
        history.commit(layout, "Add text block")
        previous = history.undo()   # PageLayout, or None if nothing to undo
        history.redo()

    The cursor is -1 while the history is empty, otherwise the index of the
    snapshot that represents the current layout.
    """

    def __init__(self, max_depth: int = HISTORY_LIMIT,
                 debounce_ms: int = DEBOUNCE_MS,
                 clock: Callable[[], float] = time.monotonic):
        """
        Args:
            max_depth: Maximum number of snapshots kept
            debounce_ms: Quiet period before a debounced snapshot is committed
            clock: Monotonic time source in seconds
        """
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self._entries: List[HistoryEntry] = []
        self._cursor = -1
        self._max_depth = max_depth
        self._debounce_s = debounce_ms / 1000.0
        self._clock = clock
        self._pending: Optional[_PendingCommit] = None

    # ---------------------------------------------------------------
    # Commit
    # ---------------------------------------------------------------

    def commit(self, layout: PageLayout, description: str = "") -> None:
        """Append a snapshot after the cursor, discarding any redo branch.

        Supersedes a pending debounced snapshot.
        """
        if self._pending is not None:
            logger.debug("Immediate commit supersedes pending '%s'",
                         self._pending.entry.description)
            self._pending = None
        self._append(HistoryEntry(layout, description))

    def _append(self, entry: HistoryEntry) -> None:
        del self._entries[self._cursor + 1:]
        self._entries.append(entry)

        # Truncation above means an overflow can only happen with the cursor
        # on the newest snapshot; after evicting the oldest it stays there
        if len(self._entries) > self._max_depth:
            self._entries.pop(0)
        self._cursor = len(self._entries) - 1

    def commit_debounced(self, layout: PageLayout, description: str = "") -> None:
        """Schedule a snapshot; a later call within the window replaces it.

        A pending snapshot that is already due is committed first.
        """
        self.poll()
        self._pending = _PendingCommit(
            entry=HistoryEntry(layout, description),
            deadline=self._clock() + self._debounce_s,
        )

    def poll(self) -> bool:
        """Commit the pending snapshot if its quiet period has elapsed.

        Returns:
            True if a snapshot was committed.
        """
        if self._pending is None or self._clock() < self._pending.deadline:
            return False
        return self.flush()

    def flush(self) -> bool:
        """Commit the pending snapshot now, regardless of its deadline."""
        if self._pending is None:
            return False
        entry = self._pending.entry
        self._pending = None
        self._append(entry)
        return True

    def cancel_pending(self) -> bool:
        """Drop the pending snapshot without committing it."""
        had_pending = self._pending is not None
        self._pending = None
        return had_pending

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    @property
    def pending_deadline(self) -> Optional[float]:
        """Clock time at which the pending snapshot becomes due."""
        return self._pending.deadline if self._pending else None

    def time_until_due(self) -> Optional[float]:
        """Seconds until the pending snapshot is due (0 if overdue)."""
        if self._pending is None:
            return None
        return max(0.0, self._pending.deadline - self._clock())

    # ---------------------------------------------------------------
    # Undo / redo
    # ---------------------------------------------------------------

    def undo(self) -> Optional[PageLayout]:
        """Step the cursor back.

        Returns:
            The layout now current, or None if there is nothing to undo.
        """
        self.flush()
        if self._cursor <= 0:
            return None
        self._cursor -= 1
        return self._entries[self._cursor].layout

    def redo(self) -> Optional[PageLayout]:
        """Step the cursor forward.

        Returns:
            The layout now current, or None if there is nothing to redo.
        """
        self.flush()
        if self._cursor >= len(self._entries) - 1:
            return None
        self._cursor += 1
        return self._entries[self._cursor].layout

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._entries) - 1

    @property
    def undo_description(self) -> Optional[str]:
        """Description of the change that undo would revert."""
        if self.can_undo:
            return self._entries[self._cursor].description or None
        return None

    @property
    def redo_description(self) -> Optional[str]:
        """Description of the change that redo would reapply."""
        if self.can_redo:
            return self._entries[self._cursor + 1].description or None
        return None

    @property
    def undo_count(self) -> int:
        return max(0, self._cursor)

    @property
    def redo_count(self) -> int:
        return len(self._entries) - 1 - self._cursor

    # ---------------------------------------------------------------
    # State
    # ---------------------------------------------------------------

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def entries(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    @property
    def snapshots(self) -> Tuple[PageLayout, ...]:
        return tuple(e.layout for e in self._entries)

    @property
    def current(self) -> Optional[PageLayout]:
        """Snapshot at the cursor, or None while empty."""
        if self._cursor < 0:
            return None
        return self._entries[self._cursor].layout

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def is_empty(self) -> bool:
        return not self._entries

    def clear(self) -> None:
        """Reset to the empty state and drop any pending snapshot."""
        self._entries.clear()
        self._cursor = -1
        self._pending = None

    def reset(self, entries: Sequence[HistoryEntry], cursor: int) -> None:
        """Replace the whole history, e.g. after loading persisted state.

        Keeps the newest ``max_depth`` entries and clamps the cursor into
        range.
        """
        kept = list(entries)[-self._max_depth:]
        dropped = len(entries) - len(kept)
        self._entries = kept
        self._pending = None
        if not kept:
            self._cursor = -1
            return
        clamped = max(0, min(cursor - dropped, len(kept) - 1))
        if clamped != cursor - dropped:
            logger.warning("History cursor %d out of range, using %d", cursor, clamped)
        self._cursor = clamped
