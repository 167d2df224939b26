"""
Edge-drag resizing of blocks.

A drag captures the block's width and column when it starts; every pointer
move is measured against that start state, not incrementally.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from ..config import COLUMN_WIDTH_PX, GRID_COLUMNS
from .data_model import Block, fits_grid


class ResizeDirection(Enum):
    """Which edge of the block is being dragged."""
    LEFT = "left"    # left edge moves, right edge stays fixed
    RIGHT = "right"  # right edge moves, column stays fixed


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def compute_resize(start_width: int, start_x: int, direction: ResizeDirection,
                   delta_px: float,
                   column_width_px: int = COLUMN_WIDTH_PX) -> Optional[Tuple[int, int]]:
    """Compute the (width, x) candidate for a drag of ``delta_px`` pixels.

    Returns:
        (new_width, new_x), or None when the candidate would leave the grid.
        Out-of-grid candidates are rejected rather than clamped to the edge.
    """
    delta_columns = round_half_up(delta_px / column_width_px)

    if direction is ResizeDirection.RIGHT:
        new_width = max(1, min(GRID_COLUMNS, start_width + delta_columns))
        new_x = start_x
    else:
        new_width = max(1, min(GRID_COLUMNS, start_width - delta_columns))
        new_x = start_x + (start_width - new_width)

    if not fits_grid(new_x, new_width):
        return None
    return new_width, new_x


@dataclass
class ResizeDrag:
    """State of one in-progress edge drag.

    Usage:
        drag = ResizeDrag(block, ResizeDirection.RIGHT)
        live = drag.update(250)   # Block with new width, or None if unchanged
        final = drag.finish()     # Block with the last accepted values
    """

    block: Block
    direction: ResizeDirection
    column_width_px: int = COLUMN_WIDTH_PX

    # Last accepted values
    _width: int = field(init=False, repr=False)
    _x: int = field(init=False, repr=False)
    _finished: bool = field(default=False, init=False, repr=False)

    def __post_init__(self):
        self._width = self.block.width
        self._x = self.block.position.x

    @property
    def block_id(self) -> str:
        return self.block.id

    @property
    def width(self) -> int:
        return self._width

    @property
    def x(self) -> int:
        return self._x

    @property
    def is_finished(self) -> bool:
        return self._finished

    def update(self, delta_px: float) -> Optional[Block]:
        """Apply a pointer move.

        Returns:
            The block with the new live values if they changed, otherwise
            None (no change, or the candidate crossed the grid boundary and
            the previous values were kept).
        """
        if self._finished:
            raise RuntimeError("resize drag already finished")

        candidate = compute_resize(self.block.width, self.block.position.x,
                                   self.direction, delta_px, self.column_width_px)
        if candidate is None or candidate == (self._width, self._x):
            return None

        self._width, self._x = candidate
        return self.current()

    def current(self) -> Block:
        """The dragged block with the last accepted values."""
        return self.block.resized(self._width, self._x)

    def finish(self) -> Block:
        """End the drag and return the final block."""
        self._finished = True
        return self.current()
