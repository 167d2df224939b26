"""
Placement and drag-to-reorder on the 12-column grid.

Provides:
- next_position: greedy append position for a newly added block
- pixel_to_cell: drop point (pixels) to grid cell conversion
- reorder: move a dragged block to a drop cell, swapping with the block
  that already occupies that cell

Known limitation: next_position only looks at the most recently inserted
block. It never inspects other rows, so it does not fill gaps left by moves
or deletions.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..config import DEFAULT_BLOCK_WIDTH, GRID_COLUMNS, ROW_HEIGHT_PX
from .data_model import Block, GridPosition, PageLayout

logger = logging.getLogger(__name__)


def next_position(layout: PageLayout,
                  width: int = DEFAULT_BLOCK_WIDTH) -> GridPosition:
    """Get the anchor for a new block of ``width`` columns.

    Appends after the last-inserted block on its row, or wraps to the start
    of the following row when the block would not fit.
    """
    last = layout.last_block
    if last is None:
        return GridPosition(0, 0)

    next_x = last.right_edge
    if next_x + width <= GRID_COLUMNS:
        return GridPosition(next_x, last.position.y)
    return GridPosition(0, last.position.y + 1)


def pixel_to_cell(drop_x: float, drop_y: float, container_width: float,
                  row_height_px: int = ROW_HEIGHT_PX) -> GridPosition:
    """Convert a drop point relative to the grid container into a cell."""
    return GridPosition.from_pixels(drop_x, drop_y, container_width, row_height_px)


def clamp_to_row(block: Block, cell: GridPosition) -> GridPosition:
    """Pull an anchor left until the block's span fits on the grid."""
    x = max(0, min(cell.x, GRID_COLUMNS - block.width))
    return GridPosition(x, cell.y)


def find_drop_target(layout: PageLayout, moving_id: str,
                     cell: GridPosition) -> Optional[Block]:
    """Find the block (other than the dragged one) covering a drop cell."""
    return layout.block_at_cell(cell.x, cell.y, exclude_id=moving_id)


def reorder(layout: PageLayout, moving_id: str, drop_x: float, drop_y: float,
            container_width: float,
            row_height_px: int = ROW_HEIGHT_PX) -> PageLayout:
    """Move a block to the cell under a drop point.

    If another block covers that cell the two blocks exchange anchors and
    keep their widths. Otherwise the dragged block is anchored at the cell,
    pulled left as far as needed to stay on the grid. The no-target path does
    not push aside unrelated blocks on the destination row.

    The input layout is never modified. Unknown ids leave it unchanged.

    Args:
        layout: Current layout
        moving_id: Id of the dragged block
        drop_x, drop_y: Drop point in pixels, relative to the grid container
        container_width: Pixel width of the grid container
        row_height_px: Pixel height of one grid row

    Returns:
        The resulting layout (the same object when nothing moved)
    """
    dragged = layout.get_block(moving_id)
    if dragged is None:
        logger.debug("Reorder ignored, block %s not in layout", moving_id)
        return layout

    cell = pixel_to_cell(drop_x, drop_y, container_width, row_height_px)
    target = find_drop_target(layout, moving_id, cell)

    if target is not None:
        # Swap anchors; widths stay with their blocks
        dragged_moved = _anchor_on_grid(dragged, target.position)
        target_moved = _anchor_on_grid(target, dragged.position)
        if dragged_moved is None or target_moved is None:
            logger.debug("Swap of %s and %s rejected, a span would leave the grid",
                         moving_id, target.id)
            return layout
        return layout.with_blocks_replaced(dragged_moved, target_moved)

    new_position = clamp_to_row(dragged, cell)
    if new_position == dragged.position:
        return layout
    return layout.with_block_replaced(dragged.moved_to(new_position))


def _anchor_on_grid(block: Block, position: GridPosition) -> Optional[Block]:
    # A swap between blocks of different widths can push the wider one past
    # the right edge (e.g. width 8 moving to x=6); such swaps are rejected.
    if position.x + block.width > GRID_COLUMNS:
        return None
    return block.moved_to(position)
