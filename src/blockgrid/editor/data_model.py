"""
Data model for the block grid editor.

Defines the core data structures for page layouts:
- GridPosition: Grid anchor (x = starting column, y = row)
- BlockKind: Tagged block variant (TEXT, IMAGE)
- Block: Positioned, sized content unit; TextBlock and ImageBlock subclasses
- PageLayout: Ordered, immutable collection of blocks

Grid System:
- 12 columns, 0-indexed; a block spans columns [x, x + width)
- Rows have a fixed pixel height (see config.ROW_HEIGHT_PX)
- Every block satisfies 1 <= width <= 12 and x + width <= 12; this is
  checked when the block is constructed, so no invalid block can exist
- Insertion order is kept for placement; spatial order is (y, x)

All types are frozen: edits produce new values, so a PageLayout can be
stored in history or handed to collaborators without copying.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Tuple

from ..config import DEFAULT_BLOCK_WIDTH, GRID_COLUMNS, ROW_HEIGHT_PX
from ..errors import BlockNotFound, BoundaryRejected


DEFAULT_TEXT_CONTENT = (
    "# New Text Block\n\n"
    "Enter your markdown content here...\n\n"
    "- **Bold text**\n"
    "- *Italic text*\n"
    "- `Code snippets`"
)
DEFAULT_IMAGE_CONTENT = "https://placehold.co/600x400"


class BlockKind(Enum):
    """Kind of content a block holds."""
    TEXT = "text"    # content is markdown source
    IMAGE = "image"  # content is an image URL


@dataclass(frozen=True)
class GridPosition:
    """Grid anchor of a block."""
    x: int
    y: int

    def __post_init__(self):
        for name in ("x", "y"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise BoundaryRejected(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise BoundaryRejected(f"{name} must be >= 0, got {value}")

    def with_x(self, x: int) -> 'GridPosition':
        return GridPosition(x, self.y)

    @staticmethod
    def from_pixels(px: float, py: float, container_width: float,
                    row_height_px: int = ROW_HEIGHT_PX) -> 'GridPosition':
        """Convert a pixel point inside the grid container to a cell.

        The column is clamped to 0..11; the row is floored at 0 and
        otherwise unbounded.
        """
        if container_width <= 0:
            raise ValueError("container_width must be positive")
        column_width = container_width / GRID_COLUMNS
        grid_x = max(0, min(GRID_COLUMNS - 1, math.floor(px / column_width)))
        grid_y = max(0, math.floor(py / row_height_px))
        return GridPosition(int(grid_x), int(grid_y))

    def to_dict(self) -> Dict[str, int]:
        return {'x': self.x, 'y': self.y}


def _check_span(x: int, width: int) -> None:
    if isinstance(width, bool) or not isinstance(width, int):
        raise BoundaryRejected(f"width must be an integer, got {width!r}")
    if not 1 <= width <= GRID_COLUMNS:
        raise BoundaryRejected(f"width must be within 1..{GRID_COLUMNS}, got {width}")
    if x + width > GRID_COLUMNS:
        raise BoundaryRejected(
            f"block at column {x} with width {width} crosses column {GRID_COLUMNS}"
        )


def fits_grid(x: int, width: int) -> bool:
    """Check whether a span starting at column ``x`` stays on the grid."""
    return x >= 0 and 1 <= width <= GRID_COLUMNS and x + width <= GRID_COLUMNS


@dataclass(frozen=True)
class Block:
    """A positioned, sized content unit on the grid.

    Use TextBlock or ImageBlock; the base class only carries the shared shape.
    """
    id: str
    content: str
    width: int = DEFAULT_BLOCK_WIDTH
    position: GridPosition = field(default_factory=lambda: GridPosition(0, 0))

    kind: ClassVar[BlockKind]
    default_content: ClassVar[str] = ""

    def __post_init__(self):
        if type(self) is Block:
            raise TypeError("Block is abstract; use TextBlock or ImageBlock")
        if not self.id:
            raise ValueError("block id must not be empty")
        if not isinstance(self.content, str):
            raise TypeError(f"content must be a string, got {type(self.content).__name__}")
        _check_span(self.position.x, self.width)

    @classmethod
    def create(cls, position: GridPosition, width: int = DEFAULT_BLOCK_WIDTH,
               content: Optional[str] = None, **extra: Any) -> 'Block':
        """Factory method to create a block with a fresh id."""
        return cls(
            id=f"{cls.kind.value}-{uuid.uuid4()}",
            content=cls.default_content if content is None else content,
            width=width,
            position=position,
            **extra,
        )

    @property
    def right_edge(self) -> int:
        """First column past the block (exclusive end of its span)."""
        return self.position.x + self.width

    def covers(self, x: int, y: int) -> bool:
        """Check if the block occupies cell (x, y)."""
        return self.position.y == y and self.position.x <= x < self.right_edge

    def overlaps(self, other: 'Block') -> bool:
        """Check if two blocks share at least one cell on the same row."""
        return (self.position.y == other.position.y
                and self.position.x < other.right_edge
                and other.position.x < self.right_edge)

    def moved_to(self, position: GridPosition) -> 'Block':
        return replace(self, position=position)

    def resized(self, width: int, x: int) -> 'Block':
        return replace(self, width=width, position=self.position.with_x(x))

    def with_content(self, content: str) -> 'Block':
        return replace(self, content=content)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted component shape."""
        return {
            'id': self.id,
            'type': self.kind.value,
            'content': self.content,
            'width': self.width,
            'position': self.position.to_dict(),
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'Block':
        """Deserialize a block, dispatching on its ``type`` tag.

        Raises:
            KeyError: A required field is missing
            ValueError: Unknown type or a field violates the grid bounds
        """
        kind = BlockKind(data['type'])
        pos = data.get('position') or {}
        kwargs: Dict[str, Any] = dict(
            id=data['id'],
            content=data.get('content', ''),
            width=data.get('width', DEFAULT_BLOCK_WIDTH),
            position=GridPosition(pos.get('x', 0), pos.get('y', 0)),
        )
        if kind is BlockKind.IMAGE:
            return ImageBlock(alt=data.get('alt'), **kwargs)
        return TextBlock(**kwargs)


@dataclass(frozen=True)
class TextBlock(Block):
    """Block holding markdown source."""
    kind: ClassVar[BlockKind] = BlockKind.TEXT
    default_content: ClassVar[str] = DEFAULT_TEXT_CONTENT


@dataclass(frozen=True)
class ImageBlock(Block):
    """Block holding an image URL and optional alt text."""
    alt: Optional[str] = None

    kind: ClassVar[BlockKind] = BlockKind.IMAGE
    default_content: ClassVar[str] = DEFAULT_IMAGE_CONTENT

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        # Only include alt if set
        if self.alt is not None:
            result['alt'] = self.alt
        return result


BLOCK_TYPES: Dict[BlockKind, type] = {
    BlockKind.TEXT: TextBlock,
    BlockKind.IMAGE: ImageBlock,
}


@dataclass(frozen=True)
class PageLayout:
    """Ordered collection of blocks at one point in time."""
    blocks: Tuple[Block, ...] = ()

    def __post_init__(self):
        # Accept any iterable but always store a tuple
        object.__setattr__(self, 'blocks', tuple(self.blocks))

    def __len__(self) -> int:
        return len(self.blocks)

    def __iter__(self) -> Iterator[Block]:
        return iter(self.blocks)

    @property
    def is_empty(self) -> bool:
        return not self.blocks

    @property
    def ids(self) -> List[str]:
        return [b.id for b in self.blocks]

    @property
    def last_block(self) -> Optional[Block]:
        """Most recently inserted block (insertion order, not spatial)."""
        return self.blocks[-1] if self.blocks else None

    @property
    def row_count(self) -> int:
        """Number of grid rows in use (highest row + 1)."""
        if not self.blocks:
            return 0
        return max(b.position.y for b in self.blocks) + 1

    def get_block(self, block_id: str) -> Optional[Block]:
        for block in self.blocks:
            if block.id == block_id:
                return block
        return None

    def require_block(self, block_id: str) -> Block:
        block = self.get_block(block_id)
        if block is None:
            raise BlockNotFound(block_id)
        return block

    def block_at_cell(self, x: int, y: int,
                      exclude_id: Optional[str] = None) -> Optional[Block]:
        """Get the first block (insertion order) covering cell (x, y)."""
        for block in self.blocks:
            if block.id != exclude_id and block.covers(x, y):
                return block
        return None

    def blocks_in_row(self, y: int) -> List[Block]:
        return sorted((b for b in self.blocks if b.position.y == y),
                      key=lambda b: b.position.x)

    def spatial_order(self) -> List[Block]:
        """Blocks sorted for rendering: by row, then by column."""
        return sorted(self.blocks, key=lambda b: (b.position.y, b.position.x))

    def with_block_added(self, block: Block) -> 'PageLayout':
        if self.get_block(block.id) is not None:
            raise ValueError(f"Duplicate block id: {block.id}")
        return PageLayout(self.blocks + (block,))

    def with_block_replaced(self, block: Block) -> 'PageLayout':
        """Replace the block with the same id, keeping its insertion slot."""
        self.require_block(block.id)
        return PageLayout(block if b.id == block.id else b for b in self.blocks)

    def with_blocks_replaced(self, *blocks: Block) -> 'PageLayout':
        by_id = {b.id: b for b in blocks}
        for block_id in by_id:
            self.require_block(block_id)
        return PageLayout(by_id.get(b.id, b) for b in self.blocks)

    def without_block(self, block_id: str) -> 'PageLayout':
        self.require_block(block_id)
        return PageLayout(b for b in self.blocks if b.id != block_id)

    def to_list(self) -> List[Dict[str, Any]]:
        """Serialize layout to a JSON-compatible list of components."""
        return [b.to_dict() for b in self.blocks]

    @staticmethod
    def from_list(data: List[Dict[str, Any]]) -> 'PageLayout':
        """Deserialize layout from a list of components.

        Raises:
            KeyError, TypeError, ValueError: When an entry is malformed
        """
        if not isinstance(data, list):
            raise TypeError(f"expected a list of components, got {type(data).__name__}")
        return PageLayout(Block.from_dict(item) for item in data)
