"""
Error types for the block grid editor.

None of these are fatal to an editing session: the session controller
absorbs them and keeps the layout and history in their last valid state.
"""


class BlockGridError(Exception):
    """Base class for all block grid errors."""


class BlockNotFound(BlockGridError, KeyError):
    """An operation referenced a block id that is not in the layout."""

    def __init__(self, block_id: str):
        super().__init__(block_id)
        self.block_id = block_id

    def __str__(self) -> str:
        return f"Block not found: {self.block_id}"


class BoundaryRejected(BlockGridError, ValueError):
    """A width/position candidate would leave the 12-column grid."""


class PersistenceCorrupt(BlockGridError):
    """Stored data for a key could not be decoded."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"{key}: {reason}")
        self.key = key
        self.reason = reason
