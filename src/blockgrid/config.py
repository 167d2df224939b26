"""
Grid constants and tunable editor settings.

The 12-column grid itself is fixed; everything else can be overridden
through ``config/*`` keys in the settings store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .editor.persistence import KeyValueStore

logger = logging.getLogger(__name__)


GRID_COLUMNS = 12
ROW_HEIGHT_PX = 80           # Fixed row height used to map drop points to rows
COLUMN_WIDTH_PX = 100        # Approximate column width used by edge-drag resize
DEFAULT_BLOCK_WIDTH = 6
HISTORY_LIMIT = 50
DEBOUNCE_MS = 300
MOBILE_BREAKPOINT_PX = 768

CONFIG_KEY_PREFIX = "config/"


@dataclass(frozen=True)
class EditorConfig:
    """Tunable editor settings."""
    row_height_px: int = ROW_HEIGHT_PX
    column_width_px: int = COLUMN_WIDTH_PX
    default_block_width: int = DEFAULT_BLOCK_WIDTH
    history_limit: int = HISTORY_LIMIT
    debounce_ms: int = DEBOUNCE_MS
    mobile_breakpoint_px: int = MOBILE_BREAKPOINT_PX

    def __post_init__(self):
        for name in ("row_height_px", "column_width_px", "history_limit"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be positive")
        if not 1 <= self.default_block_width <= GRID_COLUMNS:
            raise ValueError(f"default_block_width must be within 1..{GRID_COLUMNS}")
        if self.debounce_ms < 0:
            raise ValueError("debounce_ms must not be negative")

    @classmethod
    def from_store(cls, store: Optional['KeyValueStore']) -> 'EditorConfig':
        """Build a config from ``config/<field>`` overrides in a store.

        Invalid or out-of-range values are logged and ignored, leaving the
        default for that field in place.
        """
        config = cls()
        if store is None:
            return config

        for f in fields(cls):
            raw = store.get(CONFIG_KEY_PREFIX + f.name)
            if raw is None:
                continue
            try:
                config = replace(config, **{f.name: int(raw)})
            except (TypeError, ValueError) as exc:
                logger.warning("Ignoring config override %s=%r: %s", f.name, raw, exc)
        return config
