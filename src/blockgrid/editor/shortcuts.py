"""
Keyboard shortcut mapping for undo/redo.

Ctrl (or Cmd) + Z undoes; Ctrl/Cmd + Y and Ctrl/Cmd + Shift + Z redo.
"""

from enum import Enum
from typing import Optional


class ShortcutAction(Enum):
    UNDO = "undo"
    REDO = "redo"


def resolve_shortcut(key: str, ctrl: bool = False, shift: bool = False,
                     meta: bool = False) -> Optional[ShortcutAction]:
    """Map a key press to an editor action, or None if it is not a shortcut."""
    if not (ctrl or meta):
        return None

    key = key.lower()
    if key == "z":
        return ShortcutAction.REDO if shift else ShortcutAction.UNDO
    if key == "y":
        return ShortcutAction.REDO
    return None
