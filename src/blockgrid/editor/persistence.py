"""
Persistence layer for editing sessions.

Sessions are stored in a key-value store under fixed keys, one JSON value
per key. Loading decodes every key independently: a missing key falls back
to its default, and a corrupt key is logged and reset to its default without
affecting the others.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

from PyQt5.QtCore import QSettings

from ..errors import PersistenceCorrupt
from .data_model import PageLayout
from .history import HistoryEntry
from .state import EditorModes, SessionState

logger = logging.getLogger(__name__)

T = TypeVar('T')

SETTINGS_ORG = "BlockGrid"
SETTINGS_APP = "PageBuilder"

# Keys for the stored session; changing them orphans existing data
STORAGE_KEYS = {
    'components': "blockgrid/components",
    'history': "blockgrid/history",
    'history_index': "blockgrid/history_index",
    'history_labels': "blockgrid/history_labels",
    'show_preview': "blockgrid/show_preview",
    'is_editing': "blockgrid/is_editing",
    'show_sidebar': "blockgrid/show_sidebar",
}


# =============================================================================
# STORES
# =============================================================================

class KeyValueStore(ABC):
    """String key-value store used for session persistence."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value under a key."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove a key if present."""

    def sync(self) -> None:
        """Flush pending writes to the backing storage."""


class MemoryStore(KeyValueStore):
    """Dictionary-backed store (tests, headless runs)."""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class QSettingsStore(KeyValueStore):
    """Store backed by QSettings (native settings, or an INI file)."""

    def __init__(self, settings: Optional[QSettings] = None):
        self._settings = settings if settings is not None else QSettings(SETTINGS_ORG, SETTINGS_APP)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'QSettingsStore':
        """Create a store that reads and writes an INI file."""
        return cls(QSettings(str(path), QSettings.IniFormat))

    @property
    def settings(self) -> QSettings:
        return self._settings

    def get(self, key: str) -> Optional[str]:
        if not self._settings.contains(key):
            return None
        value = self._settings.value(key)
        if value is None:
            return None
        # INI values containing commas can come back as lists
        if isinstance(value, list):
            return ",".join(str(v) for v in value)
        return str(value)

    def set(self, key: str, value: str) -> None:
        self._settings.setValue(key, value)

    def remove(self, key: str) -> None:
        self._settings.remove(key)

    def sync(self) -> None:
        self._settings.sync()


# =============================================================================
# DECODING
# =============================================================================

def _parse_json(key: str, raw: str) -> Any:
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise PersistenceCorrupt(key, f"invalid JSON ({exc})") from exc


def _decode_layout(key: str, data: Any) -> PageLayout:
    try:
        return PageLayout.from_list(data)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise PersistenceCorrupt(key, f"invalid component data ({exc!r})") from exc


def _decode_components(raw: str) -> PageLayout:
    key = STORAGE_KEYS['components']
    return _decode_layout(key, _parse_json(key, raw))


def _decode_history(raw: str) -> List[PageLayout]:
    key = STORAGE_KEYS['history']
    data = _parse_json(key, raw)
    if not isinstance(data, list):
        raise PersistenceCorrupt(key, "expected a list of snapshots")
    return [_decode_layout(key, snapshot) for snapshot in data]


def _decode_labels(raw: str) -> List[str]:
    key = STORAGE_KEYS['history_labels']
    data = _parse_json(key, raw)
    if not isinstance(data, list) or not all(isinstance(d, str) for d in data):
        raise PersistenceCorrupt(key, "expected a list of strings")
    return data


def _decode_index(raw: str) -> int:
    key = STORAGE_KEYS['history_index']
    data = _parse_json(key, raw)
    if isinstance(data, bool) or not isinstance(data, int):
        raise PersistenceCorrupt(key, f"expected an integer, got {data!r}")
    return data


def _flag_decoder(name: str) -> Callable[[str], bool]:
    key = STORAGE_KEYS[name]

    def decode(raw: str) -> bool:
        data = _parse_json(key, raw)
        if not isinstance(data, bool):
            raise PersistenceCorrupt(key, f"expected a boolean, got {data!r}")
        return data

    return decode


def _load_key(store: KeyValueStore, name: str,
              decoder: Callable[[str], T], default: T) -> T:
    raw = store.get(STORAGE_KEYS[name])
    if raw is None:
        return default
    try:
        return decoder(raw)
    except PersistenceCorrupt as exc:
        logger.warning("Discarding stored %s: %s", exc.key, exc.reason)
        return default


# =============================================================================
# LOAD / SAVE
# =============================================================================

def load_state(store: KeyValueStore) -> SessionState:
    """Load a session, falling back to defaults key by key."""
    defaults = EditorModes()

    layout = _load_key(store, 'components', _decode_components, PageLayout())
    snapshots = _load_key(store, 'history', _decode_history, [])
    cursor = _load_key(store, 'history_index', _decode_index, -1)
    labels = _load_key(store, 'history_labels', _decode_labels, [])

    if len(labels) != len(snapshots):
        if labels:
            logger.warning("History labels do not match history length, ignoring them")
        labels = [""] * len(snapshots)

    modes = EditorModes(
        show_preview=_load_key(store, 'show_preview', _flag_decoder('show_preview'),
                               defaults.show_preview),
        is_editing=_load_key(store, 'is_editing', _flag_decoder('is_editing'),
                             defaults.is_editing),
        show_sidebar=_load_key(store, 'show_sidebar', _flag_decoder('show_sidebar'),
                               defaults.show_sidebar),
    )

    logger.debug("Loaded session: %d blocks, %d snapshots, cursor %d",
                 len(layout), len(snapshots), cursor)
    return SessionState(
        layout=layout,
        history=tuple(HistoryEntry(s, d) for s, d in zip(snapshots, labels)),
        history_cursor=cursor,
        modes=modes,
    )


def save_state(store: KeyValueStore, state: SessionState) -> None:
    """Write every session key to the store."""
    values = {
        'components': state.layout.to_list(),
        'history': [entry.layout.to_list() for entry in state.history],
        'history_index': state.history_cursor,
        'history_labels': [entry.description for entry in state.history],
        'show_preview': state.modes.show_preview,
        'is_editing': state.modes.is_editing,
        'show_sidebar': state.modes.show_sidebar,
    }
    for name, value in values.items():
        store.set(STORAGE_KEYS[name], json.dumps(value))
    store.sync()


def clear_state(store: KeyValueStore) -> None:
    """Remove every session key from the store."""
    for key in STORAGE_KEYS.values():
        store.remove(key)
    store.sync()
