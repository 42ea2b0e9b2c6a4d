"""Versioned local persistence for layout presets and the framework menu.

Both blobs are stored as JSON under a fixed key:

* presets: ``{"version": 2, "presets": {name: preset}}``
* menu:    ``{"version": 1, "config": {"items": [...]}}``

A version-1 preset blob (boolean expanders) is migrated once and written
back.  Any other unknown version is discarded wholesale; guessing at a
foreign format is worse than losing a cache.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional

from bloxcore.constants import MENU_STORAGE_KEY
from bloxcore.constants import MENU_STORAGE_VERSION
from bloxcore.constants import PRESETS_STORAGE_KEY
from bloxcore.constants import PRESETS_STORAGE_VERSION
from bloxcore.exceptions import PersistenceError
from bloxcore.persistence.storage import StorageBackend
from bloxcore.runtime.logger import FrameworkLogger
from bloxcore.runtime.logger import StdlibLogger
from bloxcore.runtime.logger import wrap_logger
from bloxcore.schemas.presets import ExpanderState

logger = logging.getLogger(__name__)

Presets = Dict[str, Dict[str, Any]]
SyncCallback = Callable[[Presets], None]

_LOAD_ERRORS = (PersistenceError, ValueError, TypeError, AttributeError)


def _resolve_logger(framework_logger: Any) -> FrameworkLogger:
    if framework_logger is None:
        return StdlibLogger(logger)
    return wrap_logger(framework_logger)


def migrate_legacy_expansion(expansion: Dict[str, Any]) -> Dict[str, Any]:
    """Boolean expanders (v1) to tri-state strings: True → Opened, False → Closed."""

    return {
        side: (ExpanderState.OPENED.value if value else ExpanderState.CLOSED.value)
        if isinstance(value, bool)
        else value
        for side, value in expansion.items()
    }


def _migrate_v1(presets: Dict[str, Any]) -> Presets:
    migrated: Presets = {}
    for name, preset in presets.items():
        expansion = preset.get("expansion") if isinstance(preset, dict) else None
        if isinstance(expansion, dict) and any(isinstance(v, bool) for v in expansion.values()):
            migrated[name] = {**preset, "expansion": migrate_legacy_expansion(expansion)}
        else:
            migrated[name] = preset
    return migrated


class LocalPresetPersistence:
    """Read/write the whole preset map under one storage key."""

    def __init__(
        self,
        storage: StorageBackend,
        framework_logger: Any = None,
        key: str = PRESETS_STORAGE_KEY,
    ):
        self.storage = storage
        self.key = key
        self._logger = _resolve_logger(framework_logger)
        self._sync_callback: Optional[SyncCallback] = None

    def set_sync_callback(self, callback: Optional[SyncCallback]) -> None:
        """Register (or clear with ``None``) the hook fired after each write."""
        self._sync_callback = callback

    def save_all(self, presets: Presets, skip_sync: bool = False) -> None:
        """Persist *presets*; the sync callback fires unless *skip_sync*."""
        try:
            payload = json.dumps({"version": PRESETS_STORAGE_VERSION, "presets": presets})
            self.storage.set_item(self.key, payload)
        except (PersistenceError, TypeError, ValueError) as exc:
            self._logger.warn("Failed to persist layout presets.", {"error": str(exc)})
            return

        logger.debug(f"Saved {len(presets)} presets under {self.key}")
        if skip_sync or self._sync_callback is None:
            return
        try:
            self._sync_callback(presets)
        except Exception as exc:
            self._logger.warn("Preset sync callback failed.", {"error": str(exc)})

    def load_all(self) -> Optional[Presets]:
        """Return the stored map, ``None`` when absent, unreadable or discarded."""
        try:
            raw = self.storage.get_item(self.key)
            if not raw:
                return None
            data = json.loads(raw)
            version = data.get("version")
            presets = data.get("presets")
        except _LOAD_ERRORS as exc:
            self._logger.warn("Failed to load persisted layout presets.", {"error": str(exc)})
            return None

        if version == 1 and isinstance(presets, dict):
            migrated = _migrate_v1(presets)
            self._logger.info("Migrated layout presets from version 1.", {"count": len(migrated)})
            self.save_all(migrated)
            return migrated

        if version != PRESETS_STORAGE_VERSION or not isinstance(presets, dict):
            self._logger.warn("Layout presets version mismatch, clearing stored data.", {"version": version})
            self.clear()
            return None

        return presets

    def save_preset(self, name: str, preset: Dict[str, Any], skip_sync: bool = False) -> None:
        current = self.load_all() or {}
        current[name] = preset
        self.save_all(current, skip_sync=skip_sync)

    def delete_preset(self, name: str, skip_sync: bool = False) -> None:
        current = self.load_all() or {}
        current.pop(name, None)
        self.save_all(current, skip_sync=skip_sync)

    def clear(self) -> None:
        try:
            self.storage.remove_item(self.key)
        except PersistenceError as exc:
            self._logger.warn("Failed to clear persisted layout presets.", {"error": str(exc)})


class MenuPersistence:
    """Framework menu configuration, stored next to the presets."""

    def __init__(self, storage: StorageBackend, framework_logger: Any = None, key: str = MENU_STORAGE_KEY):
        self.storage = storage
        self.key = key
        self._logger = _resolve_logger(framework_logger)

    @staticmethod
    def default_config() -> Dict[str, Any]:
        return {"items": [], "version": MENU_STORAGE_VERSION}

    def save(self, config: Dict[str, Any]) -> None:
        try:
            self.storage.set_item(self.key, json.dumps({"version": MENU_STORAGE_VERSION, "config": config}))
        except (PersistenceError, TypeError, ValueError) as exc:
            self._logger.warn("Failed to persist framework menu config.", {"error": str(exc)})

    def load(self) -> Optional[Dict[str, Any]]:
        try:
            raw = self.storage.get_item(self.key)
            if not raw:
                return None
            data = json.loads(raw)
            version = data.get("version")
            config = data.get("config")
        except _LOAD_ERRORS as exc:
            self._logger.warn("Failed to load persisted framework menu config.", {"error": str(exc)})
            return None

        if version != MENU_STORAGE_VERSION or not isinstance(config, dict):
            self._logger.warn("Framework menu config version mismatch, clearing stored data.", {"version": version})
            self.clear()
            return None
        return config

    def clear(self) -> None:
        try:
            self.storage.remove_item(self.key)
        except PersistenceError as exc:
            self._logger.warn("Failed to clear persisted framework menu config.", {"error": str(exc)})

    @staticmethod
    def reorder_items(items: List[Dict[str, Any]], dragged_id: str, target_id: str) -> List[Dict[str, Any]]:
        """Move *dragged_id* to *target_id*'s slot and renumber ``order``."""
        ids = [item.get("id") for item in items]
        if dragged_id not in ids or target_id not in ids:
            return items
        reordered = list(items)
        dragged = reordered.pop(ids.index(dragged_id))
        reordered.insert(ids.index(target_id), dragged)
        return [{**item, "order": index} for index, item in enumerate(reordered)]


__all__ = [
    "LocalPresetPersistence",
    "MenuPersistence",
    "Presets",
    "migrate_legacy_expansion",
]
