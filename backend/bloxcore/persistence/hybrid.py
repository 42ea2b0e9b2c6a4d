"""Hybrid preset persistence: local store of record + remote replica.

Writes hit local storage synchronously and, once a remote store is
configured, are replicated in the background.  A failed replication is
logged at warn and dropped; it never rolls back the local write nor reaches
the caller.  Reads are local.  The two merge operations combine both sides
with **local winning** on name collisions: local edits are the freshest
intent on this device, the remote is a catch-up source for presets created
elsewhere.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any
from typing import Awaitable
from typing import Callable
from typing import Coroutine
from typing import Dict
from typing import Optional
from typing import Set
from typing import Union

from bloxcore.persistence.local import LocalPresetPersistence
from bloxcore.persistence.local import Presets
from bloxcore.persistence.remote import RemotePresetStore
from bloxcore.runtime.logger import FrameworkLogger
from bloxcore.runtime.logger import StdlibLogger
from bloxcore.runtime.logger import wrap_logger

logger = logging.getLogger(__name__)

PresetsCallback = Callable[[Presets], Union[None, Awaitable[None]]]


def _noop() -> None:
    return None


class HybridPersistence:
    """Compose :class:`LocalPresetPersistence` with an optional remote store."""

    def __init__(self, local: LocalPresetPersistence, framework_logger: Any = None):
        self.local = local
        self._logger: FrameworkLogger = (
            StdlibLogger(logger) if framework_logger is None else wrap_logger(framework_logger)
        )
        self._remote: Optional[RemotePresetStore] = None
        self._pending: Set[asyncio.Task] = set()
        # Local writes that were not issued through this object (e.g. a v1
        # migration re-persist) still reach the remote.
        local.set_sync_callback(self.push_to_remote)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    async def configure(self, remote: RemotePresetStore, user_id: Optional[str] = None, handle: Any = None) -> None:
        """Initialise *remote* and start replicating to it."""
        await remote.initialize(handle, user_id)
        self._remote = remote
        logger.info(f"Hybrid persistence configured for user {user_id!r}")

    def is_configured(self) -> bool:
        return self._remote is not None

    def set_user_id(self, user_id: Optional[str]) -> None:
        if self._remote is not None:
            self._remote.set_user_id(user_id)

    def get_user_id(self) -> Optional[str]:
        return self._remote.get_user_id() if self._remote is not None else None

    # ------------------------------------------------------------------
    # Background replication
    # ------------------------------------------------------------------

    def _replicate(self, operation: str, coro: Coroutine[Any, Any, Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            self._logger.warn("Remote preset sync skipped: no running event loop.", {"operation": operation})
            return

        task = loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(lambda t: self._finish(operation, t))

    def _finish(self, operation: str, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._logger.warn(f"Background remote {operation} failed.", {"error": str(error)})

    async def flush(self) -> None:
        """Wait until every background replication has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ------------------------------------------------------------------
    # Writes: local first, remote best-effort
    # ------------------------------------------------------------------

    def push_to_remote(self, presets: Presets) -> None:
        """Replicate an already persisted local map."""
        if self._remote is not None:
            self._replicate("save_all", self._remote.save_all(presets))

    def save_all(self, presets: Presets) -> None:
        self.local.save_all(presets, skip_sync=True)
        if self._remote is not None:
            self._replicate("save_all", self._remote.save_all(presets))

    def save_preset(self, name: str, preset: Dict[str, Any]) -> None:
        self.local.save_preset(name, preset, skip_sync=True)
        if self._remote is not None:
            self._replicate("save_preset", self._remote.save_preset(name, preset))

    def delete_preset(self, name: str) -> None:
        self.local.delete_preset(name, skip_sync=True)
        if self._remote is not None:
            self._replicate("delete_preset", self._remote.delete_preset(name))

    def rename_preset(self, old_name: str, new_name: str) -> None:
        current = self.local.load_all() or {}
        preset = current.pop(old_name, None)
        if preset is None:
            return
        current[new_name] = {**preset, "name": new_name}
        self.local.save_all(current, skip_sync=True)
        if self._remote is not None:
            self._replicate("rename_preset", self._remote.rename_preset(old_name, new_name))

    def clear(self) -> None:
        self.local.clear()
        if self._remote is not None:
            self._replicate("clear", self._remote.clear())

    # ------------------------------------------------------------------
    # Reads and merges
    # ------------------------------------------------------------------

    def load_all(self) -> Optional[Presets]:
        return self.local.load_all()

    async def sync_from_remote(self) -> Optional[Presets]:
        """Raw remote read: no merge, no local write.  ``None`` if unconfigured."""
        if self._remote is None:
            return None
        try:
            return await self._remote.load_all()
        except Exception as exc:
            self._logger.warn("Remote preset load failed.", {"error": str(exc)})
            return None

    async def sync_to_remote(self) -> None:
        """Push the whole local map to the remote (awaited, unlike writes)."""
        if self._remote is None:
            return
        presets = self.local.load_all()
        if not presets:
            return
        try:
            await self._remote.save_all(presets)
        except Exception as exc:
            self._logger.warn("Remote preset push failed.", {"error": str(exc)})

    async def merge_from_remote(self) -> Optional[Presets]:
        """Local-wins merge of remote over local, persisted locally without echo."""
        if self._remote is None:
            return self.local.load_all() or None

        local_presets = self.local.load_all() or {}
        try:
            remote_presets = await self._remote.load_all()
        except Exception as exc:
            self._logger.warn("Remote preset load failed; using local presets.", {"error": str(exc)})
            remote_presets = None

        if not remote_presets:
            return local_presets or None

        merged = {**remote_presets, **local_presets}
        self.local.save_all(merged, skip_sync=True)
        return merged

    def on_presets_changed(self, callback: PresetsCallback) -> Callable[[], None]:
        """Re-merge on every remote change and hand the result to *callback*.

        Returns an unsubscribe function (a no-op when unconfigured).
        """
        if self._remote is None:
            return _noop

        async def handle(remote_presets: Optional[Presets]) -> None:
            local_presets = self.local.load_all() or {}
            merged = {**(remote_presets or {}), **local_presets}
            self.local.save_all(merged, skip_sync=True)
            result = callback(merged)
            if inspect.isawaitable(result):
                await result

        return self._remote.on_presets_changed(handle)


__all__ = ["HybridPersistence"]
