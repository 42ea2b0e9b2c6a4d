"""Remote preset stores (the best-effort multi-device replica).

The hybrid layer only depends on the :class:`RemotePresetStore` protocol; two
implementations ship with the package:

* :class:`InMemoryRemoteStore` – a test double that can simulate pushes from
  another device and inject failures.
* :class:`SQLAlchemyRemoteStore` – a relational replica.  Blocking database
  work runs in a worker thread (``asyncio.to_thread``) and every write is
  announced on the event bus so all stores attached to the same database see
  each other's changes.
"""

from __future__ import annotations

import asyncio
import copy
import inspect
import logging
from typing import Any
from typing import Awaitable
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional
from typing import Protocol
from typing import Tuple
from typing import Union

from sqlalchemy import Engine
from sqlalchemy import or_
from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from bloxcore.database import db_session
from bloxcore.database import initialize_database
from bloxcore.database import make_engine
from bloxcore.database import make_sessionmaker
from bloxcore.events import EventBus
from bloxcore.events import USER_KEY
from bloxcore.events import EventType
from bloxcore.events import event_bus as default_event_bus
from bloxcore.models.models import LayoutPresetRecord

logger = logging.getLogger(__name__)

Presets = Dict[str, Dict[str, Any]]
ChangeCallback = Callable[[Optional[Presets]], Union[None, Awaitable[None]]]
Unsubscribe = Callable[[], None]


class RemotePresetStore(Protocol):
    """Async key/value replica of a user's presets."""

    async def initialize(self, handle: Any, user_id: Optional[str]) -> None: ...

    def set_user_id(self, user_id: Optional[str]) -> None: ...

    def get_user_id(self) -> Optional[str]: ...

    async def save_all(self, presets: Presets) -> None: ...

    async def save_preset(self, name: str, preset: Dict[str, Any]) -> None: ...

    async def delete_preset(self, name: str) -> None: ...

    async def rename_preset(self, old_name: str, new_name: str) -> None: ...

    async def load_all(self) -> Optional[Presets]: ...

    async def clear(self) -> None: ...

    def on_presets_changed(self, callback: ChangeCallback) -> Unsubscribe: ...


async def _invoke(callback: ChangeCallback, presets: Optional[Presets]) -> None:
    result = callback(presets)
    if inspect.isawaitable(result):
        await result


def _flag_system(presets: Presets) -> Presets:
    return {name: {**preset, "isSystemPreset": True} for name, preset in presets.items()}


# ---------------------------------------------------------------------------
# In-memory double
# ---------------------------------------------------------------------------


class InMemoryRemoteStore:
    """Dict-backed store for tests and offline demos.

    Set :attr:`fail_with` to an exception instance to make every subsequent
    async call raise it.  :attr:`calls` records ``(operation, args)`` tuples.
    """

    def __init__(self, user_id: Optional[str] = None, system_presets: Optional[Presets] = None):
        self.user_id = user_id
        self.fail_with: Optional[BaseException] = None
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.initialized_with: Any = None
        self._by_user: Dict[Optional[str], Presets] = {}
        if system_presets:
            self._by_user[None] = copy.deepcopy(system_presets)
        self._listeners: List[ChangeCallback] = []

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, args))
        if self.fail_with is not None:
            raise self.fail_with

    def _user_presets(self) -> Presets:
        return self._by_user.setdefault(self.user_id, {})

    async def _notify(self) -> None:
        snapshot = await self._snapshot()
        for listener in list(self._listeners):
            await _invoke(listener, snapshot)

    async def _snapshot(self) -> Optional[Presets]:
        shared = _flag_system(self._by_user.get(None, {})) if self.user_id is not None else {}
        own = self._by_user.get(self.user_id, {})
        merged = {**copy.deepcopy(shared), **copy.deepcopy(own)}
        return merged or None

    async def initialize(self, handle: Any, user_id: Optional[str]) -> None:
        self._record("initialize", handle, user_id)
        self.initialized_with = handle
        self.user_id = user_id

    def set_user_id(self, user_id: Optional[str]) -> None:
        self.user_id = user_id

    def get_user_id(self) -> Optional[str]:
        return self.user_id

    async def save_all(self, presets: Presets) -> None:
        self._record("save_all", presets)
        self._by_user[self.user_id] = copy.deepcopy(presets)
        await self._notify()

    async def save_preset(self, name: str, preset: Dict[str, Any]) -> None:
        self._record("save_preset", name, preset)
        self._user_presets()[name] = copy.deepcopy(preset)
        await self._notify()

    async def delete_preset(self, name: str) -> None:
        self._record("delete_preset", name)
        self._user_presets().pop(name, None)
        await self._notify()

    async def rename_preset(self, old_name: str, new_name: str) -> None:
        self._record("rename_preset", old_name, new_name)
        presets = self._user_presets()
        if old_name not in presets:
            return
        presets[new_name] = {**presets.pop(old_name), "name": new_name}
        await self._notify()

    async def load_all(self) -> Optional[Presets]:
        self._record("load_all")
        return await self._snapshot()

    async def clear(self) -> None:
        self._record("clear")
        self._by_user.pop(self.user_id, None)
        await self._notify()

    def on_presets_changed(self, callback: ChangeCallback) -> Unsubscribe:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def push(self, presets: Presets) -> None:
        """Simulate another device overwriting this user's presets."""
        self._by_user[self.user_id] = copy.deepcopy(presets)
        await self._notify()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


# ---------------------------------------------------------------------------
# SQLAlchemy replica
# ---------------------------------------------------------------------------


class SQLAlchemyRemoteStore:
    """Presets replicated to a relational database.

    Args:
        bus: Event bus used as the change stream; the package-wide default
            bus is used when omitted.
    """

    def __init__(self, bus: Optional[EventBus] = None):
        self._bus = bus or default_event_bus
        self._session_factory: Optional[sessionmaker] = None
        self._user_id: Optional[str] = None

    # -- lifecycle ----------------------------------------------------------

    async def initialize(self, handle: Union[Engine, sessionmaker, str, None], user_id: Optional[str]) -> None:
        """Bind to a database and create the preset table if needed.

        *handle* may be an engine, a sessionmaker or a database URL; ``None``
        means ``BLOX_DATABASE_URL``.
        """
        if isinstance(handle, sessionmaker):
            factory = handle
            engine = handle.kw["bind"]
        else:
            engine = handle if isinstance(handle, Engine) else make_engine(handle)
            factory = make_sessionmaker(engine)

        await asyncio.to_thread(initialize_database, engine)
        self._session_factory = factory
        self._user_id = user_id
        logger.info(f"Remote preset store ready at {engine.url} for user {user_id!r}")

    def set_user_id(self, user_id: Optional[str]) -> None:
        self._user_id = user_id

    def get_user_id(self) -> Optional[str]:
        return self._user_id

    def _factory(self) -> sessionmaker:
        if self._session_factory is None:
            raise RuntimeError("SQLAlchemyRemoteStore used before initialize()")
        return self._session_factory

    async def _announce(self) -> None:
        await self._bus.publish(EventType.PRESETS_CHANGED, {USER_KEY: self._user_id})

    # -- blocking helpers (run in worker threads) ---------------------------

    def _upsert(self, db, user_id: Optional[str], name: str, preset: Dict[str, Any]) -> None:
        row = db.execute(
            select(LayoutPresetRecord).where(self._user_filter(user_id), LayoutPresetRecord.name == name)
        ).scalar_one_or_none()
        if row is None:
            db.add(LayoutPresetRecord(user_id=user_id, name=name, data=preset))
        else:
            row.data = preset

    def _user_filter(self, user_id: Optional[str]):
        if user_id is None:
            return LayoutPresetRecord.user_id.is_(None)
        return LayoutPresetRecord.user_id == user_id

    def _save_all_sync(self, user_id: Optional[str], presets: Presets) -> None:
        with db_session(self._factory()) as db:
            existing = db.execute(select(LayoutPresetRecord).where(self._user_filter(user_id))).scalars().all()
            for row in existing:
                if row.name not in presets:
                    db.delete(row)
            db.flush()
            for name, preset in presets.items():
                self._upsert(db, user_id, name, preset)

    def _save_one_sync(self, user_id: Optional[str], name: str, preset: Dict[str, Any]) -> None:
        with db_session(self._factory()) as db:
            self._upsert(db, user_id, name, preset)

    def _delete_sync(self, user_id: Optional[str], name: Optional[str]) -> int:
        with db_session(self._factory()) as db:
            query = select(LayoutPresetRecord).where(self._user_filter(user_id))
            if name is not None:
                query = query.where(LayoutPresetRecord.name == name)
            rows = db.execute(query).scalars().all()
            for row in rows:
                db.delete(row)
            return len(rows)

    def _load_sync(self, user_id: Optional[str]) -> Optional[Presets]:
        with db_session(self._factory()) as db:
            query = select(LayoutPresetRecord)
            if user_id is None:
                query = query.where(LayoutPresetRecord.user_id.is_(None))
            else:
                query = query.where(or_(LayoutPresetRecord.user_id.is_(None), LayoutPresetRecord.user_id == user_id))
            rows = db.execute(query.order_by(LayoutPresetRecord.id)).scalars().all()

            shared: Presets = {}
            own: Presets = {}
            for row in rows:
                data = dict(row.data or {})
                if row.user_id is None and user_id is not None:
                    shared[row.name] = {**data, "isSystemPreset": True}
                else:
                    own[row.name] = data
        merged = {**shared, **own}
        return merged or None

    def _rename_sync(self, user_id: Optional[str], old_name: str, new_name: str) -> bool:
        with db_session(self._factory()) as db:
            row = db.execute(
                select(LayoutPresetRecord).where(self._user_filter(user_id), LayoutPresetRecord.name == old_name)
            ).scalar_one_or_none()
            if row is None:
                return False
            data = {**(row.data or {}), "name": new_name}
            db.delete(row)
            db.flush()
            self._upsert(db, user_id, new_name, data)
            return True

    # -- RemotePresetStore API ---------------------------------------------

    async def save_all(self, presets: Presets) -> None:
        await asyncio.to_thread(self._save_all_sync, self._user_id, copy.deepcopy(presets))
        await self._announce()

    async def save_preset(self, name: str, preset: Dict[str, Any]) -> None:
        await asyncio.to_thread(self._save_one_sync, self._user_id, name, copy.deepcopy(preset))
        await self._announce()

    async def delete_preset(self, name: str) -> None:
        removed = await asyncio.to_thread(self._delete_sync, self._user_id, name)
        if removed:
            await self._announce()

    async def rename_preset(self, old_name: str, new_name: str) -> None:
        if await asyncio.to_thread(self._rename_sync, self._user_id, old_name, new_name):
            await self._announce()

    async def load_all(self) -> Optional[Presets]:
        return await asyncio.to_thread(self._load_sync, self._user_id)

    async def clear(self) -> None:
        await asyncio.to_thread(self._delete_sync, self._user_id, None)
        await self._announce()

    def on_presets_changed(self, callback: ChangeCallback) -> Unsubscribe:
        """Deliver the reloaded preset map whenever this user's rows change.

        Changes to shared (``user_id`` NULL) presets reach every user.
        """

        async def handler(event: Dict[str, Any]) -> None:
            await _invoke(callback, await self.load_all())

        return self._bus.subscribe(EventType.PRESETS_CHANGED, handler, user=self.get_user_id)


__all__ = [
    "InMemoryRemoteStore",
    "RemotePresetStore",
    "SQLAlchemyRemoteStore",
]
