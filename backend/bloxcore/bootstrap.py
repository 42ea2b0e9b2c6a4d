"""Assemble a ready-to-use workspace: context, persistence and initial state."""

from __future__ import annotations

import logging
from typing import Any
from typing import Callable
from typing import Dict
from typing import Iterable
from typing import Optional
from typing import Union

from bloxcore.config import Settings
from bloxcore.config import get_settings
from bloxcore.persistence.hybrid import HybridPersistence
from bloxcore.persistence.local import LocalPresetPersistence
from bloxcore.persistence.local import MenuPersistence
from bloxcore.persistence.local import Presets
from bloxcore.persistence.remote import RemotePresetStore
from bloxcore.persistence.storage import JsonFileStorage
from bloxcore.persistence.storage import StorageBackend
from bloxcore.registries.effects import Services
from bloxcore.registries.views import IdFactory
from bloxcore.registries.views import ViewDefinition
from bloxcore.runtime.context import CoreContext
from bloxcore.runtime.logger import StdlibLogger
from bloxcore.runtime.store import Listener
from bloxcore.schemas.actions import ActionLike
from bloxcore.schemas.actions import ActionType
from bloxcore.schemas.actions import make_action
from bloxcore.schemas.definitions import ViewDefinitionSpec

logger = logging.getLogger(__name__)

ViewLike = Union[ViewDefinition, ViewDefinitionSpec, Dict[str, Any]]


class Workspace:
    """What a host holds after :func:`bootstrap`.

    Thin facade over a :class:`CoreContext` plus the persistence objects the
    built-in effects talk to.
    """

    def __init__(self, context: CoreContext, presets: HybridPersistence, menu: MenuPersistence):
        self.context = context
        self.presets = presets
        self.menu = menu
        self._remote_unsubscribe: Optional[Callable[[], None]] = None

    @property
    def state(self) -> Dict[str, Any]:
        return self.context.get_state()

    def dispatch(self, action: ActionLike) -> None:
        self.context.dispatch(action)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.context.subscribe(listener)

    def select(self, key: str) -> Any:
        return self.context.select(key)

    async def settled(self) -> None:
        await self.context.settled()

    async def connect_remote(self, remote: RemotePresetStore, user_id: Optional[str] = None, handle: Any = None) -> None:
        """Start replicating presets to *remote* and follow its pushes.

        Remote presets are merged into the local map (local wins on name
        collisions) and hydrated into state before this returns.
        """
        await self.presets.configure(remote, user_id=user_id, handle=handle)
        self.dispatch(make_action(ActionType.EFFECTS_PRESETS_SYNC))
        await self.settled()

        if self._remote_unsubscribe is not None:
            self._remote_unsubscribe()
        self._remote_unsubscribe = self.presets.on_presets_changed(self._on_remote_presets)

    def _on_remote_presets(self, merged: Presets) -> None:
        logger.debug(f"Remote preset change: {len(merged)} presets after merge")
        self.dispatch(make_action(ActionType.PRESETS_HYDRATE, presets=merged))

    async def close(self) -> None:
        """Stop following the remote and drain effects and pending pushes."""
        if self._remote_unsubscribe is not None:
            self._remote_unsubscribe()
            self._remote_unsubscribe = None
        await self.settled()
        await self.presets.flush()


def bootstrap(
    views: Iterable[ViewLike],
    state: Optional[Dict[str, Any]] = None,
    auth: Optional[Dict[str, Any]] = None,
    settings: Optional[Settings] = None,
    logger: Any = None,
    storage: Optional[StorageBackend] = None,
    id_factory: Optional[IdFactory] = None,
) -> Workspace:
    """Build a workspace from view definitions and optional partial state.

    Args:
        views: View definitions to register.  Rejected ones (no icon) are
            logged and skipped.
        state: Partial application state merged over the defaults.
            ``viewDefinitions`` is filled from the registry when omitted.
        auth: Host auth configuration, stored under ``authConfig``.
        settings: Explicit settings; read from the environment otherwise.
        logger: Framework logger; defaults to the stdlib ``bloxcore`` logger.
        storage: Key/value backend for local persistence; defaults to JSON
            files under ``settings.storage_dir``.
        id_factory: Override for view-instance id minting.

    Effects requested here (preset and menu hydration) run on the event
    loop; outside one, ``await workspace.settled()`` runs them.
    """
    settings = settings or get_settings()
    framework_logger = logger if logger is not None else StdlibLogger(logging.getLogger("bloxcore"))
    storage = storage if storage is not None else JsonFileStorage(settings.storage_dir)

    local = LocalPresetPersistence(storage, framework_logger=framework_logger)
    hybrid = HybridPersistence(local, framework_logger=framework_logger)
    menu = MenuPersistence(storage, framework_logger=framework_logger)

    context = CoreContext(
        settings=settings,
        framework_logger=framework_logger,
        services=Services(presets=hybrid, menu=menu),
        id_factory=id_factory,
    )

    view_list = list(views)
    registered = [v for v in view_list if context.views.register(v)]
    context.logger.info(
        "bootstrap views registered.",
        {"count": len(registered), "rejected": len(view_list) - len(registered)},
    )

    initial: Dict[str, Any] = dict(state or {})
    if "viewDefinitions" not in initial:
        initial["viewDefinitions"] = context.views.summaries()
    if auth is not None:
        initial["authConfig"] = auth
    context.dispatch(make_action(ActionType.STATE_HYDRATE, state=initial))
    context.logger.info("bootstrap state hydrated.", {"keys": sorted(initial)})

    context.dispatch(make_action(ActionType.EFFECTS_PRESETS_HYDRATE))
    context.dispatch(make_action(ActionType.EFFECTS_FRAMEWORK_MENU_HYDRATE))

    return Workspace(context, hybrid, menu)
