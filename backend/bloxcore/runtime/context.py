"""The explicit runtime object hosts hold instead of module-level singletons."""

from __future__ import annotations

import logging
from typing import Any
from typing import Callable
from typing import Dict
from typing import Optional

from bloxcore.config import Settings
from bloxcore.config import get_settings
from bloxcore.registries.core import CoreRegistries
from bloxcore.registries.effects import Services
from bloxcore.registries.packs import PackSource
from bloxcore.registries.packs import apply_pack
from bloxcore.registries.views import IdFactory
from bloxcore.runtime.dispatch import Dispatcher
from bloxcore.runtime.executor import EffectExecutor
from bloxcore.runtime.logger import wrap_logger
from bloxcore.runtime.store import Listener
from bloxcore.runtime.store import StateStore
from bloxcore.schemas.actions import ActionLike
from bloxcore.schemas.actions import ActionType
from bloxcore.schemas.actions import make_action
from bloxcore.schemas.definitions import DefinitionPack
from bloxcore.state.defaults import default_state
from bloxcore.state.validation import validate_state

logger = logging.getLogger(__name__)


class CoreContext:
    """Registries, store, effect executor and services for one workspace.

    Two contexts never share state, so tests can build as many as they like.
    """

    def __init__(
        self,
        state: Optional[Dict[str, Any]] = None,
        settings: Optional[Settings] = None,
        framework_logger: Any = None,
        services: Optional[Services] = None,
        registries: Optional[CoreRegistries] = None,
        id_factory: Optional[IdFactory] = None,
    ):
        self.settings = settings or get_settings()
        self.logger = wrap_logger(framework_logger)
        self.registries = registries or CoreRegistries(framework_logger=self.logger, id_factory=id_factory)
        self.services = services or Services()
        self.executor = EffectExecutor()

        validator = validate_state if self.settings.validate_state else None
        initial = state if state is not None else default_state(self.settings.max_log_entries)
        self.store = StateStore(initial, validator=validator)
        self._dispatcher = Dispatcher(self.registries, self.store, self.executor, self.services, self.logger)

    # Convenience accessors
    @property
    def views(self):
        return self.registries.views

    def get_state(self) -> Dict[str, Any]:
        return self.store.get_state()

    def dispatch(self, action: ActionLike) -> None:
        self._dispatcher.dispatch(action)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.store.subscribe(listener)

    def select(self, key: str) -> Any:
        """Apply selector *key* to the current state.

        Raises:
            MissingImplementationError: no selector is registered under *key*.
        """
        return self.registries.selectors.select(key, self.store.get_state())

    async def settled(self) -> None:
        """Wait for every scheduled effect (and the effects they trigger)."""
        await self.executor.settled()

    def apply_pack(self, source: PackSource) -> DefinitionPack:
        """Apply a definition pack and refresh ``viewDefinitions`` if it added views."""
        pack = apply_pack(self.registries, source)
        if pack.views:
            self.dispatch(
                make_action(ActionType.STATE_HYDRATE, state={"viewDefinitions": self.registries.views.summaries()})
            )
        return pack

    def reset(self, state: Optional[Dict[str, Any]] = None) -> None:
        """Replace the committed state wholesale.  Meant for tests."""
        self.store.set_state(state if state is not None else default_state(self.settings.max_log_entries))
