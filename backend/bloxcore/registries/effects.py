"""Effect implementations and the per-action effect registry."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from dataclasses import field
from typing import TYPE_CHECKING
from typing import Any
from typing import Awaitable
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional
from typing import Union

from bloxcore.registries.impls import ImplementationRegistry
from bloxcore.schemas.actions import Action
from bloxcore.schemas.actions import ActionLike
from bloxcore.schemas.actions import action_key
from bloxcore.schemas.definitions import EffectDefinition

if TYPE_CHECKING:  # pragma: no cover
    from bloxcore.persistence.hybrid import HybridPersistence
    from bloxcore.persistence.local import MenuPersistence
    from bloxcore.runtime.logger import FrameworkLogger

logger = logging.getLogger(__name__)

Dispatch = Callable[[ActionLike], None]


@dataclass
class Services:
    """Collaborators effects may talk to.  Anything left ``None`` is absent."""

    presets: Optional["HybridPersistence"] = None
    menu: Optional["MenuPersistence"] = None
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EffectContext:
    """Per-invocation context handed to an effect implementation."""

    config: Optional[Dict[str, Any]]
    get_state: Callable[[], Dict[str, Any]]
    services: Services
    logger: Optional["FrameworkLogger"] = None


EffectImpl = Callable[[EffectContext, Action, Dispatch], Union[None, Awaitable[None]]]


class EffectImplRegistry(ImplementationRegistry[EffectImpl]):
    def __init__(self) -> None:
        super().__init__("effect")


@dataclass(frozen=True)
class EffectEntry:
    id: str
    for_action: str
    run: EffectImpl
    config: Optional[Dict[str, Any]] = None
    description: Optional[str] = None


class EffectRegistry:
    """Maps an action name to the effects that run after it commits."""

    def __init__(self, impls: EffectImplRegistry):
        self._impls = impls
        self._by_action: Dict[str, List[EffectEntry]] = {}

    def apply_definition(self, definition: Union[EffectDefinition, Dict[str, Any]]) -> EffectEntry:
        """Resolve *definition* and append it to its action's effect list.

        Raises:
            MissingImplementationError: ``implKey`` was never registered.
        """
        if not isinstance(definition, EffectDefinition):
            definition = EffectDefinition.model_validate(definition)

        entry = EffectEntry(
            id=definition.id,
            for_action=definition.for_action,
            run=self._impls.get_or_throw(definition.impl_key),
            config=definition.config,
            description=definition.description,
        )
        self._by_action.setdefault(definition.for_action, []).append(entry)
        logger.debug(f"Effect {definition.id} bound to {definition.for_action}")
        return entry

    def get_for_action(self, action: Any) -> List[EffectEntry]:
        return list(self._by_action.get(action_key(action), ()))

    async def run_for_action(
        self,
        action: Action,
        dispatch: Dispatch,
        get_state: Callable[[], Dict[str, Any]],
        services: Services,
        framework_logger: Optional["FrameworkLogger"] = None,
    ) -> None:
        """Run every effect bound to *action* sequentially, awaiting each.

        Exceptions propagate to the caller (the effect task); effects that
        want to survive failures convert them into ``logs/append`` actions
        themselves.
        """
        for entry in self.get_for_action(action.type):
            context = EffectContext(
                config=entry.config,
                get_state=get_state,
                services=services,
                logger=framework_logger,
            )
            result = entry.run(context, action, dispatch)
            if inspect.isawaitable(result):
                await result


__all__ = [
    "Dispatch",
    "EffectContext",
    "EffectEntry",
    "EffectImpl",
    "EffectImplRegistry",
    "EffectRegistry",
    "Services",
]
