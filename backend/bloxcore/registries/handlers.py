"""Reducer implementations and their per-action ordered registry.

Several handlers may be bound to one action.  They are folded in
registration order: the second handler sees the state returned by the first,
and nobody outside the fold sees the intermediate value.  Registration order
is therefore part of the public contract.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional
from typing import Tuple
from typing import Union

from bloxcore.registries.impls import ImplementationRegistry
from bloxcore.schemas.actions import Action
from bloxcore.schemas.actions import ActionLike
from bloxcore.schemas.actions import action_key
from bloxcore.schemas.definitions import HandlerDefinition

logger = logging.getLogger(__name__)

State = Dict[str, Any]


@dataclass(frozen=True)
class HandlerResult:
    """Reducer return value that also requests follow-up actions."""

    state: State
    follow_ups: List[ActionLike] = field(default_factory=list)


_WRAPPER_KEYS = ({"state"}, {"state", "followUps"})


def unwrap_result(result: Any) -> Tuple[State, List[ActionLike]]:
    """Split a reducer return into ``(state, follow_ups)``.

    Besides :class:`HandlerResult`, a plain ``{"state": ..., "followUps": [...]}``
    mapping is accepted when those are its only keys and ``state`` is a dict.
    """
    if isinstance(result, HandlerResult):
        return result.state, list(result.follow_ups)
    if isinstance(result, dict) and set(result) in _WRAPPER_KEYS and isinstance(result["state"], dict):
        follow_ups = result.get("followUps") or []
        return result["state"], list(follow_ups)
    return result, []


HandlerImpl = Callable[[State, Action, Optional[Dict[str, Any]]], Union[State, HandlerResult]]


class HandlerImplRegistry(ImplementationRegistry[HandlerImpl]):
    def __init__(self) -> None:
        super().__init__("handler")


@dataclass(frozen=True)
class HandlerEntry:
    id: str
    action: str
    reduce: HandlerImpl
    config: Optional[Dict[str, Any]] = None
    description: Optional[str] = None


class HandlerRegistry:
    """Maps an action name to the ordered list of handler entries."""

    def __init__(self, impls: HandlerImplRegistry):
        self._impls = impls
        self._by_action: Dict[str, List[HandlerEntry]] = {}

    def apply_definition(self, definition: Union[HandlerDefinition, Dict[str, Any]]) -> HandlerEntry:
        """Resolve *definition* against the implementation registry and append it.

        Raises:
            MissingImplementationError: ``implKey`` was never registered.
        """
        if not isinstance(definition, HandlerDefinition):
            definition = HandlerDefinition.model_validate(definition)

        entry = HandlerEntry(
            id=definition.id,
            action=definition.action,
            reduce=self._impls.get_or_throw(definition.impl_key),
            config=definition.config,
            description=definition.description,
        )
        self._by_action.setdefault(definition.action, []).append(entry)
        logger.debug(f"Handler {definition.id} bound to {definition.action}")
        return entry

    def get_for_action(self, action: Any) -> List[HandlerEntry]:
        # Copy so a handler registering another handler mid-dispatch cannot
        # change the fold that is already running.
        return list(self._by_action.get(action_key(action), ()))

    def actions(self) -> List[str]:
        return list(self._by_action)


__all__ = [
    "HandlerEntry",
    "HandlerImpl",
    "HandlerImplRegistry",
    "HandlerRegistry",
    "HandlerResult",
    "State",
]
