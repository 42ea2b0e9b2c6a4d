"""The dispatch pipeline: validate, fold, commit, schedule, follow up.

All state transitions go through :meth:`Dispatcher.dispatch`.  The reducer
phase is synchronous and finishes (including the commit and subscriber
notification) before ``dispatch`` returns.  Effects are scheduled on the
:class:`EffectExecutor` and are never awaited here.
"""

from __future__ import annotations

import logging
from typing import List

from bloxcore.exceptions import StateValidationError
from bloxcore.registries.core import CoreRegistries
from bloxcore.registries.effects import Services
from bloxcore.registries.handlers import unwrap_result
from bloxcore.runtime.executor import EffectExecutor
from bloxcore.runtime.logger import FrameworkLogger
from bloxcore.runtime.store import StateStore
from bloxcore.schemas.actions import Action
from bloxcore.schemas.actions import ActionLike
from bloxcore.schemas.actions import ActionType
from bloxcore.schemas.actions import coerce_action
from bloxcore.schemas.actions import make_action

logger = logging.getLogger(__name__)

REJECTION_SOURCE = "dispatch"


class Dispatcher:
    def __init__(
        self,
        registries: CoreRegistries,
        store: StateStore,
        executor: EffectExecutor,
        services: Services,
        framework_logger: FrameworkLogger,
    ):
        self.registries = registries
        self.store = store
        self.executor = executor
        self.services = services
        self.logger = framework_logger

    def dispatch(self, action: ActionLike) -> None:
        """Run *action* through the pipeline.

        Payload rejections and folds that would commit an invalid state are
        no-ops reported through a ``logs/append`` warn entry.

        Args:
            action: An :class:`Action` or its wire form ``{"type", "payload"}``.

        Raises:
            pydantic.ValidationError: *action* is not a well-formed action.
        """
        action = coerce_action(action)

        check = self.registries.actions.check(action)
        if not check.ok:
            self._reject(action, check.error or "invalid payload")
            return
        if check.payload != action.payload:
            action = action.model_copy(update={"payload": check.payload})

        follow_ups: List[ActionLike] = []
        handlers = self.registries.handlers.get_for_action(action.type)
        if handlers:
            previous = self.store.get_state()
            state = previous
            for entry in handlers:
                state, requested = unwrap_result(entry.reduce(state, action, entry.config))
                follow_ups.extend(requested)
            # A fold that changed nothing is not a commit; subscribers stay quiet.
            if state is not previous:
                try:
                    self.store.set_state(state)
                except StateValidationError as e:
                    self._reject(action, "; ".join(e.errors), reason="invalid resulting state")
                    return

        if self.registries.effects.get_for_action(action.type):
            self.executor.submit(lambda: self._run_effects(action), label=f"effects:{action.type}")

        for follow_up in [*follow_ups, *action.follow_ups]:
            self.dispatch(follow_up)

    async def _run_effects(self, action: Action) -> None:
        await self.registries.effects.run_for_action(
            action,
            self.dispatch,
            self.store.get_state,
            self.services,
            self.logger,
        )

    def _reject(self, action: Action, error: str, reason: str = "invalid payload") -> None:
        logger.debug(f"Rejected {action.type} ({reason}): {error}")
        self.logger.warn(f"Rejected action with {reason}.", {"action": action.type, "error": error})
        if action.type == ActionType.LOGS_APPEND.value:
            # A malformed log entry must not recurse into another log entry.
            return
        self.dispatch(
            make_action(
                ActionType.LOGS_APPEND,
                level="warn",
                message=f"Rejected action {action.type}: {reason}.",
                source=REJECTION_SOURCE,
                data={"action": action.type, "error": error},
            )
        )
