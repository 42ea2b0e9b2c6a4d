"""Aggregate of every registry one runtime needs, with the built-ins wired in.

Built-in behaviour is registered exactly the way a host registers its own:
an implementation under a versioned key, then a definition binding that key
to an action.  Nothing here is global; each :class:`CoreRegistries` is
independent.
"""

from __future__ import annotations

import logging
from typing import Any
from typing import Optional

from bloxcore.effects.auth import AUTH_EFFECTS
from bloxcore.effects.menu import MENU_EFFECTS
from bloxcore.effects.presets import PRESET_EFFECTS
from bloxcore.reducers.core import core_handlers
from bloxcore.reducers.layout import LAYOUT_HANDLERS
from bloxcore.reducers.presets import PRESET_HANDLERS
from bloxcore.reducers.session import SESSION_HANDLERS
from bloxcore.reducers.view_instances import view_instance_handlers
from bloxcore.registries.actions import ActionRegistry
from bloxcore.registries.effects import EffectImplRegistry
from bloxcore.registries.effects import EffectRegistry
from bloxcore.registries.handlers import HandlerImplRegistry
from bloxcore.registries.handlers import HandlerRegistry
from bloxcore.registries.selectors import SelectorImplRegistry
from bloxcore.registries.views import IdFactory
from bloxcore.registries.views import ViewRegistry
from bloxcore.runtime.logger import FrameworkLogger
from bloxcore.runtime.logger import wrap_logger
from bloxcore.schemas import payloads
from bloxcore.schemas.actions import ActionType
from bloxcore.schemas.actions import action_key
from bloxcore.selectors.framework import FRAMEWORK_SELECTORS

logger = logging.getLogger(__name__)

# Payload models for the built-in catalogue.  Actions missing here are still
# registered, just without payload validation.
BUILTIN_PAYLOAD_MODELS = {
    ActionType.CONTEXT_UPDATE: payloads.ContextUpdatePayload,
    ActionType.CONTEXT_PATCH: payloads.ContextPatchPayload,
    ActionType.PANELS_UPDATE: payloads.PanelsUpdatePayload,
    ActionType.LOGS_APPEND: payloads.LogsAppendPayload,
    ActionType.LAYOUT_SET_EXPANSION: payloads.SetExpansionPayload,
    ActionType.LAYOUT_SET_VIEW_ORDER: payloads.SetViewOrderPayload,
    ActionType.VIEWS_CREATE_INSTANCE: payloads.CreateInstancePayload,
    ActionType.VIEWS_UPDATE_LOCAL_CONTEXT: payloads.UpdateLocalContextPayload,
    ActionType.VIEWS_DESTROY_INSTANCE: payloads.DestroyInstancePayload,
    ActionType.PRESETS_SAVE: payloads.PresetNamePayload,
    ActionType.PRESETS_LOAD: payloads.PresetNamePayload,
    ActionType.PRESETS_DELETE: payloads.PresetNamePayload,
    ActionType.PRESETS_RENAME: payloads.PresetRenamePayload,
    ActionType.PRESETS_HYDRATE: payloads.PresetsHydratePayload,
    ActionType.AUTH_SET_USER: payloads.SetUserPayload,
}


def _handler_id(impl_key: str) -> str:
    # "reducer:logs/append@1" -> "handler:logs/append"
    return "handler:" + impl_key.split(":", 1)[1].rsplit("@", 1)[0]


class CoreRegistries:
    """Action catalogue plus handler, effect, selector and view registries."""

    def __init__(
        self,
        framework_logger: Any = None,
        id_factory: Optional[IdFactory] = None,
        register_builtins: bool = True,
    ):
        self.logger: FrameworkLogger = wrap_logger(framework_logger)
        self.actions = ActionRegistry()
        self.handler_impls = HandlerImplRegistry()
        self.handlers = HandlerRegistry(self.handler_impls)
        self.effect_impls = EffectImplRegistry()
        self.effects = EffectRegistry(self.effect_impls)
        self.selectors = SelectorImplRegistry()
        self.views = ViewRegistry(framework_logger=self.logger, id_factory=id_factory)

        if register_builtins:
            self.register_builtins()

    def register_builtins(self) -> None:
        for action in ActionType:
            self.actions.register(action.value, BUILTIN_PAYLOAD_MODELS.get(action))

        handler_rows = [
            *core_handlers(self.logger),
            *LAYOUT_HANDLERS,
            *view_instance_handlers(self.views),
            *PRESET_HANDLERS,
            *SESSION_HANDLERS,
        ]
        for action, impl_key, reducer in handler_rows:
            self.handler_impls.register(impl_key, reducer)
            self.handlers.apply_definition(
                {"id": _handler_id(impl_key), "action": action_key(action), "implKey": impl_key}
            )

        for definition_id, action, impl_key, effect, description in [*PRESET_EFFECTS, *MENU_EFFECTS, *AUTH_EFFECTS]:
            self.effect_impls.register(impl_key, effect)
            self.effects.apply_definition(
                {
                    "id": definition_id,
                    "forAction": action_key(action),
                    "implKey": impl_key,
                    "description": description,
                }
            )

        for key, selector in FRAMEWORK_SELECTORS:
            self.selectors.register(key, selector)

        logger.debug(
            f"Registered {len(handler_rows)} built-in handlers and {len(FRAMEWORK_SELECTORS)} selectors"
        )
