"""Framework menu configuration effects."""

from bloxcore.effects.helpers import dispatch_log
from bloxcore.effects.helpers import report_failure
from bloxcore.registries.effects import Dispatch
from bloxcore.registries.effects import EffectContext
from bloxcore.schemas.actions import Action
from bloxcore.schemas.actions import ActionType
from bloxcore.schemas.actions import make_action

SOURCE = "effects/framework-menu"

MENU_SAVE_IMPL = "effect:framework-menu/save@1"
MENU_HYDRATE_IMPL = "effect:framework-menu/hydrate@1"


def framework_menu_save_effect(context: EffectContext, action: Action, dispatch: Dispatch) -> None:
    config = action.payload.get("config")
    menu = context.services.menu
    if not isinstance(config, dict) or menu is None:
        return
    try:
        menu.save(config)
    except Exception as exc:
        report_failure(context, dispatch, "Framework menu save failed.", SOURCE, exc)


def framework_menu_hydrate_effect(context: EffectContext, action: Action, dispatch: Dispatch) -> None:
    menu = context.services.menu
    if menu is None:
        return
    try:
        loaded = menu.load()
    except Exception as exc:
        report_failure(context, dispatch, "Framework menu hydrate failed.", SOURCE, exc)
        return

    if loaded is None:
        dispatch_log(dispatch, "warn", "No framework menu config loaded from local storage.", SOURCE)
    dispatch(make_action(ActionType.FRAMEWORK_MENU_HYDRATE, config=loaded or menu.default_config()))


MENU_EFFECTS = [
    (
        "effect:framework-menu/save",
        ActionType.EFFECTS_FRAMEWORK_MENU_SAVE,
        MENU_SAVE_IMPL,
        framework_menu_save_effect,
        "Persist framework menu configuration.",
    ),
    (
        "effect:framework-menu/hydrate",
        ActionType.EFFECTS_FRAMEWORK_MENU_HYDRATE,
        MENU_HYDRATE_IMPL,
        framework_menu_hydrate_effect,
        "Hydrate framework menu configuration.",
    ),
]
