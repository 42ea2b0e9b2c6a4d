"""Keep the remote preset store pointed at the signed-in user."""

from bloxcore.effects.helpers import report_failure
from bloxcore.registries.effects import Dispatch
from bloxcore.registries.effects import EffectContext
from bloxcore.schemas.actions import Action
from bloxcore.schemas.actions import ActionType

SOURCE = "effects/auth"

AUTH_SET_USER_IMPL = "effect:auth/set-user@1"


def auth_set_user_effect(context: EffectContext, action: Action, dispatch: Dispatch) -> None:
    hybrid = context.services.presets
    if hybrid is None:
        return
    user = action.payload.get("user")
    user_id = None
    if isinstance(user, dict):
        user_id = user.get("uid") or user.get("id")
    try:
        hybrid.set_user_id(str(user_id) if user_id is not None else None)
    except Exception as exc:
        report_failure(context, dispatch, "Updating preset store user failed.", SOURCE, exc)


AUTH_EFFECTS = [
    (
        "effect:auth/set-user",
        ActionType.AUTH_SET_USER,
        AUTH_SET_USER_IMPL,
        auth_set_user_effect,
        "Point remote preset replication at the current user.",
    ),
]
