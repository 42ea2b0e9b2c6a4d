"""Auth and framework-menu reducers."""

from typing import Any
from typing import Dict
from typing import Optional

from bloxcore.registries.handlers import State
from bloxcore.schemas.actions import Action
from bloxcore.schemas.actions import ActionType

Config = Optional[Dict[str, Any]]


def auth_set_user(state: State, action: Action, config: Config = None) -> State:
    user = action.payload.get("user") or None
    auth = state.get("auth") if isinstance(state.get("auth"), dict) else {}
    return {**state, "auth": {**auth, "user": user, "isLoggedIn": user is not None}}


def framework_menu_hydrate(state: State, action: Action, config: Config = None) -> State:
    menu = action.payload.get("config")
    if not isinstance(menu, dict):
        return state
    layout = state.get("layout") if isinstance(state.get("layout"), dict) else {}
    return {**state, "layout": {**layout, "frameworkMenu": menu}}


SESSION_HANDLERS = [
    (ActionType.AUTH_SET_USER, "reducer:auth/setUser@1", auth_set_user),
    (ActionType.FRAMEWORK_MENU_HYDRATE, "reducer:frameworkMenu/hydrate@1", framework_menu_hydrate),
]
