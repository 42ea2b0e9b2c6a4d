"""View-instance lifecycle reducers.

``createInstance`` needs the view registry (definition defaults, id minting),
so the reducers are produced by :func:`view_instance_handlers` bound to one
registry instead of reaching for a global.
"""

from __future__ import annotations

from typing import Any
from typing import Dict
from typing import Optional

from bloxcore.registries.handlers import State
from bloxcore.registries.views import ViewRegistry
from bloxcore.schemas.actions import Action
from bloxcore.schemas.actions import ActionType

Config = Optional[Dict[str, Any]]


def _instances(state: State) -> Dict[str, Any]:
    instances = state.get("viewInstances")
    return instances if isinstance(instances, dict) else {}


def update_local_context(state: State, action: Action, config: Config = None) -> State:
    instance_id = action.payload.get("instanceId")
    instances = _instances(state)
    current = instances.get(instance_id)
    if not isinstance(current, dict):
        return state

    changes = action.payload.get("context")
    next_instance = {
        **current,
        "localContext": {**(current.get("localContext") or {}), **(changes if isinstance(changes, dict) else {})},
    }
    return {**state, "viewInstances": {**instances, instance_id: next_instance}}


def destroy_instance(state: State, action: Action, config: Config = None) -> State:
    instance_id = action.payload.get("instanceId")
    instances = _instances(state)
    if instance_id not in instances:
        return state
    remaining = {key: value for key, value in instances.items() if key != instance_id}
    return {**state, "viewInstances": remaining}


def view_instance_handlers(views: ViewRegistry):
    """``(action, implKey, reducer)`` triples bound to *views*."""

    def create_instance(state: State, action: Action, config: Config = None) -> State:
        instance = views.create_instance(action.payload.get("definitionId"), action.payload.get("overrides"))
        if instance is None:
            return state
        return {**state, "viewInstances": {**_instances(state), instance["instanceId"]: instance}}

    return [
        (ActionType.VIEWS_CREATE_INSTANCE, "reducer:views/createInstance@1", create_instance),
        (ActionType.VIEWS_UPDATE_LOCAL_CONTEXT, "reducer:views/updateLocalContext@1", update_local_context),
        (ActionType.VIEWS_DESTROY_INSTANCE, "reducer:views/destroyInstance@1", destroy_instance),
    ]
