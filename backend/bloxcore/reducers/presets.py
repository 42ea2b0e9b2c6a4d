"""Preset reducers.

Presets live in ``state["layout"]["presets"]`` keyed by name.  Reducers only
touch state; persistence is requested through ``effects/presets/*``
follow-ups so the reducer phase stays synchronous and pure.
"""

from __future__ import annotations

import copy
from typing import Any
from typing import Dict
from typing import Optional
from typing import Union

from bloxcore.registries.handlers import HandlerResult
from bloxcore.registries.handlers import State
from bloxcore.reducers.layout import clamp_viewport_mode_to_capacity
from bloxcore.reducers.layout import normalize_main_area_count
from bloxcore.reducers.layout import normalize_viewport_width_mode
from bloxcore.schemas.actions import Action
from bloxcore.schemas.actions import ActionType
from bloxcore.schemas.actions import make_action
from bloxcore.schemas.presets import LayoutPreset

Config = Optional[Dict[str, Any]]

# Layout keys copied verbatim into / out of a preset.
_REGION_KEYS = (
    "mainViewOrder",
    "leftViewOrder",
    "rightViewOrder",
    "bottomViewOrder",
    "leftViewId",
    "rightViewId",
    "bottomViewId",
    "panelSizes",
)


def _layout(state: State) -> Dict[str, Any]:
    layout = state.get("layout")
    return layout if isinstance(layout, dict) else {}


def _presets(state: State) -> Dict[str, Any]:
    presets = _layout(state).get("presets")
    return presets if isinstance(presets, dict) else {}


def _clean_name(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def capture_preset(state: State, name: str) -> Dict[str, Any]:
    """Snapshot the current layout (and view instances) as a preset dict."""

    layout = _layout(state)
    fields: Dict[str, Any] = {
        "name": name,
        "mainAreaCount": normalize_main_area_count(layout.get("mainAreaCount"), 1),
        "viewportWidthMode": normalize_viewport_width_mode(layout.get("viewportWidthMode")),
        "expansion": dict(layout.get("expansion") or {}),
    }
    for key in _REGION_KEYS:
        if layout.get(key) is not None:
            fields[key] = copy.deepcopy(layout[key])
    instances = state.get("viewInstances")
    if isinstance(instances, dict) and instances:
        fields["viewInstances"] = copy.deepcopy(instances)
    return LayoutPreset.model_validate(fields).to_wire()


def presets_save(state: State, action: Action, config: Config = None) -> Union[State, HandlerResult]:
    name = _clean_name(action.payload.get("name"))
    if name is None:
        return state

    preset = capture_preset(state, name)
    layout = {**_layout(state), "presets": {**_presets(state), name: preset}, "activePreset": name}
    return HandlerResult(
        state={**state, "layout": layout},
        follow_ups=[make_action(ActionType.EFFECTS_PRESETS_SAVE, name=name, preset=preset)],
    )


def presets_load(state: State, action: Action, config: Config = None) -> State:
    """Apply a stored preset to the layout; unknown names are ignored."""

    name = action.payload.get("name")
    preset = _presets(state).get(name)
    if not isinstance(preset, dict):
        return state

    layout = _layout(state)
    count = normalize_main_area_count(preset.get("mainAreaCount"), layout.get("mainAreaCount") or 1)
    mode = clamp_viewport_mode_to_capacity(normalize_viewport_width_mode(preset.get("viewportWidthMode")), count)

    next_layout = {
        **layout,
        "mainAreaCount": count,
        "viewportWidthMode": mode,
        "activePreset": name,
    }
    if isinstance(preset.get("expansion"), dict):
        next_layout["expansion"] = {**(layout.get("expansion") or {}), **preset["expansion"]}
    for key in _REGION_KEYS:
        if key in preset:
            next_layout[key] = copy.deepcopy(preset[key])

    next_state = {**state, "layout": next_layout}
    snapshot = preset.get("viewInstances")
    if isinstance(snapshot, dict) and snapshot:
        current = state.get("viewInstances") if isinstance(state.get("viewInstances"), dict) else {}
        next_state["viewInstances"] = {**current, **copy.deepcopy(snapshot)}
    return next_state


def presets_delete(state: State, action: Action, config: Config = None) -> Union[State, HandlerResult]:
    name = action.payload.get("name")
    presets = _presets(state)
    if name not in presets:
        return state

    layout = {**_layout(state), "presets": {k: v for k, v in presets.items() if k != name}}
    if layout.get("activePreset") == name:
        layout["activePreset"] = None
    return HandlerResult(
        state={**state, "layout": layout},
        follow_ups=[make_action(ActionType.EFFECTS_PRESETS_DELETE, name=name)],
    )


def presets_rename(state: State, action: Action, config: Config = None) -> Union[State, HandlerResult]:
    old_name = action.payload.get("oldName")
    new_name = _clean_name(action.payload.get("newName"))
    presets = _presets(state)
    if old_name not in presets or new_name is None or new_name == old_name:
        return state

    renamed = {**presets[old_name], "name": new_name} if isinstance(presets[old_name], dict) else presets[old_name]
    next_presets = {k: v for k, v in presets.items() if k != old_name}
    next_presets[new_name] = renamed

    layout = {**_layout(state), "presets": next_presets}
    if layout.get("activePreset") == old_name:
        layout["activePreset"] = new_name
    return HandlerResult(
        state={**state, "layout": layout},
        follow_ups=[make_action(ActionType.EFFECTS_PRESETS_RENAME, oldName=old_name, newName=new_name)],
    )


def presets_hydrate(state: State, action: Action, config: Config = None) -> State:
    incoming = action.payload.get("presets")
    if not isinstance(incoming, dict) or not incoming:
        return state
    layout = {**_layout(state), "presets": {**_presets(state), **incoming}}
    return {**state, "layout": layout}


PRESET_HANDLERS = [
    (ActionType.PRESETS_SAVE, "reducer:presets/save@1", presets_save),
    (ActionType.PRESETS_LOAD, "reducer:presets/load@1", presets_load),
    (ActionType.PRESETS_DELETE, "reducer:presets/delete@1", presets_delete),
    (ActionType.PRESETS_RENAME, "reducer:presets/rename@1", presets_rename),
    (ActionType.PRESETS_HYDRATE, "reducer:presets/hydrate@1", presets_hydrate),
]
