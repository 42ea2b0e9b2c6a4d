"""Action message model and the built-in action catalogue.

An :class:`Action` is the only message shape the runtime accepts.  On the
wire it is ``{"type": str, "payload"?: object, "followUps"?: [...]}``; inside
the process it is an immutable pydantic model so handlers cannot mutate the
message they were handed.
"""

from __future__ import annotations

from enum import Enum
from typing import Any
from typing import Dict
from typing import List
from typing import Union

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator
from pydantic import model_validator


class ActionType(str, Enum):
    """Identifiers of every action the built-in handlers/effects react to."""

    # Generic state plumbing
    STATE_HYDRATE = "state/hydrate"
    CONTEXT_UPDATE = "context/update"
    CONTEXT_PATCH = "context/patch"
    LAYOUT_UPDATE = "layout/update"
    PANELS_UPDATE = "panels/update"
    LOGS_APPEND = "logs/append"
    LOGS_CLEAR = "logs/clear"
    LOGS_SET_MAX = "logs/setMax"

    # Layout / workspace
    LAYOUT_SET_EXPANSION = "layout/setExpansion"
    LAYOUT_SET_OVERLAY_VIEW = "layout/setOverlayView"
    LAYOUT_SET_OVERLAY_EXPANDER = "layout/setOverlayExpander"
    LAYOUT_UNSET_OVERLAY_EXPANDER = "layout/unsetOverlayExpander"
    LAYOUT_RESET_EXPANDERS = "layout/resetExpanders"
    LAYOUT_SET_VIEWPORT_WIDTH_MODE = "layout/setViewportWidthMode"
    LAYOUT_SET_MAIN_AREA_COUNT = "layout/setMainAreaCount"
    LAYOUT_SET_VIEW_ORDER = "layout/setViewOrder"
    LAYOUT_DRAG_START = "layout/dragStart"
    LAYOUT_DRAG_END = "layout/dragEnd"
    LAYOUT_TOGGLE_IN_DESIGN = "layout/toggleInDesign"

    # View instances
    VIEWS_CREATE_INSTANCE = "views/createInstance"
    VIEWS_UPDATE_LOCAL_CONTEXT = "views/updateLocalContext"
    VIEWS_DESTROY_INSTANCE = "views/destroyInstance"

    # Presets (reducers)
    PRESETS_SAVE = "presets/save"
    PRESETS_LOAD = "presets/load"
    PRESETS_DELETE = "presets/delete"
    PRESETS_RENAME = "presets/rename"
    PRESETS_HYDRATE = "presets/hydrate"

    # Presets (effects)
    EFFECTS_PRESETS_SAVE = "effects/presets/save"
    EFFECTS_PRESETS_DELETE = "effects/presets/delete"
    EFFECTS_PRESETS_RENAME = "effects/presets/rename"
    EFFECTS_PRESETS_HYDRATE = "effects/presets/hydrate"
    EFFECTS_PRESETS_SYNC = "effects/presets/sync"

    # Framework menu
    FRAMEWORK_MENU_HYDRATE = "frameworkMenu/hydrate"
    EFFECTS_FRAMEWORK_MENU_SAVE = "effects/frameworkMenu/save"
    EFFECTS_FRAMEWORK_MENU_HYDRATE = "effects/frameworkMenu/hydrate"

    # Session
    AUTH_SET_USER = "auth/setUser"


def action_key(name: Union[str, Enum]) -> str:
    """Normalise an action identifier (plain string or enum member) to ``str``."""

    if isinstance(name, Enum):
        return str(name.value)
    return str(name)


class Action(BaseModel):
    """Immutable unit of intent: ``type`` plus an optional payload."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    follow_ups: List["Action"] = Field(default_factory=list, alias="followUps")

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_action_key(cls, data: Any) -> Any:
        # Older producers send ``{"action": ..., "payload": ...}``.
        if isinstance(data, dict) and "type" not in data and "action" in data:
            data = {**data, "type": data["action"]}
            data.pop("action")
        return data

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> Any:
        if isinstance(value, Enum):
            return action_key(value)
        return value

    @field_validator("payload", mode="before")
    @classmethod
    def _default_payload(cls, value: Any) -> Any:
        # ``{"type": "x", "payload": null}`` is a legal wire message.
        return {} if value is None else value

    @property
    def name(self) -> str:  # noqa: D401 – alias kept for readability in reducers
        """Action identifier (same as :attr:`type`)."""
        return self.type

    def to_wire(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type, "payload": dict(self.payload)}
        if self.follow_ups:
            data["followUps"] = [a.to_wire() for a in self.follow_ups]
        return data


ActionLike = Union[Action, Dict[str, Any]]


def make_action(type_: Union[str, Enum], payload: Dict[str, Any] | None = None, **kwargs: Any) -> Action:
    """Convenience constructor: ``make_action("logs/append", message="hi")``."""

    body = dict(payload or {})
    body.update(kwargs)
    return Action(type=action_key(type_), payload=body)


def coerce_action(value: ActionLike) -> Action:
    """Parse a wire dict into an :class:`Action` (actions pass through)."""

    if isinstance(value, Action):
        return value
    return Action.model_validate(value)


__all__ = [
    "Action",
    "ActionLike",
    "ActionType",
    "action_key",
    "coerce_action",
    "make_action",
]
