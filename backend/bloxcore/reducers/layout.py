"""Layout / workspace reducers (expanders, overlay, viewport, panel count)."""

from __future__ import annotations

import math
import re
from typing import Any
from typing import Callable
from typing import Dict
from typing import Optional

from bloxcore.constants import EXPANSION_SIDES
from bloxcore.constants import MAX_MAIN_AREA_COUNT
from bloxcore.constants import MIN_MAIN_AREA_COUNT
from bloxcore.constants import VIEW_ORDER_KEYS
from bloxcore.constants import VIEWPORT_WIDTH_MODES
from bloxcore.registries.handlers import State
from bloxcore.schemas.actions import Action
from bloxcore.schemas.actions import ActionType
from bloxcore.schemas.presets import ExpanderState
from bloxcore.state.utils import to_number

Config = Optional[Dict[str, Any]]

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def normalize_viewport_width_mode(mode: Any) -> str:
    return mode if isinstance(mode, str) and mode in VIEWPORT_WIDTH_MODES else "1x"


def normalize_main_area_count(value: Any, fallback: int = 1) -> int:
    """Round and clamp *value* into ``[1, 5]``; non-numeric input yields *fallback*."""
    number = to_number(value)
    if number is None:
        return fallback
    # Half-up rounding: 2.5 -> 3
    rounded = math.floor(number + 0.5)
    return min(MAX_MAIN_AREA_COUNT, max(MIN_MAIN_AREA_COUNT, rounded))


def clamp_viewport_mode_to_capacity(mode: Any, capacity: int) -> str:
    """Clamp a ``"{n}x"`` viewport mode to at most *capacity* panels.

    >>> clamp_viewport_mode_to_capacity("4x", 2)
    '2x'
    >>> clamp_viewport_mode_to_capacity("bogus", 3)
    '1x'
    """
    match = _LEADING_INT.match(mode) if isinstance(mode, str) else None
    if match is None:
        return "1x"
    multiplier = int(match.group(1))
    if multiplier < 1:
        return "1x"
    return f"{min(multiplier, capacity)}x"


def toggle_expander_state(current: Any) -> str:
    if current in (ExpanderState.CLOSED.value, ExpanderState.COLLAPSED.value):
        return ExpanderState.OPENED.value
    return ExpanderState.CLOSED.value


def _layout(state: State) -> Dict[str, Any]:
    layout = state.get("layout")
    return layout if isinstance(layout, dict) else {}


def _with_layout(state: State, **changes: Any) -> State:
    return {**state, "layout": {**_layout(state), **changes}}


# ---------------------------------------------------------------------------
# Expanders & overlay
# ---------------------------------------------------------------------------


def set_expansion(state: State, action: Action, config: Config = None) -> State:
    """Set or toggle one side's expander.

    ``expanded`` (bool) maps to Opened/Closed, a string ``state`` is stored
    as-is, and with neither the side toggles between Opened and Closed.
    """
    payload = action.payload
    side = payload.get("side")
    if side not in EXPANSION_SIDES:
        return state

    expansion = dict(_layout(state).get("expansion") or {})
    expanded = payload.get("expanded")
    requested = payload.get("state")
    if isinstance(expanded, bool):
        expansion[side] = ExpanderState.OPENED.value if expanded else ExpanderState.CLOSED.value
    elif isinstance(requested, str):
        expansion[side] = requested
    else:
        expansion[side] = toggle_expander_state(expansion.get(side))
    return _with_layout(state, expansion=expansion)


def set_overlay_view(state: State, action: Action, config: Config = None) -> State:
    return _with_layout(state, overlayView=action.payload.get("viewId"))


def set_overlay_expander(state: State, action: Action, config: Config = None) -> State:
    return _with_layout(state, overlayExpander=action.payload.get("viewId"))


def unset_overlay_expander(state: State, action: Action, config: Config = None) -> State:
    return _with_layout(state, overlayExpander=None)


def reset_expanders(state: State, action: Action, config: Config = None) -> State:
    closed = ExpanderState.CLOSED.value
    expansion = {**(_layout(state).get("expansion") or {}), **{side: closed for side in EXPANSION_SIDES}}
    return _with_layout(state, expansion=expansion)


# ---------------------------------------------------------------------------
# Viewport & main area
# ---------------------------------------------------------------------------


def set_viewport_width_mode(state: State, action: Action, config: Config = None) -> State:
    return _with_layout(state, viewportWidthMode=normalize_viewport_width_mode(action.payload.get("mode")))


def set_main_area_count(state: State, action: Action, config: Config = None) -> State:
    """Update ``mainAreaCount`` and pull the viewport mode down to the new capacity."""
    layout = _layout(state)
    payload = action.payload
    raw = payload["count"] if payload.get("count") is not None else payload.get("mainAreaCount")
    previous = layout.get("mainAreaCount")
    fallback = previous if isinstance(previous, int) and not isinstance(previous, bool) else 1
    count = normalize_main_area_count(raw, fallback)

    changes: Dict[str, Any] = {"mainAreaCount": count}
    current_mode = layout.get("viewportWidthMode")
    clamped = clamp_viewport_mode_to_capacity(current_mode, count)
    if current_mode is not None and clamped != current_mode:
        changes["viewportWidthMode"] = clamped
    return _with_layout(state, **changes)


def set_view_order(state: State, action: Action, config: Config = None) -> State:
    """Replace one region's view order, dropping duplicates and blanks."""
    key = VIEW_ORDER_KEYS.get(action.payload.get("region"))
    order = action.payload.get("order")
    if key is None or not isinstance(order, list):
        return state
    seen: Dict[str, None] = {}
    for view_id in order:
        if isinstance(view_id, str) and view_id.strip():
            seen.setdefault(view_id, None)
    return _with_layout(state, **{key: list(seen)})


# ---------------------------------------------------------------------------
# Drag bookkeeping
# ---------------------------------------------------------------------------


def drag_start(state: State, action: Action, config: Config = None) -> State:
    view_id = action.payload.get("viewId")
    if not isinstance(view_id, str) or not view_id:
        return state
    return _with_layout(state, draggedViewId=view_id)


def drag_end(state: State, action: Action, config: Config = None) -> State:
    if _layout(state).get("draggedViewId") is None:
        return state
    return _with_layout(state, draggedViewId=None)


def toggle_in_design(state: State, action: Action, config: Config = None) -> State:
    """Enter or leave design mode; a boolean ``inDesign`` forces the value."""
    requested = action.payload.get("inDesign")
    current = bool(_layout(state).get("inDesign"))
    in_design = requested if isinstance(requested, bool) else not current
    if in_design == current and "inDesign" in _layout(state):
        return state
    return _with_layout(state, inDesign=in_design)


def _key(action: ActionType) -> str:
    return f"reducer:{action.value}@1"


LAYOUT_HANDLERS: list[tuple[ActionType, str, Callable[..., State]]] = [
    (ActionType.LAYOUT_SET_EXPANSION, _key(ActionType.LAYOUT_SET_EXPANSION), set_expansion),
    (ActionType.LAYOUT_SET_OVERLAY_VIEW, _key(ActionType.LAYOUT_SET_OVERLAY_VIEW), set_overlay_view),
    (ActionType.LAYOUT_SET_OVERLAY_EXPANDER, _key(ActionType.LAYOUT_SET_OVERLAY_EXPANDER), set_overlay_expander),
    (ActionType.LAYOUT_UNSET_OVERLAY_EXPANDER, _key(ActionType.LAYOUT_UNSET_OVERLAY_EXPANDER), unset_overlay_expander),
    (ActionType.LAYOUT_RESET_EXPANDERS, _key(ActionType.LAYOUT_RESET_EXPANDERS), reset_expanders),
    (
        ActionType.LAYOUT_SET_VIEWPORT_WIDTH_MODE,
        _key(ActionType.LAYOUT_SET_VIEWPORT_WIDTH_MODE),
        set_viewport_width_mode,
    ),
    (ActionType.LAYOUT_SET_MAIN_AREA_COUNT, _key(ActionType.LAYOUT_SET_MAIN_AREA_COUNT), set_main_area_count),
    (ActionType.LAYOUT_SET_VIEW_ORDER, _key(ActionType.LAYOUT_SET_VIEW_ORDER), set_view_order),
    (ActionType.LAYOUT_DRAG_START, _key(ActionType.LAYOUT_DRAG_START), drag_start),
    (ActionType.LAYOUT_DRAG_END, _key(ActionType.LAYOUT_DRAG_END), drag_end),
    (ActionType.LAYOUT_TOGGLE_IN_DESIGN, _key(ActionType.LAYOUT_TOGGLE_IN_DESIGN), toggle_in_design),
]
