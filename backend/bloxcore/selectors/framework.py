"""Built-in selector implementations.

Selectors are pure projections over state; hosts call them through
``CoreContext.select(key)`` so they never depend on the raw state shape.
"""

from __future__ import annotations

import re
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional

State = Dict[str, Any]

VIEWPORT_WIDTHS = {
    "1x": "100%",
    "2x": "50%",
    "3x": "33.333%",
    "4x": "25%",
    "5x": "20%",
}

SIDE_PANEL_WIDTH = "clamp(220px, 22vw, 360px)"
BOTTOM_PANEL_HEIGHT = "clamp(180px, 26vh, 320px)"

_LEADING_INT = re.compile(r"^\s*(\d+)")


def _layout(state: State) -> Dict[str, Any]:
    layout = state.get("layout")
    return layout if isinstance(layout, dict) else {}


def _panels(state: State) -> List[Dict[str, Any]]:
    panels = state.get("panels")
    return [p for p in panels if isinstance(p, dict)] if isinstance(panels, list) else []


def is_expander_open(value: Any) -> bool:
    return value in ("Opened", "Expanded")


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


def active_preset(state: State) -> Optional[str]:
    return _layout(state).get("activePreset")


def layout_presets(state: State) -> List[Dict[str, Any]]:
    presets = _layout(state).get("presets")
    return list(presets.values()) if isinstance(presets, dict) else []


def can_drag_views(state: State) -> bool:
    auth = state.get("auth") or {}
    return bool(auth.get("isAdmin") and _layout(state).get("inDesign"))


def menu_items(state: State) -> List[Any]:
    menu = _layout(state).get("frameworkMenu")
    items = menu.get("items") if isinstance(menu, dict) else None
    return list(items) if isinstance(items, list) else []


# ---------------------------------------------------------------------------
# Logs / auth / views
# ---------------------------------------------------------------------------


def logs_view(state: State) -> Dict[str, Any]:
    logs = state.get("logs") if isinstance(state.get("logs"), dict) else {}
    return {"entries": list(logs.get("entries") or []), "maxEntries": logs.get("maxEntries") or 0}


def auth_state(state: State) -> Dict[str, Any]:
    auth = state.get("auth")
    if isinstance(auth, dict):
        return auth
    return {"isLoggedIn": False, "isAdmin": False, "user": None}


def view_definitions(state: State) -> List[Dict[str, Any]]:
    return list(state.get("viewDefinitions") or [])


def resolve_view_instance(state: State, view_id: Optional[str]) -> Optional[Dict[str, Any]]:
    """Describe the instance behind *view_id*.

    Unknown ids still resolve to ``{"instanceId": id, "viewId": id}`` so a
    host can fall back to treating the id as a definition id.
    """
    if not view_id:
        return None
    instance = (state.get("viewInstances") or {}).get(view_id)
    if isinstance(instance, dict):
        return {
            "instanceId": instance.get("instanceId"),
            "viewId": instance.get("definitionId"),
            "settings": instance.get("localContext") or {},
        }
    return {"instanceId": view_id, "viewId": view_id}


def view_instance_resolver(state: State) -> Callable[[Optional[str]], Optional[Dict[str, Any]]]:
    return lambda view_id: resolve_view_instance(state, view_id)


def overlay_view(state: State) -> Dict[str, Any]:
    overlay_id = _layout(state).get("overlayView")
    return {
        "overlayViewId": overlay_id,
        "isOpen": bool(overlay_id),
        "instance": resolve_view_instance(state, overlay_id),
    }


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------


def _panel_view_id(panel: Optional[Dict[str, Any]]) -> Optional[str]:
    if not panel:
        return None
    if panel.get("activeViewId"):
        return panel["activeViewId"]
    if panel.get("viewId"):
        return panel["viewId"]
    view = panel.get("view")
    if isinstance(view, dict):
        return view.get("component") or view.get("viewType") or view.get("id")
    return None


def _first_in_region(panels: List[Dict[str, Any]], region: str) -> Optional[Dict[str, Any]]:
    return next((p for p in panels if p.get("region") == region), None)


def _region_order(layout: Dict[str, Any], key: str, panel: Optional[Dict[str, Any]]) -> List[str]:
    order = layout.get(key)
    if order:
        return list(order)
    view_id = panel.get("viewId") if panel else None
    return [view_id] if view_id else []


def main_panel_width(mode: Any, main_panel_count: int) -> str:
    """CSS width of one main panel for viewport *mode*.

    >>> main_panel_width("3x", 1)
    '33.333%'
    >>> main_panel_width("custom", 4)
    '25.0%'
    """
    if mode in VIEWPORT_WIDTHS:
        return VIEWPORT_WIDTHS[mode]
    match = _LEADING_INT.match(mode) if isinstance(mode, str) else None
    count = int(match.group(1)) if match else (main_panel_count or 1)
    count = min(5, max(1, count))
    return f"{100 / count}%"


def workspace_layout(state: State) -> Dict[str, Any]:
    """Everything a workspace shell needs to size and fill its regions."""

    layout = _layout(state)
    expansion = layout.get("expansion") or {"left": "Closed", "right": "Closed", "bottom": "Closed"}
    panels = _panels(state)

    left_open = is_expander_open(expansion.get("left"))
    right_open = is_expander_open(expansion.get("right"))
    bottom_open = is_expander_open(expansion.get("bottom"))

    main_panels = [p for p in panels if p.get("region") == "main"]
    left_panel = _first_in_region(panels, "left")
    right_panel = _first_in_region(panels, "right")
    bottom_panel = _first_in_region(panels, "bottom")

    auth = state.get("auth") or {}
    return {
        "expansion": expansion,
        "leftOpen": left_open,
        "rightOpen": right_open,
        "bottomOpen": bottom_open,
        "leftWidth": SIDE_PANEL_WIDTH if left_open else "0px",
        "rightWidth": SIDE_PANEL_WIDTH if right_open else "0px",
        "bottomHeight": BOTTOM_PANEL_HEIGHT if bottom_open else "0px",
        "mainPanels": main_panels,
        "mainPanelEntries": [{"panel": p, "viewId": _panel_view_id(p)} for p in main_panels],
        "mainPanelWidth": main_panel_width(layout.get("viewportWidthMode") or "1x", len(main_panels)),
        "leftPanel": left_panel,
        "rightPanel": right_panel,
        "bottomPanel": bottom_panel,
        "leftViewOrder": _region_order(layout, "leftViewOrder", left_panel),
        "rightViewOrder": _region_order(layout, "rightViewOrder", right_panel),
        "bottomViewOrder": _region_order(layout, "bottomViewOrder", bottom_panel),
        "showDropZones": bool(layout.get("inDesign") and auth.get("isAdmin")),
    }


FRAMEWORK_SELECTORS = [
    ("selector:layout/activePreset", active_preset),
    ("selector:layout/presets", layout_presets),
    ("selector:layout/canDragViews", can_drag_views),
    ("selector:layout/menuItems", menu_items),
    ("selector:logs/view", logs_view),
    ("selector:auth/state", auth_state),
    ("selector:views/definitions", view_definitions),
    ("selector:view/instanceResolver", view_instance_resolver),
    ("selector:overlay/view", overlay_view),
    ("selector:workspace/layout", workspace_layout),
]
