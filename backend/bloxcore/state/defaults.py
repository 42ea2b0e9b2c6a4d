"""Initial application state."""

from typing import Any
from typing import Dict

from bloxcore.constants import DEFAULT_LOG_LIMIT
from bloxcore.schemas.presets import ExpanderState


def default_layout() -> Dict[str, Any]:
    closed = ExpanderState.CLOSED.value
    return {
        "expansion": {"left": closed, "right": closed, "bottom": closed},
        "overlayView": None,
        "overlayExpander": None,
        "viewportWidthMode": "1x",
        "mainAreaCount": 1,
        "mainViewOrder": [],
        "leftViewOrder": [],
        "rightViewOrder": [],
        "bottomViewOrder": [],
        "leftViewId": None,
        "rightViewId": None,
        "bottomViewId": None,
        "panelSizes": {},
        "activePreset": None,
        "presets": {},
        "draggedViewId": None,
        "inDesign": False,
        "frameworkMenu": None,
    }


def default_state(max_log_entries: int = DEFAULT_LOG_LIMIT) -> Dict[str, Any]:
    """Return a fresh state tree; every call builds new containers."""

    return {
        "layout": default_layout(),
        "panels": [],
        "viewInstances": {},
        "viewDefinitions": [],
        "auth": {"isLoggedIn": False, "user": None},
        "authConfig": None,
        "logs": {"entries": [], "maxEntries": max(1, int(max_log_entries))},
    }
