"""Runtime-wide constants (storage keys, limits, enumerations)."""

# API route configuration ----------------------------------------------------

API_PREFIX = "/api"
WS_ENDPOINT = "/ws"

# Log ring buffer ------------------------------------------------------------

DEFAULT_LOG_LIMIT = 200
LOG_LEVELS = ("debug", "info", "warn", "error")

# Layout ---------------------------------------------------------------------

EXPANSION_SIDES = ("left", "right", "bottom")
VIEWPORT_WIDTH_MODES = ("1x", "2x", "3x", "4x", "5x")
MIN_MAIN_AREA_COUNT = 1
MAX_MAIN_AREA_COUNT = 5
PANEL_REGIONS = ("main", "left", "right", "bottom", "overlay")
VIEW_ORDER_KEYS = {
    "main": "mainViewOrder",
    "left": "leftViewOrder",
    "right": "rightViewOrder",
    "bottom": "bottomViewOrder",
}

# ``context/update`` only writes below these top-level namespaces.
NAMESPACE_ALLOWLIST = frozenset(
    {
        "framework",
        "app",
        "system",
        "admin",
        "feature",
        "data",
        "ui",
        "user",
        "layout",
    }
)

# Persistence ----------------------------------------------------------------

PRESETS_STORAGE_KEY = "buildblox-layout-presets"
PRESETS_STORAGE_VERSION = 2
MENU_STORAGE_KEY = "buildblox:framework-menu"
MENU_STORAGE_VERSION = 1
PRESETS_TABLE = "layout_presets"


def get_full_path(relative_path: str) -> str:
    """Get the full API path for a relative path."""
    return f"{API_PREFIX}{relative_path}"
