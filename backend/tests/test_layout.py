"""Layout reducers and their pure helpers."""

import pytest

from bloxcore.reducers.layout import clamp_viewport_mode_to_capacity
from bloxcore.reducers.layout import normalize_main_area_count
from bloxcore.reducers.layout import normalize_viewport_width_mode
from bloxcore.reducers.layout import toggle_expander_state
from bloxcore.schemas.actions import ActionType
from bloxcore.schemas.actions import make_action


def _layout(context):
    return context.get_state()["layout"]


@pytest.mark.parametrize(
    "mode, capacity, expected",
    [
        ("4x", 2, "2x"),
        ("2x", 5, "2x"),
        ("5x", 5, "5x"),
        ("bogus", 3, "1x"),
        ("0x", 3, "1x"),
        ("-2x", 3, "1x"),
        (None, 3, "1x"),
        (" 3x", 4, "3x"),
    ],
)
def test_clamp_viewport_mode_to_capacity(mode, capacity, expected):
    assert clamp_viewport_mode_to_capacity(mode, capacity) == expected


@pytest.mark.parametrize(
    "value, expected",
    [(2.5, 3), (2.4, 2), ("4", 4), (0, 1), (-3, 1), (9, 5), ("many", 1), (None, 1), (True, 1)],
)
def test_normalize_main_area_count(value, expected):
    assert normalize_main_area_count(value) == expected


def test_normalize_viewport_width_mode():
    assert normalize_viewport_width_mode("3x") == "3x"
    assert normalize_viewport_width_mode("6x") == "1x"
    assert normalize_viewport_width_mode(3) == "1x"


@pytest.mark.parametrize(
    "current, expected",
    [("Closed", "Opened"), ("Collapsed", "Opened"), ("Opened", "Closed"), ("Expanded", "Closed"), (None, "Closed")],
)
def test_toggle_expander_state(current, expected):
    assert toggle_expander_state(current) == expected


# ---------------------------------------------------------------------------
# Main area / viewport
# ---------------------------------------------------------------------------


def test_viewport_mode_is_clamped_when_panel_count_shrinks(context):
    context.dispatch(make_action(ActionType.LAYOUT_SET_MAIN_AREA_COUNT, count=2))
    context.dispatch(make_action(ActionType.LAYOUT_SET_VIEWPORT_WIDTH_MODE, mode="5x"))

    layout = _layout(context)
    assert layout["mainAreaCount"] == 2
    assert layout["viewportWidthMode"] == "5x"
    assert clamp_viewport_mode_to_capacity(layout["viewportWidthMode"], layout["mainAreaCount"]) == "2x"

    # Re-applying the count pulls the stored mode back inside capacity.
    context.dispatch(make_action(ActionType.LAYOUT_SET_MAIN_AREA_COUNT, count=2))
    assert _layout(context)["viewportWidthMode"] == "2x"


def test_set_main_area_count_rounds_and_clamps(context):
    context.dispatch(make_action(ActionType.LAYOUT_SET_MAIN_AREA_COUNT, count=2.5))
    assert _layout(context)["mainAreaCount"] == 3

    context.dispatch(make_action(ActionType.LAYOUT_SET_MAIN_AREA_COUNT, count=42))
    assert _layout(context)["mainAreaCount"] == 5


def test_set_main_area_count_keeps_previous_on_garbage(context):
    context.dispatch(make_action(ActionType.LAYOUT_SET_MAIN_AREA_COUNT, count=4))
    context.dispatch(make_action(ActionType.LAYOUT_SET_MAIN_AREA_COUNT, count="lots"))
    assert _layout(context)["mainAreaCount"] == 4


def test_set_main_area_count_accepts_main_area_count_key(context):
    context.dispatch(make_action(ActionType.LAYOUT_SET_MAIN_AREA_COUNT, mainAreaCount=3))
    assert _layout(context)["mainAreaCount"] == 3


def test_shrinking_count_clamps_wider_mode(context):
    context.dispatch(make_action(ActionType.LAYOUT_SET_MAIN_AREA_COUNT, count=4))
    context.dispatch(make_action(ActionType.LAYOUT_SET_VIEWPORT_WIDTH_MODE, mode="4x"))
    context.dispatch(make_action(ActionType.LAYOUT_SET_MAIN_AREA_COUNT, count=1))

    layout = _layout(context)
    assert layout["mainAreaCount"] == 1
    assert layout["viewportWidthMode"] == "1x"


def test_unknown_viewport_mode_falls_back(context):
    context.dispatch(make_action(ActionType.LAYOUT_SET_VIEWPORT_WIDTH_MODE, mode="wide"))
    assert _layout(context)["viewportWidthMode"] == "1x"


# ---------------------------------------------------------------------------
# Expanders and overlay
# ---------------------------------------------------------------------------


def test_set_expansion_explicit_and_toggle(context):
    context.dispatch(make_action(ActionType.LAYOUT_SET_EXPANSION, side="left", expanded=True))
    assert _layout(context)["expansion"]["left"] == "Opened"

    context.dispatch(make_action(ActionType.LAYOUT_SET_EXPANSION, side="left"))
    assert _layout(context)["expansion"]["left"] == "Closed"

    context.dispatch(make_action(ActionType.LAYOUT_SET_EXPANSION, side="bottom", state="Expanded"))
    assert _layout(context)["expansion"]["bottom"] == "Expanded"
    assert _layout(context)["expansion"]["right"] == "Closed"


def test_set_expansion_unknown_side_is_noop(context):
    before = context.get_state()
    context.dispatch(make_action(ActionType.LAYOUT_SET_EXPANSION, side="top", expanded=True))
    assert context.get_state() is before


def test_reset_expanders_closes_every_side(context):
    context.dispatch(make_action(ActionType.LAYOUT_SET_EXPANSION, side="left", expanded=True))
    context.dispatch(make_action(ActionType.LAYOUT_SET_EXPANSION, side="right", state="Expanded"))
    context.dispatch(make_action(ActionType.LAYOUT_RESET_EXPANDERS))

    assert _layout(context)["expansion"] == {"left": "Closed", "right": "Closed", "bottom": "Closed"}


def test_overlay_view_and_expander(context):
    context.dispatch(make_action(ActionType.LAYOUT_SET_OVERLAY_VIEW, viewId="search"))
    context.dispatch(make_action(ActionType.LAYOUT_SET_OVERLAY_EXPANDER, viewId="search"))
    assert _layout(context)["overlayView"] == "search"
    assert _layout(context)["overlayExpander"] == "search"

    context.dispatch(make_action(ActionType.LAYOUT_UNSET_OVERLAY_EXPANDER))
    assert _layout(context)["overlayExpander"] is None
    assert _layout(context)["overlayView"] == "search"


# ---------------------------------------------------------------------------
# View order and drag
# ---------------------------------------------------------------------------


def test_set_view_order_dedupes_and_drops_blanks(context):
    context.dispatch(make_action(ActionType.LAYOUT_SET_VIEW_ORDER, region="main", order=["a", "b", "a", " ", "c"]))
    assert _layout(context)["mainViewOrder"] == ["a", "b", "c"]


def test_set_view_order_unknown_region_is_noop(context):
    before = context.get_state()
    context.dispatch(make_action(ActionType.LAYOUT_SET_VIEW_ORDER, region="overlay", order=["a"]))
    assert context.get_state() is before


def test_drag_start_and_end(context):
    context.dispatch(make_action(ActionType.LAYOUT_DRAG_START, viewId="notes"))
    assert _layout(context)["draggedViewId"] == "notes"

    context.dispatch(make_action(ActionType.LAYOUT_DRAG_END))
    assert _layout(context)["draggedViewId"] is None

    before = context.get_state()
    context.dispatch(make_action(ActionType.LAYOUT_DRAG_END))
    assert context.get_state() is before


def test_toggle_in_design_drives_drag_selectors(context):
    context.dispatch(make_action(ActionType.STATE_HYDRATE, state={"auth": {"isLoggedIn": True, "isAdmin": True}}))
    assert _layout(context)["inDesign"] is False
    assert context.select("selector:layout/canDragViews") is False

    context.dispatch(make_action(ActionType.LAYOUT_TOGGLE_IN_DESIGN))
    assert _layout(context)["inDesign"] is True
    assert context.select("selector:layout/canDragViews") is True
    assert context.select("selector:workspace/layout")["showDropZones"] is True

    context.dispatch(make_action(ActionType.LAYOUT_TOGGLE_IN_DESIGN))
    assert _layout(context)["inDesign"] is False
    assert context.select("selector:workspace/layout")["showDropZones"] is False


def test_toggle_in_design_honours_an_explicit_value(context):
    context.dispatch(make_action(ActionType.LAYOUT_TOGGLE_IN_DESIGN, inDesign=True))
    assert _layout(context)["inDesign"] is True

    before = context.get_state()
    context.dispatch(make_action(ActionType.LAYOUT_TOGGLE_IN_DESIGN, inDesign=True))
    assert context.get_state() is before

    # Non-boolean values toggle.
    context.dispatch(make_action(ActionType.LAYOUT_TOGGLE_IN_DESIGN, inDesign="yes"))
    assert _layout(context)["inDesign"] is False
