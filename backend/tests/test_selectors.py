"""Built-in selectors through ``CoreContext.select``."""

import pytest

from bloxcore.exceptions import MissingImplementationError
from bloxcore.schemas.actions import ActionType
from bloxcore.schemas.actions import make_action
from bloxcore.selectors.framework import main_panel_width
from bloxcore.selectors.framework import resolve_view_instance
from bloxcore.selectors.framework import workspace_layout
from bloxcore.state.defaults import default_state


def test_unknown_selector_raises(context):
    with pytest.raises(MissingImplementationError) as exc_info:
        context.select("selector:nope")
    assert str(exc_info.value) == "Missing selector impl: selector:nope"


def test_preset_selectors(context):
    context.dispatch(make_action(ActionType.PRESETS_SAVE, name="Focus"))

    assert context.select("selector:layout/activePreset") == "Focus"
    assert [p["name"] for p in context.select("selector:layout/presets")] == ["Focus"]


def test_can_drag_views_needs_admin_in_design_mode(context):
    assert context.select("selector:layout/canDragViews") is False

    context.dispatch(make_action(ActionType.CONTEXT_UPDATE, path="layout.inDesign", value=True))
    assert context.select("selector:layout/canDragViews") is False

    context.dispatch(make_action(ActionType.STATE_HYDRATE, state={"auth": {"isLoggedIn": True, "isAdmin": True}}))
    assert context.select("selector:layout/canDragViews") is True


def test_menu_items_and_logs(context):
    context.dispatch(make_action(ActionType.FRAMEWORK_MENU_HYDRATE, config={"items": [{"id": "home"}]}))
    context.dispatch(make_action(ActionType.LOGS_APPEND, message="hi"))

    assert context.select("selector:layout/menuItems") == [{"id": "home"}]
    view = context.select("selector:logs/view")
    assert [e["message"] for e in view["entries"]] == ["hi"]
    assert view["maxEntries"] == 200


def test_auth_and_definitions(context, counter_view):
    context.views.register(counter_view)
    context.dispatch(make_action(ActionType.STATE_HYDRATE, state={"viewDefinitions": context.views.summaries()}))

    assert context.select("selector:auth/state") == {"isLoggedIn": False, "user": None}
    assert [d["id"] for d in context.select("selector:views/definitions")] == ["counter"]


def test_instance_resolver(context, counter_view):
    context.views.register(counter_view)
    context.dispatch(
        make_action(ActionType.VIEWS_CREATE_INSTANCE, definitionId="counter", overrides={"localContext": {"count": 2}})
    )

    resolve = context.select("selector:view/instanceResolver")

    assert resolve("counter-1") == {"instanceId": "counter-1", "viewId": "counter", "settings": {"count": 2}}
    assert resolve("notes") == {"instanceId": "notes", "viewId": "notes"}
    assert resolve(None) is None


def test_overlay_view(context):
    assert context.select("selector:overlay/view") == {"overlayViewId": None, "isOpen": False, "instance": None}

    context.dispatch(make_action(ActionType.LAYOUT_SET_OVERLAY_VIEW, viewId="search"))
    overlay = context.select("selector:overlay/view")
    assert overlay["isOpen"] is True
    assert overlay["instance"] == {"instanceId": "search", "viewId": "search"}


@pytest.mark.parametrize(
    "mode, count, expected",
    [("1x", 3, "100%"), ("2x", 1, "50%"), ("5x", 5, "20%"), ("wide", 4, "25.0%"), (None, 0, "100.0%"), ("9x", 1, "20.0%")],
)
def test_main_panel_width(mode, count, expected):
    assert main_panel_width(mode, count) == expected


def test_workspace_layout_regions():
    state = default_state()
    state["layout"].update(
        expansion={"left": "Opened", "right": "Closed", "bottom": "Expanded"},
        viewportWidthMode="2x",
        rightViewOrder=["chat", "help"],
    )
    state["panels"] = [
        {"id": "m1", "region": "main", "activeViewId": "editor"},
        {"id": "m2", "region": "main", "view": {"component": "preview"}},
        {"id": "l1", "region": "left", "viewId": "files"},
        {"id": "r1", "region": "right", "viewId": "chat"},
    ]

    shell = workspace_layout(state)

    assert (shell["leftOpen"], shell["rightOpen"], shell["bottomOpen"]) == (True, False, True)
    assert shell["leftWidth"] == "clamp(220px, 22vw, 360px)"
    assert shell["rightWidth"] == "0px"
    assert shell["bottomHeight"] == "clamp(180px, 26vh, 320px)"
    assert [e["viewId"] for e in shell["mainPanelEntries"]] == ["editor", "preview"]
    assert shell["mainPanelWidth"] == "50%"
    assert shell["leftViewOrder"] == ["files"]
    assert shell["rightViewOrder"] == ["chat", "help"]
    assert shell["bottomViewOrder"] == []
    assert shell["bottomPanel"] is None
    assert shell["showDropZones"] is False


def test_workspace_layout_selector_registered(context):
    assert context.select("selector:workspace/layout")["mainPanels"] == []


def test_resolve_view_instance_without_local_context():
    state = {"viewInstances": {"x": {"instanceId": "x", "definitionId": "notes"}}}
    assert resolve_view_instance(state, "x") == {"instanceId": "x", "viewId": "notes", "settings": {}}
