"""Generic handlers: hydrate, namespaced context writes, panels and the log ring buffer."""

import pytest

from bloxcore.constants import NAMESPACE_ALLOWLIST
from bloxcore.schemas.actions import ActionType
from bloxcore.schemas.actions import make_action


def _entries(context):
    return context.get_state()["logs"]["entries"]


# ---------------------------------------------------------------------------
# state/hydrate
# ---------------------------------------------------------------------------


def test_hydrate_keeps_presets_when_layout_patch_omits_them(context):
    preset = {"name": "Focus", "mainAreaCount": 1, "viewportWidthMode": "1x", "expansion": {}}
    context.dispatch(make_action(ActionType.PRESETS_HYDRATE, presets={"Focus": preset}))

    context.dispatch(make_action(ActionType.STATE_HYDRATE, state={"layout": {"mainAreaCount": 2}}))

    layout = context.get_state()["layout"]
    assert layout["presets"] == {"Focus": preset}
    assert layout["mainAreaCount"] == 2
    assert layout["viewportWidthMode"] == "1x"


def test_hydrate_replaces_top_level_keys(context):
    panels = [{"id": "main-1", "region": "main"}]
    context.dispatch(make_action(ActionType.STATE_HYDRATE, state={"panels": panels, "custom": {"a": 1}}))

    state = context.get_state()
    assert state["panels"] == panels
    assert state["custom"] == {"a": 1}


def test_hydrate_accepts_patch_alias(context):
    context.dispatch(make_action(ActionType.STATE_HYDRATE, patch={"authConfig": {"provider": "none"}}))
    assert context.get_state()["authConfig"] == {"provider": "none"}


# ---------------------------------------------------------------------------
# context/update
# ---------------------------------------------------------------------------


def test_context_update_writes_nested_path_and_clones_only_the_spine(context):
    before = context.get_state()

    context.dispatch(make_action(ActionType.CONTEXT_UPDATE, path="app.settings.theme", value="dark"))

    after = context.get_state()
    assert after["app"] == {"settings": {"theme": "dark"}}
    assert after["layout"] is before["layout"]
    assert after["logs"] is before["logs"]
    assert after["panels"] is before["panels"]


def test_context_update_accepts_list_paths(context):
    context.dispatch(make_action(ActionType.CONTEXT_UPDATE, path=["user", "prefs"], value={"compact": True}))
    assert context.get_state()["user"] == {"prefs": {"compact": True}}


def test_context_update_preserves_siblings_inside_namespace(context):
    context.dispatch(make_action(ActionType.CONTEXT_UPDATE, path="data.a", value=1))
    first_state = context.get_state()
    context.dispatch(make_action(ActionType.CONTEXT_UPDATE, path="data.b", value=2))

    assert context.get_state()["data"] == {"a": 1, "b": 2}
    assert first_state["data"] == {"a": 1}


@pytest.mark.parametrize("path", ["secrets.token", "viewInstances.x", ""])
def test_context_update_rejects_namespaces_outside_allow_list(context, recorder, path):
    before = context.get_state()

    context.dispatch(make_action(ActionType.CONTEXT_UPDATE, path=path, value="x"))

    assert context.get_state() is before
    warnings = [r for r in recorder.records if r[1] == "Rejected context update due to invalid namespace."]
    assert len(warnings) == 1
    assert warnings[0][2]["allowedNamespaces"] == sorted(NAMESPACE_ALLOWLIST)


def test_context_update_into_layout_namespace(context):
    context.dispatch(make_action(ActionType.CONTEXT_UPDATE, path="layout.inDesign", value=True))
    assert context.get_state()["layout"]["inDesign"] is True


# ---------------------------------------------------------------------------
# context/patch, layout/update, panels/update
# ---------------------------------------------------------------------------


def test_context_patch_merges_maps_and_replaces_scalars(context):
    context.dispatch(make_action(ActionType.CONTEXT_PATCH, namespace="feature", changes={"a": 1}))
    context.dispatch(make_action(ActionType.CONTEXT_PATCH, namespace="feature", changes={"b": 2}))
    assert context.get_state()["feature"] == {"a": 1, "b": 2}

    context.dispatch(make_action(ActionType.CONTEXT_PATCH, namespace="feature", value=5))
    assert context.get_state()["feature"] == 5


def test_layout_update_merges_into_layout_only(context):
    before = context.get_state()
    context.dispatch(make_action(ActionType.LAYOUT_UPDATE, changes={"inDesign": True}))

    after = context.get_state()
    assert after["layout"]["inDesign"] is True
    assert after["layout"]["mainAreaCount"] == before["layout"]["mainAreaCount"]
    assert after["panels"] is before["panels"]


def test_panels_update_replaces_list_or_patches_by_id(context):
    context.dispatch(
        make_action(
            ActionType.PANELS_UPDATE,
            panels=[{"id": "p1", "region": "main"}, {"id": "p2", "region": "left"}],
        )
    )
    context.dispatch(make_action(ActionType.PANELS_UPDATE, panelId="p2", changes={"activeViewId": "notes"}))

    panels = context.get_state()["panels"]
    assert panels[1] == {"id": "p2", "region": "left", "activeViewId": "notes"}
    assert panels[0] == {"id": "p1", "region": "main"}


def test_panels_update_unknown_id_is_noop(context):
    context.dispatch(make_action(ActionType.PANELS_UPDATE, panels=[{"id": "p1", "region": "main"}]))
    before = context.get_state()

    context.dispatch(make_action(ActionType.PANELS_UPDATE, panelId="ghost", changes={"region": "left"}))

    assert context.get_state() is before


# ---------------------------------------------------------------------------
# Log ring buffer
# ---------------------------------------------------------------------------


def test_logs_append_normalises_entries(context):
    context.dispatch(make_action(ActionType.LOGS_APPEND, message="hello", level="fatal", data={"k": 1}))

    (entry,) = _entries(context)
    assert entry["message"] == "hello"
    assert entry["level"] == "info"
    assert entry["data"] == {"k": 1}
    assert isinstance(entry["timestamp"], int)
    assert entry["id"] == f"{entry['timestamp']}-1"


def test_logs_append_accepts_a_full_entry(context):
    context.dispatch(
        make_action(
            ActionType.LOGS_APPEND,
            entry={"id": "e1", "message": "done", "level": "error", "timestamp": 5},
        )
    )
    assert _entries(context) == [{"id": "e1", "message": "done", "level": "error", "timestamp": 5}]


def test_logs_append_drops_blank_messages(context):
    before = context.get_state()
    context.dispatch(make_action(ActionType.LOGS_APPEND, message="   "))
    assert context.get_state() is before


def test_ring_buffer_keeps_newest_entries(context):
    context.dispatch(make_action(ActionType.LOGS_SET_MAX, maxEntries=3))
    for n in range(1, 6):
        context.dispatch(make_action(ActionType.LOGS_APPEND, message=f"m{n}"))

    logs = context.get_state()["logs"]
    assert [e["message"] for e in logs["entries"]] == ["m3", "m4", "m5"]
    assert len(logs["entries"]) <= logs["maxEntries"]


def test_derived_log_ids_stay_unique_once_the_buffer_is_full(context):
    context.dispatch(make_action(ActionType.LOGS_SET_MAX, maxEntries=2))
    for n in range(5):
        context.dispatch(make_action(ActionType.LOGS_APPEND, message=f"m{n}", timestamp=1000))

    ids = [e["id"] for e in context.get_state()["logs"]["entries"]]
    assert ids == ["1000-4", "1000-5"]


def test_set_max_trims_immediately_and_is_idempotent(context):
    for n in range(4):
        context.dispatch(make_action(ActionType.LOGS_APPEND, message=f"m{n}"))

    context.dispatch(make_action(ActionType.LOGS_SET_MAX, maxEntries=2))
    once = context.get_state()["logs"]
    context.dispatch(make_action(ActionType.LOGS_SET_MAX, maxEntries=2))
    twice = context.get_state()["logs"]

    assert once == twice
    assert [e["message"] for e in twice["entries"]] == ["m2", "m3"]


@pytest.mark.parametrize(
    "requested, expected",
    [(2.7, 2), (0, 1), (-4, 1), ("12", 12), ("abc", 200), (None, 200)],
)
def test_set_max_coercion(context, requested, expected):
    context.dispatch(make_action(ActionType.LOGS_SET_MAX, maxEntries=requested))
    assert context.get_state()["logs"]["maxEntries"] == expected


def test_logs_clear(context):
    context.dispatch(make_action(ActionType.LOGS_APPEND, message="one"))
    context.dispatch(make_action(ActionType.LOGS_CLEAR))

    logs = context.get_state()["logs"]
    assert logs["entries"] == []
    assert logs["maxEntries"] == 200
