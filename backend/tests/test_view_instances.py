"""View registry and view-instance lifecycle."""

import pytest

from bloxcore.exceptions import DefinitionNotFoundError
from bloxcore.registries.views import ViewRegistry
from bloxcore.schemas.actions import ActionType
from bloxcore.schemas.actions import make_action

from tests.helpers.doubles import RecordingLogger
from tests.helpers.doubles import SequentialIds


@pytest.fixture
def views(recorder):
    return ViewRegistry(framework_logger=recorder, id_factory=SequentialIds())


def test_register_requires_an_icon(views, recorder):
    assert views.register({"id": "bare", "title": "Bare"}) is False
    assert views.register({"id": "blank", "title": "Blank", "icon": "  "}) is False
    assert views.get("bare") is None
    assert recorder.messages("warn") == ["ViewRegistry register failed. Missing icon for view."] * 2


def test_register_and_lookup(views, counter_view):
    assert views.register(counter_view) is True

    definition = views.get_or_throw("counter")
    assert definition.default_context == {"count": 0}
    assert views.summaries() == [{"id": "counter", "name": "Counter", "title": "Counter", "icon": "plus"}]

    with pytest.raises(DefinitionNotFoundError):
        views.get_or_throw("missing")


def test_registry_change_listeners(views, counter_view):
    events = []
    unsubscribe = views.on_registry_change(events.append)

    views.register(counter_view)
    unsubscribe()
    views.register({**counter_view, "id": "other"})

    assert [e["viewId"] for e in events] == ["counter"]
    assert events[0]["total"] == 1


def test_create_instance_layers_overrides_over_defaults(views, counter_view):
    views.register({**counter_view, "defaultContext": {"count": 0, "step": 1}})

    instance = views.create_instance("counter", {"localContext": {"count": 5}, "title": "Mine"})

    assert instance == {
        "instanceId": "counter-1",
        "definitionId": "counter",
        "title": "Mine",
        "localContext": {"count": 5, "step": 1},
    }


def test_create_instance_unknown_definition(views, recorder):
    assert views.create_instance("ghost") is None
    assert "View definition not found." in recorder.messages("warn")


def test_colliding_generated_ids_are_reminted(counter_view):
    views = ViewRegistry(framework_logger=RecordingLogger(), id_factory=lambda definition_id: "fixed")
    views.register(counter_view)

    first = views.create_instance("counter")["instanceId"]
    second = views.create_instance("counter")["instanceId"]
    third = views.create_instance("counter")["instanceId"]

    assert first == "fixed"
    assert len({first, second, third}) == 3


def test_default_ids_are_unique(counter_view):
    views = ViewRegistry()
    views.register(counter_view)
    ids = {views.create_instance("counter")["instanceId"] for _ in range(50)}
    assert len(ids) == 50
    assert all(i.startswith("counter-") for i in ids)


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_component_loader_runs_once(views):
    calls = []

    async def load():
        calls.append(1)
        return object()

    views.register({"id": "lazy", "title": "Lazy", "icon": "clock"})
    views.get("lazy").component = load

    first = await views.get_component("lazy")
    second = await views.get_component("lazy")

    assert first is second
    assert calls == [1]


@pytest.mark.asyncio
async def test_component_import_path(views):
    views.register({"id": "json", "title": "JSON", "icon": "code", "component": "json:dumps"})

    import json

    assert await views.get_component("json") is json.dumps


@pytest.mark.asyncio
async def test_failing_loader_returns_none(views, recorder):
    def broken():
        raise RuntimeError("no bundle")

    views.register({"id": "broken", "title": "Broken", "icon": "x"})
    views.get("broken").component = broken

    assert await views.get_component("broken") is None
    assert await views.get_component("unknown") is None
    assert "ViewRegistry component load failed." in recorder.messages("error")


# ---------------------------------------------------------------------------
# Through dispatch
# ---------------------------------------------------------------------------


def test_counter_instance_lifecycle(context, counter_view):
    context.views.register(counter_view)

    context.dispatch(
        make_action(ActionType.VIEWS_CREATE_INSTANCE, definitionId="counter", overrides={"localContext": {"count": 5}})
    )
    instances = context.get_state()["viewInstances"]
    assert list(instances) == ["counter-1"]
    assert instances["counter-1"]["localContext"] == {"count": 5}

    context.dispatch(make_action(ActionType.VIEWS_UPDATE_LOCAL_CONTEXT, instanceId="counter-1", context={"count": 6}))
    assert context.get_state()["viewInstances"]["counter-1"]["localContext"] == {"count": 6}

    context.dispatch(make_action(ActionType.VIEWS_DESTROY_INSTANCE, instanceId="counter-1"))
    assert context.get_state()["viewInstances"] == {}


def test_instance_actions_for_unknown_ids_are_noops(context):
    before = context.get_state()

    context.dispatch(make_action(ActionType.VIEWS_CREATE_INSTANCE, definitionId="ghost"))
    context.dispatch(make_action(ActionType.VIEWS_UPDATE_LOCAL_CONTEXT, instanceId="ghost", context={"a": 1}))
    context.dispatch(make_action(ActionType.VIEWS_DESTROY_INSTANCE, instanceId="ghost"))

    assert context.get_state() is before


def test_explicit_instance_id_override(context, counter_view):
    context.views.register(counter_view)
    context.dispatch(
        make_action(ActionType.VIEWS_CREATE_INSTANCE, definitionId="counter", overrides={"instanceId": "pinned"})
    )
    assert context.get_state()["viewInstances"]["pinned"]["localContext"] == {"count": 0}
