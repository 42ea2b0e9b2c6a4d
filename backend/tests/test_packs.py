"""Definition packs loaded from dicts and YAML files."""

import textwrap

import pytest
from pydantic import ValidationError

from bloxcore.exceptions import MissingImplementationError
from bloxcore.registries.packs import load_pack
from bloxcore.schemas.definitions import DefinitionPack


def _bump(state, action, config):
    step = (config or {}).get("step", 1)
    counters = state.get("data", {}).get("clicks", 0)
    return {**state, "data": {**state.get("data", {}), "clicks": counters + step}}


PACK = {
    "id": "clicker",
    "version": 2,
    "actions": [{"id": "clicker/click", "description": "Count one click"}],
    "handlers": [
        {"id": "clicker.bump", "action": "clicker/click", "implKey": "reducer:clicker/bump@1", "config": {"step": 2}}
    ],
    "views": [{"id": "clicker", "title": "Clicker", "icon": "mouse", "defaultContext": {"clicks": 0}}],
    "selectors": [{"key": "clicker/clicks", "implKey": "selector:clicker/clicks@1"}],
}


@pytest.fixture
def clicker_context(context):
    context.registries.handler_impls.register("reducer:clicker/bump@1", _bump)
    context.registries.selectors.register("selector:clicker/clicks@1", lambda s: s.get("data", {}).get("clicks", 0))
    return context


def test_pack_from_dict(clicker_context):
    pack = clicker_context.apply_pack(PACK)

    assert pack.version == "2"
    assert clicker_context.registries.actions.get("clicker/click").description == "Count one click"

    clicker_context.dispatch({"type": "clicker/click"})
    clicker_context.dispatch({"type": "clicker/click"})

    assert clicker_context.select("clicker/clicks") == 4
    assert [d["id"] for d in clicker_context.get_state()["viewDefinitions"]] == ["clicker"]


def test_pack_from_yaml(clicker_context, tmp_path):
    path = tmp_path / "clicker.yaml"
    path.write_text(
        textwrap.dedent(
            """
            id: clicker
            version: 1
            actions:
              - id: clicker/click
            handlers:
              - id: clicker.bump
                action: clicker/click
                implKey: reducer:clicker/bump@1
            """
        )
    )

    pack = clicker_context.apply_pack(path)
    clicker_context.dispatch({"type": "clicker/click"})

    assert pack.id == "clicker"
    assert pack.views == []
    assert clicker_context.get_state()["data"] == {"clicks": 1}


def test_pack_with_unknown_impl_key_fails(context):
    with pytest.raises(MissingImplementationError) as exc_info:
        context.apply_pack(
            {"id": "broken", "handlers": [{"id": "h", "action": "x/y", "implKey": "reducer:missing@1"}]}
        )
    assert exc_info.value.key == "reducer:missing@1"


def test_non_mapping_yaml_is_rejected(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ValueError, match="must contain a mapping"):
        load_pack(path)


def test_pack_requires_an_id():
    with pytest.raises(ValidationError):
        load_pack({"handlers": []})


def test_pack_model_passes_through():
    pack = DefinitionPack(id="empty")
    assert load_pack(pack) is pack


def test_pack_effects_bind_builtin_impls(context):
    context.apply_pack(
        {
            "id": "mirror",
            "effects": [
                {"id": "mirror.save", "forAction": "mirror/save", "implKey": "effect:presets/save@1"},
            ],
        }
    )

    assert [e.id for e in context.registries.effects.get_for_action("mirror/save")] == ["mirror.save"]
