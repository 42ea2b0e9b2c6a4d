"""Local preset and menu persistence over the storage backends."""

import json

import pytest

from bloxcore.constants import MENU_STORAGE_KEY
from bloxcore.constants import PRESETS_STORAGE_KEY
from bloxcore.exceptions import PersistenceError
from bloxcore.persistence.local import LocalPresetPersistence
from bloxcore.persistence.local import MenuPersistence
from bloxcore.persistence.local import migrate_legacy_expansion
from bloxcore.persistence.storage import JsonFileStorage
from bloxcore.persistence.storage import MemoryStorage

FOCUS = {"name": "Focus", "mainAreaCount": 1, "viewportWidthMode": "1x", "expansion": {"left": "Opened"}}


class BrokenStorage(MemoryStorage):
    def set_item(self, key, value):
        raise PersistenceError("disk full")


@pytest.fixture
def local(storage, recorder):
    return LocalPresetPersistence(storage, framework_logger=recorder)


def test_round_trip_uses_versioned_envelope(local, storage):
    local.save_all({"Focus": FOCUS})

    assert json.loads(storage.get_item(PRESETS_STORAGE_KEY)) == {"version": 2, "presets": {"Focus": FOCUS}}
    assert local.load_all() == {"Focus": FOCUS}


def test_missing_blob_loads_as_none(local):
    assert local.load_all() is None


def test_save_and_delete_single_presets(local):
    local.save_preset("Focus", FOCUS)
    local.save_preset("Wide", {**FOCUS, "name": "Wide", "mainAreaCount": 3})
    local.delete_preset("Focus")

    assert list(local.load_all()) == ["Wide"]


def test_version_one_blob_is_migrated_and_written_back(storage, recorder):
    legacy = {"Old": {"name": "Old", "expansion": {"left": True, "right": False, "bottom": "Expanded"}}}
    storage.set_item(PRESETS_STORAGE_KEY, json.dumps({"version": 1, "presets": legacy}))
    local = LocalPresetPersistence(storage, framework_logger=recorder)

    loaded = local.load_all()

    assert loaded["Old"]["expansion"] == {"left": "Opened", "right": "Closed", "bottom": "Expanded"}
    assert json.loads(storage.get_item(PRESETS_STORAGE_KEY))["version"] == 2
    assert "Migrated layout presets from version 1." in recorder.messages("info")


def test_unknown_version_is_cleared(local, storage, recorder):
    storage.set_item(PRESETS_STORAGE_KEY, json.dumps({"version": 99, "presets": {"X": {}}}))

    assert local.load_all() is None
    assert storage.get_item(PRESETS_STORAGE_KEY) is None
    assert "Layout presets version mismatch, clearing stored data." in recorder.messages("warn")


def test_corrupt_json_is_reported_not_raised(local, storage, recorder):
    storage.set_item(PRESETS_STORAGE_KEY, "{not json")

    assert local.load_all() is None
    assert "Failed to load persisted layout presets." in recorder.messages("warn")


def test_write_failure_is_logged(recorder):
    local = LocalPresetPersistence(BrokenStorage(), framework_logger=recorder)
    local.save_all({"Focus": FOCUS})
    assert "Failed to persist layout presets." in recorder.messages("warn")


def test_sync_callback_fires_unless_skipped(local):
    pushed = []
    local.set_sync_callback(pushed.append)

    local.save_all({"Focus": FOCUS})
    local.save_all({"Focus": FOCUS}, skip_sync=True)

    assert pushed == [{"Focus": FOCUS}]


def test_failing_sync_callback_does_not_undo_write(local, recorder):
    def explode(presets):
        raise RuntimeError("offline")

    local.set_sync_callback(explode)
    local.save_all({"Focus": FOCUS})

    assert local.load_all() == {"Focus": FOCUS}
    assert "Preset sync callback failed." in recorder.messages("warn")


def test_migrate_legacy_expansion_leaves_strings_alone():
    assert migrate_legacy_expansion({"left": True, "right": "Collapsed"}) == {"left": "Opened", "right": "Collapsed"}


def test_json_file_storage(tmp_path):
    storage = JsonFileStorage(tmp_path / "nested")
    assert storage.get_item("a/b:c") is None

    storage.set_item("a/b:c", '{"x": 1}')
    assert storage.get_item("a/b:c") == '{"x": 1}'
    assert [p.name for p in (tmp_path / "nested").iterdir()] == ["a_b_c.json"]

    storage.remove_item("a/b:c")
    storage.remove_item("a/b:c")
    assert storage.get_item("a/b:c") is None


def test_presets_survive_a_new_persistence_object(tmp_path):
    LocalPresetPersistence(JsonFileStorage(tmp_path)).save_all({"Focus": FOCUS})
    assert LocalPresetPersistence(JsonFileStorage(tmp_path)).load_all() == {"Focus": FOCUS}


# ---------------------------------------------------------------------------
# Framework menu
# ---------------------------------------------------------------------------


def test_menu_round_trip(storage, recorder):
    menu = MenuPersistence(storage, framework_logger=recorder)
    config = {"items": [{"id": "home", "label": "Home", "order": 0}]}

    assert menu.load() is None
    menu.save(config)

    assert menu.load() == config
    assert json.loads(storage.get_item(MENU_STORAGE_KEY))["version"] == 1


def test_menu_version_mismatch_clears(storage, recorder):
    storage.set_item(MENU_STORAGE_KEY, json.dumps({"version": 7, "config": {"items": []}}))
    menu = MenuPersistence(storage, framework_logger=recorder)

    assert menu.load() is None
    assert storage.get_item(MENU_STORAGE_KEY) is None


def test_menu_reorder_items():
    items = [{"id": "a"}, {"id": "b"}, {"id": "c"}]

    reordered = MenuPersistence.reorder_items(items, "c", "a")

    assert [(i["id"], i["order"]) for i in reordered] == [("c", 0), ("a", 1), ("b", 2)]
    assert MenuPersistence.reorder_items(items, "x", "a") is items
