"""Preset persistence effects.

Reducers update ``layout.presets`` synchronously and request these effects
as follow-ups; the effects mirror the change into hybrid persistence.  No
effect here lets an exception escape: failures become ``logs/append`` warn
entries so the rest of the effect chain keeps running.
"""

from __future__ import annotations

from bloxcore.effects.helpers import dispatch_log
from bloxcore.effects.helpers import report_failure
from bloxcore.registries.effects import Dispatch
from bloxcore.registries.effects import EffectContext
from bloxcore.schemas.actions import Action
from bloxcore.schemas.actions import ActionType
from bloxcore.schemas.actions import make_action

SOURCE = "effects/presets"

PRESETS_SAVE_IMPL = "effect:presets/save@1"
PRESETS_DELETE_IMPL = "effect:presets/delete@1"
PRESETS_RENAME_IMPL = "effect:presets/rename@1"
PRESETS_HYDRATE_IMPL = "effect:presets/hydrate@1"
PRESETS_SYNC_IMPL = "effect:presets/sync@1"


def presets_save_effect(context: EffectContext, action: Action, dispatch: Dispatch) -> None:
    name = action.payload.get("name")
    preset = action.payload.get("preset")
    hybrid = context.services.presets
    if not name or not isinstance(preset, dict) or hybrid is None:
        return
    try:
        hybrid.save_preset(name, preset)
    except Exception as exc:
        report_failure(context, dispatch, "Preset save failed.", SOURCE, exc)


def presets_delete_effect(context: EffectContext, action: Action, dispatch: Dispatch) -> None:
    name = action.payload.get("name")
    hybrid = context.services.presets
    if not name or hybrid is None:
        return
    try:
        hybrid.delete_preset(name)
    except Exception as exc:
        report_failure(context, dispatch, "Preset delete failed.", SOURCE, exc)


def presets_rename_effect(context: EffectContext, action: Action, dispatch: Dispatch) -> None:
    old_name = action.payload.get("oldName")
    new_name = action.payload.get("newName")
    hybrid = context.services.presets
    if not old_name or not new_name or hybrid is None:
        return
    try:
        hybrid.rename_preset(old_name, new_name)
    except Exception as exc:
        report_failure(context, dispatch, "Preset rename failed.", SOURCE, exc)


def presets_hydrate_effect(context: EffectContext, action: Action, dispatch: Dispatch) -> None:
    """Load presets from the local store into state."""
    hybrid = context.services.presets
    if hybrid is None:
        return
    try:
        presets = hybrid.load_all()
    except Exception as exc:
        report_failure(context, dispatch, "Preset hydrate failed.", SOURCE, exc)
        return

    if presets:
        dispatch(make_action(ActionType.PRESETS_HYDRATE, presets=presets))
        dispatch_log(dispatch, "info", "Presets loaded from local storage.", SOURCE, {"count": len(presets)})
    else:
        dispatch_log(dispatch, "warn", "No presets loaded from local storage.", SOURCE)


async def presets_sync_effect(context: EffectContext, action: Action, dispatch: Dispatch) -> None:
    """Merge remote presets into local (local wins) and hydrate the result."""
    hybrid = context.services.presets
    if hybrid is None:
        return
    try:
        merged = await hybrid.merge_from_remote()
    except Exception as exc:
        report_failure(context, dispatch, "Preset sync failed.", SOURCE, exc)
        return
    if merged:
        dispatch(make_action(ActionType.PRESETS_HYDRATE, presets=merged))
        dispatch_log(dispatch, "info", "Presets merged from remote store.", SOURCE, {"count": len(merged)})


PRESET_EFFECTS = [
    ("effect:presets/save", ActionType.EFFECTS_PRESETS_SAVE, PRESETS_SAVE_IMPL, presets_save_effect, "Persist preset updates."),
    (
        "effect:presets/delete",
        ActionType.EFFECTS_PRESETS_DELETE,
        PRESETS_DELETE_IMPL,
        presets_delete_effect,
        "Delete stored presets.",
    ),
    (
        "effect:presets/rename",
        ActionType.EFFECTS_PRESETS_RENAME,
        PRESETS_RENAME_IMPL,
        presets_rename_effect,
        "Rename stored presets.",
    ),
    (
        "effect:presets/hydrate",
        ActionType.EFFECTS_PRESETS_HYDRATE,
        PRESETS_HYDRATE_IMPL,
        presets_hydrate_effect,
        "Hydrate presets from persistence.",
    ),
    (
        "effect:presets/sync",
        ActionType.EFFECTS_PRESETS_SYNC,
        PRESETS_SYNC_IMPL,
        presets_sync_effect,
        "Merge remote presets into local storage.",
    ),
]
