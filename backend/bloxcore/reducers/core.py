"""Generic state handlers: hydrate, namespaced context writes, panels, logs."""

from __future__ import annotations

import math
import re
from functools import partial
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from bloxcore.constants import DEFAULT_LOG_LIMIT
from bloxcore.constants import LOG_LEVELS
from bloxcore.constants import NAMESPACE_ALLOWLIST
from bloxcore.registries.handlers import State
from bloxcore.runtime.logger import FrameworkLogger
from bloxcore.runtime.logger import NullLogger
from bloxcore.schemas.actions import Action
from bloxcore.schemas.actions import ActionType
from bloxcore.state.utils import is_record
from bloxcore.state.utils import normalize_path
from bloxcore.state.utils import now_ms
from bloxcore.state.utils import set_in
from bloxcore.state.utils import shallow_merge
from bloxcore.state.utils import to_number

_LOG_SEQUENCE = re.compile(r"-(\d+)$")

Config = Optional[Dict[str, Any]]


def _first_present(payload: Dict[str, Any], *keys: str) -> Any:
    """Value of the first key present in *payload* (``None`` values count as absent)."""
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
    return None


# ---------------------------------------------------------------------------
# state/hydrate
# ---------------------------------------------------------------------------


def state_hydrate(state: State, action: Action, config: Config = None) -> State:
    """Merge a partial state over *state*.

    Top-level keys are replaced; ``layout`` is merged one level deep and keeps
    the existing ``presets`` map unless the patch brings its own.
    """
    patch = _first_present(action.payload, "state", "patch", "value")
    if not is_record(patch):
        return state

    next_state = {**state, **patch}
    if is_record(patch.get("layout")):
        current_layout = state.get("layout") if is_record(state.get("layout")) else {}
        layout = {**current_layout, **patch["layout"]}
        if "presets" not in patch["layout"] or not is_record(patch["layout"].get("presets")):
            layout["presets"] = current_layout.get("presets") or {}
        next_state["layout"] = layout
    elif "layout" in patch:
        next_state["layout"] = state.get("layout")
    return next_state


# ---------------------------------------------------------------------------
# context/update, context/patch, layout/update, panels/update
# ---------------------------------------------------------------------------


def context_update(
    state: State,
    action: Action,
    config: Config = None,
    *,
    framework_logger: Optional[FrameworkLogger] = None,
) -> State:
    """Write ``payload.value`` at ``payload.path`` below an allow-listed namespace."""
    raw_path = action.payload.get("path")
    value = action.payload.get("value")
    segments = normalize_path(raw_path)

    if not segments or segments[0] not in NAMESPACE_ALLOWLIST:
        (framework_logger or NullLogger()).warn(
            "Rejected context update due to invalid namespace.",
            {"path": raw_path, "value": value, "allowedNamespaces": sorted(NAMESPACE_ALLOWLIST)},
        )
        return state

    next_state = set_in(state, segments, value)
    if next_state is None:
        (framework_logger or NullLogger()).warn(
            "Rejected context update: path does not address a writable slot.", {"path": raw_path}
        )
        return state
    return next_state


def context_patch(state: State, action: Action, config: Config = None) -> State:
    namespace = action.payload.get("namespace")
    if not namespace:
        return state
    patch = _first_present(action.payload, "changes", "patch", "value")
    current = state.get(namespace)
    next_value = {**current, **patch} if is_record(current) and is_record(patch) else patch
    return {**state, namespace: next_value}


def layout_update(state: State, action: Action, config: Config = None) -> State:
    changes = _first_present(action.payload, "changes", "layout", "value")
    if not is_record(changes):
        return state
    return {**state, "layout": shallow_merge(state.get("layout"), changes)}


def panels_update(state: State, action: Action, config: Config = None) -> State:
    """Replace every panel (``panels`` list) or patch one panel by ``panelId``."""
    payload = action.payload
    current: List[Dict[str, Any]] = state.get("panels") or []
    panels = payload.get("panels")
    panel_id = payload.get("panelId")
    changes = _first_present(payload, "changes", "panel", "value")

    if isinstance(panels, list):
        return {**state, "panels": list(panels)}

    if panel_id and is_record(changes):
        if not any(is_record(p) and p.get("id") == panel_id for p in current):
            return state
        patched = [{**p, **changes} if is_record(p) and p.get("id") == panel_id else p for p in current]
        return {**state, "panels": patched}

    return state


# ---------------------------------------------------------------------------
# Log ring buffer
# ---------------------------------------------------------------------------


def normalize_log_level(level: Any) -> str:
    return level if level in LOG_LEVELS else "info"


def normalize_log_state(state: State) -> Dict[str, Any]:
    logs = state.get("logs") if is_record(state.get("logs")) else {}
    raw_max = to_number(logs.get("maxEntries"))
    max_entries = max(1, math.floor(raw_max)) if raw_max is not None else DEFAULT_LOG_LIMIT
    entries = logs.get("entries") if isinstance(logs.get("entries"), list) else []
    return {"entries": entries, "maxEntries": max_entries}


def _trim(entries: List[Any], limit: int) -> List[Any]:
    return entries[len(entries) - limit :] if len(entries) > limit else entries


def next_log_sequence(entries: List[Any]) -> int:
    """One past the sequence suffix of the newest entry id, never below the entry count."""
    last = entries[-1] if entries else None
    match = _LOG_SEQUENCE.search(last.get("id", "")) if is_record(last) and isinstance(last.get("id"), str) else None
    previous = int(match.group(1)) if match else 0
    return max(previous, len(entries)) + 1


def build_log_entry(payload: Dict[str, Any], state: State) -> Optional[Dict[str, Any]]:
    """Normalise a ``logs/append`` payload into an entry, or ``None`` to drop it.

    Accepts either a flat payload (``message``, ``level``, ``data``, ...) or a
    complete ``entry`` dict.  Missing timestamps default to epoch ms, missing
    ids to ``"{timestamp}-{n}"``.
    """
    timestamp = payload.get("timestamp")
    base_timestamp = timestamp if isinstance(timestamp, (int, float)) and not isinstance(timestamp, bool) else now_ms()
    sequence = next_log_sequence(normalize_log_state(state)["entries"])
    raw_id = payload.get("id")
    base_id = raw_id if isinstance(raw_id, str) and raw_id.strip() else f"{base_timestamp}-{sequence}"

    entry = payload.get("entry")
    if is_record(entry) and isinstance(entry.get("message"), str):
        if not entry["message"].strip():
            return None
        entry_ts = entry.get("timestamp")
        entry_id = entry.get("id")
        return {
            **entry,
            "id": entry_id if isinstance(entry_id, str) and entry_id.strip() else base_id,
            "timestamp": entry_ts if isinstance(entry_ts, (int, float)) and not isinstance(entry_ts, bool) else base_timestamp,
            "level": normalize_log_level(entry.get("level")),
        }

    message = payload.get("message")
    if not isinstance(message, str) or not message.strip():
        return None

    built = {
        "id": base_id,
        "level": normalize_log_level(payload.get("level")),
        "message": message,
        "timestamp": base_timestamp,
    }
    if payload.get("data") is not None:
        built["data"] = payload["data"]
    if isinstance(payload.get("source"), str):
        built["source"] = payload["source"]
    return built


def logs_append(state: State, action: Action, config: Config = None) -> State:
    entry = build_log_entry(action.payload, state)
    if entry is None:
        return state
    logs = normalize_log_state(state)
    entries = _trim([*logs["entries"], entry], logs["maxEntries"])
    return {**state, "logs": {"entries": entries, "maxEntries": logs["maxEntries"]}}


def logs_clear(state: State, action: Action, config: Config = None) -> State:
    logs = normalize_log_state(state)
    if not logs["entries"]:
        return state
    return {**state, "logs": {"entries": [], "maxEntries": logs["maxEntries"]}}


def logs_set_max(state: State, action: Action, config: Config = None) -> State:
    logs = normalize_log_state(state)
    requested = to_number(action.payload.get("maxEntries"))
    next_max = max(1, math.floor(requested)) if requested is not None else logs["maxEntries"]
    return {**state, "logs": {"entries": _trim(logs["entries"], next_max), "maxEntries": next_max}}


# ---------------------------------------------------------------------------
# Registration table
# ---------------------------------------------------------------------------


def core_handlers(framework_logger: Optional[FrameworkLogger] = None):
    """``(action, implKey, reducer)`` triples for the generic handlers."""

    return [
        (ActionType.STATE_HYDRATE, "reducer:state/hydrate@1", state_hydrate),
        (
            ActionType.CONTEXT_UPDATE,
            "reducer:context/update@1",
            partial(context_update, framework_logger=framework_logger),
        ),
        (ActionType.CONTEXT_PATCH, "reducer:context/patch@1", context_patch),
        (ActionType.LAYOUT_UPDATE, "reducer:layout/update@1", layout_update),
        (ActionType.PANELS_UPDATE, "reducer:panels/update@1", panels_update),
        (ActionType.LOGS_APPEND, "reducer:logs/append@1", logs_append),
        (ActionType.LOGS_CLEAR, "reducer:logs/clear@1", logs_clear),
        (ActionType.LOGS_SET_MAX, "reducer:logs/setMax@1", logs_set_max),
    ]
