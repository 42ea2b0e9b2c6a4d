"""Structural checks run on every commit while validation is enabled."""

from typing import Any
from typing import Dict
from typing import Iterable
from typing import List

from bloxcore.constants import PANEL_REGIONS
from bloxcore.exceptions import StateValidationError


def _duplicates(ids: Iterable[Any], label: str) -> List[str]:
    seen = set()
    dupes: List[str] = []
    for item in ids:
        if item in seen and item not in dupes:
            dupes.append(item)
        seen.add(item)
    if not dupes:
        return []
    return [f"Duplicate {label} IDs: {', '.join(str(d) for d in dupes)}"]


def collect_state_errors(state: Any) -> List[str]:
    """Return human-readable problems with *state* (empty when valid)."""

    if not isinstance(state, dict):
        return ["state is not an object."]

    errors: List[str] = []

    panels = state.get("panels") if isinstance(state.get("panels"), list) else []
    definitions = state.get("viewDefinitions") if isinstance(state.get("viewDefinitions"), list) else []
    instances = state.get("viewInstances") if isinstance(state.get("viewInstances"), dict) else {}

    errors += _duplicates((p.get("id") for p in panels if isinstance(p, dict)), "panel")
    errors += _duplicates((d.get("id") for d in definitions if isinstance(d, dict)), "view definition")

    for key, instance in instances.items():
        if not isinstance(instance, dict):
            errors.append(f"viewInstances[{key}] is not an object.")
            continue
        instance_id = instance.get("instanceId")
        if not isinstance(instance_id, str) or not instance_id.strip():
            errors.append(f"viewInstances[{key}].instanceId is missing or invalid.")
        elif instance_id != key:
            errors.append(f"viewInstances key '{key}' does not match instanceId '{instance_id}'.")
        definition_id = instance.get("definitionId")
        if not isinstance(definition_id, str) or not definition_id.strip():
            errors.append(f"viewInstances[{key}].definitionId is missing or invalid.")

    for panel in panels:
        if not isinstance(panel, dict) or not isinstance(panel.get("id"), str):
            errors.append("Panel entry is missing a valid id.")
            continue
        if panel.get("region") not in PANEL_REGIONS:
            errors.append(f"Panel '{panel['id']}' has invalid region '{panel.get('region')}'.")

    return errors


def validate_state(state: Dict[str, Any]) -> None:
    """Raise :class:`StateValidationError` if *state* is structurally broken."""

    errors = collect_state_errors(state)
    if errors:
        raise StateValidationError(errors)
