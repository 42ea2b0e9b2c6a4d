"""Typed payloads for built-in actions.

Each model is registered with the action catalogue and validated once at the
dispatch boundary.  Models are deliberately lenient (``extra="allow"``,
permissive field types) where the reducer itself defines a fallback for odd
input, e.g. a non-numeric ``count`` keeps the previous panel count.  They only
reject payloads that no reducer could interpret.
"""

from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from typing import Union

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class _Payload(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


# ---------------------------------------------------------------------------
# Generic handlers
# ---------------------------------------------------------------------------


class ContextUpdatePayload(_Payload):
    path: Union[str, List[str]]
    value: Any = None


class ContextPatchPayload(_Payload):
    namespace: str


class PanelsUpdatePayload(_Payload):
    panels: Optional[List[Dict[str, Any]]] = None
    panel_id: Optional[str] = Field(default=None, alias="panelId")


class LogsAppendPayload(_Payload):
    level: Optional[str] = None
    source: Optional[str] = None
    entry: Optional[Dict[str, Any]] = None


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


class SetExpansionPayload(_Payload):
    side: str
    expanded: Optional[bool] = None
    state: Optional[str] = None


class SetViewOrderPayload(_Payload):
    region: str
    order: List[str]


# ---------------------------------------------------------------------------
# View instances
# ---------------------------------------------------------------------------


class InstanceOverrides(_Payload):
    instance_id: Optional[str] = Field(default=None, alias="instanceId")
    title: Optional[str] = None
    local_context: Optional[Dict[str, Any]] = Field(default=None, alias="localContext")


class CreateInstancePayload(_Payload):
    definition_id: str = Field(alias="definitionId")
    overrides: Optional[InstanceOverrides] = None


class UpdateLocalContextPayload(_Payload):
    instance_id: str = Field(alias="instanceId")
    context: Dict[str, Any] = Field(default_factory=dict)


class DestroyInstancePayload(_Payload):
    instance_id: str = Field(alias="instanceId")


# ---------------------------------------------------------------------------
# Presets / session
# ---------------------------------------------------------------------------


class PresetNamePayload(_Payload):
    name: str


class PresetRenamePayload(_Payload):
    old_name: str = Field(alias="oldName")
    new_name: str = Field(alias="newName")


class PresetsHydratePayload(_Payload):
    presets: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


class SetUserPayload(_Payload):
    user: Optional[Dict[str, Any]] = None


__all__ = [
    "ContextPatchPayload",
    "ContextUpdatePayload",
    "CreateInstancePayload",
    "DestroyInstancePayload",
    "InstanceOverrides",
    "LogsAppendPayload",
    "PanelsUpdatePayload",
    "PresetNamePayload",
    "PresetRenamePayload",
    "PresetsHydratePayload",
    "SetExpansionPayload",
    "SetUserPayload",
    "SetViewOrderPayload",
    "UpdateLocalContextPayload",
]
