"""Declarative definitions (pure data, transmissible as JSON/YAML).

Definitions never carry behaviour; they reference implementations by string
key.  Field aliases match the camelCase wire format so packs authored for
other hosts load unchanged.
"""

from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator


class _Definition(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class ActionDefinition(_Definition):
    """A recognised action identifier plus metadata."""

    id: str
    description: Optional[str] = None
    payload_type: Optional[str] = Field(default=None, alias="payloadType")


class HandlerDefinition(_Definition):
    """Binds an action name to a registered reducer implementation."""

    id: str
    action: str
    impl_key: str = Field(alias="implKey")
    config: Optional[Dict[str, Any]] = None
    description: Optional[str] = None


class EffectDefinition(_Definition):
    """Binds an action name to a registered effect implementation."""

    id: str
    for_action: str = Field(alias="forAction")
    impl_key: str = Field(alias="implKey")
    config: Optional[Dict[str, Any]] = None
    description: Optional[str] = None


class SelectorDefinition(_Definition):
    """Exposes a registered selector implementation under a public key."""

    key: str
    impl_key: str = Field(alias="implKey")


class ViewDefinitionSpec(_Definition):
    """Data half of a view definition.

    ``component`` is an optional ``"package.module:attribute"`` import path
    resolved lazily the first time the component is requested.
    """

    id: str
    title: str
    icon: Optional[str] = None
    component: Optional[str] = None
    default_context: Dict[str, Any] = Field(default_factory=dict, alias="defaultContext")


class DefinitionPack(_Definition):
    """A versioned bundle of definitions applied to a context in one go."""

    id: str
    version: str = "1"
    actions: List[ActionDefinition] = Field(default_factory=list)
    handlers: List[HandlerDefinition] = Field(default_factory=list)
    effects: List[EffectDefinition] = Field(default_factory=list)
    views: List[ViewDefinitionSpec] = Field(default_factory=list)
    selectors: List[SelectorDefinition] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def _stringify_version(cls, value: Any) -> Any:
        # YAML turns ``version: 1`` into an int
        if isinstance(value, (int, float)):
            return str(value)
        return value


__all__ = [
    "ActionDefinition",
    "DefinitionPack",
    "EffectDefinition",
    "HandlerDefinition",
    "SelectorDefinition",
    "ViewDefinitionSpec",
]
