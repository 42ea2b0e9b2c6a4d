"""Catalogue of recognised actions and their optional payload models."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from typing import Type
from typing import Union

from pydantic import BaseModel
from pydantic import ValidationError

from bloxcore.exceptions import DefinitionNotFoundError
from bloxcore.schemas.actions import Action
from bloxcore.schemas.actions import action_key
from bloxcore.schemas.definitions import ActionDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PayloadCheck:
    """Outcome of validating one action's payload."""

    payload: Dict[str, Any]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ActionRegistry:
    """Known action identifiers with metadata; carries no behaviour.

    Registering a pydantic model for an action makes dispatch validate the
    payload once, before any handler runs.  Actions without a model (and
    actions that were never registered at all) pass through untouched.
    """

    def __init__(self) -> None:
        self._defs: Dict[str, ActionDefinition] = {}
        self._models: Dict[str, Type[BaseModel]] = {}

    def register(
        self,
        definition: Union[ActionDefinition, Dict[str, Any], str],
        payload_model: Optional[Type[BaseModel]] = None,
    ) -> ActionDefinition:
        if isinstance(definition, str):
            definition = ActionDefinition(id=definition)
        elif not isinstance(definition, ActionDefinition):
            definition = ActionDefinition.model_validate(definition)

        if payload_model is not None and definition.payload_type is None:
            definition = definition.model_copy(update={"payload_type": payload_model.__name__})

        self._defs[definition.id] = definition
        if payload_model is not None:
            self._models[definition.id] = payload_model
        return definition

    def get(self, action_id: Any) -> Optional[ActionDefinition]:
        return self._defs.get(action_key(action_id))

    def get_or_throw(self, action_id: Any) -> ActionDefinition:
        definition = self.get(action_id)
        if definition is None:
            raise DefinitionNotFoundError("Action", action_key(action_id))
        return definition

    def payload_model(self, action_id: Any) -> Optional[Type[BaseModel]]:
        return self._models.get(action_key(action_id))

    def entries(self) -> List[ActionDefinition]:
        return list(self._defs.values())

    def check(self, action: Action) -> PayloadCheck:
        """Validate *action*'s payload against its registered model, if any."""

        model = self._models.get(action.type)
        if model is None:
            return PayloadCheck(payload=action.payload)

        try:
            parsed = model.model_validate(action.payload)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or '<payload>'}: {err['msg']}" for err in exc.errors()
            )
            return PayloadCheck(payload=action.payload, error=problems)

        # Coerced values win; keys the model does not know survive as sent.
        return PayloadCheck(payload={**action.payload, **parsed.model_dump(by_alias=True, exclude_unset=True)})


__all__ = ["ActionRegistry", "PayloadCheck"]
