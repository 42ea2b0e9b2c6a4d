"""View definition registry and view-instance factory.

The registry knows which view *types* exist and how to mint live
*instances* of them.  It never renders anything: ``component`` is an opaque
object handed back to whichever host asked for it.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import random
import time
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional
from typing import Set
from typing import Union

from bloxcore.exceptions import DefinitionNotFoundError
from bloxcore.runtime.logger import FrameworkLogger
from bloxcore.runtime.logger import wrap_logger
from bloxcore.schemas.definitions import ViewDefinitionSpec

logger = logging.getLogger(__name__)

ComponentLoader = Callable[[], Any]
IdFactory = Callable[[str], str]
RegistryListener = Callable[[Dict[str, Any]], None]


@dataclass
class ViewDefinition:
    """A registered view type.

    ``component`` is either a zero-argument loader (sync or async), an
    import path ``"package.module:attribute"``, or ``None`` for headless
    views.
    """

    id: str
    title: str
    icon: Optional[str] = None
    component: Union[ComponentLoader, str, None] = None
    default_context: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_spec(cls, spec: Union[ViewDefinitionSpec, Dict[str, Any]]) -> "ViewDefinition":
        if not isinstance(spec, ViewDefinitionSpec):
            spec = ViewDefinitionSpec.model_validate(spec)
        return cls(
            id=spec.id,
            title=spec.title,
            icon=spec.icon,
            component=spec.component,
            default_context=dict(spec.default_context),
        )

    def summary(self) -> Dict[str, Any]:
        """JSON-safe projection stored under ``state["viewDefinitions"]``."""
        return {"id": self.id, "name": self.title, "title": self.title, "icon": self.icon}


def default_instance_id(definition_id: str) -> str:
    """``"{definitionId}-{epoch_ms}-{0..999}"``."""
    return f"{definition_id}-{int(time.time() * 1000)}-{random.randint(0, 999)}"


def _import_component(path: str) -> Any:
    module_name, _, attribute = path.partition(":")
    module = importlib.import_module(module_name)
    return getattr(module, attribute) if attribute else module


class ViewRegistry:
    """Registered view definitions plus instance-id bookkeeping."""

    # Generated ids are re-minted this many times before a counter suffix is
    # appended to force uniqueness.
    _MAX_REMINT = 8

    def __init__(self, framework_logger: Any = None, id_factory: Optional[IdFactory] = None):
        self._logger: FrameworkLogger = wrap_logger(framework_logger)
        self._id_factory: IdFactory = id_factory or default_instance_id
        self._definitions: Dict[str, ViewDefinition] = {}
        self._components: Dict[str, Any] = {}
        self._issued_ids: Set[str] = set()
        self._listeners: List[RegistryListener] = []

    # ------------------------------------------------------------------
    # Definitions
    # ------------------------------------------------------------------

    def register(self, definition: Union[ViewDefinition, ViewDefinitionSpec, Dict[str, Any]]) -> bool:
        """Register *definition*; returns ``False`` when it was rejected.

        Definitions without a non-blank icon are rejected with a warning,
        since hosts cannot render a toolbar token for them.
        """
        if not isinstance(definition, ViewDefinition):
            definition = ViewDefinition.from_spec(definition)

        if not definition.icon or not definition.icon.strip():
            self._logger.warn(
                "ViewRegistry register failed. Missing icon for view.",
                {"viewId": definition.id, "title": definition.title},
            )
            return False

        existed = definition.id in self._definitions
        self._definitions[definition.id] = definition
        # Re-registration replaces the loader, so the cached component is stale.
        self._components.pop(definition.id, None)
        self._logger.info(
            "ViewRegistry registered view.",
            {"viewId": definition.id, "title": definition.title, "icon": definition.icon, "existed": existed},
        )
        self._emit_change(
            {"type": "register", "viewId": definition.id, "definition": definition, "total": len(self._definitions)}
        )
        return True

    def get(self, definition_id: str) -> Optional[ViewDefinition]:
        return self._definitions.get(definition_id)

    def get_or_throw(self, definition_id: str) -> ViewDefinition:
        definition = self.get(definition_id)
        if definition is None:
            raise DefinitionNotFoundError("View", definition_id)
        return definition

    def entries(self) -> List[ViewDefinition]:
        return list(self._definitions.values())

    def summaries(self) -> List[Dict[str, Any]]:
        return [d.summary() for d in self._definitions.values()]

    async def get_component(self, definition_id: str) -> Any:
        """Resolve (and cache) the component for *definition_id*.

        Returns ``None`` for unknown views, headless views and loaders that
        fail; failures are logged, never raised.
        """
        if definition_id in self._components:
            return self._components[definition_id]

        definition = self.get(definition_id)
        if definition is None or definition.component is None:
            return None

        try:
            if isinstance(definition.component, str):
                component = _import_component(definition.component)
            else:
                component = definition.component()
                if inspect.isawaitable(component):
                    component = await component
        except Exception as exc:
            logger.exception(f"Error loading component for view '{definition_id}'")
            self._logger.error(
                "ViewRegistry component load failed.", {"viewId": definition_id, "error": str(exc)}
            )
            return None

        self._components[definition_id] = component
        return component

    # ------------------------------------------------------------------
    # Instances
    # ------------------------------------------------------------------

    def create_instance(self, definition_id: str, overrides: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """Mint a view instance for *definition_id*, or ``None`` if unknown.

        Args:
            definition_id: Registered view definition id.
            overrides: Optional ``instanceId``, ``title`` and ``localContext``;
                override context is layered over the definition defaults.
        """
        definition = self.get(definition_id)
        if definition is None:
            self._logger.warn("View definition not found.", {"definitionId": definition_id})
            return None

        overrides = overrides or {}
        instance_id = overrides.get("instanceId") or self._mint_id(definition_id)
        self._issued_ids.add(instance_id)

        return {
            "instanceId": instance_id,
            "definitionId": definition_id,
            "title": overrides.get("title") or definition.title,
            "localContext": {**definition.default_context, **(overrides.get("localContext") or {})},
        }

    def _mint_id(self, definition_id: str) -> str:
        candidate = self._id_factory(definition_id)
        attempts = 0
        while candidate in self._issued_ids and attempts < self._MAX_REMINT:
            candidate = self._id_factory(definition_id)
            attempts += 1
        if candidate in self._issued_ids:
            base, suffix = candidate, 1
            while f"{base}-{suffix}" in self._issued_ids:
                suffix += 1
            candidate = f"{base}-{suffix}"
        return candidate

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def on_registry_change(self, listener: RegistryListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit_change(self, detail: Dict[str, Any]) -> None:
        for listener in list(self._listeners):
            listener(detail)


__all__ = ["ViewDefinition", "ViewRegistry", "default_instance_id"]
