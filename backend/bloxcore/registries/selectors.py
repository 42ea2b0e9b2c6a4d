"""Named, read-only projections over state."""

from typing import Any
from typing import Callable
from typing import Dict
from typing import Union

from bloxcore.registries.impls import ImplementationRegistry
from bloxcore.schemas.definitions import SelectorDefinition

SelectorImpl = Callable[[Dict[str, Any]], Any]


class SelectorImplRegistry(ImplementationRegistry[SelectorImpl]):
    """Selector implementations keyed by ``selector:<name>``.

    Public keys declared by a :class:`SelectorDefinition` are aliases that
    resolve to an implementation key at definition time.
    """

    def __init__(self) -> None:
        super().__init__("selector")

    def apply_definition(self, definition: Union[SelectorDefinition, Dict[str, Any]]) -> None:
        if not isinstance(definition, SelectorDefinition):
            definition = SelectorDefinition.model_validate(definition)
        self.register(definition.key, self.get_or_throw(definition.impl_key))

    def select(self, key: str, state: Dict[str, Any]) -> Any:
        return self.get_or_throw(key)(state)
