"""Key → implementation maps shared by handler, effect and selector registries."""

import logging
from typing import Dict
from typing import Generic
from typing import List
from typing import Optional
from typing import TypeVar

from bloxcore.exceptions import MissingImplementationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ImplementationRegistry(Generic[T]):
    """String-keyed table of callables.

    Keys are versioned by convention (``"reducer:logs/append@1"``) so a new
    behaviour can be registered next to the old one and definitions switch
    by editing data only.
    """

    def __init__(self, kind: str):
        self.kind = kind
        self._impls: Dict[str, T] = {}

    def register(self, key: str, impl: T) -> None:
        if key in self._impls and self._impls[key] is not impl:
            logger.debug(f"Replacing {self.kind} impl {key}")
        self._impls[key] = impl

    def get(self, key: str) -> Optional[T]:
        return self._impls.get(key)

    def get_or_throw(self, key: str) -> T:
        try:
            return self._impls[key]
        except KeyError:
            raise MissingImplementationError(self.kind, key) from None

    def __contains__(self, key: object) -> bool:
        return key in self._impls

    def keys(self) -> List[str]:
        return list(self._impls)
