"""Holds the committed application state and notifies subscribers."""

from __future__ import annotations

import logging
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional

logger = logging.getLogger(__name__)

State = Dict[str, Any]
Listener = Callable[[State], None]
Validator = Callable[[State], None]


class StateStore:
    """Single committed snapshot plus a synchronous subscriber list.

    ``set_state`` runs the optional validator *before* committing, so an
    invalid state never becomes visible to readers.
    """

    def __init__(self, initial: State, validator: Optional[Validator] = None):
        if validator is not None:
            validator(initial)
        self._state = initial
        self._validator = validator
        self._listeners: List[Listener] = []

    def get_state(self) -> State:
        return self._state

    def set_state(self, next_state: State) -> None:
        if self._validator is not None:
            self._validator(next_state)
        self._state = next_state

        # Iterate a copy: a listener may unsubscribe itself.
        for listener in list(self._listeners):
            try:
                listener(next_state)
            except Exception as e:
                logger.error(f"State subscriber {listener!r} failed: {e}")

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a function that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)
