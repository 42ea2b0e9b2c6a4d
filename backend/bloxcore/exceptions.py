"""Exception hierarchy shared across the runtime.

Configuration mistakes (a definition pointing at an implementation key that
was never registered, a pack referencing an unknown view) raise immediately
at registration time.  Malformed *actions* never raise – they are rejected
with a log entry – so nothing in here is expected on the dispatch hot path
except :class:`StateValidationError`, which the dispatcher turns into a
rejection log entry.
"""

from __future__ import annotations


class BloxError(Exception):
    """Base class for all bloxcore errors."""


class MissingImplementationError(BloxError, KeyError):
    """A definition references an implementation key nobody registered."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"Missing {kind} impl: {key}")

    def __str__(self) -> str:  # KeyError quotes its message otherwise
        return self.args[0]


class DefinitionNotFoundError(BloxError, KeyError):
    """Lookup of a registered definition (action, view) by id failed."""

    def __init__(self, kind: str, definition_id: str):
        self.kind = kind
        self.definition_id = definition_id
        super().__init__(f"{kind} not registered: {definition_id}")

    def __str__(self) -> str:
        return self.args[0]


class StateValidationError(BloxError, ValueError):
    """A committed state violates structural invariants."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("State validation failed:\n" + "\n".join(f"- {e}" for e in self.errors))


class PersistenceError(BloxError):
    """Wraps I/O failures raised by a storage backend."""


__all__ = [
    "BloxError",
    "DefinitionNotFoundError",
    "MissingImplementationError",
    "PersistenceError",
    "StateValidationError",
]
