"""Framework logger contract.

Components that report operational problems (registry warnings, persistence
failures) accept an optional logger object exposing any of
``debug/info/warn/error(message, context)``.  :func:`wrap_logger` turns
whatever the host injected into a :class:`FrameworkLogger` so callers never
have to check which methods exist:

* ``None`` → silent
* :class:`logging.Logger` → stdlib records (``warn`` maps to ``WARNING``)
* any other object → its methods are called when present

Nothing here is a process-wide singleton; the logger travels with the
context that owns it.
"""

from __future__ import annotations

import logging
from typing import Any
from typing import Dict
from typing import Optional

_STDLIB_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class FrameworkLogger:
    """Base adapter; subclasses decide where messages go."""

    def _emit(self, level: str, message: str, context: Optional[Dict[str, Any]]) -> None:
        raise NotImplementedError

    def debug(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._emit("debug", message, context)

    def info(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._emit("info", message, context)

    def warn(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._emit("warn", message, context)

    # stdlib spelling, so a FrameworkLogger can stand in for ``logging.Logger``
    warning = warn

    def error(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._emit("error", message, context)


class NullLogger(FrameworkLogger):
    def _emit(self, level: str, message: str, context: Optional[Dict[str, Any]]) -> None:
        return None


class StdlibLogger(FrameworkLogger):
    """Forwards to a :mod:`logging` logger, context appended to the message."""

    def __init__(self, target: Optional[logging.Logger] = None):
        self.target = target or logging.getLogger("bloxcore")

    def _emit(self, level: str, message: str, context: Optional[Dict[str, Any]]) -> None:
        if context:
            self.target.log(_STDLIB_LEVELS[level], f"{message} {context}")
        else:
            self.target.log(_STDLIB_LEVELS[level], message)


class DuckLogger(FrameworkLogger):
    """Calls ``target.<level>(message, context)`` when the method exists."""

    def __init__(self, target: Any):
        self.target = target

    def _emit(self, level: str, message: str, context: Optional[Dict[str, Any]]) -> None:
        method = getattr(self.target, level, None)
        if callable(method):
            method(message, context)


def wrap_logger(target: Any) -> FrameworkLogger:
    """Normalise an injected logger into a :class:`FrameworkLogger`."""

    if target is None:
        return NullLogger()
    if isinstance(target, FrameworkLogger):
        return target
    if isinstance(target, logging.Logger):
        return StdlibLogger(target)
    return DuckLogger(target)


__all__ = [
    "DuckLogger",
    "FrameworkLogger",
    "NullLogger",
    "StdlibLogger",
    "wrap_logger",
]
