"""Copy-on-write helpers for the plain-dict state tree.

Reducers never mutate the state they receive.  They copy only the
containers on the path to the value they change ("the spine"); every other
branch of the new state is the very same object as in the old state, so
``old["logs"] is new["logs"]`` holds after a layout-only update.
"""

import math
import time
from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from typing import Sequence
from typing import Union


def is_record(value: Any) -> bool:
    return isinstance(value, dict)


def clone_container(value: Any) -> Union[Dict[str, Any], List[Any]]:
    """Shallow copy of a list/dict; anything else becomes a new empty dict."""

    if isinstance(value, list):
        return list(value)
    if isinstance(value, dict):
        return dict(value)
    return {}


def normalize_path(path: Union[str, Sequence[Any], None]) -> List[str]:
    """Split ``"a.b.c"`` (or a list) into trimmed, non-blank segments."""

    if path is None:
        return []
    if isinstance(path, str):
        return [segment.strip() for segment in path.split(".") if segment.strip()]
    return [segment.strip() for segment in path if isinstance(segment, str) and segment.strip()]


def _list_index(container: List[Any], segment: str) -> Optional[int]:
    if not segment.isdigit():
        return None
    index = int(segment)
    return index if index <= len(container) else None


def set_in(state: Dict[str, Any], segments: Sequence[str], value: Any) -> Optional[Dict[str, Any]]:
    """Return a copy of *state* with *value* written at *segments*.

    Only the containers along the path are copied.  Returns ``None`` when the
    path walks into a list with a non-index segment.
    """

    if not segments:
        return None

    root = clone_container(state)
    target: Any = root
    source: Any = state

    for position, segment in enumerate(segments):
        last = position == len(segments) - 1

        if isinstance(target, list):
            index = _list_index(target, segment)
            if index is None:
                return None
            if last:
                if index == len(target):
                    target.append(value)
                else:
                    target[index] = value
                break
            source_value = source[index] if isinstance(source, list) and index < len(source) else None
            next_value = clone_container(source_value)
            if index == len(target):
                target.append(next_value)
            else:
                target[index] = next_value
        else:
            if last:
                target[segment] = value
                break
            source_value = source.get(segment) if isinstance(source, dict) else None
            next_value = clone_container(source_value)
            target[segment] = next_value

        target = next_value
        source = source_value

    return root


def shallow_merge(base: Any, patch: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base) if isinstance(base, dict) else {}
    merged.update(patch)
    return merged


def to_number(value: Any) -> Optional[float]:
    """Lenient numeric coercion; ``None`` for anything non-finite or non-numeric.

    Booleans count as non-numeric here, unlike :func:`float`.
    """

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def now_ms() -> int:
    """Wall-clock epoch milliseconds."""
    return int(time.time() * 1000)
