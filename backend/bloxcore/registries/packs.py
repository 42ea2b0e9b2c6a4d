"""Definition packs: declarative bundles of definitions loaded from data.

A pack references implementations by key only, so every ``implKey`` it
names must already be registered on the target registries; a missing key
fails the whole load with :class:`MissingImplementationError`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from typing import Dict
from typing import Union

import yaml

from bloxcore.registries.core import CoreRegistries
from bloxcore.schemas.definitions import DefinitionPack

logger = logging.getLogger(__name__)

PackSource = Union[DefinitionPack, Dict[str, Any], str, Path]


def load_pack(source: PackSource) -> DefinitionPack:
    """Parse *source* into a :class:`DefinitionPack`.

    Args:
        source: A pack model, a plain dict, or a path to a ``.yaml``/``.yml``
            (or ``.json``, which YAML also parses) file.
    """
    if isinstance(source, DefinitionPack):
        return source
    if isinstance(source, dict):
        return DefinitionPack.model_validate(source)

    path = Path(source)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Definition pack {path} must contain a mapping, got {type(data).__name__}")
    return DefinitionPack.model_validate(data)


def apply_pack(registries: CoreRegistries, source: PackSource) -> DefinitionPack:
    """Apply a pack: actions, handlers, effects, views, selectors, in that order."""

    pack = load_pack(source)

    for action in pack.actions:
        registries.actions.register(action)
    for handler in pack.handlers:
        registries.handlers.apply_definition(handler)
    for effect in pack.effects:
        registries.effects.apply_definition(effect)
    for view in pack.views:
        registries.views.register(view)
    for selector in pack.selectors:
        registries.selectors.apply_definition(selector)

    logger.info(
        f"Applied definition pack {pack.id}@{pack.version}: "
        f"{len(pack.actions)} actions, {len(pack.handlers)} handlers, {len(pack.effects)} effects, "
        f"{len(pack.views)} views, {len(pack.selectors)} selectors"
    )
    return pack
