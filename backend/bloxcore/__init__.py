"""bloxcore: definition-driven action dispatch for layout workspaces.

Typical use::

    from bloxcore import bootstrap

    workspace = bootstrap(views=[{"id": "notes", "title": "Notes", "icon": "note"}])
    workspace.dispatch({"type": "layout/setMainAreaCount", "payload": {"count": 2}})
    await workspace.settled()
"""

from bloxcore.bootstrap import Workspace
from bloxcore.bootstrap import bootstrap
from bloxcore.runtime.context import CoreContext
from bloxcore.schemas.actions import Action
from bloxcore.schemas.actions import ActionType
from bloxcore.schemas.actions import make_action

__all__ = [
    "Action",
    "ActionType",
    "CoreContext",
    "Workspace",
    "bootstrap",
    "make_action",
]
