"""HTTP and WebSocket transport for a workspace.

Hosts that live outside the process (a browser shell, another service) send
wire actions here instead of calling ``dispatch`` directly.  The router only
translates; every state change still goes through the dispatch pipeline.
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Request
from fastapi import WebSocket
from fastapi import WebSocketDisconnect
from fastapi import status
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import ValidationError

from bloxcore.bootstrap import Workspace
from bloxcore.constants import WS_ENDPOINT
from bloxcore.exceptions import BloxError
from bloxcore.exceptions import MissingImplementationError

router = APIRouter(tags=["actions"])
logger = logging.getLogger(__name__)


class ActionRequest(BaseModel):
    """Wire action as posted by a client."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(..., min_length=1)
    payload: Dict[str, Any] = Field(default_factory=dict)
    follow_ups: List[Dict[str, Any]] = Field(default_factory=list, alias="followUps")


class DispatchResponse(BaseModel):
    state: Dict[str, Any]


def get_workspace(request: Request) -> Workspace:
    workspace: Optional[Workspace] = getattr(request.app.state, "workspace", None)
    if workspace is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Workspace not initialised")
    return workspace


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@router.post("/actions", response_model=DispatchResponse)
async def post_action(
    body: ActionRequest,
    wait: bool = False,
    workspace: Workspace = Depends(get_workspace),
):
    """Dispatch one action and return the committed state.

    With ``?wait=true`` the response is held until the effects the action
    triggered have finished.
    """
    try:
        workspace.dispatch(body.model_dump(by_alias=True))
        if wait:
            await workspace.settled()
    except BloxError as e:
        logger.warning(f"Dispatch of {body.type} failed: {e}")
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return {"state": workspace.state}


@router.get("/state")
async def get_state(workspace: Workspace = Depends(get_workspace)) -> Dict[str, Any]:
    return workspace.state


@router.get("/selectors/{key:path}")
async def read_selector(key: str, workspace: Workspace = Depends(get_workspace)):
    try:
        value = workspace.select(key)
    except MissingImplementationError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown selector: {key}")
    if callable(value):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Selector {key} is not serialisable")
    return {"key": key, "value": value}


# ---------------------------------------------------------------------------
# WebSocket
# ---------------------------------------------------------------------------


async def _forward_states(websocket: WebSocket, queue: "asyncio.Queue[Dict[str, Any]]") -> None:
    while True:
        state = await queue.get()
        await websocket.send_json({"type": "state", "data": state})


@router.websocket(WS_ENDPOINT)
async def workspace_socket(websocket: WebSocket):
    """Stream committed states and accept wire actions.

    Every message received is dispatched; every commit is pushed back as
    ``{"type": "state", "data": ...}``.  The current state is sent first.
    """
    workspace: Optional[Workspace] = getattr(websocket.app.state, "workspace", None)
    if workspace is None:
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR, reason="Workspace not initialised")
        return

    client_id = str(uuid.uuid4())
    await websocket.accept()
    logger.info(f"WebSocket connection established for client {client_id}")

    queue: asyncio.Queue = asyncio.Queue()
    queue.put_nowait(workspace.state)
    unsubscribe = workspace.subscribe(queue.put_nowait)
    sender = asyncio.create_task(_forward_states(websocket, queue))

    try:
        while True:
            raw_data = await websocket.receive_text()
            try:
                data = json.loads(raw_data)
                workspace.dispatch(data)
            except json.JSONDecodeError as e:
                logger.warning(f"Invalid JSON from client {client_id}: {e}")
                await websocket.send_json({"type": "error", "error": "Invalid JSON payload"})
            except (ValidationError, BloxError) as e:
                logger.warning(f"Rejected message from client {client_id}: {e}")
                await websocket.send_json({"type": "error", "error": str(e)})
    except WebSocketDisconnect:
        logger.info(f"WebSocket connection closed for client {client_id}")
    finally:
        unsubscribe()
        sender.cancel()
