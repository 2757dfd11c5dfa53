"""Realtime WebSocket transport.

Clients connect to ``/ws`` with an access token in the ``token`` query
parameter or an ``Authorization: Bearer`` header. Server frames are
``{"event": <name>, "data": <payload>}``. Client frames are:

    {"action": "subscribe", "room": "order:<orderId>"}
    {"action": "unsubscribe", "room": "order:<orderId>"}
    {"action": "ping"}

Replies to client frames go through the connection's queue so a single
task writes to the socket.
"""

import asyncio
import contextlib
import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from infrastructure.exceptions import AuthError
from infrastructure.logging import bind_request_context, get_module_logger
from infrastructure.realtime.models import Connection
from infrastructure.realtime.registry import ConnectionRegistry
from infrastructure.services.container import ServiceContainer

logger = get_module_logger()

router = APIRouter()

POLICY_VIOLATION = 1008
GOING_AWAY = 1001

SUBSCRIBED = "subscribed"
UNSUBSCRIBED = "unsubscribed"
PONG = "pong"
ERROR = "error"


def _handshake_token(websocket: WebSocket, query_param: str) -> Optional[str]:
    token = websocket.query_params.get(query_param)
    if token:
        return token
    authorization = websocket.headers.get("authorization")
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return None


async def handle_client_frame(
    registry: ConnectionRegistry, connection: Connection, frame: Dict[str, Any]
) -> None:
    """Apply one client frame and queue the reply."""
    action = frame.get("action")
    room = frame.get("room")

    if action == "ping":
        connection.enqueue(PONG, {})
    elif action == "subscribe" and isinstance(room, str):
        joined = await registry.subscribe(connection, room)
        connection.enqueue(SUBSCRIBED, {"room": room, "success": joined})
    elif action == "unsubscribe" and isinstance(room, str):
        left = registry.unsubscribe(connection, room)
        connection.enqueue(UNSUBSCRIBED, {"room": room, "success": left})
    else:
        connection.enqueue(ERROR, {"message": f"Unsupported frame: {action!r}"})


async def _receive_frames(
    websocket: WebSocket, registry: ConnectionRegistry, connection: Connection
) -> None:
    while True:
        try:
            text = await websocket.receive_text()
        except WebSocketDisconnect:
            return
        try:
            frame = json.loads(text)
        except json.JSONDecodeError:
            connection.enqueue(ERROR, {"message": "Frames must be JSON objects"})
            continue
        if not isinstance(frame, dict):
            connection.enqueue(ERROR, {"message": "Frames must be JSON objects"})
            continue
        await handle_client_frame(registry, connection, frame)


@router.websocket("/ws")
async def realtime_endpoint(websocket: WebSocket):
    services: ServiceContainer = websocket.app.state.services
    registry = services.registry
    token = _handshake_token(
        websocket, services.settings.realtime.REALTIME_TOKEN_QUERY_PARAM
    )

    try:
        connection = await registry.connect(token)
    except AuthError as e:
        logger.info("websocket_handshake_rejected", error=str(e))
        await websocket.close(code=POLICY_VIOLATION, reason=str(e))
        return

    await websocket.accept()

    async def send(event: str, payload: Dict[str, Any]) -> None:
        await websocket.send_json({"event": event, "data": payload})

    with bind_request_context(
        connection_id=connection.connection_id,
        user_id=connection.user_id,
        tenant_id=connection.tenant_id,
    ):
        drain_task = asyncio.create_task(connection.drain(send))
        receive_task = asyncio.create_task(
            _receive_frames(websocket, registry, connection)
        )
        try:
            await asyncio.wait(
                {drain_task, receive_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            registry.disconnect(connection)
            for task in (drain_task, receive_task):
                task.cancel()
            outcomes = await asyncio.gather(
                drain_task, receive_task, return_exceptions=True
            )
            for outcome in outcomes:
                if isinstance(outcome, Exception):
                    logger.warning("websocket_task_failed", error=str(outcome))

        # Server shutdown closed the connection while the client is still there.
        if websocket.client_state != WebSocketState.DISCONNECTED:
            with contextlib.suppress(RuntimeError):
                await websocket.close(code=GOING_AWAY)
