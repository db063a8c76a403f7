"""WebSocket endpoint: real-time notification channel.

Authenticates with ?token=<jwt> or an Authorization: Bearer header, then
registers the connection in app.state.ws_registry (set in lifespan), which
replays the recent unread backlog. Clients may send {"type": "ping"}.
"""

import json

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from workhub.api.v1.dependencies import resolve_principal
from workhub.domain.exceptions import AuthenticationException
from workhub.domain.value_objects import Principal
from workhub.infrastructure.persistence.database import get_session_factory
from workhub.infrastructure.persistence.repositories import SqlPrincipalDirectory
from workhub.schemas.websocket import ErrorEvent, PongEvent
from workhub.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


async def _reject_websocket(websocket: WebSocket, reason: str, code: int = 1008) -> None:
    """Accept then immediately close with code/reason so client gets a proper close frame."""
    await websocket.accept()
    await websocket.close(code=code, reason=reason)


def _token_from(websocket: WebSocket) -> str | None:
    token = websocket.query_params.get("token")
    if token:
        return token
    auth = websocket.headers.get("authorization", "")
    scheme, _, credentials = auth.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


async def _authenticate(token: str) -> Principal:
    async with get_session_factory()() as session:
        return await resolve_principal(token, SqlPrincipalDirectory(session))


def _reply_to(raw: str) -> dict | None:
    """Answer for one client frame, or None when nothing is sent back."""
    if raw.strip().lower() == "ping":
        return PongEvent().model_dump()
    try:
        message = json.loads(raw)
    except json.JSONDecodeError:
        return ErrorEvent(message="Invalid JSON").model_dump()
    if isinstance(message, dict) and message.get("type") == "ping":
        return PongEvent().model_dump()
    return ErrorEvent(message="Unsupported message type").model_dump()


@router.websocket("")
async def websocket_endpoint(websocket: WebSocket):
    """Accept only after validating the token; deliver notifications until the client leaves."""
    registry = websocket.app.state.ws_registry
    token = _token_from(websocket)
    if not token:
        await _reject_websocket(websocket, "Missing token")
        return
    try:
        principal = await _authenticate(token)
    except AuthenticationException as e:
        await _reject_websocket(websocket, e.message)
        return
    await registry.connect(websocket, principal.id)
    try:
        while True:
            reply = _reply_to(await websocket.receive_text())
            if reply is not None:
                await websocket.send_json(reply)
    except WebSocketDisconnect:
        logger.debug("Client %s closed the WebSocket", principal.id)
    finally:
        await registry.disconnect(websocket)
