"""WebSocket delivery channel registry.

Holds the live connections of each principal. Implements IDeliveryChannel:
send() reaches every connection of one principal. Use via app.state.ws_registry
(set in lifespan).
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from fastapi import WebSocket

from workhub.infrastructure.services.delivery_outbox import notification_event
from workhub.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from workhub.application.interfaces.services import IBacklogProvider

logger = get_logger(__name__)


def _event_id(event: dict[str, Any]) -> str | None:
    data = event.get("data")
    return data.get("id") if isinstance(data, dict) else None


class DeliveryChannelRegistry:
    """Per-principal WebSocket connections.

    - Each principal has its own lock; sends to different principals never contend.
      The lock is dropped with the principal's last connection.
    - send() snapshots connections under the lock and writes outside it.
    - Sockets that fail on send are dropped.
    - On connect, the backlog is replayed to the new connection only.
    - A notification reaches a connection once even when it is both in the
      replayed backlog and sent live while the replay runs.
    """

    def __init__(self, backlog: IBacklogProvider | None = None) -> None:
        self.backlog = backlog
        self._connections: dict[str, set[WebSocket]] = {}
        self._websocket_to_principal: dict[WebSocket, str] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        # Ids delivered to a socket by one path (replay or live) that the other
        # path may still bring. Cleared as each duplicate is skipped.
        self._seen: dict[WebSocket, set[str]] = {}
        self._replaying: set[WebSocket] = set()

    def _lock_for(self, principal_id: str) -> asyncio.Lock:
        return self._locks.setdefault(principal_id, asyncio.Lock())

    async def connect(self, websocket: WebSocket, principal_id: str) -> int:
        """Accept and register a connection, then replay the backlog to it.

        Returns:
            Number of backlog notifications sent to the new connection.
        """
        await websocket.accept()
        async with self._lock_for(principal_id):
            self._connections.setdefault(principal_id, set()).add(websocket)
            self._websocket_to_principal[websocket] = principal_id
            self._seen[websocket] = set()
            if self.backlog is not None:
                self._replaying.add(websocket)
        logger.info("WebSocket connected for %s", principal_id)
        try:
            return await self._replay_backlog(websocket, principal_id)
        finally:
            self._replaying.discard(websocket)

    async def _replay_backlog(self, websocket: WebSocket, principal_id: str) -> int:
        if self.backlog is None:
            return 0
        try:
            backlog = await self.backlog.fetch_backlog(principal_id)
        except Exception:
            logger.exception("Backlog fetch failed for %s", principal_id)
            return 0
        sent = 0
        for notification in backlog:
            seen = self._seen.get(websocket)
            if seen is None:
                break
            if notification.id in seen:
                seen.discard(notification.id)
                continue
            seen.add(notification.id)
            if not await self._send_one(websocket, notification_event(notification)):
                await self.disconnect(websocket)
                break
            sent += 1
        if sent:
            logger.debug("Replayed %d backlog notification(s) to %s", sent, principal_id)
        return sent

    async def disconnect(self, websocket: WebSocket) -> None:
        """Remove a connection; the principal is offline once none remain."""
        principal_id = self._websocket_to_principal.get(websocket)
        if principal_id is None:
            return
        async with self._lock_for(principal_id):
            self._websocket_to_principal.pop(websocket, None)
            self._seen.pop(websocket, None)
            self._replaying.discard(websocket)
            conns = self._connections.get(principal_id)
            if conns is not None:
                conns.discard(websocket)
                if not conns:
                    del self._connections[principal_id]
            if principal_id not in self._connections:
                self._locks.pop(principal_id, None)
        logger.info("WebSocket disconnected for %s", principal_id)

    async def _send_one(self, websocket: WebSocket, event: dict[str, Any]) -> bool:
        try:
            await websocket.send_json(event)
        except Exception:
            logger.debug("Dropping dead WebSocket", exc_info=True)
            return False
        return True

    def _already_delivered(self, websocket: WebSocket, event_id: str | None) -> bool:
        seen = self._seen.get(websocket)
        if event_id is None or seen is None:
            return False
        if event_id in seen:
            seen.discard(event_id)
            return True
        if websocket in self._replaying:
            seen.add(event_id)
        return False

    async def send(self, principal_id: str, event: dict[str, Any]) -> int:
        """Send event to every connection of principal. Returns connections reached."""
        if principal_id not in self._connections:
            return 0
        async with self._lock_for(principal_id):
            snapshot = list(self._connections.get(principal_id, ()))
        if not snapshot:
            return 0
        event_id = _event_id(event)
        delivered = 0
        for websocket in snapshot:
            if self._already_delivered(websocket, event_id):
                delivered += 1
            elif await self._send_one(websocket, event):
                delivered += 1
            else:
                await self.disconnect(websocket)
        return delivered

    def is_online(self, principal_id: str) -> bool:
        return bool(self._connections.get(principal_id))

    def connection_count(self, principal_id: str | None = None) -> int:
        if principal_id is not None:
            return len(self._connections.get(principal_id, ()))
        return sum(len(c) for c in self._connections.values())
