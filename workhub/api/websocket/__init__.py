"""WebSocket delivery: per-principal connection registry."""

from workhub.api.websocket.manager import DeliveryChannelRegistry

__all__ = ["DeliveryChannelRegistry"]
