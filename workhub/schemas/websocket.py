"""WebSocket wire events."""

from typing import Any, Literal

from pydantic import BaseModel


class NotificationEvent(BaseModel):
    type: Literal["notification"] = "notification"
    data: dict[str, Any]


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    message: str


class PongEvent(BaseModel):
    type: Literal["pong"] = "pong"
