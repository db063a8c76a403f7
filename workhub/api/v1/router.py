"""API v1 router aggregation."""

from fastapi import APIRouter

from workhub.api.v1.endpoints import (
    health,
    notifications,
    tasks,
    websocket as ws_endpoint,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(
    notifications.router, prefix="/notifications", tags=["notifications"]
)
api_router.include_router(ws_endpoint.router, prefix="/ws", tags=["websocket"])
