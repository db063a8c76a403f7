"""Request timeout middleware: 504 when a request runs longer than timeout_seconds. Raw ASGI."""

import asyncio
import logging
from typing import Callable

from workhub.middleware._asgi import send_json_error

logger = logging.getLogger(__name__)


def TimeoutMiddleware(app: Callable, timeout_seconds: int) -> Callable:
    """Cancel the request after timeout_seconds. Only HTTP; WebSocket sessions are long-lived."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        started = False

        async def send_tracking(message: dict) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await asyncio.wait_for(app(scope, receive, send_tracking), timeout=float(timeout_seconds))
        except TimeoutError:
            logger.warning(
                "Request timed out after %s seconds: %s %s",
                timeout_seconds,
                scope.get("method", ""),
                scope.get("path", ""),
            )
            if started:
                return
            await send_json_error(
                send,
                504,
                "GATEWAY_TIMEOUT",
                f"Request timed out after {timeout_seconds} seconds",
                {"timeout_seconds": timeout_seconds},
            )

    return asgi_app
