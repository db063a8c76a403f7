"""Correlation ID middleware.

Forwards X-Correlation-ID from the client, else reuses the request ID. Raw ASGI.
"""

import uuid
from typing import Callable

from workhub.middleware._asgi import get_header, with_response_header
from workhub.middleware.request_id import sanitize_request_id


def CorrelationIDMiddleware(
    app: Callable, header_name: str = "X-Correlation-ID"
) -> Callable:
    """Add or forward X-Correlation-ID. Must run inside RequestIDMiddleware to reuse its id."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        raw = get_header(scope, header_name)
        if raw:
            correlation_id = sanitize_request_id(raw)
        else:
            correlation_id = scope.get("state", {}).get("request_id") or str(uuid.uuid4())
        scope.setdefault("state", {})["correlation_id"] = correlation_id
        await app(scope, receive, with_response_header(send, header_name, correlation_id))

    return asgi_app
