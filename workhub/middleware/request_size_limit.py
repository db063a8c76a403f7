"""Request body size limit middleware (attachment uploads). Raw ASGI.

Checks Content-Length up front and counts streamed bytes for chunked bodies.
"""

from typing import Callable

from workhub.middleware._asgi import get_header, send_json_error


class _BodyTooLarge(Exception):
    pass


def RequestSizeLimitMiddleware(app: Callable, max_bytes: int) -> Callable:
    """Reject requests whose body exceeds max_bytes with 413."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        declared = get_header(scope, "content-length")
        if declared and declared.isdigit() and int(declared) > max_bytes:
            await send_json_error(
                send,
                413,
                "PAYLOAD_TOO_LARGE",
                f"Request body must be at most {max_bytes} bytes",
                {"max_bytes": max_bytes, "content_length": int(declared)},
            )
            return

        received = 0
        started = False

        async def counting_receive() -> dict:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > max_bytes:
                    raise _BodyTooLarge
            return message

        async def send_tracking(message: dict) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await app(scope, counting_receive, send_tracking)
        except _BodyTooLarge:
            if started:
                raise
            await send_json_error(
                send,
                413,
                "PAYLOAD_TOO_LARGE",
                f"Request body must be at most {max_bytes} bytes",
                {"max_bytes": max_bytes},
            )

    return asgi_app
