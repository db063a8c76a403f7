"""Per-request delivery outbox (composition root).

Declare get_delivery_outbox before the transactional session in a builder's
parameters: FastAPI closes yield dependencies in reverse order, so the
session commits first and the outbox releases afterwards. When the request
fails, the exception reaches this generator and the queued deliveries are
dropped.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Request

from workhub.infrastructure.services import DeliveryOutbox


async def get_delivery_outbox(request: Request) -> AsyncIterator[DeliveryOutbox]:
    outbox = DeliveryOutbox(getattr(request.app.state, "delivery_dispatcher", None))
    try:
        yield outbox
    except Exception:
        outbox.discard()
        raise
    outbox.release()
