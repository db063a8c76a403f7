"""Shared schema helpers: aware datetimes and pagination metadata."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


def ensure_aware_datetime(v: Any) -> Any:
    """Accept datetime or ISO string; treat naive datetimes as UTC (common from frontends)."""
    if v is None:
        return None
    if isinstance(v, str):
        v = datetime.fromisoformat(v.replace("Z", "+00:00"))
    if isinstance(v, datetime) and v.tzinfo is None:
        v = v.replace(tzinfo=UTC)
    return v


class PageMeta(BaseModel):
    """Pagination metadata for list responses."""

    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PageMeta":
        return cls(page=page, limit=limit, total=total, total_pages=-(-total // limit))
