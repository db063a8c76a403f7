"""Domain value objects for WorkHub.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from workhub.shared.utils.datetime import ensure_utc


@dataclass(frozen=True)
class Principal:
    """Resolved actor of an operation.

    Built once at the request boundary from the authenticated user and passed
    down unchanged, so the display name stored on notifications is the one
    seen when the action happened.
    """

    id: str
    display_name: str
    system_role: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Principal id must be a non-empty string")

    def has_system_role(self, roles: frozenset[str] | set[str]) -> bool:
        """Return True if this principal holds one of the given system roles."""
        return self.system_role is not None and self.system_role in roles


@dataclass(frozen=True)
class Attachment:
    """File attached to a task. Stored as an ordered JSON list on the task row."""

    filename: str
    original_name: str
    url: str
    size: int
    mimetype: str
    uploaded_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.filename:
            raise ValueError("Attachment filename must be a non-empty string")
        if self.size < 0:
            raise ValueError("Attachment size must be >= 0")

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the JSON column (datetimes as ISO strings)."""
        data = asdict(self)
        data["uploaded_at"] = self.uploaded_at.isoformat() if self.uploaded_at else None
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Attachment":
        """Build from a stored or client-supplied mapping."""
        uploaded_at = data.get("uploaded_at")
        if isinstance(uploaded_at, str):
            uploaded_at = datetime.fromisoformat(uploaded_at)
        return cls(
            filename=data["filename"],
            original_name=data.get("original_name") or data["filename"],
            url=data["url"],
            size=int(data.get("size") or 0),
            mimetype=data.get("mimetype") or "application/octet-stream",
            uploaded_at=ensure_utc(uploaded_at),
        )
