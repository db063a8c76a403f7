"""Storage backend protocol. Implementation: LocalStorageService."""

from typing import Any, Protocol


class StorageProtocol(Protocol):
    """What attachment storage needs from a backend."""

    async def upload(
        self,
        data: bytes,
        storage_ref: str,
        content_type: str,
    ) -> dict[str, Any]:
        """Write data under storage_ref. Returns storage_ref, checksum, size, uploaded_at."""
        ...

    def url_for(self, storage_ref: str) -> str:
        """Public URL (or path) clients use to fetch the file."""
        ...

    async def delete(self, storage_ref: str) -> bool:
        """Remove the file. Returns False when nothing was stored under storage_ref."""
        ...
