"""Local filesystem backend for task attachments: contained paths, atomic writes."""

from __future__ import annotations

import hashlib
import os
import tempfile
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

from workhub.infrastructure.exceptions import (
    StorageDeleteError,
    StoragePermissionError,
    StorageUploadError,
)
from workhub.shared.utils.datetime import utc_now


class LocalStorageService:
    """Local filesystem storage with atomic writes and path traversal protection.

    Paths are validated against storage_root. Writes use temp file + rename.
    """

    def __init__(self, storage_root: str, base_url: str | None = None) -> None:
        """Initialize local storage.

        Args:
            storage_root: Base directory for all files.
            base_url: Public prefix for file URLs (e.g. https://files.example.com).
        """
        self.storage_root = Path(storage_root).resolve()
        self.base_url = base_url.rstrip("/") if base_url else None
        self.storage_root.mkdir(parents=True, exist_ok=True, mode=0o750)

    def _get_full_path(self, storage_ref: str) -> Path:
        """Resolve and validate path under storage_root. Raises StoragePermissionError if traversal."""
        full_path = (self.storage_root / storage_ref).resolve()
        try:
            full_path.relative_to(self.storage_root)
        except ValueError as e:
            raise StoragePermissionError(storage_ref, "path_validation") from e
        return full_path

    async def upload(
        self,
        data: bytes,
        storage_ref: str,
        content_type: str,
    ) -> dict[str, Any]:
        target_path = self._get_full_path(storage_ref)
        try:
            target_path.parent.mkdir(parents=True, exist_ok=True, mode=0o750)
            temp_fd, temp_path = tempfile.mkstemp(
                dir=target_path.parent,
                prefix=".tmp_",
                suffix=target_path.suffix,
            )
            os.close(temp_fd)
            try:
                async with aiofiles.open(temp_path, "wb") as f:
                    await f.write(data)
                os.chmod(temp_path, 0o640)
                os.replace(temp_path, target_path)
            finally:
                if Path(temp_path).exists():
                    os.unlink(temp_path)
        except OSError as e:
            raise StorageUploadError(storage_ref, str(e)) from e
        return {
            "storage_ref": storage_ref,
            "checksum": hashlib.sha256(data).hexdigest(),
            "size": len(data),
            "content_type": content_type,
            "uploaded_at": utc_now().isoformat(),
        }

    async def delete(self, storage_ref: str) -> bool:
        """Delete file. Returns True if deleted."""
        file_path = self._get_full_path(storage_ref)
        try:
            if not file_path.exists():
                return False
            await aiofiles.os.remove(file_path)
        except OSError as e:
            raise StorageDeleteError(storage_ref, str(e)) from e
        return True

    def url_for(self, storage_ref: str) -> str:
        path = f"/files/{storage_ref}"
        return f"{self.base_url}{path}" if self.base_url else path
