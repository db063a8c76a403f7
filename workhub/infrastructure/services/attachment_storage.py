"""Task attachment storage: upload validation and persistence to the storage backend.

Implements IAttachmentStorage.
"""

from __future__ import annotations

from collections.abc import Collection
from pathlib import PurePath
from typing import TYPE_CHECKING

from workhub.domain.exceptions import ValidationException
from workhub.domain.value_objects import Attachment
from workhub.infrastructure.exceptions import StorageException
from workhub.shared.telemetry.logging import get_logger
from workhub.shared.utils.datetime import utc_now
from workhub.shared.utils.generators import generate_attachment_key

if TYPE_CHECKING:
    from workhub.application.dtos.task import AttachmentUpload
    from workhub.core.config import Settings
    from workhub.infrastructure.external.storage.protocol import StorageProtocol

logger = get_logger(__name__)

DOCUMENT_MIME_TYPES: frozenset[str] = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    }
)


class AttachmentStorageService:
    """Validates task uploads (count, size, extension and MIME type) and stores them."""

    def __init__(
        self,
        storage: StorageProtocol,
        *,
        max_files: int = 10,
        max_size: int = 50 * 1024 * 1024,
        allowed_extensions: Collection[str] = frozenset(
            {"pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx"}
        ),
        allowed_mime_types: Collection[str] = DOCUMENT_MIME_TYPES,
    ) -> None:
        self.storage = storage
        self.max_files = max_files
        self.max_size = max_size
        self.allowed_extensions = frozenset(e.lower() for e in allowed_extensions)
        self.allowed_mime_types = frozenset(allowed_mime_types)

    @classmethod
    def from_settings(
        cls, storage: StorageProtocol, settings: Settings
    ) -> AttachmentStorageService:
        return cls(
            storage,
            max_files=settings.attachment_max_files,
            max_size=settings.attachment_max_size,
            allowed_extensions=settings.allowed_attachment_extensions,
        )

    def _extension(self, name: str) -> str:
        return PurePath(name).suffix.lower().lstrip(".")

    def validate(self, uploads: list[AttachmentUpload]) -> None:
        """Reject the whole batch when any file breaks a limit; nothing is stored."""
        if len(uploads) > self.max_files:
            raise ValidationException(
                f"Too many files: at most {self.max_files} per request",
                field="attachments",
            )
        for upload in uploads:
            if not upload.original_name:
                raise ValidationException("Uploaded file has no name", field="attachments")
            if upload.size > self.max_size:
                raise ValidationException(
                    f"File {upload.original_name} exceeds the {self.max_size} byte limit",
                    field="attachments",
                )
            if (
                self._extension(upload.original_name) not in self.allowed_extensions
                or upload.content_type not in self.allowed_mime_types
            ):
                allowed = ", ".join(sorted(e.upper() for e in self.allowed_extensions))
                raise ValidationException(
                    f"Invalid file type for {upload.original_name}. Only {allowed} are allowed",
                    field="attachments",
                )

    async def store(self, upload: AttachmentUpload) -> Attachment:
        key = generate_attachment_key(upload.original_name)
        result = await self.storage.upload(upload.data, key, upload.content_type)
        logger.info("Stored attachment %s (%d bytes)", key, result["size"])
        return Attachment(
            filename=key,
            original_name=upload.original_name,
            url=self.storage.url_for(key),
            size=int(result["size"]),
            mimetype=upload.content_type,
            uploaded_at=utc_now(),
        )

    async def discard(self, attachments: list[Attachment]) -> None:
        """Best-effort removal; a file that cannot be deleted is logged and left."""
        for attachment in attachments:
            try:
                await self.storage.delete(attachment.filename)
            except StorageException:
                logger.warning(
                    "Could not remove orphaned attachment %s", attachment.filename, exc_info=True
                )
            else:
                logger.info("Removed orphaned attachment %s", attachment.filename)
