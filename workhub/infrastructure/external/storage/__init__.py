"""File storage backends."""

from workhub.infrastructure.external.storage.factory import StorageFactory
from workhub.infrastructure.external.storage.local_storage import LocalStorageService
from workhub.infrastructure.external.storage.protocol import StorageProtocol

__all__ = ["LocalStorageService", "StorageFactory", "StorageProtocol"]
