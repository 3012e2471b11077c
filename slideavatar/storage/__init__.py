"""
Storage backends for rendered slide images.

The video service fetches slide images itself, so an upload is only useful
once it has a URL the service can reach: every backend returns an absolute URL
from :meth:`StorageProvider.upload_bytes`.
"""

from abc import ABC, abstractmethod
from typing import Any


class StorageProvider(ABC):
    @abstractmethod
    def upload_bytes(
        self, data: bytes, object_key: str, content_type: str | None = None
    ) -> str:
        """Store ``data`` under ``object_key`` and return its public URL."""

    @abstractmethod
    def get_file_url(self, object_key: str, expires_in: int = 3600) -> str:
        """URL for an object; ``expires_in`` only applies to signed URLs."""


class StorageConfig:
    """Backend name plus the keyword arguments its constructor takes."""

    def __init__(self, provider: str = "local", **options: Any) -> None:
        self.provider = provider
        self.options = options


def create_storage_provider(storage_config: StorageConfig) -> StorageProvider:
    """Instantiate the backend named by ``storage_config.provider``.

    Backends are imported lazily so boto3 is only needed for ``s3``.
    """
    provider = storage_config.provider
    if provider == "local":
        from .local_storage import LocalStorage

        return LocalStorage(**storage_config.options)
    if provider == "s3":
        from .s3_storage import S3Storage

        return S3Storage(**storage_config.options)
    raise ValueError(f"Unsupported storage provider: {provider}")
