"""
Filesystem storage backend.

Objects are written below ``base_path``; their URL is ``base_url`` joined with
the object key, matching the ``/files`` static mount of the API server.
"""

import logging
from pathlib import Path

from . import StorageProvider

logger = logging.getLogger(__name__)


class LocalStorage(StorageProvider):
    def __init__(
        self, base_path: str | Path, base_url: str = "http://localhost:8000/files"
    ) -> None:
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.base_url = base_url.rstrip("/")

    def _path_for(self, object_key: str) -> Path:
        root = self.base_path.resolve()
        path = (root / object_key).resolve()
        if not path.is_relative_to(root):
            raise ValueError(f"Object key escapes storage root: {object_key}")
        return path

    def get_file_url(self, object_key: str, expires_in: int = 3600) -> str:
        return f"{self.base_url}/{object_key.lstrip('/')}"

    def upload_bytes(
        self, data: bytes, object_key: str, content_type: str | None = None
    ) -> str:
        path = self._path_for(object_key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.debug(f"Stored {len(data)} bytes at {path}")
        return self.get_file_url(object_key)
