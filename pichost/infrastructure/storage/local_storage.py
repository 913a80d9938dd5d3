import logging
import os
import uuid

from ...application.ports.storage_repo import StorageRepository

logger = logging.getLogger(__name__)


class LocalStorageRepository(StorageRepository):
    """Stores content on local disk under random, unguessable keys."""

    def __init__(self, upload_dir: str, url_prefix: str = "/uploads") -> None:
        self.upload_dir = upload_dir
        self.url_prefix = url_prefix.rstrip("/")

    def _path(self, key: str) -> str:
        root = os.path.abspath(self.upload_dir)
        path = os.path.abspath(os.path.join(root, key))
        if os.path.commonpath([root, path]) != root:
            raise ValueError(f"Storage key escapes upload directory: {key!r}")
        return path

    def save_bytes(self, subdir: str, extension: str, data: bytes) -> str:
        key = f"{uuid.uuid4().hex}{extension}"
        if subdir:
            key = f"{subdir}/{key}"
        path = self._path(key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)
        return key

    def delete(self, key: str) -> bool:
        try:
            os.remove(self._path(key))
            return True
        except FileNotFoundError:
            return False

    def url_for(self, key: str) -> str:
        return f"{self.url_prefix}/{key}"
