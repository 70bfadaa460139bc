import os
import re
import time
import logging
from typing import Optional

from app.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


class InvalidUploadError(Exception):
    """Exception raised when an uploaded file is rejected."""
    pass


class UploadTooLargeError(InvalidUploadError):
    """Exception raised when an uploaded file exceeds the size limit."""
    pass


class StorageService:
    """
    Object storage for product images, backed by a local directory.

    Files are stored under a timestamp-prefixed key and exposed under
    ``PUBLIC_STORAGE_URL``.
    """

    def __init__(
        self,
        base_dir: str = None,
        public_url: str = None,
        max_size: int = None,
    ):
        self.base_dir = os.path.realpath(base_dir or settings.STORAGE_DIR)
        self.public_url = (public_url or settings.PUBLIC_STORAGE_URL).rstrip("/")
        self.max_size = max_size or settings.MAX_UPLOAD_SIZE

    @staticmethod
    def make_key(filename: str) -> str:
        """Millisecond timestamp plus the filename with whitespace runs replaced by '_'."""
        base = os.path.basename(filename or "").strip() or "upload"
        safe = re.sub(r"\s+", "_", base)
        return f"{int(time.time() * 1000)}_{safe}"

    def _path_for(self, key: str) -> str:
        """Resolve a key inside the storage directory, rejecting traversal."""
        path = os.path.realpath(os.path.join(self.base_dir, key))
        if os.path.dirname(path) != self.base_dir:
            raise InvalidUploadError(f"Invalid storage key: {key}")
        return path

    def store(self, filename: str, data: bytes, content_type: Optional[str] = None) -> str:
        """
        Store an image and return its public URL.

        Raises:
            InvalidUploadError: If the content is not an image or is empty
            UploadTooLargeError: If the content exceeds the size limit
        """
        if content_type is not None and not content_type.startswith("image/"):
            raise InvalidUploadError(f"Only image uploads are accepted, got {content_type}")
        if not data:
            raise InvalidUploadError("Uploaded file is empty")
        if len(data) > self.max_size:
            raise UploadTooLargeError(
                f"Uploaded file is {len(data)} bytes, limit is {self.max_size}"
            )

        key = self.make_key(filename)
        path = self._path_for(key)
        os.makedirs(self.base_dir, exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)

        logger.info(f"Stored image {key} ({len(data)} bytes)")
        return f"{self.public_url}/{key}"

    def key_from_url(self, url: str) -> Optional[str]:
        """Key of a URL this storage issued, or None for foreign URLs."""
        prefix = f"{self.public_url}/"
        if not url or not url.startswith(prefix):
            return None
        return url[len(prefix):]

    def delete(self, url: str) -> bool:
        """
        Delete a stored file by its public URL.

        Returns:
            True if a file was removed, False otherwise
        """
        key = self.key_from_url(url)
        if not key:
            return False
        try:
            path = self._path_for(key)
        except InvalidUploadError:
            return False
        if not os.path.exists(path):
            return False
        os.remove(path)
        logger.info(f"Deleted stored image {key}")
        return True


def get_storage() -> StorageService:
    """Dependency returning the configured storage service."""
    return StorageService()
