"""
File storage for uploaded images.

Files live on the local filesystem under ``STORAGE_ROOT/<bucket>/`` and are
served by the app at ``STORAGE_PUBLIC_URL/<bucket>/<path>``.
"""

import logging
import mimetypes
import uuid
from pathlib import Path
from typing import Dict, Optional

from fastapi import UploadFile

from sportsbnb.config import settings
from sportsbnb.core.exceptions import StorageError

logger = logging.getLogger(__name__)

VENUE_IMAGES = "venue-images"
AVATARS = "avatars"
BUCKETS = (VENUE_IMAGES, AVATARS)


class StorageService:
    """Service for storing uploads in public buckets"""

    def __init__(self, root: str = None, public_url: str = None):
        self._root = root
        self._public_url = public_url

    @property
    def root(self) -> Path:
        return Path(self._root or settings.STORAGE_ROOT)

    @property
    def public_url(self) -> str:
        return (self._public_url or settings.STORAGE_PUBLIC_URL).rstrip("/")

    def ensure_buckets(self) -> None:
        for bucket in BUCKETS:
            (self.root / bucket).mkdir(parents=True, exist_ok=True)

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_url}/{bucket}/{path}"

    @staticmethod
    def _extension(file: UploadFile) -> str:
        suffix = Path(file.filename or "").suffix.lower()
        if suffix:
            return suffix
        return mimetypes.guess_extension(file.content_type or "") or ""

    async def upload(self, bucket: str, owner: str, file: UploadFile) -> Dict[str, str]:
        """
        Store an uploaded image under ``<bucket>/<owner>/`` with a random
        name and return its bucket path and public URL
        """
        if bucket not in BUCKETS:
            raise StorageError(f"Unknown bucket: {bucket}")
        if file.content_type not in settings.STORAGE_ALLOWED_CONTENT_TYPES:
            raise StorageError(
                "Only image uploads are allowed",
                details={"content_type": file.content_type}
            )

        content = await file.read()
        if not content:
            raise StorageError("Uploaded file is empty")
        if len(content) > settings.STORAGE_MAX_UPLOAD_BYTES:
            raise StorageError(
                "File is too large",
                details={"max_bytes": settings.STORAGE_MAX_UPLOAD_BYTES}
            )

        path = f"{owner}/{uuid.uuid4().hex}{self._extension(file)}"
        target = self.root / bucket / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)

        logger.info(
            "Stored upload",
            extra={"bucket": bucket, "path": path, "size": len(content)}
        )
        return {"bucket": bucket, "path": path, "url": self.get_public_url(bucket, path)}

    def path_for_url(self, bucket: str, url: str) -> Optional[str]:
        """Bucket path of a URL this service handed out, None for anything else"""
        prefix = self.get_public_url(bucket, "")
        if not url or not url.startswith(prefix):
            return None
        return url[len(prefix):] or None

    def remove(self, bucket: str, path: str) -> bool:
        target = (self.root / bucket / path).resolve()
        bucket_root = (self.root / bucket).resolve()
        if bucket_root not in target.parents:
            raise StorageError("Invalid file path")
        if not target.exists():
            return False
        target.unlink()
        logger.info("Removed upload", extra={"bucket": bucket, "path": path})
        return True

    def discard_url(self, bucket: str, url: Optional[str]) -> bool:
        """Delete the file behind a superseded upload URL"""
        path = self.path_for_url(bucket, url)
        if path is None:
            return False
        return self.remove(bucket, path)


# Initialize global storage service
storage_service = StorageService()
