"""
Product image storage.

Writes image bytes to a Supabase Storage bucket under a generated key
and returns the public URL.
"""

import uuid
from typing import Optional
import structlog

from config import get_supabase_client, settings
from exceptions import StorageError

logger = structlog.get_logger(__name__)


class StorageService:
    """Uploads product images to the public images bucket."""

    def __init__(self, bucket: Optional[str] = None):
        self.db = get_supabase_client()
        self.bucket = bucket or settings.product_images_bucket

    def upload_image(
        self,
        content: bytes,
        content_type: Optional[str] = None,
        extension: Optional[str] = None
    ) -> str:
        """
        Store one image under a fresh unique key.

        Args:
            content: Raw image bytes
            content_type: MIME type to store (defaults to the accepted type)
            extension: File extension including the dot (defaults to the accepted one)

        Returns:
            Public URL of the stored object

        Raises:
            StorageError: If the upload fails
        """
        extension = extension or settings.image_allowed_extension
        content_type = content_type or settings.image_allowed_content_type
        storage_path = f"{uuid.uuid4()}{extension}"

        logger.debug(
            "uploading_image_to_storage",
            bucket=self.bucket,
            storage_path=storage_path,
            size_bytes=len(content)
        )

        try:
            bucket = self.db.storage.from_(self.bucket)
            bucket.upload(
                storage_path,
                content,
                file_options={"content-type": content_type}
            )
            public_url = bucket.get_public_url(storage_path)
        except Exception as e:
            logger.error(
                "image_upload_failed",
                storage_path=storage_path,
                error=str(e)
            )
            raise StorageError(storage_path, str(e))

        logger.info("image_uploaded_to_storage", storage_path=storage_path)
        return public_url


_storage_service: Optional[StorageService] = None


def get_storage_service() -> StorageService:
    """Get or create StorageService instance."""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service
