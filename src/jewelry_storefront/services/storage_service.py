import logging
import os
import secrets
import string
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from werkzeug.datastructures import FileStorage
from werkzeug.utils import safe_join, secure_filename

from jewelry_storefront.core.config import StorageConfig
from jewelry_storefront.core.exceptions import (
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class StorageBuckets:
    PRODUCT_IMAGES = "product-images"
    CATEGORY_IMAGES = "category-images"
    USER_UPLOADS = "user-uploads"

    ALL = (PRODUCT_IMAGES, CATEGORY_IMAGES, USER_UPLOADS)


_RANDOM_ALPHABET = string.ascii_lowercase + string.digits


@dataclass
class UploadResult:
    bucket: str
    path: str
    public_url: str


class StorageService:
    """
    Bucketed image storage.

    Objects live under ``<root>/<bucket>/<year>/<month>/<file>`` and are
    served from ``<public_url>/<bucket>/<path>``. Uploads overwrite an
    existing object at the same path.
    """

    def __init__(self, config: StorageConfig):
        self.root = config.root
        self.public_base = config.public_url
        self.max_upload_bytes = config.max_upload_bytes

    @staticmethod
    def generate_path(original_name: str, prefix: str = "img-", now: Optional[datetime] = None) -> str:
        """``{year}/{month}/{prefix}{timestamp_ms}-{random}.{ext}``"""
        now = now or datetime.now()
        timestamp = int(time.time() * 1000)
        random_part = "".join(secrets.choice(_RANDOM_ALPHABET) for _ in range(13))
        extension = original_name.rsplit(".", 1)[-1].lower() if "." in original_name else "bin"
        extension = secure_filename(extension) or "bin"
        return f"{now.year}/{now.month}/{prefix}{timestamp}-{random_part}.{extension}"

    def upload(self, bucket: str, file: FileStorage, path: Optional[str] = None) -> UploadResult:
        self._check_bucket(bucket)

        if not file or not file.filename:
            raise ValidationError("Please select an image file")
        if not (file.mimetype or "").startswith("image/"):
            raise ValidationError("Please select an image file")

        data = file.read()
        if len(data) > self.max_upload_bytes:
            limit_mb = round(self.max_upload_bytes / 1024 / 1024)
            raise ValidationError(f"File size must be less than {limit_mb}MB")

        path = path or self.generate_path(file.filename)
        target = self._local_path(bucket, path)
        try:
            os.makedirs(os.path.dirname(target), exist_ok=True)
            with open(target, "wb") as fh:
                fh.write(data)
        except OSError as e:
            logger.error(f"Upload to {bucket}/{path} failed: {e}")
            raise ExternalServiceError("storage", "Image upload failed")

        logger.info(f"Uploaded {len(data)} bytes to {bucket}/{path}")
        return UploadResult(bucket=bucket, path=path, public_url=self.public_url(bucket, path))

    def delete(self, bucket: str, path: str) -> None:
        target = self._local_path(bucket, path)
        if not os.path.isfile(target):
            raise NotFoundError("Stored file", f"{bucket}/{path}")
        try:
            os.remove(target)
        except OSError as e:
            logger.error(f"Delete of {bucket}/{path} failed: {e}")
            raise ExternalServiceError("storage", "Image delete failed")
        logger.info(f"Deleted {bucket}/{path}")

    def discard(self, bucket: str, url: Optional[str]) -> bool:
        """
        Remove the object behind a URL this service issued.

        Used to clean up after a catalog write; a missing object is logged
        and skipped. External URLs are left alone.
        """
        path = self.path_from_public_url(bucket, url)
        if path is None:
            return False
        try:
            self.delete(bucket, path)
        except (NotFoundError, ExternalServiceError, ValidationError) as e:
            logger.warning(f"Could not remove {bucket}/{path}: {e.message}")
            return False
        return True

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base}/{bucket}/{path}"

    def path_from_public_url(self, bucket: str, url: Optional[str]) -> Optional[str]:
        """Object path for a URL this service issued; None for external URLs"""
        prefix = f"{self.public_base}/{bucket}/"
        if url and url.startswith(prefix):
            return url[len(prefix):]
        return None

    def bucket_directory(self, bucket: str) -> str:
        self._check_bucket(bucket)
        return os.path.join(self.root, bucket)

    def _local_path(self, bucket: str, path: str) -> str:
        self._check_bucket(bucket)
        target = safe_join(os.path.join(self.root, bucket), path)
        if target is None:
            raise ValidationError("Invalid storage path")
        return target

    @staticmethod
    def _check_bucket(bucket: str) -> None:
        if bucket not in StorageBuckets.ALL:
            raise NotFoundError("Storage bucket", bucket)
