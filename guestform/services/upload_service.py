"""
Storage for files attached to a guest form.

Files live under settings.upload_dir, one directory per bucket, and are
served back by the app under /uploads.
"""
import asyncio
import logging
import re
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

from guestform.core.config import settings

logger = logging.getLogger(__name__)

PAYMENT_RECEIPTS = "payment-receipts"
VALID_IDS = "valid-ids"
PET_VACCINATIONS = "pet-vaccinations"
PET_IMAGES = "pet-images"

BUCKETS = (PAYMENT_RECEIPTS, VALID_IDS, PET_VACCINATIONS, PET_IMAGES)

# Column that holds each bucket's URL on a booking
BUCKET_URL_FIELDS = {
    PAYMENT_RECEIPTS: "payment_receipt_url",
    VALID_IDS: "valid_id_url",
    PET_VACCINATIONS: "pet_vaccination_url",
    PET_IMAGES: "pet_image_url",
}

TEST_FILE_PREFIX = "TEST_"
DEV_MODE_PLACEHOLDER = "dev-mode-skipped"


def sanitize_file_name(file_name: str) -> str:
    """Replace quotes, URL-unsafe characters and whitespace with underscores"""
    if not file_name:
        return file_name
    file_name = unquote(file_name)
    sanitized = re.sub(r"[‘’'`\"]", "_", file_name)
    sanitized = re.sub(r"[%#?\\/]", "_", sanitized)
    sanitized = re.sub(r"\s+", "_", sanitized)
    return sanitized or file_name


def file_name_from_url(url: Optional[str]) -> Optional[str]:
    if not url or url == DEV_MODE_PLACEHOLDER:
        return None
    try:
        path = urlparse(url).path
    except ValueError:
        return None
    name = path.rsplit("/", 1)[-1]
    return unquote(name) or None


class UploadService:
    def __init__(self, root: Optional[str] = None, base_url: Optional[str] = None):
        self.root = Path(root or settings.upload_dir)
        self.base_url = (base_url or settings.public_base_url).rstrip("/")

    def _path(self, bucket: str, file_name: str) -> Path:
        return self.root / bucket / file_name

    def public_url(self, bucket: str, file_name: str) -> str:
        return f"{self.base_url}/uploads/{bucket}/{file_name}"

    async def save(self, bucket: str, file_name: str, content: bytes) -> str:
        """
        Store a file and return its public URL.
        An existing file with the same name is reused, so re-submitting a
        form with the same attachment does not duplicate it.
        """
        if bucket not in BUCKETS:
            raise ValueError(f"Unknown upload bucket: {bucket}")

        key = sanitize_file_name(file_name)
        path = self._path(bucket, key)

        if path.exists():
            logger.info(f"File {bucket}/{key} already stored, reusing it")
            return self.public_url(bucket, key)

        def _write():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)

        await asyncio.to_thread(_write)
        logger.info(f"Stored upload {bucket}/{key} ({len(content)} bytes)")
        return self.public_url(bucket, key)

    async def delete_by_url(self, bucket: str, url: Optional[str]) -> dict:
        name = file_name_from_url(url)
        if not name:
            return {"success": True, "deleted": 0, "skipped": True}

        path = self._path(bucket, name)
        try:
            if not path.exists():
                return {"success": True, "deleted": 0, "message": "File not found"}
            await asyncio.to_thread(path.unlink)
            logger.info(f"Deleted upload {bucket}/{name}")
            return {"success": True, "deleted": 1}
        except OSError as e:
            logger.error(f"Failed to delete {bucket}/{name}: {e}")
            return {"success": False, "error": str(e), "deleted": 0}

    async def delete_booking_files(self, booking) -> dict:
        """Remove every file attached to a booking, reported per bucket"""
        results = {}
        for bucket, field in BUCKET_URL_FIELDS.items():
            results[bucket] = await self.delete_by_url(bucket, getattr(booking, field, None))
        return results

    async def delete_test_files(self) -> dict:
        """Remove every stored file whose name starts with TEST_"""
        results = {}
        for bucket in BUCKETS:
            directory = self.root / bucket
            if not directory.is_dir():
                results[bucket] = {"success": True, "deleted": 0, "total": 0}
                continue

            test_files = [p for p in directory.iterdir() if p.name.startswith(TEST_FILE_PREFIX)]
            deleted = 0
            for path in test_files:
                try:
                    await asyncio.to_thread(path.unlink)
                    deleted += 1
                except OSError as e:
                    logger.error(f"Failed to delete test file {path}: {e}")
            logger.info(f"Deleted {deleted}/{len(test_files)} test files from {bucket}")
            results[bucket] = {"success": True, "deleted": deleted, "total": len(test_files)}
        return results


upload_service = UploadService()
