"""
Upload helper for attachments and avatars.

Files go through Django's default storage; the public URL is returned so the
caller can store it on the row (attachment_url, avatar_url, image_url).
"""
import logging
import os
import time
import uuid

from django.conf import settings
from django.core.files.storage import default_storage

from .exceptions import UploadError

logger = logging.getLogger(__name__)

IMAGE_MIME_TYPES = frozenset({
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
    "image/bmp",
    "image/tiff",
})

ATTACHMENT_MIME_TYPES = IMAGE_MIME_TYPES | {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "text/plain",
    "text/csv",
    "application/zip",
    "application/x-rar-compressed",
}


def build_storage_key(folder: str, filename: str) -> str:
    base = os.path.basename(filename or "upload")
    return f"{folder}/{uuid.uuid4().hex}_{base}"


def validate_upload(upload, allowed_types=ATTACHMENT_MIME_TYPES):
    content_type = getattr(upload, "content_type", None)
    if content_type not in allowed_types:
        raise UploadError("File type not allowed.")
    max_bytes = getattr(settings, "UPLOAD_MAX_BYTES", 5 * 1024 * 1024)
    if upload.size > max_bytes:
        raise UploadError("File size must be less than 5MB.")


def upload_with_retry(upload, folder: str, allowed_types=ATTACHMENT_MIME_TYPES) -> str:
    """
    Validate and store an uploaded file, returning its public URL.

    Storage failures are retried a fixed number of times with a fixed delay.
    Validation failures are never retried.
    """
    validate_upload(upload, allowed_types)

    attempts = getattr(settings, "UPLOAD_MAX_ATTEMPTS", 3)
    delay = getattr(settings, "UPLOAD_RETRY_DELAY_SECONDS", 1.0)
    key = build_storage_key(folder, upload.name)

    for attempt in range(1, attempts + 1):
        try:
            if hasattr(upload, "seek"):
                upload.seek(0)
            saved_name = default_storage.save(key, upload)
            return default_storage.url(saved_name)
        except OSError as exc:
            logger.warning("Upload attempt %s/%s for %s failed: %s", attempt, attempts, key, exc)
            if attempt == attempts:
                logger.exception("Upload of %s failed after %s attempts", key, attempts)
                raise UploadError(f"Upload failed: {exc}") from exc
            time.sleep(delay)
    raise UploadError()
